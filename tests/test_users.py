"""Admin-managed staff accounts."""

from services import config


class TestUsers:

    async def test_admin_only(self, client, auth):
        r = await client.get("/users", headers=auth("staff"))
        assert r.status_code == 403
        r = await client.get("/users", headers=auth("manager"))
        assert r.status_code == 206
        assert r.headers["X-Total-Count"] == "5"

    async def test_me(self, client, auth):
        r = await client.get("/users/me", headers=auth("finance"))
        assert r.json()["email"] == config.FINANCE_EMAIL
        assert r.json()["role"] == "finance"

    async def test_create_defaults_role(self, client, auth):
        r = await client.post("/users", headers=auth("manager"),
                              json={"email": "New.Hire@axisogreen.in", "password": "s3cret"})
        assert r.status_code == 201
        assert r.json()["email"] == "new.hire@axisogreen.in"
        assert r.json()["role"] == "user"

    async def test_duplicate_email(self, client, auth):
        r = await client.post("/users", headers=auth("manager"),
                              json={"email": config.OPS_EMAIL, "password": "x"})
        assert r.status_code == 409

    async def test_cannot_demote_self(self, client, auth, users):
        r = await client.put(f"/users/{users['manager'].id}", headers=auth("manager"), json={"role": "user"})
        assert r.status_code == 400

    async def test_disable_other(self, client, auth, users):
        r = await client.put(f"/users/{users['staff'].id}", headers=auth("manager"), json={"disabled": True})
        assert r.status_code == 200
        assert r.json()["disabled"] is True
        r = await client.get("/session", headers=auth("staff"))
        assert r.status_code == 400

    async def test_filter_by_role(self, client, auth):
        r = await client.get('/users?filter={"role":"admin"}', headers=auth("manager"))
        assert r.headers["X-Total-Count"] == "3"
