"""
Shared fixtures: an in-memory Tortoise database per test, the users the
authorization table cares about, and an HTTP client bound to the app.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from models import Role, User
from routers.auth import issue_tokens
from services import config
from services import projects as svc

ADMIN_EMAIL = config.SUPER_ADMIN_EMAIL
FINANCE_EMAIL = config.FINANCE_EMAIL
OPS_EMAIL = config.OPS_EMAIL
MANAGER_EMAIL = "manager@axisogreen.in"
STAFF_EMAIL = "staff@axisogreen.in"


@pytest.fixture
async def db():
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": ["models"]})
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


async def _user(email: str, role: Role) -> User:
    # password hashing is exercised by the login tests only
    return await User.create(email=email, hashed_password="!", role=role)


@pytest.fixture
async def users(db):
    """Super admin, a second admin, the ops mailbox (admin role), finance and a plain user."""
    return {
        "admin": await _user(ADMIN_EMAIL, Role.ADMIN),
        "manager": await _user(MANAGER_EMAIL, Role.ADMIN),
        "ops": await _user(OPS_EMAIL, Role.ADMIN),
        "finance": await _user(FINANCE_EMAIL, Role.FINANCE),
        "staff": await _user(STAFF_EMAIL, Role.USER),
    }


@pytest.fixture
def auth(users):
    def headers(who: str) -> dict:
        return {"Authorization": f"Bearer {issue_tokens(users[who])['access_token']}"}
    return headers


@pytest.fixture
async def client(db):
    from main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_project(db):
    async def create(**overrides):
        data = {
            "customer_name": "Ravi Kumar",
            "address": "Plot 12, Kondapur, Hyderabad",
            "proposal_amount": Decimal("100000"),
            "advance_payment": Decimal("20000"),
            "loan_amount": Decimal("0"),
            "kwh": 3.0,
            "start_date": date(2024, 3, 15),
        }
        data.update(overrides)
        return await svc.create_project(data)
    return create
