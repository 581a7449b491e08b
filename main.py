# main.py: app wiring: database, seed admin, scheduled jobs, error handler, routers
from __future__ import annotations

import asyncio, logging, contextlib
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from passlib.context import CryptContext
from tortoise import Tortoise

from models import RevokedToken, Role, User

from routers import (
    auth, users,
    dashboard, projects, payments,
    reports, finance, service_tickets,
)

from scheduler import Scheduler
from services import config
from services.errors import AppError

logger = logging.getLogger("uvicorn")
pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")
UTC = timezone.utc

TORTOISE_MODULES = {"models": ["models"]}

# ----- helpers -----
async def _seed_admin():
    if not await User.exists():
        await User.create(
            email=config.SEED_ADMIN_EMAIL.lower(),
            hashed_password=pwd_ctx.hash(config.SEED_ADMIN_PASSWORD),
            role=Role.ADMIN,
        )
        logger.info(f"[seed] created admin {config.SEED_ADMIN_EMAIL}")

# ----- scheduled jobs -----
async def _job_purge_revoked_tokens():
    try:
        n = await RevokedToken.filter(expires_at__lt=datetime.now(tz=UTC)).delete()
        if n:
            logger.info(f"[auth] purged {n} expired revoked tokens")
    except Exception as e:
        logger.warning(f"[auth] purge failed: {e}")

# ----- lifespan -----
@asynccontextmanager
async def lifespan(app: FastAPI):
    # 1) DB init
    await Tortoise.init(db_url=config.DB_URL, modules=TORTOISE_MODULES)
    await Tortoise.generate_schemas()

    # 2) Seeds
    await _seed_admin()

    routes = [r for r in app.routes if isinstance(r, APIRoute)]
    logger.info(f"[startup] {len(routes)} routes, db {config.DB_URL}")

    # 3) Scheduler
    sched = Scheduler()
    app.state.scheduler = sched
    sched.every(60 * 60, _job_purge_revoked_tokens)

    sched_task = asyncio.create_task(sched.run_forever())
    try:
        yield
    finally:
        if not sched_task.done():
            sched_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sched_task
        await Tortoise.close_connections()

# ----- app & routers -----
app = FastAPI(lifespan=lifespan, title="Solar Projects Admin API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range", "X-Total-Count", "Content-Disposition"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    # failures stay local to the request; the client shows them as a notification
    log = logger.warning if exc.status_code >= 500 else logger.info
    log(f"[error] {request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


for module in (auth, users, dashboard, projects, payments, reports, finance, service_tickets):
    app.include_router(module.router)
