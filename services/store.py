# services/store.py: timeout + error translation around store calls
from __future__ import annotations
import asyncio
import functools
import logging
from typing import Awaitable, Callable, TypeVar

from tortoise.exceptions import DBConnectionError, OperationalError, TransactionManagementError

from services import config
from services.errors import StoreFailure

logger = logging.getLogger("uvicorn")
T = TypeVar("T")

_DRIVER_ERRORS = (DBConnectionError, OperationalError, TransactionManagementError)


async def guarded(operation: str, aw: Awaitable[T], timeout: float | None = None) -> T:
    """Await ``aw`` with a deadline; driver errors and timeouts become StoreFailure."""
    try:
        return await asyncio.wait_for(aw, timeout if timeout is not None else config.STORE_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as e:
        logger.warning(f"[store] {operation} timed out")
        raise StoreFailure(operation, e) from e
    except _DRIVER_ERRORS as e:
        logger.warning(f"[store] {operation} failed: {e}")
        raise StoreFailure(operation, e) from e


def store_call(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    @functools.wraps(fn)
    async def wrapper(*args, **kwargs) -> T:
        return await guarded(fn.__name__, fn(*args, **kwargs))
    return wrapper
