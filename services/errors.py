# services/errors.py
"""
Typed errors raised by the service layer.

Every error carries a machine-readable ``code`` and the HTTP status the API
answers with. Routers never translate these by hand: ``main.py`` registers a
single handler for ``AppError``.

    AppError
    +-- InvalidAmount      (422)
    +-- ExceedsBalance     (422)
    +-- RecordNotFound     (404)
    +-- Unauthorized       (403)
    +-- ConcurrentUpdate   (409)
    +-- StoreFailure       (503)
"""
from __future__ import annotations
from decimal import Decimal
from typing import Any, Optional


class AppError(Exception):
    code: str = "APP_ERROR"
    status_code: int = 400

    def __init__(self, message: str, **data: Any):
        super().__init__(message)
        self.message = message
        self.data = data

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class InvalidAmount(AppError):
    code = "INVALID_AMOUNT"
    status_code = 422

    def __init__(self, amount: Any, message: Optional[str] = None):
        super().__init__(message or f"Payment amount must be greater than 0 (got {amount})", amount=amount)
        self.amount = amount


class ExceedsBalance(AppError):
    code = "EXCEEDS_BALANCE"
    status_code = 422

    def __init__(self, amount: Decimal, balance: Decimal, message: Optional[str] = None):
        super().__init__(
            message or f"Amount {amount} exceeds the remaining balance {balance}",
            amount=amount,
            balance=balance,
        )
        self.amount = amount
        self.balance = balance


class RecordNotFound(AppError):
    code = "RECORD_NOT_FOUND"
    status_code = 404

    def __init__(self, collection: str, record_id: Any):
        super().__init__(f"{collection} {record_id} not found", collection=collection, record_id=record_id)
        self.collection = collection
        self.record_id = record_id


class Unauthorized(AppError):
    code = "UNAUTHORIZED"
    status_code = 403

    def __init__(self, action: str, email: Optional[str] = None):
        super().__init__(f"Not allowed to {action.replace('_', ' ')}", action=action, email=email)
        self.action = action
        self.email = email


class ConcurrentUpdate(AppError):
    code = "CONCURRENT_UPDATE"
    status_code = 409

    def __init__(self, record_id: Any):
        super().__init__(f"Record {record_id} was modified by another session, please retry", record_id=record_id)
        self.record_id = record_id


class StoreFailure(AppError):
    code = "STORE_FAILURE"
    status_code = 503

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        reason = f": {cause}" if cause is not None and str(cause) else ""
        super().__init__(f"Store call '{operation}' failed{reason}", operation=operation)
        self.operation = operation
        self.cause = cause
