# api_utils.py: React-Admin list conventions shared by every list route
import json
from typing import Any, Callable, Iterable, Optional
from enum import Enum
from fastapi import Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from tortoise.queryset import QuerySet

FilterFn = Callable[[QuerySet, Any], QuerySet]

TRUTHY = {"1", "true", "t", "yes", "y"}


# ---------- query-string parsing ----------
def _json(raw: Optional[str], fallback: Any) -> Any:
    try:
        return json.loads(raw) if raw else fallback
    except (TypeError, ValueError):
        return fallback


def parse_range(range_param: Optional[str]) -> tuple[int, int]:
    """'[10,19]' -> (skip=10, limit=10); garbage falls back to the first page."""
    try:
        start, end = (int(v) for v in _json(range_param, [0, 9]))
    except (TypeError, ValueError):
        start, end = 0, 9
    skip = max(start, 0)
    return skip, max(end - skip + 1, 1)


def parse_sort(sort_param: Optional[str], allowed_fields: Iterable[str], default: str = "id") -> str:
    """'["name","DESC"]' -> '-name'; unknown fields sort by ``default``."""
    try:
        field, direction = _json(sort_param, None)
    except (TypeError, ValueError):
        return default
    if field not in set(allowed_fields):
        return default
    return f"-{field}" if str(direction).upper() == "DESC" else field


def parse_filter(filter_param: Optional[str]) -> dict:
    value = _json(filter_param, {})
    return value if isinstance(value, dict) else {}


# ---------- filter builders ----------
def contains(field: str) -> FilterFn:
    return lambda q, v: q.filter(**{f"{field}__icontains": str(v)})


def one_of(field: str, enum_cls: type[Enum]) -> FilterFn:
    """Exact enum match; a value outside the enum matches nothing."""
    def apply(q: QuerySet, v: Any) -> QuerySet:
        try:
            return q.filter(**{field: enum_cls(str(v))})
        except ValueError:
            return q.filter(**{f"{field}__in": []})
    return apply


def flag(field: str) -> FilterFn:
    def apply(q: QuerySet, v: Any) -> QuerySet:
        on = v if isinstance(v, bool) else str(v).strip().lower() in TRUTHY
        return q.filter(**{field: on})
    return apply


def apply_filter_map(qs: QuerySet, filters: dict, fmap: dict[str, FilterFn]) -> QuerySet:
    for key, fn in fmap.items():
        if filters.get(key) not in (None, ""):
            qs = fn(qs, filters[key])
    return qs


# ---------- responses ----------
def _payload(model: BaseModel) -> Any:
    # JSON mode: UUID, datetime and Decimal come out as strings
    return json.loads(model.model_dump_json())


async def paginate_and_respond(
    qs: QuerySet,
    skip: int,
    limit: int,
    order: str,
    to_pydantic: Callable[[Any], BaseModel],
) -> JSONResponse:
    total = await qs.count()
    items = await qs.order_by(order).offset(skip).limit(limit)
    last = skip + max(len(items) - 1, 0)
    return JSONResponse(
        status_code=206,
        content=[_payload(to_pydantic(it)) for it in items],
        headers={"Content-Range": f"items {skip}-{last}/{total}", "X-Total-Count": str(total)},
    )


def respond_item(model_obj: Any, to_pydantic: Callable[[Any], BaseModel], status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=_payload(to_pydantic(model_obj)))


# ---------- params container ----------
class RAListParams:
    """``range``/``sort``/``filter`` as React-Admin's simple REST provider sends them."""

    def __init__(
        self,
        range: Optional[str] = Query(None),
        sort: Optional[str] = Query(None),
        filter: Optional[str] = Query(None),
    ):
        self.skip, self.limit = parse_range(range)
        self.filters = parse_filter(filter)
        self.sort = sort

    def order(self, allowed_fields: Iterable[str], default: str = "id") -> str:
        return parse_sort(self.sort, allowed_fields, default)
