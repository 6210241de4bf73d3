"""Row filtering and ordering shared by every list endpoint.

List endpoints accept the same small query language the client SDK emits::

    GET /api/v1/tasks?status=pending&due_date__from=2024-01-01&order=-created_at&limit=5

Every query parameter other than ``order`` and ``limit`` is a filter on a
column of the listed table.
"""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from typing import Any, Optional

from fastapi import Query, Request
from sqlalchemy import Select, and_, select
from sqlalchemy.orm import ColumnProperty, InstrumentedAttribute

from grofast.common.constants import MAX_LIST_LIMIT
from grofast.common.exceptions import ValidationException

RESERVED_PARAMS = frozenset({"order", "limit"})

_OPERATORS = ("__ilike", "__ne", "__from", "__to", "__in")


# ── FastAPI dependency ──────────────────────────────────────────────

class ListParams:
    """Inject via ``Depends(ListParams)`` on any list endpoint."""

    def __init__(
        self,
        request: Request,
        order: Optional[str] = Query(
            default=None,
            description='Sort column; prefix "-" for DESC (e.g. "-created_at")',
        ),
        limit: Optional[int] = Query(
            default=None, ge=1, le=MAX_LIST_LIMIT, description="Maximum rows returned",
        ),
    ) -> None:
        self.order = order
        self.limit = limit
        self.filters: dict[str, str] = {
            key: value
            for key, value in request.query_params.items()
            if key not in RESERVED_PARAMS
        }


def build_list_query(
    model: Any,
    params: ListParams,
    *conditions: Any,
    default_order: Optional[str] = None,
) -> Select:
    """``SELECT model`` with scope ``conditions``, caller filters, order and limit."""
    query = select(model)
    if conditions:
        query = query.where(*conditions)
    query = apply_filters(query, model, params.filters)
    query = apply_sorting(query, model, params.order, default=default_order)
    return apply_limit(query, params.limit)


# ── Ordering ────────────────────────────────────────────────────────

def apply_sorting(
    query: Select,
    model: Any,
    order: Optional[str],
    *,
    default: Optional[str] = None,
) -> Select:
    """
    Parse an order string like ``"-created_at"`` or ``"status,-due_date"``
    and apply ORDER BY.

    * Leading ``-`` → DESC; otherwise ASC.
    * Unknown columns are rejected rather than passed through as raw SQL.
    * The primary key is always appended as a tiebreaker so two identical
      calls return rows in the same order.
    """
    for part in split_csv(order or default) or []:
        descending = part.startswith("-")
        col_name = part.lstrip("-")
        col = _get_column(model, col_name)
        if col is None:
            raise ValidationException({"order": [f"Unknown column '{col_name}'."]})
        query = query.order_by(col.desc() if descending else col.asc())

    return query.order_by(model.id.asc())


# ── Generic filtering ──────────────────────────────────────────────

def apply_filters(
    query: Select,
    model: Any,
    filters: dict[str, Any],
) -> Select:
    """
    Apply a dict of filter parameters to a SQLAlchemy ``Select``.

    Key suffixes determine the operator:

    ============  ==================
    Suffix        Operator
    ============  ==================
    (none)        ``==``
    ``__ne``      ``!=``
    ``__ilike``   case-insensitive LIKE (wraps ``%…%``)
    ``__from``    ``>=``
    ``__to``      ``<=``
    ``__in``      ``IN (…)``, comma separated
    ============  ==================

    String values are converted to the column's Python type. ``None``
    values are silently skipped.
    """
    conditions: list = []

    for key, value in filters.items():
        if value is None:
            continue

        name, op = _split_key(key)
        col = _require_column(model, name)

        if op == "__ilike":
            conditions.append(col.ilike(f"%{value}%"))
        elif op == "__in":
            values = value if isinstance(value, (list, tuple)) else split_csv(value) or []
            conditions.append(col.in_([_coerce(col, key, v) for v in values]))
        else:
            typed = _coerce(col, key, value)
            if op == "__ne":
                conditions.append(col != typed)
            elif op == "__from":
                conditions.append(col >= typed)
            elif op == "__to":
                conditions.append(col <= typed)
            elif typed is None:
                conditions.append(col.is_(None))
            else:
                conditions.append(col == typed)

    if conditions:
        query = query.where(and_(*conditions))

    return query


def apply_limit(query: Select, limit: Optional[int]) -> Select:
    if limit:
        return query.limit(limit)
    return query


def split_csv(value: Optional[str]) -> Optional[list[str]]:
    """``"a,b"`` → ``["a", "b"]`` for ``__in`` query parameters."""
    if not value:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


# ── Internal helpers ────────────────────────────────────────────────

def _split_key(key: str) -> tuple[str, Optional[str]]:
    for op in _OPERATORS:
        if key.endswith(op):
            return key.removesuffix(op), op
    return key, None


def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    """Mapped column attribute by name; relationships and private names are not columns."""
    if name.startswith("_"):
        return None
    col = getattr(model, name, None)
    if isinstance(col, InstrumentedAttribute) and isinstance(col.property, ColumnProperty):
        return col
    return None


def _require_column(model: Any, name: str) -> InstrumentedAttribute:
    col = _get_column(model, name)
    if col is None:
        raise ValidationException({name: [f"Unknown filter column '{name}'."]})
    return col


def _coerce(col: InstrumentedAttribute, key: str, value: Any) -> Any:
    """Convert a query-string value to what the column binds."""
    if not isinstance(value, str):
        return value
    if value.lower() == "null":
        return None
    try:
        python_type = col.type.python_type
    except (AttributeError, NotImplementedError):
        return value

    try:
        if python_type is bool:
            if value.lower() in ("true", "1"):
                return True
            if value.lower() in ("false", "0"):
                return False
            raise ValueError(value)
        if python_type is uuid.UUID:
            return uuid.UUID(value)
        if python_type is datetime:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        if python_type is date:
            return date.fromisoformat(value)
        if python_type is int:
            return int(value)
        if issubclass(python_type, enum.Enum):
            return python_type(value)
    except ValueError:
        raise ValidationException({key: [f"Invalid value '{value}'."]})
    return value
