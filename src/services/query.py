"""Filtering, sorting, field projection and pagination from query-string parameters.

Supported parameters (``Tour`` shown as example):

    ?difficulty=easy&price[lt]=1500&duration[gte]=5
    &sort=-ratings_average,price&fields=name,price&page=2&limit=10

Only whitelisted scalar columns can be filtered or sorted on. Values are cast
to the column's Python type; a value that cannot be cast raises ``CastError``.
"""

import enum
import operator
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Query

from src.errors import BadRequestError, CastError

RESERVED_PARAMS = {"page", "sort", "limit", "fields"}

OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "gte": operator.ge,
    "gt": operator.gt,
    "lte": operator.le,
    "lt": operator.lt,
}

_FILTER_KEY = re.compile(r"^(?P<field>\w+)(?:\[(?P<op>gte|gt|lte|lt)\])?$")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


@dataclass
class QueryFeatures:
    """Parsed query-string options."""

    filters: list[tuple[str, str, str]] = field(default_factory=list)  # (field, op, raw)
    sort: list[str] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_params(cls, params: Mapping[str, str], **defaults: Any) -> "QueryFeatures":
        """Build from query parameters; ``defaults`` fill in sort/fields/limit when absent."""
        features = cls()

        for key, raw in params.items():
            if key in RESERVED_PARAMS:
                continue
            match = _FILTER_KEY.match(key)
            if not match:
                raise BadRequestError(f"Invalid filter: {key}.")
            features.filters.append((match.group("field"), match.group("op") or "eq", raw))

        sort = params.get("sort", defaults.get("sort"))
        if sort:
            features.sort = _split(sort)

        fields = params.get("fields", defaults.get("fields"))
        if fields:
            features.fields = _split(fields)

        page = params.get("page", defaults.get("page", DEFAULT_PAGE))
        features.page = _positive_int("page", page)
        limit = _positive_int("limit", params.get("limit", defaults.get("limit", DEFAULT_LIMIT)))
        features.limit = min(limit, MAX_LIMIT)
        return features

    def apply(self, query: Query, model: Any, allowed: Iterable[str]) -> Query:
        """Apply filters, ordering and pagination to ``query`` over ``model``."""
        allowed = set(allowed)

        for name, op, raw in self.filters:
            column = _column(model, name, allowed)
            value = _cast(column, name, raw)
            compare = OPERATORS.get(op, operator.eq)
            query = query.filter(compare(column, value))

        order_by = []
        for key in self.sort or ["-created_at"]:
            descending = key.startswith("-")
            column = _column(model, key.lstrip("-"), allowed | {"created_at"})
            order_by.append(column.desc() if descending else column.asc())
        order_by.append(model.id.asc())

        return query.order_by(*order_by).offset((self.page - 1) * self.limit).limit(self.limit)

    def project(self, document: dict) -> dict:
        """Keep only the requested fields (or drop ``-``-prefixed ones). ``id`` is always kept."""
        if not self.fields:
            return document
        excluded = {f[1:] for f in self.fields if f.startswith("-")}
        included = {f for f in self.fields if not f.startswith("-")}
        if included:
            return {k: v for k, v in document.items() if k in included or k == "id"}
        return {k: v for k, v in document.items() if k not in excluded}


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _positive_int(name: str, raw: Any) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise CastError(name, raw) from e
    if value < 1:
        raise CastError(name, raw)
    return value


def _column(model: Any, name: str, allowed: set[str]):
    if name not in allowed:
        raise BadRequestError(f"Invalid field: {name}.")
    return getattr(model, name)


def _cast(column: Any, name: str, raw: str) -> Any:
    python_type = column.type.python_type
    try:
        if python_type is bool:
            if raw.lower() not in ("true", "false", "1", "0"):
                raise ValueError(raw)
            return raw.lower() in ("true", "1")
        if issubclass(python_type, enum.Enum):
            return python_type(raw)
        return python_type(raw)
    except ValueError as e:
        raise CastError(name, raw) from e
