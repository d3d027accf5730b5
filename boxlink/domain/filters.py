"""Structured list-store query building with bound filter values.

Filter expressions only ever reference parameter aliases (``@p0``, ``@p1``
...). The literal for each alias is encoded separately and sent as its own
query parameter, so list data never becomes part of the expression text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .time_utils import to_store_datetime

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(/[A-Za-z_][A-Za-z0-9_]*)?$")
_OPERATORS = frozenset({"eq", "ne", "gt", "ge", "lt", "le"})

Clause = Tuple[str, str, Any]


def _check_field(name: str) -> str:
    text = str(name or "").strip()
    if not _FIELD_RE.match(text):
        raise ValueError(f"Invalid list field name: {name!r}")
    return text


def encode_literal(value: Any) -> str:
    """Encode a Python value as a filter literal for alias binding."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value) if isinstance(value, float) else str(value)
    if isinstance(value, datetime):
        return f"datetime'{to_store_datetime(value)}'"
    text = str(value)
    return "'" + text.replace("'", "''") + "'"


@dataclass(frozen=True)
class Filter:
    """Conjunction of ``field op value`` clauses."""

    clauses: Tuple[Clause, ...] = ()

    @classmethod
    def where(cls, field_name: str, op: str, value: Any) -> "Filter":
        return cls().and_where(field_name, op, value)

    @classmethod
    def equals(cls, field_name: str, value: Any) -> "Filter":
        return cls.where(field_name, "eq", value)

    def and_where(self, field_name: str, op: str, value: Any) -> "Filter":
        operator = str(op or "").strip().lower()
        if operator not in _OPERATORS:
            raise ValueError(f"Unsupported filter operator: {op!r}")
        return Filter(self.clauses + ((_check_field(field_name), operator, value),))

    def bind(self, start: int = 0) -> Tuple[str, Dict[str, str]]:
        """Return the alias expression and the alias -> literal mapping."""
        parts = []
        params: Dict[str, str] = {}
        for index, (name, op, value) in enumerate(self.clauses, start=start):
            alias = f"@p{index}"
            parts.append(f"{name} {op} {alias}")
            params[alias] = encode_literal(value)
        return " and ".join(parts), params

    def __bool__(self) -> bool:
        return bool(self.clauses)


@dataclass(frozen=True)
class QueryOptions:
    """Field selection, filtering, expansion and ordering for one list read."""

    select: Tuple[str, ...] = ()
    where: Optional[Filter] = None
    expand: Tuple[str, ...] = ()
    orderby: Tuple[str, ...] = ()
    top: Optional[int] = None

    def to_params(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        if self.select:
            params["$select"] = ",".join(_check_field(name) for name in self.select)
        if self.where:
            expression, aliases = self.where.bind()
            params["$filter"] = expression
            params.update(aliases)
        if self.expand:
            params["$expand"] = ",".join(_check_field(name) for name in self.expand)
        if self.orderby:
            params["$orderby"] = ",".join(_order_term(term) for term in self.orderby)
        if self.top is not None:
            if int(self.top) <= 0:
                raise ValueError("top must be a positive integer")
            params["$top"] = str(int(self.top))
        return params


def _order_term(term: str) -> str:
    pieces = str(term or "").split()
    if not pieces or len(pieces) > 2:
        raise ValueError(f"Invalid order term: {term!r}")
    name = _check_field(pieces[0])
    if len(pieces) == 1:
        return name
    direction = pieces[1].lower()
    if direction not in ("asc", "desc"):
        raise ValueError(f"Invalid order direction: {term!r}")
    return f"{name} {direction}"


__all__ = ["Filter", "QueryOptions", "encode_literal"]
