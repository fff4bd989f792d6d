"""
LiveQuery Kernel: Filter Normalizer

Pure function: FilterExpressionList -> WireFilters
No side effects. Deterministic.

Wire format per field:
  bare value          -> passed through unchanged
  (operator, value)   -> "<operator>|<json(value)>"
  None                -> key omitted (clears the constraint)

Only an explicit None clears a key. 0, "" and False are valid equality values.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from livequery.kernel.types import OPERATORS, FilterExpressionList, WireFilters


class FilterFunctions(str, Enum):
    """Symbolic comparison aliases accepted in place of operator names."""

    EQ = "=="
    NE = "!="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="


_SYMBOLS: dict[str, str] = {
    "==": "eq",
    "!=": "ne",
    ">": "gt",
    ">=": "gte",
    "<": "lt",
    "<=": "lte",
}


# ---------------------------------------------------------------------------
# Operator helpers
# ---------------------------------------------------------------------------


def eq(value: Any) -> tuple[str, Any]:
    return ("eq", value)


def ne(value: Any) -> tuple[str, Any]:
    return ("ne", value)


def gt(value: Any) -> tuple[str, Any]:
    return ("gt", value)


def gte(value: Any) -> tuple[str, Any]:
    return ("gte", value)


def lt(value: Any) -> tuple[str, Any]:
    return ("lt", value)


def lte(value: Any) -> tuple[str, Any]:
    return ("lte", value)


def in_array(values: list[Any]) -> tuple[str, list[Any]]:
    return ("in", list(values))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def operator_name(op: Any) -> str | None:
    """Map an operator token (name, symbol or FilterFunctions member) to its wire name."""
    if isinstance(op, FilterFunctions):
        op = op.value
    if not isinstance(op, str):
        return None
    if op in OPERATORS:
        return op
    return _SYMBOLS.get(op)


def split_tagged(expr: Any) -> tuple[str, Any] | None:
    """Return (operator, value) if expr is a tagged pair, else None."""
    if isinstance(expr, (tuple, list)) and len(expr) == 2:
        op = operator_name(expr[0])
        if op is not None:
            return op, expr[1]
    return None


def encode_expression(expr: Any) -> Any:
    """Encode one non-None filter expression into its wire token."""
    tagged = split_tagged(expr)
    if tagged is None:
        return expr
    op, value = tagged
    return f"{op}|{json.dumps(value, separators=(',', ':'))}"


def normalize_filters(filters: FilterExpressionList | None) -> WireFilters:
    """
    Translate a declarative filter list into wire filters.

    Never invents keys: the output keys are a subset of the input keys,
    in input order.
    """
    if not filters:
        return {}
    wire: WireFilters = {}
    for key, expr in filters.items():
        if expr is None:
            continue
        wire[key] = encode_expression(expr)
    return wire
