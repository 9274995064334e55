"""
cms-feed — Row filters.

A FILTERS expression is an AND of clauses; each clause is an OR over
accepted string values:

    expression := clause { ";" clause }
    clause     := key "===" value { "|" value }

    status===published|archived;category===news

Keys and values are trimmed. A field value matches when its string form
(as JavaScript's String() would render it) is one of the clause's values.
An item without the clause's key never matches.

Malformed clauses (no "===", empty key, or no values) are skipped in the
default permissive mode and raise FilterSyntaxError in strict mode.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Sequence

from .models import CMSItem

logger = logging.getLogger("cms_feed.filters")

CLAUSE_SEP = ";"
KEY_SEP = "==="
VALUE_SEP = "|"


class FilterSyntaxError(ValueError):
    """A FILTERS clause could not be parsed."""

    def __init__(self, message: str, position: int, clause: str):
        super().__init__(f"clause {position}: {message} ({clause!r})")
        self.position = position
        self.clause = clause


@dataclass(frozen=True)
class FilterClause:
    key: str
    values: frozenset[str]

    def matches(self, item: CMSItem) -> bool:
        field = item.field(self.key)
        if field is None:
            return False
        return stringify(field.value) in self.values


def parse_filters(expression: str | None, *, strict: bool = False) -> tuple[FilterClause, ...]:
    """Parse *expression* into clauses. Blank input yields no clauses."""
    if not expression or not expression.strip():
        return ()

    clauses: list[FilterClause] = []
    for position, raw in enumerate(expression.split(CLAUSE_SEP), start=1):
        text = raw.strip()
        if not text:
            continue

        key, sep, rest = text.partition(KEY_SEP)
        key = key.strip()
        # "a===b===c" keeps only "b", as splitting on every separator would
        rest = rest.split(KEY_SEP)[0]
        values = frozenset(v.strip() for v in rest.split(VALUE_SEP) if v.strip()) if sep else frozenset()

        problem = None
        if not sep:
            problem = f"missing '{KEY_SEP}'"
        elif not key:
            problem = "missing key"
        elif not values:
            problem = "missing values"

        if problem:
            if strict:
                raise FilterSyntaxError(problem, position, text)
            logger.warning("Skipping filter clause %d (%s): %r", position, problem, text)
            continue

        clauses.append(FilterClause(key=key, values=values))

    return tuple(clauses)


def matches(item: CMSItem, clauses: Sequence[FilterClause]) -> bool:
    return all(clause.matches(item) for clause in clauses)


def filter_items(items: Iterable[CMSItem], clauses: Sequence[FilterClause]) -> list[CMSItem]:
    if not clauses:
        return list(items)
    return [item for item in items if matches(item, clauses)]


# ---------------------------------------------------------------------------
# String conversion
# ---------------------------------------------------------------------------

def _js_number(value: float) -> str:
    """Number::toString: shortest round-trip digits, exponent form below 1e-6 and from 1e21."""
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    k = len(digits)
    n = exponent + k  # decimal point position relative to the digits

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * -n + digits
    e = n - 1
    mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
    return f"{sign}{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"


def stringify(value: Any) -> str:
    """Render *value* the way JavaScript's String() does for JSON values."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return _js_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ",".join("" if v is None else stringify(v) for v in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)
