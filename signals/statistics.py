"""
Deterministic per-column statistics using exact decimal arithmetic.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

# Signed decimal, optional comma thousands separators, at most one decimal point.
_DECIMAL_PATTERN = re.compile(
    r"^[+-]?(?:(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d*)?|\.\d+)$"
)


def parse_decimal(raw: str | None) -> Decimal | None:
    """
    Parse a raw cell as a decimal, or return None when it is not numeric.
    """

    if raw is None:
        return None
    text = raw.strip()
    if not text or not _DECIMAL_PATTERN.match(text):
        return None
    try:
        return Decimal(text.replace(",", ""))
    except InvalidOperation:
        return None


def is_blank(raw: str | None) -> bool:
    return raw is None or raw.strip() == ""


@dataclass(frozen=True)
class NumericStatistics:
    total: Decimal
    average: Decimal
    minimum: Decimal
    maximum: Decimal
    values: tuple[Decimal, ...]


def compute_numeric(values: Iterable[str]) -> NumericStatistics | None:
    """
    Compute sum, mean, min and max over every parseable value.

    Invalid and empty values are excluded rather than coerced to zero. When
    no value parses, every statistic is absent and None is returned.
    """

    numbers = tuple(number for number in (parse_decimal(value) for value in values) if number is not None)
    if not numbers:
        return None

    total = sum(numbers, Decimal(0))
    return NumericStatistics(
        total=total,
        average=total / len(numbers),
        minimum=min(numbers),
        maximum=max(numbers),
        values=numbers,
    )


def count_nulls(values: Iterable[str]) -> int:
    return sum(1 for value in values if is_blank(value))


def count_unique(values: Iterable[str]) -> int:
    return len({value for value in values if not is_blank(value)})


def count_categories(column: str, values: Sequence[str]) -> dict[str, int]:
    """
    Group non-empty values by exact equality, keyed ``"{column}:{value}"``.

    Keys appear in first-seen order.
    """

    counts: dict[str, int] = {}
    for value in values:
        if is_blank(value):
            continue
        key = f"{column}:{value}"
        counts[key] = counts.get(key, 0) + 1
    return counts
