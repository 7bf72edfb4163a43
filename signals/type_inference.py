"""
Column type inference from sampled raw values.

Rules are evaluated in a fixed order and the first one satisfied by the whole
sample wins: Boolean, DateTime, Numeric, Text, then Categorical. Tokens such as
"0" and "1" are therefore Numeric, never Boolean.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from signals.schema import ColumnType
from signals.statistics import is_blank, parse_decimal

SAMPLE_SIZE = 50
TEXT_DISTINCT_RATIO = 0.9

_BOOLEAN_LITERALS = frozenset({"true", "false"})

# Invariant formats only; locale-dependent or day-first layouts are not accepted.
DATETIME_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
)


def sample_values(values: Iterable[str], size: int = SAMPLE_SIZE) -> list[str]:
    """Return the first ``size`` non-empty values, trimmed."""
    sample: list[str] = []
    for value in values:
        if is_blank(value):
            continue
        sample.append(value.strip())
        if len(sample) >= size:
            break
    return sample


def is_boolean(value: str) -> bool:
    return value.strip().lower() in _BOOLEAN_LITERALS


def parse_datetime(value: str) -> datetime | None:
    text = value.strip()
    # Bare numbers are never dates, e.g. "20260101".
    if parse_decimal(text) is not None:
        return None
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


class ColumnTypeInference:
    def infer(self, values: Iterable[str]) -> ColumnType:
        sample = sample_values(values)
        if not sample:
            return ColumnType.UNKNOWN

        if all(is_boolean(value) for value in sample):
            return ColumnType.BOOLEAN

        if all(parse_datetime(value) is not None for value in sample):
            return ColumnType.DATETIME

        if all(parse_decimal(value) is not None for value in sample):
            return ColumnType.NUMERIC

        distinct_ratio = len(set(sample)) / len(sample)
        if distinct_ratio > TEXT_DISTINCT_RATIO:
            return ColumnType.TEXT

        return ColumnType.CATEGORICAL
