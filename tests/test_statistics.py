"""
tests/test_statistics.py

Decimal parsing and per-column statistics.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from signals.statistics import (
    compute_numeric,
    count_categories,
    count_nulls,
    count_unique,
    parse_decimal,
)


class TestParseDecimal:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("10", Decimal("10")),
            (" -3.25 ", Decimal("-3.25")),
            ("+7", Decimal("7")),
            ("1,234.5", Decimal("1234.5")),
            (".5", Decimal("0.5")),
        ],
    )
    def test_valid(self, raw: str, expected: Decimal) -> None:
        assert parse_decimal(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "1.2.3", "12,34", "1e5", None])
    def test_invalid(self, raw: str | None) -> None:
        assert parse_decimal(raw) is None


class TestComputeNumeric:
    def test_sum_mean_min_max(self) -> None:
        stats = compute_numeric(["100", "200", "150"])

        assert stats is not None
        assert stats.total == Decimal("450")
        assert stats.average == Decimal("150")
        assert stats.minimum == Decimal("100")
        assert stats.maximum == Decimal("200")

    def test_invalid_and_empty_values_are_excluded(self) -> None:
        stats = compute_numeric(["10", "", "oops", "20"])

        assert stats is not None
        assert stats.total == Decimal("30")
        assert stats.average == Decimal("15")
        assert stats.values == (Decimal("10"), Decimal("20"))

    def test_decimal_arithmetic_is_exact(self) -> None:
        stats = compute_numeric(["0.1", "0.2"])

        assert stats is not None
        assert stats.total == Decimal("0.3")

    def test_no_valid_values_returns_none(self) -> None:
        assert compute_numeric(["", "x"]) is None


class TestCounts:
    def test_count_nulls_includes_whitespace(self) -> None:
        assert count_nulls(["a", "", "  ", "b"]) == 2

    def test_count_unique_ignores_empty(self) -> None:
        assert count_unique(["a", "b", "a", ""]) == 2

    def test_count_categories_keys_and_order(self) -> None:
        counts = count_categories("Region", ["US", "EU", "US", ""])

        assert counts == {"Region:US": 2, "Region:EU": 1}
        assert list(counts) == ["Region:US", "Region:EU"]

    def test_count_categories_is_case_sensitive(self) -> None:
        assert count_categories("C", ["a", "A"]) == {"C:a": 1, "C:A": 1}
