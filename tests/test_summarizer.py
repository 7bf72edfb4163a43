"""
tests/test_summarizer.py

Bounded compression of signals into the summary sent to the reasoning layer.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from signals.schema import BusinessSignalsV1, ColumnMetadataV1, ColumnType
from signals.summarizer import SignalSummarizer, limits_for, split_category_key

GENERATED_AT = datetime(2026, 10, 19, tzinfo=timezone.utc)


def _metadata(name: str, column_type: ColumnType) -> ColumnMetadataV1:
    return ColumnMetadataV1(column_name=name, column_type=column_type, null_count=0, unique_count=1)


def _signals(
    *,
    record_count: int,
    numeric_columns: int = 0,
    categories: int = 0,
    anomalies: int = 0,
) -> BusinessSignalsV1:
    numeric = {f"metric_{index:03d}": Decimal(index * 10) for index in range(numeric_columns)}
    metadata = {name: _metadata(name, ColumnType.NUMERIC) for name in numeric}
    metadata["Segment"] = _metadata("Segment", ColumnType.CATEGORICAL)
    return BusinessSignalsV1(
        record_count=record_count,
        generated_at=GENERATED_AT,
        numeric_totals=numeric,
        numeric_averages={name: value / 2 for name, value in numeric.items()},
        category_counts={f"Segment:value_{index:04d}": index + 1 for index in range(categories)},
        column_metadata=metadata,
        detected_anomalies=[f"metric outlier detected: {index}" for index in range(anomalies)],
    )


@pytest.fixture()
def summarizer() -> SignalSummarizer:
    return SignalSummarizer()


class TestBounds:
    def test_large_dataset_bound(self, summarizer: SignalSummarizer) -> None:
        signals = _signals(record_count=150_000, numeric_columns=40, categories=500, anomalies=50)

        summary = summarizer.summarize(signals)

        assert len(summary.top_numeric_totals) == 3
        assert len(summary.top_numeric_averages) == 3
        assert len(summary.category_highlights) == 5
        assert len(summary.sample_anomalies) == 3
        assert summary.anomaly_count == 50

    def test_medium_dataset_bound(self, summarizer: SignalSummarizer) -> None:
        summary = summarizer.summarize(_signals(record_count=50_000, numeric_columns=40, categories=500, anomalies=50))

        assert len(summary.top_numeric_totals) == 5
        assert len(summary.category_highlights) == 10
        assert len(summary.sample_anomalies) == 5

    def test_small_dataset_bound(self, summarizer: SignalSummarizer) -> None:
        summary = summarizer.summarize(_signals(record_count=500, numeric_columns=40, categories=500, anomalies=50))

        assert len(summary.top_numeric_totals) == 10
        assert len(summary.top_numeric_averages) == 10
        assert len(summary.category_highlights) == 20
        assert len(summary.sample_anomalies) == 5

    @pytest.mark.parametrize(
        ("record_count", "expected_totals"),
        [(10_000, 10), (10_001, 5), (100_000, 5), (100_001, 3)],
    )
    def test_thresholds_are_strictly_greater_than(self, record_count: int, expected_totals: int) -> None:
        assert limits_for(record_count).top_totals == expected_totals


class TestOrdering:
    def test_top_totals_descending(self, summarizer: SignalSummarizer) -> None:
        summary = summarizer.summarize(_signals(record_count=10, numeric_columns=15))

        assert list(summary.top_numeric_totals) == [f"metric_{index:03d}" for index in range(14, 4, -1)]

    def test_ties_broken_by_column_name(self, summarizer: SignalSummarizer) -> None:
        signals = BusinessSignalsV1(
            record_count=4,
            generated_at=GENERATED_AT,
            numeric_totals={"b": Decimal("5"), "a": Decimal("5"), "c": Decimal("9")},
            numeric_averages={},
        )

        summary = summarizer.summarize(signals)

        assert list(summary.top_numeric_totals) == ["c", "a", "b"]

    def test_highlight_order_and_percentage(self, summarizer: SignalSummarizer) -> None:
        signals = BusinessSignalsV1(
            record_count=3,
            generated_at=GENERATED_AT,
            category_counts={"Region:US": 2, "Region:EU": 1},
            column_metadata={"Region": _metadata("Region", ColumnType.CATEGORICAL)},
        )

        summary = summarizer.summarize(signals)

        assert [(h.column, h.value, h.count) for h in summary.category_highlights] == [
            ("Region", "US", 2),
            ("Region", "EU", 1),
        ]
        assert summary.category_highlights[0].percentage == Decimal("66.67")
        assert summary.category_highlights[1].percentage == Decimal("33.33")

    @pytest.mark.parametrize(
        ("count", "record_count", "expected"),
        [
            (1, 8, Decimal("12.50")),
            (1, 32, Decimal("3.12")),
            (3, 32, Decimal("9.38")),
            (5, 32, Decimal("15.62")),
        ],
    )
    def test_percentage_rounds_half_to_even(
        self, summarizer: SignalSummarizer, count: int, record_count: int, expected: Decimal
    ) -> None:
        signals = BusinessSignalsV1(
            record_count=record_count,
            generated_at=GENERATED_AT,
            category_counts={"C:x": count},
            column_metadata={"C": _metadata("C", ColumnType.CATEGORICAL)},
        )

        highlight = summarizer.summarize(signals).category_highlights[0]

        assert highlight.percentage == expected

    def test_percentage_zero_when_no_records(self, summarizer: SignalSummarizer) -> None:
        signals = BusinessSignalsV1(
            record_count=0,
            generated_at=GENERATED_AT,
            category_counts={"C:x": 1},
        )

        assert summarizer.summarize(signals).category_highlights[0].percentage == Decimal("0")


class TestCounts:
    def test_column_counts_are_uncompressed(self, summarizer: SignalSummarizer) -> None:
        summary = summarizer.summarize(_signals(record_count=200_000, numeric_columns=40))

        assert summary.column_count == 41
        assert summary.numeric_column_count == 40
        assert summary.categorical_column_count == 1
        assert summary.column_type_counts == {"Categorical": 1, "Numeric": 40}
        assert summary.signals_generated_at == GENERATED_AT

    def test_summarizer_is_pure(self, summarizer: SignalSummarizer) -> None:
        signals = _signals(record_count=20_000, numeric_columns=12, categories=30, anomalies=7)

        assert summarizer.summarize(signals) == summarizer.summarize(signals)


class TestSplitCategoryKey:
    def test_longest_known_column_wins(self) -> None:
        known = ["a:b", "a"]

        assert split_category_key("a:b:c", known) == ("a:b", "c")

    def test_value_may_contain_colons(self) -> None:
        assert split_category_key("Time:10:30", ["Time"]) == ("Time", "10:30")

    def test_unknown_column_splits_on_first_colon(self) -> None:
        assert split_category_key("x:y:z", []) == ("x", "y:z")
