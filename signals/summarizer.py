"""
Bounded compression of ``BusinessSignalsV1`` into ``SignalSummaryV1``.

The summary is the only artifact that ever reaches the reasoning layer, so its
size must not grow with the number of distinct values in the source file.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal

from signals.schema import (
    BusinessSignalsV1,
    CategoryHighlightV1,
    ColumnType,
    SignalSummaryV1,
)

_PERCENT_QUANTUM = Decimal("0.01")


@dataclass(frozen=True)
class SummaryLimits:
    top_totals: int
    top_averages: int
    category_highlights: int
    sample_anomalies: int


LARGE_DATASET_ROWS = 100_000
MEDIUM_DATASET_ROWS = 10_000

LARGE_LIMITS = SummaryLimits(top_totals=3, top_averages=3, category_highlights=5, sample_anomalies=3)
MEDIUM_LIMITS = SummaryLimits(top_totals=5, top_averages=5, category_highlights=10, sample_anomalies=5)
DEFAULT_LIMITS = SummaryLimits(top_totals=10, top_averages=10, category_highlights=20, sample_anomalies=5)


def limits_for(record_count: int) -> SummaryLimits:
    if record_count > LARGE_DATASET_ROWS:
        return LARGE_LIMITS
    if record_count > MEDIUM_DATASET_ROWS:
        return MEDIUM_LIMITS
    return DEFAULT_LIMITS


def _top_values(values: dict[str, Decimal], limit: int) -> dict[str, Decimal]:
    ranked = sorted(values.items(), key=lambda item: (-item[1], item[0]))
    return dict(ranked[:limit])


def _percentage(count: int, record_count: int) -> Decimal:
    if record_count <= 0:
        return Decimal("0")
    raw = Decimal(count) * 100 / Decimal(record_count)
    return raw.quantize(_PERCENT_QUANTUM, rounding=ROUND_HALF_EVEN)


def split_category_key(key: str, known_columns: list[str]) -> tuple[str, str]:
    """
    Split a ``"{column}:{value}"`` key back into its parts.

    Column names may themselves contain ``:``, so the longest known column
    name that prefixes the key wins. Unknown prefixes split on the first ``:``.
    """

    for column in known_columns:
        prefix = f"{column}:"
        if key.startswith(prefix):
            return column, key[len(prefix):]
    column, _, value = key.partition(":")
    return column, value


class SignalSummarizer:
    def summarize(self, signals: BusinessSignalsV1) -> SignalSummaryV1:
        limits = limits_for(signals.record_count)

        known_columns = sorted(signals.column_metadata, key=len, reverse=True)
        highlights: list[CategoryHighlightV1] = []
        for key, count in signals.category_counts.items():
            column, value = split_category_key(key, known_columns)
            highlights.append(
                CategoryHighlightV1(
                    column=column,
                    value=value,
                    count=count,
                    percentage=_percentage(count, signals.record_count),
                )
            )
        highlights.sort(key=lambda item: (-item.count, item.column, item.value))

        type_counts = Counter(
            metadata.column_type.value for metadata in signals.column_metadata.values()
        )

        return SignalSummaryV1(
            record_count=signals.record_count,
            top_numeric_totals=_top_values(signals.numeric_totals, limits.top_totals),
            top_numeric_averages=_top_values(signals.numeric_averages, limits.top_averages),
            category_highlights=highlights[: limits.category_highlights],
            anomaly_count=len(signals.detected_anomalies),
            sample_anomalies=list(signals.detected_anomalies[: limits.sample_anomalies]),
            column_count=len(signals.column_metadata),
            numeric_column_count=type_counts.get(ColumnType.NUMERIC.value, 0),
            categorical_column_count=type_counts.get(ColumnType.CATEGORICAL.value, 0),
            column_type_counts=dict(sorted(type_counts.items())),
            signals_generated_at=signals.generated_at,
        )
