"""
Three-sigma outlier detection for numeric columns.

The column's population statistics (divide by N) gate detection: fewer than
``MIN_VALUES`` values or a zero standard deviation yields no anomalies. Each
value is then compared against the mean and population standard deviation of
the remaining values, so one extreme value cannot hide itself by inflating
the deviation it is measured against. A value whose remaining values have no
spread at all is never flagged.

Both passes work on deviations from the column mean rather than raw squares,
with the decimal precision widened to fit the widest value, so large
magnitudes keep every digit and shifting a column by a constant does not
change the result.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal, localcontext

MIN_VALUES = 5
SIGMA_THRESHOLD = Decimal(3)

_EXTRA_PRECISION = 20


def _format_value(value: Decimal) -> str:
    return format(value.normalize(), "f") if value == value.to_integral_value() else str(value)


def _required_precision(values: Sequence[Decimal]) -> int:
    highest = max(value.adjusted() for value in values)
    lowest = min(value.as_tuple().exponent for value in values)
    # Squared deviations need twice the span of digits present in the column.
    return max(28, 2 * (highest - lowest + 1) + _EXTRA_PRECISION)


class AnomalyDetector:
    def detect_numeric_outliers(self, column_name: str, values: Sequence[Decimal]) -> list[str]:
        count = len(values)
        if count < MIN_VALUES:
            return []

        with localcontext() as context:
            context.prec = _required_precision(values)

            # Pass 1: mean.
            mean = sum(values, Decimal(0)) / count

            # Pass 2: sum of squared deviations.
            deviations = [value - mean for value in values]
            m2 = sum((deviation * deviation for deviation in deviations), Decimal(0))
            if m2 == 0:
                return []

            others = count - 1
            scale = Decimal(count) / others
            anomalies: list[str] = []
            for value, deviation in zip(values, deviations):
                rest_m2 = max(m2 - scale * deviation * deviation, Decimal(0))
                rest_stddev = (rest_m2 / others).sqrt()
                if rest_stddev == 0:
                    continue
                # Distance from the mean of the remaining values.
                distance = abs(deviation) * scale
                if distance > SIGMA_THRESHOLD * rest_stddev:
                    anomalies.append(f"{column_name} outlier detected: {_format_value(value)}")
        return anomalies
