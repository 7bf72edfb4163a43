"""
tests/test_type_inference.py

Column type inference: rule order, sampling, and the edge cases around
numeric-looking tokens.
"""

from __future__ import annotations

import pytest

from signals.schema import ColumnType
from signals.type_inference import ColumnTypeInference, parse_datetime, sample_values


@pytest.fixture()
def inference() -> ColumnTypeInference:
    return ColumnTypeInference()


class TestInferenceRules:
    def test_boolean(self, inference: ColumnTypeInference) -> None:
        assert inference.infer(["true", "false", "true"]) is ColumnType.BOOLEAN

    def test_boolean_is_case_insensitive(self, inference: ColumnTypeInference) -> None:
        assert inference.infer(["TRUE", "False"]) is ColumnType.BOOLEAN

    def test_datetime(self, inference: ColumnTypeInference) -> None:
        assert inference.infer(["2026-01-01", "2026-02-01"]) is ColumnType.DATETIME

    def test_datetime_mixed_invariant_formats(self, inference: ColumnTypeInference) -> None:
        values = ["2026-01-01T10:15:00", "2026/02/01", "03/15/2026", "2026-04-01 08:00:00"]
        assert inference.infer(values) is ColumnType.DATETIME

    def test_numeric(self, inference: ColumnTypeInference) -> None:
        assert inference.infer(["1", "2", "3.5"]) is ColumnType.NUMERIC

    def test_zero_and_one_are_numeric_not_boolean(self, inference: ColumnTypeInference) -> None:
        assert inference.infer(["0", "1", "1", "0"]) is ColumnType.NUMERIC

    def test_numeric_with_sign_and_thousands(self, inference: ColumnTypeInference) -> None:
        assert inference.infer(["-1,200.50", "+3", "1,000,000"]) is ColumnType.NUMERIC

    def test_text_when_all_distinct(self, inference: ColumnTypeInference) -> None:
        assert inference.infer(["alpha", "beta", "gamma", "delta", "epsilon"]) is ColumnType.TEXT

    def test_categorical(self, inference: ColumnTypeInference) -> None:
        assert inference.infer(["red", "blue", "red", "red"]) is ColumnType.CATEGORICAL

    def test_unknown_when_all_empty(self, inference: ColumnTypeInference) -> None:
        assert inference.infer(["", "  ", ""]) is ColumnType.UNKNOWN

    def test_blanks_are_ignored(self, inference: ColumnTypeInference) -> None:
        assert inference.infer(["", "10", " ", "20"]) is ColumnType.NUMERIC

    def test_one_non_numeric_value_breaks_numeric(self, inference: ColumnTypeInference) -> None:
        assert inference.infer(["1", "2", "n/a", "2"]) is ColumnType.CATEGORICAL


class TestSampling:
    def test_sample_is_first_fifty_non_empty(self) -> None:
        values = [""] + [str(index) for index in range(80)]

        sample = sample_values(values)

        assert len(sample) == 50
        assert sample[0] == "0"
        assert sample[-1] == "49"

    def test_values_past_sample_do_not_affect_type(self) -> None:
        values = [str(index) for index in range(50)] + ["not a number"]

        assert ColumnTypeInference().infer(values) is ColumnType.NUMERIC


class TestParseDatetime:
    def test_bare_numbers_are_not_dates(self) -> None:
        assert parse_datetime("20260101") is None

    def test_ambiguous_text_is_not_a_date(self) -> None:
        assert parse_datetime("next tuesday") is None

    def test_offset_is_parsed(self) -> None:
        parsed = parse_datetime("2026-01-01T10:00:00+02:00")

        assert parsed is not None
        assert parsed.utcoffset() is not None
