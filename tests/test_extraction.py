"""
tests/test_extraction.py

End-to-end signal extraction from bytes to BusinessSignalsV1.
"""

from __future__ import annotations

import io
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from db.repositories.storage import LocalFileStorage
from signals.errors import (
    EmptyDatasetError,
    FileParseError,
    ProcessingCancelledError,
    SchemaError,
    SourceNotFoundError,
    UnsupportedFormatError,
)
from signals.extraction import SignalExtractionPipeline
from signals.schema import ColumnType

FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def pipeline(storage: LocalFileStorage) -> SignalExtractionPipeline:
    return SignalExtractionPipeline(reader=storage, container="uploads", clock=lambda: FIXED_NOW)


def _extract(pipeline: SignalExtractionPipeline, content: str, name: str = "data.csv"):
    return pipeline.extract_from_stream(name, io.BytesIO(content.encode("utf-8")))


class TestEndToEnd:
    def test_region_revenue_example(self, pipeline: SignalExtractionPipeline) -> None:
        signals = _extract(pipeline, "Region,Revenue\nUS,100\nEU,200\nUS,150\n")

        assert signals.record_count == 3
        assert signals.numeric_totals == {"Revenue": Decimal("450")}
        assert signals.numeric_averages == {"Revenue": Decimal("150")}
        assert signals.category_counts == {"Region:US": 2, "Region:EU": 1}
        assert signals.detected_anomalies == []
        assert signals.generated_at == FIXED_NOW

    def test_column_metadata(self, pipeline: SignalExtractionPipeline) -> None:
        signals = _extract(pipeline, "Region,Revenue\nUS,100\nEU,\nUS,150\n")

        revenue = signals.column_metadata["Revenue"]
        assert revenue.column_type is ColumnType.NUMERIC
        assert revenue.null_count == 1
        assert revenue.unique_count == 2
        assert revenue.min == Decimal("100")
        assert revenue.max == Decimal("150")
        assert revenue.average == Decimal("125")

        region = signals.column_metadata["Region"]
        assert region.column_type is ColumnType.CATEGORICAL
        assert region.min is None and region.max is None and region.average is None

    def test_record_count_excludes_malformed_rows(self, pipeline: SignalExtractionPipeline) -> None:
        signals = _extract(pipeline, "A,B\n1,2\n3\n4,5,6\n7,8\n")

        assert signals.record_count == 2

    def test_other_types_only_get_metadata(self, pipeline: SignalExtractionPipeline) -> None:
        content = (
            "Day,Active,Note\n"
            "2026-01-01,true,first\n"
            "2026-01-02,false,second\n"
            "2026-01-03,true,third\n"
        )

        signals = _extract(pipeline, content)

        assert signals.column_metadata["Day"].column_type is ColumnType.DATETIME
        assert signals.column_metadata["Active"].column_type is ColumnType.BOOLEAN
        assert signals.column_metadata["Note"].column_type is ColumnType.TEXT
        assert signals.numeric_totals == {}
        assert signals.category_counts == {}

    def test_anomalies_reported_for_numeric_columns(self, pipeline: SignalExtractionPipeline) -> None:
        content = "Store,Sales\n" + "".join(
            f"S{index},{value}\n" for index, value in enumerate([10, 12, 11, 13, 100])
        )

        signals = _extract(pipeline, content)

        assert signals.detected_anomalies == ["Sales outlier detected: 100"]

    def test_identical_bytes_give_identical_signals(self, pipeline: SignalExtractionPipeline) -> None:
        content = "Region,Revenue\nUS,100\nEU,200\n"

        first = _extract(pipeline, content)
        second = _extract(pipeline, content)

        assert first == second


class TestFailures:
    def test_header_only_file_fails_schema_gate(self, pipeline: SignalExtractionPipeline) -> None:
        with pytest.raises(SchemaError):
            _extract(pipeline, "A,B\n")

    def test_only_malformed_rows_is_empty_dataset(self, pipeline: SignalExtractionPipeline) -> None:
        with pytest.raises(EmptyDatasetError):
            _extract(pipeline, "A,B\n1\n2,3,4\n")

    def test_duplicate_headers_rejected(self, pipeline: SignalExtractionPipeline) -> None:
        with pytest.raises(SchemaError):
            _extract(pipeline, "A,A\n1,2\n")

    def test_unsupported_format_checked_before_read(self, pipeline: SignalExtractionPipeline) -> None:
        with pytest.raises(UnsupportedFormatError):
            pipeline.extract("missing.pdf")

    def test_missing_source(self, pipeline: SignalExtractionPipeline) -> None:
        with pytest.raises(SourceNotFoundError):
            pipeline.extract("missing.csv")

    def test_reads_from_storage(
        self,
        pipeline: SignalExtractionPipeline,
        write_upload: Callable[[str, str | bytes], str],
    ) -> None:
        path = write_upload("sales/q1.csv", "Region,Revenue\nUS,100\n")

        signals = pipeline.extract(path)

        assert signals.record_count == 1

    def test_undecodable_file(self, pipeline: SignalExtractionPipeline) -> None:
        with pytest.raises(FileParseError):
            pipeline.extract_from_stream("bad.csv", io.BytesIO(b"A\n\xff\n"))

    def test_cancellation(self, pipeline: SignalExtractionPipeline) -> None:
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(ProcessingCancelledError):
            pipeline.extract_from_stream("a.csv", io.BytesIO(b"A\n1\n"), cancel)
