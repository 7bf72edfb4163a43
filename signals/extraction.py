"""
Signal extraction pipeline.

Orchestrates parsing, schema validation, type inference, statistics and
anomaly detection into one immutable ``BusinessSignalsV1`` snapshot. The only
I/O is the initial read of the source stream; everything after that is a pure
function of the input bytes (apart from ``generated_at``).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from typing import IO

from db.repositories.storage import SourceFileReader
from parsing.base import ParsedFile
from parsing.factory import FileParserFactory
from signals.anomaly import AnomalyDetector
from signals.errors import EmptyDatasetError, raise_if_cancelled
from signals.schema import BusinessSignalsV1, ColumnMetadataV1, ColumnType
from signals.schema_validator import SchemaValidator
from signals.statistics import compute_numeric, count_categories, count_nulls, count_unique
from signals.type_inference import ColumnTypeInference

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SignalExtractionPipeline:
    """
    Turns one source file into deterministic business signals.

    Responsibilities:
        - Resolve the parser for the file extension.
        - Read and parse the source stream.
        - Gate on schema validity before computing anything.
        - Profile every header column independently.

    Not responsible for:
        - Persisting signals.
        - Summarising or sending anything to the reasoning layer.
    """

    def __init__(
        self,
        *,
        reader: SourceFileReader | None = None,
        container: str = "uploads",
        parser_factory: FileParserFactory | None = None,
        schema_validator: SchemaValidator | None = None,
        type_inference: ColumnTypeInference | None = None,
        anomaly_detector: AnomalyDetector | None = None,
        clock: Clock = _utc_now,
    ) -> None:
        self._reader = reader
        self._container = container
        self._parser_factory = parser_factory or FileParserFactory()
        self._schema_validator = schema_validator or SchemaValidator()
        self._type_inference = type_inference or ColumnTypeInference()
        self._anomaly_detector = anomaly_detector or AnomalyDetector()
        self._clock = clock

    def extract(
        self,
        source_path: str,
        cancel_event: threading.Event | None = None,
    ) -> BusinessSignalsV1:
        """
        Read ``source_path`` from the byte-stream provider and extract signals.

        Raises:
            UnsupportedFormatError: No parser for the extension.
            SourceNotFoundError: The source file does not exist.
            SignalValidationError: The file fails the schema gate or has no valid rows.
            ProcessingCancelledError: ``cancel_event`` fired.
        """

        if self._reader is None:
            raise RuntimeError("SignalExtractionPipeline.extract requires a SourceFileReader.")

        # Resolve first so unsupported formats fail before any read.
        self._parser_factory.create(source_path)
        raise_if_cancelled(cancel_event, "source read")
        with self._reader.open(self._container, source_path) as stream:
            return self.extract_from_stream(source_path, stream, cancel_event)

    def extract_from_stream(
        self,
        source_path: str,
        stream: IO[bytes],
        cancel_event: threading.Event | None = None,
    ) -> BusinessSignalsV1:
        parser = self._parser_factory.create(source_path)
        parsed = parser.parse(stream, cancel_event)
        return self.extract_from_parsed(parsed, cancel_event)

    def extract_from_parsed(
        self,
        parsed: ParsedFile,
        cancel_event: threading.Event | None = None,
    ) -> BusinessSignalsV1:
        self._schema_validator.validate(parsed)

        record_count = len(parsed.rows)
        if record_count == 0:
            raise EmptyDatasetError(
                f"File contains no valid data rows ({parsed.malformed_rows} malformed row(s) skipped)."
            )

        numeric_totals: dict[str, Decimal] = {}
        numeric_averages: dict[str, Decimal] = {}
        category_counts: dict[str, int] = {}
        column_metadata: dict[str, ColumnMetadataV1] = {}
        anomalies: list[str] = []

        for column in parsed.headers:
            raise_if_cancelled(cancel_event, f"profiling of column {column!r}")
            values = [row.get(column, "") for row in parsed.rows]
            column_type = self._type_inference.infer(values)

            minimum = maximum = average = None
            if column_type is ColumnType.NUMERIC:
                stats = compute_numeric(values)
                if stats is not None:
                    numeric_totals[column] = stats.total
                    numeric_averages[column] = stats.average
                    minimum, maximum, average = stats.minimum, stats.maximum, stats.average
                    anomalies.extend(
                        self._anomaly_detector.detect_numeric_outliers(column, stats.values)
                    )
            elif column_type is ColumnType.CATEGORICAL:
                category_counts.update(count_categories(column, values))

            column_metadata[column] = ColumnMetadataV1(
                column_name=column,
                column_type=column_type,
                null_count=count_nulls(values),
                unique_count=count_unique(values),
                min=minimum,
                max=maximum,
                average=average,
            )

        logger.info(
            "Extracted signals records=%d columns=%d anomalies=%d",
            record_count,
            len(column_metadata),
            len(anomalies),
        )
        return BusinessSignalsV1(
            record_count=record_count,
            generated_at=self._clock(),
            numeric_totals=numeric_totals,
            numeric_averages=numeric_averages,
            category_counts=category_counts,
            column_metadata=column_metadata,
            detected_anomalies=anomalies,
        )
