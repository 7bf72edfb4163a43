"""Versioned, immutable contracts for extracted signals and their summary.

Shape-breaking changes require a new model and a new version tag; older
payloads stay readable through ``load_signals`` / ``load_summary``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

SIGNALS_SCHEMA_VERSION = "v1"
SUMMARY_SCHEMA_VERSION = "v1"


class ColumnType(str, Enum):
    """Deterministic column classification produced by type inference."""

    UNKNOWN = "Unknown"
    NUMERIC = "Numeric"
    CATEGORICAL = "Categorical"
    DATETIME = "DateTime"
    BOOLEAN = "Boolean"
    TEXT = "Text"


class _FrozenContract(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ColumnMetadataV1(_FrozenContract):
    column_name: str
    column_type: ColumnType
    null_count: int = Field(ge=0)
    unique_count: int = Field(ge=0)
    min: Decimal | None = None
    max: Decimal | None = None
    average: Decimal | None = None


class BusinessSignalsV1(_FrozenContract):
    """
    Deterministic signals extracted from one uploaded file.

    Never contains raw rows; only aggregates and descriptions.
    """

    record_count: int = Field(ge=0)
    generated_at: datetime
    numeric_totals: dict[str, Decimal] = Field(default_factory=dict)
    numeric_averages: dict[str, Decimal] = Field(default_factory=dict)
    category_counts: dict[str, int] = Field(default_factory=dict)
    column_metadata: dict[str, ColumnMetadataV1] = Field(default_factory=dict)
    detected_anomalies: list[str] = Field(default_factory=list)


class CategoryHighlightV1(_FrozenContract):
    column: str
    value: str
    count: int = Field(ge=0)
    percentage: Decimal


class SignalSummaryV1(_FrozenContract):
    """Bounded-size compression of ``BusinessSignalsV1`` safe to send to an LLM."""

    record_count: int = Field(ge=0)
    top_numeric_totals: dict[str, Decimal] = Field(default_factory=dict)
    top_numeric_averages: dict[str, Decimal] = Field(default_factory=dict)
    category_highlights: list[CategoryHighlightV1] = Field(default_factory=list)
    anomaly_count: int = Field(ge=0)
    sample_anomalies: list[str] = Field(default_factory=list)
    column_count: int = Field(ge=0)
    numeric_column_count: int = Field(ge=0)
    categorical_column_count: int = Field(ge=0)
    column_type_counts: dict[str, int] = Field(default_factory=dict)
    signals_generated_at: datetime


_SIGNAL_MODELS: dict[str, type[BusinessSignalsV1]] = {
    "v1": BusinessSignalsV1,
}

_SUMMARY_MODELS: dict[str, type[SignalSummaryV1]] = {
    "v1": SignalSummaryV1,
}


def load_signals(schema_version: str, payload: dict[str, Any]) -> BusinessSignalsV1:
    """Rehydrate a stored signals document using the model for its version tag."""
    try:
        model = _SIGNAL_MODELS[schema_version]
    except KeyError as exc:
        raise ValueError(f"Unknown signals schema version: {schema_version}") from exc
    return model.model_validate(payload)


def load_summary(schema_version: str, payload: dict[str, Any]) -> SignalSummaryV1:
    """Rehydrate a stored summary document using the model for its version tag."""
    try:
        model = _SUMMARY_MODELS[schema_version]
    except KeyError as exc:
        raise ValueError(f"Unknown summary schema version: {schema_version}") from exc
    return model.model_validate(payload)
