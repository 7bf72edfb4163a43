"""Canonical structured output schema for reasoning results."""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

INSIGHT_SCHEMA_VERSION = "v1"


class InsightPayload(BaseModel):
    """Shape the LLM is asked to return.

    camelCase keys are accepted as aliases; unknown keys are rejected.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    executive_summary: str = Field(
        min_length=1,
        validation_alias=AliasChoices("executive_summary", "executiveSummary"),
    )
    risks: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("risks", "key_risks", "keyRisks"),
    )
    opportunities: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class BusinessInsightV1(BaseModel):
    """Only allowed output contract for the reasoning layer."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
    )

    executive_summary: str = Field(min_length=1)
    risks: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    generated_at: datetime

    @classmethod
    def from_payload(cls, payload: InsightPayload, generated_at: datetime) -> "BusinessInsightV1":
        return cls(
            executive_summary=payload.executive_summary,
            risks=list(payload.risks),
            opportunities=list(payload.opportunities),
            recommendations=list(payload.recommendations),
            generated_at=generated_at,
        )


_INSIGHT_MODELS: Dict[str, type] = {
    "v1": BusinessInsightV1,
}


def load_insight(schema_version: str, payload: Dict[str, Any]) -> BusinessInsightV1:
    """Rehydrate a stored insight document using the model for its version tag."""
    try:
        model = _INSIGHT_MODELS[schema_version]
    except KeyError as exc:
        raise ValueError(f"Unknown insight schema version: {schema_version}") from exc
    return model.model_validate(payload)
