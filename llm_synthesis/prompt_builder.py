"""Structured prompt builder for insight reasoning."""

import json

from llm_synthesis.schema import InsightPayload
from signals.schema import SignalSummaryV1

_SCHEMA_JSON = json.dumps(InsightPayload.model_json_schema(), indent=2)

_EXAMPLE_OUTPUT = json.dumps(
    {
        "executive_summary": "Revenue is concentrated in the North region, which accounts for 45% of records.",
        "risks": ["Customer concentration risk detected in a single region."],
        "opportunities": ["Upsell high-value customer segments in under-represented regions."],
        "recommendations": ["Diversify the customer base beyond the North region."],
    },
    indent=2,
)

_SYSTEM_INSTRUCTIONS = """\
You are a strategic business analyst.

STRICT RULES:
- Do NOT compute, calculate, or derive any new numbers.
- Use ONLY the data provided below. Do not infer beyond what is given.
- Return strictly valid JSON matching the schema defined below.
- Do NOT include any text outside the JSON object.
- Do NOT wrap the JSON in markdown code fences.
- Do NOT include HTML, markup, or script content in any field.
"""

_SECTION_TEMPLATE = """\
## {title}
```json
{data}
```
"""


class InsightPromptBuilder:
    """Builds a deterministic structured prompt from a signal summary.

    The summary is the only input; raw rows never reach the prompt.
    """

    def build_prompt(self, summary: SignalSummaryV1) -> str:
        """Build the full reasoning prompt.

        Args:
            summary: Bounded signal summary for one job.

        Returns:
            A fully formatted prompt string ready for LLM consumption.
        """
        payload = summary.model_dump(mode="json")
        sections = self._format_data_sections(
            dataset_overview={
                "record_count": payload["record_count"],
                "column_count": payload["column_count"],
                "numeric_column_count": payload["numeric_column_count"],
                "categorical_column_count": payload["categorical_column_count"],
                "column_type_counts": payload["column_type_counts"],
            },
            top_numeric_totals=payload["top_numeric_totals"],
            top_numeric_averages=payload["top_numeric_averages"],
            category_highlights=payload["category_highlights"],
            anomalies={
                "anomaly_count": payload["anomaly_count"],
                "sample_anomalies": payload["sample_anomalies"],
            },
        )

        return (
            f"{_SYSTEM_INSTRUCTIONS}\n"
            f"# PROVIDED DATA\n\n{sections}\n"
            f"# OUTPUT SCHEMA\n\n"
            f"Your response MUST conform to this JSON schema:\n\n"
            f"```json\n{_SCHEMA_JSON}\n```\n\n"
            f"# EXAMPLE OUTPUT\n\n"
            f"```json\n{_EXAMPLE_OUTPUT}\n```\n\n"
            f"# TASK\n\n"
            f"Summarize the provided signals into a single JSON object with an "
            f"executive summary, risks, opportunities and recommendations. "
            f"Do not compute. Use only provided data."
        )

    def _format_data_sections(self, **data: object) -> str:
        parts = []
        for key, value in data.items():
            title = key.replace("_", " ").title()
            body = json.dumps(value, indent=2, sort_keys=False, default=str)
            parts.append(_SECTION_TEMPLATE.format(title=title, data=body))
        return "\n".join(parts)
