"""Failures raised by the reasoning layer."""

from typing import List


class ReasoningFailure(Exception):
    """Raised when the reasoning collaborator fails or returns untrusted output.

    Nothing produced by a failed call is ever persisted as a structured insight.
    """


class LLMAdapterError(ReasoningFailure):
    """Raised when the LLM transport call fails (network, auth, timeout)."""


class LLMOutputValidationError(ReasoningFailure):
    """Raised when LLM output fails size, parsing, safety or schema checks.

    Attributes:
        stage: Which validation step failed ("size", "json_parse", "safety"
            or "schema").
        errors: List of human-readable error descriptions.
        raw_response: The original string that failed validation.
    """

    def __init__(
        self,
        stage: str,
        errors: List[str],
        raw_response: str,
    ) -> None:
        self.stage = stage
        self.errors = errors
        self.raw_response = raw_response
        message = (
            f"LLM output validation failed at stage '{stage}': "
            + "; ".join(errors)
        )
        super().__init__(message)
