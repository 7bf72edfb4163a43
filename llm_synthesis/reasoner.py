"""Insight reasoning over a bounded signal summary.

Wraps prompt building, the adapter call and output validation into one call
that either returns a trusted ``BusinessInsightV1`` or raises
``ReasoningFailure``. No retries: a malformed response fails the job.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from llm_synthesis.adapter import BaseLLMAdapter, LLMCompletion
from llm_synthesis.errors import LLMAdapterError, ReasoningFailure
from llm_synthesis.prompt_builder import InsightPromptBuilder
from llm_synthesis.schema import BusinessInsightV1
from llm_synthesis.validator import DEFAULT_MAX_RESPONSE_CHARS, validate_llm_output
from signals.errors import ProcessingCancelledError, raise_if_cancelled
from signals.schema import SignalSummaryV1

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_VERSION = "v1.0"
_CANCEL_POLL_SECONDS = 0.05


@dataclass(frozen=True)
class ReasoningResult:
    insight: BusinessInsightV1
    raw_response: str
    metadata: Dict[str, Any] = field(default_factory=dict)


class InsightReasoner:
    """Turns a ``SignalSummaryV1`` into a validated business insight."""

    def __init__(
        self,
        adapter: BaseLLMAdapter,
        *,
        prompt_builder: Optional[InsightPromptBuilder] = None,
        prompt_version: str = DEFAULT_PROMPT_VERSION,
        max_response_chars: int = DEFAULT_MAX_RESPONSE_CHARS,
    ) -> None:
        self._adapter = adapter
        self._prompt_builder = prompt_builder or InsightPromptBuilder()
        self._prompt_version = prompt_version
        self._max_response_chars = max_response_chars

    def reason(
        self,
        summary: SignalSummaryV1,
        cancel_event: Optional[threading.Event] = None,
    ) -> ReasoningResult:
        """Generate and validate an insight for ``summary``.

        Raises:
            TypeError: If ``summary`` is not a ``SignalSummaryV1``.
            ReasoningFailure: If the call fails or the output is untrusted.
            ProcessingCancelledError: If ``cancel_event`` fires before or during the call.
        """
        if not isinstance(summary, SignalSummaryV1):
            raise TypeError(
                f"InsightReasoner only accepts SignalSummaryV1, got {type(summary).__name__}."
            )

        raise_if_cancelled(cancel_event, "reasoning request")
        prompt = self._prompt_builder.build_prompt(summary)

        started = time.perf_counter()
        try:
            completion = self._generate(prompt, cancel_event)
        except (ReasoningFailure, ProcessingCancelledError):
            raise
        except Exception as exc:
            raise LLMAdapterError(f"LLM adapter failed: {exc}") from exc
        latency_ms = int((time.perf_counter() - started) * 1000)
        raise_if_cancelled(cancel_event, "reasoning response")

        payload = validate_llm_output(completion.text, max_chars=self._max_response_chars)
        insight = BusinessInsightV1.from_payload(payload, generated_at=datetime.now(timezone.utc))

        metadata = {
            "prompt_version": self._prompt_version,
            "model": completion.model,
            "input_tokens": completion.input_tokens,
            "output_tokens": completion.output_tokens,
            "total_tokens": completion.total_tokens,
            "latency_ms": latency_ms,
        }
        logger.debug(
            "LLM usage model=%s input=%s output=%s total=%s latency_ms=%d",
            completion.model,
            completion.input_tokens,
            completion.output_tokens,
            completion.total_tokens,
            latency_ms,
        )
        return ReasoningResult(
            insight=insight,
            raw_response=completion.text.strip(),
            metadata=metadata,
        )

    def _generate(
        self,
        prompt: str,
        cancel_event: Optional[threading.Event],
    ) -> LLMCompletion:
        """Run the adapter call, abandoning it if ``cancel_event`` fires first.

        The call runs on a worker thread so a slow provider cannot hold the
        caller past cancellation. An abandoned call finishes in the background
        and its result is discarded.
        """
        if cancel_event is None:
            return self._adapter.generate(prompt)

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="llm-generate")
        future = executor.submit(self._adapter.generate, prompt)
        try:
            while True:
                done, _ = wait((future,), timeout=_CANCEL_POLL_SECONDS)
                if done:
                    return future.result()
                if cancel_event.is_set():
                    future.cancel()
                    logger.info("Abandoning in-flight LLM call after cancellation")
                    raise_if_cancelled(cancel_event, "reasoning request")
        finally:
            executor.shutdown(wait=False)
