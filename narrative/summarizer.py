"""
Narrative Summarizer - Optional free-text enrichment.

============================================================
PURPOSE
============================================================
Adds a generated one-paragraph risk summary to a monitoring
result, and an accuracy estimate to credibility checks.

============================================================
DEGRADATION
============================================================
Every call is bounded by NarrativeConfig.timeout_seconds and
is attempted once. On timeout, provider error, malformed
output or a missing generator the deterministic template is
returned instead. Neither class ever raises.

============================================================
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from risk_scoring.config import NarrativeConfig
from risk_scoring.engine import template_narrative
from risk_scoring.evaluator import classify
from risk_scoring.types import Alert, Document, OverallScore

from .exceptions import MalformedResponseError
from .generator import TextGenerator


logger = logging.getLogger(__name__)


TEMPLATE = "template"
GENERATED = "generated"

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def parse_json_object(text: str) -> dict[str, Any]:
    """
    Extract a JSON object from model output.

    Tolerates surrounding code fences and prose.

    Raises:
        MalformedResponseError: If no object can be decoded
    """
    cleaned = _FENCE_RE.sub("", text.strip())
    match = _OBJECT_RE.search(cleaned)
    if match:
        cleaned = match.group(0)
    try:
        data = json.loads(cleaned)
    except ValueError as e:
        raise MalformedResponseError("Output is not JSON") from e
    if not isinstance(data, dict):
        raise MalformedResponseError("Output is not a JSON object")
    return data


@dataclass(frozen=True)
class NarrativeResult:
    """Summary text and where it came from ("template" or "generated")."""

    text: str
    source: str = TEMPLATE

    @property
    def is_generated(self) -> bool:
        return self.source == GENERATED


# ============================================================
# SUMMARIZER
# ============================================================


class NarrativeSummarizer:
    """
    Generates a short risk summary for a scored batch.

    Usage:
        summarizer = NarrativeSummarizer(generator, config.narrative)
        result = await summarizer.summarize(overall, alerts, documents)
    """

    def __init__(
        self,
        generator: Optional[TextGenerator] = None,
        config: Optional[NarrativeConfig] = None,
    ) -> None:
        self._generator = generator
        self._config = config or NarrativeConfig()

    @property
    def is_available(self) -> bool:
        return self._generator is not None and self._config.enabled

    def build_prompt(
        self,
        overall: OverallScore,
        alerts: Sequence[Alert],
        documents: Sequence[Document] = (),
    ) -> str:
        indicator_lines = "\n".join(
            f"- {name}: {score.normalized_score:.2f}"
            for name, score in overall.per_indicator.items()
        )
        alert_lines = "\n".join(
            f"- {a.entity_name}: {a.level.value} ({a.score:.2f})" for a in alerts
        ) or "- none"

        limit = self._config.context_chars_per_document
        context = "\n".join(
            f"{d.source}: {d.content[:limit]}"
            for d in documents[: self._config.context_documents]
        ) or "(no documents)"

        return (
            "Analyze the following recent political data from Kenya for crisis risk assessment.\n\n"
            f"INDICATOR SCORES:\n{indicator_lines}\n"
            f"- overall: {overall.value:.2f}\n\n"
            f"ALERTS:\n{alert_lines}\n\n"
            f"RECENT DATA:\n{context}\n\n"
            "Respond with a JSON object only:\n"
            '{"summary": "brief assessment summary, at most three sentences"}'
        )

    def fallback(self, overall: OverallScore) -> NarrativeResult:
        return NarrativeResult(
            text=template_narrative(len(overall.triggered_indicators), classify(overall.value)),
            source=TEMPLATE,
        )

    async def summarize(
        self,
        overall: OverallScore,
        alerts: Sequence[Alert],
        documents: Sequence[Document] = (),
    ) -> NarrativeResult:
        """
        Summarize a scored batch.

        Returns within timeout_seconds. Never raises.
        """
        if not self.is_available:
            return self.fallback(overall)

        prompt = self.build_prompt(overall, alerts, documents)
        try:
            text = await asyncio.wait_for(
                self._generator.generate(
                    prompt,
                    temperature=self._config.temperature,
                    max_tokens=self._config.max_tokens,
                ),
                timeout=self._config.timeout_seconds,
            )
            summary = parse_json_object(text).get("summary")
            if not isinstance(summary, str) or not summary.strip():
                raise MalformedResponseError("Missing 'summary' field")
        except asyncio.TimeoutError:
            logger.warning(
                f"Narrative generation timed out after {self._config.timeout_seconds}s"
            )
            return self.fallback(overall)
        except Exception as e:
            logger.warning(f"Narrative generation failed: {e}")
            return self.fallback(overall)

        return NarrativeResult(text=summary.strip(), source=GENERATED)


# ============================================================
# CREDIBILITY VERIFIER
# ============================================================


@dataclass(frozen=True)
class VerificationResult:
    """External accuracy estimate for one piece of content."""

    likelihood_accurate: Optional[float] = None
    key_concerns: Tuple[str, ...] = ()


class CredibilityVerifier:
    """
    Estimates the likelihood that content is accurate and lists
    the verifier's concerns.

    An unavailable or unusable answer yields an empty
    VerificationResult; callers treat a None likelihood as the
    neutral 0.5.
    """

    CONTENT_CHARS = 500
    MAX_CONCERNS = 5

    def __init__(
        self,
        generator: Optional[TextGenerator] = None,
        config: Optional[NarrativeConfig] = None,
    ) -> None:
        self._generator = generator
        self._config = config or NarrativeConfig()

    def build_prompt(self, content: str) -> str:
        return (
            "As an expert fact-checker specializing in Kenyan politics, "
            "analyze this content for accuracy:\n\n"
            f'CONTENT TO VERIFY:\n"{content[: self.CONTENT_CHARS]}"\n\n'
            "Analyze for factual accuracy, logical consistency, potential bias "
            "or manipulation, and missing context.\n\n"
            "Respond with a JSON object only:\n"
            '{"likelihood_accurate": 0.0-1.0, "key_concerns": ["concern1", "concern2"]}'
        )

    async def verify(self, content: str) -> VerificationResult:
        if self._generator is None or not self._config.enabled:
            return VerificationResult()

        try:
            text = await asyncio.wait_for(
                self._generator.generate(
                    self.build_prompt(content),
                    temperature=self._config.temperature,
                    max_tokens=self._config.max_tokens,
                ),
                timeout=self._config.timeout_seconds,
            )
            data = parse_json_object(text)
        except asyncio.TimeoutError:
            logger.warning(
                f"Credibility verification timed out after {self._config.timeout_seconds}s"
            )
            return VerificationResult()
        except Exception as e:
            logger.warning(f"Credibility verification failed: {e}")
            return VerificationResult()

        value = data.get("likelihood_accurate")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning("Verifier answer has no numeric 'likelihood_accurate'")
            likelihood = None
        else:
            likelihood = max(0.0, min(1.0, float(value)))

        concerns = data.get("key_concerns")
        if not isinstance(concerns, list):
            concerns = []
        key_concerns = tuple(
            c.strip() for c in concerns if isinstance(c, str) and c.strip()
        )[: self.MAX_CONCERNS]

        return VerificationResult(likelihood_accurate=likelihood, key_concerns=key_concerns)
