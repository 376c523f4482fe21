"""
Counter-Narrative Generator - Fact-based responses to misleading content.

============================================================
PURPOSE
============================================================
Drafts a short, balanced reply to content the misinformation
detector analyzed, grounded in the fact-check excerpts that
retrieval found.

============================================================
DEGRADATION
============================================================
Same rules as the summarizer: one attempt, bounded by
NarrativeConfig.timeout_seconds. On timeout, provider error,
empty output or a missing generator the fixed advisory text is
returned. Never raises.

============================================================
"""

import asyncio
import logging
from typing import Optional

from risk_scoring.config import NarrativeConfig
from risk_scoring.credibility import FactCheckEvidence

from .generator import TextGenerator
from .summarizer import GENERATED, TEMPLATE, NarrativeResult


logger = logging.getLogger(__name__)


DEFAULT_LANGUAGE = "en"

LANGUAGE_INSTRUCTIONS = {
    "en": "Respond in clear English",
    "sw": "Jibu kwa Kiswahili",
    "ki": "Respond in Kikuyu",
    "luo": "Respond in Luo",
}

SUPPORTED_LANGUAGES = tuple(LANGUAGE_INSTRUCTIONS)

FALLBACK_COUNTER_NARRATIVE = (
    "Please verify this information through official government sources "
    "and credible news outlets."
)


class CounterNarrativeGenerator:
    """
    Generates counter-narratives in one of the supported languages.

    Unknown language codes fall back to English instructions.

    Usage:
        generator = CounterNarrativeGenerator(text_generator, config.narrative)
        result = await generator.generate(content, evidence, language="sw")
    """

    CONTENT_CHARS = 400
    # Warmer than scoring prompts; this is free prose
    TEMPERATURE = 0.3

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
        content: str,
        evidence: FactCheckEvidence,
        language: str = DEFAULT_LANGUAGE,
    ) -> str:
        instruction = LANGUAGE_INSTRUCTIONS.get(language, LANGUAGE_INSTRUCTIONS[DEFAULT_LANGUAGE])
        supporting = "; ".join(evidence.supporting_excerpts) or "None"
        contradicting = "; ".join(evidence.contradicting_excerpts) or "None"

        return (
            "Generate a fact-based counter-narrative to address this potentially "
            "misleading content about Kenyan politics:\n\n"
            f'ORIGINAL CLAIM:\n"{content[: self.CONTENT_CHARS]}"\n\n'
            "FACT-CHECK EVIDENCE:\n"
            f"Supporting Evidence: {supporting}\n"
            f"Contradictory Evidence: {contradicting}\n\n"
            "Create a factual, balanced response that:\n"
            "1. Addresses the main claims\n"
            "2. Provides accurate information\n"
            "3. Cites reliable sources\n"
            "4. Promotes unity and peaceful discourse\n"
            f"5. {instruction}\n\n"
            "Keep the response under 300 words and focus on facts, "
            "not attacking the original content."
        )

    def fallback(self) -> NarrativeResult:
        return NarrativeResult(text=FALLBACK_COUNTER_NARRATIVE, source=TEMPLATE)

    async def generate(
        self,
        content: str,
        evidence: Optional[FactCheckEvidence] = None,
        language: str = DEFAULT_LANGUAGE,
    ) -> NarrativeResult:
        """
        Draft a counter-narrative.

        Returns within timeout_seconds. Never raises.
        """
        if not self.is_available:
            return self.fallback()

        prompt = self.build_prompt(content, evidence or FactCheckEvidence(), language)
        try:
            text = await asyncio.wait_for(
                self._generator.generate(
                    prompt,
                    temperature=self.TEMPERATURE,
                    max_tokens=self._config.max_tokens,
                ),
                timeout=self._config.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Counter-narrative generation timed out after {self._config.timeout_seconds}s"
            )
            return self.fallback()
        except Exception as e:
            logger.warning(f"Counter-narrative generation failed: {e}")
            return self.fallback()

        if not isinstance(text, str) or not text.strip():
            logger.warning("Counter-narrative generation returned no text")
            return self.fallback()

        return NarrativeResult(text=text.strip(), source=GENERATED)
