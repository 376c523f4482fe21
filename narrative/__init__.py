"""
Narrative Enrichment - Optional generated summaries, accuracy
estimates and counter-narratives.

Usage:
    from narrative import DeepSeekTextGenerator, NarrativeSummarizer

    generator = DeepSeekTextGenerator.from_config(config.narrative)
    summarizer = NarrativeSummarizer(generator, config.narrative)

    result = await summarizer.summarize(overall, alerts, documents)
    print(result.text, result.source)

Without a generator, or on any failure, the summarizer returns
the deterministic "{N} indicator(s) triggered; risk assessed as
{LEVEL}." template, and the counter-narrative generator returns
a fixed advisory.
"""

from .exceptions import GenerationError, MalformedResponseError, NarrativeError
from .counter_narrative import (
    DEFAULT_LANGUAGE,
    FALLBACK_COUNTER_NARRATIVE,
    SUPPORTED_LANGUAGES,
    CounterNarrativeGenerator,
)
from .generator import DeepSeekTextGenerator, TextGenerator
from .summarizer import (
    GENERATED,
    TEMPLATE,
    CredibilityVerifier,
    NarrativeResult,
    NarrativeSummarizer,
    VerificationResult,
    parse_json_object,
)


__all__ = [
    "TextGenerator",
    "DeepSeekTextGenerator",
    "NarrativeSummarizer",
    "NarrativeResult",
    "CredibilityVerifier",
    "VerificationResult",
    "CounterNarrativeGenerator",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    "FALLBACK_COUNTER_NARRATIVE",
    "parse_json_object",
    "TEMPLATE",
    "GENERATED",
    "NarrativeError",
    "GenerationError",
    "MalformedResponseError",
]
