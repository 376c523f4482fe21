"""
Risk Scoring Engine - Credibility Assessment.

============================================================
PURPOSE
============================================================
Credibility scoring for a single piece of content, used by
the misinformation detector.

============================================================
SCORING
============================================================
score = (1 - pattern) * 0.30
      + source_reliability * 0.25
      + fact_check * 0.25
      + ai_likelihood * 0.20

pattern: misinformation catalog overall value
fact_check: 0.7 when supporting > contradicting, else 0.3
ai_likelihood: external estimate, 0.5 only when no estimate
               came back; a returned 0.0 counts as 0.0

Indicators are the triggered catalog indicators followed by
any concerns the external verifier listed.

============================================================
RISK LEVEL
============================================================
CRITICAL: inflammatory > 0.7 or score < 0.2
HIGH:     inflammatory > 0.5 or score < 0.4
MEDIUM:   score < 0.6
LOW:      otherwise

============================================================
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .catalogs import Catalog
from .recommendations import RecommendationEngine
from .scorer import DocumentScorer
from .types import (
    AlertLevel,
    CredibilityAssessment,
    Document,
    VerificationStatus,
)


PATTERN_WEIGHT = 0.3
SOURCE_WEIGHT = 0.25
FACT_CHECK_WEIGHT = 0.25
AI_WEIGHT = 0.2

NEUTRAL_AI_LIKELIHOOD = 0.5

RELIABLE_SOURCES = (
    "nation.co.ke",
    "standardmedia.co.ke",
    "the-star.co.ke",
    "kbc.co.ke",
    "capitalfm.co.ke",
    "africanews.com",
    "bbc.com",
    "reuters.com",
    "gov.ke",
    "iebc.or.ke",
    "parliament.go.ke",
)

UNRELIABLE_PATTERNS = (
    "facebook.com",
    "whatsapp",
    "twitter.com",
    "telegram",
    "anonymous",
    "blog",
    "rumor",
)

CONTRADICTORY_PAIRS = (
    ("said", "did not say"),
    ("confirmed", "denied"),
    ("approved", "rejected"),
    ("increased", "decreased"),
    ("true", "false"),
)

MAX_EVIDENCE = 3
MAX_RELEVANT_SOURCES = 5
MAX_AI_CONCERNS = 5
EXCERPT_CHARS = 100


# ============================================================
# SOURCE RELIABILITY
# ============================================================


def assess_source_reliability(source: Optional[str]) -> float:
    """
    Reliability of a content source.

    Returns:
        0.3 unknown, 0.9 reliable outlet, 0.2 unreliable
        pattern, 0.5 otherwise
    """
    if not source or source == "unknown":
        return 0.3

    lowered = source.lower()
    if any(domain in lowered for domain in RELIABLE_SOURCES):
        return 0.9
    if any(pattern in lowered for pattern in UNRELIABLE_PATTERNS):
        return 0.2
    return 0.5


# ============================================================
# FACT-CHECK EVIDENCE
# ============================================================


def extract_key_claims(content: str, limit: int = 3) -> List[str]:
    """First sentences long enough to carry a claim."""
    sentences = [s.strip() for s in re.split(r"[.!?]+", content)]
    return [s for s in sentences if len(s) > 10][:limit]


def find_contradictions(original: str, candidate: str) -> bool:
    original_lower = original.lower()
    candidate_lower = candidate.lower()
    return any(
        claim in original_lower and denial in candidate_lower
        for claim, denial in CONTRADICTORY_PAIRS
    )


def find_support(original: str, candidate: str) -> bool:
    """More than three shared words longer than four characters."""
    candidate_words = set(candidate.lower().split(" "))
    common = [
        word for word in original.lower().split(" ")
        if len(word) > 4 and word in candidate_words
    ]
    return len(common) > 3


@dataclass(frozen=True)
class FactCheckEvidence:
    """Corroborating and contradicting documents, counted and excerpted."""

    supporting: int = 0
    contradicting: int = 0
    relevant_sources: Tuple[str, ...] = ()
    supporting_excerpts: Tuple[str, ...] = ()
    contradicting_excerpts: Tuple[str, ...] = ()

    @classmethod
    def from_documents(
        cls,
        content: str,
        documents: Sequence[Document],
    ) -> "FactCheckEvidence":
        contradicting = [d for d in documents if find_contradictions(content, d.content)][:MAX_EVIDENCE]
        supporting = [d for d in documents if find_support(content, d.content)][:MAX_EVIDENCE]
        return cls(
            supporting=len(supporting),
            contradicting=len(contradicting),
            relevant_sources=tuple(d.source for d in documents)[:MAX_RELEVANT_SOURCES],
            supporting_excerpts=tuple(d.content[:EXCERPT_CHARS] for d in supporting),
            contradicting_excerpts=tuple(d.content[:EXCERPT_CHARS] for d in contradicting),
        )

    @property
    def score(self) -> float:
        return 0.7 if self.supporting > self.contradicting else 0.3


# ============================================================
# ASSESSOR
# ============================================================


class CredibilityAssessor:
    """
    Combines pattern, source, fact-check and AI signals.

    Usage:
        assessor = CredibilityAssessor(MISINFORMATION_CATALOG)
        result = assessor.assess(text, "nation.co.ke", evidence, 0.8)
    """

    def __init__(
        self,
        catalog: Catalog,
        scorer: Optional[DocumentScorer] = None,
        recommender: Optional[RecommendationEngine] = None,
    ) -> None:
        self._catalog = catalog
        self._scorer = scorer or DocumentScorer()
        self._recommender = recommender or RecommendationEngine()

    def assess(
        self,
        content: str,
        source: Optional[str] = None,
        evidence: Optional[FactCheckEvidence] = None,
        ai_likelihood: Optional[float] = None,
        ai_concerns: Sequence[str] = (),
    ) -> CredibilityAssessment:
        evidence = evidence or FactCheckEvidence()
        # None means no estimate; 0.0 is a real "inaccurate" answer
        if ai_likelihood is None:
            ai_likelihood = NEUTRAL_AI_LIKELIHOOD
        ai_likelihood = max(0.0, min(1.0, ai_likelihood))

        pattern = self._scorer.score(
            [Document(source=source or "unknown", content=content)],
            self._catalog,
        )
        reliability = assess_source_reliability(source)

        score = (
            (1 - pattern.value) * PATTERN_WEIGHT
            + reliability * SOURCE_WEIGHT
            + evidence.score * FACT_CHECK_WEIGHT
            + ai_likelihood * AI_WEIGHT
        )

        risk_level = self._risk_level(score, pattern.normalized("inflammatory_content"))

        return CredibilityAssessment(
            verification_status=VerificationStatus.from_score(score),
            confidence_score=round(score, 2),
            risk_level=risk_level,
            indicators=self._indicators(pattern.triggered_indicators, ai_concerns),
            pattern_score=pattern.value,
            source_reliability=reliability,
            fact_check_sources=evidence.relevant_sources,
            recommendations=tuple(self._recommender.recommend_for_credibility(risk_level)),
        )

    @staticmethod
    def _indicators(triggered: Sequence[str], concerns: Sequence[str]) -> Tuple[str, ...]:
        merged = list(triggered)
        for concern in list(concerns)[:MAX_AI_CONCERNS]:
            if concern not in merged:
                merged.append(concern)
        return tuple(merged)

    @staticmethod
    def _risk_level(score: float, inflammatory: float) -> AlertLevel:
        if inflammatory > 0.7 or score < 0.2:
            return AlertLevel.CRITICAL
        elif inflammatory > 0.5 or score < 0.4:
            return AlertLevel.HIGH
        elif score < 0.6:
            return AlertLevel.MEDIUM
        return AlertLevel.LOW
