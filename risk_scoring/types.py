"""
Risk Scoring Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for the weighted-indicator Risk Scoring Engine.

This module defines all types, enums, and dataclasses used
by the scoring pipeline: documents flowing in, indicator
definitions and scores, entity profiles, and the alerts
flowing out.

============================================================
DESIGN PRINCIPLES
============================================================
- All types are immutable
- Enums for discrete level values
- Dataclasses for structured data
- Clear separation between input and output types

============================================================
TWO-LEVEL WEIGHTING
============================================================
Each indicator carries two distinct constants:

1. weight - scales the fraction of trigger phrases matched
2. combination weight - the indicator's share of the
   overall score, held by the catalog

Both are required for numeric reproducibility.

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple


NATIONAL_ENTITY = "NATIONAL"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# ENUMS
# ============================================================


class AlertLevel(str, Enum):
    """
    Ordinal alert level classification.

    Score bands (strict lower bound):
    - CRITICAL: score > 0.8
    - HIGH: score > 0.6
    - MEDIUM: score > 0.4
    - LOW: everything else
    """

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @classmethod
    def from_score(cls, score: float) -> "AlertLevel":
        """
        Classify a score in [0, 1] into an alert level.

        Exact boundary values (0.8, 0.6, 0.4) fall into the
        lower band.
        """
        if score > 0.8:
            return cls.CRITICAL
        elif score > 0.6:
            return cls.HIGH
        elif score > 0.4:
            return cls.MEDIUM
        return cls.LOW

    @property
    def severity_order(self) -> int:
        """Numeric ordering for severity comparison."""
        return {"LOW": 0, "MEDIUM": 1, "HIGH": 2, "CRITICAL": 3}[self.value]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.severity_order < other.severity_order

    def __le__(self, other: object) -> bool:
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.severity_order <= other.severity_order

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.severity_order > other.severity_order

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.severity_order >= other.severity_order


class VerificationStatus(str, Enum):
    """Verification outcome for a single piece of content."""

    VERIFIED = "VERIFIED"
    PARTIALLY_VERIFIED = "PARTIALLY_VERIFIED"
    UNVERIFIED = "UNVERIFIED"
    DISPUTED = "DISPUTED"
    FALSE = "FALSE"

    @classmethod
    def from_score(cls, score: float) -> "VerificationStatus":
        """Classify a credibility score (inclusive lower bounds)."""
        if score >= 0.8:
            return cls.VERIFIED
        elif score >= 0.6:
            return cls.PARTIALLY_VERIFIED
        elif score >= 0.4:
            return cls.UNVERIFIED
        elif score >= 0.2:
            return cls.DISPUTED
        return cls.FALSE


# ============================================================
# INPUT DATA CONTRACTS
# ============================================================


@dataclass(frozen=True)
class Document:
    """
    A single retrieved text document.

    Owned by the caller; the engine only reads it for the
    duration of one scoring run.
    """

    source: str
    content: str
    timestamp: datetime = field(default_factory=_utcnow)

    # Optional retrieval metadata
    title: str = ""
    url: Optional[str] = None

    def mentions(self, phrase: str) -> bool:
        """Case-insensitive containment check."""
        return phrase.casefold() in self.content.casefold()


@dataclass(frozen=True)
class IndicatorDefinition:
    """
    A named indicator category.

    Trigger phrases are case-folded and de-duplicated on
    construction, preserving their declared order.
    """

    name: str
    weight: float
    trigger_phrases: Tuple[str, ...]

    def __post_init__(self) -> None:
        seen: Dict[str, None] = {}
        for phrase in self.trigger_phrases:
            folded = phrase.strip().casefold()
            if folded:
                seen.setdefault(folded, None)
        object.__setattr__(self, "trigger_phrases", tuple(seen))

    @property
    def phrase_count(self) -> int:
        return len(self.trigger_phrases)


@dataclass(frozen=True)
class EntityProfile:
    """Static per-entity baseline (e.g. a county's historical risk)."""

    entity_name: str
    baseline_multiplier: float = 1.0


# ============================================================
# OUTPUT DATA CONTRACTS
# ============================================================


@dataclass(frozen=True)
class IndicatorScore:
    """Per-indicator result of one scoring run."""

    indicator_name: str
    raw_match_count: int
    normalized_score: float
    matched_phrases: Tuple[str, ...] = ()

    @property
    def is_matched(self) -> bool:
        return self.raw_match_count > 0


@dataclass(frozen=True)
class OverallScore:
    """
    Combined result of scoring one corpus against a catalog.

    ============================================================
    OUTPUT GUARANTEES
    ============================================================
    - value: Always within [0, 1]
    - triggered_indicators: Catalog order, never re-sorted
    - per_indicator: One entry per catalog indicator

    ============================================================
    """

    value: float = 0.0
    triggered_indicators: Tuple[str, ...] = ()
    per_indicator: Dict[str, IndicatorScore] = field(default_factory=dict)

    # Source names of the scored documents, first-seen order
    sources: Tuple[str, ...] = ()
    document_count: int = 0
    catalog_id: Optional[str] = None

    @property
    def is_zero(self) -> bool:
        """True when nothing matched (or nothing was scored)."""
        return self.value <= 0.0

    def normalized(self, indicator_name: str) -> float:
        """Normalized score for one indicator (0.0 if absent)."""
        score = self.per_indicator.get(indicator_name)
        return score.normalized_score if score else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": round(self.value, 4),
            "triggered_indicators": list(self.triggered_indicators),
            "per_indicator": {
                name: {
                    "raw_match_count": s.raw_match_count,
                    "normalized_score": round(s.normalized_score, 4),
                    "matched_phrases": list(s.matched_phrases),
                }
                for name, s in self.per_indicator.items()
            },
            "document_count": self.document_count,
            "catalog_id": self.catalog_id,
        }


class EntityEvaluation(NamedTuple):
    """Level and adjusted score for one entity (or the nation)."""

    level: AlertLevel
    adjusted_score: float


@dataclass(frozen=True)
class Alert:
    """
    Structured alert for one entity or the nation.

    Created fresh every run and never mutated.
    """

    level: AlertLevel
    score: float
    entity_name: str
    indicators: Tuple[str, ...] = ()
    sources: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def is_national(self) -> bool:
        return self.entity_name == NATIONAL_ENTITY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "level": self.level.value,
            "score": self.score,
            "entity_name": self.entity_name,
            "indicators": list(self.indicators),
            "sources": list(self.sources),
            "recommendations": list(self.recommendations),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class AlertSet:
    """Alert rollup produced by the AlertAggregator."""

    per_entity: Tuple[Alert, ...] = ()
    national: Optional[Alert] = None

    @property
    def is_empty(self) -> bool:
        return not self.per_entity and self.national is None

    def ranked(self) -> List[Alert]:
        """All alerts, descending by score."""
        alerts = list(self.per_entity)
        if self.national is not None:
            alerts.append(self.national)
        return sorted(alerts, key=lambda a: a.score, reverse=True)


@dataclass(frozen=True)
class MonitoringResult:
    """
    Complete output of one monitoring request.

    This is the sole contract the presentation layer
    depends on.
    """

    alerts: Tuple[Alert, ...]
    national_risk_level: AlertLevel
    narrative: str
    preventive_measures: Tuple[str, ...]
    source_count: int
    overall: OverallScore
    catalog_id: str
    generated_at: datetime = field(default_factory=_utcnow)
    message: Optional[str] = None

    # "template" or "generated"
    narrative_source: str = "template"

    @property
    def has_alerts(self) -> bool:
        return bool(self.alerts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alerts": [a.to_dict() for a in self.alerts],
            "national_risk_level": self.national_risk_level.value,
            "narrative": self.narrative,
            "narrative_source": self.narrative_source,
            "preventive_measures": list(self.preventive_measures),
            "source_count": self.source_count,
            "generated_at": self.generated_at.isoformat(),
            "catalog_id": self.catalog_id,
            "overall": self.overall.to_dict(),
            "message": self.message,
            "monitoring_active": True,
        }


@dataclass(frozen=True)
class CredibilityAssessment:
    """Credibility analysis of a single piece of content."""

    verification_status: VerificationStatus
    confidence_score: float
    risk_level: AlertLevel
    indicators: Tuple[str, ...]
    pattern_score: float
    source_reliability: float
    fact_check_sources: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()

    # Filled in by the service when requested
    counter_narrative: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "verification_status": self.verification_status.value,
            "confidence_score": self.confidence_score,
            "risk_level": self.risk_level.value,
            "indicators": list(self.indicators),
            "pattern_score": round(self.pattern_score, 4),
            "source_reliability": self.source_reliability,
            "fact_check_sources": list(self.fact_check_sources),
            "recommendations": list(self.recommendations),
            "counter_narrative": self.counter_narrative,
        }


# ============================================================
# ERROR TYPES
# ============================================================


class RiskScoringError(Exception):
    """
    Base exception for risk scoring errors.

    Every subclass signals a configuration or programming
    defect; data insufficiency is never an error.
    """

    def __init__(self, message: str, catalog_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.catalog_id = catalog_id


class CatalogNotFoundError(RiskScoringError):
    """Raised when a catalog id is not registered."""
    pass


class CatalogConfigurationError(RiskScoringError):
    """Raised when a catalog definition is malformed."""
    pass


class ProfileConfigurationError(RiskScoringError):
    """Raised when an entity profile table is malformed."""
    pass
