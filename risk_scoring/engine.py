"""
Risk Scoring Engine - Main Orchestrator.

============================================================
PURPOSE
============================================================
The RiskScoringEngine is the main entry point for scoring a
batch of retrieved documents.

It orchestrates:
1. Catalog lookup
2. Corpus scoring
3. Entity and national alert aggregation
4. Preventive measures
5. Result packaging (template narrative, fallback alerts)

============================================================
DESIGN PRINCIPLES
============================================================
- Single responsibility: orchestration only
- Delegates to scorer, aggregator and recommender
- Deterministic and stateless per call
- Synchronous; enrichment happens outside the engine

============================================================
USAGE
============================================================
    from risk_scoring import RiskScoringEngine, Document

    engine = RiskScoringEngine()

    result = engine.assess(
        [Document(source="nation.co.ke", content="...")],
        catalog_id="crisis",
    )

    print(f"National Level: {result.national_risk_level.value}")
    for alert in result.alerts:
        print(alert.entity_name, alert.level.value, alert.score)

============================================================
"""

import logging
from typing import Iterable, List, Optional, Sequence

from .aggregator import AlertAggregator
from .catalogs import IndicatorCatalog
from .config import RiskScoringConfig
from .evaluator import EntityRiskEvaluator, classify
from .profiles import ProfileTable
from .recommendations import RecommendationEngine
from .scorer import DocumentScorer
from .types import (
    AlertLevel,
    AlertSet,
    Document,
    MonitoringResult,
    OverallScore,
)


logger = logging.getLogger(__name__)


NO_DOCUMENTS_MESSAGE = "Crisis monitoring system active. No immediate threats detected."
NO_ALERTS_MESSAGE = "No immediate alerts. Routine monitoring continues."
NO_ENTITY_ALERTS_MESSAGE = "Indicators detected without a location-specific signal. See the national risk level."


def template_narrative(triggered_count: int, level: AlertLevel) -> str:
    """Deterministic one-line summary used when enrichment is unavailable."""
    return f"{triggered_count} indicator(s) triggered; risk assessed as {level.value}."


class RiskScoringEngine:
    """
    Main orchestrator for the Risk Scoring Engine.

    ============================================================
    RESPONSIBILITIES
    ============================================================
    1. Resolve the catalog by id
    2. Score the corpus once
    3. Build per-entity and national alerts
    4. Attach preventive measures
    5. Substitute "all clear" alerts when nothing matched

    ============================================================
    STATE
    ============================================================
    Only catalogs, profiles and configuration are held; no
    scores are kept between calls.

    ============================================================
    """

    def __init__(
        self,
        config: Optional[RiskScoringConfig] = None,
        catalogs: Optional[IndicatorCatalog] = None,
        profiles: Optional[ProfileTable] = None,
    ):
        """
        Initialize the Risk Scoring Engine.

        Args:
            config: Engine configuration. Uses defaults if not provided.
            catalogs: Catalog registry. Uses the built-in catalogs if not provided.
            profiles: Entity profiles. Uses the county table if not provided.
        """
        self.config = config or RiskScoringConfig()
        self.catalogs = catalogs or IndicatorCatalog.default()
        self.profiles = profiles if profiles is not None else ProfileTable.kenya_counties()

        self._scorer = DocumentScorer()
        self._recommender = RecommendationEngine(self.config.recommendations)
        self._aggregator = AlertAggregator(
            config=self.config.aggregation,
            scorer=self._scorer,
            evaluator=EntityRiskEvaluator(),
            recommender=self._recommender,
        )

    @property
    def recommender(self) -> RecommendationEngine:
        return self._recommender

    def score(self, documents: Sequence[Document], catalog_id: str) -> OverallScore:
        """
        Score documents against a catalog without building alerts.

        Raises:
            CatalogNotFoundError: If catalog_id is unknown
        """
        return self._scorer.score(documents, self.catalogs.get(catalog_id))

    def assess(
        self,
        documents: Sequence[Document],
        catalog_id: str,
        entity_candidates: Optional[Iterable[str]] = None,
        include_preventive_measures: bool = True,
        requested_entity: Optional[str] = None,
    ) -> MonitoringResult:
        """
        Perform a complete monitoring assessment.

        Args:
            documents: Retrieved documents (may be empty)
            catalog_id: Catalog to score against
            entity_candidates: Entity names to look for. Defaults to
                the requested entity, or every profiled entity.
            include_preventive_measures: Attach preventive measures
            requested_entity: Entity the caller asked about, if any

        Returns:
            MonitoringResult with ranked alerts

        Raises:
            CatalogNotFoundError: If catalog_id is unknown
        """
        # ---- Step 1: Resolve catalog
        catalog = self.catalogs.get(catalog_id)

        # ---- Step 2: Score corpus
        overall = self._scorer.score(documents, catalog)
        national_level = classify(overall.value)

        # ---- Step 3: Aggregate alerts
        if entity_candidates is None:
            entity_candidates = (
                [requested_entity] if requested_entity else self.profiles.entity_names
            )
        alert_set = self._aggregator.build_alerts(
            documents,
            catalog,
            entity_candidates,
            self.profiles,
            overall=overall,
            requested_entity=requested_entity,
        )

        # ---- Step 4: "All clear" only when nothing matched
        message: Optional[str] = None
        if overall.is_zero:
            alert_set = self._aggregator.build_fallback_alerts(requested_entity)
            message = NO_DOCUMENTS_MESSAGE if not documents else NO_ALERTS_MESSAGE
        elif alert_set.is_empty:
            message = NO_ENTITY_ALERTS_MESSAGE

        # ---- Step 5: Preventive measures
        measures: List[str] = []
        if include_preventive_measures:
            measures = self._recommender.preventive_measures(overall)

        logger.info(
            f"Assessed {len(documents)} document(s) against '{catalog_id}': "
            f"overall={overall.value:.3f} level={national_level.value} "
            f"alerts={len(alert_set.ranked())}"
        )

        return MonitoringResult(
            alerts=tuple(alert_set.ranked()),
            national_risk_level=national_level,
            narrative=template_narrative(len(overall.triggered_indicators), national_level),
            preventive_measures=tuple(measures),
            source_count=len(documents),
            overall=overall,
            catalog_id=catalog_id,
            message=message,
        )


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


def assess_documents(
    documents: Sequence[Document],
    catalog_id: str,
    config: Optional[RiskScoringConfig] = None,
) -> MonitoringResult:
    """
    Convenience function to assess documents in one call.

    For repeated scoring, prefer creating a persistent
    RiskScoringEngine instance.
    """
    return RiskScoringEngine(config=config).assess(documents, catalog_id)


def is_alert_set_actionable(alert_set: AlertSet) -> bool:
    """True if any alert is HIGH or CRITICAL."""
    return any(a.level >= AlertLevel.HIGH for a in alert_set.ranked())


def format_risk_summary(result: MonitoringResult) -> str:
    """
    Format a human-readable monitoring summary.

    Useful for logging and dashboards.
    """
    lines = [
        "=" * 50,
        "RISK MONITORING SUMMARY",
        "=" * 50,
        f"Catalog: {result.catalog_id}",
        f"Overall Score: {result.overall.value:.2f}",
        f"National Level: {result.national_risk_level.value}",
        f"Sources: {result.source_count}",
        f"Generated: {result.generated_at.isoformat()}",
        "",
        "Alerts:",
    ]
    for alert in result.alerts:
        lines.append(f"  {alert.entity_name:<16} {alert.level.value:<9} {alert.score:.2f}")
    if result.message:
        lines.extend(["", result.message])
    lines.extend(["", result.narrative, "=" * 50])

    return "\n".join(lines)
