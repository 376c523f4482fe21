"""
Risk Scoring Engine - Alert Aggregator.

============================================================
PURPOSE
============================================================
Turns one corpus-level score into per-entity and national
alerts.

============================================================
ENTITY DISCOVERY
============================================================
1. A document mentions an entity when its content contains
   the entity name (case-insensitive)
2. An entity is kept only if at least one mentioning
   document contains a catalog trigger phrase
3. Kept entities are ranked by mentioning-document count
   (ties keep candidate order) and capped at max_entities

Every entity alert reuses the global triggered indicators;
only the score, level and sources are entity-specific.

============================================================
NATIONAL ALERT
============================================================
Emitted only when the unmodified overall value exceeds
national_alert_threshold.

============================================================
REQUESTED ENTITY
============================================================
An entity the caller asked about is always evaluated while
the overall value is above zero, mentioned or not; its
sources are the documents that mention it.

============================================================
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .catalogs import Catalog
from .config import AggregationConfig
from .evaluator import EntityRiskEvaluator
from .profiles import KEY_COUNTIES, ProfileTable
from .recommendations import RecommendationEngine
from .scorer import DocumentScorer, unique_sources
from .types import (
    NATIONAL_ENTITY,
    Alert,
    AlertLevel,
    AlertSet,
    Document,
    OverallScore,
)


logger = logging.getLogger(__name__)


class AlertAggregator:
    """
    Builds AlertSets from scored document batches.

    All collaborators are stateless; the aggregator may be
    shared across concurrent requests.
    """

    def __init__(
        self,
        config: Optional[AggregationConfig] = None,
        scorer: Optional[DocumentScorer] = None,
        evaluator: Optional[EntityRiskEvaluator] = None,
        recommender: Optional[RecommendationEngine] = None,
    ) -> None:
        self._config = config or AggregationConfig()
        self._scorer = scorer or DocumentScorer()
        self._evaluator = evaluator or EntityRiskEvaluator()
        self._recommender = recommender or RecommendationEngine()

    # ---- discovery

    def discover_entities(
        self,
        documents: Sequence[Document],
        catalog: Catalog,
        entity_candidates: Iterable[str],
    ) -> List[Tuple[str, List[Document]]]:
        """
        Entities with at least one triggering mention, ranked.

        Returns:
            (entity_name, mentioning documents) pairs, capped at
            max_entities
        """
        found: List[Tuple[str, List[Document]]] = []

        for entity_name in entity_candidates:
            mentioning = [d for d in documents if d.mentions(entity_name)]
            if not mentioning:
                continue
            if not any(self._scorer.has_any_trigger(d, catalog) for d in mentioning):
                logger.debug(f"Skipping {entity_name}: mentioned without indicators")
                continue
            found.append((entity_name, mentioning))

        # sorted() is stable, so ties keep candidate order
        ranked = sorted(found, key=lambda pair: len(pair[1]), reverse=True)
        return ranked[: self._config.max_entities]

    # ---- alert construction

    def _entity_alert(
        self,
        entity_name: str,
        mentioning: Sequence[Document],
        overall: OverallScore,
        catalog: Catalog,
        profiles: ProfileTable,
    ) -> Alert:
        profile = profiles.get_or_default(
            entity_name,
            self._config.default_baseline_multiplier,
        )
        evaluation = self._evaluator.evaluate(overall, profile)
        return Alert(
            level=evaluation.level,
            score=round(evaluation.adjusted_score, 2),
            entity_name=profile.entity_name,
            indicators=overall.triggered_indicators,
            sources=unique_sources(mentioning)[: self._config.entity_source_cap],
            recommendations=tuple(self._recommender.recommend(
                evaluation.level,
                profile.entity_name,
                overall.triggered_indicators,
                catalog_id=catalog.catalog_id,
            )),
        )

    def _national_alert(self, overall: OverallScore, catalog: Catalog) -> Optional[Alert]:
        if overall.value <= self._config.national_alert_threshold:
            return None

        evaluation = self._evaluator.evaluate(overall)
        return Alert(
            level=evaluation.level,
            score=round(evaluation.adjusted_score, 2),
            entity_name=NATIONAL_ENTITY,
            indicators=overall.triggered_indicators,
            sources=overall.sources[: self._config.national_source_cap],
            recommendations=tuple(self._recommender.recommend(
                evaluation.level,
                None,
                overall.triggered_indicators,
                catalog_id=catalog.catalog_id,
            )),
        )

    def build_alerts(
        self,
        documents: Sequence[Document],
        catalog: Catalog,
        entity_candidates: Iterable[str],
        profiles: ProfileTable,
        overall: Optional[OverallScore] = None,
        requested_entity: Optional[str] = None,
    ) -> AlertSet:
        """
        Build the alert rollup for one batch.

        Args:
            documents: Scored documents
            catalog: Catalog the batch is scored against
            entity_candidates: Names to look for, in priority order
            profiles: Baseline multipliers
            overall: Precomputed score; computed here when None
            requested_entity: Entity always evaluated when the
                overall value is above zero

        Returns:
            AlertSet; empty when nothing matched
        """
        if overall is None:
            overall = self._scorer.score(documents, catalog)

        if overall.is_zero:
            return AlertSet()

        selected = self.discover_entities(documents, catalog, entity_candidates)
        if requested_entity:
            key = requested_entity.casefold()
            others = [pair for pair in selected if pair[0].casefold() != key]
            mentioning = [d for d in documents if d.mentions(requested_entity)]
            selected = [(requested_entity, mentioning)] + others[: max(self._config.max_entities - 1, 0)]

        per_entity = [
            self._entity_alert(name, mentioning, overall, catalog, profiles)
            for name, mentioning in selected
        ]
        per_entity.sort(key=lambda a: a.score, reverse=True)

        national = self._national_alert(overall, catalog)

        logger.debug(
            f"Built {len(per_entity)} entity alert(s), "
            f"national={'yes' if national else 'no'}"
        )
        return AlertSet(per_entity=tuple(per_entity), national=national)

    def build_fallback_alerts(self, entity_name: Optional[str] = None) -> AlertSet:
        """
        Deterministic "all clear" alerts.

        A requested entity gets one LOW alert at 0.2; otherwise
        each key county gets a LOW alert at 0.15.
        """
        if entity_name:
            return AlertSet(per_entity=(
                Alert(
                    level=AlertLevel.LOW,
                    score=0.2,
                    entity_name=entity_name,
                    recommendations=tuple(self._recommender.fallback(requested=True)),
                ),
            ))

        return AlertSet(per_entity=tuple(
            Alert(
                level=AlertLevel.LOW,
                score=0.15,
                entity_name=county,
                recommendations=tuple(self._recommender.fallback(requested=False)),
            )
            for county in KEY_COUNTIES
        ))
