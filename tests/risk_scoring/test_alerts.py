"""
Tests for Alert Aggregation, Recommendations and the Engine.

============================================================
PURPOSE
============================================================
TEST PRINCIPLES:
- Entities are alerted only on triggering mentions
- Output caps are respected
- Fallback alerts replace a rollup only when nothing matched
- Recommendation lists are never empty

============================================================
"""

import pytest

from risk_scoring import (
    CORRUPTION,
    CRISIS,
    CRISIS_CATALOG,
    KEY_COUNTIES,
    NATIONAL_ENTITY,
    AggregationConfig,
    AlertAggregator,
    AlertLevel,
    AlertSet,
    CatalogNotFoundError,
    Document,
    IndicatorScore,
    OverallScore,
    ProfileTable,
    RecommendationEngine,
    RiskScoringEngine,
    format_risk_summary,
    is_alert_set_actionable,
)
from risk_scoring.engine import NO_ALERTS_MESSAGE, NO_DOCUMENTS_MESSAGE, NO_ENTITY_ALERTS_MESSAGE


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def aggregator():
    return AlertAggregator()


@pytest.fixture
def profiles():
    return ProfileTable.kenya_counties()


@pytest.fixture
def engine():
    return RiskScoringEngine()


@pytest.fixture
def recommender():
    return RecommendationEngine()


@pytest.fixture
def turkana_documents():
    return [
        Document(source="nation.co.ke", content="Violent clash and protest reported in Turkana"),
        Document(source="kbc.co.ke", content="Nairobi traffic update for the weekend"),
    ]


# ============================================================
# ALERT AGGREGATOR
# ============================================================

class TestAlertAggregator:
    """Tests for per-entity and national rollups."""

    def test_mention_without_trigger_is_skipped(self, aggregator, profiles, turkana_documents):
        alert_set = aggregator.build_alerts(
            turkana_documents, CRISIS_CATALOG, profiles.entity_names, profiles,
        )

        names = [a.entity_name for a in alert_set.per_entity]
        assert names == ["Turkana"]
        assert alert_set.national is None

    def test_entity_score_uses_baseline(self, aggregator, profiles, turkana_documents):
        alert_set = aggregator.build_alerts(
            turkana_documents, CRISIS_CATALOG, ["Turkana"], profiles,
        )

        # 2 of 9 violence phrases: 0.2 * 0.3 = 0.06, then * 1.8
        alert = alert_set.per_entity[0]
        assert alert.score == pytest.approx(0.11)
        assert alert.level == AlertLevel.LOW
        assert alert.sources == ("nation.co.ke",)

    def test_unprofiled_entity_uses_default_multiplier(self, aggregator, profiles):
        docs = [Document(source="a", content="Protest and riot in Kajiado")]

        alert_set = aggregator.build_alerts(docs, CRISIS_CATALOG, ["Kajiado"], profiles)

        # 2 of 9: 0.2 * 0.3 = 0.06, then * 1.5
        assert alert_set.per_entity[0].score == pytest.approx(0.09)

    def test_entity_cap(self, aggregator, profiles):
        counties = ["Nairobi", "Mombasa", "Kisumu", "Nakuru", "Turkana", "Lamu", "Wajir"]
        docs = [Document(source=f"s{i}", content=f"Protest in {c}") for i, c in enumerate(counties)]

        alert_set = aggregator.build_alerts(docs, CRISIS_CATALOG, counties, profiles)

        assert len(alert_set.per_entity) == 5

    def test_ranking_by_mention_count(self, aggregator, profiles):
        docs = [
            Document(source="a", content="Protest in Lamu"),
            Document(source="b", content="Protest in Wajir"),
            Document(source="c", content="Riot in Wajir"),
        ]
        config = AggregationConfig(max_entities=1)

        alert_set = AlertAggregator(config=config).build_alerts(
            docs, CRISIS_CATALOG, ["Lamu", "Wajir"], profiles,
        )

        assert [a.entity_name for a in alert_set.per_entity] == ["Wajir"]

    def test_entity_source_cap(self, aggregator, profiles):
        docs = [Document(source=f"outlet{i}", content="Riot in Nairobi") for i in range(8)]

        alert_set = aggregator.build_alerts(docs, CRISIS_CATALOG, ["Nairobi"], profiles)

        assert alert_set.per_entity[0].sources == tuple(f"outlet{i}" for i in range(5))

    def test_national_alert_above_threshold(self, aggregator, profiles):
        overall = OverallScore(
            value=0.55,
            triggered_indicators=("violence_keywords",),
            sources=tuple(f"s{i}" for i in range(12)),
            catalog_id=CRISIS,
        )

        alert_set = aggregator.build_alerts([], CRISIS_CATALOG, [], profiles, overall=overall)

        national = alert_set.national
        assert national.entity_name == NATIONAL_ENTITY
        assert national.is_national
        assert national.level == AlertLevel.MEDIUM
        assert len(national.sources) == 10
        assert national.indicators == ("violence_keywords",)

    def test_no_national_alert_at_threshold(self, aggregator, profiles):
        overall = OverallScore(value=0.5, catalog_id=CRISIS)

        alert_set = aggregator.build_alerts([], CRISIS_CATALOG, [], profiles, overall=overall)

        assert alert_set.national is None

    def test_zero_score_gives_empty_set(self, aggregator, profiles):
        docs = [Document(source="a", content="Nairobi hosts a marathon")]

        assert aggregator.build_alerts(docs, CRISIS_CATALOG, ["Nairobi"], profiles).is_empty

    def test_requested_entity_scored_without_mention(self, aggregator, profiles):
        overall = OverallScore(
            value=0.45,
            triggered_indicators=("political_tension",),
            catalog_id=CRISIS,
        )
        docs = [Document(source="a", content="Tension over the election results")]

        alert_set = aggregator.build_alerts(
            docs, CRISIS_CATALOG, ["Turkana"], profiles,
            overall=overall, requested_entity="Turkana",
        )

        # 0.45 * 1.8
        alert = alert_set.per_entity[0]
        assert (alert.entity_name, alert.score, alert.level) == ("Turkana", 0.81, AlertLevel.CRITICAL)
        assert alert.indicators == ("political_tension",)
        assert alert.sources == ()

    def test_requested_entity_sources_and_cap(self, profiles):
        docs = [
            Document(source="a", content="Riot in Lamu"),
            Document(source="b", content="Protest in Wajir"),
            Document(source="c", content="Wajir residents and Lamu traders meet in Kisumu"),
        ]
        aggregator = AlertAggregator(config=AggregationConfig(max_entities=2))

        alert_set = aggregator.build_alerts(
            docs, CRISIS_CATALOG, ["Lamu", "Wajir", "Kisumu"], profiles, requested_entity="Kisumu",
        )

        assert {a.entity_name for a in alert_set.per_entity} == {"Kisumu", "Lamu"}
        kisumu = next(a for a in alert_set.per_entity if a.entity_name == "Kisumu")
        assert kisumu.sources == ("c",)

    def test_fallback_for_requested_entity(self, aggregator):
        alert_set = aggregator.build_fallback_alerts("Kisumu")

        assert len(alert_set.per_entity) == 1
        alert = alert_set.per_entity[0]
        assert (alert.entity_name, alert.level, alert.score) == ("Kisumu", AlertLevel.LOW, 0.2)
        assert alert.recommendations

    def test_fallback_for_key_counties(self, aggregator):
        alert_set = aggregator.build_fallback_alerts()

        assert [a.entity_name for a in alert_set.per_entity] == list(KEY_COUNTIES)
        assert all(a.score == 0.15 for a in alert_set.per_entity)

    def test_actionable(self, aggregator):
        assert not is_alert_set_actionable(aggregator.build_fallback_alerts())
        assert not is_alert_set_actionable(AlertSet())


# ============================================================
# RECOMMENDATIONS
# ============================================================

class TestRecommendationEngine:
    """Tests for guidance lookup."""

    def test_critical_county_keeps_evacuation_guidance(self, recommender):
        items = recommender.recommend(AlertLevel.CRITICAL, "Turkana", ["violence_keywords"])

        assert len(items) == 6
        assert items[3] == "Follow official evacuation procedures if issued"

    def test_high_and_critical_county_keep_indicator_guidance(self, recommender):
        for level in (AlertLevel.HIGH, AlertLevel.CRITICAL):
            items = recommender.recommend(
                level, "Turkana", ["violence_keywords", "political_tension"],
            )

            assert len(items) == 6
            assert "Report threats of violence to the National Police Service" in items
            assert "Engage with local peace committees" in items

    def test_guidance_hold_unused_without_indicators(self, recommender):
        items = recommender.recommend(AlertLevel.CRITICAL, "Turkana")

        assert len(items) == 6
        assert items[-1] == "Stock up on essential supplies"

    def test_low_county(self, recommender):
        items = recommender.recommend(AlertLevel.LOW, "Nairobi")

        assert len(items) == 5
        assert "Continue normal activities with awareness" in items

    def test_national_includes_indicator_guidance(self, recommender):
        items = recommender.recommend(AlertLevel.MEDIUM, None, ["political_tension"])

        assert items[0] == "Monitor official government communications"
        assert items[-1] == "Engage with local peace committees"

    def test_corruption_uses_own_tables(self, recommender):
        items = recommender.recommend(AlertLevel.HIGH, "Ministry of Health", catalog_id=CORRUPTION)

        assert items[0] == "Improve financial transparency"
        assert "Request a special audit from the Auditor General" in items

    def test_never_empty(self, recommender):
        for level in AlertLevel:
            assert recommender.recommend(level, "Lamu")
            assert recommender.recommend(level, None)
            assert recommender.recommend_for_credibility(level)

    def test_targeted_measures_lead(self, recommender):
        overall = OverallScore(
            value=0.3,
            per_indicator={
                "economic_stress": IndicatorScore("economic_stress", 6, 0.7),
            },
            catalog_id=CRISIS,
        )

        measures = recommender.preventive_measures(overall)

        assert measures[:2] == ["Job creation programs", "Economic relief initiatives"]
        assert len(measures) == 6

    def test_standard_measures_when_no_indicator_is_high(self, recommender):
        measures = recommender.preventive_measures(OverallScore(catalog_id=CRISIS))

        assert measures[0] == "Community dialogue sessions"
        assert len(measures) == 6

    def test_credibility_cap(self, recommender):
        items = recommender.recommend_for_credibility(AlertLevel.CRITICAL)

        assert len(items) == 5
        assert items[0] == "Do not share this content"


# ============================================================
# ENGINE
# ============================================================

class TestRiskScoringEngine:
    """Tests for end-to-end assessment."""

    def test_no_documents(self, engine):
        result = engine.assess([], CRISIS)

        assert result.message == NO_DOCUMENTS_MESSAGE
        assert result.national_risk_level == AlertLevel.LOW
        assert result.narrative == "0 indicator(s) triggered; risk assessed as LOW."
        assert [a.entity_name for a in result.alerts] == list(KEY_COUNTIES)
        assert result.source_count == 0

    def test_no_documents_for_requested_county(self, engine):
        result = engine.assess([], CRISIS, requested_entity="Garissa")

        assert len(result.alerts) == 1
        assert result.alerts[0].entity_name == "Garissa"
        assert result.alerts[0].score == 0.2

    def test_no_matches(self, engine):
        docs = [Document(source="a", content="Harambee Stars win the match")]

        result = engine.assess(docs, CRISIS)

        assert result.message == NO_ALERTS_MESSAGE
        assert result.source_count == 1

    def test_positive_score_without_located_entity_is_not_all_clear(self, engine):
        docs = [Document(source="a", content="Protest and riot reported after the election")]

        result = engine.assess(docs, CRISIS)

        assert result.overall.value > 0
        assert result.alerts == ()
        assert result.message == NO_ENTITY_ALERTS_MESSAGE

    def test_requested_county_uses_overall_score(self, engine):
        docs = [Document(source="a", content="Protest and riot reported after the election")]

        result = engine.assess(docs, CRISIS, requested_entity="Turkana")

        alert = result.alerts[0]
        assert alert.entity_name == "Turkana"
        assert alert.score == round(min(1.0, result.overall.value * 1.8), 2)
        assert alert.recommendations[0] != "No immediate action required"
        assert result.message is None

    def test_turkana_scenario(self, engine, turkana_documents):
        result = engine.assess(turkana_documents, CRISIS)

        assert [a.entity_name for a in result.alerts] == ["Turkana"]
        assert result.message is None
        assert result.national_risk_level == AlertLevel.LOW

    def test_alerts_ranked_by_score(self, engine):
        docs = [
            Document(source="a", content="Protest, riot and clash in Mombasa"),
            Document(source="b", content="Protest, riot and clash in Mandera"),
        ]

        result = engine.assess(docs, CRISIS)

        scores = [a.score for a in result.alerts]
        assert scores == sorted(scores, reverse=True)
        assert result.alerts[0].entity_name == "Mandera"

    def test_unknown_catalog(self, engine):
        with pytest.raises(CatalogNotFoundError):
            engine.assess([], "weather")

    def test_preventive_measures_optional(self, engine, turkana_documents):
        result = engine.assess(turkana_documents, CRISIS, include_preventive_measures=False)

        assert result.preventive_measures == ()

    def test_deterministic(self, engine, turkana_documents):
        first = engine.assess(turkana_documents, CRISIS)
        second = engine.assess(turkana_documents, CRISIS)

        def summary(result):
            return [(a.entity_name, a.level, a.score, a.recommendations) for a in result.alerts]

        assert summary(first) == summary(second)
        assert first.overall == second.overall

    def test_to_dict(self, engine, turkana_documents):
        data = engine.assess(turkana_documents, CRISIS).to_dict()

        assert data["monitoring_active"] is True
        assert data["national_risk_level"] == "LOW"
        assert data["catalog_id"] == CRISIS
        assert data["alerts"][0]["entity_name"] == "Turkana"
        assert data["narrative_source"] == "template"

    def test_format_summary(self, engine, turkana_documents):
        text = format_risk_summary(engine.assess(turkana_documents, CRISIS))

        assert "RISK MONITORING SUMMARY" in text
        assert "Turkana" in text
