"""
Tests for the Document Scorer, Entity Evaluator and Catalogs.

============================================================
PURPOSE
============================================================
TEST PRINCIPLES:
- Same input = same output
- Scores stay within [0, 1]
- Adding evidence never lowers a score
- Boundary values fall into the lower band

============================================================
"""

import pytest

from risk_scoring import (
    CRISIS,
    CRISIS_CATALOG,
    AlertLevel,
    Catalog,
    CatalogConfigurationError,
    CatalogNotFoundError,
    Document,
    DocumentScorer,
    EntityProfile,
    EntityRiskEvaluator,
    IndicatorCatalog,
    IndicatorDefinition,
    OverallScore,
    ProfileConfigurationError,
    ProfileTable,
    VerificationStatus,
    classify,
)


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def scorer():
    return DocumentScorer()


@pytest.fixture
def evaluator():
    return EntityRiskEvaluator()


@pytest.fixture
def violent_documents():
    return [
        Document(source="nation.co.ke", content="Clashes and a riot broke out after the protest"),
        Document(source="kbc.co.ke", content="Opposition boycott deepens the crisis in parliament"),
        Document(source="the-star.co.ke", content="Teachers strike over inflation and unemployment"),
    ]


def _catalog(**overrides):
    values = dict(
        catalog_id="test",
        indicators=(
            IndicatorDefinition(name="alpha", weight=1.0, trigger_phrases=("one", "two")),
            IndicatorDefinition(name="beta", weight=0.5, trigger_phrases=("three",)),
        ),
        combination_weights={"alpha": 0.6, "beta": 0.4},
    )
    values.update(overrides)
    return Catalog(**values)


# ============================================================
# DOCUMENT SCORER
# ============================================================

class TestDocumentScorer:
    """Tests for corpus scoring."""

    def test_empty_batch_scores_zero(self, scorer):
        overall = scorer.score([], CRISIS_CATALOG)

        assert overall.value == 0.0
        assert overall.triggered_indicators == ()
        assert overall.document_count == 0
        assert all(s.normalized_score == 0.0 for s in overall.per_indicator.values())
        assert set(overall.per_indicator) == set(CRISIS_CATALOG.indicator_names)

    def test_no_matches_scores_zero(self, scorer):
        docs = [Document(source="a", content="The weather in Nairobi is pleasant")]

        assert scorer.score(docs, CRISIS_CATALOG).value == 0.0

    def test_matching_counts_presence_not_frequency(self, scorer):
        docs = [Document(source="a", content="one one one one")]

        overall = scorer.score(docs, _catalog())

        alpha = overall.per_indicator["alpha"]
        assert alpha.raw_match_count == 1
        assert alpha.normalized_score == pytest.approx(0.5)
        assert alpha.matched_phrases == ("one",)

    def test_overall_is_weighted_sum(self, scorer):
        docs = [Document(source="a", content="one two three")]

        overall = scorer.score(docs, _catalog())

        # alpha 1.0 * 0.6 + beta 0.5 * 0.4
        assert overall.value == pytest.approx(0.8)

    def test_matching_is_case_insensitive(self, scorer):
        upper = scorer.score([Document(source="a", content="VIOLENCE and RIOT")], CRISIS_CATALOG)
        lower = scorer.score([Document(source="a", content="violence and riot")], CRISIS_CATALOG)

        assert upper.value == lower.value
        assert upper.per_indicator["violence_keywords"].raw_match_count == 2

    def test_overall_is_clamped(self, scorer):
        catalog = _catalog(combination_weights={"alpha": 2.0, "beta": 2.0})
        docs = [Document(source="a", content="one two three")]

        assert scorer.score(docs, catalog).value == 1.0

    def test_deterministic(self, scorer, violent_documents):
        first = scorer.score(violent_documents, CRISIS_CATALOG)
        second = scorer.score(violent_documents, CRISIS_CATALOG)

        assert first == second

    def test_adding_documents_never_lowers_score(self, scorer, violent_documents):
        previous = 0.0
        for i in range(1, len(violent_documents) + 1):
            value = scorer.score(violent_documents[:i], CRISIS_CATALOG).value
            assert value >= previous
            previous = value

    def test_scores_are_bounded(self, scorer, violent_documents):
        overall = scorer.score(violent_documents, CRISIS_CATALOG)

        assert 0.0 <= overall.value <= 1.0
        for score in overall.per_indicator.values():
            assert 0.0 <= score.normalized_score <= 1.0

    def test_triggered_requires_exceeding_threshold(self, scorer):
        # 6 of 9 violence phrases: 6/9 * 0.9 = 0.6
        six = Document(source="a", content="violence clash conflict attack riot protest")
        # 4 of 9: 0.4
        four = Document(source="a", content="violence clash conflict attack")

        assert "violence_keywords" in scorer.score([six], CRISIS_CATALOG).triggered_indicators
        assert "violence_keywords" not in scorer.score([four], CRISIS_CATALOG).triggered_indicators

    def test_sources_are_unique_in_first_seen_order(self, scorer):
        docs = [
            Document(source="b", content="riot"),
            Document(source="a", content="riot"),
            Document(source="b", content="riot"),
        ]

        assert scorer.score(docs, CRISIS_CATALOG).sources == ("b", "a")

    def test_has_any_trigger(self, scorer):
        assert scorer.has_any_trigger(Document(source="a", content="A PROTEST march"), CRISIS_CATALOG)
        assert not scorer.has_any_trigger(Document(source="a", content="market day"), CRISIS_CATALOG)


# ============================================================
# CLASSIFICATION
# ============================================================

class TestClassification:
    """Tests for alert level bands."""

    @pytest.mark.parametrize("score,expected", [
        (0.0, AlertLevel.LOW),
        (0.4, AlertLevel.LOW),
        (0.41, AlertLevel.MEDIUM),
        (0.6, AlertLevel.MEDIUM),
        (0.61, AlertLevel.HIGH),
        (0.8, AlertLevel.HIGH),
        (0.81, AlertLevel.CRITICAL),
        (1.0, AlertLevel.CRITICAL),
    ])
    def test_bands(self, score, expected):
        assert classify(score) == expected

    def test_levels_are_ordered(self):
        assert AlertLevel.LOW < AlertLevel.MEDIUM < AlertLevel.HIGH < AlertLevel.CRITICAL
        assert AlertLevel.HIGH >= AlertLevel.HIGH

    @pytest.mark.parametrize("score,expected", [
        (0.8, VerificationStatus.VERIFIED),
        (0.6, VerificationStatus.PARTIALLY_VERIFIED),
        (0.4, VerificationStatus.UNVERIFIED),
        (0.2, VerificationStatus.DISPUTED),
        (0.19, VerificationStatus.FALSE),
    ])
    def test_verification_bands_are_inclusive(self, score, expected):
        assert VerificationStatus.from_score(score) == expected


# ============================================================
# ENTITY EVALUATOR
# ============================================================

class TestEntityRiskEvaluator:
    """Tests for baseline amplification."""

    def test_without_profile_uses_overall(self, evaluator):
        evaluation = evaluator.evaluate(OverallScore(value=0.55))

        assert evaluation.adjusted_score == 0.55
        assert evaluation.level == AlertLevel.MEDIUM

    def test_amplification_to_exact_boundary_is_high(self, evaluator):
        evaluation = evaluator.evaluate(
            OverallScore(value=0.5),
            EntityProfile(entity_name="Nakuru", baseline_multiplier=0.6),
        )

        assert evaluation.adjusted_score == pytest.approx(0.8)
        assert evaluation.level == AlertLevel.HIGH

    def test_amplification_above_boundary_is_critical(self, evaluator):
        evaluation = evaluator.evaluate(
            OverallScore(value=0.5),
            EntityProfile(entity_name="Turkana", baseline_multiplier=0.8),
        )

        assert evaluation.adjusted_score == pytest.approx(0.9)
        assert evaluation.level == AlertLevel.CRITICAL

    def test_adjusted_score_is_clamped(self, evaluator):
        evaluation = evaluator.evaluate(
            OverallScore(value=0.9),
            EntityProfile(entity_name="Mandera", baseline_multiplier=0.8),
        )

        assert evaluation.adjusted_score == 1.0


# ============================================================
# CATALOGS
# ============================================================

class TestCatalog:
    """Tests for catalog validation and lookup."""

    def test_builtin_catalogs_registered(self):
        catalogs = IndicatorCatalog.default()

        assert catalogs.catalog_ids == ["crisis", "misinformation", "corruption"]
        assert len(catalogs.lookup(CRISIS)) == 5

    def test_unknown_catalog_raises(self):
        with pytest.raises(CatalogNotFoundError) as exc_info:
            IndicatorCatalog.default().get("weather")

        assert exc_info.value.catalog_id == "weather"

    def test_phrases_are_normalized(self):
        definition = IndicatorDefinition(
            name="x", weight=0.5, trigger_phrases=("Riot", "riot ", "", "PROTEST"),
        )

        assert definition.trigger_phrases == ("riot", "protest")

    @pytest.mark.parametrize("overrides", [
        {"indicators": ()},
        {"indicators": (
            IndicatorDefinition(name="alpha", weight=1.0, trigger_phrases=("one",)),
            IndicatorDefinition(name="alpha", weight=1.0, trigger_phrases=("two",)),
        )},
        {"indicators": (
            IndicatorDefinition(name="alpha", weight=1.5, trigger_phrases=("one",)),
            IndicatorDefinition(name="beta", weight=0.5, trigger_phrases=("three",)),
        )},
        {"indicators": (
            IndicatorDefinition(name="alpha", weight=1.0, trigger_phrases=("  ",)),
            IndicatorDefinition(name="beta", weight=0.5, trigger_phrases=("three",)),
        )},
        {"combination_weights": {"alpha": 0.6}},
        {"combination_weights": {"alpha": 0.6, "beta": -0.1}},
        {"combination_weights": {"alpha": 0.6, "beta": 0.4, "gamma": 0.1}},
        {"trigger_threshold": 1.5},
    ])
    def test_malformed_catalog_rejected(self, overrides):
        with pytest.raises(CatalogConfigurationError):
            _catalog(**overrides)

    def test_duplicate_catalog_id_rejected(self):
        with pytest.raises(CatalogConfigurationError):
            IndicatorCatalog([_catalog(), _catalog()])

    def test_from_dict_missing_field(self):
        with pytest.raises(CatalogConfigurationError):
            Catalog.from_dict("broken", {"indicators": {"alpha": {"weight": 0.5}}})

    def test_from_yaml_overrides_builtin(self, tmp_path):
        path = tmp_path / "catalogs.yaml"
        path.write_text(
            "catalogs:\n"
            "  crisis:\n"
            "    trigger_threshold: 0.2\n"
            "    indicators:\n"
            "      drought:\n"
            "        weight: 0.9\n"
            "        combination_weight: 1.0\n"
            "        phrases: [drought, famine]\n"
        )

        catalogs = IndicatorCatalog.from_yaml(path)

        assert catalogs.get(CRISIS).indicator_names == ["drought"]
        assert catalogs.get(CRISIS).trigger_threshold == 0.2
        assert "corruption" in catalogs

    def test_from_yaml_without_catalogs_key(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("other: 1\n")

        with pytest.raises(CatalogConfigurationError):
            IndicatorCatalog.from_yaml(path)


# ============================================================
# PROFILES
# ============================================================

class TestProfileTable:
    """Tests for entity profile lookup."""

    def test_lookup_is_case_insensitive(self):
        profiles = ProfileTable.kenya_counties()

        profile = profiles.get("turkana")

        assert profile.entity_name == "Turkana"
        assert profile.baseline_multiplier == 0.8
        assert "NAIROBI" in profiles

    def test_get_or_default(self):
        profile = ProfileTable.kenya_counties().get_or_default("Kajiado", 0.5)

        assert profile.entity_name == "Kajiado"
        assert profile.baseline_multiplier == 0.5

    def test_negative_multiplier_rejected(self):
        with pytest.raises(ProfileConfigurationError):
            ProfileTable.from_mapping({"Nairobi": -0.1})

    def test_duplicate_entity_rejected(self):
        with pytest.raises(ProfileConfigurationError):
            ProfileTable.from_mapping({"Nairobi": 0.7, "nairobi": 0.6})

    def test_malformed_value_rejected(self):
        with pytest.raises(ProfileConfigurationError):
            ProfileTable.from_mapping({"Nairobi": "high"})
