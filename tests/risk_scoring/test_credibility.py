"""
Tests for Credibility Assessment.
"""

import pytest

from risk_scoring import (
    MISINFORMATION_CATALOG,
    AlertLevel,
    CredibilityAssessor,
    Document,
    FactCheckEvidence,
    VerificationStatus,
    assess_source_reliability,
    extract_key_claims,
)
from risk_scoring.credibility import find_contradictions, find_support


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def assessor():
    return CredibilityAssessor(MISINFORMATION_CATALOG)


# ============================================================
# SOURCE RELIABILITY
# ============================================================

class TestSourceReliability:

    @pytest.mark.parametrize("source,expected", [
        (None, 0.3),
        ("", 0.3),
        ("unknown", 0.3),
        ("https://www.nation.co.ke/news/politics", 0.9),
        ("Reuters.com", 0.9),
        ("facebook.com/groups/123", 0.2),
        ("WhatsApp forward", 0.2),
        ("example.org", 0.5),
    ])
    def test_reliability(self, source, expected):
        assert assess_source_reliability(source) == expected


# ============================================================
# FACT-CHECK EVIDENCE
# ============================================================

class TestFactCheckEvidence:

    def test_extract_key_claims(self):
        content = "Short. The county budget was approved today! Governors met in Naivasha? Ok"

        assert extract_key_claims(content) == [
            "The county budget was approved today",
            "Governors met in Naivasha",
        ]

    def test_contradiction(self):
        assert find_contradictions("The bill was approved", "The bill was rejected by MPs")
        assert not find_contradictions("The bill was approved", "The bill was approved")

    def test_support_needs_four_shared_long_words(self):
        original = "parliament approved the finance budget amendment yesterday"

        assert find_support(original, "senate parliament approved finance budget amendment")
        assert not find_support(original, "parliament approved something")

    def test_from_documents_caps(self):
        content = "Parliament approved the national budget estimates today"
        documents = [
            Document(source=f"s{i}", content="Parliament approved national budget estimates again")
            for i in range(7)
        ]

        evidence = FactCheckEvidence.from_documents(content, documents)

        assert evidence.supporting == 3
        assert evidence.contradicting == 0
        assert evidence.relevant_sources == ("s0", "s1", "s2", "s3", "s4")
        assert evidence.score == 0.7

    def test_from_documents_excerpts(self):
        denial = "The bill was rejected by MPs " + "x" * 200
        documents = [
            Document(source="a", content=denial),
            Document(source="b", content="Traffic update"),
        ]

        evidence = FactCheckEvidence.from_documents("The bill was approved", documents)

        assert evidence.contradicting == 1
        assert evidence.contradicting_excerpts == (denial[:100],)
        assert evidence.supporting_excerpts == ()

    def test_score_without_majority_support(self):
        assert FactCheckEvidence().score == 0.3
        assert FactCheckEvidence(supporting=1, contradicting=1).score == 0.3


# ============================================================
# ASSESSOR
# ============================================================

class TestCredibilityAssessor:

    def test_neutral_content(self, assessor):
        result = assessor.assess("The county assembly passed the budget")

        # 1.0 * 0.3 + 0.3 * 0.25 + 0.3 * 0.25 + 0.5 * 0.2
        assert result.confidence_score == pytest.approx(0.55)
        assert result.verification_status == VerificationStatus.UNVERIFIED
        assert result.risk_level == AlertLevel.MEDIUM
        assert result.indicators == ()

    def test_reliable_corroborated_content(self, assessor):
        result = assessor.assess(
            "The county assembly passed the budget",
            source="nation.co.ke",
            evidence=FactCheckEvidence(supporting=2, contradicting=0),
            ai_likelihood=0.9,
        )

        # 0.3 + 0.225 + 0.175 + 0.18
        assert result.confidence_score == pytest.approx(0.88)
        assert result.verification_status == VerificationStatus.VERIFIED
        assert result.risk_level == AlertLevel.LOW

    def test_inflammatory_content_is_critical(self, assessor):
        result = assessor.assess(
            "Ethnic and tribal enemy must be destroyed, divisive hate and violence",
            source="whatsapp",
        )

        assert result.risk_level == AlertLevel.CRITICAL
        assert "inflammatory_content" in result.indicators
        assert result.recommendations[0] == "Do not share this content"

    def test_ai_likelihood_is_clamped(self, assessor):
        high = assessor.assess("The county assembly passed the budget", ai_likelihood=5.0)
        one = assessor.assess("The county assembly passed the budget", ai_likelihood=1.0)

        assert high.confidence_score == one.confidence_score

    def test_to_dict(self, assessor):
        data = assessor.assess("The county assembly passed the budget").to_dict()

        assert data["verification_status"] == "UNVERIFIED"
        assert data["risk_level"] == "MEDIUM"
        assert isinstance(data["recommendations"], list)

    def test_zero_ai_likelihood_counts_as_inaccurate(self, assessor):
        content = "The county assembly passed the budget"

        unknown = assessor.assess(content)
        zero = assessor.assess(content, ai_likelihood=0.0)

        # no estimate scores 0.5 * 0.2, an explicit 0.0 scores nothing
        assert unknown.confidence_score == pytest.approx(0.55)
        assert zero.confidence_score == pytest.approx(0.45)

    def test_ai_concerns_join_indicators(self, assessor):
        result = assessor.assess(
            "Ethnic and tribal enemy must be destroyed, divisive hate and violence",
            ai_concerns=("inflammatory_content", "No named source", "No named source", "Old photo"),
        )

        assert "inflammatory_content" in result.indicators
        assert result.indicators.count("inflammatory_content") == 1
        assert result.indicators[-2:] == ("No named source", "Old photo")

    def test_ai_concerns_capped(self, assessor):
        concerns = tuple(f"concern {i}" for i in range(8))

        result = assessor.assess("The county assembly passed the budget", ai_concerns=concerns)

        assert result.indicators == concerns[:5]
