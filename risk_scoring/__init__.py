"""
Risk Scoring Engine - Package.

============================================================
PURPOSE
============================================================
The Risk Scoring Engine scores batches of short text
documents against named indicator catalogs and turns the
result into per-entity and national alerts.

============================================================
WHAT IT IS
============================================================
- Deterministic, keyword-containment scoring
- Two-level weighting (per-phrase weight, combination share)
- Ordinal alert levels: LOW, MEDIUM, HIGH, CRITICAL
- One generic engine, parameterized by catalog id

============================================================
WHAT IT IS NOT
============================================================
- NOT natural-language understanding
- NOT semantic similarity or ML classification
- NOT a document fetcher (see news_sources)

============================================================
SCORING
============================================================
Per indicator: min(1, matched / total_phrases * weight)
Overall:       clamp(sum(normalized * share), 0, 1)
Entity:        clamp(overall * (1 + baseline_multiplier), 0, 1)

Classification (strict lower bound):
- CRITICAL: > 0.8
- HIGH:     > 0.6
- MEDIUM:   > 0.4
- LOW:      otherwise

============================================================
USAGE
============================================================
    from risk_scoring import RiskScoringEngine, Document

    engine = RiskScoringEngine()

    result = engine.assess(
        [
            Document(source="nation.co.ke", content="Clashes and protest in Turkana"),
            Document(source="kbc.co.ke", content="Opposition boycott deepens crisis"),
        ],
        catalog_id="crisis",
    )

    print(f"National Level: {result.national_risk_level.value}")
    print(result.narrative)

============================================================
"""

# Types
from .types import (
    # Enums
    AlertLevel,
    VerificationStatus,

    # Input types
    Document,
    IndicatorDefinition,
    EntityProfile,

    # Output types
    IndicatorScore,
    OverallScore,
    EntityEvaluation,
    Alert,
    AlertSet,
    MonitoringResult,
    CredibilityAssessment,
    NATIONAL_ENTITY,

    # Exceptions
    RiskScoringError,
    CatalogNotFoundError,
    CatalogConfigurationError,
    ProfileConfigurationError,
)

# Configuration
from .config import (
    AggregationConfig,
    RecommendationConfig,
    NarrativeConfig,
    SourceConfig,
    RiskScoringConfig,
    get_default_config,
)

# Catalogs and profiles
from .catalogs import (
    CRISIS,
    MISINFORMATION,
    CORRUPTION,
    Catalog,
    IndicatorCatalog,
    CRISIS_CATALOG,
    MISINFORMATION_CATALOG,
    CORRUPTION_CATALOG,
)

from .profiles import (
    KENYA_COUNTY_BASELINES,
    KEY_COUNTIES,
    ProfileTable,
)

# Scoring pipeline
from .scorer import DocumentScorer, score_documents
from .evaluator import EntityRiskEvaluator, classify
from .aggregator import AlertAggregator
from .recommendations import RecommendationEngine

from .credibility import (
    CredibilityAssessor,
    FactCheckEvidence,
    assess_source_reliability,
    extract_key_claims,
)

# Engine
from .engine import (
    RiskScoringEngine,
    assess_documents,
    template_narrative,
    is_alert_set_actionable,
    format_risk_summary,
)

# Persistence
from .models import (
    MonitoringSnapshot,
    AlertRecord,
)

from .repository import (
    MonitoringRepository,
)


__all__ = [
    # Enums
    "AlertLevel",
    "VerificationStatus",

    # Input types
    "Document",
    "IndicatorDefinition",
    "EntityProfile",

    # Output types
    "IndicatorScore",
    "OverallScore",
    "EntityEvaluation",
    "Alert",
    "AlertSet",
    "MonitoringResult",
    "CredibilityAssessment",
    "NATIONAL_ENTITY",

    # Exceptions
    "RiskScoringError",
    "CatalogNotFoundError",
    "CatalogConfigurationError",
    "ProfileConfigurationError",

    # Configuration
    "AggregationConfig",
    "RecommendationConfig",
    "NarrativeConfig",
    "SourceConfig",
    "RiskScoringConfig",
    "get_default_config",

    # Catalogs and profiles
    "CRISIS",
    "MISINFORMATION",
    "CORRUPTION",
    "Catalog",
    "IndicatorCatalog",
    "CRISIS_CATALOG",
    "MISINFORMATION_CATALOG",
    "CORRUPTION_CATALOG",
    "KENYA_COUNTY_BASELINES",
    "KEY_COUNTIES",
    "ProfileTable",

    # Scoring pipeline
    "DocumentScorer",
    "score_documents",
    "EntityRiskEvaluator",
    "classify",
    "AlertAggregator",
    "RecommendationEngine",
    "CredibilityAssessor",
    "FactCheckEvidence",
    "assess_source_reliability",
    "extract_key_claims",

    # Engine
    "RiskScoringEngine",
    "assess_documents",
    "template_narrative",
    "is_alert_set_actionable",
    "format_risk_summary",

    # Persistence
    "MonitoringSnapshot",
    "AlertRecord",
    "MonitoringRepository",
]


__version__ = "1.0.0"
