"""
Risk Scoring Engine - Configuration.

============================================================
PURPOSE
============================================================
Defines all configuration dataclasses and limits for the
Risk Scoring Engine and its collaborators.

Configuration can be loaded from:
- Default values
- Environment variables (.env supported)
- YAML config file

============================================================
DESIGN PRINCIPLES
============================================================
- Output caps bound response size
- Every external call has a ceiling
- Each limit has documentation
- Immutable configurations

============================================================
"""

import os
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


# ============================================================
# ALERT AGGREGATION CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class AggregationConfig:
    """
    Configuration for per-entity and national alert rollups.

    ============================================================
    LIMITS
    ============================================================
    max_entities:
    - Top 5 mentioned entities receive alerts

    Source caps:
    - Entity alerts list at most 5 sources
    - The national alert lists at most 10 sources

    National alert:
    - Emitted only when the unmodified overall score
      exceeds 0.5

    ============================================================
    """

    max_entities: int = 5
    entity_source_cap: int = 5
    national_source_cap: int = 10
    national_alert_threshold: float = 0.5

    # Multiplier used when an entity has no profile
    default_baseline_multiplier: float = 0.5

    def __post_init__(self) -> None:
        if self.max_entities < 0:
            raise ValueError("max_entities must be >= 0")
        if self.entity_source_cap < 0 or self.national_source_cap < 0:
            raise ValueError("source caps must be >= 0")
        if not 0.0 <= self.national_alert_threshold <= 1.0:
            raise ValueError("national_alert_threshold must be 0-1")
        if self.default_baseline_multiplier < 0:
            raise ValueError("default_baseline_multiplier must be >= 0")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_entities": self.max_entities,
            "entity_source_cap": self.entity_source_cap,
            "national_source_cap": self.national_source_cap,
            "national_alert_threshold": self.national_alert_threshold,
            "default_baseline_multiplier": self.default_baseline_multiplier,
        }


# ============================================================
# RECOMMENDATION CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class RecommendationConfig:
    """Caps for recommendation and preventive measure lists."""

    max_recommendations: int = 6
    max_preventive_measures: int = 6
    max_credibility_recommendations: int = 5

    # Indicator score above which targeted programmes are suggested
    targeted_measure_threshold: float = 0.6

    def __post_init__(self) -> None:
        if self.max_recommendations < 1:
            raise ValueError("max_recommendations must be >= 1")
        if self.max_preventive_measures < 1:
            raise ValueError("max_preventive_measures must be >= 1")
        if self.max_credibility_recommendations < 1:
            raise ValueError("max_credibility_recommendations must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_recommendations": self.max_recommendations,
            "max_preventive_measures": self.max_preventive_measures,
            "max_credibility_recommendations": self.max_credibility_recommendations,
            "targeted_measure_threshold": self.targeted_measure_threshold,
        }


# ============================================================
# NARRATIVE CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class NarrativeConfig:
    """
    Configuration for the optional text-generation enrichment.

    ============================================================
    CEILING
    ============================================================
    timeout_seconds bounds the whole enrichment call. A slow
    provider degrades to the templated summary; no retries.

    ============================================================
    """

    enabled: bool = True
    api_key: Optional[str] = None
    base_url: str = "https://api.deepseek.com"
    model: str = "deepseek-chat"

    timeout_seconds: float = 6.0
    temperature: float = 0.1
    max_tokens: int = 400

    # Documents quoted in the prompt, each truncated
    context_documents: int = 10
    context_chars_per_document: int = 200

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if self.max_tokens < 1:
            raise ValueError("max_tokens must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        # api_key is never serialized
        return {
            "enabled": self.enabled,
            "base_url": self.base_url,
            "model": self.model,
            "timeout_seconds": self.timeout_seconds,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "context_documents": self.context_documents,
            "context_chars_per_document": self.context_chars_per_document,
        }


# ============================================================
# RETRIEVAL CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class SourceConfig:
    """Configuration for document retrieval fan-out."""

    source_timeout_seconds: float = 15.0
    documents_per_source: int = 50

    # Provider endpoints; None keeps the provider default
    parliament_api_url: Optional[str] = None
    gazette_api_url: Optional[str] = None

    # YAML fixture served by a StaticDocumentSource
    static_documents_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.source_timeout_seconds <= 0:
            raise ValueError("source_timeout_seconds must be > 0")
        if not 1 <= self.documents_per_source <= 500:
            raise ValueError("documents_per_source must be 1-500")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_timeout_seconds": self.source_timeout_seconds,
            "documents_per_source": self.documents_per_source,
            "parliament_api_url": self.parliament_api_url,
            "gazette_api_url": self.gazette_api_url,
            "static_documents_path": self.static_documents_path,
        }


# ============================================================
# MASTER CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class RiskScoringConfig:
    """
    Master configuration for the Risk Scoring Engine.

    Aggregates all sub-configs and engine settings.
    """

    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    recommendations: RecommendationConfig = field(default_factory=RecommendationConfig)
    narrative: NarrativeConfig = field(default_factory=NarrativeConfig)
    sources: SourceConfig = field(default_factory=SourceConfig)

    # Engine settings
    engine_version: str = "1.0.0"
    default_catalog: str = "crisis"

    # Additional catalogs loaded at start-up
    catalog_path: Optional[str] = None

    # Persistence
    persist_results: bool = False

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "RiskScoringConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - DEEPSEEK_API_KEY
        - NARRATIVE_ENABLED
        - NARRATIVE_BASE_URL
        - NARRATIVE_MODEL
        - NARRATIVE_TIMEOUT_SECONDS
        - SOURCE_TIMEOUT_SECONDS
        - PARLIAMENT_API_URL
        - GAZETTE_API_URL
        - STATIC_DOCUMENTS_PATH
        - ALERT_MAX_ENTITIES
        - RISK_DEFAULT_CATALOG
        - RISK_CATALOG_PATH
        - RISK_PERSIST_RESULTS
        """
        load_dotenv(env_file)
        config = cls()

        narrative = config.narrative
        if os.getenv("DEEPSEEK_API_KEY"):
            narrative = replace(narrative, api_key=os.getenv("DEEPSEEK_API_KEY"))
        if os.getenv("NARRATIVE_ENABLED"):
            narrative = replace(
                narrative,
                enabled=os.getenv("NARRATIVE_ENABLED", "true").lower() == "true",
            )
        if os.getenv("NARRATIVE_BASE_URL"):
            narrative = replace(narrative, base_url=os.getenv("NARRATIVE_BASE_URL"))
        if os.getenv("NARRATIVE_MODEL"):
            narrative = replace(narrative, model=os.getenv("NARRATIVE_MODEL"))
        if os.getenv("NARRATIVE_TIMEOUT_SECONDS"):
            narrative = replace(
                narrative,
                timeout_seconds=float(os.getenv("NARRATIVE_TIMEOUT_SECONDS")),
            )

        sources = config.sources
        if os.getenv("SOURCE_TIMEOUT_SECONDS"):
            sources = replace(
                sources,
                source_timeout_seconds=float(os.getenv("SOURCE_TIMEOUT_SECONDS")),
            )
        if os.getenv("PARLIAMENT_API_URL"):
            sources = replace(sources, parliament_api_url=os.getenv("PARLIAMENT_API_URL"))
        if os.getenv("GAZETTE_API_URL"):
            sources = replace(sources, gazette_api_url=os.getenv("GAZETTE_API_URL"))
        if os.getenv("STATIC_DOCUMENTS_PATH"):
            sources = replace(sources, static_documents_path=os.getenv("STATIC_DOCUMENTS_PATH"))

        aggregation = config.aggregation
        if os.getenv("ALERT_MAX_ENTITIES"):
            aggregation = replace(
                aggregation,
                max_entities=int(os.getenv("ALERT_MAX_ENTITIES")),
            )

        return replace(
            config,
            aggregation=aggregation,
            narrative=narrative,
            sources=sources,
            default_catalog=os.getenv("RISK_DEFAULT_CATALOG", config.default_catalog),
            catalog_path=os.getenv("RISK_CATALOG_PATH") or config.catalog_path,
            persist_results=os.getenv("RISK_PERSIST_RESULTS", "false").lower() == "true",
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "RiskScoringConfig":
        """Load configuration from a YAML file."""
        import yaml

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        defaults = cls()
        return cls(
            aggregation=AggregationConfig(**data.get("aggregation", {})),
            recommendations=RecommendationConfig(**data.get("recommendations", {})),
            narrative=NarrativeConfig(**data.get("narrative", {})),
            sources=SourceConfig(**data.get("sources", {})),
            engine_version=data.get("engine_version", defaults.engine_version),
            default_catalog=data.get("default_catalog", defaults.default_catalog),
            catalog_path=data.get("catalog_path"),
            persist_results=bool(data.get("persist_results", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aggregation": self.aggregation.to_dict(),
            "recommendations": self.recommendations.to_dict(),
            "narrative": self.narrative.to_dict(),
            "sources": self.sources.to_dict(),
            "engine_version": self.engine_version,
            "default_catalog": self.default_catalog,
            "catalog_path": self.catalog_path,
            "persist_results": self.persist_results,
        }


def get_default_config() -> RiskScoringConfig:
    """Return the default Risk Scoring Engine configuration."""
    return RiskScoringConfig()
