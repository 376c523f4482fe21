"""
Risk Scoring Engine - Indicator Catalogs.

============================================================
PURPOSE
============================================================
Static tables of named indicator categories. Each catalog
pairs indicator definitions (phrase list + weight) with the
combination weights used to build the overall score.

Catalogs are loaded once at process start and never mutated.

============================================================
BUILT-IN CATALOGS
============================================================
- crisis: political crisis early warning
- misinformation: manipulation patterns in content
- corruption: procurement and governance red flags

============================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .types import (
    CatalogConfigurationError,
    CatalogNotFoundError,
    IndicatorDefinition,
)


logger = logging.getLogger(__name__)


CRISIS = "crisis"
MISINFORMATION = "misinformation"
CORRUPTION = "corruption"


# ============================================================
# CATALOG
# ============================================================


@dataclass(frozen=True)
class Catalog:
    """
    One versioned indicator table.

    combination_weights maps indicator name to its share of
    the overall score. Shares need not sum to 1.
    """

    catalog_id: str
    indicators: Tuple[IndicatorDefinition, ...]
    combination_weights: Mapping[str, float]

    # normalized_score must exceed this to count as triggered
    trigger_threshold: float = 0.5
    version: str = "1.0.0"
    description: str = ""

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Check structural integrity.

        Raises:
            CatalogConfigurationError: On any malformed entry
        """
        names = [d.name for d in self.indicators]
        if not names:
            raise CatalogConfigurationError(
                f"Catalog '{self.catalog_id}' has no indicators",
                catalog_id=self.catalog_id,
            )
        if len(set(names)) != len(names):
            raise CatalogConfigurationError(
                f"Catalog '{self.catalog_id}' has duplicate indicator names",
                catalog_id=self.catalog_id,
            )
        for definition in self.indicators:
            if not 0.0 <= definition.weight <= 1.0:
                raise CatalogConfigurationError(
                    f"Indicator '{definition.name}' weight {definition.weight} outside [0, 1]",
                    catalog_id=self.catalog_id,
                )
            if definition.phrase_count == 0:
                raise CatalogConfigurationError(
                    f"Indicator '{definition.name}' has no trigger phrases",
                    catalog_id=self.catalog_id,
                )
            share = self.combination_weights.get(definition.name)
            if share is None:
                raise CatalogConfigurationError(
                    f"Indicator '{definition.name}' has no combination weight",
                    catalog_id=self.catalog_id,
                )
            if share < 0:
                raise CatalogConfigurationError(
                    f"Indicator '{definition.name}' combination weight is negative",
                    catalog_id=self.catalog_id,
                )
        unknown = set(self.combination_weights) - set(names)
        if unknown:
            raise CatalogConfigurationError(
                f"Combination weights reference unknown indicators: {sorted(unknown)}",
                catalog_id=self.catalog_id,
            )
        if not 0.0 <= self.trigger_threshold <= 1.0:
            raise CatalogConfigurationError(
                f"Trigger threshold {self.trigger_threshold} outside [0, 1]",
                catalog_id=self.catalog_id,
            )

    @property
    def indicator_names(self) -> List[str]:
        return [d.name for d in self.indicators]

    def combination_weight(self, indicator_name: str) -> float:
        return self.combination_weights[indicator_name]

    @property
    def all_phrases(self) -> Tuple[str, ...]:
        """Every trigger phrase across indicators, first-seen order."""
        seen: Dict[str, None] = {}
        for definition in self.indicators:
            for phrase in definition.trigger_phrases:
                seen.setdefault(phrase, None)
        return tuple(seen)

    @classmethod
    def from_dict(cls, catalog_id: str, data: Mapping) -> "Catalog":
        """
        Build a catalog from a plain mapping.

        Expected shape:
            trigger_threshold: 0.5
            indicators:
              violence_keywords:
                weight: 0.9
                combination_weight: 0.3
                phrases: [violence, clash]
        """
        raw_indicators = data.get("indicators") or {}
        if not isinstance(raw_indicators, Mapping):
            raise CatalogConfigurationError(
                f"Catalog '{catalog_id}' indicators must be a mapping",
                catalog_id=catalog_id,
            )

        definitions = []
        shares: Dict[str, float] = {}
        try:
            for name, entry in raw_indicators.items():
                definitions.append(IndicatorDefinition(
                    name=name,
                    weight=float(entry["weight"]),
                    trigger_phrases=tuple(entry["phrases"]),
                ))
                shares[name] = float(entry["combination_weight"])
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogConfigurationError(
                f"Catalog '{catalog_id}' is malformed: {e}",
                catalog_id=catalog_id,
            ) from e

        return cls(
            catalog_id=catalog_id,
            indicators=tuple(definitions),
            combination_weights=shares,
            trigger_threshold=float(data.get("trigger_threshold", 0.5)),
            version=str(data.get("version", "1.0.0")),
            description=str(data.get("description", "")),
        )


# ============================================================
# BUILT-IN TABLES
# ============================================================


CRISIS_CATALOG = Catalog(
    catalog_id=CRISIS,
    description="Political crisis early warning indicators",
    trigger_threshold=0.5,
    indicators=(
        IndicatorDefinition(
            name="violence_keywords",
            weight=0.9,
            trigger_phrases=(
                "violence", "clash", "conflict", "attack", "riot", "protest",
                "unrest", "ethnic tension", "demonstration",
            ),
        ),
        IndicatorDefinition(
            name="political_tension",
            weight=0.8,
            trigger_phrases=(
                "dispute", "disagreement", "opposition", "boycott", "walkout",
                "deadlock", "crisis", "tension",
            ),
        ),
        IndicatorDefinition(
            name="economic_stress",
            weight=0.7,
            trigger_phrases=(
                "strike", "unemployment", "inflation", "poverty",
                "economic hardship", "cost of living",
            ),
        ),
        IndicatorDefinition(
            name="electoral_issues",
            weight=0.85,
            trigger_phrases=(
                "election dispute", "voter fraud", "irregularities", "rigging",
                "ballot", "electoral violence",
            ),
        ),
        IndicatorDefinition(
            name="government_instability",
            weight=0.75,
            trigger_phrases=(
                "impeachment", "resignation", "no confidence",
                "coalition breakdown", "cabinet reshuffle",
            ),
        ),
    ),
    combination_weights={
        "violence_keywords": 0.3,
        "political_tension": 0.25,
        "economic_stress": 0.15,
        "electoral_issues": 0.2,
        "government_instability": 0.1,
    },
)


MISINFORMATION_CATALOG = Catalog(
    catalog_id=MISINFORMATION,
    description="Misinformation and manipulation patterns",
    trigger_threshold=0.3,
    indicators=(
        IndicatorDefinition(
            name="emotional_manipulation",
            weight=0.8,
            trigger_phrases=(
                "shocking", "outrageous", "you won't believe", "must see",
                "breaking", "urgent",
            ),
        ),
        IndicatorDefinition(
            name="lack_of_sources",
            weight=0.7,
            trigger_phrases=(
                "according to sources", "insider reports", "anonymous sources",
                "we have learned",
            ),
        ),
        IndicatorDefinition(
            name="sensational_language",
            weight=0.6,
            trigger_phrases=(
                "scandal", "explosive", "bombshell", "devastating",
                "shocking revelation",
            ),
        ),
        IndicatorDefinition(
            name="unverified_claims",
            weight=0.9,
            trigger_phrases=(
                "allegedly", "reportedly", "claims suggest", "sources say",
                "unconfirmed reports",
            ),
        ),
        IndicatorDefinition(
            name="inflammatory_content",
            weight=0.85,
            trigger_phrases=(
                "ethnic", "tribal", "divisive", "hate", "violence", "destroy",
                "enemy",
            ),
        ),
    ),
    combination_weights={
        "emotional_manipulation": 0.2,
        "lack_of_sources": 0.25,
        "sensational_language": 0.15,
        "unverified_claims": 0.3,
        "inflammatory_content": 0.1,
    },
)


CORRUPTION_CATALOG = Catalog(
    catalog_id=CORRUPTION,
    description="Corruption risk factors for public entities",
    trigger_threshold=0.5,
    indicators=(
        IndicatorDefinition(
            name="financial_irregularities",
            weight=0.9,
            trigger_phrases=(
                "embezzlement", "misappropriation", "kickback", "bribe",
                "inflated tender", "ghost workers", "money laundering",
                "stolen funds",
            ),
        ),
        IndicatorDefinition(
            name="governance_failures",
            weight=0.8,
            trigger_phrases=(
                "conflict of interest", "nepotism", "irregular procurement",
                "single sourcing", "abuse of office", "tender award",
            ),
        ),
        IndicatorDefinition(
            name="accountability_gaps",
            weight=0.85,
            trigger_phrases=(
                "audit query", "auditor general", "unaccounted", "eacc",
                "graft", "investigation", "court case",
            ),
        ),
        IndicatorDefinition(
            name="disclosure_failures",
            weight=0.7,
            trigger_phrases=(
                "undisclosed", "failed to declare", "withheld", "no records",
                "secrecy", "refused to disclose",
            ),
        ),
    ),
    combination_weights={
        "financial_irregularities": 0.3,
        "governance_failures": 0.25,
        "accountability_gaps": 0.25,
        "disclosure_failures": 0.2,
    },
)


# ============================================================
# CATALOG REGISTRY
# ============================================================


class IndicatorCatalog:
    """
    Read-only registry of catalogs keyed by id.

    Usage:
        catalogs = IndicatorCatalog.default()
        definitions = catalogs.lookup("crisis")
    """

    def __init__(self, catalogs: Optional[Iterable[Catalog]] = None) -> None:
        self._catalogs: Dict[str, Catalog] = {}
        for catalog in catalogs or ():
            self._add(catalog)

    @classmethod
    def default(cls) -> "IndicatorCatalog":
        """Registry holding the three built-in catalogs."""
        return cls([CRISIS_CATALOG, MISINFORMATION_CATALOG, CORRUPTION_CATALOG])

    @classmethod
    def from_yaml(
        cls,
        path: Path,
        include_defaults: bool = True,
    ) -> "IndicatorCatalog":
        """
        Load catalogs from a YAML file.

        The top-level key is ``catalogs``, mapping catalog id to
        the shape accepted by ``Catalog.from_dict``. A catalog in
        the file replaces a built-in of the same id.
        """
        import yaml

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        raw = data.get("catalogs")
        if not isinstance(raw, Mapping):
            raise CatalogConfigurationError(f"No 'catalogs' mapping in {path}")

        registry = cls.default() if include_defaults else cls()
        for catalog_id, entry in raw.items():
            if catalog_id in registry._catalogs:
                logger.warning(f"Overriding built-in catalog: {catalog_id}")
            registry._catalogs[catalog_id] = Catalog.from_dict(catalog_id, entry)
            logger.info(f"Loaded catalog '{catalog_id}' from {path}")
        return registry

    def _add(self, catalog: Catalog) -> None:
        if catalog.catalog_id in self._catalogs:
            raise CatalogConfigurationError(
                f"Duplicate catalog id: {catalog.catalog_id}",
                catalog_id=catalog.catalog_id,
            )
        self._catalogs[catalog.catalog_id] = catalog

    def get(self, catalog_id: str) -> Catalog:
        """
        Return the full catalog.

        Raises:
            CatalogNotFoundError: If catalog_id is unknown
        """
        try:
            return self._catalogs[catalog_id]
        except KeyError:
            raise CatalogNotFoundError(
                f"Unknown catalog: {catalog_id}",
                catalog_id=catalog_id,
            ) from None

    def lookup(self, catalog_id: str) -> List[IndicatorDefinition]:
        """Return the indicator definitions of a catalog."""
        return list(self.get(catalog_id).indicators)

    def __contains__(self, catalog_id: object) -> bool:
        return catalog_id in self._catalogs

    @property
    def catalog_ids(self) -> List[str]:
        return list(self._catalogs)
