"""
Risk Scoring Engine - Recommendations.

============================================================
PURPOSE
============================================================
Maps alert levels and triggered indicators to short,
actionable guidance strings.

Provides:
- Entity (county) and national recommendations
- Preventive measures for the monitoring summary
- Content-sharing guidance for credibility checks

============================================================
ORDERING
============================================================
baseline -> level escalations -> indicator guidance,
de-duplicated and capped. Up to a third of the cap is held
for indicator guidance so it is not crowded out at HIGH and
CRITICAL. Lists are never empty.

============================================================
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .catalogs import CORRUPTION, CRISIS, MISINFORMATION
from .config import RecommendationConfig
from .types import AlertLevel, OverallScore


# ============================================================
# RECOMMENDATION TABLES
# ============================================================


COUNTY_BASELINE: Tuple[str, ...] = (
    "Monitor local news and official county communications",
    "Avoid large gatherings and protests",
    "Keep emergency contacts readily available",
)

# Evacuation guidance leads so it survives the cap
COUNTY_LEVEL_ITEMS: Dict[AlertLevel, Tuple[str, ...]] = {
    AlertLevel.CRITICAL: (
        "Follow official evacuation procedures if issued",
        "Consider avoiding non-essential travel",
        "Stock up on essential supplies",
        "Stay in close contact with family and friends",
    ),
    AlertLevel.HIGH: (
        "Limit movement to essential activities only",
        "Keep informed through official channels",
        "Prepare emergency supplies",
    ),
    AlertLevel.MEDIUM: (
        "Stay alert to developing situations",
        "Plan alternative routes for daily activities",
    ),
    AlertLevel.LOW: (
        "Continue normal activities with awareness",
        "Stay informed of political developments",
    ),
}

NATIONAL_BASELINE: Tuple[str, ...] = (
    "Monitor official government communications",
    "Follow credible news sources for updates",
    "Avoid spreading unverified information",
)

NATIONAL_LEVEL_ITEMS: Dict[AlertLevel, Tuple[str, ...]] = {
    AlertLevel.CRITICAL: (
        "Follow official evacuation procedures if issued",
        "Avoid non-essential travel to affected areas",
        "Report suspicious activities to authorities",
    ),
    AlertLevel.HIGH: (
        "Report suspicious activities to authorities",
        "Maintain inter-community dialogue and peace",
        "Support conflict resolution initiatives",
    ),
    AlertLevel.MEDIUM: (
        "Maintain inter-community dialogue and peace",
        "Support conflict resolution initiatives",
    ),
    AlertLevel.LOW: (
        "Continue normal activities with awareness",
    ),
}

CORRUPTION_BASELINE: Tuple[str, ...] = (
    "Improve financial transparency",
    "Strengthen governance structures",
    "Enhance public reporting",
)

CORRUPTION_LEVEL_ITEMS: Dict[AlertLevel, Tuple[str, ...]] = {
    AlertLevel.CRITICAL: (
        "Refer findings to the Ethics and Anti-Corruption Commission",
        "Suspend affected procurement pending review",
    ),
    AlertLevel.HIGH: (
        "Request a special audit from the Auditor General",
        "Review recent procurement awards",
    ),
    AlertLevel.MEDIUM: (
        "Track audit queries and follow-up actions",
    ),
    AlertLevel.LOW: (
        "Continue routine oversight",
    ),
}

INDICATOR_GUIDANCE: Dict[str, str] = {
    # crisis
    "violence_keywords": "Report threats of violence to the National Police Service",
    "political_tension": "Engage with local peace committees",
    "economic_stress": "Seek information on available economic relief programmes",
    "electoral_issues": "Refer electoral complaints to the IEBC",
    "government_instability": "Rely on official statements during leadership transitions",
    # corruption
    "financial_irregularities": "Publish audited financial statements",
    "governance_failures": "Open procurement decisions to public scrutiny",
    "accountability_gaps": "Follow up on outstanding audit queries",
    "disclosure_failures": "Publish procurement and asset declarations",
}

# Fallback ("all clear") sets
REQUESTED_ENTITY_FALLBACK: Tuple[str, ...] = (
    "Continue normal activities with awareness",
    "Stay informed of political developments",
    "Monitor local news and official communications",
    "Report any unusual activities to authorities",
)

ROUTINE_FALLBACK: Tuple[str, ...] = (
    "Routine monitoring in progress",
    "No immediate action required",
    "Stay informed through official channels",
)

BASE_PREVENTIVE_MEASURES: Tuple[str, ...] = (
    "Community dialogue sessions",
    "Peace building workshops",
    "Youth engagement programs",
    "Inter-ethnic cultural exchanges",
    "Economic empowerment initiatives",
    "Conflict mediation training",
    "Early warning committee establishment",
    "Religious and traditional leader engagement",
)

TARGETED_MEASURES: Dict[str, Tuple[str, ...]] = {
    "economic_stress": ("Job creation programs", "Economic relief initiatives"),
    "political_tension": ("Political dialogue forums", "Civic education programs"),
}

CORRUPTION_PREVENTIVE_MEASURES: Tuple[str, ...] = (
    "Open contracting and e-procurement",
    "Lifestyle audits for senior officials",
    "Whistleblower protection channels",
    "Public participation in budget hearings",
    "Timely publication of audit reports",
    "Asset declaration compliance checks",
)

MISINFORMATION_PREVENTIVE_MEASURES: Tuple[str, ...] = (
    "Media literacy campaigns",
    "Rapid official fact-check bulletins",
    "Partnerships with community radio",
    "Platform reporting channels for false content",
)

CREDIBILITY_LEVEL_ITEMS: Dict[AlertLevel, Tuple[str, ...]] = {
    AlertLevel.CRITICAL: (
        "Do not share this content",
        "Report to platform administrators",
        "Warn others about potential misinformation",
    ),
    AlertLevel.HIGH: (
        "Verify through multiple reliable sources",
        "Check official government statements",
        "Be cautious about sharing",
    ),
    AlertLevel.MEDIUM: (
        "Cross-reference with credible news sources",
        "Look for official confirmations",
        "Share with fact-check context",
    ),
    AlertLevel.LOW: (
        "Content appears reliable but verify independently",
        "Check for updates from official sources",
    ),
}

CREDIBILITY_GENERAL: Tuple[str, ...] = (
    "Promote peaceful dialogue",
    "Encourage fact-based discussions",
    "Support media literacy",
)


def _dedupe_capped(items: Iterable[str], cap: int) -> List[str]:
    seen: Dict[str, None] = {}
    for item in items:
        seen.setdefault(item, None)
        if len(seen) >= cap:
            break
    return list(seen)


# ============================================================
# RECOMMENDATION ENGINE
# ============================================================


class RecommendationEngine:
    """
    Deterministic recommendation lookup.

    Usage:
        engine = RecommendationEngine()
        items = engine.recommend(AlertLevel.HIGH, "Turkana", ["violence_keywords"])
    """

    def __init__(self, config: Optional[RecommendationConfig] = None) -> None:
        self._config = config or RecommendationConfig()

    def recommend(
        self,
        level: AlertLevel,
        entity_name: Optional[str],
        triggered_indicators: Sequence[str] = (),
        catalog_id: str = CRISIS,
    ) -> List[str]:
        """
        Guidance for one alert.

        Args:
            level: Alert level
            entity_name: Entity the alert is for, None for national
            triggered_indicators: Indicator names in catalog order
            catalog_id: Catalog the alert was scored against

        Returns:
            Non-empty list, at most max_recommendations long
        """
        if catalog_id == CORRUPTION:
            baseline, level_items = CORRUPTION_BASELINE, CORRUPTION_LEVEL_ITEMS
        elif entity_name is None:
            baseline, level_items = NATIONAL_BASELINE, NATIONAL_LEVEL_ITEMS
        else:
            baseline, level_items = COUNTY_BASELINE, COUNTY_LEVEL_ITEMS

        guidance = [
            INDICATOR_GUIDANCE[name]
            for name in triggered_indicators
            if name in INDICATOR_GUIDANCE
        ]
        cap = self._config.max_recommendations
        # A third of the list is held for indicator guidance
        reserved = min(len(guidance), cap // 3)
        head = _dedupe_capped([*baseline, *level_items[level]], cap - reserved)
        return _dedupe_capped(
            [*head, *guidance, *baseline, *level_items[level]],
            cap,
        )

    def preventive_measures(self, overall: OverallScore) -> List[str]:
        """
        Preventive measures for a monitoring summary.

        Indicators above targeted_measure_threshold pull their
        targeted programmes ahead of the standard list.
        """
        cap = self._config.max_preventive_measures

        if overall.catalog_id == CORRUPTION:
            return list(CORRUPTION_PREVENTIVE_MEASURES[:cap])
        if overall.catalog_id == MISINFORMATION:
            return list(MISINFORMATION_PREVENTIVE_MEASURES[:cap])

        targeted: List[str] = []
        for indicator_name, measures in TARGETED_MEASURES.items():
            if overall.normalized(indicator_name) > self._config.targeted_measure_threshold:
                targeted.extend(measures)

        return _dedupe_capped([*targeted, *BASE_PREVENTIVE_MEASURES], cap)

    def recommend_for_credibility(self, level: AlertLevel) -> List[str]:
        """Content-sharing guidance for a credibility risk level."""
        return _dedupe_capped(
            [*CREDIBILITY_LEVEL_ITEMS[level], *CREDIBILITY_GENERAL],
            self._config.max_credibility_recommendations,
        )

    def fallback(self, requested: bool) -> List[str]:
        """Guidance attached to "all clear" alerts."""
        return list(REQUESTED_ENTITY_FALLBACK if requested else ROUTINE_FALLBACK)
