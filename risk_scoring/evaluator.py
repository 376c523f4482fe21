"""
Risk Scoring Engine - Entity Risk Evaluator.

Applies an entity's baseline multiplier to an overall score
and classifies the result:

    adjusted = clamp(value * (1 + baseline_multiplier), 0, 1)

Without a profile the overall value is classified as-is.
The same bands serve national and per-entity alerts.
"""

from typing import Optional

from .types import AlertLevel, EntityEvaluation, EntityProfile, OverallScore


class EntityRiskEvaluator:
    """Stateless evaluator for entity-adjusted risk."""

    def adjust(self, value: float, profile: Optional[EntityProfile]) -> float:
        if profile is None:
            return value
        return max(0.0, min(1.0, value * (1 + profile.baseline_multiplier)))

    def evaluate(
        self,
        overall: OverallScore,
        profile: Optional[EntityProfile] = None,
    ) -> EntityEvaluation:
        """
        Classify an overall score, optionally entity-adjusted.

        Args:
            overall: Corpus-level score
            profile: Entity profile, or None for the unmodified score

        Returns:
            EntityEvaluation(level, adjusted_score)
        """
        adjusted = self.adjust(overall.value, profile)
        return EntityEvaluation(
            level=AlertLevel.from_score(adjusted),
            adjusted_score=adjusted,
        )


def classify(score: float) -> AlertLevel:
    """Alert level for a raw score."""
    return AlertLevel.from_score(score)
