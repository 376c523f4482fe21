"""
Risk Scoring Engine - Entity Profiles.

Static baseline multipliers per entity. The built-in table
holds county risk baselines from historical incident data.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from .types import EntityProfile, ProfileConfigurationError


logger = logging.getLogger(__name__)


# County risk baselines based on historical data
KENYA_COUNTY_BASELINES: Dict[str, float] = {
    "Nairobi": 0.7,
    "Mombasa": 0.6,
    "Kisumu": 0.65,
    "Nakuru": 0.6,
    "Turkana": 0.8,
    "Marsabit": 0.75,
    "Mandera": 0.8,
    "Wajir": 0.75,
    "Garissa": 0.7,
    "Tana River": 0.7,
    "Lamu": 0.65,
    "Isiolo": 0.6,
    "Samburu": 0.65,
    "West Pokot": 0.7,
    "Baringo": 0.65,
    "Laikipia": 0.6,
}

# Counties reported in the "all clear" fallback set
KEY_COUNTIES = ("Nairobi", "Mombasa", "Kisumu", "Nakuru")


class ProfileTable:
    """
    Read-only lookup of entity profiles.

    Lookups are case-insensitive; the declared spelling is
    kept for display.
    """

    def __init__(self, profiles: Iterable[EntityProfile] = ()) -> None:
        self._profiles: Dict[str, EntityProfile] = {}
        for profile in profiles:
            if profile.baseline_multiplier < 0:
                raise ProfileConfigurationError(
                    f"Negative baseline multiplier for {profile.entity_name}"
                )
            key = profile.entity_name.casefold()
            if key in self._profiles:
                raise ProfileConfigurationError(
                    f"Duplicate entity profile: {profile.entity_name}"
                )
            self._profiles[key] = profile

    @classmethod
    def from_mapping(cls, baselines: Mapping[str, float]) -> "ProfileTable":
        try:
            return cls(
                EntityProfile(entity_name=name, baseline_multiplier=float(value))
                for name, value in baselines.items()
            )
        except (TypeError, ValueError) as e:
            raise ProfileConfigurationError(f"Malformed profile table: {e}") from e

    @classmethod
    def kenya_counties(cls) -> "ProfileTable":
        return cls.from_mapping(KENYA_COUNTY_BASELINES)

    def get(self, entity_name: str) -> Optional[EntityProfile]:
        return self._profiles.get(entity_name.casefold())

    def get_or_default(self, entity_name: str, default_multiplier: float) -> EntityProfile:
        """Profile for entity_name, or a neutral one if absent."""
        profile = self.get(entity_name)
        if profile is None:
            logger.debug(f"No profile for {entity_name}, using {default_multiplier}")
            return EntityProfile(entity_name=entity_name, baseline_multiplier=default_multiplier)
        return profile

    @property
    def entity_names(self) -> List[str]:
        return [p.entity_name for p in self._profiles.values()]

    def __contains__(self, entity_name: object) -> bool:
        return isinstance(entity_name, str) and entity_name.casefold() in self._profiles

    def __iter__(self) -> Iterator[EntityProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)
