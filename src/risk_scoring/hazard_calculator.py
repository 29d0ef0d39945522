"""
Hazard Risk Calculator

Combines a business type's base risk per hazard with the location's
override, coastal/urban exposure and seasonal timing into a raw score.
"""

import logging
from datetime import date
from typing import Dict, FrozenSet, Iterable, List, NamedTuple, Optional

import numpy as np

from .catalog import CatalogSnapshot
from .identifiers import hazard_key
from .models import BusinessCharacteristics, HazardDefinition, HazardScore, LocationHazardProfile, RiskLevel

logger = logging.getLogger(__name__)


class HazardCalculation(NamedTuple):
    scores: List[HazardScore]
    # Hazard ids linked to the business type but missing from the hazard catalog
    unresolved_hazards: List[str]


class HazardRiskCalculator:
    """Score every hazard linked to a business type at a location"""

    # Numeric anchors on the internal 0-100 scale
    LEVEL_ANCHORS = {
        RiskLevel.LOW: 30.0,
        RiskLevel.MEDIUM: 50.0,
        RiskLevel.HIGH: 70.0,
        RiskLevel.VERY_HIGH: 90.0,
    }

    COASTAL_HAZARDS = frozenset({"hurricane", "flood", "flooding", "storm_surge", "tsunami"})
    URBAN_HAZARDS = frozenset({
        "crime_theft",
        "break_in_theft",
        "supply_chain_disruption",
        "supply_disruption",
        "civil_unrest",
        "fire",
        "accident",
    })

    COASTAL_HAZARD_FACTOR = 1.5
    COASTAL_OTHER_FACTOR = 1.2
    URBAN_HAZARD_FACTOR = 1.2
    PEAK_SEASON_FACTOR = 1.3

    MIN_SCORE = 10.0
    MAX_SCORE = 100.0

    def __init__(
        self,
        snapshot: CatalogSnapshot,
        coastal_hazards: Optional[Iterable[str]] = None,
        urban_hazards: Optional[Iterable[str]] = None,
    ):
        """
        Args:
            snapshot: Catalog data for this assessment
            coastal_hazards: Hazards amplified at coastal locations. If None, uses defaults.
            urban_hazards: Hazards amplified at urban locations. If None, uses defaults.
        """
        self.snapshot = snapshot
        self.coastal_keys = self._keys(coastal_hazards if coastal_hazards is not None else self.COASTAL_HAZARDS)
        self.urban_keys = self._keys(urban_hazards if urban_hazards is not None else self.URBAN_HAZARDS)

    @staticmethod
    def _keys(hazard_ids: Iterable[str]) -> FrozenSet[str]:
        return frozenset(hazard_key(h) for h in hazard_ids)

    def calculate(
        self,
        business_type_id: str,
        location_id: Optional[str],
        as_of: date,
        characteristics: Optional[BusinessCharacteristics] = None,
    ) -> HazardCalculation:
        """
        Calculate raw scores for every hazard of a business type

        Args:
            business_type_id: Business type to assess
            location_id: Catalog location, or None when the location is unknown
            as_of: Date used for seasonal adjustment
            characteristics: Facts that can mark the site coastal/urban

        Returns:
            HazardCalculation with one score per distinct hazard

        Raises:
            NotFoundError: if the business type or location does not resolve
        """
        profiles = self.snapshot.hazards_for_business_type(business_type_id)

        is_coastal = is_urban = False
        overrides: Dict[str, LocationHazardProfile] = {}
        if location_id is not None:
            location = self.snapshot.location(location_id)
            overrides = self.snapshot.location_hazard_overrides(location_id)
            is_coastal, is_urban = location.is_coastal, location.is_urban
        if characteristics is not None:
            is_coastal = is_coastal or characteristics.location_coastal is True
            is_urban = is_urban or characteristics.location_urban is True

        scores: List[HazardScore] = []
        unresolved: List[str] = []
        seen = set()

        for profile in profiles:
            if profile.key in seen:
                logger.warning(
                    f"Business type {business_type_id!r} lists hazard {profile.hazard_id!r} twice; keeping the first"
                )
                continue
            seen.add(profile.key)

            if not self.snapshot.has_hazard(profile.hazard_id):
                logger.warning(
                    f"Hazard {profile.hazard_id!r} linked to {business_type_id!r} is not in the catalog; skipping"
                )
                unresolved.append(profile.hazard_id)
                continue

            hazard = self.snapshot.hazard_definition(profile.hazard_id)
            override = overrides.get(profile.key)
            effective_level = override.level if override is not None else profile.base_level

            coastal_factor = self.coastal_factor(hazard, is_coastal)
            urban_factor = self.urban_factor(hazard, is_urban)
            is_peak = self.is_peak_season(hazard, as_of)
            seasonal_factor = self.PEAK_SEASON_FACTOR if is_peak else 1.0
            environmental_factor = coastal_factor * urban_factor

            anchor = self.LEVEL_ANCHORS[effective_level]
            raw = float(np.clip(anchor * environmental_factor * seasonal_factor, self.MIN_SCORE, self.MAX_SCORE))

            scores.append(HazardScore(
                hazard_id=hazard.hazard_id,
                base_level=profile.base_level,
                effective_level=effective_level,
                has_location_data=override is not None,
                base_score=self.LEVEL_ANCHORS[profile.base_level] / 10,
                location_adjusted_score=anchor / 10,
                coastal_factor=coastal_factor,
                urban_factor=urban_factor,
                seasonal_factor=seasonal_factor,
                environmental_factor=round(environmental_factor, 4),
                raw_score=round(raw / 10, 2),
                is_peak_season=is_peak,
                cascading_hazards=tuple(self.cascading_hazards(hazard)),
            ))

        logger.info(
            f"Scored {len(scores)} hazard(s) for {business_type_id!r} at {location_id or 'unknown location'}"
        )
        return HazardCalculation(scores=scores, unresolved_hazards=unresolved)

    def coastal_factor(self, hazard: HazardDefinition, is_coastal: bool) -> float:
        if not is_coastal:
            return 1.0
        if hazard.key in self.coastal_keys:
            return self.COASTAL_HAZARD_FACTOR
        return self.COASTAL_OTHER_FACTOR

    def urban_factor(self, hazard: HazardDefinition, is_urban: bool) -> float:
        if is_urban and hazard.key in self.urban_keys:
            return self.URBAN_HAZARD_FACTOR
        return 1.0

    @staticmethod
    def is_peak_season(hazard: HazardDefinition, as_of: date) -> bool:
        return as_of.month in hazard.peak_months

    def cascading_hazards(self, hazard: HazardDefinition) -> List[str]:
        """Declared cascades that exist in the catalog, unknown ids dropped"""
        cascades = []
        for cascade_id in hazard.cascading_risks:
            if not self.snapshot.has_hazard(cascade_id):
                logger.debug(f"Dropping unknown cascade {cascade_id!r} of {hazard.hazard_id!r}")
                continue
            canonical = self.snapshot.hazard_definition(cascade_id).hazard_id
            if canonical not in cascades:
                cascades.append(canonical)
        return cascades
