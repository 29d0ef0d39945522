"""
Strategy Recommendation Ranker

Selects the mitigation strategies that apply to the active hazards, scores
their effectiveness, cost and ROI for the business, flags conflicting
guidance and sorts the result.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .errors import CatalogUnavailableError
from .identifiers import hazard_key
from .models import (
    PRIORITY_RANK,
    BusinessCharacteristics,
    BusinessType,
    RecommendationResult,
    StrategyDefinition,
    StrategyPriority,
    StrategyRecommendation,
)

logger = logging.getLogger(__name__)

CATALOG_EMPTY = "catalog_empty"
CATALOG_UNAVAILABLE = "catalog_unavailable"


class DependencyProfile(NamedTuple):
    power_critical: bool
    water_intensive: bool
    coastal_exposed: bool
    staff_count: Optional[int]


def _at_least(value, threshold: float) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= threshold


def dependency_profile(
    characteristics: BusinessCharacteristics,
    business_type: Optional[BusinessType] = None,
) -> DependencyProfile:
    """
    Combine the business's facts (0-100 percentages) with the business
    type's dependency sheet (1-10 scale)
    """
    deps = business_type.dependencies if business_type is not None else {}

    power = _at_least(characteristics.power_dependency, 40) or _at_least(deps.get("power_critical"), 4)
    water = _at_least(characteristics.water_dependency, 40) or _at_least(deps.get("water_intensive"), 4)
    coastal = characteristics.location_coastal is True or _at_least(deps.get("coastal_exposure"), 3)

    staff = characteristics.staff_count
    if staff is None and business_type is not None:
        staff = business_type.minimum_staff

    return DependencyProfile(power, water, coastal, staff)


def _mentions(text: str, terms: Sequence[str]) -> bool:
    return any(term in text for term in terms)


class StrategyRanker:
    """Rank mitigation strategies for a set of active hazards"""

    BASE_EFFECTIVENESS = 0.5
    POWER_BONUS = 0.3
    WATER_BONUS = 0.2
    COASTAL_BONUS = 0.2

    POWER_TERMS = ("generator", "backup power")
    WATER_TERMS = ("water",)
    COASTAL_TERMS = ("elevated", "flood")

    BASE_COST = 0.5
    MEDIUM_BUSINESS_STAFF = 10
    LARGE_BUSINESS_STAFF = 50
    EXPENSIVE_TERMS = ("generator", "backup")
    CHEAP_TERMS = ("training", "plan")

    EVACUATION_TERMS = ("evacuation", "relocate")
    SHELTER_TERMS = ("shelter", "secure")

    def __init__(self, strategies: Optional[Sequence[StrategyDefinition]]):
        """
        Args:
            strategies: Active strategy catalog, or None when it could not be read
        """
        self.strategies = None if strategies is None else list(strategies)

    @classmethod
    def from_snapshot(cls, snapshot) -> "StrategyRanker":
        try:
            return cls(snapshot.strategy_catalog())
        except CatalogUnavailableError as e:
            logger.error(f"Strategy catalog unavailable: {e}")
            return cls(None)

    def rank(
        self,
        active_hazards: Iterable[str],
        characteristics: BusinessCharacteristics,
        business_type: BusinessType,
    ) -> RecommendationResult:
        """
        Build the sorted recommendation list

        Args:
            active_hazards: Hazards that were force-selected or selected
            characteristics: Facts about the business
            business_type: Business type being assessed

        Returns:
            RecommendationResult; on an empty or unreadable catalog the list is
            empty and ``error`` says why
        """
        if self.strategies is None:
            return RecommendationResult(error=CATALOG_UNAVAILABLE)
        if not self.strategies:
            logger.warning("Strategy catalog is empty")
            return RecommendationResult(error=CATALOG_EMPTY)

        active: Dict[str, str] = {}
        for hazard_id in active_hazards:
            try:
                active.setdefault(hazard_key(hazard_id), hazard_id)
            except ValueError as e:
                logger.warning(f"Ignoring hazard id: {e}")

        profile = dependency_profile(characteristics, business_type)
        candidates = self.candidates(active, business_type.business_type_id)

        conflicts = self.find_conflicts(candidates)

        recommendations = []
        for strategy, covered in candidates:
            effectiveness = self.effectiveness(strategy, profile)
            cost = self.cost(strategy, profile)
            roi = round(effectiveness / cost, 4)
            recommendations.append(StrategyRecommendation(
                strategy_id=strategy.strategy_id,
                category=strategy.category,
                hazards=tuple(sorted(active[key] for key in covered)),
                effectiveness=effectiveness,
                cost=cost,
                roi=roi,
                priority=self.priority(strategy, effectiveness, roi),
                conflicts=tuple(sorted(conflicts.get(strategy.strategy_id, ()))),
                is_recommended=strategy.is_recommended,
            ))

        recommendations.sort(key=lambda r: (
            not r.is_recommended,
            -PRIORITY_RANK[r.priority],
            -r.effectiveness,
            -r.roi,
            r.strategy_id,
        ))
        logger.info(
            f"Recommended {len(recommendations)} strateg{'y' if len(recommendations) == 1 else 'ies'} "
            f"for {len(active)} active hazard(s)"
        )
        return RecommendationResult(recommendations=tuple(recommendations))

    def candidates(
        self,
        active: Dict[str, str],
        business_type_id: str,
    ) -> List[Tuple[StrategyDefinition, frozenset]]:
        """Strategies covering at least one active hazard and allowed for the business type"""
        selected = []
        seen = set()
        for strategy in self.strategies or ():
            if strategy.strategy_id in seen:
                continue
            covered = strategy.applicable_hazards & active.keys()
            if not covered or not strategy.applies_to_business_type(business_type_id):
                continue
            seen.add(strategy.strategy_id)
            selected.append((strategy, frozenset(covered)))
        return selected

    def effectiveness(self, strategy: StrategyDefinition, profile: DependencyProfile) -> float:
        text = strategy.search_text
        value = self.BASE_EFFECTIVENESS
        if profile.power_critical and _mentions(text, self.POWER_TERMS):
            value += self.POWER_BONUS
        if profile.water_intensive and _mentions(text, self.WATER_TERMS):
            value += self.WATER_BONUS
        if profile.coastal_exposed and _mentions(text, self.COASTAL_TERMS):
            value += self.COASTAL_BONUS
        return round(min(max(value, 0.0), 1.0), 4)

    def cost(self, strategy: StrategyDefinition, profile: DependencyProfile) -> float:
        text = strategy.search_text
        value = self.BASE_COST
        if profile.staff_count is not None:
            if profile.staff_count > self.MEDIUM_BUSINESS_STAFF:
                value *= 1.5
            if profile.staff_count > self.LARGE_BUSINESS_STAFF:
                value *= 2.0
        if _mentions(text, self.EXPENSIVE_TERMS):
            value *= 2.0
        if _mentions(text, self.CHEAP_TERMS):
            value *= 0.5
        return round(value, 4)

    @staticmethod
    def priority(strategy: StrategyDefinition, effectiveness: float, roi: float) -> StrategyPriority:
        if strategy.priority_hint == StrategyPriority.CRITICAL:
            return StrategyPriority.CRITICAL
        if roi > 2.0 or effectiveness > 0.8:
            return StrategyPriority.HIGH
        if roi > 1.0 or effectiveness > 0.6:
            return StrategyPriority.MEDIUM
        return StrategyPriority.LOW

    def find_conflicts(
        self,
        candidates: List[Tuple[StrategyDefinition, frozenset]],
    ) -> Dict[str, List[str]]:
        """
        Pair evacuation/relocation guidance with shelter/secure-in-place
        guidance that covers the same hazard
        """
        conflicts: Dict[str, List[str]] = {}
        for i, (first, first_hazards) in enumerate(candidates):
            first_evacuates = _mentions(first.search_text, self.EVACUATION_TERMS)
            first_shelters = _mentions(first.search_text, self.SHELTER_TERMS)
            for second, second_hazards in candidates[i + 1:]:
                if not first_hazards & second_hazards:
                    continue
                second_evacuates = _mentions(second.search_text, self.EVACUATION_TERMS)
                second_shelters = _mentions(second.search_text, self.SHELTER_TERMS)
                if (first_evacuates and second_shelters) or (first_shelters and second_evacuates):
                    conflicts.setdefault(first.strategy_id, []).append(second.strategy_id)
                    conflicts.setdefault(second.strategy_id, []).append(first.strategy_id)
        return conflicts
