"""
Catalog Snapshot

Read-only view of the admin catalog taken at the start of an assessment.
Every engine stage reads from a snapshot instead of a shared client, so
assessments for different businesses can run side by side.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from .errors import CatalogUnavailableError, MalformedRuleError, NotFoundError, Stage
from .identifiers import hazard_key
from .models import (
    BusinessType,
    BusinessTypeHazardProfile,
    HazardDefinition,
    Location,
    LocationHazardProfile,
    MultiplierRule,
    StrategyDefinition,
)

logger = logging.getLogger(__name__)

# Table names shared by the catalog connectors
CATALOG_TABLES = (
    "hazards",
    "business_types",
    "business_type_hazards",
    "locations",
    "location_hazards",
    "multiplier_rules",
    "strategies",
)

# Tables an assessment cannot be scored without
REQUIRED_TABLES = ("hazards", "business_types", "business_type_hazards", "locations", "location_hazards")


class CatalogSnapshot:
    """Indexed, immutable catalog data for one or more assessments"""

    def __init__(
        self,
        hazards: Iterable[HazardDefinition] = (),
        business_types: Iterable[BusinessType] = (),
        business_type_hazards: Iterable[BusinessTypeHazardProfile] = (),
        locations: Iterable[Location] = (),
        location_hazards: Iterable[LocationHazardProfile] = (),
        multiplier_rules: Optional[Iterable[MultiplierRule]] = (),
        strategies: Optional[Iterable[StrategyDefinition]] = (),
    ):
        """
        Args:
            multiplier_rules: None when the rule store could not be read
            strategies: None when the strategy catalog could not be read
        """
        self._hazards: Dict[str, HazardDefinition] = {}
        for hazard in hazards:
            if hazard.key in self._hazards:
                logger.warning(f"Duplicate hazard definition {hazard.hazard_id!r} ignored")
                continue
            self._hazards[hazard.key] = hazard

        self._business_types: Dict[str, BusinessType] = {bt.business_type_id: bt for bt in business_types}
        self._locations: Dict[str, Location] = {loc.location_id: loc for loc in locations}

        self._business_type_hazards: Dict[str, List[BusinessTypeHazardProfile]] = {}
        for profile in business_type_hazards:
            if profile.business_type_id not in self._business_types:
                self._business_types[profile.business_type_id] = BusinessType(
                    business_type_id=profile.business_type_id
                )
            self._business_type_hazards.setdefault(profile.business_type_id, []).append(profile)

        self._location_hazards: Dict[str, Dict[str, LocationHazardProfile]] = {}
        for profile in location_hazards:
            if profile.location_id not in self._locations:
                self._locations[profile.location_id] = Location(location_id=profile.location_id)
            overrides = self._location_hazards.setdefault(profile.location_id, {})
            if profile.key in overrides:
                logger.warning(
                    f"Duplicate override for {profile.hazard_id!r} at location {profile.location_id!r} ignored"
                )
                continue
            overrides[profile.key] = profile

        self._multiplier_rules: Optional[Tuple[MultiplierRule, ...]] = (
            None if multiplier_rules is None else tuple(multiplier_rules)
        )
        self._strategies: Optional[Tuple[StrategyDefinition, ...]] = (
            None if strategies is None else tuple(strategies)
        )

    @classmethod
    def from_tables(cls, tables: Mapping[str, Optional[List[Dict[str, Any]]]]) -> "CatalogSnapshot":
        """
        Validate raw catalog rows and build a snapshot

        A table mapped to None is treated as unreadable. Only the rule and
        strategy tables may be unreadable; they become unavailable sections.
        Malformed multiplier rules are skipped; malformed rows anywhere else
        abort the load.

        Raises:
            CatalogUnavailableError: if a required table is unreadable or invalid
        """
        for required in REQUIRED_TABLES:
            if tables.get(required) is None:
                raise CatalogUnavailableError(
                    f"Catalog table {required!r} could not be read",
                    entity_id=required,
                    stage=Stage.CATALOG,
                )

        try:
            hazards = [HazardDefinition.model_validate(_present(row)) for row in tables["hazards"]]
            business_types = [BusinessType.model_validate(_present(row)) for row in tables["business_types"]]
            bt_hazards = [
                BusinessTypeHazardProfile.model_validate(_present(row)) for row in tables["business_type_hazards"]
            ]
            locations = [Location.model_validate(_present(row)) for row in tables["locations"]]
            loc_hazards = [
                LocationHazardProfile.model_validate(_present(row)) for row in tables["location_hazards"]
            ]
            strategy_rows = tables.get("strategies")
            strategies = (
                None if strategy_rows is None
                else [StrategyDefinition.model_validate(_present(row)) for row in strategy_rows]
            )
        except ValidationError as e:
            raise CatalogUnavailableError(
                f"Catalog contains invalid rows: {e.error_count()} error(s)",
                stage=Stage.CATALOG,
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

        rule_rows = tables.get("multiplier_rules")
        rules = None if rule_rows is None else parse_multiplier_rules(rule_rows)

        return cls(
            hazards=hazards,
            business_types=business_types,
            business_type_hazards=bt_hazards,
            locations=locations,
            location_hazards=loc_hazards,
            multiplier_rules=rules,
            strategies=strategies,
        )

    # -- lookups ------------------------------------------------------------

    def business_type(self, business_type_id: str) -> BusinessType:
        try:
            return self._business_types[business_type_id]
        except KeyError:
            raise NotFoundError(
                f"Business type {business_type_id!r} not found",
                entity_id=business_type_id,
                stage=Stage.HAZARD_CALCULATION,
            ) from None

    def location(self, location_id: str) -> Location:
        try:
            return self._locations[location_id]
        except KeyError:
            raise NotFoundError(
                f"Location {location_id!r} not found",
                entity_id=location_id,
                stage=Stage.HAZARD_CALCULATION,
            ) from None

    def hazards_for_business_type(self, business_type_id: str) -> List[BusinessTypeHazardProfile]:
        self.business_type(business_type_id)
        return list(self._business_type_hazards.get(business_type_id, []))

    def location_hazard_overrides(self, location_id: str) -> Dict[str, LocationHazardProfile]:
        """Overrides for a location keyed by normalized hazard id"""
        self.location(location_id)
        return dict(self._location_hazards.get(location_id, {}))

    def hazard_definition(self, hazard_id: str) -> HazardDefinition:
        try:
            return self._hazards[hazard_key(hazard_id)]
        except KeyError:
            raise NotFoundError(
                f"Hazard {hazard_id!r} not found",
                entity_id=hazard_id,
                stage=Stage.HAZARD_CALCULATION,
            ) from None

    def has_hazard(self, hazard_id: str) -> bool:
        try:
            return hazard_key(hazard_id) in self._hazards
        except ValueError:
            return False

    @property
    def hazards(self) -> List[HazardDefinition]:
        return list(self._hazards.values())

    @property
    def business_types(self) -> List[BusinessType]:
        return list(self._business_types.values())

    @property
    def locations(self) -> List[Location]:
        return list(self._locations.values())

    def active_multiplier_rules(self) -> List[MultiplierRule]:
        """
        Active rules in application order

        Raises:
            CatalogUnavailableError: if the rule store could not be read
        """
        if self._multiplier_rules is None:
            raise CatalogUnavailableError("Multiplier rules unavailable", stage=Stage.MULTIPLIERS)
        active = [rule for rule in self._multiplier_rules if rule.is_active]
        return sorted(active, key=lambda rule: (rule.priority, rule.rule_id))

    def strategy_catalog(self) -> List[StrategyDefinition]:
        """
        Active strategies

        Raises:
            CatalogUnavailableError: if the strategy catalog could not be read
        """
        if self._strategies is None:
            raise CatalogUnavailableError("Strategy catalog unavailable", stage=Stage.STRATEGY_RANKING)
        return [strategy for strategy in self._strategies if strategy.is_active]


def parse_multiplier_rules(rows: Iterable[Dict[str, Any]]) -> List[MultiplierRule]:
    """Validate rule rows, skipping (and logging) any that are malformed"""
    rules = []
    for index, row in enumerate(rows):
        rule_id = str(row.get("rule_id") or f"row-{index}")
        try:
            rules.append(MultiplierRule.model_validate(_present(row)))
        except ValidationError as e:
            error = MalformedRuleError(
                f"Skipping multiplier rule {rule_id!r}: {e.errors(include_url=False)[0]['msg']}",
                entity_id=rule_id,
                stage=Stage.MULTIPLIERS,
            )
            logger.warning(str(error))
    return rules


def _present(row: Dict[str, Any]) -> Dict[str, Any]:
    # Null columns fall back to the model defaults
    return {column: value for column, value in row.items() if value is not None}
