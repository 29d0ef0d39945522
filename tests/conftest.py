"""Shared catalog fixtures for the risk engine tests."""

import pytest

from risk_scoring.catalog import CatalogSnapshot
from risk_scoring.config import EngineSettings
from risk_scoring.models import (
    BusinessType,
    BusinessTypeHazardProfile,
    HazardDefinition,
    Location,
    LocationHazardProfile,
    MultiplierRule,
    StrategyDefinition,
)

# ---------------------------------------------------------------------------
# Catalog rows
# ---------------------------------------------------------------------------


def hazard_rows() -> list:
    return [
        HazardDefinition(
            hazard_id="hurricane",
            peak_months=(6, 7, 8, 9, 10, 11),
            cascading_risks=("flooding", "power_outage", "volcano"),
        ),
        HazardDefinition(hazard_id="flooding", peak_months=(9, 10)),
        HazardDefinition(hazard_id="power_outage", category="technological"),
        HazardDefinition(hazard_id="cyber_attack", category="technological"),
        HazardDefinition(hazard_id="fire", category="technological"),
        HazardDefinition(hazard_id="crime_theft", category="human"),
        HazardDefinition(hazard_id="earthquake"),
    ]


def business_type_rows() -> list:
    return [
        BusinessType(
            business_type_id="restaurant",
            minimum_staff=8,
            dependencies={"power_critical": 7, "water_intensive": 8, "coastal_exposure": 3},
        ),
        BusinessType(
            business_type_id="it_services",
            minimum_staff=3,
            dependencies={"power_critical": 2, "water_intensive": 1, "coastal_exposure": 1},
        ),
    ]


def business_type_hazard_rows() -> list:
    return [
        BusinessTypeHazardProfile(business_type_id="restaurant", hazard_id="hurricane", base_level="high"),
        BusinessTypeHazardProfile(business_type_id="restaurant", hazard_id="flooding", base_level="medium"),
        BusinessTypeHazardProfile(business_type_id="restaurant", hazard_id="power_outage", base_level="medium"),
        BusinessTypeHazardProfile(business_type_id="restaurant", hazard_id="fire", base_level="low"),
        BusinessTypeHazardProfile(business_type_id="restaurant", hazard_id="cyber_attack", base_level="low"),
        BusinessTypeHazardProfile(business_type_id="it_services", hazard_id="cyber_attack", base_level="medium"),
        BusinessTypeHazardProfile(business_type_id="it_services", hazard_id="PowerOutage", base_level="high"),
        BusinessTypeHazardProfile(business_type_id="it_services", hazard_id="earthquake", base_level="low"),
    ]


def location_rows() -> list:
    return [
        Location(location_id="harbour", is_coastal=True),
        Location(location_id="coastal_town", is_coastal=True),
        Location(location_id="inland_city", is_urban=True),
        Location(location_id="inland_village"),
    ]


def location_hazard_rows() -> list:
    return [
        LocationHazardProfile(location_id="coastal_town", hazard_id="hurricane", level="high"),
        LocationHazardProfile(location_id="coastal_town", hazard_id="flooding", level="high"),
        LocationHazardProfile(location_id="inland_city", hazard_id="fire", level="high"),
    ]


def multiplier_rule_rows() -> list:
    return [
        MultiplierRule(
            rule_id="r-digital",
            name="Digital dependent",
            characteristic="digital_dependency",
            condition={"kind": "threshold", "threshold": 90},
            factor=1.4,
            applicable_hazards=["CyberAttack"],
            priority=10,
            reasoning={"en": "Core systems are online", "es": "Sistemas en línea", "fr": "Systèmes en ligne"},
        ),
        MultiplierRule(
            rule_id="r-power",
            name="Power dependent",
            characteristic="power_dependency",
            condition={"kind": "threshold", "threshold": 80},
            factor=1.5,
            applicable_hazards=["power_outage"],
            priority=20,
        ),
        MultiplierRule(
            rule_id="r-coastal",
            name="Coastal location",
            characteristic="location_coastal",
            condition={"kind": "boolean"},
            factor=1.3,
            applicable_hazards=["hurricane", "flooding"],
            priority=5,
        ),
        MultiplierRule(
            rule_id="r-tourism",
            name="Partly tourism dependent",
            characteristic="tourism_share",
            condition={"kind": "range", "min_value": 30, "max_value": 60},
            factor=1.1,
            applicable_hazards=["hurricane"],
            priority=30,
        ),
    ]


def strategy_rows() -> list:
    return [
        StrategyDefinition(
            strategy_id="evacuation_procedures",
            title="Emergency Evacuation Procedures",
            category="response",
            applicable_hazards=["hurricane"],
            priority_hint="critical",
        ),
        StrategyDefinition(
            strategy_id="shelter_reinforcement",
            title="Shelter-in-Place Reinforcement",
            category="response",
            applicable_hazards=["hurricane"],
        ),
        StrategyDefinition(
            strategy_id="backup_generator",
            title="Backup Generator",
            applicable_hazards=["power_outage", "hurricane"],
            keywords=["generator"],
            is_recommended=True,
        ),
        StrategyDefinition(
            strategy_id="staff_training",
            title="Staff Fire Safety Training",
            category="preparation",
            applicable_hazards=["fire"],
        ),
        StrategyDefinition(
            strategy_id="flood_barriers",
            title="Flood Barriers",
            applicable_hazards=["flooding"],
            applicable_business_types=["restaurant"],
        ),
        StrategyDefinition(
            strategy_id="data_backups",
            title="Offsite Data Backups",
            category="recovery",
            applicable_hazards=["cyber_attack"],
            applicable_business_types=["it_services"],
        ),
    ]


def build_snapshot(**overrides) -> CatalogSnapshot:
    tables = {
        "hazards": hazard_rows(),
        "business_types": business_type_rows(),
        "business_type_hazards": business_type_hazard_rows(),
        "locations": location_rows(),
        "location_hazards": location_hazard_rows(),
        "multiplier_rules": multiplier_rule_rows(),
        "strategies": strategy_rows(),
    }
    tables.update(overrides)
    return CatalogSnapshot(**tables)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def snapshot():
    return build_snapshot()


@pytest.fixture()
def settings():
    return EngineSettings(force_preselect_score=7.0, min_preselect_score=4.0, catalog_path="unused")


@pytest.fixture()
def make_snapshot():
    """Build the test catalog with some tables replaced"""
    return build_snapshot
