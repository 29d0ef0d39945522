"""Tests for the hazard risk calculator."""

from datetime import date

import pytest

from risk_scoring.errors import NotFoundError
from risk_scoring.hazard_calculator import HazardRiskCalculator
from risk_scoring.models import BusinessCharacteristics, BusinessTypeHazardProfile, RiskLevel

JANUARY = date(2024, 1, 15)
SEPTEMBER = date(2024, 9, 1)


def _by_hazard(calculation) -> dict:
    return {score.hazard_id: score for score in calculation.scores}


def test_coastal_hurricane_is_clamped_to_ten(snapshot):
    calculator = HazardRiskCalculator(snapshot)
    scores = _by_hazard(calculator.calculate("restaurant", "harbour", JANUARY))

    hurricane = scores["hurricane"]
    assert hurricane.coastal_factor == 1.5
    assert hurricane.seasonal_factor == 1.0
    assert hurricane.base_score == 7.0
    assert hurricane.location_adjusted_score == 7.0
    assert hurricane.raw_score == 10.0
    assert hurricane.has_location_data is False


def test_coastal_location_amplifies_other_hazards_less(snapshot):
    scores = _by_hazard(HazardRiskCalculator(snapshot).calculate("restaurant", "harbour", JANUARY))

    assert scores["flooding"].raw_score == 7.5
    assert scores["power_outage"].coastal_factor == 1.2
    assert scores["power_outage"].raw_score == 6.0
    assert scores["fire"].raw_score == 3.6


def test_location_override_replaces_base_level(snapshot):
    scores = _by_hazard(HazardRiskCalculator(snapshot).calculate("restaurant", "coastal_town", JANUARY))

    flooding = scores["flooding"]
    assert flooding.base_level == RiskLevel.MEDIUM
    assert flooding.effective_level == RiskLevel.HIGH
    assert flooding.has_location_data is True
    assert flooding.base_score == 5.0
    assert flooding.location_adjusted_score == 7.0
    assert flooding.raw_score == 10.0


def test_peak_season_factor(snapshot):
    scores = _by_hazard(HazardRiskCalculator(snapshot).calculate("restaurant", "inland_village", SEPTEMBER))

    assert scores["hurricane"].is_peak_season is True
    assert scores["hurricane"].seasonal_factor == 1.3
    assert scores["hurricane"].raw_score == 9.1
    assert scores["flooding"].raw_score == 6.5
    assert scores["power_outage"].is_peak_season is False
    assert scores["power_outage"].raw_score == 5.0


def test_urban_factor_applies_to_urban_hazards_only(snapshot):
    scores = _by_hazard(HazardRiskCalculator(snapshot).calculate("restaurant", "inland_city", JANUARY))

    assert scores["fire"].urban_factor == 1.2
    assert scores["fire"].environmental_factor == 1.2
    assert scores["fire"].raw_score == 8.4
    assert scores["cyber_attack"].urban_factor == 1.0
    assert scores["cyber_attack"].raw_score == 3.0


def test_characteristics_can_mark_site_urban(snapshot):
    characteristics = BusinessCharacteristics(location_urban=True)
    scores = _by_hazard(
        HazardRiskCalculator(snapshot).calculate("restaurant", "inland_village", JANUARY, characteristics)
    )

    assert scores["fire"].raw_score == 3.6


def test_unknown_location_means_no_environmental_adjustment(snapshot):
    calculation = HazardRiskCalculator(snapshot).calculate("restaurant", None, JANUARY)

    for score in calculation.scores:
        assert score.environmental_factor == 1.0
        assert score.has_location_data is False


def test_cascades_drop_unknown_hazards(snapshot):
    scores = _by_hazard(HazardRiskCalculator(snapshot).calculate("restaurant", None, JANUARY))

    assert scores["hurricane"].cascading_hazards == ("flooding", "power_outage")


def test_hazard_ids_resolve_across_spellings(snapshot):
    scores = _by_hazard(HazardRiskCalculator(snapshot).calculate("it_services", None, JANUARY))

    assert set(scores) == {"cyber_attack", "power_outage", "earthquake"}
    assert scores["power_outage"].raw_score == 7.0


def test_unknown_business_type_raises(snapshot):
    with pytest.raises(NotFoundError) as exc_info:
        HazardRiskCalculator(snapshot).calculate("bakery", None, JANUARY)

    assert exc_info.value.entity_id == "bakery"


def test_unknown_location_id_raises(snapshot):
    with pytest.raises(NotFoundError):
        HazardRiskCalculator(snapshot).calculate("restaurant", "atlantis", JANUARY)


def test_unresolved_hazard_is_skipped(make_snapshot):
    profiles = [
        BusinessTypeHazardProfile(business_type_id="bakery", hazard_id="fire", base_level="high"),
        BusinessTypeHazardProfile(business_type_id="bakery", hazard_id="meteor_strike", base_level="low"),
    ]
    snapshot = make_snapshot(business_type_hazards=profiles)

    calculation = HazardRiskCalculator(snapshot).calculate("bakery", None, JANUARY)

    assert [s.hazard_id for s in calculation.scores] == ["fire"]
    assert calculation.unresolved_hazards == ["meteor_strike"]


def test_duplicate_hazard_keeps_first_row(make_snapshot):
    profiles = [
        BusinessTypeHazardProfile(business_type_id="bakery", hazard_id="power_outage", base_level="high"),
        BusinessTypeHazardProfile(business_type_id="bakery", hazard_id="Power-Outage", base_level="low"),
    ]
    snapshot = make_snapshot(business_type_hazards=profiles)

    calculation = HazardRiskCalculator(snapshot).calculate("bakery", None, JANUARY)

    assert len(calculation.scores) == 1
    assert calculation.scores[0].base_level == RiskLevel.HIGH


@pytest.mark.parametrize("location_id", [None, "harbour", "coastal_town", "inland_city", "inland_village"])
@pytest.mark.parametrize("month", [1, 6, 9, 12])
def test_raw_scores_stay_in_range(snapshot, location_id, month):
    characteristics = BusinessCharacteristics(location_coastal=True, location_urban=True)
    calculator = HazardRiskCalculator(snapshot)

    for business_type_id in ("restaurant", "it_services"):
        calculation = calculator.calculate(business_type_id, location_id, date(2024, month, 1), characteristics)
        for score in calculation.scores:
            assert 1.0 <= score.raw_score <= 10.0
