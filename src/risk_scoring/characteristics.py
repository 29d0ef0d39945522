"""
Business characteristic builders

Turn the wizard's plain-language answers, or the older 1-10 slider form,
into the fact sheet the multiplier rules are evaluated against.
"""

from typing import Optional

from .models import BusinessCharacteristics

TOURISM_SHARE = {"mainly_tourists": 80, "mix": 40, "mainly_locals": 10}
LOCAL_CUSTOMER_SHARE = {"mainly_tourists": 15, "mix": 50, "mainly_locals": 85}
POWER_DEPENDENCY = {"cannot_operate": 95, "partially": 50, "can_operate": 10}
DIGITAL_DEPENDENCY = {"essential": 95, "helpful": 50, "not_used": 10}

FLOOD_PRONE_RISK = 7
SLIDER_DEFAULT = 5
SLIDER_TRUE_AT = 7


def from_simplified_answers(
    customer_base: Optional[str] = None,
    power_dependency: Optional[str] = None,
    digital_dependency: Optional[str] = None,
    imports_from_overseas: bool = False,
    sells_perishable: bool = False,
    minimal_inventory: bool = False,
    expensive_equipment: bool = False,
    is_coastal: bool = False,
    is_urban: bool = False,
    flood_risk: Optional[float] = None,
) -> BusinessCharacteristics:
    """
    Build characteristics from the simplified wizard questions

    Args:
        customer_base: 'mainly_tourists', 'mix' or 'mainly_locals'
        power_dependency: 'cannot_operate', 'partially' or 'can_operate'
        digital_dependency: 'essential', 'helpful' or 'not_used'
        imports_from_overseas: Imports goods from overseas
        sells_perishable: Sells perishable goods
        minimal_inventory: Keeps minimal inventory on hand
        expensive_equipment: Relies on expensive equipment
        is_coastal: Location is coastal
        is_urban: Location is urban
        flood_risk: Location flood risk on a 0-10 scale

    Returns:
        BusinessCharacteristics
    """
    return BusinessCharacteristics(
        location_coastal=is_coastal,
        location_urban=is_urban,
        location_flood_prone=(flood_risk or 0) > FLOOD_PRONE_RISK,
        tourism_share=TOURISM_SHARE.get(customer_base, 10),
        local_customer_share=LOCAL_CUSTOMER_SHARE.get(customer_base, 85),
        export_share=5,
        power_dependency=POWER_DEPENDENCY.get(power_dependency, 10),
        digital_dependency=DIGITAL_DEPENDENCY.get(digital_dependency, 10),
        water_dependency=90 if sells_perishable else 30,
        supply_chain_complex=imports_from_overseas or minimal_inventory or sells_perishable,
        perishable_goods=sells_perishable,
        just_in_time_inventory=minimal_inventory,
        seasonal_business=False,
        physical_asset_intensive=expensive_equipment,
        own_building=False,
        significant_inventory=not minimal_inventory,
    )


def _slider_percent(value: Optional[float]) -> float:
    # 1 -> 0%, 10 -> 100%
    return round(((value or SLIDER_DEFAULT) - 1) * 11.11, 2)


def from_legacy_sliders(
    tourism_dependency: Optional[float] = None,
    digital_dependency: Optional[float] = None,
    physical_asset_intensity: Optional[float] = None,
    supply_chain_complexity: Optional[float] = None,
    seasonality_factor: Optional[float] = None,
    is_coastal: bool = False,
    is_urban: bool = False,
) -> BusinessCharacteristics:
    """Build characteristics from the older 1-10 slider form; unset sliders count as 5"""
    tourism = _slider_percent(tourism_dependency)
    digital = _slider_percent(digital_dependency)
    supply_chain = (supply_chain_complexity or SLIDER_DEFAULT) >= SLIDER_TRUE_AT
    assets = physical_asset_intensity or SLIDER_DEFAULT

    return BusinessCharacteristics(
        location_coastal=is_coastal,
        location_urban=is_urban,
        tourism_share=tourism,
        local_customer_share=round(100 - tourism, 2),
        export_share=0,
        digital_dependency=digital,
        power_dependency=digital,
        water_dependency=30,
        supply_chain_complex=supply_chain,
        perishable_goods=False,
        just_in_time_inventory=supply_chain,
        seasonal_business=(seasonality_factor or SLIDER_DEFAULT) >= SLIDER_TRUE_AT,
        physical_asset_intensive=assets >= SLIDER_TRUE_AT,
        own_building=False,
        significant_inventory=assets >= SLIDER_DEFAULT,
    )
