"""
Data models for the risk engine.

Catalog rows (hazards, business types, locations, multiplier rules,
strategies) and the derived assessment/recommendation results. Everything is
an immutable pydantic model so a result can be dumped straight into the
persisted assessment document.
"""

import json
import math
import numbers
import re
from enum import Enum
from typing import Annotated, Any, Dict, FrozenSet, Literal, Optional, Tuple, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from .identifiers import hazard_key, hazard_keys, parse_id_list


class RiskLevel(str, Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


# Levels an administrator may assign to a (business type | location, hazard) pair
BASE_LEVELS = (RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.VERY_HIGH)


class HazardCategory(str, Enum):
    NATURAL = "natural"
    TECHNOLOGICAL = "technological"
    HUMAN = "human"
    ENVIRONMENTAL = "environmental"
    ECONOMIC = "economic"


class Disposition(str, Enum):
    FORCE_SELECTED = "force_selected"
    SELECTED = "selected"
    AVAILABLE = "available"


class SelectionReason(str, Enum):
    CRITICAL_RISK = "critical_risk"
    MEETS_THRESHOLD = "meets_threshold"
    BELOW_THRESHOLD = "below_threshold"
    NO_LOCATION_DATA = "no_location_data"


class StrategyPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


PRIORITY_RANK = {
    StrategyPriority.CRITICAL: 4,
    StrategyPriority.HIGH: 3,
    StrategyPriority.MEDIUM: 2,
    StrategyPriority.LOW: 1,
}


def _check_base_level(level: RiskLevel) -> RiskLevel:
    if level not in BASE_LEVELS:
        raise ValueError(f"Risk level must be one of {[l.value for l in BASE_LEVELS]}, got {level.value}")
    return level


BaseLevel = Annotated[RiskLevel, AfterValidator(_check_base_level)]


def _parse_json_field(value: Any) -> Any:
    if isinstance(value, str) and value.strip()[:1] in ("[", "{"):
        return json.loads(value)
    return value


class LocalizedText(BaseModel):
    """Multilingual text as stored by the admin catalog"""

    model_config = ConfigDict(frozen=True)

    en: str = ""
    es: str = ""
    fr: str = ""

    @model_validator(mode="before")
    @classmethod
    def _accept_plain_string(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, str):
            parsed = value.strip()
            if parsed.startswith("{"):
                try:
                    return json.loads(parsed)
                except json.JSONDecodeError:
                    pass
            return {"en": value}
        return value


# ---------------------------------------------------------------------------
# Catalog rows
# ---------------------------------------------------------------------------

class HazardDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    hazard_id: str = Field(..., min_length=1)
    category: HazardCategory = HazardCategory.NATURAL
    default_frequency: Optional[str] = None
    default_impact: Optional[str] = None
    peak_months: Tuple[int, ...] = ()
    warning_time: Optional[str] = None
    geographic_scope: Optional[str] = None
    cascading_risks: Tuple[str, ...] = ()

    @field_validator("peak_months", mode="before")
    @classmethod
    def _parse_peak_months(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, int):
            return (value,)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return ()
            if stripped.startswith("["):
                value = json.loads(stripped)
            else:
                value = [part.strip() for part in stripped.split(",") if part.strip()]
        return tuple(int(month) for month in value)

    @field_validator("peak_months")
    @classmethod
    def _check_months(cls, months: Tuple[int, ...]) -> Tuple[int, ...]:
        for month in months:
            if not 1 <= month <= 12:
                raise ValueError(f"Peak month must be 1-12, got {month}")
        return months

    @field_validator("cascading_risks", mode="before")
    @classmethod
    def _parse_cascades(cls, value: Any) -> Any:
        return tuple(h for h in parse_id_list(value) if h.strip())

    @property
    def key(self) -> str:
        return hazard_key(self.hazard_id)


class BusinessType(BaseModel):
    model_config = ConfigDict(frozen=True)

    business_type_id: str = Field(..., min_length=1)
    category: Optional[str] = None
    minimum_staff: Optional[int] = None
    # 1-10 scale: power_critical, water_intensive, coastal_exposure, ...
    dependencies: Dict[str, float] = Field(default_factory=dict)

    @field_validator("minimum_staff", mode="before")
    @classmethod
    def _leading_staff_count(cls, value: Any) -> Any:
        # Stored as free text such as "5-10" or "12 staff"
        if isinstance(value, str):
            match = re.match(r"\s*(\d+)", value)
            return int(match.group(1)) if match else None
        return value

    @field_validator("dependencies", mode="before")
    @classmethod
    def _parse_dependencies(cls, value: Any) -> Any:
        if value is None or value == "":
            return {}
        return _parse_json_field(value)


class BusinessTypeHazardProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    business_type_id: str = Field(..., min_length=1)
    hazard_id: str = Field(..., min_length=1)
    base_level: BaseLevel

    @property
    def key(self) -> str:
        return hazard_key(self.hazard_id)


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    location_id: str = Field(..., min_length=1)
    country_code: Optional[str] = None
    admin_unit: Optional[str] = None
    is_coastal: bool = False
    is_urban: bool = False


class LocationHazardProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    location_id: str = Field(..., min_length=1)
    hazard_id: str = Field(..., min_length=1)
    level: BaseLevel

    @property
    def key(self) -> str:
        return hazard_key(self.hazard_id)


class BooleanCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["boolean"] = "boolean"


class ThresholdCondition(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    kind: Literal["threshold"] = "threshold"
    threshold: float


class RangeCondition(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    kind: Literal["range"] = "range"
    min_value: float
    max_value: float

    @model_validator(mode="after")
    def _check_bounds(self) -> "RangeCondition":
        if self.min_value > self.max_value:
            raise ValueError(f"Range minimum {self.min_value} exceeds maximum {self.max_value}")
        return self


Condition = Annotated[
    Union[BooleanCondition, ThresholdCondition, RangeCondition],
    Field(discriminator="kind"),
]


class MultiplierRule(BaseModel):
    """Admin-authored conditional multiplier"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    rule_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    characteristic: str = Field(..., min_length=1)
    condition: Condition
    factor: float = Field(..., gt=0)
    applicable_hazards: FrozenSet[str]
    priority: int = 0
    reasoning: LocalizedText = Field(default_factory=LocalizedText)
    is_active: bool = True

    @model_validator(mode="before")
    @classmethod
    def _condition_from_columns(cls, data: Any) -> Any:
        # The admin store keeps the condition as flat columns
        if isinstance(data, dict) and "condition" not in data and "condition_type" in data:
            data = dict(data)
            kind = data.pop("condition_type")
            condition: Dict[str, Any] = {"kind": kind}
            if kind == "threshold":
                condition["threshold"] = data.pop("threshold_value", None)
            elif kind == "range":
                condition["min_value"] = data.pop("min_value", None)
                condition["max_value"] = data.pop("max_value", None)
            for column in ("threshold_value", "min_value", "max_value"):
                data.pop(column, None)
            data["condition"] = condition
        return data

    @field_validator("applicable_hazards", mode="before")
    @classmethod
    def _normalize_hazards(cls, value: Any) -> Any:
        keys = hazard_keys(value)
        if not keys:
            raise ValueError("Multiplier rule applies to no hazards")
        return keys

    @field_validator("factor")
    @classmethod
    def _finite_factor(cls, factor: float) -> float:
        if not math.isfinite(factor):
            raise ValueError(f"Multiplier factor must be finite, got {factor}")
        return factor


class StrategyDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy_id: str = Field(..., min_length=1)
    title: LocalizedText
    category: str = "prevention"
    applicable_hazards: FrozenSet[str]
    # Empty means every business type
    applicable_business_types: FrozenSet[str] = frozenset()
    cost_tier: Optional[str] = None
    priority_hint: StrategyPriority = StrategyPriority.MEDIUM
    keywords: Tuple[str, ...] = ()
    is_recommended: bool = False
    is_active: bool = True

    @field_validator("applicable_hazards", mode="before")
    @classmethod
    def _normalize_hazards(cls, value: Any) -> Any:
        return hazard_keys(value)

    @field_validator("applicable_business_types", mode="before")
    @classmethod
    def _parse_business_types(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() == "all":
            return frozenset()
        ids = parse_id_list(value)
        if any(bt.lower() == "all" for bt in ids):
            return frozenset()
        return frozenset(ids)

    @field_validator("keywords", mode="before")
    @classmethod
    def _parse_keywords(cls, value: Any) -> Any:
        return tuple(parse_id_list(value))

    def applies_to_business_type(self, business_type_id: str) -> bool:
        return not self.applicable_business_types or business_type_id in self.applicable_business_types

    @property
    def search_text(self) -> str:
        """Lowercased English title, category and keywords used for keyword matching"""
        return " ".join([self.title.en, self.category, *self.keywords]).lower()


# Declared yes/no and numeric facts
_FACT_TYPES = {
    **dict.fromkeys((
        "location_coastal", "location_urban", "location_flood_prone",
        "supply_chain_complex", "perishable_goods", "just_in_time_inventory",
        "seasonal_business", "physical_asset_intensive", "own_building", "significant_inventory",
    ), bool),
    **dict.fromkeys((
        "tourism_share", "local_customer_share", "export_share",
        "digital_dependency", "power_dependency", "water_dependency",
    ), numbers.Real),
}


def _is_fact_of_type(value: Any, expected: type) -> bool:
    if expected is bool:
        return isinstance(value, bool)
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


class BusinessCharacteristics(BaseModel):
    """
    Fact sheet about one business.

    Every fact is absent unless supplied; administrator-defined facts that
    are not listed here are kept as extra fields.

    Declared facts are typed strictly. A value of the wrong type (1 for a
    yes/no fact, "high" for a percentage) is not coerced: the field stays
    unset and the raw value is kept so multiplier rules can reject it.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    # Location facts
    location_coastal: Optional[bool] = None
    location_urban: Optional[bool] = None
    location_flood_prone: Optional[bool] = None

    # Revenue shares (0-100)
    tourism_share: Optional[float] = None
    local_customer_share: Optional[float] = None
    export_share: Optional[float] = None

    # Operations (0-100, 100 = cannot operate without)
    digital_dependency: Optional[float] = None
    power_dependency: Optional[float] = None
    water_dependency: Optional[float] = None

    # Supply chain
    supply_chain_complex: Optional[bool] = None
    perishable_goods: Optional[bool] = None
    just_in_time_inventory: Optional[bool] = None

    # Timing and physical assets
    seasonal_business: Optional[bool] = None
    physical_asset_intensive: Optional[bool] = None
    own_building: Optional[bool] = None
    significant_inventory: Optional[bool] = None

    staff_count: Optional[int] = Field(None, ge=0)

    _mistyped: Dict[str, Any] = PrivateAttr(default_factory=dict)

    @model_validator(mode="wrap")
    @classmethod
    def _set_aside_mistyped(cls, data: Any, handler):
        if not isinstance(data, dict):
            return handler(data)

        mistyped = {}
        for name, value in data.items():
            expected = _FACT_TYPES.get(name)
            if value is not None and expected is not None and not _is_fact_of_type(value, expected):
                mistyped[name] = value

        instance = handler({k: v for k, v in data.items() if k not in mistyped})
        if mistyped:
            instance._mistyped = mistyped
        return instance

    def get(self, key: str) -> Any:
        """Value of a fact, or None when it was not supplied"""
        if key in self._mistyped:
            return self._mistyped[key]
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key)


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------

class AppliedMultiplier(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    name: str
    factor: float
    reasoning: LocalizedText


class MultiplierResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_score: float
    final_score: float
    applied_multipliers: Tuple[AppliedMultiplier, ...] = ()
    multipliers_unavailable: bool = False


class HazardScore(BaseModel):
    """Hazard Risk Calculator output for one hazard (scores on the 0-10 scale)"""

    model_config = ConfigDict(frozen=True)

    hazard_id: str
    base_level: RiskLevel
    effective_level: RiskLevel
    has_location_data: bool
    base_score: float
    location_adjusted_score: float
    coastal_factor: float
    urban_factor: float
    seasonal_factor: float
    environmental_factor: float
    raw_score: float
    is_peak_season: bool
    cascading_hazards: Tuple[str, ...] = ()


class Classification(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: RiskLevel
    disposition: Disposition
    reason: SelectionReason

    @property
    def is_active(self) -> bool:
        return self.disposition in (Disposition.FORCE_SELECTED, Disposition.SELECTED)


class RiskAssessmentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    hazard_id: str
    base_level: RiskLevel
    effective_level: RiskLevel
    base_score: float
    location_adjusted_score: float
    seasonal_factor: float
    coastal_factor: float
    urban_factor: float
    environmental_factor: float
    raw_score: float
    applied_multipliers: Tuple[AppliedMultiplier, ...] = ()
    multipliers_unavailable: bool = False
    final_score: float = Field(..., ge=0, le=10)
    level: RiskLevel
    disposition: Disposition
    reason: SelectionReason
    has_location_data: bool
    is_peak_season: bool
    cascading_hazards: Tuple[str, ...] = ()

    @property
    def is_active(self) -> bool:
        return self.disposition in (Disposition.FORCE_SELECTED, Disposition.SELECTED)


class StrategyRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy_id: str
    category: str
    hazards: Tuple[str, ...]
    effectiveness: float = Field(..., ge=0, le=1)
    cost: float = Field(..., ge=0)
    roi: float
    priority: StrategyPriority
    conflicts: Tuple[str, ...] = ()
    is_recommended: bool = False


class RecommendationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    recommendations: Tuple[StrategyRecommendation, ...] = ()
    # "catalog_empty" | "catalog_unavailable" | None
    error: Optional[str] = None
