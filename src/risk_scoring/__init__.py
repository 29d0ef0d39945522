"""
Risk Scoring Module

Score disaster hazards for a business and recommend mitigation strategies.
"""

from .catalog import CatalogSnapshot
from .characteristics import from_legacy_sliders, from_simplified_answers
from .config import EngineSettings, get_settings
from .engine import RiskEngine
from .errors import (
    CatalogUnavailableError,
    InvalidCharacteristicError,
    MalformedRuleError,
    NotFoundError,
    RiskEngineError,
)
from .hazard_calculator import HazardRiskCalculator
from .models import BusinessCharacteristics
from .multiplier_engine import MultiplierEngine
from .strategy_ranker import StrategyRanker
from .threshold_classifier import ThresholdClassifier

__all__ = [
    "BusinessCharacteristics",
    "CatalogSnapshot",
    "CatalogUnavailableError",
    "EngineSettings",
    "HazardRiskCalculator",
    "InvalidCharacteristicError",
    "MalformedRuleError",
    "MultiplierEngine",
    "NotFoundError",
    "RiskEngine",
    "RiskEngineError",
    "StrategyRanker",
    "ThresholdClassifier",
    "from_legacy_sliders",
    "from_simplified_answers",
    "get_settings",
]
