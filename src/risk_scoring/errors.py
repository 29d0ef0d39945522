"""
Risk Engine Errors

Typed errors raised or reported by the assessment stages.
"""

from enum import Enum
from typing import Any, Dict, Optional


class Stage(str, Enum):
    """Assessment stage an error originated from"""

    CATALOG = "catalog"
    HAZARD_CALCULATION = "hazard_calculation"
    MULTIPLIERS = "multipliers"
    CLASSIFICATION = "classification"
    STRATEGY_RANKING = "strategy_ranking"


class RiskEngineError(Exception):
    """Base error for the risk engine"""

    def __init__(
        self,
        message: str,
        entity_id: Optional[str] = None,
        stage: Optional[Stage] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.entity_id = entity_id
        self.stage = stage
        self.details = details or {}

    @property
    def error_code(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "entity_id": self.entity_id,
            "stage": self.stage.value if self.stage else None,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class NotFoundError(RiskEngineError):
    """An id does not resolve in the catalog"""


class InvalidCharacteristicError(RiskEngineError):
    """A characteristic value has the wrong type for a rule's condition"""


class CatalogUnavailableError(RiskEngineError):
    """The catalog store could not be read"""


class MalformedRuleError(RiskEngineError):
    """A multiplier rule could not be parsed"""
