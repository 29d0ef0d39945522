"""
Multiplier Engine

Applies admin-defined conditional multipliers to a hazard score based on
the business characteristics.
"""

import logging
import numbers
from typing import Any, List, Optional, Sequence

import numpy as np

from .errors import CatalogUnavailableError, InvalidCharacteristicError, Stage
from .identifiers import hazard_key
from .models import (
    AppliedMultiplier,
    BooleanCondition,
    BusinessCharacteristics,
    MultiplierResult,
    MultiplierRule,
    RangeCondition,
    ThresholdCondition,
)

logger = logging.getLogger(__name__)


class MultiplierEngine:
    """Scale a 0-10 score by every multiplier rule whose condition holds"""

    MAX_SCORE = 10.0

    def __init__(self, rules: Optional[Sequence[MultiplierRule]]):
        """
        Args:
            rules: Active rules in application order, or None when the rule
                store could not be read (scores then pass through unmodified,
                only rounded to one decimal like every final score)
        """
        self.rules = None if rules is None else list(rules)

    @classmethod
    def from_snapshot(cls, snapshot) -> "MultiplierEngine":
        try:
            return cls(snapshot.active_multiplier_rules())
        except CatalogUnavailableError as e:
            logger.error(f"Multiplier system unavailable, using base scores: {e}")
            return cls(None)

    def apply(
        self,
        base_score: float,
        hazard_id: str,
        characteristics: BusinessCharacteristics,
    ) -> MultiplierResult:
        """
        Apply every matching multiplier to a base score

        Args:
            base_score: Score on the 0-10 scale
            hazard_id: Hazard being scored (any spelling)
            characteristics: Facts about the business

        Returns:
            MultiplierResult with the final score and the fired multipliers in order.
            When the rule store is unavailable the final score is the base
            score rounded to one decimal, with no multipliers applied.
        """
        base = round(float(base_score), 1)

        if self.rules is None:
            return MultiplierResult(base_score=base, final_score=base, multipliers_unavailable=True)

        target = hazard_key(hazard_id)
        score = float(base_score)
        applied: List[AppliedMultiplier] = []

        for rule in self.rules:
            if target not in rule.applicable_hazards:
                continue
            if not self.condition_holds(rule, characteristics):
                continue

            score *= rule.factor
            applied.append(AppliedMultiplier(
                rule_id=rule.rule_id,
                name=rule.name,
                factor=rule.factor,
                reasoning=rule.reasoning,
            ))
            logger.debug(f"{hazard_id}: applied {rule.name} x{rule.factor}")

        final = round(float(np.clip(score, 0.0, self.MAX_SCORE)), 1)
        return MultiplierResult(base_score=base, final_score=final, applied_multipliers=tuple(applied))

    def condition_holds(self, rule: MultiplierRule, characteristics: BusinessCharacteristics) -> bool:
        """Evaluate a rule's condition; missing or wrong-typed facts never satisfy it"""
        value = characteristics.get(rule.characteristic)
        if value is None:
            return False

        try:
            return _evaluate(rule, value)
        except InvalidCharacteristicError as e:
            logger.warning(str(e))
            return False


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _evaluate(rule: MultiplierRule, value: Any) -> bool:
    condition = rule.condition

    if isinstance(condition, BooleanCondition):
        if not isinstance(value, bool):
            raise _invalid(rule, value, "a boolean")
        return value is True

    if not _is_number(value):
        raise _invalid(rule, value, "a number")

    if isinstance(condition, ThresholdCondition):
        return value >= condition.threshold

    if isinstance(condition, RangeCondition):
        return condition.min_value <= value <= condition.max_value

    raise TypeError(f"Unhandled condition kind {condition.kind!r}")


def _invalid(rule: MultiplierRule, value: Any, expected: str) -> InvalidCharacteristicError:
    return InvalidCharacteristicError(
        f"Characteristic {rule.characteristic!r}={value!r} is not {expected} "
        f"(rule {rule.rule_id!r}, {rule.condition.kind} condition)",
        entity_id=rule.characteristic,
        stage=Stage.MULTIPLIERS,
        details={"rule_id": rule.rule_id},
    )
