"""
Risk Engine

Runs the assessment pipeline for one business: hazard calculation,
multipliers and classification per hazard, then strategy ranking over the
active hazards.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .catalog import CatalogSnapshot
from .config import EngineSettings, get_settings
from .errors import NotFoundError, Stage
from .hazard_calculator import HazardRiskCalculator
from .models import BusinessCharacteristics, RecommendationResult, RiskAssessmentResult
from .multiplier_engine import MultiplierEngine
from .strategy_ranker import StrategyRanker
from .threshold_classifier import ThresholdClassifier

logger = logging.getLogger(__name__)


def data_quality_label(results: List[RiskAssessmentResult]) -> str:
    """Label the share of hazards backed by location-specific data"""
    if not results:
        return "limited"
    percentage = 100 * sum(r.has_location_data for r in results) / len(results)
    if percentage >= 80:
        return "excellent"
    if percentage >= 60:
        return "good"
    if percentage >= 40:
        return "fair"
    return "limited"


def overall_risk_score(results: List[RiskAssessmentResult]) -> float:
    """Mean raw score on the 0-100 scale"""
    if not results:
        return 0.0
    return round(float(np.mean([r.raw_score for r in results])) * 10, 1)


class RiskEngine:
    """Assess hazards and recommend strategies against a catalog snapshot"""

    def __init__(self, snapshot: CatalogSnapshot, settings: Optional[EngineSettings] = None):
        """
        Args:
            snapshot: Catalog data fetched for this call
            settings: Engine settings. If None, loads them from the environment.
        """
        self.snapshot = snapshot
        self.settings = settings or get_settings()
        self.calculator = HazardRiskCalculator(snapshot)
        self.multipliers = MultiplierEngine.from_snapshot(snapshot)
        self.classifier = ThresholdClassifier.from_settings(self.settings)
        self.ranker = StrategyRanker.from_snapshot(snapshot)

    def assess_risks(
        self,
        business_type_id: str,
        location_id: Optional[str],
        characteristics: Optional[BusinessCharacteristics] = None,
        as_of: Optional[date] = None,
    ) -> List[RiskAssessmentResult]:
        """
        Assess every hazard linked to a business type

        Args:
            business_type_id: Business type to assess
            location_id: Catalog location, or None when unknown
            characteristics: Facts about the business
            as_of: Date for seasonal adjustment (defaults to today)

        Returns:
            One result per hazard, highest final score first

        Raises:
            NotFoundError: if the business type or location does not resolve
        """
        characteristics = characteristics or BusinessCharacteristics()
        as_of = as_of or date.today()

        calculation = self.calculator.calculate(business_type_id, location_id, as_of, characteristics)

        results = []
        for score in calculation.scores:
            multiplied = self.multipliers.apply(score.raw_score, score.hazard_id, characteristics)
            classification = self.classifier.classify(multiplied.final_score, score.has_location_data)

            results.append(RiskAssessmentResult(
                **score.model_dump(),
                applied_multipliers=multiplied.applied_multipliers,
                multipliers_unavailable=multiplied.multipliers_unavailable,
                final_score=multiplied.final_score,
                level=classification.level,
                disposition=classification.disposition,
                reason=classification.reason,
            ))

        results.sort(key=lambda r: (-r.final_score, r.hazard_id))

        active = sum(r.is_active for r in results)
        logger.info(f"Assessed {len(results)} hazard(s) for {business_type_id!r}: {active} active")
        return results

    @staticmethod
    def active_hazards(results: Iterable[RiskAssessmentResult]) -> List[str]:
        return [r.hazard_id for r in results if r.is_active]

    def recommend_strategies(
        self,
        active_hazards: Iterable[str],
        characteristics: Optional[BusinessCharacteristics],
        business_type_id: str,
    ) -> RecommendationResult:
        """
        Rank strategies for the active hazards

        Raises:
            NotFoundError: if the business type or a hazard id does not resolve
        """
        business_type = self.snapshot.business_type(business_type_id)
        active_hazards = list(active_hazards)
        for hazard_id in active_hazards:
            if not self.snapshot.has_hazard(hazard_id):
                raise NotFoundError(
                    f"Hazard {hazard_id!r} not found",
                    entity_id=str(hazard_id),
                    stage=Stage.STRATEGY_RANKING,
                )
        return self.ranker.rank(active_hazards, characteristics or BusinessCharacteristics(), business_type)

    def build_assessment_document(
        self,
        business_type_id: str,
        location_id: Optional[str],
        characteristics: Optional[BusinessCharacteristics] = None,
        as_of: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Run the full pipeline and return the JSON-ready assessment

        Returns:
            Dictionary with risks, strategies, strategy_error and metadata
        """
        as_of = as_of or date.today()
        results = self.assess_risks(business_type_id, location_id, characteristics, as_of)
        recommendations = self.recommend_strategies(
            self.active_hazards(results), characteristics, business_type_id
        )

        return {
            "business_type_id": business_type_id,
            "location_id": location_id,
            "risks": [r.model_dump(mode="json") for r in results],
            "strategies": [s.model_dump(mode="json") for s in recommendations.recommendations],
            "strategy_error": recommendations.error,
            "metadata": {
                "as_of": as_of.isoformat(),
                "location_found": location_id is not None,
                "overall_risk_score": overall_risk_score(results),
                "data_quality": data_quality_label(results),
                "active_hazards": self.active_hazards(results),
                "multipliers_unavailable": self.multipliers.rules is None,
            },
        }


def assessment_frame(results: List[RiskAssessmentResult]) -> pd.DataFrame:
    """Tabulate assessment results for display"""
    columns = [
        "hazard_id", "effective_level", "raw_score", "final_score", "level",
        "disposition", "reason", "multipliers", "is_peak_season",
    ]
    rows = [
        {
            "hazard_id": r.hazard_id,
            "effective_level": r.effective_level.value,
            "raw_score": r.raw_score,
            "final_score": r.final_score,
            "level": r.level.value,
            "disposition": r.disposition.value,
            "reason": r.reason.value,
            "multipliers": ", ".join(f"{m.name} x{m.factor}" for m in r.applied_multipliers),
            "is_peak_season": r.is_peak_season,
        }
        for r in results
    ]
    return pd.DataFrame(rows, columns=columns)


def recommendation_frame(result: RecommendationResult) -> pd.DataFrame:
    """Tabulate strategy recommendations for display"""
    columns = ["strategy_id", "category", "priority", "effectiveness", "cost", "roi", "hazards", "conflicts"]
    rows = [
        {
            "strategy_id": s.strategy_id,
            "category": s.category,
            "priority": s.priority.value,
            "effectiveness": s.effectiveness,
            "cost": s.cost,
            "roi": s.roi,
            "hazards": ", ".join(s.hazards),
            "conflicts": ", ".join(s.conflicts),
        }
        for s in result.recommendations
    ]
    return pd.DataFrame(rows, columns=columns)
