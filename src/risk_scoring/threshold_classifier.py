"""
Threshold Classifier

Maps a final hazard score to a display level and a selection disposition.
"""

from .models import Classification, Disposition, RiskLevel, SelectionReason


def risk_level_for_score(score: float) -> RiskLevel:
    """Display level for a 0-10 score"""
    if score < 2:
        return RiskLevel.VERY_LOW
    if score < 4:
        return RiskLevel.LOW
    if score < 6:
        return RiskLevel.MEDIUM
    if score < 8:
        return RiskLevel.HIGH
    return RiskLevel.VERY_HIGH


class ThresholdClassifier:
    """Decide whether a hazard is force-selected, pre-selected or merely available"""

    FORCE_PRESELECT_SCORE = 7.0
    MIN_PRESELECT_SCORE = 4.0

    def __init__(
        self,
        force_preselect_score: float = FORCE_PRESELECT_SCORE,
        min_preselect_score: float = MIN_PRESELECT_SCORE,
    ):
        if not 0 <= min_preselect_score <= force_preselect_score <= 10:
            raise ValueError(
                "Invalid cutoffs: require 0 <= min_preselect_score <= force_preselect_score <= 10, "
                f"got min={min_preselect_score}, force={force_preselect_score}"
            )
        self.force_preselect_score = float(force_preselect_score)
        self.min_preselect_score = float(min_preselect_score)

    @classmethod
    def from_settings(cls, settings) -> "ThresholdClassifier":
        return cls(settings.force_preselect_score, settings.min_preselect_score)

    def classify(self, score: float, has_location_data: bool = True) -> Classification:
        """
        Classify a final score

        Args:
            score: Final score on the 0-10 scale
            has_location_data: False when no location-specific data existed for the hazard

        Returns:
            Classification (level, disposition, reason)
        """
        level = risk_level_for_score(score)

        if score >= self.force_preselect_score:
            return Classification(level=level, disposition=Disposition.FORCE_SELECTED,
                                  reason=SelectionReason.CRITICAL_RISK)
        if score >= self.min_preselect_score:
            return Classification(level=level, disposition=Disposition.SELECTED,
                                  reason=SelectionReason.MEETS_THRESHOLD)

        reason = SelectionReason.BELOW_THRESHOLD if has_location_data else SelectionReason.NO_LOCATION_DATA
        return Classification(level=level, disposition=Disposition.AVAILABLE, reason=reason)
