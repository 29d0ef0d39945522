"""Tests for the threshold classifier."""

import numpy as np
import pytest

from risk_scoring.config import EngineSettings
from risk_scoring.models import Disposition, RiskLevel, SelectionReason
from risk_scoring.threshold_classifier import ThresholdClassifier, risk_level_for_score


@pytest.mark.parametrize(
    "score, disposition, reason",
    [
        (10.0, Disposition.FORCE_SELECTED, SelectionReason.CRITICAL_RISK),
        (7.0, Disposition.FORCE_SELECTED, SelectionReason.CRITICAL_RISK),
        (6.9, Disposition.SELECTED, SelectionReason.MEETS_THRESHOLD),
        (4.0, Disposition.SELECTED, SelectionReason.MEETS_THRESHOLD),
        (3.9, Disposition.AVAILABLE, SelectionReason.BELOW_THRESHOLD),
        (0.0, Disposition.AVAILABLE, SelectionReason.BELOW_THRESHOLD),
    ],
)
def test_default_cutoffs(score, disposition, reason):
    classification = ThresholdClassifier().classify(score)

    assert classification.disposition == disposition
    assert classification.reason == reason


def test_low_score_without_location_data():
    classification = ThresholdClassifier().classify(3.0, has_location_data=False)

    assert classification.disposition == Disposition.AVAILABLE
    assert classification.reason == SelectionReason.NO_LOCATION_DATA


def test_high_score_without_location_data_is_still_selected():
    classification = ThresholdClassifier().classify(8.0, has_location_data=False)

    assert classification.reason == SelectionReason.CRITICAL_RISK


@pytest.mark.parametrize(
    "score, level",
    [
        (0.0, RiskLevel.VERY_LOW),
        (1.9, RiskLevel.VERY_LOW),
        (2.0, RiskLevel.LOW),
        (3.9, RiskLevel.LOW),
        (4.0, RiskLevel.MEDIUM),
        (5.9, RiskLevel.MEDIUM),
        (6.0, RiskLevel.HIGH),
        (7.9, RiskLevel.HIGH),
        (8.0, RiskLevel.VERY_HIGH),
        (10.0, RiskLevel.VERY_HIGH),
    ],
)
def test_level_partition(score, level):
    assert risk_level_for_score(score) == level
    assert ThresholdClassifier().classify(score).level == level


def test_dispositions_are_consistent_with_cutoffs():
    classifier = ThresholdClassifier()

    for score in np.round(np.linspace(0, 10, 101), 1):
        classification = classifier.classify(float(score))
        if score >= 7.0:
            assert classification.disposition == Disposition.FORCE_SELECTED
        if classification.reason == SelectionReason.BELOW_THRESHOLD:
            assert score < 4.0


def test_custom_cutoffs_from_settings():
    settings = EngineSettings(force_preselect_score=8.0, min_preselect_score=5.0)
    classifier = ThresholdClassifier.from_settings(settings)

    assert classifier.classify(7.5).disposition == Disposition.SELECTED
    assert classifier.classify(4.5).disposition == Disposition.AVAILABLE


@pytest.mark.parametrize("force, minimum", [(7.0, 8.0), (11.0, 4.0), (7.0, -1.0)])
def test_invalid_cutoffs_rejected(force, minimum):
    with pytest.raises(ValueError):
        ThresholdClassifier(force_preselect_score=force, min_preselect_score=minimum)
