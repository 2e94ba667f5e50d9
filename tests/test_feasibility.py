"""Tests for feasibility and uncertainty derivation."""

import pytest

from milestone_scorer.feasibility import assess_clarity, assess_feasibility, assess_uncertainty
from milestone_scorer.schema import Factor, FactorSet, FeasibilityResult, RiskLevel


def make_factors(complexity=30, risk=20, confidence=0.6) -> FactorSet:
    """Build a factor set with chosen complexity/risk and uniform confidence."""
    base = Factor(value="x", score=50, confidence=confidence)
    return FactorSet(
        complexity=Factor(value="c", score=complexity, confidence=confidence),
        risk_score=Factor(value=risk, score=risk, confidence=confidence),
        domain=base,
        novelty=base,
        uniqueness=base,
        keywords=base,
        file_impact=base,
    )


LONG = "one two three four five six seven eight nine ten eleven"


class TestClarity:
    """Tests for request clarity."""

    @pytest.mark.parametrize("text,expected", [
        (LONG + " using a queue", 85),
        (LONG, 70),
        ("ship it via ftp", 60),
        ("ship it", 50),
    ])
    def test_clarity_levels(self, text, expected):
        assert assess_clarity(text) == expected

    def test_context_needs_whole_word(self):
        """'bypass' does not count as 'by'."""
        assert assess_clarity("bypass the cache") == 50


class TestFeasibility:
    """Tests for feasibility scoring."""

    @pytest.mark.parametrize("complexity,risk,expected", [
        (30, 20, RiskLevel.LOW),
        (50, 50, RiskLevel.LOW),
        (75, 20, RiskLevel.MODERATE),
        (30, 60, RiskLevel.MODERATE),
        (95, 20, RiskLevel.HIGH),
        (30, 80, RiskLevel.HIGH),
    ])
    def test_approach_risk(self, complexity, risk, expected):
        """Approach risk uses strict greater-than cut-offs."""
        result = assess_feasibility("ship it", make_factors(complexity, risk))

        assert result.approach_risk == expected

    def test_score(self):
        """Feasibility blends complexity, risk and unclarity."""
        result = assess_feasibility("ship it", make_factors(30, 20))

        # 100 - (12 + 8 + 10)
        assert result.score == 70
        assert result.assessment == RiskLevel.HIGH

    def test_low_feasibility(self):
        result = assess_feasibility("ship it", make_factors(100, 100))

        assert result.score == 10
        assert result.assessment == RiskLevel.LOW

    def test_moderate_assessment(self):
        # 100 - (20 + 24 + 6) = 50
        result = assess_feasibility(LONG, make_factors(50, 60))

        assert result.score == 50
        assert result.assessment == RiskLevel.MODERATE


class TestUncertainty:
    """Tests for uncertainty scoring."""

    def test_uses_mean_confidence(self):
        feasibility = FeasibilityResult(
            score=70, clarity_score=50, approach_risk=RiskLevel.LOW, assessment=RiskLevel.HIGH
        )
        result = assess_uncertainty(make_factors(confidence=0.6), feasibility)

        # 100 - (30 + 35)
        assert result.score == 35
        assert result.avg_confidence == 60
        assert result.assessment == RiskLevel.LOW

    def test_high_uncertainty(self):
        feasibility = FeasibilityResult(
            score=10, clarity_score=50, approach_risk=RiskLevel.HIGH, assessment=RiskLevel.LOW
        )
        result = assess_uncertainty(make_factors(confidence=0.2), feasibility)

        # 100 - (10 + 5)
        assert result.score == 85
        assert result.assessment == RiskLevel.HIGH

    def test_moderate_uncertainty(self):
        feasibility = FeasibilityResult(
            score=50, clarity_score=50, approach_risk=RiskLevel.MODERATE, assessment=RiskLevel.MODERATE
        )
        result = assess_uncertainty(make_factors(confidence=0.5), feasibility)

        # 100 - (25 + 25)
        assert result.score == 50
        assert result.assessment == RiskLevel.MODERATE
