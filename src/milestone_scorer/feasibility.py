"""Feasibility and Uncertainty - Phase 3 of the Milestone Scorer.

Both conclusions are derived from the factor set rather than scored on their
own: feasibility from complexity, risk and how clearly the request is worded;
uncertainty from factor confidence and feasibility.
"""

import re
from typing import Optional

from .config import FeasibilityConfig, UncertaintyConfig, get_config
from .schema import (
    FactorSet,
    FeasibilityResult,
    RiskLevel,
    UncertaintyResult,
    clamp_score,
    round_score,
)

CONTEXT_PATTERN = re.compile(r'\b(with|using|via|through|by)\b', re.IGNORECASE)


def assess_clarity(mission_request: str, config: Optional[FeasibilityConfig] = None) -> int:
    """Score how clearly the request describes what to do and how."""
    cfg = config or get_config().feasibility
    has_details = len(mission_request.split()) > cfg.detail_word_count
    has_context = CONTEXT_PATTERN.search(mission_request) is not None

    if has_details and has_context:
        return cfg.clarity_detailed_with_context
    if has_details:
        return cfg.clarity_detailed
    if has_context:
        return cfg.clarity_contextual
    return cfg.clarity_default


def assess_feasibility(
    mission_request: str,
    factors: FactorSet,
    config: Optional[FeasibilityConfig] = None,
) -> FeasibilityResult:
    """Derive feasibility from complexity, risk and request clarity.

    Args:
        mission_request: The raw request text.
        factors: Unrounded factor scores for the request.
        config: Optional override of the feasibility constants.

    Returns:
        The feasibility conclusion.
    """
    cfg = config or get_config().feasibility
    complexity = factors.complexity.score
    risk = factors.risk_score.score
    clarity = assess_clarity(mission_request, cfg)

    if complexity > cfg.high_risk_complexity or risk > cfg.high_risk_risk_score:
        approach_risk = RiskLevel.HIGH
    elif complexity > cfg.moderate_risk_complexity or risk > cfg.moderate_risk_risk_score:
        approach_risk = RiskLevel.MODERATE
    else:
        approach_risk = RiskLevel.LOW

    penalty = (
        complexity * cfg.complexity_weight
        + risk * cfg.risk_weight
        + (100 - clarity) * cfg.clarity_weight
    )
    score = round_score(clamp_score(100 - penalty))

    return FeasibilityResult(
        score=score,
        clarity_score=clarity,
        approach_risk=approach_risk,
        assessment=_level(score, cfg.high_threshold, cfg.moderate_threshold),
    )


def assess_uncertainty(
    factors: FactorSet,
    feasibility: FeasibilityResult,
    config: Optional[UncertaintyConfig] = None,
) -> UncertaintyResult:
    """Derive uncertainty from mean factor confidence and feasibility."""
    cfg = config or get_config().uncertainty
    confidences = [factor.confidence for _, factor in factors.items()]
    avg_confidence = sum(confidences) / len(confidences)

    score = round_score(clamp_score(
        100 - (avg_confidence * cfg.confidence_weight + feasibility.score * cfg.feasibility_weight)
    ))

    return UncertaintyResult(
        score=score,
        avg_confidence=round_score(avg_confidence * 100),
        assessment=_level(score, cfg.high_threshold, cfg.moderate_threshold),
    )


def _level(score: float, high: float, moderate: float) -> RiskLevel:
    if score >= high:
        return RiskLevel.HIGH
    if score >= moderate:
        return RiskLevel.MODERATE
    return RiskLevel.LOW
