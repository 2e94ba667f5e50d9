"""Milestone Scorer - the entry point of the Milestone Intelligence System.

Classifies a natural-language mission request into a significance tier and
derives a restore-point strategy from that tier. Produces a 0-100 milestone
score with a per-factor breakdown.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping, Optional

from .collaborators import KnowledgeGraph, MissionPredictor, RiskAssessor, StrategySelector
from .config import ScorerConfig, get_config
from .factors import FactorAnalyzer
from .feasibility import assess_feasibility, assess_uncertainty
from .restore_strategy import select_restore_strategy
from .schema import (
    Classification,
    Factor,
    FactorSet,
    FactorSource,
    FeasibilityResult,
    MilestoneAssessment,
    RiskLevel,
    UncertaintyResult,
    round_score,
)

logger = logging.getLogger(__name__)

FALLBACK_REASONING = "Fallback assessment (analysis failed)"
ROUTINE_REASONING = "Routine operation with low impact."


class MilestoneScorer:
    """Scores the significance of a mission request.

    Scoring principles:
    - Every factor is computed independently; a failing collaborator only
      downgrades its own factor to the text heuristic
    - The weighted score is rounded once, for reporting
    - The operation is total: any unexpected failure yields the fallback
      assessment instead of an exception
    """

    def __init__(
        self,
        predictor: Optional[MissionPredictor] = None,
        strategy_selector: Optional[StrategySelector] = None,
        risk_assessor: Optional[RiskAssessor] = None,
        knowledge_graph: Optional[KnowledgeGraph] = None,
        database: Any = None,
        config: Optional[ScorerConfig] = None,
    ):
        """Initialize scorer with optional collaborators and configuration.

        Args:
            predictor: Predicts complexity and risk.
            strategy_selector: Selects the mission's domain.
            risk_assessor: Supplies a novelty factor.
            knowledge_graph: Finds analogous past problems.
            database: Opaque handle kept for a persistence layer; not used
                by scoring.
            config: Overrides the global configuration for this scorer.
        """
        self.config = config or get_config()
        self.database = database
        self.analyzer = FactorAnalyzer(
            predictor=predictor,
            strategy_selector=strategy_selector,
            risk_assessor=risk_assessor,
            knowledge_graph=knowledge_graph,
            config=self.config,
        )

    async def assess(
        self,
        mission_request: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> MilestoneAssessment:
        """Assess a mission request. Never raises.

        Args:
            mission_request: Free-text description of the mission.
            context: Opaque caller context, accepted for collaborators.

        Returns:
            The assessment, or the fallback assessment if analysis failed.
        """
        try:
            return await self._assess(mission_request, context or {})
        except Exception:
            logger.exception("Milestone assessment failed; returning fallback")
            return self.fallback_assessment()

    def assess_sync(
        self,
        mission_request: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> MilestoneAssessment:
        """Run ``assess`` to completion for non-async callers.

        The assessment runs on a private event loop whose collaborator threads
        are never joined, so a hung synchronous collaborator costs no more than
        the configured timeout. Called from inside a running loop, the private
        loop runs on a helper thread and the caller blocks until it finishes.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return self._run_private_loop(mission_request, context)

        with ThreadPoolExecutor(max_workers=1) as helper:
            return helper.submit(self._run_private_loop, mission_request, context).result()

    def _run_private_loop(
        self,
        mission_request: str,
        context: Optional[Mapping[str, Any]],
    ) -> MilestoneAssessment:
        loop = asyncio.new_event_loop()
        collaborator_threads = ThreadPoolExecutor(thread_name_prefix="milestone-collaborator")
        loop.set_default_executor(collaborator_threads)
        try:
            return loop.run_until_complete(self.assess(mission_request, context))
        finally:
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()
            # Timed-out collaborator calls may still be running; abandon them
            collaborator_threads.shutdown(wait=False)

    async def _assess(self, mission_request: str, context: Mapping[str, Any]) -> MilestoneAssessment:
        logger.debug("Assessing mission (%d chars, context keys: %s)",
                     len(mission_request), sorted(context))

        factors = await self.analyzer.analyze(mission_request)

        raw_score = self.weighted_score(factors)
        milestone_score = round_score(raw_score)
        classification = self.classify(milestone_score)

        feasibility = assess_feasibility(mission_request, factors, self.config.feasibility)
        uncertainty = assess_uncertainty(factors, feasibility, self.config.uncertainty)

        logger.info("Milestone score %d (%s)", milestone_score, classification.value)

        return MilestoneAssessment(
            milestone_score=milestone_score,
            classification=classification,
            factors=factors,
            reasoning=self.generate_reasoning(factors),
            feasibility=feasibility,
            uncertainty=uncertainty,
            restore_point_strategy=select_restore_strategy(classification),
        )

    def weighted_score(self, factors: FactorSet) -> float:
        """Combine factor scores with the configured weights (unrounded)."""
        weights = self.config.factor_weights
        return sum(factor.score * getattr(weights, name) for name, factor in factors.items())

    def classify(self, score: float) -> Classification:
        """Map a milestone score to its tier (lower bounds inclusive)."""
        t = self.config.classification_thresholds
        if score >= t.critical:
            return Classification.CRITICAL
        if score >= t.major:
            return Classification.MAJOR
        if score >= t.moderate:
            return Classification.MODERATE
        if score >= t.minor:
            return Classification.MINOR
        return Classification.TRIVIAL

    def generate_reasoning(self, factors: FactorSet) -> str:
        """Explain the score with one clause per factor over its threshold."""
        t = self.config.reasoning_thresholds
        reasons = []

        if factors.complexity.score >= t.complexity:
            reasons.append(f"High complexity ({factors.complexity.value})")
        if factors.risk_score.score >= t.risk_score:
            reasons.append(f"Elevated risk ({factors.risk_score.score:.0f}/100)")
        if factors.domain.score >= t.domain:
            reasons.append(f"Critical domain ({factors.domain.value})")
        if factors.novelty.score >= t.novelty:
            reasons.append("Novel approach required")
        if factors.uniqueness.score >= t.uniqueness:
            reasons.append("Few analogous problems solved before")
        if factors.keywords.score >= t.keywords:
            reasons.append(f"Significant keywords ({factors.keywords.value})")
        if factors.file_impact.score >= t.file_impact:
            reasons.append(f"Wide file impact (~{factors.file_impact.value} files)")

        if not reasons:
            return ROUTINE_REASONING
        return ", ".join(reasons)

    def fallback_assessment(self) -> MilestoneAssessment:
        """Fixed, schema-complete assessment used when analysis fails."""
        neutral = Factor(value='moderate', score=50, confidence=0.5, source=FactorSource.FALLBACK)
        factors = FactorSet(
            complexity=neutral,
            risk_score=neutral.model_copy(update={'value': 50}),
            domain=neutral.model_copy(update={'value': 'general'}),
            novelty=neutral.model_copy(update={'value': 50}),
            uniqueness=neutral.model_copy(update={'value': 50}),
            keywords=neutral,
            file_impact=neutral.model_copy(update={'value': 3}),
        )
        return MilestoneAssessment(
            milestone_score=50,
            classification=Classification.MODERATE,
            factors=factors,
            reasoning=FALLBACK_REASONING,
            feasibility=FeasibilityResult(
                score=50,
                clarity_score=50,
                approach_risk=RiskLevel.MODERATE,
                assessment=RiskLevel.MODERATE,
            ),
            uncertainty=UncertaintyResult(
                score=50,
                avg_confidence=50,
                assessment=RiskLevel.MODERATE,
            ),
            restore_point_strategy=select_restore_strategy(Classification.MODERATE),
            is_fallback=True,
        )
