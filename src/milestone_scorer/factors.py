"""Factor Analyzer - Phase 1 of the Milestone Scorer.

Computes the seven significance factors for a mission request. Each factor
asks its strategic-learning collaborator first, when one is configured, and
falls back to a text heuristic when the collaborator is absent, slow, failing
or returns something unusable.
"""

import asyncio
import logging
import re
from typing import Any, Optional

from pydantic import BaseModel

from .collaborators import (
    KnowledgeGraph,
    MissionPredictor,
    RiskAssessor,
    StrategySelector,
    call_collaborator,
)
from .config import ScorerConfig, get_config
from .schema import (
    AnalogousProblem,
    Factor,
    FactorSet,
    FactorSource,
    MissionPrediction,
    RiskAssessment,
    StrategySelection,
    clamp_score,
    round_score,
)

logger = logging.getLogger(__name__)


# Complexity label to score
COMPLEXITY_SCORES = {
    'trivial': 10,
    'simple': 30,
    'moderate': 50,
    'complex': 75,
    'extreme': 95,
}

TECH_TERMS = [
    'api', 'database', 'architecture', 'integration',
    'security', 'performance', 'authentication', 'payment',
]

RISK_KEYWORDS = [
    'migrate', 'breaking', 'delete', 'remove', 'refactor',
    'replace', 'authentication', 'payment', 'security',
]

# Domain label to score
DOMAIN_SCORES = {
    'architecture': 90,
    'security': 90,
    'integration': 80,
    'performance': 70,
    'data': 75,
    'bugfix': 40,
    'testing': 50,
    'frontend': 60,
    'deployment': 85,
    'general': 50,
}

# Declaration order breaks ties between domains
DOMAIN_KEYWORDS = {
    'architecture': ['architect', 'design', 'pattern', 'structure', 'framework'],
    'security': ['security', 'auth', 'encrypt', 'permission', 'vulnerab'],
    'integration': ['integrat', 'api', 'webhook', 'third-party', 'connector'],
    'performance': ['performance', 'optimi', 'speed', 'cach', 'latency'],
    'data': ['data', 'schema', 'query', 'sql', 'etl'],
    'bugfix': ['bug', 'fix', 'error', 'issue', 'crash'],
    'testing': ['test', 'coverage', 'assert', 'mock', 'qa'],
    'frontend': ['ui', 'ux', 'frontend', 'css', 'layout'],
    'deployment': ['deploy', 'release', 'pipeline', 'ci/cd', 'infrastructure'],
}

NOVELTY_KEYWORDS = [
    'new', 'first time', 'never', 'implement', 'create', 'build', 'unfamiliar',
]

# Tier name to (weight, keywords), highest weight first
KEYWORD_TIERS = {
    'critical': (100, [
        'migrate', 'architecture', 'redesign', 'rebuild', 'authentication',
        'authorization', 'payment', 'security', 'schema', 'breaking change',
        'major refactor', 'complete rewrite', 'new framework',
    ]),
    'major': (75, [
        'implement', 'create', 'add feature', 'new system', 'optimization',
        'performance', 'real-time', 'caching', 'dashboard', 'module',
        'significant', 'enhancement', 'major', 'complex',
    ]),
    'moderate': (50, [
        'enhance', 'improve', 'refactor', 'fix bug', 'add endpoint', 'update',
        'modify', 'extend', 'component', 'feature',
    ]),
    'minor': (25, [
        'tweak', 'adjust', 'small fix', 'minor', 'ui fix', 'text change',
        'config', 'documentation',
    ]),
}

# (pattern, estimated files), first match wins
FILE_IMPACT_RULES = [
    (re.compile(r'system|framework|architecture|migrate'), 15),
    (re.compile(r'module|feature|integration'), 8),
    (re.compile(r'component|endpoint|function'), 3),
]
DEFAULT_ESTIMATED_FILES = 1
POINTS_PER_FILE = 8

HEURISTIC_CONFIDENCE = 0.6
DEFAULT_COLLABORATOR_CONFIDENCE = 0.5
RISK_ASSESSOR_CONFIDENCE = 0.7
KNOWLEDGE_GRAPH_CONFIDENCE = 0.8
KEYWORD_CONFIDENCE = 0.9
DEFAULT_UNIQUENESS = 60
DEFAULT_UNIQUENESS_CONFIDENCE = 0.5
DEFAULT_NOVELTY = 50


def _word_pattern(keyword: str) -> re.Pattern:
    return re.compile(r'\b' + re.escape(keyword) + r'\b', re.IGNORECASE)


def _prefix_pattern(keyword: str) -> re.Pattern:
    return re.compile(r'\b' + re.escape(keyword), re.IGNORECASE)


_RISK_PATTERNS = [_word_pattern(k) for k in RISK_KEYWORDS]
_NOVELTY_PATTERNS = [_word_pattern(k) for k in NOVELTY_KEYWORDS]
_TIER_PATTERNS = {
    tier: (weight, [_word_pattern(k) for k in keywords])
    for tier, (weight, keywords) in KEYWORD_TIERS.items()
}
_DOMAIN_PATTERNS = {
    domain: [_prefix_pattern(k) for k in keywords]
    for domain, keywords in DOMAIN_KEYWORDS.items()
}


def count_matches(text: str, patterns: list[re.Pattern]) -> int:
    """Count how many patterns occur in the text."""
    return sum(1 for p in patterns if p.search(text))


def _as_mapping(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump()
    return payload


def _confidence(value: Optional[float], default: float) -> float:
    if value is None:
        return default
    return clamp_score(float(value), 0.0, 1.0)


class FactorAnalyzer:
    """Computes significance factors for a mission request.

    Collaborators are optional; a missing one simply means the heuristic is
    used for its factors. A failing one is downgraded once per call and not
    retried.
    """

    def __init__(
        self,
        predictor: Optional[MissionPredictor] = None,
        strategy_selector: Optional[StrategySelector] = None,
        risk_assessor: Optional[RiskAssessor] = None,
        knowledge_graph: Optional[KnowledgeGraph] = None,
        config: Optional[ScorerConfig] = None,
    ):
        self.predictor = predictor
        self.strategy_selector = strategy_selector
        self.risk_assessor = risk_assessor
        self.knowledge_graph = knowledge_graph
        self.config = config or get_config()

    async def analyze(self, mission_request: str) -> FactorSet:
        """Compute all seven factors concurrently."""
        results = await asyncio.gather(
            self.complexity(mission_request),
            self.risk_score(mission_request),
            self.domain(mission_request),
            self.novelty(mission_request),
            self.uniqueness(mission_request),
        )
        complexity, risk_score, domain, novelty, uniqueness = results
        return FactorSet(
            complexity=complexity,
            risk_score=risk_score,
            domain=domain,
            novelty=novelty,
            uniqueness=uniqueness,
            keywords=self.keywords(mission_request),
            file_impact=self.file_impact(mission_request),
        )

    async def _call(self, name: str, collaborator: object, method_name: str, *args: Any) -> Any:
        return await call_collaborator(
            name,
            collaborator,
            method_name,
            *args,
            timeout=self.config.collaborators.timeout_seconds,
        )

    # -------------------------------------------------------------------------
    # Collaborator-first factors
    # -------------------------------------------------------------------------

    async def complexity(self, mission_request: str) -> Factor:
        """Score how complex the mission is."""
        if self.predictor is not None:
            try:
                raw = await self._call(
                    "predictor", self.predictor, "predict_mission_characteristics", mission_request
                )
                prediction = MissionPrediction.model_validate(_as_mapping(raw))
                if prediction.estimated_complexity is None:
                    raise ValueError("prediction has no estimatedComplexity")
                label = prediction.estimated_complexity.lower()
                return Factor(
                    value=label,
                    score=COMPLEXITY_SCORES.get(label, COMPLEXITY_SCORES['moderate']),
                    confidence=_confidence(
                        prediction.confidence_interval, DEFAULT_COLLABORATOR_CONFIDENCE
                    ),
                    source=FactorSource.COLLABORATOR,
                )
            except Exception as e:
                logger.warning("complexity: predictor unusable (%s); using heuristic", e)
        return self._heuristic_complexity(mission_request)

    def _heuristic_complexity(self, mission_request: str) -> Factor:
        words = mission_request.split()
        tech_terms = sum(
            1 for w in words if any(term in w.lower() for term in TECH_TERMS)
        )

        if len(words) > 50 or tech_terms > 5:
            label = 'extreme'
        elif len(words) > 30 or tech_terms > 3:
            label = 'complex'
        elif len(words) > 15 or tech_terms > 1:
            label = 'moderate'
        else:
            label = 'simple'

        return Factor(
            value=label,
            score=COMPLEXITY_SCORES[label],
            confidence=HEURISTIC_CONFIDENCE,
        )

    async def risk_score(self, mission_request: str) -> Factor:
        """Score how risky the change is."""
        if self.predictor is not None:
            try:
                raw = await self._call(
                    "predictor", self.predictor, "predict_mission_characteristics", mission_request
                )
                prediction = MissionPrediction.model_validate(_as_mapping(raw))
                if prediction.risk_score is None:
                    raise ValueError("prediction has no riskScore")
                score = clamp_score(prediction.risk_score)
                return Factor(
                    value=score,
                    score=score,
                    confidence=_confidence(
                        prediction.confidence_interval, DEFAULT_COLLABORATOR_CONFIDENCE
                    ),
                    source=FactorSource.COLLABORATOR,
                )
            except Exception as e:
                logger.warning("risk_score: predictor unusable (%s); using heuristic", e)
        return self._heuristic_risk_score(mission_request)

    def _heuristic_risk_score(self, mission_request: str) -> Factor:
        matches = count_matches(mission_request, _RISK_PATTERNS)
        score = min(100, matches * 20 + 20)
        return Factor(value=score, score=score, confidence=HEURISTIC_CONFIDENCE)

    async def domain(self, mission_request: str) -> Factor:
        """Score how critical the mission's domain is."""
        if self.strategy_selector is not None:
            try:
                raw = await self._call(
                    "strategy_selector", self.strategy_selector, "select_optimal_strategy", mission_request
                )
                selection = StrategySelection.model_validate(_as_mapping(raw))
                if not selection.domain:
                    raise ValueError("strategy has no domain")
                label = selection.domain.lower()
                return Factor(
                    value=label,
                    score=DOMAIN_SCORES.get(label, DOMAIN_SCORES['general']),
                    confidence=_confidence(
                        selection.confidence_score, DEFAULT_COLLABORATOR_CONFIDENCE
                    ),
                    source=FactorSource.COLLABORATOR,
                )
            except Exception as e:
                logger.warning("domain: strategy selector unusable (%s); using heuristic", e)
        return self._heuristic_domain(mission_request)

    def _heuristic_domain(self, mission_request: str) -> Factor:
        best_domain = 'general'
        best_count = 0
        for domain, patterns in _DOMAIN_PATTERNS.items():
            count = count_matches(mission_request, patterns)
            # Strictly greater keeps the first-declared domain on ties
            if count > best_count:
                best_domain = domain
                best_count = count

        return Factor(
            value=best_domain,
            score=DOMAIN_SCORES[best_domain],
            confidence=HEURISTIC_CONFIDENCE,
        )

    async def novelty(self, mission_request: str) -> Factor:
        """Score how new this kind of work is."""
        if self.risk_assessor is not None:
            try:
                raw = await self._call(
                    "risk_assessor", self.risk_assessor, "assess_risk", mission_request
                )
                assessment = RiskAssessment.model_validate(_as_mapping(raw))
                novelty = assessment.novelty_factor
                score = clamp_score(DEFAULT_NOVELTY if novelty is None else novelty)
                return Factor(
                    value=score,
                    score=score,
                    confidence=RISK_ASSESSOR_CONFIDENCE,
                    source=FactorSource.COLLABORATOR,
                )
            except Exception as e:
                logger.warning("novelty: risk assessor unusable (%s); using heuristic", e)
        return self._heuristic_novelty(mission_request)

    def _heuristic_novelty(self, mission_request: str) -> Factor:
        matches = count_matches(mission_request, _NOVELTY_PATTERNS)
        score = min(100, matches * 25 + 30)
        return Factor(value=score, score=score, confidence=HEURISTIC_CONFIDENCE)

    async def uniqueness(self, mission_request: str) -> Factor:
        """Score how few analogous problems have been solved before."""
        if self.knowledge_graph is not None:
            try:
                limit = self.config.collaborators.analogous_problem_limit
                raw = await self._call(
                    "knowledge_graph", self.knowledge_graph, "find_analogous_problems",
                    mission_request, limit,
                )
                matches = [
                    AnalogousProblem.model_validate(_as_mapping(m)) for m in list(raw)[:limit]
                ]
                if matches:
                    top = max(m.similarity for m in matches)
                    score = round_score(clamp_score(100 - top))
                else:
                    score = 100
                return Factor(
                    value=score,
                    score=score,
                    confidence=KNOWLEDGE_GRAPH_CONFIDENCE,
                    source=FactorSource.COLLABORATOR,
                )
            except Exception as e:
                logger.warning("uniqueness: knowledge graph unusable (%s); using heuristic", e)
        # Flat assumption of moderate uniqueness
        return Factor(
            value=DEFAULT_UNIQUENESS,
            score=DEFAULT_UNIQUENESS,
            confidence=DEFAULT_UNIQUENESS_CONFIDENCE,
        )

    # -------------------------------------------------------------------------
    # Heuristic-only factors
    # -------------------------------------------------------------------------

    def keywords(self, mission_request: str) -> Factor:
        """Score the most significant keyword tier present in the request."""
        category = 'minor'
        max_score = 0
        for tier, (weight, patterns) in _TIER_PATTERNS.items():
            if weight > max_score and count_matches(mission_request, patterns) > 0:
                category = tier
                max_score = weight

        # With no match the label stays 'minor' while the score stays 0
        return Factor(value=category, score=max_score, confidence=KEYWORD_CONFIDENCE)

    def file_impact(self, mission_request: str) -> Factor:
        """Estimate how many files the mission touches."""
        estimated_files = DEFAULT_ESTIMATED_FILES
        for pattern, files in FILE_IMPACT_RULES:
            if pattern.search(mission_request):
                estimated_files = files
                break

        return Factor(
            value=estimated_files,
            score=min(100, estimated_files * POINTS_PER_FILE),
            confidence=HEURISTIC_CONFIDENCE,
        )
