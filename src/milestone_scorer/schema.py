"""Pydantic models for the Milestone Scorer.

Output schemas for assessments and input schemas for the optional
strategic-learning collaborators. Models serialize with camelCase aliases
so ``model_dump(mode="json", by_alias=True)`` yields the wire format.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def round_score(value: float) -> int:
    """Round half up (builtin ``round`` sends 48.5 to 48)."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp a score into [low, high]."""
    return max(low, min(high, value))


class _Model(BaseModel):
    """Immutable model with camelCase serialization aliases."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Enums
# =============================================================================


class Classification(str, Enum):
    """Milestone significance tier, ordered from least to most significant."""
    TRIVIAL = "TRIVIAL"
    MINOR = "MINOR"
    MODERATE = "MODERATE"
    MAJOR = "MAJOR"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _CLASSIFICATION_ORDER.index(self)

    def __lt__(self, other):
        if isinstance(other, Classification):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, Classification):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, Classification):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, Classification):
            return self.rank >= other.rank
        return NotImplemented


_CLASSIFICATION_ORDER = [
    Classification.TRIVIAL,
    Classification.MINOR,
    Classification.MODERATE,
    Classification.MAJOR,
    Classification.CRITICAL,
]


class RiskLevel(str, Enum):
    """Three-step level used by feasibility and uncertainty conclusions."""
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class BackupType(str, Enum):
    """Kind of backup taken around a mission."""
    NONE = "NONE"
    INCREMENTAL = "INCREMENTAL"
    FULL = "FULL"


class FactorSource(str, Enum):
    """Where a factor value came from."""
    COLLABORATOR = "collaborator"
    HEURISTIC = "heuristic"
    FALLBACK = "fallback"


# =============================================================================
# Assessment Models
# =============================================================================


class Factor(_Model):
    """A single significance factor."""
    value: Union[int, float, str]
    score: float = Field(..., ge=0, le=100)
    confidence: float = Field(..., ge=0, le=1)
    source: FactorSource = FactorSource.HEURISTIC


FACTOR_NAMES = (
    "complexity",
    "risk_score",
    "domain",
    "novelty",
    "uniqueness",
    "keywords",
    "file_impact",
)


class FactorSet(_Model):
    """The seven factors of an assessment, in declaration order."""
    complexity: Factor
    risk_score: Factor
    domain: Factor
    novelty: Factor
    uniqueness: Factor
    keywords: Factor
    file_impact: Factor

    def items(self) -> list[tuple[str, Factor]]:
        """Return (name, factor) pairs in declaration order."""
        return [(name, getattr(self, name)) for name in FACTOR_NAMES]


class FeasibilityResult(_Model):
    """How achievable the mission looks as described."""
    score: int = Field(..., ge=0, le=100)
    clarity_score: int = Field(..., ge=0, le=100)
    approach_risk: RiskLevel
    assessment: RiskLevel


class UncertaintyResult(_Model):
    """How much the assessment itself should be trusted."""
    score: int = Field(..., ge=0, le=100)
    avg_confidence: int = Field(..., ge=0, le=100)
    assessment: RiskLevel


class RestorePointStrategy(_Model):
    """Backup plan around a mission."""
    pre_mission: bool
    post_mission: bool
    backup_type: BackupType
    backups: int = Field(..., ge=0)
    description: str


class MilestoneAssessment(_Model):
    """Complete output of a milestone assessment."""
    milestone_score: int = Field(..., ge=0, le=100)
    classification: Classification
    factors: FactorSet
    reasoning: str
    feasibility: FeasibilityResult
    uncertainty: UncertaintyResult
    restore_point_strategy: RestorePointStrategy
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_fallback: bool = False


# =============================================================================
# Collaborator Response Models
# =============================================================================


class _Response(BaseModel):
    """Lenient collaborator payload accepting camelCase or snake_case keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class MissionPrediction(_Response):
    """Response of ``predict_mission_characteristics``."""
    estimated_complexity: Optional[str] = None
    risk_score: Optional[float] = None
    confidence_interval: Optional[float] = None

    @field_validator("confidence_interval", mode="before")
    @classmethod
    def _extract_confidence(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return v.get("confidence")
        return v


class StrategySelection(_Response):
    """Response of ``select_optimal_strategy``."""
    domain: Optional[str] = None
    confidence_score: Optional[float] = None


class RiskAssessment(_Response):
    """Response of ``assess_risk``."""
    novelty_factor: Optional[float] = None


class AnalogousProblem(_Response):
    """One entry returned by ``find_analogous_problems``."""
    similarity: float = 0.0
