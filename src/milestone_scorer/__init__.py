"""Milestone Scorer.

Classifies natural-language mission requests into significance tiers and
derives restore-point strategies from them.
"""

from .config import ScorerConfig, get_config, load_config
from .schema import (
    BackupType,
    Classification,
    Factor,
    FactorSet,
    MilestoneAssessment,
    RestorePointStrategy,
    RiskLevel,
)
from .scorer import MilestoneScorer

__all__ = [
    "BackupType",
    "Classification",
    "Factor",
    "FactorSet",
    "MilestoneAssessment",
    "MilestoneScorer",
    "RestorePointStrategy",
    "RiskLevel",
    "ScorerConfig",
    "get_config",
    "load_config",
]

__version__ = "1.0.0"
