"""Centralized configuration management for the milestone scorer."""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)


class FactorWeightsConfig(BaseModel):
    """Weights for the seven significance factors.

    These weights control how much each factor contributes to the final
    milestone score. They must sum to 1.0 so the score stays in 0-100.
    """
    complexity: float = Field(0.15, description="Weight for mission complexity")
    risk_score: float = Field(0.15, description="Weight for change risk")
    domain: float = Field(0.15, description="Weight for domain criticality")
    novelty: float = Field(0.20, description="Weight for how new the work is to the team")
    uniqueness: float = Field(0.15, description="Weight for lack of analogous prior problems")
    keywords: float = Field(0.10, description="Weight for significance keyword tier")
    file_impact: float = Field(0.10, description="Weight for estimated number of touched files")

    @model_validator(mode="after")
    def _check_sum(self) -> "FactorWeightsConfig":
        total = sum(self.model_dump().values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Factor weights must sum to 1.0, got {total:.4f}")
        return self


class ClassificationThresholdsConfig(BaseModel):
    """Lower bounds (inclusive) of each classification tier."""
    critical: float = Field(80.0, description="Minimum milestone score for CRITICAL")
    major: float = Field(60.0, description="Minimum milestone score for MAJOR")
    moderate: float = Field(40.0, description="Minimum milestone score for MODERATE")
    minor: float = Field(20.0, description="Minimum milestone score for MINOR")


class ReasoningThresholdsConfig(BaseModel):
    """Factor scores at which a factor contributes a reasoning clause."""
    complexity: float = Field(75.0, description="High complexity clause")
    risk_score: float = Field(70.0, description="Elevated risk clause")
    domain: float = Field(80.0, description="Critical domain clause")
    novelty: float = Field(70.0, description="Novel approach clause")
    uniqueness: float = Field(80.0, description="Unique problem clause")
    keywords: float = Field(75.0, description="Significance keywords clause")
    file_impact: float = Field(60.0, description="Wide file impact clause")


class FeasibilityConfig(BaseModel):
    """Constants for the feasibility derivation."""
    detail_word_count: int = Field(
        10,
        description="Requests with more words than this count as detailed"
    )
    clarity_detailed_with_context: int = Field(85, description="Clarity when detailed and contextual")
    clarity_detailed: int = Field(70, description="Clarity when only detailed")
    clarity_contextual: int = Field(60, description="Clarity when only contextual")
    clarity_default: int = Field(50, description="Clarity otherwise")
    high_risk_complexity: float = Field(75.0, description="Complexity above this is HIGH approach risk")
    high_risk_risk_score: float = Field(70.0, description="Risk score above this is HIGH approach risk")
    moderate_risk_complexity: float = Field(50.0, description="Complexity above this is MODERATE approach risk")
    moderate_risk_risk_score: float = Field(50.0, description="Risk score above this is MODERATE approach risk")
    complexity_weight: float = Field(0.4, description="Share of complexity in the feasibility penalty")
    risk_weight: float = Field(0.4, description="Share of risk in the feasibility penalty")
    clarity_weight: float = Field(0.2, description="Share of unclarity in the feasibility penalty")
    high_threshold: float = Field(70.0, description="Minimum feasibility score for HIGH")
    moderate_threshold: float = Field(50.0, description="Minimum feasibility score for MODERATE")


class UncertaintyConfig(BaseModel):
    """Constants for the uncertainty derivation."""
    confidence_weight: float = Field(50.0, description="Points removed per unit of mean factor confidence")
    feasibility_weight: float = Field(0.5, description="Share of the feasibility score removed")
    high_threshold: float = Field(70.0, description="Minimum uncertainty score for HIGH")
    moderate_threshold: float = Field(40.0, description="Minimum uncertainty score for MODERATE")


class CollaboratorConfig(BaseModel):
    """Configuration for calls to the optional strategic-learning collaborators."""
    timeout_seconds: float = Field(
        2.0,
        gt=0,
        description="Upper bound on a single collaborator call before falling back to heuristics"
    )
    analogous_problem_limit: int = Field(
        5,
        ge=1,
        description="Maximum analogous problems requested from the knowledge graph"
    )


class ScorerConfig(BaseModel):
    """Complete configuration for the milestone scorer."""
    factor_weights: FactorWeightsConfig = Field(default_factory=FactorWeightsConfig)
    classification_thresholds: ClassificationThresholdsConfig = Field(
        default_factory=ClassificationThresholdsConfig
    )
    reasoning_thresholds: ReasoningThresholdsConfig = Field(default_factory=ReasoningThresholdsConfig)
    feasibility: FeasibilityConfig = Field(default_factory=FeasibilityConfig)
    uncertainty: UncertaintyConfig = Field(default_factory=UncertaintyConfig)
    collaborators: CollaboratorConfig = Field(default_factory=CollaboratorConfig)


# Global config instance
_config: Optional[ScorerConfig] = None


def get_config() -> ScorerConfig:
    """Get the current configuration.

    On first use, loads the file found by ``find_config_file`` if there is
    one, otherwise falls back to defaults.
    """
    global _config
    if _config is None:
        path = find_config_file()
        if path is not None:
            logger.info("Loading milestone scorer config from %s", path)
            return load_config(path)
        _config = ScorerConfig()
    return _config


def load_config(path: Path) -> ScorerConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The loaded ScorerConfig.

    Raises:
        pydantic.ValidationError: If the file describes an invalid configuration.
    """
    global _config

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    _config = ScorerConfig.model_validate(data or {})
    return _config


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _config
    _config = ScorerConfig()


def find_config_file() -> Optional[Path]:
    """Find a milestone scorer configuration file.

    Looks in (order of priority):
    1. MILESTONE_SCORER_CONFIG environment variable
    2. ./milestone-config.yaml
    3. ./milestone-config.yml
    4. ~/.config/milestone-scorer/config.yaml
    """
    env_path = os.environ.get("MILESTONE_SCORER_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path

    for name in ["milestone-config.yaml", "milestone-config.yml"]:
        path = Path(name)
        if path.exists():
            return path

    user_config = Path.home() / ".config" / "milestone-scorer" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def save_default_config(path: Path) -> None:
    """Save the default configuration to a YAML file.

    Args:
        path: Path where to save the configuration.
    """
    data = ScorerConfig().model_dump()

    yaml_content = """# Milestone Scorer Configuration
# ==============================
#
# This file tunes factor weights, classification tiers, reasoning
# thresholds, feasibility/uncertainty constants and collaborator timeouts.
# Factor weights must sum to 1.0.
#
# Copy this file to one of these locations:
#   - ./milestone-config.yaml (current directory)
#   - ~/.config/milestone-scorer/config.yaml (user config)
#
# Or set the MILESTONE_SCORER_CONFIG environment variable.

"""
    yaml_content += yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(yaml_content)
