"""Tests for scorer configuration loading."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from milestone_scorer import config as config_module
from milestone_scorer.config import (
    ScorerConfig,
    find_config_file,
    get_config,
    load_config,
    reset_config,
    save_default_config,
)
from milestone_scorer.scorer import MilestoneScorer


@pytest.fixture(autouse=True)
def clean_config():
    """Restore the default global configuration around each test."""
    reset_config()
    yield
    reset_config()


class TestDefaults:
    """Tests for default configuration values."""

    def test_default_weights_sum_to_one(self):
        weights = get_config().factor_weights.model_dump()

        assert abs(sum(weights.values()) - 1.0) < 1e-9
        assert weights["novelty"] == 0.20

    def test_default_thresholds(self):
        t = get_config().classification_thresholds

        assert (t.critical, t.major, t.moderate, t.minor) == (80, 60, 40, 20)

    def test_default_timeout(self):
        assert get_config().collaborators.timeout_seconds == 2.0


class TestLoadConfig:
    """Tests for YAML configuration files."""

    def test_save_and_load_round_trip(self, tmp_path: Path):
        path = tmp_path / "nested" / "milestone-config.yaml"
        save_default_config(path)

        assert path.read_text(encoding="utf-8").startswith("# Milestone Scorer Configuration")
        assert load_config(path) == ScorerConfig()

    def test_partial_override(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"collaborators": {"timeout_seconds": 0.5}}), encoding="utf-8")

        loaded = load_config(path)

        assert loaded.collaborators.timeout_seconds == 0.5
        assert loaded.factor_weights.complexity == 0.15
        assert get_config() is loaded

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == ScorerConfig()

    def test_weights_must_sum_to_one(self, tmp_path: Path):
        """Invalid weights are rejected rather than silently rescaled."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"factor_weights": {"novelty": 0.5}}), encoding="utf-8")

        with pytest.raises(ValidationError, match="sum to 1.0"):
            load_config(path)

    def test_loaded_config_drives_scorer(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.dump({"classification_thresholds": {"minor": 35}}),
            encoding="utf-8",
        )
        load_config(path)

        # "fix a small bug" scores 29, below the raised MINOR bound
        result = MilestoneScorer().assess_sync("fix a small bug")

        assert result.classification.value == "TRIVIAL"


class TestFindConfigFile:
    """Tests for configuration discovery."""

    def test_env_var(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("{}", encoding="utf-8")
        monkeypatch.setenv("MILESTONE_SCORER_CONFIG", str(path))

        assert find_config_file() == path

    def test_current_directory(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("MILESTONE_SCORER_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / "milestone-config.yml").write_text("{}", encoding="utf-8")

        assert find_config_file() == Path("milestone-config.yml")

    def test_nothing_found(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("MILESTONE_SCORER_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config_module.Path, "home", lambda: tmp_path)

        assert find_config_file() is None

    def test_discovered_file_configures_first_use(self, tmp_path: Path, monkeypatch):
        """The first get_config() loads whatever find_config_file() locates."""
        path = tmp_path / "custom.yaml"
        path.write_text(yaml.dump({"collaborators": {"timeout_seconds": 0.5}}), encoding="utf-8")
        monkeypatch.setenv("MILESTONE_SCORER_CONFIG", str(path))
        monkeypatch.setattr(config_module, "_config", None)

        assert get_config().collaborators.timeout_seconds == 0.5
        assert MilestoneScorer().config.collaborators.timeout_seconds == 0.5

    def test_defaults_when_nothing_discovered(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("MILESTONE_SCORER_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config_module.Path, "home", lambda: tmp_path)
        monkeypatch.setattr(config_module, "_config", None)

        assert get_config() == ScorerConfig()
