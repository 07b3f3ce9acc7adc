"""Tests for YAML progression config loading."""

import tempfile
from pathlib import Path

import pytest

from lift_scheduler.core.config import DEFAULT_PROGRESSION
from lift_scheduler.core.engine.config_loader import (
    get_bundled_yaml_path,
    get_default_data_dir,
    load_model_config,
    load_progression_config,
    progression_config_from_dict,
)


@pytest.fixture
def data_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestConfigLoader:
    def test_bundled_yaml_present(self):
        path = get_bundled_yaml_path()
        assert path is not None
        assert "progression" in load_model_config(Path("/nonexistent-lift-dir"))

    def test_defaults_without_user_file(self, data_dir):
        assert load_progression_config(data_dir) == DEFAULT_PROGRESSION

    def test_user_override_merges(self, data_dir):
        (data_dir / "progression.yaml").write_text("progression:\n  weight_increment_kg: 5\n")
        cfg = load_progression_config(data_dir)
        assert cfg.weight_increment_kg == 5.0
        assert cfg.deload_factor == 0.85
        assert cfg.misses_before_deload == 3

    def test_broken_user_yaml_warns_and_is_ignored(self, data_dir):
        (data_dir / "progression.yaml").write_text("progression: [unclosed\n")
        with pytest.warns(UserWarning):
            cfg = load_progression_config(data_dir)
        assert cfg == DEFAULT_PROGRESSION

    def test_out_of_range_value_raises(self, data_dir):
        (data_dir / "progression.yaml").write_text("progression:\n  deload_factor: 1.5\n")
        with pytest.raises(ValueError):
            load_progression_config(data_dir)

    def test_non_numeric_value_raises(self):
        with pytest.raises(ValueError):
            progression_config_from_dict({"progression": {"misses_before_deload": "many"}})

    def test_empty_section_uses_defaults(self):
        assert progression_config_from_dict({}) == DEFAULT_PROGRESSION

    def test_data_dir_from_env(self, monkeypatch, data_dir):
        monkeypatch.setenv("LIFT_SCHEDULER_HOME", str(data_dir))
        assert get_default_data_dir() == data_dir

    def test_data_dir_default(self, monkeypatch):
        monkeypatch.delenv("LIFT_SCHEDULER_HOME", raising=False)
        assert get_default_data_dir() == Path.home() / ".lift-scheduler"
