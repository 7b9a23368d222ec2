"""
Configuration Tests
===================

Tests for settings loading and environment overrides.
"""

import pytest
from pydantic import ValidationError

from drift_stack.config import Settings, load_config


class TestSettings:
    """Tests for configuration loading."""
    
    def test_defaults(self):
        """Defaults match the acquisition setup."""
        settings = Settings()
        assert settings.frames.width == 2048
        assert settings.frames.height == 2048
        assert settings.drift.stability_bound == 100
        assert settings.drift.include_reference is False
        assert settings.analysis.resolution == 512
        assert settings.analysis.keep_rate == 0.01
        assert settings.output.atomic_writes is True
    
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "frames:\n"
            "  width: 640\n"
            "  height: 480\n"
            "drift:\n"
            "  stability_bound: 25\n"
        )
        
        settings = load_config(str(path))
        
        assert settings.frames.width == 640
        assert settings.frames.height == 480
        assert settings.drift.stability_bound == 25
        assert settings.analysis.resolution == 512
    
    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.yaml"
        path.write_text("frames:\n  width: 640\n")
        monkeypatch.setenv("DRIFT_STACK_WIDTH", "1024")
        monkeypatch.setenv("DRIFT_STACK_KEEP_RATE", "0.05")
        monkeypatch.setenv("DRIFT_STACK_LOG_LEVEL", "DEBUG")
        
        settings = load_config(str(path))
        
        assert settings.frames.width == 1024
        assert settings.analysis.keep_rate == 0.05
        assert settings.logging.level == "DEBUG"
    
    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)).frames.width == 2048
    
    def test_invalid_values(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("analysis:\n  keep_rate: 1.5\n")
        with pytest.raises(ValidationError):
            load_config(str(path))
    
    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))
    
    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            load_config(str(path))
    
    def test_malformed_env_value(self, monkeypatch):
        monkeypatch.setenv("DRIFT_STACK_WIDTH", "abc")
        with pytest.raises(ValueError):
            load_config()
