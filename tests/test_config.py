"""
Test Suite for Configuration Module
===================================
"""

import pytest

from winequality.config import (
    DEFAULT_TEST_PATH, DEFAULT_TRAIN_PATH, PipelineConfig, load_config
)


class TestPipelineConfig:
    """Tests for PipelineConfig and load_config."""

    def test_defaults(self):
        """Test the built-in defaults."""
        config = PipelineConfig()

        assert config.train_path == DEFAULT_TRAIN_PATH
        assert config.test_path == DEFAULT_TEST_PATH
        assert config.delimiter == ","
        assert config.has_header is True
        assert config.model == {}
        assert config.output['save_plots'] is False
        assert config.logging['level'] == 'INFO'

    def test_load_yaml(self, tmp_path):
        """Test loading every section from YAML."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "data:\n"
            "  train_path: a.csv\n"
            "  test_path: b.csv\n"
            "  delimiter: ';'\n"
            "  has_header: false\n"
            "model:\n"
            "  algorithm: random_forest\n"
            "  n_estimators: 50\n"
            "output:\n"
            "  predictions_path: out/\n"
            "logging:\n"
            "  level: DEBUG\n"
        )

        config = load_config(str(path))

        assert config.train_path == "a.csv"
        assert config.test_path == "b.csv"
        assert config.delimiter == ";"
        assert config.has_header is False
        assert config.model == {'algorithm': 'random_forest', 'n_estimators': 50}
        assert config.output['predictions_path'] == "out/"
        assert config.output['model_path'] is None
        assert config.logging['level'] == 'DEBUG'

    def test_empty_yaml(self, tmp_path):
        """Test that an empty file gives the defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(str(path)) == PipelineConfig()

    def test_unknown_section_ignored(self, tmp_path):
        """Test that unknown top-level sections are ignored."""
        path = tmp_path / "config.yaml"
        path.write_text("preprocessing:\n  window_size: 15\n")

        assert load_config(str(path)) == PipelineConfig()

    def test_not_a_mapping(self):
        """Test that non-mapping configurations are rejected."""
        with pytest.raises(ValueError, match="mapping"):
            PipelineConfig.from_dict(["train_path"])

    def test_missing_file(self, tmp_path):
        """Test that a missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
