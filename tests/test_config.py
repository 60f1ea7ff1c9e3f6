"""Tests for the YAML configuration manager."""

from pathlib import Path

import pytest

from config import ConfigurationManager, get_config, load_config
from expense_extraction.utils.exceptions import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class TestDefaultConfiguration:

    def test_values(self):
        assert get_config("input.encoding") == "utf-8-sig"
        assert get_config("input.supported_extensions") == [".txt"]
        assert get_config("output.excel.sheet_name") == "Extracted Data"
        assert get_config("evaluation.amount_tolerance") == 0.01

    def test_missing_key_default(self):
        assert get_config("nonexistent.key", "fallback") == "fallback"
        assert get_config("input.encoding.deeper") is None

    def test_singleton(self):
        assert ConfigurationManager() is ConfigurationManager()

    def test_paths_resolved_against_project_root(self):
        output_dir = Path(get_config("paths.output_dir"))

        assert output_dir.is_absolute()
        assert output_dir == PROJECT_ROOT / "outputs"

    def test_get_all_is_a_copy(self):
        config = ConfigurationManager()
        config.get_all()['input'] = None
        assert config.get("input.encoding") == "utf-8-sig"


class TestCustomConfiguration:

    def test_load_config_replaces_active_configuration(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "paths:\n  output_dir: reports\n"
            "output:\n  excel:\n    enabled: true\n",
            encoding="utf-8",
        )

        load_config(str(path))

        assert get_config("output.excel.enabled") is True
        assert get_config("paths.output_dir") == str(PROJECT_ROOT / "reports")
        assert get_config("input.encoding", "utf-8") == "utf-8"

    def test_load_config_none_restores_defaults(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("input:\n  encoding: latin-1\n", encoding="utf-8")

        load_config(str(path))
        load_config()

        assert get_config("input.encoding") == "utf-8-sig"

    def test_reload(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("logging:\n  level: INFO\n", encoding="utf-8")
        config = load_config(str(path))

        path.write_text("logging:\n  level: DEBUG\n", encoding="utf-8")
        config.reload()

        assert config.get("logging.level") == "DEBUG"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(str(path)).get_all() == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("input: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(str(path))

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(str(path))
