"""
Tests for the runtime configuration loader.
"""

import json

import pytest

from config.config_loader import DEFAULT_CONFIG, load_config, save_config, validate_config


def write_config(tmp_path, overrides):
    config = dict(overrides)
    config.setdefault("output_directory", str(tmp_path / "logs"))
    config.setdefault("download_directory", str(tmp_path / "downloads"))
    path = tmp_path / "runtime_config.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults_fill_missing_keys(self, tmp_path):
        path = write_config(tmp_path, {"engine_url": "http://10.0.0.7"})
        config = load_config(str(path))
        assert config["engine_url"] == "http://10.0.0.7"
        assert config["display_delay_ms"] == DEFAULT_CONFIG["display_delay_ms"]

    def test_creates_output_directories(self, tmp_path):
        path = write_config(tmp_path, {})
        load_config(str(path))
        assert (tmp_path / "logs").is_dir()
        assert (tmp_path / "downloads").is_dir()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "absent.json"))

    def test_wrong_type(self, tmp_path):
        path = write_config(tmp_path, {"display_delay_ms": "fast"})
        with pytest.raises(TypeError):
            load_config(str(path))

    def test_save_then_load(self, tmp_path):
        path = write_config(tmp_path, {})
        config = load_config(str(path))
        config["request_timeout"] = 3
        save_config(config, str(path))
        assert load_config(str(path))["request_timeout"] == 3


class TestValidateConfig:
    """Tests for validate_config()."""

    def test_missing_key(self):
        config = dict(DEFAULT_CONFIG)
        del config["engine_url"]
        with pytest.raises(ValueError, match="engine_url"):
            validate_config(config)

    @pytest.mark.parametrize("key,value", [
        ("engine_url", "ftp://device"),
        ("request_timeout", 0),
        ("display_delay_ms", -5),
    ])
    def test_bad_values(self, key, value):
        config = dict(DEFAULT_CONFIG, **{key: value})
        with pytest.raises(ValueError):
            validate_config(config)

    def test_float_timeout_is_accepted(self):
        validate_config(dict(DEFAULT_CONFIG, request_timeout=2.5))
