"""
Configuration Tests

Run with: pytest tests/test_config.py -v
"""

import json
import logging

import pytest
import yaml

from emmm_core.config import (
    CoreConfig,
    EncoderConfig,
    configure_logging,
    get_default_config,
    load_config,
    save_config,
)


class TestDefaults:
    """Tests for default configuration values."""

    def test_archive_layout(self):
        config = get_default_config()
        assert config.archive.document_entry == "source.emmm"
        assert config.archive.assets_dir == "assets"

    def test_encoder_policy(self):
        config = get_default_config()
        assert config.encoder.quality == 80
        assert config.encoder.min_scale == 0.1
        assert config.encoder.search_rounds == 6
        assert config.encoder.passable_ratio == 0.9
        assert config.encoder.accepted_mime_types == ["image/jpeg", "image/png"]


class TestSerialization:
    """Tests for loading and saving config files."""

    def test_yaml_round_trip(self, tmp_path):
        config = CoreConfig()
        config.encoder.search_rounds = 3
        config.archive.compression_level = 9
        path = tmp_path / "nested" / "emmm.yaml"

        save_config(config, path)
        loaded = load_config(path)

        assert loaded.encoder.search_rounds == 3
        assert loaded.archive.compression_level == 9
        assert loaded.to_dict() == config.to_dict()

    def test_json_round_trip(self, tmp_path):
        config = CoreConfig(log_level="DEBUG", custom={"team": "docs"})
        path = tmp_path / "emmm.json"

        save_config(config, path)

        assert json.loads(path.read_text())["log_level"] == "DEBUG"
        assert load_config(path).custom == {"team": "docs"}

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "partial.yml"
        path.write_text(yaml.dump({"encoder": {"search_rounds": 3}}))

        config = load_config(path)

        assert config.encoder == EncoderConfig(search_rounds=3)
        assert config.archive.document_entry == "source.emmm"

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path).to_dict() == CoreConfig().to_dict()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("")
        with pytest.raises(ValueError):
            load_config(path)
        with pytest.raises(ValueError):
            save_config(CoreConfig(), path)


class TestLogging:
    """Tests for logging setup."""

    def test_sets_root_level(self):
        configure_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("PIL").level == logging.WARNING
        configure_logging("INFO")

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging("LOUD")
