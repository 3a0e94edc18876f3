"""
Tests for adjuster configuration loading.

Covers:
- Shipped defaults
- Override files
- Validation failures
- TAXFIT_CONFIG_TRACE emission
"""

from pathlib import Path

import pytest
import yaml

from taxfit_config import (
    DEFAULT_CONFIG_PATH,
    AdjusterConfig,
    compute_checksum,
    get_active_config,
    parse_adjuster_config,
)
from taxfit_engines.tax import RoundMode
from taxfit_kernel.exceptions import InvalidConfigurationError


def _valid_data() -> dict:
    return {
        "config_id": "test-config",
        "version": 2,
        "adjustment": {
            "round_mode": "ceil",
            "line_item_description": "Rounding fix",
            "metadata_marker_key": "fitted",
        },
    }


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "adjuster.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaultConfig:
    """The configuration shipped with the package."""

    def test_defaults_load(self):
        config = get_active_config()

        assert isinstance(config, AdjusterConfig)
        assert config.config_id == "taxfit-defaults"
        assert config.default_round_mode is RoundMode.FLOOR
        assert config.line_item_description == "Tax adjustment"
        assert config.metadata_marker_key == "tax_fitter_adjustment"

    def test_default_path_exists(self):
        assert DEFAULT_CONFIG_PATH.is_file()

    def test_checksum_is_stable(self):
        assert get_active_config().checksum == get_active_config().checksum
        assert len(get_active_config().checksum) == 64

    def test_config_trace_emitted(self, captured_logs):
        config = get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "TAXFIT_CONFIG_TRACE"]

        assert len(traces) == 1
        assert traces[0]["checksum"] == config.checksum
        assert traces[0]["default_round_mode"] == "floor"


class TestOverrideConfig:
    """Loading an explicit YAML file."""

    def test_override_file(self, tmp_path):
        config = get_active_config(_write(tmp_path, _valid_data()))

        assert config.config_id == "test-config"
        assert config.version == 2
        assert config.default_round_mode is RoundMode.CEIL
        assert config.checksum == compute_checksum(_valid_data())

    def test_round_alias(self):
        data = _valid_data()
        data["adjustment"]["round_mode"] = "round"
        assert parse_adjuster_config(data).default_round_mode is RoundMode.NEAREST

    def test_round_mode_defaults_to_floor(self):
        data = _valid_data()
        del data["adjustment"]["round_mode"]
        assert parse_adjuster_config(data).default_round_mode is RoundMode.FLOOR

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("adjustment: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            get_active_config(path)


class TestConfigValidation:
    """Invalid values raise InvalidConfigurationError with the field name."""

    def test_unknown_round_mode(self):
        data = _valid_data()
        data["adjustment"]["round_mode"] = "stochastic"
        with pytest.raises(InvalidConfigurationError) as exc_info:
            parse_adjuster_config(data)
        assert exc_info.value.field == "adjustment.round_mode"
        assert exc_info.value.code == "INVALID_CONFIGURATION"

    def test_missing_section(self):
        data = _valid_data()
        del data["adjustment"]
        with pytest.raises(InvalidConfigurationError) as exc_info:
            parse_adjuster_config(data)
        assert exc_info.value.field == "adjustment"

    def test_empty_description(self):
        data = _valid_data()
        data["adjustment"]["line_item_description"] = "  "
        with pytest.raises(InvalidConfigurationError) as exc_info:
            parse_adjuster_config(data)
        assert exc_info.value.field == "adjustment.line_item_description"

    def test_bad_version(self):
        data = _valid_data()
        data["version"] = 0
        with pytest.raises(InvalidConfigurationError, match="version"):
            parse_adjuster_config(data)

    def test_top_level_not_mapping(self, tmp_path):
        with pytest.raises(InvalidConfigurationError):
            get_active_config(_write(tmp_path, ["not", "a", "mapping"]))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(InvalidConfigurationError):
            get_active_config(path)
