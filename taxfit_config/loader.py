"""
Configuration Loader (``taxfit_config.loader``).

Responsibility
--------------
Loads the adjuster YAML file and parses it into the frozen
``AdjusterConfig`` dataclass.  The single public entry point for runtime
config is ``taxfit_config.get_active_config()``; this module is the
parsing half of it.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Required keys that are missing or hold unusable values raise
  ``InvalidConfigurationError``; there are no silent defaults for
  required fields.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  YAML data for configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Bad values  -> ``InvalidConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from taxfit_config.schema import AdjusterConfig
from taxfit_engines.tax import RoundMode
from taxfit_kernel.exceptions import InvalidConfigurationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidConfigurationError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigurationError(
            "<root>", type(data).__name__, "top level must be a mapping"
        )
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 checksum of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name)
    if not isinstance(section, dict):
        raise InvalidConfigurationError(name, section, "section must be a mapping")
    return section


def _required_str(section: dict[str, Any], path: str, key: str) -> str:
    value = section.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidConfigurationError(
            f"{path}.{key}", value, "must be a non-empty string"
        )
    return value


def parse_adjuster_config(data: dict[str, Any]) -> AdjusterConfig:
    """
    Parse an ``AdjusterConfig`` from a dict.

    Preconditions:
        - ``data`` contains an ``adjustment`` mapping.
    Postconditions:
        - Returns a fully populated frozen ``AdjusterConfig`` whose
          checksum identifies ``data``.
    Raises:
        InvalidConfigurationError: if a field is missing or invalid.
    """
    adjustment = _section(data, "adjustment")

    raw_mode = adjustment.get("round_mode", RoundMode.FLOOR.value)
    try:
        round_mode = RoundMode.parse(raw_mode)
    except ValueError as exc:
        raise InvalidConfigurationError(
            "adjustment.round_mode", raw_mode, str(exc)
        ) from exc

    version = data.get("version", 1)
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise InvalidConfigurationError("version", version, "must be a positive integer")

    return AdjusterConfig(
        config_id=str(data.get("config_id", "taxfit")),
        version=version,
        default_round_mode=round_mode,
        line_item_description=_required_str(
            adjustment, "adjustment", "line_item_description"
        ),
        metadata_marker_key=_required_str(
            adjustment, "adjustment", "metadata_marker_key"
        ),
        checksum=compute_checksum(data),
    )
