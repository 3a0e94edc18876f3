"""
taxfit_config -- single public entrypoint for adjuster configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration
    files directly.  Returns an ``AdjusterConfig`` -- a frozen, validated
    runtime artifact.

Architecture position:
    Configuration -- YAML-driven settings.  Sits above ``taxfit_kernel``
    and ``taxfit_engines`` and below ``taxfit_services``.  Neither the
    kernel nor the engines may import from this package.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``InvalidConfigurationError`` -- a field is missing or invalid.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``TAXFIT_CONFIG_TRACE`` log entry containing the config_id, version
    and checksum, tying every adjustment to the settings that shaped it.
"""

from __future__ import annotations

from pathlib import Path

from taxfit_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_adjuster_config,
)
from taxfit_config.schema import AdjusterConfig
from taxfit_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(config_path: Path | None = None) -> AdjusterConfig:
    """The ONLY public configuration entrypoint.

    Non-goals:
        - This function does NOT cache; callers hold the returned config
          for as long as they need it.

    Args:
        config_path: Override path to a YAML file.  Defaults to the
            ``defaults.yaml`` shipped with this package.

    Returns:
        AdjusterConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidConfigurationError: If validation fails.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    config = parse_adjuster_config(load_yaml_file(path))

    _logger.info(
        "TAXFIT_CONFIG_TRACE",
        extra={
            "trace_type": "TAXFIT_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "default_round_mode": config.default_round_mode.value,
            "source": str(path),
        },
    )
    return config


__all__ = [
    "AdjusterConfig",
    "DEFAULT_CONFIG_PATH",
    "compute_checksum",
    "get_active_config",
    "load_yaml_file",
    "parse_adjuster_config",
]
