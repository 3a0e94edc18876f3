"""
Adjuster configuration schema.

The YAML file is the human-authored source; the loader parses it into
these frozen dataclasses.  ``AdjusterConfig`` is the only runtime artifact.
"""

from __future__ import annotations

from dataclasses import dataclass

from taxfit_engines.tax import RoundMode


@dataclass(frozen=True)
class AdjusterConfig:
    """Validated settings for the invoice adjuster."""

    config_id: str
    version: int
    default_round_mode: RoundMode
    line_item_description: str
    metadata_marker_key: str
    checksum: str = ""
