"""
Module: taxfit_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    taxfit_services and scripts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import taxfit_kernel (and sibling engine modules).
    MUST NOT import taxfit_services or taxfit_config.

Invariants enforced:
    - Integer amounts in the smallest currency unit; tax rates are
      ``Decimal`` and never rounded before use.
    - Determinism: identical inputs always produce identical outputs.
    - Domain failures are returned as tagged outcomes, never raised.

Usage:
    from taxfit_engines import AdjustmentRequest, calculate_adjustment
    from taxfit_engines import RoundMode, apply_tax
"""

from taxfit_kernel.logging_config import get_logger

logger = get_logger("engines")

from taxfit_engines.adjustment import (
    AdjustmentOutcome,
    AdjustmentRequest,
    AdjustmentSolver,
    AdjustmentStatus,
    calculate_adjustment,
)
from taxfit_engines.tax import (
    RoundMode,
    apply_tax,
    as_rate,
    total_with_tax,
)
from taxfit_engines.tracer import (
    compute_input_fingerprint,
    traced_engine,
)

__all__ = [
    # Tax
    "RoundMode",
    "apply_tax",
    "as_rate",
    "total_with_tax",
    # Adjustment
    "AdjustmentOutcome",
    "AdjustmentRequest",
    "AdjustmentSolver",
    "AdjustmentStatus",
    "calculate_adjustment",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
