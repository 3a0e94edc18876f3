#!/usr/bin/env python3
"""
Solve a tax-inclusive adjustment from the command line.

Prints the discount (negative = surcharge) that makes
``adjusted_subtotal + tax(adjusted_subtotal)`` equal the target.

Usage:
    python3 scripts/fit_tax.py 290000 315000 --rate 0.1
    python3 scripts/fit_tax.py 10000 12100 --rate 0.1 --mode ceil --json

Exit codes:
    0  exact adjustment found
    1  invalid input or target unreachable (closest total is printed)
"""

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from taxfit_engines.adjustment import AdjustmentOutcome, AdjustmentRequest, calculate_adjustment  # noqa: E402
from taxfit_engines.tax import RoundMode  # noqa: E402
from taxfit_kernel.logging_config import configure_logging  # noqa: E402


def _outcome_dict(request: AdjustmentRequest, outcome: AdjustmentOutcome) -> dict:
    return {
        "subtotal": request.subtotal,
        "target_total": request.target_total,
        "tax_rate": str(request.tax_rate),
        "round_mode": request.round_mode.value,
        "status": outcome.status.value,
        "is_valid": outcome.is_valid,
        "discount": outcome.discount,
        "adjusted_subtotal": outcome.adjusted_subtotal,
        "tax_amount": outcome.tax_amount,
        "final_total": outcome.final_total,
        "probe_count": outcome.probe_count,
        "error": outcome.error,
    }


def _print_text(request: AdjustmentRequest, outcome: AdjustmentOutcome) -> None:
    label = "surcharge" if outcome.is_surcharge else "discount"
    print(f"  Subtotal:          {request.subtotal}")
    print(f"  Target total:      {request.target_total}")
    print(f"  Tax rate / mode:   {request.tax_rate} / {request.round_mode.value}")
    print(f"  {label.capitalize():<18} {abs(outcome.discount)}")
    print(f"  Adjusted subtotal: {outcome.adjusted_subtotal}")
    print(f"  Tax:               {outcome.tax_amount}")
    print(f"  Final total:       {outcome.final_total}")
    if outcome.error:
        print(f"  ERROR: {outcome.error}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Find the discount that makes a tax-inclusive total hit a target."
    )
    parser.add_argument("subtotal", type=int, help="Subtotal in the smallest currency unit")
    parser.add_argument("target", type=int, help="Target tax-inclusive total")
    parser.add_argument("--rate", type=str, required=True, help="Tax rate as a decimal, e.g. 0.1")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in RoundMode],
        default=RoundMode.FLOOR.value,
        help="Tax rounding mode (default: floor)",
    )
    parser.add_argument("--json", action="store_true", help="Print the outcome as JSON")
    parser.add_argument("--verbose", action="store_true", help="Emit structured logs to stderr")
    args = parser.parse_args(argv)

    if args.verbose:
        configure_logging(level=logging.DEBUG)

    request = AdjustmentRequest(
        subtotal=args.subtotal,
        target_total=args.target,
        tax_rate=args.rate,
        round_mode=args.mode,
    )
    outcome = calculate_adjustment(request)

    if args.json:
        print(json.dumps(_outcome_dict(request, outcome), indent=2))
    else:
        _print_text(request, outcome)

    return 0 if outcome.is_valid else 1


if __name__ == "__main__":
    sys.exit(main())
