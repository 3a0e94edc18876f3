"""
taxfit_engines.adjustment -- Find the discount that lands a tax-inclusive total.

Responsibility:
    Given a subtotal, a tax rate, a rounding mode and a target
    tax-inclusive total, find the integer discount ``d`` such that

        (subtotal - d) + apply_tax(subtotal - d, rate, mode) == target

    or report the closest achievable total when no integer discount hits
    the target exactly.  A negative discount is a surcharge.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import taxfit_kernel and sibling engine modules.
    Consumed by taxfit_services.invoice_adjuster and scripts/fit_tax.py.

Invariants enforced:
    - ``final_total == adjusted_subtotal + tax_amount`` and
      ``adjusted_subtotal == subtotal - discount`` for every outcome.
    - Only discounts in ``[-subtotal, +subtotal]`` are probed, so the
      adjusted subtotal of a valid outcome is never negative.
    - Determinism: identical requests produce identical outcomes.

Algorithm:
    ``total(d)`` is non-increasing in ``d`` because the adjusted subtotal
    strictly decreases and every rounding mode is monotone.  Rounding
    creates gaps (some totals are skipped by every discount) but never
    reversals, so bisection is sound:

    1. Probe the midpoint of ``[min_d, max_d]``; an exact hit returns at
       once.  Totals above the target move ``min_d`` up, totals below
       move ``max_d`` down.
    2. Once two or fewer candidates remain, scan them all.
    3. With no exact hit, return the closest total seen anywhere in the
       search (ties go to the earliest probe, the zero discount first).

    That is ``O(log subtotal)`` tax evaluations plus a constant residue.

Failure modes:
    - Expected domain failures never raise.  A negative subtotal, a rate
      outside ``[0, 1]`` and an unreachable target are all reported as an
      ``AdjustmentOutcome`` with ``is_valid = False``, a ``status`` tag
      and an ``error`` message.
    - ValueError from ``AdjustmentRequest`` if ``round_mode`` names no
      rounding mode (a programming error, not a domain failure).

Usage:
    from decimal import Decimal
    from taxfit_engines.adjustment import AdjustmentRequest, calculate_adjustment

    outcome = calculate_adjustment(AdjustmentRequest(
        subtotal=290000,
        target_total=315000,
        tax_rate=Decimal("0.1"),
    ))
    print(outcome.discount)  # 3636
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from taxfit_engines.tax import RoundMode, apply_tax, as_rate
from taxfit_engines.tracer import traced_engine
from taxfit_kernel.logging_config import get_logger

logger = get_logger("engines.adjustment")

ENGINE_NAME = "tax_adjustment"
ENGINE_VERSION = "1.0"

NEGATIVE_SUBTOTAL_ERROR = "subtotal cannot be negative"
TAX_RATE_RANGE_ERROR = "tax rate must be between 0 and 1"

_ZERO = Decimal("0")
_ONE = Decimal("1")


class AdjustmentStatus(str, Enum):
    """Tag describing how an adjustment search ended."""

    EXACT = "exact"  # Target reached exactly
    INVALID_SUBTOTAL = "invalid_subtotal"  # Rejected before searching
    INVALID_TAX_RATE = "invalid_tax_rate"  # Rejected before searching
    UNREACHABLE = "unreachable"  # Closest total returned instead


@dataclass(frozen=True)
class AdjustmentRequest:
    """
    Inputs for one adjustment search.

    ``tax_rate`` may be given as Decimal, int, str or float and is held as
    Decimal.  ``round_mode`` may be given as its string value.  The
    subtotal and rate ranges are checked by the solver, not here.
    """

    subtotal: int
    target_total: int
    tax_rate: Decimal
    round_mode: RoundMode = RoundMode.FLOOR

    def __post_init__(self) -> None:
        object.__setattr__(self, "tax_rate", as_rate(self.tax_rate))
        object.__setattr__(self, "round_mode", RoundMode.parse(self.round_mode))


@dataclass(frozen=True)
class AdjustmentOutcome:
    """
    Result of an adjustment search.

    Immutable value object.  ``error`` is set iff ``is_valid`` is False.
    """

    discount: int  # Positive = reduction, negative = surcharge
    is_valid: bool
    adjusted_subtotal: int
    tax_amount: int
    final_total: int
    status: AdjustmentStatus
    error: str | None = None
    probe_count: int = 0  # Tax evaluations spent

    @property
    def line_item_amount(self) -> int:
        """Amount to post as an invoice line item (negated discount)."""
        return -self.discount

    @property
    def is_surcharge(self) -> bool:
        """True when the adjustment raises the subtotal."""
        return self.discount < 0


@dataclass(frozen=True)
class _Candidate:
    discount: int
    adjusted_subtotal: int
    tax_amount: int
    final_total: int


class _DiscountSearch:
    """Evaluates candidate discounts and remembers the closest one.

    Each discount is evaluated at most once; repeats are served from
    ``_seen`` and do not count towards ``probe_count``.
    """

    def __init__(self, request: AdjustmentRequest) -> None:
        self._request = request
        self._seen: dict[int, _Candidate] = {}
        self.probe_count = 0
        self.best: _Candidate | None = None

    def probe(self, discount: int) -> _Candidate:
        if discount in self._seen:
            return self._seen[discount]

        req = self._request
        adjusted = req.subtotal - discount
        tax = apply_tax(adjusted, req.tax_rate, req.round_mode)
        self.probe_count += 1

        candidate = _Candidate(
            discount=discount,
            adjusted_subtotal=adjusted,
            tax_amount=tax,
            final_total=adjusted + tax,
        )
        self._seen[discount] = candidate
        # Strictly closer only: ties keep the earlier probe
        if self.best is None or self._distance(candidate) < self._distance(self.best):
            self.best = candidate
        return candidate

    def _distance(self, candidate: _Candidate) -> int:
        return abs(candidate.final_total - self._request.target_total)

    def outcome(
        self,
        candidate: _Candidate,
        status: AdjustmentStatus,
        error: str | None = None,
    ) -> AdjustmentOutcome:
        return AdjustmentOutcome(
            discount=candidate.discount,
            is_valid=status is AdjustmentStatus.EXACT,
            adjusted_subtotal=candidate.adjusted_subtotal,
            tax_amount=candidate.tax_amount,
            final_total=candidate.final_total,
            status=status,
            error=error,
            probe_count=self.probe_count,
        )


def _rejected(
    request: AdjustmentRequest,
    status: AdjustmentStatus,
    error: str,
) -> AdjustmentOutcome:
    """Zero-discount echo of the request for input validation failures."""
    return AdjustmentOutcome(
        discount=0,
        is_valid=False,
        adjusted_subtotal=request.subtotal,
        tax_amount=0,
        final_total=request.subtotal,
        status=status,
        error=error,
        probe_count=0,
    )


def _rate_in_range(rate: Decimal) -> bool:
    return rate.is_finite() and _ZERO <= rate <= _ONE


class AdjustmentSolver:
    """
    Solve for the discount that produces a target tax-inclusive total.

    Pure and stateless: one instance can serve any number of threads.
    """

    @traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("request",))
    def solve(self, request: AdjustmentRequest) -> AdjustmentOutcome:
        """
        Search for the discount that makes the total equal the target.

        Args:
            request: Subtotal, target, rate and rounding mode.

        Returns:
            AdjustmentOutcome.  ``is_valid`` is True only for an exact hit;
            otherwise ``status`` says why and ``error`` describes it.
        """
        if request.subtotal < 0:
            logger.warning("adjustment_rejected", extra={
                "reason": AdjustmentStatus.INVALID_SUBTOTAL.value,
                "subtotal": request.subtotal,
            })
            return _rejected(
                request, AdjustmentStatus.INVALID_SUBTOTAL, NEGATIVE_SUBTOTAL_ERROR
            )

        if not _rate_in_range(request.tax_rate):
            logger.warning("adjustment_rejected", extra={
                "reason": AdjustmentStatus.INVALID_TAX_RATE.value,
                "tax_rate": str(request.tax_rate),
            })
            return _rejected(
                request, AdjustmentStatus.INVALID_TAX_RATE, TAX_RATE_RANGE_ERROR
            )

        t0 = time.monotonic()
        search = _DiscountSearch(request)
        target = request.target_total

        current = search.probe(0)
        if current.final_total == target:
            logger.info("adjustment_not_needed", extra={
                "subtotal": request.subtotal,
                "target_total": target,
            })
            return search.outcome(current, AdjustmentStatus.EXACT)

        logger.info("adjustment_search_started", extra={
            "subtotal": request.subtotal,
            "target_total": target,
            "current_total": current.final_total,
            "tax_rate": str(request.tax_rate),
            "round_mode": request.round_mode.value,
        })

        found = self._bisect(search, request)

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        if found is not None:
            logger.info("adjustment_search_completed", extra={
                "discount": found.discount,
                "final_total": found.final_total,
                "probe_count": search.probe_count,
                "duration_ms": duration_ms,
            })
            return search.outcome(found, AdjustmentStatus.EXACT)

        best = search.best
        assert best is not None  # the zero-discount probe always runs
        error = (
            f"Could not find exact adjustment. "
            f"Closest total: {best.final_total}, target: {target}"
        )
        logger.warning("adjustment_target_unreachable", extra={
            "target_total": target,
            "closest_total": best.final_total,
            "closest_discount": best.discount,
            "probe_count": search.probe_count,
            "duration_ms": duration_ms,
        })
        return search.outcome(best, AdjustmentStatus.UNREACHABLE, error)

    def calculate(
        self,
        subtotal: int,
        target_total: int,
        tax_rate: Decimal | int | float | str,
        round_mode: RoundMode | str = RoundMode.FLOOR,
    ) -> AdjustmentOutcome:
        """Keyword convenience wrapper around ``solve``."""
        return self.solve(request=AdjustmentRequest(
            subtotal=subtotal,
            target_total=target_total,
            tax_rate=tax_rate,
            round_mode=round_mode,
        ))

    def _bisect(
        self,
        search: _DiscountSearch,
        request: AdjustmentRequest,
    ) -> _Candidate | None:
        """Bisect ``[-subtotal, subtotal]``; return an exact candidate or None."""
        target = request.target_total
        min_d = -request.subtotal
        max_d = request.subtotal

        while max_d - min_d > 1:
            mid = (min_d + max_d) // 2
            candidate = search.probe(mid)
            if candidate.final_total == target:
                return candidate
            if candidate.final_total > target:
                # Total too high: more discount needed
                min_d = mid + 1
            else:
                max_d = mid - 1

        logger.debug("adjustment_residual_scan", extra={
            "min_discount": min_d,
            "max_discount": max_d,
        })
        for discount in range(min_d, max_d + 1):
            candidate = search.probe(discount)
            if candidate.final_total == target:
                return candidate
        return None


_default_solver = AdjustmentSolver()


def calculate_adjustment(request: AdjustmentRequest) -> AdjustmentOutcome:
    """Solve ``request`` with a shared stateless solver."""
    return _default_solver.solve(request=request)
