"""
InvoiceAdjusterService -- Apply a tax-fitting adjustment to a draft invoice.

Composes AdjustmentSolver (pure engine) with an injected billing client
and the active adjuster configuration.

Architecture: taxfit_services -- imperative shell.
    The service owns the only remote calls in the system: one invoice
    read and, on success, one invoice-item write.  The billing client is
    a protocol so any provider SDK can sit behind a thin wrapper.

Contract:
    1. Retrieve the invoice.
    2. Before the solver runs, reject:
       - a status other than draft (InvoiceNotDraftError)
       - a zero or missing subtotal (ZeroSubtotalError)
       - a missing customer (MissingCustomerError)
    3. Solve for the discount with the invoice subtotal and the caller's
       target, rate and rounding mode.
    4. Reject invalid outcomes (AdjustmentRejectedError) with no write.
    5. Create one invoice item with ``amount = -discount`` and audit
       metadata (original subtotal, target total, computed discount).

Non-goals:
    - Does NOT retry remote calls (the client decides).
    - Does NOT remove previous adjustments from the invoice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Protocol

from taxfit_config import AdjusterConfig, get_active_config
from taxfit_engines.adjustment import (
    AdjustmentOutcome,
    AdjustmentRequest,
    AdjustmentSolver,
)
from taxfit_engines.tax import RoundMode
from taxfit_kernel.exceptions import (
    AdjustmentRejectedError,
    InvoiceNotDraftError,
    MissingCustomerError,
    ZeroSubtotalError,
)
from taxfit_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.invoice_adjuster")

DRAFT_STATUS = "draft"


@dataclass(frozen=True)
class InvoiceSnapshot:
    """The invoice fields the adjuster reads."""

    invoice_id: str
    status: str | None
    subtotal: int | None  # Smallest currency unit
    currency: str
    customer_id: str | None


@dataclass(frozen=True)
class InvoiceItemRequest:
    """One line item to create on an invoice."""

    invoice_id: str
    customer_id: str
    amount: int  # Negative for a discount, positive for a surcharge
    currency: str
    description: str
    metadata: dict[str, str] = field(default_factory=dict)


class BillingClient(Protocol):
    """Provider-neutral billing operations used by the adjuster."""

    def retrieve_invoice(self, invoice_id: str) -> InvoiceSnapshot:
        ...

    def create_invoice_item(self, item: InvoiceItemRequest) -> Any:
        ...


@dataclass(frozen=True)
class InvoiceAdjustmentOptions:
    """
    Caller input for one invoice adjustment.

    ``round_mode`` and ``description`` fall back to the active config
    when omitted.
    """

    invoice_id: str
    target_total: int
    tax_rate: Decimal | int | float | str
    round_mode: RoundMode | str | None = None
    description: str | None = None
    metadata: Mapping[str, str] | None = None


@dataclass(frozen=True)
class InvoiceAdjustmentResult:
    """The created invoice item and the numbers behind it."""

    invoice_item: Any
    discount: int
    adjusted_subtotal: int
    tax_amount: int
    final_total: int


class InvoiceAdjusterService:
    """Fit a draft invoice's tax-inclusive total to a target.

    Contract:
        - ``apply_adjustment()`` performs at most one remote write.
        - Every failure raises a typed TaxFitError before any write.
    """

    def __init__(
        self,
        client: BillingClient,
        config: AdjusterConfig | None = None,
        solver: AdjustmentSolver | None = None,
    ) -> None:
        self._client = client
        self._config = config or get_active_config()
        self._solver = solver or AdjustmentSolver()

    @property
    def config(self) -> AdjusterConfig:
        return self._config

    def apply_adjustment(
        self,
        options: InvoiceAdjustmentOptions,
    ) -> InvoiceAdjustmentResult:
        """Retrieve, validate, solve and post one adjustment line item.

        Args:
            options: Invoice id, target total, tax rate and extras.

        Returns:
            InvoiceAdjustmentResult with the created invoice item.

        Raises:
            InvoiceNotDraftError: Invoice status is not draft.
            ZeroSubtotalError: Invoice subtotal is zero or missing.
            MissingCustomerError: Invoice has no customer to bill.
            AdjustmentRejectedError: Solver produced an invalid outcome.
        """
        with LogContext.bind(invoice_id=options.invoice_id):
            invoice = self._client.retrieve_invoice(options.invoice_id)
            self._check_invoice(invoice)

            subtotal = invoice.subtotal or 0
            round_mode = (
                options.round_mode
                if options.round_mode is not None
                else self._config.default_round_mode
            )

            outcome = self._solver.solve(request=AdjustmentRequest(
                subtotal=subtotal,
                target_total=options.target_total,
                tax_rate=options.tax_rate,
                round_mode=round_mode,
            ))

            if not outcome.is_valid:
                logger.warning("invoice_adjustment_rejected", extra={
                    "reason": outcome.status.value,
                    "detail": outcome.error,
                    "closest_total": outcome.final_total,
                    "target_total": options.target_total,
                })
                raise AdjustmentRejectedError(
                    invoice_id=options.invoice_id,
                    reason=outcome.status.value,
                    detail=outcome.error,
                    outcome=outcome,
                )

            item = InvoiceItemRequest(
                invoice_id=invoice.invoice_id,
                customer_id=invoice.customer_id,
                amount=outcome.line_item_amount,
                currency=invoice.currency,
                description=options.description or self._config.line_item_description,
                metadata=self._build_metadata(options, subtotal, outcome),
            )
            invoice_item = self._client.create_invoice_item(item)

            logger.info("invoice_adjustment_applied", extra={
                "original_subtotal": subtotal,
                "target_total": options.target_total,
                "discount": outcome.discount,
                "line_item_amount": item.amount,
                "currency": invoice.currency,
            })

            return InvoiceAdjustmentResult(
                invoice_item=invoice_item,
                discount=outcome.discount,
                adjusted_subtotal=outcome.adjusted_subtotal,
                tax_amount=outcome.tax_amount,
                final_total=outcome.final_total,
            )

    def _check_invoice(self, invoice: InvoiceSnapshot) -> None:
        if invoice.status != DRAFT_STATUS:
            logger.error("invoice_not_draft", extra={"status": invoice.status})
            raise InvoiceNotDraftError(invoice.invoice_id, invoice.status)
        if not invoice.subtotal:
            logger.error("invoice_zero_subtotal", extra={})
            raise ZeroSubtotalError(invoice.invoice_id)
        if not invoice.customer_id:
            logger.error("invoice_missing_customer", extra={})
            raise MissingCustomerError(invoice.invoice_id)

    def _build_metadata(
        self,
        options: InvoiceAdjustmentOptions,
        subtotal: int,
        outcome: AdjustmentOutcome,
    ) -> dict[str, str]:
        """Caller metadata plus audit keys; audit keys win on collision."""
        metadata = dict(options.metadata or {})
        metadata.update({
            self._config.metadata_marker_key: "true",
            "original_subtotal": str(subtotal),
            "target_total": str(options.target_total),
            "calculated_discount": str(outcome.discount),
        })
        return metadata


def apply_invoice_adjustment(
    client: BillingClient,
    options: InvoiceAdjustmentOptions,
    config: AdjusterConfig | None = None,
) -> InvoiceAdjustmentResult:
    """Functional form: build a service and apply one adjustment."""
    return InvoiceAdjusterService(client, config=config).apply_adjustment(options)
