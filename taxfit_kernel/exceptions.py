"""
Typed exception hierarchy for the taxfit packages.

Every error has a typed class, a static ``code`` attribute (machine-readable,
API-safe) and carries structured data as attributes instead of only a
message string.  Callers catch by type and read attributes; they never
parse messages.

Pure engines do NOT raise these for expected domain failures.  The
adjustment solver reports invalid input and unreachable targets as tagged
outcomes; only the service layer translates those outcomes into
exceptions.

Hierarchy:

    TaxFitError (base)
    |
    +-- InvoiceError
    |   +-- InvoiceNotDraftError
    |   +-- ZeroSubtotalError
    |   +-- MissingCustomerError
    |
    +-- AdjustmentError
    |   +-- AdjustmentRejectedError
    |
    +-- ConfigurationError
        +-- InvalidConfigurationError

Codes:

Category        | Code                   | When Raised
----------------|------------------------|--------------------------------------
Invoice         | INVOICE_NOT_DRAFT      | Adjustment requested on a non-draft invoice
                | ZERO_SUBTOTAL          | Invoice subtotal is zero
                | INVALID_CUSTOMER       | Invoice has no customer to bill
----------------|------------------------|--------------------------------------
Adjustment      | ADJUSTMENT_REJECTED    | Solver returned an invalid outcome
----------------|------------------------|--------------------------------------
Configuration   | INVALID_CONFIGURATION  | Config value missing or out of range

Usage:

    try:
        adjuster.apply_adjustment(options)
    except InvoiceNotDraftError as e:
        api_response(code=e.code, status=e.status)
    except AdjustmentRejectedError as e:
        log.warning("closest_total", extra={"total": e.outcome.final_total})
"""

from __future__ import annotations

from typing import Any


class TaxFitError(Exception):
    """
    Base exception for all taxfit errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "TAXFIT_ERROR"


# Invoice-related exceptions


class InvoiceError(TaxFitError):
    """Base exception for invoice precondition failures."""

    code: str = "INVOICE_ERROR"


class InvoiceNotDraftError(InvoiceError):
    """Adjustments can only be applied to draft invoices."""

    code: str = "INVOICE_NOT_DRAFT"

    def __init__(self, invoice_id: str, status: str | None):
        self.invoice_id = invoice_id
        self.status = status
        super().__init__(
            f"Invoice {invoice_id} is not in draft state. Current status: {status}. "
            "Tax adjustments can only be applied to draft invoices."
        )


class ZeroSubtotalError(InvoiceError):
    """Invoice has nothing to adjust."""

    code: str = "ZERO_SUBTOTAL"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(
            f"Invoice {invoice_id} has zero subtotal. Cannot calculate adjustment."
        )


class MissingCustomerError(InvoiceError):
    """The adjustment line item needs a customer to attach to."""

    code: str = "INVALID_CUSTOMER"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice {invoice_id} has invalid or missing customer")


# Adjustment-related exceptions


class AdjustmentError(TaxFitError):
    """Base exception for adjustment failures."""

    code: str = "ADJUSTMENT_ERROR"


class AdjustmentRejectedError(AdjustmentError):
    """
    The solver could not produce a valid adjustment.

    ``reason`` is the outcome status value (``invalid_subtotal``,
    ``invalid_tax_rate`` or ``unreachable``); ``outcome`` is the full
    solver result, including the closest achievable total.
    """

    code: str = "ADJUSTMENT_REJECTED"

    def __init__(
        self,
        invoice_id: str,
        reason: str,
        detail: str | None,
        outcome: Any = None,
    ):
        self.invoice_id = invoice_id
        self.reason = reason
        self.detail = detail
        self.outcome = outcome
        super().__init__(
            f"Failed to calculate valid adjustment for invoice {invoice_id}: "
            f"{detail or 'Unknown error'}"
        )


# Configuration-related exceptions


class ConfigurationError(TaxFitError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidConfigurationError(ConfigurationError):
    """A configuration field is missing or holds an unusable value."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, field: str, value: Any, message: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid configuration for '{field}' ({value!r}): {message}")
