"""
taxfit_services -- Package init and public API.

Responsibility:
    Imperative shell that composes the pure engines (taxfit_engines/)
    with remote billing clients and the active configuration.  This is
    the only layer that performs I/O.

Architecture position:
    Dependency direction (enforced by tests/architecture/test_layer_boundary.py):
        taxfit_services/ -> taxfit_engines/, taxfit_config/, taxfit_kernel/  (allowed)
        taxfit_engines/  -> taxfit_services/  (FORBIDDEN)
        taxfit_kernel/   -> taxfit_services/  (FORBIDDEN)
"""

from taxfit_kernel.logging_config import get_logger

logger = get_logger("services")

from taxfit_services.invoice_adjuster import (
    BillingClient,
    InvoiceAdjusterService,
    InvoiceAdjustmentOptions,
    InvoiceAdjustmentResult,
    InvoiceItemRequest,
    InvoiceSnapshot,
    apply_invoice_adjustment,
)

__all__ = [
    "BillingClient",
    "InvoiceAdjusterService",
    "InvoiceAdjustmentOptions",
    "InvoiceAdjustmentResult",
    "InvoiceItemRequest",
    "InvoiceSnapshot",
    "apply_invoice_adjustment",
]
