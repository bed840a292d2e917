"""Errors raised while applying matches or running reconciliation."""


class ApplyError(Exception):
    """A single candidate could not be applied."""

    code = "apply_error"
    retryable = False

    def __init__(self, message: str, transaction_id: str | None = None, invoice_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.transaction_id = transaction_id
        self.invoice_id = invoice_id


class AlreadyMatched(ApplyError):
    """Transaction was matched by a concurrent or earlier apply."""

    code = "already_matched"


class InvoiceClosed(ApplyError):
    """Invoice stopped being open between candidate generation and apply."""

    code = "invoice_closed"


class Overpayment(ApplyError):
    """Applying the payment would push paid_amount past total_amount."""

    code = "overpayment"


class RecordNotFound(ApplyError):
    """Transaction or invoice referenced by the candidate does not exist."""

    code = "not_found"


class StoreUnavailable(ApplyError):
    """Database failure or concurrent write; safe to retry the apply."""

    code = "store_unavailable"
    retryable = True


class ReconciliationFailed(Exception):
    """A run could not load its input data and was aborted."""

    def __init__(self, message: str, tenant_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.tenant_id = tenant_id
