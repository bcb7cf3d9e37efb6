from django.core.exceptions import NON_FIELD_ERRORS, ValidationError

"""
Bookkeeping errors.

Validation failures subclass Django's ValidationError so models, forms,
admin and the JSON views handle them the same way.  Each one is keyed by
the field it concerns (``error.message_dict["items"]``) so callers can show
it next to the right input.
"""


class BooksValidationError(ValidationError):
    """ValidationError bound to one field with a stable error code."""

    field = NON_FIELD_ERRORS
    code = "invalid"

    def __init__(self, message, field=None, params=None):
        self.field_name = field or self.field
        super().__init__(
            {self.field_name: [ValidationError(message, code=self.code, params=params)]}
        )


# ---------- Voucher engine ----------
class UnbalancedVoucherError(BooksValidationError):
    """Raised when voucher debits and credits differ (or lines are malformed)."""
    field = "items"
    code = "unbalanced"


class LockedPeriodError(BooksValidationError):
    """Raised when the voucher date falls in a locked financial year."""
    field = "date"
    code = "locked_period"


class FinancialYearNotFoundError(LockedPeriodError):
    """Raised when no financial year of the business covers the date."""
    code = "no_financial_year"


class InvalidAccountError(BooksValidationError):
    """Raised for inactive, deleted or foreign-business ledger accounts."""
    field = "items"
    code = "invalid_account"


class DuplicateVoucherNumberError(BooksValidationError):
    field = "voucher_number"
    code = "duplicate_voucher_number"


class ReconciledEntryLockedError(BooksValidationError):
    """Raised when a voucher edit would touch reconciled journal entries."""
    field = "items"
    code = "reconciled_entry_locked"


class VoucherNumberingConflict(Exception):
    """
    Transient: two writers allocated the same voucher number and the
    retry collided again.  Safe to resubmit.
    """
    pass


# ---------- Reconciliation engine ----------
class AccountMismatchError(BooksValidationError):
    field = "journal_entry"
    code = "account_mismatch"


class AlreadyLinkedError(BooksValidationError):
    field = "journal_entry"
    code = "already_linked"


class NotLinkedError(BooksValidationError):
    field = "journal_entry"
    code = "not_linked"


class NotBalancedError(BooksValidationError):
    """Raised when completing a reconciliation whose difference is not zero."""
    field = "statement_balance"
    code = "not_balanced"


class NotCompletedError(BooksValidationError):
    code = "not_completed"


class ReconciliationCompletedError(BooksValidationError):
    """Raised when changing a reconciliation that is already completed."""
    code = "completed"


# ---------- Chart of accounts ----------
class TreeCycleError(BooksValidationError):
    field = "parent"
    code = "cycle"
