from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .business import Business
from .chart import LedgerAccount
from .voucher import JournalEntry

RECONCILIATION_STATUS = [
    ("open", "Open"),
    ("completed", "Completed"),
]


# ---------- Bank / cash reconciliation ----------
class AccountReconciliation(models.Model):
    """
    Matches journal entries of one bank or cash ledger account against a
    bank statement balance.

    reconciled_balance is a cache of sum(debit - credit) over the linked
    entries; it is rewritten from that sum whenever the links change.
    """

    business = models.ForeignKey(
        Business, on_delete=models.CASCADE, related_name="reconciliations")
    ledger_account = models.ForeignKey(
        LedgerAccount, on_delete=models.PROTECT, related_name="reconciliations")
    statement_date = models.DateField()
    statement_balance = models.DecimalField(max_digits=18, decimal_places=2)

    # Book balance of the account on statement_date, captured at creation
    account_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    reconciled_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    notes = models.TextField(blank=True)

    status = models.CharField(
        max_length=10, choices=RECONCILIATION_STATUS, default="open")
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL,
        related_name="+",
    )
    # Completed although the difference was not zero
    completed_with_override = models.BooleanField(default=False)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["business", "ledger_account", "status"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["ledger_account", "statement_date"],
                name="uq_reconciliation_account_statement_date",
            ),
        ]
        ordering = ("ledger_account", "-statement_date")

    def __str__(self):
        return f"{self.ledger_account} @ {self.statement_date} [{self.status}]"

    @property
    def is_completed(self):
        return self.status == "completed"

    @property
    def difference(self):
        return self.statement_balance - self.reconciled_balance

    def linked_total(self):
        """sum(debit - credit) of the linked journal entries, straight from the DB."""
        agg = self.items.aggregate(
            debit=models.Sum("journal_entry__debit_amount"),
            credit=models.Sum("journal_entry__credit_amount"),
        )
        return (agg["debit"] or Decimal("0.00")) - (agg["credit"] or Decimal("0.00"))

    def clean(self):
        account = self.ledger_account
        if account.business_id != self.business_id:
            raise ValidationError(
                {"ledger_account": "Ledger account must belong to the same business."})
        if not account.is_reconcilable:
            raise ValidationError(
                {"ledger_account": "Only bank or cash accounts can be reconciled."})

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

    # Control status changes
    def transition_to(self, new_status):
        allowed = {
            "open": ["completed"],
            "completed": ["open"],
        }
        if new_status not in allowed.get(self.status, []):
            raise ValidationError(f"Cannot go from {self.status} to {new_status}")
        self.status = new_status


class ReconciliationItem(models.Model):
    reconciliation = models.ForeignKey(
        AccountReconciliation, on_delete=models.CASCADE, related_name="items")
    # An entry is matched at most once, across all reconciliations
    journal_entry = models.OneToOneField(
        JournalEntry, on_delete=models.PROTECT, related_name="reconciliation_item")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("reconciliation", "id")

    def __str__(self):
        return f"{self.reconciliation_id} <- JE {self.journal_entry_id}"

    def clean(self):
        if self.journal_entry.ledger_account_id != self.reconciliation.ledger_account_id:
            raise ValidationError(
                {"journal_entry": "Journal entry is not on the reconciled account."})
