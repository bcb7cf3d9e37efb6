from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import JournalEntryManager, TenantManager, VoucherManager
from .business import Business
from .chart import LedgerAccount
from .cost_center import CostCenter
from .financial_year import FinancialYear
from .party import Party

VOUCHER_NATURES = [
    ("receipt", "Receipt"),
    ("payment", "Payment"),
    ("contra", "Contra"),
    ("journal", "Journal"),
    ("sales", "Sales"),
    ("purchase", "Purchase"),
    ("debit_note", "Debit Note"),
    ("credit_note", "Credit Note"),
]


# ---------- Voucher type ----------
class VoucherType(models.Model):
    """Kind of voucher (Payment, Receipt, ...) and how its numbers are built."""

    business = models.ForeignKey(
        Business, on_delete=models.CASCADE, related_name="voucher_types")
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=10)  # Example: "PMT"
    nature = models.CharField(max_length=12, choices=VOUCHER_NATURES)

    # Numbering: prefix + zero padded counter (PMT0001)
    prefix = models.CharField(max_length=20, blank=True)
    auto_increment = models.BooleanField(default=True)
    starting_number = models.PositiveIntegerField(default=1)

    is_system = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["business", "code"], name="uq_business_voucher_type_code"
            ),
        ]
        ordering = ("business", "name")

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


# ---------- Numbering counter ----------
class VoucherSequence(models.Model):
    """
    One counter row per (business, voucher type, financial year).
    Allocation locks this row, so concurrent vouchers of the same
    type and year queue up here instead of racing for a number.
    """

    business = models.ForeignKey(Business, on_delete=models.CASCADE)
    voucher_type = models.ForeignKey(VoucherType, on_delete=models.CASCADE)
    financial_year = models.ForeignKey(FinancialYear, on_delete=models.CASCADE)
    next_value = models.PositiveIntegerField()

    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["business", "voucher_type", "financial_year"],
                name="uq_voucher_sequence_scope",
            ),
        ]

    def __str__(self):
        return f"{self.voucher_type.code}/{self.financial_year.name} next={self.next_value}"


# ---------- Voucher (header) ----------
class Voucher(models.Model):
    business = models.ForeignKey(
        Business, on_delete=models.CASCADE, related_name="vouchers")
    voucher_type = models.ForeignKey(
        VoucherType, on_delete=models.PROTECT, related_name="vouchers")
    financial_year = models.ForeignKey(
        FinancialYear, on_delete=models.PROTECT, related_name="vouchers")

    voucher_number = models.CharField(max_length=50)
    # Counter value behind an auto-generated number (None for manual numbers)
    sequence_number = models.PositiveIntegerField(null=True, blank=True)

    date = models.DateField()
    party = models.ForeignKey(
        Party, null=True, blank=True, on_delete=models.PROTECT, related_name="vouchers")
    narration = models.TextField(blank=True)
    reference = models.CharField(max_length=100, blank=True)

    # Sum of one side (debits == credits)
    total_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))

    # Unposted vouchers stay out of balances and reports
    is_posted = models.BooleanField(default=True)

    # Soft delete: row and journal entries stay, reports skip them
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL,
        related_name="vouchers_created",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL,
        related_name="vouchers_updated",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = VoucherManager()

    class Meta:
        indexes = [
            models.Index(fields=["business", "date"]),
            models.Index(fields=["business", "voucher_type", "financial_year"]),
        ]
        constraints = [
            # numbers restart every financial year
            models.UniqueConstraint(
                fields=["business", "voucher_type", "financial_year", "voucher_number"],
                condition=models.Q(is_deleted=False),
                name="uq_voucher_number_per_type_year",
            ),
        ]
        ordering = ("business", "date", "id")

    def __str__(self):
        return f"{self.voucher_number} {self.date}"

    def compute_totals(self):
        """Return (debits, credits) summed over the voucher's lines."""
        aggs = self.items.aggregate(
            total_debit=models.Sum("debit_amount"),
            total_credit=models.Sum("credit_amount"),
        )
        return (
            aggs["total_debit"] or Decimal("0.00"),
            aggs["total_credit"] or Decimal("0.00"),
        )

    def is_balanced(self):
        debit, credit = self.compute_totals()
        return debit == credit

    def clean(self):
        """Tenant consistency of the header"""
        for field in ("voucher_type", "financial_year", "party"):
            related = getattr(self, field)
            if related is not None and related.business_id != self.business_id:
                raise ValidationError({field: f"{field} must belong to the same business."})
        if self.financial_year_id and self.date and not self.financial_year.contains(self.date):
            raise ValidationError({"date": "Voucher date is outside its financial year."})

    def save(self, *args, **kwargs):
        # Number uniqueness is left to the database so a numbering
        # collision surfaces as IntegrityError and can be retried
        self.full_clean(validate_unique=False, validate_constraints=False)
        return super().save(*args, **kwargs)


class VoucherItem(models.Model):  # One debit or credit line of a voucher
    voucher = models.ForeignKey(
        Voucher, on_delete=models.CASCADE, related_name="items")
    ledger_account = models.ForeignKey(
        LedgerAccount, on_delete=models.PROTECT, related_name="voucher_items")
    cost_center = models.ForeignKey(
        CostCenter, null=True, blank=True, on_delete=models.PROTECT,
        related_name="voucher_items")

    debit_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    narration = models.TextField(blank=True)
    sequence = models.PositiveIntegerField(default=1)  # line order, 1-based

    # Follows the voucher's soft delete
    is_deleted = models.BooleanField(default=False)

    class Meta:
        ordering = ("voucher", "sequence")
        constraints = [
            models.CheckConstraint(
                condition=models.Q(debit_amount__gte=0) & models.Q(credit_amount__gte=0),
                name="voucher_item_non_negative_amounts",
            ),
            # exactly one side carries the amount
            models.CheckConstraint(
                condition=(
                    (models.Q(debit_amount__gt=0) & models.Q(credit_amount=0))
                    | (models.Q(debit_amount=0) & models.Q(credit_amount__gt=0))
                ),
                name="voucher_item_debit_xor_credit",
            ),
        ]

    def __str__(self):
        return f"{self.voucher_id} | {self.ledger_account} | D:{self.debit_amount} C:{self.credit_amount}"

    def clean(self):
        if self.debit_amount < 0 or self.credit_amount < 0:
            raise ValidationError("Debit and credit must be >= 0")
        if (self.debit_amount > 0) == (self.credit_amount > 0):
            raise ValidationError("A voucher line needs exactly one of debit or credit.")
        business_id = self.voucher.business_id
        if self.ledger_account.business_id != business_id:
            raise ValidationError(
                {"ledger_account": "Ledger account must belong to the voucher's business."})
        if self.cost_center_id and self.cost_center.business_id != business_id:
            raise ValidationError(
                {"cost_center": "Cost center must belong to the voucher's business."})

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


# ---------- Journal feed ----------
class JournalEntry(models.Model):
    """
    Mirror of one voucher line, denormalized for per-account / per-date queries.
    Rows are only ever created and removed together with their voucher line.
    """

    business = models.ForeignKey(
        Business, on_delete=models.CASCADE, related_name="journal_entries")
    financial_year = models.ForeignKey(
        FinancialYear, on_delete=models.PROTECT, related_name="journal_entries")
    voucher = models.ForeignKey(
        Voucher, on_delete=models.CASCADE, related_name="journal_entries")
    voucher_item = models.OneToOneField(
        VoucherItem, on_delete=models.CASCADE, related_name="journal_entry")
    ledger_account = models.ForeignKey(
        LedgerAccount, on_delete=models.PROTECT, related_name="journal_entries")
    date = models.DateField()
    debit_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    narration = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = JournalEntryManager()

    class Meta:
        verbose_name_plural = "journal entries"
        indexes = [
            models.Index(fields=["business", "ledger_account", "date"]),
            models.Index(fields=["business", "date"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(debit_amount__gte=0) & models.Q(credit_amount__gte=0),
                name="journal_entry_non_negative_amounts",
            ),
        ]
        ordering = ("date", "id")

    def __str__(self):
        return f"{self.date} {self.ledger_account} D:{self.debit_amount} C:{self.credit_amount}"

    @property
    def net_amount(self):
        """debit - credit"""
        return self.debit_amount - self.credit_amount

    @classmethod
    def mirror(cls, item):
        """Unsaved journal row copying a saved voucher line."""
        voucher = item.voucher
        return cls(
            business_id=voucher.business_id,
            financial_year_id=voucher.financial_year_id,
            voucher=voucher,
            voucher_item=item,
            ledger_account_id=item.ledger_account_id,
            date=voucher.date,
            debit_amount=item.debit_amount,
            credit_amount=item.credit_amount,
            narration=item.narration or voucher.narration,
        )
