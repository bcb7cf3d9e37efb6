import datetime
from decimal import Decimal
from dateutil.relativedelta import relativedelta
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .business import Business
from .voucher import VoucherType

FREQUENCY_CHOICES = [
    ("daily", "Daily"),
    ("weekly", "Weekly"),
    ("monthly", "Monthly"),
    ("quarterly", "Quarterly"),
    ("yearly", "Yearly"),
]


# ---------- Recurring voucher template ----------
class RecurringTransaction(models.Model):
    """
    Template that posts the same voucher on a schedule (rent, salaries...).

    template holds the voucher lines as a list of dicts:
        [{"ledger_account_id": 3, "debit_amount": "1500.00"},
         {"ledger_account_id": 7, "credit_amount": "1500.00"}]
    """

    business = models.ForeignKey(
        Business, on_delete=models.CASCADE, related_name="recurring_transactions")
    voucher_type = models.ForeignKey(
        VoucherType, on_delete=models.PROTECT, related_name="recurring_transactions")
    name = models.CharField(max_length=200)
    narration = models.TextField(blank=True)
    amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))

    frequency = models.CharField(max_length=10, choices=FREQUENCY_CHOICES)
    day_of_month = models.PositiveSmallIntegerField(null=True, blank=True)  # 1-31
    day_of_week = models.PositiveSmallIntegerField(null=True, blank=True)   # 0=Monday
    month = models.PositiveSmallIntegerField(null=True, blank=True)         # 1-12, yearly only

    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    # Stop after this many vouchers (None = no limit)
    occurrences = models.PositiveIntegerField(null=True, blank=True)
    occurrences_generated = models.PositiveIntegerField(default=0)
    last_generated_date = models.DateField(null=True, blank=True)

    template = models.JSONField(default=list)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["business", "is_active"]),
        ]

    def __str__(self):
        return f"{self.name} ({self.frequency})"

    def clean(self):
        if self.voucher_type.business_id != self.business_id:
            raise ValidationError(
                {"voucher_type": "Voucher type must belong to the same business."})
        if self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "end_date must not be before start_date"})
        if self.day_of_month is not None and not 1 <= self.day_of_month <= 31:
            raise ValidationError({"day_of_month": "day_of_month must be between 1 and 31"})
        if self.day_of_week is not None and self.day_of_week > 6:
            raise ValidationError({"day_of_week": "day_of_week must be between 0 and 6"})
        if self.month is not None and not 1 <= self.month <= 12:
            raise ValidationError({"month": "month must be between 1 and 12"})
        if not isinstance(self.template, list) or len(self.template) < 2:
            raise ValidationError({"template": "A template needs at least two lines."})

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

    def _step(self, last):
        if self.frequency == "daily":
            return last + datetime.timedelta(days=1)
        if self.frequency == "weekly":
            nxt = last + datetime.timedelta(weeks=1)
            if self.day_of_week is not None:
                # same week, pinned weekday
                nxt = nxt - datetime.timedelta(days=nxt.weekday() - self.day_of_week)
            return nxt
        months = {"monthly": 1, "quarterly": 3, "yearly": 12}[self.frequency]
        delta = relativedelta(months=months)
        if self.frequency == "yearly" and self.month is not None:
            delta += relativedelta(month=self.month)
        if self.day_of_month is not None:
            # relativedelta clamps to the last day of short months
            delta += relativedelta(day=self.day_of_month)
        return last + delta

    def next_due_date(self):
        """Date of the next voucher, or None once the schedule is exhausted."""
        if not self.is_active:
            return None
        if self.occurrences is not None and self.occurrences_generated >= self.occurrences:
            return None
        if self.last_generated_date is None:
            nxt = self.start_date
        else:
            nxt = self._step(self.last_generated_date)
        if self.end_date and nxt > self.end_date:
            return None
        return nxt

    def is_due(self, on_date):
        nxt = self.next_due_date()
        return nxt is not None and nxt <= on_date
