from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .business import Business
from .chart import LedgerAccount

PARTY_TYPES = [
    ("customer", "Customer"),
    ("supplier", "Supplier"),
    ("both", "Customer & Supplier"),
]

# Which ledger natures may back each party type
ALLOWED_NATURES = {
    "customer": ("assets",),
    "supplier": ("liabilities",),
    "both": ("assets", "liabilities"),
}


# ---------- Party (customer / supplier) ----------
class Party(models.Model):
    business = models.ForeignKey(
        Business, on_delete=models.CASCADE, related_name="parties")

    # Receivable / payable ledger that carries this party's balance
    ledger_account = models.OneToOneField(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="party",
    )
    name = models.CharField(max_length=200)
    party_type = models.CharField(max_length=10, choices=PARTY_TYPES)

    # Contact info
    contact_person = models.CharField(max_length=200, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.TextField(blank=True)
    tax_number = models.CharField(max_length=50, blank=True)

    # Credit terms
    credit_limit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit_period = models.PositiveIntegerField(default=0)  # days

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        verbose_name_plural = "parties"
        indexes = [
            models.Index(fields=["business", "party_type"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["business", "name"], name="uq_business_party_name"
            ),
            models.CheckConstraint(
                condition=models.Q(credit_limit__gte=0),
                name="party_credit_limit_non_negative",
            ),
        ]
        ordering = ("business", "name")

    def __str__(self):
        return self.name

    def clean(self):
        if not self.ledger_account_id:
            return
        account = self.ledger_account
        if account.business_id != self.business_id:
            raise ValidationError(
                {"ledger_account": "Ledger account must belong to the same business."}
            )
        allowed = ALLOWED_NATURES.get(self.party_type, ())
        if account.nature not in allowed:
            raise ValidationError(
                {"ledger_account": f"A {self.party_type} needs a ledger account of nature "
                                   f"{' or '.join(allowed)}, not {account.nature}."}
            )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
