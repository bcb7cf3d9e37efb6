from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import SoftDeleteManager
from .business import Business
from .tree import TreeNodeMixin

# Choice Lists
NATURE_CHOICES = [
    ("assets", "Assets"),
    ("liabilities", "Liabilities"),
    ("income", "Income"),
    ("expense", "Expense"),
    ("equity", "Equity"),
]

# Natures whose balance grows on the debit side
DEBIT_NATURES = ("assets", "expense")

BALANCE_TYPES = [
    ("debit", "Debit"),
    ("credit", "Credit"),
]


class AccountGroup(TreeNodeMixin, models.Model):
    """
    Node of the chart of accounts tree (e.g. Assets > Current Assets > Bank Accounts).
    - nature is stored on every node and always equals the root's nature
    - affects_gross_profit marks direct income/expense groups for the P&L
    """

    business = models.ForeignKey(
        Business, on_delete=models.CASCADE, related_name="account_groups"
    )
    name = models.CharField(max_length=200)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,  # can't delete a group that still has children
        related_name="children",
    )
    # Blank on insert means "inherit from parent"
    nature = models.CharField(max_length=12, choices=NATURE_CHOICES, blank=True)
    affects_gross_profit = models.BooleanField(default=False)
    sequence = models.PositiveIntegerField(default=0)  # display order

    # Groups installed with the default chart
    is_system = models.BooleanField(default=False)
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    # Enforce tenant scoping
    objects = SoftDeleteManager()

    class Meta:
        indexes = [
            models.Index(fields=["business", "nature"]),
            models.Index(fields=["business", "parent"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["business", "parent", "name"],
                condition=models.Q(is_deleted=False),
                name="uq_business_group_name_per_parent",
            ),
        ]
        ordering = ("business", "sequence", "name")

    def __str__(self):
        return self.name

    def clean(self):
        self.clean_parent()
        if self.parent_id is not None:
            parent_nature = self.parent.nature
            if not self.nature:
                # children inherit nature from their parent
                self.nature = parent_nature
            elif self.nature != parent_nature:
                raise ValidationError(
                    {"nature": f"Group nature {self.nature} must match its parent's nature {parent_nature}."}
                )
        elif not self.nature:
            raise ValidationError({"nature": "Top-level groups need a nature."})

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


class LedgerAccount(models.Model):
    """
    Leaf of the chart of accounts; vouchers post to ledger accounts only.
    - code is optional but unique per business when given
    - nature comes from the account group
    - is_bank_account / is_cash_account accounts can be reconciled
    """

    business = models.ForeignKey(
        Business, on_delete=models.CASCADE, related_name="ledger_accounts"
    )
    account_group = models.ForeignKey(
        AccountGroup, on_delete=models.PROTECT, related_name="ledger_accounts"
    )
    code = models.CharField(max_length=32, null=True, blank=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    is_bank_account = models.BooleanField(default=False)
    is_cash_account = models.BooleanField(default=False)
    # Bank details (only meaningful for bank accounts)
    bank_name = models.CharField(max_length=200, blank=True)
    account_number = models.CharField(max_length=64, blank=True)

    # Balance brought forward before the first journal entry
    opening_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    opening_balance_type = models.CharField(
        max_length=6, choices=BALANCE_TYPES, default="debit")

    # Inactive accounts stay in reports but accept no new postings
    is_active = models.BooleanField(default=True)
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = SoftDeleteManager()

    class Meta:
        indexes = [
            models.Index(fields=["business", "account_group"]),
            models.Index(fields=["business", "is_bank_account"]),
        ]
        constraints = [
            # Codes repeat across businesses but must be unique within one
            models.UniqueConstraint(
                fields=["business", "code"],
                condition=models.Q(code__isnull=False),
                name="uq_business_ledger_code",
            ),
            models.CheckConstraint(
                condition=models.Q(opening_balance__gte=0),
                name="ledger_opening_balance_non_negative",
            ),
        ]
        ordering = ("business", "code", "name")

    def __str__(self):
        if self.code:
            return f"{self.code} - {self.name}"
        return self.name

    @property
    def nature(self):
        return self.account_group.nature

    @property
    def is_debit_nature(self):
        return self.nature in DEBIT_NATURES

    @property
    def is_reconcilable(self):
        return self.is_bank_account or self.is_cash_account

    @property
    def can_post(self):
        return self.is_active and not self.is_deleted

    def signed_opening_balance(self):
        """Opening balance as debit - credit."""
        if self.opening_balance_type == "credit":
            return -self.opening_balance
        return self.opening_balance

    def clean(self):
        if self.code == "":
            self.code = None  # blank codes don't take part in uniqueness
        if self.account_group_id and self.account_group.business_id != self.business_id:
            raise ValidationError(
                {"account_group": "Account group must belong to the same business."}
            )
        if self.account_group_id and self.account_group.is_deleted:
            raise ValidationError({"account_group": "Account group has been deleted."})

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
