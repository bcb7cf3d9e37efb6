from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .business import Business
from .chart import LedgerAccount
from .cost_center import CostCenter
from .financial_year import FinancialYear


# ---------- Budget ----------
class Budget(models.Model):
    business = models.ForeignKey(
        Business, on_delete=models.CASCADE, related_name="budgets")
    financial_year = models.ForeignKey(
        FinancialYear, on_delete=models.CASCADE, related_name="budgets")
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["business", "financial_year", "name"],
                name="uq_budget_name_per_year",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.financial_year.name})"

    def clean(self):
        if self.financial_year.business_id != self.business_id:
            raise ValidationError(
                {"financial_year": "Financial year must belong to the same business."})

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


class BudgetItem(models.Model):
    budget = models.ForeignKey(
        Budget, on_delete=models.CASCADE, related_name="items")
    ledger_account = models.ForeignKey(
        LedgerAccount, on_delete=models.PROTECT, related_name="budget_items")
    # Narrows the budget line to one cost center when set
    cost_center = models.ForeignKey(
        CostCenter, null=True, blank=True, on_delete=models.PROTECT,
        related_name="budget_items")
    amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    notes = models.TextField(blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["budget", "ledger_account", "cost_center"],
                name="uq_budget_item_account_cost_center",
            ),
        ]

    def __str__(self):
        return f"{self.budget.name}: {self.ledger_account} {self.amount}"

    def clean(self):
        business_id = self.budget.business_id
        if self.ledger_account.business_id != business_id:
            raise ValidationError(
                {"ledger_account": "Ledger account must belong to the budget's business."})
        if self.ledger_account.nature not in ("income", "expense"):
            raise ValidationError(
                {"ledger_account": "Budgets cover income and expense accounts only."})
        if self.cost_center_id and self.cost_center.business_id != business_id:
            raise ValidationError(
                {"cost_center": "Cost center must belong to the budget's business."})

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
