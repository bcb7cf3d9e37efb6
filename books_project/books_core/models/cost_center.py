from django.db import models
from ..managers import TenantManager
from .business import Business
from .tree import TreeNodeMixin


# ---------- Cost center ----------
# Optional tag on voucher lines for departmental / project reporting.
# It never takes part in the balancing rule.
class CostCenter(TreeNodeMixin, models.Model):
    business = models.ForeignKey(
        Business, on_delete=models.CASCADE, related_name="cost_centers")
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=32, null=True, blank=True)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="children",
    )
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["business", "code"],
                condition=models.Q(code__isnull=False),
                name="uq_business_cost_center_code",
            ),
        ]
        ordering = ("business", "name")

    def __str__(self):
        return self.name

    def clean(self):
        if self.code == "":
            self.code = None
        self.clean_parent()

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
