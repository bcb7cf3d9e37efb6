from django.apps import apps
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .business import Business

# Closed set of things the audit trail can point at.
# object_type + object_id resolve through this table, never through
# free-form class names.
AUDITED_MODELS = {
    "voucher": "Voucher",
    "reconciliation": "AccountReconciliation",
    "financial_year": "FinancialYear",
    "ledger_account": "LedgerAccount",
    "account_group": "AccountGroup",
    "party": "Party",
    "recurring_transaction": "RecurringTransaction",
}

OBJECT_TYPES = [(key, model) for key, model in AUDITED_MODELS.items()]


# ---------- Audit / Event log ----------
class AuditLog(models.Model):  # accountability and traceability across the books
    business = models.ForeignKey(
        Business,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    # Nullable for automated actions (celery tasks, management commands)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    # create, update, delete, complete, complete_override, reopen, lock, ...
    action = models.CharField(max_length=50)
    object_type = models.CharField(max_length=30, choices=OBJECT_TYPES)
    object_id = models.CharField(max_length=100)
    # before/after details of what changed, in JSON format
    changes = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["business", "user"]),
            models.Index(fields=["business", "created_at"]),
            models.Index(fields=["object_type", "object_id"]),
        ]

    def __str__(self):
        return (f"[{self.created_at:%Y-%m-%d %H:%M}] {self.user} "
                f"{self.action} {self.object_type}({self.object_id})")

    @staticmethod
    def object_type_for(instance):
        """Tag for a model instance; raises for models outside the audit set."""
        name = instance.__class__.__name__
        for key, model_name in AUDITED_MODELS.items():
            if model_name == name:
                return key
        raise ValueError(f"{name} is not an audited model")

    def resolve(self):
        """The audited object, or None if it no longer exists."""
        model = apps.get_model("books_core", AUDITED_MODELS[self.object_type])
        return model._base_manager.filter(pk=self.object_id).first()

    def clean(self):
        # the acting user must be a member of the business being logged
        if self.user and self.business:
            if not self.user.memberships.filter(
                business=self.business, is_active=True
            ).exists():
                raise ValidationError(
                    "AuditLog.user must be a member of AuditLog.business"
                )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
