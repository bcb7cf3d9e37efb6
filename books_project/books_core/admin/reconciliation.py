from django.contrib import admin

from books_core.models import AccountReconciliation

from .actions import complete_reconciliations, reopen_reconciliations
from .inlines import ReconciliationItemInline
from .mixins import TenantAdminMixin


@admin.register(AccountReconciliation)
class AccountReconciliationAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "ledger_account", "statement_date", "statement_balance",
                    "reconciled_balance", "difference", "status",
                    "completed_with_override")
    list_filter = ("business", "status", "completed_with_override")
    search_fields = ("ledger_account__name", "notes")
    readonly_fields = ("account_balance", "reconciled_balance", "status",
                       "completed_at", "completed_by", "completed_with_override",
                       "created_by")
    inlines = [ReconciliationItemInline]
    actions = [complete_reconciliations, reopen_reconciliations]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("ledger_account")

    """ Completed reconciliations are frozen until reopened """
    def get_readonly_fields(self, request, obj=None):
        if obj and obj.is_completed:
            return [f.name for f in self.model._meta.fields]
        return self.readonly_fields

    def has_delete_permission(self, request, obj=None):
        if obj and obj.is_completed:
            return False
        return super().has_delete_permission(request, obj)
