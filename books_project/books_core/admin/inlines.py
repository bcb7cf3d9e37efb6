from django.contrib import admin

from books_core.models import BudgetItem, ReconciliationItem, VoucherItem

from .mixins import TenantAdminMixin


class VoucherItemInline(TenantAdminMixin, admin.TabularInline):
    """Read-only voucher lines on the Voucher page; lines change via services only"""

    model = VoucherItem
    business_lookup = "voucher__business"
    extra = 0
    fields = ("sequence", "ledger_account", "cost_center", "debit_amount",
              "credit_amount", "narration")
    readonly_fields = fields
    ordering = ("sequence",)
    can_delete = False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("ledger_account", "cost_center")

    def has_add_permission(self, request, obj=None):
        return False


class ReconciliationItemInline(TenantAdminMixin, admin.TabularInline):
    """Matched journal entries of a reconciliation"""

    model = ReconciliationItem
    business_lookup = "reconciliation__business"
    extra = 0
    fields = ("journal_entry", "created_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class BudgetItemInline(TenantAdminMixin, admin.TabularInline):
    model = BudgetItem
    business_lookup = "budget__business"
    extra = 0
    fields = ("ledger_account", "cost_center", "amount", "notes")
