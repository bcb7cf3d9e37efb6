from django.contrib import admin

from books_core.models import AccountGroup, CostCenter, LedgerAccount, Party

from .mixins import TenantAdminMixin


@admin.register(AccountGroup)
class AccountGroupAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "name", "parent", "nature", "affects_gross_profit",
                    "sequence", "is_system", "is_deleted")
    list_filter = ("business", "nature", "is_system", "is_deleted")
    search_fields = ("name",)
    readonly_fields = ("is_system", "deleted_at")
    ordering = ("business", "sequence", "name")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("business", "parent")

    # system groups are part of the default chart
    def has_delete_permission(self, request, obj=None):
        if obj and obj.is_system:
            return False
        return super().has_delete_permission(request, obj)


@admin.register(LedgerAccount)
class LedgerAccountAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "code", "name", "account_group", "opening_balance",
                    "opening_balance_type", "is_bank_account", "is_cash_account",
                    "is_active")
    list_filter = ("business", "is_bank_account", "is_cash_account", "is_active", "is_deleted")
    search_fields = ("code", "name", "bank_name", "account_number")
    readonly_fields = ("deleted_at", "created_at")
    ordering = ("business", "code", "name")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("business", "account_group")

    # accounts with journal history are deactivated, never deleted
    def has_delete_permission(self, request, obj=None):
        if obj and obj.journal_entries.exists():
            return False
        return super().has_delete_permission(request, obj)


@admin.register(CostCenter)
class CostCenterAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "code", "name", "parent", "is_active")
    list_filter = ("business", "is_active")
    search_fields = ("code", "name")


@admin.register(Party)
class PartyAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "name", "party_type", "ledger_account", "credit_limit",
                    "credit_period", "is_active")
    list_filter = ("business", "party_type", "is_active")
    search_fields = ("name", "email", "phone", "tax_number")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("business", "ledger_account")
