from django.contrib import admin

from books_core.models import Budget, FinancialYear, RecurringTransaction

from .actions import lock_financial_years, unlock_financial_years
from .inlines import BudgetItemInline
from .mixins import TenantAdminMixin


# Register `FinancialYear` model
@admin.register(FinancialYear)
class FinancialYearAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "business", "name", "start_date", "end_date",
                    "is_current", "is_locked")
    list_filter = ("business", "is_current", "is_locked")
    search_fields = ("name",)
    # locking goes through the actions so it is audited
    readonly_fields = ("is_locked",)
    actions = [lock_financial_years, unlock_financial_years]


@admin.register(Budget)
class BudgetAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "name", "financial_year", "is_active")
    list_filter = ("business", "financial_year", "is_active")
    inlines = [BudgetItemInline]


@admin.register(RecurringTransaction)
class RecurringTransactionAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "name", "voucher_type", "frequency", "start_date",
                    "end_date", "occurrences_generated", "last_generated_date",
                    "is_active")
    list_filter = ("business", "frequency", "is_active")
    search_fields = ("name", "narration")
    readonly_fields = ("occurrences_generated", "last_generated_date")
