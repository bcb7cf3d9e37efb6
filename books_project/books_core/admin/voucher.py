from django.contrib import admin
from django.utils.html import format_html

from books_core.models import JournalEntry, Voucher, VoucherSequence, VoucherType

from .actions import delete_vouchers, post_vouchers, unpost_vouchers
from .inlines import VoucherItemInline
from .mixins import TenantAdminMixin
from .ReadOnly import ReadOnlyAdmin


@admin.register(VoucherType)
class VoucherTypeAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "code", "name", "nature", "prefix", "auto_increment",
                    "starting_number", "is_system", "is_active")
    list_filter = ("business", "nature", "is_active")
    search_fields = ("code", "name")
    readonly_fields = ("is_system",)


@admin.register(VoucherSequence)
class VoucherSequenceAdmin(TenantAdminMixin, ReadOnlyAdmin):
    list_display = ("id", "business", "voucher_type", "financial_year", "next_value")


# Register `Voucher` model
@admin.register(Voucher)
class VoucherAdmin(TenantAdminMixin, admin.ModelAdmin):
    """
    Vouchers are entered through the services (balance check, numbering,
    journal mirror); the admin only browses them and runs the actions.
    """

    list_display = (
        "id",
        "voucher_number",
        "voucher_type",
        "date",
        "party",
        "total_amount",
        "is_posted",
        "is_deleted",
        "balanced",
    )
    list_filter = ("business", "voucher_type", "financial_year", "is_posted", "is_deleted")
    search_fields = ("voucher_number", "narration", "reference")
    inlines = [VoucherItemInline]
    actions = [post_vouchers, unpost_vouchers, delete_vouchers]
    date_hierarchy = "date"

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("business", "voucher_type", "financial_year", "party")

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    # hard deletes would bypass the soft delete and the reconciliation lock
    def has_delete_permission(self, request, obj=None):
        return False

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop("delete_selected", None)
        return actions

    """ Computed column for balance check """
    def balanced(self, obj):
        d, c = obj.compute_totals()
        return format_html("<b>{}</b> / <small>{}</small>", d, c)

    balanced.short_description = "Debits / Credits"


@admin.register(JournalEntry)
class JournalEntryAdmin(TenantAdminMixin, ReadOnlyAdmin):
    list_display = ("id", "date", "voucher", "ledger_account", "debit_amount",
                    "credit_amount", "is_reconciled")
    search_fields = ("narration", "voucher__voucher_number")
    date_hierarchy = "date"

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("voucher", "ledger_account", "reconciliation_item")

    @admin.display(boolean=True, description="Reconciled")
    def is_reconciled(self, obj):
        return hasattr(obj, "reconciliation_item")
