from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _
from books_core.services import reconciliation as reconciliation_service
from books_core.services.financial_years import (lock_financial_year,
                                                 unlock_financial_year)
from books_core.services.vouchers import (delete_voucher, post_voucher,
                                          unpost_voucher)

# ---------- Admin actions ----------


def _apply(modeladmin, request, queryset, func, done_message):
    """
    Run a service on every selected row. Each call is its own transaction,
    so one failure doesn't stop the rest of the batch.
    """
    success = failures = 0
    for obj in queryset:
        try:
            func(obj, user=request.user)
            success += 1
        except ValidationError as exc:
            failures += 1
            modeladmin.message_user(
                request, f"{obj}: {'; '.join(exc.messages)}", level=messages.ERROR)
    modeladmin.message_user(
        request,
        _("%(message)s: %(success)d done, %(failures)d failed.") % {
            "message": done_message, "success": success, "failures": failures,
        },
        level=messages.SUCCESS if failures == 0 else messages.WARNING,
    )


""" Reconciliation state changes go through the service (tolerance check) """


@admin.action(description="Complete selected reconciliations")
def complete_reconciliations(modeladmin, request, queryset):
    _apply(modeladmin, request, queryset, reconciliation_service.complete,
           "Completed reconciliations")


@admin.action(description="Reopen selected reconciliations")
def reopen_reconciliations(modeladmin, request, queryset):
    _apply(modeladmin, request, queryset, reconciliation_service.reopen,
           "Reopened reconciliations")


@admin.action(description="Lock selected financial years")
def lock_financial_years(modeladmin, request, queryset):
    _apply(modeladmin, request, queryset, lock_financial_year, "Locked financial years")


@admin.action(description="Unlock selected financial years")
def unlock_financial_years(modeladmin, request, queryset):
    _apply(modeladmin, request, queryset, unlock_financial_year, "Unlocked financial years")


@admin.action(description="Post selected vouchers")
def post_vouchers(modeladmin, request, queryset):
    _apply(modeladmin, request, queryset, post_voucher, "Posted vouchers")


@admin.action(description="Unpost selected vouchers")
def unpost_vouchers(modeladmin, request, queryset):
    _apply(modeladmin, request, queryset, unpost_voucher, "Unposted vouchers")


# soft delete instead of the stock delete_selected
@admin.action(description="Delete selected vouchers")
def delete_vouchers(modeladmin, request, queryset):
    _apply(modeladmin, request, queryset, delete_voucher, "Deleted vouchers")
