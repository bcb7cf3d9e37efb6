from django.urls import path

from . import views

app_name = "books_core"

urlpatterns = [
    path("vouchers/", views.voucher_create_view, name="voucher-create"),
    path("vouchers/<int:voucher_id>/", views.voucher_detail_view, name="voucher-detail"),
    path("vouchers/<int:voucher_id>/update/", views.voucher_update_view, name="voucher-update"),
    path("vouchers/<int:voucher_id>/delete/", views.voucher_delete_view, name="voucher-delete"),
    path("reconciliations/<int:reconciliation_id>/items/add/",
         views.reconciliation_add_item_view, name="reconciliation-add-item"),
    path("reconciliations/<int:reconciliation_id>/items/remove/",
         views.reconciliation_remove_item_view, name="reconciliation-remove-item"),
    path("reconciliations/<int:reconciliation_id>/complete/",
         views.reconciliation_complete_view, name="reconciliation-complete"),
    path("reconciliations/<int:reconciliation_id>/reopen/",
         views.reconciliation_reopen_view, name="reconciliation-reopen"),
    path("reports/trial-balance/", views.trial_balance_view, name="trial-balance"),
    path("reports/ledger/<int:account_id>/", views.general_ledger_view, name="general-ledger"),
]
