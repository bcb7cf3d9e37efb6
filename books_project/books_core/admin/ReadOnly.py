from django.contrib import admin


class ReadOnlyAdmin(admin.ModelAdmin):
    """
    View-only admin for rows the services write: the journal mirror of
    voucher lines, voucher number counters and the audit trail. Changing
    them through the admin would bypass balancing, locking and audit.
    """
    list_per_page = 50
    # filters offered when the model has the field
    filter_candidates = ("financial_year", "ledger_account", "voucher_type", "action", "object_type")

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def has_view_permission(self, request, obj=None):
        return request.user.is_active and request.user.is_staff

    def get_actions(self, request):
        return {}

    def get_list_filter(self, request):
        names = {f.name for f in self.model._meta.get_fields()}
        filters = [name for name in self.filter_candidates if name in names]
        if request.user.is_superuser and "business" in names:
            filters.insert(0, "business")
        return tuple(filters)

