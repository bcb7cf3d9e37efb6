import json

from django.contrib import admin
from django.utils.html import format_html

from books_core.models import AuditLog

from .mixins import TenantAdminMixin
from .ReadOnly import ReadOnlyAdmin


@admin.register(AuditLog)
class AuditLogAdmin(TenantAdminMixin, ReadOnlyAdmin):
    list_display = ("created_at", "user", "action", "object_type", "object_id", "business")
    list_select_related = ("business", "user")
    search_fields = ("object_id", "user__username")
    ordering = ("-created_at",)
    fields = ("created_at", "business", "user", "action", "object_type", "object_id", "changes_pretty")
    readonly_fields = fields

    @admin.display(description="Changes")
    def changes_pretty(self, obj):
        if not obj.changes:
            return "-"
        return format_html("<pre>{}</pre>", json.dumps(obj.changes, indent=2, sort_keys=True, default=str))
