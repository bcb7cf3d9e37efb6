from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils.translation import gettext_lazy as _
from books_core.models import Business, BusinessMembership, User
from .forms import UserAdminChangeForm, UserAdminCreationForm
from .mixins import TenantAdminMixin


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug", "currency_code", "owner", "created_at")
    search_fields = ("name", "slug")
    ordering = ("name",)

    def get_queryset(self, request):
        qs = super().get_queryset(request).select_related("owner")
        if request.user.is_superuser:
            return qs
        return qs.filter(memberships__user=request.user).distinct()


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    add_form = UserAdminCreationForm
    form = UserAdminChangeForm
    model = User

    list_display = (
        "username", "email", "get_full_name", "is_staff", "default_business")
    list_filter = ("is_staff", "is_superuser", "is_active")
    search_fields = ("username", "email", "first_name", "last_name")
    ordering = ("username",)

    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (_("Personal info"), {"fields": ("first_name", "last_name", "email")}),
        (_("Business / Defaults"), {"fields": ("default_business",)}),
        (
            _("Permissions"),
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                ),
            },
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "username",
                    "email",
                    "default_business",
                    "password1",
                    "password2",
                ),
            },
        ),
    )

    # Non-superusers only see users sharing one of their businesses
    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        allowed_business_ids = request.user.memberships.values_list(
            "business_id", flat=True
        )
        return qs.filter(
            memberships__business_id__in=allowed_business_ids).distinct()


@admin.register(BusinessMembership)
class BusinessMembershipAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("user", "business", "role", "is_active", "created_at")
    list_filter = ("role", "is_active", "business")
    search_fields = ("user__username", "user__email", "business__name")
    readonly_fields = ("created_at",)
    ordering = ("business__name", "user__username")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("business", "user")

    # Only owners and admins of a business manage its memberships
    def has_change_permission(self, request, obj=None):
        if request.user.is_superuser:
            return True
        if obj is None:
            return super().has_change_permission(request, obj)
        return request.user.memberships.filter(
            business_id=obj.business_id, role__in=("owner", "admin"), is_active=True
        ).exists()

    def has_delete_permission(self, request, obj=None):
        return self.has_change_permission(request, obj)
