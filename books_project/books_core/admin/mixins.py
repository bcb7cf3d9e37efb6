class TenantAdminMixin:
    """
    Enforce tenant isolation in Django admin.
    Uses request.business (set by CurrentBusinessMiddleware)
    or falls back to request.user.default_business.
    """

    # Lookup from the model to its business; inlines of child rows
    # without their own business column override this
    business_lookup = "business"

    def _get_request_business(self, request):
        business = getattr(request, "business", None)
        if business is None:
            user = getattr(request, "user", None)
            business = getattr(user, "default_business", None)
        return business

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        # Superusers see everything
        if request.user.is_superuser:
            return qs
        business = self._get_request_business(request)
        if business is None:
            return qs.none()
        return qs.filter(**{self.business_lookup: business})

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        """
        Restrict foreign key dropdowns to the current business:
        the business field itself, and any business-scoped related model
        (ledger account, cost center, party, voucher type ...).
        """
        if not request.user.is_superuser:
            business = self._get_request_business(request)
            rel_model = db_field.related_model
            if db_field.name == "business":
                kwargs["queryset"] = (
                    rel_model.objects.filter(pk=business.pk)
                    if business is not None else rel_model.objects.none()
                )
            elif any(f.name == "business" for f in rel_model._meta.fields):
                kwargs["queryset"] = (
                    rel_model._default_manager.filter(business=business)
                    if business is not None else rel_model._default_manager.none()
                )
        return super().formfield_for_foreignkey(db_field, request, **kwargs)

    def save_model(self, request, obj, form, change):
        # Rows are always owned by the current business (unless superuser)
        if not request.user.is_superuser and hasattr(obj, "business_id"):
            business = self._get_request_business(request)
            if business is not None:
                obj.business = business
        super().save_model(request, obj, form, change)
