from django.utils.deprecation import MiddlewareMixin
from .models import Business

# Session key holding the business a user switched to
ACTIVE_BUSINESS_SESSION_KEY = "active_business_id"


class CurrentBusinessMiddleware(MiddlewareMixin):
    # Attach the business the request works in as request.business
    def process_request(self, request):
        request.business = None
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return

        business_id = request.session.get(ACTIVE_BUSINESS_SESSION_KEY)
        if not business_id:
            business_id = user.default_business_id
        if not business_id:
            return

        # the user must still be an active member, even of their default
        # business; a tampered session id resolves to nothing
        request.business = Business.objects.filter(
            pk=business_id,
            memberships__user=user,
            memberships__is_active=True,
        ).first()
