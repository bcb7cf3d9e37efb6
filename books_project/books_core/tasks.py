import logging
from celery import shared_task
from django.utils import timezone
from django.utils.dateparse import parse_date

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def generate_recurring_vouchers(on_date=None):
    """
    Post every recurring voucher due up to ``on_date`` (ISO date, default
    today) for all businesses. Returns the number of vouchers created.
    """
    # import lazily to avoid circular imports at module import time
    from .models import Business
    from .services.recurring import generate_due

    day = parse_date(on_date) if on_date else timezone.localdate()
    created = 0
    for business in Business.objects.filter(recurring_transactions__is_active=True).distinct():
        vouchers, failures = generate_due(business, day)
        created += len(vouchers)
        if failures:
            logger.warning("Business %s: %d recurring transaction(s) failed on %s",
                           business.pk, len(failures), day)
    logger.info("Generated %d recurring voucher(s) for %s", created, day)
    return created
