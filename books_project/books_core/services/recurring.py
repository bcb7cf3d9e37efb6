import logging
from django.core.exceptions import ValidationError
from django.db import models, transaction
from ..exceptions import VoucherNumberingConflict
from ..models import RecurringTransaction
from .vouchers import create_voucher

logger = logging.getLogger(__name__)


def due_transactions(business, on_date):
    """Active templates whose schedule can still produce a voucher by ``on_date``."""
    return (
        RecurringTransaction.objects.active(business)
        .filter(start_date__lte=on_date)
        # a template past its end date may still owe periods before it
        .filter(
            models.Q(end_date__isnull=True)
            | models.Q(last_generated_date__isnull=True)
            | models.Q(last_generated_date__lt=models.F("end_date"))
        )
        .filter(
            models.Q(occurrences__isnull=True)
            | models.Q(occurrences_generated__lt=models.F("occurrences"))
        )
        .select_related("voucher_type", "business")
    )


def generate_voucher(recurring, on_date, user=None):
    """
    Post the next voucher of ``recurring`` if it is due on ``on_date``.
    The voucher is dated on its due date, not on ``on_date``.
    Returns the voucher, or None when nothing was due.
    """
    with transaction.atomic():
        recurring = RecurringTransaction.objects.select_for_update().get(pk=recurring.pk)
        due_date = recurring.next_due_date()
        if due_date is None or due_date > on_date:
            return None
        voucher = create_voucher(
            recurring.business,
            recurring.voucher_type,
            due_date,
            recurring.template,
            narration=recurring.narration or recurring.name,
            user=user,
        )
        recurring.last_generated_date = due_date
        recurring.occurrences_generated += 1
        recurring.save(update_fields=["last_generated_date", "occurrences_generated"])
    logger.info("Recurring transaction %s generated voucher %s",
                recurring.pk, voucher.voucher_number)
    return voucher


def generate_due(business, on_date, user=None):
    """
    Catch up every due template of ``business`` (one voucher per missed
    period). A template that fails validation, or loses a numbering race,
    is skipped and reported; the others still run.
    Returns (vouchers, failures) where failures is [(recurring, error)].
    """
    vouchers, failures = [], []
    for recurring in due_transactions(business, on_date):
        while True:
            try:
                voucher = generate_voucher(recurring, on_date, user=user)
            except (ValidationError, VoucherNumberingConflict) as exc:
                logger.warning("Recurring transaction %s failed: %s", recurring.pk, exc)
                failures.append((recurring, exc))
                break
            if voucher is None:
                break
            vouchers.append(voucher)
    return vouchers, failures
