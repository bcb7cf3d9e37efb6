import logging
from django.db import IntegrityError, models, transaction
from ..conf import voucher_number_padding
from ..models import Voucher, VoucherSequence

logger = logging.getLogger(__name__)


def format_voucher_number(voucher_type, value):
    """prefix + zero padded value, e.g. PMT0007"""
    return f"{voucher_type.prefix}{value:0{voucher_number_padding()}d}"


def _first_value(voucher_type, financial_year):
    """Counter seed: max sequence already used + 1, never below starting_number."""
    used = Voucher.objects.filter(
        business_id=voucher_type.business_id,
        voucher_type=voucher_type,
        financial_year=financial_year,
    ).aggregate(top=models.Max("sequence_number"))["top"]
    return max((used or 0) + 1, voucher_type.starting_number)


def next_voucher_number(voucher_type, financial_year):
    """Preview of the next number; nothing is reserved."""
    seq = VoucherSequence.objects.filter(
        voucher_type=voucher_type, financial_year=financial_year
    ).first()
    value = seq.next_value if seq else _first_value(voucher_type, financial_year)
    return format_voucher_number(voucher_type, value)


def _locked_sequence(voucher_type, financial_year):
    scope = {
        "business_id": voucher_type.business_id,
        "voucher_type": voucher_type,
        "financial_year": financial_year,
    }
    try:
        return VoucherSequence.objects.select_for_update().get(**scope)
    except VoucherSequence.DoesNotExist:
        try:
            # savepoint: a lost creation race must not poison the outer transaction
            with transaction.atomic():
                return VoucherSequence.objects.create(
                    next_value=_first_value(voucher_type, financial_year), **scope)
        except IntegrityError:
            return VoucherSequence.objects.select_for_update().get(**scope)


def allocate_voucher_number(voucher_type, financial_year):
    """
    Reserve the next number for (business, voucher type, financial year).
    Must run inside the voucher's transaction: the counter row stays locked
    until it commits, which serializes concurrent allocations.
    Returns (voucher_number, sequence_number).
    """
    seq = _locked_sequence(voucher_type, financial_year)
    value = seq.next_value
    number = format_voucher_number(voucher_type, value)
    # skip numbers someone typed in by hand
    while Voucher.objects.live().filter(
        business_id=voucher_type.business_id,
        voucher_type=voucher_type,
        financial_year=financial_year,
        voucher_number=number,
    ).exists():
        value += 1
        number = format_voucher_number(voucher_type, value)
    seq.next_value = value + 1
    seq.save(update_fields=["next_value"])
    logger.debug("Allocated voucher number %s", number)
    return number, value
