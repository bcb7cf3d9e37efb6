from decimal import Decimal

from django.conf import settings

""" App settings with their defaults (see BOOKS_* in settings.py) """


def reconciliation_tolerance() -> Decimal:
    return Decimal(str(getattr(settings, "BOOKS_RECONCILIATION_TOLERANCE", "0.01")))


def voucher_number_padding() -> int:
    return int(getattr(settings, "BOOKS_VOUCHER_NUMBER_PADDING", 4))


def numbering_retries() -> int:
    return int(getattr(settings, "BOOKS_NUMBERING_RETRIES", 1))
