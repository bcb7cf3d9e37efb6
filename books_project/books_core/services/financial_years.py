import logging
from django.db import transaction
from ..exceptions import FinancialYearNotFoundError, LockedPeriodError
from ..models import FinancialYear
from .audit_helper import log_action

logger = logging.getLogger(__name__)

"""
    The voucher date determines the financial year.
    Changing the date of a voucher can move it into another year.
"""


def resolve_financial_year(business, date, lock=False):
    """
    Financial year of ``business`` covering ``date``.
    With lock=True the row is locked (SELECT ... FOR UPDATE) until the
    surrounding transaction ends, so the year can't be locked mid-posting.
    """
    qs = FinancialYear.objects.filter(
        business=business,
        start_date__lte=date,
        end_date__gte=date,
    )
    if lock:
        qs = qs.select_for_update()
    year = qs.first()
    if year is None:
        raise FinancialYearNotFoundError(
            f"No financial year covers {date} for {business}.")
    return year


def open_financial_year(business, date, lock=True):
    """Like resolve_financial_year, but the year must also be unlocked."""
    year = resolve_financial_year(business, date, lock=lock)
    if year.is_locked:
        raise LockedPeriodError(f"Financial year {year.name} is locked.")
    return year


def is_locked(business, date):
    """True when ``date`` has no financial year or its year is locked."""
    year = FinancialYear.objects.filter(
        business=business, start_date__lte=date, end_date__gte=date,
    ).first()
    return year is None or year.is_locked


def current(business):
    return FinancialYear.objects.filter(business=business, is_current=True).first()


def create_financial_year(business, name, start_date, end_date, is_current=False, user=None):
    with transaction.atomic():
        year = FinancialYear(
            business=business, name=name, start_date=start_date, end_date=end_date)
        year.save()  # clean() rejects overlapping ranges
        if is_current:
            set_current(year, user=user)
        log_action(action="create", instance=year, user=user,
                   changes={"start_date": str(start_date), "end_date": str(end_date)})
    return year


def set_current(year, user=None):
    """Make ``year`` the single current year of its business."""
    with transaction.atomic():
        FinancialYear.objects.select_for_update().filter(
            business_id=year.business_id, is_current=True
        ).exclude(pk=year.pk).update(is_current=False)
        year.is_current = True
        year.save(update_fields=["is_current"])
    return year


def _set_locked(year, locked, user):
    with transaction.atomic():
        year = FinancialYear.objects.select_for_update().get(pk=year.pk)
        if year.is_locked == locked:
            return year
        year.is_locked = locked
        year.save(update_fields=["is_locked"])
        log_action(action="lock" if locked else "unlock", instance=year, user=user)
    logger.info("Financial year %s %s", year, "locked" if locked else "unlocked")
    return year


def lock_financial_year(year, user=None):
    return _set_locked(year, True, user)


def unlock_financial_year(year, user=None):
    return _set_locked(year, False, user)
