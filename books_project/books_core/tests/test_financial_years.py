import datetime

from django.core.exceptions import ValidationError
from django.test import TestCase

from books_core.exceptions import FinancialYearNotFoundError, LockedPeriodError
from books_core.models import AuditLog, FinancialYear
from books_core.services import reconciliation as rec_service
from books_core.services.financial_years import (create_financial_year,
                                                 current, is_locked,
                                                 lock_financial_year,
                                                 open_financial_year,
                                                 resolve_financial_year,
                                                 set_current,
                                                 unlock_financial_year)
from books_core.services.vouchers import create_voucher

from .helpers import BooksTestMixin, D, cr, dr


class FinancialYearTests(BooksTestMixin, TestCase):

    def test_resolve_by_date(self):
        self.assertEqual(resolve_financial_year(self.business, datetime.date(2025, 7, 1)), self.year)
        with self.assertRaises(FinancialYearNotFoundError):
            resolve_financial_year(self.business, datetime.date(2024, 12, 31))

    """ Years of one business never overlap """
    def test_overlapping_years_are_rejected(self):
        with self.assertRaises(ValidationError) as cm:
            create_financial_year(self.business, "FY 2025-26",
                                  datetime.date(2025, 7, 1), datetime.date(2026, 6, 30))
        self.assertIn("start_date", cm.exception.message_dict)

    def test_adjacent_year_is_fine(self):
        year = create_financial_year(self.business, "FY 2026",
                                     datetime.date(2026, 1, 1), datetime.date(2026, 12, 31))
        self.assertEqual(year.overlapping().count(), 0)

    def test_other_businesses_may_share_dates(self):
        other, other_year, _, _, _, _ = self.make_books(name="Other Co", username="other")
        self.assertEqual(other_year.start_date, self.year.start_date)

    def test_start_must_precede_end(self):
        with self.assertRaises(ValidationError):
            create_financial_year(self.business, "Bad",
                                  datetime.date(2027, 5, 1), datetime.date(2027, 4, 1))

    def test_only_one_current_year(self):
        nxt = create_financial_year(self.business, "FY 2026",
                                    datetime.date(2026, 1, 1), datetime.date(2026, 12, 31))
        set_current(nxt)
        self.assertEqual(current(self.business), nxt)
        self.assertEqual(FinancialYear.objects.filter(business=self.business, is_current=True).count(), 1)

    """ Locking closes the year for postings, and is audited """
    def test_lock_and_unlock(self):
        day = datetime.date(2025, 5, 5)
        lock_financial_year(self.year, user=self.user)
        self.assertTrue(is_locked(self.business, day))
        with self.assertRaises(LockedPeriodError):
            open_financial_year(self.business, day)

        unlock_financial_year(self.year, user=self.user)
        self.assertFalse(is_locked(self.business, day))
        create_voucher(self.business, self.payment, day, [dr(self.rent, 1), cr(self.bank, 1)])

        actions = list(AuditLog.objects.filter(
            object_type="financial_year", object_id=str(self.year.pk)
        ).order_by("id").values_list("action", flat=True))
        self.assertEqual(actions, ["create", "lock", "unlock"])

    def test_date_without_year_counts_as_locked(self):
        self.assertTrue(is_locked(self.business, datetime.date(2030, 1, 1)))


class DeleteGuardTests(BooksTestMixin, TestCase):

    def test_voucher_in_locked_year_cannot_be_hard_deleted(self):
        voucher = create_voucher(self.business, self.payment, datetime.date(2025, 2, 2),
                                 [dr(self.rent, 10), cr(self.bank, 10)])
        lock_financial_year(self.year)
        voucher.refresh_from_db()
        with self.assertRaises(ValidationError):
            voucher.delete()

    def test_completed_reconciliation_cannot_be_deleted(self):
        rec = rec_service.create_reconciliation(self.bank, datetime.date(2025, 1, 31), D(0))
        rec_service.complete(rec)
        rec.refresh_from_db()
        with self.assertRaises(ValidationError):
            rec.delete()
