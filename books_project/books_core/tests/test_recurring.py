import datetime
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase

from books_core.exceptions import VoucherNumberingConflict
from books_core.models import RecurringTransaction, Voucher
from books_core.services.chart import deactivate_ledger_account
from books_core.services.recurring import generate_due
from books_core.services.vouchers import create_voucher
from books_core.tasks import generate_recurring_vouchers

from .helpers import BooksTestMixin


class RecurringMixin(BooksTestMixin):

    def _recurring(self, **fields):
        defaults = {
            "business": self.business,
            "voucher_type": self.payment,
            "name": "Office rent",
            "frequency": "monthly",
            "start_date": datetime.date(2025, 1, 31),
            "template": [
                {"ledger_account_id": self.rent.pk, "debit_amount": "1500.00"},
                {"ledger_account_id": self.bank.pk, "credit_amount": "1500.00"},
            ],
        }
        defaults.update(fields)
        return RecurringTransaction.objects.create(**defaults)


class RecurringScheduleTests(RecurringMixin, TestCase):
    """Schedule arithmetic only, nothing is posted"""

    def test_first_due_date_is_the_start_date(self):
        rt = self._recurring(frequency="daily", start_date=datetime.date(2025, 3, 1))
        self.assertEqual(rt.next_due_date(), datetime.date(2025, 3, 1))

    def test_monthly_clamps_to_month_end(self):
        rt = self._recurring(day_of_month=31, last_generated_date=datetime.date(2025, 1, 31))
        self.assertEqual(rt.next_due_date(), datetime.date(2025, 2, 28))

    def test_quarterly_and_yearly(self):
        rt = self._recurring(frequency="quarterly", last_generated_date=datetime.date(2025, 1, 15))
        self.assertEqual(rt.next_due_date(), datetime.date(2025, 4, 15))
        rt = self._recurring(frequency="yearly", last_generated_date=datetime.date(2024, 6, 1))
        self.assertEqual(rt.next_due_date(), datetime.date(2025, 6, 1))

    def test_schedule_ends(self):
        rt = self._recurring(end_date=datetime.date(2025, 2, 15),
                             last_generated_date=datetime.date(2025, 1, 31))
        self.assertIsNone(rt.next_due_date())
        rt = self._recurring(occurrences=2, occurrences_generated=2)
        self.assertIsNone(rt.next_due_date())

    def test_template_needs_two_lines(self):
        with self.assertRaises(ValidationError):
            self._recurring(template=[{"ledger_account_id": self.rent.pk, "debit_amount": "1"}])


class RecurringGenerationTests(RecurringMixin, TestCase):

    def test_catch_up_posts_one_voucher_per_period(self):
        rt = self._recurring(start_date=datetime.date(2025, 1, 5), narration="Monthly rent")

        vouchers, failures = generate_due(self.business, datetime.date(2025, 3, 20))

        self.assertEqual(failures, [])
        self.assertEqual([v.date for v in vouchers],
                         [datetime.date(2025, 1, 5), datetime.date(2025, 2, 5),
                          datetime.date(2025, 3, 5)])
        self.assertEqual([v.voucher_number for v in vouchers], ["PMT0001", "PMT0002", "PMT0003"])
        self.assertTrue(all(v.narration == "Monthly rent" for v in vouchers))
        rt.refresh_from_db()
        self.assertEqual(rt.occurrences_generated, 3)
        self.assertEqual(rt.last_generated_date, datetime.date(2025, 3, 5))

        # running again the same day posts nothing new
        vouchers, _ = generate_due(self.business, datetime.date(2025, 3, 20))
        self.assertEqual(vouchers, [])

    def test_occurrence_limit(self):
        self._recurring(start_date=datetime.date(2025, 1, 5), occurrences=2)
        vouchers, _ = generate_due(self.business, datetime.date(2025, 6, 30))
        self.assertEqual(len(vouchers), 2)

    def test_failing_template_is_reported(self):
        rt = self._recurring(start_date=datetime.date(2025, 1, 5))
        deactivate_ledger_account(self.rent)

        vouchers, failures = generate_due(self.business, datetime.date(2025, 2, 20))

        self.assertEqual(vouchers, [])
        self.assertEqual(len(failures), 1)
        self.assertEqual(failures[0][0], rt)
        rt.refresh_from_db()
        self.assertEqual(rt.occurrences_generated, 0)

    def test_celery_task_runs_every_business(self):
        self._recurring(start_date=datetime.date(2025, 1, 5))
        created = generate_recurring_vouchers("2025-02-10")
        self.assertEqual(created, 2)
        self.assertEqual(Voucher.objects.filter(business=self.business).count(), 2)

    def test_task_defaults_to_today(self):
        self._recurring(start_date=datetime.date(2025, 1, 5))
        with mock.patch("books_core.tasks.timezone.localdate",
                        return_value=datetime.date(2025, 1, 6)):
            self.assertEqual(generate_recurring_vouchers(), 1)

    def test_periods_missed_before_end_date_are_still_posted(self):
        rt = self._recurring(start_date=datetime.date(2025, 1, 1),
                             end_date=datetime.date(2025, 3, 31))

        vouchers, failures = generate_due(self.business, datetime.date(2025, 4, 10))

        self.assertEqual(failures, [])
        self.assertEqual([v.date for v in vouchers],
                         [datetime.date(2025, 1, 1), datetime.date(2025, 2, 1),
                          datetime.date(2025, 3, 1)])
        rt.refresh_from_db()
        self.assertIsNone(rt.next_due_date())
        # the schedule is used up, nothing more after the end date
        vouchers, _ = generate_due(self.business, datetime.date(2025, 6, 30))
        self.assertEqual(vouchers, [])


class RecurringNumberingConflictTests(RecurringMixin, TestCase):
    """A numbering race on one template does not stop the run."""

    def setUp(self):
        super().setUp()
        (self.other, _, _, other_types, other_accounts, _) = self.make_books("Other Co", "bob")
        self.other_rt = RecurringTransaction.objects.create(
            business=self.other,
            voucher_type=other_types["PMT"],
            name="Warehouse rent",
            frequency="monthly",
            start_date=datetime.date(2025, 1, 5),
            template=[
                {"ledger_account_id": other_accounts["rent"].pk, "debit_amount": "800.00"},
                {"ledger_account_id": other_accounts["bank"].pk, "credit_amount": "800.00"},
            ],
        )
        self.rt = self._recurring(start_date=datetime.date(2025, 1, 5))

    def _conflict_for(self, business):
        def create(target, *args, **kwargs):
            if target == business:
                raise VoucherNumberingConflict(
                    "Could not allocate a unique voucher number, please retry.")
            return create_voucher(target, *args, **kwargs)
        return mock.patch("books_core.services.recurring.create_voucher", side_effect=create)

    def test_conflict_is_reported_as_failure(self):
        with self._conflict_for(self.business):
            vouchers, failures = generate_due(self.business, datetime.date(2025, 2, 10))

        self.assertEqual(vouchers, [])
        self.assertEqual(len(failures), 1)
        self.assertEqual(failures[0][0], self.rt)
        self.assertIsInstance(failures[0][1], VoucherNumberingConflict)
        self.rt.refresh_from_db()
        self.assertEqual(self.rt.occurrences_generated, 0)

    def test_task_carries_on_with_other_businesses(self):
        with self._conflict_for(self.business):
            created = generate_recurring_vouchers("2025-02-10")

        self.assertEqual(created, 2)
        self.assertEqual(Voucher.objects.filter(business=self.other).count(), 2)
        self.assertEqual(Voucher.objects.filter(business=self.business).count(), 0)
