import datetime
import threading
from unittest import mock

from django.db import connection
from django.test import TestCase, TransactionTestCase

from books_core.exceptions import VoucherNumberingConflict
from books_core.models import Voucher, VoucherSequence
from books_core.services import vouchers as voucher_service
from books_core.services.numbering import (format_voucher_number,
                                           next_voucher_number)
from books_core.services.vouchers import create_voucher

from .helpers import BooksTestMixin, cr, dr

DAY = datetime.date(2025, 6, 1)


class VoucherNumberingTests(BooksTestMixin, TestCase):

    def _pay(self, amount=100, **kwargs):
        return create_voucher(self.business, self.payment, DAY,
                              [dr(self.rent, amount), cr(self.bank, amount)], **kwargs)

    def test_format_uses_prefix_and_padding(self):
        self.assertEqual(format_voucher_number(self.payment, 7), "PMT0007")
        self.assertEqual(format_voucher_number(self.payment, 12345), "PMT12345")

    def test_starting_number_seeds_the_counter(self):
        self.payment.starting_number = 500
        self.payment.save()
        self.assertEqual(self._pay().voucher_number, "PMT0500")

    def test_preview_does_not_reserve(self):
        self.assertEqual(next_voucher_number(self.payment, self.year), "PMT0001")
        self.assertEqual(next_voucher_number(self.payment, self.year), "PMT0001")
        self._pay()
        self.assertEqual(next_voucher_number(self.payment, self.year), "PMT0002")

    def test_counter_is_per_financial_year(self):
        self._pay()
        self.year.__class__.objects.create(
            business=self.business, name="FY 2026",
            start_date=datetime.date(2026, 1, 1), end_date=datetime.date(2026, 12, 31))
        next_year = create_voucher(self.business, self.payment, datetime.date(2026, 2, 1),
                                   [dr(self.rent, 10), cr(self.bank, 10)])
        self.assertEqual(next_year.voucher_number, "PMT0001")
        self.assertEqual(VoucherSequence.objects.filter(voucher_type=self.payment).count(), 2)

    """ A collision on the number is retried once with a fresh allocation """
    def test_collision_is_retried(self):
        self._pay()  # takes PMT0001, counter now at 2
        real_allocate = voucher_service.allocate_voucher_number
        calls = []

        def collide_once(voucher_type, financial_year):
            calls.append(voucher_type.pk)
            if len(calls) == 1:
                return "PMT0001", 1  # what a concurrent writer already committed
            return real_allocate(voucher_type, financial_year)

        with mock.patch.object(voucher_service, "allocate_voucher_number",
                               side_effect=collide_once):
            voucher = self._pay(amount=50)

        self.assertEqual(len(calls), 2)
        self.assertEqual(voucher.voucher_number, "PMT0002")
        self.assertEqual(Voucher.objects.filter(voucher_type=self.payment).count(), 2)

    def test_repeated_collision_raises_conflict(self):
        self._pay()
        with mock.patch.object(voucher_service, "allocate_voucher_number",
                               return_value=("PMT0001", 1)):
            with self.assertRaises(VoucherNumberingConflict):
                self._pay(amount=50)
        # the failed attempts left nothing behind
        self.assertEqual(Voucher.objects.count(), 1)
        self.assertEqual(self.bank.journal_entries.count(), 1)


class ConcurrentNumberingTests(BooksTestMixin, TransactionTestCase):
    """
    Writers on the same voucher type and year never share a number.
    PostgreSQL queues them on the locked counter row; SQLite on the
    database lock taken by BEGIN IMMEDIATE.
    """

    def test_concurrent_creates_get_distinct_sequential_numbers(self):
        results, errors = [], []
        amounts = (10, 20, 30, 40)
        barrier = threading.Barrier(len(amounts))

        def worker(amount):
            try:
                barrier.wait()
                voucher = create_voucher(self.business, self.payment, DAY,
                                         [dr(self.rent, amount), cr(self.bank, amount)])
                results.append(voucher.voucher_number)
            except Exception as exc:  # collected and asserted below
                errors.append(exc)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker, args=(amount,)) for amount in amounts]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        self.assertEqual(sorted(results), ["PMT0001", "PMT0002", "PMT0003", "PMT0004"])
        sequence = VoucherSequence.objects.get(voucher_type=self.payment, financial_year=self.year)
        self.assertEqual(sequence.next_value, 5)
