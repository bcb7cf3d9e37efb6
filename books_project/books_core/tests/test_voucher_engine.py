import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from books_core.exceptions import (DuplicateVoucherNumberError,
                                   FinancialYearNotFoundError,
                                   InvalidAccountError, LockedPeriodError,
                                   ReconciledEntryLockedError,
                                   UnbalancedVoucherError)
from books_core.models import AuditLog, JournalEntry, Voucher, VoucherItem
from books_core.services import reconciliation as rec_service
from books_core.services.balances import ledger_balance, signed_balance
from books_core.services.chart import (create_cost_center,
                                       deactivate_ledger_account)
from books_core.services.financial_years import lock_financial_year
from books_core.services.vouchers import (create_voucher, delete_voucher,
                                          duplicate_voucher, post_voucher,
                                          unpost_voucher, update_voucher,
                                          voucher_detail)

from .helpers import BooksTestMixin, D, cr, dr

DAY = datetime.date(2025, 3, 15)


""" Success tests """
class VoucherCreateTests(BooksTestMixin, TestCase):

    """ Balanced three-line voucher: one debit against two credits """
    def test_balanced_voucher_creates_journal_entries(self):
        voucher = create_voucher(
            self.business, self.receipt, DAY,
            [dr(self.bank, 575000), cr(self.sales, 500000), cr(self.tax, 75000)],
            narration="Cash sale", user=self.user,
        )

        self.assertEqual(voucher.total_amount, D(575000))
        self.assertEqual(voucher.financial_year, self.year)
        self.assertTrue(voucher.is_balanced())

        entries = list(JournalEntry.objects.filter(voucher=voucher).order_by("id"))
        self.assertEqual(len(entries), 3)
        self.assertEqual(
            [(e.ledger_account_id, e.debit_amount, e.credit_amount) for e in entries],
            [
                (self.bank.pk, D(575000), D(0)),
                (self.sales.pk, D(0), D(500000)),
                (self.tax.pk, D(0), D(75000)),
            ],
        )
        # every entry mirrors its voucher line
        for entry in entries:
            self.assertEqual(entry.date, DAY)
            self.assertEqual(entry.business, self.business)
            self.assertEqual(entry.financial_year, self.year)
            self.assertEqual(entry.debit_amount, entry.voucher_item.debit_amount)
            self.assertEqual(entry.credit_amount, entry.voucher_item.credit_amount)
            self.assertEqual(entry.narration, "Cash sale")

    def test_auto_numbers_are_sequential_per_type(self):
        first = create_voucher(self.business, self.payment, DAY,
                               [dr(self.rent, 100), cr(self.bank, 100)])
        second = create_voucher(self.business, self.payment, DAY,
                                [dr(self.rent, 200), cr(self.bank, 200)])
        receipt = create_voucher(self.business, self.receipt, DAY,
                                 [dr(self.bank, 50), cr(self.sales, 50)])

        self.assertEqual(first.voucher_number, "PMT0001")
        self.assertEqual(second.voucher_number, "PMT0002")
        # each voucher type keeps its own counter
        self.assertEqual(receipt.voucher_number, "RCT0001")

    def test_manual_number_is_kept_and_skipped_by_the_counter(self):
        manual = create_voucher(self.business, self.payment, DAY,
                                [dr(self.rent, 10), cr(self.bank, 10)],
                                voucher_number="PMT0001")
        auto = create_voucher(self.business, self.payment, DAY,
                              [dr(self.rent, 10), cr(self.bank, 10)])

        self.assertEqual(manual.voucher_number, "PMT0001")
        self.assertIsNone(manual.sequence_number)
        self.assertEqual(auto.voucher_number, "PMT0002")

    def test_amounts_are_rounded_to_cents(self):
        voucher = create_voucher(self.business, self.journal, DAY, [
            {"ledger_account": self.rent.pk, "debit_amount": "10.005"},
            {"ledger_account_id": self.bank.pk, "credit_amount": 10.01},
        ])
        self.assertEqual(voucher.total_amount, Decimal("10.01"))

    def test_cost_center_is_carried_to_the_line(self):
        center = create_cost_center(self.business, "Head Office", code="HO")
        voucher = create_voucher(self.business, self.payment, DAY, [
            dr(self.rent, 300, cost_center=center),
            cr(self.bank, 300),
        ])
        item = voucher.items.get(ledger_account=self.rent)
        self.assertEqual(item.cost_center, center)

    def test_create_is_audited(self):
        voucher = create_voucher(self.business, self.payment, DAY,
                                 [dr(self.rent, 100), cr(self.bank, 100)], user=self.user)
        log = AuditLog.objects.get(object_type="voucher", object_id=str(voucher.pk))
        self.assertEqual(log.action, "create")
        self.assertEqual(log.user, self.user)
        self.assertEqual(log.changes["voucher_number"], "PMT0001")
        self.assertEqual(log.resolve(), voucher)

    def test_balances_follow_the_journal(self):
        create_voucher(self.business, self.receipt, DAY,
                       [dr(self.bank, 1000), cr(self.capital, 1000)])
        create_voucher(self.business, self.payment, DAY,
                       [dr(self.rent, 250), cr(self.bank, 250)])

        self.assertEqual(signed_balance(self.bank), D(750))
        self.assertEqual(signed_balance(self.capital), D(-1000))
        balance = ledger_balance(self.capital)
        self.assertEqual(balance["balance"], D(1000))
        self.assertEqual(balance["balance_type"], "credit")

    def test_duplicate_posts_a_copy_with_a_new_number(self):
        original = create_voucher(self.business, self.payment, DAY,
                                  [dr(self.rent, 100), cr(self.bank, 100)], narration="Rent")
        copy = duplicate_voucher(original, date=datetime.date(2025, 4, 15))

        self.assertNotEqual(copy.pk, original.pk)
        self.assertEqual(copy.voucher_number, "PMT0002")
        self.assertEqual(copy.narration, "Rent")
        self.assertEqual(copy.items.count(), 2)
        self.assertEqual(copy.total_amount, D(100))

    def test_voucher_detail(self):
        voucher = create_voucher(self.business, self.payment, DAY,
                                 [dr(self.rent, 100), cr(self.bank, 100)])
        detail = voucher_detail(voucher)
        self.assertEqual(detail["voucher_number"], "PMT0001")
        self.assertEqual(detail["voucher_type"], "PMT")
        self.assertEqual(detail["total_amount"], "100.00")
        self.assertEqual([i["sequence"] for i in detail["items"]], [1, 2])


""" Failure tests """
class VoucherValidationTests(BooksTestMixin, TestCase):

    """ Unbalanced voucher: nothing may be written """
    def test_unbalanced_voucher_is_rejected_without_rows(self):
        with self.assertRaises(UnbalancedVoucherError) as cm:
            create_voucher(self.business, self.payment, DAY,
                           [dr(self.rent, 100), cr(self.bank, 90)])

        self.assertIn("items", cm.exception.message_dict)
        self.assertFalse(Voucher.objects.exists())
        self.assertFalse(VoucherItem.objects.exists())
        self.assertFalse(JournalEntry.objects.exists())

    def test_single_line_is_rejected(self):
        with self.assertRaises(UnbalancedVoucherError):
            create_voucher(self.business, self.payment, DAY, [dr(self.rent, 100)])

    def test_line_with_both_sides_is_rejected(self):
        with self.assertRaises(UnbalancedVoucherError):
            create_voucher(self.business, self.payment, DAY, [
                {"ledger_account": self.rent, "debit_amount": 10, "credit_amount": 10},
                cr(self.bank, 0),
            ])

    def test_negative_amount_is_rejected(self):
        with self.assertRaises(UnbalancedVoucherError):
            create_voucher(self.business, self.payment, DAY,
                           [dr(self.rent, -10), cr(self.bank, -10)])

    def test_inactive_account_is_rejected(self):
        deactivate_ledger_account(self.rent)
        with self.assertRaises(InvalidAccountError):
            create_voucher(self.business, self.payment, DAY,
                           [dr(self.rent, 100), cr(self.bank, 100)])
        self.assertFalse(Voucher.objects.exists())

    def test_foreign_business_account_is_rejected(self):
        _, _, _, _, other_accounts, _ = self.make_books(name="Other Co", username="other")
        with self.assertRaises(InvalidAccountError):
            create_voucher(self.business, self.payment, DAY,
                           [dr(other_accounts["rent"], 100), cr(self.bank, 100)])

    def test_date_without_financial_year_is_rejected(self):
        with self.assertRaises(FinancialYearNotFoundError):
            create_voucher(self.business, self.payment, datetime.date(2026, 1, 5),
                           [dr(self.rent, 100), cr(self.bank, 100)])

    def test_locked_year_rejects_new_vouchers(self):
        lock_financial_year(self.year, user=self.user)
        with self.assertRaises(LockedPeriodError) as cm:
            create_voucher(self.business, self.payment, DAY,
                           [dr(self.rent, 100), cr(self.bank, 100)])
        self.assertIn("date", cm.exception.message_dict)
        self.assertFalse(Voucher.objects.exists())

    def test_duplicate_manual_number_is_rejected(self):
        create_voucher(self.business, self.payment, DAY,
                       [dr(self.rent, 100), cr(self.bank, 100)], voucher_number="P-7")
        with self.assertRaises(DuplicateVoucherNumberError):
            create_voucher(self.business, self.payment, DAY,
                           [dr(self.rent, 100), cr(self.bank, 100)], voucher_number="P-7")
        self.assertEqual(Voucher.objects.count(), 1)

    def test_manual_type_requires_a_number(self):
        self.payment.auto_increment = False
        self.payment.save()
        with self.assertRaises(ValidationError) as cm:
            create_voucher(self.business, self.payment, DAY,
                           [dr(self.rent, 100), cr(self.bank, 100)])
        self.assertIn("voucher_number", cm.exception.message_dict)

    def test_financial_year_must_cover_the_date(self):
        other = self.year.__class__.objects.create(
            business=self.business, name="FY 2026",
            start_date=datetime.date(2026, 1, 1), end_date=datetime.date(2026, 12, 31))
        with self.assertRaises(ValidationError):
            create_voucher(self.business, self.payment, DAY,
                           [dr(self.rent, 100), cr(self.bank, 100)], financial_year=other)


class VoucherUpdateDeleteTests(BooksTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.voucher = create_voucher(
            self.business, self.payment, DAY,
            [dr(self.rent, 100), cr(self.bank, 100)], user=self.user)

    """ Update replaces lines and journal rows together """
    def test_update_replaces_lines_and_entries(self):
        old_entry_ids = set(self.voucher.journal_entries.values_list("id", flat=True))

        update_voucher(self.voucher, [
            dr(self.rent, 120), dr(self.purchases, 30), cr(self.bank, 150),
        ], narration="Rent and stock", user=self.user)

        self.voucher.refresh_from_db()
        self.assertEqual(self.voucher.total_amount, D(150))
        self.assertEqual(self.voucher.voucher_number, "PMT0001")
        self.assertEqual(self.voucher.items.count(), 3)
        entries = self.voucher.journal_entries.all()
        self.assertEqual(entries.count(), 3)
        self.assertFalse(old_entry_ids & set(entries.values_list("id", flat=True)))
        self.assertEqual(signed_balance(self.bank), D(-150))

    def test_unbalanced_update_keeps_the_old_voucher(self):
        with self.assertRaises(UnbalancedVoucherError):
            update_voucher(self.voucher, [dr(self.rent, 120), cr(self.bank, 100)])
        self.voucher.refresh_from_db()
        self.assertEqual(self.voucher.total_amount, D(100))
        self.assertEqual(self.voucher.journal_entries.count(), 2)

    def test_update_in_locked_year_is_rejected(self):
        lock_financial_year(self.year)
        with self.assertRaises(LockedPeriodError):
            update_voucher(self.voucher, [dr(self.rent, 50), cr(self.bank, 50)])

    def test_update_cannot_leave_the_financial_year(self):
        self.year.__class__.objects.create(
            business=self.business, name="FY 2026",
            start_date=datetime.date(2026, 1, 1), end_date=datetime.date(2026, 12, 31))
        with self.assertRaises(ValidationError) as cm:
            update_voucher(self.voucher, [dr(self.rent, 50), cr(self.bank, 50)],
                           date=datetime.date(2026, 2, 1))
        self.assertIn("date", cm.exception.message_dict)

    """ Soft delete keeps rows but drops them from balances """
    def test_delete_is_soft(self):
        delete_voucher(self.voucher, user=self.user)

        self.voucher.refresh_from_db()
        self.assertTrue(self.voucher.is_deleted)
        self.assertIsNotNone(self.voucher.deleted_at)
        self.assertEqual(self.voucher.journal_entries.count(), 2)
        self.assertFalse(self.voucher.items.filter(is_deleted=False).exists())
        self.assertEqual(signed_balance(self.bank), D(0))
        self.assertTrue(AuditLog.objects.filter(
            object_type="voucher", object_id=str(self.voucher.pk), action="delete").exists())

    def test_deleted_number_can_be_reused(self):
        delete_voucher(self.voucher)
        again = create_voucher(self.business, self.payment, DAY,
                               [dr(self.rent, 5), cr(self.bank, 5)], voucher_number="PMT0001")
        self.assertEqual(again.voucher_number, "PMT0001")

    def test_deleted_voucher_cannot_be_edited(self):
        delete_voucher(self.voucher)
        with self.assertRaises(ValidationError):
            update_voucher(self.voucher, [dr(self.rent, 50), cr(self.bank, 50)])

    def test_unposted_voucher_leaves_balances(self):
        unpost_voucher(self.voucher)
        self.assertEqual(signed_balance(self.bank), D(0))
        post_voucher(self.voucher)
        self.assertEqual(signed_balance(self.bank), D(-100))


class ReconciledVoucherTests(BooksTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.voucher = create_voucher(
            self.business, self.receipt, DAY, [dr(self.bank, 500), cr(self.sales, 500)])
        self.bank_entry = self.voucher.journal_entries.get(ledger_account=self.bank)
        self.rec = rec_service.create_reconciliation(
            self.bank, datetime.date(2025, 3, 31), D(500))
        rec_service.add_item(self.rec, self.bank_entry)

    """ Completed reconciliation locks its entries """
    def test_completed_reconciliation_blocks_update_and_delete(self):
        rec_service.complete(self.rec)

        with self.assertRaises(ReconciledEntryLockedError):
            update_voucher(self.voucher, [dr(self.bank, 600), cr(self.sales, 600)])
        with self.assertRaises(ReconciledEntryLockedError):
            delete_voucher(self.voucher)

        self.voucher.refresh_from_db()
        self.assertFalse(self.voucher.is_deleted)
        self.assertEqual(self.voucher.total_amount, D(500))

    def test_reopened_reconciliation_releases_the_lock(self):
        rec_service.complete(self.rec)
        rec_service.reopen(self.rec)

        update_voucher(self.voucher, [dr(self.bank, 600), cr(self.sales, 600)])

        self.rec.refresh_from_db()
        self.assertEqual(self.rec.items.count(), 0)
        self.assertEqual(self.rec.reconciled_balance, D(0))

    """ Open reconciliations just lose the link """
    def test_open_reconciliation_is_unlinked_on_delete(self):
        delete_voucher(self.voucher)
        self.rec.refresh_from_db()
        self.assertEqual(self.rec.items.count(), 0)
        self.assertEqual(self.rec.reconciled_balance, D(0))
