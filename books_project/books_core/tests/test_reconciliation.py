import datetime

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from books_core.exceptions import (AccountMismatchError, AlreadyLinkedError,
                                   NotBalancedError, NotCompletedError,
                                   NotLinkedError,
                                   ReconciliationCompletedError)
from books_core.models import AccountReconciliation, AuditLog
from books_core.services import reconciliation as rec_service
from books_core.services.vouchers import (create_voucher, delete_voucher,
                                          unpost_voucher)

from .helpers import BooksTestMixin, D, cr, dr

STATEMENT_DATE = datetime.date(2025, 3, 31)


class ReconciliationTests(BooksTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        # 3,000,000 in, 325,000 out, 5,000 bank charge still missing from the books
        self.deposit = self._bank_entry(
            create_voucher(self.business, self.receipt, datetime.date(2025, 3, 2),
                           [dr(self.bank, 3000000), cr(self.capital, 3000000)]))
        self.rent_paid = self._bank_entry(
            create_voucher(self.business, self.payment, datetime.date(2025, 3, 5),
                           [dr(self.rent, 325000), cr(self.bank, 325000)]))
        self.small = self._bank_entry(
            create_voucher(self.business, self.payment, datetime.date(2025, 3, 9),
                           [dr(self.rent, 5000), cr(self.bank, 5000)]))
        self.rec = rec_service.create_reconciliation(
            self.bank, STATEMENT_DATE, D(2675000), user=self.user)

    def _bank_entry(self, voucher):
        return voucher.journal_entries.get(ledger_account=self.bank)

    def test_create_snapshots_the_book_balance(self):
        self.assertEqual(self.rec.status, "open")
        self.assertEqual(self.rec.account_balance, D(2670000))
        self.assertEqual(self.rec.reconciled_balance, D(0))

    def test_only_bank_or_cash_accounts(self):
        with self.assertRaises(ValidationError) as cm:
            rec_service.create_reconciliation(self.rent, STATEMENT_DATE, D(0))
        self.assertIn("ledger_account", cm.exception.message_dict)

    def test_one_reconciliation_per_statement_date(self):
        with self.assertRaises(ValidationError) as cm:
            rec_service.create_reconciliation(self.bank, STATEMENT_DATE, D(1))
        self.assertIn("statement_date", cm.exception.message_dict)

    """ Matching moves reconciled_balance by debit - credit """
    def test_add_and_remove_items(self):
        rec_service.add_item(self.rec, self.deposit)
        rec_service.add_item(self.rec, self.rent_paid)
        self.rec.refresh_from_db()
        self.assertEqual(self.rec.reconciled_balance, D(2675000))
        self.assertEqual(self.rec.difference, D(0))

        rec_service.remove_item(self.rec, self.rent_paid)
        self.rec.refresh_from_db()
        self.assertEqual(self.rec.reconciled_balance, D(3000000))

        rec_service.add_item(self.rec, self.rent_paid)
        self.rec.refresh_from_db()
        self.assertEqual(self.rec.reconciled_balance, D(2675000))

    def test_unreconciled_entries(self):
        rec_service.add_item(self.rec, self.deposit)
        pending = list(rec_service.unreconciled_entries(self.rec))
        self.assertEqual(pending, [self.rent_paid, self.small])
        self.assertEqual(list(rec_service.reconciled_entries(self.rec)), [self.deposit])

    """ Complete succeeds when statement and reconciled balance agree """
    def test_complete_when_balanced(self):
        rec_service.add_item(self.rec, self.deposit)
        rec_service.add_item(self.rec, self.rent_paid)

        rec = rec_service.complete(self.rec, user=self.user)

        self.assertEqual(rec.status, "completed")
        self.assertIsNotNone(rec.completed_at)
        self.assertEqual(rec.completed_by, self.user)
        self.assertFalse(rec.completed_with_override)
        self.assertTrue(AuditLog.objects.filter(
            object_type="reconciliation", object_id=str(rec.pk), action="complete").exists())

    def test_complete_fails_when_not_balanced(self):
        for entry in (self.deposit, self.rent_paid, self.small):
            rec_service.add_item(self.rec, entry)
        self.rec.refresh_from_db()
        self.assertEqual(self.rec.reconciled_balance, D(2670000))

        with self.assertRaises(NotBalancedError):
            rec_service.complete(self.rec)
        self.rec.refresh_from_db()
        self.assertEqual(self.rec.status, "open")

    def test_override_completes_and_is_flagged(self):
        for entry in (self.deposit, self.rent_paid, self.small):
            rec_service.add_item(self.rec, entry)

        with self.assertLogs("books_core.services.reconciliation", level="WARNING"):
            rec = rec_service.complete(self.rec, user=self.user, override=True)

        self.assertEqual(rec.status, "completed")
        self.assertTrue(rec.completed_with_override)
        self.assertTrue(AuditLog.objects.filter(
            object_id=str(rec.pk), action="complete_override").exists())

    @override_settings(BOOKS_RECONCILIATION_TOLERANCE="10000")
    def test_tolerance_is_configurable(self):
        for entry in (self.deposit, self.rent_paid, self.small):
            rec_service.add_item(self.rec, entry)
        rec = rec_service.complete(self.rec)
        self.assertFalse(rec.completed_with_override)

    """ Completed reconciliations are frozen """
    def test_completed_reconciliation_rejects_changes(self):
        rec_service.add_item(self.rec, self.deposit)
        rec_service.add_item(self.rec, self.rent_paid)
        rec_service.complete(self.rec)

        with self.assertRaises(ReconciliationCompletedError):
            rec_service.add_item(self.rec, self.small)
        with self.assertRaises(ReconciliationCompletedError):
            rec_service.remove_item(self.rec, self.deposit)
        with self.assertRaises(ReconciliationCompletedError):
            rec_service.complete(self.rec)

    def test_reopen_keeps_items(self):
        rec_service.add_item(self.rec, self.deposit)
        rec_service.add_item(self.rec, self.rent_paid)
        rec_service.complete(self.rec)

        rec = rec_service.reopen(self.rec, user=self.user)

        self.assertEqual(rec.status, "open")
        self.assertIsNone(rec.completed_at)
        self.assertEqual(rec.items.count(), 2)
        self.assertEqual(rec.reconciled_balance, D(2675000))

    def test_reopen_requires_completed(self):
        with self.assertRaises(NotCompletedError):
            rec_service.reopen(self.rec)

    def test_entry_can_only_be_matched_once(self):
        rec_service.add_item(self.rec, self.deposit)
        with self.assertRaises(AlreadyLinkedError):
            rec_service.add_item(self.rec, self.deposit)

        other = AccountReconciliation.objects.create(
            business=self.business, ledger_account=self.bank,
            statement_date=datetime.date(2025, 4, 30), statement_balance=D(0))
        with self.assertRaises(AlreadyLinkedError):
            rec_service.add_item(other, self.deposit)

    def test_entry_of_another_account_is_rejected(self):
        rent_entry = self.rent_paid.voucher.journal_entries.get(ledger_account=self.rent)
        with self.assertRaises(AccountMismatchError):
            rec_service.add_item(self.rec, rent_entry)

    def test_entry_of_unposted_voucher_is_rejected(self):
        unpost_voucher(self.small.voucher)
        with self.assertRaises(AccountMismatchError):
            rec_service.add_item(self.rec, self.small)
        self.rec.refresh_from_db()
        self.assertEqual(self.rec.items.count(), 0)
        self.assertEqual(self.rec.reconciled_balance, D(0))
        # nothing matched, so it cannot be completed either
        with self.assertRaises(NotBalancedError):
            rec_service.complete(self.rec)

    def test_entry_of_deleted_voucher_is_rejected(self):
        delete_voucher(self.small.voucher)
        with self.assertRaises(AccountMismatchError):
            rec_service.add_item(self.rec, self.small)
        self.assertEqual(self.rec.items.count(), 0)

    def test_removing_an_unlinked_entry(self):
        with self.assertRaises(NotLinkedError):
            rec_service.remove_item(self.rec, self.deposit)

    def test_delete_open_reconciliation(self):
        rec_service.add_item(self.rec, self.deposit)
        rec_service.delete_reconciliation(self.rec)
        self.assertFalse(AccountReconciliation.objects.filter(pk=self.rec.pk).exists())
        # the entry is free to be matched again
        self.assertEqual(rec_service.unreconciled_entries(self.rec).count(), 3)

    def test_summary(self):
        rec_service.add_item(self.rec, self.deposit)
        self.rec.refresh_from_db()
        summary = rec_service.reconciliation_summary(self.rec)
        self.assertEqual(summary["statement_balance"], "2675000.00")
        self.assertEqual(summary["difference"], "-325000.00")
        self.assertEqual(summary["items"], [self.deposit.pk])
