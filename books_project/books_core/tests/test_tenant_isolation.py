import datetime
import json

import pytest
from django.test import RequestFactory, TestCase
from django.urls import reverse

from books_core.middleware import CurrentBusinessMiddleware
from books_core.models import BusinessMembership, JournalEntry, LedgerAccount, Voucher
from books_core.services.reports import trial_balance
from books_core.services.vouchers import create_voucher
from books_core.views import trial_balance_view

from .helpers import BooksTestMixin, cr, dr

DAY = datetime.date(2025, 5, 1)


class TenantIsolationManagerTests(BooksTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        (self.other, _, _, self.other_types,
         self.other_accounts, _) = self.make_books(name="Other Co", username="other")
        self.voucher_a = create_voucher(self.business, self.payment, DAY,
                                        [dr(self.rent, 100), cr(self.bank, 100)])
        self.voucher_b = create_voucher(
            self.other, self.other_types["PMT"], DAY,
            [dr(self.other_accounts["rent"], 700), cr(self.other_accounts["bank"], 700)])

    def test_for_business_returns_only_that_business_rows(self):
        self.assertListEqual(
            list(Voucher.objects.for_business(self.business).values_list("pk", flat=True)),
            [self.voucher_a.pk],
        )
        self.assertEqual(
            set(JournalEntry.objects.for_business(self.other).values_list("voucher_id", flat=True)),
            {self.voucher_b.pk},
        )

    def test_get_other_business_row_raises_does_not_exist(self):
        with self.assertRaises(LedgerAccount.DoesNotExist):
            LedgerAccount.objects.for_business(self.business).get(pk=self.other_accounts["bank"].pk)

    def test_numbering_is_per_business(self):
        # both businesses start their own PMT series
        self.assertEqual(self.voucher_a.voucher_number, "PMT0001")
        self.assertEqual(self.voucher_b.voucher_number, "PMT0001")

    def test_reports_only_see_their_business(self):
        tb = trial_balance(self.business)
        self.assertEqual(tb["total_debit"], 100)


@pytest.mark.django_db
def test_middleware_ignores_business_without_membership(books, other_books):
    request = RequestFactory().get("/")
    request.user = books.user
    request.session = {"active_business_id": other_books.business.pk}

    CurrentBusinessMiddleware(lambda r: None).process_request(request)

    assert request.business is None


@pytest.mark.django_db
def test_middleware_uses_session_business_for_members(books, other_books):
    BusinessMembership.objects.create(user=books.user, business=other_books.business)
    request = RequestFactory().get("/")
    request.user = books.user
    request.session = {"active_business_id": other_books.business.pk}

    CurrentBusinessMiddleware(lambda r: None).process_request(request)

    assert request.business == other_books.business


@pytest.mark.django_db
def test_trial_balance_view_returns_only_tenant_data(books, other_books):
    create_voucher(books.business, books.types["PMT"], DAY,
                   [dr(books.rent, 100), cr(books.bank, 100)])
    create_voucher(other_books.business, other_books.types["PMT"], DAY,
                   [dr(other_books.rent, 999), cr(other_books.bank, 999)])

    request = RequestFactory().get("/api/reports/trial-balance/")
    request.user = books.user
    request.business = books.business  # manually simulate middleware

    data = json.loads(trial_balance_view(request).content)

    assert data["trial_balance"]["total_debit"] == "100.00"
    names = {row["account_id"] for row in data["trial_balance"]["rows"]}
    assert names == {books.rent.pk, books.bank.pk}


@pytest.mark.django_db
def test_voucher_of_another_business_is_not_found(alice_client, other_books):
    voucher = create_voucher(other_books.business, other_books.types["PMT"], DAY,
                             [dr(other_books.rent, 10), cr(other_books.bank, 10)])
    response = alice_client.get(reverse("books_core:voucher-detail", args=[voucher.pk]))
    assert response.status_code == 404
