import datetime
from decimal import Decimal

from books_core.models import Business, BusinessMembership, User
from books_core.services.chart import create_ledger_account
from books_core.services.financial_years import create_financial_year
from books_core.services.setup import install_defaults


def D(value):
    return Decimal(str(value))


def dr(account, amount, **extra):
    """Debit line for create_voucher"""
    return {"ledger_account": account, "debit_amount": D(amount), **extra}


def cr(account, amount, **extra):
    return {"ledger_account": account, "credit_amount": D(amount), **extra}


class BooksTestMixin:
    """
    A business with the default chart, FY 2025 (calendar year) and a
    handful of ledger accounts, plus an accountant member to act as user.
    """

    year_start = datetime.date(2025, 1, 1)
    year_end = datetime.date(2025, 12, 31)

    def make_books(self, name="Test Co", username="accountant"):
        business = Business.objects.create(name=name)
        groups, types = install_defaults(business)
        year = create_financial_year(
            business, "FY 2025", self.year_start, self.year_end, is_current=True)
        user = User.objects.create_user(username=username, password="pw")
        BusinessMembership.objects.create(user=user, business=business, role="accountant")

        accounts = {
            "bank": create_ledger_account(
                business, groups["Bank Accounts"], "Main Bank", code="1010",
                is_bank_account=True, bank_name="First Bank"),
            "cash": create_ledger_account(
                business, groups["Cash in Hand"], "Petty Cash", code="1020",
                is_cash_account=True),
            "receivable": create_ledger_account(
                business, groups["Accounts Receivable"], "Trade Debtors", code="1100"),
            "payable": create_ledger_account(
                business, groups["Accounts Payable"], "Trade Creditors", code="2100"),
            "tax": create_ledger_account(
                business, groups["Duties & Taxes"], "Sales Tax Payable", code="2200"),
            "capital": create_ledger_account(
                business, groups["Capital Account"], "Owner Capital", code="3000"),
            "sales": create_ledger_account(
                business, groups["Sales"], "Product Sales", code="4000"),
            "interest": create_ledger_account(
                business, groups["Indirect Income"], "Interest Received", code="4500"),
            "purchases": create_ledger_account(
                business, groups["Purchases"], "Stock Purchases", code="5000"),
            "rent": create_ledger_account(
                business, groups["Administrative Expenses"], "Office Rent", code="6000"),
        }
        return business, year, groups, types, accounts, user

    def setUp(self):
        (self.business, self.year, self.groups, self.types,
         self.accounts, self.user) = self.make_books()
        for key, account in self.accounts.items():
            setattr(self, key, account)
        self.payment = self.types["PMT"]
        self.receipt = self.types["RCT"]
        self.journal = self.types["JRN"]
