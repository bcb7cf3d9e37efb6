from decimal import Decimal
from ..models import JournalEntry

ZERO = Decimal("0.00")


def account_entries(account, as_of=None, financial_year=None, date_from=None):
    """Live journal entries of ``account`` (deleted vouchers excluded)."""
    qs = JournalEntry.objects.posted().for_account(account)
    if financial_year is not None:
        qs = qs.filter(financial_year=financial_year)
    if date_from is not None:
        qs = qs.filter(date__gte=date_from)
    if as_of is not None:
        qs = qs.filter(date__lte=as_of)
    return qs


def signed_balance(account, as_of=None, financial_year=None, include_opening=True):
    """
    Book balance as debit - credit (positive = debit balance), including
    the account's opening balance.
    """
    debit, credit = account_entries(account, as_of, financial_year).totals()
    balance = debit - credit
    if include_opening:
        balance += account.signed_opening_balance()
    return balance


def ledger_balance(account, as_of=None, financial_year=None):
    """
    Balance in the account's natural direction:
      assets / expense  -> debit - credit
      everything else   -> credit - debit
    balance_type tells which side the balance actually sits on.
    """
    debit, credit = account_entries(account, as_of, financial_year).totals()
    if account.opening_balance_type == "credit":
        credit += account.opening_balance
    else:
        debit += account.opening_balance

    if account.is_debit_nature:
        balance = debit - credit
        balance_type = "debit" if balance >= 0 else "credit"
    else:
        balance = credit - debit
        balance_type = "credit" if balance >= 0 else "debit"

    return {
        "balance": abs(balance),
        "balance_type": balance_type,
        "total_debit": debit,
        "total_credit": credit,
    }
