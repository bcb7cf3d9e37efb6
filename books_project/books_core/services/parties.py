from django.core.exceptions import ValidationError
from django.db import transaction
from ..models import AccountGroup, Party
from .audit_helper import log_action
from .balances import ledger_balance
from .chart import create_ledger_account

# Default group for each party type's ledger account (see setup.DEFAULT_GROUPS)
DEFAULT_PARTY_GROUPS = {
    "customer": "Accounts Receivable",
    "supplier": "Accounts Payable",
    "both": "Accounts Receivable",
}


def _default_group(business, party_type):
    name = DEFAULT_PARTY_GROUPS[party_type]
    group = AccountGroup.objects.for_business(business).alive().filter(name=name).first()
    if group is None:
        raise ValidationError(
            {"account_group": f"No '{name}' group found; pass account_group explicitly."})
    return group


def create_party(business, name, party_type, account_group=None, opening_balance=None,
                 opening_balance_type="debit", user=None, **fields):
    """
    Create a party together with the ledger account that carries its balance.
    The ledger account is placed under Accounts Receivable / Accounts Payable
    unless ``account_group`` is given.
    """
    with transaction.atomic():
        group = account_group or _default_group(business, party_type)
        account_fields = {"opening_balance_type": opening_balance_type}
        if opening_balance is not None:
            account_fields["opening_balance"] = opening_balance
        ledger = create_ledger_account(
            business, group, name, user=user, **account_fields)
        party = Party(
            business=business,
            ledger_account=ledger,
            name=name,
            party_type=party_type,
            **fields,
        )
        party.save()  # clean() checks ledger nature against party_type
        log_action(action="create", instance=party, user=user)
    return party


def active_parties(business, party_type=None):
    qs = Party.objects.active(business).select_related("ledger_account")
    if party_type == "customer":
        qs = qs.filter(party_type__in=["customer", "both"])
    elif party_type == "supplier":
        qs = qs.filter(party_type__in=["supplier", "both"])
    return qs


def party_balance(party, as_of=None, financial_year=None):
    return ledger_balance(party.ledger_account, as_of=as_of, financial_year=financial_year)


def has_exceeded_credit_limit(party):
    """
    True when a customer owes (or a supplier is owed) more than the credit limit.
    A zero credit limit means "no limit".
    """
    if not party.credit_limit:
        return False
    balance = party_balance(party)
    if party.party_type in ("customer", "both") and balance["balance_type"] == "debit":
        return balance["balance"] > party.credit_limit
    if party.party_type in ("supplier", "both") and balance["balance_type"] == "credit":
        return balance["balance"] > party.credit_limit
    return False
