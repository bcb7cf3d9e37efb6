"""
Read-only projections of the journal.

Every report aggregates JournalEntry rows of live, posted vouchers and
returns plain dicts / lists of Decimals; nothing here writes.
"""
from collections import defaultdict
from decimal import Decimal
from django.db.models import Sum
from ..models import (AccountGroup, CostCenter, JournalEntry, LedgerAccount,
                      Voucher)
from .balances import account_entries

ZERO = Decimal("0.00")


# ----------------------------
# Helpers
# ----------------------------
def _entries(business, date_from=None, date_to=None, financial_year=None):
    qs = JournalEntry.objects.posted().for_business(business)
    if financial_year is not None:
        qs = qs.filter(financial_year=financial_year)
    if date_from is not None:
        qs = qs.filter(date__gte=date_from)
    if date_to is not None:
        qs = qs.filter(date__lte=date_to)
    return qs


def _totals_by(qs, *keys):
    """{key tuple (or single key): (debit, credit)}"""
    rows = qs.order_by().values(*keys).annotate(debit=Sum("debit_amount"), credit=Sum("credit_amount"))
    totals = {}
    for row in rows:
        key = row[keys[0]] if len(keys) == 1 else tuple(row[k] for k in keys)
        totals[key] = (row["debit"] or ZERO, row["credit"] or ZERO)
    return totals


def _accounts(business):
    return list(
        LedgerAccount.objects.for_business(business)
        .filter(is_deleted=False)
        .select_related("account_group")
        .order_by("code", "name")
    )


def _natural(nature, debit, credit):
    """Amount in the nature's normal direction (positive = normal balance)."""
    if nature in ("assets", "expense"):
        return debit - credit
    return credit - debit


def _opening(account, include_opening):
    """Opening balance split into (debit, credit)."""
    if not include_opening or not account.opening_balance:
        return ZERO, ZERO
    if account.opening_balance_type == "credit":
        return ZERO, account.opening_balance
    return account.opening_balance, ZERO


def _row(account, amount):
    return {
        "account_id": account.pk,
        "code": account.code,
        "name": account.name,
        "group": account.account_group.name,
        "amount": amount,
    }


# ----------------------------
# Trial balance
# ----------------------------
def trial_balance(business, as_of=None, financial_year=None, include_zero=False):
    """
    Closing balance of every ledger account, on the debit or credit side.
    Opening balances are included; debit and credit columns agree for
    consistent books.
    """
    totals = _totals_by(_entries(business, date_to=as_of, financial_year=financial_year),
                        "ledger_account")
    rows = []
    total_debit = total_credit = ZERO
    for account in _accounts(business):
        debit, credit = totals.get(account.pk, (ZERO, ZERO))
        open_dr, open_cr = _opening(account, True)
        net = (debit + open_dr) - (credit + open_cr)
        if not net and not include_zero:
            continue
        row = {
            "account_id": account.pk,
            "code": account.code,
            "name": account.name,
            "nature": account.nature,
            "period_debit": debit,
            "period_credit": credit,
            "debit": net if net > 0 else ZERO,
            "credit": -net if net < 0 else ZERO,
        }
        total_debit += row["debit"]
        total_credit += row["credit"]
        rows.append(row)
    return {
        "rows": rows,
        "total_debit": total_debit,
        "total_credit": total_credit,
        "is_balanced": total_debit == total_credit,
    }


# ----------------------------
# Profit & loss
# ----------------------------
def profit_and_loss(business, date_from=None, date_to=None, financial_year=None):
    """
    Income and expense for the period.
    Accounts in groups flagged affects_gross_profit (direct income /
    direct expense) make up gross profit; the rest is below the line.
    """
    totals = _totals_by(
        _entries(business, date_from, date_to, financial_year), "ledger_account")
    sections = {
        "direct_income": [], "direct_expense": [],
        "indirect_income": [], "indirect_expense": [],
    }
    for account in _accounts(business):
        nature = account.nature
        if nature not in ("income", "expense") or account.pk not in totals:
            continue
        debit, credit = totals[account.pk]
        kind = "direct" if account.account_group.affects_gross_profit else "indirect"
        sections[f"{kind}_{nature}"].append(_row(account, _natural(nature, debit, credit)))

    sums = {key: sum((r["amount"] for r in rows), ZERO) for key, rows in sections.items()}
    gross_profit = sums["direct_income"] - sums["direct_expense"]
    net_profit = gross_profit + sums["indirect_income"] - sums["indirect_expense"]
    return {
        **sections,
        "totals": sums,
        "total_income": sums["direct_income"] + sums["indirect_income"],
        "total_expense": sums["direct_expense"] + sums["indirect_expense"],
        "gross_profit": gross_profit,
        "net_profit": net_profit,
    }


# ----------------------------
# Balance sheet
# ----------------------------
def balance_sheet(business, as_of=None, financial_year=None):
    """
    Assets against liabilities + equity as of ``as_of``.
    Undistributed profit (income - expense) is shown on the equity side.
    """
    totals = _totals_by(
        _entries(business, date_to=as_of, financial_year=financial_year), "ledger_account")
    sections = {"assets": [], "liabilities": [], "equity": []}
    profit = ZERO
    for account in _accounts(business):
        nature = account.nature
        debit, credit = totals.get(account.pk, (ZERO, ZERO))
        open_dr, open_cr = _opening(account, True)
        debit, credit = debit + open_dr, credit + open_cr
        if nature in sections:
            amount = _natural(nature, debit, credit)
            if amount:
                sections[nature].append(_row(account, amount))
        else:
            profit += credit - debit  # income adds, expense subtracts

    sums = {key: sum((r["amount"] for r in rows), ZERO) for key, rows in sections.items()}
    liabilities_and_equity = sums["liabilities"] + sums["equity"] + profit
    return {
        **sections,
        "totals": sums,
        "current_profit": profit,
        "total_assets": sums["assets"],
        "total_liabilities_and_equity": liabilities_and_equity,
        "is_balanced": sums["assets"] == liabilities_and_equity,
    }


# ----------------------------
# Cost centers
# ----------------------------
def cost_center_report(business, date_from=None, date_to=None, financial_year=None):
    """
    Income, expense and net result per cost center. ``total_*`` figures
    roll up every sub-center into its parent.
    """
    qs = _entries(business, date_from, date_to, financial_year).filter(
        voucher_item__cost_center__isnull=False,
        ledger_account__account_group__nature__in=["income", "expense"],
    )
    totals = _totals_by(
        qs, "voucher_item__cost_center", "ledger_account__account_group__nature")

    centers = list(CostCenter.objects.for_business(business).order_by("name"))
    own = {}
    for center in centers:
        inc_dr, inc_cr = totals.get((center.pk, "income"), (ZERO, ZERO))
        exp_dr, exp_cr = totals.get((center.pk, "expense"), (ZERO, ZERO))
        own[center.pk] = (inc_cr - inc_dr, exp_dr - exp_cr)

    children = defaultdict(list)
    for center in centers:
        children[center.parent_id].append(center.pk)

    def rolled(pk, seen=()):
        income, expense = own.get(pk, (ZERO, ZERO))
        for child in children.get(pk, []):
            if child in seen:
                continue
            child_income, child_expense = rolled(child, seen + (pk,))
            income += child_income
            expense += child_expense
        return income, expense

    rows = []
    for center in centers:
        income, expense = own[center.pk]
        total_income, total_expense = rolled(center.pk)
        rows.append({
            "cost_center_id": center.pk,
            "code": center.code,
            "name": center.name,
            "parent_id": center.parent_id,
            "income": income,
            "expense": expense,
            "net": income - expense,
            "total_income": total_income,
            "total_expense": total_expense,
            "total_net": total_income - total_expense,
        })
    return rows


# ----------------------------
# Ledgers and day book
# ----------------------------
def general_ledger(account, date_from=None, date_to=None, financial_year=None):
    """
    Entries of one account with a running balance (debit - credit, so a
    negative balance sits on the credit side).
    """
    opening = account.signed_opening_balance()
    if date_from is not None:
        debit, credit = account_entries(
            account, financial_year=financial_year
        ).filter(date__lt=date_from).totals()
        opening += debit - credit

    qs = account_entries(account, as_of=date_to, financial_year=financial_year,
                         date_from=date_from)
    running = opening
    lines = []
    for entry in qs.select_related("voucher").order_by("date", "id"):
        running += entry.debit_amount - entry.credit_amount
        lines.append({
            "journal_entry_id": entry.pk,
            "date": entry.date,
            "voucher_number": entry.voucher.voucher_number,
            "narration": entry.narration,
            "debit": entry.debit_amount,
            "credit": entry.credit_amount,
            "balance": running,
        })
    return {
        "account_id": account.pk,
        "opening_balance": opening,
        "lines": lines,
        "closing_balance": running,
    }


def day_book(business, date_from, date_to=None):
    """Vouchers between two dates (one day by default), in posting order."""
    date_to = date_to or date_from
    vouchers = (
        Voucher.objects.active(business)
        .filter(is_posted=True, date__gte=date_from, date__lte=date_to)
        .select_related("voucher_type", "party")
        .order_by("date", "id")
    )
    rows = [
        {
            "voucher_id": v.pk,
            "date": v.date,
            "voucher_number": v.voucher_number,
            "voucher_type": v.voucher_type.name,
            "party": v.party.name if v.party_id else None,
            "narration": v.narration,
            "amount": v.total_amount,
        }
        for v in vouchers
    ]
    return {"rows": rows, "total": sum((r["amount"] for r in rows), ZERO)}


# ----------------------------
# Budgets
# ----------------------------
def budget_vs_actual(budget):
    """
    Budgeted against actual amounts for the budget's financial year.
    Actual is credit - debit for income and debit - credit for expense;
    variance is actual - budgeted.
    """
    year = budget.financial_year
    rows = []
    for item in budget.items.select_related("ledger_account__account_group", "cost_center"):
        qs = account_entries(item.ledger_account, financial_year=year)
        if item.cost_center_id:
            qs = qs.filter(voucher_item__cost_center=item.cost_center)
        debit, credit = qs.totals()
        actual = _natural(item.ledger_account.nature, debit, credit)
        rows.append({
            "ledger_account_id": item.ledger_account_id,
            "name": item.ledger_account.name,
            "cost_center_id": item.cost_center_id,
            "budgeted": item.amount,
            "actual": actual,
            "variance": actual - item.amount,
            "utilization": (actual / item.amount * 100).quantize(Decimal("0.01"))
            if item.amount else None,
        })
    return {
        "budget_id": budget.pk,
        "financial_year": year.name,
        "rows": rows,
        "total_budgeted": sum((r["budgeted"] for r in rows), ZERO),
        "total_actual": sum((r["actual"] for r in rows), ZERO),
    }


def group_totals(business, as_of=None, financial_year=None):
    """Closing balance (natural direction) of every live group, rolled up the tree."""
    totals = _totals_by(
        _entries(business, date_to=as_of, financial_year=financial_year), "ledger_account")
    groups = list(AccountGroup.objects.for_business(business).alive())
    own = defaultdict(lambda: ZERO)
    for account in _accounts(business):
        debit, credit = totals.get(account.pk, (ZERO, ZERO))
        open_dr, open_cr = _opening(account, True)
        own[account.account_group_id] += _natural(
            account.nature, debit + open_dr, credit + open_cr)

    result = {}
    for group in groups:
        total = own[group.pk]
        for descendant in group.descendant_ids():
            total += own[descendant]
        result[group.pk] = {"name": group.name, "nature": group.nature, "balance": total}
    return result
