from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from ..exceptions import InvalidAccountError, UnbalancedVoucherError
from ..models import CostCenter, LedgerAccount

CENT = Decimal("0.01")


def to_amount(value):
    """Decimal rounded to cents; floats go through str() so 0.1 stays 0.10."""
    if value in (None, ""):
        return Decimal("0.00")
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise UnbalancedVoucherError(f"Invalid amount: {value!r}")


def _resolve(model, business, value, label):
    """Accept either an instance or a primary key."""
    if value is None or value == "":
        return None
    pk = getattr(value, "pk", value)
    try:
        obj = model._base_manager.filter(pk=pk).first()
    except (TypeError, ValueError):
        obj = None
    if obj is None or obj.business_id != business.pk:
        raise InvalidAccountError(f"{label} {pk} does not belong to {business}.")
    return obj


def normalize_items(business, items):
    """
    Validate voucher lines and return them as dicts with resolved objects:
        {"ledger_account", "cost_center", "debit_amount", "credit_amount",
         "narration", "sequence"}

    Lines come in as dicts with ``ledger_account`` (or ``ledger_account_id``),
    ``debit_amount`` / ``credit_amount``, and optional ``cost_center`` /
    ``narration``.
    """
    if items is None:
        items = []
    if not isinstance(items, (list, tuple)):
        raise UnbalancedVoucherError("Voucher lines must be a list.")
    if len(items) < 2:
        raise UnbalancedVoucherError("A voucher needs at least two lines.")

    lines = []
    for index, raw in enumerate(items, start=1):
        if not isinstance(raw, dict):
            raise UnbalancedVoucherError(
                f"Line {index}: expected an object with ledger_account and an amount.")
        debit = to_amount(raw.get("debit_amount"))
        credit = to_amount(raw.get("credit_amount"))
        if debit < 0 or credit < 0:
            raise UnbalancedVoucherError(f"Line {index}: amounts must not be negative.")
        if (debit > 0) == (credit > 0):
            raise UnbalancedVoucherError(
                f"Line {index}: exactly one of debit or credit must be positive.")

        account = _resolve(
            LedgerAccount, business,
            raw.get("ledger_account", raw.get("ledger_account_id")), "Ledger account")
        if account is None:
            raise InvalidAccountError(f"Line {index}: ledger account is required.")
        if not account.can_post:
            raise InvalidAccountError(f"Line {index}: ledger account {account} is inactive.")

        cost_center = _resolve(
            CostCenter, business,
            raw.get("cost_center", raw.get("cost_center_id")), "Cost center")
        if cost_center is not None and not cost_center.is_active:
            raise InvalidAccountError(f"Line {index}: cost center {cost_center} is inactive.")

        lines.append({
            "ledger_account": account,
            "cost_center": cost_center,
            "debit_amount": debit,
            "credit_amount": credit,
            "narration": raw.get("narration") or "",
            "sequence": index,
        })

    total_debit = sum((line["debit_amount"] for line in lines), Decimal("0.00"))
    total_credit = sum((line["credit_amount"] for line in lines), Decimal("0.00"))
    if total_debit != total_credit:
        raise UnbalancedVoucherError(
            f"Voucher not balanced: debits={total_debit}, credits={total_credit}")
    return lines, total_debit
