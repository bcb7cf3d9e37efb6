import logging
from django.db import transaction
from ..models import AccountGroup, VoucherType

logger = logging.getLogger(__name__)

# (name, parent name, nature, affects_gross_profit, sequence)
DEFAULT_GROUPS = [
    ("Assets", None, "assets", False, 1),
    ("Liabilities", None, "liabilities", False, 10),
    ("Income", None, "income", True, 20),
    ("Expense", None, "expense", False, 30),
    ("Equity", None, "equity", False, 40),

    ("Current Assets", "Assets", "", False, 2),
    ("Fixed Assets", "Assets", "", False, 3),
    ("Current Liabilities", "Liabilities", "", False, 11),
    ("Long Term Liabilities", "Liabilities", "", False, 12),
    ("Direct Income", "Income", "", True, 21),
    ("Indirect Income", "Income", "", False, 22),
    ("Direct Expense", "Expense", "", True, 31),
    ("Indirect Expense", "Expense", "", False, 32),
    ("Capital Account", "Equity", "", False, 41),
    ("Retained Earnings", "Equity", "", False, 42),

    ("Bank Accounts", "Current Assets", "", False, 4),
    ("Cash in Hand", "Current Assets", "", False, 5),
    ("Accounts Receivable", "Current Assets", "", False, 6),
    ("Accounts Payable", "Current Liabilities", "", False, 13),
    ("Duties & Taxes", "Current Liabilities", "", False, 14),
    ("Sales", "Direct Income", "", True, 23),
    ("Purchases", "Direct Expense", "", True, 33),
    ("Administrative Expenses", "Indirect Expense", "", False, 34),
    ("Selling Expenses", "Indirect Expense", "", False, 35),
]

# (name, code, nature, prefix)
DEFAULT_VOUCHER_TYPES = [
    ("Payment", "PMT", "payment", "PMT"),
    ("Receipt", "RCT", "receipt", "RCT"),
    ("Contra", "CNT", "contra", "CNT"),
    ("Journal", "JRN", "journal", "JRN"),
    ("Sales", "SLS", "sales", "SLS"),
    ("Purchase", "PUR", "purchase", "PUR"),
    ("Debit Note", "DBN", "debit_note", "DBN"),
    ("Credit Note", "CRN", "credit_note", "CRN"),
]


def install_default_groups(business):
    """Create the standard chart of account groups; existing groups are kept."""
    by_name = {}
    created = 0
    for name, parent_name, nature, gross_profit, sequence in DEFAULT_GROUPS:
        parent = by_name.get(parent_name)
        group = AccountGroup.objects.for_business(business).alive().filter(
            name=name, parent=parent).first()
        if group is None:
            group = AccountGroup(
                business=business,
                name=name,
                parent=parent,
                nature=nature,
                affects_gross_profit=gross_profit,
                sequence=sequence,
                is_system=True,
            )
            group.save()
            created += 1
        by_name[name] = group
    return by_name, created


def install_default_voucher_types(business):
    types = {}
    created = 0
    for name, code, nature, prefix in DEFAULT_VOUCHER_TYPES:
        voucher_type, was_created = VoucherType.objects.get_or_create(
            business=business,
            code=code,
            defaults={
                "name": name,
                "nature": nature,
                "prefix": prefix,
                "auto_increment": True,
                "starting_number": 1,
                "is_system": True,
            },
        )
        types[code] = voucher_type
        created += int(was_created)
    return types, created


def install_defaults(business):
    """Default chart of accounts groups and voucher types for a new business."""
    with transaction.atomic():
        groups, new_groups = install_default_groups(business)
        types, new_types = install_default_voucher_types(business)
    logger.info("Installed defaults for business %s: %d groups, %d voucher types",
                business.pk, new_groups, new_types)
    return groups, types
