from .auditlog import AuditLog
from .budget import Budget, BudgetItem
from .business import Business, BusinessMembership, User
from .chart import AccountGroup, LedgerAccount
from .cost_center import CostCenter
from .financial_year import FinancialYear
from .party import Party
from .reconciliation import AccountReconciliation, ReconciliationItem
from .recurring import RecurringTransaction
from .voucher import (JournalEntry, Voucher, VoucherItem, VoucherSequence,
                      VoucherType)
