from .actions import (complete_reconciliations, delete_vouchers,
                      lock_financial_years, post_vouchers,
                      reopen_reconciliations, unlock_financial_years,
                      unpost_vouchers)
from .auditlog import AuditLogAdmin
from .business import BusinessAdmin, BusinessMembershipAdmin, UserAdmin
from .chart import (AccountGroupAdmin, CostCenterAdmin, LedgerAccountAdmin,
                    PartyAdmin)
from .forms import UserAdminChangeForm, UserAdminCreationForm
from .inlines import (BudgetItemInline, ReconciliationItemInline,
                      VoucherItemInline)
from .mixins import TenantAdminMixin
from .period import BudgetAdmin, FinancialYearAdmin, RecurringTransactionAdmin
from .ReadOnly import ReadOnlyAdmin
from .reconciliation import AccountReconciliationAdmin
from .voucher import (JournalEntryAdmin, VoucherAdmin, VoucherSequenceAdmin,
                      VoucherTypeAdmin)
