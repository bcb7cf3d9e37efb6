from .audit_helper import log_action
from .balances import ledger_balance, signed_balance
from .chart import (accounts_under, active_cost_centers, active_ledger_accounts,
                    bank_and_cash_accounts, create_account_group,
                    create_cost_center, create_ledger_account,
                    deactivate_ledger_account, delete_account_group,
                    delete_ledger_account, group_tree, move_account_group,
                    move_cost_center)
from .financial_years import (create_financial_year, current, is_locked,
                              lock_financial_year, open_financial_year,
                              resolve_financial_year, set_current,
                              unlock_financial_year)
from .numbering import allocate_voucher_number, next_voucher_number
from .parties import (active_parties, create_party, has_exceeded_credit_limit,
                      party_balance)
from .reconciliation import (add_item, complete, create_reconciliation,
                             delete_reconciliation, reconciled_entries,
                             reconciliation_summary, remove_item, reopen,
                             unreconciled_entries)
from .recurring import generate_due, generate_voucher
from .reports import (balance_sheet, budget_vs_actual, cost_center_report,
                      day_book, general_ledger, group_totals, profit_and_loss,
                      trial_balance)
from .setup import install_defaults
from .vouchers import (create_voucher, delete_voucher, duplicate_voucher,
                       post_voucher, unpost_voucher, update_voucher,
                       voucher_detail)
