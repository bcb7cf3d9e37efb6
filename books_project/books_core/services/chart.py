import logging
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils import timezone
from ..models import AccountGroup, CostCenter, LedgerAccount
from .audit_helper import log_action

logger = logging.getLogger(__name__)


# ----------------------------
# Account groups
# ----------------------------
def create_account_group(business, name, parent=None, nature="",
                         affects_gross_profit=False, sequence=0, is_system=False):
    """New group; nature is inherited from ``parent`` when left blank."""
    group = AccountGroup(
        business=business,
        name=name,
        parent=parent,
        nature=nature or "",
        affects_gross_profit=affects_gross_profit,
        sequence=sequence,
        is_system=is_system,
    )
    group.save()
    return group


def move_account_group(group, new_parent, user=None):
    """
    Re-parent ``group``. The new parent's ancestor chain must not contain
    the group itself, and the nature must stay the same.
    """
    with transaction.atomic():
        group = AccountGroup.objects.select_for_update().get(pk=group.pk)
        old_parent_id = group.parent_id
        group.parent = new_parent
        # typed errors (TreeCycleError) are raised here, before full_clean
        group.clean_parent()
        group.save()
        log_action(action="move", instance=group, user=user,
                   changes={"parent": [old_parent_id, group.parent_id]})
    return group


def delete_account_group(group, user=None):
    """Soft delete an empty group (no live sub-groups or ledger accounts)."""
    with transaction.atomic():
        if group.is_system:
            raise ValidationError("System account groups cannot be deleted.")
        if group.children.filter(is_deleted=False).exists():
            raise ValidationError("Account group still has sub-groups.")
        if group.ledger_accounts.filter(is_deleted=False).exists():
            raise ValidationError("Account group still has ledger accounts.")
        group.is_deleted = True
        group.deleted_at = timezone.now()
        group.save(update_fields=["is_deleted", "deleted_at"])
        log_action(action="delete", instance=group, user=user)
    return group


def group_tree(business):
    """
    Live groups of the business as nested dicts:
    [{"group": g, "children": [...], "accounts": [...]}, ...]
    """
    groups = list(AccountGroup.objects.for_business(business).alive())
    accounts = list(
        LedgerAccount.objects.for_business(business).alive().select_related("account_group")
    )
    nodes = {g.pk: {"group": g, "children": [], "accounts": []} for g in groups}
    for account in accounts:
        if account.account_group_id in nodes:
            nodes[account.account_group_id]["accounts"].append(account)
    roots = []
    for g in groups:
        if g.parent_id in nodes:
            nodes[g.parent_id]["children"].append(nodes[g.pk])
        else:
            roots.append(nodes[g.pk])
    return roots


# ----------------------------
# Ledger accounts
# ----------------------------
def create_ledger_account(business, account_group, name, code=None, user=None, **fields):
    with transaction.atomic():
        account = LedgerAccount(
            business=business, account_group=account_group, name=name, code=code, **fields)
        account.save()
        log_action(action="create", instance=account, user=user)
    return account


def deactivate_ledger_account(account, user=None):
    """Stop new postings; history and reports are unaffected."""
    account.is_active = False
    account.save(update_fields=["is_active"])
    log_action(action="deactivate", instance=account, user=user)
    return account


def delete_ledger_account(account, user=None):
    """
    Soft delete. The row stays because journal entries may still point at it.
    Accounts backing a party are deleted together with the party.
    """
    with transaction.atomic():
        if hasattr(account, "party") and account.party.is_active:
            raise ValidationError("Ledger account belongs to an active party.")
        account.is_deleted = True
        account.is_active = False
        account.deleted_at = timezone.now()
        account.save(update_fields=["is_deleted", "is_active", "deleted_at"])
        log_action(action="delete", instance=account, user=user)
    logger.info("Ledger account %s soft-deleted", account.pk)
    return account


# ----------------------------
# Lookups
# ----------------------------
def active_ledger_accounts(business):
    return LedgerAccount.objects.active(business).select_related("account_group")


def bank_and_cash_accounts(business):
    return active_ledger_accounts(business).filter(
        models.Q(is_bank_account=True) | models.Q(is_cash_account=True)
    )


def accounts_under(group):
    """Live ledger accounts in ``group`` and all of its sub-groups."""
    group_ids = [group.pk] + group.descendant_ids()
    return LedgerAccount.objects.filter(account_group_id__in=group_ids, is_deleted=False)


# ----------------------------
# Cost centers
# ----------------------------
def create_cost_center(business, name, code=None, parent=None, description=""):
    center = CostCenter(
        business=business, name=name, code=code, parent=parent, description=description)
    center.save()
    return center


def move_cost_center(center, new_parent):
    with transaction.atomic():
        center = CostCenter.objects.select_for_update().get(pk=center.pk)
        center.parent = new_parent
        center.clean_parent()
        center.save()
    return center


def active_cost_centers(business):
    return CostCenter.objects.active(business)
