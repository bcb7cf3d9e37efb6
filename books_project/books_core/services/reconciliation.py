import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from ..conf import reconciliation_tolerance
from ..exceptions import (AccountMismatchError, AlreadyLinkedError,
                          NotBalancedError, NotCompletedError, NotLinkedError,
                          ReconciliationCompletedError)
from ..models import AccountReconciliation, JournalEntry, ReconciliationItem
from .audit_helper import log_action
from .balances import signed_balance

logger = logging.getLogger(__name__)


# ----------------------------
# Helpers
# ----------------------------
def _lock(reconciliation):
    return AccountReconciliation.objects.select_for_update().get(pk=reconciliation.pk)


def _require_open(reconciliation):
    if reconciliation.is_completed:
        raise ReconciliationCompletedError(
            f"Reconciliation {reconciliation} is completed; reopen it first.")


def refresh_reconciled_balance(reconciliation):
    """
    Rewrite the cached reconciled_balance from the linked entries.
    Call with the reconciliation row locked, in the transaction that
    changed the links.
    """
    reconciliation.reconciled_balance = reconciliation.linked_total()
    reconciliation.save(update_fields=["reconciled_balance", "updated_at"])
    return reconciliation


# ----------------------------
# Create / delete
# ----------------------------
def create_reconciliation(ledger_account, statement_date, statement_balance, notes="", user=None):
    """
    Open a reconciliation of a bank or cash account against a statement.
    account_balance snapshots the book balance on statement_date.
    """
    with transaction.atomic():
        if AccountReconciliation.objects.filter(
            ledger_account=ledger_account, statement_date=statement_date
        ).exists():
            raise ValidationError(
                {"statement_date": f"{ledger_account} already has a reconciliation for {statement_date}."})
        reconciliation = AccountReconciliation(
            business_id=ledger_account.business_id,
            ledger_account=ledger_account,
            statement_date=statement_date,
            statement_balance=statement_balance,
            account_balance=signed_balance(ledger_account, as_of=statement_date),
            notes=notes or "",
            created_by=user,
        )
        reconciliation.save()  # clean() rejects non bank/cash accounts
        log_action(action="create", instance=reconciliation, user=user,
                   changes={"statement_balance": str(reconciliation.statement_balance)})
    logger.info("Reconciliation %s opened", reconciliation.pk)
    return reconciliation


def delete_reconciliation(reconciliation, user=None):
    """Drop an open reconciliation and its links; completed ones must be reopened first."""
    with transaction.atomic():
        reconciliation = _lock(reconciliation)
        _require_open(reconciliation)
        log_action(action="delete", instance=reconciliation, user=user)
        reconciliation.items.all().delete()
        reconciliation.delete()


# ----------------------------
# Matching
# ----------------------------
def unreconciled_entries(reconciliation):
    """Entries of the account up to the statement date not matched anywhere yet."""
    return (
        JournalEntry.objects.posted()
        .filter(
            ledger_account_id=reconciliation.ledger_account_id,
            date__lte=reconciliation.statement_date,
            reconciliation_item__isnull=True,
        )
        .select_related("voucher")
        .order_by("date", "id")
    )


def reconciled_entries(reconciliation):
    return (
        JournalEntry.objects.filter(reconciliation_item__reconciliation=reconciliation)
        .select_related("voucher")
        .order_by("date", "id")
    )


def add_item(reconciliation, journal_entry):
    """Match ``journal_entry``; reconciled_balance moves by debit - credit."""
    with transaction.atomic():
        reconciliation = _lock(reconciliation)
        _require_open(reconciliation)
        entry = JournalEntry.objects.select_related("voucher").get(pk=journal_entry.pk)

        if entry.ledger_account_id != reconciliation.ledger_account_id:
            raise AccountMismatchError(
                f"Journal entry {entry.pk} is not on {reconciliation.ledger_account}.")
        # only entries that are on the books can be matched
        if entry.voucher.is_deleted:
            raise AccountMismatchError(
                f"Journal entry {entry.pk} belongs to a deleted voucher.")
        if not entry.voucher.is_posted:
            raise AccountMismatchError(
                f"Journal entry {entry.pk} belongs to an unposted voucher.")
        existing = ReconciliationItem.objects.filter(journal_entry=entry).first()
        if existing is not None:
            raise AlreadyLinkedError(
                f"Journal entry {entry.pk} is already matched in reconciliation "
                f"{existing.reconciliation_id}.")

        ReconciliationItem.objects.create(reconciliation=reconciliation, journal_entry=entry)
        refresh_reconciled_balance(reconciliation)
    logger.debug("Reconciliation %s: linked entry %s", reconciliation.pk, entry.pk)
    return reconciliation


def remove_item(reconciliation, journal_entry):
    with transaction.atomic():
        reconciliation = _lock(reconciliation)
        _require_open(reconciliation)
        deleted, _ = ReconciliationItem.objects.filter(
            reconciliation=reconciliation, journal_entry_id=journal_entry.pk
        ).delete()
        if not deleted:
            raise NotLinkedError(
                f"Journal entry {journal_entry.pk} is not part of this reconciliation.")
        refresh_reconciled_balance(reconciliation)
    logger.debug("Reconciliation %s: unlinked entry %s", reconciliation.pk, journal_entry.pk)
    return reconciliation


# ----------------------------
# State machine
# ----------------------------
def complete(reconciliation, user=None, override=False):
    """
    OPEN -> COMPLETED. The statement must agree with the matched entries
    (difference below the tolerance) unless ``override`` is set, in which
    case the completion is logged, flagged and audited.
    """
    with transaction.atomic():
        reconciliation = _lock(reconciliation)
        _require_open(reconciliation)
        # never trust the cache when deciding
        refresh_reconciled_balance(reconciliation)
        difference = reconciliation.difference

        balanced = abs(difference) < reconciliation_tolerance()
        if not balanced and not override:
            raise NotBalancedError(
                f"Statement balance {reconciliation.statement_balance} differs from the "
                f"reconciled balance {reconciliation.reconciled_balance} by {difference}.")

        reconciliation.transition_to("completed")
        reconciliation.completed_at = timezone.now()
        reconciliation.completed_by = user
        reconciliation.completed_with_override = not balanced
        reconciliation.save(update_fields=[
            "status", "completed_at", "completed_by", "completed_with_override", "updated_at",
        ])

        if balanced:
            log_action(action="complete", instance=reconciliation, user=user)
        else:
            log_action(action="complete_override", instance=reconciliation, user=user,
                       changes={"difference": str(difference)})
            logger.warning(
                "Reconciliation %s completed with override, difference %s (user %s)",
                reconciliation.pk, difference, getattr(user, "pk", None),
            )
    logger.info("Reconciliation %s completed", reconciliation.pk)
    return reconciliation


def reopen(reconciliation, user=None):
    """COMPLETED -> OPEN. Linked entries and the reconciled balance are kept."""
    with transaction.atomic():
        reconciliation = _lock(reconciliation)
        if not reconciliation.is_completed:
            raise NotCompletedError("Only completed reconciliations can be reopened.")
        reconciliation.transition_to("open")
        reconciliation.completed_at = None
        reconciliation.completed_by = None
        reconciliation.completed_with_override = False
        reconciliation.save(update_fields=[
            "status", "completed_at", "completed_by", "completed_with_override", "updated_at",
        ])
        log_action(action="reopen", instance=reconciliation, user=user)
    logger.info("Reconciliation %s reopened", reconciliation.pk)
    return reconciliation


def reconciliation_summary(reconciliation):
    return {
        "id": reconciliation.pk,
        "ledger_account": reconciliation.ledger_account_id,
        "statement_date": reconciliation.statement_date.isoformat(),
        "statement_balance": str(reconciliation.statement_balance),
        "account_balance": str(reconciliation.account_balance),
        "reconciled_balance": str(reconciliation.reconciled_balance),
        "difference": str(reconciliation.difference),
        "status": reconciliation.status,
        "completed_with_override": reconciliation.completed_with_override,
        "items": list(
            reconciliation.items.order_by("id").values_list("journal_entry_id", flat=True)),
    }
