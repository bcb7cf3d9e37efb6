import logging
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
from ..conf import numbering_retries
from ..exceptions import (DuplicateVoucherNumberError, InvalidAccountError,
                          ReconciledEntryLockedError, VoucherNumberingConflict)
from ..models import (AccountReconciliation, JournalEntry, Party,
                      ReconciliationItem, Voucher, VoucherItem, VoucherType)
from .audit_helper import log_action
from .financial_years import open_financial_year
from .numbering import allocate_voucher_number
from .reconciliation import refresh_reconciled_balance
from .validation import normalize_items

logger = logging.getLogger(__name__)

# "argument not passed" marker for update_voucher (None is a valid party)
_UNSET = object()


# ----------------------------
# Helpers
# ----------------------------
def _check_voucher_type(business, voucher_type):
    if not isinstance(voucher_type, VoucherType):
        # id, or the type's code ("PMT")
        if isinstance(voucher_type, str) and not voucher_type.isdigit():
            lookup = {"code": voucher_type}
        else:
            lookup = {"pk": voucher_type}
        voucher_type = VoucherType.objects.filter(business=business, **lookup).first()
    if voucher_type is None or voucher_type.business_id != business.pk:
        raise ValidationError({"voucher_type": "Unknown voucher type for this business."})
    if not voucher_type.is_active:
        raise ValidationError({"voucher_type": f"Voucher type {voucher_type} is inactive."})
    return voucher_type


def _check_party(business, party):
    if party is None or party == "":
        return None
    if not isinstance(party, Party):
        try:
            party = Party.objects.filter(pk=party).first()
        except (TypeError, ValueError):
            party = None
    if party is None or party.business_id != business.pk:
        raise InvalidAccountError("Party does not belong to this business.", field="party")
    if not party.is_active:
        raise InvalidAccountError(f"Party {party} is inactive.", field="party")
    return party


def _ensure_number_free(voucher_type, financial_year, voucher_number, exclude_pk=None):
    qs = Voucher.objects.live().filter(
        business_id=voucher_type.business_id,
        voucher_type=voucher_type,
        financial_year=financial_year,
        voucher_number=voucher_number,
    )
    if exclude_pk:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise DuplicateVoucherNumberError(
            f"{voucher_type.name} {voucher_number} already exists in {financial_year.name}.")


def _write_items(voucher, lines):
    """Insert the voucher lines and their journal mirrors."""
    entries = []
    for line in lines:
        item = VoucherItem(voucher=voucher, **line)
        item.save()
        entries.append(JournalEntry.mirror(item))
    JournalEntry.objects.bulk_create(entries)


def _release_reconciliation_links(voucher):
    """
    Detach the voucher's journal entries from open reconciliations (their
    reconciled balance is recomputed). Entries inside a completed
    reconciliation can't be released: that reconciliation must be reopened.
    """
    rec_ids = set(
        ReconciliationItem.objects.filter(journal_entry__voucher=voucher)
        .values_list("reconciliation_id", flat=True)
    )
    if not rec_ids:
        return
    reconciliations = list(
        AccountReconciliation.objects.select_for_update().filter(pk__in=rec_ids)
    )
    completed = [r for r in reconciliations if r.is_completed]
    if completed:
        dates = ", ".join(str(r.statement_date) for r in completed)
        raise ReconciledEntryLockedError(
            f"Voucher {voucher.voucher_number} is part of a completed reconciliation "
            f"({dates}); reopen it first.")
    ReconciliationItem.objects.filter(journal_entry__voucher=voucher).delete()
    for reconciliation in reconciliations:
        refresh_reconciled_balance(reconciliation)
    logger.info("Voucher %s unlinked from %d open reconciliation(s)",
                voucher.voucher_number, len(reconciliations))


# ----------------------------
# Create
# ----------------------------
def create_voucher(business, voucher_type, date, items, party=None, narration="",
                   reference="", voucher_number=None, financial_year=None, user=None):
    """
    Post a balanced voucher and mirror every line into the journal.

    ``items`` is a list of dicts with ``ledger_account`` (instance or id),
    ``debit_amount`` / ``credit_amount`` and optional ``cost_center`` and
    ``narration``.  Auto-numbered voucher types get the next number of
    (business, type, financial year) unless ``voucher_number`` is given.

    A numbering collision (two writers on the same number) is retried
    transparently; if the retry collides too, VoucherNumberingConflict
    is raised and the caller may resubmit.

    ``financial_year`` is optional; when passed it must be the year that
    covers ``date``.
    """
    attempts = numbering_retries() + 1
    for attempt in range(1, attempts + 1):
        try:
            return _create_voucher(
                business, voucher_type, date, items, party, narration,
                reference, voucher_number, financial_year, user,
            )
        except IntegrityError as exc:
            if voucher_number:
                # a manual number was taken between our check and the insert
                raise DuplicateVoucherNumberError(
                    f"Voucher number {voucher_number} already exists.") from exc
            if attempt == attempts:
                logger.error("Voucher numbering conflict for business %s persisted after %d attempts",
                             business.pk, attempts)
                raise VoucherNumberingConflict(
                    "Could not allocate a unique voucher number, please retry.") from exc
            logger.warning("Voucher number collision for business %s, retrying (%d/%d)",
                           business.pk, attempt, attempts - 1)


def _create_voucher(business, voucher_type, date, items, party, narration,
                    reference, voucher_number, financial_year, user):
    with transaction.atomic():
        voucher_type = _check_voucher_type(business, voucher_type)
        lines, total = normalize_items(business, items)
        party = _check_party(business, party)
        # locks the year row until commit
        year = open_financial_year(business, date)
        if financial_year is not None and getattr(financial_year, "pk", financial_year) != year.pk:
            raise ValidationError(
                {"date": f"{date} is outside financial year {financial_year}."})

        sequence_number = None
        if voucher_number:
            _ensure_number_free(voucher_type, year, voucher_number)
        elif voucher_type.auto_increment:
            voucher_number, sequence_number = allocate_voucher_number(voucher_type, year)
        else:
            raise ValidationError(
                {"voucher_number": f"{voucher_type.name} vouchers need a voucher number."})

        voucher = Voucher(
            business=business,
            voucher_type=voucher_type,
            financial_year=year,
            voucher_number=voucher_number,
            sequence_number=sequence_number,
            date=date,
            party=party,
            narration=narration or "",
            reference=reference or "",
            total_amount=total,
            created_by=user,
            updated_by=user,
        )
        voucher.save()
        _write_items(voucher, lines)

        log_action(
            action="create",
            instance=voucher,
            user=user,
            changes={"voucher_number": voucher_number, "total_amount": str(total)},
        )
    logger.info("Voucher %s posted for business %s (%s)", voucher_number, business.pk, total)
    return voucher


# ----------------------------
# Update
# ----------------------------
def update_voucher(voucher, items, date=None, party=_UNSET, narration=None,
                   reference=None, user=None):
    """
    Replace the voucher's lines (and journal entries) with ``items``.
    Lines are never patched in place: the old set is deleted and the new
    set inserted in the same transaction.
    """
    with transaction.atomic():
        voucher = Voucher.objects.select_for_update().get(pk=voucher.pk)
        business = voucher.business
        if voucher.is_deleted:
            raise ValidationError("Deleted vouchers cannot be edited.")

        # both the old and the new date must sit in an open year
        open_financial_year(business, voucher.date)
        new_date = date or voucher.date
        year = open_financial_year(business, new_date)
        if year.pk != voucher.financial_year_id:
            raise ValidationError(
                {"date": "A voucher cannot be moved to another financial year."})

        lines, total = normalize_items(business, items)
        if party is not _UNSET:
            voucher.party = _check_party(business, party)

        _release_reconciliation_links(voucher)
        before = {"date": str(voucher.date), "total_amount": str(voucher.total_amount)}

        # journal entries go with their items (on_delete=CASCADE)
        VoucherItem.objects.filter(voucher=voucher).delete()

        voucher.date = new_date
        if narration is not None:
            voucher.narration = narration
        if reference is not None:
            voucher.reference = reference
        voucher.total_amount = total
        voucher.updated_by = user
        voucher.save()
        _write_items(voucher, lines)

        log_action(
            action="update",
            instance=voucher,
            user=user,
            changes={"before": before,
                     "after": {"date": str(new_date), "total_amount": str(total)}},
        )
    logger.info("Voucher %s updated", voucher.voucher_number)
    return voucher


# ----------------------------
# Delete
# ----------------------------
def delete_voucher(voucher, user=None):
    """
    Soft delete: the voucher, its lines and journal rows stay in place,
    every balance and report skips them from now on.
    """
    with transaction.atomic():
        voucher = Voucher.objects.select_for_update().get(pk=voucher.pk)
        if voucher.is_deleted:
            return voucher
        open_financial_year(voucher.business, voucher.date)
        _release_reconciliation_links(voucher)

        voucher.is_deleted = True
        voucher.deleted_at = timezone.now()
        voucher.updated_by = user
        voucher.save(update_fields=["is_deleted", "deleted_at", "updated_by", "updated_at"])
        voucher.items.update(is_deleted=True)

        log_action(action="delete", instance=voucher, user=user,
                   changes={"voucher_number": voucher.voucher_number})
    logger.info("Voucher %s deleted", voucher.voucher_number)
    return voucher


# ----------------------------
# Post / unpost
# ----------------------------
def _set_posted(voucher, posted, user):
    with transaction.atomic():
        voucher = Voucher.objects.select_for_update().get(pk=voucher.pk)
        if voucher.is_deleted:
            raise ValidationError("Deleted vouchers cannot be posted or unposted.")
        if voucher.is_posted == posted:
            return voucher
        open_financial_year(voucher.business, voucher.date)
        if not posted:
            # unposted entries leave the books, so they can't stay matched
            _release_reconciliation_links(voucher)
        voucher.is_posted = posted
        voucher.updated_by = user
        voucher.save(update_fields=["is_posted", "updated_by", "updated_at"])
        log_action(action="post" if posted else "unpost", instance=voucher, user=user)
    logger.info("Voucher %s %s", voucher.voucher_number, "posted" if posted else "unposted")
    return voucher


def post_voucher(voucher, user=None):
    return _set_posted(voucher, True, user)


def unpost_voucher(voucher, user=None):
    return _set_posted(voucher, False, user)


# ----------------------------
# Duplicate
# ----------------------------
def duplicate_voucher(voucher, date=None, voucher_number=None, user=None):
    """Post a copy of ``voucher`` dated ``date`` (default: today) with a fresh number."""
    items = [
        {
            "ledger_account": item.ledger_account,
            "cost_center": item.cost_center,
            "debit_amount": item.debit_amount,
            "credit_amount": item.credit_amount,
            "narration": item.narration,
        }
        for item in voucher.items.order_by("sequence")
    ]
    return create_voucher(
        voucher.business,
        voucher.voucher_type,
        date or timezone.localdate(),
        items,
        party=voucher.party,
        narration=voucher.narration,
        reference=voucher.reference,
        voucher_number=voucher_number,
        user=user,
    )


def voucher_detail(voucher):
    """Plain dict view of a voucher with its lines."""
    return {
        "id": voucher.pk,
        "voucher_number": voucher.voucher_number,
        "voucher_type": voucher.voucher_type.code,
        "financial_year": voucher.financial_year.name,
        "date": voucher.date.isoformat(),
        "party": voucher.party_id,
        "narration": voucher.narration,
        "reference": voucher.reference,
        "total_amount": str(voucher.total_amount),
        "is_deleted": voucher.is_deleted,
        "items": [
            {
                "ledger_account": item.ledger_account_id,
                "cost_center": item.cost_center_id,
                "debit_amount": str(item.debit_amount),
                "credit_amount": str(item.credit_amount),
                "narration": item.narration,
                "sequence": item.sequence,
            }
            for item in voucher.items.order_by("sequence")
        ],
    }
