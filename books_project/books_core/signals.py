from django.core.exceptions import ValidationError
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .models import AccountReconciliation, Voucher

# Ledger accounts and financial years in use are already guarded by
# on_delete=PROTECT (ProtectedError); these cover what PROTECT can't see.

"""Hard deleting a voucher of a locked year would rewrite closed books."""


@receiver(pre_delete, sender=Voucher)
def prevent_delete_voucher_in_locked_year(sender, instance, **kwargs):
    if instance.financial_year.is_locked:
        raise ValidationError(
            f"Cannot delete voucher {instance.voucher_number}: "
            f"financial year {instance.financial_year} is locked.")


"""A completed reconciliation must be reopened before it can go."""


@receiver(pre_delete, sender=AccountReconciliation)
def prevent_delete_completed_reconciliation(sender, instance, **kwargs):
    if instance.is_completed:
        raise ValidationError("Cannot delete a completed reconciliation.")
