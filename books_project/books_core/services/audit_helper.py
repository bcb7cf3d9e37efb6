import logging
from typing import Optional

from ..models import AuditLog, Business

logger = logging.getLogger(__name__)


def _owning_business(instance) -> Optional[Business]:
    # reconciliation rows and voucher lines reach the business through their parent
    for path in ("business", "ledger_account.business", "voucher.business"):
        target = instance
        for attr in path.split("."):
            target = getattr(target, attr, None)
            if target is None:
                break
        if target is not None:
            return target
    return None


def log_action(*, action: str, instance, user=None,
               business: Optional[Business] = None, changes: Optional[dict] = None) -> AuditLog:
    """
    Append one row to the audit trail for ``action`` on ``instance``.

    Call it inside the transaction of the change: if that change rolls
    back, so does its audit row.
    """
    business = business or _owning_business(instance)
    entry = AuditLog.objects.create(
        business=business,
        user=user,
        action=action,
        object_type=AuditLog.object_type_for(instance),
        object_id=str(instance.pk),
        changes=changes,
    )
    logger.debug("audit %s %s(%s) by %s", action, entry.object_type, entry.object_id,
                 getattr(user, "pk", None))
    return entry
