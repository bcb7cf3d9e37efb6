import json
import logging
from functools import wraps

from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils.dateparse import parse_date
from django.views.decorators.http import require_GET, require_POST

from .exceptions import VoucherNumberingConflict
from .models import AccountReconciliation, JournalEntry, LedgerAccount, Voucher
from .services import reconciliation as reconciliation_service
from .services.reports import general_ledger, trial_balance
from .services.vouchers import (create_voucher, delete_voucher, update_voucher,
                                voucher_detail)

logger = logging.getLogger(__name__)


# ---------- Helpers ----------
def business_required(view):
    """Reject requests without a current business (see CurrentBusinessMiddleware)."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if getattr(request, "business", None) is None:
            return JsonResponse({"ok": False, "error": "No active business."}, status=403)
        try:
            return view(request, *args, **kwargs)
        except VoucherNumberingConflict as e:
            # transient: the client may resubmit as-is
            return JsonResponse({"ok": False, "error": str(e)}, status=409)
        except ValidationError as e:
            return JsonResponse({"ok": False, "errors": _errors(e)}, status=400)
    return wrapper


def _errors(exc):
    if hasattr(exc, "error_dict"):
        return exc.message_dict
    return {"__all__": exc.messages}


def _body(request):
    try:
        data = json.loads(request.body or b"{}")
    except ValueError:
        raise ValidationError("Request body is not valid JSON.")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def _date(value, field="date", required=True):
    if not value:
        if required:
            raise ValidationError({field: "This field is required."})
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError({field: f"'{value}' is not a valid date (YYYY-MM-DD)."})
    return parsed


def _stringify(data):
    """Decimals and dates as strings so JsonResponse can encode reports."""
    return json.loads(json.dumps(data, default=str))


def _user(request):
    return request.user if request.user.is_authenticated else None


# ---------- Vouchers ----------
@require_POST
@business_required
def voucher_create_view(request):
    data = _body(request)
    voucher = create_voucher(
        request.business,
        data.get("voucher_type"),
        _date(data.get("date")),
        data.get("items") or [],
        party=data.get("party"),
        narration=data.get("narration", ""),
        reference=data.get("reference", ""),
        voucher_number=data.get("voucher_number") or None,
        user=_user(request),
    )
    return JsonResponse({"ok": True, "voucher": voucher_detail(voucher)}, status=201)


@require_GET
@business_required
def voucher_detail_view(request, voucher_id):
    # tenant scoping: another business's voucher is a 404
    voucher = get_object_or_404(Voucher.objects.active(request.business), pk=voucher_id)
    return JsonResponse({"ok": True, "voucher": voucher_detail(voucher)})


@require_POST
@business_required
def voucher_update_view(request, voucher_id):
    voucher = get_object_or_404(Voucher.objects.active(request.business), pk=voucher_id)
    data = _body(request)
    kwargs = {}
    if "party" in data:
        kwargs["party"] = data["party"]
    voucher = update_voucher(
        voucher,
        data.get("items") or [],
        date=_date(data.get("date"), required=False),
        narration=data.get("narration"),
        reference=data.get("reference"),
        user=_user(request),
        **kwargs,
    )
    return JsonResponse({"ok": True, "voucher": voucher_detail(voucher)})


@require_POST
@business_required
def voucher_delete_view(request, voucher_id):
    voucher = get_object_or_404(Voucher.objects.active(request.business), pk=voucher_id)
    delete_voucher(voucher, user=_user(request))
    return JsonResponse({"ok": True})


# ---------- Reconciliation ----------
def _reconciliation(request, reconciliation_id):
    return get_object_or_404(
        AccountReconciliation.objects.for_business(request.business), pk=reconciliation_id)


def _entry(request, data):
    return get_object_or_404(
        JournalEntry.objects.for_business(request.business), pk=data.get("journal_entry"))


@require_POST
@business_required
def reconciliation_add_item_view(request, reconciliation_id):
    rec = _reconciliation(request, reconciliation_id)
    rec = reconciliation_service.add_item(rec, _entry(request, _body(request)))
    return JsonResponse({"ok": True, "reconciliation": reconciliation_service.reconciliation_summary(rec)})


@require_POST
@business_required
def reconciliation_remove_item_view(request, reconciliation_id):
    rec = _reconciliation(request, reconciliation_id)
    rec = reconciliation_service.remove_item(rec, _entry(request, _body(request)))
    return JsonResponse({"ok": True, "reconciliation": reconciliation_service.reconciliation_summary(rec)})


@require_POST
@business_required
def reconciliation_complete_view(request, reconciliation_id):
    rec = _reconciliation(request, reconciliation_id)
    override = bool(_body(request).get("override", False))
    rec = reconciliation_service.complete(rec, user=_user(request), override=override)
    return JsonResponse({"ok": True, "reconciliation": reconciliation_service.reconciliation_summary(rec)})


@require_POST
@business_required
def reconciliation_reopen_view(request, reconciliation_id):
    rec = _reconciliation(request, reconciliation_id)
    rec = reconciliation_service.reopen(rec, user=_user(request))
    return JsonResponse({"ok": True, "reconciliation": reconciliation_service.reconciliation_summary(rec)})


# ---------- Reports ----------
@require_GET
@business_required
def trial_balance_view(request):
    as_of = _date(request.GET.get("as_of"), field="as_of", required=False)
    report = trial_balance(request.business, as_of=as_of)
    return JsonResponse({"ok": True, "trial_balance": _stringify(report)})


@require_GET
@business_required
def general_ledger_view(request, account_id):
    account = get_object_or_404(
        LedgerAccount.objects.for_business(request.business), pk=account_id)
    report = general_ledger(
        account,
        date_from=_date(request.GET.get("from"), field="from", required=False),
        date_to=_date(request.GET.get("to"), field="to", required=False),
    )
    return JsonResponse({"ok": True, "ledger": _stringify(report)})
