from decimal import Decimal

from django.db import models

# -----------------------------------------
# Enforce tenant scoping across all models
# that belong to a business
# -----------------------------------------
class TenantQuerySet(models.QuerySet):
    def for_business(self, business):
        return self.filter(business=business)

    def active(self, business):
        return self.filter(
                            business=business, # enforce tenant scoping
                            is_active=True     # only fetch active records
                        )
    # Enables query:
    # Party.objects.active(request.business)


# Attach TenantQuerySet to .objects
class TenantManager(models.Manager.from_queryset(TenantQuerySet)):
    pass


# Soft-deletable rows (ledger accounts, account groups)
class SoftDeleteQuerySet(TenantQuerySet):
    def alive(self):
        return self.filter(is_deleted=False)

    def active(self, business):
        # deleted rows are never "active", even if is_active was left on
        return super().active(business).filter(is_deleted=False)


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    pass


# Vouchers: reports and lookups only see live vouchers
class VoucherQuerySet(TenantQuerySet):
    def live(self):
        return self.filter(is_deleted=False)

    def active(self, business):
        return self.filter(business=business, is_deleted=False)


class VoucherManager(models.Manager.from_queryset(VoucherQuerySet)):
    pass


# Journal feed: every reporting query goes through posted()
class JournalEntryQuerySet(TenantQuerySet):
    def posted(self):
        """Entries of live, posted vouchers (deleted or unposted vouchers drop out)."""
        return self.filter(voucher__is_deleted=False, voucher__is_posted=True)

    def for_account(self, ledger_account):
        return self.filter(ledger_account=ledger_account)

    def totals(self):
        """Sum debit/credit of the queryset, with zeros instead of None."""
        agg = self.aggregate(
            debit=models.Sum("debit_amount"),
            credit=models.Sum("credit_amount"),
        )
        return agg["debit"] or Decimal("0.00"), agg["credit"] or Decimal("0.00")


class JournalEntryManager(models.Manager.from_queryset(JournalEntryQuerySet)):
    pass
