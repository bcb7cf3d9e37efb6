from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .business import Business


# ---------- Financial year ----------
class FinancialYear(models.Model):  # Every voucher is filed under exactly one year

    # Every business keeps its own independent calendar of years
    business = models.ForeignKey(
        Business,
        on_delete=models.CASCADE,
        related_name="financial_years",
    )

    name = models.CharField(max_length=50)  # Example: "FY 2024-25"

    # Inclusive date range covered by the year
    start_date = models.DateField()
    end_date = models.DateField()

    # The year new vouchers default to (one per business)
    is_current = models.BooleanField(default=False)

    is_locked = models.BooleanField(default=False)
    """
        When is_locked=True:
            No voucher dated inside the year can be created, edited or deleted.
            Finalized reports stay reproducible.
    """

    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["business", "start_date"]),
            models.Index(fields=["business", "is_locked"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["business", "name"], name="uq_business_financial_year_name"
            ),
            # at most one current year per business
            models.UniqueConstraint(
                fields=["business"],
                condition=models.Q(is_current=True),
                name="uq_business_current_financial_year",
            ),
            models.CheckConstraint(
                condition=models.Q(start_date__lt=models.F("end_date")),
                name="financial_year_start_before_end",
            ),
        ]
        ordering = ("business", "start_date")

    def __str__(self):
        return f"{self.business.slug} {self.name}"  # Example: "acme FY 2024-25"

    def contains(self, date):
        return self.start_date <= date <= self.end_date

    def overlapping(self):
        """Other years of the same business whose range intersects this one."""
        qs = FinancialYear.objects.filter(
            business_id=self.business_id,
            start_date__lte=self.end_date,
            end_date__gte=self.start_date,
        )
        if self.pk:
            qs = qs.exclude(pk=self.pk)
        return qs

    def clean(self):
        if self.start_date and self.end_date:
            if self.start_date >= self.end_date:
                raise ValidationError({"end_date": "end_date must be after start_date"})
            clash = self.overlapping().first()
            if clash is not None:
                raise ValidationError(
                    {"start_date": f"Financial year overlaps {clash.name} "
                                   f"({clash.start_date} to {clash.end_date})."}
                )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
