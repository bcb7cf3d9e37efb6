from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.text import slugify
from ..managers import TenantManager


# ---------- Tenant / Business ----------
class Business(models.Model):

    """Tenant: every ledger row belongs to exactly one business"""
    name = models.CharField(max_length=200)

    slug = models.SlugField(  # A URL-friendly identifier
        max_length=80, unique=True  # no two businesses can share a slug
    )

    # Link to the user who created / administers the business
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="owned_businesses",
    )

    # Reporting currency; amounts are stored in this currency only
    currency_code = models.CharField(max_length=10, default="USD")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "businesses"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)[:80] or "business"
        return super().save(*args, **kwargs)


# ---------- Custom User ----------
class User(AbstractUser):
    """
    Before you run your very first migrate,
    keep 'AUTH_USER_MODEL = "books_core.User"' in settings.py
    to avoid migration conflicts
    """
    # Business the user lands in when none is selected in the session
    default_business = models.ForeignKey(
        "Business",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,  # deleting a business keeps the user
        related_name="default_users",
    )

    class Meta:
        indexes = [models.Index(fields=["default_business"])]

    def __str__(self):
        return self.get_full_name() or self.username


# ---------- BusinessMembership ----------
class BusinessMembership(models.Model):  # join model between User and Business

    ROLE_CHOICES = [
        ("owner", "Owner"),
        ("admin", "Admin"),
        ("accountant", "Accountant"),  # can post vouchers and reconcile
        ("viewer", "Viewer"),          # read-only access
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    business = models.ForeignKey(
        "Business", on_delete=models.CASCADE, related_name="memberships"
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="viewer")

    # Suspend access without deleting the membership
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "business"], name="uq_user_business_membership"
            ),
        ]
        indexes = [
            models.Index(fields=["business", "user"]),
        ]

    def __str__(self):
        return f"{self.user} @ {self.business} ({self.role})"

    def clean(self):
        """
        A user's default business must be one of their memberships.
        The membership being validated counts, so the first membership
        for the default business can be saved.
        """
        default_pk = getattr(self.user, "default_business_id", None)
        if not default_pk:
            return
        others = self.user.memberships.all()
        if self.pk:
            others = others.exclude(pk=self.pk)
        existing = set(others.values_list("business_id", flat=True))
        if default_pk not in existing and default_pk != self.business_id:
            raise ValidationError(
                f"Default business {self.user.default_business} must be a user's membership."
            )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
