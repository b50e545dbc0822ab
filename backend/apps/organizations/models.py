"""Organization and User models for multi-organization support."""
from functools import cached_property

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models

from apps.core.models import TimestampedModel


class Organization(TimestampedModel):
    """A scooping business using the billing system."""

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=100, unique=True)
    currency = models.CharField(max_length=3, default="USD")
    settings = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def residential_cross_sells(self) -> dict:
        """Cross-sell configuration offered on public quotes.

        Shape: ``{"placement": str, "items": [{"id", "name", "description",
        "price_per_unit_cents", "unit"}]}``. Placement defaults to BOTTOM.
        """
        config = (self.settings or {}).get("residential_cross_sells") or {}
        return {
            "placement": config.get("placement") or "BOTTOM",
            "items": list(config.get("items") or []),
        }


class Role(TimestampedModel):
    """Roles for permission management within an organization."""

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="roles",
    )
    name = models.CharField(max_length=100)
    permissions = models.JSONField(default=dict, blank=True)
    is_default = models.BooleanField(default=False)
    is_system = models.BooleanField(default=False)

    class Meta:
        ordering = ["organization", "name"]
        unique_together = ["organization", "name"]

    def __str__(self):
        return f"{self.organization.name} - {self.name}"


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("The Email field must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Staff user belonging to an organization."""

    username = None
    email = models.EmailField(unique=True)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="users",
        null=True,
        blank=True,
    )
    roles = models.ManyToManyField(
        Role,
        blank=True,
        related_name="users",
    )
    is_admin = models.BooleanField(default=False)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        ordering = ["email"]

    def __str__(self):
        return self.email

    @cached_property
    def effective_permissions(self) -> set[str]:
        """Compute the union of all permissions from assigned roles."""
        perms = set()
        for role in self.roles.all():
            for key, granted in (role.permissions or {}).items():
                if granted:
                    perms.add(key)
        return perms

    def has_perm_check(self, resource: str, action: str) -> bool:
        """Check if user has a specific permission via their roles."""
        if self.is_admin:
            return True
        return f"{resource}.{action}" in self.effective_permissions
