"""Pricing models."""
from django.db import models

from apps.core.models import OrganizationModel
from apps.pricing.frequencies import Frequency

# Stored ``max_dogs`` value meaning "no upper bound"
UNBOUNDED_MAX_DOGS = 99
DEFAULT_MIN_DOGS = 1


class PricingRule(OrganizationModel):
    """A per-visit price for a dog-count band at one frequency.

    Rules are immutable per version. Changing a price deactivates the current
    row and creates a new one with ``version + 1`` pointing back at it.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    frequency = models.CharField(max_length=30, choices=Frequency.choices)
    min_dogs = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Lowest dog count in the band (empty means 1)",
    )
    max_dogs = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=f"Highest dog count in the band ({UNBOUNDED_MAX_DOGS} or empty means unbounded)",
    )
    base_price_cents = models.IntegerField()
    per_unit_overage_cents = models.IntegerField(
        default=0,
        help_text="Charged per dog above min_dogs on open-ended bands",
    )
    initial_cleanup_cents = models.IntegerField(default=0)
    zip_codes = models.JSONField(default=list, blank=True)
    priority = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    version = models.PositiveIntegerField(default=1)
    supersedes = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="revisions",
    )

    class Meta:
        ordering = ["-priority", "created_at", "id"]
        indexes = [
            models.Index(fields=["organization", "frequency", "is_active"], name="pricing_rule_lookup_idx"),
        ]

    def __str__(self):
        return f"{self.name} v{self.version}"

    @property
    def effective_min_dogs(self) -> int:
        return self.min_dogs if self.min_dogs is not None else DEFAULT_MIN_DOGS

    @property
    def effective_max_dogs(self) -> int:
        return self.max_dogs if self.max_dogs is not None else UNBOUNDED_MAX_DOGS

    @property
    def is_open_ended(self) -> bool:
        return self.effective_max_dogs >= UNBOUNDED_MAX_DOGS

    def covers(self, dog_count: int) -> bool:
        return self.effective_min_dogs <= dog_count <= self.effective_max_dogs


class AddOn(OrganizationModel):
    """A one-off or recurring extra from the organization's catalogue."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price_cents = models.IntegerField(default=0)
    is_recurring = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
