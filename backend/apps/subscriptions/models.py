"""Subscription models."""
from django.db import models

from apps.core.models import OrganizationModel
from apps.pricing.frequencies import Frequency, to_monthly_cents


class BillingInterval(models.TextChoices):
    DAILY = "DAILY", "Daily"
    WEEKLY = "WEEKLY", "Weekly"
    BIWEEKLY = "BIWEEKLY", "Biweekly"
    MONTHLY = "MONTHLY", "Monthly"


class BillingOption(models.TextChoices):
    PREPAID_FIXED = "PREPAID_FIXED", "Prepaid (fixed)"
    PREPAID_VARIABLE = "PREPAID_VARIABLE", "Prepaid (variable)"
    POSTPAID = "POSTPAID", "Postpaid"


class Subscription(OrganizationModel):
    """Recurring service for one client at one location.

    ``price_per_visit_cents`` is a snapshot taken at signup or at the last
    price change. Billing always uses the snapshot; later pricing rule
    revisions do not reach existing subscriptions.
    Subscriptions are never deleted, only moved between statuses.
    """

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        PAUSED = "PAUSED", "Paused"
        PAST_DUE = "PAST_DUE", "Past due"
        PENDING_CANCEL = "PENDING_CANCEL", "Pending cancel"
        CANCELED = "CANCELED", "Canceled"

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.PROTECT,
        related_name="subscriptions",
    )
    location = models.ForeignKey(
        "clients.Location",
        on_delete=models.PROTECT,
        related_name="subscriptions",
    )
    frequency = models.CharField(
        max_length=30,
        choices=Frequency.choices,
        default=Frequency.WEEKLY,
    )
    price_per_visit_cents = models.IntegerField(default=0)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    billing_interval = models.CharField(
        max_length=10,
        choices=BillingInterval.choices,
        default=BillingInterval.MONTHLY,
    )
    billing_option = models.CharField(
        max_length=20,
        choices=BillingOption.choices,
        default=BillingOption.PREPAID_FIXED,
    )
    pricing_rule = models.ForeignKey(
        "pricing.PricingRule",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="subscriptions",
        help_text="Rule version the price snapshot was taken from",
    )
    canceled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["client", "created_at", "id"]

    def __str__(self):
        return f"{self.client} - {self.get_frequency_display()}"

    @property
    def monthly_price_cents(self) -> int:
        """Monthly amount billed for this subscription."""
        return to_monthly_cents(self.price_per_visit_cents, self.frequency)
