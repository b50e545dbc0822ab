"""Invoice models."""
from django.db import models
from django.db.models import Q

from apps.core.models import OrganizationModel
from apps.subscriptions.models import BillingInterval, BillingOption


class Invoice(OrganizationModel):
    """A client invoice. Recurring invoices carry the subscription they bill.

    Status moves along a fixed set of transitions:

        DRAFT -> OPEN, VOID (or deleted)
        OPEN -> PAID, OVERDUE, VOID, UNCOLLECTIBLE
        OVERDUE -> PAID, VOID, UNCOLLECTIBLE

    PAID, VOID and UNCOLLECTIBLE are terminal.
    """

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        OPEN = "OPEN", "Open"
        PAID = "PAID", "Paid"
        OVERDUE = "OVERDUE", "Overdue"
        VOID = "VOID", "Void"
        UNCOLLECTIBLE = "UNCOLLECTIBLE", "Uncollectible"

    class PaymentMethod(models.TextChoices):
        CARD = "CARD", "Card"
        ACH = "ACH", "ACH"
        CHECK = "CHECK", "Check"
        CASH = "CASH", "Cash"
        OTHER = "OTHER", "Other"

    ALLOWED_TRANSITIONS = {
        Status.DRAFT: {Status.OPEN, Status.VOID},
        Status.OPEN: {Status.PAID, Status.OVERDUE, Status.VOID, Status.UNCOLLECTIBLE},
        Status.OVERDUE: {Status.PAID, Status.VOID, Status.UNCOLLECTIBLE},
        Status.PAID: set(),
        Status.VOID: set(),
        Status.UNCOLLECTIBLE: set(),
    }

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    subscription = models.ForeignKey(
        "subscriptions.Subscription",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices",
    )
    invoice_number = models.CharField(max_length=20)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
    )

    subtotal_cents = models.IntegerField(default=0)
    discount_cents = models.IntegerField(default=0)
    tax_cents = models.IntegerField(default=0)
    total_cents = models.IntegerField(default=0)
    amount_paid_cents = models.IntegerField(default=0)
    amount_due_cents = models.IntegerField(default=0)
    tip_cents = models.IntegerField(default=0)

    billing_interval = models.CharField(
        max_length=10,
        choices=BillingInterval.choices,
        blank=True,
    )
    billing_option = models.CharField(
        max_length=20,
        choices=BillingOption.choices,
        blank=True,
    )
    payment_method = models.CharField(
        max_length=10,
        choices=PaymentMethod.choices,
        blank=True,
    )
    billing_period = models.DateField(
        null=True,
        blank=True,
        help_text="First day of the billed month (recurring invoices only)",
    )
    due_date = models.DateField(null=True, blank=True)
    finalized_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    voided_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "invoice_number"],
                name="unique_invoice_number_per_organization",
            ),
            models.UniqueConstraint(
                fields=["client", "billing_interval", "billing_period"],
                condition=Q(subscription__isnull=False),
                name="unique_recurring_invoice_per_period",
            ),
        ]
        indexes = [
            models.Index(fields=["organization", "status"], name="invoice_org_status_idx"),
            models.Index(fields=["organization", "created_at"], name="invoice_org_created_idx"),
        ]

    def __str__(self):
        return f"{self.invoice_number} ({self.get_status_display()})"

    @property
    def is_recurring(self) -> bool:
        return self.subscription_id is not None

    def can_transition_to(self, status: str) -> bool:
        return status in self.ALLOWED_TRANSITIONS.get(self.status, set())


class InvoiceItem(OrganizationModel):
    """A line on an invoice. ``total_cents`` is always quantity x unit price."""

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="items",
    )
    description = models.CharField(max_length=500)
    quantity = models.PositiveIntegerField(default=1)
    unit_price_cents = models.IntegerField(default=0)
    total_cents = models.IntegerField(default=0)

    class Meta:
        ordering = ["invoice", "id"]

    def __str__(self):
        return self.description

    def save(self, *args, **kwargs):
        self.total_cents = self.quantity * self.unit_price_cents
        super().save(*args, **kwargs)
