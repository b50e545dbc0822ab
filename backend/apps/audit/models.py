"""Activity log models."""

from django.db import models

from apps.core.models import OrganizationModel


class ActivityLog(OrganizationModel):
    """Append-only record of a state change made by a user or the system."""

    class Action(models.TextChoices):
        """Action types for activity log entries."""

        INVOICE_CREATED = "invoice_created", "Invoice created"
        INVOICE_UPDATED = "invoice_updated", "Draft invoice updated"
        INVOICES_FINALIZED = "invoices_finalized", "Invoices finalized"
        INVOICES_DELETED = "invoices_deleted", "Invoices deleted"
        INVOICES_EMAILED = "invoices_emailed", "Invoices emailed"
        INVOICE_STATUS_UPDATED = "invoice_status_updated", "Invoice status updated"
        INVOICE_VOIDED = "invoice_voided", "Invoice voided"
        INVOICE_PAYMENT_RECORDED = "invoice_payment_recorded", "Invoice payment recorded"
        INVOICES_MARKED_OVERDUE = "invoices_marked_overdue", "Invoices marked overdue"
        INVOICES_GENERATED = "invoices_generated", "Monthly invoices generated"
        PRICING_RULE_CREATED = "pricing_rule_created", "Pricing rule created"
        PRICING_RULE_REVISED = "pricing_rule_revised", "Pricing rule revised"
        PRICING_RULE_DEACTIVATED = "pricing_rule_deactivated", "Pricing rule deactivated"

    action = models.CharField(
        max_length=50,
        choices=Action.choices,
        help_text="The type of action performed",
    )
    entity_type = models.CharField(
        max_length=100,
        help_text="The type of entity that was changed (e.g., 'invoice')",
    )
    entity_ids = models.JSONField(
        default=list,
        help_text="IDs of the entities affected by the action",
    )
    user = models.ForeignKey(
        "organizations.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_logs",
        help_text="The user who performed the action (null for system jobs)",
    )
    details = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(
        auto_now_add=True,
        help_text="When the action occurred",
    )

    class Meta:
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["organization", "timestamp"], name="activity_org_time_idx"),
            models.Index(fields=["entity_type"], name="activity_entity_type_idx"),
            models.Index(fields=["user"], name="activity_user_idx"),
        ]

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_ids} by {self.user or 'system'}"
