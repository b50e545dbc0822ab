import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ActivityLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("invoice_created", "Invoice created"),
                            ("invoice_updated", "Draft invoice updated"),
                            ("invoices_finalized", "Invoices finalized"),
                            ("invoices_deleted", "Invoices deleted"),
                            ("invoices_emailed", "Invoices emailed"),
                            ("invoice_status_updated", "Invoice status updated"),
                            ("invoice_voided", "Invoice voided"),
                            ("invoice_payment_recorded", "Invoice payment recorded"),
                            ("invoices_marked_overdue", "Invoices marked overdue"),
                            ("invoices_generated", "Monthly invoices generated"),
                            ("pricing_rule_created", "Pricing rule created"),
                            ("pricing_rule_revised", "Pricing rule revised"),
                            ("pricing_rule_deactivated", "Pricing rule deactivated"),
                        ],
                        help_text="The type of action performed",
                        max_length=50,
                    ),
                ),
                (
                    "entity_type",
                    models.CharField(
                        help_text="The type of entity that was changed (e.g., 'invoice')",
                        max_length=100,
                    ),
                ),
                (
                    "entity_ids",
                    models.JSONField(default=list, help_text="IDs of the entities affected by the action"),
                ),
                ("details", models.JSONField(blank=True, default=dict)),
                ("timestamp", models.DateTimeField(auto_now_add=True, help_text="When the action occurred")),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="%(class)s_set",
                        to="organizations.organization",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        help_text="The user who performed the action (null for system jobs)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activity_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
                "indexes": [
                    models.Index(fields=["organization", "timestamp"], name="activity_org_time_idx"),
                    models.Index(fields=["entity_type"], name="activity_entity_type_idx"),
                    models.Index(fields=["user"], name="activity_user_idx"),
                ],
            },
        ),
    ]
