import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
        ("clients", "0001_initial"),
        ("subscriptions", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("invoice_number", models.CharField(max_length=20)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("OPEN", "Open"),
                            ("PAID", "Paid"),
                            ("OVERDUE", "Overdue"),
                            ("VOID", "Void"),
                            ("UNCOLLECTIBLE", "Uncollectible"),
                        ],
                        default="DRAFT",
                        max_length=20,
                    ),
                ),
                ("subtotal_cents", models.IntegerField(default=0)),
                ("discount_cents", models.IntegerField(default=0)),
                ("tax_cents", models.IntegerField(default=0)),
                ("total_cents", models.IntegerField(default=0)),
                ("amount_paid_cents", models.IntegerField(default=0)),
                ("amount_due_cents", models.IntegerField(default=0)),
                ("tip_cents", models.IntegerField(default=0)),
                (
                    "billing_interval",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("DAILY", "Daily"),
                            ("WEEKLY", "Weekly"),
                            ("BIWEEKLY", "Biweekly"),
                            ("MONTHLY", "Monthly"),
                        ],
                        max_length=10,
                    ),
                ),
                (
                    "billing_option",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("PREPAID_FIXED", "Prepaid (fixed)"),
                            ("PREPAID_VARIABLE", "Prepaid (variable)"),
                            ("POSTPAID", "Postpaid"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("CARD", "Card"),
                            ("ACH", "ACH"),
                            ("CHECK", "Check"),
                            ("CASH", "Cash"),
                            ("OTHER", "Other"),
                        ],
                        max_length=10,
                    ),
                ),
                (
                    "billing_period",
                    models.DateField(
                        blank=True,
                        help_text="First day of the billed month (recurring invoices only)",
                        null=True,
                    ),
                ),
                ("due_date", models.DateField(blank=True, null=True)),
                ("finalized_at", models.DateTimeField(blank=True, null=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("voided_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="clients.client",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="%(class)s_set",
                        to="organizations.organization",
                    ),
                ),
                (
                    "subscription",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="invoices",
                        to="subscriptions.subscription",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["organization", "status"], name="invoice_org_status_idx"),
                    models.Index(fields=["organization", "created_at"], name="invoice_org_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("organization", "invoice_number"),
                        name="unique_invoice_number_per_organization",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("subscription__isnull", False)),
                        fields=("client", "billing_interval", "billing_period"),
                        name="unique_recurring_invoice_per_period",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("description", models.CharField(max_length=500)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("unit_price_cents", models.IntegerField(default=0)),
                ("total_cents", models.IntegerField(default=0)),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="invoices.invoice",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="%(class)s_set",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "ordering": ["invoice", "id"],
            },
        ),
    ]
