import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
        ("clients", "0001_initial"),
        ("pricing", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Subscription",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "frequency",
                    models.CharField(
                        choices=[
                            ("SEVEN_TIMES_A_WEEK", "7x per week"),
                            ("SIX_TIMES_A_WEEK", "6x per week"),
                            ("FIVE_TIMES_A_WEEK", "5x per week"),
                            ("FOUR_TIMES_A_WEEK", "4x per week"),
                            ("THREE_TIMES_A_WEEK", "3x per week"),
                            ("TWICE_WEEKLY", "Twice weekly"),
                            ("WEEKLY", "Weekly"),
                            ("BIWEEKLY", "Every two weeks"),
                            ("TWICE_PER_MONTH", "Twice per month"),
                            ("EVERY_THREE_WEEKS", "Every three weeks"),
                            ("EVERY_FOUR_WEEKS", "Every four weeks"),
                            ("MONTHLY", "Monthly"),
                            ("ONETIME", "One time"),
                        ],
                        default="WEEKLY",
                        max_length=30,
                    ),
                ),
                ("price_per_visit_cents", models.IntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("ACTIVE", "Active"),
                            ("PAUSED", "Paused"),
                            ("PAST_DUE", "Past due"),
                            ("PENDING_CANCEL", "Pending cancel"),
                            ("CANCELED", "Canceled"),
                        ],
                        default="ACTIVE",
                        max_length=20,
                    ),
                ),
                (
                    "billing_interval",
                    models.CharField(
                        choices=[
                            ("DAILY", "Daily"),
                            ("WEEKLY", "Weekly"),
                            ("BIWEEKLY", "Biweekly"),
                            ("MONTHLY", "Monthly"),
                        ],
                        default="MONTHLY",
                        max_length=10,
                    ),
                ),
                (
                    "billing_option",
                    models.CharField(
                        choices=[
                            ("PREPAID_FIXED", "Prepaid (fixed)"),
                            ("PREPAID_VARIABLE", "Prepaid (variable)"),
                            ("POSTPAID", "Postpaid"),
                        ],
                        default="PREPAID_FIXED",
                        max_length=20,
                    ),
                ),
                ("canceled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="subscriptions",
                        to="clients.client",
                    ),
                ),
                (
                    "location",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="subscriptions",
                        to="clients.location",
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
                    "pricing_rule",
                    models.ForeignKey(
                        blank=True,
                        help_text="Rule version the price snapshot was taken from",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="subscriptions",
                        to="pricing.pricingrule",
                    ),
                ),
            ],
            options={
                "ordering": ["client", "created_at", "id"],
            },
        ),
    ]
