import django.db.models.deletion
from django.db import migrations, models

FREQUENCY_CHOICES = [
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
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PricingRule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("frequency", models.CharField(choices=FREQUENCY_CHOICES, max_length=30)),
                (
                    "min_dogs",
                    models.PositiveIntegerField(
                        blank=True, help_text="Lowest dog count in the band (empty means 1)", null=True
                    ),
                ),
                (
                    "max_dogs",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Highest dog count in the band (99 or empty means unbounded)",
                        null=True,
                    ),
                ),
                ("base_price_cents", models.IntegerField()),
                (
                    "per_unit_overage_cents",
                    models.IntegerField(default=0, help_text="Charged per dog above min_dogs on open-ended bands"),
                ),
                ("initial_cleanup_cents", models.IntegerField(default=0)),
                ("zip_codes", models.JSONField(blank=True, default=list)),
                ("priority", models.IntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("version", models.PositiveIntegerField(default=1)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="%(class)s_set",
                        to="organizations.organization",
                    ),
                ),
                (
                    "supersedes",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="revisions",
                        to="pricing.pricingrule",
                    ),
                ),
            ],
            options={
                "ordering": ["-priority", "created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["organization", "frequency", "is_active"], name="pricing_rule_lookup_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AddOn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("price_cents", models.IntegerField(default=0)),
                ("is_recurring", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
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
                "ordering": ["name"],
            },
        ),
    ]
