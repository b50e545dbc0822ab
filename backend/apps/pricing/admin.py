from django.contrib import admin

from .models import AddOn, PricingRule


@admin.register(PricingRule)
class PricingRuleAdmin(admin.ModelAdmin):
    list_display = [
        "name", "organization", "frequency", "min_dogs", "max_dogs",
        "base_price_cents", "priority", "version", "is_active",
    ]
    list_filter = ["organization", "frequency", "is_active"]
    search_fields = ["name"]
    readonly_fields = ["version", "supersedes"]


@admin.register(AddOn)
class AddOnAdmin(admin.ModelAdmin):
    list_display = ["name", "organization", "price_cents", "is_recurring", "is_active"]
    list_filter = ["organization", "is_active"]
    search_fields = ["name"]
