from django.contrib import admin

from .models import Subscription


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = [
        "client", "organization", "frequency", "price_per_visit_cents",
        "status", "billing_interval", "billing_option",
    ]
    list_filter = ["organization", "status", "frequency", "billing_interval"]
    search_fields = ["client__first_name", "client__last_name", "client__company_name"]
    raw_id_fields = ["client", "location", "pricing_rule"]

    def has_delete_permission(self, request, obj=None):
        return False
