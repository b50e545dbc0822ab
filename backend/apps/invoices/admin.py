from django.contrib import admin

from .models import Invoice, InvoiceItem


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ["total_cents"]


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = [
        "invoice_number", "client", "organization", "status",
        "total_cents", "amount_due_cents", "due_date", "created_at",
    ]
    list_filter = ["organization", "status", "billing_interval"]
    search_fields = ["invoice_number", "client__first_name", "client__last_name", "client__email"]
    readonly_fields = ["finalized_at", "paid_at", "voided_at"]
    raw_id_fields = ["client", "subscription"]
    inlines = [InvoiceItemInline]
