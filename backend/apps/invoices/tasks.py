"""Celery tasks for invoice processing."""

import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

from apps.core.money import format_cents
from apps.invoices.generation import MonthlyInvoiceGenerator
from apps.invoices.models import Invoice
from apps.organizations.models import Organization

logger = logging.getLogger(__name__)


@shared_task(acks_late=True)
def generate_monthly_invoices_task() -> dict:
    """Create this month's recurring DRAFT invoices for every organization.

    Safe to run more than once per month; already-invoiced clients are skipped.
    """
    report = MonthlyInvoiceGenerator().run()
    return report.as_dict()


@shared_task(acks_late=True)
def mark_overdue_invoices_task() -> int:
    """Move OPEN invoices past their due date to OVERDUE."""
    from apps.invoices.services import InvoiceLifecycleService

    total = 0
    for organization in Organization.objects.filter(is_active=True).order_by("id"):
        total += InvoiceLifecycleService(organization).mark_overdue()
    logger.info("Marked %d invoices overdue", total)
    return total


@shared_task(
    bind=True,
    autoretry_for=(OSError,),
    retry_backoff=30,
    retry_kwargs={"max_retries": 3},
)
def send_invoice_email_task(self, invoice_id: int) -> bool:
    """
    Email an invoice to its client.

    Args:
        invoice_id: ID of the Invoice to send

    Returns:
        True if the email was handed to the mail backend, False otherwise
    """
    try:
        invoice = (
            Invoice.objects.select_related("client", "organization")
            .prefetch_related("items")
            .get(id=invoice_id)
        )
    except Invoice.DoesNotExist:
        logger.error("Invoice %s not found for email", invoice_id)
        return False

    if not invoice.client.email:
        logger.warning("Client %s has no email address, invoice %s not sent", invoice.client_id, invoice_id)
        return False

    body = render_to_string(
        "invoices/invoice_email.txt",
        {
            "invoice": invoice,
            "organization": invoice.organization,
            "client_name": invoice.client.display_name,
            "items": [
                {
                    "description": item.description,
                    "quantity": item.quantity,
                    "total": format_cents(item.total_cents),
                }
                for item in invoice.items.all()
            ],
            "total": format_cents(invoice.total_cents),
            "amount_due": format_cents(invoice.amount_due_cents),
        },
    )
    send_mail(
        subject=f"Invoice {invoice.invoice_number} from {invoice.organization.name}",
        message=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[invoice.client.email],
    )
    logger.info("Sent invoice %s to %s", invoice.invoice_number, invoice.client.email)
    return True
