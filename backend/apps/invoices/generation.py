"""Monthly generation of recurring DRAFT invoices."""
import logging
from datetime import datetime

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from apps.audit.models import ActivityLog
from apps.audit.services import ActivityLogService
from apps.clients.models import Client, ClientCrossSell
from apps.core.money import format_cents
from apps.invoices.models import Invoice, InvoiceItem
from apps.invoices.numbering import InvoiceNumberService
from apps.invoices.types import GenerationReport, LineItemDraft, UnitOutcome, UnitResult
from apps.organizations.models import Organization
from apps.pricing.frequencies import to_monthly_cents
from apps.subscriptions.models import BillingInterval, Subscription

logger = logging.getLogger(__name__)


class AlreadyInvoiced(Exception):
    """A recurring invoice for the client and period already exists."""


def dog_label(count: int) -> str:
    return "1 Dog" if count == 1 else f"{count} Dogs"


class MonthlyInvoiceGenerator:
    """Create one DRAFT invoice per client with active recurring service.

    Safe to re-run: clients that already have a monthly invoice created this
    month are skipped. Failures are contained to the client (or, when the
    organization's subscriptions cannot be read, the organization) they
    happen in and reported; the run carries on with the next one.
    """

    MAX_NUMBER_ATTEMPTS = 3

    def __init__(self, now: datetime | None = None):
        self.now = timezone.localtime(now or timezone.now())
        self.month_start = self.now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        self.month_end = self.month_start + relativedelta(months=1)
        self.billing_period = self.month_start.date()
        # relativedelta clamps the day to the end of short months
        self.due_date = self.billing_period + relativedelta(day=settings.INVOICE_DUE_DAY)

    def run(self, organizations=None) -> GenerationReport:
        """Bill every organization. Only failing to list organizations raises."""
        if organizations is None:
            organizations = Organization.objects.filter(is_active=True).order_by("id")
        organizations = list(organizations)

        logger.info(
            "Generating monthly invoices for %s across %d organizations",
            self.billing_period.strftime("%B %Y"),
            len(organizations),
        )
        report = GenerationReport(billing_period=self.billing_period)
        for organization in organizations:
            try:
                self.generate_for_organization(organization, report)
            except Exception as e:
                logger.exception("Invoice generation failed for organization %s", organization.id)
                report.add(UnitResult(
                    outcome=UnitOutcome.ERROR,
                    organization_id=organization.id,
                    reason=f"Failed to fetch subscriptions - {e}",
                ))

        logger.info(
            "%s (%d errors)", report.message, len(report.errors)
        )
        return report

    def generate_for_organization(self, organization, report: GenerationReport):
        subscriptions = (
            Subscription.objects.filter(
                organization=organization,
                status=Subscription.Status.ACTIVE,
                client__status=Client.Status.ACTIVE,
            )
            .select_related("client")
            .order_by("client_id", "created_at", "id")
        )

        by_client: dict[int, list[Subscription]] = {}
        for subscription in subscriptions:
            by_client.setdefault(subscription.client_id, []).append(subscription)

        created_ids = []
        for client_subscriptions in by_client.values():
            result = self.bill_client(organization, client_subscriptions[0].client, client_subscriptions)
            report.add(result)
            if result.outcome == UnitOutcome.CREATED:
                created_ids.append(result.invoice_id)

        if created_ids:
            ActivityLogService.record(
                organization,
                ActivityLog.Action.INVOICES_GENERATED,
                "invoice",
                created_ids,
                details={"billing_period": self.billing_period.isoformat()},
            )

    def bill_client(self, organization, client, subscriptions) -> UnitResult:
        """Invoice one client. Never raises."""
        base = {"organization_id": organization.id, "client_id": client.id}
        try:
            if self.already_invoiced(organization, client):
                logger.debug("Client %s already invoiced for %s", client.id, self.billing_period)
                return UnitResult(outcome=UnitOutcome.SKIPPED, reason="already invoiced", **base)

            items = self.build_line_items(client, subscriptions)
            if not items:
                return UnitResult(outcome=UnitOutcome.SKIPPED, reason="no billable items", **base)

            invoice = self.create_invoice(organization, client, subscriptions[0], items)
        except AlreadyInvoiced:
            return UnitResult(outcome=UnitOutcome.SKIPPED, reason="already invoiced", **base)
        except Exception as e:
            logger.exception("Failed to create invoice for client %s", client.id)
            return UnitResult(
                outcome=UnitOutcome.ERROR,
                reason=f"Failed to create invoice - {e}",
                **base,
            )

        logger.info("Created %s for client %s", invoice.invoice_number, client.id)
        return UnitResult(
            outcome=UnitOutcome.CREATED,
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            **base,
        )

    def already_invoiced(self, organization, client) -> bool:
        return Invoice.objects.filter(
            Q(created_at__gte=self.month_start, created_at__lt=self.month_end)
            | Q(billing_period=self.billing_period, subscription__isnull=False),
            organization=organization,
            client=client,
            billing_interval=BillingInterval.MONTHLY,
        ).exists()

    def build_line_items(self, client, subscriptions) -> list[LineItemDraft]:
        """One line per subscription plus one per active cross-sell.

        Subscription lines bill the stored per-visit snapshot, normalized to a
        monthly amount. The dog count only labels the line.
        """
        label = dog_label(client.dogs.filter(is_active=True).count())
        items = [
            LineItemDraft(
                description=(
                    f"{subscription.frequency} - {label} "
                    f"(${format_cents(subscription.price_per_visit_cents)}/visit)"
                ),
                quantity=1,
                unit_price_cents=to_monthly_cents(
                    subscription.price_per_visit_cents, subscription.frequency
                ),
            )
            for subscription in subscriptions
        ]

        cross_sells = client.cross_sells.filter(
            is_active=True, status=ClientCrossSell.Status.ACTIVE
        ).order_by("id")
        items.extend(
            LineItemDraft(
                description=cross_sell.name,
                quantity=cross_sell.quantity or 1,
                unit_price_cents=cross_sell.price_per_unit_cents,
            )
            for cross_sell in cross_sells
        )
        return items

    def create_invoice(self, organization, client, subscription, items: list[LineItemDraft]) -> Invoice:
        """Persist the invoice and its items under a freshly allocated number."""
        subtotal = sum(item.total_cents for item in items)

        def create(invoice_number):
            invoice = Invoice.objects.create(
                organization=organization,
                client=client,
                subscription=subscription,
                invoice_number=invoice_number,
                status=Invoice.Status.DRAFT,
                subtotal_cents=subtotal,
                discount_cents=0,
                tax_cents=0,
                total_cents=subtotal,
                amount_paid_cents=0,
                amount_due_cents=subtotal,
                billing_interval=BillingInterval.MONTHLY,
                billing_option=subscription.billing_option,
                billing_period=self.billing_period,
                due_date=self.due_date,
                notes=f"Auto-generated monthly invoice for {self.billing_period:%B %Y}",
            )
            InvoiceItem.objects.bulk_create([
                InvoiceItem(
                    organization=organization,
                    invoice=invoice,
                    description=item.description,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price_cents,
                    total_cents=item.total_cents,
                )
                for item in items
            ])
            return invoice

        def on_conflict():
            if self.already_invoiced(organization, client):
                raise AlreadyInvoiced()

        return InvoiceNumberService(organization).create_with_next_number(
            create, attempts=self.MAX_NUMBER_ATTEMPTS, on_conflict=on_conflict
        )
