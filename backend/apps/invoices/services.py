"""Invoice lifecycle and listing services."""
import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.audit.models import ActivityLog
from apps.audit.services import ActivityLogService
from apps.clients.models import Client
from apps.core.exceptions import BillingError, InvalidStateError, NotFoundError
from apps.invoices.models import Invoice, InvoiceItem
from apps.invoices.numbering import InvoiceNumberService
from apps.invoices.types import (
    BulkActionResult,
    InvoiceFilters,
    InvoicePage,
    LineItemDraft,
    StatusStats,
)

logger = logging.getLogger(__name__)

EMAILABLE_STATUSES = {Invoice.Status.OPEN, Invoice.Status.OVERDUE}
PAYABLE_STATUSES = {Invoice.Status.OPEN, Invoice.Status.OVERDUE}


class InvoiceLifecycleService:
    """State changes on an organization's invoices.

    Every operation re-reads the stored status before acting; statuses sent
    by a caller are never trusted. Bulk operations skip invoices whose
    status does not allow the change, so the reported count can be lower
    than the number of ids requested. Ids that are missing or belong to
    another organization are reported in ``not_found_ids`` and the rest of
    the batch still runs. NotFoundError is raised only when none match.
    """

    BULK_ACTIONS = ("finalize", "email", "delete", "update_status")

    def __init__(self, organization, user=None):
        self.organization = organization
        self.user = user

    # ----- Lookups -----

    def get_invoice(self, invoice_id: int) -> Invoice:
        try:
            return Invoice.objects.get(id=invoice_id, organization=self.organization)
        except Invoice.DoesNotExist:
            raise NotFoundError(f"Invoice {invoice_id} not found")

    def _resolve_ids(self, invoice_ids) -> tuple[list[int], list[int]]:
        """Split requested ids into (this organization's, not found)."""
        requested = sorted({int(pk) for pk in invoice_ids})
        found = set(
            Invoice.objects.filter(organization=self.organization, id__in=requested).values_list("id", flat=True)
        )
        missing = [pk for pk in requested if pk not in found]
        if not found:
            raise NotFoundError(f"Invoices not found: {', '.join(str(pk) for pk in missing)}")
        if missing:
            logger.warning(
                "Org %s: ignoring invoices not found in organization: %s",
                self.organization.id,
                missing,
            )
        return sorted(found), missing

    def _locked(self, ids, statuses):
        return (
            Invoice.objects.select_for_update()
            .filter(organization=self.organization, id__in=ids, status__in=statuses)
            .order_by("id")
        )

    def _log(self, action, entity_ids, details=None):
        ActivityLogService.record(
            self.organization,
            action,
            "invoice",
            entity_ids,
            details=details,
            user=self.user,
        )

    # ----- Bulk actions -----

    def bulk_action(self, action: str, invoice_ids, status: str | None = None) -> BulkActionResult:
        """Run one of ``BULK_ACTIONS`` over a list of invoice ids."""
        if action not in self.BULK_ACTIONS:
            raise BillingError(f"Invalid action: {action}")
        if action == "finalize":
            return self.finalize(invoice_ids)
        if action == "email":
            return self.email(invoice_ids)
        if action == "delete":
            return self.delete_drafts(invoice_ids)
        if not status:
            raise BillingError("Status is required for update_status")
        return self.update_status(invoice_ids, status)

    def finalize(self, invoice_ids) -> BulkActionResult:
        """DRAFT -> OPEN. Invoices in any other status are left alone."""
        ids, missing = self._resolve_ids(invoice_ids)
        now = timezone.now()
        affected = []
        with transaction.atomic():
            for invoice in self._locked(ids, [Invoice.Status.DRAFT]):
                invoice.status = Invoice.Status.OPEN
                invoice.finalized_at = now
                invoice.save(update_fields=["status", "finalized_at", "updated_at"])
                affected.append(invoice.id)

        if affected:
            self._log(ActivityLog.Action.INVOICES_FINALIZED, affected)
        return BulkActionResult("finalize", len(ids) + len(missing), len(affected), affected, missing)

    def delete_drafts(self, invoice_ids) -> BulkActionResult:
        """Delete DRAFT invoices and their items. Other invoices are kept."""
        ids, missing = self._resolve_ids(invoice_ids)
        with transaction.atomic():
            affected = list(
                self._locked(ids, [Invoice.Status.DRAFT]).values_list("id", flat=True)
            )
            if affected:
                InvoiceItem.objects.filter(invoice_id__in=affected).delete()
                Invoice.objects.filter(id__in=affected).delete()

        if affected:
            self._log(ActivityLog.Action.INVOICES_DELETED, affected)
        return BulkActionResult("delete", len(ids) + len(missing), len(affected), affected, missing)

    def email(self, invoice_ids) -> BulkActionResult:
        """Queue emails for OPEN and OVERDUE invoices whose client has an address."""
        from apps.invoices.tasks import send_invoice_email_task

        ids, missing = self._resolve_ids(invoice_ids)
        affected = list(
            Invoice.objects.filter(
                organization=self.organization,
                id__in=ids,
                status__in=EMAILABLE_STATUSES,
            )
            .exclude(client__email="")
            .order_by("id")
            .values_list("id", flat=True)
        )
        for invoice_id in affected:
            transaction.on_commit(lambda pk=invoice_id: send_invoice_email_task.delay(pk))

        if affected:
            self._log(ActivityLog.Action.INVOICES_EMAILED, affected)
        return BulkActionResult("email", len(ids) + len(missing), len(affected), affected, missing)

    def update_status(self, invoice_ids, status: str) -> BulkActionResult:
        """Apply one allowed transition to each invoice; disallowed ones are skipped."""
        if status not in Invoice.Status.values:
            raise InvalidStateError(f"Invalid status: {status}")

        ids, missing = self._resolve_ids(invoice_ids)
        now = timezone.now()
        affected = []
        with transaction.atomic():
            for invoice in self._locked(ids, Invoice.Status.values):
                if not invoice.can_transition_to(status):
                    continue
                previous = invoice.status
                self._apply_status(invoice, status, now)
                affected.append(invoice.id)
                logger.debug("Invoice %s: %s -> %s", invoice.id, previous, status)

        if affected:
            self._log(ActivityLog.Action.INVOICE_STATUS_UPDATED, affected, details={"status": status})
        return BulkActionResult("update_status", len(ids) + len(missing), len(affected), affected, missing)

    @staticmethod
    def _apply_status(invoice: Invoice, status: str, now):
        invoice.status = status
        fields = ["status", "updated_at"]
        if status == Invoice.Status.OPEN:
            invoice.finalized_at = now
            fields.append("finalized_at")
        elif status == Invoice.Status.PAID:
            invoice.paid_at = now
            invoice.amount_paid_cents = invoice.total_cents
            invoice.amount_due_cents = 0
            fields += ["paid_at", "amount_paid_cents", "amount_due_cents"]
        elif status == Invoice.Status.VOID:
            invoice.voided_at = now
            fields.append("voided_at")
        invoice.save(update_fields=fields)

    # ----- Single-invoice actions -----

    def void(self, invoice_id: int) -> Invoice:
        """Void an invoice. PAID, VOID and UNCOLLECTIBLE invoices are rejected."""
        self.get_invoice(invoice_id)
        with transaction.atomic():
            invoice = Invoice.objects.select_for_update().get(id=invoice_id)
            if invoice.status == Invoice.Status.PAID:
                raise InvalidStateError("Cannot void a paid invoice")
            if invoice.status == Invoice.Status.VOID:
                raise InvalidStateError("Invoice is already voided")
            if not invoice.can_transition_to(Invoice.Status.VOID):
                raise InvalidStateError(f"Cannot void an invoice with status {invoice.status}")
            self._apply_status(invoice, Invoice.Status.VOID, timezone.now())

        self._log(ActivityLog.Action.INVOICE_VOIDED, [invoice.id], details={"invoice_number": invoice.invoice_number})
        return invoice

    def record_payment(
        self,
        invoice_id: int,
        amount_cents: int,
        payment_method: str = "",
        tip_cents: int = 0,
    ) -> Invoice:
        """Record a payment reported by the payment processor.

        The invoice settles to PAID once the paid amount reaches the total.
        """
        if amount_cents <= 0:
            raise InvalidStateError("Payment amount must be positive")
        if tip_cents < 0:
            raise InvalidStateError("Tip cannot be negative")
        if payment_method and payment_method not in Invoice.PaymentMethod.values:
            raise InvalidStateError(f"Invalid payment method: {payment_method}")

        self.get_invoice(invoice_id)
        with transaction.atomic():
            invoice = Invoice.objects.select_for_update().get(id=invoice_id)
            if invoice.status not in PAYABLE_STATUSES:
                raise InvalidStateError(
                    f"Cannot record a payment on an invoice with status {invoice.status}"
                )
            invoice.amount_paid_cents += amount_cents
            invoice.amount_due_cents = max(0, invoice.total_cents - invoice.amount_paid_cents)
            invoice.tip_cents += tip_cents
            if payment_method:
                invoice.payment_method = payment_method
            fields = ["amount_paid_cents", "amount_due_cents", "tip_cents", "payment_method", "updated_at"]
            if invoice.amount_paid_cents >= invoice.total_cents:
                invoice.status = Invoice.Status.PAID
                invoice.paid_at = timezone.now()
                fields += ["status", "paid_at"]
            invoice.save(update_fields=fields)

        self._log(
            ActivityLog.Action.INVOICE_PAYMENT_RECORDED,
            [invoice.id],
            details={"amount_cents": amount_cents, "status": invoice.status},
        )
        return invoice

    def mark_overdue(self, today: date | None = None) -> int:
        """OPEN invoices whose due date has passed become OVERDUE."""
        today = today or timezone.localdate()
        affected = []
        with transaction.atomic():
            overdue = Invoice.objects.select_for_update().filter(
                organization=self.organization,
                status=Invoice.Status.OPEN,
                due_date__lt=today,
            ).order_by("id")
            for invoice in overdue:
                invoice.status = Invoice.Status.OVERDUE
                invoice.save(update_fields=["status", "updated_at"])
                affected.append(invoice.id)

        if affected:
            self._log(ActivityLog.Action.INVOICES_MARKED_OVERDUE, affected)
        return len(affected)

    def create_invoice(
        self,
        client_id: int,
        items: list[LineItemDraft],
        due_date: date | None = None,
        discount_cents: int = 0,
        tax_rate: Decimal = Decimal("0"),
        notes: str = "",
        billing_option: str = "",
    ) -> Invoice:
        """Create a one-off DRAFT invoice.

        ``tax_rate`` is a percentage applied to the discounted subtotal.
        """
        try:
            client = Client.objects.get(id=client_id, organization=self.organization)
        except Client.DoesNotExist:
            raise NotFoundError(f"Client {client_id} not found")
        subtotal, tax, total = self._totals(items, discount_cents, tax_rate)

        def create(invoice_number):
            invoice = Invoice.objects.create(
                organization=self.organization,
                client=client,
                invoice_number=invoice_number,
                status=Invoice.Status.DRAFT,
                subtotal_cents=subtotal,
                discount_cents=discount_cents,
                tax_cents=tax,
                total_cents=total,
                amount_paid_cents=0,
                amount_due_cents=total,
                billing_option=billing_option,
                due_date=due_date,
                notes=notes,
            )
            self._create_items(invoice, items)
            return invoice

        invoice = InvoiceNumberService(self.organization).create_with_next_number(create)
        self._log(
            ActivityLog.Action.INVOICE_CREATED,
            [invoice.id],
            details={"invoice_number": invoice.invoice_number, "total_cents": total},
        )
        return invoice

    def update_draft(
        self,
        invoice_id: int,
        items: list[LineItemDraft],
        notes: str | None = None,
        tax_rate: Decimal = Decimal("0"),
        finalize: bool = False,
    ) -> Invoice:
        """Replace a DRAFT invoice's line items and recompute its amounts.

        The stored discount is kept. With ``finalize`` the invoice moves to
        OPEN in the same transaction. Invoices past DRAFT are immutable.
        """
        self.get_invoice(invoice_id)
        with transaction.atomic():
            invoice = Invoice.objects.select_for_update().get(id=invoice_id)
            if invoice.status != Invoice.Status.DRAFT:
                raise InvalidStateError("Only draft invoices can be edited")
            subtotal, tax, total = self._totals(items, invoice.discount_cents, tax_rate)

            invoice.items.all().delete()
            self._create_items(invoice, items)

            invoice.subtotal_cents = subtotal
            invoice.tax_cents = tax
            invoice.total_cents = total
            invoice.amount_due_cents = max(0, total - invoice.amount_paid_cents)
            fields = ["subtotal_cents", "tax_cents", "total_cents", "amount_due_cents", "updated_at"]
            if notes is not None:
                invoice.notes = notes
                fields.append("notes")
            if finalize:
                invoice.status = Invoice.Status.OPEN
                invoice.finalized_at = timezone.now()
                fields += ["status", "finalized_at"]
            invoice.save(update_fields=fields)

        self._log(
            ActivityLog.Action.INVOICE_UPDATED,
            [invoice.id],
            details={"invoice_number": invoice.invoice_number, "total_cents": total, "finalized": finalize},
        )
        return invoice

    @staticmethod
    def _totals(items: list[LineItemDraft], discount_cents: int, tax_rate: Decimal) -> tuple[int, int, int]:
        """(subtotal, tax, total) in cents. Tax applies after the discount."""
        if not items:
            raise InvalidStateError("An invoice needs at least one line item")
        if any(item.quantity < 1 for item in items):
            raise InvalidStateError("Line item quantity must be at least 1")

        subtotal = sum(item.total_cents for item in items)
        if discount_cents < 0 or discount_cents > subtotal:
            raise InvalidStateError("Discount must be between zero and the subtotal")
        if tax_rate < 0:
            raise InvalidStateError("Tax rate cannot be negative")

        taxable = subtotal - discount_cents
        tax = int((Decimal(taxable) * Decimal(tax_rate) / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return subtotal, tax, taxable + tax

    def _create_items(self, invoice: Invoice, items: list[LineItemDraft]):
        InvoiceItem.objects.bulk_create([
            InvoiceItem(
                organization=self.organization,
                invoice=invoice,
                description=item.description,
                quantity=item.quantity,
                unit_price_cents=item.unit_price_cents,
                total_cents=item.total_cents,
            )
            for item in items
        ])


class InvoiceQueryService:
    """Filtered, paginated invoice listing with per-status totals."""

    MAX_LIMIT = 100

    def __init__(self, organization):
        self.organization = organization

    def list_invoices(self, filters: InvoiceFilters | None = None, page: int = 1, limit: int = 25) -> InvoicePage:
        filters = filters or InvoiceFilters()
        page = max(1, page)
        limit = min(max(1, limit), self.MAX_LIMIT)

        unfiltered_by_status = self._apply_filters(self._base_queryset(), filters)
        queryset = unfiltered_by_status
        if filters.statuses:
            queryset = queryset.filter(self._status_q(filters.statuses))

        total = queryset.count()
        offset = (page - 1) * limit
        invoices = list(queryset.order_by("-created_at", "-id")[offset:offset + limit])

        stats = self.stats(unfiltered_by_status)
        return InvoicePage(
            invoices=invoices,
            total=total,
            page=page,
            limit=limit,
            stats=stats,
            total_amount_cents=sum(
                s.amount_cents for status, s in stats.items() if status != Invoice.Status.VOID
            ),
        )

    def _base_queryset(self):
        return Invoice.objects.filter(organization=self.organization).select_related("client")

    @staticmethod
    def _status_q(statuses) -> Q:
        """OVERDUE also matches OPEN invoices whose due date has passed."""
        query = Q(status__in=statuses)
        if Invoice.Status.OVERDUE in statuses:
            query |= Q(status=Invoice.Status.OPEN, due_date__lt=timezone.localdate())
        return query

    @staticmethod
    def _apply_filters(queryset, filters: InvoiceFilters):
        if filters.created_from:
            queryset = queryset.filter(created_at__date__gte=filters.created_from)
        if filters.created_to:
            queryset = queryset.filter(created_at__date__lte=filters.created_to)
        if filters.billing_option:
            queryset = queryset.filter(billing_option=filters.billing_option)
        if filters.payment_method:
            queryset = queryset.filter(payment_method=filters.payment_method)
        if filters.client_type:
            queryset = queryset.filter(client__client_type=filters.client_type)
        if filters.search:
            term = filters.search.strip()
            queryset = queryset.filter(
                Q(invoice_number__icontains=term)
                | Q(client__first_name__icontains=term)
                | Q(client__last_name__icontains=term)
                | Q(client__company_name__icontains=term)
                | Q(client__email__icontains=term)
            )
        if filters.recurring_only:
            queryset = queryset.filter(subscription__isnull=False)
        if filters.hide_zero_totals:
            queryset = queryset.exclude(total_cents=0)
        if filters.with_tips:
            queryset = queryset.filter(tip_cents__gt=0)
        return queryset

    @staticmethod
    def stats(queryset) -> dict[str, StatusStats]:
        stats = {status: StatusStats() for status in Invoice.Status.values}
        rows = queryset.order_by().values("status").annotate(count=Count("id"), amount=Sum("total_cents"))
        for row in rows:
            stats[row["status"]] = StatusStats(count=row["count"], amount_cents=row["amount"] or 0)
        return stats
