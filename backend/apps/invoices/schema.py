"""GraphQL schema for invoices."""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

import strawberry
from strawberry.types import Info

from apps.core.context import Context
from apps.core.exceptions import BillingError
from apps.core.permissions import check_perm, require_perm
from apps.invoices.models import Invoice
from apps.invoices.numbering import InvoiceNumberService
from apps.invoices.services import InvoiceLifecycleService, InvoiceQueryService
from apps.invoices.types import InvoiceFilters, LineItemDraft


@strawberry.type
class InvoiceItemType:
    """A line on an invoice."""

    id: int
    description: str
    quantity: int
    unit_price_cents: int
    total_cents: int


@strawberry.type
class InvoiceType:
    """A persisted client invoice. Amounts are in cents."""

    id: int
    invoice_number: str
    status: str
    client_id: int
    client_name: str
    client_email: str
    subscription_id: Optional[int]
    is_recurring: bool
    subtotal_cents: int
    discount_cents: int
    tax_cents: int
    total_cents: int
    amount_paid_cents: int
    amount_due_cents: int
    tip_cents: int
    billing_interval: str
    billing_option: str
    payment_method: str
    billing_period: Optional[date]
    due_date: Optional[date]
    finalized_at: Optional[datetime]
    paid_at: Optional[datetime]
    voided_at: Optional[datetime]
    notes: str
    created_at: datetime
    items: Optional[List[InvoiceItemType]] = None


@strawberry.type
class InvoiceStatusStatsType:
    status: str
    count: int
    amount_cents: int


@strawberry.type
class InvoicePageType:
    """One page of invoices with per-status totals."""

    invoices: List[InvoiceType]
    total: int
    page: int
    limit: int
    total_pages: int
    stats: List[InvoiceStatusStatsType]
    total_amount_cents: int


@strawberry.input
class InvoiceFiltersInput:
    statuses: List[str] = strawberry.field(default_factory=list)
    created_from: Optional[date] = None
    created_to: Optional[date] = None
    billing_option: str = ""
    payment_method: str = ""
    client_type: str = ""
    search: str = ""
    recurring_only: bool = False
    hide_zero_totals: bool = False
    with_tips: bool = False


@strawberry.input
class InvoiceItemInput:
    description: str
    unit_price_cents: int
    quantity: int = 1


@strawberry.input
class CreateInvoiceInput:
    """Input for a manual one-off invoice."""

    client_id: int
    items: List[InvoiceItemInput]
    due_date: Optional[date] = None
    discount_cents: int = 0
    tax_rate: Decimal = Decimal("0")
    notes: str = ""
    billing_option: str = ""


@strawberry.input
class UpdateDraftInvoiceInput:
    """Replacement line items for a DRAFT invoice."""

    invoice_id: int
    items: List[InvoiceItemInput]
    notes: Optional[str] = None
    tax_rate: Decimal = Decimal("0")
    finalize: bool = False


@strawberry.type
class InvoiceResult:
    success: bool = False
    error: Optional[str] = None
    invoice: Optional[InvoiceType] = None


@strawberry.type
class BulkInvoiceActionResult:
    """Result of a bulk action. ``count`` can be lower than the ids sent."""

    success: bool = False
    error: Optional[str] = None
    count: int = 0
    invoice_ids: List[int] = strawberry.field(default_factory=list)
    not_found_ids: List[int] = strawberry.field(default_factory=list)


def _to_drafts(items: List[InvoiceItemInput]) -> List[LineItemDraft]:
    return [
        LineItemDraft(
            description=item.description,
            quantity=item.quantity,
            unit_price_cents=item.unit_price_cents,
        )
        for item in items
    ]


def _convert_invoice(invoice: Invoice, with_items: bool = False) -> InvoiceType:
    """Convert an Invoice model instance to its GraphQL type."""
    items = None
    if with_items:
        items = [
            InvoiceItemType(
                id=item.id,
                description=item.description,
                quantity=item.quantity,
                unit_price_cents=item.unit_price_cents,
                total_cents=item.total_cents,
            )
            for item in invoice.items.all()
        ]
    return InvoiceType(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        status=invoice.status,
        client_id=invoice.client_id,
        client_name=invoice.client.display_name,
        client_email=invoice.client.email,
        subscription_id=invoice.subscription_id,
        is_recurring=invoice.is_recurring,
        subtotal_cents=invoice.subtotal_cents,
        discount_cents=invoice.discount_cents,
        tax_cents=invoice.tax_cents,
        total_cents=invoice.total_cents,
        amount_paid_cents=invoice.amount_paid_cents,
        amount_due_cents=invoice.amount_due_cents,
        tip_cents=invoice.tip_cents,
        billing_interval=invoice.billing_interval,
        billing_option=invoice.billing_option,
        payment_method=invoice.payment_method,
        billing_period=invoice.billing_period,
        due_date=invoice.due_date,
        finalized_at=invoice.finalized_at,
        paid_at=invoice.paid_at,
        voided_at=invoice.voided_at,
        notes=invoice.notes,
        created_at=invoice.created_at,
        items=items,
    )


@strawberry.type
class InvoiceQuery:
    """Invoice queries."""

    @strawberry.field
    def invoices(
        self,
        info: Info[Context, None],
        filters: Optional[InvoiceFiltersInput] = None,
        page: int = 1,
        limit: int = 25,
    ) -> InvoicePageType:
        """List invoices, newest first."""
        user = require_perm(info, "invoices", "read")

        query_filters = InvoiceFilters()
        if filters is not None:
            query_filters = InvoiceFilters(
                statuses=list(filters.statuses),
                created_from=filters.created_from,
                created_to=filters.created_to,
                billing_option=filters.billing_option,
                payment_method=filters.payment_method,
                client_type=filters.client_type,
                search=filters.search,
                recurring_only=filters.recurring_only,
                hide_zero_totals=filters.hide_zero_totals,
                with_tips=filters.with_tips,
            )

        result = InvoiceQueryService(user.organization).list_invoices(query_filters, page=page, limit=limit)
        return InvoicePageType(
            invoices=[_convert_invoice(invoice) for invoice in result.invoices],
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
            stats=[
                InvoiceStatusStatsType(status=status, count=s.count, amount_cents=s.amount_cents)
                for status, s in result.stats.items()
            ],
            total_amount_cents=result.total_amount_cents,
        )

    @strawberry.field
    def invoice(self, info: Info[Context, None], id: int) -> Optional[InvoiceType]:
        """Get a single invoice with its line items."""
        user = require_perm(info, "invoices", "read")
        invoice = (
            Invoice.objects.select_related("client")
            .prefetch_related("items")
            .filter(id=id, organization_id=user.organization_id)
            .first()
        )
        if invoice is None:
            return None
        return _convert_invoice(invoice, with_items=True)

    @strawberry.field
    def next_invoice_number(self, info: Info[Context, None]) -> str:
        """Preview the number the next invoice will get."""
        user = require_perm(info, "invoices", "read")
        return InvoiceNumberService(user.organization).preview_next_number()


@strawberry.type
class InvoiceMutation:
    """Invoice mutations."""

    @strawberry.mutation
    def bulk_invoice_action(
        self,
        info: Info[Context, None],
        action: str,
        invoice_ids: List[int],
        status: Optional[str] = None,
    ) -> BulkInvoiceActionResult:
        """Run finalize, email, delete or update_status over several invoices."""
        user, err = check_perm(info, "invoices", "write")
        if err:
            return BulkInvoiceActionResult(success=False, error=err)
        if not invoice_ids:
            return BulkInvoiceActionResult(success=False, error="No invoices selected")

        service = InvoiceLifecycleService(user.organization, user=user)
        try:
            result = service.bulk_action(action, invoice_ids, status=status)
        except BillingError as e:
            return BulkInvoiceActionResult(success=False, error=str(e))

        return BulkInvoiceActionResult(
            success=True,
            count=result.count,
            invoice_ids=result.affected_ids,
            not_found_ids=result.not_found_ids,
        )

    @strawberry.mutation
    def void_invoice(self, info: Info[Context, None], invoice_id: int) -> InvoiceResult:
        """Void a single invoice. Paid invoices cannot be voided."""
        user, err = check_perm(info, "invoices", "void")
        if err:
            return InvoiceResult(success=False, error=err)

        service = InvoiceLifecycleService(user.organization, user=user)
        try:
            invoice = service.void(invoice_id)
        except BillingError as e:
            return InvoiceResult(success=False, error=str(e))
        return InvoiceResult(success=True, invoice=_convert_invoice(invoice))

    @strawberry.mutation
    def create_invoice(self, info: Info[Context, None], input: CreateInvoiceInput) -> InvoiceResult:
        """Create a manual one-off DRAFT invoice."""
        user, err = check_perm(info, "invoices", "write")
        if err:
            return InvoiceResult(success=False, error=err)

        service = InvoiceLifecycleService(user.organization, user=user)
        try:
            invoice = service.create_invoice(
                client_id=input.client_id,
                items=_to_drafts(input.items),
                due_date=input.due_date,
                discount_cents=input.discount_cents,
                tax_rate=input.tax_rate,
                notes=input.notes,
                billing_option=input.billing_option,
            )
        except BillingError as e:
            return InvoiceResult(success=False, error=str(e))
        return InvoiceResult(success=True, invoice=_convert_invoice(invoice, with_items=True))

    @strawberry.mutation
    def update_draft_invoice(self, info: Info[Context, None], input: UpdateDraftInvoiceInput) -> InvoiceResult:
        """Replace a draft's line items, optionally finalizing it."""
        user, err = check_perm(info, "invoices", "write")
        if err:
            return InvoiceResult(success=False, error=err)

        service = InvoiceLifecycleService(user.organization, user=user)
        try:
            invoice = service.update_draft(
                input.invoice_id,
                _to_drafts(input.items),
                notes=input.notes,
                tax_rate=input.tax_rate,
                finalize=input.finalize,
            )
        except BillingError as e:
            return InvoiceResult(success=False, error=str(e))
        return InvoiceResult(success=True, invoice=_convert_invoice(invoice, with_items=True))

    @strawberry.mutation
    def record_invoice_payment(
        self,
        info: Info[Context, None],
        invoice_id: int,
        amount_cents: int,
        payment_method: str = "",
        tip_cents: int = 0,
    ) -> InvoiceResult:
        """Record a payment against an OPEN or OVERDUE invoice."""
        user, err = check_perm(info, "invoices", "write")
        if err:
            return InvoiceResult(success=False, error=err)

        service = InvoiceLifecycleService(user.organization, user=user)
        try:
            invoice = service.record_payment(
                invoice_id,
                amount_cents,
                payment_method=payment_method,
                tip_cents=tip_cents,
            )
        except BillingError as e:
            return InvoiceResult(success=False, error=str(e))
        return InvoiceResult(success=True, invoice=_convert_invoice(invoice))
