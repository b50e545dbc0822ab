"""Tests for invoice state changes: bulk actions, void, payments, overdue, one-off invoices."""
from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.audit.models import ActivityLog
from apps.core.exceptions import BillingError, InvalidStateError, NotFoundError
from apps.invoices.models import Invoice, InvoiceItem
from apps.invoices.services import InvoiceLifecycleService
from apps.invoices.types import LineItemDraft

Status = Invoice.Status


@pytest.fixture
def service(organization, user):
    return InvoiceLifecycleService(organization, user=user)


@pytest.fixture
def foreign_invoice(other_organization, make_customer, make_invoice):
    foreign_client = make_customer(email="other@example.com", organization=other_organization)
    return make_invoice(client=foreign_client, invoice_number="INV-00900")


def statuses(*invoices):
    return [Invoice.objects.get(id=i.id).status for i in invoices]


@pytest.mark.django_db
class TestFinalize:
    def test_only_drafts_are_finalized(self, service, make_invoice):
        draft = make_invoice()
        opened = make_invoice(status=Status.OPEN)
        paid = make_invoice(status=Status.PAID)

        result = service.finalize([draft.id, opened.id, paid.id])

        assert result.requested == 3
        assert result.count == 1
        assert result.affected_ids == [draft.id]
        assert statuses(draft, opened, paid) == [Status.OPEN, Status.OPEN, Status.PAID]
        draft.refresh_from_db()
        assert draft.finalized_at is not None

    def test_no_drafts(self, service, make_invoice):
        opened = make_invoice(status=Status.OPEN)

        assert service.finalize([opened.id]).count == 0
        assert not ActivityLog.objects.filter(action=ActivityLog.Action.INVOICES_FINALIZED).exists()

    def test_logs_activity_with_user(self, service, user, make_invoice):
        draft = make_invoice()

        service.finalize([draft.id])

        entry = ActivityLog.objects.get(action=ActivityLog.Action.INVOICES_FINALIZED)
        assert entry.user == user
        assert entry.entity_ids == [draft.id]

    def test_foreign_id_does_not_block_batch(self, service, make_invoice, foreign_invoice):
        draft = make_invoice()

        result = service.finalize([draft.id, foreign_invoice.id])

        assert result.requested == 2
        assert result.affected_ids == [draft.id]
        assert result.not_found_ids == [foreign_invoice.id]
        assert statuses(draft, foreign_invoice) == [Status.OPEN, Status.DRAFT]

    def test_only_foreign_ids(self, service, foreign_invoice):
        with pytest.raises(NotFoundError, match=str(foreign_invoice.id)):
            service.finalize([foreign_invoice.id])

        assert statuses(foreign_invoice) == [Status.DRAFT]

    def test_unknown_id(self, service):
        with pytest.raises(NotFoundError, match="Invoices not found: 424242"):
            service.finalize([424242])


@pytest.mark.django_db
class TestDeleteDrafts:
    def test_deletes_drafts_and_items(self, organization, service, make_invoice):
        draft = make_invoice()
        InvoiceItem.objects.create(organization=organization, invoice=draft, description="Visit", unit_price_cents=5000)
        opened = make_invoice(status=Status.OPEN)

        result = service.delete_drafts([draft.id, opened.id])

        assert result.count == 1
        assert not Invoice.objects.filter(id=draft.id).exists()
        assert not InvoiceItem.objects.filter(invoice_id=draft.id).exists()
        assert Invoice.objects.filter(id=opened.id).exists()

    def test_activity_survives_deletion(self, service, make_invoice):
        draft = make_invoice()

        service.delete_drafts([draft.id])

        entry = ActivityLog.objects.get(action=ActivityLog.Action.INVOICES_DELETED)
        assert entry.entity_ids == [draft.id]

    def test_foreign_invoice_is_kept(self, service, make_invoice, foreign_invoice):
        draft = make_invoice()

        result = service.delete_drafts([draft.id, foreign_invoice.id])

        assert result.count == 1
        assert result.not_found_ids == [foreign_invoice.id]
        assert Invoice.objects.filter(id=foreign_invoice.id).exists()


@pytest.mark.django_db
class TestEmail:
    def test_emails_open_and_overdue(
        self, service, customer, make_invoice, django_capture_on_commit_callbacks, mailoutbox
    ):
        opened = make_invoice(status=Status.OPEN)
        overdue = make_invoice(status=Status.OVERDUE)
        draft = make_invoice()

        with django_capture_on_commit_callbacks(execute=True):
            result = service.email([opened.id, overdue.id, draft.id])

        assert result.count == 2
        assert result.affected_ids == [opened.id, overdue.id]
        assert len(mailoutbox) == 2
        assert mailoutbox[0].to == [customer.email]
        assert opened.invoice_number in mailoutbox[0].subject
        assert "Amount due: $50.00" in mailoutbox[0].body

    def test_skips_client_without_email(self, service, make_customer, make_invoice, django_capture_on_commit_callbacks):
        no_email = make_customer(email="")
        invoice = make_invoice(client=no_email, status=Status.OPEN)

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            result = service.email([invoice.id])

        assert result.count == 0
        assert callbacks == []

    def test_email_does_not_change_status(self, service, make_invoice, django_capture_on_commit_callbacks):
        opened = make_invoice(status=Status.OPEN)

        with django_capture_on_commit_callbacks(execute=True):
            service.email([opened.id])

        assert statuses(opened) == [Status.OPEN]


@pytest.mark.django_db
class TestUpdateStatus:
    def test_applies_allowed_transitions(self, service, make_invoice):
        opened = make_invoice(status=Status.OPEN)
        draft = make_invoice()

        result = service.update_status([opened.id, draft.id], Status.PAID)

        assert result.affected_ids == [opened.id]
        opened.refresh_from_db()
        assert opened.status == Status.PAID
        assert opened.paid_at is not None
        assert opened.amount_paid_cents == opened.total_cents
        assert opened.amount_due_cents == 0
        assert statuses(draft) == [Status.DRAFT]

    def test_terminal_statuses_do_not_move(self, service, make_invoice):
        void = make_invoice(status=Status.VOID)
        uncollectible = make_invoice(status=Status.UNCOLLECTIBLE)

        result = service.update_status([void.id, uncollectible.id], Status.OPEN)

        assert result.count == 0

    def test_open_sets_finalized_at(self, service, make_invoice):
        draft = make_invoice()

        service.update_status([draft.id], Status.OPEN)

        draft.refresh_from_db()
        assert draft.finalized_at is not None

    def test_invalid_status(self, service, make_invoice):
        with pytest.raises(InvalidStateError, match="Invalid status"):
            service.update_status([make_invoice().id], "ARCHIVED")

    def test_logs_target_status(self, service, make_invoice):
        opened = make_invoice(status=Status.OPEN)

        service.update_status([opened.id], Status.UNCOLLECTIBLE)

        entry = ActivityLog.objects.get(action=ActivityLog.Action.INVOICE_STATUS_UPDATED)
        assert entry.details == {"status": Status.UNCOLLECTIBLE}


@pytest.mark.django_db
class TestBulkAction:
    def test_dispatches(self, service, make_invoice):
        draft = make_invoice()

        result = service.bulk_action("finalize", [draft.id])

        assert result.action == "finalize"
        assert result.count == 1

    def test_update_status_requires_status(self, service, make_invoice):
        with pytest.raises(BillingError, match="Status is required"):
            service.bulk_action("update_status", [make_invoice().id])

    def test_invalid_action(self, service, make_invoice):
        with pytest.raises(BillingError, match="Invalid action: archive"):
            service.bulk_action("archive", [make_invoice().id])


@pytest.mark.django_db
class TestVoid:
    @pytest.mark.parametrize("status", [Status.DRAFT, Status.OPEN, Status.OVERDUE])
    def test_voids(self, service, make_invoice, status):
        invoice = service.void(make_invoice(status=status).id)

        assert invoice.status == Status.VOID
        assert invoice.voided_at is not None

    def test_paid_cannot_be_voided(self, service, make_invoice):
        paid = make_invoice(status=Status.PAID)

        with pytest.raises(InvalidStateError, match="Cannot void a paid invoice"):
            service.void(paid.id)
        assert statuses(paid) == [Status.PAID]

    def test_already_void(self, service, make_invoice):
        with pytest.raises(InvalidStateError, match="already voided"):
            service.void(make_invoice(status=Status.VOID).id)

    def test_uncollectible_cannot_be_voided(self, service, make_invoice):
        with pytest.raises(InvalidStateError, match="UNCOLLECTIBLE"):
            service.void(make_invoice(status=Status.UNCOLLECTIBLE).id)

    def test_foreign_invoice(self, service, foreign_invoice):
        with pytest.raises(NotFoundError):
            service.void(foreign_invoice.id)

    def test_logs_activity(self, service, make_invoice):
        invoice = service.void(make_invoice(status=Status.OPEN).id)

        entry = ActivityLog.objects.get(action=ActivityLog.Action.INVOICE_VOIDED)
        assert entry.details == {"invoice_number": invoice.invoice_number}


@pytest.mark.django_db
class TestRecordPayment:
    def test_partial_payment(self, service, make_invoice):
        invoice = make_invoice(status=Status.OPEN, total_cents=5000)

        invoice = service.record_payment(invoice.id, 2000, payment_method=Invoice.PaymentMethod.CARD)

        assert invoice.status == Status.OPEN
        assert invoice.amount_paid_cents == 2000
        assert invoice.amount_due_cents == 3000
        assert invoice.payment_method == Invoice.PaymentMethod.CARD

    def test_full_payment_settles(self, service, make_invoice):
        invoice = make_invoice(status=Status.OVERDUE, total_cents=5000)

        invoice = service.record_payment(invoice.id, 5000, tip_cents=500)

        assert invoice.status == Status.PAID
        assert invoice.paid_at is not None
        assert invoice.amount_due_cents == 0
        assert invoice.tip_cents == 500

    def test_draft_cannot_be_paid(self, service, make_invoice):
        with pytest.raises(InvalidStateError, match="DRAFT"):
            service.record_payment(make_invoice().id, 1000)

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"amount_cents": 0}, "positive"),
            ({"amount_cents": 100, "tip_cents": -1}, "Tip"),
            ({"amount_cents": 100, "payment_method": "BITCOIN"}, "payment method"),
        ],
    )
    def test_validation(self, service, make_invoice, kwargs, message):
        invoice = make_invoice(status=Status.OPEN)

        with pytest.raises(InvalidStateError, match=message):
            service.record_payment(invoice.id, **kwargs)


@pytest.mark.django_db
class TestMarkOverdue:
    def test_marks_past_due_open_invoices(self, service, make_invoice):
        today = timezone.localdate()
        past_due = make_invoice(status=Status.OPEN, due_date=today - timedelta(days=1))
        due_today = make_invoice(status=Status.OPEN, due_date=today)
        no_due_date = make_invoice(status=Status.OPEN)
        draft = make_invoice(due_date=today - timedelta(days=10))

        assert service.mark_overdue() == 1
        assert statuses(past_due, due_today, no_due_date, draft) == [
            Status.OVERDUE,
            Status.OPEN,
            Status.OPEN,
            Status.DRAFT,
        ]

    def test_explicit_today(self, service, make_invoice):
        invoice = make_invoice(status=Status.OPEN, due_date=date(2026, 3, 15))

        assert service.mark_overdue(today=date(2026, 3, 15)) == 0
        assert service.mark_overdue(today=date(2026, 3, 16)) == 1
        assert statuses(invoice) == [Status.OVERDUE]


@pytest.mark.django_db
class TestCreateInvoice:
    def test_creates_draft_with_totals(self, service, customer):
        invoice = service.create_invoice(
            customer.id,
            [
                LineItemDraft("Initial Cleanup - Heavy", 1, 4500),
                LineItemDraft("Yard Deodorizer", 2, 1500),
            ],
            due_date=date(2026, 11, 15),
            discount_cents=500,
            tax_rate=Decimal("7.25"),
            notes="Spring cleanup",
        )

        assert invoice.status == Status.DRAFT
        assert invoice.invoice_number == "INV-00001"
        assert invoice.subscription is None
        assert invoice.subtotal_cents == 7500
        assert invoice.discount_cents == 500
        # 7000 * 7.25% = 507.5 -> 508
        assert invoice.tax_cents == 508
        assert invoice.total_cents == 7508
        assert invoice.amount_due_cents == 7508
        assert invoice.items.count() == 2

    def test_unknown_client(self, service):
        with pytest.raises(NotFoundError):
            service.create_invoice(999999, [LineItemDraft("Visit", 1, 100)])

    def test_needs_items(self, service, customer):
        with pytest.raises(InvalidStateError, match="at least one line item"):
            service.create_invoice(customer.id, [])

    def test_discount_above_subtotal(self, service, customer):
        with pytest.raises(InvalidStateError, match="Discount"):
            service.create_invoice(customer.id, [LineItemDraft("Visit", 1, 100)], discount_cents=200)

    def test_logs_activity(self, service, customer):
        invoice = service.create_invoice(customer.id, [LineItemDraft("Visit", 1, 2300)])

        entry = ActivityLog.objects.get(action=ActivityLog.Action.INVOICE_CREATED)
        assert entry.entity_ids == [invoice.id]
        assert entry.details == {"invoice_number": invoice.invoice_number, "total_cents": 2300}


@pytest.mark.django_db
class TestUpdateDraft:
    @pytest.fixture
    def draft(self, organization, make_invoice):
        invoice = make_invoice(notes="old")
        InvoiceItem.objects.create(organization=organization, invoice=invoice, description="Visit", unit_price_cents=5000)
        return invoice

    def test_replaces_items_and_totals(self, service, draft):
        invoice = service.update_draft(
            draft.id,
            [LineItemDraft("WEEKLY - 2 Dogs", 1, 11950), LineItemDraft("Yard Deodorizer", 2, 1500)],
            notes="Added deodorizer",
        )

        assert invoice.status == Status.DRAFT
        assert invoice.subtotal_cents == 14950
        assert invoice.total_cents == 14950
        assert invoice.amount_due_cents == 14950
        assert invoice.notes == "Added deodorizer"
        assert sorted(invoice.items.values_list("description", flat=True)) == ["WEEKLY - 2 Dogs", "Yard Deodorizer"]

    def test_keeps_discount_and_applies_tax(self, service, make_invoice):
        draft = make_invoice(discount_cents=1000)

        invoice = service.update_draft(draft.id, [LineItemDraft("Visit", 1, 5000)], tax_rate=Decimal("10"))

        assert invoice.discount_cents == 1000
        assert invoice.tax_cents == 400
        assert invoice.total_cents == 4400

    def test_notes_untouched_when_omitted(self, service, draft):
        invoice = service.update_draft(draft.id, [LineItemDraft("Visit", 1, 2300)])

        assert invoice.notes == "old"

    def test_finalize_in_same_call(self, service, draft):
        invoice = service.update_draft(draft.id, [LineItemDraft("Visit", 1, 2300)], finalize=True)

        assert invoice.status == Status.OPEN
        assert invoice.finalized_at is not None

    def test_open_invoice_is_rejected_and_unchanged(self, organization, service, make_invoice):
        opened = make_invoice(status=Status.OPEN, total_cents=5000)
        InvoiceItem.objects.create(organization=organization, invoice=opened, description="Visit", unit_price_cents=5000)

        with pytest.raises(InvalidStateError, match="Only draft invoices can be edited"):
            service.update_draft(opened.id, [LineItemDraft("Cheaper visit", 1, 100)])

        opened.refresh_from_db()
        assert opened.total_cents == 5000
        assert list(opened.items.values_list("description", flat=True)) == ["Visit"]

    def test_needs_items(self, service, draft):
        with pytest.raises(InvalidStateError, match="at least one line item"):
            service.update_draft(draft.id, [])

        assert draft.items.count() == 1

    def test_foreign_invoice(self, service, foreign_invoice):
        with pytest.raises(NotFoundError):
            service.update_draft(foreign_invoice.id, [LineItemDraft("Visit", 1, 100)])

    def test_logs_activity(self, user, service, draft):
        service.update_draft(draft.id, [LineItemDraft("Visit", 1, 2300)])

        entry = ActivityLog.objects.get(action=ActivityLog.Action.INVOICE_UPDATED)
        assert entry.user == user
        assert entry.entity_ids == [draft.id]
        assert entry.details == {"invoice_number": draft.invoice_number, "total_cents": 2300, "finalized": False}
