"""Tests for the invoice GraphQL API."""
from unittest.mock import Mock

import pytest

from apps.core.context import Context
from apps.invoices.models import Invoice
from apps.organizations.models import Role, User
from config.schema import schema

Status = Invoice.Status


def run_graphql(query, variables, context):
    """Helper to run GraphQL queries synchronously."""
    return schema.execute_sync(query, variable_values=variables, context_value=context)


def make_context(user=None):
    """Create a proper Context object for GraphQL testing."""
    return Context(request=Mock(), user=user)


@pytest.fixture
def manager_user(db, organization):
    u = User.objects.create_user(email="manager@example.com", password="mgr123", organization=organization)
    u.roles.add(Role.objects.get(organization=organization, name="Manager"))
    return u


INVOICES = """
query Invoices($filters: InvoiceFiltersInput, $page: Int!, $limit: Int!) {
    invoices(filters: $filters, page: $page, limit: $limit) {
        total
        page
        totalPages
        totalAmountCents
        invoices { id invoiceNumber status clientName totalCents isRecurring }
        stats { status count amountCents }
    }
}
"""

INVOICE = """
query Invoice($id: Int!) {
    invoice(id: $id) {
        invoiceNumber
        items { description quantity unitPriceCents totalCents }
    }
}
"""

BULK_ACTION = """
mutation Bulk($action: String!, $ids: [Int!]!, $status: String) {
    bulkInvoiceAction(action: $action, invoiceIds: $ids, status: $status) {
        success
        error
        count
        invoiceIds
    }
}
"""

VOID = """
mutation Void($id: Int!) {
    voidInvoice(invoiceId: $id) { success error invoice { status } }
}
"""

CREATE = """
mutation Create($input: CreateInvoiceInput!) {
    createInvoice(input: $input) {
        success
        error
        invoice { invoiceNumber status subtotalCents taxCents totalCents items { description totalCents } }
    }
}
"""

UPDATE_DRAFT = """
mutation UpdateDraft($input: UpdateDraftInvoiceInput!) {
    updateDraftInvoice(input: $input) {
        success
        error
        invoice { status totalCents notes items { description totalCents } }
    }
}
"""

RECORD_PAYMENT = """
mutation Pay($id: Int!, $amount: Int!, $method: String!) {
    recordInvoicePayment(invoiceId: $id, amountCents: $amount, paymentMethod: $method) {
        success
        error
        invoice { status amountDueCents paymentMethod }
    }
}
"""


@pytest.mark.django_db
class TestInvoiceQueries:
    def test_list(self, viewer_user, make_invoice):
        make_invoice(total_cents=1000)
        make_invoice(status=Status.PAID, total_cents=2000)

        result = run_graphql(INVOICES, {"page": 1, "limit": 25}, make_context(viewer_user))

        assert result.errors is None
        data = result.data["invoices"]
        assert data["total"] == 2
        assert data["totalPages"] == 1
        assert data["totalAmountCents"] == 3000
        assert data["invoices"][0]["clientName"] == "Pat Jones"
        stats = {s["status"]: s for s in data["stats"]}
        assert stats["PAID"]["amountCents"] == 2000
        assert stats["VOID"]["count"] == 0

    def test_list_with_filters(self, viewer_user, make_invoice):
        make_invoice()
        make_invoice(status=Status.OPEN)

        result = run_graphql(
            INVOICES,
            {"filters": {"statuses": ["OPEN"]}, "page": 1, "limit": 10},
            make_context(viewer_user),
        )

        assert [i["status"] for i in result.data["invoices"]["invoices"]] == ["OPEN"]

    def test_list_requires_auth(self, db):
        result = run_graphql(INVOICES, {"page": 1, "limit": 25}, make_context())

        assert result.errors is not None
        assert "Authentication required" in result.errors[0].message

    def test_single_invoice_with_items(self, viewer_user, organization, make_invoice):
        invoice = make_invoice()
        invoice.items.create(organization=organization, description="WEEKLY - 1 Dog ($23.00/visit)", unit_price_cents=9950)

        result = run_graphql(INVOICE, {"id": invoice.id}, make_context(viewer_user))

        assert result.data["invoice"]["items"] == [
            {
                "description": "WEEKLY - 1 Dog ($23.00/visit)",
                "quantity": 1,
                "unitPriceCents": 9950,
                "totalCents": 9950,
            }
        ]

    def test_foreign_invoice_is_hidden(self, viewer_user, other_organization, make_customer, make_invoice):
        foreign = make_invoice(client=make_customer(email="o@example.com", organization=other_organization))

        result = run_graphql(INVOICE, {"id": foreign.id}, make_context(viewer_user))

        assert result.data["invoice"] is None

    def test_next_invoice_number(self, viewer_user, make_invoice):
        make_invoice(invoice_number="INV-00041")

        result = run_graphql("query { nextInvoiceNumber }", None, make_context(viewer_user))

        assert result.data["nextInvoiceNumber"] == "INV-00042"


@pytest.mark.django_db
class TestBulkInvoiceAction:
    def test_finalize(self, user, make_invoice):
        draft = make_invoice()
        opened = make_invoice(status=Status.OPEN)

        result = run_graphql(BULK_ACTION, {"action": "finalize", "ids": [draft.id, opened.id]}, make_context(user))

        assert result.data["bulkInvoiceAction"] == {
            "success": True,
            "error": None,
            "count": 1,
            "invoiceIds": [draft.id],
        }

    def test_update_status(self, user, make_invoice):
        opened = make_invoice(status=Status.OPEN)

        result = run_graphql(
            BULK_ACTION,
            {"action": "update_status", "ids": [opened.id], "status": "PAID"},
            make_context(user),
        )

        assert result.data["bulkInvoiceAction"]["count"] == 1
        opened.refresh_from_db()
        assert opened.status == Status.PAID

    def test_empty_selection(self, user):
        result = run_graphql(BULK_ACTION, {"action": "finalize", "ids": []}, make_context(user))

        assert result.data["bulkInvoiceAction"]["error"] == "No invoices selected"

    def test_invalid_action(self, user, make_invoice):
        result = run_graphql(BULK_ACTION, {"action": "archive", "ids": [make_invoice().id]}, make_context(user))

        assert result.data["bulkInvoiceAction"]["success"] is False
        assert result.data["bulkInvoiceAction"]["error"] == "Invalid action: archive"

    def test_foreign_ids(self, user, other_organization, make_customer, make_invoice):
        foreign = make_invoice(client=make_customer(email="o@example.com", organization=other_organization))

        result = run_graphql(BULK_ACTION, {"action": "delete", "ids": [foreign.id]}, make_context(user))

        assert result.data["bulkInvoiceAction"]["success"] is False
        assert Invoice.objects.filter(id=foreign.id).exists()

    def test_mixed_batch_reports_foreign_ids(self, user, other_organization, make_customer, make_invoice):
        draft = make_invoice()
        foreign = make_invoice(client=make_customer(email="o.com", organization=other_organization))

        result = run_graphql(
            """
            mutation Bulk($ids: [Int!]!) {
                bulkInvoiceAction(action: "finalize", invoiceIds: $ids) { success count invoiceIds notFoundIds }
            }
            """,
            {"ids": [draft.id, foreign.id]},
            make_context(user),
        )

        assert result.data["bulkInvoiceAction"] == {
            "success": True,
            "count": 1,
            "invoiceIds": [draft.id],
            "notFoundIds": [foreign.id],
        }
        foreign.refresh_from_db()
        assert foreign.status == Status.DRAFT

    def test_viewer_denied(self, viewer_user, make_invoice):
        draft = make_invoice()

        result = run_graphql(BULK_ACTION, {"action": "delete", "ids": [draft.id]}, make_context(viewer_user))

        assert result.data["bulkInvoiceAction"]["error"] == "Permission denied"
        assert Invoice.objects.filter(id=draft.id).exists()


@pytest.mark.django_db
class TestVoidInvoice:
    def test_void(self, user, make_invoice):
        result = run_graphql(VOID, {"id": make_invoice(status=Status.OPEN).id}, make_context(user))

        assert result.data["voidInvoice"]["success"] is True
        assert result.data["voidInvoice"]["invoice"]["status"] == "VOID"

    def test_paid_invoice(self, user, make_invoice):
        result = run_graphql(VOID, {"id": make_invoice(status=Status.PAID).id}, make_context(user))

        assert result.data["voidInvoice"] == {
            "success": False,
            "error": "Cannot void a paid invoice",
            "invoice": None,
        }

    def test_manager_cannot_void(self, manager_user, make_invoice):
        invoice = make_invoice(status=Status.OPEN)

        result = run_graphql(VOID, {"id": invoice.id}, make_context(manager_user))

        assert result.data["voidInvoice"]["error"] == "Permission denied"
        invoice.refresh_from_db()
        assert invoice.status == Status.OPEN


@pytest.mark.django_db
class TestCreateInvoiceMutation:
    def test_create(self, manager_user, customer):
        result = run_graphql(
            CREATE,
            {
                "input": {
                    "clientId": customer.id,
                    "items": [{"description": "Initial Cleanup - Deep", "unitPriceCents": 7500}],
                    "taxRate": "10",
                    "dueDate": "2026-11-15",
                }
            },
            make_context(manager_user),
        )

        assert result.errors is None
        data = result.data["createInvoice"]
        assert data["success"] is True
        assert data["invoice"]["invoiceNumber"] == "INV-00001"
        assert data["invoice"]["status"] == "DRAFT"
        assert data["invoice"]["taxCents"] == 750
        assert data["invoice"]["totalCents"] == 8250

    def test_unknown_client(self, user):
        result = run_graphql(
            CREATE,
            {"input": {"clientId": 999999, "items": [{"description": "Visit", "unitPriceCents": 100}]}},
            make_context(user),
        )

        assert result.data["createInvoice"]["success"] is False
        assert "not found" in result.data["createInvoice"]["error"]


@pytest.mark.django_db
class TestUpdateDraftInvoiceMutation:
    def test_update_and_finalize(self, manager_user, make_invoice):
        draft = make_invoice()

        result = run_graphql(
            UPDATE_DRAFT,
            {
                "input": {
                    "invoiceId": draft.id,
                    "items": [{"description": "Yard Deodorizer", "unitPriceCents": 1500, "quantity": 2}],
                    "notes": "Deodorizer only",
                    "finalize": True,
                }
            },
            make_context(manager_user),
        )

        assert result.errors is None
        assert result.data["updateDraftInvoice"] == {
            "success": True,
            "error": None,
            "invoice": {
                "status": "OPEN",
                "totalCents": 3000,
                "notes": "Deodorizer only",
                "items": [{"description": "Yard Deodorizer", "totalCents": 3000}],
            },
        }

    def test_open_invoice_rejected(self, user, make_invoice):
        opened = make_invoice(status=Status.OPEN)

        result = run_graphql(
            UPDATE_DRAFT,
            {"input": {"invoiceId": opened.id, "items": [{"description": "Visit", "unitPriceCents": 100}]}},
            make_context(user),
        )

        assert result.data["updateDraftInvoice"] == {
            "success": False,
            "error": "Only draft invoices can be edited",
            "invoice": None,
        }
        opened.refresh_from_db()
        assert opened.total_cents == 5000

    def test_viewer_denied(self, viewer_user, make_invoice):
        draft = make_invoice()

        result = run_graphql(
            UPDATE_DRAFT,
            {"input": {"invoiceId": draft.id, "items": [{"description": "Visit", "unitPriceCents": 100}]}},
            make_context(viewer_user),
        )

        assert result.data["updateDraftInvoice"]["error"] == "Permission denied"


@pytest.mark.django_db
class TestRecordPaymentMutation:
    def test_settles_invoice(self, user, make_invoice):
        invoice = make_invoice(status=Status.OPEN, total_cents=5000)

        result = run_graphql(
            RECORD_PAYMENT,
            {"id": invoice.id, "amount": 5000, "method": "CARD"},
            make_context(user),
        )

        assert result.data["recordInvoicePayment"]["invoice"] == {
            "status": "PAID",
            "amountDueCents": 0,
            "paymentMethod": "CARD",
        }

    def test_rejected_on_void(self, user, make_invoice):
        invoice = make_invoice(status=Status.VOID)

        result = run_graphql(
            RECORD_PAYMENT,
            {"id": invoice.id, "amount": 5000, "method": "CARD"},
            make_context(user),
        )

        assert result.data["recordInvoicePayment"]["success"] is False
