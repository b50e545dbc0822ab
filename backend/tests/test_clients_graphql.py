"""Tests for the client GraphQL queries."""
from unittest.mock import Mock

import pytest

from apps.clients.models import Client, ClientCrossSell
from apps.core.context import Context
from config.schema import schema


def run_graphql(query, variables, context):
    """Helper to run GraphQL queries synchronously."""
    return schema.execute_sync(query, variable_values=variables, context_value=context)


def make_context(user=None):
    return Context(request=Mock(), user=user)


CLIENTS = """
query Clients($search: String, $status: String) {
    clients(search: $search, status: $status) { id displayName status }
}
"""

CLIENT = """
query Client($id: Int!) {
    client(id: $id) {
        displayName
        locations { zipCode isPrimary }
        dogs { name }
        crossSells { name pricePerUnitCents }
        subscriptions { frequency pricePerVisitCents monthlyPriceCents }
    }
}
"""


@pytest.mark.django_db
class TestClientQueries:
    def test_list(self, viewer_user, make_customer):
        make_customer(first_name="Robin", last_name="Hart", email="robin@example.com")
        make_customer(first_name="Alex", last_name="Bell", email="alex@example.com")

        result = run_graphql(CLIENTS, {}, make_context(viewer_user))

        assert result.errors is None
        assert [c["displayName"] for c in result.data["clients"]] == ["Alex Bell", "Robin Hart"]

    def test_search_and_status(self, viewer_user, make_customer):
        make_customer(first_name="Robin", last_name="Hart", email="robin@example.com")
        make_customer(first_name="Alex", last_name="Bell", email="alex@example.com", status=Client.Status.CANCELED)

        by_name = run_graphql(CLIENTS, {"search": "hart"}, make_context(viewer_user))
        by_status = run_graphql(CLIENTS, {"status": "CANCELED"}, make_context(viewer_user))

        assert [c["displayName"] for c in by_name.data["clients"]] == ["Robin Hart"]
        assert [c["displayName"] for c in by_status.data["clients"]] == ["Alex Bell"]

    def test_detail(self, viewer_user, customer, subscription):
        ClientCrossSell.objects.create(
            organization=customer.organization, client=customer, name="Yard Deodorizer", price_per_unit_cents=1500
        )

        result = run_graphql(CLIENT, {"id": customer.id}, make_context(viewer_user))

        data = result.data["client"]
        assert data["displayName"] == "Pat Jones"
        assert data["locations"] == [{"zipCode": "95814", "isPrimary": True}]
        assert data["dogs"] == [{"name": "Dog 1"}]
        assert data["crossSells"] == [{"name": "Yard Deodorizer", "pricePerUnitCents": 1500}]
        assert data["subscriptions"] == [
            {"frequency": "WEEKLY", "pricePerVisitCents": 2300, "monthlyPriceCents": 9950}
        ]

    def test_foreign_client_hidden(self, viewer_user, other_organization, make_customer):
        foreign = make_customer(email="o@example.com", organization=other_organization)

        result = run_graphql(CLIENT, {"id": foreign.id}, make_context(viewer_user))

        assert result.data["client"] is None

    def test_requires_auth(self, db):
        result = run_graphql(CLIENTS, {}, make_context())

        assert "Authentication required" in result.errors[0].message
