"""Pytest configuration and fixtures."""
import pytest

from apps.clients.models import Client, Dog, Location
from apps.invoices.models import Invoice
from apps.organizations.models import Organization, Role, User
from apps.subscriptions.models import Subscription


@pytest.fixture
def organization(db):
    """Create a test organization.

    The post_save signal creates default roles (Admin, Manager, Viewer).
    """
    return Organization.objects.create(name="Test Scoopers", slug="test-scoopers")


@pytest.fixture
def other_organization(db):
    return Organization.objects.create(name="Other Scoopers", slug="other-scoopers")


@pytest.fixture
def user(db, organization):
    """Create a test user with Admin role (full permissions for tests)."""
    u = User.objects.create_user(
        email="test@example.com",
        password="testpass123",
        organization=organization,
    )
    admin_role = Role.objects.get(organization=organization, name="Admin")
    u.roles.add(admin_role)
    return u


@pytest.fixture
def viewer_user(db, organization):
    u = User.objects.create_user(
        email="viewer@example.com",
        password="view123",
        organization=organization,
    )
    u.roles.add(Role.objects.get(organization=organization, name="Viewer"))
    return u


@pytest.fixture
def make_customer(organization):
    """Factory for clients of the test organization, each with a primary location."""

    def _make(first_name="Pat", last_name="Jones", email="pat@example.com", dogs=1, **kwargs):
        org = kwargs.pop("organization", organization)
        customer = Client.objects.create(
            organization=org,
            first_name=first_name,
            last_name=last_name,
            email=email,
            **kwargs,
        )
        Location.objects.create(
            organization=org,
            client=customer,
            address_line1="12 Elm St",
            city="Sacramento",
            state="CA",
            zip_code="95814",
        )
        for i in range(dogs):
            Dog.objects.create(organization=org, client=customer, name=f"Dog {i + 1}")
        return customer

    return _make


@pytest.fixture
def customer(make_customer):
    """A residential client (named to avoid pytest-django's ``client`` fixture)."""
    return make_customer()


@pytest.fixture
def make_subscription():
    """Factory for subscriptions on a client's primary location."""

    def _make(customer, frequency="WEEKLY", price_per_visit_cents=2300, **kwargs):
        return Subscription.objects.create(
            organization=customer.organization,
            client=customer,
            location=customer.locations.first(),
            frequency=frequency,
            price_per_visit_cents=price_per_visit_cents,
            **kwargs,
        )

    return _make


@pytest.fixture
def subscription(customer, make_subscription):
    return make_subscription(customer)


@pytest.fixture
def make_invoice(customer):
    """Factory for invoices; numbers default to the next free INV-<n>."""

    def _make(client=None, invoice_number=None, status=Invoice.Status.DRAFT, total_cents=5000, **kwargs):
        client = client or customer
        if invoice_number is None:
            invoice_number = f"INV-{Invoice.objects.filter(organization=client.organization).count() + 1:05d}"
        return Invoice.objects.create(
            organization=client.organization,
            client=client,
            invoice_number=invoice_number,
            status=status,
            subtotal_cents=total_cents,
            total_cents=total_cents,
            amount_due_cents=total_cents,
            **kwargs,
        )

    return _make
