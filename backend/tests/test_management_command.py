"""Tests for the generate_monthly_invoices management command."""
from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from apps.invoices.models import Invoice


@pytest.mark.django_db
class TestGenerateMonthlyInvoicesCommand:
    def test_generates_for_all_organizations(self, subscription):
        out = StringIO()

        call_command("generate_monthly_invoices", stdout=out)

        assert "Generated 1 invoices, skipped 0" in out.getvalue()
        assert Invoice.objects.count() == 1

    def test_single_organization(self, subscription, other_organization, make_customer, make_subscription):
        make_subscription(make_customer(email="o@example.com", organization=other_organization))
        out = StringIO()

        call_command("generate_monthly_invoices", organization="other-scoopers", stdout=out)

        assert Invoice.objects.count() == 1
        assert Invoice.objects.get().organization == other_organization

    def test_unknown_organization(self, db):
        with pytest.raises(CommandError, match="Organization not found: nobody"):
            call_command("generate_monthly_invoices", organization="nobody")
