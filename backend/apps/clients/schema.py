"""GraphQL schema for clients and their recurring service."""
from typing import List, Optional

import strawberry
import strawberry_django
from strawberry import auto
from django.db.models import Q
from strawberry.types import Info

from apps.core.context import Context
from apps.core.permissions import require_perm
from apps.subscriptions.models import Subscription
from .models import Client, ClientCrossSell, Dog, Location


@strawberry_django.type(Location)
class LocationType:
    id: auto
    address_line1: auto
    address_line2: auto
    city: auto
    state: auto
    zip_code: auto
    is_primary: auto


@strawberry_django.type(Dog)
class DogType:
    id: auto
    name: auto
    is_active: auto


@strawberry_django.type(ClientCrossSell)
class ClientCrossSellType:
    id: auto
    name: auto
    unit: auto
    price_per_unit_cents: auto
    quantity: auto
    status: auto
    is_active: auto


@strawberry_django.type(Subscription)
class SubscriptionType:
    id: auto
    frequency: auto
    price_per_visit_cents: auto
    status: auto
    billing_interval: auto
    billing_option: auto
    created_at: auto

    @strawberry.field
    def monthly_price_cents(self) -> int:
        return self.monthly_price_cents


@strawberry_django.type(Client)
class ClientType:
    id: auto
    first_name: auto
    last_name: auto
    company_name: auto
    email: auto
    phone: auto
    client_type: auto
    status: auto

    @strawberry.field
    def display_name(self) -> str:
        return self.display_name

    @strawberry.field
    def locations(self) -> List[LocationType]:
        return list(self.locations.all())

    @strawberry.field
    def dogs(self) -> List[DogType]:
        return list(self.dogs.all())

    @strawberry.field
    def cross_sells(self) -> List[ClientCrossSellType]:
        return list(self.cross_sells.all())

    @strawberry.field
    def subscriptions(self) -> List[SubscriptionType]:
        return list(self.subscriptions.all())


@strawberry.type
class ClientQuery:
    """Client queries."""

    @strawberry.field
    def clients(
        self,
        info: Info[Context, None],
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[ClientType]:
        """List the organization's clients by name."""
        user = require_perm(info, "clients", "read")
        queryset = Client.objects.filter(organization_id=user.organization_id)
        if status:
            queryset = queryset.filter(status=status)
        if search:
            queryset = queryset.filter(
                Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
                | Q(company_name__icontains=search)
                | Q(email__icontains=search)
            )
        return list(queryset)

    @strawberry.field
    def client(self, info: Info[Context, None], id: int) -> Optional[ClientType]:
        user = require_perm(info, "clients", "read")
        return Client.objects.filter(id=id, organization_id=user.organization_id).first()
