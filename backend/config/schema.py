"""Root GraphQL schema."""
import strawberry

from apps.audit.schema import ActivityLogQuery
from apps.clients.schema import ClientQuery
from apps.core.schema import CoreQuery
from apps.invoices.schema import InvoiceMutation, InvoiceQuery
from apps.pricing.schema import PricingMutation, PricingQuery


@strawberry.type
class Query(CoreQuery, ClientQuery, InvoiceQuery, PricingQuery, ActivityLogQuery):
    @strawberry.field
    def health(self) -> str:
        return "ok"


@strawberry.type
class Mutation(InvoiceMutation, PricingMutation):
    pass


schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
)
