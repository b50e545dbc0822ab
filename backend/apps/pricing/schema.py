"""GraphQL schema for pricing rules and quotes."""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

import strawberry
from strawberry.types import Info

from apps.core.context import Context
from apps.core.exceptions import BillingError
from apps.core.permissions import check_perm, require_perm
from apps.core.schema import ActionResult
from apps.pricing.models import PricingRule
from apps.pricing.quotes import PricingQuoteService
from apps.pricing.services import PricingRuleService


@strawberry.type
class PricingRuleType:
    """A versioned per-visit pricing rule."""

    id: int
    name: str
    description: str
    frequency: str
    min_dogs: Optional[int]
    max_dogs: Optional[int]
    base_price_cents: int
    per_unit_overage_cents: int
    initial_cleanup_cents: int
    zip_codes: List[str]
    priority: int
    is_active: bool
    version: int
    supersedes_id: Optional[int]
    created_at: datetime


@strawberry.input
class PricingRuleInput:
    """Input for creating or revising a pricing rule.

    When ``id`` is set the rule is revised: a new version is created and the
    current one is deactivated.
    """

    name: str
    frequency: str
    base_price_cents: int
    id: Optional[int] = None
    description: str = ""
    min_dogs: Optional[int] = None
    max_dogs: Optional[int] = None
    per_unit_overage_cents: int = 0
    initial_cleanup_cents: int = 0
    zip_codes: List[str] = strawberry.field(default_factory=list)
    priority: int = 0


@strawberry.type
class PricingRuleResult:
    success: bool = False
    error: Optional[str] = None
    rule: Optional[PricingRuleType] = None


@strawberry.type
class QuoteCrossSellType:
    id: str
    name: str
    description: str
    unit_amount: Decimal
    unit: str


@strawberry.type
class PriceQuoteType:
    """A price quote in dollars."""

    frequency: str
    number_of_dogs: int
    base_price: Decimal
    monthly_price: Optional[Decimal]
    initial_cleanup_fee: Decimal
    price_not_configured: bool
    custom_price_description: Optional[str]
    cross_sells: List[QuoteCrossSellType]


def _convert_rule(rule: PricingRule) -> PricingRuleType:
    return PricingRuleType(
        id=rule.id,
        name=rule.name,
        description=rule.description,
        frequency=rule.frequency,
        min_dogs=rule.min_dogs,
        max_dogs=rule.max_dogs,
        base_price_cents=rule.base_price_cents,
        per_unit_overage_cents=rule.per_unit_overage_cents,
        initial_cleanup_cents=rule.initial_cleanup_cents,
        zip_codes=list(rule.zip_codes or []),
        priority=rule.priority,
        is_active=rule.is_active,
        version=rule.version,
        supersedes_id=rule.supersedes_id,
        created_at=rule.created_at,
    )


@strawberry.type
class PricingQuery:
    """Pricing queries."""

    @strawberry.field
    def pricing_rules(
        self,
        info: Info[Context, None],
        frequency: Optional[str] = None,
        include_inactive: bool = False,
    ) -> List[PricingRuleType]:
        """List pricing rules in resolution order (priority, then age)."""
        user = require_perm(info, "pricing", "read")
        service = PricingRuleService(user.organization)
        return [
            _convert_rule(rule)
            for rule in service.list_rules(frequency=frequency, include_inactive=include_inactive)
        ]

    @strawberry.field
    def price_quote(
        self,
        info: Info[Context, None],
        zip_code: str,
        number_of_dogs: int,
        frequency: str,
        last_cleaned: Optional[str] = None,
    ) -> PriceQuoteType:
        """Quote a service configuration for the current organization."""
        user = require_perm(info, "pricing", "read")
        quote = PricingQuoteService(user.organization).quote(
            zip_code=zip_code,
            number_of_dogs=number_of_dogs,
            frequency=frequency,
            last_cleaned=last_cleaned,
        )
        return PriceQuoteType(
            frequency=quote.frequency,
            number_of_dogs=quote.number_of_dogs,
            base_price=quote.base_price,
            monthly_price=quote.monthly_price,
            initial_cleanup_fee=quote.initial_cleanup_fee,
            price_not_configured=quote.price_not_configured,
            custom_price_description=quote.custom_price_description,
            cross_sells=[
                QuoteCrossSellType(
                    id=cs.id,
                    name=cs.name,
                    description=cs.description,
                    unit_amount=cs.unit_amount,
                    unit=cs.unit,
                )
                for cs in quote.cross_sells
            ],
        )


@strawberry.type
class PricingMutation:
    """Pricing rule mutations."""

    @strawberry.mutation
    def save_pricing_rule(
        self, info: Info[Context, None], input: PricingRuleInput
    ) -> PricingRuleResult:
        """Create a pricing rule, or revise an existing one when ``id`` is given."""
        user, err = check_perm(info, "pricing", "write")
        if err:
            return PricingRuleResult(success=False, error=err)

        service = PricingRuleService(user.organization)
        fields = {
            "name": input.name,
            "description": input.description,
            "frequency": input.frequency,
            "min_dogs": input.min_dogs,
            "max_dogs": input.max_dogs,
            "base_price_cents": input.base_price_cents,
            "per_unit_overage_cents": input.per_unit_overage_cents,
            "initial_cleanup_cents": input.initial_cleanup_cents,
            "zip_codes": input.zip_codes,
            "priority": input.priority,
        }
        try:
            if input.id is None:
                rule = service.create_rule(**fields)
            else:
                rule = service.revise_rule(service.get_rule(input.id), **fields)
        except (BillingError, ValueError) as e:
            return PricingRuleResult(success=False, error=str(e))

        return PricingRuleResult(success=True, rule=_convert_rule(rule))

    @strawberry.mutation
    def deactivate_pricing_rule(
        self, info: Info[Context, None], rule_id: int
    ) -> ActionResult:
        """Deactivate a pricing rule so it no longer matches quotes."""
        user, err = check_perm(info, "pricing", "write")
        if err:
            return ActionResult(success=False, error=err)

        service = PricingRuleService(user.organization)
        try:
            service.deactivate_rule(service.get_rule(rule_id))
        except BillingError as e:
            return ActionResult(success=False, error=str(e))
        return ActionResult(success=True)
