"""Public price quotes for the marketing and onboarding flows."""
import logging
from dataclasses import dataclass, field
from decimal import Decimal

from apps.core.money import cents_to_dollars
from apps.pricing.frequencies import Frequency, normalize_frequency, to_monthly_cents
from apps.pricing.models import AddOn
from apps.pricing.resolver import PricingRuleResolver

logger = logging.getLogger(__name__)

CUSTOM_QUOTE_DESCRIPTION = "Please contact us for a custom quote."
HIDDEN_PLACEMENT = "DONT_SHOW"

# How long since the yard was last cleaned -> initial cleanup add-on name.
# None means the first visit is a regular one and costs nothing extra.
INITIAL_CLEANUP_BRACKETS = {
    "one_week": None,
    "two_weeks": None,
    "three_weeks": "Initial Cleanup - Moderate",
    "one_month": "Initial Cleanup - Moderate",
    "two_months": "Initial Cleanup - Heavy",
    "3-4_months": "Initial Cleanup - Heavy",
    "5-6_months": "Initial Cleanup - Deep",
    "7-9_months": "Initial Cleanup - Deep",
    "10+_months": "Initial Cleanup - Deep",
}


@dataclass
class QuoteCrossSell:
    id: str
    name: str
    description: str
    unit_amount: Decimal
    unit: str


@dataclass
class PriceQuote:
    """A quote in dollars, as shown to a prospective client."""

    frequency: str
    number_of_dogs: int
    base_price: Decimal
    initial_cleanup_fee: Decimal
    price_not_configured: bool
    monthly_price: Decimal | None = None
    initial_cleanup_add_on_id: int | None = None
    custom_price_description: str | None = None
    cross_sells: list[QuoteCrossSell] = field(default_factory=list)

    def as_dict(self) -> dict:
        data = {
            "basePrice": float(self.base_price),
            "recurringPrice": float(self.base_price),
            "initialCleanupFee": float(self.initial_cleanup_fee),
            "initialCleanupAddOnId": self.initial_cleanup_add_on_id,
            "frequency": self.frequency,
            "numberOfDogs": self.number_of_dogs,
            "priceNotConfigured": self.price_not_configured,
        }
        if self.monthly_price is not None:
            data["monthlyPrice"] = float(self.monthly_price)
        if self.custom_price_description:
            data["customPriceDescription"] = self.custom_price_description
        return {
            "success": True,
            "pricing": data,
            "crossSells": [
                {
                    "id": cs.id,
                    "name": cs.name,
                    "description": cs.description,
                    "unitAmount": float(cs.unit_amount),
                    "unit": cs.unit,
                }
                for cs in self.cross_sells
            ],
        }


class PricingQuoteService:
    """Build quotes from an organization's pricing rules and add-ons.

    Never raises for an unmatched tier: the quote comes back with
    ``price_not_configured`` set instead.
    """

    def __init__(self, organization):
        self.organization = organization
        self.resolver = PricingRuleResolver(organization)

    def quote(
        self,
        zip_code: str,
        number_of_dogs: int,
        frequency: str,
        last_cleaned: str | None = None,
    ) -> PriceQuote:
        """Quote a service configuration.

        Raises UnknownFrequencyError for an unrecognized frequency and
        ValueError for a dog count below one.
        """
        normalized = normalize_frequency(frequency)
        resolution = self.resolver.resolve(normalized, number_of_dogs, zip_code=zip_code)

        if resolution.price_not_configured:
            logger.info(
                "No pricing rule for org=%s frequency=%s dogs=%d",
                self.organization.slug,
                normalized,
                number_of_dogs,
            )
            return PriceQuote(
                frequency=frequency,
                number_of_dogs=number_of_dogs,
                base_price=cents_to_dollars(0),
                monthly_price=cents_to_dollars(0),
                initial_cleanup_fee=cents_to_dollars(0),
                price_not_configured=True,
                custom_price_description=CUSTOM_QUOTE_DESCRIPTION,
            )

        monthly_price = None
        if normalized != Frequency.ONETIME:
            monthly_price = cents_to_dollars(
                to_monthly_cents(resolution.per_visit_cents, normalized, strict=True)
            )

        cleanup_add_on = self.initial_cleanup_add_on(last_cleaned)

        return PriceQuote(
            frequency=frequency,
            number_of_dogs=number_of_dogs,
            base_price=cents_to_dollars(resolution.per_visit_cents),
            monthly_price=monthly_price,
            initial_cleanup_fee=cents_to_dollars(cleanup_add_on.price_cents if cleanup_add_on else 0),
            initial_cleanup_add_on_id=cleanup_add_on.id if cleanup_add_on else None,
            price_not_configured=False,
            cross_sells=self.cross_sells(),
        )

    def initial_cleanup_add_on(self, last_cleaned: str | None) -> AddOn | None:
        """Return the add-on charged for the first cleanup, if any."""
        if not last_cleaned:
            return None
        add_on_name = INITIAL_CLEANUP_BRACKETS.get(last_cleaned)
        if add_on_name is None:
            return None
        return AddOn.objects.filter(
            organization=self.organization,
            name=add_on_name,
            is_active=True,
        ).first()

    def cross_sells(self) -> list[QuoteCrossSell]:
        config = self.organization.residential_cross_sells
        if config["placement"] == HIDDEN_PLACEMENT:
            return []
        return [
            QuoteCrossSell(
                id=str(item.get("id", "")),
                name=item.get("name", ""),
                description=item.get("description", ""),
                unit_amount=cents_to_dollars(item.get("price_per_unit_cents", 0)),
                unit=item.get("unit", ""),
            )
            for item in config["items"]
        ]
