"""Per-visit price resolution from tiered pricing rules."""
from dataclasses import dataclass

from apps.pricing.frequencies import DOUBLED_FREQUENCIES, normalize_frequency
from apps.pricing.models import PricingRule


@dataclass
class PriceResolution:
    """Outcome of resolving a price.

    ``price_not_configured`` distinguishes "no rule matched, quote manually"
    from a rule that legitimately prices the service at zero.
    """

    per_visit_cents: int
    rule: PricingRule | None = None
    price_not_configured: bool = False

    @classmethod
    def not_configured(cls) -> "PriceResolution":
        return cls(per_visit_cents=0, rule=None, price_not_configured=True)


class PricingRuleResolver:
    """Select the applicable pricing rule for an organization."""

    def __init__(self, organization):
        self.organization = organization

    def active_rules(self, frequency):
        return PricingRule.objects.filter(
            organization=self.organization,
            frequency=frequency,
            is_active=True,
        ).order_by("-priority", "created_at", "id")

    def resolve(self, frequency, dog_count: int, zip_code: str | None = None) -> PriceResolution:
        """Resolve the per-visit price for a frequency and dog count.

        ``zip_code`` is accepted for callers that have one but does not filter
        rules. Raises UnknownFrequencyError for unrecognized frequencies and
        ValueError for a dog count below one.
        """
        if dog_count < 1:
            raise ValueError("Dog count must be at least 1")

        requested = normalize_frequency(frequency)
        base_frequency = DOUBLED_FREQUENCIES.get(requested, requested)

        rule = next(
            (r for r in self.active_rules(base_frequency) if r.covers(dog_count)),
            None,
        )
        if rule is None:
            return PriceResolution.not_configured()

        price = rule.base_price_cents
        if rule.is_open_ended and rule.per_unit_overage_cents > 0:
            extra_dogs = max(0, dog_count - rule.effective_min_dogs)
            price += extra_dogs * rule.per_unit_overage_cents

        if requested in DOUBLED_FREQUENCIES:
            price *= 2

        return PriceResolution(per_visit_cents=price, rule=rule)
