"""Pricing rule administration."""
import logging

from django.db import transaction

from apps.audit.models import ActivityLog
from apps.audit.services import ActivityLogService
from apps.core.exceptions import InvalidStateError, NotFoundError
from apps.pricing.frequencies import DOUBLED_FREQUENCIES, normalize_frequency
from apps.pricing.models import PricingRule

logger = logging.getLogger(__name__)

# Fields a revision may change; everything else is carried over
REVISABLE_FIELDS = {
    "name",
    "description",
    "frequency",
    "min_dogs",
    "max_dogs",
    "base_price_cents",
    "per_unit_overage_cents",
    "initial_cleanup_cents",
    "zip_codes",
    "priority",
}


class PricingRuleService:
    """Create, revise and retire an organization's pricing rules.

    Rules are never edited in place. A revision deactivates the current
    version and inserts its successor, so prices already quoted or
    snapshotted onto subscriptions can be traced to the rule they came from.
    """

    def __init__(self, organization):
        self.organization = organization

    def list_rules(self, frequency=None, include_inactive: bool = False):
        queryset = PricingRule.objects.filter(organization=self.organization)
        if frequency:
            queryset = queryset.filter(frequency=normalize_frequency(frequency))
        if not include_inactive:
            queryset = queryset.filter(is_active=True)
        return queryset.order_by("-priority", "created_at", "id")

    def get_rule(self, rule_id: int) -> PricingRule:
        try:
            return PricingRule.objects.get(id=rule_id, organization=self.organization)
        except PricingRule.DoesNotExist:
            raise NotFoundError(f"Pricing rule {rule_id} not found")

    def create_rule(self, **fields) -> PricingRule:
        """Create version 1 of a new rule."""
        unknown = set(fields) - REVISABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown pricing rule fields: {', '.join(sorted(unknown))}")
        fields["frequency"] = normalize_frequency(fields.get("frequency"))
        self._validate(fields)

        rule = PricingRule.objects.create(organization=self.organization, **fields)
        logger.info("Created pricing rule %s (%s)", rule.id, rule.name)
        ActivityLogService.record(
            self.organization,
            ActivityLog.Action.PRICING_RULE_CREATED,
            "pricing_rule",
            [rule.id],
            details={"name": rule.name, "base_price_cents": rule.base_price_cents},
        )
        return rule

    def revise_rule(self, rule: PricingRule, **changes) -> PricingRule:
        """Deactivate ``rule`` and create its next version with ``changes`` applied."""
        unknown = set(changes) - REVISABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown pricing rule fields: {', '.join(sorted(unknown))}")
        if not rule.is_active:
            raise InvalidStateError("Only the active version of a pricing rule can be revised")

        fields = {name: getattr(rule, name) for name in REVISABLE_FIELDS}
        fields.update(changes)
        fields["frequency"] = normalize_frequency(fields["frequency"])
        self._validate(fields)

        with transaction.atomic():
            rule.is_active = False
            rule.save(update_fields=["is_active", "updated_at"])
            revision = PricingRule.objects.create(
                organization=self.organization,
                version=rule.version + 1,
                supersedes=rule,
                **fields,
            )

        logger.info("Revised pricing rule %s -> %s (v%d)", rule.id, revision.id, revision.version)
        ActivityLogService.record(
            self.organization,
            ActivityLog.Action.PRICING_RULE_REVISED,
            "pricing_rule",
            [rule.id, revision.id],
            details={"changes": sorted(changes), "version": revision.version},
        )
        return revision

    def deactivate_rule(self, rule: PricingRule) -> PricingRule:
        if not rule.is_active:
            return rule
        rule.is_active = False
        rule.save(update_fields=["is_active", "updated_at"])
        ActivityLogService.record(
            self.organization,
            ActivityLog.Action.PRICING_RULE_DEACTIVATED,
            "pricing_rule",
            [rule.id],
        )
        return rule

    @staticmethod
    def _validate(fields: dict):
        if not fields.get("name"):
            raise ValueError("name is required")
        if fields.get("base_price_cents") is None:
            raise ValueError("base_price_cents is required")
        frequency = fields.get("frequency")
        if frequency in DOUBLED_FREQUENCIES:
            base = DOUBLED_FREQUENCIES[frequency]
            raise ValueError(
                f"{frequency.value} is priced from {base.value} rules at double the per-visit price; "
                f"create a {base.value} rule instead"
            )
        if fields["base_price_cents"] < 0 or (fields.get("per_unit_overage_cents") or 0) < 0:
            raise ValueError("Prices cannot be negative")
        min_dogs = fields.get("min_dogs")
        max_dogs = fields.get("max_dogs")
        if min_dogs is not None and min_dogs < 1:
            raise ValueError("min_dogs must be at least 1")
        if min_dogs is not None and max_dogs is not None and max_dogs < min_dogs:
            raise ValueError("max_dogs cannot be lower than min_dogs")
