"""Invoice data classes for structured return values."""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


@dataclass
class LineItemDraft:
    """A line item computed before the invoice is persisted."""

    description: str
    quantity: int
    unit_price_cents: int

    @property
    def total_cents(self) -> int:
        return self.quantity * self.unit_price_cents


class UnitOutcome(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class UnitResult:
    """Outcome of billing one client (or of loading one organization)."""

    outcome: UnitOutcome
    organization_id: int
    client_id: Optional[int] = None
    invoice_id: Optional[int] = None
    invoice_number: str = ""
    reason: str = ""

    @property
    def error_message(self) -> str:
        if self.client_id is not None:
            return f"Client {self.client_id}: {self.reason}"
        return f"Org {self.organization_id}: {self.reason}"


@dataclass
class GenerationReport:
    """Summary of a monthly invoice run."""

    billing_period: date
    results: list[UnitResult] = field(default_factory=list)

    def add(self, result: UnitResult):
        self.results.append(result)

    @property
    def invoices_created(self) -> int:
        return sum(1 for r in self.results if r.outcome == UnitOutcome.CREATED)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.outcome == UnitOutcome.SKIPPED)

    @property
    def errors(self) -> list[str]:
        return [r.error_message for r in self.results if r.outcome == UnitOutcome.ERROR]

    @property
    def message(self) -> str:
        return f"Generated {self.invoices_created} invoices, skipped {self.skipped}"

    def as_dict(self) -> dict:
        return {
            "success": True,
            "message": self.message,
            "invoicesCreated": self.invoices_created,
            "skipped": self.skipped,
            "errors": self.errors,
        }


@dataclass
class InvoiceFilters:
    """Filters for invoice listing. Empty values mean "no filter"."""

    statuses: list[str] = field(default_factory=list)
    created_from: Optional[date] = None
    created_to: Optional[date] = None
    billing_option: str = ""
    payment_method: str = ""
    client_type: str = ""
    search: str = ""
    recurring_only: bool = False
    hide_zero_totals: bool = False
    with_tips: bool = False


@dataclass
class StatusStats:
    count: int = 0
    amount_cents: int = 0


@dataclass
class InvoicePage:
    """One page of invoices plus per-status totals for the whole filter."""

    invoices: list
    total: int
    page: int
    limit: int
    stats: dict[str, StatusStats] = field(default_factory=dict)
    total_amount_cents: int = 0

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit


@dataclass
class BulkActionResult:
    """Result of a bulk invoice action. ``count`` may be below the requested ids.

    ``not_found_ids`` lists ids that are missing or belong to another
    organization; they are reported, never acted on.
    """

    action: str
    requested: int
    count: int
    affected_ids: list[int] = field(default_factory=list)
    not_found_ids: list[int] = field(default_factory=list)
