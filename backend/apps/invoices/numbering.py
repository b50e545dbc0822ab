"""Sequential per-organization invoice numbers (INV-00001, INV-00002, ...)."""
import logging
import re

from django.db import IntegrityError, transaction
from django.db.models import IntegerField, Max
from django.db.models.functions import Cast, Substr

from apps.invoices.models import Invoice

INVOICE_NUMBER_PREFIX = "INV-"
INVOICE_NUMBER_DIGITS = 5
INVOICE_NUMBER_PATTERN = re.compile(r"^INV-(\d+)$")
DEFAULT_ALLOCATION_ATTEMPTS = 3

logger = logging.getLogger(__name__)


class InvoiceNumberService:
    """Derive the next invoice number from what is already stored.

    Nothing is cached: every call re-reads the organization's highest number,
    so a long billing run sees invoices created elsewhere in the meantime.
    Two writers can still race for the same number; the unique constraint on
    (organization, invoice_number) rejects the loser, which retries.
    """

    def __init__(self, organization):
        self.organization = organization

    def get_next_number(self) -> str:
        """Return the number the next invoice should be stored under."""
        return self.format_number(self.current_max() + 1)

    def preview_next_number(self) -> str:
        """Display-only preview of the next number."""
        return self.get_next_number()

    def current_max(self) -> int:
        """Highest numeric suffix among the organization's INV-<digits> numbers."""
        result = (
            Invoice.objects.filter(
                organization=self.organization,
                invoice_number__regex=r"^INV-[0-9]+$",
            )
            .annotate(
                sequence=Cast(
                    Substr("invoice_number", len(INVOICE_NUMBER_PREFIX) + 1),
                    IntegerField(),
                )
            )
            .aggregate(highest=Max("sequence"))
        )
        return result["highest"] or 0

    @staticmethod
    def format_number(sequence: int) -> str:
        return f"{INVOICE_NUMBER_PREFIX}{sequence:0{INVOICE_NUMBER_DIGITS}d}"

    @staticmethod
    def parse_number(invoice_number: str) -> int | None:
        """Return the numeric part of an INV-<digits> number, or None."""
        match = INVOICE_NUMBER_PATTERN.match(invoice_number or "")
        if match is None:
            return None
        return int(match.group(1))

    def create_with_next_number(self, create, attempts: int = DEFAULT_ALLOCATION_ATTEMPTS, on_conflict=None):
        """Call ``create(invoice_number)`` in a savepoint, retrying on a number clash.

        A fresh number is read before every attempt. ``on_conflict`` runs after
        each IntegrityError and may raise to stop retrying (e.g. when the clash
        was another constraint). The last IntegrityError propagates.
        """
        for attempt in range(1, attempts + 1):
            invoice_number = self.get_next_number()
            try:
                with transaction.atomic():
                    return create(invoice_number)
            except IntegrityError:
                if on_conflict is not None:
                    on_conflict()
                if attempt == attempts:
                    raise
                logger.warning(
                    "Invoice number %s was taken, retrying (attempt %d)", invoice_number, attempt
                )
