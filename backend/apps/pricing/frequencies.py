"""Service frequencies and their conversion to monthly charges.

Frequencies arrive from several callers as loosely formatted strings
("bi_weekly", "biweekly", "once_a_week", ...). They are normalized once at
the boundary into the closed ``Frequency`` enumeration; everything past the
boundary works with enum members only.

The annual visit table is what billed amounts are derived from. Changing a
count changes what clients pay, so counts are never edited in place: add a
new table version and switch ``CURRENT_VISIT_TABLE_VERSION``.
"""
import logging

from django.db import models

from apps.core.money import round_half_up_div, round_to_nearest_50_cents

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


class Frequency(models.TextChoices):
    SEVEN_TIMES_A_WEEK = "SEVEN_TIMES_A_WEEK", "7x per week"
    SIX_TIMES_A_WEEK = "SIX_TIMES_A_WEEK", "6x per week"
    FIVE_TIMES_A_WEEK = "FIVE_TIMES_A_WEEK", "5x per week"
    FOUR_TIMES_A_WEEK = "FOUR_TIMES_A_WEEK", "4x per week"
    THREE_TIMES_A_WEEK = "THREE_TIMES_A_WEEK", "3x per week"
    TWICE_WEEKLY = "TWICE_WEEKLY", "Twice weekly"
    WEEKLY = "WEEKLY", "Weekly"
    BIWEEKLY = "BIWEEKLY", "Every two weeks"
    TWICE_PER_MONTH = "TWICE_PER_MONTH", "Twice per month"
    EVERY_THREE_WEEKS = "EVERY_THREE_WEEKS", "Every three weeks"
    EVERY_FOUR_WEEKS = "EVERY_FOUR_WEEKS", "Every four weeks"
    MONTHLY = "MONTHLY", "Monthly"
    ONETIME = "ONETIME", "One time"


# Synonyms seen on the wire, keyed by their canonical (upper, underscored) form
FREQUENCY_ALIASES = {
    "TWO_TIMES_A_WEEK": Frequency.TWICE_WEEKLY,
    "TWICE_A_WEEK": Frequency.TWICE_WEEKLY,
    "ONCE_A_WEEK": Frequency.WEEKLY,
    "BI_WEEKLY": Frequency.BIWEEKLY,
    "EVERY_OTHER_WEEK": Frequency.BIWEEKLY,
    "TWICE_A_MONTH": Frequency.TWICE_PER_MONTH,
    "ONCE_A_MONTH": Frequency.MONTHLY,
    "ONE_TIME": Frequency.ONETIME,
}

# Frequencies priced as a multiple of another cadence's rules
DOUBLED_FREQUENCIES = {
    Frequency.TWICE_WEEKLY: Frequency.WEEKLY,
}

ANNUAL_VISITS_V1 = {
    Frequency.SEVEN_TIMES_A_WEEK: 365,
    Frequency.SIX_TIMES_A_WEEK: 312,
    Frequency.FIVE_TIMES_A_WEEK: 260,
    Frequency.FOUR_TIMES_A_WEEK: 208,
    Frequency.THREE_TIMES_A_WEEK: 156,
    Frequency.TWICE_WEEKLY: 104,
    Frequency.WEEKLY: 52,
    Frequency.BIWEEKLY: 26,
    Frequency.TWICE_PER_MONTH: 24,
    Frequency.EVERY_THREE_WEEKS: 17,
    Frequency.EVERY_FOUR_WEEKS: 13,
    Frequency.MONTHLY: 12,
    Frequency.ONETIME: 1,
}

VISIT_TABLES = {
    1: ANNUAL_VISITS_V1,
}

CURRENT_VISIT_TABLE_VERSION = 1

# Visits assumed when a stored frequency cannot be recognized
FALLBACK_ANNUAL_VISITS = 12


class UnknownFrequencyError(ValueError):
    """Raised when a frequency value matches no known cadence or alias."""

    status_code = 400

    def __init__(self, value):
        self.value = value
        super().__init__(f"Unknown frequency: {value!r}")


def normalize_frequency(value) -> Frequency:
    """Map a loosely formatted frequency string onto ``Frequency``.

    Raises UnknownFrequencyError for empty or unrecognized values.
    """
    if isinstance(value, Frequency):
        return value
    if not value or not isinstance(value, str):
        raise UnknownFrequencyError(value)

    key = value.strip().upper().replace("-", "_").replace(" ", "_")
    if key in Frequency.values:
        return Frequency(key)
    if key in FREQUENCY_ALIASES:
        return FREQUENCY_ALIASES[key]
    raise UnknownFrequencyError(value)


def annual_visits(frequency, table_version: int = CURRENT_VISIT_TABLE_VERSION, strict: bool = False) -> int:
    """Return the number of visits per year for a frequency.

    Unrecognized frequencies count as monthly (12 visits) and log a warning,
    unless ``strict`` is set, in which case UnknownFrequencyError propagates.
    """
    try:
        table = VISIT_TABLES[table_version]
    except KeyError:
        raise ValueError(f"Unknown visit table version: {table_version}")

    try:
        return table[normalize_frequency(frequency)]
    except UnknownFrequencyError:
        if strict:
            raise
        logger.warning(
            "Unknown frequency %r, billing as %d visits per year",
            frequency,
            FALLBACK_ANNUAL_VISITS,
        )
        return FALLBACK_ANNUAL_VISITS


def to_monthly_cents(
    per_visit_cents: int,
    frequency,
    table_version: int = CURRENT_VISIT_TABLE_VERSION,
    strict: bool = False,
) -> int:
    """Convert a per-visit price into the monthly amount billed for it.

    ``round_to_nearest_50_cents(round(per_visit * annual_visits / 12))``,
    computed in integers so the result is reproducible.
    """
    visits = annual_visits(frequency, table_version=table_version, strict=strict)
    monthly = round_half_up_div(per_visit_cents * visits, MONTHS_PER_YEAR)
    return round_to_nearest_50_cents(monthly)
