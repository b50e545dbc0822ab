"""Error taxonomy shared by billing services.

Configuration problems use Django's ImproperlyConfigured and abort the
request. Everything else is recovered at the smallest scope possible.
"""


class BillingError(Exception):
    """Base class for recoverable billing errors."""

    status_code = 400


class NotFoundError(BillingError, LookupError):
    """Entity is missing or belongs to another organization."""

    status_code = 404


class InvalidStateError(BillingError, ValueError):
    """Requested transition is not allowed from the entity's current state."""

    status_code = 400
