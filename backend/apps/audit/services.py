"""Activity logging service."""

import logging
import threading

from django.db import DatabaseError, transaction

from apps.audit.models import ActivityLog

logger = logging.getLogger(__name__)

# Thread-local storage for the acting user
_thread_locals = threading.local()


def set_current_user(user):
    """Set the acting user for activity logging in this thread."""
    _thread_locals.user = user


def get_current_user():
    """Get the acting user for activity logging from this thread."""
    return getattr(_thread_locals, "user", None)


def clear_current_user():
    """Clear the acting user from thread-local storage."""
    if hasattr(_thread_locals, "user"):
        del _thread_locals.user


class ActivityLogService:
    """Append entries to the activity log.

    Logging is a side effect of a state change, never part of it: a failed
    write is reported as a warning and the caller's transaction carries on.
    """

    @classmethod
    def record(
        cls,
        organization,
        action: str,
        entity_type: str,
        entity_ids,
        details: dict | None = None,
        user=None,
    ) -> ActivityLog | None:
        """Record an action. Returns the entry, or None if it could not be written."""
        if user is None:
            user = get_current_user()
        try:
            # Savepoint so a failed insert does not poison an enclosing atomic block
            with transaction.atomic():
                return ActivityLog.objects.create(
                    organization=organization,
                    action=action,
                    entity_type=entity_type,
                    entity_ids=[int(pk) for pk in entity_ids],
                    details=details or {},
                    user=user if getattr(user, "pk", None) else None,
                )
        except DatabaseError:
            logger.warning(
                "Failed to record activity %s for %s %s",
                action,
                entity_type,
                list(entity_ids),
                exc_info=True,
            )
            return None
