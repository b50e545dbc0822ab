"""Middleware for activity logging."""

from apps.audit.services import clear_current_user, set_current_user
from apps.core.auth import get_bearer_token, get_user_from_token


class ActivityActorMiddleware:
    """Make the requesting user available to activity logging."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        user = None
        session_user = getattr(request, "user", None)
        if session_user is not None and session_user.is_authenticated:
            user = session_user
        else:
            token = get_bearer_token(request)
            if token:
                user = get_user_from_token(token)

        if user:
            set_current_user(user)

        try:
            return self.get_response(request)
        finally:
            clear_current_user()
