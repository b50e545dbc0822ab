"""Organization middleware."""
from django.utils.deprecation import MiddlewareMixin

from apps.core.permissions import get_current_user_from_request


class OrganizationMiddleware(MiddlewareMixin):
    """Attach the requesting user's organization to the request.

    Session users (admin) are used first, then a Bearer JWT.
    """

    def process_request(self, request):
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            user = get_current_user_from_request(request)
        request.organization = getattr(user, "organization", None) if user else None
