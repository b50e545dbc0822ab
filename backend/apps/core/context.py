"""Per-request GraphQL context carrying the bearer-identified user."""
from dataclasses import dataclass

from django.http import HttpRequest

from apps.core.auth import get_bearer_token, get_user_from_token
from apps.organizations.models import User


@dataclass
class Context:
    request: HttpRequest
    user: User | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def get_context(request: HttpRequest) -> Context:
    token = get_bearer_token(request)
    return Context(request=request, user=get_user_from_token(token) if token else None)
