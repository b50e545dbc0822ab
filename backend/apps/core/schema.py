"""Shared GraphQL result types and the ``me`` query."""
import strawberry
from strawberry.types import Info

from apps.core.context import Context


@strawberry.type
class ActionResult:
    success: bool = False
    error: str | None = None


@strawberry.type
class CurrentUser:
    """The bearer's identity as the billing console needs it."""

    id: int
    email: str
    first_name: str
    last_name: str
    organization_id: int | None
    organization_name: str | None
    is_admin: bool
    roles: list[str]
    permissions: list[str]

    @classmethod
    def from_user(cls, user) -> "CurrentUser":
        organization = user.organization
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            organization_id=user.organization_id,
            organization_name=organization.name if organization else None,
            is_admin=user.is_admin,
            roles=sorted(user.roles.values_list("name", flat=True)),
            permissions=sorted(user.effective_permissions),
        )


@strawberry.type
class CoreQuery:
    @strawberry.field
    def me(self, info: Info[Context, None]) -> CurrentUser | None:
        """Null for anonymous callers rather than an error."""
        user = info.context.user
        return CurrentUser.from_user(user) if user is not None else None
