"""Role-based access checks shared by the GraphQL resolvers and plain views."""
from strawberry.types import Info

from apps.core.context import Context


# Grantable actions per billing resource. Roles store "resource.action" keys.
PERMISSION_REGISTRY = {
    "invoices": ["read", "write", "void"],
    "pricing": ["read", "write"],
    "clients": ["read"],
    "activity": ["read"],
}

ALL_PERMISSIONS = {
    f"{resource}.{action}"
    for resource, actions in PERMISSION_REGISTRY.items()
    for action in actions
}

# Seeded for every new organization. Managers run billing but cannot
# change prices or void issued invoices.
MANAGER_EXCLUDED = {"pricing.write", "invoices.void"}

DEFAULT_ROLES = {
    "Admin": dict.fromkeys(ALL_PERMISSIONS, True),
    "Manager": dict.fromkeys(ALL_PERMISSIONS - MANAGER_EXCLUDED, True),
    "Viewer": dict.fromkeys(
        ["invoices.read", "pricing.read", "clients.read"], True
    ),
}


class PermissionError(Exception):
    """The caller is anonymous or their roles do not grant the action."""


def get_current_user(info: Info[Context, None]):
    if not info.context.is_authenticated:
        raise PermissionError("Authentication required")
    return info.context.user


def require_perm(info: Info[Context, None], resource: str, action: str):
    """Return the caller if they hold ``resource.action``.

    Queries let the raised PermissionError surface as a GraphQL error.
    """
    user = get_current_user(info)
    if not user.has_perm_check(resource, action):
        raise PermissionError(f"Permission denied: {resource}.{action}")
    return user


def check_perm(info: Info[Context, None], resource: str, action: str):
    """Non-raising variant for mutations that report ``{success, error}``.

    Returns ``(user, None)`` or ``(None, reason)``. A user outside any
    organization cannot touch billing data, so that is a denial too.
    """
    user = get_current_user(info)
    if not user.has_perm_check(resource, action):
        return None, "Permission denied"
    if user.organization_id is None:
        return None, "User has no organization assigned"
    return user, None


def get_current_user_from_request(request):
    """Resolve the bearer user of a non-GraphQL request, or None."""
    from apps.core.context import get_context

    context = get_context(request)
    return context.user if context.is_authenticated else None
