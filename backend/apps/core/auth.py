"""Bearer-token helpers: staff JWTs and the scheduler's shared secret."""
import hmac
from datetime import datetime, timedelta, timezone

import jwt
from django.conf import settings

from apps.organizations.models import User

BEARER_PREFIX = "Bearer "
JWT_ALGORITHM = "HS256"


def get_bearer_token(request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith(BEARER_PREFIX):
        return None
    return auth_header[len(BEARER_PREFIX):]


def bearer_matches_secret(request, secret: str) -> bool:
    """Compare the request's bearer token with ``secret`` in constant time."""
    token = get_bearer_token(request)
    if token is None:
        return False
    return hmac.compare_digest(token.encode(), secret.encode())


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    """Issue a signed token identifying ``user`` within their organization.

    Lifetime defaults to ``ACCESS_TOKEN_LIFETIME_HOURS``.
    """
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.ACCESS_TOKEN_LIFETIME_HOURS)

    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "org_id": user.organization_id,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
        "type": "access",
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> dict | None:
    """Return the verified claims, or None for expired and malformed tokens."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        # ExpiredSignatureError is a subclass
        return None


def get_user_from_token(token: str) -> User | None:
    claims = decode_token(token)
    if not claims or claims.get("type") != "access" or "sub" not in claims:
        return None
    try:
        return User.objects.select_related("organization").get(
            id=int(claims["sub"]), is_active=True
        )
    except (User.DoesNotExist, ValueError):
        return None
