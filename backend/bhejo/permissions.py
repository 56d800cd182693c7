# Overview: Capability levels, the checks that establish them, and the per-route matrices.

"""
Authorization matrix.

Each route + verb maps to the minimum Capability it needs. A capability is
enforced as an ordered tuple of checks; each check takes the request and
the identity established so far and returns a Decision. The first denial
stops the chain, so ADMIN always runs the authentication check first.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .models import User
from .services import session_service


class Capability(str, Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None
    status: int = 200
    user: User | None = None

    @classmethod
    def allow(cls, user: User | None = None) -> "Decision":
        return cls(allowed=True, user=user)

    @classmethod
    def deny(cls, reason: str, status: int) -> "Decision":
        return cls(allowed=False, reason=reason, status=status)


Check = Callable[[object, "User | None"], Decision]


def _bearer_token(req) -> str | None:
    auth_header = req.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def check_authenticated(req, user: User | None) -> Decision:
    """verify-user: resolve the bearer token to an active account."""
    token = _bearer_token(req)
    if token is None:
        return Decision.deny("Authentication required", 401)

    context = session_service.validate_session(token)
    if context is None:
        return Decision.deny("Invalid or expired token", 401)

    return Decision.allow(context.user)


def check_admin(req, user: User | None) -> Decision:
    """verify-admin: the identity established so far must carry the admin flag."""
    if user is None:
        return Decision.deny("Authentication required", 401)
    if not user.admin:
        return Decision.deny("You are not authorized to perform this operation!", 403)
    return Decision.allow(user)


CAPABILITY_CHECKS: dict[Capability, tuple[Check, ...]] = {
    Capability.PUBLIC: (),
    Capability.AUTHENTICATED: (check_authenticated,),
    Capability.ADMIN: (check_authenticated, check_admin),
}


def evaluate(capability: Capability, req) -> Decision:
    user = None
    for check in CAPABILITY_CHECKS[capability]:
        decision = check(req, user)
        if not decision.allowed:
            return decision
        user = decision.user
    return Decision.allow(user)


# Paths are relative to the blueprint's url_prefix, in Flask rule syntax.
PRODUCT_PERMISSIONS: dict[tuple[str, str], Capability] = {
    ("/", "GET"): Capability.PUBLIC,
    ("/", "POST"): Capability.AUTHENTICATED,
    ("/", "PUT"): Capability.ADMIN,
    ("/", "DELETE"): Capability.ADMIN,
    ("/<product_id>", "GET"): Capability.PUBLIC,
    ("/<product_id>", "POST"): Capability.ADMIN,
    ("/<product_id>", "PUT"): Capability.AUTHENTICATED,
    ("/<product_id>", "DELETE"): Capability.AUTHENTICATED,
    ("/approve/<product_id>", "POST"): Capability.ADMIN,
    ("/views/<product_id>", "POST"): Capability.PUBLIC,
}

USER_PERMISSIONS: dict[tuple[str, str], Capability] = {
    ("/", "GET"): Capability.ADMIN,
    ("/signup", "POST"): Capability.PUBLIC,
    ("/login", "POST"): Capability.PUBLIC,
    ("/logout", "GET"): Capability.AUTHENTICATED,
}


def capability_for(matrix: dict[tuple[str, str], Capability], path: str, method: str) -> Capability:
    try:
        return matrix[(path, method.upper())]
    except KeyError:
        raise LookupError(f"No capability declared for {method.upper()} {path}") from None
