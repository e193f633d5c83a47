"""
Actor Authentication
====================

Turns the identity forwarded by the API gateway into an Actor.

The gateway in front of this service terminates user sessions and
forwards the caller's identity as headers; this service never sees
credentials.
"""

from abc import ABC, abstractmethod
from typing import Mapping

from supportdesk.config import ActorRole
from supportdesk.core import UnauthorizedException
from supportdesk.tickets.domain import Actor

ACTOR_ID_HEADER = "x-actor-id"
ACTOR_ROLE_HEADER = "x-actor-role"
TENANT_ID_HEADER = "x-tenant-id"
ACTOR_NAME_HEADER = "x-actor-name"
TENANT_NAME_HEADER = "x-tenant-name"

# Back-office user roles and the support role each maps to
ROLE_ALIASES = {
    "ADMIN": ActorRole.ADMIN,
    "SUPPORT": ActorRole.ADMIN,
    "MERCHANT": ActorRole.MERCHANT,
    "OWNER": ActorRole.MERCHANT,
    "CASHIER": ActorRole.MERCHANT,
}


class IActorAuthenticator(ABC):
    """Resolves the caller of a request or connection."""

    @abstractmethod
    def authenticate(self, headers: Mapping[str, str]) -> Actor:
        """
        Raises:
            UnauthorizedException: identity missing or malformed
        """


class HeaderActorAuthenticator(IActorAuthenticator):

    def authenticate(self, headers: Mapping[str, str]) -> Actor:
        # Starlette's Headers are case-insensitive; plain dicts are not
        normalized = {k.lower(): v for k, v in headers.items()}

        actor_id = (normalized.get(ACTOR_ID_HEADER) or "").strip()
        raw_role = (normalized.get(ACTOR_ROLE_HEADER) or "").strip().upper()
        if not actor_id or not raw_role:
            raise UnauthorizedException("Missing actor identity")

        role = ROLE_ALIASES.get(raw_role)
        if role is None:
            raise UnauthorizedException(
                f"Unsupported actor role: {raw_role}",
                details={"role": raw_role}
            )

        tenant_id = (normalized.get(TENANT_ID_HEADER) or "").strip() or None
        if role == ActorRole.MERCHANT and tenant_id is None:
            raise UnauthorizedException("Merchant identity has no tenant")

        return Actor(
            id=actor_id,
            role=role,
            display_name=(normalized.get(ACTOR_NAME_HEADER) or "").strip(),
            tenant_id=tenant_id if role == ActorRole.MERCHANT else None,
            tenant_name=(
                (normalized.get(TENANT_NAME_HEADER) or "").strip()
                if role == ActorRole.MERCHANT else ""
            ),
        )
