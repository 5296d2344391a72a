"""
Authorization guard.

Turns an opaque credential into a Principal and answers the two capability
questions the leave workflow asks: "is this an admin?" and "is this the
owner or an admin?".
"""
import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from leave_service.core.config import settings
from leave_service.core.exceptions import AccessDeniedError, AuthenticationError
from leave_service.models.account import AccountRole
from leave_service.services.identity import JWTIdentityProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    id: str
    email: Optional[str]
    role: AccountRole

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN


class RolePolicy:
    """Identity/email -> role lookup, resolved once from configuration."""

    def __init__(self, admin_emails: Iterable[str] = (), admin_ids: Iterable[str] = ()):
        self.admin_emails: FrozenSet[str] = frozenset(e.strip().lower() for e in admin_emails if e.strip())
        self.admin_ids: FrozenSet[str] = frozenset(i.strip() for i in admin_ids if i.strip())

    @classmethod
    def from_settings(cls) -> "RolePolicy":
        return cls(admin_emails=settings.admin_emails, admin_ids=settings.admin_ids)

    def role_for(self, uid: str, email: Optional[str]) -> AccountRole:
        if uid in self.admin_ids:
            return AccountRole.ADMIN
        if email and email.lower() in self.admin_emails:
            return AccountRole.ADMIN
        return AccountRole.EMPLOYEE


class AuthorizationGuard:
    def __init__(self, identity_provider: JWTIdentityProvider, policy: RolePolicy):
        self.identity_provider = identity_provider
        self.policy = policy

    def authenticate(self, credential: Optional[str]) -> Principal:
        if not credential or not credential.strip():
            logger.warning("Authentication failed: Missing credential")
            raise AuthenticationError("Missing or invalid auth token")

        claims = self.identity_provider.verify(credential.strip())
        return Principal(
            id=claims.uid,
            email=claims.email,
            role=self.policy.role_for(claims.uid, claims.email),
        )

    @staticmethod
    def require_admin(actor: Principal) -> Principal:
        if not actor.is_admin:
            raise AccessDeniedError("Admin only")
        return actor

    @staticmethod
    def require_self_or_admin(actor: Principal, owner_id: str) -> Principal:
        if actor.id != owner_id and not actor.is_admin:
            raise AccessDeniedError("Forbidden")
        return actor
