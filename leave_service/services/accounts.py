from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leave_service.core.clock import ServerClock, server_clock
from leave_service.core.exceptions import ConflictError, InvalidRequestError, NotFoundError
from leave_service.models.account import Account, AccountRole
from leave_service.services.authorization import AuthorizationGuard, Principal
from leave_service.services.base import BaseService

PROFILE_FIELDS = ("full_name", "phone", "department", "employee_id")


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class AccountService(BaseService):
    def __init__(self, db: Session, clock: Optional[ServerClock] = None):
        super().__init__(db)
        self.clock = clock or server_clock

    def register(self, actor: Principal, email: Optional[str], role: Optional[str], **profile) -> Account:
        """
        Create the account record for the authenticated identity.

        The email must be the one the identity provider vouched for, and the
        requested role may not exceed what the role policy grants.
        """
        email = _clean(email)
        if not email or not role:
            raise InvalidRequestError("email and role required")
        if not actor.email or actor.email.lower() != email.lower():
            raise InvalidRequestError("Email mismatch")

        try:
            requested_role = AccountRole(role)
        except ValueError:
            raise InvalidRequestError(
                "Invalid role",
                details={"allowed": [r.value for r in AccountRole]}
            )
        if requested_role == AccountRole.ADMIN and actor.role != AccountRole.ADMIN:
            raise InvalidRequestError("Requested role is not granted to this identity")

        account = Account(
            id=actor.id,
            email=email,
            # Policy is authoritative: a configured admin registering as "employee" stays admin
            role=actor.role,
            created_at=self.clock.now(),
            **{field: _clean(profile.get(field)) for field in PROFILE_FIELDS},
        )

        with self.reading():
            existing = self.db.execute(
                select(Account.id).where((Account.id == actor.id) | (Account.email == email))
            ).first()
        if existing is not None:
            raise ConflictError("Account already exists")

        try:
            with self.transaction():
                self.db.add(account)
        except IntegrityError:
            # Registered concurrently with the same identity or email
            raise ConflictError("Account already exists")

        self.db.refresh(account)
        self.log_info(f"Registered account {account.id} as {account.role.value}")
        return account

    def get(self, account_id: str) -> Account:
        with self.reading():
            account = self.db.get(Account, account_id)
        if account is None:
            raise NotFoundError("Account not found")
        return account

    def list_accounts(self, actor: Principal) -> List[Account]:
        AuthorizationGuard.require_admin(actor)
        with self.reading():
            return list(self.db.scalars(select(Account).order_by(Account.created_at.desc())).all())
