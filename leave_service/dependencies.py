"""
Service providers for FastAPI endpoints.

Each request gets services bound to its own database session. The ledger
and the state machine share that session so an approval and its debit
commit together.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from leave_service.database import get_db
from leave_service.routers.auth_deps import (
    get_authorization_guard,
    get_current_principal,
    require_admin,
)
from leave_service.services.accounts import AccountService
from leave_service.services.balance_ledger import BalanceLedger
from leave_service.services.leave_requests import LeaveRequestStateMachine


def get_balance_ledger(db: Session = Depends(get_db)) -> BalanceLedger:
    return BalanceLedger(db)


def get_leave_state_machine(
    db: Session = Depends(get_db),
    ledger: BalanceLedger = Depends(get_balance_ledger),
) -> LeaveRequestStateMachine:
    return LeaveRequestStateMachine(db, ledger)


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)


__all__ = [
    "get_authorization_guard",
    "get_current_principal",
    "require_admin",
    "get_balance_ledger",
    "get_leave_state_machine",
    "get_account_service",
]
