from fastapi import APIRouter, Body, Depends, Query, status
from typing import Any, Dict, List, Optional
import logging

from leave_service.dependencies import (
    get_account_service,
    get_balance_ledger,
    get_current_principal,
    get_leave_state_machine,
)
from leave_service.schemas.leave import (
    LeaveBalanceResponse,
    LeaveDeleteResponse,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveReviewRequest,
)
from leave_service.services.accounts import AccountService
from leave_service.services.authorization import AuthorizationGuard, Principal
from leave_service.services.balance_ledger import BalanceLedger
from leave_service.services.leave_requests import LeaveRequestStateMachine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["leave"])


# --- Balances ---

@router.get("/leave-balance/{account_id}", response_model=LeaveBalanceResponse)
def read_leave_balance(
    account_id: str,
    current: Principal = Depends(get_current_principal),
    accounts: AccountService = Depends(get_account_service),
    ledger: BalanceLedger = Depends(get_balance_ledger),
):
    AuthorizationGuard.require_self_or_admin(current, account_id)
    accounts.get(account_id)
    return LeaveBalanceResponse(account_id=account_id, **ledger.read(account_id))

@router.patch("/leave-balance/{account_id}", response_model=LeaveBalanceResponse)
def set_leave_balance(
    account_id: str,
    partial: Dict[str, Any] = Body(..., examples=[{"annual": 15, "sick": 10}]),
    current: Principal = Depends(get_current_principal),
    accounts: AccountService = Depends(get_account_service),
    ledger: BalanceLedger = Depends(get_balance_ledger),
):
    """Admin correction of one or more categories; omitted categories are untouched."""
    AuthorizationGuard.require_admin(current)
    accounts.get(account_id)
    return LeaveBalanceResponse(account_id=account_id, **ledger.set(account_id, partial))


# --- Requests ---

@router.get("/leave-requests", response_model=List[LeaveRequestResponse])
def list_leave_requests(
    owner_id: Optional[str] = Query(None, description="Admins only; ignored for everyone else"),
    status: Optional[str] = Query(None, description="pending, approved or rejected"),
    current: Principal = Depends(get_current_principal),
    leave_requests: LeaveRequestStateMachine = Depends(get_leave_state_machine),
):
    requests = leave_requests.list(current, owner_id=owner_id, status=status)
    return [LeaveRequestResponse.model_validate(r) for r in requests]

@router.post("/leave-requests", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
def create_leave_request(
    payload: LeaveRequestCreate,
    current: Principal = Depends(get_current_principal),
    leave_requests: LeaveRequestStateMachine = Depends(get_leave_state_machine),
):
    leave = leave_requests.create(
        current,
        category=payload.leave_type,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
    )
    return LeaveRequestResponse.model_validate(leave)

@router.delete("/leave-requests/{request_id}", response_model=LeaveDeleteResponse)
def cancel_leave_request(
    request_id: str,
    current: Principal = Depends(get_current_principal),
    leave_requests: LeaveRequestStateMachine = Depends(get_leave_state_machine),
):
    return LeaveDeleteResponse(deleted=leave_requests.cancel(current, request_id))

@router.post("/leave-requests/{request_id}/review", response_model=LeaveRequestResponse)
def review_leave_request(
    request_id: str,
    review: LeaveReviewRequest,
    current: Principal = Depends(get_current_principal),
    leave_requests: LeaveRequestStateMachine = Depends(get_leave_state_machine),
):
    leave = leave_requests.review(current, request_id, review.decision, review.comment)
    return LeaveRequestResponse.model_validate(leave)
