from fastapi import APIRouter, Depends
from typing import List
from leave_service.dependencies import (
    get_account_service,
    get_leave_state_machine,
    require_admin,
)
from leave_service.schemas.auth import AccountResponse
from leave_service.schemas.leave import LeaveStatsResponse
from leave_service.services.accounts import AccountService
from leave_service.services.authorization import Principal
from leave_service.services.leave_requests import LeaveRequestStateMachine

router = APIRouter(tags=["admin"])

@router.get("/accounts", response_model=List[AccountResponse])
def list_accounts(
    current: Principal = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
):
    """
    All registered accounts, newest first.
    Restricted to admins.
    """
    return [AccountResponse.model_validate(a) for a in accounts.list_accounts(current)]

@router.get("/stats", response_model=LeaveStatsResponse)
def get_leave_stats(
    current: Principal = Depends(require_admin),
    leave_requests: LeaveRequestStateMachine = Depends(get_leave_state_machine),
):
    """Request counts by status."""
    return LeaveStatsResponse(**leave_requests.stats(current))
