from fastapi import APIRouter, Depends, status
import logging
from leave_service.dependencies import get_account_service, get_current_principal
from leave_service.services.accounts import AccountService
from leave_service.services.authorization import Principal
from leave_service.schemas.auth import AccountRegister, AccountResponse, PrincipalResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/accounts",
    tags=["accounts"]
)

@router.post("/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def register_account(
    payload: AccountRegister,
    current: Principal = Depends(get_current_principal),
    accounts: AccountService = Depends(get_account_service),
):
    """Create the account record for the caller's identity with the default balance."""
    account = accounts.register(
        current,
        email=payload.email,
        role=payload.role.value,
        full_name=payload.full_name,
        phone=payload.phone,
        department=payload.department,
        employee_id=payload.employee_id,
    )
    return AccountResponse.model_validate(account)

@router.get("/me", response_model=PrincipalResponse)
def get_me(current: Principal = Depends(get_current_principal)):
    """Identity and effective role of the caller, registered or not."""
    return PrincipalResponse(id=current.id, email=current.email, role=current.role)
