from pydantic import BaseModel, EmailStr, ConfigDict
from typing import Optional
from datetime import datetime
from leave_service.models.account import AccountRole

class AccountRegister(BaseModel):
    email: EmailStr
    role: AccountRole
    full_name: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    employee_id: Optional[str] = None

class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: AccountRole
    full_name: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    employee_id: Optional[str] = None
    created_at: Optional[datetime] = None

class PrincipalResponse(BaseModel):
    id: str
    email: Optional[str] = None
    role: AccountRole
