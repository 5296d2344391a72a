"""
Account Model.
The primary key is the identity issued by the external identity provider.
"""
from sqlalchemy import Column, String, Enum, DateTime
from sqlalchemy.sql import func
import enum
from leave_service.database import Base


class AccountRole(str, enum.Enum):
    """
    Account roles.

    - ADMIN: Reviews requests, corrects balances, sees everyone's data
    - EMPLOYEE: Self-service access to own requests and balance
    """
    ADMIN = "admin"
    EMPLOYEE = "employee"


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(128), primary_key=True, index=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    role = Column(Enum(AccountRole, values_callable=lambda roles: [r.value for r in roles]),
                  default=AccountRole.EMPLOYEE, nullable=False)

    # Optional profile fields
    full_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    department = Column(String, nullable=True)
    employee_id = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Account {self.email} ({self.role.value})>"

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN
