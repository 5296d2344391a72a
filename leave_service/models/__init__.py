# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import account, leave_balance, leave_request

# Explicit class exports for cleaner imports
from .account import Account, AccountRole
from .leave_balance import LeaveBalance, LEDGER_CATEGORIES
from .leave_request import LeaveRequest, LeaveStatus, LeaveCategory

__all__ = [
    "Account",
    "AccountRole",
    "LeaveBalance",
    "LEDGER_CATEGORIES",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveCategory",
]
