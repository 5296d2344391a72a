from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.sql import func
from leave_service.database import Base

# Categories backed by a balance column. "unpaid" has no entry on purpose.
LEDGER_CATEGORIES = ("annual", "sick", "casual")

class LeaveBalance(Base):
    __tablename__ = "leave_balances"
    __table_args__ = (
        CheckConstraint("annual >= 0", name="ck_leave_balances_annual_non_negative"),
        CheckConstraint("sick >= 0", name="ck_leave_balances_sick_non_negative"),
        CheckConstraint("casual >= 0", name="ck_leave_balances_casual_non_negative"),
    )

    account_id = Column(String(128), primary_key=True, index=True)
    annual = Column(Integer, nullable=False, default=0)
    sick = Column(Integer, nullable=False, default=0)
    casual = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def as_dict(self):
        return {category: getattr(self, category) for category in LEDGER_CATEGORIES}
