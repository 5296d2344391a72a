from sqlalchemy import Column, Integer, String, Date, DateTime, Text, CheckConstraint
from leave_service.database import Base
import enum

class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class LeaveCategory(str, enum.Enum):
    ANNUAL = "annual"
    SICK = "sick"
    CASUAL = "casual"
    UNPAID = "unpaid"

class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_leave_requests_date_order"),
        CheckConstraint("duration_days >= 1", name="ck_leave_requests_duration_positive"),
    )

    id = Column(String(32), primary_key=True, index=True)  # uuid4 hex, assigned by the service
    owner_id = Column(String(128), index=True, nullable=False)
    owner_email = Column(String(320), nullable=True)
    category = Column(String(16), index=True, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    duration_days = Column(Integer, nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(String(16), default=LeaveStatus.PENDING.value, index=True, nullable=False)
    # Assigned from the server clock, not the database default, so it is strictly increasing
    created_at = Column(DateTime(timezone=True), index=True, nullable=False)

    # Review fields, set only once
    reviewer_id = Column(String(128), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    admin_comment = Column(Text, nullable=True)
