"""
Leave Request Service Layer

The lifecycle of a leave request:

    pending --review(approve)--> approved   (terminal, debits the ledger)
    pending --review(reject)---> rejected   (terminal)
    pending --cancel-----------> removed

Every transition is a single statement guarded by `status = 'pending'`, so
concurrent reviews or cancels of the same request cannot both succeed.
Approval flips the status and debits the ledger in one transaction.
"""
import uuid
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from leave_service.core.clock import ServerClock, server_clock
from leave_service.core.exceptions import ConflictError, InvalidRequestError, NotFoundError
from leave_service.models.leave_request import LeaveCategory, LeaveRequest, LeaveStatus
from leave_service.services.authorization import AuthorizationGuard, Principal
from leave_service.services.balance_ledger import BalanceLedger
from leave_service.services.base import BaseService

REVIEW_DECISIONS = {
    "approve": LeaveStatus.APPROVED,
    "reject": LeaveStatus.REJECTED,
}


def inclusive_day_count(start_date: date, end_date: date) -> int:
    return (end_date - start_date).days + 1


class LeaveRequestStateMachine(BaseService):
    def __init__(self, db: Session, ledger: BalanceLedger, clock: Optional[ServerClock] = None):
        super().__init__(db)
        self.ledger = ledger
        self.clock = clock or server_clock

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _validate_new_request(self, category: str, start_date: date, end_date: date, reason: Optional[str]) -> str:
        if category not in {c.value for c in LeaveCategory}:
            raise InvalidRequestError(
                "Invalid leave category",
                details={"allowed": [c.value for c in LeaveCategory]}
            )

        cleaned_reason = (reason or "").strip()
        if not cleaned_reason:
            raise InvalidRequestError("Reason is required")

        if end_date < start_date:
            raise InvalidRequestError("End date cannot be before start date")

        if start_date < self.clock.today():
            raise InvalidRequestError("Start date cannot be in the past")

        return cleaned_reason

    def create(
        self,
        owner: Principal,
        category: str,
        start_date: date,
        end_date: date,
        reason: Optional[str],
    ) -> LeaveRequest:
        cleaned_reason = self._validate_new_request(category, start_date, end_date, reason)

        leave = LeaveRequest(
            id=uuid.uuid4().hex,
            owner_id=owner.id,
            owner_email=owner.email,
            category=category,
            start_date=start_date,
            end_date=end_date,
            duration_days=inclusive_day_count(start_date, end_date),
            reason=cleaned_reason,
            status=LeaveStatus.PENDING.value,
            created_at=self.clock.now(),
        )
        with self.transaction():
            self.db.add(leave)
        self.db.refresh(leave)

        self.log_info(f"Leave request {leave.id} created by {owner.id} ({category}, {leave.duration_days} day(s))")
        return leave

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, request_id: str) -> LeaveRequest:
        with self.reading():
            leave = self.db.get(LeaveRequest, request_id)
        if leave is None:
            raise NotFoundError("Request not found")
        return leave

    def list(
        self,
        actor: Principal,
        owner_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[LeaveRequest]:
        # Non-admins only ever see their own requests, whatever they asked for
        if not actor.is_admin:
            owner_id = actor.id

        if status is not None and status not in {s.value for s in LeaveStatus}:
            raise InvalidRequestError("Invalid status filter")

        query = select(LeaveRequest)
        if owner_id:
            query = query.where(LeaveRequest.owner_id == owner_id)
        if status:
            query = query.where(LeaveRequest.status == status)
        query = query.order_by(LeaveRequest.created_at.desc())

        with self.reading():
            return list(self.db.scalars(query).all())

    def stats(self, actor: Principal) -> Dict[str, int]:
        AuthorizationGuard.require_admin(actor)

        with self.reading():
            rows = self.db.execute(
                select(LeaveRequest.status, func.count(LeaveRequest.id)).group_by(LeaveRequest.status)
            ).all()

        counts = {s.value: 0 for s in LeaveStatus}
        for status, count in rows:
            counts[status] = count
        counts["total"] = sum(counts.values())
        return counts

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def cancel(self, actor: Principal, request_id: str) -> str:
        leave = self.get(request_id)
        AuthorizationGuard.require_self_or_admin(actor, leave.owner_id)
        if leave.status != LeaveStatus.PENDING.value:
            raise ConflictError("Can only cancel pending requests")

        # Detach first so the caller keeps a readable snapshot of the removed row
        self.db.expunge(leave)
        with self.transaction():
            result = self.db.execute(
                delete(LeaveRequest)
                .where(LeaveRequest.id == request_id, LeaveRequest.status == LeaveStatus.PENDING.value)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                # Reviewed or cancelled between our read and the delete
                raise ConflictError("Can only cancel pending requests")

        self.log_info(f"Leave request {request_id} cancelled by {actor.id}")
        return request_id

    def review(
        self,
        actor: Principal,
        request_id: str,
        decision: str,
        comment: Optional[str] = None,
    ) -> LeaveRequest:
        AuthorizationGuard.require_admin(actor)

        new_status = REVIEW_DECISIONS.get(decision)
        if new_status is None:
            raise InvalidRequestError("Decision must be 'approve' or 'reject'")

        leave = self.get(request_id)
        if leave.status != LeaveStatus.PENDING.value:
            raise ConflictError("Leave request already processed")

        values = {
            "status": new_status.value,
            "reviewer_id": actor.id,
            "reviewed_at": self.clock.now(),
        }
        if comment is not None:
            values["admin_comment"] = str(comment)

        with self.transaction():
            result = self.db.execute(
                update(LeaveRequest)
                .where(LeaveRequest.id == request_id, LeaveRequest.status == LeaveStatus.PENDING.value)
                .values(values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise ConflictError("Leave request already processed")

            if new_status == LeaveStatus.APPROVED:
                self.ledger.debit(leave.owner_id, leave.category, leave.duration_days)

        self.db.refresh(leave)
        self.log_info(f"Leave request {request_id} {new_status.value} by {actor.id}")
        return leave
