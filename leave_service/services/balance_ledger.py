"""
Balance Ledger

Owns each account's remaining days per leave category.

- Reads fall back to the configured default allocation without persisting it.
- The first mutating call (debit or set) persists the default row, then
  applies its change as a single UPDATE on that row, so concurrent debits
  and overwrites on one account serialize in the store and never lose an
  update.
"""
from numbers import Integral, Real
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import case, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leave_service.core.config import settings
from leave_service.core.exceptions import InvalidRequestError
from leave_service.models.leave_balance import LeaveBalance, LEDGER_CATEGORIES
from leave_service.services.base import BaseService

_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}

# Balance columns are 32-bit signed integers
MAX_BALANCE_DAYS = 2**31 - 1


class BalanceLedger(BaseService):
    def __init__(self, db: Session, default_allocation: Optional[Mapping[str, int]] = None):
        super().__init__(db)
        self.default_allocation = dict(default_allocation or settings.default_balance)

    def default_balance(self) -> Dict[str, int]:
        return {category: int(self.default_allocation.get(category, 0)) for category in LEDGER_CATEGORIES}

    def _fetch(self, account_id: str) -> Optional[Dict[str, int]]:
        row = self.db.execute(
            select(LeaveBalance.annual, LeaveBalance.sick, LeaveBalance.casual)
            .where(LeaveBalance.account_id == account_id)
        ).first()
        if row is None:
            return None
        return dict(zip(LEDGER_CATEGORIES, row))

    def read(self, account_id: str) -> Dict[str, int]:
        """Stored balance, or the default allocation if none has been persisted yet."""
        with self.reading():
            balance = self._fetch(account_id)
        return balance if balance is not None else self.default_balance()

    def _ensure_row(self, account_id: str) -> None:
        """Persist the default allocation for an account that has no row yet."""
        if self._fetch(account_id) is not None:
            return

        values = {"account_id": account_id, **self.default_balance()}
        dialect = self.db.get_bind().dialect.name
        if dialect in _UPSERT_INSERTS:
            # Another transaction may insert the same row first; keep theirs.
            stmt = _UPSERT_INSERTS[dialect](LeaveBalance).values(**values).on_conflict_do_nothing(
                index_elements=[LeaveBalance.account_id]
            )
            self.db.execute(stmt)
            return

        try:
            with self.db.begin_nested():
                self.db.execute(insert(LeaveBalance).values(**values))
        except IntegrityError:
            self._logger.info(f"Balance row for {account_id} created concurrently")

    def debit(self, account_id: str, category: str, amount: int) -> Optional[Dict[str, int]]:
        """
        Subtract `amount` days from one category, clamping at zero.

        Runs inside the caller's transaction and does not commit. Unpaid leave
        (or any category without a ledger column) is a no-op and returns None.
        Insufficient balance never raises.
        """
        if category not in LEDGER_CATEGORIES:
            return None
        if amount < 0:
            raise InvalidRequestError("Debit amount must be non-negative")

        self._ensure_row(account_id)
        column = getattr(LeaveBalance, category)
        self.db.execute(
            update(LeaveBalance)
            .where(LeaveBalance.account_id == account_id)
            .values({column: case((column > amount, column - amount), else_=0)})
            .execution_options(synchronize_session=False)
        )
        balance = self._fetch(account_id)
        self._logger.info(f"Debited {amount} {category} day(s) from {account_id}; remaining {balance[category]}")
        return balance

    @staticmethod
    def _validate_partial(partial: Mapping[str, Any]) -> Dict[str, int]:
        unknown = sorted(set(partial) - set(LEDGER_CATEGORIES))
        if unknown:
            raise InvalidRequestError(
                f"Unknown balance categories: {', '.join(unknown)}",
                details={"allowed": list(LEDGER_CATEGORIES)}
            )

        values: Dict[str, int] = {}
        for category, value in partial.items():
            if value is None:
                continue
            # bool is an Integral subclass; "true" is not a day count
            if isinstance(value, bool) or not isinstance(value, Real):
                raise InvalidRequestError(f"{category} must be a number")
            if not isinstance(value, Integral):
                if not float(value).is_integer():
                    raise InvalidRequestError(f"{category} must be a whole number of days")
            if value < 0:
                raise InvalidRequestError(f"{category} cannot be negative")
            if value > MAX_BALANCE_DAYS:
                raise InvalidRequestError(
                    f"{category} is too large",
                    details={"max": MAX_BALANCE_DAYS}
                )
            values[category] = int(value)
        return values

    def set(self, account_id: str, partial: Mapping[str, Any]) -> Dict[str, int]:
        """Administrative overwrite of any subset of categories; others stay as they are."""
        values = self._validate_partial(partial)

        with self.transaction():
            self._ensure_row(account_id)
            if values:
                self.db.execute(
                    update(LeaveBalance)
                    .where(LeaveBalance.account_id == account_id)
                    .values(values)
                    .execution_options(synchronize_session=False)
                )
            balance = self._fetch(account_id)

        self._logger.info(f"Balance for {account_id} set: {values}")
        return balance
