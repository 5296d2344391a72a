import logging
from contextlib import contextmanager

from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from leave_service.core.exceptions import ServiceUnavailableError


class BaseService:
    """
    Common plumbing for services that own a database session.

    Services commit their own work through `transaction()`; routers never
    commit.
    """

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    @contextmanager
    def transaction(self):
        """
        Commit on success, roll back on any failure.
        Store outages and timeouts surface as ServiceUnavailableError.
        """
        try:
            yield self.db
            self.db.commit()
        except (OperationalError, PoolTimeoutError) as e:
            self.db.rollback()
            self._logger.error(f"Persistent store unavailable: {e}")
            raise ServiceUnavailableError("Persistent store is unavailable") from e
        except Exception:
            self.db.rollback()
            raise

    @contextmanager
    def reading(self):
        """Read-only counterpart of `transaction()`: only maps store failures."""
        try:
            yield self.db
        except (OperationalError, PoolTimeoutError) as e:
            self.db.rollback()
            self._logger.error(f"Persistent store unavailable: {e}")
            raise ServiceUnavailableError("Persistent store is unavailable") from e

    def log_info(self, message: str):
        self._logger.info(message)

    def log_warning(self, message: str):
        self._logger.warning(message)
