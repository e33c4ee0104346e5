"""
Unit-of-work boundaries for services.

``start()`` commits when its block finishes and rolls back when it raises.
``run_with_retry()`` repeats a whole unit of work after transient database
failures such as dropped connections or deadlock victims.
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, TypeVar
from uuid import uuid4

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session

from hajzi.config.settings import settings
from hajzi.core.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


def is_transient_error(exc: Optional[BaseException]) -> bool:
    """
    True for lost connections and deadlock or lock-timeout errors, including
    when a repository re-raised them wrapped in an application exception.
    """
    while exc is not None:
        if isinstance(exc, OperationalError):
            return True
        if isinstance(exc, DBAPIError) and exc.connection_invalidated:
            return True
        exc = exc.__cause__
    return False


@dataclass
class TransactionContext:
    attempt: int = 1
    transaction_id: str = field(default_factory=lambda: uuid4().hex)
    outcome: str = "open"
    started: float = field(default_factory=time.perf_counter)

    @property
    def elapsed_ms(self) -> float:
        return round((time.perf_counter() - self.started) * 1000, 2)


class TransactionManager:

    def __init__(self, db_session: Session, max_attempts: Optional[int] = None):
        self.db = db_session
        self.max_attempts = max(1, max_attempts or settings.DB_TRANSACTION_RETRIES)

    @contextmanager
    def start(self, attempt: int = 1) -> Iterator[TransactionContext]:
        ctx = TransactionContext(attempt=attempt)
        try:
            yield ctx
            self.db.commit()
            ctx.outcome = "committed"
        except Exception as exc:
            self._rollback(ctx, exc)
            raise
        finally:
            logger.debug(
                f"Transaction {ctx.transaction_id} {ctx.outcome}",
                extra={
                    "transaction_id": ctx.transaction_id,
                    "attempt": ctx.attempt,
                    "duration_ms": ctx.elapsed_ms,
                },
            )

    def run_with_retry(self, work: Callable[[TransactionContext], T]) -> T:
        """
        Call ``work`` inside ``start()`` until it commits.

        Only transient errors are retried, up to ``max_attempts`` in total.
        ``work`` must re-read its inputs because the session is rolled back
        between attempts.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                with self.start(attempt=attempt) as ctx:
                    return work(ctx)
            except Exception as exc:
                if attempt == self.max_attempts or not is_transient_error(exc):
                    raise
                logger.warning(
                    f"Transient database error on attempt {attempt}/{self.max_attempts}, retrying",
                    extra={"error_type": type(exc).__name__, "attempt": attempt},
                )
        raise AssertionError("unreachable")

    def _rollback(self, ctx: TransactionContext, exc: Exception) -> None:
        try:
            self.db.rollback()
        except Exception:
            # The original exception still propagates
            logger.error(f"Rollback of transaction {ctx.transaction_id} failed", exc_info=True)
            ctx.outcome = "rollback failed"
            return
        ctx.outcome = f"rolled back ({type(exc).__name__})"
