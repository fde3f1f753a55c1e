from __future__ import annotations

import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TypeVar

from sqlalchemy import text
from sqlalchemy.orm import Session

from insightdesk.core.errors import TransactionTimeoutError

T = TypeVar("T")


class TransactionHandle:
    """
    Explicit handle for one open transaction.

    Everything that must commit or roll back together receives the same
    handle and works through `handle.session`.
    """

    def __init__(
        self,
        session: Session,
        *,
        timeout_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.session = session
        self.timeout_seconds = float(timeout_seconds)
        self._clock = clock
        self._deadline = clock() + self.timeout_seconds

    def remaining(self) -> float:
        return max(0.0, self._deadline - self._clock())

    def check_deadline(self) -> None:
        if self._clock() >= self._deadline:
            raise TransactionTimeoutError(
                f"Transaction exceeded its {self.timeout_seconds:g}s budget."
            )

    def call_within_budget(self, fn: Callable[..., T], *args, **kwargs) -> T:
        """
        Run a slow external call off the request thread and stop waiting for
        it once the budget is spent. `fn` must not touch `self.session`.
        """
        self.check_deadline()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tx-budget")
        future = executor.submit(fn, *args, **kwargs)
        try:
            return future.result(timeout=self.remaining())
        except FutureTimeoutError as exc:
            future.cancel()
            raise TransactionTimeoutError(
                f"Transaction exceeded its {self.timeout_seconds:g}s budget."
            ) from exc
        finally:
            # an abandoned call finishes in the background; nothing waits on it
            executor.shutdown(wait=False)


def _apply_server_timeouts(session: Session, timeout_seconds: float) -> None:
    bind = session.get_bind()
    if bind.dialect.name != "postgresql":
        return
    timeout_ms = max(1, int(timeout_seconds * 1000))
    # SET LOCAL does not accept bind parameters.
    session.execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))
    session.execute(text(f"SET LOCAL lock_timeout = {timeout_ms}"))


def run_in_transaction(
    db: Session,
    fn: Callable[[TransactionHandle], T],
    *,
    timeout_seconds: float,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """
    Run `fn` inside one transaction: commit on normal return, roll back on
    any exception (including an exhausted time budget).
    """
    if db.in_transaction():
        # Close the implicit read transaction left by earlier lookups.
        db.commit()

    handle = TransactionHandle(db, timeout_seconds=timeout_seconds, clock=clock)
    with db.begin():
        _apply_server_timeouts(db, timeout_seconds)
        result = fn(handle)
        db.flush()
        handle.check_deadline()
    return result
