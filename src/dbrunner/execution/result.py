"""Async result handle for submitted operations.

``AsyncResult`` wraps the ``concurrent.futures.Future`` returned by the worker
pool. The worker is the only writer; any number of threads (or coroutines)
may read it.

::

    PENDING ──▶ COMPLETED(value)
        └─────▶ FAILED(error)

``get()`` blocks until the outcome is known. A failed handle re-raises the
same exception object on every call. From asyncio, ``await handle`` suspends
the coroutine instead of blocking the loop. Giving up on an await (timeout or
cancellation) leaves the operation running and the handle untouched.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator
from concurrent.futures import Future
from enum import Enum
from typing import Any, Generic, TypeVar

from dbrunner.execution.request import OperationKind, OperationRequest

T = TypeVar("T")


class ResultState(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class AsyncResult(Generic[T]):
    """Eventual outcome of one submitted operation."""

    def __init__(self, future: Future, request: OperationRequest) -> None:
        self._future = future
        self._request = request

    @property
    def request_id(self) -> str:
        return self._request.request_id

    @property
    def kind(self) -> OperationKind:
        return self._request.kind

    @property
    def future(self) -> Future:
        """The underlying future, for ``concurrent.futures.wait`` and friends."""
        return self._future

    @property
    def state(self) -> ResultState:
        if not self._future.done():
            return ResultState.PENDING
        if self._future.cancelled() or self._future.exception() is not None:
            return ResultState.FAILED
        return ResultState.COMPLETED

    def done(self) -> bool:
        return self._future.done()

    def get(self, timeout: float | None = None) -> T:
        """Block until the operation finishes and return its value.

        Args:
            timeout: Max seconds to wait (None = wait forever). Expiry raises
                ``TimeoutError`` and leaves the operation running.

        Raises:
            DbRunnerError: The operation failed; the captured error is re-raised.
        """
        return self._future.result(timeout)

    def exception(self, timeout: float | None = None) -> BaseException | None:
        """Block until finished; return the failure, or None on success."""
        return self._future.exception(timeout)

    def add_done_callback(self, fn: Callable[[AsyncResult[T]], Any]) -> None:
        """Call ``fn(self)`` once the outcome is published (immediately if done)."""
        self._future.add_done_callback(lambda _: fn(self))

    def __await__(self) -> Generator[Any, None, T]:
        # Cancelling the awaiting coroutine must not cancel the operation
        return asyncio.shield(asyncio.wrap_future(self._future)).__await__()

    def __repr__(self) -> str:
        return (
            f"AsyncResult(request_id={self.request_id!r}, kind={self.kind.value!r}, "
            f"state={self.state.value!r})"
        )


__all__ = ["AsyncResult", "ResultState"]
