import asyncio
from typing import Awaitable, Optional, TypeVar

from .errors import UpstreamCancelledError

_T = TypeVar('_T')


class CallContext:
    """
    Cancellation and deadline signal of one inbound request.

    Upstream calls run through :meth:`run`, which aborts the pending call as
    soon as the context is cancelled or its deadline passes.
    """

    def __init__(self, deadline: Optional[float] = None) -> None:
        # deadline is expressed in event loop time
        self._deadline = deadline
        self._cancelled = asyncio.Event()

    @classmethod
    def with_timeout(cls, seconds: float) -> 'CallContext':
        return cls(deadline=asyncio.get_running_loop().time() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - asyncio.get_running_loop().time())

    def done(self) -> bool:
        return self.cancelled or self.remaining() == 0.0

    async def run(self, aw: Awaitable[_T]) -> _T:
        """
        Await ``aw`` unless the context finishes first.

        :raises UpstreamCancelledError: the context was already done, got
            cancelled, or the deadline expired while waiting.
        """
        if self.done():
            if asyncio.iscoroutine(aw):
                aw.close()
            raise UpstreamCancelledError(self._reason())

        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._cancelled.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()

        if task in done:
            return task.result()
        raise UpstreamCancelledError(self._reason())

    def _reason(self) -> str:
        if self.cancelled:
            return 'Upstream request cancelled by caller'
        return 'Upstream request exceeded the request deadline'
