"""Collapse concurrent computations that share a key."""

import asyncio
from typing import Awaitable, Callable, Generic, TypeVar

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Share one in-flight computation between concurrent callers.

    The first caller for a key (the leader) runs ``fn`` on its own coroutine
    and publishes the outcome through a future. Callers arriving while the
    leader is still running await that future instead of calling ``fn``.
    The key is released as soon as the leader finishes, so nothing is
    memoized here.

    Example:
        flight: SingleFlight[bytes] = SingleFlight()
        data = await flight.do(key, lambda: fetch_and_resize(url))
    """

    def __init__(self):
        self._calls: dict[str, asyncio.Future[T]] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._calls

    async def do(
        self,
        key: str,
        fn: Callable[[], Awaitable[T]],
        follower_timeout: float | None = None,
    ) -> T:
        """Run ``fn`` for ``key`` or join the call already running.

        Args:
            key: Identity of the computation
            fn: Factory for the awaitable doing the work (leader only)
            follower_timeout: Seconds a follower waits for the leader's
                outcome; None waits indefinitely

        Raises:
            TimeoutError: If a follower gives up; the leader keeps running
        """
        pending = self._calls.get(key)
        if pending is not None:
            # Shielded so a cancelled follower does not cancel the shared result
            return await asyncio.wait_for(asyncio.shield(pending), follower_timeout)

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._calls[key] = future
        try:
            result = await fn()
        except asyncio.CancelledError:
            _ = future.cancel()
            raise
        except BaseException as exc:
            future.set_exception(exc)
            # May have no followers; retrieve it so asyncio does not log it as unhandled
            _ = future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            del self._calls[key]
