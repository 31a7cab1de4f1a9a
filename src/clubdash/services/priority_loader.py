"""Priority-tiered dataset loader built on the TTL cache."""

import asyncio
import heapq
import itertools
import logging
import time
from collections import defaultdict
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from clubdash.core.exceptions import ConfigurationError
from clubdash.domain.models import DEFAULT_TIER_DELAYS, LoadPriority, LoadStatus, MISS
from clubdash.domain.views import LoadState
from clubdash.services.ttl_cache import TTLCacheStore

logger = logging.getLogger(__name__)

Producer = Callable[[], Awaitable[Any]]
StateListener = Callable[[LoadState], None]
Job = Callable[[], Awaitable[None]]


def build_tier_delays(
    overrides: Optional[Mapping[Union[LoadPriority, str], float]] = None,
) -> dict[LoadPriority, float]:
    """
    Merge overrides into the default tier table and validate it.

    CRITICAL must not be delayed and delays may not decrease with tier.
    """
    delays = dict(DEFAULT_TIER_DELAYS)
    for tier, delay in (overrides or {}).items():
        try:
            delays[LoadPriority(tier)] = float(delay)
        except ValueError:
            raise ConfigurationError(f"Unknown load priority: {tier}") from None

    if delays[LoadPriority.CRITICAL] != 0:
        raise ConfigurationError("CRITICAL tier delay must be 0")
    previous = 0.0
    for tier in LoadPriority:
        delay = delays[tier]
        if delay < 0:
            raise ConfigurationError(f"{tier.value} tier delay must be non-negative")
        if delay < previous:
            raise ConfigurationError(
                f"{tier.value} tier delay {delay}s is shorter than a more important tier ({previous}s)"
            )
        previous = delay
    return delays


class LoadRequest:
    """Handle for one issued schedule/refresh call."""

    def __init__(self, key: str, priority: LoadPriority, seq: int):
        self.key = key
        self.priority = priority
        self.seq = seq
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()

    async def wait(self) -> LoadState:
        """Wait for the terminal state. Producer failures come back as ERRORED."""
        return await asyncio.shield(self._future)

    def done(self) -> bool:
        return self._future.done()

    @property
    def result(self) -> Optional[LoadState]:
        """Terminal state if finished, else None."""
        return self._future.result() if self._future.done() else None

    def _finish(self, state: LoadState) -> None:
        if not self._future.done():
            self._future.set_result(state)

    def __repr__(self) -> str:
        return f"LoadRequest(key={self.key!r}, priority={self.priority.value}, seq={self.seq})"


class StagedDispatcher:
    """
    Starts jobs once their delay has elapsed.

    Deferred jobs sit in one heap ordered by due time; a single loop
    timer is kept armed for the earliest of them. Zero-delay jobs start
    immediately. Jobs are never cancelled.

    The dispatcher binds to the first event loop that uses it. Using it
    from another loop while the bound one is still open is an error; once
    the bound loop is closed, jobs stranded on it are dropped and the
    dispatcher rebinds.
    """

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, Job]] = []
        self._seq = itertools.count()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._timer_due: Optional[float] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._running: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of jobs still waiting for their delay."""
        return len(self._heap)

    def submit(self, delay: float, job: Job) -> None:
        self._bind()
        if delay <= 0:
            self._start(job)
            return
        heapq.heappush(self._heap, (self._loop.time() + delay, next(self._seq), job))
        self._arm()

    async def drain(self) -> None:
        """Wait until no job is pending or running."""
        self._bind()
        while self._heap or self._running:
            if self._running:
                await asyncio.gather(*list(self._running), return_exceptions=True)
            else:
                loop = asyncio.get_running_loop()
                await asyncio.sleep(max(0.0, self._heap[0][0] - loop.time()))

    def _bind(self) -> None:
        loop = asyncio.get_running_loop()
        if self._loop is None or self._loop is loop:
            self._loop = loop
            return
        if not self._loop.is_closed():
            raise RuntimeError("StagedDispatcher is already bound to another event loop")
        if self._heap or self._running:
            logger.warning(
                "Dropping %d deferred and %d running jobs left on a closed event loop",
                len(self._heap),
                len(self._running),
            )
        self._heap.clear()
        self._running.clear()
        self._timer = None
        self._timer_due = None
        self._loop = loop

    def _arm(self) -> None:
        if not self._heap:
            return
        due = self._heap[0][0]
        if self._timer is not None:
            if self._timer_due is not None and self._timer_due <= due:
                return
            self._timer.cancel()
        self._timer = self._loop.call_at(due, self._pump)
        self._timer_due = due

    def _pump(self) -> None:
        self._timer = None
        self._timer_due = None
        now = self._loop.time()
        while self._heap and self._heap[0][0] <= now:
            _, _, job = heapq.heappop(self._heap)
            self._start(job)
        self._arm()

    def _start(self, job: Job) -> None:
        task = self._loop.create_task(job())
        self._running.add(task)
        task.add_done_callback(self._running.discard)


class PriorityLoader:
    """
    Loads named datasets through the TTL cache, staggered by priority.

    A fresh cache entry is always published immediately. On a miss the
    producer is called after the tier delay and its result is cached.
    Per key, a result is dropped when a request issued later has already
    been applied, so an explicit refresh wins over a slower background load.
    """

    def __init__(
        self,
        cache: TTLCacheStore,
        tier_delays: Optional[Mapping[Union[LoadPriority, str], float]] = None,
    ):
        self._cache = cache
        self._delays = build_tier_delays(tier_delays)
        self._dispatcher = StagedDispatcher()
        self._states: dict[str, LoadState] = {}
        self._listeners: dict[str, list[StateListener]] = defaultdict(list)
        self._issued = itertools.count(1)
        self._applied: dict[str, int] = {}

    @property
    def cache(self) -> TTLCacheStore:
        return self._cache

    @property
    def tier_delays(self) -> dict[LoadPriority, float]:
        return dict(self._delays)

    def delay_for(self, priority: LoadPriority) -> float:
        return self._delays[LoadPriority(priority)]

    def state(self, key: str) -> LoadState:
        """Return the latest published state for key (IDLE if untracked)."""
        return self._states.get(key) or LoadState(key=key)

    def subscribe(self, key: str, listener: StateListener) -> Callable[[], None]:
        """Call listener with every state published for key. Returns an unsubscribe function."""
        self._listeners[key].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners.get(key, []):
                self._listeners[key].remove(listener)

        return unsubscribe

    def schedule(
        self,
        priority: LoadPriority,
        key: str,
        producer: Producer,
        ttl: Optional[float] = None,
        enabled: bool = True,
    ) -> LoadRequest:
        """
        Request dataset `key`.

        Must be called from a running event loop. Returns immediately; the
        request finishes with LOADED (from cache or producer) or ERRORED.
        A disabled request finishes at once with the current state.
        """
        priority = LoadPriority(priority)
        request = LoadRequest(key, priority, next(self._issued))
        if not enabled:
            request._finish(self.state(key))
            return request

        self._publish(self._loading(key))
        if self._serve_from_cache(request, ttl):
            return request

        delay = self._delays[priority]
        logger.debug("Deferring %s by %.2fs (%s)", key, delay, priority.value)
        self._dispatcher.submit(delay, lambda: self._run(request, producer, ttl, use_cache=True))
        return request

    def refresh(self, key: str, producer: Producer, ttl: Optional[float] = None) -> LoadRequest:
        """Reload key now, ignoring both the cache and the tier table."""
        request = LoadRequest(key, LoadPriority.CRITICAL, next(self._issued))
        self._publish(self._loading(key))
        logger.info("Refreshing %s", key)
        self._dispatcher.submit(0, lambda: self._run(request, producer, ttl, use_cache=False))
        return request

    def prefetch(
        self,
        loaders: Mapping[str, Producer],
        priority: LoadPriority = LoadPriority.LOW,
    ) -> list[LoadRequest]:
        """Warm the cache for several datasets at one priority."""
        logger.info("Prefetching %d datasets at %s priority", len(loaders), LoadPriority(priority).value)
        return [self.schedule(priority, key, producer) for key, producer in loaders.items()]

    async def drain(self) -> None:
        """Wait for every issued request to finish. Nothing is cancelled."""
        await self._dispatcher.drain()

    async def _run(
        self,
        request: LoadRequest,
        producer: Producer,
        ttl: Optional[float],
        use_cache: bool,
    ) -> None:
        # The cache may have been filled while this request waited out its delay
        if use_cache and self._serve_from_cache(request, ttl):
            return
        try:
            value = await producer()
        except Exception as exc:
            logger.error("Failed to load %s: %s", request.key, exc, exc_info=exc)
            self._apply(
                request,
                LoadState(
                    key=request.key,
                    status=LoadStatus.ERRORED,
                    value=self.state(request.key).value,
                    error=exc,
                    updated_at=time.time(),
                ),
            )
            return
        self._apply(
            request,
            LoadState(key=request.key, status=LoadStatus.LOADED, value=value, updated_at=time.time()),
            store=True,
        )

    def _serve_from_cache(self, request: LoadRequest, ttl: Optional[float]) -> bool:
        cached = self._cache.get(request.key, ttl)
        if cached is MISS:
            return False
        # Cache hits do not advance the applied sequence
        state = LoadState(
            key=request.key,
            status=LoadStatus.LOADED,
            value=cached,
            from_cache=True,
            updated_at=time.time(),
        )
        self._publish(state)
        request._finish(state)
        return True

    def _apply(self, request: LoadRequest, state: LoadState, store: bool = False) -> None:
        key = request.key
        if request.seq < self._applied.get(key, 0):
            logger.debug("Discarding superseded result for %s (request %d)", key, request.seq)
            request._finish(self.state(key))
            return
        self._applied[key] = request.seq
        if store:
            self._cache.set(key, state.value)
        self._publish(state)
        request._finish(state)

    def _loading(self, key: str) -> LoadState:
        return LoadState(
            key=key,
            status=LoadStatus.LOADING,
            value=self.state(key).value,
            updated_at=time.time(),
        )

    def _publish(self, state: LoadState) -> None:
        self._states[state.key] = state
        for listener in list(self._listeners.get(state.key, [])):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener for %s failed", state.key)
