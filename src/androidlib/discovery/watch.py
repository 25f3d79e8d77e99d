"""Long-lived detection driven by filesystem change notifications.

A ``WatchSession`` subscribes to changes below a detector's search roots,
re-runs a forced detection after every burst of changes, and emits the
result whenever it differs from the last one emitted.

Lifecycle::

    CREATED --start()--> WATCHING --stop()--> STOPPED
                             |
                             +--watch failure--> ERRORED

Events:
    ready    Exactly once, after the subscriptions are in place and the
             initial detection finished. Carries the initial result, which
             is never repeated as a ``results`` event.
    results  The detection result changed (deep equality, None included).
    error    A detection pass failed (the session keeps watching) or the
             filesystem watch failed (the session ends in ERRORED).

Subscriptions come from ``watchdog``. Its callbacks run on observer
threads and are marshalled onto the session's event loop, so every
re-scan, comparison and emission happens on the loop thread. Roots that
do not exist yet are covered by a non-recursive subscription on their
nearest existing ancestor; the subscription set is re-synced after each
re-scan so roots that appear (or vanish) are re-armed.

Handlers registered with ``on()`` see every event. Iterating the session
with ``async for`` buffers events from the moment iteration begins; a
session that is never iterated buffers nothing.

Usage::

    async with ndk.watch("~/android") as session:
        async for event in session:
            print(event.kind, event.result)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from androidlib.discovery.models import (
    DetectionRequest,
    DetectionResult,
    WatchEvent,
    WatchEventKind,
)
from androidlib.discovery.paths import nearest_existing_ancestor
from androidlib.exceptions import AndroidLibError, WatchError

if TYPE_CHECKING:
    from androidlib.discovery.engine import DetectionEngine

logger = logging.getLogger(__name__)

_RELEVANT_EVENTS = {
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MOVED,
    EVENT_TYPE_MODIFIED,
}

_CLOSED = object()

EventHandler = Callable[[WatchEvent], Any]


class WatchState(Enum):
    CREATED = "created"
    WATCHING = "watching"
    STOPPED = "stopped"
    ERRORED = "errored"


class _ChangeHandler(FileSystemEventHandler):
    """Forwards relevant watchdog events to the session's loop."""

    def __init__(self, session: WatchSession, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__()
        self._session = session
        self._loop = loop

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in _RELEVANT_EVENTS or self._session.closed:
            return
        try:
            self._loop.call_soon_threadsafe(self._session._on_change, event.src_path)
        except RuntimeError:
            logger.debug("Event loop closed; dropping %s", event.src_path)


class WatchSession:
    """Watches a detector's search roots and emits result updates.

    Sessions are created by ``DetectionEngine.watch()`` and owned by the
    caller, who must call ``stop()``. All methods must be called from the
    thread running the session's event loop.

    Attributes:
        targets: Expanded search roots being watched.
        debounce: Quiet period in seconds before a re-scan runs.
        state: Current ``WatchState``.
    """

    def __init__(
        self,
        engine: DetectionEngine,
        request: DetectionRequest,
        *,
        targets: list[Path],
        debounce: float,
        observer_factory: Callable[[], Any] | None = None,
    ) -> None:
        self._engine = engine
        self._request = request
        self.targets = list(targets)
        self.debounce = debounce
        self.state = WatchState.CREATED
        self._observer_factory = observer_factory or Observer
        self._handlers: dict[WatchEventKind, list[EventHandler]] = {k: [] for k in WatchEventKind}
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[Any] | None = None
        self._observer: Any = None
        self._change_handler: _ChangeHandler | None = None
        self._watches: dict[Path, tuple[bool, Any]] = {}
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._rescan_task: asyncio.Task[None] | None = None
        self._ready = False
        self._dirty = False
        self._last: DetectionResult = None

    @property
    def closed(self) -> bool:
        return self.state in (WatchState.STOPPED, WatchState.ERRORED)

    @property
    def result(self) -> DetectionResult:
        """The most recently emitted detection result."""
        return self._last

    def on(self, kind: WatchEventKind | str, handler: EventHandler) -> WatchSession:
        """Register ``handler`` for ``"ready"``, ``"results"`` or ``"error"``.

        Handlers receive the ``WatchEvent``. Exceptions they raise are
        logged and otherwise ignored.
        """
        self._handlers[WatchEventKind(kind)].append(handler)
        return self

    def start(self) -> WatchSession:
        """Begin watching. Requires a running event loop; idempotent."""
        if self.state is not WatchState.CREATED:
            return self
        self._loop = asyncio.get_running_loop()
        self.state = WatchState.WATCHING
        self._spawn(self._run())
        return self

    def stop(self) -> None:
        """Stop watching. Safe to call more than once.

        No event is emitted after this returns, even if filesystem events
        or a re-scan are still pending.
        """
        if self.closed:
            return
        self._teardown(WatchState.STOPPED)
        logger.info("%s: watch stopped", self._engine.name)

    async def wait_closed(self) -> None:
        """Wait for the observer thread and any in-flight pass to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if self._observer is not None and self._observer.is_alive():
            await asyncio.to_thread(self._observer.join)

    async def __aenter__(self) -> WatchSession:
        return self.start()

    async def __aexit__(self, *exc_info: object) -> None:
        self.stop()
        await self.wait_closed()

    def __aiter__(self) -> WatchSession:
        self._event_queue()
        return self

    async def __anext__(self) -> WatchEvent:
        if self.state is WatchState.CREATED:
            raise StopAsyncIteration
        item = await self._event_queue().get()
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise StopAsyncIteration
        return item

    # -- internals ---------------------------------------------------------

    def _event_queue(self) -> asyncio.Queue[Any]:
        # Events are only buffered once someone iterates the session, so
        # callback-only sessions hold no backlog.
        if self._queue is None:
            self._queue = asyncio.Queue()
            if self.closed:
                self._queue.put_nowait(_CLOSED)
        return self._queue

    def _spawn(self, coro: Any) -> asyncio.Task[None]:
        assert self._loop is not None
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self) -> None:
        if self.closed:
            return
        try:
            self._observer = self._observer_factory()
            self._change_handler = _ChangeHandler(self, self._loop)
            self._sync_watches()
            self._observer.start()
        except (OSError, RuntimeError) as exc:
            self._fail(WatchError(f"Cannot watch {self._engine.name} search paths: {exc}"))
            return
        logger.info("%s: watching %d root(s)", self._engine.name, len(self.targets))

        result: DetectionResult = None
        try:
            result = await self._engine.scan(self._request)
        except AndroidLibError as exc:
            logger.warning("%s: initial detection failed: %s", self._engine.name, exc)
            self._emit(WatchEvent(WatchEventKind.ERROR, error=exc))
        if self.closed:
            return

        self._last = result
        self._ready = True
        self._emit(WatchEvent(WatchEventKind.READY, result=result))
        if self._dirty:
            self._dirty = False
            self._schedule()

    def _on_change(self, path: str) -> None:
        if self.closed:
            return
        logger.debug("%s: change at %s", self._engine.name, path)
        self._schedule()

    def _schedule(self) -> None:
        assert self._loop is not None
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._loop.call_later(self.debounce, self._fire)

    def _fire(self) -> None:
        self._timer = None
        if self.closed:
            return
        if not self._ready or (self._rescan_task is not None and not self._rescan_task.done()):
            self._dirty = True
            return
        self._rescan_task = self._spawn(self._rescan())

    async def _rescan(self) -> None:
        while not self.closed:
            self._dirty = False
            try:
                result = await self._engine.scan(self._request)
            except AndroidLibError as exc:
                logger.warning("%s: re-detection failed: %s", self._engine.name, exc)
                self._emit(WatchEvent(WatchEventKind.ERROR, error=exc))
            else:
                if self.closed:
                    return
                try:
                    added = self._sync_watches()
                except (OSError, RuntimeError) as exc:
                    self._fail(WatchError(f"Cannot re-arm {self._engine.name} watch: {exc}"))
                    return
                if result != self._last:
                    self._last = result
                    self._emit(WatchEvent(WatchEventKind.RESULTS, result=result))
                if added:
                    # Cover changes made before the new subscription existed.
                    self._schedule()
            if not self._dirty:
                return

    def _desired_watches(self) -> dict[Path, bool]:
        desired: dict[Path, bool] = {}
        for target in self.targets:
            if target.is_dir():
                desired[target] = True
                continue
            ancestor = nearest_existing_ancestor(target)
            if ancestor is not None:
                desired.setdefault(ancestor, False)
        return desired

    def _dead_watches(self) -> set[Path]:
        emitters = getattr(self._observer, "emitters", None)
        if emitters is None or not self._observer.is_alive():
            return set()
        alive = {emitter.watch for emitter in emitters if emitter.is_alive()}
        return {path for path, (_, watch) in self._watches.items() if watch not in alive}

    def _sync_watches(self) -> bool:
        """Bring subscriptions in line with the filesystem.

        Returns:
            True if any subscription was added.
        """
        desired = self._desired_watches()
        dead = self._dead_watches()
        for path, (recursive, _) in list(self._watches.items()):
            if path in dead or desired.get(path) != recursive:
                self._unschedule(path)

        added = False
        for path, recursive in desired.items():
            if path in self._watches:
                continue
            watch = self._observer.schedule(self._change_handler, str(path), recursive=recursive)
            self._watches[path] = (recursive, watch)
            logger.debug("%s: subscribed to %s (recursive=%s)", self._engine.name, path, recursive)
            added = True
        return added

    def _unschedule(self, path: Path) -> None:
        _, watch = self._watches.pop(path)
        try:
            self._observer.unschedule(watch)
        except (KeyError, OSError):
            logger.debug("%s: subscription for %s already gone", self._engine.name, path)

    def _emit(self, event: WatchEvent) -> None:
        if self.state is not WatchState.WATCHING:
            return
        if self._queue is not None:
            self._queue.put_nowait(event)
        for handler in list(self._handlers[event.kind]):
            try:
                handler(event)
            except Exception:
                logger.exception("%s: %s handler failed", self._engine.name, event.kind.value)

    def _fail(self, error: WatchError) -> None:
        if self.closed:
            return
        logger.error("%s: %s", self._engine.name, error)
        self._emit(WatchEvent(WatchEventKind.ERROR, error=error))
        self._teardown(WatchState.ERRORED)

    def _teardown(self, state: WatchState) -> None:
        self.state = state
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._observer is not None:
            for path in list(self._watches):
                self._unschedule(path)
            self._observer.stop()
        if self._queue is not None:
            self._queue.put_nowait(_CLOSED)
