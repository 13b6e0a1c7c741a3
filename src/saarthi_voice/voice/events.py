"""Per-route subscription bus for context actions."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Callable

from saarthi_voice.models import ContextActionEvent

ContextActionHandler = Callable[[ContextActionEvent], Any]


class ContextActionBus:
    """Route pages register here for the actions their vocabulary resolves to.

    Handlers may be sync or async; coroutine results are scheduled on the running
    loop. A failing handler is logged and never reaches the dispatcher.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._subs: dict[str, list[ContextActionHandler]] = defaultdict(list)
        self._logger = logger or logging.getLogger("saarthi_voice.events")
        self._pending: set[asyncio.Task[Any]] = set()

    def subscribe(self, route: str, handler: ContextActionHandler) -> Callable[[], None]:
        self._subs[route].append(handler)

        def _unsubscribe() -> None:
            handlers = self._subs.get(route, [])
            if handler in handlers:
                handlers.remove(handler)

        return _unsubscribe

    def has_subscribers(self, route: str) -> bool:
        return bool(self._subs.get(route))

    def emit(self, event: ContextActionEvent) -> int:
        """Deliver ``event`` to the handlers of its route; returns how many ran."""
        handlers = list(self._subs.get(event.route, []))
        if not handlers:
            self._logger.warning("context_action_unhandled", extra={"action": event.action.value, "route": event.route})
            return 0

        for handler in handlers:
            try:
                result = handler(event)
            except Exception:  # noqa: BLE001 - route handlers are external code.
                self._logger.exception("context_action_handler_failed", extra={"route": event.route})
                continue
            if asyncio.iscoroutine(result):
                task = asyncio.get_running_loop().create_task(result)
                self._pending.add(task)
                task.add_done_callback(self._on_task_done)
        return len(handlers)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self._logger.error("context_action_handler_failed", extra={"error": repr(task.exception())})
