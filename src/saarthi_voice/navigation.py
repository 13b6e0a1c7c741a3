"""In-memory navigation history used by the CLI and tests."""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable

from . import routes

RouteListener = Callable[[str], None]


class HistoryNavigator:
    """Bounded route history stack that reports every route change."""

    def __init__(self, initial_route: str = routes.DASHBOARD, max_history: int = 50) -> None:
        self._history: deque[str] = deque([initial_route], maxlen=max_history)
        self._listeners: list[RouteListener] = []
        self._logger = logging.getLogger("saarthi_voice.navigation")

    @property
    def current_route(self) -> str:
        return self._history[-1]

    def history(self) -> list[str]:
        return list(self._history)

    def add_listener(self, listener: RouteListener) -> None:
        self._listeners.append(listener)

    def navigate(self, route: str) -> None:
        if route == self.current_route:
            return
        self._history.append(route)
        self._notify()

    def back(self) -> None:
        if len(self._history) < 2:
            self._logger.info("navigation_back_ignored", extra={"route": self.current_route})
            return
        self._history.pop()
        self._notify()

    def _notify(self) -> None:
        route = self.current_route
        self._logger.info("route_changed", extra={"route": route})
        for listener in list(self._listeners):
            listener(route)
