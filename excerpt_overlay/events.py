"""Lifecycle event emission for excerpt sessions."""
from __future__ import annotations

import logging
from typing import Callable, Dict, List

_LOGGER = logging.getLogger("ExcerptOverlay.Core")

EXCERPT_ADDED = "excerpt_added"
EXCERPTS_CLEARED = "excerpts_cleared"
EXCERPTS_PRUNED = "excerpts_pruned"
SURFACE_CREATED = "surface_created"

KNOWN_EVENTS = frozenset({EXCERPT_ADDED, EXCERPTS_CLEARED, EXCERPTS_PRUNED, SURFACE_CREATED})

Listener = Callable[..., None]


class ExcerptEvents:
    """Subscribers keyed by event name, called in subscription order."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {name: [] for name in KNOWN_EVENTS}

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for ``event`` and return an unsubscribe callable."""
        if event not in self._listeners:
            raise ValueError(f"Unknown excerpt event '{event}'")
        self._listeners[event].append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners[event].remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    def emit(self, event: str, *args: object) -> None:
        for listener in list(self._listeners.get(event, ())):
            try:
                listener(*args)
            except Exception:
                _LOGGER.exception("Listener for %s failed", event)
