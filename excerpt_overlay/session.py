"""Excerpt session: explicit owner of the registry, the focus state and the user commands."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from excerpt_overlay.config import ExcerptConfig
from excerpt_overlay.events import ExcerptEvents
from excerpt_overlay.excerpt_registry import Excerpt, ExcerptRegistry
from excerpt_overlay.focus_controller import FocusController
from excerpt_overlay.host import FocusTarget, Handle, HostWindowingSystem, Selection
from excerpt_overlay.name_formatter import format_excerpt_name, format_label

_LOGGER = logging.getLogger("ExcerptOverlay.Core")

ACTION_ADD_SELECTION = "add_selection_as_excerpt"
ACTION_TOGGLE_FOCUS = "toggle_focus"
ACTION_CLEAR = "clear_excerpts"
ACTION_NARROW = "narrow_to_selection"

ACTIONS = (ACTION_ADD_SELECTION, ACTION_TOGGLE_FOCUS, ACTION_CLEAR, ACTION_NARROW)


class ExcerptSession:
    def __init__(
        self,
        host: HostWindowingSystem,
        config: Optional[ExcerptConfig] = None,
        *,
        events: Optional[ExcerptEvents] = None,
        log_fn: Optional[Callable[..., None]] = None,
    ) -> None:
        self._host = host
        self._config = config if config is not None else ExcerptConfig()
        self._log = log_fn if log_fn is not None else _LOGGER.debug
        self.events = events if events is not None else ExcerptEvents()
        self.registry = ExcerptRegistry(host, self._config, events=self.events, log_fn=self._log)
        self.focus = FocusController(is_origin_valid=host.is_live, log_fn=self._log)

    @property
    def config(self) -> ExcerptConfig:
        return self._config

    def add_current_selection(self) -> Optional[Excerpt]:
        selection = self._usable_selection("add excerpt")
        if selection is None:
            return None
        self.focus.remember_origin(selection.source_id)
        return self.registry.add_excerpt(
            selection.source_id,
            selection.excerpt_range,
            selection.text,
            source_name=selection.source_name or None,
        )

    def toggle_focus(self) -> Optional[FocusTarget]:
        surface = self.registry.surface
        live = self.registry.surface_live()
        on_floating = bool(live and surface is not None and self._host.is_focused(surface.handle))
        current_main = None if on_floating else self._host.current_source()
        target = self.focus.toggle(on_floating, live, current_main=current_main)
        if target is not None:
            self._host.transfer_focus(target)
        return target

    def clear_all(self) -> None:
        return_target: Optional[FocusTarget] = None
        surface = self.registry.surface
        if surface is not None and self.registry.surface_live() and self._host.is_focused(surface.handle):
            origin = self.focus.last_focused_main
            if origin is not None and self._host.is_live(origin):
                return_target = FocusTarget.main(origin)
        self.registry.clear()
        self.focus.reset()
        if return_target is not None:
            self._host.transfer_focus(return_target)

    def narrow_to_selection(self) -> Optional[Handle]:
        """Replace the current view with a narrowed clone; the registry is not involved."""
        selection = self._usable_selection("narrow")
        if selection is None:
            return None
        label = format_label(selection.text, self._config.max_label_length)
        source_name = selection.source_name or str(selection.source_id)
        name = format_excerpt_name(self._config.name_prefix, source_name, self._config.name_separator, label)
        self._log("Narrowing current view to %d-%d", selection.excerpt_range.start, selection.excerpt_range.end)
        return self._host.replace_view(selection.source_id, selection.excerpt_range, name)

    def commands(self) -> Dict[str, Callable[[], Any]]:
        return {
            ACTION_ADD_SELECTION: self.add_current_selection,
            ACTION_TOGGLE_FOCUS: self.toggle_focus,
            ACTION_CLEAR: self.clear_all,
            ACTION_NARROW: self.narrow_to_selection,
        }

    def _usable_selection(self, purpose: str) -> Optional[Selection]:
        selection = self._host.current_selection()
        if selection is None or selection.excerpt_range.start >= selection.excerpt_range.end:
            self._log("No active selection; %s skipped", purpose)
            return None
        return selection
