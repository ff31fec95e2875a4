"""Ordered registry of excerpts projected into the shared floating surface.

This module is intended to stay free of Qt types; all window work goes through
the injected ``HostWindowingSystem``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Tuple

from excerpt_overlay.config import ExcerptConfig
from excerpt_overlay.events import (
    EXCERPT_ADDED,
    EXCERPTS_CLEARED,
    EXCERPTS_PRUNED,
    SURFACE_CREATED,
    ExcerptEvents,
)
from excerpt_overlay.host import ExcerptRange, Handle, HostWindowingSystem
from excerpt_overlay.layout_calculator import FloatingLayout, compute_layout
from excerpt_overlay.name_formatter import format_excerpt_name, format_label, format_region_header

_LOGGER = logging.getLogger("ExcerptOverlay.Core")


@dataclass(frozen=True)
class Excerpt:
    source_id: Any
    excerpt_range: ExcerptRange
    label: str
    name: str
    source_name: str
    projection: Handle


@dataclass(frozen=True)
class FloatingSurface:
    handle: Handle
    layout: FloatingLayout


class ExcerptRegistry:
    """Insertion-ordered excerpts plus the lazily created surface that shows them."""

    def __init__(
        self,
        host: HostWindowingSystem,
        config: ExcerptConfig,
        *,
        events: Optional[ExcerptEvents] = None,
        log_fn: Optional[Callable[..., None]] = None,
    ) -> None:
        self._host = host
        self._config = config
        self._events = events if events is not None else ExcerptEvents()
        self._log = log_fn if log_fn is not None else _LOGGER.debug
        self._entries: List[Excerpt] = []
        self._surface: Optional[FloatingSurface] = None

    @property
    def events(self) -> ExcerptEvents:
        return self._events

    @property
    def surface(self) -> Optional[FloatingSurface]:
        return self._surface

    def surface_live(self) -> bool:
        surface = self._surface
        return surface is not None and self._host.is_live(surface.handle)

    def add_excerpt(
        self,
        source_id: Any,
        excerpt_range: ExcerptRange,
        raw_text: str,
        *,
        source_name: Optional[str] = None,
    ) -> Excerpt:
        config = self._config
        label = format_label(raw_text, config.max_label_length)
        display_source = source_name if source_name is not None else str(source_id)
        name = format_excerpt_name(config.name_prefix, display_source, config.name_separator, label)

        is_first = not self.surface_live()
        if is_first:
            surface = self._create_surface()
            self.prune_stale()
        else:
            surface = self._surface  # type: ignore[assignment]

        projection = self._host.clone_view(source_id, excerpt_range, name)
        self._host.place_in_pane(surface.handle, projection, is_first)
        self._host.set_pane_decoration(
            projection,
            format_region_header(config.region_header_template, display_source, excerpt_range, label),
        )

        excerpt = Excerpt(
            source_id=source_id,
            excerpt_range=excerpt_range,
            label=label,
            name=name,
            source_name=display_source,
            projection=projection,
        )
        self._entries.append(excerpt)
        self._log(
            "Added excerpt %r (range=%d-%d, pane=%d)",
            name,
            excerpt_range.start,
            excerpt_range.end,
            len(self._entries),
        )
        self._events.emit(EXCERPT_ADDED, excerpt)
        return excerpt

    def clear(self) -> None:
        if not self._entries and self._surface is None:
            return
        removed = len(self._entries)
        stale = 0
        for excerpt in self._entries:
            if self._host.is_live(excerpt.projection):
                self._host.destroy_projection(excerpt.projection)
            else:
                stale += 1
        self._entries.clear()

        surface = self._surface
        self._surface = None
        if surface is not None and self._host.is_live(surface.handle):
            self._host.destroy_surface(surface.handle)
        self._log("Cleared %d excerpt(s) (%d already gone)", removed, stale)
        self._events.emit(EXCERPTS_CLEARED, removed)

    def prune_stale(self) -> int:
        """Drop entries whose projection the host no longer reports as live."""
        kept = [excerpt for excerpt in self._entries if self._host.is_live(excerpt.projection)]
        pruned = len(self._entries) - len(kept)
        if pruned:
            self._entries = kept
            self._log("Pruned %d stale excerpt(s)", pruned)
            self._events.emit(EXCERPTS_PRUNED, pruned)
        return pruned

    def list_excerpts(self) -> Tuple[Excerpt, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Excerpt]:
        return iter(self.list_excerpts())

    def _create_surface(self) -> FloatingSurface:
        if self._surface is not None:
            self._log("Floating surface no longer live; recreating")
        metrics = self._host.parent_metrics()
        layout = compute_layout(
            metrics.width_px,
            metrics.height_px,
            metrics.char_width_px,
            metrics.char_height_px,
            self._config.width_ratio,
            self._config.height_ratio,
        )
        handle = self._host.create_floating_surface(layout, self._config.to_style())
        self._surface = FloatingSurface(handle=handle, layout=layout)
        self._log(
            "Created floating surface: %dx%d chars at (%d, %d)",
            layout.width_chars,
            layout.height_chars,
            layout.left,
            layout.top,
        )
        self._events.emit(SURFACE_CREATED, self._surface)
        return self._surface
