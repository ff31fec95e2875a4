"""Contract between the excerpt core and the windowing host.

The core never creates windows itself. It issues commands through a
``HostWindowingSystem`` and re-checks handle liveness before reusing a handle,
since the host (or the user) may destroy surfaces at any time.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, Protocol

from excerpt_overlay.layout_calculator import FloatingLayout

Handle = Any


class ExcerptRange(NamedTuple):
    start: int
    end: int


@dataclass(frozen=True)
class ParentMetrics:
    """Pixel size of the main surface plus the size of one character cell."""

    width_px: float
    height_px: float
    char_width_px: float
    char_height_px: float


@dataclass(frozen=True)
class SurfaceStyle:
    border_color: str
    active_transparency: int
    inactive_transparency: int
    frameless: bool = True
    hide_decorations: bool = True


@dataclass(frozen=True)
class Selection:
    source_id: Any
    excerpt_range: ExcerptRange
    text: str
    source_name: str = ""


class FocusKind(enum.Enum):
    MAIN = "main"
    FLOATING = "floating"


@dataclass(frozen=True)
class FocusTarget:
    kind: FocusKind
    source_id: Optional[Any] = None

    @classmethod
    def main(cls, source_id: Any) -> "FocusTarget":
        return cls(FocusKind.MAIN, source_id)

    @classmethod
    def floating(cls) -> "FocusTarget":
        return cls(FocusKind.FLOATING)


class HostWindowingSystem(Protocol):
    def parent_metrics(self) -> ParentMetrics: ...

    def create_floating_surface(self, layout: FloatingLayout, style: SurfaceStyle) -> Handle: ...

    def clone_view(self, source_id: Any, excerpt_range: ExcerptRange, name: str) -> Handle: ...

    def place_in_pane(self, surface: Handle, projection: Handle, is_first: bool) -> None: ...

    def set_pane_decoration(self, projection: Handle, label_text: str) -> None: ...

    def destroy_projection(self, handle: Handle) -> None: ...

    def destroy_surface(self, handle: Handle) -> None: ...

    def is_live(self, handle: Handle) -> bool: ...

    def is_focused(self, handle: Handle) -> bool: ...

    def transfer_focus(self, target: FocusTarget) -> None: ...

    def current_selection(self) -> Optional[Selection]: ...

    def current_source(self) -> Optional[Any]: ...

    def replace_view(self, source_id: Any, excerpt_range: ExcerptRange, name: str) -> Handle: ...
