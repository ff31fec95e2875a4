from __future__ import annotations

import os
import types
from typing import Any, List, Optional, Tuple

import pytest

from excerpt_overlay.host import ExcerptRange, FocusTarget, ParentMetrics, Selection, SurfaceStyle
from excerpt_overlay.layout_calculator import FloatingLayout


def pytest_runtest_setup(item):
    if item.get_closest_marker("pyqt_required"):
        if not os.getenv("PYQT_TESTS"):
            pytest.skip("PYQT_TESTS not set; skipping PyQt-dependent test")


class RecordingHost:
    """Host stand-in that records every command and hands out simple handles."""

    def __init__(self, metrics: Optional[ParentMetrics] = None) -> None:
        self.metrics = metrics or ParentMetrics(width_px=1000, height_px=800, char_width_px=10, char_height_px=20)
        self.calls: List[Tuple[str, Any]] = []
        self.dead: set = set()
        self.focused: Optional[Any] = None
        self.selection: Optional[Selection] = None
        self.source: Optional[Any] = None
        self._counter = 0

    def _handle(self, kind: str, **attrs: Any) -> types.SimpleNamespace:
        self._counter += 1
        return types.SimpleNamespace(kind=kind, serial=self._counter, **attrs)

    def names(self) -> List[str]:
        return [name for name, _payload in self.calls]

    def parent_metrics(self) -> ParentMetrics:
        self.calls.append(("parent_metrics", None))
        return self.metrics

    def create_floating_surface(self, layout: FloatingLayout, style: SurfaceStyle):
        surface = self._handle("surface", layout=layout, style=style)
        self.calls.append(("create_floating_surface", surface))
        return surface

    def clone_view(self, source_id: Any, excerpt_range: ExcerptRange, name: str):
        projection = self._handle("projection", source_id=source_id, excerpt_range=excerpt_range, name=name)
        self.calls.append(("clone_view", projection))
        return projection

    def place_in_pane(self, surface, projection, is_first: bool) -> None:
        self.calls.append(("place_in_pane", (surface, projection, is_first)))

    def set_pane_decoration(self, projection, label_text: str) -> None:
        self.calls.append(("set_pane_decoration", (projection, label_text)))

    def destroy_projection(self, handle) -> None:
        self.calls.append(("destroy_projection", handle))
        self.dead.add(id(handle))

    def destroy_surface(self, handle) -> None:
        self.calls.append(("destroy_surface", handle))
        self.dead.add(id(handle))

    def is_live(self, handle) -> bool:
        return handle is not None and id(handle) not in self.dead

    def kill(self, handle) -> None:
        self.dead.add(id(handle))

    def is_focused(self, handle) -> bool:
        return handle is not None and handle is self.focused

    def transfer_focus(self, target: FocusTarget) -> None:
        self.calls.append(("transfer_focus", target))

    def current_selection(self) -> Optional[Selection]:
        return self.selection

    def current_source(self):
        return self.source

    def replace_view(self, source_id: Any, excerpt_range: ExcerptRange, name: str):
        view = self._handle("replacement", source_id=source_id, excerpt_range=excerpt_range, name=name)
        self.calls.append(("replace_view", view))
        return view


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()
