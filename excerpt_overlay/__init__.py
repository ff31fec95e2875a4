"""Excerpt Overlay: view excerpts of text documents in one shared floating window."""
from __future__ import annotations

from excerpt_overlay.config import ExcerptConfig
from excerpt_overlay.events import ExcerptEvents
from excerpt_overlay.excerpt_registry import Excerpt, ExcerptRegistry, FloatingSurface
from excerpt_overlay.focus_controller import FocusController, FocusState
from excerpt_overlay.host import ExcerptRange, FocusKind, FocusTarget, HostWindowingSystem
from excerpt_overlay.layout_calculator import FloatingLayout, compute_layout
from excerpt_overlay.name_formatter import format_label
from excerpt_overlay.session import ExcerptSession
from excerpt_overlay.version import __version__

__all__ = [
    "Excerpt",
    "ExcerptConfig",
    "ExcerptEvents",
    "ExcerptRange",
    "ExcerptRegistry",
    "ExcerptSession",
    "FloatingLayout",
    "FloatingSurface",
    "FocusController",
    "FocusKind",
    "FocusState",
    "FocusTarget",
    "HostWindowingSystem",
    "compute_layout",
    "format_label",
    "__version__",
]
