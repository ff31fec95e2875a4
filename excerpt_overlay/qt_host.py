"""PyQt6 implementation of the excerpt host windowing contract."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from PyQt6 import sip
from PyQt6.QtCore import QEvent, QObject, QPoint, Qt
from PyQt6.QtGui import QKeySequence, QShortcut, QTextCursor, QTextDocument
from PyQt6.QtWidgets import (
    QApplication,
    QFrame,
    QLabel,
    QPlainTextDocumentLayout,
    QPlainTextEdit,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from excerpt_overlay.host import (
    ExcerptRange,
    FocusKind,
    FocusTarget,
    ParentMetrics,
    Selection,
    SurfaceStyle,
)
from excerpt_overlay.layout_calculator import FloatingLayout

_QT_LOGGER = logging.getLogger("ExcerptOverlay.Qt")

_DESTROYED_PROPERTY = "excerptOverlayDestroyed"
_PARAGRAPH_SEPARATORS = ("\u2029", "\u2028")


def narrowed_clone(document: QTextDocument, excerpt_range: ExcerptRange, parent: Optional[QObject] = None) -> QTextDocument:
    """Clone ``document`` and drop everything outside ``excerpt_range``."""
    clone = document.clone(parent)
    clone.setDocumentLayout(QPlainTextDocumentLayout(clone))
    last = max(0, clone.characterCount() - 1)
    start = max(0, min(excerpt_range.start, last))
    end = max(start, min(excerpt_range.end, last))

    cursor = QTextCursor(clone)
    cursor.setPosition(end)
    cursor.movePosition(QTextCursor.MoveOperation.End, QTextCursor.MoveMode.KeepAnchor)
    cursor.removeSelectedText()
    cursor.setPosition(0)
    cursor.setPosition(start, QTextCursor.MoveMode.KeepAnchor)
    cursor.removeSelectedText()
    clone.setModified(False)
    clone.clearUndoRedoStacks()
    return clone


def _mark_destroyed(widget: QObject) -> None:
    widget.setProperty(_DESTROYED_PROPERTY, True)


class ExcerptPane(QFrame):
    """One projection: a header line above an editor on a narrowed document."""

    def __init__(self, document: QTextDocument, name: str, source_editor: Optional[QPlainTextEdit] = None) -> None:
        super().__init__()
        self.setObjectName(name)
        self.header = QLabel("", self)
        self.header.setStyleSheet("font-weight: bold; padding: 1px 4px;")
        self.editor = QPlainTextEdit(self)
        document.setParent(self.editor)
        self.editor.setDocument(document)
        if source_editor is not None:
            self.editor.setFont(source_editor.font())
            self.editor.setLineWrapMode(source_editor.lineWrapMode())
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self.header)
        layout.addWidget(self.editor)

    def set_header(self, text: str) -> None:
        self.header.setText(text)


class FloatingSurfaceWindow(QWidget):
    """Frameless tool window stacking excerpt panes vertically."""

    def __init__(self, parent: Optional[QWidget], style: SurfaceStyle) -> None:
        window_flags = Qt.WindowType.Tool | Qt.WindowType.WindowStaysOnTopHint
        if style.frameless:
            window_flags |= Qt.WindowType.FramelessWindowHint
        super().__init__(parent, window_flags)
        self._style = style
        self.setObjectName("excerptFloatingSurface")
        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose, True)
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating, True)
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet(f"#excerptFloatingSurface {{ border: 1px solid {style.border_color}; }}")
        layout = QVBoxLayout(self)
        layout.setContentsMargins(1, 1, 1, 1)
        self.splitter = QSplitter(Qt.Orientation.Vertical, self)
        self.splitter.setChildrenCollapsible(False)
        layout.addWidget(self.splitter)
        self.apply_transparency(active=True)

    def apply_transparency(self, *, active: bool) -> None:
        percent = self._style.active_transparency if active else self._style.inactive_transparency
        self.setWindowOpacity(max(0, min(100, percent)) / 100.0)

    def add_pane(self, pane: QWidget, is_first: bool) -> None:
        if is_first:
            while self.splitter.count():
                stale = self.splitter.widget(0)
                stale.setParent(None)
                stale.deleteLater()
        self.splitter.addWidget(pane)
        if not is_first:
            self.balance_panes()

    def balance_panes(self) -> None:
        count = self.splitter.count()
        if count == 0:
            return
        total = self.splitter.height() or self.height()
        self.splitter.setSizes([max(1, total // count)] * count)

    def first_editor(self) -> Optional[QPlainTextEdit]:
        if self.splitter.count() == 0:
            return None
        pane = self.splitter.widget(0)
        return getattr(pane, "editor", None)

    def changeEvent(self, event) -> None:  # type: ignore[override]
        if event.type() == QEvent.Type.ActivationChange:
            self.apply_transparency(active=self.isActiveWindow())
        super().changeEvent(event)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        _mark_destroyed(self)
        super().closeEvent(event)


class QtWindowingSystem:
    """Host adapter backed by QPlainTextEdit editors registered on a main window."""

    def __init__(self, main_window: QWidget, *, log_fn: Optional[Callable[..., None]] = None) -> None:
        self._main_window = main_window
        self._log = log_fn if log_fn is not None else _QT_LOGGER.debug
        self._editors: Dict[QTextDocument, QPlainTextEdit] = {}
        self._last_editor: Optional[QPlainTextEdit] = None
        self._surface: Optional[FloatingSurfaceWindow] = None
        app = QApplication.instance()
        if app is not None:
            app.focusChanged.connect(self._on_focus_changed)

    def register_editor(self, editor: QPlainTextEdit, title: str) -> None:
        document = editor.document()
        document.setMetaInformation(QTextDocument.MetaInformation.DocumentTitle, title)
        self._editors[document] = editor
        if self._last_editor is None:
            self._last_editor = editor

    def parent_metrics(self) -> ParentMetrics:
        reference = self._current_editor() or self._main_window
        metrics = reference.fontMetrics()
        return ParentMetrics(
            width_px=float(self._main_window.width()),
            height_px=float(self._main_window.height()),
            char_width_px=float(max(1, metrics.horizontalAdvance("M"))),
            char_height_px=float(max(1, metrics.lineSpacing())),
        )

    def create_floating_surface(self, layout: FloatingLayout, style: SurfaceStyle) -> FloatingSurfaceWindow:
        metrics = self.parent_metrics()
        width, height = layout.pixel_size(metrics.char_width_px, metrics.char_height_px)
        origin = self._main_window.mapToGlobal(QPoint(layout.left, layout.top))
        surface = FloatingSurfaceWindow(self._main_window, style)
        surface.setGeometry(origin.x(), origin.y(), width, height)
        surface.show()
        self._surface = surface
        self._log("Floating surface shown at %s size=%dx%d", (origin.x(), origin.y()), width, height)
        return surface

    def clone_view(self, source_id: QTextDocument, excerpt_range: ExcerptRange, name: str) -> ExcerptPane:
        document = narrowed_clone(source_id, excerpt_range)
        return ExcerptPane(document, name, self._editors.get(source_id))

    def place_in_pane(self, surface: FloatingSurfaceWindow, projection: ExcerptPane, is_first: bool) -> None:
        surface.add_pane(projection, is_first)
        projection.show()

    def set_pane_decoration(self, projection: ExcerptPane, label_text: str) -> None:
        projection.set_header(label_text)

    def destroy_projection(self, handle: QWidget) -> None:
        _mark_destroyed(handle)
        handle.hide()
        handle.deleteLater()

    def destroy_surface(self, handle: QWidget) -> None:
        _mark_destroyed(handle)
        handle.close()
        if handle is self._surface:
            self._surface = None

    def is_live(self, handle: Any) -> bool:
        if handle is None or not isinstance(handle, QObject):
            return False
        if sip.isdeleted(handle) or handle.property(_DESTROYED_PROPERTY):
            return False
        if isinstance(handle, QWidget):
            top = handle.window()
            if top is not handle and top.property(_DESTROYED_PROPERTY):
                return False
        return True

    def is_focused(self, handle: Any) -> bool:
        return isinstance(handle, QWidget) and self.is_live(handle) and handle.isActiveWindow()

    def transfer_focus(self, target: FocusTarget) -> None:
        if target.kind is FocusKind.FLOATING:
            surface = self._surface
            if surface is None or not self.is_live(surface):
                self._log("Focus transfer skipped: floating surface gone")
                return
            surface.raise_()
            surface.activateWindow()
            editor = surface.first_editor()
            if editor is not None:
                editor.setFocus(Qt.FocusReason.OtherFocusReason)
            return
        editor = self._editors.get(target.source_id)
        if editor is None or not self.is_live(editor):
            self._log("Focus transfer skipped: main editor gone")
            return
        window = editor.window()
        window.raise_()
        window.activateWindow()
        editor.setFocus(Qt.FocusReason.OtherFocusReason)

    def current_selection(self) -> Optional[Selection]:
        editor = self._current_editor()
        if editor is None:
            return None
        cursor = editor.textCursor()
        if not cursor.hasSelection():
            return None
        text = cursor.selectedText()
        for separator in _PARAGRAPH_SEPARATORS:
            text = text.replace(separator, "\n")
        document = editor.document()
        return Selection(
            source_id=document,
            excerpt_range=ExcerptRange(cursor.selectionStart(), cursor.selectionEnd()),
            text=text,
            source_name=document.metaInformation(QTextDocument.MetaInformation.DocumentTitle),
        )

    def current_source(self) -> Optional[QTextDocument]:
        editor = self._current_editor()
        return editor.document() if editor is not None else None

    def replace_view(self, source_id: QTextDocument, excerpt_range: ExcerptRange, name: str) -> QPlainTextEdit:
        original = self._editors.get(source_id)
        replacement = QPlainTextEdit()
        replacement.setObjectName(name)
        document = narrowed_clone(source_id, excerpt_range, replacement)
        replacement.setDocument(document)
        if original is not None:
            replacement.setFont(original.font())
        self.register_editor(replacement, name)

        container = original.parentWidget() if original is not None else None
        layout = container.layout() if container is not None else None
        if original is not None and layout is not None and layout.replaceWidget(original, replacement) is not None:
            original.hide()
        else:
            replacement.setWindowTitle(name)
        replacement.show()
        replacement.setFocus(Qt.FocusReason.OtherFocusReason)
        self._last_editor = replacement
        self._log("Replaced view with narrowed clone %r", name)
        return replacement

    def _current_editor(self) -> Optional[QPlainTextEdit]:
        app = QApplication.instance()
        focused = app.focusWidget() if app is not None else None
        if isinstance(focused, QPlainTextEdit) and focused.document() in self._editors:
            return focused
        editor = self._last_editor
        if editor is not None and self.is_live(editor):
            return editor
        return None

    def _on_focus_changed(self, _old: Optional[QWidget], new: Optional[QWidget]) -> None:
        if isinstance(new, QPlainTextEdit) and new.document() in self._editors:
            self._last_editor = new


def shortcut_binder(widget: QWidget) -> Tuple[Callable[[str, Callable[[], object]], QShortcut], Callable[[QShortcut], None]]:
    """Return bind/unbind callables that install application-wide QShortcuts on ``widget``."""

    def _bind(sequence: str, handler: Callable[[], object]) -> QShortcut:
        key_sequence = QKeySequence(sequence)
        if key_sequence.isEmpty():
            raise ValueError(f"Unrecognised key sequence {sequence!r}")
        shortcut = QShortcut(key_sequence, widget)
        shortcut.setContext(Qt.ShortcutContext.ApplicationShortcut)
        shortcut.activated.connect(lambda: handler())
        return shortcut

    def _unbind(shortcut: QShortcut) -> None:
        shortcut.setEnabled(False)
        shortcut.deleteLater()

    return _bind, _unbind
