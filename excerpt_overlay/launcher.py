from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtWidgets import QApplication, QMainWindow, QPlainTextEdit, QTabWidget, QVBoxLayout, QWidget

from excerpt_overlay.config import config_as_dict, load_config, resolve_config_path
from excerpt_overlay.keybindings import DEFAULT_BINDINGS_FILENAME, BindingConfig, BindingManager
from excerpt_overlay.logging_utils import configure_logger
from excerpt_overlay.qt_host import QtWindowingSystem, shortcut_binder
from excerpt_overlay.session import ExcerptSession
from excerpt_overlay.version import DEV_MODE_ENV_VAR, __version__, is_dev_build

_LAUNCHER_LOGGER = logging.getLogger("ExcerptOverlay.Launcher")


def read_text(path: Path) -> str:
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


class ExcerptMainWindow(QMainWindow):
    """Main editing surface: one tab per opened document."""

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Excerpt Overlay")
        self.tabs = QTabWidget(self)
        self.setCentralWidget(self.tabs)
        self.resize(1200, 800)

    def open_document(self, title: str, text: str) -> QPlainTextEdit:
        page = QWidget(self.tabs)
        layout = QVBoxLayout(page)
        layout.setContentsMargins(0, 0, 0, 0)
        editor = QPlainTextEdit(page)
        editor.setPlainText(text)
        editor.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)
        layout.addWidget(editor)
        self.tabs.addTab(page, title)
        return editor


def _load_bindings(path: Path) -> BindingConfig:
    try:
        return BindingConfig.load(path)
    except OSError as exc:
        _LAUNCHER_LOGGER.warning("Key bindings unavailable at %s (%s); using defaults", path, exc)
        return BindingConfig.default()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Show excerpts of text documents in a floating window")
    parser.add_argument("files", nargs="*", help="Documents to open")
    parser.add_argument("--config", help="Path to settings.json")
    parser.add_argument("--keybindings", help="Path to keybindings.json")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    debug_enabled = args.debug or is_dev_build()
    configure_logger(logging.getLogger("ExcerptOverlay"), debug_enabled=debug_enabled)

    config_path = resolve_config_path(args.config)
    config = load_config(config_path)
    bindings_path = Path(args.keybindings).expanduser() if args.keybindings else config_path.parent / DEFAULT_BINDINGS_FILENAME
    bindings = _load_bindings(bindings_path)

    _LAUNCHER_LOGGER.info("Starting excerpt overlay %s", __version__)
    _LAUNCHER_LOGGER.debug("Loaded settings from %s: %s", config_path, config_as_dict(config))
    if not debug_enabled:
        _LAUNCHER_LOGGER.debug("Debug logging disabled; pass --debug or export %s=1", DEV_MODE_ENV_VAR)

    app = QApplication(sys.argv[:1])
    window = ExcerptMainWindow()
    host = QtWindowingSystem(window)
    paths = [Path(name).expanduser() for name in args.files]
    for path in paths:
        try:
            text = read_text(path)
        except OSError as exc:
            _LAUNCHER_LOGGER.warning("Unable to open %s: %s", path, exc)
            continue
        host.register_editor(window.open_document(path.name, text), path.name)
    if window.tabs.count() == 0:
        host.register_editor(window.open_document("untitled", ""), "untitled")

    session = ExcerptSession(host, config)
    bind_fn, unbind_fn = shortcut_binder(window)
    manager = BindingManager(bindings, bind_fn=bind_fn, unbind_fn=unbind_fn)
    manager.register_actions(session.commands())
    manager.activate()
    _LAUNCHER_LOGGER.debug("Bound key sequences: %s", ", ".join(manager.bound_sequences) or "none")

    window.show()
    exit_code = app.exec()
    session.clear_all()
    _LAUNCHER_LOGGER.info("Excerpt overlay exiting with code %s", exit_code)
    return int(exit_code)
