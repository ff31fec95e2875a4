from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from excerpt_overlay.keybindings import DEFAULT_CONFIG, BindingConfig, BindingManager, ControlScheme
from excerpt_overlay.session import ACTION_ADD_SELECTION, ACTION_CLEAR, ACTION_TOGGLE_FOCUS


class DummyBinder:
    def __init__(self, *, fail_sequences: set[str] | None = None) -> None:
        self.bound: list[tuple[str, object]] = []
        self.unbound: list[object] = []
        self.fail_sequences = fail_sequences or set()

    def bind(self, sequence, handler):
        if sequence in self.fail_sequences:
            raise ValueError(f"Cannot bind {sequence}")
        token = (sequence, handler)
        self.bound.append(token)
        return token

    def unbind(self, token):
        self.unbound.append(token)


def _make_config(bindings: dict[str, list[str]]) -> BindingConfig:
    scheme = ControlScheme(name="test", display_name="Test", bindings=bindings)
    return BindingConfig(schemes={"test": scheme}, active_scheme="test", source_path=Path("dummy"))


def _manager(config, binder):
    return BindingManager(config, bind_fn=binder.bind, unbind_fn=binder.unbind)


def test_load_creates_default_file(tmp_path: Path):
    path = tmp_path / "nested" / "keybindings.json"
    config = BindingConfig.load(path)

    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8")) == DEFAULT_CONFIG
    assert config.get_scheme().bindings[ACTION_TOGGLE_FOCUS] == ["Ctrl+Alt+O"]
    assert config.source_path == path


def test_load_rejects_unknown_actions(tmp_path: Path):
    path = tmp_path / "keybindings.json"
    path.write_text(
        json.dumps({"active_scheme": "mine", "schemes": {"mine": {"bindings": {"explode": ["F1"]}}}}),
        encoding="utf-8",
    )
    with pytest.raises(ValueError, match="explode"):
        BindingConfig.load(path)


def test_load_rejects_missing_active_scheme(tmp_path: Path):
    path = tmp_path / "keybindings.json"
    path.write_text(json.dumps({"active_scheme": "other", "schemes": {}}), encoding="utf-8")
    with pytest.raises(ValueError, match="other"):
        BindingConfig.load(path)


def test_get_scheme_unknown_name_raises():
    with pytest.raises(ValueError):
        BindingConfig.default().get_scheme("missing")


def test_activate_binds_registered_actions_only():
    binder = DummyBinder()
    config = _make_config({ACTION_ADD_SELECTION: ["Ctrl+E"], ACTION_CLEAR: ["Ctrl+K"]})
    manager = _manager(config, binder)
    calls = []
    manager.register_action(ACTION_ADD_SELECTION, lambda: calls.append("add"))

    manager.activate()

    assert manager.bound_sequences == ["Ctrl+E"]
    binder.bound[0][1]()
    assert calls == ["add"]


def test_activate_skips_invalid_sequences_and_logs(caplog: pytest.LogCaptureFixture):
    binder = DummyBinder(fail_sequences={"Hyper+Q"})
    config = _make_config({ACTION_TOGGLE_FOCUS: ["", "  ", "Hyper+Q", "Ctrl+O"]})
    manager = _manager(config, binder)
    manager.register_action(ACTION_TOGGLE_FOCUS, lambda: None)

    with caplog.at_level(logging.WARNING, logger="ExcerptOverlay.Core"):
        manager.activate()

    assert manager.bound_sequences == ["Ctrl+O"]
    warnings = [record for record in caplog.records if "Skipping invalid binding" in record.getMessage()]
    assert len(warnings) == 3


def test_reactivate_unbinds_previous_sequences():
    binder = DummyBinder()
    manager = _manager(BindingConfig.default(), binder)
    manager.register_actions({ACTION_CLEAR: lambda: None, ACTION_TOGGLE_FOCUS: lambda: None})

    manager.activate()
    first_tokens = list(binder.bound)
    manager.activate()

    assert binder.unbound == first_tokens
    assert len(manager.bound_sequences) == 2

    manager.deactivate()
    assert manager.bound_sequences == []
