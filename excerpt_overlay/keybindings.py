"""Key bindings for the excerpt commands."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from excerpt_overlay.session import (
    ACTION_ADD_SELECTION,
    ACTION_CLEAR,
    ACTION_NARROW,
    ACTION_TOGGLE_FOCUS,
    ACTIONS,
)

_LOGGER = logging.getLogger("ExcerptOverlay.Core")

DEFAULT_BINDINGS_FILENAME = "keybindings.json"

DEFAULT_CONFIG = {
    "active_scheme": "keyboard_default",
    "schemes": {
        "keyboard_default": {
            "display_name": "Keyboard (default)",
            "bindings": {
                ACTION_ADD_SELECTION: ["Ctrl+Alt+E"],
                ACTION_TOGGLE_FOCUS: ["Ctrl+Alt+O"],
                ACTION_CLEAR: ["Ctrl+Alt+K"],
                ACTION_NARROW: ["Ctrl+Alt+N"],
            },
        }
    },
}


@dataclass
class ControlScheme:
    name: str
    display_name: str
    bindings: Dict[str, List[str]]


@dataclass
class BindingConfig:
    """Representation of the key-binding file contents."""

    schemes: Dict[str, ControlScheme]
    active_scheme: str
    source_path: Optional[Path]

    @classmethod
    def default(cls) -> "BindingConfig":
        return cls._from_payload(DEFAULT_CONFIG, None)

    @classmethod
    def load(cls, path: Path) -> "BindingConfig":
        """Load bindings from disk, creating the default file if missing."""

        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(DEFAULT_CONFIG, indent=2), encoding="utf-8")

        payload = json.loads(path.read_text(encoding="utf-8"))
        return cls._from_payload(payload, path)

    @classmethod
    def _from_payload(cls, payload: dict, path: Optional[Path]) -> "BindingConfig":
        schemes: Dict[str, ControlScheme] = {}
        for name, spec in (payload.get("schemes") or {}).items():
            bindings = {action: list(inputs or []) for action, inputs in (spec.get("bindings") or {}).items()}
            unknown = sorted(set(bindings) - set(ACTIONS))
            if unknown:
                raise ValueError(f"Unknown action(s) {', '.join(unknown)} in scheme '{name}' of {path}")
            schemes[name] = ControlScheme(
                name=name,
                display_name=spec.get("display_name", name),
                bindings=bindings,
            )

        active = payload.get("active_scheme")
        if active not in schemes:
            raise ValueError(f"Active scheme '{active}' is not defined in keybindings file {path}")
        return cls(schemes=schemes, active_scheme=active, source_path=path)

    def get_scheme(self, name: Optional[str] = None) -> ControlScheme:
        scheme_name = name or self.active_scheme
        try:
            return self.schemes[scheme_name]
        except KeyError as exc:
            raise ValueError(f"Unknown control scheme '{scheme_name}'") from exc


class BindingManager:
    """Applies the active scheme through injected bind/unbind callables."""

    def __init__(
        self,
        config: BindingConfig,
        *,
        bind_fn: Callable[[str, Callable[[], object]], object],
        unbind_fn: Callable[[object], None],
    ) -> None:
        self.config = config
        self._bind = bind_fn
        self._unbind = unbind_fn
        self._handlers: Dict[str, Callable[[], object]] = {}
        self._bound: List[Tuple[str, object]] = []

    @property
    def bound_sequences(self) -> List[str]:
        return [sequence for sequence, _token in self._bound]

    def register_action(self, action_name: str, handler: Callable[[], object]) -> None:
        self._handlers[action_name] = handler

    def register_actions(self, handlers: Dict[str, Callable[[], object]]) -> None:
        for action_name, handler in handlers.items():
            self.register_action(action_name, handler)

    def activate(self, scheme_name: Optional[str] = None) -> None:
        self.deactivate()
        scheme = self.config.get_scheme(scheme_name)
        for action, sequences in scheme.bindings.items():
            handler = self._handlers.get(action)
            if handler is None:
                continue
            for sequence in sequences:
                normalized = sequence.strip()
                if not normalized:
                    _LOGGER.warning("Skipping invalid binding %r for action %s", sequence, action)
                    continue
                try:
                    token = self._bind(normalized, handler)
                except Exception as exc:
                    _LOGGER.warning("Skipping invalid binding %r for action %s: %s", sequence, action, exc)
                    continue
                self._bound.append((normalized, token))

    def deactivate(self) -> None:
        for _sequence, token in self._bound:
            try:
                self._unbind(token)
            except Exception:
                pass
        self._bound.clear()
