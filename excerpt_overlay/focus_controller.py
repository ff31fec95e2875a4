from __future__ import annotations

import enum
from typing import Any, Callable, Optional

from excerpt_overlay.host import FocusTarget


class FocusState(enum.Enum):
    ON_MAIN = "main"
    ON_FLOATING = "floating"


class FocusController:
    """Two-state decision between the main editing surface and the floating surface.

    The controller only decides; the session hands the returned target to the
    host, which performs the actual focus transfer.
    """

    def __init__(
        self,
        *,
        is_origin_valid: Optional[Callable[[Any], bool]] = None,
        log_fn: Optional[Callable[..., None]] = None,
    ) -> None:
        self._is_origin_valid = is_origin_valid
        self._log = log_fn
        self._last_focused_main: Optional[Any] = None
        self._state = FocusState.ON_MAIN

    @property
    def state(self) -> FocusState:
        return self._state

    @property
    def last_focused_main(self) -> Optional[Any]:
        return self._last_focused_main

    def remember_origin(self, source_id: Optional[Any]) -> None:
        if source_id is not None:
            self._last_focused_main = source_id

    def reset(self) -> None:
        self._state = FocusState.ON_MAIN

    def toggle(
        self,
        currently_on_floating_surface: bool,
        floating_surface_live: bool,
        *,
        current_main: Optional[Any] = None,
    ) -> Optional[FocusTarget]:
        if not floating_surface_live:
            self._emit("Focus toggle ignored: no live floating surface")
            return None
        if currently_on_floating_surface:
            origin = self._last_focused_main
            if origin is None or not self._origin_valid(origin):
                self._emit("Focus toggle ignored: main-side origin unavailable")
                return None
            self._state = FocusState.ON_MAIN
            return FocusTarget.main(origin)
        self.remember_origin(current_main)
        self._state = FocusState.ON_FLOATING
        return FocusTarget.floating()

    def _origin_valid(self, origin: Any) -> bool:
        if self._is_origin_valid is None:
            return True
        try:
            return bool(self._is_origin_valid(origin))
        except Exception:
            return False

    def _emit(self, message: str, *args: object) -> None:
        logger = self._log
        if logger is None:
            return
        try:
            logger(message, *args)
        except Exception:
            pass
