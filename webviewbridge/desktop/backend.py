"""Native window control, capture and input simulation.

Imports of the GUI libraries are deferred to first use so the host process
starts on machines without a display.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

from loguru import logger
from PIL import Image

from webviewbridge.utils.exceptions import WindowOperationError


@dataclass(slots=True)
class WindowInfo:
    title: str
    left: int
    top: int
    width: int
    height: int
    native: Any = None


def _window_info(win: Any) -> WindowInfo:
    return WindowInfo(
        title=str(getattr(win, "title", "") or ""),
        left=int(getattr(win, "left", 0) or 0),
        top=int(getattr(win, "top", 0) or 0),
        width=int(getattr(win, "width", 0) or 0),
        height=int(getattr(win, "height", 0) or 0),
        native=win,
    )


def _pyautogui() -> Any:
    import pyautogui

    pyautogui.FAILSAFE = False
    return pyautogui


class DesktopBackend:
    """Thin synchronous wrapper over pygetwindow, mss and pyautogui.

    Every method may block; callers run them in a worker thread.
    """

    def find_window(self, *, title: str = "", application_name: str = "") -> WindowInfo:
        """Locate a top level window whose title contains ``title`` or ``application_name``."""
        try:
            import pygetwindow as gw

            windows = [w for w in gw.getAllWindows() if str(getattr(w, "title", "") or "").strip()]
        except Exception as e:
            raise WindowOperationError("find_window", f"window enumeration unavailable: {e}") from e
        needles = [n.casefold() for n in (title, application_name) if n]
        for needle in needles:
            for win in windows:
                if needle in str(win.title).casefold():
                    return _window_info(win)
        raise WindowOperationError(
            "find_window",
            "no window matches " + " / ".join(repr(n) for n in (title, application_name) if n),
            context=f"{len(windows)} windows visible",
        )

    def capture(self, window: WindowInfo) -> Image.Image:
        if window.width <= 0 or window.height <= 0:
            raise WindowOperationError("capture", f"window has no visible area ({window.width}x{window.height})")
        try:
            import mss

            with mss.mss() as sct:
                region = {"left": window.left, "top": window.top, "width": window.width, "height": window.height}
                shot = sct.grab(region)
                return Image.frombytes("RGB", shot.size, shot.bgra, "raw", "BGRX")
        except Exception as e:
            raise WindowOperationError("capture", str(e), context=window.title) from e

    def window_action(self, window: WindowInfo, operation: str, **params: Any) -> None:
        win = window.native
        try:
            if operation == "focus":
                win.activate()
            elif operation == "minimize":
                win.minimize()
            elif operation == "maximize":
                win.maximize()
            elif operation == "unmaximize":
                win.restore()
            elif operation == "close":
                win.close()
            elif operation == "show":
                win.show()
            elif operation == "hide":
                win.hide()
            elif operation == "set_position":
                win.moveTo(int(params["x"]), int(params["y"]))
            elif operation == "set_size":
                win.resizeTo(int(params["width"]), int(params["height"]))
            elif operation == "center":
                screen = _pyautogui().size()
                win.moveTo(
                    max(0, (int(screen.width) - window.width) // 2),
                    max(0, (int(screen.height) - window.height) // 2),
                )
            else:
                raise WindowOperationError(operation, "unsupported operation")
        except WindowOperationError:
            raise
        except Exception as e:
            raise WindowOperationError(operation, str(e), context=window.title) from e

    def type_text(self, text: str, *, delay_ms: int = 20) -> None:
        try:
            _pyautogui().write(text, interval=max(0, delay_ms) / 1000.0)
        except Exception as e:
            raise WindowOperationError("simulate_text_input", str(e)) from e

    def move_mouse(
        self,
        *,
        x: int,
        y: int,
        relative: bool = False,
        click: bool = False,
        button: str = "left",
        duration_ms: int = 0,
    ) -> tuple[int, int]:
        try:
            gui = _pyautogui()
            duration = max(0, duration_ms) / 1000.0
            if relative:
                gui.moveRel(x, y, duration=duration)
            else:
                gui.moveTo(x, y, duration=duration)
            if click:
                time.sleep(0.05)
                gui.click(button=button)
            pos = gui.position()
            logger.debug("Mouse at {},{} (click={})", pos.x, pos.y, click)
            return int(pos.x), int(pos.y)
        except Exception as e:
            raise WindowOperationError("simulate_mouse_movement", str(e)) from e
