from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from PIL import Image, ImageDraw

from laptop_tap.gate import ActiveGate

ACTIVE_COLOR = (0, 200, 120, 255)
INACTIVE_COLOR = (120, 120, 120, 255)


def make_icon_image(active: bool, size: int = 64) -> Image.Image:
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    margin = size // 8
    draw.ellipse(
        (margin, margin, size - margin, size - margin),
        fill=ACTIVE_COLOR if active else INACTIVE_COLOR,
        outline=(255, 255, 255, 255),
    )
    return img


class TrayToggle:
    """System tray icon with an Active checkbox and an Exit entry.

    The checkbox mirrors the shared ``ActiveGate``; Exit stops the icon and
    calls ``on_exit`` so the polling loop can shut down.
    """

    def __init__(self, gate: ActiveGate, on_exit: Callable[[], None], title: str = "Laptop Tap") -> None:
        self.gate = gate
        self.on_exit = on_exit
        self.title = title
        self.icon: Any = None
        self.logger = logging.getLogger(self.__class__.__name__)

    def is_checked(self, item: Any = None) -> bool:
        return self.gate.is_active

    def on_toggle(self, icon: Any, item: Any = None) -> None:
        active = self.gate.toggle()
        if icon is not None:
            icon.icon = make_icon_image(active)
            icon.update_menu()

    def on_quit(self, icon: Any, item: Any = None) -> None:
        self.logger.info("Exit requested from tray.")
        if icon is not None:
            icon.stop()
        self.on_exit()

    def build_icon(self) -> Any:
        # pystray selects its desktop backend at import time.
        import pystray

        menu = pystray.Menu(
            pystray.MenuItem("Active", self.on_toggle, checked=self.is_checked, default=True),
            pystray.MenuItem("Exit", self.on_quit),
        )
        return pystray.Icon(
            "laptop-tap",
            make_icon_image(self.gate.is_active),
            self.title,
            menu=menu,
        )

    def start(self) -> threading.Thread:
        self.icon = self.build_icon()
        thread = threading.Thread(target=self._run, name="tray", daemon=True)
        thread.start()
        return thread

    def _run(self) -> None:
        try:
            self.icon.run()
        except Exception:
            self.logger.exception("Tray icon stopped unexpectedly.")

    def stop(self) -> None:
        if self.icon is not None:
            self.icon.stop()
