import threading
from typing import Callable

import pystray
from PIL import Image, ImageDraw


class TrayController:
    def __init__(
        self,
        title: str,
        on_show: Callable[[], None],
        on_start: Callable[[], None],
        on_pause: Callable[[], None],
        on_quit: Callable[[], None],
    ):
        self._title = title
        self._on_show = on_show
        self._on_start = on_start
        self._on_pause = on_pause
        self._on_quit = on_quit

        self._icon = None
        self._thread = None
        self._running = False

    def _make_icon_image(self) -> Image.Image:
        img = Image.new("RGB", (64, 64), color=(40, 40, 40))
        draw = ImageDraw.Draw(img)
        draw.ellipse((8, 8, 56, 56), fill=(200, 60, 60))
        draw.rectangle((30, 16, 34, 34), fill=(245, 245, 245))
        draw.rectangle((30, 30, 44, 34), fill=(245, 245, 245))
        return img

    def build_menu(self) -> pystray.Menu:
        return pystray.Menu(
            pystray.MenuItem("Show", lambda icon, item: self._on_show(), default=True),
            pystray.MenuItem("Start", lambda icon, item: self._on_start()),
            pystray.MenuItem("Pause", lambda icon, item: self._on_pause()),
            pystray.MenuItem("Quit", lambda icon, item: self._on_quit()),
        )

    def ensure_running(self) -> None:
        if self._icon is not None and self._running:
            return

        self._icon = pystray.Icon("PomodoroBlocker", self._make_icon_image(), self._title, self.build_menu())

        def run_icon():
            self._running = True
            try:
                self._icon.run()
            finally:
                self._running = False

        self._thread = threading.Thread(target=run_icon, daemon=True)
        self._thread.start()

    def set_title(self, title: str) -> None:
        if self._icon is not None:
            self._icon.title = title

    def stop(self) -> None:
        if self._icon is None:
            return
        try:
            self._icon.stop()
        finally:
            self._icon = None
