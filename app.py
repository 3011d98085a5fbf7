import logging
import sys

import pygame
try:
    import screeninfo
except Exception:  # pragma: no cover - fallback for platforms without screeninfo deps
    screeninfo = None

import config
import language
from map_screen import MapScreen

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level_name = str(config.ConfigLoader().get('log_level', 'INFO')).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class App:
    MIN_WINDOW = (960, 640)
    WINDOW_SCALE = 0.86

    def __init__(self):
        pygame.init()
        self._config = config.ConfigLoader()
        self.monitor = self._detect_monitor()
        self.window_size = self._get_initial_window_size(self.monitor)
        self.display_flags = pygame.RESIZABLE
        self.screen = pygame.display.set_mode(self.window_size, self.display_flags)
        pygame.display.set_caption(language.Language()['window_title'])

        self.clock = pygame.time.Clock()

        self.map_screen = MapScreen(self)
        self._screens = (self.map_screen,)
        self.active_screen = self.map_screen
        logger.info("Window %dx%d ready", *self.window_size)

    # ------------------------------------------------------------------ Locale
    def set_language(self, language_code: str) -> None:
        """Persist the selected language and notify screens to refresh text."""
        available = self._config['language_files']
        if language_code not in available:
            raise ValueError(f"Unknown language code: {language_code!r}")
        if self._config['language'] == language_code:
            return

        self._config.set('language', language_code)
        language.Language().reload()

        for screen in self._screens:
            handler = getattr(screen, "on_language_change", None)
            if callable(handler):
                handler()

    def toggle_language(self) -> None:
        available = list(self._config['language_files'])
        if len(available) < 2:
            return
        current_index = available.index(self._config['language'])
        self.set_language(available[(current_index + 1) % len(available)])

    # ------------------------------------------------------------------ Window
    def _get_initial_window_size(self, monitor) -> tuple[int, int]:
        width = int(monitor.width * self.WINDOW_SCALE)
        height = int(monitor.height * self.WINDOW_SCALE)
        min_w, min_h = self.MIN_WINDOW
        return max(min_w, width), max(min_h, height)

    def _notify_resize(self, size: tuple[int, int]) -> None:
        for screen in self._screens:
            if hasattr(screen, "on_window_resize"):
                screen.on_window_resize(size)

    def handle_resize(self, size: tuple[int, int]) -> None:
        min_w, min_h = self.MIN_WINDOW
        resized = (max(min_w, size[0]), max(min_h, size[1]))
        if resized == self.window_size:
            return
        self.window_size = resized
        self.screen = pygame.display.set_mode(self.window_size, self.display_flags)
        self._notify_resize(self.window_size)

    def _detect_monitor(self):
        """Detect monitor size even when screeninfo is unavailable."""
        if screeninfo is not None:
            try:
                monitor = screeninfo.get_monitors()[0]
                monitor.width = int(getattr(monitor, "width", self.MIN_WINDOW[0]))
                monitor.height = int(getattr(monitor, "height", self.MIN_WINDOW[1]))
                return monitor
            except (screeninfo.ScreenInfoError, IndexError):
                logger.debug("screeninfo found no monitor, asking SDL instead")

        info = pygame.display.Info()

        class _Monitor:
            width = App.MIN_WINDOW[0]
            height = App.MIN_WINDOW[1]

        fallback = _Monitor()
        if getattr(info, "current_w", 0) and getattr(info, "current_h", 0):
            fallback.width = int(info.current_w)
            fallback.height = int(info.current_h)
        return fallback

    def quit(self) -> None:
        logger.info("Shutting down")
        self.map_screen.simulation.timer.invalidate()
        pygame.quit()
        sys.exit(0)

    def run(self):
        """Main loop: events (including animation ticks), drawing, frame pacing."""
        while True:
            self.active_screen._check_events()
            self.active_screen._update_screen()
            pygame.display.flip()
            self.clock.tick(self._config['FPS'])


def main() -> None:
    configure_logging()
    App().run()


if __name__ == '__main__':
    main()
