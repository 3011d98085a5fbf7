from __future__ import annotations

import pygame


class ResponsiveScreen:
    """Base for screens that relayout when the window is resized."""

    def __init__(self, app):
        self.app = app
        self.screen = app.screen

    def on_window_resize(self, size: tuple[int, int]) -> None:
        """Refresh the cached display Surface and let the subclass relayout."""
        self.screen = self.app.screen
        relayout = getattr(self, "_relayout", None)
        if callable(relayout):
            relayout(size)


def get_font(size: int, *, bold: bool = False) -> pygame.font.Font:
    """System UI font with sensible fallbacks (Cyrillic capable)."""
    families = [
        "SF Pro Display",
        "Helvetica Neue",
        "Segoe UI",
        "Roboto",
        "DejaVu Sans",
        "Arial",
        "sans-serif",
    ]
    return pygame.font.SysFont(families, max(8, int(size)), bold=bold)


def calc_scale(
    size: tuple[int, int],
    *,
    base: tuple[int, int] = (1440, 900),
    min_scale: float = 0.6,
    max_scale: float = 1.4,
) -> float:
    """Return a clamped UI scale factor for the given window size."""
    if not size or base[0] <= 0 or base[1] <= 0:
        return 1.0
    width, height = size
    raw = min(width / base[0], height / base[1])
    return max(min_scale, min(max_scale, raw))


def build_vertical_gradient(
    size: tuple[int, int], top_color: tuple[int, int, int], bottom_color: tuple[int, int, int]
) -> pygame.Surface:
    """Create a vertical gradient surface for backgrounds."""
    width, height = size
    surface = pygame.Surface((max(width, 1), max(height, 1)))
    if height <= 1:
        surface.fill(top_color)
        return surface
    for y in range(height):
        ratio = y / (height - 1)
        color = tuple(int(top_color[i] + (bottom_color[i] - top_color[i]) * ratio) for i in range(3))
        pygame.draw.line(surface, color, (0, y), (width, y))
    return surface


def draw_card(
    surface: pygame.Surface,
    rect: pygame.Rect,
    *,
    color: tuple[int, int, int] = (255, 255, 255),
    border: tuple[int, int, int] | None = (214, 220, 235),
    shadow: tuple[int, int, int, int] | None = (15, 22, 58, 45),
    radius: int = 14,
    shadow_offset: tuple[int, int] = (6, 8),
) -> None:
    """Rounded card with an optional soft drop shadow."""
    if shadow is not None:
        shadow_surface = pygame.Surface(rect.size, pygame.SRCALPHA)
        pygame.draw.rect(shadow_surface, shadow, shadow_surface.get_rect(), border_radius=radius + 2)
        surface.blit(shadow_surface, (rect.x + shadow_offset[0], rect.y + shadow_offset[1]))
    pygame.draw.rect(surface, color, rect, border_radius=radius)
    if border is not None:
        pygame.draw.rect(surface, border, rect, width=2, border_radius=radius)
