from __future__ import annotations

import logging
from typing import Callable

import pygame

from ui_base import get_font

logger = logging.getLogger(__name__)


def _no_action() -> None:
    logger.debug("Button without action pressed")


class Button:
    """Rounded push button with a centred single-line label."""

    def __init__(
        self,
        app,
        msg: str,
        rect: tuple[int, int, int, int],
        command: Callable[[], None] = _no_action,
        **kwargs,
    ):
        self.screen = app.screen
        self.rect = pygame.Rect(rect)
        self.command = command
        self.button_color = kwargs.get('button_color', (240, 240, 240))
        self.hover_color = kwargs.get('hover_color', self.button_color)
        self.text_color = kwargs.get('text_color', (0, 0, 0))
        self.font = get_font(kwargs.get('font_size', 22), bold=kwargs.get('bold', True))
        self.border_radius = kwargs.get('border_radius', 10)
        self.border_color = kwargs.get('border_color')
        self.shadow_offset = kwargs.get('shadow_offset', 0)
        self.shadow_color = kwargs.get('shadow_color', (0, 0, 0, 80))
        self.hovered = False
        self.set_label(msg)

    def set_label(self, msg: str) -> None:
        self.msg = msg
        self.msg_image = self.font.render(msg, True, self.text_color)
        self.msg_image_rect = self.msg_image.get_rect(center=self.rect.center)

    def handle_click(self, pos: tuple[int, int]) -> bool:
        if not self.rect.collidepoint(pos):
            return False
        self.command()
        return True

    def draw_button(self, surface: pygame.Surface | None = None) -> None:
        surface = surface or self.screen
        if self.shadow_offset:
            shadow_surface = pygame.Surface(self.rect.size, pygame.SRCALPHA)
            pygame.draw.rect(
                shadow_surface,
                self.shadow_color,
                shadow_surface.get_rect(),
                border_radius=self.border_radius,
            )
            surface.blit(shadow_surface, (self.rect.x + self.shadow_offset, self.rect.y + self.shadow_offset))
        color = self.hover_color if self.hovered else self.button_color
        pygame.draw.rect(surface, color, self.rect, border_radius=self.border_radius)
        if self.border_color:
            pygame.draw.rect(surface, self.border_color, self.rect, width=2, border_radius=self.border_radius)
        surface.blit(self.msg_image, self.msg_image_rect)
