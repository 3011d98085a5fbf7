from __future__ import annotations

from typing import Callable, Optional

import pygame

from ui_base import draw_card, get_font


class ParamSlider:
    """Slider rendered as a compact card with label, value and a knob track."""

    def __init__(
        self,
        app,
        name: str,
        rect: tuple[int, int, int, int],
        bounds: tuple[float, float],
        step: float,
        dec_number: int,
        initial_value: float,
        on_change: Optional[Callable[[float], None]] = None,
        **kwargs,
    ):
        self.app = app
        self.name = name
        self.min_val, self.max_val = bounds
        self.step = step
        self.decimals = dec_number
        self.on_change = on_change
        self.value_suffix = kwargs.get('value_suffix', '')

        self.card_rect = pygame.Rect(rect)
        self.padding = kwargs.get('padding', 16)
        self.label_font = get_font(kwargs.get('label_size', 18), bold=True)
        self.value_font = get_font(kwargs.get('value_size', 20), bold=True)
        self.track_color = kwargs.get('track_color', (215, 219, 232))
        self.fill_color = kwargs.get('fill_color', (72, 104, 255))
        self.knob_color = kwargs.get('knob_color', (72, 104, 255))
        self.knob_hover_color = kwargs.get('knob_hover_color', (52, 82, 230))

        self.track_height = kwargs.get('track_height', 8)
        track_left = self.card_rect.left + self.padding
        track_width = max(1, self.card_rect.width - 2 * self.padding)
        track_y = self.card_rect.bottom - self.padding - self.track_height
        self.track_rect = pygame.Rect(track_left, track_y, track_width, self.track_height)
        self.knob_radius = max(10, self.track_height * 2)

        self.hovered = False
        self.grabbed = False
        self._value = self._snap(initial_value)

    # ------------------------------------------------------------------ Value
    @property
    def value(self) -> float:
        return self._value

    def set_value(self, value: float, *, notify: bool = False) -> None:
        snapped = self._snap(value)
        changed = abs(snapped - self._value) > 1e-12
        self._value = snapped
        if notify and changed and self.on_change is not None:
            self.on_change(snapped)

    def set_label(self, name: str) -> None:
        self.name = name

    def _snap(self, value: float) -> float:
        value = max(self.min_val, min(self.max_val, float(value)))
        if self.step and self.step > 0:
            steps = round((value - self.min_val) / self.step)
            value = min(self.max_val, self.min_val + steps * self.step)
        return round(value, max(self.decimals, 0) + 2)

    def _ratio(self) -> float:
        if self.max_val <= self.min_val:
            return 0.0
        return (self._value - self.min_val) / (self.max_val - self.min_val)

    def knob_center(self) -> tuple[int, int]:
        x = int(round(self.track_rect.left + self._ratio() * self.track_rect.width))
        return x, self.track_rect.centery

    def _value_at(self, x: float) -> float:
        x = max(self.track_rect.left, min(self.track_rect.right, x))
        ratio = (x - self.track_rect.left) / max(1, self.track_rect.width)
        return self.min_val + ratio * (self.max_val - self.min_val)

    # ------------------------------------------------------------------ Events
    def _hit(self, pos: tuple[int, int]) -> bool:
        kx, ky = self.knob_center()
        on_knob = (pos[0] - kx) ** 2 + (pos[1] - ky) ** 2 <= self.knob_radius ** 2
        on_track = self.track_rect.inflate(0, self.knob_radius * 2).collidepoint(pos)
        return on_knob or on_track

    def handle_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and self._hit(event.pos):
            self.grabbed = True
            self.set_value(self._value_at(event.pos[0]), notify=True)
            return True
        if event.type == pygame.MOUSEMOTION:
            self.hovered = self._hit(event.pos)
            if self.grabbed:
                self.set_value(self._value_at(event.pos[0]), notify=True)
                return True
            return False
        if event.type == pygame.MOUSEBUTTONUP and event.button == 1 and self.grabbed:
            self.grabbed = False
            return True
        return False

    # ------------------------------------------------------------------ Drawing
    def draw(self, surface: pygame.Surface) -> None:
        draw_card(surface, self.card_rect)
        self._draw_labels(surface)

        track = self.track_rect
        knob_x, knob_y = self.knob_center()
        pygame.draw.line(surface, self.track_color, (track.left, knob_y), (track.right, knob_y), track.height)
        pygame.draw.line(surface, self.fill_color, (track.left, knob_y), (knob_x, knob_y), track.height)
        shadow = pygame.Surface((self.knob_radius * 2, self.knob_radius * 2), pygame.SRCALPHA)
        pygame.draw.circle(shadow, (0, 0, 0, 55), (self.knob_radius, self.knob_radius), self.knob_radius)
        surface.blit(shadow, (knob_x - self.knob_radius, knob_y - self.knob_radius + 3))
        color = self.knob_hover_color if (self.hovered or self.grabbed) else self.knob_color
        pygame.draw.circle(surface, color, (knob_x, knob_y), self.knob_radius)

    def _draw_labels(self, surface: pygame.Surface) -> None:
        label_surface = self.label_font.render(self.name, True, (58, 64, 82))
        label_rect = label_surface.get_rect(topleft=(self.card_rect.left + self.padding, self.card_rect.top + self.padding))
        surface.blit(label_surface, label_rect)

        value_text = f"{int(self._value)}" if self.decimals == 0 else f"{self._value:.{self.decimals}f}"
        if self.value_suffix:
            value_text = f"{value_text} {self.value_suffix}"
        value_surface = self.value_font.render(value_text, True, (27, 32, 42))
        value_rect = value_surface.get_rect(topright=(self.card_rect.right - self.padding, self.card_rect.top + self.padding))
        surface.blit(value_surface, value_rect)
