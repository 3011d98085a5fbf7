from __future__ import annotations

import logging
from typing import List, Optional

import pygame

import config
import language
from button import Button
from containment import ContainmentStats
from interaction import InteractionHandler
from map_canvas import MapCanvas, MarkerSymbol, UniqueValueRenderer
from simulation import Simulation
from slider import ParamSlider
from timer import ANIMATION_TICK, AnimationTimer
from ui_base import ResponsiveScreen, build_vertical_gradient, calc_scale, draw_card, get_font
from viewport import MapViewport

logger = logging.getLogger(__name__)


def status_labels(lang, particle_count: int, stats: Optional[ContainmentStats]) -> tuple[str, str, str]:
    """Texts of the graphics, inside and outside labels."""
    if particle_count == 0:
        empty = lang['no_graphics']
        return empty, empty, empty
    feedback = lang.format('graphics_count', count=particle_count)
    if stats is None or not stats.has_buffer:
        return feedback, lang['no_buffer'], lang['no_buffer']
    return (
        feedback,
        lang.format('inside_count', count=stats.inside),
        lang.format('outside_count', count=stats.outside),
    )


class MapScreen(ResponsiveScreen):
    def __init__(self, app):
        super().__init__(app)
        self.lang = language.Language()
        cfg = config.ConfigLoader()

        self.primary_color = (72, 104, 255)
        self.text_color = (35, 38, 46)
        self.muted_text = (85, 95, 120)
        self.inside_color = tuple(cfg['colors']['inside'])
        self.outside_color = tuple(cfg['colors']['outside'])

        map_cfg = cfg['map']
        self.viewport = MapViewport.from_lat_lon(
            pygame.Rect(0, 0, 1, 1),
            latitude=float(map_cfg['latitude']),
            longitude=float(map_cfg['longitude']),
            level_of_detail=float(map_cfg['level_of_detail']),
        )
        self.simulation = Simulation(
            self.viewport,
            buffer_size=float(cfg['buffer_size']),
            max_particles=int(cfg.get('max_particles', 2000)),
            timer=AnimationTimer(float(cfg['animation_fps']), ANIMATION_TICK),
        )
        self.interaction = InteractionHandler(
            self.simulation,
            self.viewport,
            long_press_ms=int(cfg['long_press_ms']),
            tap_tolerance_px=float(cfg['tap_tolerance_px']),
        )
        sizes = cfg['marker_sizes']
        self.canvas = MapCanvas(
            self.viewport,
            UniqueValueRenderer(
                default_symbol=MarkerSymbol(self.outside_color, int(sizes['outside'])),
                inside_symbol=MarkerSymbol(self.inside_color, int(sizes['inside'])),
            ),
            basemap_color=tuple(cfg['colors']['basemap']),
            grid_color=tuple(cfg['colors']['grid']),
            buffer_fill=tuple(cfg['colors']['buffer_fill']),
            buffer_outline=tuple(cfg['colors']['buffer_outline']),
            buffer_outline_width=int(cfg['buffer_outline_width']),
        )
        self.batch_size = int(cfg['batch_size'])
        self.buffer_size_bounds = tuple(cfg.get('buffer_size_bounds', (0.05, 1.0)))

        self.background: pygame.Surface | None = None
        self.panel_rect: pygame.Rect | None = None
        self.buttons: List[Button] = []
        self.language_button: Button | None = None
        self.buffer_slider: ParamSlider | None = None
        self.layout_scale = 1.0
        self._update_fonts(1.0)

        self._relayout(self.app.window_size)

    def on_language_change(self) -> None:
        self.lang = language.Language()
        pygame.display.set_caption(self.lang['window_title'])
        self._build_controls()

    # ------------------------------------------------------------------ Layout
    def _update_fonts(self, scale: float) -> None:
        self.title_font = get_font(int(24 * scale), bold=True)
        self.label_font = get_font(int(20 * scale), bold=True)
        self.small_font = get_font(int(16 * scale))
        self.mono_font = pygame.font.SysFont(["DejaVu Sans Mono", "Menlo", "Consolas", "monospace"], max(8, int(17 * scale)))

    def _relayout(self, size: tuple[int, int]) -> None:
        width, height = size
        scale = calc_scale(size)
        self.layout_scale = scale
        self._update_fonts(scale)
        self.background = build_vertical_gradient(size, (230, 236, 255), (246, 248, 254))

        padding = max(12, int(24 * scale))
        panel_width = max(260, int(340 * scale))
        map_rect = pygame.Rect(padding, padding, max(1, width - panel_width - 3 * padding), max(1, height - 2 * padding))
        self.viewport.resize(map_rect)
        self.panel_rect = pygame.Rect(map_rect.right + padding, padding, panel_width, height - 2 * padding)
        self._build_controls()

    def _build_controls(self) -> None:
        assert self.panel_rect is not None
        scale = self.layout_scale
        inner = self.panel_rect.inflate(-2 * max(12, int(20 * scale)), 0)
        button_height = max(36, int(48 * scale))
        gap = max(8, int(12 * scale))
        top = self.panel_rect.top + max(12, int(20 * scale))
        font_size = max(14, int(20 * scale))

        specs = [
            ('btn_add_graphics', self.add_graphics, True),
            ('btn_clear_graphics', self.clear_graphics, False),
            ('btn_clear_buffer', self.clear_buffer, False),
        ]
        self.buttons = []
        for label_key, command, primary in specs:
            self.buttons.append(self._make_button(label_key, command, primary, (inner.left, top, inner.width, button_height), font_size))
            top += button_height + gap

        slider_height = max(72, int(88 * scale))
        current = self.simulation.buffer_size
        self.buffer_slider = ParamSlider(
            self.app,
            self.lang['slider_buffer_size'],
            (inner.left, top, inner.width, slider_height),
            bounds=self.buffer_size_bounds,
            step=0.05,
            dec_number=2,
            initial_value=current,
            on_change=self._on_buffer_size_change,
            label_size=max(12, int(18 * scale)),
            value_size=max(12, int(20 * scale)),
        )
        self.status_top = top + slider_height + gap * 2

        lang_rect = (inner.left, self.panel_rect.bottom - button_height - gap, inner.width, button_height)
        self.language_button = self._make_button('btn_language', self.app.toggle_language, False, lang_rect, font_size)

    def _make_button(self, label_key, command, primary, rect, font_size) -> Button:
        return Button(
            self.app,
            self.lang[label_key],
            rect,
            command,
            button_color=self.primary_color if primary else (255, 255, 255),
            hover_color=(52, 82, 230) if primary else (236, 240, 252),
            text_color=(255, 255, 255) if primary else self.text_color,
            border_color=None if primary else (214, 220, 235),
            font_size=font_size,
            shadow_offset=3,
            shadow_color=(18, 24, 60, 50),
        )

    # ------------------------------------------------------------------ Actions
    def add_graphics(self) -> None:
        self.simulation.add_particles(self.batch_size)

    def clear_graphics(self) -> None:
        self.simulation.clear_particles()

    def clear_buffer(self) -> None:
        self.simulation.clear_buffer()

    def _on_buffer_size_change(self, value: float) -> None:
        self.simulation.buffer_size = value
        self.simulation.resize_buffer()

    def _store_buffer_size(self) -> None:
        config.ConfigLoader().set('buffer_size', float(self.simulation.buffer_size))

    # ------------------------------------------------------------------ Events
    def _check_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.app.quit()
            elif event.type == pygame.VIDEORESIZE:
                self.app.handle_resize(event.size)
            elif event.type == ANIMATION_TICK:
                self.simulation.tick()
            else:
                self.handle_input(event)

    def handle_input(self, event: pygame.event.Event) -> bool:
        if self.buffer_slider is not None and self.buffer_slider.handle_event(event):
            if event.type == pygame.MOUSEBUTTONUP:
                self._store_buffer_size()
            return True
        if event.type == pygame.MOUSEMOTION:
            for button in self._all_buttons():
                button.hovered = button.rect.collidepoint(event.pos)
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for button in self._all_buttons():
                if button.handle_click(event.pos):
                    return True
        return self.interaction.handle_event(event)

    def _all_buttons(self) -> List[Button]:
        return self.buttons + ([self.language_button] if self.language_button else [])

    # ------------------------------------------------------------------ Drawing
    def _update_screen(self):
        self.screen.blit(self.background, (0, 0))

        rect = self.viewport.bounds
        draw_card(self.screen, rect, color=(0, 0, 0), border=None, radius=0, shadow_offset=(10, 12))
        self.canvas.draw(self.screen, self.simulation.particles, self.simulation.overlay)
        self._draw_hint()

        draw_card(self.screen, self.panel_rect, color=(248, 249, 253), radius=20)
        for button in self._all_buttons():
            button.draw_button(self.screen)
        self.buffer_slider.draw(self.screen)
        y = self._draw_status(self.status_top)
        self._draw_coordinates(y + int(18 * self.layout_scale))

    def _draw_hint(self) -> None:
        rect = self.viewport.bounds
        hint = self.small_font.render(self.lang['hint'], True, (240, 240, 240))
        box = hint.get_rect(midbottom=(rect.centerx, rect.bottom - 10)).inflate(16, 8)
        shade = pygame.Surface(box.size, pygame.SRCALPHA)
        pygame.draw.rect(shade, (0, 0, 0, 140), shade.get_rect(), border_radius=8)
        self.screen.blit(shade, box.topleft)
        self.screen.blit(hint, hint.get_rect(center=box.center))

    def _draw_status(self, top: int) -> int:
        left = self.panel_rect.left + int(24 * self.layout_scale)
        feedback, inside, outside = status_labels(self.lang, len(self.simulation.particles), self.simulation.stats)
        rows = [
            (feedback, self.text_color),
            (inside, self.inside_color),
            (outside, self.outside_color),
        ]
        for text, color in rows:
            surface = self.label_font.render(text, True, color)
            self.screen.blit(surface, (left, top))
            top += surface.get_height() + 6
        return top

    def _draw_coordinates(self, top: int) -> None:
        left = self.panel_rect.left + int(24 * self.layout_scale)
        title = self.title_font.render(self.lang['coords_title'], True, self.text_color)
        self.screen.blit(title, (left, top))
        top += title.get_height() + 8

        readout = self.interaction.readout
        if readout is None:
            empty = self.small_font.render(self.lang['coords_empty'], True, self.muted_text)
            self.screen.blit(empty, (left, top))
            return
        rows = [
            ('coords_lat_lon', readout.lat_lon),
            ('coords_dms', readout.dms),
            ('coords_utm', readout.utm),
            ('coords_mgrs', readout.mgrs),
        ]
        for key, value in rows:
            caption = self.small_font.render(self.lang[key], True, self.muted_text)
            self.screen.blit(caption, (left, top))
            top += caption.get_height()
            text = self.mono_font.render(value or self.lang['coords_unavailable'], True, self.text_color)
            self.screen.blit(text, (left, top))
            top += text.get_height() + 6
