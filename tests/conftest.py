from __future__ import annotations

import os
import shutil
from pathlib import Path

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pygame
import pytest

import config
import language
from viewport import MapViewport

ROOT = Path(__file__).resolve().parent.parent

NYC_LAT = 40.7128
NYC_LON = -74.0060


@pytest.fixture(scope="session", autouse=True)
def pygame_session():
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture
def viewport() -> MapViewport:
    return MapViewport.from_lat_lon(pygame.Rect(0, 0, 800, 600), NYC_LAT, NYC_LON, 15)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


class FakeTimer:
    """Stand-in for AnimationTimer that records start/stop calls."""

    def __init__(self):
        self.starts = 0
        self.stops = 0
        self._valid = False

    @property
    def is_valid(self) -> bool:
        return self._valid

    def start(self) -> None:
        if not self._valid:
            self.starts += 1
        self._valid = True

    def invalidate(self) -> None:
        if self._valid:
            self.stops += 1
        self._valid = False


@pytest.fixture
def fake_timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def tmp_config(tmp_path, monkeypatch):
    """Point the config singleton at a writable copy of config.json."""
    target = tmp_path / "config.json"
    shutil.copy(ROOT / "config.json", target)
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(target))
    config.ConfigLoader.reset()
    language.Language.reset()
    yield target
    config.ConfigLoader.reset()
    language.Language.reset()
