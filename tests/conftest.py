"""Shared test fixtures: synthetic drawings built with NumPy."""

from __future__ import annotations

import numpy as np
import pytest


def make_disk_image(size: int = 101, center: float = 50, radius: float = 50) -> np.ndarray:
    """Black filled disk on white, (x-c)^2 + (y-c)^2 <= r^2."""
    yy, xx = np.mgrid[0:size, 0:size]
    inside = (xx - center) ** 2 + (yy - center) ** 2 <= radius ** 2
    image = np.full((size, size, 3), 255, dtype=np.uint8)
    image[inside] = 0
    return image


def make_ellipse_image(size: int = 141, center: float = 70,
                       semi_x: float = 60, semi_y: float = 40) -> np.ndarray:
    """Black filled axis-aligned ellipse on white."""
    yy, xx = np.mgrid[0:size, 0:size]
    inside = ((xx - center) / semi_x) ** 2 + ((yy - center) / semi_y) ** 2 <= 1.0
    image = np.full((size, size, 3), 255, dtype=np.uint8)
    image[inside] = 0
    return image


@pytest.fixture
def disk_image() -> np.ndarray:
    return make_disk_image()


@pytest.fixture
def ellipse_image() -> np.ndarray:
    return make_ellipse_image()


@pytest.fixture
def white_image() -> np.ndarray:
    return np.full((64, 64, 3), 255, dtype=np.uint8)


@pytest.fixture
def random_image() -> np.ndarray:
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(48, 48, 3), dtype=np.uint8)
