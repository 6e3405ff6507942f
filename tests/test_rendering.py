"""Tests for framebuffer rendering."""

import numpy as np
import pytest
from PIL import Image
from chip8x.rendering import display_to_rgb, create_color_scheme, save_screenshot


def test_display_to_rgb_colors(fresh_state):
    display = fresh_state.display.at[2, 5].set(True)

    rgb = display_to_rgb(display, scale=1, on_color=(10, 20, 30), off_color=(1, 2, 3))

    assert rgb.shape == (32, 64, 3)
    assert rgb.dtype == np.uint8
    assert tuple(rgb[2, 5]) == (10, 20, 30)
    assert tuple(rgb[5, 2]) == (1, 2, 3)


def test_display_to_rgb_scaling(fresh_state):
    display = fresh_state.display.at[0, 1].set(True)

    rgb = display_to_rgb(display, scale=4)

    assert rgb.shape == (128, 256, 3)
    assert np.all(rgb[0:4, 4:8] == 255)
    assert np.all(rgb[0:4, 0:4] == 0)


def test_display_to_rgb_rejects_wrong_shape():
    with pytest.raises(ValueError):
        display_to_rgb(np.zeros((64, 32), dtype=bool))


def test_unknown_color_scheme():
    with pytest.raises(ValueError):
        create_color_scheme("plaid")


def test_save_screenshot(fresh_state, tmp_path):
    path = tmp_path / "frame.png"

    save_screenshot(fresh_state.display.at[0, 0].set(True), str(path), scale=2, color_scheme="green")

    with Image.open(path) as image:
        assert image.size == (128, 64)
        assert image.getpixel((0, 0)) == (0, 255, 0)
        assert image.getpixel((10, 10)) == (0, 0, 0)
