"""Tests for fishplot.rendering.background — gradient colours and temp image lifetime."""

import logging
from pathlib import Path

import matplotlib.image as mpimg
import numpy as np
import pytest

from fishplot.rendering.background import (
    DEFAULT_GRADIENT,
    gradient_array,
    gradient_colors,
    gradient_image,
)


class TestGradientColors:
    def test_shape_and_alpha(self):
        colors = gradient_colors(DEFAULT_GRADIENT)
        assert colors.shape == (78, 4)
        np.testing.assert_allclose(colors[:, 3], 200 / 255)

    def test_anchor_positions(self):
        colors = gradient_colors(["black", "white", "black"])
        np.testing.assert_allclose(colors[0, :3], [0, 0, 0])
        np.testing.assert_allclose(colors[51, :3], [1, 1, 1])
        np.testing.assert_allclose(colors[-1, :3], [0, 0, 0])
        # Row 26 sits about halfway between black and white
        assert 0.45 < colors[26, 0] < 0.55

    @pytest.mark.parametrize("col", [None, "red", ["red", "blue"]])
    def test_falls_back_to_default(self, col, caplog):
        with caplog.at_level(logging.WARNING):
            colors = gradient_colors(col)
        np.testing.assert_allclose(colors, gradient_colors(DEFAULT_GRADIENT))
        assert "not 3 background gradient colors" in caplog.text


class TestGradientImage:
    def test_array_is_horizontal_gradient(self):
        image = gradient_array(gradient_colors(["black", "white", "red"]), size=80)
        assert image.shape == (80, 80, 4)
        # Every row is the same; columns change left to right
        np.testing.assert_allclose(image[0], image[-1])
        assert not np.allclose(image[:, 0], image[:, -1])

    def test_temp_file_exists_only_inside_block(self):
        with gradient_image() as path:
            assert path.exists()
            assert path.suffix == ".png"
            assert mpimg.imread(str(path)).shape[:2] == (80, 80)
        assert not path.exists()

    def test_temp_file_removed_on_error(self):
        seen = {}
        with pytest.raises(RuntimeError):
            with gradient_image() as path:
                seen["path"] = Path(path)
                raise RuntimeError("surface failed")
        assert not seen["path"].exists()
