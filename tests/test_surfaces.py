"""
Tests for fishplot.rendering.surfaces — backend primitives.

Run with: python -m pytest tests/test_surfaces.py
"""

from pathlib import Path

import pytest

from fishplot.rendering.background import gradient_image
from fishplot.rendering.surfaces import (
    FontSpec,
    MatplotlibSurface,
    PlotlySurface,
    _text_layout,
    plotly_color,
)

XLIM = (-10.0, 110.0)
YLIM = (-4.0, 104.0)


class TestHelpers:
    def test_plotly_color_named(self):
        assert plotly_color("red") == "rgba(255, 0, 0, 1)"

    def test_plotly_color_hex_alpha(self):
        assert plotly_color("#FFFFFF99") == "rgba(255, 255, 255, 0.6)"

    @pytest.mark.parametrize("font_type,weight,style", [
        (1, "normal", "normal"),
        (2, "bold", "normal"),
        (3, "normal", "italic"),
        (4, "bold", "italic"),
        (9, "normal", "normal"),
    ])
    def test_font_types(self, font_type, weight, style):
        font = FontSpec(font_type=font_type)
        assert (font.weight, font.style) == (weight, style)

    def test_family_aliases(self):
        assert FontSpec("sans").resolved_family == "sans-serif"
        assert FontSpec("mono").resolved_family == "monospace"
        assert FontSpec("DejaVu Serif").resolved_family == "DejaVu Serif"

    def test_text_layout_right_of_anchor(self):
        ha, va, dx, dy = _text_layout(4, 0.5, 12.0)
        assert (ha, va, dx, dy) == ("left", "center", 6.0, 0.0)

    def test_text_layout_centred(self):
        assert _text_layout(None, 0.5, 12.0) == ("center", "center", 0.0, 0.0)

    def test_text_layout_bad_position(self):
        with pytest.raises(ValueError, match="pos"):
            _text_layout(5, 0.5, 12.0)


# ---------------------------------------------------------------------------
# Matplotlib
# ---------------------------------------------------------------------------

@pytest.fixture
def mpl_surface():
    surface = MatplotlibSurface()
    surface.setup(XLIM, YLIM)
    yield surface
    surface.close()


class TestMatplotlibSurface:
    def test_setup_hides_axes(self, mpl_surface):
        ax = mpl_surface.ax
        assert ax.get_xlim() == XLIM
        assert list(ax.get_xticks()) == []
        assert not any(s.get_visible() for s in ax.spines.values())

    def test_later_shapes_paint_over_earlier(self, mpl_surface):
        mpl_surface.fill_polygon([0, 50, 0], [0, 50, 100], "red")
        mpl_surface.fill_polygon([10, 40, 10], [20, 50, 80], "blue")
        first, second = mpl_surface.ax.patches
        assert second.get_zorder() > first.get_zorder()

    def test_border_defaults_to_fill_colour(self, mpl_surface):
        mpl_surface.fill_polygon([0, 1, 0], [0, 1, 2], "red", border_width=1, border_color=None)
        patch = mpl_surface.ax.patches[0]
        assert patch.get_edgecolor() == pytest.approx((1, 0, 0, 1))

    def test_none_string_border_uses_fill_colour(self, mpl_surface):
        mpl_surface.fill_polygon([0, 1, 0], [0, 1, 2], "red", border_width=1, border_color="none")
        assert mpl_surface.ax.patches[0].get_edgecolor() == pytest.approx((1, 0, 0, 1))

    def test_zero_border(self, mpl_surface):
        mpl_surface.fill_polygon([0, 1, 0], [0, 1, 2], "red", border_width=0, border_color="black")
        assert mpl_surface.ax.patches[0].get_edgecolor()[3] == 0

    def test_background_image_keeps_limits(self, mpl_surface):
        with gradient_image() as path:
            mpl_surface.draw_image(path, (*XLIM, *YLIM))
        assert mpl_surface.ax.get_xlim() == XLIM
        assert mpl_surface.ax.images[0].get_zorder() == 0

    def test_text_styling(self, mpl_surface):
        mpl_surface.text(50, 104, "day 30", pos=3, size=0.7, color="#333333",
                         font=FontSpec("serif", 2))
        label = mpl_surface.ax.texts[0]
        assert label.get_text() == "day 30"
        assert label.get_fontsize() == pytest.approx(8.4)
        assert label.get_fontweight() == "bold"
        assert label.get_horizontalalignment() == "center"

    def test_vlines_above_shapes(self, mpl_surface):
        mpl_surface.fill_polygon([0, 1, 0], [0, 1, 2], "red")
        mpl_surface.vlines([0, 50], "white")
        lines = mpl_surface.ax.lines
        assert len(lines) == 2
        assert lines[0].get_zorder() > mpl_surface.ax.patches[0].get_zorder()

    def test_save_adds_suffix(self, mpl_surface, tmp_path):
        filepath = mpl_surface.save(tmp_path / "out" / "fish")
        assert filepath.endswith("fish.png")
        assert Path(filepath).exists()

    def test_save_pdf(self, mpl_surface, tmp_path):
        filepath = mpl_surface.save(tmp_path / "fish.pdf")
        assert Path(filepath).read_bytes()[:4] == b"%PDF"


# ---------------------------------------------------------------------------
# Plotly
# ---------------------------------------------------------------------------

@pytest.fixture
def plotly_surface():
    surface = PlotlySurface()
    surface.setup(XLIM, YLIM)
    return surface


class TestPlotlySurface:
    def test_setup_ranges(self, plotly_surface):
        layout = plotly_surface.figure.layout
        assert tuple(layout.xaxis.range) == XLIM
        assert tuple(layout.yaxis.range) == YLIM
        assert layout.xaxis.visible is False

    def test_polygon_trace(self, plotly_surface):
        plotly_surface.fill_polygon([0, 50, 0], [0, 50, 100], "#8FFF40",
                                    border_width=0.5, border_color="#777777")
        trace = plotly_surface.figure.data[0]
        assert trace.fill == "toself"
        assert trace.fillcolor == "rgba(143, 255, 64, 1)"
        assert trace.line.color == "rgba(119, 119, 119, 1)"
        assert trace.showlegend is False

    @pytest.mark.parametrize("border_color", [None, "none", "None"])
    def test_missing_border_uses_fill_colour(self, plotly_surface, border_color):
        plotly_surface.fill_polygon([0, 50, 0], [0, 50, 100], "#8FFF40",
                                    border_width=0.5, border_color=border_color)
        assert plotly_surface.figure.data[0].line.color == "rgba(143, 255, 64, 1)"

    def test_solid_background_below(self, plotly_surface):
        plotly_surface.fill_rect((*XLIM, *YLIM), "lightblue")
        shape = plotly_surface.figure.layout.shapes[0]
        assert shape.type == "rect"
        assert shape.layer == "below"

    def test_image_is_embedded(self, plotly_surface):
        with gradient_image() as path:
            plotly_surface.draw_image(path, (*XLIM, *YLIM))
        image = plotly_surface.figure.layout.images[0]
        assert image.source.startswith("data:image/png;base64,")
        assert image.sizex == pytest.approx(120.0)

    def test_text_annotation(self, plotly_surface):
        plotly_surface.text(10, 50, "TP53", pos=4, font=FontSpec(font_type=3))
        annotation = plotly_surface.figure.layout.annotations[0]
        assert annotation.text == "<i>TP53</i>"
        assert annotation.xanchor == "left"
        assert annotation.yanchor == "middle"
        assert annotation.xshift == pytest.approx(6.0)

    def test_paper_coordinates_need_setup(self):
        with pytest.raises(ValueError, match="setup"):
            PlotlySurface()._to_paper(0, 0)

    def test_save_html(self, plotly_surface, tmp_path):
        filepath = plotly_surface.save(tmp_path / "fish.html")
        assert "plotly" in Path(filepath).read_text(encoding="utf-8").lower()
