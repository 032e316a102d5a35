import matplotlib

matplotlib.use("Agg")

from pathlib import Path

import pytest

from fishplot import LayoutForest, config
from fishplot.rendering.surfaces import Surface


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Keep log files and config lookups out of the real home directory."""
    monkeypatch.setenv("FISHPLOT_DIR", str(tmp_path / "fishplot-home"))
    config._reset_data_dir()
    yield
    config._reset_data_dir()


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

class RecordingSurface(Surface):
    """Surface that records every drawing call instead of drawing."""

    def __init__(self, fills_columns: bool = False):
        self.calls: list[tuple[str, tuple, dict]] = []
        self.legend_fills_columns = fills_columns
        self.image_existed = None

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))

    def names(self) -> list[str]:
        return [name for name, _, _ in self.calls]

    def calls_named(self, name: str) -> list[tuple[tuple, dict]]:
        return [(args, kwargs) for n, args, kwargs in self.calls if n == name]

    def setup(self, xlim, ylim):
        self._record("setup", xlim, ylim)

    def draw_image(self, path, extent):
        self.image_existed = Path(path).exists()
        self._record("draw_image", path, extent)

    def fill_rect(self, extent, color):
        self._record("fill_rect", extent, color)

    def fill_polygon(self, x, y, color, border_width=1.0, border_color=None):
        self._record("fill_polygon", list(x), list(y), color,
                     border_width=border_width, border_color=border_color)

    def text(self, x, y, text, pos=None, size=1.0, color="black", angle=0.0,
             offset=0.5, font=None, clip=False):
        self._record("text", x, y, text, pos=pos, size=size, color=color,
                     angle=angle, offset=offset, font=font)

    def vlines(self, xs, color):
        self._record("vlines", list(xs), color)

    def legend(self, colors, labels, x, y, ncol, size=0.8, font=None,
               column_spacing=None, handle_pad=1.0, border_color="#4D4D4D"):
        self._record("legend", list(colors), list(labels), x, y, ncol, size=size,
                     font=font, column_spacing=column_spacing, handle_pad=handle_pad)

    def save(self, path):
        return str(path)


@pytest.fixture
def recording_surface():
    return RecordingSurface()


def make_forest(parents=(None, 0, 0, 2), colors=("#888888", "#EF0000", "#8FFF40", "#FF6000"),
                **kwargs) -> LayoutForest:
    """Four-clone forest over timepoints 0, 30, 75, 150."""
    xpos = [[0, 30, 75, 150], [0, 30], [30, 75, 150], [75, 150]]
    ytop = [[100, 100, 100, 100], [73, 55], [60, 70, 90], [55, 70]]
    ybtm = [[0, 0, 0, 0], [27, 45], [40, 30, 10], [45, 30]]
    return LayoutForest.from_arrays(
        xpos, ytop, ybtm,
        parents=list(parents),
        timepoints=[0, 30, 75, 150],
        colors=list(colors) if colors is not None else None,
        **kwargs,
    )


@pytest.fixture
def forest():
    return make_forest()
