"""
Drawing surfaces for fish plots.

A Surface is the explicit handle every rendering call draws on. Two
backends:
- MatplotlibSurface — draws on a matplotlib Axes (static PNG/PDF/SVG output)
- PlotlySurface — builds a plotly go.Figure (interactive HTML, static
  export through kaleido)

Coordinates are data units: x follows the timepoint axis, y runs 0..100.
Colours are any matplotlib colour spec ("red", "#FFFFFF99", (r, g, b, a)).
A surface holds mutable drawing state; render onto it from one caller at
a time.
"""

from __future__ import annotations

import base64
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import matplotlib.image as mpimg
import matplotlib.pyplot as plt
import numpy as np
import plotly.graph_objects as go
from matplotlib.colors import to_rgba
from matplotlib.font_manager import FontProperties
from matplotlib.patches import Patch, Polygon, Rectangle

# Points per unit of character expansion
BASE_FONT_SIZE = 12.0

# (x0, x1, y0, y1) in data units
Extent = tuple[float, float, float, float]

_FAMILY_ALIASES = {"sans": "sans-serif", "mono": "monospace"}

# font_type -> (weight, style)
_FONT_TYPES = {
    1: ("normal", "normal"),
    2: ("bold", "normal"),
    3: ("normal", "italic"),
    4: ("bold", "italic"),
}

# Text position codes: 1=below, 2=left, 3=above, 4=right, None=centred.
# Value: (horizontal anchor, vertical anchor, unit offset direction)
_POSITIONS = {
    None: ("center", "center", (0, 0)),
    1: ("center", "top", (0, -1)),
    2: ("right", "center", (-1, 0)),
    3: ("center", "bottom", (0, 1)),
    4: ("left", "center", (1, 0)),
}


@dataclass(frozen=True)
class FontSpec:
    """Font family and face shared by labels, titles and legend text.

    ``family`` accepts generic names ("sans", "serif", "mono") or a concrete
    font name. ``font_type``: 1 plain, 2 bold, 3 italic, 4 bold italic.
    """

    family: str = "sans"
    font_type: int = 1

    @property
    def resolved_family(self) -> str:
        return _FAMILY_ALIASES.get(self.family, self.family)

    @property
    def weight(self) -> str:
        return _FONT_TYPES.get(self.font_type, _FONT_TYPES[1])[0]

    @property
    def style(self) -> str:
        return _FONT_TYPES.get(self.font_type, _FONT_TYPES[1])[1]


def _text_layout(pos: Optional[int], offset: float, fontsize: float):
    """Anchors and offset (in points) for a position code."""
    if pos not in _POSITIONS:
        raise ValueError(f"Text pos must be 1, 2, 3, 4 or None, got {pos!r}")
    ha, va, (ux, uy) = _POSITIONS[pos]
    dist = offset * fontsize
    return ha, va, ux * dist, uy * dist


def plotly_color(color) -> str:
    """Convert any matplotlib colour spec into a plotly ``rgba(...)`` string."""
    r, g, b, a = to_rgba(color)
    return f"rgba({round(r * 255)}, {round(g * 255)}, {round(b * 255)}, {a:.3g})"


def _edge_color(border_color, fill):
    """Border colour, with None or "none" meaning the fill colour."""
    if border_color is None or (isinstance(border_color, str) and border_color.lower() == "none"):
        return fill
    return border_color


def _with_suffix(path: str | Path, default: str = ".png") -> Path:
    path = Path(path)
    if not path.suffix:
        path = path.with_suffix(default)
    path = path.resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


class Surface(ABC):
    """Drawing operations the fish plot renderer needs."""

    # True when the backend's legend fills columns before rows
    legend_fills_columns: bool = False

    @abstractmethod
    def setup(self, xlim: tuple[float, float], ylim: tuple[float, float]) -> None:
        """Fix the data ranges and hide axes, ticks and frame."""

    @abstractmethod
    def draw_image(self, path: str | Path, extent: Extent) -> None:
        """Stretch a PNG over ``extent``, behind everything else.

        The file is read completely before returning, so the caller may
        delete it right afterwards.
        """

    @abstractmethod
    def fill_rect(self, extent: Extent, color) -> None:
        """Solid rectangle behind everything else."""

    @abstractmethod
    def fill_polygon(
        self,
        x: Sequence[float],
        y: Sequence[float],
        color,
        border_width: float = 1.0,
        border_color=None,
    ) -> None:
        """Filled closed shape drawn on top of all previous shapes.

        ``border_color=None`` (or "none") draws the edge in the fill colour; a zero
        ``border_width`` draws no edge.
        """

    @abstractmethod
    def text(
        self,
        x: float,
        y: float,
        text: str,
        pos: Optional[int] = None,
        size: float = 1.0,
        color="black",
        angle: float = 0.0,
        offset: float = 0.5,
        font: Optional[FontSpec] = None,
        clip: bool = False,
    ) -> None:
        """Text anchored at (x, y).

        Args:
            pos: 1=below, 2=left, 3=above, 4=right of the anchor; None centres it.
            size: Character expansion relative to BASE_FONT_SIZE.
            angle: Counter-clockwise rotation in degrees.
            offset: Distance from the anchor in character widths (ignored for pos=None).
            clip: Hide the text when the anchor is outside the plot area
                (plotly annotations are never clipped).
        """

    @abstractmethod
    def vlines(self, xs: Sequence[float], color) -> None:
        """Vertical reference lines across the full plot height."""

    @abstractmethod
    def legend(
        self,
        colors: Sequence,
        labels: Sequence[str],
        x: float,
        y: float,
        ncol: int,
        size: float = 0.8,
        font: Optional[FontSpec] = None,
        column_spacing: Optional[float] = None,
        handle_pad: float = 1.0,
        border_color="#4D4D4D",
    ) -> None:
        """Colour-swatch legend whose top-left corner sits at data (x, y)."""

    @abstractmethod
    def save(self, path: str | Path) -> str:
        """Write the drawing to ``path`` and return the absolute path."""


# ---------------------------------------------------------------------------
# Matplotlib backend
# ---------------------------------------------------------------------------

class MatplotlibSurface(Surface):
    """Draws onto a matplotlib Axes.

    Shapes get increasing z-orders so the painter's order survives any
    later artist sorting; background sits at z=0, lines and text above all
    shapes.
    """

    legend_fills_columns = True

    _TOP_Z = 1_000_000

    def __init__(self, ax=None, figsize: tuple[float, float] = (10, 5), dpi: int = 150):
        if ax is None:
            _, ax = plt.subplots(figsize=figsize)
        self.ax = ax
        self.figure = ax.figure
        self.dpi = dpi
        self._limits: Optional[tuple[tuple[float, float], tuple[float, float]]] = None
        self._zorder = 1

    def _next_z(self) -> int:
        self._zorder += 1
        return self._zorder

    def setup(self, xlim, ylim) -> None:
        self._limits = (tuple(xlim), tuple(ylim))
        self.ax.set_xlim(*xlim)
        self.ax.set_ylim(*ylim)
        self.ax.set_xticks([])
        self.ax.set_yticks([])
        self.ax.set_xlabel("")
        self.ax.set_ylabel("")
        for spine in self.ax.spines.values():
            spine.set_visible(False)

    def _restore_limits(self) -> None:
        if self._limits is not None:
            self.ax.set_xlim(*self._limits[0])
            self.ax.set_ylim(*self._limits[1])

    def draw_image(self, path, extent) -> None:
        image = mpimg.imread(str(path))
        self.ax.imshow(image, extent=extent, aspect="auto", zorder=0, interpolation="bilinear")
        self._restore_limits()

    def fill_rect(self, extent, color) -> None:
        x0, x1, y0, y1 = extent
        self.ax.add_patch(Rectangle(
            (x0, y0), x1 - x0, y1 - y0,
            facecolor=color, edgecolor="none", zorder=0,
        ))

    def fill_polygon(self, x, y, color, border_width=1.0, border_color=None) -> None:
        edge = "none" if not border_width else _edge_color(border_color, color)
        self.ax.add_patch(Polygon(
            np.column_stack([x, y]),
            closed=True,
            facecolor=color,
            edgecolor=edge,
            linewidth=border_width,
            zorder=self._next_z(),
        ))

    def text(self, x, y, text, pos=None, size=1.0, color="black", angle=0.0,
             offset=0.5, font=None, clip=False) -> None:
        font = font or FontSpec()
        fontsize = size * BASE_FONT_SIZE
        ha, va, dx, dy = _text_layout(pos, offset, fontsize)
        self.ax.annotate(
            text,
            xy=(x, y),
            xytext=(dx, dy),
            textcoords="offset points",
            ha=ha,
            va=va,
            rotation=angle,
            rotation_mode="anchor",
            fontsize=fontsize,
            color=color,
            family=font.resolved_family,
            weight=font.weight,
            style=font.style,
            annotation_clip=clip,
            zorder=self._TOP_Z + 1,
        )

    def vlines(self, xs, color) -> None:
        for x in xs:
            self.ax.axvline(x, color=color, linewidth=1.0, zorder=self._TOP_Z)

    def legend(self, colors, labels, x, y, ncol, size=0.8, font=None,
               column_spacing=None, handle_pad=1.0, border_color="#4D4D4D") -> None:
        font = font or FontSpec()
        handles = [Patch(facecolor=c, edgecolor=border_color) for c in colors]
        prop = FontProperties(
            family=font.resolved_family,
            weight=font.weight,
            style=font.style,
            size=size * BASE_FONT_SIZE,
        )
        kwargs = {}
        if column_spacing is not None:
            kwargs["columnspacing"] = column_spacing
        self.ax.legend(
            handles,
            list(labels),
            loc="upper left",
            bbox_to_anchor=(x, y),
            bbox_transform=self.ax.transData,
            ncols=ncol,
            frameon=False,
            prop=prop,
            labelcolor=border_color,
            handletextpad=handle_pad,
            **kwargs,
        )

    def save(self, path) -> str:
        filepath = _with_suffix(path)
        self.figure.savefig(filepath, dpi=self.dpi, bbox_inches="tight")
        return str(filepath)

    def close(self) -> None:
        """Release the underlying figure."""
        plt.close(self.figure)


# ---------------------------------------------------------------------------
# Plotly backend
# ---------------------------------------------------------------------------

# Explicit layout defaults keep themes from adding gridlines/backgrounds
_DEFAULT_LAYOUT = dict(
    paper_bgcolor="white",
    plot_bgcolor="white",
    font_color="#2a3f5f",
    autosize=False,
    showlegend=False,
    margin=dict(l=20, r=20, t=70, b=90),
)

_DEFAULT_WIDTH = 1100  # px figure width
_DEFAULT_HEIGHT = 550  # px figure height


class PlotlySurface(Surface):
    """Builds a plotly figure; each clone becomes one ``fill="toself"`` trace."""

    def __init__(
        self,
        figure: Optional[go.Figure] = None,
        width: int = _DEFAULT_WIDTH,
        height: int = _DEFAULT_HEIGHT,
    ):
        self.figure = figure if figure is not None else go.Figure()
        self.figure.update_layout(**_DEFAULT_LAYOUT, width=width, height=height)
        self._limits: Optional[tuple[tuple[float, float], tuple[float, float]]] = None

    def setup(self, xlim, ylim) -> None:
        self._limits = (tuple(xlim), tuple(ylim))
        axis = dict(visible=False, showgrid=False, zeroline=False, fixedrange=True)
        self.figure.update_xaxes(range=list(xlim), **axis)
        self.figure.update_yaxes(range=list(ylim), **axis)

    def _to_paper(self, x: float, y: float) -> tuple[float, float]:
        if self._limits is None:
            raise ValueError("setup() must be called before placing elements in paper space")
        (x0, x1), (y0, y1) = self._limits
        return (x - x0) / (x1 - x0), (y - y0) / (y1 - y0)

    def draw_image(self, path, extent) -> None:
        data = Path(path).read_bytes()
        source = "data:image/png;base64," + base64.b64encode(data).decode("ascii")
        x0, x1, y0, y1 = extent
        self.figure.add_layout_image(
            source=source,
            xref="x", yref="y",
            x=x0, y=y1,
            sizex=x1 - x0, sizey=y1 - y0,
            xanchor="left", yanchor="top",
            sizing="stretch",
            layer="below",
        )

    def fill_rect(self, extent, color) -> None:
        x0, x1, y0, y1 = extent
        self.figure.add_shape(
            type="rect",
            x0=x0, x1=x1, y0=y0, y1=y1,
            fillcolor=plotly_color(color),
            line_width=0,
            layer="below",
        )

    def fill_polygon(self, x, y, color, border_width=1.0, border_color=None) -> None:
        edge = _edge_color(border_color, color)
        self.figure.add_trace(go.Scatter(
            x=list(np.asarray(x, dtype=float)),
            y=list(np.asarray(y, dtype=float)),
            mode="lines",
            fill="toself",
            fillcolor=plotly_color(color),
            line=dict(color=plotly_color(edge), width=border_width or 0),
            hoverinfo="skip",
            showlegend=False,
        ))

    def text(self, x, y, text, pos=None, size=1.0, color="black", angle=0.0,
             offset=0.5, font=None, clip=False) -> None:
        font = font or FontSpec()
        fontsize = size * BASE_FONT_SIZE
        ha, va, dx, dy = _text_layout(pos, offset, fontsize)
        if font.weight == "bold":
            text = f"<b>{text}</b>"
        if font.style == "italic":
            text = f"<i>{text}</i>"
        self.figure.add_annotation(
            x=x, y=y,
            text=text,
            showarrow=False,
            xanchor=ha,
            yanchor={"center": "middle"}.get(va, va),
            xshift=dx,
            yshift=dy,
            textangle=-angle,
            font=dict(size=fontsize, color=plotly_color(color), family=font.resolved_family),
        )

    def vlines(self, xs, color) -> None:
        for x in xs:
            self.figure.add_vline(x=x, line_color=plotly_color(color), line_width=1)

    def legend(self, colors, labels, x, y, ncol, size=0.8, font=None,
               column_spacing=None, handle_pad=1.0, border_color="#4D4D4D") -> None:
        font = font or FontSpec()
        fontsize = size * BASE_FONT_SIZE
        for color, label in zip(colors, labels):
            self.figure.add_trace(go.Scatter(
                x=[None], y=[None],
                mode="markers",
                marker=dict(
                    symbol="square",
                    size=fontsize,
                    color=plotly_color(color),
                    line=dict(color=plotly_color(border_color), width=1),
                ),
                name=label,
                showlegend=True,
                hoverinfo="skip",
            ))
        px, py = self._to_paper(x, y)
        self.figure.update_layout(
            showlegend=True,
            legend=dict(
                orientation="h",
                x=px, y=py,
                xanchor="left", yanchor="top",
                entrywidth=1.0 / max(ncol, 1),
                entrywidthmode="fraction",
                bgcolor="rgba(0, 0, 0, 0)",
                font=dict(size=fontsize, color=plotly_color(border_color),
                          family=font.resolved_family),
            ),
        )

    def save(self, path) -> str:
        filepath = _with_suffix(path)
        if filepath.suffix == ".html":
            self.figure.write_html(str(filepath))
        else:
            self.figure.write_image(str(filepath))
        return str(filepath)
