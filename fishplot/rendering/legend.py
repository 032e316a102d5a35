"""Multi-column colour legend drawn beneath a fish plot."""

import math
from typing import Optional, Sequence

from ..data_ops.forest import LayoutForest
from .scene import check_colors
from .surfaces import FontSpec, Surface

# Entries per row when nrow is not given
_DEFAULT_PER_ROW = 8

_LEGEND_SIZE = 0.8
_LEGEND_COLOR = "#4D4D4D"  # grey30


def legend_grid(n: int, nrow: Optional[int] = None) -> tuple[int, int]:
    """(nrow, ncol) for n entries; nrow defaults to ceil(n / 8)."""
    if n == 0:
        return 0, 0
    if nrow is None:
        nrow = math.ceil(n / _DEFAULT_PER_ROW)
    if nrow < 1:
        raise ValueError(f"nrow must be at least 1, got {nrow}")
    return nrow, math.ceil(n / nrow)


def column_major_order(n: int, ncol: int) -> list[int]:
    """Permutation that makes a column-filling legend read row by row.

    Entry ``i`` of the reading order lands in row ``i // ncol``, column
    ``i % ncol``; the permutation lists column 0 top to bottom, then
    column 1, and so on.
    """
    nrow = math.ceil(n / ncol) if ncol else 0
    return [r * ncol + c for c in range(ncol) for r in range(nrow) if r * ncol + c < n]


def draw_legend(
    surface: Surface,
    forest: LayoutForest,
    xpos: float = 0,
    ypos: float = -5,
    nrow: Optional[int] = None,
    cex: float = 1,
    font_type: int = 1,
    widthratio: Optional[float] = None,
    xsp: float = 1,
    colors: Optional[Sequence[str]] = None,
    font_family: str = "sans",
) -> None:
    """Draw clone colour/label pairs in a grid beneath the plot.

    Args:
        surface: Surface the fish plot was drawn on.
        forest: The clones (labels default to "1".."n").
        xpos: Data x of the legend's left edge.
        ypos: Data y of the legend's top edge.
        nrow: Number of rows (default: about 8 entries per row).
        cex: Size scaling for legend text.
        font_type: 1 plain, 2 bold, 3 italic, 4 bold italic.
        widthratio: Column width relative to the longest label; smaller
            values give more spacing. None keeps the backend default.
        xsp: Horizontal spacing between swatch and text.
        colors: Fill colours (defaults to the forest's colours).
        font_family: Legend font family.
    """
    resolved = check_colors(forest, colors)
    labels = forest.labels
    nrow, ncol = legend_grid(len(labels), nrow)
    if ncol == 0:
        return

    column_spacing = None
    if widthratio is not None:
        longest = max(len(label) for label in labels)
        column_spacing = longest / (ncol * widthratio)

    if surface.legend_fills_columns:
        order = column_major_order(len(labels), ncol)
        resolved = [resolved[i] for i in order]
        labels = [labels[i] for i in order]

    surface.legend(
        resolved, labels, xpos, ypos, ncol,
        size=cex * _LEGEND_SIZE,
        font=FontSpec(family=font_family, font_type=font_type),
        column_spacing=column_spacing,
        handle_pad=xsp,
        border_color=_LEGEND_COLOR,
    )
