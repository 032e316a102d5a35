"""
Fish plot scene composition.

fish_plot() prepares the surface (ranges, background), draws every clone
parent-before-child, then overlays vertical timepoint lines, their labels
and the titles.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Optional, Sequence

from matplotlib.colors import is_color_like

from .. import config
from ..data_ops.curves import PLOT_HEIGHT, resolve_shape
from ..data_ops.forest import Clone, LayoutForest
from ..data_ops.traversal import traverse
from ..logging import get_logger, log_error
from .background import DEFAULT_GRADIENT, gradient_image
from .clones import draw_clone
from .surfaces import FontSpec, Surface

logger = get_logger()

# Plot ranges are widened by this fraction on every side
AXIS_MARGIN = 0.04

VLAB_Y = 104
TITLE_Y = 112
TITLE_BTM_Y = 2
LABEL_COLOR = "#333333"  # grey20


@dataclass
class SceneOptions:
    """Recognised fish plot options.

    Attributes:
        shape: "polygon", "bezier" or "spline" (unknown values fall back to polygon).
        vlines: x positions of vertical reference lines.
        col_vline: Colour of the vertical lines.
        vlab: Labels drawn above each vertical line.
        border: Clone border line width.
        col_border: Clone border colour (None or "none" = fill colour).
        pad_left: Ramp-up space left of the first timepoint, as a fraction
            of the timepoint span.
        ramp_angle: Polygon ramp steepness in [0, 1].
        title: Title above the plot.
        title_btm: Title at the bottom left, inside the plot.
        cex_title: Title size scaling (None = 1).
        cex_vlab: Vertical-line label size scaling.
        font_family: "sans", "serif", "mono" or a font name.
        font_type: 1 plain, 2 bold, 3 italic, 4 bold italic.
        bg_type: "gradient", "solid", anything else = white.
        bg_col: Three gradient colours, or one colour for "solid".
    """

    shape: str = "polygon"
    vlines: Optional[Sequence[float]] = None
    col_vline: str = "#FFFFFF99"
    vlab: Optional[Sequence[str]] = None
    border: float = 0.5
    col_border: Optional[str] = "#777777"
    pad_left: float = 0.2
    ramp_angle: float = 0.5
    title: Optional[str] = None
    title_btm: Optional[str] = None
    cex_title: Optional[float] = None
    cex_vlab: float = 0.7
    font_family: str = "sans"
    font_type: int = 1
    bg_type: str = "gradient"
    bg_col: Sequence[str] | str = DEFAULT_GRADIENT

    @classmethod
    def from_config(cls, **overrides) -> SceneOptions:
        """Defaults overlaid with ``plot.<name>`` config keys, then ``overrides``."""
        names = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - names)
        if unknown:
            raise TypeError(f"Unknown fish plot option(s): {', '.join(unknown)}")
        values = {}
        for f in fields(cls):
            configured = config.get(f"plot.{f.name}")
            if configured is not None:
                values[f.name] = configured
        values.update(overrides)
        return cls(**values)

    @property
    def font(self) -> FontSpec:
        return FontSpec(family=self.font_family, font_type=self.font_type)


def check_colors(forest: LayoutForest, colors: Optional[Sequence[str]] = None) -> list[str]:
    """Resolve one fill colour per clone.

    Args:
        forest: The clones to draw.
        colors: Explicit colours; defaults to the colours stored on the clones.

    Returns:
        The colour list.

    Raises:
        ValueError: If the number of colours does not match the number of
            clones, or an entry is not a valid colour.
    """
    n = len(forest)
    if isinstance(colors, str):
        raise ValueError(
            f"colors must be a list with one color per clone, got the string {colors!r}"
        )
    resolved = list(colors) if colors is not None else forest.colors
    if len(resolved) != n or any(c is None for c in resolved):
        given = sum(c is not None for c in resolved)
        raise ValueError(
            f"Number of colors must be equal to the number of clones ({n}), got {given}. "
            "Pass one color per clone via colors=[...] or when building the forest."
        )
    invalid = [(i, c) for i, c in enumerate(resolved) if not is_color_like(c)]
    if invalid:
        raise ValueError(f"Invalid clone colors (index, value): {invalid}")
    return resolved


def _expand(lo: float, hi: float) -> tuple[float, float]:
    if lo == hi:
        # Single timepoint: give the axis some width
        lo, hi = lo - 1.0, hi + 1.0
    margin = (hi - lo) * AXIS_MARGIN
    return lo - margin, hi + margin


def _draw_background(surface: Surface, options: SceneOptions, extent) -> None:
    if options.bg_type == "gradient":
        with gradient_image(options.bg_col) as path:
            surface.draw_image(path, extent)
    elif options.bg_type == "solid":
        color = options.bg_col if isinstance(options.bg_col, str) else options.bg_col[0]
        surface.fill_rect(extent, color)
    else:
        logger.debug(f"Background type '{options.bg_type}' - leaving background white")


def fish_plot(
    surface: Surface,
    forest: LayoutForest,
    options: Optional[SceneOptions] = None,
    colors: Optional[Sequence[str]] = None,
    **overrides,
) -> Surface:
    """Draw a fish plot onto ``surface``.

    Args:
        surface: Target drawing surface.
        forest: Laid-out clones with parents and nesting levels.
        options: Plot options; built from config defaults when omitted.
        colors: One fill colour per clone (defaults to the forest's colours).
        **overrides: SceneOptions fields to override, e.g. ``shape="spline"``.

    Returns:
        The surface, for chaining (e.g. ``fish_plot(...).save("fish.png")``).

    Raises:
        ValueError: If colours do not match the clone count (nothing is drawn).
    """
    if options is None:
        options = SceneOptions.from_config(**overrides)
    elif overrides:
        options = replace(options, **overrides)

    resolved_colors = check_colors(forest, colors)
    shape = resolve_shape(options.shape)
    font = options.font

    tmin = float(forest.timepoints.min())
    tmax = float(forest.timepoints.max())
    pad = (tmax - tmin) * options.pad_left

    xlim = _expand(tmin - pad, tmax)
    ylim = _expand(0.0, PLOT_HEIGHT)
    surface.setup(xlim, ylim)
    _draw_background(surface, options, (*xlim, *ylim))

    logger.debug(f"Drawing {len(forest)} clones as {shape} (pad {pad:.3g})")

    def visit(clone: Clone, pad_left: float) -> None:
        clone = replace(clone, color=resolved_colors[clone.index])
        try:
            draw_clone(
                surface, clone,
                shape=shape,
                pad_left=pad_left,
                ramp_angle=options.ramp_angle,
                border=options.border,
                col_border=options.col_border,
                annotation_style=forest.annotation_style,
                font=font,
            )
        except Exception as e:
            log_error(
                f"Failed to draw clone {clone.index}",
                exc=e,
                context={"shape": shape, "parent": clone.parent, "nest_level": clone.nest_level},
            )
            raise

    traverse(forest, pad, visit)

    if options.vlines is not None:
        vlines = list(options.vlines)
        surface.vlines(vlines, options.col_vline)
        if options.vlab is not None and vlines:
            labels = list(options.vlab)
            if labels and len(labels) != len(vlines):
                logger.warning(
                    f"{len(labels)} vertical line labels for {len(vlines)} lines; recycling"
                )
            # Shorter of positions/labels is recycled to the longer length
            for i in range(max(len(vlines), len(labels)) if labels else 0):
                surface.text(vlines[i % len(vlines)], VLAB_Y, str(labels[i % len(labels)]),
                             pos=3, size=options.cex_vlab, color=LABEL_COLOR, font=font)

    cex_title = options.cex_title if options.cex_title is not None else 1.0
    if options.title is not None:
        center = (tmax / 2) - (pad / 2)
        surface.text(center, TITLE_Y, options.title, pos=3, size=cex_title, font=font)

    if options.title_btm is not None:
        surface.text(tmin - pad * 1.2, TITLE_BTM_Y, options.title_btm, pos=4,
                     size=cex_title, font=font)

    return surface
