"""
Fish plots: clonal evolution of tumour populations over time, drawn as
stacked, tapering, branching shapes whose widths follow subclone
population fractions.

Typical use::

    from fishplot import LayoutForest, MatplotlibSurface, fish_plot, draw_legend

    forest = LayoutForest.from_arrays(xpos, ytop, ybtm, parents=[None, 0, 0, 2],
                                      timepoints=[0, 30, 75, 150],
                                      colors=["#888888", "#EF0000", "#8FFF40", "#FF6000"])
    surface = fish_plot(MatplotlibSurface(), forest, shape="spline",
                        vlines=[0, 150], vlab=["day 0", "day 150"])
    draw_legend(surface, forest)
    surface.save("fish.png")
"""

from .data_ops.forest import ROOT, AnnotationStyle, Clone, LayoutForest, nest_levels_from_parents
from .data_ops.curves import SHAPES, ShapeOutline, build_outline
from .data_ops.traversal import draw_order
from .rendering import (
    FontSpec,
    MatplotlibSurface,
    PlotlySurface,
    SceneOptions,
    Surface,
    check_colors,
    draw_clone,
    draw_legend,
    fish_plot,
)

__version__ = "0.1.0"

__all__ = [
    "ROOT",
    "AnnotationStyle",
    "Clone",
    "LayoutForest",
    "nest_levels_from_parents",
    "SHAPES",
    "ShapeOutline",
    "build_outline",
    "draw_order",
    "FontSpec",
    "MatplotlibSurface",
    "PlotlySurface",
    "SceneOptions",
    "Surface",
    "check_colors",
    "draw_clone",
    "draw_legend",
    "fish_plot",
]
