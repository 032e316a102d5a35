"""Drawing surfaces and the fish plot renderers."""

from .surfaces import Surface, MatplotlibSurface, PlotlySurface, FontSpec
from .clones import draw_clone, render_clone
from .scene import SceneOptions, check_colors, fish_plot
from .legend import draw_legend

__all__ = [
    "Surface",
    "MatplotlibSurface",
    "PlotlySurface",
    "FontSpec",
    "draw_clone",
    "render_clone",
    "SceneOptions",
    "check_colors",
    "fish_plot",
    "draw_legend",
]
