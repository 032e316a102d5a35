"""Draw a single clone: filled outline plus optional annotation."""

from typing import Optional

from ..data_ops.curves import ShapeOutline, build_outline
from ..data_ops.forest import AnnotationStyle, Clone
from ..logging import get_logger
from .surfaces import FontSpec, Surface

logger = get_logger()


def render_clone(
    surface: Surface,
    clone: Clone,
    outline: ShapeOutline,
    border: float = 0.5,
    col_border: Optional[str] = None,
    annotation_style: Optional[AnnotationStyle] = None,
    font: Optional[FontSpec] = None,
) -> None:
    """Submit one filled, bordered shape and its annotation to the surface.

    Args:
        surface: Target drawing surface.
        clone: The clone being drawn (supplies fill colour and annotation text).
        outline: Closed outline from the curve builder.
        border: Border line width (0 = no border).
        col_border: Border colour; None uses the fill colour.
        annotation_style: Placement and styling of the annotation text.
        font: Font for the annotation.
    """
    surface.fill_polygon(outline.x, outline.y, clone.color,
                         border_width=border, border_color=col_border)

    if clone.annotation:
        style = annotation_style or AnnotationStyle()
        x, y = outline.origin
        surface.text(
            x, y, clone.annotation,
            pos=style.pos,
            size=style.size,
            color=style.color,
            angle=style.angle,
            offset=style.offset,
            font=font,
        )


def draw_clone(
    surface: Surface,
    clone: Clone,
    shape: str = "polygon",
    pad_left: float = 0.0,
    ramp_angle: float = 0.5,
    border: float = 0.5,
    col_border: Optional[str] = None,
    annotation_style: Optional[AnnotationStyle] = None,
    font: Optional[FontSpec] = None,
) -> Optional[ShapeOutline]:
    """Build a clone's outline and render it.

    Clones without control points are skipped (no surface call).

    Returns:
        The outline that was drawn, or None if the clone was skipped.
    """
    outline = build_outline(
        clone.xpos, clone.ytop, clone.ybtm,
        nest_level=clone.nest_level,
        pad_left=pad_left,
        shape=shape,
        ramp_angle=ramp_angle,
    )
    if outline is None:
        logger.info(f"Skipping all-zero clone {clone.index} with nothing to plot")
        return None

    logger.debug(
        f"Drawing clone {clone.index} ({outline.mode}, nest level {clone.nest_level}, "
        f"pad {pad_left:.3g})"
    )
    render_clone(surface, clone, outline, border=border, col_border=col_border,
                 annotation_style=annotation_style, font=font)
    return outline
