"""
Pure numpy/scipy outline construction for clone shapes.

All functions take control-point arrays (x positions, top edge, bottom edge)
and return a closed ShapeOutline. No dependency on a drawing surface — the
rendering layer consumes the outlines.

Three strategies:
- polygon — straight segments with an angled ramp-up from the origin
- bezier  — one Bernstein-polynomial curve per edge
- spline  — one natural cubic spline per edge
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.interpolate import CubicSpline
from scipy.stats import binom

from ..logging import get_logger

logger = get_logger()

SHAPES = ("polygon", "bezier", "spline")
DEFAULT_SHAPE = "polygon"

# Plot y-axis runs 0..PLOT_HEIGHT
PLOT_HEIGHT = 100.0

# Each nesting level shrinks the ramp-up distance by this factor
NEST_DECAY = 0.6

# Samples per edge curve
CURVE_RESOLUTION = 100

BEZIER_FLANK = 0.01
SPLINE_FLANK = 0.001

# Spline starts outside this band are pulled halfway towards the first point
_SPLINE_BAND = (0.15, 0.85)


@dataclass
class ShapeOutline:
    """A closed outline ready for filling.

    Attributes:
        x: Vertex x coordinates.
        y: Vertex y coordinates.
        origin: The clone's computed start point (annotation anchor).
        mode: Shape strategy that produced the outline.
    """

    x: np.ndarray
    y: np.ndarray
    origin: tuple[float, float]
    mode: str

    def __len__(self) -> int:
        return len(self.x)

    @property
    def vertices(self) -> np.ndarray:
        """(N, 2) array of (x, y) vertices."""
        return np.column_stack([self.x, self.y])

    @property
    def is_closed(self) -> bool:
        return len(self.x) > 0 and bool(
            np.isclose(self.x[0], self.x[-1]) and np.isclose(self.y[0], self.y[-1])
        )


def resolve_shape(shape: str) -> str:
    """Return ``shape`` if it is a known strategy, else fall back to polygon."""
    if shape in SHAPES:
        return shape
    logger.warning(f"Unknown shape '{shape}'. Using {DEFAULT_SHAPE} representation")
    return DEFAULT_SHAPE


def start_point(
    xpos: np.ndarray,
    ytop: np.ndarray,
    ybtm: np.ndarray,
    nest_level: int,
    pad_left: float,
) -> tuple[float, float]:
    """Artificial origin to the left of the first control point.

    The horizontal offset decays by NEST_DECAY per nesting level, so nested
    clones ramp up over a shorter distance than top-level ones.

    Returns:
        (x_start, y_start) — y_start is the midpoint of the first top/bottom pair.
    """
    xst = float(xpos[0]) - pad_left * (NEST_DECAY ** nest_level)
    yst = (float(ytop[0]) + float(ybtm[0])) / 2
    return xst, yst


def replicate_points(
    xpos: np.ndarray,
    ytop: np.ndarray,
    ybtm: np.ndarray,
    flank: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Surround every control point with four copies at x ±flank and ±2·flank.

    The copies pin fitted curves to the measured values instead of letting
    them overshoot between sparse points.

    Returns:
        (x, ytop, ybtm), each five times as long as the input, ordered
        x-2f, x-f, x, x+f, x+2f for every original point.
    """
    xpos = np.asarray(xpos, dtype=float)
    offsets = np.array([-2.0, -1.0, 0.0, 1.0, 2.0]) * flank
    x = (xpos[:, None] + offsets[None, :]).reshape(-1)
    return (
        x,
        np.repeat(np.asarray(ytop, dtype=float), 5),
        np.repeat(np.asarray(ybtm, dtype=float), 5),
    )


def bezier_curve(
    x: np.ndarray,
    y: np.ndarray,
    evaluation: int = CURVE_RESOLUTION,
) -> tuple[np.ndarray, np.ndarray]:
    """Evaluate the Bernstein-polynomial bezier through all control points.

    The curve is of degree len(x) - 1, starts at the first control point and
    ends at the last. Basis weights come from the binomial pmf, which stays
    finite for long control-point lists.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    degree = len(x) - 1
    t = np.linspace(0.0, 1.0, evaluation)
    basis = binom.pmf(np.arange(degree + 1)[None, :], degree, t[:, None])
    return basis @ x, basis @ y


def natural_spline(
    x: np.ndarray,
    y: np.ndarray,
    n: int = CURVE_RESOLUTION,
) -> tuple[np.ndarray, np.ndarray]:
    """Natural cubic spline through (x, y), sampled at n equally spaced x values.

    Knots are sorted by x; y values at duplicate x positions are averaged.
    A single distinct knot yields a constant curve.
    """
    ux, inverse = np.unique(np.asarray(x, dtype=float), return_inverse=True)
    uy = np.bincount(inverse, weights=np.asarray(y, dtype=float)) / np.bincount(inverse)
    if len(ux) == 1:
        return np.full(n, ux[0]), np.full(n, uy[0])
    xs = np.linspace(ux[0], ux[-1], n)
    return xs, CubicSpline(ux, uy, bc_type="natural")(xs)


def _close(top: tuple[np.ndarray, np.ndarray], btm: tuple[np.ndarray, np.ndarray]):
    return np.concatenate([top[0], btm[0][::-1]]), np.concatenate([top[1], btm[1][::-1]])


def polygon_outline(
    xpos: np.ndarray,
    ytop: np.ndarray,
    ybtm: np.ndarray,
    nest_level: int,
    pad_left: float = 0.0,
    ramp_angle: float = 0.5,
) -> Optional[ShapeOutline]:
    """Straight-segment outline with an angled ramp-up.

    A ramp point halfway between the origin and the first control point is
    raised (top) or lowered (bottom) from the origin by ``ramp_angle`` times
    the distance to the first edge value: 0 gives a flat spike, 1 a full step.

    Vertex order: start, ramp(bottom), bottom edge, top edge reversed,
    ramp(top), start — 2·n + 4 vertices, first equal to last.

    Returns:
        The outline, or None when there are no control points.
    """
    if len(xpos) == 0:
        return None
    if not 0.0 <= ramp_angle <= 1.0:
        clipped = min(max(ramp_angle, 0.0), 1.0)
        logger.warning(f"ramp_angle {ramp_angle} outside [0, 1], using {clipped}")
        ramp_angle = clipped

    xpos = np.asarray(xpos, dtype=float)
    ytop = np.asarray(ytop, dtype=float)
    ybtm = np.asarray(ybtm, dtype=float)

    xst, yst = start_point(xpos, ytop, ybtm, nest_level, pad_left)
    xangle = (xst + xpos[0]) / 2
    yangle_top = yst + abs(yst - ytop[0]) * ramp_angle
    yangle_btm = yst - abs(yst - ybtm[0]) * ramp_angle

    x = np.concatenate([[xst, xangle], xpos, xpos[::-1], [xangle, xst]])
    y = np.concatenate([[yst, yangle_btm], ybtm, ytop[::-1], [yangle_top, yst]])
    return ShapeOutline(x=x, y=y, origin=(xst, yst), mode="polygon")


def bezier_outline(
    xpos: np.ndarray,
    ytop: np.ndarray,
    ybtm: np.ndarray,
    nest_level: int,
    pad_left: float = 0.0,
) -> Optional[ShapeOutline]:
    """Outline made of two bezier curves sharing the clone origin.

    Returns:
        The outline, or None when there are no control points.
    """
    if len(xpos) == 0:
        return None
    xpos = np.asarray(xpos, dtype=float)
    flank = (xpos.max() - xpos.min()) * BEZIER_FLANK

    xst, yst = start_point(xpos, ytop, ybtm, nest_level, pad_left)
    xs, tops, btms = replicate_points(xpos, ytop, ybtm, flank)

    top = bezier_curve(np.r_[xst, xs], np.r_[yst, tops])
    btm = bezier_curve(np.r_[xst, xs], np.r_[yst, btms])
    x, y = _close(top, btm)
    return ShapeOutline(x=x, y=y, origin=(xst, yst), mode="bezier")


def spline_outline(
    xpos: np.ndarray,
    ytop: np.ndarray,
    ybtm: np.ndarray,
    nest_level: int,
    pad_left: float = 0.0,
) -> Optional[ShapeOutline]:
    """Outline made of two natural splines sharing the clone origin.

    The origin is placed after replication (so relative to the first
    flank copy) and tripled at x ±2·flank to steady the fit. Origins near
    the top or bottom of the plot are pulled halfway towards the first
    point, which keeps small edge clones from bulging out of their parent.

    Returns:
        The outline, or None when there are no control points.
    """
    if len(xpos) == 0:
        return None
    xpos = np.asarray(xpos, dtype=float)
    flank = (xpos.max() - xpos.min()) * SPLINE_FLANK

    xs, tops, btms = replicate_points(xpos, ytop, ybtm, flank)
    xst, yst = start_point(xs, tops, btms, nest_level, pad_left)

    low, high = _SPLINE_BAND
    if yst > high * PLOT_HEIGHT or yst < low * PLOT_HEIGHT:
        xst = (xst + xs[0]) / 2

    x_start = np.array([xst - flank * 2, xst, xst + flank * 2])
    y_start = np.full(3, yst)

    top = natural_spline(np.r_[x_start, xs], np.r_[y_start, tops])
    btm = natural_spline(np.r_[x_start, xs], np.r_[y_start, btms])
    x, y = _close(top, btm)
    return ShapeOutline(x=x, y=y, origin=(xst, yst), mode="spline")


def build_outline(
    xpos: np.ndarray,
    ytop: np.ndarray,
    ybtm: np.ndarray,
    nest_level: int,
    pad_left: float = 0.0,
    shape: str = DEFAULT_SHAPE,
    ramp_angle: float = 0.5,
) -> Optional[ShapeOutline]:
    """Build a clone outline with the requested strategy.

    Args:
        xpos: Control-point x positions.
        ytop: Top-edge y values.
        ybtm: Bottom-edge y values.
        nest_level: Depth of the clone in the parent tree.
        pad_left: Horizontal ramp-up distance before nest decay.
        shape: "polygon", "bezier" or "spline" (unknown values fall back to polygon).
        ramp_angle: Ramp steepness in [0, 1] (polygon only).

    Returns:
        The outline, or None when there are no control points.
    """
    shape = resolve_shape(shape)
    if shape == "bezier":
        return bezier_outline(xpos, ytop, ybtm, nest_level, pad_left)
    elif shape == "spline":
        return spline_outline(xpos, ytop, ybtm, nest_level, pad_left)
    else:
        return polygon_outline(xpos, ytop, ybtm, nest_level, pad_left, ramp_angle)
