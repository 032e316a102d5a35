"""
Gradient background image for fish plots.

The gradient is rendered to a temporary PNG that lives only for the
duration of a ``with gradient_image(...)`` block: it is deleted on exit,
including when drawing fails.
"""

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

import matplotlib.image as mpimg
import numpy as np
from matplotlib.colors import to_rgb

from ..logging import get_logger

logger = get_logger()

# bisque, darkgoldenrod1, darkorange3
DEFAULT_GRADIENT = ("#FFE4C4", "#FFB90F", "#CD6600")

# Interpolated steps between the first/second and second/third colours
_STEPS = (50, 25)
_ALPHA = 200 / 255
_IMAGE_SIZE = 80  # px, square


def gradient_colors(col: Optional[Sequence[str]] = None) -> np.ndarray:
    """Left-to-right gradient: col1, 50 steps, col2, 25 steps, col3.

    Args:
        col: Three colours. Anything else falls back to DEFAULT_GRADIENT
            with a warning.

    Returns:
        (78, 4) RGBA array with a fixed alpha of 200/255.
    """
    if col is None or isinstance(col, str) or len(col) != 3:
        logger.warning("There were not 3 background gradient colors set - falling back to defaults")
        col = DEFAULT_GRADIENT
    anchors = [np.array(to_rgb(c)) for c in col]

    pieces = [anchors[0][None, :]]
    for (start, end), steps in zip(zip(anchors, anchors[1:]), _STEPS):
        # steps intermediate colours, then the end colour itself
        t = np.linspace(0.0, 1.0, steps + 2)[1:, None]
        pieces.append(start + (end - start) * t)
    rgb = np.vstack(pieces)
    alpha = np.full((len(rgb), 1), _ALPHA)
    return np.hstack([rgb, alpha])


def gradient_array(colors: np.ndarray, size: int = _IMAGE_SIZE) -> np.ndarray:
    """Stretch a colour sequence into a (size, size, 4) horizontal gradient image."""
    cols = ((np.arange(size) + 0.5) * len(colors) / size).astype(int)
    row = colors[np.minimum(cols, len(colors) - 1)]
    return np.repeat(row[None, :, :], size, axis=0)


@contextmanager
def gradient_image(col: Optional[Sequence[str]] = None) -> Iterator[Path]:
    """Write the gradient to a temporary PNG and yield its path.

    The file is removed when the block exits, whether or not drawing
    succeeded.
    """
    image = gradient_array(gradient_colors(col))
    fd, name = tempfile.mkstemp(prefix="fishplot_bg_", suffix=".png")
    os.close(fd)
    path = Path(name)
    try:
        mpimg.imsave(path, image)
        logger.debug(f"Wrote background gradient to {path}")
        yield path
    finally:
        path.unlink(missing_ok=True)
