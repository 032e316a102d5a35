"""
Clone records and the parent-indexed layout forest.

A LayoutForest is built once from already laid-out control points (x
positions plus top/bottom edges per clone), a parent vector and nesting
levels. It is validated at construction time and treated as read-only
while rendering.

Parent indices are 0-based clone indices; ``ROOT`` (None) marks a
top-level clone.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Iterator, Optional

import numpy as np
import pandas as pd

ROOT = None

_FRAME_COLUMNS = ["clone", "x", "ytop", "ybtm"]


@dataclass(frozen=True)
class AnnotationStyle:
    """Shared styling for clone annotations (e.g. driver mutations).

    Attributes:
        angle: Text rotation in degrees (counter-clockwise).
        color: Text colour.
        pos: Side of the anchor the text sits on: 1=below, 2=left, 3=above, 4=right.
        size: Character expansion relative to the base font size.
        offset: Distance from the anchor, in character widths.
    """

    angle: float = 0.0
    color: str = "black"
    pos: int = 4
    size: float = 0.5
    offset: float = 0.5

    def __post_init__(self):
        if self.pos not in (1, 2, 3, 4):
            raise ValueError(f"Annotation pos must be 1, 2, 3 or 4, got {self.pos!r}")


@dataclass(frozen=True, eq=False)
class Clone:
    """One subclonal population and its laid-out shape."""

    index: int
    xpos: np.ndarray
    ytop: np.ndarray
    ybtm: np.ndarray
    parent: Optional[int] = ROOT
    nest_level: int = 0
    color: Optional[str] = None
    annotation: str = ""
    label: Optional[str] = None

    @property
    def is_root(self) -> bool:
        return self.parent is ROOT

    @property
    def n_points(self) -> int:
        return len(self.xpos)

    @property
    def is_empty(self) -> bool:
        """True for a clone with zero population at every timepoint."""
        return self.n_points == 0


def _as_points(values) -> np.ndarray:
    arr = np.array(values if values is not None else [], dtype=float).reshape(-1)
    arr.setflags(write=False)
    return arr


def _per_clone(values, n: int, name: str) -> list:
    """Normalise a sequence or {index: seq} mapping into a list of length n."""
    if isinstance(values, Mapping):
        extra = [k for k in values if not (isinstance(k, (int, np.integer)) and 0 <= k < n)]
        if extra:
            raise ValueError(f"{name} has keys that are not clone indices: {extra}")
        return [values.get(i, []) for i in range(n)]
    values = list(values)
    if len(values) != n:
        raise ValueError(f"{name} has {len(values)} entries, expected one per clone ({n})")
    return values


def validate_parents(parents: Sequence) -> list[Optional[int]]:
    """Check that a parent vector describes a well-formed forest.

    Every entry must be ``ROOT`` (None) or the index of another clone, and
    following parents from any clone must reach a root.

    Returns:
        The parent vector normalised to plain ints / None.

    Raises:
        ValueError: On out-of-range, self-referencing or cyclic parents.
    """
    n = len(parents)
    normalised: list[Optional[int]] = []
    for i, p in enumerate(parents):
        if p is ROOT:
            normalised.append(ROOT)
            continue
        if isinstance(p, (bool, np.bool_)) or not isinstance(p, (int, np.integer)):
            raise ValueError(f"Clone {i}: parent must be a clone index or None, got {p!r}")
        p = int(p)
        if not 0 <= p < n:
            raise ValueError(
                f"Clone {i}: parent {p} does not reference a defined clone (0..{n - 1})"
            )
        if p == i:
            raise ValueError(f"Clone {i} cannot be its own parent")
        normalised.append(p)

    # Walk up from each clone; a walk longer than n means a cycle.
    for i in range(n):
        seen = {i}
        node = normalised[i]
        while node is not ROOT:
            if node in seen:
                raise ValueError(f"Parent cycle detected involving clone {i}")
            seen.add(node)
            node = normalised[node]
    return normalised


def nest_levels_from_parents(parents: Sequence) -> list[int]:
    """Depth of each clone in the parent tree (roots are level 0)."""
    parents = validate_parents(parents)
    levels: list[int] = []
    for i in range(len(parents)):
        depth = 0
        node = parents[i]
        while node is not ROOT:
            depth += 1
            node = parents[node]
        levels.append(depth)
    return levels


@dataclass(frozen=True, eq=False)
class LayoutForest:
    """The set of clones plus their parent links and the shared timepoint axis."""

    clones: tuple[Clone, ...]
    timepoints: np.ndarray
    annotation_style: AnnotationStyle = field(default_factory=AnnotationStyle)

    def __post_init__(self):
        tp = np.array(self.timepoints, dtype=float).reshape(-1)
        tp.setflags(write=False)
        object.__setattr__(self, "timepoints", tp)
        object.__setattr__(self, "clones", tuple(self.clones))
        if len(tp) == 0:
            raise ValueError("timepoints must not be empty")
        if np.any(np.diff(tp) < 0):
            raise ValueError(f"timepoints must be ascending, got {tp.tolist()}")
        for position, clone in enumerate(self.clones):
            if clone.index != position:
                raise ValueError(
                    f"Clone at position {position} has index {clone.index}; "
                    "clone indices must match their position"
                )
        validate_parents([c.parent for c in self.clones])

    # ---- construction -------------------------------------------------------

    @classmethod
    def from_arrays(
        cls,
        xpos,
        ytop,
        ybtm,
        parents: Sequence,
        timepoints: Sequence[float],
        nest_levels: Optional[Sequence[int]] = None,
        colors: Optional[Sequence[str]] = None,
        annotations: Optional[Sequence[str]] = None,
        labels: Optional[Sequence[str]] = None,
        annotation_style: Optional[AnnotationStyle] = None,
    ) -> LayoutForest:
        """Build and validate a forest from per-clone control points.

        Args:
            xpos: Per-clone x positions — a sequence of sequences, or a
                mapping from clone index to a sequence (missing = empty).
            ytop: Per-clone top-edge y values (same shape as ``xpos``).
            ybtm: Per-clone bottom-edge y values (same shape as ``xpos``).
            parents: Parent index per clone, ``None`` for roots.
            timepoints: Ascending x positions of the measurements.
            nest_levels: Nesting depth per clone; derived from ``parents`` if omitted.
            colors: Optional fill colour per clone (validated when plotting).
            annotations: Optional annotation text per clone ("" = none).
            labels: Optional legend label per clone.
            annotation_style: Shared annotation style.

        Raises:
            ValueError: If the inputs do not describe a well-formed forest.
        """
        parents = validate_parents(list(parents))
        n = len(parents)

        xs = _per_clone(xpos, n, "xpos")
        tops = _per_clone(ytop, n, "ytop")
        btms = _per_clone(ybtm, n, "ybtm")

        if nest_levels is None:
            levels = nest_levels_from_parents(parents)
        else:
            levels = [int(v) for v in _per_clone(nest_levels, n, "nest_levels")]
            negative = [i for i, v in enumerate(levels) if v < 0]
            if negative:
                raise ValueError(f"nest levels must be non-negative (clones {negative})")

        colors = _per_clone(colors, n, "colors") if colors is not None else [None] * n
        annotations = (
            _per_clone(annotations, n, "annotations") if annotations is not None else [""] * n
        )
        labels = _per_clone(labels, n, "labels") if labels is not None else [None] * n

        clones = []
        for i in range(n):
            x, top, btm = _as_points(xs[i]), _as_points(tops[i]), _as_points(btms[i])
            if not (len(x) == len(top) == len(btm)):
                raise ValueError(
                    f"Clone {i}: xpos/ytop/ybtm lengths differ "
                    f"({len(x)}, {len(top)}, {len(btm)})"
                )
            clones.append(Clone(
                index=i,
                xpos=x,
                ytop=top,
                ybtm=btm,
                parent=parents[i],
                nest_level=levels[i],
                color=colors[i],
                annotation=annotations[i] or "",
                label=None if labels[i] is None else str(labels[i]),
            ))

        return cls(
            clones=tuple(clones),
            timepoints=np.asarray(timepoints, dtype=float).reshape(-1),
            annotation_style=annotation_style or AnnotationStyle(),
        )

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        parents: Sequence,
        timepoints: Sequence[float],
        **kwargs,
    ) -> LayoutForest:
        """Build a forest from a long-format control-point table.

        Args:
            frame: DataFrame with columns ``clone, x, ytop, ybtm`` — one row
                per control point. Row order within a clone is kept.
            parents: Parent index per clone; its length sets the clone count,
                so clones without rows are empty.
            timepoints: Ascending x positions of the measurements.
            **kwargs: Passed through to :meth:`from_arrays`.
        """
        missing = [c for c in _FRAME_COLUMNS if c not in frame.columns]
        if missing:
            raise ValueError(f"Control-point table is missing columns: {missing}")
        xpos, ytop, ybtm = {}, {}, {}
        for clone_id, rows in frame.groupby("clone", sort=False):
            key = int(clone_id)
            xpos[key] = rows["x"].to_numpy(dtype=float)
            ytop[key] = rows["ytop"].to_numpy(dtype=float)
            ybtm[key] = rows["ybtm"].to_numpy(dtype=float)
        return cls.from_arrays(xpos, ytop, ybtm, parents, timepoints, **kwargs)

    def to_frame(self) -> pd.DataFrame:
        """Long-format table of all control points (inverse of :meth:`from_frame`)."""
        parts = [
            pd.DataFrame({
                "clone": c.index,
                "x": c.xpos,
                "ytop": c.ytop,
                "ybtm": c.ybtm,
            })
            for c in self.clones
            if not c.is_empty
        ]
        if not parts:
            return pd.DataFrame(columns=_FRAME_COLUMNS)
        return pd.concat(parts, ignore_index=True)

    # ---- access -------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.clones)

    def __iter__(self) -> Iterator[Clone]:
        return iter(self.clones)

    def __getitem__(self, index: int) -> Clone:
        return self.clones[index]

    @property
    def parents(self) -> list[Optional[int]]:
        return [c.parent for c in self.clones]

    @property
    def nest_levels(self) -> list[int]:
        return [c.nest_level for c in self.clones]

    @property
    def colors(self) -> list[Optional[str]]:
        return [c.color for c in self.clones]

    @property
    def labels(self) -> list[str]:
        """Legend labels, defaulting to 1-based clone numbers."""
        return [c.label if c.label is not None else str(c.index + 1) for c in self.clones]

    @property
    def span(self) -> float:
        """Width of the timepoint axis."""
        return float(self.timepoints.max() - self.timepoints.min())

    def children_of(self, parent: Optional[int]) -> list[Clone]:
        """Clones whose parent is ``parent``, in index order."""
        return [c for c in self.clones if c.parent == parent]
