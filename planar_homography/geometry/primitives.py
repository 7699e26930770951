"""
Planar primitives: points and lines.

Both are immutable value types.  Coordinates are stored as plain Python
scalars and only converted to numpy arrays on request, so the same point can
feed a single- or double-precision estimate.
"""

from dataclasses import dataclass

import numpy as np


def as_float_dtype(dtype) -> np.dtype:
    """Return *dtype* as a numpy dtype, rejecting non-floating kinds.

    Parameters
    ----------
    dtype : numpy dtype-like
        Requested scalar type, e.g. ``np.float32`` or ``"float64"``.

    Returns
    -------
    np.dtype
        The resolved floating-point dtype.

    Raises
    ------
    TypeError
        If *dtype* is not a floating-point type.
    """
    resolved = np.dtype(dtype)
    if not np.issubdtype(resolved, np.floating):
        raise TypeError(f"Expected a floating-point dtype, got {resolved}")
    return resolved


@dataclass(frozen=True)
class Point:
    """A point ``(x, y)`` in a plane."""

    x: float
    y: float

    def to_vector(self, dtype=np.float64) -> np.ndarray:
        return np.array([self.x, self.y], dtype=as_float_dtype(dtype))

    def homogeneous(self, dtype=np.float64) -> np.ndarray:
        """Return ``[x, y, 1]``."""
        return np.array([self.x, self.y, 1], dtype=as_float_dtype(dtype))


@dataclass(frozen=True)
class Line:
    """A line ``a*x + b*y + c = 0`` in homogeneous form.

    A line with ``a == b == 0`` carries no direction.  Such lines are not
    rejected here; they simply contribute a meaningless constraint.
    """

    a: float
    b: float
    c: float

    @classmethod
    def from_points(cls, p1: Point, p2: Point) -> "Line":
        """Build the line passing through *p1* and *p2*.

        Parameters
        ----------
        p1, p2 : Point
            Two points on the line.  Identical points produce the
            degenerate line ``(0, 0, 0)``.

        Returns
        -------
        Line
            Coefficients ``a = y2 - y1``, ``b = x1 - x2``,
            ``c = -a*x1 - b*y1``.
        """
        a = p2.y - p1.y
        b = p1.x - p2.x
        c = -a * p1.x - b * p1.y
        return cls(a, b, c)

    @property
    def is_degenerate(self) -> bool:
        return self.a == 0 and self.b == 0

    def contains(self, point: Point, atol: float = 1e-9) -> bool:
        return abs(self.a * point.x + self.b * point.y + self.c) <= atol

    def to_vector(self, dtype=np.float64) -> np.ndarray:
        return np.array([self.a, self.b, self.c], dtype=as_float_dtype(dtype))
