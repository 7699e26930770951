"""
Point and line correspondences and the linear constraints they impose.

Each correspondence contributes a fixed 2 x 9 block of linear equations in
the nine entries of the unknown homography, taken in row-major order
``[h11, h12, h13, h21, h22, h23, h31, h32, h33]``.  Stacking the blocks of
all correspondences yields the Direct Linear Transform (DLT) system solved
in :mod:`planar_homography.geometry.homography`.
"""

from dataclasses import dataclass
from typing import Iterable, List, Protocol, runtime_checkable

import numpy as np

from planar_homography.geometry.primitives import Line, Point, as_float_dtype

RESTRICTION_SHAPE = (2, 9)


@runtime_checkable
class Restricted(Protocol):
    """Anything that can express itself as a 2 x 9 DLT constraint block."""

    def generate_restriction(self, dtype=np.float64) -> np.ndarray:
        ...


@dataclass(frozen=True)
class PointPair:
    """Point *p1* in the source plane corresponds to *p2* in the target."""

    p1: Point
    p2: Point

    def generate_restriction(self, dtype=np.float64) -> np.ndarray:
        """Return the two equations of ``p2 x (H p1) = 0``.

        For ``p1 = (x, y)`` and ``p2 = (x', y')``::

            [0, 0, 0, -x, -y, -1,  x*y',  y*y',  y']
            [x, y, 1,  0,  0,  0, -x*x', -y*x', -x']

        Parameters
        ----------
        dtype : numpy floating dtype
            Precision of the block (and of the arithmetic producing it).

        Returns
        -------
        np.ndarray
            2 x 9 constraint block.
        """
        dtype = as_float_dtype(dtype)
        x, y = self.p1.to_vector(dtype)
        xp, yp = self.p2.to_vector(dtype)
        zero, one = dtype.type(0), dtype.type(1)

        return np.array([
            [zero, zero, zero,   -x,   -y, -one,  x * yp,  y * yp,  yp],
            [   x,    y,  one, zero, zero, zero, -x * xp, -y * xp, -xp],
        ], dtype=dtype)


@dataclass(frozen=True)
class LinePair:
    """Line *l1* in the source plane corresponds to *l2* in the target."""

    l1: Line
    l2: Line

    def generate_restriction(self, dtype=np.float64) -> np.ndarray:
        """Return the two equations tying *l2* to the image of *l1*.

        ``(0, -c, b)`` and ``(c, 0, -a)`` are homogeneous points on
        ``l1 = (a, b, c)``; both must land on ``l2 = (a', b', c')`` once
        mapped by H, which gives::

            [0,    -c*a', b*a', 0,    -c*b', b*b', 0,    -c*c', b*c']
            [c*a', 0,    -a*a', c*b', 0,    -a*b', c*c', 0,    -a*c']

        When *l1* passes through the origin (``c == 0``) both points collapse
        onto the origin, so the block carries a single independent equation.

        Parameters
        ----------
        dtype : numpy floating dtype
            Precision of the block (and of the arithmetic producing it).

        Returns
        -------
        np.ndarray
            2 x 9 constraint block.
        """
        dtype = as_float_dtype(dtype)
        a, b, c = self.l1.to_vector(dtype)
        ap, bp, cp = self.l2.to_vector(dtype)
        zero = dtype.type(0)

        return np.array([
            [  zero, -c * ap,  b * ap,   zero, -c * bp,  b * bp,   zero, -c * cp,  b * cp],
            [c * ap,    zero, -a * ap, c * bp,    zero, -a * bp, c * cp,    zero, -a * cp],
        ], dtype=dtype)


def generate_restrictions(correspondences: Iterable[Restricted],
                          dtype=np.float64) -> List[np.ndarray]:
    """Convert correspondences of any kind into their constraint blocks.

    Parameters
    ----------
    correspondences : iterable of Restricted
        Point pairs, line pairs, or any other object exposing
        ``generate_restriction``.  Order is preserved.
    dtype : numpy floating dtype
        Precision of every block.

    Returns
    -------
    list of np.ndarray
        One 2 x 9 block per correspondence.
    """
    dtype = as_float_dtype(dtype)
    return [c.generate_restriction(dtype) for c in correspondences]
