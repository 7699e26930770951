"""
Homography estimation from point and line correspondences.

A planar homography (projective transformation) maps points in one plane to
corresponding points in another.  Every correspondence contributes two linear
equations in the nine homography entries; the equations are stacked into a
design matrix and the 3x3 matrix is recovered via the Direct Linear Transform
(DLT): the right singular vector belonging to the smallest singular value.

Inputs are used as given.  No coordinate normalisation and no outlier
rejection is performed, so callers are responsible for supplying enough
well-spread, non-degenerate correspondences.
"""

import logging
import warnings
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence

import numpy as np

from planar_homography.geometry.correspondences import (
    RESTRICTION_SHAPE,
    LinePair,
    PointPair,
    Restricted,
    generate_restrictions,
)
from planar_homography.geometry.primitives import Line, Point, as_float_dtype

logger = logging.getLogger(__name__)

# Unknowns in the DLT system; the matrix is padded to at least this many rows.
NUM_UNKNOWNS = 9
# Correspondences needed to pin down the 8 degrees of freedom of H.
MIN_CORRESPONDENCES = 4


class InsufficientConstraintsWarning(UserWarning):
    """Fewer correspondences than needed for a determined system."""


class DegenerateCorrespondenceWarning(UserWarning):
    """A correspondence that cannot constrain the homography."""


# ---------------------------------------------------------------------------
# System assembly
# ---------------------------------------------------------------------------

def assemble_design_matrix(restrictions: Sequence[np.ndarray],
                           dtype=None, stacklevel: int = 2) -> np.ndarray:
    """Stack 2 x 9 constraint blocks into the DLT design matrix.

    Block *i* fills rows ``2i`` and ``2i + 1``.  The matrix always has at
    least nine rows; with fewer than five blocks the trailing rows remain
    zero so the SVD stays well-defined, but the system is under-determined.

    Parameters
    ----------
    restrictions : sequence of np.ndarray
        Constraint blocks, each of shape (2, 9), in the desired row order.
    dtype : numpy floating dtype, optional
        Output precision.  Defaults to the common type of the blocks, or
        float64 when there are none.
    stacklevel : int
        Passed to :func:`warnings.warn` so an under-determined system is
        reported at the line that asked for it.

    Returns
    -------
    np.ndarray
        ``max(2N, 9) x 9`` design matrix.

    Raises
    ------
    ValueError
        If a block does not have shape (2, 9).
    """
    blocks = [np.asarray(r) for r in restrictions]
    for i, block in enumerate(blocks):
        if block.shape != RESTRICTION_SHAPE:
            raise ValueError(
                f"Restriction {i} has shape {block.shape}, expected {RESTRICTION_SHAPE}"
            )

    if dtype is None:
        dtype = np.result_type(*{b.dtype for b in blocks}, np.float32) if blocks else np.float64
    dtype = as_float_dtype(dtype)

    if len(blocks) < MIN_CORRESPONDENCES:
        msg = (f"Only {len(blocks)} correspondence(s) supplied; at least "
               f"{MIN_CORRESPONDENCES} are needed for a determined homography")
        logger.warning(msg)
        warnings.warn(msg, InsufficientConstraintsWarning, stacklevel=stacklevel)

    rows = max(2 * len(blocks), NUM_UNKNOWNS)
    A = np.zeros((rows, NUM_UNKNOWNS), dtype=dtype)
    for i, block in enumerate(blocks):
        A[2 * i:2 * i + 2] = block

    logger.debug("Assembled %d x %d design matrix from %d restriction(s)",
                 rows, NUM_UNKNOWNS, len(blocks))
    return A


def generate_matrix_from_correspondences(correspondences: Iterable[Restricted],
                                         dtype=np.float64) -> np.ndarray:
    """Build the design matrix directly from a mix of correspondences."""
    return assemble_design_matrix(generate_restrictions(correspondences, dtype), dtype,
                                  stacklevel=3)


# ---------------------------------------------------------------------------
# Solve
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HomographySolution:
    """Result of a DLT solve.

    Attributes
    ----------
    matrix : np.ndarray
        3 x 3 homography, defined up to scale.
    value : float
        Smallest singular value of the design matrix; near zero for a
        consistent system.
    singular_values : np.ndarray
        Full singular-value spectrum in descending order.
    """

    matrix: np.ndarray
    value: float
    singular_values: np.ndarray = field(repr=False)

    def normalized(self) -> np.ndarray:
        """Return the matrix scaled so that its bottom-right entry is 1."""
        h33 = self.matrix[2, 2]
        if h33 == 0:
            raise ValueError("Cannot normalise a homography with H[2, 2] == 0")
        return self.matrix / h33

    def numerical_rank(self, rtol: Optional[float] = None) -> int:
        """Count singular values above ``rtol * max(singular_values)``.

        A system built from enough non-degenerate correspondences has rank 8;
        anything lower means the returned matrix is not uniquely determined.
        """
        s = self.singular_values
        if s.size == 0:
            return 0
        if rtol is None:
            rtol = s.size * np.finfo(s.dtype).eps
        return int(np.count_nonzero(s > rtol * s.max()))

    def transform(self, points) -> np.ndarray:
        return apply_homography(self.matrix, points)


def solve(design_matrix: np.ndarray) -> HomographySolution:
    """Solve the homogeneous DLT system ``A h = 0`` in the least-squares sense.

    The solution is the right singular vector of the smallest singular
    value, i.e. the last row of ``Vt`` (numpy orders singular values
    descending).  numpy reshapes row-major, which matches the column order of
    the constraint blocks, so no transpose is needed.

    Parameters
    ----------
    design_matrix : np.ndarray
        M x 9 matrix.  Fewer than nine rows are zero-padded, so an exact
        8-row system from four correspondences still yields its null vector.

    Returns
    -------
    HomographySolution
        3 x 3 matrix in the precision of *design_matrix*, the smallest
        singular value and the full spectrum.
    """
    A = np.asarray(design_matrix)
    if A.ndim != 2 or A.shape[1] != NUM_UNKNOWNS:
        raise ValueError(f"Expected an M x {NUM_UNKNOWNS} design matrix, got shape {A.shape}")
    if not np.issubdtype(A.dtype, np.floating):
        A = A.astype(np.float64)
    if A.shape[0] < NUM_UNKNOWNS:
        # Vt must span all 9 unknowns for its last row to be the null vector
        A = np.vstack([A, np.zeros((NUM_UNKNOWNS - A.shape[0], NUM_UNKNOWNS), dtype=A.dtype)])

    _, S, Vt = np.linalg.svd(A, full_matrices=False)
    H = Vt[-1].reshape(3, 3)

    logger.debug("Singular values: %s", S)
    return HomographySolution(matrix=H, value=S[-1], singular_values=S)


def apply_homography(H: np.ndarray, points) -> np.ndarray:
    """Apply a homography to a set of ``(x, y)`` coordinates.

    Parameters
    ----------
    H : np.ndarray
        3 x 3 homography matrix.
    points : array-like
        N x 2 array of ``(x, y)`` coordinates.

    Returns
    -------
    np.ndarray
        N x 2 array of transformed coordinates.
    """
    H = np.asarray(H)
    if H.shape != (3, 3):
        raise ValueError("Expected a 3x3 homography matrix")

    pts = np.asarray(points, dtype=np.result_type(H.dtype, np.float32))
    if pts.size == 0:
        return np.empty((0, 2), dtype=pts.dtype)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError("Expected an array of shape (N, 2)")

    # Stack as [x, y, 1]
    ones = np.ones((pts.shape[0], 1), dtype=pts.dtype)
    homog = np.hstack([pts, ones])

    transformed = homog @ H.T
    transformed = transformed / transformed[:, 2:3]
    return transformed[:, :2]


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class HomographyRestrictions:
    """Ordered collection of 2 x 9 constraint blocks ready to be solved."""

    def __init__(self, restrictions: Optional[List[np.ndarray]] = None, dtype=np.float64):
        self.dtype = as_float_dtype(dtype)
        self.restrictions = list(restrictions) if restrictions is not None else []

    def __len__(self) -> int:
        return len(self.restrictions)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self.restrictions)

    def design_matrix(self) -> np.ndarray:
        return assemble_design_matrix(self.restrictions, self.dtype, stacklevel=3)

    def compute(self) -> HomographySolution:
        """Assemble the design matrix and solve it."""
        return solve(assemble_design_matrix(self.restrictions, self.dtype, stacklevel=3))


class HomographyComputation:
    """Collect point and line correspondences for one homography estimate.

    Restrictions are generated point pairs first, then line pairs, each
    group in insertion order.  Use :func:`generate_matrix_from_correspondences`
    when a different interleaving is needed.

    Parameters
    ----------
    dtype : numpy floating dtype
        Precision used for the restriction blocks and the solve.
    """

    def __init__(self, dtype=np.float64):
        self.dtype = as_float_dtype(dtype)
        self._point_correspondences: List[PointPair] = []
        self._line_correspondences: List[LinePair] = []

    @property
    def point_correspondences(self) -> List[PointPair]:
        return list(self._point_correspondences)

    @property
    def line_correspondences(self) -> List[LinePair]:
        return list(self._line_correspondences)

    def add_point_correspondence(self, p1: Point, p2: Point) -> None:
        self._point_correspondences.append(PointPair(p1, p2))

    def add_line_correspondence(self, l1: Line, l2: Line) -> None:
        if l1.is_degenerate or l2.is_degenerate:
            warnings.warn(
                f"Line correspondence {l1} -> {l2} contains a line with a zero normal",
                DegenerateCorrespondenceWarning,
                stacklevel=2,
            )
        self._line_correspondences.append(LinePair(l1, l2))

    def get_restrictions(self) -> HomographyRestrictions:
        pairs = self._point_correspondences + self._line_correspondences
        return HomographyRestrictions(generate_restrictions(pairs, self.dtype), self.dtype)
