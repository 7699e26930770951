"""
Planar homography estimation from mixed point and line correspondences.

Example
-------
>>> from planar_homography import HomographyComputation, Point
>>> hc = HomographyComputation()
>>> hc.add_point_correspondence(Point(148, 337), Point(0, 0))
>>> hc.add_point_correspondence(Point(131, 516), Point(0, 60))
>>> hc.add_point_correspondence(Point(321, 486), Point(80, 60))
>>> hc.add_point_correspondence(Point(332, 370), Point(80, 0))
>>> solution = hc.get_restrictions().compute()
>>> solution.matrix.shape
(3, 3)
"""

from planar_homography.geometry.correspondences import (
    LinePair,
    PointPair,
    Restricted,
    generate_restrictions,
)
from planar_homography.geometry.homography import (
    DegenerateCorrespondenceWarning,
    HomographyComputation,
    HomographyRestrictions,
    HomographySolution,
    InsufficientConstraintsWarning,
    apply_homography,
    assemble_design_matrix,
    generate_matrix_from_correspondences,
    solve,
)
from planar_homography.geometry.primitives import Line, Point

__all__ = [
    "Point",
    "Line",
    "PointPair",
    "LinePair",
    "Restricted",
    "generate_restrictions",
    "assemble_design_matrix",
    "generate_matrix_from_correspondences",
    "solve",
    "apply_homography",
    "HomographySolution",
    "HomographyRestrictions",
    "HomographyComputation",
    "InsufficientConstraintsWarning",
    "DegenerateCorrespondenceWarning",
]
