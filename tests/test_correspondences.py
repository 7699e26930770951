import numpy as np

from planar_homography.geometry.correspondences import (
    LinePair,
    PointPair,
    Restricted,
    generate_restrictions,
)
from planar_homography.geometry.primitives import Line, Point

from conftest import map_point


def test_point_pair_restriction_layout():
    r = PointPair(Point(1.0, 2.0), Point(3.0, 4.0)).generate_restriction()

    assert r.shape == (2, 9)
    np.testing.assert_array_equal(r[0], [0, 0, 0, -1, -2, -1, 4, 8, 4])
    np.testing.assert_array_equal(r[1], [1, 2, 1, 0, 0, 0, -3, -6, -3])


def test_point_pair_fixed_entries():
    x, y = 148.0, 337.0
    r = PointPair(Point(x, y), Point(80.0, 60.0)).generate_restriction()

    np.testing.assert_array_equal(r[0, 3:6], [-x, -y, -1.0])
    np.testing.assert_array_equal(r[1, 0:3], [x, y, 1.0])


def test_line_pair_restriction_layout():
    r = LinePair(Line(1.0, 2.0, 3.0), Line(4.0, 5.0, 6.0)).generate_restriction()

    # a=1 b=2 c=3, a'=4 b'=5 c'=6
    np.testing.assert_array_equal(r[0], [0, -12, 8, 0, -15, 10, 0, -18, 12])
    np.testing.assert_array_equal(r[1], [12, 0, -4, 15, 0, -5, 18, 0, -6])


def test_restrictions_vanish_on_true_homography(h_true):
    h = h_true.ravel()
    p1, p2 = Point(1.0, 2.0), Point(-3.0, 0.5)
    q1, q2 = map_point(h_true, p1), map_point(h_true, p2)

    point_block = PointPair(p1, q1).generate_restriction()
    line_block = LinePair(Line.from_points(p1, p2),
                          Line.from_points(q1, q2)).generate_restriction()

    np.testing.assert_allclose(point_block @ h, 0.0, atol=1e-12)
    np.testing.assert_allclose(line_block @ h, 0.0, atol=1e-12)


def test_restriction_is_idempotent():
    pair = LinePair(Line(0.3, -1.7, 2.2), Line(1.1, 0.4, -0.9))
    first = pair.generate_restriction()
    second = pair.generate_restriction()
    assert first.tobytes() == second.tobytes()


def test_restriction_dtype():
    pp = PointPair(Point(1.0, 2.0), Point(3.0, 4.0))
    lp = LinePair(Line(1.0, 2.0, 3.0), Line(4.0, 5.0, 6.0))
    assert pp.generate_restriction(np.float32).dtype == np.float32
    assert lp.generate_restriction(np.float32).dtype == np.float32
    assert pp.generate_restriction().dtype == np.float64


def test_pairs_satisfy_protocol():
    assert isinstance(PointPair(Point(0, 0), Point(1, 1)), Restricted)
    assert isinstance(LinePair(Line(1, 0, 0), Line(0, 1, 0)), Restricted)


def test_generate_restrictions_keeps_order():
    lp = LinePair(Line(1.0, 2.0, 3.0), Line(4.0, 5.0, 6.0))
    pp = PointPair(Point(1.0, 2.0), Point(3.0, 4.0))

    blocks = generate_restrictions([lp, pp, lp])

    assert len(blocks) == 3
    np.testing.assert_array_equal(blocks[0], lp.generate_restriction())
    np.testing.assert_array_equal(blocks[1], pp.generate_restriction())
    np.testing.assert_array_equal(blocks[2], lp.generate_restriction())


def test_custom_restricted_object():
    class Fixed:
        def generate_restriction(self, dtype=np.float64):
            return np.ones((2, 9), dtype=dtype)

    blocks = generate_restrictions([Fixed()], np.float32)
    assert blocks[0].dtype == np.float32
    assert blocks[0].sum() == 18
