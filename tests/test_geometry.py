"""tests/test_geometry.py - point arithmetic and segment intersection"""
import pytest

from rrtplan.utils.geometry import cross, euclidean_distance, line_seg_intersects, subtract


class TestPointArithmetic:

    def test_euclidean_distance(self):
        assert euclidean_distance((3.0, 4.0)) == pytest.approx(5.0)

    def test_euclidean_distance_origin(self):
        assert euclidean_distance((0.0, 0.0)) == 0.0

    def test_subtract(self):
        assert subtract((5.0, 2.0), (1.0, 3.0)) == (4.0, -1.0)

    def test_cross(self):
        assert cross((1.0, 0.0), (0.0, 1.0)) == 1.0
        assert cross((0.0, 1.0), (1.0, 0.0)) == -1.0


class TestLineSegIntersects:

    def test_crossing(self):
        assert line_seg_intersects((0, 0), (2, 2), (0, 2), (2, 0))

    def test_disjoint(self):
        assert not line_seg_intersects((0, 0), (1, 1), (3, 0), (3, 1))

    def test_lines_cross_outside_segments(self):
        # infinite lines meet at (2, 2), beyond both segments
        assert not line_seg_intersects((0, 0), (1, 1), (4, 0), (3, 1))

    def test_parallel(self):
        assert not line_seg_intersects((0, 0), (1, 0), (0, 1), (1, 1))

    def test_colinear_overlap_not_reported(self):
        assert not line_seg_intersects((0, 0), (2, 0), (1, 0), (3, 0))

    def test_touching_endpoint(self):
        assert line_seg_intersects((0, 0), (1, 0), (1, 0), (1, 1))

    def test_symmetric(self):
        a1, a2, b1, b2 = (0, -1), (0, 1), (-1, 0), (1, 0)
        assert line_seg_intersects(a1, a2, b1, b2)
        assert line_seg_intersects(b1, b2, a1, a2)
