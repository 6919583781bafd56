"""tests/conftest.py - shared fixtures"""
import os

os.environ.setdefault('MPLBACKEND', 'Agg')

import pytest

from rrtplan.core.bounds import Collision, ConvexPolygonBounds


class BlockAllSegments(Collision):
    """Obstacle with no area that blocks every segment."""

    def is_collision(self, pt):
        return False

    def is_collision_segment(self, start, end):
        return True


@pytest.fixture
def unit_square():
    """Square (1,1)-(2,2), vertices given out of order."""
    return ConvexPolygonBounds([(1.0, 1.0), (2.0, 1.0), (1.0, 2.0), (2.0, 2.0)])


@pytest.fixture
def wall():
    """Wall between start (0,0) and goal (10,0) with gaps above and below."""
    return ConvexPolygonBounds([(4.0, -3.0), (5.0, -3.0), (5.0, 3.0), (4.0, 3.0)])


@pytest.fixture
def block_all():
    return BlockAllSegments()
