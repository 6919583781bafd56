"""
Keep-out regions for 2D planning.

Every obstacle implements the Collision capability: a required point test
and an optional segment test that defaults to "never blocks". Planners only
talk to obstacles through this interface, so callers can supply their own
shapes as well as the circle, rectangle and convex polygon defined here.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial import ConvexHull, QhullError

from ..exceptions import GeometryConstructionError
from ..utils.geometry import Point2D, line_seg_intersects, subtract

# Number of evenly spaced samples used by the polygon segment test
POLYGON_SEGMENT_SAMPLES = 100


class Collision(ABC):
    """
    Capability shared by all obstacle shapes.

    Subclasses must implement is_collision(). is_collision_segment() may be
    overridden; the default never reports a blocked segment.
    """

    @abstractmethod
    def is_collision(self, pt: Point2D) -> bool:
        """Return True if the point lies in the obstacle."""

    def is_collision_segment(self, start: Point2D, end: Point2D) -> bool:
        """Return True if the segment start-end is blocked by the obstacle."""
        return False


@dataclass(frozen=True)
class CircleBounds(Collision):
    """
    Circular obstacle.

    Attributes:
        center_pt: Circle center (x, y)
        radius: Circle radius
    """
    center_pt: Point2D
    radius: float

    def is_collision(self, pt: Point2D) -> bool:
        dx = pt[0] - self.center_pt[0]
        dy = pt[1] - self.center_pt[1]
        return (dx * dx + dy * dy) <= (self.radius * self.radius)

    def is_collision_segment(self, start: Point2D, end: Point2D) -> bool:
        """
        Compare the center's distance to the line through start and end.

        The infinite line is used, not the bounded segment, so a segment
        that stops short of the circle but points at it is reported as
        blocked.
        """
        x1, y1 = start
        x2, y2 = end

        a = y2 - y1
        b = -(x2 - x1)
        c = y2 * (x2 - x1) - x2 * (y2 - y1)

        norm = math.sqrt(a * a + b * b)
        if norm == 0.0:
            # start == end: no line to measure against
            return self.is_collision(start)

        d = abs(a * self.center_pt[0] + b * self.center_pt[1] + c) / norm
        return d <= self.radius


@dataclass(frozen=True)
class RectangleBounds(Collision):
    """
    Axis-aligned rectangle described by its min / max corners.

    Planners use a RectangleBounds as their exploration area as well as an
    obstacle.

    Attributes:
        min_pt: (x_min, y_min)
        max_pt: (x_max, y_max)
    """
    min_pt: Point2D
    max_pt: Point2D

    def is_collision(self, pt: Point2D) -> bool:
        """
        Disjunction of the four bound comparisons.

        Note:
            This is true for nearly every point (any point right of x_min
            already satisfies it) and is not an "inside the box" test. Use
            contains() for that.
        """
        return (pt[0] > self.min_pt[0] or pt[0] < self.max_pt[0]
                or pt[1] > self.min_pt[1] or pt[1] < self.max_pt[1])

    def is_collision_segment(self, start: Point2D, end: Point2D) -> bool:
        """True if the segment crosses any of the four edges."""
        return any(line_seg_intersects(start, end, c0, c1)
                   for c0, c1 in self.edges())

    def contains(self, pt: Point2D) -> bool:
        """Inclusive point-in-box test."""
        return (self.min_pt[0] <= pt[0] <= self.max_pt[0]
                and self.min_pt[1] <= pt[1] <= self.max_pt[1])

    def corners(self) -> List[Point2D]:
        """Corners in counter-clockwise order starting at min_pt."""
        return [
            (self.min_pt[0], self.min_pt[1]),
            (self.max_pt[0], self.min_pt[1]),
            (self.max_pt[0], self.max_pt[1]),
            (self.min_pt[0], self.max_pt[1]),
        ]

    def edges(self) -> List[Tuple[Point2D, Point2D]]:
        corners = self.corners()
        return [(corners[i], corners[(i + 1) % 4]) for i in range(4)]

    @property
    def width(self) -> float:
        return self.max_pt[0] - self.min_pt[0]

    @property
    def height(self) -> float:
        return self.max_pt[1] - self.min_pt[1]


class ConvexPolygonBounds(Collision):
    """
    Convex polygon built from an arbitrary point set.

    The convex hull of the points is computed once at construction; its
    outward half-plane equations are used for the containment test.

    Attributes:
        points (List[Point2D]): Points as given by the caller
        vertices (np.ndarray): Hull vertices, counter-clockwise, shape (m, 2)
        equations (np.ndarray): Hull facets as rows [nx, ny, offset]

    Raises:
        GeometryConstructionError: Fewer than 3 points, or the points are
            degenerate (colinear / coincident) and have no 2D hull.

    Example:
        >>> square = ConvexPolygonBounds([(1, 1), (2, 1), (1, 2), (2, 2)])
        >>> square.is_collision((1.5, 1.5))
        True
    """

    def __init__(self, points: Iterable[Sequence[float]]):
        self.points: List[Point2D] = [(float(p[0]), float(p[1])) for p in points]
        if len(self.points) < 3:
            raise GeometryConstructionError(
                f"cannot build convex polygon from {len(self.points)} points "
                f"(need at least 3)")

        try:
            hull = ConvexHull(np.asarray(self.points, dtype=np.float64))
        except (QhullError, ValueError) as e:
            raise GeometryConstructionError(
                f"cannot build convex polygon from points {self.points}: {e}") from e

        self.vertices = hull.points[hull.vertices]
        self.equations = hull.equations

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]]) -> Optional["ConvexPolygonBounds"]:
        """Build a polygon, returning None instead of raising on bad input."""
        try:
            return cls(points)
        except GeometryConstructionError:
            return None

    def is_collision(self, pt: Point2D) -> bool:
        values = self.equations[:, :2] @ np.array([pt[0], pt[1]]) + self.equations[:, 2]
        return bool(np.all(values <= 0.0))

    def is_collision_segment(self, start: Point2D, end: Point2D) -> bool:
        """
        Test 100 evenly spaced points from start toward end.

        The end point itself is not sampled, and thin slivers of the polygon
        between two samples can be missed.
        """
        diff = np.array(subtract(end, start), dtype=np.float64)
        frac = np.arange(POLYGON_SEGMENT_SAMPLES) / POLYGON_SEGMENT_SAMPLES
        samples = np.array([start[0], start[1]], dtype=np.float64) + frac[:, None] * diff
        values = samples @ self.equations[:, :2].T + self.equations[:, 2]
        return bool(np.any(np.all(values <= 0.0, axis=1)))

    def __repr__(self) -> str:
        return f"ConvexPolygonBounds(points={self.points})"
