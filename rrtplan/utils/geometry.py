"""
Geometric utility functions for path planning.

This module provides the point arithmetic and line segment intersection
test shared by the obstacle shapes, the tree nodes and path smoothing.
"""

import math
from typing import Tuple

Point2D = Tuple[float, float]


def euclidean_distance(pt: Point2D) -> float:
    """
    Euclidean norm of a vector (distance of the point to the origin).

    Args:
        pt: Vector (x, y)

    Returns:
        sqrt(x^2 + y^2)

    Example:
        >>> euclidean_distance((3.0, 4.0))
        5.0
    """
    return math.sqrt(pt[0] * pt[0] + pt[1] * pt[1])


def subtract(pt0: Point2D, pt1: Point2D) -> Point2D:
    """Component-wise difference pt0 - pt1."""
    return (pt0[0] - pt1[0], pt0[1] - pt1[1])


def cross(a: Point2D, b: Point2D) -> float:
    """Z component of the cross product of two 2D vectors."""
    return a[0] * b[1] - a[1] * b[0]


def line_seg_intersects(a1: Point2D,
                        a2: Point2D,
                        b1: Point2D,
                        b2: Point2D) -> bool:
    """
    Test if line segment a1-a2 intersects with line segment b1-b2.

    Both segments are parametrised (a1 + t*(a2-a1), b1 + u*(b2-b1)) and
    solved with cross products. They intersect when both parameters lie
    in [0, 1].

    Args:
        a1: Start of first line segment (x, y)
        a2: End of first line segment (x, y)
        b1: Start of second line segment (x, y)
        b2: End of second line segment (x, y)

    Returns:
        True if the segments intersect, False otherwise

    Examples:
        >>> line_seg_intersects((0, 0), (2, 2), (0, 2), (2, 0))
        True
        >>> line_seg_intersects((0, 0), (1, 0), (0, 1), (1, 1))
        False

    Note:
        Parallel and colinear segments (zero cross product) are always
        reported as non-intersecting, even when they overlap.
    """
    b = subtract(a2, a1)
    d = subtract(b2, b1)
    b_cross_d = cross(b, d)

    if b_cross_d == 0.0:
        return False

    c = subtract(b1, a1)
    t = cross(c, d) / b_cross_d
    if t < 0.0 or t > 1.0:
        return False

    u = cross(c, b) / b_cross_d
    if u < 0.0 or u > 1.0:
        return False

    return True
