"""
Paths produced by the planners and post-processing on them.

A Path2D is an ordered list of waypoints. It supports length and
arclength interpolation, and randomized shortcut smoothing that replaces a
stretch of the path with a straight connector whenever no obstacle blocks
it.
"""

import json
import logging
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..utils.geometry import Point2D, euclidean_distance, subtract
from .bounds import Collision

logger = logging.getLogger(__name__)


class Path2D:
    """
    Ordered sequence of 2D waypoints.

    Attributes:
        points (List[Point2D]): Waypoints in order

    Example:
        >>> path = Path2D([(0, 0), (3, 4), (3, 10)])
        >>> path.path_length()
        11.0
    """

    def __init__(self, points: Iterable[Sequence[float]] = ()):
        self.points: List[Point2D] = [(float(p[0]), float(p[1])) for p in points]

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point2D]:
        return iter(self.points)

    def __getitem__(self, idx):
        return self.points[idx]

    def __eq__(self, other) -> bool:
        if isinstance(other, Path2D):
            return self.points == other.points
        return NotImplemented

    def path_length(self) -> float:
        """Sum of segment lengths; 0.0 for fewer than two points."""
        dist = 0.0
        for idx in range(len(self.points) - 1):
            dist += euclidean_distance(subtract(self.points[idx + 1], self.points[idx]))
        return dist

    def get_target_point(self, target: float) -> Tuple[Point2D, int]:
        """
        Point at arclength ``target`` along the path.

        Args:
            target: Arclength measured from the first point

        Returns:
            (point, index) where index is the start vertex of the segment
            holding the point. A target past the end gives the last point
            and the last segment.

        Raises:
            ZeroDivisionError: The segment holding the target has zero length
        """
        if len(self.points) < 2:
            raise ValueError("need at least two points to interpolate")

        travelled = 0.0
        for idx in range(len(self.points) - 1):
            p0 = self.points[idx]
            p1 = self.points[idx + 1]
            seg_length = euclidean_distance(subtract(p1, p0))
            if travelled + seg_length >= target:
                part_ratio = (target - travelled) / seg_length
                x = p0[0] + (p1[0] - p0[0]) * part_ratio
                y = p0[1] + (p1[1] - p0[1]) * part_ratio
                return (x, y), idx
            travelled += seg_length

        return self.points[-1], len(self.points) - 2

    def path_smoothing_obstacle(self,
                                obstacles: Sequence[Collision],
                                iterations: int,
                                rng: Optional[np.random.Generator] = None) -> "Path2D":
        """Shortcut-smoothed copy of this path, see path_smoothing_obstacle()."""
        return path_smoothing_obstacle(self, obstacles, iterations, rng=rng)

    def reversed(self) -> "Path2D":
        """Same waypoints in the opposite order."""
        return Path2D(self.points[::-1])

    def to_list(self) -> List[Point2D]:
        return list(self.points)

    def save(self, filename: str) -> None:
        """
        Save the path to a file.

        Supports multiple formats based on file extension:
        - .npy: NumPy binary format
        - .json: JSON object {"path": [[x, y], ...], "length": float}
        - .csv: Comma-separated values with an x,y header

        Raises:
            ValueError: If the file format is unsupported
        """
        if filename.endswith('.npy'):
            np.save(filename, np.array(self.points, dtype=np.float64).reshape(-1, 2))
        elif filename.endswith('.json'):
            with open(filename, 'w') as f:
                json.dump({
                    'path': [list(p) for p in self.points],
                    'length': self.path_length()
                }, f, indent=2)
        elif filename.endswith('.csv'):
            np.savetxt(filename, np.array(self.points, dtype=np.float64).reshape(-1, 2),
                       delimiter=',', header='x,y', comments='')
        else:
            raise ValueError(f"Unsupported file format: {filename}. "
                             f"Use .npy, .json, or .csv")

    @classmethod
    def load(cls, filename: str) -> "Path2D":
        """Load a path written by save()."""
        if filename.endswith('.npy'):
            return cls(np.load(filename).reshape(-1, 2).tolist())
        elif filename.endswith('.json'):
            with open(filename, 'r') as f:
                return cls(json.load(f)['path'])
        elif filename.endswith('.csv'):
            return cls(np.loadtxt(filename, delimiter=',', skiprows=1, ndmin=2).tolist())
        raise ValueError(f"Unsupported file format: {filename}")

    def __repr__(self) -> str:
        return f"Path2D(points={len(self.points)}, length={self.path_length():.2f})"


def _is_segment_blocked(obstacles: Sequence[Collision], p0: Point2D, p1: Point2D) -> bool:
    return any(obs.is_collision_segment(p0, p1) for obs in obstacles)


def path_smoothing_obstacle(path: Sequence[Sequence[float]],
                            obstacles: Sequence[Collision],
                            iterations: int,
                            rng: Optional[np.random.Generator] = None) -> Path2D:
    """
    Randomized shortcut smoothing.

    Each iteration picks two arclengths uniformly in [0, length), maps them
    to points on the path and, if no obstacle's segment test blocks the
    straight connector, replaces everything between them with the
    connector. All iterations run; there is no early exit.

    A trial is skipped when either point falls on the first segment, both
    fall on the same segment, or the second segment index is out of range.

    Args:
        path: Path2D or sequence of (x, y) waypoints
        obstacles: Obstacles whose is_collision_segment() guards connectors
        iterations: Number of shortcut trials
        rng: Random generator (a fresh unseeded one if None)

    Returns:
        New Path2D, never longer than the input

    Example:
        >>> smooth = path_smoothing_obstacle(path, obstacles, 1000,
        ...                                  rng=np.random.default_rng(0))
    """
    rng = rng if rng is not None else np.random.default_rng()
    result = Path2D(path)
    if len(result) < 3:
        return result

    length = result.path_length()
    shortcuts = 0

    for _ in range(iterations):
        if length <= 0.0:
            break
        picks = sorted(rng.uniform(0.0, length, size=2))
        first, first_idx = result.get_target_point(picks[0])
        second, second_idx = result.get_target_point(picks[1])

        if first_idx <= 0 or second_idx <= 0:
            continue
        if second_idx + 1 > len(result):
            continue
        if second_idx == first_idx:
            continue
        if _is_segment_blocked(obstacles, first, second):
            continue

        points = result.points
        result = Path2D(points[:first_idx + 1] + [first, second] + points[second_idx + 1:])
        length = result.path_length()
        shortcuts += 1

    logger.debug("Shortcut smoothing applied %d of %d trials", shortcuts, iterations)
    return result
