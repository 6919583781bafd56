"""
Abstract base class for tree-based path planners.

This module defines the capability every planner shares: access to the
obstacle list, point and segment collision checks derived from it, and a
plan() entrypoint that returns a path or None.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..utils.geometry import Point2D
from .bounds import Collision, RectangleBounds
from .path import Path2D

logger = logging.getLogger(__name__)


class PathPlanner(ABC):
    """
    Abstract base class for sampling-based path planners.

    Attributes:
        start (Point2D): Root of the search tree
        goal (Point2D): Point the tree grows toward
        obstacles (List[Collision]): Keep-out regions, read-only while planning
        expand_dis (float): Maximum edge length of a single steer
        path_resolution (float): Step length used to subdivide an edge
        goal_sample_rate (int): 0-100; a draw in [0, 100) above this value
            samples the goal, so lower values bias the search toward the goal
        max_iter (int): Maximum number of sampling iterations
        explore_area (RectangleBounds): Region random samples are drawn from
        rng (np.random.Generator): Planner-owned random generator
        path (Optional[Path2D]): Result of the last plan() call
        planning_time (float): Duration of the last plan() call (seconds)
        nodes_explored (int): Samples drawn during the last plan() call
    """

    def __init__(self,
                 start: Point2D,
                 goal: Point2D,
                 obstacles: Sequence[Collision],
                 expand_dis: float,
                 path_resolution: float,
                 goal_sample_rate: int,
                 max_iter: int,
                 explore_area: RectangleBounds,
                 seed: Optional[int] = None):
        """
        Initialize the planner.

        Raises:
            ValueError: If a hyperparameter is out of range
        """
        if expand_dis <= 0.0:
            raise ValueError(f"expand_dis must be positive, got {expand_dis}")
        if path_resolution <= 0.0:
            raise ValueError(f"path_resolution must be positive, got {path_resolution}")
        if not 0 <= goal_sample_rate <= 100:
            raise ValueError(f"goal_sample_rate must be in [0, 100], got {goal_sample_rate}")
        if max_iter < 0:
            raise ValueError(f"max_iter must be non-negative, got {max_iter}")

        self.start: Point2D = (float(start[0]), float(start[1]))
        self.goal: Point2D = (float(goal[0]), float(goal[1]))
        self._obstacles: List[Collision] = list(obstacles)
        self.expand_dis = float(expand_dis)
        self.path_resolution = float(path_resolution)
        self.goal_sample_rate = int(goal_sample_rate)
        self.max_iter = int(max_iter)
        self.explore_area = explore_area
        self.seed = seed
        self.rng = np.random.default_rng(seed)

        self.path: Optional[Path2D] = None
        self.planning_time: float = 0.0
        self.nodes_explored: int = 0

    @property
    def obstacles(self) -> List[Collision]:
        """Obstacles the planner avoids."""
        return self._obstacles

    def is_collision(self, point: Point2D) -> bool:
        """True if the point lies in any obstacle."""
        if not self._obstacles:
            return False
        return any(obs.is_collision(point) for obs in self._obstacles)

    def is_collision_segment(self, start: Point2D, end: Point2D) -> bool:
        """True if any obstacle blocks the segment start-end."""
        if not self._obstacles:
            return False
        return any(obs.is_collision_segment(start, end) for obs in self._obstacles)

    @abstractmethod
    def plan(self) -> Optional[Path2D]:
        """
        Grow the tree and extract a path.

        Returns:
            Path from the terminal node back to the start (terminal first),
            or None if no path was found
        """

    @property
    @abstractmethod
    def tree_size(self) -> int:
        """Number of nodes in the search tree."""

    def get_path_length(self) -> float:
        """Length of the last computed path, 0.0 if there is none."""
        if self.path is None:
            return 0.0
        return self.path.path_length()

    def validate_path(self) -> bool:
        """
        Check the last computed path against the obstacles.

        Returns:
            True if a path exists and no waypoint or segment collides
        """
        if self.path is None or len(self.path) < 2:
            return False

        for point in self.path:
            if self.is_collision(point):
                return False
        # paths run terminal first; test each edge in the direction it was grown
        for i in range(len(self.path) - 1):
            if self.is_collision_segment(self.path[i + 1], self.path[i]):
                return False
        return True

    def get_metrics(self) -> Dict[str, Any]:
        """
        Metrics from the last planning run.

        Returns:
            Dictionary with path_length, planning_time, nodes_explored,
            tree_size and path_exists
        """
        return {
            'algorithm': self.name,
            'path_length': self.get_path_length(),
            'planning_time': self.planning_time,
            'nodes_explored': self.nodes_explored,
            'tree_size': self.tree_size,
            'path_exists': self.path is not None,
        }

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(start={self.start}, goal={self.goal}, "
                f"obstacles={len(self._obstacles)}, expand_dis={self.expand_dis}, "
                f"max_iter={self.max_iter})")

    def __str__(self) -> str:
        status = "with path" if self.path else "no path"
        return f"{self.__class__.__name__} ({status})"
