"""
rrtplan - sampling-based motion planning in 2D.

RRT and RRT* planners growing a tree from a start point toward a goal
while avoiding circle, rectangle and convex polygon obstacles, plus
shortcut smoothing of the resulting paths.

Modules:
    core.bounds: Obstacle shapes and the Collision capability
    core.node: Tree node records
    core.path_tree: KD-tree backed node store
    core.path: Paths and shortcut smoothing
    algorithms.rrt: RRT planner
    algorithms.rrt_star: RRT* planner
"""

import logging

from .algorithms.rrt import PlannerStatus, RRTPlanner
from .algorithms.rrt_star import RRTStarPlanner
from .core.bounds import CircleBounds, Collision, ConvexPolygonBounds, RectangleBounds
from .core.node import RRTNode, RRTStarNode
from .core.path import Path2D, path_smoothing_obstacle
from .core.path_planner import PathPlanner
from .core.path_tree import PathTree
from .exceptions import ConfigError, GeometryConstructionError, RrtPlanError, TreeInvariantError

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CircleBounds",
    "Collision",
    "ConfigError",
    "ConvexPolygonBounds",
    "GeometryConstructionError",
    "Path2D",
    "PathPlanner",
    "PathTree",
    "PlannerStatus",
    "RRTNode",
    "RRTPlanner",
    "RRTStarNode",
    "RRTStarPlanner",
    "RectangleBounds",
    "RrtPlanError",
    "TreeInvariantError",
    "path_smoothing_obstacle",
]
