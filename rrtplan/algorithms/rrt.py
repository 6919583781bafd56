"""
RRT (Rapidly-exploring Random Tree) algorithm implementation.

RRT grows a tree from the start point by repeatedly sampling the
exploration area, extending the nearest tree node toward the sample, and
keeping the extension when it is collision-free.
"""

import logging
import math
import time
from enum import Enum
from typing import List, Optional, Sequence

from ..core.bounds import Collision, RectangleBounds
from ..core.node import RRTNode
from ..core.path import Path2D
from ..core.path_planner import PathPlanner
from ..exceptions import TreeInvariantError
from ..utils.geometry import Point2D

logger = logging.getLogger(__name__)


class PlannerStatus(Enum):
    EMPTY = "empty"
    GROWING = "growing"
    FOUND = "found"
    EXHAUSTED = "exhausted"


class RRTPlanner(PathPlanner):
    """
    RRT path planning algorithm.

    The tree is kept in node_list; a node's id is its position in the list.

    Attributes:
        node_list (List[RRTNode]): All nodes in the tree
        status (PlannerStatus): Progress of the current / last plan() call

    Example:
        >>> planner = RRTPlanner(
        ...     start=(0.0, 0.0), goal=(10.0, 0.0), obstacles=[],
        ...     expand_dis=1.0, path_resolution=0.25, goal_sample_rate=50,
        ...     max_iter=1000, explore_area=RectangleBounds((0, 0), (10, 10)),
        ...     seed=1)
        >>> path = planner.plan()
        >>> path[0], path[-1]
        ((10.0, 0.0), (0.0, 0.0))
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
        super().__init__(start, goal, obstacles, expand_dis, path_resolution,
                         goal_sample_rate, max_iter, explore_area, seed=seed)
        self.node_list: List[RRTNode] = []
        self.status = PlannerStatus.EMPTY

    @property
    def tree_size(self) -> int:
        return len(self.node_list)

    def get_random_node(self) -> RRTNode:
        """
        Draw a sample: the goal, or a uniform point in the exploration area.

        A uniform integer in [0, 100) strictly greater than goal_sample_rate
        selects the goal.
        """
        percent = int(self.rng.integers(0, 100))
        if percent > self.goal_sample_rate:
            return RRTNode.new(self.goal)

        area = self.explore_area
        x = float(self.rng.uniform(area.min_pt[0], area.max_pt[0]))
        y = float(self.rng.uniform(area.min_pt[1], area.max_pt[1]))
        return RRTNode.new((x, y))

    def steer(self,
              from_node: RRTNode,
              to_node: RRTNode,
              expand_dist: float,
              index: int) -> RRTNode:
        """
        Grow an edge from from_node toward to_node.

        The edge is at most expand_dist long and is subdivided into steps of
        path_resolution. If the last step ends within path_resolution of
        to_node, to_node's point is appended and becomes the new point.

        Args:
            from_node: Node the edge starts from (becomes the parent)
            to_node: Node to steer toward
            expand_dist: Maximum edge length
            index: Id for the new node

        Returns:
            New node whose path starts at from_node.point
        """
        dist = from_node.distance_between(to_node)
        theta = to_node.angle_between(from_node)

        extend_length = min(dist, expand_dist)
        n_expand = int(math.floor(extend_length / self.path_resolution))

        x, y = from_node.point
        path = [from_node.point]
        for _ in range(n_expand):
            x += self.path_resolution * math.cos(theta)
            y += self.path_resolution * math.sin(theta)
            path.append((x, y))

        point = (x, y)
        dx = point[0] - to_node.point[0]
        dy = point[1] - to_node.point[1]
        if math.hypot(dx, dy) <= self.path_resolution:
            path.append(to_node.point)
            point = to_node.point

        return RRTNode(id=index, parent_id=from_node.id, point=point, path=tuple(path))

    def _is_edge_collision(self, node: RRTNode) -> bool:
        if node.parent_id is None:
            return False
        parent = self.node_list[node.parent_id]
        return self.is_collision_segment(parent.point, node.point)

    def plan(self) -> Optional[Path2D]:
        """
        Build the RRT and return a path to the goal.

        Returns:
            Path from the goal back to the start (goal first), or None if
            max_iter iterations pass without reaching the goal
        """
        start_time = time.time()

        end_node = RRTNode.new(self.goal)
        self.node_list = [RRTNode.new(self.start)]
        self.nodes_explored = 0
        self.path = None
        self.status = PlannerStatus.GROWING
        logger.info("RRT planning from %s to %s (max_iter=%d)",
                    self.start, self.goal, self.max_iter)

        for _ in range(self.max_iter):
            rnd_node = self.get_random_node()
            self.nodes_explored += 1

            nearest_ind = rnd_node.get_nearest_node_index(self.node_list)
            nearest_node = self.node_list[nearest_ind]
            new_node = self.steer(nearest_node, rnd_node, self.expand_dis, len(self.node_list))

            if (self.explore_area.is_collision(new_node.point)
                    and not self.is_collision(new_node.point)
                    and not self._is_edge_collision(new_node)):
                self.node_list.append(new_node)

            last_node = self.node_list[-1]
            if last_node.distance_between_pos(self.goal) <= self.expand_dis:
                final_node = self.steer(last_node, end_node, self.expand_dis, len(self.node_list))
                self.node_list.append(final_node)
                self.status = PlannerStatus.FOUND
                break
        else:
            self.status = PlannerStatus.EXHAUSTED

        if self.status is PlannerStatus.FOUND:
            self.path = Path2D(self.get_path(self.node_list[-1]))
            logger.info("RRT found a path with %d waypoints after %d iterations",
                        len(self.path), self.nodes_explored)
        else:
            logger.info("RRT exhausted %d iterations without reaching the goal", self.max_iter)

        self.planning_time = time.time() - start_time
        return self.path

    def get_path(self, goal_node: RRTNode) -> List[Point2D]:
        """
        Follow parent ids from goal_node back to the root.

        Returns:
            [goal_node.point, ..., start]

        Raises:
            TreeInvariantError: The parent chain is longer than the tree
        """
        path = [goal_node.point]
        node = goal_node
        while node.parent_id is not None:
            if len(path) > len(self.node_list):
                raise TreeInvariantError(f"parent chain from node {goal_node.id} has a cycle")
            node = self.node_list[node.parent_id]
            path.append(node.point)
        return path
