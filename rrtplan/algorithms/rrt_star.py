"""
RRT* (Rapidly-exploring Random Tree Star) algorithm implementation.

RRT* is a sampling-based path planning algorithm that builds a tree by
randomly sampling the space and includes rewiring for asymptotic optimality.
"""

import logging
import math
import time
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..core.bounds import Collision, RectangleBounds
from ..core.node import RRTNode, RRTStarNode
from ..core.path import Path2D
from ..core.path_planner import PathPlanner
from ..core.path_tree import PathTree
from ..exceptions import TreeInvariantError
from ..utils.geometry import Point2D
from .rrt import PlannerStatus, RRTPlanner

logger = logging.getLogger(__name__)


class RRTStarPlanner(PathPlanner):
    """
    RRT* path planning algorithm.

    Sampling and steering are delegated to an inner RRTPlanner; the tree is
    a PathTree of RRTStarNode so neighbourhood queries are sub-linear.
    New nodes are connected to the cheapest collision-free neighbour and
    then used to rewire their neighbourhood.

    Attributes:
        rrt (RRTPlanner): Supplies get_random_node() and steer()
        connect_circle_dist (float): Scale of the shrinking neighbour radius
        search_until_max (bool): Run all max_iter iterations instead of
            stopping once a sample lands near the goal
        node_tree (PathTree[RRTStarNode]): The search tree
        status (PlannerStatus): Progress of the current / last plan() call
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
                 connect_circle_dist: float,
                 search_until_max: bool = False,
                 seed: Optional[int] = None,
                 rebuild_every: int = 64):
        super().__init__(start, goal, obstacles, expand_dis, path_resolution,
                         goal_sample_rate, max_iter, explore_area, seed=seed)
        if connect_circle_dist < 0.0:
            raise ValueError(f"connect_circle_dist must be non-negative, got {connect_circle_dist}")

        self.rrt = RRTPlanner(start, goal, obstacles, expand_dis, path_resolution,
                              goal_sample_rate, max_iter, explore_area)
        # one generator drives both planners so a seed reproduces the run
        self.rrt.rng = self.rng
        self.connect_circle_dist = float(connect_circle_dist)
        self.search_until_max = bool(search_until_max)
        self.rebuild_every = rebuild_every
        self.node_tree: PathTree[RRTStarNode] = PathTree(rebuild_every=rebuild_every)
        self.status = PlannerStatus.EMPTY

    @property
    def tree_size(self) -> int:
        return len(self.node_tree)

    def _steer(self, from_node: RRTNode, to_node: RRTNode, index: int) -> RRTNode:
        return self.rrt.steer(from_node, to_node, self.expand_dis, index)

    def _is_collision_parent(self, node: RRTNode) -> bool:
        """True if the edge from node's parent to node is blocked."""
        if node.parent_id is None:
            return False
        parent = self.node_tree.get(node.parent_id)
        return self.is_collision_segment(parent.point, node.point)

    def calc_new_cost(self, from_node: RRTStarNode, to_node: RRTNode) -> float:
        """Cost of reaching to_node through from_node."""
        return from_node.cost + to_node.distance_between(from_node)

    def find_near_nodes(self, new_node: RRTNode) -> Set[int]:
        """
        Ids of tree nodes inside the shrinking connection radius.

        r = min(expand_dis, connect_circle_dist * sqrt(ln(n) / n)), with n
        the tree size plus one.
        """
        n_nodes = len(self.node_tree) + 1
        r = self.connect_circle_dist * math.sqrt(math.log(n_nodes) / n_nodes)
        r = min(r, self.expand_dis)
        return self.node_tree.get_within(new_node, r)

    def choose_parent(self,
                      new_node: RRTStarNode,
                      near_inds: Iterable[int],
                      node_id: int) -> Optional[RRTStarNode]:
        """
        Reconnect new_node to its cheapest collision-free neighbour.

        Args:
            new_node: Candidate node (already steered from its nearest node)
            near_inds: Ids of neighbour candidates
            node_id: Id the new node will get

        Returns:
            New node re-steered from the best neighbour with its cost, or
            None if there are no neighbours or every connection collides
        """
        best_cost = math.inf
        best_edge: Optional[RRTNode] = None

        for idx in sorted(near_inds):
            near_node = self.node_tree.get(idx)
            t_node = self._steer(near_node, new_node, node_id)
            if self.is_collision(t_node.point) or self._is_collision_parent(t_node):
                continue
            cost = self.calc_new_cost(near_node, t_node)
            if cost < best_cost:
                best_cost = cost
                best_edge = t_node

        if best_edge is None:
            return None
        return RRTStarNode.from_rrt_node(best_edge, cost=best_cost)

    def rewire(self, new_node: RRTStarNode, near_inds: Iterable[int]) -> None:
        """
        Route neighbours through new_node where that is cheaper.

        A neighbour keeps its id and point; its parent, edge path and cost
        are replaced, and the cost change is pushed through its subtree.
        """
        for idx in sorted(near_inds):
            near_node = self.node_tree.get(idx)
            if near_node is None or near_node.parent_id is None or idx == new_node.id:
                continue

            edge_cost = self.calc_new_cost(new_node, near_node)
            if not edge_cost < near_node.cost:
                continue

            edge_node = self._steer(new_node, near_node, idx)
            if (self.is_collision(edge_node.point)
                    or self.is_collision_segment(new_node.point, edge_node.point)):
                continue

            self.node_tree.set(RRTStarNode(
                id=idx,
                parent_id=new_node.id,
                point=near_node.point,
                path=edge_node.path,
                cost=edge_cost,
            ))
            self.propagate_cost_to_leaves(idx)

    def propagate_cost_to_leaves(self, parent_id: int) -> None:
        """Recompute the cost of every node below parent_id."""
        children: Dict[int, List[int]] = defaultdict(list)
        for node in self.node_tree:
            if node.parent_id is not None:
                children[node.parent_id].append(node.id)

        stack = [parent_id]
        visited = 0
        while stack:
            pid = stack.pop()
            parent = self.node_tree.get(pid)
            for child_id in children.get(pid, ()):
                child = self.node_tree.get(child_id)
                self.node_tree.set(RRTStarNode.from_rrt_node(
                    child, cost=self.calc_new_cost(parent, child)))
                stack.append(child_id)
            visited += 1
            if visited > len(self.node_tree):
                raise TreeInvariantError(f"cycle below node {parent_id} during cost propagation")

    def search_best_goal_node(self) -> Optional[int]:
        """
        Cheapest tree node that can safely connect to the goal.

        Candidates are the nodes within expand_dis of the goal whose
        steered edge to the goal is collision-free.

        Returns:
            Node id, or None if no candidate qualifies
        """
        goal_node = RRTNode.new(self.goal)
        goal_inds = self.node_tree.get_within(goal_node, self.expand_dis)

        best_ind: Optional[int] = None
        best_cost = math.inf
        for idx in sorted(goal_inds):
            node = self.node_tree.get(idx)
            t_node = self._steer(node, goal_node, 0)
            if self.is_collision(t_node.point):
                continue
            if self.is_collision_segment(node.point, t_node.point):
                continue
            if node.cost < best_cost:
                best_cost = node.cost
                best_ind = idx
        return best_ind

    def plan(self) -> Optional[Path2D]:
        """
        Build the RRT* tree and return the cheapest path found.

        Returns:
            Path from the best node near the goal back to the start
            (terminal first), or None if no node can reach the goal
        """
        start_time = time.time()

        end_node = RRTNode.new(self.goal)
        self.node_tree = PathTree(rebuild_every=self.rebuild_every)
        self.node_tree.add(RRTStarNode.new(self.start))
        self.nodes_explored = 0
        self.path = None
        self.status = PlannerStatus.GROWING
        logger.info("RRT* planning from %s to %s (max_iter=%d, search_until_max=%s)",
                    self.start, self.goal, self.max_iter, self.search_until_max)

        push_idx = 1
        rewired_inserts = 0
        for _ in range(self.max_iter):
            rnd_node = self.rrt.get_random_node()
            self.nodes_explored += 1

            nearest_ind = self.node_tree.get_nearest_node_index(rnd_node)
            nearest_node = self.node_tree.get(nearest_ind)

            steered = self._steer(nearest_node, rnd_node, push_idx)
            new_node = RRTStarNode.from_rrt_node(
                steered, cost=self.calc_new_cost(nearest_node, steered))

            if not self.is_collision(new_node.point) and not self._is_collision_parent(new_node):
                near_inds = self.find_near_nodes(new_node)
                node_with_updated_parent = self.choose_parent(new_node, near_inds, push_idx)
                if node_with_updated_parent is not None:
                    new_node = node_with_updated_parent
                    rewired_inserts += 1

                if self.node_tree.add(new_node):
                    push_idx += 1
                    self.rewire(new_node, near_inds)

            if (not self.search_until_max
                    and new_node.distance_between(end_node) <= self.expand_dis):
                break

        last_index = self.search_best_goal_node()
        if last_index is not None:
            self.status = PlannerStatus.FOUND
            self.path = Path2D(self.node_tree.get_path(self.node_tree.get(last_index)))
            logger.info("RRT* found a path of length %.3f (%d nodes, %d iterations)",
                        self.node_tree.get(last_index).cost, len(self.node_tree),
                        self.nodes_explored)
        else:
            self.status = PlannerStatus.EXHAUSTED
            logger.info("RRT* found no collision-free goal connection after %d iterations",
                        self.nodes_explored)
        logger.debug("%d of %d inserted nodes took a cheaper neighbour as parent",
                     rewired_inserts, len(self.node_tree) - 1)

        self.planning_time = time.time() - start_time
        return self.path
