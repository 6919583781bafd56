"""
Node classes for tree-based path planning algorithms.

Nodes reference their parent by id rather than by object, so a tree is an
id-addressed collection of records and a node can be replaced in place
without touching its children.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from ..utils.geometry import Point2D, euclidean_distance


@dataclass(frozen=True)
class RRTNode:
    """
    Represents a node in the search tree.

    Attributes:
        id (int): Unique id, assigned in insertion order (root is 0)
        parent_id (Optional[int]): Id of the parent node (None for root)
        point (Point2D): Node position
        path (Tuple[Point2D, ...]): Edge from the parent's point to this point
    """
    id: int
    parent_id: Optional[int]
    point: Point2D
    path: Tuple[Point2D, ...] = field(default=(), repr=False)

    @classmethod
    def new(cls, pt: Point2D) -> "RRTNode":
        """Node with id 0, no parent and no path."""
        return cls(id=0, parent_id=None, point=(pt[0], pt[1]))

    def get_delta(self, other_node: "RRTNode") -> Tuple[float, float]:
        return (self.point[0] - other_node.point[0],
                self.point[1] - other_node.point[1])

    def distance_between(self, other_node: "RRTNode") -> float:
        """Distance between two nodes."""
        return euclidean_distance(self.get_delta(other_node))

    def distance_between_pos(self, pos: Point2D) -> float:
        """Distance between this node and a position tuple."""
        return euclidean_distance((self.point[0] - pos[0], self.point[1] - pos[1]))

    def angle_between(self, other_node: "RRTNode") -> float:
        """Heading of the vector from other_node to this node."""
        dx, dy = self.get_delta(other_node)
        return math.atan2(dy, dx)

    def get_nearest_node_index(self, node_list: Sequence["RRTNode"]) -> Optional[int]:
        """
        Index of the node in node_list closest to this node (linear scan).

        Returns:
            Index of the first closest node, None for an empty list
        """
        if not node_list:
            return None

        min_dist = math.inf
        min_ind = 0
        for idx, node in enumerate(node_list):
            dist = self.distance_between(node)
            if dist < min_dist:
                min_dist = dist
                min_ind = idx
        return min_ind


@dataclass(frozen=True)
class RRTStarNode(RRTNode):
    """
    RRT* node: a tree node plus its cost from the root.

    Attributes:
        cost (float): Path length from the root through the parent chain
    """
    cost: float = 0.0

    @classmethod
    def new(cls, pt: Point2D) -> "RRTStarNode":
        return cls(id=0, parent_id=None, point=(pt[0], pt[1]), cost=0.0)

    @classmethod
    def from_rrt_node(cls, node: RRTNode, cost: float) -> "RRTStarNode":
        return cls(id=node.id, parent_id=node.parent_id, point=node.point,
                   path=node.path, cost=cost)

    def as_rrt_node(self) -> RRTNode:
        """Drop the cost."""
        return RRTNode(id=self.id, parent_id=self.parent_id,
                       point=self.point, path=self.path)

    def __repr__(self) -> str:
        return (f"RRTStarNode(id={self.id}, parent_id={self.parent_id}, "
                f"point=({self.point[0]:.2f}, {self.point[1]:.2f}), cost={self.cost:.2f})")
