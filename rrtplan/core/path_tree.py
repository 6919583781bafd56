"""
Spatial index for branching paths.

PathTree stores tree nodes in an id-ordered dictionary and indexes their
points for nearest-neighbour and radius queries. Queries go to a
scipy cKDTree snapshot plus a small buffer of points inserted since the
snapshot was built, which is scanned directly; the snapshot is rebuilt
once the buffer grows past ``rebuild_every`` entries.
"""

import logging
import math
from typing import Dict, Generic, Iterator, List, Optional, Set, Tuple, TypeVar, Union

import numpy as np
from scipy.spatial import cKDTree

from ..exceptions import TreeInvariantError
from ..utils.geometry import Point2D
from .node import RRTNode

logger = logging.getLogger(__name__)

NodeT = TypeVar("NodeT", bound=RRTNode)


def _as_point(query: Union[RRTNode, Point2D]) -> Point2D:
    if isinstance(query, RRTNode):
        return query.point
    return (float(query[0]), float(query[1]))


class PathTree(Generic[NodeT]):
    """
    Id-keyed node store kept in lock-step with a 2D point index.

    Every id in the record map has exactly one coordinate entry in the
    index and vice versa. Coordinates must be unique: a node whose point
    is already indexed is rejected.

    Attributes:
        rebuild_every (int): Buffered insertions before the KD-tree is rebuilt

    Example:
        >>> tree = PathTree()
        >>> tree.add(RRTNode.new((0.0, 0.0)))
        True
        >>> tree.get_nearest_node_index((0.4, 0.1))
        0
    """

    def __init__(self, rebuild_every: int = 64):
        self.rebuild_every = max(1, int(rebuild_every))
        self._nodes: Dict[int, NodeT] = {}
        self._coords: Dict[Point2D, int] = {}
        self._points: Dict[int, Point2D] = {}

        # KD-tree snapshot and the ids of its rows
        self._kdtree: Optional[cKDTree] = None
        self._kdtree_ids: List[int] = []
        # ids indexed after the snapshot was built
        self._pending: List[int] = []
        # ids whose coordinate was dropped but are still rows of the snapshot
        self._stale: Set[int] = set()

    # ------------------------------------------------------------------
    # record map
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: int) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[NodeT]:
        """Iterate over nodes in ascending id order."""
        for node_id in sorted(self._nodes):
            yield self._nodes[node_id]

    def ids(self) -> List[int]:
        return sorted(self._nodes)

    def values(self) -> List[NodeT]:
        return list(self)

    def get(self, index: int) -> Optional[NodeT]:
        return self._nodes.get(index)

    def last(self) -> Optional[NodeT]:
        """Node with the highest id, None if the tree is empty."""
        if not self._nodes:
            return None
        return self._nodes[max(self._nodes)]

    def points(self) -> np.ndarray:
        """Node points as an (n, 2) array in id order."""
        if not self._nodes:
            return np.empty((0, 2), dtype=np.float64)
        return np.array([node.point for node in self], dtype=np.float64)

    # ------------------------------------------------------------------
    # mutation
    # ------------------------------------------------------------------

    def add(self, node: NodeT) -> bool:
        """
        Register a node in both the index and the record map.

        Args:
            node: Node to insert

        Returns:
            True if inserted. False if the point is not finite, the
            coordinate is already indexed, or the id is taken; in that case
            nothing is registered.
        """
        point = (float(node.point[0]), float(node.point[1]))
        if not (math.isfinite(point[0]) and math.isfinite(point[1])):
            logger.warning("Rejected node %d: non-finite point %s", node.id, point)
            return False
        if node.id in self._nodes:
            logger.warning("Rejected node %d: id already present", node.id)
            return False
        if point in self._coords:
            # routine in RRT*: every goal sample after the first snaps onto the goal node
            logger.debug("Rejected node %d: point %s already indexed by node %d",
                         node.id, point, self._coords[point])
            return False

        self._index_point(node.id, point)
        self._nodes[node.id] = node
        return True

    def set(self, node: NodeT) -> bool:
        """
        Replace the record for node.id.

        If the node's coordinate differs from the indexed one, the stale
        entry is removed from the index before the new coordinate is added.
        Unknown ids are inserted as with add().

        Returns:
            True on success, False if the new coordinate is rejected
        """
        current = self._nodes.get(node.id)
        if current is None:
            return self.add(node)

        old_point = (float(current.point[0]), float(current.point[1]))
        new_point = (float(node.point[0]), float(node.point[1]))
        if new_point != old_point:
            owner = self._coords.get(new_point)
            if owner is not None or not (math.isfinite(new_point[0]) and math.isfinite(new_point[1])):
                logger.warning("Rejected update of node %d: point %s unavailable",
                               node.id, new_point)
                return False
            self._unindex_point(node.id, old_point)
            self._index_point(node.id, new_point)

        self._nodes[node.id] = node
        return True

    def _index_point(self, node_id: int, point: Point2D) -> None:
        self._coords[point] = node_id
        self._points[node_id] = point
        self._pending.append(node_id)
        if len(self._pending) >= self.rebuild_every:
            self._rebuild_kdtree()

    def _unindex_point(self, node_id: int, point: Point2D) -> None:
        del self._coords[point]
        del self._points[node_id]
        if node_id in self._pending:
            self._pending.remove(node_id)
        else:
            self._stale.add(node_id)

    def _rebuild_kdtree(self) -> None:
        ids = [node_id for node_id in self._kdtree_ids if node_id not in self._stale]
        ids.extend(self._pending)
        self._pending = []
        self._stale = set()
        # a re-indexed id can sit in both lists; keep its latest coordinate once
        ids = list(dict.fromkeys(ids))
        self._kdtree_ids = ids
        if ids:
            pts = np.array([self._points[node_id] for node_id in ids], dtype=np.float64)
            self._kdtree = cKDTree(pts)
        else:
            self._kdtree = None

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def _pending_points(self) -> Tuple[List[int], np.ndarray]:
        ids = list(self._pending)
        if not ids:
            return ids, np.empty((0, 2), dtype=np.float64)
        return ids, np.array([self._points[node_id] for node_id in ids], dtype=np.float64)

    def get_nearest_node_index(self, query: Union[RRTNode, Point2D]) -> Optional[int]:
        """
        Id of the node closest to query by squared Euclidean distance.

        Ties are broken by whichever candidate the search meets first.

        Returns:
            Node id, None if the tree is empty
        """
        if not self._nodes:
            return None

        target = np.asarray(_as_point(query), dtype=np.float64)
        best_id: Optional[int] = None
        best_dist = math.inf

        if self._kdtree is not None:
            k = min(len(self._kdtree_ids), len(self._stale) + 1)
            dists, rows = self._kdtree.query(target, k=k)
            for dist, row in zip(np.atleast_1d(dists), np.atleast_1d(rows)):
                node_id = self._kdtree_ids[int(row)]
                if node_id in self._stale:
                    continue
                if dist * dist < best_dist:
                    best_dist = float(dist * dist)
                    best_id = node_id
                break

        ids, pts = self._pending_points()
        if ids:
            d2 = np.sum((pts - target) ** 2, axis=1)
            i = int(np.argmin(d2))
            if d2[i] < best_dist:
                best_dist = float(d2[i])
                best_id = ids[i]

        return best_id

    def get_within(self, query: Union[RRTNode, Point2D], radius: float) -> Set[int]:
        """
        Ids of all nodes at Euclidean distance <= radius from query.

        Args:
            query: Node or point at the centre of the search
            radius: Search radius in distance units (not squared)
        """
        if not self._nodes or radius < 0.0:
            return set()

        target = np.asarray(_as_point(query), dtype=np.float64)
        found: Set[int] = set()

        if self._kdtree is not None:
            for row in self._kdtree.query_ball_point(target, radius):
                node_id = self._kdtree_ids[int(row)]
                if node_id not in self._stale:
                    found.add(node_id)

        ids, pts = self._pending_points()
        if ids:
            d2 = np.sum((pts - target) ** 2, axis=1)
            found.update(ids[i] for i in np.flatnonzero(d2 <= radius * radius))

        return found

    def get_path(self, goal_node: NodeT) -> List[Point2D]:
        """
        Points from goal_node back to the root, following parent ids.

        Returns:
            [goal_node.point, ..., root.point]

        Raises:
            TreeInvariantError: A parent id is missing or the chain loops
        """
        path = [goal_node.point]
        node = goal_node
        steps = 0
        while node.parent_id is not None:
            parent = self._nodes.get(node.parent_id)
            if parent is None:
                raise TreeInvariantError(
                    f"node {node.id} references missing parent {node.parent_id}")
            steps += 1
            if steps > len(self._nodes):
                raise TreeInvariantError(f"parent chain from node {goal_node.id} has a cycle")
            path.append(parent.point)
            node = parent
        return path

    def __repr__(self) -> str:
        return f"PathTree(nodes={len(self._nodes)})"
