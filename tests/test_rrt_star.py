"""tests/test_rrt_star.py - RRT* parent selection, rewiring and planning"""
import logging
import math

import pytest

from rrtplan.algorithms.rrt import PlannerStatus
from rrtplan.algorithms.rrt_star import RRTStarPlanner
from rrtplan.core.bounds import CircleBounds, RectangleBounds
from rrtplan.core.node import RRTNode, RRTStarNode
from rrtplan.core.path_tree import PathTree

AREA = RectangleBounds(min_pt=(-2.0, -6.0), max_pt=(12.0, 6.0))


def _planner(obstacles=(), **overrides):
    params = dict(
        start=(0.0, 0.0),
        goal=(10.0, 0.0),
        obstacles=list(obstacles),
        expand_dis=1.5,
        path_resolution=0.25,
        goal_sample_rate=50,
        max_iter=500,
        explore_area=AREA,
        connect_circle_dist=10.0,
        seed=5,
    )
    params.update(overrides)
    return RRTStarPlanner(**params)


def _tree(*nodes):
    tree = PathTree()
    for node in nodes:
        assert tree.add(node)
    return tree


def _assert_tree_consistent(planner):
    tree = planner.node_tree
    assert tree.ids() == list(range(len(tree)))
    root = tree.get(0)
    assert root.parent_id is None
    assert root.cost == 0.0
    for node in tree:
        # raises on a dangling parent or a cycle
        assert tree.get_path(node)[-1] == planner.start
        if node.parent_id is not None:
            parent = tree.get(node.parent_id)
            assert node.cost == pytest.approx(parent.cost + node.distance_between(parent))


class TestNeighbourhood:

    def test_find_near_nodes_radius(self):
        planner = _planner(expand_dis=1.0, connect_circle_dist=1.0)
        planner.node_tree = _tree(
            RRTStarNode.new((10.0, 10.0)),
            RRTStarNode(id=1, parent_id=0, point=(0.5, 0.0), cost=1.0),
            RRTStarNode(id=2, parent_id=0, point=(0.7, 0.0), cost=1.0),
        )
        # n = 4 -> r = sqrt(ln 4 / 4) ~ 0.589
        assert planner.find_near_nodes(RRTNode.new((0.0, 0.0))) == {1}

    def test_find_near_nodes_capped_by_expand_dis(self):
        planner = _planner(expand_dis=0.3, connect_circle_dist=100.0)
        planner.node_tree = _tree(
            RRTStarNode.new((0.0, 0.0)),
            RRTStarNode(id=1, parent_id=0, point=(0.5, 0.0), cost=0.5),
        )
        assert planner.find_near_nodes(RRTNode.new((0.1, 0.0))) == {0}

    def test_calc_new_cost(self):
        planner = _planner()
        parent = RRTStarNode(id=1, parent_id=0, point=(0.0, 2.0), cost=2.0)
        assert planner.calc_new_cost(parent, RRTNode.new((3.0, 6.0))) == pytest.approx(7.0)


class TestChooseParent:

    def _planner_with_tree(self, obstacles=()):
        planner = _planner(obstacles=obstacles, expand_dis=3.0, path_resolution=0.1)
        planner.node_tree = _tree(
            RRTStarNode.new((0.0, 0.0)),
            RRTStarNode(id=1, parent_id=0, point=(0.0, 2.0), cost=2.0),
        )
        return planner

    def test_picks_cheapest_neighbour(self):
        planner = self._planner_with_tree()
        candidate = RRTStarNode(id=2, parent_id=1, point=(1.0, 2.0), cost=3.0)
        chosen = planner.choose_parent(candidate, {0, 1}, 2)
        assert chosen is not None
        assert chosen.id == 2
        assert chosen.parent_id == 0
        assert chosen.point == (1.0, 2.0)
        assert chosen.cost == pytest.approx(math.sqrt(5.0))
        assert chosen.path[0] == (0.0, 0.0)

    def test_no_neighbours(self):
        planner = self._planner_with_tree()
        candidate = RRTStarNode(id=2, parent_id=1, point=(1.0, 2.0), cost=3.0)
        assert planner.choose_parent(candidate, set(), 2) is None

    def test_all_connections_blocked(self, block_all):
        planner = self._planner_with_tree(obstacles=[block_all])
        candidate = RRTStarNode(id=2, parent_id=1, point=(1.0, 2.0), cost=3.0)
        assert planner.choose_parent(candidate, {0, 1}, 2) is None


class TestRewire:

    @pytest.fixture
    def planner(self):
        planner = _planner(expand_dis=2.0, path_resolution=0.1)
        planner.node_tree = _tree(
            RRTStarNode.new((0.0, 0.0)),
            RRTStarNode(id=1, parent_id=0, point=(0.0, 2.0), cost=2.0),
            RRTStarNode(id=2, parent_id=1, point=(2.0, 2.0), cost=4.0),
            RRTStarNode(id=3, parent_id=2, point=(3.0, 2.0), cost=5.0),
            RRTStarNode(id=4, parent_id=0, point=(1.0, 1.0), cost=math.sqrt(2.0)),
        )
        return planner

    def test_rewire_and_propagate(self, planner):
        new_node = planner.node_tree.get(4)
        planner.rewire(new_node, {0, 1, 2})
        tree = planner.node_tree

        # root and the more expensive detour stay as they are
        assert tree.get(0).parent_id is None
        assert tree.get(1).parent_id == 0
        assert tree.get(1).cost == pytest.approx(2.0)

        n2 = tree.get(2)
        assert n2.parent_id == 4
        assert n2.point == (2.0, 2.0)
        assert n2.cost == pytest.approx(2.0 * math.sqrt(2.0))
        assert n2.path[0] == (1.0, 1.0)

        n3 = tree.get(3)
        assert n3.parent_id == 2
        assert n3.cost == pytest.approx(2.0 * math.sqrt(2.0) + 1.0)

    def test_blocked_rewire_keeps_tree(self, planner, block_all):
        planner._obstacles = [block_all]
        planner.rewire(planner.node_tree.get(4), {1, 2})
        assert planner.node_tree.get(2).parent_id == 1
        assert planner.node_tree.get(2).cost == pytest.approx(4.0)

    def test_propagate_cost_to_leaves(self, planner):
        tree = planner.node_tree
        tree.set(RRTStarNode(id=1, parent_id=0, point=(0.0, 2.0), cost=1.0))
        planner.propagate_cost_to_leaves(1)
        assert tree.get(2).cost == pytest.approx(3.0)
        assert tree.get(3).cost == pytest.approx(4.0)
        assert tree.get(4).cost == pytest.approx(math.sqrt(2.0))


class TestPlan:

    def test_early_stop_near_goal(self):
        planner = _planner(goal=(5.0, 0.0), goal_sample_rate=0)
        path = planner.plan()
        assert path is not None
        assert planner.status is PlannerStatus.FOUND
        assert planner.nodes_explored < planner.max_iter
        assert path[-1] == (0.0, 0.0)
        assert math.dist(path[0], (5.0, 0.0)) <= planner.expand_dis

    def test_tree_invariants_after_rewiring(self, wall):
        planner = _planner(obstacles=[wall], max_iter=600, search_until_max=True,
                           rebuild_every=16)
        planner.plan()
        assert planner.nodes_explored == 600
        assert planner.tree_size > 1
        _assert_tree_consistent(planner)

    def test_routes_around_wall(self, wall):
        planner = _planner(obstacles=[wall], max_iter=3000)
        path = planner.plan()
        assert path is not None
        assert planner.validate_path()
        assert path[-1] == (0.0, 0.0)
        _assert_tree_consistent(planner)

    def test_full_search_does_not_warn(self, caplog):
        # goal samples keep steering onto the goal node once it is in the tree
        planner = _planner(goal=(5.0, 0.0), max_iter=800, search_until_max=True)
        with caplog.at_level(logging.DEBUG, logger="rrtplan"):
            assert planner.plan() is not None
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert any("already indexed" in r.getMessage() for r in caplog.records)

    def test_goal_enclosed(self):
        planner = _planner(obstacles=[CircleBounds((10.0, 0.0), 2.0)], max_iter=300)
        assert planner.plan() is None
        assert planner.status is PlannerStatus.EXHAUSTED
        assert planner.get_path_length() == 0.0

    def test_same_seed_same_result(self, wall):
        kwargs = dict(obstacles=[wall], max_iter=300, search_until_max=True, seed=11)
        a, b = _planner(**kwargs), _planner(**kwargs)
        assert a.plan() == b.plan()
        assert a.tree_size == b.tree_size

    def test_negative_connect_circle_dist(self):
        with pytest.raises(ValueError):
            _planner(connect_circle_dist=-1.0)
