"""tests/test_rrt.py - RRT sampling, steering and planning"""
import pytest

from rrtplan.algorithms.rrt import PlannerStatus, RRTPlanner
from rrtplan.core.bounds import CircleBounds, RectangleBounds
from rrtplan.core.node import RRTNode

AREA = RectangleBounds(min_pt=(-2.0, -6.0), max_pt=(12.0, 6.0))


def _planner(obstacles=(), **overrides):
    params = dict(
        start=(0.0, 0.0),
        goal=(10.0, 0.0),
        obstacles=list(obstacles),
        expand_dis=1.0,
        path_resolution=0.25,
        goal_sample_rate=50,
        max_iter=2000,
        explore_area=AREA,
        seed=1,
    )
    params.update(overrides)
    return RRTPlanner(**params)


class TestSteer:

    def test_limited_by_expand_dis(self):
        planner = _planner()
        node = planner.steer(RRTNode.new((0.0, 0.0)), RRTNode.new((10.0, 0.0)), 1.0, 1)
        assert node.id == 1
        assert node.parent_id == 0
        assert node.point == pytest.approx((1.0, 0.0))
        assert len(node.path) == 5
        assert node.path[0] == (0.0, 0.0)

    def test_snaps_to_target_within_resolution(self):
        planner = _planner()
        node = planner.steer(RRTNode.new((0.0, 0.0)), RRTNode.new((1.1, 0.0)), 1.0, 3)
        assert node.point == (1.1, 0.0)
        assert node.path[-1] == (1.1, 0.0)
        assert len(node.path) == 6

    def test_short_steer_snaps(self):
        planner = _planner()
        node = planner.steer(RRTNode.new((0.0, 0.0)), RRTNode.new((0.1, 0.0)), 1.0, 1)
        assert node.point == (0.1, 0.0)
        assert node.path == ((0.0, 0.0), (0.1, 0.0))

    def test_no_snap_when_target_out_of_reach(self):
        planner = _planner()
        node = planner.steer(RRTNode.new((0.0, 0.0)), RRTNode.new((0.9, 0.0)), 0.5, 1)
        assert node.point == pytest.approx((0.5, 0.0))
        assert len(node.path) == 3

    def test_edge_steps_are_resolution_apart(self):
        planner = _planner(path_resolution=0.1)
        node = planner.steer(RRTNode.new((1.0, 1.0)), RRTNode.new((1.0, 5.0)), 1.0, 1)
        for a, b in zip(node.path, node.path[1:]):
            assert b[1] - a[1] == pytest.approx(0.1)


class TestSampling:

    def test_rate_100_never_samples_goal(self):
        planner = _planner(goal_sample_rate=100)
        for _ in range(200):
            pt = planner.get_random_node().point
            assert pt != planner.goal
            assert AREA.contains(pt)

    def test_rate_0_mostly_samples_goal(self):
        planner = _planner(goal_sample_rate=0)
        hits = sum(planner.get_random_node().point == planner.goal for _ in range(200))
        assert hits >= 180

    def test_same_seed_same_samples(self):
        a, b = _planner(seed=9), _planner(seed=9)
        assert [a.get_random_node().point for _ in range(20)] == \
            [b.get_random_node().point for _ in range(20)]


class TestPlan:

    def test_open_space(self):
        planner = _planner()
        path = planner.plan()
        assert path is not None
        assert planner.status is PlannerStatus.FOUND
        assert path[0] == (10.0, 0.0)
        assert path[-1] == (0.0, 0.0)
        assert planner.nodes_explored <= planner.max_iter

    def test_tree_structure(self):
        planner = _planner()
        planner.plan()
        root = planner.node_list[0]
        assert root.parent_id is None
        assert root.point == planner.start
        for idx, node in enumerate(planner.node_list):
            assert node.id == idx
            if idx > 0:
                assert 0 <= node.parent_id < idx

    def test_goal_enclosed(self):
        planner = _planner(obstacles=[CircleBounds((10.0, 0.0), 2.0)], max_iter=300)
        assert planner.plan() is None
        assert planner.status is PlannerStatus.EXHAUSTED
        assert planner.nodes_explored == 300
        assert not planner.get_metrics()['path_exists']

    def test_zero_iterations(self):
        planner = _planner(max_iter=0)
        assert planner.plan() is None
        assert planner.tree_size == 1

    def test_routes_around_wall(self, wall):
        planner = _planner(obstacles=[wall], max_iter=5000, seed=3)
        path = planner.plan()
        assert path is not None
        assert planner.validate_path()
        assert path.path_length() > 10.0

    def test_metrics(self):
        planner = _planner()
        planner.plan()
        metrics = planner.get_metrics()
        assert metrics['algorithm'] == 'RRTPlanner'
        assert metrics['tree_size'] == len(planner.node_list)
        assert metrics['path_length'] == pytest.approx(planner.path.path_length())

    @pytest.mark.parametrize("overrides", [
        {'expand_dis': 0.0},
        {'path_resolution': -1.0},
        {'goal_sample_rate': 101},
        {'max_iter': -1},
    ])
    def test_invalid_parameters(self, overrides):
        with pytest.raises(ValueError):
            _planner(**overrides)
