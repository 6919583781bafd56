"""
Visualization utilities for the RRT planners.

This module provides matplotlib drawing functions for obstacles, search
trees and paths.
"""

from typing import Iterable, Optional, Sequence

import matplotlib.patches as patches
import matplotlib.pyplot as plt

from ..core.bounds import CircleBounds, Collision, ConvexPolygonBounds, RectangleBounds
from ..core.node import RRTNode
from ..utils.geometry import Point2D


def draw_obstacles(ax, obstacles: Sequence[Collision], color: str = 'grey'):
    """
    Draw circle, rectangle and convex polygon obstacles as patches.

    Obstacles of other types are skipped.

    Example:
        >>> fig, ax = plt.subplots()
        >>> draw_obstacles(ax, [CircleBounds((5, 5), 2.5)])
    """
    for obs in obstacles:
        if isinstance(obs, CircleBounds):
            patch = patches.Circle(obs.center_pt, obs.radius)
        elif isinstance(obs, RectangleBounds):
            patch = patches.Rectangle(obs.min_pt, obs.width, obs.height)
        elif isinstance(obs, ConvexPolygonBounds):
            patch = patches.Polygon(obs.vertices, closed=True)
        else:
            continue
        patch.set_facecolor(color)
        patch.set_edgecolor('black')
        patch.set_linewidth(1.5)
        patch.set_zorder(1)
        ax.add_patch(patch)


def draw_tree(ax, nodes: Iterable[RRTNode], color: str = 'blue', alpha: float = 0.3):
    """Draw every node's edge path from its parent."""
    for node in nodes:
        if node.parent_id is None or len(node.path) < 2:
            continue
        xs, ys = zip(*node.path)
        ax.plot(xs, ys, color=color, linewidth=0.5, alpha=alpha, zorder=2)


def draw_path(ax,
              path: Optional[Sequence[Point2D]],
              color: str = 'green',
              label: str = "Path",
              linestyle: str = '-'):
    """Draw a waypoint sequence as a polyline."""
    if not path:
        return
    xs, ys = zip(*path)
    ax.plot(xs, ys, color=color, linewidth=2, linestyle=linestyle,
            label=label, zorder=3, marker='o', markersize=3)


def setup_plot_limits(ax, x_min: float, x_max: float, y_min: float, y_max: float, margin: float = 1.0):
    """
    Set plot axis limits with optional margin.

    Args:
        ax: Matplotlib axis
        x_min: Minimum x value
        x_max: Maximum x value
        y_min: Minimum y value
        y_max: Maximum y value
        margin: Additional margin around boundaries (default: 1.0)
    """
    ax.set_xlim(x_min - margin, x_max + margin)
    ax.set_ylim(y_min - margin, y_max + margin)


def plot_result(planner,
                smooth_path: Optional[Sequence[Point2D]] = None,
                show_tree: bool = True,
                ax=None):
    """
    Draw a planner's obstacles, tree, path and (optionally) a smoothed path.

    Args:
        planner: RRTPlanner or RRTStarPlanner after plan()
        smooth_path: Post-processed path to overlay
        show_tree: Whether to draw the full tree
        ax: Axis to draw on (a new figure is created if None)

    Returns:
        The matplotlib axis
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 8))

    draw_obstacles(ax, planner.obstacles)
    if show_tree:
        nodes = planner.node_tree if hasattr(planner, 'node_tree') else planner.node_list
        draw_tree(ax, nodes)
    draw_path(ax, planner.path, color='green', label=f"{planner.name} path")
    draw_path(ax, smooth_path, color='magenta', label="Smoothed path", linestyle='--')

    ax.scatter(*planner.start, color='green', s=100, marker='o',
               label="Start", zorder=10, edgecolors='black', linewidths=1.5)
    ax.scatter(*planner.goal, color='red', s=100, marker='*',
               label="Goal", zorder=10, edgecolors='black', linewidths=1.5)

    area = planner.explore_area
    setup_plot_limits(ax, area.min_pt[0], area.max_pt[0], area.min_pt[1], area.max_pt[1])
    ax.set_xlabel("X Position")
    ax.set_ylabel("Y Position")
    ax.set_aspect('equal', adjustable='box')
    ax.grid(True, alpha=0.3)
    ax.legend(loc='best')
    ax.set_title(f"{planner.name}\n"
                 f"Length: {planner.get_path_length():.2f}, "
                 f"Time: {planner.planning_time:.3f}s, "
                 f"Nodes: {planner.tree_size}")
    return ax
