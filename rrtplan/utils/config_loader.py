"""
YAML configuration file loader for the RRT planners.

This module provides utilities to load scenario and algorithm YAML files
and to build obstacles and planners from them.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..algorithms.rrt import RRTPlanner
from ..algorithms.rrt_star import RRTStarPlanner
from ..core.bounds import CircleBounds, Collision, ConvexPolygonBounds, RectangleBounds
from ..core.path_planner import PathPlanner
from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

ALGORITHMS = ('rrt', 'rrt_star')


def load_yaml_config(filepath: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filepath: Path to YAML file

    Returns:
        Dictionary containing configuration parameters

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If file is not valid YAML

    Example:
        >>> config = load_yaml_config('configs/environment.yaml')
        >>> print(config['environment']['explore_area'])
        {'min': [0.0, 0.0], 'max': [10.0, 10.0]}
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, 'r') as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML file {filepath}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Top level of {filepath} must be a mapping")
    return config


def load_environment_config(config_dir: str = 'configs') -> Dict[str, Any]:
    """
    Load the planning scenario from ``environment.yaml``.

    Args:
        config_dir: Directory containing config files (default: 'configs')

    Returns:
        Dictionary with scenario parameters:
        - explore_area: {min: [x, y], max: [x, y]}
        - start_point: {x, y}
        - goal_point: {x, y}
        - obstacles: List of {type, ...}
    """
    config_path = Path(config_dir) / 'environment.yaml'
    config = load_yaml_config(str(config_path))
    return config.get('environment', {})


def load_algorithm_config(algorithm_name: str, config_dir: str = 'configs') -> Dict[str, Any]:
    """
    Load algorithm-specific configuration from ``<algorithm_name>.yaml``.

    Args:
        algorithm_name: Name of algorithm ('rrt', 'rrt_star')
        config_dir: Directory containing config files (default: 'configs')

    Returns:
        Dictionary with algorithm-specific parameters

    Raises:
        FileNotFoundError: If algorithm config file doesn't exist
    """
    config_path = Path(config_dir) / f'{algorithm_name}.yaml'
    config = load_yaml_config(str(config_path))
    return config.get('algorithm', {})


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge multiple configuration dictionaries.

    Later dictionaries override earlier ones for conflicting keys.

    Example:
        >>> merge_configs({'a': 1, 'b': 2}, {'b': 3, 'c': 4})
        {'a': 1, 'b': 3, 'c': 4}
    """
    merged = {}
    for config in configs:
        merged.update(config)
    return merged


def _point(value: Any, what: str):
    if isinstance(value, dict):
        try:
            return (float(value['x']), float(value['y']))
        except KeyError as e:
            raise ConfigError(f"{what} is missing key {e}") from e
    try:
        x, y = value
        return (float(x), float(y))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{what} must be [x, y] or {{x, y}}, got {value!r}") from e


def _require(mapping: Dict[str, Any], key: str, what: str) -> Any:
    if key not in mapping:
        raise ConfigError(f"{what} is missing required key '{key}'")
    return mapping[key]


def create_obstacle_from_config(obs_config: Dict[str, Any]) -> Collision:
    """
    Build one obstacle from its configuration.

    Supported types:
        circle:    {type: circle, center: [x, y], radius: r}
        rectangle: {type: rectangle, min: [x, y], max: [x, y]}
        polygon:   {type: polygon, points: [[x, y], ...]}

    Raises:
        ConfigError: Unknown type or missing keys
        GeometryConstructionError: Polygon points do not form a convex polygon
    """
    obs_type = str(_require(obs_config, 'type', 'obstacle')).lower()

    if obs_type == 'circle':
        return CircleBounds(
            center_pt=_point(_require(obs_config, 'center', 'circle'), 'circle center'),
            radius=float(_require(obs_config, 'radius', 'circle')),
        )
    if obs_type == 'rectangle':
        return RectangleBounds(
            min_pt=_point(_require(obs_config, 'min', 'rectangle'), 'rectangle min'),
            max_pt=_point(_require(obs_config, 'max', 'rectangle'), 'rectangle max'),
        )
    if obs_type == 'polygon':
        points = [_point(p, 'polygon point') for p in _require(obs_config, 'points', 'polygon')]
        return ConvexPolygonBounds(points)

    raise ConfigError(f"Unknown obstacle type '{obs_type}'. "
                      f"Use circle, rectangle, or polygon")


def create_obstacles_from_config(env_config: Dict[str, Any]) -> List[Collision]:
    """Build every obstacle listed under ``obstacles`` (may be absent)."""
    return [create_obstacle_from_config(obs) for obs in env_config.get('obstacles') or []]


def create_explore_area_from_config(env_config: Dict[str, Any]) -> RectangleBounds:
    area = _require(env_config, 'explore_area', 'environment')
    return RectangleBounds(
        min_pt=_point(_require(area, 'min', 'explore_area'), 'explore_area min'),
        max_pt=_point(_require(area, 'max', 'explore_area'), 'explore_area max'),
    )


def create_planner_from_config(algorithm_name: str,
                               env_config: Dict[str, Any],
                               alg_config: Dict[str, Any],
                               seed: Optional[int] = None) -> PathPlanner:
    """
    Create a planner from scenario and algorithm configuration.

    Args:
        algorithm_name: 'rrt' or 'rrt_star'
        env_config: Scenario mapping (see load_environment_config)
        alg_config: Algorithm mapping with a ``parameters`` section
        seed: Overrides ``parameters.random_seed`` when given

    Returns:
        Configured planner, ready for plan()

    Raises:
        ConfigError: Unknown algorithm or missing keys
    """
    if algorithm_name not in ALGORITHMS:
        raise ConfigError(f"Unknown algorithm '{algorithm_name}'. "
                          f"Available algorithms: {', '.join(ALGORITHMS)}")

    params = alg_config.get('parameters', {}) or {}
    common = dict(
        start=_point(_require(env_config, 'start_point', 'environment'), 'start_point'),
        goal=_point(_require(env_config, 'goal_point', 'environment'), 'goal_point'),
        obstacles=create_obstacles_from_config(env_config),
        expand_dis=float(params.get('expand_dis', 1.0)),
        path_resolution=float(params.get('path_resolution', 0.25)),
        goal_sample_rate=int(params.get('goal_sample_rate', 80)),
        max_iter=int(params.get('max_iter', 1000)),
        explore_area=create_explore_area_from_config(env_config),
        seed=seed if seed is not None else params.get('random_seed'),
    )
    logger.debug("Building %s with %s", algorithm_name, params)

    if algorithm_name == 'rrt':
        return RRTPlanner(**common)
    return RRTStarPlanner(
        connect_circle_dist=float(params.get('connect_circle_dist', 10.0)),
        search_until_max=bool(params.get('search_until_max', False)),
        **common,
    )
