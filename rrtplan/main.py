"""
Command-line entry point for the RRT planners.

Runs RRT or RRT* on a YAML-described scenario, optionally smooths the
result and plots or saves it.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.path import path_smoothing_obstacle
from .utils.config_loader import (
    ALGORITHMS,
    create_planner_from_config,
    load_algorithm_config,
    load_environment_config,
)

logger = logging.getLogger(__name__)


def run_planner(algorithm_name: str,
                config_dir: str = 'configs',
                seed: Optional[int] = None,
                smooth_iterations: int = 0,
                visualize: bool = True,
                save_dir: Optional[str] = None) -> int:
    """
    Run a planner on the scenario in config_dir.

    Args:
        algorithm_name: 'rrt' or 'rrt_star'
        config_dir: Directory holding environment.yaml and <algorithm>.yaml
        seed: Random seed overriding the algorithm config
        smooth_iterations: Shortcut smoothing trials (0 disables smoothing)
        visualize: Whether to show the matplotlib figure
        save_dir: Directory for path.json / smoothed_path.json / path_plot.png

    Returns:
        Process exit status: 0 if a path was found, 1 otherwise
    """
    print(f"\n{'='*60}")
    print(f"Running {algorithm_name.upper()} Path Planning Algorithm")
    print(f"{'='*60}\n")

    env_config = load_environment_config(config_dir)
    alg_config = load_algorithm_config(algorithm_name, config_dir)
    planner = create_planner_from_config(algorithm_name, env_config, alg_config, seed=seed)
    print(f"Planner: {planner!r}")

    path = planner.plan()

    print("\n" + "="*60)
    print("Results:")
    print("="*60)
    for key, value in planner.get_metrics().items():
        print(f"  {key}: {value}")
    print("="*60 + "\n")

    if path is None:
        print("No path found!")
        return 1

    print(f"Path found with {len(path)} waypoints")

    smooth_path = None
    if smooth_iterations > 0:
        smooth_path = path_smoothing_obstacle(path, planner.obstacles, smooth_iterations,
                                              rng=planner.rng)
        print(f"Smoothed path: {len(smooth_path)} waypoints, "
              f"length {smooth_path.path_length():.3f} (was {path.path_length():.3f})")

    if save_dir is not None:
        out = Path(save_dir)
        out.mkdir(parents=True, exist_ok=True)
        path.save(str(out / 'path.json'))
        print(f"Path data saved to: {out / 'path.json'}")
        if smooth_path is not None:
            smooth_path.save(str(out / 'smoothed_path.json'))

    if visualize or save_dir is not None:
        import matplotlib
        if not visualize:
            matplotlib.use('Agg')
        import matplotlib.pyplot as plt
        from .utils.visualization import plot_result

        fig, ax = plt.subplots(figsize=(8, 8))
        plot_result(planner, smooth_path=smooth_path, ax=ax)
        plt.tight_layout()
        if save_dir is not None:
            plot_file = Path(save_dir) / 'path_plot.png'
            plt.savefig(plot_file, dpi=150, bbox_inches='tight')
            print(f"Plot saved to: {plot_file}")
        if visualize:
            plt.show()
        plt.close(fig)

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='RRT / RRT* path planning in 2D',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run RRT on configs/environment.yaml
  rrtplan --algorithm rrt

  # Run RRT* with a fixed seed, smooth the path and save the results
  rrtplan --algorithm rrt_star --seed 7 --smooth 500 --save outputs/rrt_star

  # Use custom config directory without a plot window
  rrtplan -a rrt -c ../my_configs --no-viz
        """
    )

    parser.add_argument(
        '--algorithm', '-a',
        type=str,
        choices=list(ALGORITHMS),
        required=True,
        help='Path planning algorithm to use'
    )
    parser.add_argument(
        '--config-dir', '-c',
        type=str,
        default='configs',
        help='Directory containing YAML configuration files (default: configs)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed (overrides random_seed in the algorithm config)'
    )
    parser.add_argument(
        '--smooth',
        type=int,
        default=0,
        metavar='N',
        help='Apply N iterations of shortcut smoothing to the path'
    )
    parser.add_argument(
        '--save', '-s',
        type=str,
        default=None,
        metavar='DIR',
        help='Save path JSON and plot to DIR'
    )
    parser.add_argument(
        '--no-viz',
        action='store_true',
        help='Disable visualization'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with command-line argument parsing."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    return run_planner(
        algorithm_name=args.algorithm,
        config_dir=args.config_dir,
        seed=args.seed,
        smooth_iterations=args.smooth,
        visualize=not args.no_viz,
        save_dir=args.save,
    )


if __name__ == '__main__':
    sys.exit(main())
