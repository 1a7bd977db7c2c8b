#!/usr/bin/env python3
"""
Command Line Fleet Planner
Uses shared fleet services to assign truck trips from a transfer station to landfills
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from typing import List, Optional

# Add project root for flat module imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fleet_services import FleetDataManager, FleetOptimizer, FleetFormatter
from ga_common_imports import ConfigurationError, DataUnavailableError, GAError, setup_logging
from ga_config_manager import GAConfigManager
from ga_visualizer import GAVisualizer

DEFAULT_DATA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "sample_fleet.json")


def ensure_output_directory(output_dir: str = "output") -> str:
    """Ensure output directory exists"""
    os.makedirs(output_dir, exist_ok=True)
    return output_dir


def get_timestamped_filename(base_name: str, ward_number: int) -> str:
    """Generate a timestamped base filename (without extension)"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{base_name}_ward{ward_number}_{timestamp}"


class CLIFleetPlanner:
    """Command line interface for trip allocation"""

    def __init__(self, config_manager: GAConfigManager):
        self.config_manager = config_manager
        self.services = None

    def initialize_services(self, data_path: str):
        """Create data, optimizer and formatter services

        Raises:
            ConfigurationError: If the effective configuration is invalid
        """
        data_manager = FleetDataManager(data_path)
        config = self.config_manager.build_config()

        self.services = {
            'data_manager': data_manager,
            'fleet_optimizer': FleetOptimizer(data_manager, config),
            'fleet_formatter': FleetFormatter()
        }

    def plan(self, ward_number: int, as_json: bool = False, plot_dir: Optional[str] = None) -> int:
        """Run one optimization and print the result

        Returns:
            Process exit code
        """
        optimizer = self.services['fleet_optimizer']
        formatter = self.services['fleet_formatter']

        try:
            results = optimizer.run(ward_number)
        except DataUnavailableError as e:
            print(f"❌ Fleet data unavailable: {e}", file=sys.stderr)
            return 2

        response = results.to_response()
        solver_info = {
            'generations': results.total_generations,
            'solve_time': results.total_time,
            'convergence': results.convergence_reason,
            'generation_found': results.generation_found
        }

        if as_json:
            print(formatter.export_fleet_json(response, solver_info))
        else:
            print(formatter.format_fleet_stats_cli(response, solver_info))
            print()
            print(formatter.format_allocation_cli(response, optimizer.last_fleet_params))
            print()
            print(formatter.format_fleet_summary(response))

        if plot_dir:
            visualizer = GAVisualizer(output_dir=ensure_output_directory(plot_dir))
            with visualizer:
                base = get_timestamped_filename("fleet", ward_number)
                convergence = visualizer.save_convergence_plot(results, filename=f"{base}_convergence")
                allocation = visualizer.save_allocation_chart(
                    results, optimizer.last_fleet_params, filename=f"{base}_allocation"
                )
            if not as_json:
                print(f"\n📂 Plots saved: {convergence}, {allocation}")

        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Landfill Trip Allocation Optimizer - Command Line Interface',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument('--data', '-d', default=DEFAULT_DATA_PATH,
                        help='JSON or YAML file with landfill and station records')
    parser.add_argument('--ward', '-w', type=int, default=FleetDataManager.DEFAULT_WARD_NUMBER,
                        help='Ward number of the transfer station')
    parser.add_argument('--config', '-c',
                        help='JSON or YAML file with GA parameter overrides')
    parser.add_argument('--profile', choices=['fast', 'default', 'thorough'],
                        help='Named GA parameter profile')
    parser.add_argument('--population-size', type=int,
                        help='Population size')
    parser.add_argument('--generations', type=int,
                        help='Maximum number of generations')
    parser.add_argument('--seed', type=int,
                        help='Random seed for reproducible runs')
    parser.add_argument('--ranking', choices=['weighted_sum', 'lexicographic', 'pareto'],
                        help='Multi-objective ranking policy')
    parser.add_argument('--selection', choices=['tournament', 'rank'],
                        help='Parent selection method')
    parser.add_argument('--workers', type=int,
                        help='Evaluation worker threads')
    parser.add_argument('--json', action='store_true',
                        help='Print the result as JSON')
    parser.add_argument('--plot', nargs='?', const='output', default=None, metavar='DIR',
                        help='Save convergence and allocation plots (default directory: output)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Debug logging and per-generation progress')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config_manager = GAConfigManager(config_file=args.config, profile=args.profile)

        overrides = {
            'population_size': args.population_size,
            'max_generations': args.generations,
            'random_seed': args.seed,
            'ranking_policy': args.ranking,
            'selection_method': args.selection,
            'max_workers': args.workers,
        }
        for name, value in overrides.items():
            if value is not None and not config_manager.set_parameter(name, value, source='cli'):
                raise ConfigurationError(f"Invalid value for {name}: {value}")
        if args.verbose:
            config_manager.set_parameter('verbose', True, source='cli')

        planner = CLIFleetPlanner(config_manager)
        planner.initialize_services(args.data)
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        return planner.plan(args.ward, as_json=args.json, plot_dir=args.plot)
    except GAError as e:
        print(f"❌ Optimization failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
