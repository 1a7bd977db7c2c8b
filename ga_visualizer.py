#!/usr/bin/env python3
"""
GA Visualization System
Convergence and allocation charts for trip allocation runs
"""

import logging
from typing import Optional, TYPE_CHECKING

from ga_base_visualizer import BaseGAVisualizer, VisualizationConfig

if TYPE_CHECKING:
    from genetic_fleet_optimizer import GAResults
    from fleet_services.fleet_parameters import FleetParameters

logger = logging.getLogger(__name__)


class GAVisualizer(BaseGAVisualizer):
    """Visualization for GA trip allocation results"""

    def __init__(self, output_dir: str = "ga_visualizations",
                 config: Optional[VisualizationConfig] = None):
        config = config or VisualizationConfig(output_dir=output_dir)
        super().__init__(config)

    def save_convergence_plot(self, results: 'GAResults', filename: str = "ga_convergence",
                              title: Optional[str] = None) -> str:
        """Save per-generation score, fuel cost and trucks used

        Args:
            results: Optimization results with per-generation history
            filename: Base filename (without extension)
            title: Optional figure title

        Returns:
            Path to saved image
        """
        generations = list(range(len(results.fitness_history)))
        best_scores = [min(scores) for scores in results.fitness_history]
        avg_scores = [sum(scores) / len(scores) for scores in results.fitness_history]
        best_fuel = [min(o.fuel_cost for o in gen) for gen in results.objective_history]
        min_trucks = [min(o.trucks_used for o in gen) for gen in results.objective_history]

        title = title or (f"GA Convergence - fuel {results.fuel_cost:.2f}, "
                          f"{results.trucks_used} trucks")
        fig, axes = self.create_subplots(2, 2, title=title)

        ax = axes[0][0]
        ax.plot(generations, best_scores, color=self.series_colors['best'], linewidth=2, label='Best')
        ax.plot(generations, avg_scores, color=self.series_colors['average'], linewidth=1.5,
                linestyle='--', label='Average')
        ax.legend(loc='upper right')
        self.format_axes(ax, xlabel='Generation', ylabel='Ranked score', title='Score (lower is better)')

        ax = axes[0][1]
        ax.plot(generations, best_fuel, color=self.series_colors['fuel'], linewidth=2)
        self.format_axes(ax, xlabel='Generation', ylabel='Fuel cost', title='Best fuel cost')

        ax = axes[1][0]
        ax.step(generations, min_trucks, where='post', color=self.series_colors['trucks'], linewidth=2)
        self.format_axes(ax, xlabel='Generation', ylabel='Trucks', title='Fewest trucks used')

        self.add_statistics_table(axes[1][1], {
            'fuel_cost': results.fuel_cost,
            'trucks_used': results.trucks_used,
            'generations': results.total_generations,
            'generation_found': results.generation_found,
            'convergence': results.convergence_reason,
            'total_time_s': results.total_time
        })

        path = self.save_figure(fig, filename)
        logger.info(f"Saved convergence plot: {path}")
        return path

    def save_allocation_chart(self, results: 'GAResults', fleet_params: 'FleetParameters',
                              filename: str = "ga_allocation") -> str:
        """Save a stacked bar chart of trips per landfill and truck slot"""
        solution = results.best_solution
        landfill_ids = list(solution)
        max_slots = max((len(trips) for trips in solution.values()), default=0)

        fig, axes = self.create_subplots(1, 1, title="Trip Allocation", figsize=(12, 7))
        ax = axes[0][0]

        bottoms = [0] * len(landfill_ids)
        for slot in range(max_slots):
            heights = [solution[lid][slot] if slot < len(solution[lid]) else 0 for lid in landfill_ids]
            ax.bar(landfill_ids, heights, bottom=bottoms, label=f"Truck {slot + 1}")
            bottoms = [b + h for b, h in zip(bottoms, heights)]

        for i, landfill_id in enumerate(landfill_ids):
            distance = fleet_params.distances_km[landfill_id]
            ax.annotate(f"{distance:.1f} km", (i, bottoms[i]), ha='center', va='bottom', fontsize=9)

        if max_slots:
            ax.legend(loc='upper right')
        self.format_axes(ax, xlabel='Landfill', ylabel='Trips')

        path = self.save_figure(fig, filename)
        logger.info(f"Saved allocation chart: {path}")
        return path
