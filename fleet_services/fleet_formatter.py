#!/usr/bin/env python3
"""
Fleet Formatter
Formats trip allocation results for different output formats (CLI, web, etc.)
"""

from datetime import datetime
from typing import Dict, Any, Optional
import json

from .fleet_parameters import FleetParameters


class FleetFormatter:
    """Formats optimization responses for different presentation contexts"""

    def format_fleet_stats_cli(self, response: Dict[str, Any],
                               solver_info: Optional[Dict[str, Any]] = None) -> str:
        """Format fleet statistics for CLI output

        Args:
            response: Optimization response dictionary
            solver_info: Optional run metadata (generations, time, convergence)

        Returns:
            Formatted string for CLI display
        """
        if not response:
            return "❌ No allocation data available"

        solution = response.get('optimalSolution', {})
        total_trips = sum(sum(trips) for trips in solution.values())

        lines = []
        lines.append("🚛 Fleet Allocation Statistics:")
        lines.append("=" * 50)
        lines.append(f"Fuel Cost:       {response.get('fuelCost', 0):.3f}")
        lines.append(f"Trucks Used:     {response.get('numTrucks', 0)}")
        lines.append(f"Total Trips:     {total_trips}")
        lines.append(f"Landfills:       {len(solution)}")

        if solver_info:
            lines.append(f"Generations:     {solver_info.get('generations', 0)}")
            lines.append(f"Solve Time:      {solver_info.get('solve_time', 0):.2f} seconds")
            lines.append(f"Stopped By:      {solver_info.get('convergence', 'Unknown')}")

        lines.append("=" * 50)

        return "\n".join(lines)

    def format_allocation_cli(self, response: Dict[str, Any],
                              fleet_params: Optional[FleetParameters] = None) -> str:
        """Format the per-landfill trip table for CLI output"""
        solution = response.get('optimalSolution', {}) if response else {}
        if not solution:
            return "❌ No allocation data available"

        lines = []
        lines.append("📋 Trips per Landfill:")
        lines.append("=" * 60)
        lines.append(f"{'Landfill':<16}{'Distance':>12}  {'Trips per truck':<24}{'Total':>6}")
        lines.append("-" * 60)

        for landfill_id, trips in solution.items():
            if fleet_params is not None:
                distance = f"{fleet_params.distances_km[landfill_id]:.2f} km"
            else:
                distance = "-"
            slots = " ".join(str(t) for t in trips)
            lines.append(f"{landfill_id:<16}{distance:>12}  {slots:<24}{sum(trips):>6}")

        lines.append("=" * 60)

        return "\n".join(lines)

    def format_fleet_stats_web(self, response: Dict[str, Any]) -> Dict[str, Any]:
        """Format fleet statistics for web display

        Args:
            response: Optimization response dictionary

        Returns:
            Dictionary with formatted metrics for web display
        """
        if not response:
            return {}

        solution = response.get('optimalSolution', {})
        total_trips = sum(sum(trips) for trips in solution.values())

        return {
            'fuel_cost': {
                'value': f"{response.get('fuelCost', 0):.2f}",
                'raw_value': response.get('fuelCost', 0),
                'unit': 'fuel units'
            },
            'trucks_used': {
                'value': f"{response.get('numTrucks', 0)} trucks",
                'raw_value': response.get('numTrucks', 0),
                'unit': 'trucks'
            },
            'total_trips': {
                'value': f"{total_trips} trips",
                'raw_value': total_trips,
                'unit': 'trips'
            },
            'landfills': {
                'value': f"{len(solution)} landfills",
                'raw_value': len(solution),
                'unit': 'landfills'
            }
        }

    def format_fleet_summary(self, response: Dict[str, Any], format_type: str = "cli") -> str:
        """Format a brief one-line summary"""
        if not response:
            return "No allocation data"

        fuel = response.get('fuelCost', 0)
        trucks = response.get('numTrucks', 0)
        trips = sum(sum(t) for t in response.get('optimalSolution', {}).values())

        if format_type == "cli":
            return f"🚛 {trucks} trucks • {trips} trips • fuel {fuel:.2f}"
        return f"{trucks} trucks • {trips} trips • fuel {fuel:.2f}"

    def export_fleet_json(self, response: Dict[str, Any],
                          solver_info: Optional[Dict[str, Any]] = None) -> str:
        """Export the response and run metadata as JSON"""
        export_data = {
            'result': response,
            'solver_info': solver_info,
            'export_timestamp': datetime.now().isoformat(),
            'format_version': '1.0'
        }
        return json.dumps(export_data, indent=2, default=str)
