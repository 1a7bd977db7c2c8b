#!/usr/bin/env python3
"""
Integration tests for the trip allocation pipeline
Runs the sample data file through data loading, the GA and formatting
"""

import os
import sys
import threading
import unittest

# Add project root and tests directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cli_fleet_planner import DEFAULT_DATA_PATH
from fleet_services import FleetDataManager, FleetFormatter, FleetOptimizer, build_fleet_parameters
from ga_common_imports import calculate_distance
from ga_config_manager import GAConfigManager
from ga_fitness import GAFitnessEvaluator
from genetic_fleet_optimizer import GAConfig, GeneticFleetOptimizer


class TestSampleDataPipeline(unittest.TestCase):
    """End-to-end runs against the bundled sample data"""

    def setUp(self):
        self.data_manager = FleetDataManager(DEFAULT_DATA_PATH)

    def _config(self, **kwargs):
        defaults = dict(population_size=30, max_generations=20, random_seed=11, max_workers=1)
        defaults.update(kwargs)
        return GAConfig(**defaults)

    def _assert_feasible(self, response, fleet_params):
        solution = response['optimalSolution']
        self.assertEqual(tuple(solution), fleet_params.landfill_ids)
        for landfill_id, trips in solution.items():
            self.assertEqual(len(trips), fleet_params.slot_counts[landfill_id])
            for value in trips:
                self.assertIsInstance(value, int)
                self.assertTrue(0 <= value <= fleet_params.max_trips_per_truck)
        self.assertLessEqual(sum(sum(t) for t in solution.values()), fleet_params.max_total_trips)

    def test_response_matches_recomputed_objectives(self):
        optimizer = FleetOptimizer(self.data_manager, self._config())
        response = optimizer.optimize_fleet()
        fleet_params = optimizer.last_fleet_params

        self._assert_feasible(response, fleet_params)
        self.assertEqual(fleet_params.max_total_trips, 9)

        evaluator = GAFitnessEvaluator(fleet_params)
        solution = response['optimalSolution']
        self.assertAlmostEqual(response['fuelCost'], evaluator.fuel_cost(solution))
        self.assertEqual(response['numTrucks'], evaluator.trucks_used(solution))

    def test_distances_from_ward_station(self):
        fleet_params = FleetOptimizer(self.data_manager, self._config()).prepare_parameters(123)
        station = self.data_manager.find_station(123)
        for landfill in self.data_manager.load_landfills():
            self.assertAlmostEqual(fleet_params.distances_km[landfill.landfill_id],
                                   calculate_distance(station.coordinate, landfill.coordinate))

    def test_other_ward_gives_different_distances(self):
        optimizer = FleetOptimizer(self.data_manager, self._config())
        ward_123 = optimizer.prepare_parameters(123)
        ward_45 = optimizer.prepare_parameters(45)
        self.assertNotEqual(dict(ward_123.distances_km), dict(ward_45.distances_km))

    def test_threaded_evaluation_matches_sequential(self):
        sequential = FleetOptimizer(self.data_manager, self._config(max_workers=1)).run()
        threaded = FleetOptimizer(self.data_manager, self._config(max_workers=4)).run()

        self.assertEqual(sequential.best_solution, threaded.best_solution)
        self.assertEqual(sequential.fitness_history, threaded.fitness_history)

    def test_process_evaluation_matches_sequential(self):
        sequential = FleetOptimizer(self.data_manager, self._config(max_generations=3)).run()
        processes = FleetOptimizer(
            self.data_manager, self._config(max_generations=3, max_workers=2, use_processes=True)
        ).run()

        self.assertEqual(sequential.best_solution, processes.best_solution)
        self.assertEqual(sequential.fitness_history, processes.fitness_history)

    def test_every_ranking_policy(self):
        for policy in ("weighted_sum", "lexicographic", "pareto"):
            optimizer = FleetOptimizer(self.data_manager, self._config(ranking_policy=policy))
            response = optimizer.optimize_fleet()
            self._assert_feasible(response, optimizer.last_fleet_params)

    def test_concurrent_runs_are_isolated(self):
        fleet_params = build_fleet_parameters(self.data_manager.load_landfills(),
                                              self.data_manager.find_station(123))
        expected = {seed: GeneticFleetOptimizer(fleet_params, self._config(random_seed=seed,
                                                                           elitism=False)).optimize_fleet()
                    for seed in (1, 2, 3, 4)}

        results = {}

        def worker(seed):
            config = self._config(random_seed=seed, elitism=False)
            results[seed] = GeneticFleetOptimizer(fleet_params, config).optimize_fleet()

        threads = [threading.Thread(target=worker, args=(seed,)) for seed in expected]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for seed, result in expected.items():
            self.assertEqual(results[seed].best_solution, result.best_solution)
            self.assertEqual(results[seed].fitness_history, result.fitness_history)

    def test_config_manager_to_formatted_output(self):
        manager = GAConfigManager(profile='fast')
        manager.set_parameter('random_seed', 5)
        manager.set_parameter('max_workers', 1)
        optimizer = FleetOptimizer(self.data_manager, manager.build_config())

        results = optimizer.run()
        text = FleetFormatter().format_allocation_cli(results.to_response(), optimizer.last_fleet_params)

        for landfill_id in optimizer.last_fleet_params.landfill_ids:
            self.assertIn(landfill_id, text)
        self.assertEqual(results.total_generations, 30)


if __name__ == '__main__':
    unittest.main()
