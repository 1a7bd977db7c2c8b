#!/usr/bin/env python3
"""
Unit tests for GA population initialization
"""

import random
import unittest
import os
import sys

# Add project root and tests directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ga_population import PopulationInitializer
from ga_test_utils import GATestBase


class TestPopulationInitializer(GATestBase):
    """Test PopulationInitializer functionality"""

    def test_population_has_requested_size_and_is_valid(self):
        for size in (1, 2, 5, 10, 37, 100):
            population = self.population_initializer.create_population(size)
            self.assert_population_valid(population, size)

    def test_empty_population(self):
        self.assertEqual(self.population_initializer.create_population(0), [])

    def test_contains_empty_anchor(self):
        population = self.population_initializer.create_population(10)
        zero_plans = [c for c in population if c.total_trips(3) == 0]
        self.assertGreaterEqual(len(zero_plans), 1)

    def test_single_member_population_is_empty_plan(self):
        population = self.population_initializer.create_population(1)
        self.assertEqual(population[0].allocation, {'L1': [0, 0], 'L2': [0, 0]})

    def test_generation_zero(self):
        for chromosome in self.population_initializer.create_population(10):
            self.assertEqual(chromosome.generation, 0)

    def test_creation_methods(self):
        population = self.population_initializer.create_population(20)
        methods = {c.creation_method for c in population}
        self.assertIn("random", methods)
        self.assertIn("sparse", methods)
        self.assertIn("zeros", methods)

    def test_larger_fleet_stays_under_ceiling(self):
        params = self.create_fleet_params({'A': 5, 'B': 3, 'C': 4}, {'A': 1.0, 'B': 2.0, 'C': 3.0})
        initializer = PopulationInitializer(params, random.Random(11))
        population = initializer.create_population(50)

        self.assertEqual(len(population), 50)
        for chromosome in population:
            self.assert_chromosome_valid(chromosome, params)
            self.assertLessEqual(chromosome.total_trips(3), 9)

    def test_same_seed_same_population(self):
        first = PopulationInitializer(self.fleet_params, random.Random(7)).create_population(15)
        second = PopulationInitializer(self.fleet_params, random.Random(7)).create_population(15)
        self.assertEqual([c.signature() for c in first], [c.signature() for c in second])

    def test_create_individual(self):
        chromosome = self.population_initializer.create_individual()
        self.assert_chromosome_valid(chromosome)


if __name__ == '__main__':
    unittest.main()
