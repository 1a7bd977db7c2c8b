#!/usr/bin/env python3
"""
Unit tests for GA Operators
Tests crossover, mutation, and selection operators
"""

import random
import unittest
from unittest.mock import Mock
import os
import sys

# Add project root and tests directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ga_common_imports import InvalidCandidateError
from ga_operators import GAOperators
from ga_test_utils import GATestBase


class TestLandfillSwapCrossover(GATestBase):
    """Test crossover between trip allocation plans"""

    def setUp(self):
        super().setUp()
        self.parent1 = self.create_chromosome({'L1': [1, 0], 'L2': [0, 2]})
        self.parent2 = self.create_chromosome({'L1': [3, 3], 'L2': [0, 0]})

    def _operators_with_point(self, point):
        rng = Mock()
        rng.random.return_value = 0.0
        rng.randint.return_value = point
        return GAOperators(self.fleet_params, rng), rng

    def test_point_draws_from_inclusive_range(self):
        operators, rng = self._operators_with_point(1)
        operators.landfill_swap_crossover(self.parent1, self.parent2)
        rng.randint.assert_called_once_with(0, 2)

    def test_swaps_landfills_below_point(self):
        operators, _ = self._operators_with_point(1)
        child1, child2 = operators.landfill_swap_crossover(self.parent1, self.parent2)

        self.assertEqual(child1.allocation, {'L1': [3, 3], 'L2': [0, 2]})
        self.assertEqual(child2.allocation, {'L1': [1, 0], 'L2': [0, 0]})

    def test_point_zero_keeps_parents(self):
        operators, _ = self._operators_with_point(0)
        child1, child2 = operators.landfill_swap_crossover(self.parent1, self.parent2)

        self.assertEqual(child1.allocation, self.parent1.allocation)
        self.assertEqual(child2.allocation, self.parent2.allocation)

    def test_point_n_swaps_everything(self):
        operators, _ = self._operators_with_point(2)
        child1, child2 = operators.landfill_swap_crossover(self.parent1, self.parent2)

        self.assertEqual(child1.allocation, self.parent2.allocation)
        self.assertEqual(child2.allocation, self.parent1.allocation)

    def test_children_are_deep_copies(self):
        operators, _ = self._operators_with_point(1)
        child1, child2 = operators.landfill_swap_crossover(self.parent1, self.parent2)

        child1.allocation['L1'][0] = 0
        child2.allocation['L1'][0] = 2
        self.assertEqual(self.parent1.allocation['L1'], [1, 0])
        self.assertEqual(self.parent2.allocation['L1'], [3, 3])

    def test_no_crossover_returns_copies(self):
        child1, child2 = self.operators.landfill_swap_crossover(self.parent1, self.parent2,
                                                               crossover_rate=0.0)
        self.assertEqual(child1.allocation, self.parent1.allocation)
        self.assertEqual(child2.allocation, self.parent2.allocation)
        self.assertIsNot(child1, self.parent1)
        self.assertIsNot(child1.allocation['L1'], self.parent1.allocation['L1'])
        self.assertEqual(child1.creation_method, "copy")

    def test_mismatched_landfills_raise(self):
        other = self.create_chromosome({'L2': [0, 2], 'L1': [1, 0]})
        with self.assertRaises(InvalidCandidateError):
            self.operators.landfill_swap_crossover(self.parent1, other)

        missing = self.create_chromosome({'L1': [1, 0]})
        with self.assertRaises(InvalidCandidateError):
            self.operators.landfill_swap_crossover(self.parent1, missing)

    def test_children_keep_parent_sequences(self):
        for _ in range(50):
            child1, child2 = self.operators.landfill_swap_crossover(self.parent1, self.parent2)
            for landfill_id in ('L1', 'L2'):
                pair = sorted([child1.allocation[landfill_id], child2.allocation[landfill_id]])
                expected = sorted([self.parent1.allocation[landfill_id],
                                   self.parent2.allocation[landfill_id]])
                self.assertEqual(pair, expected)


class TestTripStepMutation(GATestBase):
    """Test single-slot trip mutation"""

    def _operators(self, branch_draw, landfill_id='L1', slot=0):
        rng = Mock()
        rng.random.side_effect = [0.0, branch_draw]
        rng.choice.return_value = landfill_id
        rng.randrange.return_value = slot
        return GAOperators(self.fleet_params, rng)

    def test_increment_below_cap(self):
        chromosome = self.create_chromosome({'L1': [1, 0], 'L2': [0, 2]})
        mutated = self._operators(0.2).trip_step_mutation(chromosome)
        self.assertEqual(mutated.allocation['L1'], [2, 0])

    def test_increment_at_cap_is_noop(self):
        chromosome = self.create_chromosome({'L1': [3, 0], 'L2': [0, 2]})
        mutated = self._operators(0.2).trip_step_mutation(chromosome)
        self.assertEqual(mutated.allocation, chromosome.allocation)

    def test_decrement_above_zero(self):
        chromosome = self.create_chromosome({'L1': [1, 0], 'L2': [0, 2]})
        mutated = self._operators(0.7, 'L2', 1).trip_step_mutation(chromosome)
        self.assertEqual(mutated.allocation['L2'], [0, 1])

    def test_decrement_at_zero_is_noop(self):
        chromosome = self.create_chromosome({'L1': [1, 0], 'L2': [0, 2]})
        mutated = self._operators(0.7, 'L1', 1).trip_step_mutation(chromosome)
        self.assertEqual(mutated.allocation, chromosome.allocation)

    def test_mutation_works_on_copy(self):
        chromosome = self.create_chromosome({'L1': [1, 0], 'L2': [0, 2]})
        mutated = self._operators(0.2).trip_step_mutation(chromosome)
        self.assertIsNot(mutated, chromosome)
        self.assertEqual(chromosome.allocation['L1'], [1, 0])

    def test_zero_rate_leaves_plan_unchanged(self):
        chromosome = self.create_chromosome({'L1': [1, 0], 'L2': [0, 2]})
        mutated = self.operators.trip_step_mutation(chromosome, mutation_rate=0.0)
        self.assertEqual(mutated.allocation, chromosome.allocation)

    def test_lengths_and_bounds_preserved(self):
        chromosome = self.create_chromosome({'L1': [1, 0], 'L2': [0, 2]})
        for _ in range(300):
            chromosome = self.operators.trip_step_mutation(chromosome)
            self.assertEqual(chromosome.get_slot_counts(), {'L1': 2, 'L2': 2})
            for trips in chromosome.allocation.values():
                for value in trips:
                    self.assertTrue(0 <= value <= 3)

    def test_changes_at_most_one_slot_by_one(self):
        chromosome = self.create_chromosome({'L1': [1, 2], 'L2': [0, 3]})
        for _ in range(100):
            mutated = self.operators.trip_step_mutation(chromosome)
            diffs = [abs(a - b)
                     for lid in ('L1', 'L2')
                     for a, b in zip(mutated.allocation[lid], chromosome.allocation[lid])]
            self.assertLessEqual(sum(diffs), 1)


class TestSelectionOperators(GATestBase):
    """Test selection operators"""

    def setUp(self):
        super().setUp()
        self.population = [
            self.create_chromosome({'L1': [i % 4, 0], 'L2': [0, 0]}) for i in range(4)
        ]
        self.ranks = [2, 0, 3, 1]

    def test_tournament_with_whole_population_picks_best(self):
        for _ in range(10):
            winner = self.operators.tournament_selection(self.population, self.ranks, tournament_size=4)
            self.assertIs(winner, self.population[1])

    def test_tournament_size_is_capped(self):
        winner = self.operators.tournament_selection(self.population, self.ranks, tournament_size=50)
        self.assertIs(winner, self.population[1])

    def test_tournament_returns_member(self):
        winner = self.operators.tournament_selection(self.population, self.ranks, tournament_size=2)
        self.assertIn(winner, self.population)

    def test_rank_selection_returns_member(self):
        for _ in range(20):
            self.assertIn(self.operators.rank_selection(self.population, self.ranks), self.population)

    def test_rank_selection_prefers_better_ranks(self):
        operators = GAOperators(self.fleet_params, random.Random(0))
        counts = {i: 0 for i in range(4)}
        for _ in range(2000):
            chosen = operators.rank_selection(self.population, self.ranks)
            counts[self.population.index(chosen)] += 1
        # Weights are 4, 3, 2, 1 for ranks 0..3
        self.assertGreater(counts[1], counts[2])

    def test_elitism_orders_by_rank(self):
        elite = self.operators.elitism_selection(self.population, self.ranks, elite_size=2)
        self.assertEqual(elite, [self.population[1], self.population[3]])

    def test_elitism_size_capped(self):
        elite = self.operators.elitism_selection(self.population, self.ranks, elite_size=10)
        self.assertEqual(len(elite), 4)

    def test_empty_population(self):
        with self.assertRaises(ValueError):
            self.operators.tournament_selection([], [])
        with self.assertRaises(ValueError):
            self.operators.rank_selection([], [])
        self.assertEqual(self.operators.elitism_selection([], []), [])


if __name__ == '__main__':
    unittest.main()
