#!/usr/bin/env python3
"""
Genetic Algorithm Population Initialization
Creates initial populations of feasible trip allocation plans
"""

import logging
import random
from typing import List, Optional, TYPE_CHECKING

from ga_chromosome import TripAllocationChromosome

if TYPE_CHECKING:
    from fleet_services.fleet_parameters import FleetParameters

logger = logging.getLogger(__name__)


class PopulationInitializer:
    """Creates diverse initial populations for trip allocation optimization"""

    def __init__(self, fleet_params: 'FleetParameters', rng: Optional[random.Random] = None):
        """Initialize population creator

        Args:
            fleet_params: Per-run slot counts and trip ceiling
            rng: Random source owned by the run
        """
        self.fleet_params = fleet_params
        self.rng = rng or random.Random()

    def create_population(self, size: int) -> List[TripAllocationChromosome]:
        """Create initial population using multiple strategies

        Args:
            size: Population size

        Returns:
            List of exactly ``size`` feasible chromosomes
        """
        population = []

        # Strategy distribution
        sparse_count = int(size * 0.2)       # 20%
        zero_count = 1 if size > 0 else 0
        random_count = size - sparse_count - zero_count

        logger.debug(f"Creating population of {size} chromosomes: "
                     f"{random_count} random, {sparse_count} sparse, {zero_count} empty")

        # Strategy 1: Uniform random trip counts (repaired to the ceiling)
        for _ in range(random_count):
            chromosome = self.create_individual()
            chromosome.generation = 0
            population.append(chromosome)

        # Strategy 2: Sparse plans concentrating trips on few trucks
        for _ in range(sparse_count):
            chromosome = self._create_sparse_individual()
            chromosome.generation = 0
            population.append(chromosome)

        # Strategy 3: Empty plan as a guaranteed feasible anchor
        for _ in range(zero_count):
            chromosome = TripAllocationChromosome.zeros(self.fleet_params)
            chromosome.generation = 0
            population.append(chromosome)

        # Validate population
        valid_population = [c for c in population if c.is_valid(self.fleet_params)]
        while len(valid_population) < size:
            valid_population.append(TripAllocationChromosome.zeros(self.fleet_params))

        logger.debug(f"Population created: {len(valid_population)}/{size} valid chromosomes")
        return valid_population[:size]

    def create_individual(self) -> TripAllocationChromosome:
        """Create one random feasible chromosome"""
        return TripAllocationChromosome.initialize(self.fleet_params, self.rng)

    def _create_sparse_individual(self) -> TripAllocationChromosome:
        """Create a plan where each slot is used with probability 0.3"""
        cap = self.fleet_params.max_trips_per_truck
        allocation = {
            landfill_id: [
                self.rng.randint(1, cap) if cap > 0 and self.rng.random() < 0.3 else 0
                for _ in range(self.fleet_params.slot_counts[landfill_id])
            ]
            for landfill_id in self.fleet_params.landfill_ids
        }
        chromosome = TripAllocationChromosome(allocation)
        chromosome.repair(self.fleet_params, self.rng)
        chromosome.creation_method = "sparse"
        return chromosome
