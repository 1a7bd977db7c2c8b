#!/usr/bin/env python3
"""
Genetic Algorithm Operators
Implements crossover, mutation, and selection operators for trip allocation plans
"""

import random
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

from ga_chromosome import TripAllocationChromosome
from ga_common_imports import InvalidCandidateError

if TYPE_CHECKING:
    from fleet_services.fleet_parameters import FleetParameters


class GAOperators:
    """Collection of genetic algorithm operators for trip allocation"""

    def __init__(self, fleet_params: 'FleetParameters', rng: Optional[random.Random] = None):
        """Initialize genetic operators

        Args:
            fleet_params: Per-run slot counts and trip cap
            rng: Random source owned by the run
        """
        self.fleet_params = fleet_params
        self.rng = rng or random.Random()

    # =============================================================================
    # CROSSOVER OPERATORS
    # =============================================================================

    def landfill_swap_crossover(self, parent1: TripAllocationChromosome,
                                parent2: TripAllocationChromosome,
                                crossover_rate: float = 1.0) -> Tuple[TripAllocationChromosome,
                                                                       TripAllocationChromosome]:
        """Swap whole landfill sequences ahead of a random crossover point

        Args:
            parent1: First parent chromosome
            parent2: Second parent chromosome
            crossover_rate: Probability of performing crossover

        Returns:
            Tuple of two offspring chromosomes
        """
        landfill_keys = parent1.landfill_ids
        if landfill_keys != parent2.landfill_ids:
            raise InvalidCandidateError("Parents must share the same landfills in the same order")

        offspring1 = parent1.copy()
        offspring2 = parent2.copy()
        offspring1.parent_ids = [id(parent1), id(parent2)]
        offspring2.parent_ids = [id(parent1), id(parent2)]

        if self.rng.random() >= crossover_rate:
            # No crossover, children are copies of their parents
            offspring1.creation_method = "copy"
            offspring2.creation_method = "copy"
            return offspring1, offspring2

        crossover_point = self.rng.randint(0, len(landfill_keys))
        for landfill_id in landfill_keys[:crossover_point]:
            offspring1.allocation[landfill_id], offspring2.allocation[landfill_id] = (
                offspring2.allocation[landfill_id], offspring1.allocation[landfill_id]
            )

        for offspring in (offspring1, offspring2):
            offspring._invalidate_cache()
            offspring.creation_method = f"landfill_swap_crossover({crossover_point})"

        return offspring1, offspring2

    # =============================================================================
    # MUTATION OPERATORS
    # =============================================================================

    def trip_step_mutation(self, chromosome: TripAllocationChromosome,
                           mutation_rate: float = 1.0) -> TripAllocationChromosome:
        """Step one random slot's trip count up or down by one

        Picks a landfill, then a slot within it. On a coin flip the slot is
        incremented if below the cap; otherwise it is decremented if above zero.

        Args:
            chromosome: Chromosome to mutate
            mutation_rate: Probability of performing mutation

        Returns:
            Mutated copy of the chromosome
        """
        mutated = chromosome.copy()
        if not mutated.allocation or self.rng.random() >= mutation_rate:
            return mutated

        cap = self.fleet_params.max_trips_per_truck
        landfill_id = self.rng.choice(mutated.landfill_ids)
        slot_trips = mutated.allocation[landfill_id]
        slot = self.rng.randrange(len(slot_trips))
        value = slot_trips[slot]

        if self.rng.random() < 0.5:
            if value < cap:
                mutated.set_slot(landfill_id, slot, value + 1)
                mutated.creation_method = f"trip_step_mutation(+1 {landfill_id}[{slot}])"
        elif value > 0:
            mutated.set_slot(landfill_id, slot, value - 1)
            mutated.creation_method = f"trip_step_mutation(-1 {landfill_id}[{slot}])"

        return mutated

    # =============================================================================
    # SELECTION OPERATORS
    # =============================================================================

    def tournament_selection(self, population: List[TripAllocationChromosome],
                             ranks: Sequence[int],
                             tournament_size: int = 3) -> TripAllocationChromosome:
        """Select parent using tournament selection

        Args:
            population: Population to select from
            ranks: Rank position per individual (0 = best)
            tournament_size: Number of individuals in tournament

        Returns:
            Selected chromosome
        """
        if not population:
            raise ValueError("Cannot select from empty population")

        tournament_size = min(tournament_size, len(population))
        contestants = self.rng.sample(range(len(population)), tournament_size)

        # Lowest rank wins
        winner = min(contestants, key=lambda i: ranks[i])
        return population[winner]

    def rank_selection(self, population: List[TripAllocationChromosome],
                       ranks: Sequence[int]) -> TripAllocationChromosome:
        """Select parent with probability proportional to linear rank weight"""
        if not population:
            raise ValueError("Cannot select from empty population")

        size = len(population)
        weights = [size - ranks[i] for i in range(size)]
        return self.rng.choices(population, weights=weights, k=1)[0]

    def elitism_selection(self, population: List[TripAllocationChromosome],
                          ranks: Sequence[int],
                          elite_size: int = 2) -> List[TripAllocationChromosome]:
        """Preserve best individuals across generations

        Args:
            population: Population to select from
            ranks: Rank position per individual (0 = best)
            elite_size: Number of elite individuals to preserve

        Returns:
            List of elite chromosomes, best first
        """
        if not population:
            return []

        order = sorted(range(len(population)), key=lambda i: ranks[i])
        elite_size = min(elite_size, len(population))
        return [population[i] for i in order[:elite_size]]
