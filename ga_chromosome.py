#!/usr/bin/env python3
"""
Genetic Algorithm Chromosome Classes
Implements the trip allocation representation: one trip count per truck slot
per landfill, with decoding and feasibility checks
"""

import random
from typing import Dict, List, Optional, Any, Mapping, Sequence, Tuple, TYPE_CHECKING

from ga_common_imports import (
    ConstraintViolationError,
    InvalidCandidateError,
    clamp,
    round_half_up,
)

if TYPE_CHECKING:
    from fleet_services.fleet_parameters import FleetParameters


class TripAllocationChromosome:
    """Complete trip assignment plan across all landfills and slots (GA chromosome)"""

    def __init__(self, allocation: Optional[Mapping[str, Sequence[float]]] = None):
        """Initialize chromosome

        Args:
            allocation: Ordered mapping of landfill id to per-slot trip counts
        """
        # Value copy so parents and children never share sequences
        self.allocation: Dict[str, List[float]] = {
            landfill_id: list(trips) for landfill_id, trips in (allocation or {}).items()
        }

        # Cached objectives
        self.fuel_cost = None              # Fuel cost of decoded plan
        self.trucks_used = None            # Slots with at least one trip
        self.score = None                  # Ranked scalar (lower = better)

        # Metadata
        self.generation = 0                # Generation when created
        self.parent_ids = []               # Parent chromosome IDs (for tracking)
        self.creation_method = "unknown"   # How chromosome was created

    # =============================================================================
    # CONSTRUCTION
    # =============================================================================

    @classmethod
    def initialize(cls, fleet_params: 'FleetParameters',
                   rng: Optional[random.Random] = None) -> 'TripAllocationChromosome':
        """Create a random feasible chromosome

        Each slot gets a trip count drawn from [0, max_trips_per_truck]; the plan is
        then repaired until the total trip ceiling holds.
        """
        rng = rng or random.Random()
        cap = fleet_params.max_trips_per_truck
        allocation = {
            landfill_id: [rng.randint(0, cap) for _ in range(fleet_params.slot_counts[landfill_id])]
            for landfill_id in fleet_params.landfill_ids
        }
        chromosome = cls(allocation)
        chromosome.repair(fleet_params, rng)
        chromosome.creation_method = "random"
        return chromosome

    @classmethod
    def zeros(cls, fleet_params: 'FleetParameters') -> 'TripAllocationChromosome':
        """Create the all-zero plan (always feasible)"""
        chromosome = cls({
            landfill_id: [0] * fleet_params.slot_counts[landfill_id]
            for landfill_id in fleet_params.landfill_ids
        })
        chromosome.creation_method = "zeros"
        return chromosome

    # =============================================================================
    # DECODING AND FEASIBILITY
    # =============================================================================

    def decode(self, max_trips_per_truck: int) -> Dict[str, List[int]]:
        """Quantize every slot to an integer trip count in [0, max_trips_per_truck]"""
        return {
            landfill_id: [int(clamp(round_half_up(trips), 0, max_trips_per_truck)) for trips in slot_trips]
            for landfill_id, slot_trips in self.allocation.items()
        }

    def decoded(self, max_trips_per_truck: int) -> 'TripAllocationChromosome':
        """Chromosome holding the decoded plan"""
        chromosome = TripAllocationChromosome(self.decode(max_trips_per_truck))
        chromosome.generation = self.generation
        chromosome.creation_method = self.creation_method
        return chromosome

    def total_trips(self, max_trips_per_truck: int) -> int:
        """Sum of decoded trips across all landfills"""
        return sum(sum(trips) for trips in self.decode(max_trips_per_truck).values())

    def is_valid(self, fleet_params: 'FleetParameters') -> bool:
        """Check the total trip ceiling on the decoded plan"""
        return self.total_trips(fleet_params.max_trips_per_truck) <= fleet_params.max_total_trips

    def require_valid(self, fleet_params: 'FleetParameters') -> None:
        """Raise ConstraintViolationError if the trip ceiling is exceeded"""
        total = self.total_trips(fleet_params.max_trips_per_truck)
        if total > fleet_params.max_total_trips:
            raise ConstraintViolationError(
                f"{total} trips exceed the ceiling of {fleet_params.max_total_trips}"
            )

    def validate_structure(self, fleet_params: 'FleetParameters') -> None:
        """Check landfill keys, sequence lengths and decoded value bounds

        Raises:
            InvalidCandidateError: If an operator produced a malformed chromosome
        """
        if tuple(self.allocation) != tuple(fleet_params.landfill_ids):
            raise InvalidCandidateError(
                f"Landfill keys {list(self.allocation)} do not match {list(fleet_params.landfill_ids)}"
            )

        for landfill_id, trips in self.allocation.items():
            expected = fleet_params.slot_counts[landfill_id]
            if len(trips) != expected:
                raise InvalidCandidateError(
                    f"Landfill {landfill_id} has {len(trips)} slots, expected {expected}"
                )

        for landfill_id, trips in self.decode(fleet_params.max_trips_per_truck).items():
            for value in trips:
                if not 0 <= value <= fleet_params.max_trips_per_truck:
                    raise InvalidCandidateError(f"Landfill {landfill_id} slot value {value} out of range")

    def repair(self, fleet_params: 'FleetParameters', rng: Optional[random.Random] = None) -> None:
        """Decrement random non-zero slots until the trip ceiling holds"""
        rng = rng or random.Random()
        cap = fleet_params.max_trips_per_truck
        self.allocation = self.decode(cap)

        excess = self.total_trips(cap) - fleet_params.max_total_trips
        while excess > 0:
            positions = [
                (landfill_id, slot)
                for landfill_id, trips in self.allocation.items()
                for slot, value in enumerate(trips) if value > 0
            ]
            landfill_id, slot = rng.choice(positions)
            self.allocation[landfill_id][slot] -= 1
            excess -= 1

        self._invalidate_cache()

    # =============================================================================
    # ACCESSORS
    # =============================================================================

    @property
    def landfill_ids(self) -> List[str]:
        return list(self.allocation)

    def get_slot_counts(self) -> Dict[str, int]:
        return {landfill_id: len(trips) for landfill_id, trips in self.allocation.items()}

    def signature(self) -> Tuple[Tuple[str, Tuple[float, ...]], ...]:
        """Hashable form of the allocation"""
        return tuple((landfill_id, tuple(trips)) for landfill_id, trips in self.allocation.items())

    def set_slot(self, landfill_id: str, slot: int, value: float) -> None:
        self.allocation[landfill_id][slot] = value
        self._invalidate_cache()

    def _invalidate_cache(self) -> None:
        """Invalidate cached calculations"""
        self.fuel_cost = None
        self.trucks_used = None
        self.score = None

    def copy(self) -> 'TripAllocationChromosome':
        """Create a deep copy of the chromosome"""
        new_chromosome = TripAllocationChromosome(self.allocation)
        new_chromosome.fuel_cost = self.fuel_cost
        new_chromosome.trucks_used = self.trucks_used
        new_chromosome.score = self.score
        new_chromosome.generation = self.generation
        new_chromosome.parent_ids = self.parent_ids.copy()
        new_chromosome.creation_method = self.creation_method
        return new_chromosome

    def to_result(self, fleet_params: 'FleetParameters') -> Dict[str, Any]:
        """Convert chromosome to the optimization response format"""
        from ga_fitness import GAFitnessEvaluator

        decoded = self.decode(fleet_params.max_trips_per_truck)
        evaluator = GAFitnessEvaluator(fleet_params)
        return {
            'optimalSolution': decoded,
            'fuelCost': evaluator.fuel_cost(decoded),
            'numTrucks': evaluator.trucks_used(decoded),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TripAllocationChromosome):
            return NotImplemented
        return self.signature() == other.signature()

    def __hash__(self) -> int:
        return hash(self.signature())

    def __str__(self) -> str:
        """String representation of chromosome"""
        fuel_str = f"{self.fuel_cost:.3f}" if self.fuel_cost is not None else "None"
        return (f"TripAllocationChromosome(landfills={len(self.allocation)}, "
                f"slots={sum(len(t) for t in self.allocation.values())}, "
                f"fuel_cost={fuel_str}, "
                f"trucks_used={self.trucks_used})")

    def __repr__(self) -> str:
        return self.__str__()
