#!/usr/bin/env python3
"""
Genetic Algorithm Fitness Evaluation System
Computes fuel cost and trucks used for trip allocation plans and ranks
populations under a configurable multi-objective policy
"""

from enum import Enum
from typing import Dict, List, Mapping, NamedTuple, Sequence, Any, TYPE_CHECKING

import numpy as np

from ga_chromosome import TripAllocationChromosome

if TYPE_CHECKING:
    from fleet_services.fleet_parameters import FleetParameters


class ObjectiveVector(NamedTuple):
    """Both objectives, to be minimized"""
    fuel_cost: float
    trucks_used: int


class RankingPolicy(Enum):
    """Supported ways of ordering objective vectors"""
    WEIGHTED_SUM = "weighted_sum"
    LEXICOGRAPHIC = "lexicographic"
    PARETO = "pareto"


class GAFitnessEvaluator:
    """Fitness evaluation system for trip allocation plans"""

    def __init__(self, fleet_params: 'FleetParameters', ranking_policy: str = "weighted_sum",
                 fuel_weight: float = 1.0, truck_weight: float = 1.0):
        """Initialize fitness evaluator

        Args:
            fleet_params: Per-run distance table, slot counts and constants
            ranking_policy: How objective vectors are ordered
            fuel_weight: Weight on fuel cost for weighted ranking
            truck_weight: Weight on trucks used for weighted ranking
        """
        self.fleet_params = fleet_params
        self.ranking_policy = RankingPolicy(ranking_policy.lower())
        self.fuel_weight = fuel_weight
        self.truck_weight = truck_weight

        # Performance tracking
        self.evaluations = 0
        self.best_score = None
        self.score_history = []

    # =============================================================================
    # OBJECTIVES
    # =============================================================================

    def fuel_cost(self, decoded: Mapping[str, Sequence[int]]) -> float:
        """Fuel cost of a decoded plan: trips times station distance, scaled by efficiency"""
        total_distance = 0.0
        for landfill_id, trips in decoded.items():
            distance = self.fleet_params.distances_km[landfill_id]
            total_distance += sum(t * distance for t in trips)
        return total_distance * self.fleet_params.fuel_efficiency

    def trucks_used(self, decoded: Mapping[str, Sequence[int]]) -> int:
        """Number of slots with at least one trip"""
        return sum(1 for trips in decoded.values() for t in trips if t > 0)

    def evaluate_chromosome(self, chromosome: TripAllocationChromosome) -> ObjectiveVector:
        """Evaluate both objectives of a single chromosome

        Args:
            chromosome: Chromosome to evaluate

        Returns:
            ObjectiveVector for the decoded plan
        """
        decoded = chromosome.decode(self.fleet_params.max_trips_per_truck)
        objectives = ObjectiveVector(self.fuel_cost(decoded), self.trucks_used(decoded))

        chromosome.fuel_cost = objectives.fuel_cost
        chromosome.trucks_used = objectives.trucks_used
        self.evaluations += 1
        return objectives

    def evaluate_population(self, population: List[TripAllocationChromosome]) -> List[ObjectiveVector]:
        """Evaluate every chromosome sequentially"""
        return [self.evaluate_chromosome(chromosome) for chromosome in population]

    # =============================================================================
    # RANKING
    # =============================================================================

    def scalarize(self, objectives: ObjectiveVector) -> float:
        """Weighted sum of both objectives"""
        return self.fuel_weight * objectives.fuel_cost + self.truck_weight * objectives.trucks_used

    def rank_population(self, objectives: Sequence[ObjectiveVector]) -> List[int]:
        """Rank position of every individual (0 = best)

        Ties keep population order, so ranking is deterministic.
        """
        if not objectives:
            return []

        if self.ranking_policy == RankingPolicy.LEXICOGRAPHIC:
            keys = [(o.fuel_cost, o.trucks_used) for o in objectives]
        elif self.ranking_policy == RankingPolicy.PARETO:
            fronts = self.pareto_fronts(objectives)
            keys = [(fronts[i], self.scalarize(o)) for i, o in enumerate(objectives)]
        else:
            keys = [(self.scalarize(o),) for o in objectives]

        order = sorted(range(len(objectives)), key=lambda i: (keys[i], i))
        ranks = [0] * len(objectives)
        for position, index in enumerate(order):
            ranks[index] = position
        return ranks

    def is_improvement(self, candidate: ObjectiveVector, incumbent: ObjectiveVector) -> bool:
        """True if the candidate ranks strictly ahead of the incumbent under the active policy"""
        return self.rank_population([incumbent, candidate]) == [1, 0]

    def pareto_fronts(self, objectives: Sequence[ObjectiveVector]) -> List[int]:
        """Non-dominated sorting: front index per individual (0 = Pareto optimal)"""
        values = np.array([[o.fuel_cost, o.trucks_used] for o in objectives], dtype=float)
        n = len(values)

        # dominates[i, j]: i is no worse in both objectives and better in one
        no_worse = np.all(values[:, None, :] <= values[None, :, :], axis=2)
        better = np.any(values[:, None, :] < values[None, :, :], axis=2)
        dominates = no_worse & better

        fronts = [-1] * n
        domination_count = dominates.sum(axis=0)
        current = [i for i in range(n) if domination_count[i] == 0]
        front = 0
        while current:
            next_front = []
            for i in current:
                fronts[i] = front
                for j in np.nonzero(dominates[i])[0]:
                    domination_count[j] -= 1
                    if domination_count[j] == 0:
                        next_front.append(int(j))
            current = next_front
            front += 1
        return fronts

    def ranked_scores(self, objectives: Sequence[ObjectiveVector]) -> List[float]:
        """Scalar score used for reporting under the active policy (lower is better)"""
        if self.ranking_policy == RankingPolicy.PARETO:
            fronts = self.pareto_fronts(objectives)
            return [float(f) + self.scalarize(o) / (1.0 + self.scalarize(o)) for f, o in zip(fronts, objectives)]
        if self.ranking_policy == RankingPolicy.LEXICOGRAPHIC:
            return [o.fuel_cost for o in objectives]
        return [self.scalarize(o) for o in objectives]

    def record_generation(self, scores: Sequence[float]) -> None:
        """Track the best score of a generation"""
        if not scores:
            return
        best = min(scores)
        self.score_history.append(best)
        if self.best_score is None or best < self.best_score:
            self.best_score = best

    def get_fitness_stats(self) -> Dict[str, Any]:
        """Get fitness evaluation statistics"""
        return {
            'evaluations': self.evaluations,
            'best_score': self.best_score,
            'ranking_policy': self.ranking_policy.value,
            'fuel_weight': self.fuel_weight,
            'truck_weight': self.truck_weight,
            'recent_improvement': self._calculate_recent_improvement()
        }

    def _calculate_recent_improvement(self) -> float:
        """Improvement of the best score over the last 10 generations"""
        if len(self.score_history) < 2:
            return 0.0
        recent = self.score_history[-10:]
        return recent[0] - recent[-1]

    def is_fitness_plateau(self, generations: int = 10, threshold: float = 0.001) -> bool:
        """Check whether the best score stopped improving"""
        if len(self.score_history) < generations:
            return False
        recent = self.score_history[-generations:]
        return max(recent) - min(recent) < threshold

    def reset_tracking(self):
        """Reset performance tracking"""
        self.evaluations = 0
        self.best_score = None
        self.score_history = []
