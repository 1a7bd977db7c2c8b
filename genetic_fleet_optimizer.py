#!/usr/bin/env python3
"""
Genetic Algorithm Fleet Optimizer
Main genetic algorithm implementation for landfill trip allocation
"""

import time
import random
import logging
import threading
from typing import List, Dict, Any, Optional, Tuple, Callable, TYPE_CHECKING
from dataclasses import dataclass, field, asdict

from ga_chromosome import TripAllocationChromosome
from ga_common_imports import (
    DEFAULT_CROSSOVER_RATE,
    DEFAULT_ELITE_SIZE,
    DEFAULT_FUEL_EFFICIENCY,
    DEFAULT_MAX_GENERATIONS,
    DEFAULT_MAX_TRIPS_PER_TRUCK,
    DEFAULT_MUTATION_RATE,
    DEFAULT_POPULATION_SIZE,
    DEFAULT_TOURNAMENT_SIZE,
    ConfigurationError,
    GAPerformanceMonitor,
    GAStatistics,
)
from ga_fitness import GAFitnessEvaluator, ObjectiveVector, RankingPolicy
from ga_operators import GAOperators
from ga_parallel_evaluator import GAParallelEvaluator, ParallelConfig
from ga_population import PopulationInitializer

if TYPE_CHECKING:
    from fleet_services.fleet_parameters import FleetParameters

# Configure logging
logger = logging.getLogger(__name__)

SELECTION_METHODS = ("tournament", "rank")


@dataclass
class GAConfig:
    """Configuration for genetic algorithm"""
    max_trips_per_truck: int = DEFAULT_MAX_TRIPS_PER_TRUCK
    fuel_efficiency: float = DEFAULT_FUEL_EFFICIENCY
    population_size: int = DEFAULT_POPULATION_SIZE
    crossover_rate: float = DEFAULT_CROSSOVER_RATE
    mutation_rate: float = DEFAULT_MUTATION_RATE
    max_generations: int = DEFAULT_MAX_GENERATIONS
    elitism: bool = True
    elite_size: int = DEFAULT_ELITE_SIZE
    selection_method: str = "tournament"
    tournament_size: int = DEFAULT_TOURNAMENT_SIZE
    ranking_policy: str = "weighted_sum"
    fuel_weight: float = 1.0
    truck_weight: float = 1.0
    max_offspring_attempts: int = 1000
    time_limit_seconds: Optional[float] = None
    random_seed: Optional[int] = None
    max_workers: Optional[int] = None
    use_processes: bool = False
    verbose: bool = False

    def validate(self):
        """Raise ConfigurationError on the first invalid value"""
        if self.population_size < 1:
            raise ConfigurationError(f"population_size must be >= 1, got {self.population_size}")
        if self.max_generations < 0:
            raise ConfigurationError(f"max_generations must be >= 0, got {self.max_generations}")
        if self.max_trips_per_truck < 1:
            raise ConfigurationError(f"max_trips_per_truck must be >= 1, got {self.max_trips_per_truck}")
        if self.fuel_efficiency < 0:
            raise ConfigurationError(f"fuel_efficiency must be >= 0, got {self.fuel_efficiency}")

        for name in ('crossover_rate', 'mutation_rate'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be within [0, 1], got {value}")

        if self.elite_size < 0:
            raise ConfigurationError(f"elite_size must be >= 0, got {self.elite_size}")
        if self.tournament_size < 1:
            raise ConfigurationError(f"tournament_size must be >= 1, got {self.tournament_size}")
        if self.max_offspring_attempts < 1:
            raise ConfigurationError(f"max_offspring_attempts must be >= 1, got {self.max_offspring_attempts}")
        if self.selection_method not in SELECTION_METHODS:
            raise ConfigurationError(
                f"selection_method must be one of {SELECTION_METHODS}, got {self.selection_method!r}"
            )

        valid_policies = [policy.value for policy in RankingPolicy]
        if str(self.ranking_policy).lower() not in valid_policies:
            raise ConfigurationError(
                f"ranking_policy must be one of {valid_policies}, got {self.ranking_policy!r}"
            )

        if self.fuel_weight < 0 or self.truck_weight < 0:
            raise ConfigurationError("Objective weights must be non-negative")
        if self.fuel_weight == 0 and self.truck_weight == 0:
            raise ConfigurationError("Fuel and truck weights cannot both be zero")
        if self.time_limit_seconds is not None and self.time_limit_seconds <= 0:
            raise ConfigurationError(f"time_limit_seconds must be positive, got {self.time_limit_seconds}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GAResults:
    """Results from genetic algorithm optimization"""
    best_chromosome: TripAllocationChromosome
    best_solution: Dict[str, List[int]]
    fuel_cost: float
    trucks_used: int
    best_score: float
    generation_found: int
    total_generations: int
    total_time: float
    convergence_reason: str
    fitness_history: List[List[float]]
    objective_history: List[List[ObjectiveVector]]
    stats: Dict[str, Any] = field(default_factory=dict)

    def to_response(self) -> Dict[str, Any]:
        """Optimization response format"""
        return {
            'optimalSolution': {landfill_id: list(trips) for landfill_id, trips in self.best_solution.items()},
            'fuelCost': self.fuel_cost,
            'numTrucks': self.trucks_used,
        }


class GeneticFleetOptimizer:
    """Main genetic algorithm optimizer for trip allocation"""

    def __init__(self, fleet_params: 'FleetParameters', config: Optional[GAConfig] = None):
        """Initialize genetic optimizer

        Args:
            fleet_params: Per-run distance table, slot counts and trip ceiling
            config: GA configuration parameters
        """
        self.fleet_params = fleet_params
        self.config = config or GAConfig()
        self.config.validate()

        # Initialize components
        self.rng = None
        self.population_initializer = None
        self.operators = None
        self.fitness_evaluator = None
        self.parallel_evaluator = None
        self.performance_monitor = None

        # Evolution tracking
        self.generation = 0
        self.fitness_history = []
        self.objective_history = []
        self.best_generation = 0
        self.discarded_offspring = 0
        self.regenerated_offspring = 0

        # Callbacks
        self.generation_callback = None
        self.progress_callback = None

    def optimize_fleet(self, cancel_event: Optional[threading.Event] = None) -> GAResults:
        """Optimize trip allocation using genetic algorithm

        Args:
            cancel_event: Optional event; when set, the run stops at the next generation boundary

        Returns:
            GAResults with the best-ranked plan of the final population
        """
        self._setup_optimization()
        log = logger.info if self.config.verbose else logger.debug

        logger.info(f"Starting GA optimization: {self.fleet_params.landfill_count} landfills, "
                    f"{self.fleet_params.total_slots} truck slots, "
                    f"population {self.config.population_size}, "
                    f"max generations {self.config.max_generations}, "
                    f"ranking {self.fitness_evaluator.ranking_policy.value}")

        # Initialize population
        population = self.population_initializer.create_population(self.config.population_size)
        objectives, scores, ranks = self._evaluate_and_rank(population)
        self._record_generation(0, population, objectives, scores)

        best_index = ranks.index(0)
        best_objectives = objectives[best_index]
        log(f"Initial population: best fuel={objectives[best_index].fuel_cost:.4f}, "
            f"trucks={objectives[best_index].trucks_used}")

        # Main evolution loop
        start_time = time.time()
        convergence_reason = "max_generations"

        for generation in range(1, self.config.max_generations + 1):
            if cancel_event is not None and cancel_event.is_set():
                convergence_reason = "cancelled"
                logger.info(f"Optimization cancelled before generation {generation}")
                break
            if (self.config.time_limit_seconds is not None and
                    time.time() - start_time >= self.config.time_limit_seconds):
                convergence_reason = "time_limit"
                logger.info(f"Time limit of {self.config.time_limit_seconds}s reached "
                            f"before generation {generation}")
                break

            self.generation = generation
            gen_start_time = time.time()

            # Evolve population
            population = self._evolve_generation(population, ranks, generation)
            objectives, scores, ranks = self._evaluate_and_rank(population)
            self._record_generation(generation, population, objectives, scores)

            # Update best tracking
            current_best = objectives[ranks.index(0)]
            if self.fitness_evaluator.is_improvement(current_best, best_objectives):
                best_objectives = current_best
                self.best_generation = generation

            log(f"Gen {generation:3d}: best fuel={current_best.fuel_cost:.4f}, "
                f"trucks={current_best.trucks_used}, "
                f"avg score={sum(scores) / len(scores):.4f}, "
                f"time={time.time() - gen_start_time:.3f}s")

            # Generation callback
            if self.generation_callback:
                self.generation_callback(generation, population, objectives)

            # Progress callback
            if self.progress_callback:
                progress = generation / self.config.max_generations
                self.progress_callback(progress, min(scores))

        total_time = time.time() - start_time

        # Best-ranked member of the final population
        best_chromosome = population[ranks.index(0)].copy()
        best_chromosome.validate_structure(self.fleet_params)
        best_solution = best_chromosome.decode(self.fleet_params.max_trips_per_truck)

        results = GAResults(
            best_chromosome=best_chromosome,
            best_solution=best_solution,
            fuel_cost=best_chromosome.fuel_cost,
            trucks_used=best_chromosome.trucks_used,
            best_score=best_chromosome.score,
            generation_found=self.best_generation,
            total_generations=self.generation,
            total_time=total_time,
            convergence_reason=convergence_reason,
            fitness_history=self.fitness_history,
            objective_history=self.objective_history,
            stats=self._get_optimization_stats()
        )

        logger.info(f"Optimization completed: fuel={results.fuel_cost:.4f}, "
                    f"trucks={results.trucks_used}, generations={results.total_generations}, "
                    f"time={total_time:.2f}s, reason={convergence_reason}")
        return results

    def _setup_optimization(self):
        """Setup optimization components"""
        self.rng = random.Random(self.config.random_seed)
        self.population_initializer = PopulationInitializer(self.fleet_params, self.rng)
        self.operators = GAOperators(self.fleet_params, self.rng)
        self.fitness_evaluator = GAFitnessEvaluator(
            self.fleet_params,
            ranking_policy=self.config.ranking_policy,
            fuel_weight=self.config.fuel_weight,
            truck_weight=self.config.truck_weight
        )
        self.parallel_evaluator = GAParallelEvaluator(
            self.fleet_params,
            ParallelConfig(max_workers=self.config.max_workers, use_processes=self.config.use_processes)
        )
        self.performance_monitor = GAPerformanceMonitor()
        self.performance_monitor.start_timing()

        # Reset tracking
        self.generation = 0
        self.fitness_history = []
        self.objective_history = []
        self.best_generation = 0
        self.discarded_offspring = 0
        self.regenerated_offspring = 0

    def _evaluate_and_rank(self, population: List[TripAllocationChromosome]
                           ) -> Tuple[List[ObjectiveVector], List[float], List[int]]:
        """Evaluate a population and rank it under the configured policy"""
        objectives = self.parallel_evaluator.evaluate_population(population)
        scores = self.fitness_evaluator.ranked_scores(objectives)
        ranks = self.fitness_evaluator.rank_population(objectives)

        for chromosome, score in zip(population, scores):
            chromosome.score = score

        return objectives, scores, ranks

    def _record_generation(self, generation: int, population: List[TripAllocationChromosome],
                           objectives: List[ObjectiveVector], scores: List[float]):
        self.fitness_history.append(list(scores))
        self.objective_history.append(list(objectives))
        self.fitness_evaluator.record_generation(scores)

        statistics = GAStatistics()
        statistics.update(population, scores)
        self.performance_monitor.record_generation(generation, statistics)

    def _select_parent(self, population: List[TripAllocationChromosome],
                       ranks: List[int]) -> TripAllocationChromosome:
        if self.config.selection_method == "rank":
            return self.operators.rank_selection(population, ranks)
        return self.operators.tournament_selection(population, ranks, self.config.tournament_size)

    def _evolve_generation(self, population: List[TripAllocationChromosome],
                           ranks: List[int], generation: int) -> List[TripAllocationChromosome]:
        """Evolve population for one generation"""
        size = self.config.population_size
        new_population = []

        # Elitism - preserve best individuals unchanged
        if self.config.elitism and self.config.elite_size > 0:
            elite = self.operators.elitism_selection(population, ranks, self.config.elite_size)
            new_population.extend(chromosome.copy() for chromosome in elite[:size])

        # Generate offspring, discarding infeasible children
        attempts = 0
        while len(new_population) < size and attempts < self.config.max_offspring_attempts:
            attempts += 1

            # Selection
            parent1 = self._select_parent(population, ranks)
            parent2 = self._select_parent(population, ranks)

            offspring1, offspring2 = self.operators.landfill_swap_crossover(
                parent1, parent2, self.config.crossover_rate
            )

            for offspring in (offspring1, offspring2):
                child = self.operators.trip_step_mutation(offspring, self.config.mutation_rate)
                if len(new_population) >= size:
                    break
                if child.is_valid(self.fleet_params):
                    child.generation = generation
                    new_population.append(child)
                else:
                    self.discarded_offspring += 1

        # Fill any gap with fresh feasible candidates
        while len(new_population) < size:
            fresh = self.population_initializer.create_individual()
            fresh.generation = generation
            new_population.append(fresh)
            self.regenerated_offspring += 1

        return new_population

    def _get_optimization_stats(self) -> Dict[str, Any]:
        """Get comprehensive optimization statistics"""
        if not self.fitness_history:
            return {}

        best_per_generation = [min(gen_scores) for gen_scores in self.fitness_history]
        avg_per_generation = [sum(gen_scores) / len(gen_scores) for gen_scores in self.fitness_history]
        best_fuel_per_generation = [min(o.fuel_cost for o in gen) for gen in self.objective_history]
        min_trucks_per_generation = [min(o.trucks_used for o in gen) for gen in self.objective_history]

        return {
            'total_evaluations': self.parallel_evaluator.total_evaluations,
            'best_score_progression': best_per_generation,
            'avg_score_progression': avg_per_generation,
            'best_fuel_progression': best_fuel_per_generation,
            'min_trucks_progression': min_trucks_per_generation,
            'score_improvement': best_per_generation[0] - best_per_generation[-1],
            'convergence_generation': self.best_generation,
            'discarded_offspring': self.discarded_offspring,
            'regenerated_offspring': self.regenerated_offspring,
            'fitness_plateau': self.fitness_evaluator.is_fitness_plateau(),
            'ranking_policy': self.fitness_evaluator.ranking_policy.value,
            'selection_method': self.config.selection_method,
            'performance': self.performance_monitor.get_performance_summary(),
            'evaluation': self.parallel_evaluator.get_performance_stats(),
            'fleet': self.fleet_params.get_summary(),
        }

    def set_generation_callback(self, callback: Callable[[int, List[TripAllocationChromosome],
                                                          List[ObjectiveVector]], None]):
        """Set callback for each generation"""
        self.generation_callback = callback

    def set_progress_callback(self, callback: Callable[[float, float], None]):
        """Set callback for progress updates"""
        self.progress_callback = callback
