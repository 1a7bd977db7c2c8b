#!/usr/bin/env python3
"""
GA Parallel Population Evaluator
Parallel objective evaluation for genetic algorithm populations
"""

import logging
import os
import pickle
import time
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from concurrent.futures import BrokenExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Callable, Tuple, TYPE_CHECKING

from ga_chromosome import TripAllocationChromosome
from ga_common_imports import OptimizationError
from ga_fitness import GAFitnessEvaluator, ObjectiveVector

if TYPE_CHECKING:
    from fleet_services.fleet_parameters import FleetParameters

logger = logging.getLogger(__name__)


@dataclass
class ParallelConfig:
    """Configuration for parallel evaluation"""
    max_workers: Optional[int] = None
    chunk_size: int = 10
    use_processes: bool = False
    timeout_seconds: float = 30.0
    enable_batching: bool = True
    batch_size: int = 50


@dataclass
class EvaluationResult:
    """Result of chromosome evaluation"""
    task_id: int
    objectives: Optional[ObjectiveVector]
    evaluation_time: float
    success: bool
    error_message: Optional[str] = None


class WorkerProcess:
    """Worker functions for chromosome evaluation"""

    @staticmethod
    def evaluate_batch_worker(args: Tuple[List[TripAllocationChromosome], 'FleetParameters', List[int]]
                              ) -> List[EvaluationResult]:
        """Worker function for evaluating a batch of chromosomes

        Workers receive their own chromosome copies and only return objective values.

        Args:
            args: Tuple of (chromosomes, fleet_params, task_ids)

        Returns:
            List of EvaluationResult objects
        """
        chromosomes, fleet_params, task_ids = args
        results = []

        # Each worker needs its own evaluator instance
        evaluator = GAFitnessEvaluator(fleet_params)

        for chromosome, task_id in zip(chromosomes, task_ids):
            start_time = time.time()

            try:
                objectives = evaluator.evaluate_chromosome(chromosome)
                results.append(EvaluationResult(
                    task_id=task_id,
                    objectives=objectives,
                    evaluation_time=time.time() - start_time,
                    success=True
                ))

            except Exception as e:
                results.append(EvaluationResult(
                    task_id=task_id,
                    objectives=None,
                    evaluation_time=time.time() - start_time,
                    success=False,
                    error_message=f"{type(e).__name__}: {e}"
                ))

        return results


class GAParallelEvaluator:
    """Parallel evaluator for GA populations"""

    def __init__(self, fleet_params: 'FleetParameters', config: Optional[ParallelConfig] = None):
        """Initialize parallel evaluator

        Args:
            fleet_params: Per-run parameters shared read-only with workers
            config: Parallel evaluation configuration
        """
        self.fleet_params = fleet_params
        self.config = config or ParallelConfig()

        # Auto-detect worker count if not specified
        if self.config.max_workers is None:
            cpu_count = os.cpu_count() or 4
            self.config.max_workers = max(1, cpu_count - 1)  # Leave one CPU free

        # Performance tracking
        self.total_evaluations = 0
        self.total_evaluation_time = 0.0
        self.parallel_evaluations = 0
        self.sequential_evaluations = 0
        self.failed_evaluations = 0

        logger.debug(f"Parallel evaluator initialized: {self.config.max_workers} workers, "
                     f"{'processes' if self.config.use_processes else 'threads'}")

    def evaluate_population(self, population: List[TripAllocationChromosome],
                            progress_callback: Optional[Callable[[float], None]] = None
                            ) -> List[ObjectiveVector]:
        """Evaluate both objectives for every chromosome

        Returns once all evaluations are done; objectives are listed in population
        order and cached on the chromosomes.

        Args:
            population: Population to evaluate
            progress_callback: Optional progress reporting function

        Returns:
            List of objective vectors
        """
        if not population:
            return []

        start_time = time.time()

        if len(population) < self.config.chunk_size or self.config.max_workers <= 1:
            objectives = self._evaluate_population_sequential(population)
        else:
            objectives = self._evaluate_population_parallel(population, progress_callback)

        # Write results back; workers only saw copies
        for chromosome, vector in zip(population, objectives):
            chromosome.fuel_cost = vector.fuel_cost
            chromosome.trucks_used = vector.trucks_used

        self.total_evaluations += len(population)
        self.total_evaluation_time += time.time() - start_time
        return objectives

    def _evaluate_population_sequential(self, population: List[TripAllocationChromosome]
                                        ) -> List[ObjectiveVector]:
        """Sequential evaluation for small populations"""
        evaluator = GAFitnessEvaluator(self.fleet_params)
        objectives = [evaluator.evaluate_chromosome(chromosome) for chromosome in population]
        self.sequential_evaluations += len(population)
        return objectives

    def _evaluate_population_parallel(self, population: List[TripAllocationChromosome],
                                      progress_callback: Optional[Callable[[float], None]]
                                      ) -> List[ObjectiveVector]:
        """Parallel evaluation with batched tasks"""
        if self.config.enable_batching:
            batch_size = self.config.batch_size
        else:
            batch_size = max(1, len(population) // self.config.max_workers)

        # Create batches of chromosome copies
        batches = []
        for i in range(0, len(population), batch_size):
            batch = [chromosome.copy() for chromosome in population[i:i + batch_size]]
            batches.append((batch, self.fleet_params, list(range(i, i + len(batch)))))

        executor_class = ProcessPoolExecutor if self.config.use_processes else ThreadPoolExecutor
        objectives: List[Optional[ObjectiveVector]] = [None] * len(population)
        failures = []
        completed_batches = 0

        try:
            with executor_class(max_workers=self.config.max_workers) as executor:
                futures = [executor.submit(WorkerProcess.evaluate_batch_worker, batch) for batch in batches]

                for future in as_completed(futures, timeout=self.config.timeout_seconds):
                    for result in future.result():
                        if result.success:
                            objectives[result.task_id] = result.objectives
                        else:
                            failures.append(result)

                    completed_batches += 1
                    if progress_callback:
                        progress_callback(completed_batches / len(batches))
        except (FuturesTimeoutError, BrokenExecutor, OSError, pickle.PicklingError) as e:
            logger.warning(f"Parallel batch evaluation failed, falling back to sequential: "
                           f"{type(e).__name__}: {e}")
            return self._evaluate_population_sequential(population)

        if failures:
            self.failed_evaluations += len(failures)
            first = failures[0]
            raise OptimizationError(
                f"{len(failures)} evaluations failed; task {first.task_id}: {first.error_message}"
            )

        self.parallel_evaluations += len(population)
        return objectives

    def get_performance_stats(self) -> Dict[str, Any]:
        """Get parallel evaluation performance statistics"""
        avg_evaluation_time = self.total_evaluation_time / max(self.total_evaluations, 1)
        parallel_ratio = self.parallel_evaluations / max(self.total_evaluations, 1)

        return {
            'total_evaluations': self.total_evaluations,
            'total_evaluation_time': self.total_evaluation_time,
            'avg_evaluation_time': avg_evaluation_time,
            'parallel_evaluations': self.parallel_evaluations,
            'sequential_evaluations': self.sequential_evaluations,
            'failed_evaluations': self.failed_evaluations,
            'parallel_ratio': parallel_ratio,
            'max_workers': self.config.max_workers,
            'use_processes': self.config.use_processes,
            'batch_size': self.config.batch_size if self.config.enable_batching else None
        }
