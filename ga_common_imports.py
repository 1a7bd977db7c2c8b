#!/usr/bin/env python3
"""
Common Imports for GA Components
Consolidates constants, logging setup, distance helpers and exceptions
shared across the fleet trip allocation GA
"""

# Standard library imports
import sys
import time
import math
import logging
from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Any

# Third-party imports
import numpy as np

# Run parameters
DEFAULT_MAX_TRIPS_PER_TRUCK = 3
DEFAULT_FUEL_EFFICIENCY = 0.1       # Fuel units per km per trip

# GA defaults
DEFAULT_POPULATION_SIZE = 100
DEFAULT_MAX_GENERATIONS = 100
DEFAULT_MUTATION_RATE = 0.2
DEFAULT_CROSSOVER_RATE = 0.8
DEFAULT_ELITE_SIZE = 2
DEFAULT_TOURNAMENT_SIZE = 3

# Earth radius in kilometers
EARTH_RADIUS_KM = 6371.0

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


# Common utility functions
def setup_logging(level=logging.INFO):
    """Set up logging configuration"""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def calculate_distance(coord1: Tuple[float, float], coord2: Tuple[float, float]) -> float:
    """Great-circle distance between two (lat, lon) coordinates

    Args:
        coord1: (latitude, longitude) in degrees
        coord2: (latitude, longitude) in degrees

    Returns:
        Distance in kilometers
    """
    lat1, lon1 = coord1
    lat2, lon2 = coord2

    # Haversine formula
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value to range"""
    return max(min_val, min(max_val, value))


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from zero for non-negative input"""
    return int(math.floor(value + 0.5))


# Common exception classes
class GAError(Exception):
    """Base GA exception"""
    pass


class DataUnavailableError(GAError):
    """Landfill or station data missing or empty"""
    pass


class InvalidCandidateError(GAError):
    """Candidate breaks its structural invariants (operator bug)"""
    pass


class ConstraintViolationError(GAError):
    """Candidate exceeds the total trip ceiling"""
    pass


class ConfigurationError(GAError):
    """Invalid GA configuration"""
    pass


class OptimizationError(GAError):
    """Optimization error"""
    pass


# Common data structures
@dataclass
class GAStatistics:
    """Per-generation statistics over the two objectives"""
    generation: int = 0
    best_score: float = 0.0
    avg_score: float = 0.0
    worst_score: float = 0.0
    score_std: float = 0.0
    best_fuel_cost: float = 0.0
    avg_fuel_cost: float = 0.0
    min_trucks_used: int = 0
    avg_trucks_used: float = 0.0
    diversity_score: float = 0.0
    elapsed_time: float = 0.0

    def update(self, population: List[Any], scores: List[float]):
        """Update statistics from population and its ranked scores (lower is better)"""
        if not population or not scores:
            return

        self.best_score = float(min(scores))
        self.avg_score = float(np.mean(scores))
        self.worst_score = float(max(scores))
        self.score_std = float(np.std(scores))

        fuel_costs = [c.fuel_cost for c in population if c.fuel_cost is not None]
        trucks = [c.trucks_used for c in population if c.trucks_used is not None]
        if fuel_costs:
            self.best_fuel_cost = float(min(fuel_costs))
            self.avg_fuel_cost = float(np.mean(fuel_costs))
        if trucks:
            self.min_trucks_used = int(min(trucks))
            self.avg_trucks_used = float(np.mean(trucks))

        # Share of distinct allocation plans
        unique_plans = {chromosome.signature() for chromosome in population}
        self.diversity_score = len(unique_plans) / len(population)


# Performance monitoring
class GAPerformanceMonitor:
    """Monitor GA performance metrics"""

    def __init__(self):
        self.start_time = None
        self.generation_times = []
        self.score_history = []
        self.diversity_history = []
        self.statistics: List[GAStatistics] = []

    def start_timing(self):
        """Start timing a GA run"""
        self.start_time = time.time()

    def record_generation(self, generation: int, statistics: GAStatistics):
        """Record generation statistics"""
        if self.start_time:
            statistics.elapsed_time = time.time() - self.start_time

        statistics.generation = generation
        self.statistics.append(statistics)
        self.score_history.append(statistics.best_score)
        self.diversity_history.append(statistics.diversity_score)

        if len(self.score_history) > 1:
            self.generation_times.append(statistics.elapsed_time)

    def get_performance_summary(self) -> Dict[str, Any]:
        """Get performance summary"""
        if not self.score_history:
            return {}

        total_time = self.statistics[-1].elapsed_time
        return {
            'total_time': total_time,
            'avg_generation_time': total_time / max(len(self.generation_times), 1),
            'best_score_achieved': min(self.score_history),
            'final_score': self.score_history[-1],
            'score_improvement': self.score_history[0] - self.score_history[-1],
            'avg_diversity': float(np.mean(self.diversity_history)),
            'generations_run': len(self.score_history) - 1
        }


__all__ = [
    # Constants
    'DEFAULT_MAX_TRIPS_PER_TRUCK', 'DEFAULT_FUEL_EFFICIENCY',
    'DEFAULT_POPULATION_SIZE', 'DEFAULT_MAX_GENERATIONS', 'DEFAULT_MUTATION_RATE',
    'DEFAULT_CROSSOVER_RATE', 'DEFAULT_ELITE_SIZE', 'DEFAULT_TOURNAMENT_SIZE',
    'EARTH_RADIUS_KM', 'LOG_FORMAT',

    # Utility functions
    'setup_logging', 'calculate_distance', 'clamp', 'round_half_up',

    # Exception classes
    'GAError', 'DataUnavailableError', 'InvalidCandidateError',
    'ConstraintViolationError', 'ConfigurationError', 'OptimizationError',

    # Data structures
    'GAStatistics', 'GAPerformanceMonitor'
]
