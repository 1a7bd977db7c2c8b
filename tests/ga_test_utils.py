#!/usr/bin/env python3
"""
GA Test Utilities
Common test setup patterns and utilities for GA unit tests
"""

import random
import unittest
from typing import Dict, List, Sequence
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fleet_services.fleet_parameters import (
    FleetParameters, LandfillRecord, StationRecord, fleet_parameters_from_tables
)
from ga_chromosome import TripAllocationChromosome
from ga_fitness import GAFitnessEvaluator
from ga_operators import GAOperators
from ga_population import PopulationInitializer


class GATestBase(unittest.TestCase):
    """Base test class with common GA test setup"""

    def setUp(self):
        """Set up common test fixtures"""
        # Two landfills, two truck slots each, 10 km and 20 km from the station
        self.fleet_params = self.create_fleet_params()
        self.rng = random.Random(42)

        # Create GA components
        self.operators = GAOperators(self.fleet_params, self.rng)
        self.fitness_evaluator = GAFitnessEvaluator(self.fleet_params)
        self.population_initializer = PopulationInitializer(self.fleet_params, self.rng)

    @staticmethod
    def create_fleet_params(slot_counts: Dict[str, int] = None,
                            distances_km: Dict[str, float] = None,
                            max_trips_per_truck: int = 3,
                            fuel_efficiency: float = 0.1) -> FleetParameters:
        """Create fleet parameters from simple tables"""
        slot_counts = slot_counts or {'L1': 2, 'L2': 2}
        distances_km = distances_km or {'L1': 10.0, 'L2': 20.0}
        return fleet_parameters_from_tables(slot_counts, distances_km,
                                            max_trips_per_truck=max_trips_per_truck,
                                            fuel_efficiency=fuel_efficiency)

    @staticmethod
    def create_chromosome(allocation: Dict[str, Sequence[float]]) -> TripAllocationChromosome:
        return TripAllocationChromosome(allocation)

    def create_population(self, size: int = 10) -> List[TripAllocationChromosome]:
        return self.population_initializer.create_population(size)

    def assert_chromosome_valid(self, chromosome: TripAllocationChromosome,
                                fleet_params: FleetParameters = None):
        """Assert all three candidate invariants hold"""
        fleet_params = fleet_params or self.fleet_params
        self.assertEqual(list(chromosome.allocation), list(fleet_params.landfill_ids))
        for landfill_id, trips in chromosome.allocation.items():
            self.assertEqual(len(trips), fleet_params.slot_counts[landfill_id])
            for value in trips:
                self.assertGreaterEqual(value, 0)
                self.assertLessEqual(value, fleet_params.max_trips_per_truck)
        self.assertTrue(chromosome.is_valid(fleet_params))

    def assert_population_valid(self, population: List[TripAllocationChromosome], size: int):
        self.assertEqual(len(population), size)
        for chromosome in population:
            self.assert_chromosome_valid(chromosome)


class FleetTestData:
    """Landfill and station records for service tests"""

    STATION = StationRecord(ward_number=123, latitude=23.7465, longitude=90.3760)

    LANDFILLS = [
        LandfillRecord('amin-bazar', (5, 5, 7), 23.7925, 90.3037),
        LandfillRecord('matuail', (7, 7), 23.7167, 90.4667),
    ]

    @classmethod
    def document(cls) -> Dict[str, list]:
        """Raw document in the data file layout"""
        return {
            'stations': [
                {'wardNumber': cls.STATION.ward_number,
                 'latitude': cls.STATION.latitude,
                 'longitude': cls.STATION.longitude},
                {'wardNumber': 45, 'latitude': 23.8103, 'longitude': 90.4125},
            ],
            'landfills': [
                {'landfillId': l.landfill_id, 'capacity': list(l.capacities),
                 'latitude': l.latitude, 'longitude': l.longitude}
                for l in cls.LANDFILLS
            ]
        }
