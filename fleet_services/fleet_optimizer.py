#!/usr/bin/env python3
"""
Fleet Optimizer
Loads fleet data, builds per-run parameters and runs the genetic trip allocator
"""

import logging
import threading
import time
from typing import Any, Dict, Optional, Tuple

from ga_common_imports import DataUnavailableError, GAError
from genetic_fleet_optimizer import GAConfig, GAResults, GeneticFleetOptimizer
from .fleet_data_manager import FleetDataManager
from .fleet_parameters import FleetParameters, build_fleet_parameters

logger = logging.getLogger(__name__)


class FleetOptimizer:
    """Manages trip allocation runs against a data source"""

    def __init__(self, data_manager: FleetDataManager, config: Optional[GAConfig] = None):
        """Initialize fleet optimizer

        Args:
            data_manager: Source of landfill and station records
            config: GA configuration applied to every run
        """
        self.data_manager = data_manager
        self.config = config or GAConfig()
        self.config.validate()
        self.last_results: Optional[GAResults] = None
        self.last_fleet_params: Optional[FleetParameters] = None

    def prepare_parameters(self, ward_number: int = FleetDataManager.DEFAULT_WARD_NUMBER) -> FleetParameters:
        """Build fresh run parameters from the data source

        Raises:
            DataUnavailableError: If landfills or the ward's station are missing
        """
        landfills = self.data_manager.load_landfills()
        station = self.data_manager.find_station(ward_number)
        return build_fleet_parameters(
            landfills, station,
            max_trips_per_truck=self.config.max_trips_per_truck,
            fuel_efficiency=self.config.fuel_efficiency
        )

    def run(self, ward_number: int = FleetDataManager.DEFAULT_WARD_NUMBER,
            cancel_event: Optional[threading.Event] = None) -> GAResults:
        """Run the genetic algorithm and keep its full results"""
        fleet_params = self.prepare_parameters(ward_number)

        logger.info(f"Optimizing fleet for ward {ward_number}: "
                    f"{fleet_params.landfill_count} landfills, {fleet_params.total_slots} truck slots")

        start_time = time.time()
        optimizer = GeneticFleetOptimizer(fleet_params, self.config)
        results = optimizer.optimize_fleet(cancel_event=cancel_event)

        logger.info(f"Fleet optimized in {time.time() - start_time:.2f}s")

        self.last_results = results
        self.last_fleet_params = fleet_params
        return results

    def optimize_fleet(self, ward_number: int = FleetDataManager.DEFAULT_WARD_NUMBER,
                       cancel_event: Optional[threading.Event] = None) -> Dict[str, Any]:
        """Optimize trip allocation and return the response dictionary

        Returns:
            {"optimalSolution": {...}, "fuelCost": float, "numTrucks": int}
        """
        return self.run(ward_number, cancel_event).to_response()

    def handle_optimize_request(self, ward_number: int = FleetDataManager.DEFAULT_WARD_NUMBER
                                ) -> Tuple[int, Dict[str, Any]]:
        """Request-level entry point

        Returns:
            (status_code, body): 200 with the response, or 500 with an error body
        """
        try:
            return 200, self.optimize_fleet(ward_number)
        except DataUnavailableError as e:
            logger.error(f"Fleet data unavailable: {e}")
            return 500, {"error": "Internal server error"}
        except GAError as e:
            logger.exception(f"Fleet optimization failed: {e}")
            return 500, {"error": "Internal server error"}
