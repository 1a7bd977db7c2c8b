"""
Fleet Services Package
Shared functionality for landfill trip planning applications
"""

from .fleet_parameters import (
    FleetParameters,
    LandfillRecord,
    StationRecord,
    build_fleet_parameters,
    fleet_parameters_from_tables,
)
from .fleet_data_manager import FleetDataManager
from .fleet_optimizer import FleetOptimizer
from .fleet_formatter import FleetFormatter

__all__ = [
    'FleetParameters',
    'LandfillRecord',
    'StationRecord',
    'build_fleet_parameters',
    'fleet_parameters_from_tables',
    'FleetDataManager',
    'FleetOptimizer',
    'FleetFormatter'
]
