#!/usr/bin/env python3
"""
Fleet Parameters
Builds the per-run lookup tables (slot counts, station distances, trip ceiling)
from landfill and station records
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from ga_common_imports import (
    DEFAULT_FUEL_EFFICIENCY,
    DEFAULT_MAX_TRIPS_PER_TRUCK,
    DataUnavailableError,
    calculate_distance,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LandfillRecord:
    landfill_id: str
    capacities: Tuple[float, ...]   # One entry per truck slot
    latitude: float
    longitude: float

    @property
    def coordinate(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class StationRecord:
    ward_number: int
    latitude: float
    longitude: float

    @property
    def coordinate(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class FleetParameters:
    """Immutable parameters for a single optimization run"""

    landfill_ids: Tuple[str, ...]
    slot_counts: Mapping[str, int]
    distances_km: Mapping[str, float]
    max_trips_per_truck: int
    fuel_efficiency: float
    max_total_trips: int
    ward_number: Optional[int] = None

    @property
    def landfill_count(self) -> int:
        return len(self.landfill_ids)

    @property
    def total_slots(self) -> int:
        return sum(self.slot_counts.values())

    def __reduce__(self):
        # Read-only mapping views do not pickle; rebuild them in worker processes
        return (_restore_fleet_parameters, (
            self.landfill_ids, dict(self.slot_counts), dict(self.distances_km),
            self.max_trips_per_truck, self.fuel_efficiency, self.max_total_trips, self.ward_number,
        ))

    def get_summary(self) -> dict:
        return {
            'landfills': self.landfill_count,
            'total_slots': self.total_slots,
            'max_trips_per_truck': self.max_trips_per_truck,
            'max_total_trips': self.max_total_trips,
            'fuel_efficiency': self.fuel_efficiency,
            'ward_number': self.ward_number,
            'distances_km': dict(self.distances_km),
        }


def _restore_fleet_parameters(landfill_ids, slot_counts, distances_km, max_trips_per_truck,
                              fuel_efficiency, max_total_trips, ward_number):
    return FleetParameters(
        landfill_ids=tuple(landfill_ids),
        slot_counts=MappingProxyType(dict(slot_counts)),
        distances_km=MappingProxyType(dict(distances_km)),
        max_trips_per_truck=max_trips_per_truck,
        fuel_efficiency=fuel_efficiency,
        max_total_trips=max_total_trips,
        ward_number=ward_number,
    )


def build_fleet_parameters(landfills: Iterable[LandfillRecord],
                           station: Optional[StationRecord],
                           max_trips_per_truck: int = DEFAULT_MAX_TRIPS_PER_TRUCK,
                           fuel_efficiency: float = DEFAULT_FUEL_EFFICIENCY) -> FleetParameters:
    """Build fleet parameters for one run

    Args:
        landfills: Landfill records supplied by the data source
        station: Transfer station the trucks depart from
        max_trips_per_truck: Trip cap per truck slot
        fuel_efficiency: Fuel units per km per trip

    Returns:
        FleetParameters with read-only distance and slot tables

    Raises:
        DataUnavailableError: No landfills, no station, or malformed landfill records
    """
    landfills = list(landfills or [])
    if not landfills:
        raise DataUnavailableError("No landfill records available")
    if station is None:
        raise DataUnavailableError("Transfer station could not be resolved")

    slot_counts = {}
    distances = {}
    for landfill in landfills:
        if landfill.landfill_id in slot_counts:
            raise DataUnavailableError(f"Duplicate landfill id: {landfill.landfill_id}")
        if not landfill.capacities:
            raise DataUnavailableError(f"Landfill {landfill.landfill_id} has no truck slots")

        slot_counts[landfill.landfill_id] = len(landfill.capacities)
        distances[landfill.landfill_id] = calculate_distance(station.coordinate, landfill.coordinate)

    params = FleetParameters(
        landfill_ids=tuple(slot_counts),
        slot_counts=MappingProxyType(slot_counts),
        distances_km=MappingProxyType(distances),
        max_trips_per_truck=max_trips_per_truck,
        fuel_efficiency=fuel_efficiency,
        max_total_trips=len(landfills) * max_trips_per_truck,
        ward_number=station.ward_number,
    )

    logger.debug(f"Fleet parameters built: {params.landfill_count} landfills, "
                 f"{params.total_slots} slots, max {params.max_total_trips} trips")
    return params


def fleet_parameters_from_tables(slot_counts: Mapping[str, int],
                                 distances_km: Mapping[str, float],
                                 max_trips_per_truck: int = DEFAULT_MAX_TRIPS_PER_TRUCK,
                                 fuel_efficiency: float = DEFAULT_FUEL_EFFICIENCY) -> FleetParameters:
    """Build fleet parameters from precomputed slot counts and distances"""
    if not slot_counts:
        raise DataUnavailableError("No landfill records available")
    if set(slot_counts) != set(distances_km):
        raise DataUnavailableError("Slot counts and distances cover different landfills")
    if any(count <= 0 for count in slot_counts.values()):
        raise DataUnavailableError("Every landfill needs at least one truck slot")

    landfill_ids = tuple(slot_counts)
    return FleetParameters(
        landfill_ids=landfill_ids,
        slot_counts=MappingProxyType({lid: int(slot_counts[lid]) for lid in landfill_ids}),
        distances_km=MappingProxyType({lid: float(distances_km[lid]) for lid in landfill_ids}),
        max_trips_per_truck=max_trips_per_truck,
        fuel_efficiency=fuel_efficiency,
        max_total_trips=len(landfill_ids) * max_trips_per_truck,
    )
