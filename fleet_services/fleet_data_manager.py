#!/usr/bin/env python3
"""
Fleet Data Manager
Handles landfill and transfer station loading and caching for trip planning
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import yaml

from ga_common_imports import DataUnavailableError
from .fleet_parameters import LandfillRecord, StationRecord

logger = logging.getLogger(__name__)


class FleetDataManager:
    """Manages landfill and station records"""

    DEFAULT_WARD_NUMBER = 123

    def __init__(self, data_path: Optional[str] = None,
                 landfills: Optional[Sequence[Any]] = None,
                 stations: Optional[Sequence[Any]] = None):
        """Initialize data manager

        Args:
            data_path: JSON or YAML document with 'landfills' and 'stations' lists
            landfills: In-memory landfill records or dicts (used instead of a file)
            stations: In-memory station records or dicts (used instead of a file)
        """
        self.data_path = data_path
        self._landfills_source = landfills
        self._stations_source = stations
        self._document_cache = {}

    def load_landfills(self) -> List[LandfillRecord]:
        """Load every landfill record

        Raises:
            DataUnavailableError: If the source is missing, malformed, or empty
        """
        raw = self._landfills_source
        if raw is None:
            raw = self._load_document().get('landfills') or []

        landfills = [self._parse_landfill(item) for item in raw]
        if not landfills:
            raise DataUnavailableError("No landfill records available")

        logger.debug(f"Loaded {len(landfills)} landfills")
        return landfills

    def load_stations(self) -> List[StationRecord]:
        raw = self._stations_source
        if raw is None:
            raw = self._load_document().get('stations') or []
        return [self._parse_station(item) for item in raw]

    def find_station(self, ward_number: int = DEFAULT_WARD_NUMBER) -> StationRecord:
        """Resolve the transfer station serving a ward

        Raises:
            DataUnavailableError: If no station serves the ward
        """
        for station in self.load_stations():
            if station.ward_number == ward_number:
                return station
        raise DataUnavailableError(f"No transfer station found for ward {ward_number}")

    def get_data_stats(self) -> Dict[str, Any]:
        """Get basic statistics about the loaded records"""
        landfills = self.load_landfills()
        stations = self.load_stations()
        return {
            'landfills': len(landfills),
            'truck_slots': sum(len(l.capacities) for l in landfills),
            'stations': len(stations),
            'wards': sorted(s.ward_number for s in stations),
            'source': self.data_path or 'memory'
        }

    def clear_cache(self):
        self._document_cache.clear()

    def _load_document(self) -> Dict[str, Any]:
        """Read and cache the data document"""
        if not self.data_path:
            raise DataUnavailableError("No data source configured")

        if self.data_path in self._document_cache:
            return self._document_cache[self.data_path]

        if not os.path.exists(self.data_path):
            raise DataUnavailableError(f"Data file not found: {self.data_path}")

        try:
            with open(self.data_path, 'r') as f:
                if self.data_path.endswith(('.yaml', '.yml')):
                    document = yaml.safe_load(f)
                else:
                    document = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise DataUnavailableError(f"Could not read data file {self.data_path}: {e}") from e

        if not isinstance(document, dict):
            raise DataUnavailableError(f"Data file {self.data_path} must contain a mapping")

        self._document_cache[self.data_path] = document
        logger.info(f"Loaded fleet data from {self.data_path}")
        return document

    @staticmethod
    def _parse_landfill(item: Any) -> LandfillRecord:
        if isinstance(item, LandfillRecord):
            return item

        try:
            landfill_id = item.get('landfill_id', item.get('landfillId'))
            capacities = item.get('capacities', item.get('capacity'))
            if landfill_id is None or capacities is None:
                raise KeyError('landfill_id/capacity')
            return LandfillRecord(
                landfill_id=str(landfill_id),
                capacities=tuple(capacities),
                latitude=float(item['latitude']),
                longitude=float(item['longitude'])
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise DataUnavailableError(f"Malformed landfill record {item!r}: {e}") from e

    @staticmethod
    def _parse_station(item: Any) -> StationRecord:
        if isinstance(item, StationRecord):
            return item

        try:
            ward_number = item.get('ward_number', item.get('wardNumber'))
            if ward_number is None:
                raise KeyError('ward_number')
            return StationRecord(
                ward_number=int(ward_number),
                latitude=float(item['latitude']),
                longitude=float(item['longitude'])
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise DataUnavailableError(f"Malformed station record {item!r}: {e}") from e
