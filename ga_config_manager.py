#!/usr/bin/env python3
"""
GA Configuration Management System
Centralized configuration management for genetic algorithm parameters
"""

import json
import os
import time
import logging
import threading
from typing import Dict, Any, List, Optional, Callable
from dataclasses import dataclass, field, asdict, fields
from enum import Enum

import yaml

from ga_common_imports import ConfigurationError
from genetic_fleet_optimizer import GAConfig

logger = logging.getLogger(__name__)


class ConfigScope(Enum):
    """Configuration scope levels"""
    GLOBAL = "global"           # Schema defaults
    PROFILE = "profile"         # Named configuration profiles
    FILE = "file"               # Values loaded from a configuration file
    SESSION = "session"         # Session-specific overrides


@dataclass
class ConfigValidationRule:
    """Configuration validation rule"""
    parameter_name: str
    validator: Callable[[Any, Dict[str, Any]], bool]
    error_message: str
    dependency_params: List[str] = field(default_factory=list)
    warning_only: bool = False


@dataclass
class ConfigProfile:
    """Named configuration profile"""
    name: str
    description: str
    parameters: Dict[str, Any]
    created_timestamp: float = field(default_factory=time.time)
    usage_count: int = 0


@dataclass
class ConfigChange:
    """Configuration change record"""
    parameter_name: str
    old_value: Any
    new_value: Any
    scope: ConfigScope
    timestamp: float
    source: str  # user, file, cli, etc.


# Built-in profiles
DEFAULT_PROFILES = {
    'fast': ConfigProfile(
        name='fast',
        description='Small population and few generations for quick answers',
        parameters={'population_size': 30, 'max_generations': 30, 'elite_size': 1}
    ),
    'default': ConfigProfile(
        name='default',
        description='Standard settings',
        parameters={}
    ),
    'thorough': ConfigProfile(
        name='thorough',
        description='Large population and long search',
        parameters={'population_size': 200, 'max_generations': 400, 'elite_size': 4,
                    'tournament_size': 5}
    ),
}


class GAConfigManager:
    """Centralized configuration management for genetic algorithms"""

    def __init__(self, config_file: Optional[str] = None, profile: Optional[str] = None):
        """Initialize configuration manager

        Args:
            config_file: Optional JSON or YAML file with parameter overrides
            profile: Optional profile to activate
        """
        # Parameter definitions
        self.parameter_definitions = self._define_parameter_schema()
        self.validation_rules = self._define_validation_rules()

        # Configuration storage
        self.configurations = {
            ConfigScope.GLOBAL: self._get_default_parameters(),
            ConfigScope.PROFILE: {},
            ConfigScope.FILE: {},
            ConfigScope.SESSION: {}
        }

        # Named profiles
        self.profiles = {name: ConfigProfile(**asdict(p)) for name, p in DEFAULT_PROFILES.items()}
        self.active_profile = None

        # Change tracking
        self.change_history = []
        self.config_lock = threading.RLock()

        if profile:
            self.activate_profile(profile)
        if config_file:
            self.load_file(config_file)

        logger.debug(f"GA config manager initialized with {len(self.profiles)} profiles")

    def _define_parameter_schema(self) -> Dict[str, Dict[str, Any]]:
        """Define schema for all GA parameters"""
        return {
            # Run parameters
            'max_trips_per_truck': {
                'type': int,
                'range': (1, 100),
                'default': 3,
                'description': 'Maximum trips one truck slot may make',
                'category': 'fleet'
            },
            'fuel_efficiency': {
                'type': float,
                'range': (0.0, 100.0),
                'default': 0.1,
                'description': 'Fuel units consumed per km per trip',
                'category': 'fleet'
            },

            # Population parameters
            'population_size': {
                'type': int,
                'range': (1, 10000),
                'default': 100,
                'description': 'Size of the genetic algorithm population',
                'category': 'population'
            },
            'elitism': {
                'type': bool,
                'default': True,
                'description': 'Copy the best individuals unchanged into the next generation',
                'category': 'selection'
            },
            'elite_size': {
                'type': int,
                'range': (0, 1000),
                'default': 2,
                'description': 'Number of elite individuals to preserve',
                'category': 'selection'
            },
            'selection_method': {
                'type': str,
                'choices': ('tournament', 'rank'),
                'default': 'tournament',
                'description': 'Parent selection operator',
                'category': 'selection'
            },
            'tournament_size': {
                'type': int,
                'range': (1, 100),
                'default': 3,
                'description': 'Size of tournament for selection',
                'category': 'selection'
            },

            # Genetic operators
            'mutation_rate': {
                'type': float,
                'range': (0.0, 1.0),
                'default': 0.2,
                'description': 'Probability of mutation for each child',
                'category': 'operators'
            },
            'crossover_rate': {
                'type': float,
                'range': (0.0, 1.0),
                'default': 0.8,
                'description': 'Probability of crossover between parents',
                'category': 'operators'
            },
            'max_offspring_attempts': {
                'type': int,
                'range': (1, 1000000),
                'default': 1000,
                'description': 'Breeding attempts per generation before fresh candidates fill the gap',
                'category': 'operators'
            },

            # Ranking
            'ranking_policy': {
                'type': str,
                'choices': ('weighted_sum', 'lexicographic', 'pareto'),
                'default': 'weighted_sum',
                'description': 'How fuel cost and trucks used are ordered',
                'category': 'fitness'
            },
            'fuel_weight': {
                'type': float,
                'range': (0.0, 1000.0),
                'default': 1.0,
                'description': 'Weight for fuel cost in weighted ranking',
                'category': 'fitness'
            },
            'truck_weight': {
                'type': float,
                'range': (0.0, 1000.0),
                'default': 1.0,
                'description': 'Weight for trucks used in weighted ranking',
                'category': 'fitness'
            },

            # Termination criteria
            'max_generations': {
                'type': int,
                'range': (0, 100000),
                'default': 100,
                'description': 'Maximum number of generations',
                'category': 'termination'
            },
            'time_limit_seconds': {
                'type': float,
                'range': (0.001, 86400.0),
                'nullable': True,
                'default': None,
                'description': 'Wall-clock limit checked between generations',
                'category': 'termination'
            },

            # Run control
            'random_seed': {
                'type': int,
                'nullable': True,
                'default': None,
                'description': 'Seed for the run-owned random generator',
                'category': 'run'
            },
            'max_workers': {
                'type': int,
                'range': (1, 512),
                'nullable': True,
                'default': None,
                'description': 'Evaluation workers (None = CPU count - 1)',
                'category': 'performance'
            },
            'use_processes': {
                'type': bool,
                'default': False,
                'description': 'Evaluate with processes instead of threads',
                'category': 'performance'
            },
            'verbose': {
                'type': bool,
                'default': False,
                'description': 'Log per-generation progress at INFO',
                'category': 'run'
            }
        }

    def _define_validation_rules(self) -> List[ConfigValidationRule]:
        """Define validation rules for parameter combinations"""
        rules = []

        # Elites must leave room for offspring
        rules.append(ConfigValidationRule(
            parameter_name='elite_size',
            validator=lambda value, deps: value <= deps['population_size'],
            error_message='Elite size should not exceed population size',
            dependency_params=['population_size'],
            warning_only=True
        ))

        # Tournament size should be reasonable relative to population size
        rules.append(ConfigValidationRule(
            parameter_name='tournament_size',
            validator=lambda value, deps: value <= deps['population_size'],
            error_message='Tournament size larger than population size; it will be capped',
            dependency_params=['population_size'],
            warning_only=True
        ))

        # Weighted ranking needs at least one non-zero weight
        rules.append(ConfigValidationRule(
            parameter_name='fuel_weight',
            validator=lambda value, deps: value > 0 or deps['truck_weight'] > 0,
            error_message='Fuel and truck weights cannot both be zero',
            dependency_params=['truck_weight']
        ))
        rules.append(ConfigValidationRule(
            parameter_name='truck_weight',
            validator=lambda value, deps: value > 0 or deps['fuel_weight'] > 0,
            error_message='Fuel and truck weights cannot both be zero',
            dependency_params=['fuel_weight']
        ))

        return rules

    def _get_default_parameters(self) -> Dict[str, Any]:
        """Get default parameter values"""
        return {name: schema['default']
                for name, schema in self.parameter_definitions.items()
                if 'default' in schema}

    def get_parameter(self, name: str, scope: Optional[ConfigScope] = None) -> Any:
        """Get parameter value with scope precedence

        Args:
            name: Parameter name
            scope: Specific scope to check (optional)

        Returns:
            Parameter value
        """
        with self.config_lock:
            if scope:
                return self.configurations[scope].get(name)

            # Check scopes in order of precedence
            for check_scope in [ConfigScope.SESSION, ConfigScope.FILE,
                                ConfigScope.PROFILE, ConfigScope.GLOBAL]:
                if name in self.configurations[check_scope]:
                    return self.configurations[check_scope][name]

            return None

    def set_parameter(self, name: str, value: Any, scope: ConfigScope = ConfigScope.SESSION,
                      source: str = "user") -> bool:
        """Set parameter value in specified scope

        Args:
            name: Parameter name
            value: Parameter value
            scope: Configuration scope
            source: Source of change

        Returns:
            True if successful, False otherwise
        """
        with self.config_lock:
            try:
                value = self._coerce_parameter(name, value)
            except ConfigurationError as e:
                logger.warning(str(e))
                return False

            if not self._validate_with_rules(name, value):
                return False

            old_value = self.get_parameter(name, scope)
            self.configurations[scope][name] = value

            self.change_history.append(ConfigChange(
                parameter_name=name,
                old_value=old_value,
                new_value=value,
                scope=scope,
                timestamp=time.time(),
                source=source
            ))

            logger.debug(f"Parameter updated: {name}={value} (scope: {scope.value}, source: {source})")
            return True

    def _coerce_parameter(self, name: str, value: Any) -> Any:
        """Type and range check a single value, returning it in its schema type"""
        if name not in self.parameter_definitions:
            raise ConfigurationError(f"Unknown parameter: {name}")

        schema = self.parameter_definitions[name]

        if value is None:
            if schema.get('nullable'):
                return None
            raise ConfigurationError(f"Parameter {name} cannot be null")

        # Type validation
        expected_type = schema['type']
        if expected_type is bool:
            if not isinstance(value, bool):
                raise ConfigurationError(f"Invalid type for {name}: expected bool")
        elif expected_type in (int, float):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"Invalid type for {name}: expected {expected_type.__name__}")
            if expected_type is int and value != int(value):
                raise ConfigurationError(f"Invalid type for {name}: expected int, got {value}")
            value = expected_type(value)
        elif not isinstance(value, expected_type):
            raise ConfigurationError(f"Invalid type for {name}: expected {expected_type.__name__}")

        # Range validation
        if 'range' in schema:
            min_val, max_val = schema['range']
            if not (min_val <= value <= max_val):
                raise ConfigurationError(
                    f"Value out of range for {name}: {value} not in [{min_val}, {max_val}]"
                )

        if 'choices' in schema:
            value = value.lower()
            if value not in schema['choices']:
                raise ConfigurationError(f"Invalid value for {name}: {value} not in {schema['choices']}")

        return value

    def _validate_with_rules(self, name: str, value: Any) -> bool:
        """Apply cross-parameter validation rules"""
        for rule in self.validation_rules:
            if rule.parameter_name != name:
                continue

            deps = {dep: self.get_parameter(dep) for dep in rule.dependency_params}
            if rule.validator(value, deps):
                continue

            if rule.warning_only:
                logger.warning(rule.error_message)
            else:
                logger.warning(f"Rejected {name}={value}: {rule.error_message}")
                return False

        return True

    def load_file(self, path: str) -> Dict[str, Any]:
        """Load parameter overrides from a JSON or YAML file

        Args:
            path: Configuration file path

        Returns:
            Parameters loaded from the file

        Raises:
            ConfigurationError: If the file is unreadable or holds invalid values
        """
        if not os.path.exists(path):
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r') as f:
                if path.endswith(('.yaml', '.yml')):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not read configuration file {path}: {e}") from e

        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")

        # Allow the parameters to be nested under a 'ga' key
        parameters = data.get('ga', data)

        loaded = {}
        with self.config_lock:
            for name, value in parameters.items():
                loaded[name] = self._coerce_parameter(name, value)

            previous = self.configurations[ConfigScope.FILE]
            self.configurations[ConfigScope.FILE] = loaded
            try:
                self.build_config()
            except ConfigurationError as e:
                self.configurations[ConfigScope.FILE] = previous
                raise ConfigurationError(f"Configuration file {path} is inconsistent: {e}") from e

            for name, value in loaded.items():
                self.change_history.append(ConfigChange(
                    parameter_name=name, old_value=None, new_value=value,
                    scope=ConfigScope.FILE, timestamp=time.time(), source=path
                ))

        logger.info(f"Loaded {len(loaded)} parameters from {path}")
        return loaded

    def create_profile(self, name: str, description: str,
                       parameters: Optional[Dict[str, Any]] = None) -> ConfigProfile:
        """Create new configuration profile

        Args:
            name: Profile name
            description: Profile description
            parameters: Profile parameters (uses current effective configuration if None)

        Returns:
            Created profile
        """
        with self.config_lock:
            if parameters is None:
                parameters = self.get_effective_configuration()

            checked = {key: self._coerce_parameter(key, value) for key, value in parameters.items()}
            profile = ConfigProfile(name=name, description=description, parameters=checked)
            self.profiles[name] = profile

            logger.debug(f"Created profile: {name}")
            return profile

    def activate_profile(self, name: str) -> None:
        """Activate configuration profile

        Raises:
            ConfigurationError: If the profile does not exist
        """
        with self.config_lock:
            if name not in self.profiles:
                raise ConfigurationError(
                    f"Profile not found: {name} (available: {', '.join(sorted(self.profiles))})"
                )

            profile = self.profiles[name]
            self.configurations[ConfigScope.PROFILE] = dict(profile.parameters)
            self.active_profile = name
            profile.usage_count += 1

            logger.debug(f"Activated profile: {name}")

    def get_effective_configuration(self) -> Dict[str, Any]:
        """Get effective configuration with scope precedence"""
        with self.config_lock:
            effective_config = {}
            for scope in [ConfigScope.GLOBAL, ConfigScope.PROFILE, ConfigScope.FILE, ConfigScope.SESSION]:
                effective_config.update(self.configurations[scope])
            return effective_config

    def build_config(self) -> GAConfig:
        """Build a validated GAConfig from the effective configuration

        Raises:
            ConfigurationError: If the combined values are inconsistent
        """
        effective = self.get_effective_configuration()
        config_fields = {f.name for f in fields(GAConfig)}
        config = GAConfig(**{k: v for k, v in effective.items() if k in config_fields})
        config.validate()
        return config

    def export_configuration(self, filename: str) -> str:
        """Export effective configuration to a JSON or YAML file

        Args:
            filename: Output filename

        Returns:
            Path to exported file
        """
        export_data = {
            'active_profile': self.active_profile,
            'ga': self.get_effective_configuration(),
            'export_timestamp': time.time()
        }

        with open(filename, 'w') as f:
            if filename.endswith('.yaml') or filename.endswith('.yml'):
                yaml.safe_dump(export_data, f, indent=2, default_flow_style=False)
            else:
                json.dump(export_data, f, indent=2)

        return filename

    def reset_scope(self, scope: ConfigScope):
        """Reset specific configuration scope"""
        with self.config_lock:
            if scope == ConfigScope.GLOBAL:
                self.configurations[scope] = self._get_default_parameters()
            else:
                self.configurations[scope].clear()
            if scope == ConfigScope.PROFILE:
                self.active_profile = None

            logger.debug(f"Reset configuration scope: {scope.value}")
