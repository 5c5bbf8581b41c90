"""
Configuration loading and validation.

This module handles loading of YAML configuration files and
validates that all required fields are present.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List

import yaml

from ..errors import ConfigurationError
from ..scoring.aggregation import ScoreWeights

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def load_config(filepath: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigurationError: If the file is empty or not a mapping
        yaml.YAMLError: If YAML is invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    with open(filepath, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ConfigurationError(f"Configuration file is empty: {filepath}")
    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration must be a mapping: {filepath}")

    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    # Check required top-level sections
    for section in ["global", "scoring", "prefilter"]:
        if section not in config:
            issues.append(f"Missing required section: {section}")

    log_level = get_config_value(config, "global.log_level", "INFO")
    if str(log_level).upper() not in LOG_LEVELS:
        issues.append(f"Unknown global.log_level: {log_level}")

    # Check scoring weights sum to 1
    weights = get_config_value(config, "scoring.weights")
    if weights is None:
        issues.append("Missing scoring.weights")
    else:
        try:
            ScoreWeights.from_dict(weights)
        except ConfigurationError as e:
            issues.append(f"Invalid scoring.weights: {e}")

    # Check pre-filter limits
    default_limit = get_config_value(config, "prefilter.default_limit", 50)
    max_limit = get_config_value(config, "prefilter.max_limit")
    if isinstance(default_limit, bool) or not isinstance(default_limit, int) or default_limit <= 0:
        issues.append(f"prefilter.default_limit must be a positive integer, got {default_limit}")
    elif max_limit is not None:
        if isinstance(max_limit, bool) or not isinstance(max_limit, int) or max_limit <= 0:
            issues.append(f"prefilter.max_limit must be a positive integer, got {max_limit}")
        elif default_limit > max_limit:
            issues.append(
                f"prefilter.default_limit ({default_limit}) exceeds prefilter.max_limit ({max_limit})"
            )

    tolerance = get_config_value(config, "evaluation.tolerance", 0)
    if isinstance(tolerance, bool) or not isinstance(tolerance, int) or tolerance < 0:
        issues.append(f"evaluation.tolerance must be a non-negative integer, got {tolerance}")

    return issues


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "scoring.weights.route")
        default: Default value if path doesn't exist

    Returns:
        Configuration value or default
    """
    keys = path.split(".")
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
