"""
Environment configuration for Lambda handlers.

Configuration is read once at startup (cold start) and validated on boot:
missing required variables or unparsable values raise ValueError so the
function fails fast instead of failing on the first request.
"""

import os
from typing import Dict, Any, List, Optional


CATALOG_REQUIRED_VARS = ['TABLE_NAME']

CATALOG_OPTIONAL_VARS = {
    'REQUEST_TIMEOUT_MS': '10000',
    'PROPAGATE_PARTIAL_FAILURE': 'false',
    'METRICS_ENABLED': 'true',
    'METRIC_NAMESPACE': 'MusicCatalog',
    'QUEUE_OPERATION': '',
}

USERS_REQUIRED_VARS = ['RESOURCE_ARN', 'SECRET_ARN', 'DATABASE_NAME']

USERS_OPTIONAL_VARS = {
    'METRICS_ENABLED': 'true',
    'METRIC_NAMESPACE': 'MusicCatalog',
}

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off', ''}


def load_config(
    required_vars: List[str],
    optional_vars: Optional[Dict[str, str]] = None
) -> Dict[str, str]:
    """
    Load and validate environment variables.

    Args:
        required_vars: Variables that must be present and non-empty
        optional_vars: Variables with their default values

    Returns:
        Configuration dictionary keyed by the snake_case variable name

    Raises:
        ValueError: If any required environment variable is missing
    """
    config = {}
    missing_vars = []

    for var in required_vars:
        value = os.environ.get(var)
        if not value:
            missing_vars.append(var)
        else:
            config[var.lower()] = value

    for var, default in (optional_vars or {}).items():
        config[var.lower()] = os.environ.get(var, default)

    if missing_vars:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing_vars)}"
        )

    return config


def parse_bool(name: str, value: str) -> bool:
    """Parse a boolean flag, rejecting anything that is not clearly on or off."""
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Environment variable {name} must be a boolean, got '{value}'")


def parse_positive_int(name: str, value: str) -> int:
    """Parse a strictly positive integer setting."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Environment variable {name} must be an integer, got '{value}'")
    if parsed <= 0:
        raise ValueError(f"Environment variable {name} must be positive, got {parsed}")
    return parsed


def load_catalog_config() -> Dict[str, Any]:
    """
    Load configuration shared by every catalog function.

    Returns:
        Dictionary with table_name, request_timeout_ms (int),
        propagate_partial_failure (bool), metrics_enabled (bool),
        metric_namespace and queue_operation
    """
    raw = load_config(CATALOG_REQUIRED_VARS, CATALOG_OPTIONAL_VARS)

    config: Dict[str, Any] = dict(raw)
    config['request_timeout_ms'] = parse_positive_int(
        'REQUEST_TIMEOUT_MS', raw['request_timeout_ms'])
    config['propagate_partial_failure'] = parse_bool(
        'PROPAGATE_PARTIAL_FAILURE', raw['propagate_partial_failure'])
    config['metrics_enabled'] = parse_bool('METRICS_ENABLED', raw['metrics_enabled'])
    return config


def load_users_config() -> Dict[str, Any]:
    """Load configuration for the user registration and schema functions."""
    raw = load_config(USERS_REQUIRED_VARS, USERS_OPTIONAL_VARS)

    config: Dict[str, Any] = dict(raw)
    config['metrics_enabled'] = parse_bool('METRICS_ENABLED', raw['metrics_enabled'])
    return config
