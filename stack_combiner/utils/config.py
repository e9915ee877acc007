"""
Configuration management for the application.
"""

import os
import sys
import copy
import json
from pathlib import Path
import logging

# Default configuration
DEFAULT_CONFIG = {
    "processing": {
        "strategy": "serial",
        "n_jobs": -1,
        "output_dtype": "float32",
        "result_name": "result"
    },
    "display": {
        "enabled": True,
        "show_inputs": True,
        "image_axis_order": "row-major",
        "antialias": True
    },
    "recent_files": {
        "datasets": [],
        "max_entries": 10
    }
}


def get_config_path(custom_path=None):
    """Get the path to the configuration file."""
    if custom_path:
        return Path(custom_path)

    if sys.platform == 'win32':
        config_dir = Path(os.path.expandvars('%APPDATA%')) / "stack_combiner"
    else:
        config_dir = Path(os.path.expanduser('~')) / ".stack_combiner"

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / "config.json"


def load_config(custom_path=None):
    """Load configuration from file or return default if file doesn't exist."""
    logger = logging.getLogger('stack_combiner')
    config_path = get_config_path(custom_path)

    # Start with default configuration
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                loaded_config = json.load(f)
            if not isinstance(loaded_config, dict):
                raise ValueError(
                    f"expected a JSON object, got {type(loaded_config).__name__}"
                )

            _recursive_update(config, loaded_config)
            logger.info(f"Configuration loaded from {config_path}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading configuration: {e}")
            logger.info("Using default configuration")
            config = copy.deepcopy(DEFAULT_CONFIG)
    else:
        logger.info(f"Configuration file not found at {config_path}")
        logger.info("Using default configuration")

    return config


def save_config(config, custom_path=None):
    """Save configuration to file."""
    logger = logging.getLogger('stack_combiner')
    config_path = get_config_path(custom_path)

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=4)
        logger.info(f"Configuration saved to {config_path}")
        return True
    except (OSError, TypeError) as e:
        logger.error(f"Error saving configuration: {e}")
        return False


def _recursive_update(d, u):
    """Recursively update a nested dictionary."""
    for k, v in u.items():
        if isinstance(v, dict) and k in d and isinstance(d[k], dict):
            _recursive_update(d[k], v)
        else:
            d[k] = v


def reset_to_defaults(custom_path=None):
    """Reset configuration to defaults."""
    logger = logging.getLogger('stack_combiner')
    config_path = get_config_path(custom_path)

    try:
        with open(config_path, 'w') as f:
            json.dump(DEFAULT_CONFIG, f, indent=4)
        logger.info("Configuration reset to defaults")
    except OSError as e:
        logger.error(f"Error resetting configuration: {e}")
    return copy.deepcopy(DEFAULT_CONFIG)


def add_recent_file(config, file_path):
    """Move file_path to the front of the recent datasets list."""
    recent = config['recent_files']
    recent_files = [path for path in recent['datasets'] if path != file_path]

    # Add to beginning of list
    recent_files.insert(0, file_path)

    recent['datasets'] = recent_files[:recent.get('max_entries', 10)]
    return recent['datasets']
