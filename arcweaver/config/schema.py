"""
ArcWeaver v0.1.0

Configuration schema for ArcWeaver.

Defines all available configuration parameters with defaults and validation.

Author: ArcWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml


VALID_OUTPUT_FORMATS = ['canonical', 'legacy']
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Conversion
    # ========================================================================
    'conversion': {
        'kmer_size': None,  # Required, k used to build the bcalm2 graph
        'output_format': 'canonical',  # 'canonical' (mirror columns) or 'legacy'
        'warning_prefix_padding': 10,  # Abundance warnings show k + padding bases
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'atomic_write': True,  # Write to a temp file, rename on success

        # Logging
        'logging': {
            'level': 'INFO',  # 'DEBUG', 'INFO', 'WARNING', 'ERROR'
            'log_file': None,  # Optional log file next to stderr
        },
    },

    # ========================================================================
    # Instrumentation
    # ========================================================================
    'instrumentation': {
        'memory_report': False,  # Log memory before/after load and write
    },
}


def default_config() -> Dict[str, Any]:
    """Fresh deep copy of the defaults."""
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary
    """
    config = default_config()

    if config_path:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                user_config = yaml.safe_load(f)

            # Deep merge user config into defaults
            if user_config:
                config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def save_config_template(output_path: Path, kmer_size: Optional[int] = None):
    """
    Save a configuration template to file.

    Args:
        output_path: Output file path
        kmer_size: Optional k-mer size to pre-fill
    """
    config = default_config()
    config['conversion']['kmer_size'] = kmer_size

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def validate_config(config: Dict[str, Any], require_kmer_size: bool = True) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate
        require_kmer_size: Report a missing k-mer size as an error

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []
    conversion = config.get('conversion', {})

    # Validate k
    k = conversion.get('kmer_size')
    if k is None:
        if require_kmer_size:
            errors.append("conversion.kmer_size is required")
    elif isinstance(k, bool) or not isinstance(k, int):
        errors.append(f"conversion.kmer_size must be an integer, got {k!r}")
    elif k < 2:
        errors.append(f"conversion.kmer_size must be >= 2, got {k}")

    # Validate output format
    output_format = conversion.get('output_format', 'canonical')
    if str(output_format).lower() not in VALID_OUTPUT_FORMATS:
        errors.append(f"Invalid output format: {output_format}")

    padding = conversion.get('warning_prefix_padding', 10)
    if isinstance(padding, bool) or not isinstance(padding, int) or padding < 0:
        errors.append(f"conversion.warning_prefix_padding must be a non-negative integer, got {padding!r}")

    # Validate logging
    level = config.get('output', {}).get('logging', {}).get('level', 'INFO')
    if str(level).upper() not in VALID_LOG_LEVELS:
        errors.append(f"Invalid log level: {level}")

    return errors
