# inout/scan.py
"""
Load and validate YAML scan configurations.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from cerberus import Validator

from core.exceptions import ConfigError


# Cerberus schema for scan configuration
SCAN_SCHEMA = {
    'scan': {
        'type': 'list',
        'required': True,
        'minlength': 1,
        'schema': {
            'type': 'dict',
            'schema': {
                'function': {'type': 'string', 'required': True},
                'observable': {'type': 'string', 'required': True},
                'range': {
                    'type': 'list',
                    'required': False,
                    'schema': {'type': 'float', 'coerce': float},
                    'minlength': 2,
                    'maxlength': 2
                },
                'points': {'type': 'integer', 'required': False, 'coerce': int, 'min': 2, 'default': 100},
                'hints': {'type': 'boolean', 'required': False, 'default': True},
                'fixed': {
                    'type': 'dict',
                    'required': False,
                    'valuesrules': {'type': 'float', 'coerce': float},
                },
            }
        }
    }
}


@dataclass
class ScanEntry:
    function: str
    observable: str
    range: Optional[List[float]] = None
    points: int = 100
    hints: bool = True
    fixed: Dict[str, float] = field(default_factory=dict)


@dataclass
class ScanConfig:
    scan: List[ScanEntry]


def load_scan_config(path: Union[str, Path]) -> ScanConfig:
    """
    Load a YAML scan configuration file, validate its schema, and return a ScanConfig.

    Raises:
        ConfigError: If file read fails or schema validation fails.
    """
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read scan YAML '{path}': {e}")

    if not isinstance(raw, dict):
        raise ConfigError(f"Scan file '{path}' must contain a mapping at top level")
    validator = Validator(SCAN_SCHEMA, allow_unknown=False)
    if not validator.validate(raw):
        raise ConfigError(f"Scan schema validation errors: {validator.errors}")
    doc: Dict[str, Any] = validator.document

    entries: List[ScanEntry] = []
    for entry in doc['scan']:
        rng = entry.get('range')
        if rng is not None and not rng[1] > rng[0]:
            raise ConfigError(f"Scan range {rng} of '{entry['observable']}' is empty")
        entries.append(ScanEntry(
            function=entry['function'],
            observable=entry['observable'],
            range=rng,
            points=entry['points'],
            hints=entry['hints'],
            fixed=entry.get('fixed') or {},
        ))

    return ScanConfig(scan=entries)
