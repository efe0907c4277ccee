#!/usr/bin/env python3
"""
Merge configuration.

The province table and the direct-administration set are static input
configuration. They live on an immutable MergeConfig that is passed into
the builder, so runs with different country editions never share state.

A YAML file may override any default:

    provinces:
      - ["11", 北京市]
      - ["41", 河南省]
    direct_administration: ["11"]
    workers: 4
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Tuple

import yaml

from . import constants
from .codes import normalize_code
from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeConfig:
    """Static configuration for one merge run."""
    provinces: Tuple[Tuple[str, str], ...] = constants.PROVINCE_TABLE
    direct_administration: FrozenSet[str] = constants.DIRECT_ADMINISTRATION_CODES
    municipal_district_name: str = constants.MUNICIPAL_DISTRICT_NAME

    # Input layout, relative to the data directory
    root_document: str = constants.ROOT_DOCUMENT
    province_dir: str = constants.PROVINCE_DIR
    county_dir: str = constants.COUNTY_DIR

    # Output artifacts, relative to the output directory
    output_name: str = constants.OUTPUT_NAME
    report_name: str = constants.REPORT_NAME

    title: str = constants.DOCUMENT_TITLE
    description: str = constants.DOCUMENT_DESCRIPTION
    version: str = constants.DOCUMENT_VERSION

    compute_centers: bool = True
    workers: int = 1
    show_progress: bool = False

    @property
    def province_codes(self) -> Tuple[str, ...]:
        return tuple(code for code, _ in self.provinces)

    @property
    def province_names(self) -> Dict[str, str]:
        return dict(self.provinces)

    def restricted_to(self, codes: Iterable[str]) -> 'MergeConfig':
        """Return a copy limited to the given province codes, in table order."""
        wanted = set(codes)
        unknown = wanted - set(self.province_codes)
        if unknown:
            raise ConfigError(f"Unknown province codes: {sorted(unknown)}")
        return replace(self, provinces=tuple(p for p in self.provinces if p[0] in wanted))

    def metadata(self) -> Dict[str, str]:
        """Descriptive members written into the merged document."""
        return {
            'name': self.title,
            'description': self.description,
            'version': self.version,
        }


_STRING_FIELDS = (
    'municipal_district_name', 'root_document', 'province_dir', 'county_dir',
    'output_name', 'report_name', 'title', 'description', 'version',
)
_BOOL_FIELDS = ('compute_centers', 'show_progress')


def _parse_provinces(value) -> Tuple[Tuple[str, str], ...]:
    """Accept a list of [code, name] pairs or a code -> name mapping."""
    if isinstance(value, dict):
        pairs = list(value.items())
    elif isinstance(value, list):
        pairs = []
        for item in value:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise ConfigError(f"Province entry must be a [code, name] pair: {item!r}")
            pairs.append((item[0], item[1]))
    else:
        raise ConfigError("'provinces' must be a list of pairs or a mapping")

    table = []
    seen = set()
    for code, name in pairs:
        code = normalize_code(code)
        if not code or not name:
            raise ConfigError(f"Province entry needs a code and a name: {code!r}, {name!r}")
        if code in seen:
            raise ConfigError(f"Duplicate province code: {code}")
        seen.add(code)
        table.append((code, str(name)))
    return tuple(table)


def config_from_dict(data: Dict) -> MergeConfig:
    """Build a MergeConfig from a plain mapping, validating each field."""
    known = {f.name for f in fields(MergeConfig)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown config fields: {sorted(unknown)}")

    overrides = {}
    for key, value in data.items():
        if key == 'provinces':
            overrides[key] = _parse_provinces(value)
        elif key == 'direct_administration':
            if not isinstance(value, list):
                raise ConfigError("'direct_administration' must be a list of codes")
            overrides[key] = frozenset(normalize_code(v) for v in value)
        elif key == 'workers':
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"'workers' must be a positive integer, got {value!r}")
            overrides[key] = value
        elif key in _BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ConfigError(f"'{key}' must be true or false, got {value!r}")
            overrides[key] = value
        elif key in _STRING_FIELDS:
            if not isinstance(value, str) or not value:
                raise ConfigError(f"'{key}' must be a non-empty string, got {value!r}")
            overrides[key] = value

    return MergeConfig(**overrides)


def load_config(config_path: Path) -> MergeConfig:
    """Load and validate merge configuration from a YAML file."""
    try:
        with open(config_path, encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a mapping")

    config = config_from_dict(data)
    logger.debug(f"Loaded config from {config_path}: {len(config.provinces)} provinces")
    return config
