#!/usr/bin/env python3
"""
Data model for the merged administrative hierarchy.

Regions serialize to GeoJSON Features whose properties carry the child
regions, so the merged document stays a valid FeatureCollection for the
map layer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import geojson

from .constants import CHILD_KEYS, LEVEL_CITY, LEVEL_COUNTY, LEVEL_PROVINCE, LEVELS
from .codes import normalize_code
from .errors import DocumentParseError

CHILD_LEVEL = {LEVEL_PROVINCE: LEVEL_CITY, LEVEL_CITY: LEVEL_COUNTY}


@dataclass
class Region:
    """A province, city or county node."""
    level: str
    code: Optional[str]
    name: Optional[str]
    geometry: Optional[Dict] = None
    parent_code: Optional[str] = None
    children: List['Region'] = field(default_factory=list)
    center: Optional[List[float]] = None

    def to_feature(self) -> geojson.Feature:
        """Serialize to a GeoJSON Feature, children nested in properties."""
        props = {
            'code': self.code,
            'name': self.name,
            'level': self.level,
        }
        if self.level != LEVEL_PROVINCE:
            props['parentCode'] = self.parent_code
        if self.center is not None:
            props['center'] = self.center
        if self.level in CHILD_KEYS:
            props[CHILD_KEYS[self.level]] = [child.to_feature() for child in self.children]

        return geojson.Feature(id=self.code, geometry=self.geometry, properties=props)

    @classmethod
    def from_feature(cls, feature: Any, level: str,
                     parent_code: Optional[str] = None) -> 'Region':
        """
        Rebuild a region (and its subtree) from a serialized Feature.

        Missing codes and names are kept as None for the validator to
        report; a structurally broken feature raises DocumentParseError.
        """
        if level not in LEVELS:
            raise ValueError(f"Unknown level: {level}")
        if not isinstance(feature, dict):
            raise DocumentParseError('<feature>', f"{level} entry is not an object")

        props = feature.get('properties')
        if not isinstance(props, dict):
            raise DocumentParseError('<feature>', f"{level} entry has no properties")

        code = normalize_code(props.get('code'))
        name = props.get('name')
        region = cls(
            level=level,
            code=code,
            name=str(name) if name not in (None, '') else None,
            geometry=feature.get('geometry'),
            parent_code=normalize_code(props.get('parentCode', parent_code)),
            center=props.get('center'),
        )

        if level in CHILD_KEYS:
            key = CHILD_KEYS[level]
            children = props.get(key)
            if not isinstance(children, list):
                raise DocumentParseError('<feature>', f"{level} {code} has no '{key}' list")
            region.children = [
                cls.from_feature(child, CHILD_LEVEL[level], parent_code=code)
                for child in children
            ]

        return region


@dataclass
class Totals:
    """Aggregate region counts."""
    province_count: int = 0
    city_count: int = 0
    county_count: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'provinceCount': self.province_count,
            'cityCount': self.city_count,
            'countyCount': self.county_count,
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'Totals':
        if not isinstance(data, dict):
            raise DocumentParseError('<totals>', "totals is not an object")
        values = {}
        for key, attr in (('provinceCount', 'province_count'),
                          ('cityCount', 'city_count'),
                          ('countyCount', 'county_count')):
            value = data.get(key)
            if not isinstance(value, int) or isinstance(value, bool):
                raise DocumentParseError('<totals>', f"'{key}' is not an integer")
            values[attr] = value
        return cls(**values)


@dataclass
class MergeResult:
    """The merged three-level tree plus its running totals."""
    provinces: List[Region] = field(default_factory=list)
    totals: Totals = field(default_factory=Totals)

    def recount(self) -> Totals:
        """Count regions by walking the tree."""
        cities = [city for province in self.provinces for city in province.children]
        return Totals(
            province_count=len(self.provinces),
            city_count=len(cities),
            county_count=sum(len(city.children) for city in cities),
        )

    def to_document(self, metadata: Optional[Dict[str, Any]] = None) -> geojson.FeatureCollection:
        """Serialize to the merged hierarchy document."""
        extra = dict(metadata or {})
        extra['totals'] = self.totals.to_dict()
        return geojson.FeatureCollection(
            [province.to_feature() for province in self.provinces],
            **extra
        )

    @classmethod
    def from_document(cls, document: Any, source: Any = '<document>') -> 'MergeResult':
        """Rebuild a MergeResult from a merged hierarchy document."""
        if not isinstance(document, dict):
            raise DocumentParseError(source, "document is not an object")
        features = document.get('features')
        if not isinstance(features, list):
            raise DocumentParseError(source, "missing 'features' list")

        try:
            provinces = [Region.from_feature(f, LEVEL_PROVINCE) for f in features]
            totals = Totals.from_dict(document.get('totals'))
        except DocumentParseError as e:
            raise DocumentParseError(source, e.reason) from e

        return cls(provinces=provinces, totals=totals)


@dataclass
class ValidationOutcome:
    """Errors and warnings collected in tree order."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            'errorCount': len(self.errors),
            'warningCount': len(self.warnings),
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }


@dataclass
class SummaryReport:
    """Per-province and per-city counts plus grand totals."""
    summary: Totals = field(default_factory=Totals)
    provinces: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': self.summary.to_dict(),
            'provinces': self.provinces,
        }
