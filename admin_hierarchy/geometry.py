"""
Boundary geometry helpers.

Geometry is advisory data: a boundary that cannot be interpreted is
dropped (set to None) rather than failing the merge.
"""

import logging
from typing import Dict, List, Optional

import geojson
from shapely.geometry import shape

from .constants import BOUNDARY_TYPES, CENTER_PRECISION

logger = logging.getLogger(__name__)


def clean_geometry(geometry: Optional[Dict], label: str = '') -> Optional[Dict]:
    """
    Return a boundary geometry, or None if it is absent or unusable.

    Only Polygon and MultiPolygon boundaries are kept. Coordinates must be
    numeric GeoJSON positions in closed rings that shapely can read; the
    mapping itself is returned unchanged.
    """
    if not geometry:
        return None

    if not isinstance(geometry, dict) or geometry.get('type') not in BOUNDARY_TYPES:
        kind = geometry.get('type') if isinstance(geometry, dict) else type(geometry).__name__
        logger.warning(f"Unsupported boundary type {kind} for {label}, dropping geometry")
        return None

    try:
        boundary = geojson.GeoJSON.to_instance(geometry, strict=True)
        if not boundary.is_valid:
            raise ValueError(boundary.errors())
        shape(geometry)
    except Exception as e:
        logger.warning(f"Invalid boundary coordinates for {label}: {e}")
        return None

    return geometry


def label_point(geometry: Optional[Dict]) -> Optional[List[float]]:
    """
    Compute a [lon, lat] point guaranteed to lie inside the boundary.

    Used by the map layer to place region labels.
    """
    if not geometry:
        return None

    try:
        shp = shape(geometry)
        if shp.is_empty:
            return None
        point = shp.representative_point()
    except Exception as e:
        logger.debug(f"Cannot compute label point: {e}")
        return None

    return [round(point.x, CENTER_PRECISION), round(point.y, CENTER_PRECISION)]
