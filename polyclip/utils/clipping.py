"""Boolean operations over multipolygons, backed by shapely"""

import functools
from typing import Callable, Dict, List, Union

import shapely
import shapely.errors
import shapely.geometry
import shapely.ops
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient

from polyclip.utils.log import getLogger

from ..stages.common import MultiPolygon, Operation, Polygon, Ring

logger = getLogger(__file__)

Combine = Callable[[BaseGeometry, BaseGeometry], BaseGeometry]

_PAIRWISE: Dict[Operation, Combine] = {
    Operation.INTERSECTION: lambda a, b: a.intersection(b),
    Operation.DIFFERENCE: lambda a, b: a.difference(b),
    Operation.XOR: lambda a, b: a.symmetric_difference(b),
}


def apply(
    operation: Union[Operation, str], *multipolygons: MultiPolygon
) -> MultiPolygon:
    """Run operation over the multipolygons, folding left to right.

    Overlapping polygons within one multipolygon are merged first. With no
    operands the result is empty; with one, it is that operand cleaned up.
    """
    operation = Operation(operation)

    if not multipolygons:
        return []

    geometries = [to_geometry(multipolygon) for multipolygon in multipolygons]

    if operation == Operation.UNION:
        result = shapely.ops.unary_union(geometries)
    else:
        result = functools.reduce(_PAIRWISE[operation], geometries)

    return from_geometry(result)


def to_geometry(multipolygon: MultiPolygon) -> BaseGeometry:
    """Build a dissolved shapely geometry from GeoJSON style coordinates.

    Self-intersecting polygons are repaired before they are dissolved.
    """
    polygons = [
        make_valid(shapely.geometry.Polygon(polygon[0], polygon[1:]))
        for polygon in multipolygon
        if polygon
    ]
    return shapely.ops.unary_union(
        [part for polygon in polygons for part in _iter_polygons(polygon)]
    )


def make_valid(geometry: BaseGeometry) -> BaseGeometry:
    """Repair an invalid geometry, keeping valid ones as they are.

    Falls back to buffer(0) if make_valid fails.
    """
    if geometry.is_valid:
        return geometry

    logger.debug("Repairing invalid geometry: %s", shapely.is_valid_reason(geometry))

    try:
        return shapely.make_valid(geometry)
    except shapely.errors.ShapelyError as e:
        logger.debug("make_valid failed: %s, trying buffer(0)", e)
        return geometry.buffer(0)


def from_geometry(geometry: BaseGeometry) -> MultiPolygon:
    """Return the polygonal parts of a geometry as GeoJSON style coordinates.

    Exteriors are counter-clockwise, holes clockwise, and every ring starts at
    its lowest (x, y) vertex.
    """
    return [_polygon_coordinates(polygon) for polygon in _iter_polygons(geometry)]


def _iter_polygons(geometry: BaseGeometry) -> List[shapely.geometry.Polygon]:
    if geometry.is_empty:
        return []

    if isinstance(geometry, shapely.geometry.Polygon):
        return [geometry]

    # Intersections can degenerate into touching points or lines, drop those
    if not hasattr(geometry, "geoms"):
        return []

    return [polygon for part in geometry.geoms for polygon in _iter_polygons(part)]


def _polygon_coordinates(polygon: shapely.geometry.Polygon) -> Polygon:
    polygon = orient(polygon, sign=1.0)
    return [_ring_coordinates(polygon.exterior.coords)] + [
        _ring_coordinates(interior.coords) for interior in polygon.interiors
    ]


def _ring_coordinates(coords) -> Ring:
    points = [(x, y) for x, y, *_ in coords][:-1]
    start = min(range(len(points)), key=points.__getitem__)
    rotated = points[start:] + points[:start]
    return [[x, y] for x, y in rotated + rotated[:1]]
