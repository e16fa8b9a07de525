"""Extract multipolygons from decoded GeoJSON objects

Acceptable input objects are Polygon, MultiPolygon, a Feature wrapping either
of those, or a FeatureCollection of such Features. Every acceptable object
produces exactly one multipolygon; the features of a FeatureCollection are
joined together into one big (possibly overlapping) multipolygon.

Geometry types with no area (points, lines, geometry collections) are
reported through the warn callback and contribute an empty multipolygon.
Anything else is an error.

Validation is shallow: only the first coordinate of the first ring is checked.
"""

import enum
from typing import Any, Callable, Iterable, Iterator

import orjson

from polyclip.utils.log import getLogger

from .common import MultiPolygon
from .split import InvalidJSONError

logger = getLogger(__file__)

Warn = Callable[[str], None]

# Longest piece of an invalid fragment echoed into the log
MAX_FRAGMENT_PREVIEW = 80


class GeoJSONError(ValueError):
    """Input is structurally not acceptable GeoJSON."""


@enum.unique
class GeoJSONKind(str, enum.Enum):
    """Shapes of GeoJSON objects, per https://tools.ietf.org/html/rfc7946"""

    POLYGON = "Polygon"
    MULTI_POLYGON = "MultiPolygon"
    FEATURE = "Feature"
    FEATURE_COLLECTION = "FeatureCollection"
    POINT = "Point"
    MULTI_POINT = "MultiPoint"
    LINE_STRING = "LineString"
    MULTI_LINE_STRING = "MultiLineString"
    GEOMETRY_COLLECTION = "GeometryCollection"
    UNRECOGNIZED = "unrecognized"


# Valid GeoJSON that has no polygonal content to contribute
UNSUPPORTED_KINDS = frozenset(
    {
        GeoJSONKind.POINT,
        GeoJSONKind.MULTI_POINT,
        GeoJSONKind.LINE_STRING,
        GeoJSONKind.MULTI_LINE_STRING,
        GeoJSONKind.GEOMETRY_COLLECTION,
    }
)

_KIND_BY_TYPE = {
    kind.value: kind for kind in GeoJSONKind if kind != GeoJSONKind.UNRECOGNIZED
}


def classify(obj: Any) -> GeoJSONKind:
    """Decode the kind of a GeoJSON object from its type member"""
    if not isinstance(obj, dict):
        raise GeoJSONError(
            f"Not GeoJSON: expected an object, got {type(obj).__name__}"
        )

    type_name = obj.get("type")
    if not isinstance(type_name, str):
        return GeoJSONKind.UNRECOGNIZED

    return _KIND_BY_TYPE.get(type_name, GeoJSONKind.UNRECOGNIZED)


def parse(obj: Any, warn: Warn) -> MultiPolygon:
    """Parse one decoded GeoJSON object into a multipolygon."""
    kind = classify(obj)

    if kind == GeoJSONKind.FEATURE:
        return _parse_feature(obj, warn)

    if kind == GeoJSONKind.FEATURE_COLLECTION:
        return _parse_feature_collection(obj, warn)

    return _parse_geometry(obj, kind, warn, context="GeoJSON type")


def _parse_geometry(
    obj: dict, kind: GeoJSONKind, warn: Warn, context: str
) -> MultiPolygon:
    if kind == GeoJSONKind.POLYGON:
        return _parse_polygon(obj)

    if kind == GeoJSONKind.MULTI_POLYGON:
        return _parse_multi_polygon(obj)

    if kind in UNSUPPORTED_KINDS:
        warn(f"Not acceptable GeoJSON type '{kind.value}' encountered. Dropping")
        return []

    raise GeoJSONError(f"Unrecognized {context} {obj.get('type')!r}")


def _has_numeric_first_point(coordinates: Any, nesting: int) -> bool:
    """Descend nesting levels of first elements and check for a number"""
    value = coordinates
    for _ in range(nesting):
        if not isinstance(value, list) or not value:
            return False
        value = value[0]

    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_polygon(obj: dict) -> MultiPolygon:
    coordinates = obj.get("coordinates")
    if not isinstance(coordinates, list):
        raise GeoJSONError("Not GeoJSON: Polygon coordinates not defined")

    if not _has_numeric_first_point(coordinates, 3):
        raise GeoJSONError("Not GeoJSON: Polygon coordinates malformed")

    return [coordinates]


def _parse_multi_polygon(obj: dict) -> MultiPolygon:
    coordinates = obj.get("coordinates")
    if not isinstance(coordinates, list):
        raise GeoJSONError("Not GeoJSON: MultiPolygon coordinates not defined")

    # Empty geometry
    if not coordinates:
        return []

    if not _has_numeric_first_point(coordinates, 4):
        raise GeoJSONError("Not GeoJSON: MultiPolygon coordinates malformed")

    return coordinates


def _parse_feature(obj: dict, warn: Warn) -> MultiPolygon:
    geometry = obj.get("geometry")
    if not isinstance(geometry, dict):
        raise GeoJSONError("Not GeoJSON: Feature geometry not defined")

    kind = classify(geometry)
    if kind in (GeoJSONKind.FEATURE, GeoJSONKind.FEATURE_COLLECTION):
        kind = GeoJSONKind.UNRECOGNIZED

    return _parse_geometry(
        geometry, kind, warn, context="Feature geometry GeoJSON type"
    )


def _parse_feature_collection(obj: dict, warn: Warn) -> MultiPolygon:
    features = obj.get("features")
    if not isinstance(features, list):
        raise GeoJSONError("Not GeoJSON: FeatureCollection features not defined")

    multipolygon: MultiPolygon = []
    for feature in features:
        if classify(feature) != GeoJSONKind.FEATURE:
            raise GeoJSONError(
                "Not GeoJSON: FeatureCollection member of type "
                f"{feature.get('type')!r}"
            )

        multipolygon.extend(_parse_feature(feature, warn))

    return multipolygon


def decode_fragments(fragments: Iterable[str], source: str) -> Iterator[Any]:
    """Decode each JSON text fragment, failing on the first invalid one"""
    for number, fragment in enumerate(fragments, start=1):
        try:
            value = orjson.loads(fragment)
        except orjson.JSONDecodeError as e:
            logger.warning(
                "Invalid json in %s at object %d: %s",
                source,
                number,
                fragment[:MAX_FRAGMENT_PREVIEW],
            )
            raise InvalidJSONError(
                f"Invalid JSON in {source} at object {number}: {e}"
            ) from e

        yield value
