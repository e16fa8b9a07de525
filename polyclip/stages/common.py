"""Shared constants and types for running a clipping operation"""

import enum
from typing import List

# Nested coordinate arrays, exactly as they appear in GeoJSON
Coordinate = List[float]
Ring = List[Coordinate]
Polygon = List[Ring]
MultiPolygon = List[Polygon]


@enum.unique
class Operation(str, enum.Enum):
    """Boolean operations that can be run over the inputs."""

    UNION = "union"
    INTERSECTION = "intersection"
    DIFFERENCE = "difference"
    XOR = "xor"


# Suffixes of files picked up when a directory is given as input
GEOMETRY_FILE_SUFFIXES = (".geojson",)

# Goal number of points to feed into the operation at a time
DEFAULT_POINTS = 1000


def count_points(multipolygon: MultiPolygon) -> int:
    """Number of coordinates across every ring of every polygon"""
    return sum(len(ring) for polygon in multipolygon for ring in polygon)
