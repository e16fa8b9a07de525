"""Bounding boxes for pruning inputs that cannot overlap the subject

Boxes are `[west, south, east, north]`. A box whose west is greater than its
east crosses the antimeridian.
"""

import os
import re
from typing import Iterable, List, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel

from ..stages.common import MultiPolygon

P = TypeVar("P", str, os.PathLike)

_NUMBER = r"-?\d+(?:\.\d*)?"

# A `[w,s,e,n]` literal embedded anywhere in a filename
BBOX_FILENAME_RE = re.compile(rf"\[({_NUMBER}),({_NUMBER}),({_NUMBER}),({_NUMBER})\]")


class EmptyGeometryError(ValueError):
    """A bounding box was requested for a geometry with no points."""


class BoundingBox(BaseModel):
    west: float
    south: float
    east: float
    north: float

    @classmethod
    def from_list(cls, values: Sequence[float]) -> "BoundingBox":
        west, south, east, north = values
        return cls(west=west, south=south, east=east, north=north)

    def as_list(self) -> List[float]:
        return [self.west, self.south, self.east, self.north]

    @property
    def crosses_antimeridian(self) -> bool:
        return self.west > self.east

    def contains_longitude(self, longitude: float) -> bool:
        if not self.crosses_antimeridian:
            return self.west <= longitude <= self.east

        return self.west <= longitude <= 180 or -180 <= longitude <= self.east

    def overlaps(self, other: "BoundingBox") -> bool:
        """Returns true if the two boxes share any area, boundaries inclusive"""
        if other.north < self.south or self.north < other.south:
            return False

        # Two ranges overlap exactly when one of them starts inside the other
        return self.contains_longitude(other.west) or other.contains_longitude(
            self.west
        )


def _flip_longitude(x: float) -> float:
    """Swap between 0 on the prime meridian and 0 on the antimeridian"""
    return x - 180 if x > 0 else x + 180


def bbox_from_multipolygon(multipolygon: MultiPolygon) -> BoundingBox:
    """Compute the bounding box of a multipolygon.

    Two boxes are computed: one cut on the antimeridian (the usual one) and one
    cut on the prime meridian. The narrower of the two is returned, in normal
    -180..180 longitudes, so geometries straddling the antimeridian get a
    wrapping box instead of one spanning the whole globe.

    Raises EmptyGeometryError if the multipolygon has no points.
    """
    south = north = None
    west_am = east_am = None
    west_pm = east_pm = None

    for polygon in multipolygon:
        for ring in polygon:
            for x, y, *_ in ring:
                flipped = _flip_longitude(x)

                if south is None:
                    south = north = y
                    west_am = east_am = x
                    west_pm = east_pm = flipped
                    continue

                south = min(south, y)
                north = max(north, y)
                west_am = min(west_am, x)
                east_am = max(east_am, x)
                west_pm = min(west_pm, flipped)
                east_pm = max(east_pm, flipped)

    if south is None:
        raise EmptyGeometryError("Unable to compute bbox: no points in multipolygon")

    if east_pm - west_pm < east_am - west_am:
        return BoundingBox(
            west=_flip_longitude(west_pm),
            south=south,
            east=_flip_longitude(east_pm),
            north=north,
        )

    return BoundingBox(west=west_am, south=south, east=east_am, north=north)


def bbox_from_filename(filename: Union[str, os.PathLike]) -> Optional[BoundingBox]:
    """Parse a bounding box out of a filename. Returns None if none found.

    If several are embedded, the first one wins.
    """
    match = BBOX_FILENAME_RE.search(os.path.basename(os.fspath(filename)))
    if not match:
        return None

    return BoundingBox.from_list([float(value) for value in match.groups()])


def bboxes_overlap(bbox1: BoundingBox, bbox2: BoundingBox) -> bool:
    return bbox1.overlaps(bbox2)


def filter_paths(paths: Iterable[P], bbox: BoundingBox) -> List[P]:
    """Return paths that either have no bbox in their name, or one that overlaps"""

    def _could_overlap(path: P) -> bool:
        path_bbox = bbox_from_filename(path)
        return path_bbox.overlaps(bbox) if path_bbox else True

    return [path for path in paths if _could_overlap(path)]


def filter_multipolygons(
    multipolygons: Iterable[MultiPolygon], bbox: BoundingBox
) -> List[MultiPolygon]:
    """Return multipolygons whose bbox overlaps with bbox"""
    return [
        multipolygon
        for multipolygon in multipolygons
        if multipolygon_overlaps(multipolygon, bbox)
    ]


def multipolygon_overlaps(multipolygon: MultiPolygon, bbox: BoundingBox) -> bool:
    """Empty multipolygons overlap nothing"""
    if not any(ring for polygon in multipolygon for ring in polygon):
        return False

    return bbox.overlaps(bbox_from_multipolygon(multipolygon))
