import pathlib
from typing import Callable

import orjson
import pytest


@pytest.fixture
def triangle():
    return [[[[0, 0], [1, 0], [0, 1], [0, 0]]]]


@pytest.fixture
def far_triangle():
    return [[[[4, 4], [5, 4], [4, 5], [4, 4]]]]


@pytest.fixture
def square():
    return [[[[0, 0], [2, 0], [2, 2], [0, 2], [0, 0]]]]


@pytest.fixture
def multipolygon_object() -> Callable[[list], dict]:
    def _multipolygon_object(coordinates: list) -> dict:
        return {"type": "MultiPolygon", "coordinates": coordinates}

    return _multipolygon_object


@pytest.fixture
def feature_object() -> Callable[[list], dict]:
    def _feature_object(coordinates: list) -> dict:
        return {
            "type": "Feature",
            "properties": None,
            "geometry": {"type": "MultiPolygon", "coordinates": coordinates},
        }

    return _feature_object


@pytest.fixture
def write_geojson() -> Callable[..., pathlib.Path]:
    """Write objects concatenated together, the way inputs arrive"""

    def _write_geojson(path: pathlib.Path, *objects: dict) -> pathlib.Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"".join(orjson.dumps(obj) for obj in objects))
        return path

    return _write_geojson
