import io

import orjson
import pytest

from polyclip.stages import ingest, parse
from polyclip.stages.sources import InputSource, SourceKind


def _stdin(*objects):
    return io.BytesIO(b"\n".join(orjson.dumps(obj) for obj in objects))


def test_read_source(multipolygon_object, feature_object, triangle, far_triangle):
    source = InputSource(
        SourceKind.STDIN,
        stream=_stdin(multipolygon_object(triangle), feature_object(far_triangle)),
    )

    assert list(ingest.read_source(source, lambda message: None)) == [
        triangle,
        far_triangle,
    ]


def test_read_source_reports_warnings():
    warnings = []
    source = InputSource(
        SourceKind.STDIN, stream=_stdin({"type": "Point", "coordinates": [0, 0]})
    )

    assert list(ingest.read_source(source, warnings.append)) == [[]]
    assert len(warnings) == 1


def test_read_source_invalid_json(tmp_path):
    path = tmp_path / "broken.geojson"
    path.write_bytes(b'{"type": "Polygon"')

    source = InputSource(SourceKind.FILE, path=path)

    with pytest.raises(parse.InvalidJSONError, match="broken.geojson"):
        list(ingest.read_source(source, lambda message: None))


def test_gather_inputs_order(
    tmp_path, write_geojson, multipolygon_object, triangle, far_triangle, square
):
    subject = write_geojson(tmp_path / "subject.geojson", multipolygon_object(square))
    single = write_geojson(
        tmp_path / "single.geojson",
        multipolygon_object(triangle),
        multipolygon_object(far_triangle),
    )
    write_geojson(tmp_path / "dir" / "a.geojson", multipolygon_object(far_triangle))

    result = ingest.gather_inputs(
        [single, tmp_path / "dir"],
        subject=subject,
        stdin=_stdin(multipolygon_object(triangle)),
    )

    assert result == [square, triangle, triangle, far_triangle, far_triangle]


def test_gather_inputs_warns_through_logger(caplog):
    stdin = _stdin({"type": "LineString", "coordinates": [[0, 0], [1, 1]]})

    assert ingest.gather_inputs([], stdin=stdin) == [[]]
    assert "Not acceptable GeoJSON type 'LineString'" in caplog.text


def test_iter_inputs_is_lazy(tmp_path, write_geojson, multipolygon_object, triangle):
    broken = tmp_path / "broken.geojson"
    broken.write_bytes(b"not json")
    sources = [
        InputSource(SourceKind.STDIN, stream=_stdin(multipolygon_object(triangle))),
        InputSource(SourceKind.FILE, path=broken),
    ]

    multipolygons = ingest.iter_inputs(sources)

    assert next(multipolygons) == triangle
    with pytest.raises(parse.InvalidJSONError):
        next(multipolygons)


def test_bboxes_drop_far_multipolygons(multipolygon_object, triangle, far_triangle):
    stdin = _stdin(
        multipolygon_object(triangle),
        multipolygon_object(far_triangle),
        multipolygon_object(triangle),
    )

    assert ingest.gather_inputs([], stdin=stdin, bboxes=True) == [triangle, triangle]


def test_bboxes_drop_empty_multipolygons(multipolygon_object, triangle):
    stdin = _stdin(multipolygon_object(triangle), multipolygon_object([]))

    assert ingest.gather_inputs([], stdin=stdin, bboxes=True) == [triangle]


def test_bboxes_skip_files_by_name(
    tmp_path, write_geojson, multipolygon_object, triangle
):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    # Named as though far away, so it must never be opened
    (data_dir / "far.[10,10,11,11].geojson").write_bytes(b"not json")
    write_geojson(data_dir / "near.[0,0,1,1].geojson", multipolygon_object(triangle))

    result = ingest.gather_inputs(
        [data_dir], stdin=_stdin(multipolygon_object(triangle)), bboxes=True
    )

    assert result == [triangle, triangle]


def test_bboxes_without_subject(tmp_path, write_geojson, multipolygon_object, triangle):
    path = write_geojson(tmp_path / "a.geojson", multipolygon_object(triangle))

    assert ingest.gather_inputs([path], bboxes=True) == []


def test_bboxes_with_empty_subject(
    tmp_path, write_geojson, multipolygon_object, triangle
):
    path = write_geojson(tmp_path / "a.geojson", multipolygon_object(triangle))

    result = ingest.gather_inputs(
        [path], stdin=_stdin(multipolygon_object([])), bboxes=True
    )

    assert result == []
