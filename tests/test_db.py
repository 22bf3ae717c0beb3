from dataclasses import dataclass, field

import pytest
from bson.binary import Binary
from pymongo.errors import OperationFailure

from boom.db import (
    CreateIndexError,
    create_index,
    cutout2bsonbinary,
    get_coordinates,
    initialize_survey_indexes,
    mongify,
)
from boom.enums import ProgramId, Survey
from boom.spatial import radec2lb


class FakeCollection:
    def __init__(self, name, fail=False):
        self.name = name
        self.fail = fail
        self.calls = []

    def create_index(self, keys, unique=False):
        if self.fail:
            raise OperationFailure("index build failed")
        self.calls.append((keys, unique))
        return "index"


class FakeDb:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection(name))


def test_create_index_passes_ordered_keys_and_unique():
    collection = FakeCollection("things")
    create_index(collection, {"b": 1, "a": -1}, True)
    assert collection.calls == [([("b", 1), ("a", -1)], True)]


def test_create_index_wraps_mongo_errors():
    collection = FakeCollection("things", fail=True)
    with pytest.raises(CreateIndexError) as info:
        create_index(collection, {"a": 1}, False)
    assert isinstance(info.value.__cause__, OperationFailure)
    assert str(info.value) == "failed to create index"


@pytest.mark.parametrize("survey", [Survey.ZTF, Survey.LSST])
def test_initialize_survey_indexes(survey):
    db = FakeDb()
    initialize_survey_indexes(survey, db)
    alerts = db.collections[f"{survey}_alerts"]
    aux = db.collections[f"{survey}_alerts_aux"]
    spatial = [("coordinates.radec_geojson", "2dsphere"), ("_id", 1)]
    assert alerts.calls == [(spatial, False), ([("objectId", 1)], False)]
    assert aux.calls == [(spatial, False)]
    assert set(db.collections) == {f"{survey}_alerts", f"{survey}_alerts_aux"}


def test_initialize_survey_indexes_propagates_error():
    db = FakeDb()
    db.collections["ZTF_alerts"] = FakeCollection("ZTF_alerts", fail=True)
    with pytest.raises(CreateIndexError):
        initialize_survey_indexes(Survey.ZTF, db)


@dataclass
class Inner:
    jd: float
    band: str | None = None


@dataclass
class Outer:
    objectId: str
    candid: int
    programid: ProgramId
    survey: Survey
    inner: Inner
    history: list = field(default_factory=list)


def test_mongify_dataclass():
    value = Outer(
        objectId="ZTF21abcdefg",
        candid=123,
        programid=ProgramId.PUBLIC,
        survey=Survey.LSST,
        inner=Inner(jd=2460000.5),
        history=[Inner(jd=1.5, band="g")],
    )
    doc = mongify(value)
    assert doc["objectId"] == "ZTF21abcdefg"
    assert doc["candid"] == 123
    assert doc["programid"] == "public"
    assert doc["survey"] == "LSST"
    assert doc["inner"] == {"jd": 2460000.5, "band": None}
    assert doc["history"] == [{"jd": 1.5, "band": "g"}]


def test_mongify_mapping_copies():
    source = {"a": {"b": [1, 2]}}
    doc = mongify(source)
    assert doc == source
    doc["a"]["b"].append(3)
    assert source["a"]["b"] == [1, 2]


def test_mongify_rejects_non_document():
    with pytest.raises(TypeError):
        mongify([1, 2, 3])
    with pytest.raises(TypeError):
        mongify({1: "x"})


def test_get_coordinates():
    ra, dec = 323.233462, 14.112528
    coords = get_coordinates(ra, dec)
    assert coords["radec_geojson"]["type"] == "Point"
    assert coords["radec_geojson"]["coordinates"] == [ra - 180.0, dec]
    l, b = radec2lb(ra, dec)
    assert coords["l"] == l
    assert coords["b"] == b


def test_cutout2bsonbinary():
    binary = cutout2bsonbinary(b"\x00\x01cutout")
    assert isinstance(binary, Binary)
    assert binary.subtype == 0
    assert bytes(binary) == b"\x00\x01cutout"