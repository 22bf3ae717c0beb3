"""MongoDB helpers: index creation, document conversion and coordinates."""

import dataclasses
from collections.abc import Mapping
from enum import Enum
from typing import Any

from bson.binary import BINARY_SUBTYPE, Binary
from pymongo.errors import PyMongoError

from boom.enums import ProgramId, Survey
from boom.spatial import radec2lb


class CreateIndexError(Exception):
    """Raised when an index cannot be created on a collection."""

    def __init__(self, message: str = "failed to create index"):
        super().__init__(message)


def create_index(collection: Any, index: Mapping[str, Any], unique: bool) -> None:
    """Create an index with the given keys (in order) on ``collection``."""
    keys = list(index.items())
    try:
        collection.create_index(keys, unique=unique)
    except PyMongoError as exc:
        raise CreateIndexError() from exc


def _to_bson(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: _to_bson(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
    if isinstance(value, Mapping):
        converted = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"document keys must be strings, got {key!r}")
            converted[key] = _to_bson(item)
        return converted
    if isinstance(value, ProgramId):
        return value.serialized
    if isinstance(value, Survey):
        return value.value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_to_bson(item) for item in value]
    return value


def mongify(value: Any) -> dict:
    """Convert a dataclass or mapping into a BSON-ready document."""
    document = _to_bson(value)
    if not isinstance(document, dict):
        raise TypeError(f"{type(value).__name__} does not serialize to a document")
    return document


def get_coordinates(ra: float, dec: float) -> dict:
    """Build the coordinates sub-document (GeoJSON point and galactic l, b)."""
    l, b = radec2lb(ra, dec)
    return {
        "radec_geojson": {
            "type": "Point",
            "coordinates": [ra - 180.0, dec],
        },
        "l": l,
        "b": b,
    }


def cutout2bsonbinary(cutout: bytes) -> Binary:
    """Wrap raw cutout bytes as generic BSON binary data."""
    return Binary(bytes(cutout), BINARY_SUBTYPE)


def initialize_survey_indexes(survey: Survey, db: Any) -> None:
    """Create the indexes required on a survey's alerts and alerts_aux collections."""
    alerts = db[f"{survey}_alerts"]
    alerts_aux = db[f"{survey}_alerts_aux"]

    spatial_index = {"coordinates.radec_geojson": "2dsphere", "_id": 1}
    create_index(alerts, spatial_index, False)
    create_index(alerts_aux, spatial_index, False)

    create_index(alerts, {"objectId": 1}, False)