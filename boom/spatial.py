"""Sky geometry and catalog cross-matching against MongoDB."""

import logging
import math
from typing import Any, Iterable, Mapping, Sequence

from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

# J2000 position of the north galactic pole and galactic longitude of the
# north celestial pole, in degrees.
_RA_NGP = 192.85948
_DEC_NGP = 27.12825
_L_NCP = 122.93192


class XmatchError(Exception):
    """Raised when a cross-match cannot be performed or its results are malformed."""


def great_circle_distance(ra1: float, dec1: float, ra2: float, dec2: float) -> float:
    """Angular distance in degrees between two sky positions given in degrees."""
    phi1 = math.radians(dec1)
    phi2 = math.radians(dec2)
    dlon = math.radians(ra2 - ra1)
    num = math.hypot(
        math.cos(phi2) * math.sin(dlon),
        math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlon),
    )
    den = math.sin(phi1) * math.sin(phi2) + math.cos(phi1) * math.cos(phi2) * math.cos(dlon)
    return math.degrees(math.atan2(num, den))


def radec2lb(ra: float, dec: float) -> tuple[float, float]:
    """Convert J2000 equatorial coordinates to galactic (l, b), all in degrees."""
    alpha = math.radians(ra)
    delta = math.radians(dec)
    alpha_g = math.radians(_RA_NGP)
    delta_g = math.radians(_DEC_NGP)
    d_alpha = alpha - alpha_g

    sin_b = math.sin(delta) * math.sin(delta_g) + math.cos(delta) * math.cos(delta_g) * math.cos(
        d_alpha
    )
    b = math.asin(max(-1.0, min(1.0, sin_b)))
    y = math.cos(delta) * math.sin(d_alpha)
    x = math.sin(delta) * math.cos(delta_g) - math.cos(delta) * math.sin(delta_g) * math.cos(
        d_alpha
    )
    l = (_L_NCP - math.degrees(math.atan2(y, x))) % 360.0
    return l, math.degrees(b)


def _catalog_stages(config: Any, ra_geojson: float, dec_geojson: float) -> list[dict]:
    return [
        {
            "$match": {
                "coordinates.radec_geojson": {
                    "$geoWithin": {
                        "$centerSphere": [[ra_geojson, dec_geojson], config.radius]
                    }
                }
            }
        },
        {"$project": config.projection},
        {"$group": {"_id": None, "matches": {"$push": "$$ROOT"}}},
    ]


def build_xmatch_pipeline(ra: float, dec: float, xmatch_configs: Sequence[Any]) -> list[dict]:
    """Build the aggregation pipeline querying every configured catalog at once."""
    if not xmatch_configs:
        return []
    first, *rest = xmatch_configs
    ra_geojson = ra - 180.0
    dec_geojson = dec

    pipeline = _catalog_stages(first, ra_geojson, dec_geojson)
    pipeline.append({"$project": {"_id": 0, first.catalog: "$matches"}})
    for config in rest:
        stages = _catalog_stages(config, ra_geojson, dec_geojson)
        stages.append({"$project": {"_id": 0, "matches": 1, "catalog": config.catalog}})
        pipeline.append({"$unionWith": {"coll": config.catalog, "pipeline": stages}})
    return pipeline


def _get_str(doc: Mapping, key: str) -> str:
    value = doc.get(key)
    if not isinstance(value, str):
        raise XmatchError(f"value access error from bson: {key!r} is not a string")
    return value


def _get_array(doc: Mapping, key: str) -> list:
    value = doc.get(key)
    if not isinstance(value, list):
        raise XmatchError(f"value access error from bson: {key!r} is not an array")
    return value


def _get_f64(doc: Mapping, key: str) -> float | None:
    value = doc.get(key)
    if isinstance(value, float):
        return value
    return None


def _filter_by_distance(ra: float, dec: float, config: Any, matches: Iterable) -> list[dict]:
    if config.distance_key is None:
        raise XmatchError("distance_key field is null")
    if config.distance_max is None:
        raise XmatchError("distance_max field is null")
    if config.distance_max_near is None:
        raise XmatchError("distance_max_near field is null")

    filtered = []
    for match in matches:
        if not isinstance(match, Mapping):
            raise XmatchError("failed to convert the bson data into a document")
        match_ra = _get_f64(match, "ra")
        if match_ra is None:
            logger.warning("No ra in xmatch doc")
            continue
        match_dec = _get_f64(match, "dec")
        if match_dec is None:
            logger.warning("No dec in xmatch doc")
            continue
        doc_z = _get_f64(match, config.distance_key)
        if doc_z is None:
            logger.warning("No z in xmatch doc")
            continue

        if doc_z < 0.01:
            cm_radius = config.distance_max_near / 3600.0
        else:
            cm_radius = config.distance_max * (0.05 / doc_z) / 3600.0
        angular_separation = great_circle_distance(ra, dec, match_ra, match_dec) * 3600.0

        if angular_separation < cm_radius:
            distance_kpc = angular_separation * (doc_z / 0.05) if doc_z > 0.005 else -1.0
            enriched = dict(match)
            enriched["angular_separation"] = angular_separation
            enriched["distance_kpc"] = distance_kpc
            filtered.append(enriched)
    return filtered


def xmatch(ra: float, dec: float, xmatch_configs: Sequence[Any], db: Any) -> dict[str, list]:
    """Cross-match a position against the configured catalogs.

    Returns a mapping from every catalog name to its list of matches, in the
    order of the configurations.
    """
    configs = list(xmatch_configs)
    if not configs:
        return {}

    by_catalog: dict[str, Any] = {}
    for config in configs:
        by_catalog.setdefault(config.catalog, config)

    results: dict[str, list] = {config.catalog: [] for config in configs}
    pipeline = build_xmatch_pipeline(ra, dec, configs)

    try:
        for doc in db[configs[0].catalog].aggregate(pipeline):
            catalog = _get_str(doc, "catalog")
            matches = _get_array(doc, "matches")
            config = by_catalog.get(catalog)
            if config is None:
                raise XmatchError(f"no crossmatch configuration for catalog {catalog!r}")
            if config.use_distance:
                results[config.catalog] = _filter_by_distance(ra, dec, config, matches)
            else:
                results[catalog] = matches
    except PyMongoError as exc:
        raise XmatchError("error from mongodb") from exc

    return results