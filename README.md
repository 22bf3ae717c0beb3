# boom

Building blocks for processing astronomical transient alerts (ZTF, LSST):
photometry conversions, FITS cutout decoding and normalisation, catalog
cross-matching against MongoDB, MongoDB index and document helpers, and
worker control helpers.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
python -m pytest
```

## Modules

### `boom.conversions`

- `flux2mag(flux, flux_err, zp)` returns `(mag, mag_err)`. A zero flux gives
  an infinite magnitude and a negative flux gives NaN, as in IEEE arithmetic.
- `fluxerr2diffmaglim(flux_err, zp)` returns the 5-sigma limiting magnitude.
- Constants `ZP_AB` (8.90) and `SNT` (3.0, the signal-to-noise threshold).

### `boom.enums`

- `Survey` with members `ZTF` and `LSST`; `str(Survey.ZTF) == "ZTF"`, and
  lookup by value is case-insensitive (`Survey("ztf")`).
- `ProgramId`, an `IntEnum` with `PUBLIC = 1`, `PARTNERSHIP = 2` and
  `CALTECH = 3`. `str()` gives the number, `.serialized` gives the kebab-case
  name (`"public"`), `ProgramId.default()` is `PUBLIC`, and it can be looked
  up from either the name or the number as a string (`ProgramId("2")`).

### `boom.spatial`

- `great_circle_distance(ra1, dec1, ra2, dec2)` — angular distance in degrees.
- `radec2lb(ra, dec)` — J2000 equatorial to galactic `(l, b)`, in degrees.
- `build_xmatch_pipeline(ra, dec, xmatch_configs)` — the aggregation pipeline
  that queries every catalog in one request: the first catalog directly, the
  others through `$unionWith`.
- `xmatch(ra, dec, xmatch_configs, db)` — runs that pipeline on `db` and
  returns a dict mapping every configured catalog name to its list of
  matches (empty lists where nothing matched; `{}` when there are no
  configurations). For configurations with `use_distance` set, matches are
  filtered by a redshift-dependent radius and gain `angular_separation`
  (arcsec) and `distance_kpc` (`-1.0` for very low redshift) fields; matches
  without float `ra`, `dec` or distance values are skipped with a warning.

Each configuration is any object with the attributes `catalog`, `radius`
(radians), `projection`, `use_distance`, `distance_key`, `distance_max` and
`distance_max_near`. Missing distance settings, malformed results and
database errors raise `XmatchError`.

### `boom.worker`

- `sig_int_handler(flag)` installs a SIGINT handler that sets the
  `threading.Event` `flag`, and returns the previous handler.
- `check_flag(flag)` returns whether the event is set; `check_exit(flag)`
  exits the process with status 0 when it is.
- `get_check_command_interval(conf, stream_name)` reads
  `conf["workers"][stream_name]["command_interval"]` as an integer, raising
  `KeyError` for a missing entry and `ValueError` for a wrong type.
- `WorkerType` (`ALERT`, `FILTER`, `ML`) and `WorkerCmd` (`TERM`), whose
  `str()` is their display name.

### `boom.db`

- `create_index(collection, index, unique)` creates an index with the keys of
  `index` in order; database errors raise `CreateIndexError`.
- `initialize_survey_indexes(survey, db)` creates a compound
  `2dsphere` + `_id` index on `<SURVEY>_alerts` and `<SURVEY>_alerts_aux`, and
  an `objectId` index on `<SURVEY>_alerts`.
- `mongify(value)` converts a dataclass or mapping (recursively) into a
  BSON-ready dict; enums become their values, `ProgramId` its kebab-case name.
- `get_coordinates(ra, dec)` builds
  `{"radec_geojson": {"type": "Point", "coordinates": [ra - 180, dec]}, "l": ..., "b": ...}`.
- `cutout2bsonbinary(cutout)` wraps bytes as generic BSON `Binary`.

### `boom.fits`

- `buffer_to_image(buffer)` decompresses a gzipped FITS cutout (without
  checking its CRC), reads `NAXIS1`/`NAXIS2` from the first header block and
  returns the big-endian float32 pixels as a flat list. Images smaller than
  63×63 are centred in a zero-padded 63×63 frame; larger ones are rejected.
- `normalize_image(image)` replaces NaNs with 0, clamps to the float32 range
  and divides by the 2-norm (an all-zero image becomes all NaN).
- `prepare_triplet(alert_doc)` does both for the `cutoutScience`,
  `cutoutTemplate` and `cutoutDifference` fields of an alert document.

All failures raise `CutoutError`.

## Example

```python
from boom.conversions import flux2mag
from boom.spatial import great_circle_distance

mag, mag_err = flux2mag(1000.0, 10.0, 23.9)
sep_deg = great_circle_distance(323.233462, 14.112528, 323.2335, 14.1126)
```

## What this package does not do

It is a library of helpers only. It has no command to run, does not read
configuration files, does not connect to MongoDB by itself (callers pass in
a pymongo database or collection), and does not consume, decode, classify
or filter alert streams.