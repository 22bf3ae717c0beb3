"""Decoding of gzipped FITS cutouts into flattened, normalized images."""

import math
import re
import struct
import zlib
from collections.abc import Mapping
from typing import Any

from bson.binary import BINARY_SUBTYPE, Binary

_NAXIS1_KEY = b"NAXIS1  ="
_NAXIS2_KEY = b"NAXIS2  ="
_FITS_HEADER_LEN = 2880
NAXIS_STANDARD = 63
NB_PIXELS = NAXIS_STANDARD * NAXIS_STANDARD
_F32_MAX = 3.4028234663852886e38
_UNSIGNED_INT = re.compile(rb"\+?[0-9]+")

_FTEXT, _FHCRC, _FEXTRA, _FNAME, _FCOMMENT = 1, 2, 4, 8, 16


class CutoutError(Exception):
    """Raised when a cutout cannot be read, decoded or parsed."""


def _inflate_gzip(buffer: bytes) -> bytes:
    """Decompress a gzip member without verifying its checksum."""
    data = bytes(buffer)
    try:
        if len(data) < 10 or data[:2] != b"\x1f\x8b" or data[2] != 8:
            raise CutoutError("decode error: not a gzip stream")
        flags = data[3]
        pos = 10
        if flags & _FEXTRA:
            xlen = int.from_bytes(data[pos:pos + 2], "little")
            pos += 2 + xlen
        if flags & _FNAME:
            pos = data.index(b"\0", pos) + 1
        if flags & _FCOMMENT:
            pos = data.index(b"\0", pos) + 1
        if flags & _FHCRC:
            pos += 2
        decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
        out = decompressor.decompress(data[pos:])
        if not decompressor.eof:
            raise CutoutError("decode error: truncated gzip stream")
        return out
    except (zlib.error, ValueError) as exc:
        raise CutoutError("decode error in gzip stream") from exc


def _first(subset: bytes, start: int, predicate) -> int | None:
    return next((i for i in range(start, len(subset)) if predicate(subset[i])), None)


def _parse_size(raw: bytes) -> int:
    if not _UNSIGNED_INT.fullmatch(raw):
        raise CutoutError(f"integer parsing error: {raw!r}")
    return int(raw)


def _header_value(subset: bytes, key_end: int) -> tuple[int, int]:
    space = ord(" ")
    val_start = _first(subset, key_end, lambda c: c != space) or 0
    val_end = _first(subset, val_start, lambda c: c == space) or 0
    return val_start, val_end


def buffer_to_image(buffer: bytes) -> list[float]:
    """Decode a gzipped FITS cutout into a flattened 63x63 image, zero-padded if smaller."""
    data = _inflate_gzip(buffer)
    if len(data) < _FITS_HEADER_LEN:
        raise CutoutError("FITS data shorter than one header block")
    subset = data[:_FITS_HEADER_LEN]

    key1 = subset.find(_NAXIS1_KEY, 0, len(subset) - 1)
    key1 = 0 if key1 < 0 else key1
    val1_start, val1_end = _header_value(subset, key1 + len(_NAXIS1_KEY))
    naxis1 = _parse_size(subset[val1_start:val1_end])

    key2 = subset.find(_NAXIS2_KEY, val1_end, len(subset) - 1)
    key2_end = val1_end if key2 < 0 else key2 + len(_NAXIS2_KEY)
    val2_start, val2_end = _header_value(subset, key2_end)
    naxis2 = _parse_size(subset[val2_start:val2_end])

    if naxis1 > NAXIS_STANDARD or naxis2 > NAXIS_STANDARD:
        raise CutoutError(f"image {naxis1}x{naxis2} exceeds {NAXIS_STANDARD}x{NAXIS_STANDARD}")

    count = naxis1 * naxis2
    end = _FITS_HEADER_LEN + count * 4
    if len(data) < end:
        raise CutoutError("FITS data shorter than its declared image size")
    image = list(struct.unpack(f">{count}f", data[_FITS_HEADER_LEN:end]))

    offset1 = math.ceil((NAXIS_STANDARD - naxis1) / 2)
    offset2 = math.ceil((NAXIS_STANDARD - naxis2) / 2)
    if (offset1, offset2) != (0, 0):
        padded = [0.0] * NB_PIXELS
        for row in range(naxis2):
            src = image[row * naxis1:(row + 1) * naxis1]
            dst = (row + offset2) * NAXIS_STANDARD + offset1
            padded[dst:dst + naxis1] = src
        image = padded
    return image


def normalize_image(image: list[float]) -> list[float]:
    """Replace NaNs with zero, clamp to the float32 range and divide by the 2-norm."""
    cleaned = [
        0.0 if math.isnan(pixel) else min(max(pixel, -_F32_MAX), _F32_MAX)
        for pixel in image
    ]
    norm = math.sqrt(math.fsum(pixel * pixel for pixel in cleaned))
    if norm == 0.0:
        return [math.nan] * len(cleaned)
    return [pixel / norm for pixel in cleaned]


def _prepare_cutout(cutout: bytes) -> list[float]:
    return normalize_image(buffer_to_image(cutout))


def _get_binary_generic(doc: Mapping[str, Any], key: str) -> bytes:
    if key not in doc:
        raise CutoutError(f"failed to access document field {key!r}")
    value = doc[key]
    if isinstance(value, Binary):
        if value.subtype != BINARY_SUBTYPE:
            raise CutoutError(f"field {key!r} is not generic binary data")
        return bytes(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise CutoutError(f"field {key!r} is not binary data")


def prepare_triplet(alert_doc: Mapping[str, Any]) -> tuple[list[float], list[float], list[float]]:
    """Decode and normalize the science, template and difference cutouts of an alert."""
    science = _prepare_cutout(_get_binary_generic(alert_doc, "cutoutScience"))
    template = _prepare_cutout(_get_binary_generic(alert_doc, "cutoutTemplate"))
    difference = _prepare_cutout(_get_binary_generic(alert_doc, "cutoutDifference"))
    return science, template, difference