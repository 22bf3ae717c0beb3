"""Photometric conversions between fluxes and magnitudes."""

import math

ZP_AB = 8.90
"""Zero point for AB magnitudes."""

SNT = 3.0
"""Signal-to-noise threshold for a detection."""

_MAG_ERR_FACTOR = 2.5 / math.log(10.0)


def _log10(value: float) -> float:
    """Base-10 logarithm that yields -inf for zero and nan for negatives."""
    if value > 0:
        return math.log10(value)
    if value == 0:
        return -math.inf
    return math.nan


def _ratio(numerator: float, denominator: float) -> float:
    """Floating point division that follows IEEE rules for a zero denominator."""
    if denominator != 0:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator) or math.isnan(denominator):
        return math.nan
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def flux2mag(flux: float, flux_err: float, zp: float) -> tuple[float, float]:
    """Convert a flux and its error to a magnitude and its error."""
    mag = -2.5 * _log10(flux) + zp
    sigma = _MAG_ERR_FACTOR * _ratio(flux_err, flux)
    return mag, sigma


def fluxerr2diffmaglim(flux_err: float, zp: float) -> float:
    """Return the 5-sigma limiting magnitude for a flux error."""
    return -2.5 * _log10(5.0 * flux_err) + zp