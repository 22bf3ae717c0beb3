"""Helpers for astronomical alerts: photometry, FITS cutouts, cross-matching, MongoDB and workers."""

__version__ = "0.1.0"