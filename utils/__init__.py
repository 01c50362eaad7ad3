"""Shared utilities: exact decimals, units, calibration and JSON helpers."""
