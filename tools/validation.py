"""
Range checks for the correction chart inputs.

Validation runs on base-unit values before any chart lookup. Each input
outside the chart owns one bit of the error flag; a zero flag means the
chart can be read.
"""

import enum
import logging
import math
from typing import List, Tuple

from utils.constants import FLOWRATE_RANGE, TOTAL_HEAD_RANGE, VISCOSITY_RANGE

logger = logging.getLogger("viscocorrect-mcp.validation")


class ErrorFlag(enum.IntFlag):
    NONE = 0
    FLOWRATE = 1
    TOTAL_HEAD = 2
    VISCOSITY = 4
    OFF_SCALE = 8


_MESSAGES = {
    ErrorFlag.FLOWRATE: "Flow rate outside chart range {0[0]:g}..{0[1]:g} m3/h".format(FLOWRATE_RANGE),
    ErrorFlag.TOTAL_HEAD: "Total head outside chart range {0[0]:g}..{0[1]:g} m".format(TOTAL_HEAD_RANGE),
    ErrorFlag.VISCOSITY: "Viscosity outside chart range {0[0]:g}..{0[1]:g} mm2/s".format(VISCOSITY_RANGE),
    ErrorFlag.OFF_SCALE: "Input could not be located on a chart scale",
}


def in_range(value: float, bounds: Tuple[float, float]) -> bool:
    """Inclusive range check; NaN and infinities are never in range."""
    if not math.isfinite(value):
        return False
    return bounds[0] <= value <= bounds[1]


def validate(params) -> int:
    """Check base-unit parameters against the chart ranges.

    Args:
        params: Any object with ``flowrate``, ``total_head`` and
            ``viscosity`` attributes in m³/h, m and mm²/s. Values may be
            ExactDecimal or float; invalid decimals fail their check.

    Returns:
        The error flag as int, 0 when every input is on the chart.
        Density is not checked.
    """
    flag = ErrorFlag.NONE
    if not in_range(float(params.flowrate), FLOWRATE_RANGE):
        flag |= ErrorFlag.FLOWRATE
    if not in_range(float(params.total_head), TOTAL_HEAD_RANGE):
        flag |= ErrorFlag.TOTAL_HEAD
    if not in_range(float(params.viscosity), VISCOSITY_RANGE):
        flag |= ErrorFlag.VISCOSITY

    if flag:
        logger.debug("Validation failed: %s", ", ".join(describe(flag)))
    return int(flag)


def validate_curve_position(position: float, bounds: Tuple[float, float]) -> bool:
    """Return True when a chart x position lies on a fitted curve."""
    return in_range(position, bounds)


def describe(flag: int) -> List[str]:
    """Human-readable messages for every bit set in ``flag``."""
    flag = ErrorFlag(flag)
    return [message for bit, message in _MESSAGES.items() if bit in flag]
