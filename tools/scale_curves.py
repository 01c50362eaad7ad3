"""
Chart scales and curve functions.

The correction chart is read by mapping physical values onto its
non-uniform axes (fit_to_scale), intersecting straight construction lines
(LinearFunc) and evaluating the fitted correction curves (PolynomialFunc,
LogisticFunc) at the resulting x position.
"""

import logging
import math
from typing import Iterable, Mapping, NamedTuple, Sequence, Tuple, Union

import numpy as np

from utils.constants import OFF_SCALE

logger = logging.getLogger("viscocorrect-mcp.scale_curves")

# math.exp overflows above this argument
_EXP_LIMIT = 709.0


class Scale:
    """A digitized chart axis.

    Built from ascending breakpoints, each paired with the pixel distance
    from the previous breakpoint (0 for the first one).
    """

    def __init__(self, table: Union[Mapping[int, int], Iterable[Tuple[int, int]]]):
        items = list(table.items()) if isinstance(table, Mapping) else list(table)
        if not items:
            raise ValueError("A scale needs at least one breakpoint")

        self.breakpoints = np.array([key for key, _ in items], dtype=float)
        self.distances = np.array([dist for _, dist in items], dtype=float)
        if np.any(np.diff(self.breakpoints) <= 0):
            raise ValueError("Scale breakpoints must be strictly ascending")
        if np.any(self.distances < 0):
            raise ValueError("Scale distances must be non-negative")

        # Pixel offset of each breakpoint from the scale start
        self.positions = np.cumsum(self.distances)
        self._previous = np.concatenate(([0.0], self.breakpoints[:-1]))

    @property
    def lower(self) -> float:
        return float(self.breakpoints[0])

    @property
    def upper(self) -> float:
        return float(self.breakpoints[-1])

    @property
    def length(self) -> float:
        """Pixel length from the first to the last breakpoint."""
        return float(self.positions[-1])

    def __len__(self) -> int:
        return len(self.breakpoints)

    def __repr__(self) -> str:
        return f"Scale({self.lower:g}..{self.upper:g}, {len(self)} breakpoints)"


def fit_to_scale(scale: Scale, value: float, start: float = 0.0) -> float:
    """Map ``value`` to its pixel position on ``scale``.

    Values between breakpoints are interpolated linearly within their
    bracket. Returns OFF_SCALE (-1.0) for values above the last breakpoint
    or non-finite values; callers have to check for it.
    """
    value = float(value)
    if not math.isfinite(value) or value > scale.upper:
        logger.debug("%s not on %r", value, scale)
        return OFF_SCALE

    index = int(np.searchsorted(scale.breakpoints, value, side="left"))
    key = scale.breakpoints[index]
    previous = scale._previous[index]
    position = start + (scale.positions[index - 1] if index else 0.0)

    if key == value:
        return float(position + scale.distances[index])
    if key == previous:
        return float(position)
    return float(position + (value - previous) / (key - previous) * scale.distances[index])


class LinearFunc(NamedTuple):
    """Straight line with slope ``pitch`` through the point (x, y)."""

    pitch: float
    x: float
    y: float

    def __call__(self, x: float) -> float:
        return self.pitch * (x - self.x) + self.y

    def solve_for_x(self, y: float) -> float:
        """Return the x at which the line reaches ``y``; 0 for a flat line."""
        if self.pitch == 0:
            return 0.0
        return (y - self.y) / self.pitch + self.x


class PolynomialFunc(NamedTuple):
    """Polynomial ``sum(coefficients[i] * x**i)``, lowest degree first."""

    coefficients: Tuple[float, ...]

    @classmethod
    def from_highest_first(cls, coefficients: Sequence[float]) -> "PolynomialFunc":
        """Build from coefficients listed highest degree first (CSV order)."""
        return cls(tuple(reversed(tuple(coefficients))))

    @property
    def degree(self) -> int:
        return len(self.coefficients) - 1

    def __call__(self, x: float) -> float:
        return sum(c * x ** i for i, c in enumerate(self.coefficients))


class LogisticFunc(NamedTuple):
    """Logistic curve ``c0 / (1 + exp(-c1 * (x - c2)))``."""

    c0: float
    c1: float
    c2: float

    def __call__(self, x: float) -> float:
        z = -self.c1 * (x - self.c2)
        if z > _EXP_LIMIT:
            return 0.0
        return self.c0 / (1.0 + math.exp(z))


CurveFunction = Union[LinearFunc, PolynomialFunc, LogisticFunc]


def curve_from_coefficients(coefficients: Sequence[float]) -> CurveFunction:
    """Pick the curve shape from a coefficient row.

    Three values are a logistic fit, anything longer a polynomial listed
    highest degree first.
    """
    if len(coefficients) == 3:
        return LogisticFunc(*coefficients)
    if len(coefficients) < 2:
        raise ValueError(f"Cannot build a curve from {len(coefficients)} coefficient(s)")
    return PolynomialFunc.from_highest_first(coefficients)
