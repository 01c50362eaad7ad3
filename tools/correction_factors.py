"""
Viscosity correction factors read from the digitized chart.

The chart is read the way it is drawn by hand: the total head line is
followed to the flow rate, the viscosity line is followed to that height,
and the correction curves are read at the x position where both meet.
"""

import logging
from typing import NamedTuple, Optional, Tuple, Union

from utils.calibration import CalibrationSet, default_calibration
from utils.constants import (
    DEFAULT_FLOAT_PRECISION, ETA_CURVE_RANGE, ETA_OFFSET, FLOWRATE_SCALE, H_CURVE_RANGE,
    H_OFFSET, H_RATIOS, OFF_SCALE, PITCH_TOTAL_HEAD, PITCH_VISCOSITY, PIXELS_CORRECTION_SCALE,
    Q_CURVE_RANGE, Q_OFFSET, START_FLOWRATE, START_TOTAL_HEAD, START_VISCOSITY, TOTAL_HEAD_SCALE,
    VISCOSITY_SCALE,
)
from utils.exact_decimal import ExactDecimal
from utils.unit_conversion import STANDARD_UNITS, DecimalLike, Units, to_base, viscosity_to_base
from .scale_curves import CurveFunction, LinearFunc, Scale, fit_to_scale
from .validation import ErrorFlag, describe, validate, validate_curve_position

logger = logging.getLogger("viscocorrect-mcp.correction_factors")


class Parameters(NamedTuple):
    """Chart inputs as exact decimals, in ``units``."""

    flowrate: ExactDecimal
    total_head: ExactDecimal
    viscosity: ExactDecimal
    density: ExactDecimal
    units: Units = STANDARD_UNITS

    @classmethod
    def create(cls, flowrate: DecimalLike, total_head: DecimalLike, viscosity: DecimalLike,
               density: DecimalLike = 0, units: Units = STANDARD_UNITS,
               precision: int = DEFAULT_FLOAT_PRECISION) -> "Parameters":
        """Build from strings, numbers or decimals; floats use ``precision`` digits."""
        return cls(
            ExactDecimal.coerce(flowrate, precision),
            ExactDecimal.coerce(total_head, precision),
            ExactDecimal.coerce(viscosity, precision),
            ExactDecimal.coerce(density, precision),
            units,
        )

    def to_dict(self):
        return {
            "flowrate": float(self.flowrate),
            "total_head": float(self.total_head),
            "viscosity": float(self.viscosity),
            "density": float(self.density),
            "units": {field: unit.value for field, unit in self.units._asdict().items()},
        }


class CorrectionFactors(NamedTuple):
    """Correction factors for flow rate, efficiency and head.

    ``h`` holds the head factors at 0.6, 0.8, 1.0 and 1.2 of the nominal
    flow rate. A non-zero ``error_flag`` means the inputs were off the
    chart and every factor is 0.
    """

    q: float
    eta: float
    h: Tuple[float, float, float, float]
    error_flag: int = 0

    @classmethod
    def failed(cls, flag: int) -> "CorrectionFactors":
        return cls(0.0, 0.0, (0.0, 0.0, 0.0, 0.0), int(flag))

    @property
    def ok(self) -> bool:
        return self.error_flag == 0

    @property
    def h_06(self) -> float:
        return self.h[0]

    @property
    def h_08(self) -> float:
        return self.h[1]

    @property
    def h_10(self) -> float:
        return self.h[2]

    @property
    def h_12(self) -> float:
        return self.h[3]

    def to_dict(self):
        return {
            "q": self.q,
            "eta": self.eta,
            "h": {f"{ratio:.1f}": value for ratio, value in zip(H_RATIOS, self.h)},
            "error_flag": self.error_flag,
            "errors": describe(self.error_flag),
        }


class ChartGeometry(NamedTuple):
    """Digitized layout of the correction chart."""

    flowrate_scale: Scale
    total_head_scale: Scale
    viscosity_scale: Scale
    start_flowrate: float = START_FLOWRATE
    start_total_head: Tuple[float, float] = START_TOTAL_HEAD
    pitch_total_head: float = PITCH_TOTAL_HEAD
    start_viscosity: Tuple[float, float] = START_VISCOSITY
    pitch_viscosity: float = PITCH_VISCOSITY
    pixel_scale: float = PIXELS_CORRECTION_SCALE
    q_range: Tuple[float, float] = Q_CURVE_RANGE
    eta_range: Tuple[float, float] = ETA_CURVE_RANGE
    h_range: Tuple[float, float] = H_CURVE_RANGE


DEFAULT_GEOMETRY = ChartGeometry(
    flowrate_scale=Scale(FLOWRATE_SCALE),
    total_head_scale=Scale(TOTAL_HEAD_SCALE),
    viscosity_scale=Scale(VISCOSITY_SCALE),
)


def convert_parameters(params: Parameters, precision: int = DEFAULT_FLOAT_PRECISION) -> Parameters:
    """Convert parameters to m³/h, m, mm²/s and g/l."""
    units = params.units
    converted = Parameters(
        to_base(params.flowrate, units.flowrate, precision),
        to_base(params.total_head, units.total_head, precision),
        viscosity_to_base(params.viscosity, units.viscosity, params.density, units.density, precision),
        to_base(params.density, units.density, precision),
        STANDARD_UNITS,
    )
    logger.debug("Converted %s to %s", params.to_dict(), converted.to_dict())
    return converted


def _read_curve(curve: CurveFunction, position: float, bounds: Tuple[float, float],
                pixel_scale: float, offset: float) -> float:
    if validate_curve_position(position, bounds):
        return curve(position) / pixel_scale / 10 + offset
    # Left of the curve the fluid behaves like water, right of it the chart ends
    return 1.0 if position < bounds[0] else 0.0


class CorrectionCalculator:
    """Reads correction factors off one chart.

    Args:
        calibration: Curve coefficients, the built-in set when omitted
        geometry: Chart layout, DEFAULT_GEOMETRY when omitted
    """

    def __init__(self, calibration: Optional[CalibrationSet] = None,
                 geometry: Optional[ChartGeometry] = None):
        self.calibration = calibration if calibration is not None else default_calibration()
        self.geometry = geometry if geometry is not None else DEFAULT_GEOMETRY
        self.curve_q, self.curve_eta, self.curves_h = build_curves(self.calibration)

    def locate(self, params: Parameters) -> Optional[float]:
        """Return the chart x position for base-unit parameters.

        None when a value cannot be placed on its scale.
        """
        g = self.geometry
        flow_pos = fit_to_scale(g.flowrate_scale, float(params.flowrate), g.start_flowrate)
        head_pos = fit_to_scale(g.total_head_scale, float(params.total_head), g.start_total_head[1])
        visc_pos = fit_to_scale(g.viscosity_scale, float(params.viscosity), g.start_viscosity[0])
        if OFF_SCALE in (flow_pos, head_pos, visc_pos):
            logger.warning("Value off scale: flowrate %s, total head %s, viscosity %s",
                           params.flowrate, params.total_head, params.viscosity)
            return None

        head_func = LinearFunc(g.pitch_total_head, g.start_total_head[0], head_pos)
        visc_func = LinearFunc(g.pitch_viscosity, visc_pos, g.start_viscosity[1])
        position = visc_func.solve_for_x(head_func(flow_pos))
        logger.debug("Chart positions: flowrate %.3f, head %.3f, viscosity %.3f -> %.3f",
                     flow_pos, head_pos, visc_pos, position)
        return position

    def calculate_converted(self, params: Parameters) -> CorrectionFactors:
        """Correction factors for parameters already in base units."""
        flag = validate(params)
        if flag:
            return CorrectionFactors.failed(flag)

        position = self.locate(params)
        if position is None:
            return CorrectionFactors.failed(ErrorFlag.OFF_SCALE)

        g = self.geometry
        q = _read_curve(self.curve_q, position, g.q_range, g.pixel_scale, Q_OFFSET)
        eta = _read_curve(self.curve_eta, position, g.eta_range, g.pixel_scale, ETA_OFFSET)
        h = tuple(_read_curve(curve, position, g.h_range, g.pixel_scale, H_OFFSET)
                  for curve in self.curves_h)
        return CorrectionFactors(q, eta, h, 0)

    def calculate(self, flowrate: DecimalLike, total_head: DecimalLike, viscosity: DecimalLike,
                  density: DecimalLike = 0, units: Units = STANDARD_UNITS,
                  precision: int = DEFAULT_FLOAT_PRECISION) -> CorrectionFactors:
        """Convert the inputs to base units and read the chart.

        Args:
            flowrate: Flow rate at best efficiency, in ``units.flowrate``
            total_head: Total head at best efficiency, in ``units.total_head``
            viscosity: Kinematic or dynamic viscosity, in ``units.viscosity``
            density: Needed for dynamic viscosity units, in ``units.density``
            units: Units of the inputs
            precision: Significant digits kept from float inputs

        Returns:
            CorrectionFactors; check ``error_flag`` before using the values
        """
        params = Parameters.create(flowrate, total_head, viscosity, density, units, precision)
        return self.calculate_converted(convert_parameters(params, precision))


def build_curves(calibration: CalibrationSet) -> Tuple[CurveFunction, CurveFunction, Tuple[CurveFunction, ...]]:
    """Curve functions (q, eta, h) of a calibration set."""
    return calibration.to_curves()


_default_calculator: Union[CorrectionCalculator, None] = None


def default_calculator() -> CorrectionCalculator:
    global _default_calculator
    if _default_calculator is None:
        _default_calculator = CorrectionCalculator()
    return _default_calculator


def calculate(flowrate: DecimalLike, total_head: DecimalLike, viscosity: DecimalLike,
              density: DecimalLike = 0, units: Units = STANDARD_UNITS,
              precision: int = DEFAULT_FLOAT_PRECISION) -> CorrectionFactors:
    """Correction factors using the built-in chart and coefficients."""
    return default_calculator().calculate(flowrate, total_head, viscosity, density, units, precision)
