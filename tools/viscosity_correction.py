"""
Viscosity correction tool.

This module provides tools to read the Q, η and H correction factors of a
centrifugal pump handling a viscous fluid, and to show the chart inputs
converted to base units.
"""

import logging
from typing import Optional, Union

# Import shared utilities
from utils.calibration import load_calibration_csv
from utils.constants import DEFAULT_FLOAT_PRECISION
from utils.input_resolver import InputResolver
from utils.json_helpers import safe_json_dumps
from .correction_factors import CorrectionCalculator, Parameters, convert_parameters, default_calculator

# Configure logging
logger = logging.getLogger("viscocorrect-mcp.viscosity_correction")

Number = Union[float, str]


def calculate_viscosity_correction(
    flowrate: Optional[Number] = None,        # Flow rate at best efficiency point
    total_head: Optional[Number] = None,      # Total head at best efficiency point
    viscosity: Optional[Number] = None,       # Kinematic or dynamic viscosity
    density: Optional[Number] = None,         # Needed for cP / mPas viscosity

    # --- Units ---
    flowrate_unit: str = "m3/h",              # m3/h, l/min, gpm
    head_unit: str = "m",                     # m, ft
    viscosity_unit: str = "mm2/s",            # mm2/s, cSt, cP, mPas
    density_unit: str = "g/l",                # g/l, kg/m3

    # --- Other Parameters ---
    float_precision: int = DEFAULT_FLOAT_PRECISION,  # Significant digits kept from float inputs
    calibration_file: Optional[str] = None    # CSV with recalibrated curve coefficients
) -> str:
    """Calculate viscosity correction factors for a centrifugal pump.

    Reads the correction chart for the pump's best efficiency point. Values
    may be numbers or decimal strings such as "100.5".

    Args:
        flowrate: Flow rate in flowrate_unit (chart range 6..2000 m³/h)
        total_head: Total head in head_unit (chart range 5..200 m)
        viscosity: Viscosity in viscosity_unit (chart range 10..4000 mm²/s)
        density: Fluid density in density_unit, required for cP and mPas
        flowrate_unit: Unit of the flow rate
        head_unit: Unit of the total head
        viscosity_unit: Unit of the viscosity
        density_unit: Unit of the density
        float_precision: Significant digits kept when converting float inputs
        calibration_file: Optional coefficient CSV replacing the built-in curves

    Returns:
        JSON string with q, eta, h (keyed by flow ratio "0.6".."1.2"),
        error_flag, errors, inputs_converted and log
    """
    resolver = InputResolver("viscosity_correction", float_precision)

    try:
        values, units = resolver.resolve_chart_inputs(
            flowrate, total_head, viscosity, density,
            flowrate_unit, head_unit, viscosity_unit, density_unit
        )
        if values is None:
            return safe_json_dumps({"error": "; ".join(resolver.error_log), **resolver.get_logs()})

        if calibration_file:
            calculator = CorrectionCalculator(calibration=load_calibration_csv(calibration_file))
            resolver.results_log.append(f"Used calibration {calculator.calibration.version or calibration_file}")
        else:
            calculator = default_calculator()

        params = Parameters(units=units, **values)
        converted = convert_parameters(params, float_precision)
        factors = calculator.calculate_converted(converted)

        if factors.ok:
            resolver.results_log.append("Read correction factors from chart.")
        else:
            logger.info(f"Inputs off chart: {converted.to_dict()}")

        result = factors.to_dict()
        result["inputs_converted"] = converted.to_dict()
        result["log"] = resolver.results_log
        return safe_json_dumps(result)

    except Exception as e:
        logger.error(f"Error in calculate_viscosity_correction: {e}", exc_info=True)
        return safe_json_dumps({"error": f"Calculation error: {str(e)}", **resolver.get_logs()})


def convert_to_base_units(
    flowrate: Optional[Number] = None,
    total_head: Optional[Number] = None,
    viscosity: Optional[Number] = None,
    density: Optional[Number] = None,
    flowrate_unit: str = "m3/h",
    head_unit: str = "m",
    viscosity_unit: str = "mm2/s",
    density_unit: str = "g/l",
    float_precision: int = DEFAULT_FLOAT_PRECISION
) -> str:
    """Convert chart inputs to m³/h, m, mm²/s and g/l without reading the chart.

    Returns:
        JSON string with the converted values as floats and as exact
        decimal strings
    """
    resolver = InputResolver("convert_to_base_units", float_precision)

    try:
        values, units = resolver.resolve_chart_inputs(
            flowrate, total_head, viscosity, density,
            flowrate_unit, head_unit, viscosity_unit, density_unit
        )
        if values is None:
            return safe_json_dumps({"error": "; ".join(resolver.error_log), **resolver.get_logs()})

        converted = convert_parameters(Parameters(units=units, **values), float_precision)
        return safe_json_dumps({
            "inputs_converted": converted.to_dict(),
            "exact": {field: str(getattr(converted, field))
                      for field in ("flowrate", "total_head", "viscosity", "density")},
            "log": resolver.results_log,
        })

    except Exception as e:
        logger.error(f"Error in convert_to_base_units: {e}", exc_info=True)
        return safe_json_dumps({"error": f"Conversion error: {str(e)}", **resolver.get_logs()})
