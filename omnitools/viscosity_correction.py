"""Unified viscosity correction tool for centrifugal pumps."""

from typing import Optional, Literal, Union
import inspect
from tools.viscosity_correction import calculate_viscosity_correction, convert_to_base_units


def viscosity_correction(
    flowrate: Union[float, str],
    total_head: Union[float, str],
    viscosity: Union[float, str],
    density: Optional[Union[float, str]] = None,
    flowrate_unit: str = "m3/h",
    head_unit: str = "m",
    viscosity_unit: str = "mm2/s",
    density_unit: str = "g/l",
    mode: Literal["correct", "convert"] = "correct",
    float_precision: Optional[int] = None,
    calibration_file: Optional[str] = None,
) -> str:
    """Viscosity correction factors for a centrifugal pump's water curve.

    Reads the Q (flow), η (efficiency) and H (head) correction factors from
    the viscosity correction chart at the pump's best efficiency point:
    - mode='correct': correction factors q, eta and h at 0.6, 0.8, 1.0 and
      1.2 of the nominal flow rate
    - mode='convert': only convert the inputs to m³/h, m, mm²/s and g/l

    Units: flowrate m3/h, l/min, gpm; head m, ft; viscosity mm2/s, cSt,
    cP, mPas (cP and mPas need a density); density g/l, kg/m3.

    Returns:
        JSON string with calculation results

    Examples:
        Kinematic viscosity:
        >>> viscosity_correction(flowrate=100, total_head=100, viscosity=100)

        Dynamic viscosity with density:
        >>> viscosity_correction(flowrate=440, total_head=328, viscosity=200,
        ...                      flowrate_unit="gpm", head_unit="ft",
        ...                      viscosity_unit="cP", density=900, density_unit="kg/m3")
    """
    params = locals().copy()
    params.pop("mode")

    if mode == "correct":
        fn = calculate_viscosity_correction
    elif mode == "convert":
        fn = convert_to_base_units
    else:
        return f'{{"error": "Invalid mode: {mode}"}}'

    sig = inspect.signature(fn)
    allowed = set(sig.parameters.keys())
    forwarded = {k: v for k, v in params.items() if k in allowed and v is not None}

    return fn(**forwarded)
