"""
Stateful, thread-safe front end for one pump operating point.

A Project keeps the inputs as they were given, together with their units,
and computes the correction factors lazily: the first read after a change
converts the changed inputs, reads the chart once and caches the result
until the next change.
"""

import logging
import threading
from typing import Dict, Optional, Set, Tuple, Union

from utils.constants import DEFAULT_FLOAT_PRECISION
from utils.exact_decimal import ExactDecimal
from utils.unit_conversion import (
    STANDARD_UNITS, DecimalLike, DensityUnit, FlowrateUnit, HeadUnit, Units, ViscosityUnit,
    parse_unit, to_base, viscosity_to_base,
)
from .correction_factors import CorrectionCalculator, CorrectionFactors, Parameters, default_calculator

logger = logging.getLogger("viscocorrect-mcp.project")

FIELDS = ("flowrate", "total_head", "viscosity", "density")

_UNIT_TYPES = {
    "flowrate": FlowrateUnit,
    "total_head": HeadUnit,
    "viscosity": ViscosityUnit,
    "density": DensityUnit,
}


class Project:
    """Inputs, units and cached correction factors of one operating point.

    All methods may be called from several threads. Setters invalidate the
    cached result; getters recompute at most once per change and never
    return a result computed from superseded inputs.
    """

    def __init__(self, flowrate: DecimalLike = 0, total_head: DecimalLike = 0,
                 viscosity: DecimalLike = 0, density: DecimalLike = 0,
                 units: Units = STANDARD_UNITS, name: Optional[str] = None,
                 float_precision: int = DEFAULT_FLOAT_PRECISION,
                 calculator: Optional[CorrectionCalculator] = None):
        self._lock = threading.RLock()
        self._name = name
        self._inputs: Dict[str, DecimalLike] = {
            "flowrate": flowrate,
            "total_head": total_head,
            "viscosity": viscosity,
            "density": density,
        }
        self._units = units
        self._float_precision = float_precision
        self._calculator = calculator
        self._converted: Dict[str, ExactDecimal] = {field: ExactDecimal() for field in FIELDS}
        self._changed: Set[str] = set(FIELDS)
        self._result: Optional[CorrectionFactors] = None
        self._computations = 0

    # --- Setters ---

    def _mark(self, *fields: str):
        self._changed.update(fields)
        # Dynamic viscosity depends on the density
        if "density" in fields:
            self._changed.add("viscosity")
        self._result = None

    def _set_value(self, field: str, value: DecimalLike):
        with self._lock:
            self._inputs[field] = value
            self._mark(field)

    def _set_unit(self, field: str, unit):
        unit = parse_unit(_UNIT_TYPES[field], unit)
        with self._lock:
            self._units = self._units._replace(**{field: unit})
            self._mark(field)

    def set_flowrate(self, value: DecimalLike):
        self._set_value("flowrate", value)

    def set_total_head(self, value: DecimalLike):
        self._set_value("total_head", value)

    def set_viscosity(self, value: DecimalLike):
        self._set_value("viscosity", value)

    def set_density(self, value: DecimalLike):
        self._set_value("density", value)

    def set_flowrate_unit(self, unit: Union[FlowrateUnit, str]):
        self._set_unit("flowrate", unit)

    def set_total_head_unit(self, unit: Union[HeadUnit, str]):
        self._set_unit("total_head", unit)

    def set_viscosity_unit(self, unit: Union[ViscosityUnit, str]):
        self._set_unit("viscosity", unit)

    def set_density_unit(self, unit: Union[DensityUnit, str]):
        self._set_unit("density", unit)

    def set_units(self, units: Units):
        with self._lock:
            changed = [field for field in FIELDS if getattr(units, field) is not getattr(self._units, field)]
            self._units = units
            if changed:
                self._mark(*changed)

    def set(self, **values):
        """Set several inputs at once, e.g. ``set(flowrate=100, flowrate_unit="l/min")``.

        Keys are the input names and ``<input>_unit``. The update is applied
        atomically.

        Raises:
            TypeError: For an unknown key
            ValueError: For an unknown unit name
        """
        units = {}
        inputs = {}
        for key, value in values.items():
            if key in FIELDS:
                inputs[key] = value
            elif key.endswith("_unit") and key[:-5] in FIELDS:
                units[key[:-5]] = parse_unit(_UNIT_TYPES[key[:-5]], value)
            else:
                raise TypeError(f"Unknown project input '{key}'")

        with self._lock:
            self._inputs.update(inputs)
            if units:
                self._units = self._units._replace(**units)
            if inputs or units:
                self._mark(*inputs, *units)

    def set_float_precision(self, precision: int):
        if precision < 1:
            raise ValueError("Float precision must be at least one digit")
        with self._lock:
            self._float_precision = precision
            self._mark(*FIELDS)

    # --- Plain accessors ---

    @property
    def name(self) -> Optional[str]:
        return self._name

    @name.setter
    def name(self, value: Optional[str]):
        self._name = value

    @property
    def units(self) -> Units:
        with self._lock:
            return self._units

    @property
    def float_precision(self) -> int:
        with self._lock:
            return self._float_precision

    @property
    def inputs(self) -> Dict[str, DecimalLike]:
        with self._lock:
            return dict(self._inputs)

    @property
    def computations(self) -> int:
        """Number of chart readings done so far."""
        with self._lock:
            return self._computations

    # --- Computation ---

    def _convert(self, field: str) -> ExactDecimal:
        precision = self._float_precision
        if field == "viscosity":
            return viscosity_to_base(self._inputs["viscosity"], self._units.viscosity,
                                     self._inputs["density"], self._units.density, precision)
        return to_base(self._inputs[field], getattr(self._units, field), precision)

    def _refresh(self) -> CorrectionFactors:
        with self._lock:
            if self._result is not None:
                return self._result

            for field in FIELDS:
                if field in self._changed:
                    self._converted[field] = self._convert(field)
            self._changed.clear()

            calculator = self._calculator or default_calculator()
            self._result = calculator.calculate_converted(self._converted_parameters())
            self._computations += 1
            logger.debug("Project %s computed %s", self._name or "<unnamed>", self._result)
            return self._result

    def _converted_parameters(self) -> Parameters:
        c = self._converted
        return Parameters(c["flowrate"], c["total_head"], c["viscosity"], c["density"], STANDARD_UNITS)

    def result(self) -> CorrectionFactors:
        return self._refresh()

    def calculate(self) -> bool:
        """Compute if needed; returns True when the inputs were off the chart."""
        return self._refresh().error_flag != 0

    @property
    def q(self) -> float:
        return self._refresh().q

    @property
    def eta(self) -> float:
        return self._refresh().eta

    @property
    def h(self) -> Tuple[float, float, float, float]:
        return self._refresh().h

    @property
    def h_06(self) -> float:
        return self._refresh().h_06

    @property
    def h_08(self) -> float:
        return self._refresh().h_08

    @property
    def h_10(self) -> float:
        return self._refresh().h_10

    @property
    def h_12(self) -> float:
        return self._refresh().h_12

    @property
    def error_flag(self) -> int:
        return self._refresh().error_flag

    @property
    def has_error(self) -> bool:
        return self.calculate()

    def show_converted(self) -> Parameters:
        """Inputs converted to m³/h, m, mm²/s and g/l."""
        with self._lock:
            self._refresh()
            return self._converted_parameters()

    def copy(self) -> "Project":
        """Independent project with the same inputs, units and settings."""
        with self._lock:
            return Project(units=self._units, name=self._name,
                           float_precision=self._float_precision,
                           calculator=self._calculator, **self._inputs)

    def __repr__(self) -> str:
        with self._lock:
            inputs = ", ".join(f"{field}={self._inputs[field]!r} {getattr(self._units, field).value}"
                               for field in FIELDS)
        return f"Project({self._name!r}, {inputs})"
