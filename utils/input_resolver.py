"""
Shared input resolution for the tool layer using Pydantic models.

Tool functions receive plain numbers or strings plus unit names. This module
validates them, resolves the units and keeps a readable log of what was
used, so every tool reports its inputs the same way.
"""

from typing import Dict, List, Optional, Union
from pydantic import BaseModel, Field, field_validator
import logging

from .exact_decimal import ExactDecimal
from .unit_conversion import (
    DensityUnit, FlowrateUnit, HeadUnit, Units, ViscosityUnit, parse_unit
)

logger = logging.getLogger("viscocorrect-mcp.input_resolver")

DYNAMIC_VISCOSITY_UNITS = (ViscosityUnit.CENTIPOISE, ViscosityUnit.MILLIPASCAL_SECONDS)


class QuantityInput(BaseModel):
    """One chart input as given to a tool: a value and its unit name."""

    value: Union[int, float, str] = Field(..., description="Value as number or decimal string")
    unit: Optional[str] = Field(None, description="Unit symbol or name; base unit if omitted")

    @field_validator("value")
    @classmethod
    def validate_value(cls, v):
        """Reject strings that are not decimal numbers."""
        if isinstance(v, str) and not ExactDecimal.from_string(v.strip()).valid:
            raise ValueError(f"'{v}' is not a decimal number")
        return v

    def get_decimal(self, precision: int) -> ExactDecimal:
        if isinstance(self.value, str):
            return ExactDecimal.from_string(self.value.strip())
        return ExactDecimal.coerce(self.value, precision)

    def get_source(self, unit) -> str:
        """Get description of which input was used."""
        return f"{self.value} {unit.value}"


class InputResolver:
    """
    Centralized input resolution with consistent logging and error handling.
    """

    def __init__(self, tool_name: str, precision: int):
        self.tool_name = tool_name
        self.precision = precision
        self.results_log: List[str] = []
        self.error_log: List[str] = []

    def resolve_unit(self, name: str, unit_type, text: Optional[str]):
        """Resolve a unit name, recording unknown names in the error log."""
        try:
            return parse_unit(unit_type, text)
        except ValueError as e:
            self.error_log.append(f"{name}: {e}")
            return None

    def resolve_quantity(self, name: str, unit_type, value, unit: Optional[str]):
        """Resolve one value and unit to (ExactDecimal, unit enum), or (None, None)."""
        if value is None:
            self.error_log.append(f"Missing {name.lower()} input")
            return None, None
        try:
            quantity = QuantityInput(value=value, unit=unit)
        except ValueError as e:
            self.error_log.append(f"{name}: invalid value {value!r} ({e})")
            return None, None

        resolved_unit = self.resolve_unit(name, unit_type, quantity.unit)
        if resolved_unit is None:
            return None, None

        self.results_log.append(f"{name}: {quantity.get_source(resolved_unit)}")
        return quantity.get_decimal(self.precision), resolved_unit

    def resolve_chart_inputs(self, flowrate, total_head, viscosity, density=None,
                             flowrate_unit: Optional[str] = None, head_unit: Optional[str] = None,
                             viscosity_unit: Optional[str] = None, density_unit: Optional[str] = None):
        """Resolve all chart inputs.

        Returns:
            (values, units) where values maps the input names to ExactDecimal,
            or (None, None) when anything could not be resolved; the reasons
            are in ``error_log``.
        """
        q, q_unit = self.resolve_quantity("Flow rate", FlowrateUnit, flowrate, flowrate_unit)
        h, h_unit = self.resolve_quantity("Total head", HeadUnit, total_head, head_unit)
        v, v_unit = self.resolve_quantity("Viscosity", ViscosityUnit, viscosity, viscosity_unit)

        d, d_unit = ExactDecimal(), self.resolve_unit("Density", DensityUnit, density_unit)
        if density is not None:
            d, d_unit = self.resolve_quantity("Density", DensityUnit, density, density_unit)
        elif v_unit in DYNAMIC_VISCOSITY_UNITS:
            self.error_log.append(f"Density is required for viscosity in {v_unit.value}")

        if self.error_log:
            return None, None

        values = {"flowrate": q, "total_head": h, "viscosity": v, "density": d}
        return values, Units(q_unit, h_unit, v_unit, d_unit)

    def get_logs(self) -> Dict[str, List[str]]:
        """Get accumulated logs."""
        return {
            "log": self.results_log.copy(),
            "errors": self.error_log.copy()
        }
