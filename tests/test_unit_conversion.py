#!/usr/bin/env python3
"""
Tests for unit conversion to the chart base units.
"""

import pytest

from utils.exact_decimal import ExactDecimal
from utils.unit_conversion import (
    STANDARD_UNITS, DensityUnit, FlowrateUnit, HeadUnit, Units, ViscosityUnit,
    base_unit_of, parse_unit, to_base, viscosity_to_base,
)


class TestToBase:
    """Test multiplicative conversions."""

    def test_liters_per_minute(self):
        assert to_base(1.0, FlowrateUnit.LITERS_PER_MINUTE) == ExactDecimal.from_string("0.06")

    def test_gallons_per_minute(self):
        assert to_base(1.0, FlowrateUnit.GALLONS_PER_MINUTE).to_double() == pytest.approx(0.227125)

    def test_feet(self):
        assert to_base(10.0, HeadUnit.FEET).to_double() == 3.048

    def test_kilograms_per_cubic_meter(self):
        assert to_base(100.0, DensityUnit.KILOGRAMS_PER_CUBIC_METER).to_double() == 0.1

    def test_thousand_liters_per_minute_is_sixty(self):
        result = to_base("1000", FlowrateUnit.LITERS_PER_MINUTE)
        assert str(result) == "60.00"
        assert result.to_double() == 60.0

    @pytest.mark.parametrize("unit_type", [FlowrateUnit, HeadUnit, DensityUnit])
    @pytest.mark.parametrize("value", ["123.45", "0.001", "4000", "-2.5"])
    def test_base_unit_is_identity(self, unit_type, value):
        v = ExactDecimal.from_string(value)
        assert to_base(v, base_unit_of(unit_type)) == v

    def test_viscosity_unit_rejected(self):
        with pytest.raises(TypeError):
            to_base(1.0, ViscosityUnit.CENTIPOISE)

    def test_invalid_input_propagates(self):
        assert not to_base("abc", FlowrateUnit.GALLONS_PER_MINUTE).valid

    @pytest.mark.parametrize("value", [
        "1844.6744073709551", "0.12345678901234567", "987.65432109876543", "6.0000000000000001",
    ])
    def test_truncated_product_stays_close_to_float(self, value):
        # Long inputs overflow the magnitude and lose low-order digits
        result = to_base(value, FlowrateUnit.GALLONS_PER_MINUTE)
        assert result.valid
        assert result.to_double() == pytest.approx(float(value) * 0.227125, rel=1e-12)


class TestViscosityToBase:
    """Test kinematic and dynamic viscosity conversion."""

    def test_centipoise_divided_by_density(self):
        result = viscosity_to_base(2, ViscosityUnit.CENTIPOISE, 4, DensityUnit.GRAMS_PER_LITER)
        assert result == ExactDecimal.from_string("0.5")

    def test_millipascal_seconds_with_kg_per_m3(self):
        result = viscosity_to_base(200, ViscosityUnit.MILLIPASCAL_SECONDS, 900,
                                   DensityUnit.KILOGRAMS_PER_CUBIC_METER)
        assert result.to_double() == pytest.approx(200 / 0.9)

    @pytest.mark.parametrize("value", ["1", "100.5", "4000"])
    @pytest.mark.parametrize("density", [0, "0.9", 1000])
    def test_centistokes_ignore_density(self, value, density):
        v = ExactDecimal.from_string(value)
        assert viscosity_to_base(v, ViscosityUnit.CENTISTOKES, density) == v
        assert viscosity_to_base(v, ViscosityUnit.SQUARE_MILLIMETERS_PER_SECOND, density) == v

    def test_zero_density_gives_zero(self):
        result = viscosity_to_base(200, ViscosityUnit.CENTIPOISE, 0)
        assert result.is_zero()

    def test_precision_of_quotient(self):
        result = viscosity_to_base(1, ViscosityUnit.CENTIPOISE, 3, precision=3)
        assert result == ExactDecimal.from_string("0.333")


class TestParseUnit:
    """Test unit lookup by symbol, name and alias."""

    @pytest.mark.parametrize("text,expected", [
        ("m3/h", FlowrateUnit.CUBIC_METERS_PER_HOUR),
        ("M3/H", FlowrateUnit.CUBIC_METERS_PER_HOUR),
        ("l/min", FlowrateUnit.LITERS_PER_MINUTE),
        ("gallons_per_minute", FlowrateUnit.GALLONS_PER_MINUTE),
        ("usgpm", FlowrateUnit.GALLONS_PER_MINUTE),
    ])
    def test_flowrate(self, text, expected):
        assert parse_unit(FlowrateUnit, text) is expected

    @pytest.mark.parametrize("text,expected", [
        ("cSt", ViscosityUnit.CENTISTOKES),
        ("cp", ViscosityUnit.CENTIPOISE),
        ("mPa·s", ViscosityUnit.MILLIPASCAL_SECONDS),
        ("mm²/s", ViscosityUnit.SQUARE_MILLIMETERS_PER_SECOND),
    ])
    def test_viscosity(self, text, expected):
        assert parse_unit(ViscosityUnit, text) is expected

    def test_enum_passes_through(self):
        assert parse_unit(HeadUnit, HeadUnit.FEET) is HeadUnit.FEET

    def test_empty_gives_base_unit(self):
        assert parse_unit(DensityUnit, None) is DensityUnit.GRAMS_PER_LITER
        assert parse_unit(HeadUnit, "  ") is HeadUnit.METERS

    def test_unit_of_other_kind_rejected(self):
        with pytest.raises(ValueError):
            parse_unit(HeadUnit, "gpm")

    def test_unknown_unit_lists_valid_units(self):
        with pytest.raises(ValueError, match="Valid units: m, ft"):
            parse_unit(HeadUnit, "furlong")


class TestUnits:
    """Test the Units tuple."""

    def test_standard_units_are_base_units(self):
        assert STANDARD_UNITS == Units(
            FlowrateUnit.CUBIC_METERS_PER_HOUR, HeadUnit.METERS,
            ViscosityUnit.SQUARE_MILLIMETERS_PER_SECOND, DensityUnit.GRAMS_PER_LITER,
        )

    def test_replace_one_unit(self):
        units = STANDARD_UNITS._replace(total_head=HeadUnit.FEET)
        assert units.total_head is HeadUnit.FEET
        assert units.flowrate is FlowrateUnit.CUBIC_METERS_PER_HOUR
