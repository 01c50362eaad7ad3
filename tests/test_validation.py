#!/usr/bin/env python3
"""
Tests for range validation of the chart inputs.
"""

import pytest

from utils.exact_decimal import ExactDecimal
from tools.correction_factors import Parameters
from tools.validation import ErrorFlag, describe, validate, validate_curve_position


def params(flowrate, total_head, viscosity):
    return Parameters.create(flowrate, total_head, viscosity)


class TestValidate:
    """Test the error flag composition."""

    def test_valid_inputs(self):
        assert validate(params(100, 100, 100)) == 0

    def test_flowrate_too_low(self):
        flag = validate(params(5, 50, 100))
        assert flag != 0
        assert flag & ErrorFlag.FLOWRATE

    @pytest.mark.parametrize("values", [(6, 5, 10), (2000, 200, 4000)])
    def test_bounds_inclusive(self, values):
        assert validate(params(*values)) == 0

    @pytest.mark.parametrize("values,expected", [
        ((2001, 100, 100), ErrorFlag.FLOWRATE),
        ((100, 4.99, 100), ErrorFlag.TOTAL_HEAD),
        ((100, 201, 100), ErrorFlag.TOTAL_HEAD),
        ((100, 100, 9.9), ErrorFlag.VISCOSITY),
        ((100, 100, 4001), ErrorFlag.VISCOSITY),
        ((1, 1, 1), ErrorFlag.FLOWRATE | ErrorFlag.TOTAL_HEAD | ErrorFlag.VISCOSITY),
    ])
    def test_out_of_range_bits(self, values, expected):
        assert validate(params(*values)) == expected

    def test_invalid_decimal_sets_bit(self):
        p = params(100, 100, 100)._replace(total_head=ExactDecimal.not_a_number())
        assert validate(p) == ErrorFlag.TOTAL_HEAD
        p = params(100, 100, 100)._replace(viscosity=ExactDecimal.infinite())
        assert validate(p) == ErrorFlag.VISCOSITY

    def test_density_not_checked(self):
        p = Parameters.create(100, 100, 100, density=-5)
        assert validate(p) == 0

    def test_returns_plain_int(self):
        assert type(validate(params(5, 100, 100))) is int


class TestDescribe:
    """Test error messages."""

    def test_no_messages_without_error(self):
        assert describe(0) == []

    def test_one_message_per_bit(self):
        messages = describe(ErrorFlag.FLOWRATE | ErrorFlag.VISCOSITY)
        assert len(messages) == 2
        assert "Flow rate" in messages[0]
        assert "Viscosity" in messages[1]

    def test_off_scale(self):
        assert describe(ErrorFlag.OFF_SCALE) == ["Input could not be located on a chart scale"]


class TestCurvePosition:
    """Test curve validity ranges."""

    @pytest.mark.parametrize("position,expected", [
        (242, True), (300.5, True), (420, True), (241.9, False), (421, False), (float("nan"), False),
    ])
    def test_bounds(self, position, expected):
        assert validate_curve_position(position, (242, 420)) is expected
