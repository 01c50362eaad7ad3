#!/usr/bin/env python3
"""
Tests for curve coefficient sets and the calibration CSV loader.
"""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from utils.calibration import CalibrationSet, default_calibration, load_calibration_csv
from utils.constants import ETA_COEFFICIENTS, H_COEFFICIENTS, Q_COEFFICIENTS
from tools.correction_factors import CorrectionCalculator, calculate
from tools.scale_curves import LogisticFunc, PolynomialFunc

DATA_DIR = Path(__file__).parent / "data"

HEADER = "ID,C0,C1,C2,C3,C4,C5\n"
Q_ROW = "0," + ",".join(repr(c) for c in Q_COEFFICIENTS) + "\n"
ETA_ROW = "1," + ",".join(repr(c) for c in ETA_COEFFICIENTS) + "\n"
H_ROWS = "".join(f"{i + 2}," + ",".join(repr(c) for c in h) + ",,,\n" for i, h in enumerate(H_COEFFICIENTS))


def write_csv(tmp_path, text):
    path = tmp_path / "coefficients.csv"
    path.write_text(text, encoding="utf-8")
    return path


class TestCalibrationSet:
    """Test validation of coefficient sets."""

    def test_default(self):
        calibration = default_calibration()
        assert calibration.q == Q_COEFFICIENTS
        assert calibration.eta == ETA_COEFFICIENTS
        assert calibration.h == H_COEFFICIENTS
        assert calibration.version == "1.0.0"

    def test_curves(self):
        curve_q, curve_eta, curves_h = default_calibration().to_curves()
        assert isinstance(curve_q, PolynomialFunc)
        assert isinstance(curve_eta, PolynomialFunc)
        assert len(curves_h) == 4
        assert all(isinstance(curve, LogisticFunc) for curve in curves_h)

    def test_wrong_polynomial_length(self):
        with pytest.raises(ValidationError, match="6 coefficients"):
            CalibrationSet(q=(1.0, 2.0, 3.0), eta=ETA_COEFFICIENTS, h=H_COEFFICIENTS)

    def test_wrong_number_of_head_curves(self):
        with pytest.raises(ValidationError):
            CalibrationSet(q=Q_COEFFICIENTS, eta=ETA_COEFFICIENTS, h=H_COEFFICIENTS[:3])

    def test_wrong_head_curve_length(self):
        h = H_COEFFICIENTS[:3] + ((1.0, 2.0, 3.0, 4.0),)
        with pytest.raises(ValidationError, match="3 or 6"):
            CalibrationSet(q=Q_COEFFICIENTS, eta=ETA_COEFFICIENTS, h=h)

    def test_non_finite_rejected(self):
        q = Q_COEFFICIENTS[:5] + (float("nan"),)
        with pytest.raises(ValidationError, match="finite"):
            CalibrationSet(q=q, eta=ETA_COEFFICIENTS, h=H_COEFFICIENTS)

    def test_all_zero_rejected(self):
        with pytest.raises(ValidationError, match="all zero"):
            CalibrationSet(q=(0.0,) * 6, eta=ETA_COEFFICIENTS, h=H_COEFFICIENTS)

    def test_frozen(self):
        calibration = default_calibration()
        with pytest.raises(ValidationError):
            calibration.version = "2"

    def test_rows_padded(self):
        rows = default_calibration().to_rows()
        assert len(rows) == 6
        assert all(len(row) == 6 for row in rows)
        assert rows[2][3:] == [0.0, 0.0, 0.0]


class TestLoadCalibrationCsv:
    """Test reading coefficient files."""

    def test_bundled_file_matches_default(self):
        loaded = load_calibration_csv(DATA_DIR / "coefficients.csv")
        default = default_calibration()
        assert loaded.q == default.q
        assert loaded.eta == default.eta
        assert loaded.h == default.h
        assert loaded.version == "1.0.0"

    def test_loaded_calibration_reads_same_chart(self):
        calculator = CorrectionCalculator(calibration=load_calibration_csv(DATA_DIR / "coefficients.csv"))
        assert calculator.calculate(100, 100, 100) == calculate(100, 100, 100)

    def test_without_version(self, tmp_path):
        path = write_csv(tmp_path, HEADER + Q_ROW + ETA_ROW + H_ROWS)
        assert load_calibration_csv(path).version is None

    def test_polynomial_head_curve(self, tmp_path):
        h_rows = "2,0,0,0,0,0,264.0\n" + "".join(H_ROWS.splitlines(keepends=True)[1:])
        path = write_csv(tmp_path, HEADER + Q_ROW + ETA_ROW + h_rows)
        calibration = load_calibration_csv(path)
        assert calibration.h[0] == (0.0, 0.0, 0.0, 0.0, 0.0, 264.0)
        assert isinstance(calibration.to_curves()[2][0], PolynomialFunc)

    def test_missing_row(self, tmp_path):
        path = write_csv(tmp_path, HEADER + Q_ROW + H_ROWS)
        with pytest.raises(ValueError, match="ID 1"):
            load_calibration_csv(path)

    def test_bad_number(self, tmp_path):
        path = write_csv(tmp_path, HEADER + "0,1.0,abc,3,4,5,6\n" + ETA_ROW + H_ROWS)
        with pytest.raises(ValueError, match="line 2"):
            load_calibration_csv(path)

    def test_missing_column(self, tmp_path):
        path = write_csv(tmp_path, "ID,C0,C1\n0,1,2\n")
        with pytest.raises(ValueError, match="missing columns"):
            load_calibration_csv(path)

    def test_unknown_id_skipped(self, tmp_path, caplog):
        path = write_csv(tmp_path, HEADER + Q_ROW + ETA_ROW + H_ROWS + "9,1,2,3,4,5,6\n")
        with caplog.at_level(logging.WARNING, logger="viscocorrect-mcp.calibration"):
            calibration = load_calibration_csv(path)
        assert calibration.q == Q_COEFFICIENTS
        assert "unknown curve ID 9" in caplog.text

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_calibration_csv(tmp_path / "nope.csv")
