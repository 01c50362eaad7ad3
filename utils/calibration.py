"""
Curve coefficient sets for the correction chart.

A calibration set holds the fitted coefficients of the Q and η curves and
of the four H curves. The built-in set is returned by default_calibration();
a recalibrated set can be loaded from a CSV file with one row per curve:

    # version: 1.0.0
    ID,C0,C1,C2,C3,C4,C5
    0,...          Q, degree 5 polynomial, highest degree first
    1,...          η, degree 5 polynomial, highest degree first
    2..5,...       H at 0.6, 0.8, 1.0, 1.2 of the nominal flow; three
                   logistic coefficients or a degree 5 polynomial
"""

import csv
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import COEFFICIENTS_VERSION, ETA_COEFFICIENTS, H_COEFFICIENTS, H_RATIOS, Q_COEFFICIENTS

logger = logging.getLogger("viscocorrect-mcp.calibration")

POLYNOMIAL_LENGTH = 6
LOGISTIC_LENGTH = 3

CSV_COLUMNS = ["ID", "C0", "C1", "C2", "C3", "C4", "C5"]
Q_ID = 0
ETA_ID = 1
H_IDS = (2, 3, 4, 5)


def _check_finite(values, name: str):
    if not all(math.isfinite(v) for v in values):
        raise ValueError(f"{name} coefficients must be finite numbers")
    if not any(values):
        raise ValueError(f"{name} coefficients are all zero")


class CalibrationSet(BaseModel):
    """Validated coefficient set for one correction chart."""

    model_config = ConfigDict(frozen=True)

    q: Tuple[float, ...] = Field(..., description="Q polynomial, highest degree first")
    eta: Tuple[float, ...] = Field(..., description="η polynomial, highest degree first")
    h: Tuple[Tuple[float, ...], ...] = Field(
        ..., description="H curves for the ratios 0.6, 0.8, 1.0, 1.2")
    version: Optional[str] = Field(None, description="Version tag of the coefficient file")

    @field_validator("q", "eta")
    @classmethod
    def check_polynomial(cls, value, info):
        if len(value) != POLYNOMIAL_LENGTH:
            raise ValueError(f"{info.field_name} needs {POLYNOMIAL_LENGTH} coefficients, got {len(value)}")
        _check_finite(value, info.field_name)
        return value

    @field_validator("h")
    @classmethod
    def check_head_curves(cls, value):
        if len(value) != len(H_RATIOS):
            raise ValueError(f"h needs {len(H_RATIOS)} curves, got {len(value)}")
        for ratio, curve in zip(H_RATIOS, value):
            if len(curve) not in (LOGISTIC_LENGTH, POLYNOMIAL_LENGTH):
                raise ValueError(f"h at {ratio} needs {LOGISTIC_LENGTH} or "
                                 f"{POLYNOMIAL_LENGTH} coefficients, got {len(curve)}")
            _check_finite(curve, f"h at {ratio}")
        return value

    def to_curves(self):
        """Build the (q, eta, h) curve functions of this set."""
        from tools.scale_curves import PolynomialFunc, curve_from_coefficients

        return (
            PolynomialFunc.from_highest_first(self.q),
            PolynomialFunc.from_highest_first(self.eta),
            tuple(curve_from_coefficients(curve) for curve in self.h),
        )

    def to_rows(self) -> List[List[float]]:
        """Coefficient rows in CSV order, padded to six columns."""
        rows = [list(self.q), list(self.eta)]
        for curve in self.h:
            rows.append(list(curve) + [0.0] * (POLYNOMIAL_LENGTH - len(curve)))
        return rows


def default_calibration() -> CalibrationSet:
    """Return the built-in coefficient set."""
    return CalibrationSet(q=Q_COEFFICIENTS, eta=ETA_COEFFICIENTS, h=H_COEFFICIENTS,
                          version=COEFFICIENTS_VERSION)


def _parse_row(row: Dict[str, str], path: Path, line: int) -> Tuple[int, List[float]]:
    try:
        row_id = int(row["ID"])
        values = []
        for column in CSV_COLUMNS[1:]:
            cell = (row.get(column) or "").strip()
            values.append(float(cell) if cell else 0.0)
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"{path}, line {line}: invalid coefficient row ({e})") from e
    return row_id, values


def _head_curve(values: List[float]) -> Tuple[float, ...]:
    # Logistic rows leave C3..C5 empty or zero
    if not any(values[LOGISTIC_LENGTH:]):
        return tuple(values[:LOGISTIC_LENGTH])
    return tuple(values)


def load_calibration_csv(path: Union[str, Path]) -> CalibrationSet:
    """Load a coefficient set from a CSV file.

    Lines starting with ``#`` are comments; a ``# version: x`` comment sets
    the version of the returned set. Rows with unknown IDs are skipped.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a row is malformed or a curve is missing
    """
    path = Path(path)
    version = None
    lines = []
    with path.open(newline="", encoding="utf-8") as f:
        for line in f:
            stripped = line.strip()
            if stripped.startswith("#"):
                key, _, value = stripped.lstrip("#").partition(":")
                if key.strip().lower() == "version" and value.strip():
                    version = value.strip()
                continue
            if stripped:
                lines.append(line)

    rows: Dict[int, List[float]] = {}
    reader = csv.DictReader(lines)
    missing_columns = [c for c in CSV_COLUMNS if c not in (reader.fieldnames or [])]
    if missing_columns:
        raise ValueError(f"{path}: missing columns {', '.join(missing_columns)}")

    for line_number, row in enumerate(reader, start=2):
        row_id, values = _parse_row(row, path, line_number)
        if row_id not in (Q_ID, ETA_ID) + H_IDS:
            logger.warning("Skipping unknown curve ID %d in %s", row_id, path)
            continue
        rows[row_id] = values

    missing = [str(i) for i in (Q_ID, ETA_ID) + H_IDS if i not in rows]
    if missing:
        raise ValueError(f"{path}: missing coefficient rows for ID {', '.join(missing)}")

    logger.info("Loaded calibration %s from %s", version or "(unversioned)", path)
    return CalibrationSet(
        q=tuple(rows[Q_ID]),
        eta=tuple(rows[ETA_ID]),
        h=tuple(_head_curve(rows[i]) for i in H_IDS),
        version=version,
    )
