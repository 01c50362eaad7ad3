"""
Constants used across the viscosity correction server.

This module defines unit conversion factors, input validity ranges, the
digitized geometry of the correction chart and the default curve
coefficients.
"""

# Conversion factors to the base units (m³/h, m, mm²/s, g/l).
# Kept as decimal strings so they enter ExactDecimal without float rounding.
LPM_to_M3H = "0.06"          # l/min to m³/h
GPM_to_M3H = "0.227125"      # US gal/min to m³/h
FT_to_M = "0.3048"           # foot to meter
KGM3_to_GL = "0.001"         # kg/m³ to g/l
UNITY = "1"

# Significant digits used when a float input is turned into an exact decimal
DEFAULT_FLOAT_PRECISION = 17

# Validity ranges of the chart, in base units (inclusive)
FLOWRATE_RANGE = (6.0, 2000.0)     # m³/h
TOTAL_HEAD_RANGE = (5.0, 200.0)    # m
VISCOSITY_RANGE = (10.0, 4000.0)   # mm²/s

# Proportional head ratios, in the order of CorrectionFactors.h
H_RATIOS = (0.6, 0.8, 1.0, 1.2)

# --- Chart digitization ---
# Each scale maps a breakpoint to the pixel distance from the previous
# breakpoint. The first breakpoint always carries distance 0.
FLOWRATE_SCALE = {
    6: 0, 7: 8, 8: 7, 9: 6, 10: 5,
    20: 36, 30: 21, 40: 15, 50: 12, 60: 10, 70: 8, 80: 7, 90: 6, 100: 5,
    200: 36, 300: 21, 400: 15, 500: 12, 600: 10, 700: 8, 800: 7, 900: 6, 1000: 5,
    1500: 21, 2000: 15,
}

TOTAL_HEAD_SCALE = {
    5: 0, 6: 8, 7: 7, 8: 6, 9: 5, 10: 5,
    15: 18, 20: 12, 30: 18, 40: 12, 50: 10, 60: 8, 70: 7, 80: 6, 90: 5, 100: 4,
    150: 18, 200: 12,
}

VISCOSITY_SCALE = {
    10: 0, 20: 24, 30: 14, 40: 10, 50: 8, 60: 6, 70: 5, 80: 5, 90: 4, 100: 4,
    200: 24, 300: 14, 400: 10, 500: 8, 600: 6, 700: 5, 800: 5, 900: 4, 1000: 4,
    2000: 24, 3000: 14, 4000: 10,
}

START_FLOWRATE = 0                 # x pixel of the first flow rate breakpoint
START_TOTAL_HEAD = (12, 450)       # (x, y) where the head lines are anchored
PITCH_TOTAL_HEAD = -2.5
START_VISCOSITY = (150, 96)        # (x, y) where the viscosity lines are anchored
PITCH_VISCOSITY = 5.0

# Pixels per 0.1 step on the correction factor axis
PIXELS_CORRECTION_SCALE = 22.0

# Chart x positions covered by the fitted curves (inclusive)
Q_CURVE_RANGE = (242.0, 420.0)
ETA_CURVE_RANGE = (122.0, 350.0)
H_CURVE_RANGE = (146.0, 400.0)

# Offsets of the correction axes
Q_OFFSET = 0.2
ETA_OFFSET = 0.2
H_OFFSET = -0.3

# Returned by fit_to_scale when a value lies above the last breakpoint
OFF_SCALE = -1.0

# --- Default curve coefficients ---
# Polynomials are listed highest degree first, as in the calibration CSV.
Q_COEFFICIENTS = (
    4.3286373442021278e-09, -6.5935466655309209e-06, 0.0039704102541411324,
    -1.1870337647376101, 176.52190832690891, -10276.558815133236,
)
ETA_COEFFICIENTS = (
    2.5116987378131985e-10, -3.2416532447274418e-07, 0.00015531747394399714,
    -0.037300324399145976, 4.2391803778160968, -6.2364025573465849,
)
# Logistic fits c0 / (1 + exp(-c1 * (x - c2))), one per entry of H_RATIOS
H_COEFFICIENTS = (
    (285.39113639063004, -0.019515612319848788, 451.79876054847699),
    (286.44331640461877, -0.016739174282778945, 453.11949555301783),
    (285.70823636118865, -0.016126836943018912, 443.60573501332937),
    (285.91175890816675, -0.015057232233799856, 436.03377039579027),
)
COEFFICIENTS_VERSION = "1.0.0"
