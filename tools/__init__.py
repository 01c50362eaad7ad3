"""
Tools package for the viscosity correction MCP server.

This package contains the chart engine and the calculation tools that are
registered with the MCP server.
"""

from .correction_factors import CorrectionCalculator, CorrectionFactors, Parameters, calculate
from .project import Project
from .viscosity_correction import calculate_viscosity_correction, convert_to_base_units

__all__ = [
    'CorrectionCalculator',
    'CorrectionFactors',
    'Parameters',
    'Project',
    'calculate',
    'calculate_viscosity_correction',
    'convert_to_base_units',
]
