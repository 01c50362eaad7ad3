"""
MCP Server for centrifugal pump viscosity correction.

This server reads the Q, η and H correction factors for pumps handling
viscous fluids from a digitized correction chart, with flexible units for
flow rate, total head, viscosity and density.
"""

import logging
from mcp.server.fastmcp import FastMCP

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("viscocorrect-mcp")

# Initialize the MCP server
mcp = FastMCP("viscosity-correction")

# Import omnitools
from omnitools.viscosity_correction import viscosity_correction

# Register omnitools with MCP
mcp.tool()(viscosity_correction)


def main():
    from utils.constants import COEFFICIENTS_VERSION

    logger.info("Starting viscosity correction MCP server...")
    logger.info("Built-in chart coefficients: version %s", COEFFICIENTS_VERSION)
    logger.info("Registered omnitools:")
    logger.info("  - viscosity_correction: Q, eta and H correction factors, unit conversion")

    # Start the server
    mcp.run()


if __name__ == "__main__":
    main()
