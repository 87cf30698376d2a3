"""
Unit conversions for leadscrews, threads and gear modules.

Uses pint so that inch/mm conversions come from one registry.
"""

from changegears.physics.units import (
    ureg,
    Q_,
    INCH_MM,
    tpi_to_mm_lead,
    lead_mm_to_tpi,
    dp_to_module,
)

__all__ = [
    "ureg",
    "Q_",
    "INCH_MM",
    "tpi_to_mm_lead",
    "lead_mm_to_tpi",
    "dp_to_module",
]
