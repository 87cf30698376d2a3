"""
Unit registry and helpers for lead and gear module conversions.

Leads are handled in millimetres internally; inch threads are given in
threads per inch (TPI) and inch gears by diametral pitch (DP).
"""

import pint

# Create a shared unit registry for the entire application
ureg = pint.UnitRegistry()

# Shorthand for creating quantities
Q_ = ureg.Quantity

INCH_MM = Q_(1, "inch").to("mm").magnitude


def tpi_to_mm_lead(tpi: float) -> float:
    """Convert threads per inch to the lead of one thread in mm."""
    if tpi <= 0:
        raise ValueError("Threads per inch must be positive")
    return (Q_(1, "inch") / tpi).to("mm").magnitude


def lead_mm_to_tpi(lead_mm: float) -> float:
    """Convert a lead in mm to threads per inch."""
    if lead_mm <= 0:
        raise ValueError("Lead must be positive")
    return (Q_(1, "inch") / Q_(lead_mm, "mm")).to("dimensionless").magnitude


def dp_to_module(diametral_pitch: float) -> float:
    """Convert diametral pitch (teeth per inch of pitch diameter) to module in mm."""
    if diametral_pitch <= 0:
        raise ValueError("Diametral pitch must be positive")
    return (Q_(1, "inch") / diametral_pitch).to("mm").magnitude
