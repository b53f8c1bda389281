# wellcontrol/utils/conversions.py
import math

from wellcontrol.core.config import settings

# Fann 35 viscometer constants
FANN_DIAL_TO_PA = 0.478802       # τ (Pa) = dial reading × factor
FANN_600_SHEAR_RATE = 1022.0     # 1/s
FANN_300_SHEAR_RATE = 511.0      # 1/s
LBF_100FT2_TO_PA = 0.478802


def dial_to_pa(dial):
    """Convert a Fann dial reading to shear stress in Pa."""
    return dial * FANN_DIAL_TO_PA

def cp_to_pa_s(cp):
    """Convert viscosity from centipoise to Pa·s."""
    return cp * 0.001

def lbf_per_100ft2_to_pa(value):
    """Convert yield point from lbf/100ft² to Pa."""
    return value * LBF_100FT2_TO_PA

def m_per_min_to_m_per_s(speed):
    """Convert a speed from m/min to m/s."""
    return speed / 60.0

def m3_per_min_to_m3_per_s(rate):
    """Convert a flow rate from m³/min to m³/s."""
    return rate / 60.0

def pa_to_kpa(pressure):
    """Convert pressure from Pa to kPa."""
    return pressure / 1000.0

def clamp_non_negative(x):
    """Clamp a value to be >= 0."""
    return max(x, 0.0)

def floor_positive(x, floor=None):
    """Floor a denominator to a small positive value to avoid division by zero."""
    floor = settings.EPSILON if floor is None else floor
    return max(x, floor)

def circle_area(diameter):
    """Area of a circle of the given diameter (negative diameters clamp to 0)."""
    d = clamp_non_negative(diameter)
    return math.pi * d * d / 4.0

def annular_area(outer_diameter, inner_diameter):
    """Concentric annulus area π/4·(D_out² − D_in²), clamped to >= 0."""
    d_out = clamp_non_negative(outer_diameter)
    d_in = clamp_non_negative(inner_diameter)
    return max(0.0, math.pi * (d_out * d_out - d_in * d_in) / 4.0)
