# wellcontrol/schemas/swab.py
from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum

from wellcontrol.schemas.volumes import ResultStatus


class SwabSurgeDomain(str, Enum):
    SWAB_ABOVE_BIT = "swab_above_bit"    # integrate [surface .. bit]
    SURGE_BELOW_BIT = "surge_below_bit"  # integrate [bit .. lower limit]


class PipeEndType(str, Enum):
    CLOSED = "closed"  # float/bit closed, displaces full pipe OD
    OPEN = "open"      # float open, displaces pipe wall only


class FlowRegimeEnum(str, Enum):
    LAMINAR = "laminar"
    TURBULENT = "turbulent"


class RheologySource(str, Enum):
    MUD_CHECK = "mud_check"            # lab PV/YP on the linked mud
    MUD_DIALS = "mud_dials"            # 600/300 readings on the linked mud
    FALLBACK_DIALS = "fallback_dials"  # caller-supplied 600/300 readings
    DEFAULTS = "defaults"              # configured default 600/300 readings


class ResolvedRheology(BaseModel):
    source: RheologySource
    pv: float = Field(..., description="Plastic viscosity, Pa·s")
    yp: float = Field(..., description="Yield point, Pa")
    theta_600: Optional[float] = None
    theta_300: Optional[float] = None
    n: Optional[float] = Field(None, description="Power-law flow behaviour index")
    k: Optional[float] = Field(None, description="Power-law consistency index, Pa·sⁿ")


class RheologyBadge(BaseModel):
    total_layer_count: int = 0
    mud_linked_count: int = 0
    used_fallback: bool = False
    text: str = "No layers"


class SwabInput(BaseModel):
    bit_md: float = Field(..., ge=0, description="Bit / tool measured depth, m")
    step: float = Field(5.0, gt=0, description="Depth increment of the profile, m")
    hoist_speed: float = Field(10.0, description="Hoisting (or running) speed, m/min")
    eccentricity_factor: float = Field(1.0, description="Annular velocity multiplier (>=1 when eccentric)")
    theta_600: Optional[float] = Field(None, description="Fallback Fann 600 rpm reading")
    theta_300: Optional[float] = Field(None, description="Fallback Fann 300 rpm reading")
    domain: SwabSurgeDomain = SwabSurgeDomain.SWAB_ABOVE_BIT
    lower_limit_md: Optional[float] = Field(None, description="Lower integration limit for surge, m")
    pipe_end: PipeEndType = PipeEndType.CLOSED
    clinging_constant: Optional[float] = Field(None, ge=0, description="Burkhardt clinging constant, None disables")
    auto_clinging: bool = Field(False, description="Burkhardt Kc from pipe/hole ratio when no constant is given")
    sabp_safety_factor: Optional[float] = Field(None, ge=0, description="Multiplier on total swab for SABP")


class SwabPoint(BaseModel):
    depth: float
    cumulative_pressure: float = Field(..., description="Cumulative swab/surge pressure, kPa")
    hydraulic_diameter: float
    annular_velocity: float
    reynolds_number: float
    friction_factor: float
    dpdz: float = Field(..., description="Frictional gradient, kPa/m")
    density: float
    flow_regime: FlowRegimeEnum


class SwabEstimate(BaseModel):
    status: ResultStatus = ResultStatus.OK
    domain: SwabSurgeDomain = SwabSurgeDomain.SWAB_ABOVE_BIT
    total_swab: float = Field(0.0, description="Total swab (or surge) pressure, kPa")
    recommended_sabp: float = Field(0.0, description="Recommended surface-applied backpressure, kPa")
    non_laminar_flag: bool = False
    profile: List[SwabPoint] = Field(default_factory=list)
    hydrostatic_at_bit: float = Field(0.0, description="Static annulus hydrostatic at bit, kPa")
    pore_at_bit: Optional[float] = None
    frac_at_bit: Optional[float] = None
    underbalance_risk: bool = False
    fracture_risk: bool = False
    ecd_change: float = Field(0.0, description="Equivalent density change at bit, kg/m³")
    rheology: RheologyBadge = Field(default_factory=RheologyBadge)
    message: Optional[str] = None


class FrictionResult(BaseModel):
    apparent_viscosity: float = Field(..., description="Pa·s")
    reynolds_number: float
    friction_factor: float = Field(..., description="Darcy friction factor")
    dpdz: float = Field(..., description="Frictional gradient, Pa/m")
    flow_regime: FlowRegimeEnum


class TripSweepPoint(BaseModel):
    bit_md: float
    total_pressure: float = Field(..., description="Total swab/surge pressure with the bit at bit_md, kPa")
    ecd_change: float = Field(..., description="kg/m³")
    recommended_sabp: float = Field(..., description="kPa")
    non_laminar_flag: bool = False
