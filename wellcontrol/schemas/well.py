# wellcontrol/schemas/well.py
import math
import uuid
from pydantic import BaseModel, Field
from typing import List, Optional, Tuple
from enum import Enum

from wellcontrol.utils.conversions import (
    FANN_300_SHEAR_RATE,
    FANN_600_SHEAR_RATE,
    cp_to_pa_s,
    dial_to_pa,
    lbf_per_100ft2_to_pa,
)


class Placement(str, Enum):
    STRING = "string"
    ANNULUS = "annulus"


class DrillStringSection(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    top_depth: float = Field(0.0, description="Measured depth at top, m")
    length: float = Field(0.0, description="Section length, m")
    outer_diameter: float = Field(0.0, description="Pipe OD, m")
    inner_diameter: float = Field(0.0, description="Pipe ID, m")

    @property
    def bottom_depth(self) -> float:
        return self.top_depth + self.length


class AnnulusSection(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    top_depth: float = Field(0.0, description="Measured depth at top, m")
    length: float = Field(0.0, description="Section length, m")
    inner_diameter: float = Field(0.0, description="Hole / casing ID, m")
    outer_diameter: float = Field(0.0, description="Casing OD (informational), m")

    @property
    def bottom_depth(self) -> float:
        return self.top_depth + self.length


class MudProperties(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = "Mud"
    density: float = Field(1100.0, description="Mud density, kg/m³")
    pv: Optional[float] = Field(None, description="Plastic viscosity, Pa·s")
    yp: Optional[float] = Field(None, description="Yield point, Pa")
    dial_600: Optional[float] = Field(None, description="Fann 600 rpm dial reading")
    dial_300: Optional[float] = Field(None, description="Fann 300 rpm dial reading")
    is_active: bool = False

    @property
    def has_lab_rheology(self) -> bool:
        return self.pv is not None and self.yp is not None

    @property
    def has_dial_readings(self) -> bool:
        return self.dial_600 is not None and self.dial_300 is not None

    def bingham_from_dials(self) -> Optional[Tuple[float, float]]:
        """(PV in Pa·s, YP in Pa) from the 600/300 readings, or None if missing."""
        if not self.has_dial_readings:
            return None
        pv_cp = max(0.0, self.dial_600 - self.dial_300)
        yp_lbf = self.dial_300 - pv_cp
        return cp_to_pa_s(pv_cp), lbf_per_100ft2_to_pa(yp_lbf)

    def power_law_from_dials(self) -> Optional[Tuple[float, float]]:
        """(n, K in Pa·sⁿ) fitted to the 600/300 readings, or None if unusable."""
        if not self.has_dial_readings or self.dial_600 <= 0 or self.dial_300 <= 0:
            return None
        tau_600 = dial_to_pa(self.dial_600)
        tau_300 = dial_to_pa(self.dial_300)
        n = math.log(tau_600 / tau_300) / math.log(FANN_600_SHEAR_RATE / FANN_300_SHEAR_RATE)
        k = tau_600 / FANN_600_SHEAR_RATE ** n
        return n, k


class FinalFluidLayer(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    placement: Placement
    top_md: float = Field(..., description="Top of layer, m MD")
    bottom_md: float = Field(..., description="Bottom of layer, m MD")
    density: float = Field(..., description="Layer density, kg/m³")
    mud: Optional[MudProperties] = None
    color: Optional[str] = None
    label: Optional[str] = None

    @property
    def shallow_md(self) -> float:
        return min(self.top_md, self.bottom_md)

    @property
    def deep_md(self) -> float:
        return max(self.top_md, self.bottom_md)


class FluidSegment(BaseModel):
    """A resolved, non-overlapping column of one fluid between two MDs."""
    top: float
    bottom: float
    name: str = ""
    density: float
    mud: Optional[MudProperties] = None

    @property
    def length(self) -> float:
        return self.bottom - self.top


class PressureWindowPoint(BaseModel):
    depth: float = Field(..., description="Depth of the table row, m")
    pore_kpa: Optional[float] = Field(None, description="Pore pressure, kPa")
    frac_kpa: Optional[float] = Field(None, description="Fracture pressure, kPa")


class PressureWindow(BaseModel):
    name: str = "Default Window"
    pore_safety_kpa: float = Field(0.0, description="Extra overbalance above pore pressure, kPa")
    frac_safety_kpa: float = Field(0.0, description="Margin below fracture pressure, kPa")
    points: List[PressureWindowPoint] = Field(default_factory=list)


class PumpProgramStage(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    volume: float = Field(0.0, description="Stage volume, m³")
    pump_rate: Optional[float] = Field(None, description="Stage pump rate, m³/min")
    mud: Optional[MudProperties] = None
    order_index: int = 0


class Project(BaseModel):
    """Aggregate owning every collection the engine reads. Collections are never None."""
    name: str = "Project"
    drill_string: List[DrillStringSection] = Field(default_factory=list)
    annulus: List[AnnulusSection] = Field(default_factory=list)
    final_layers: List[FinalFluidLayer] = Field(default_factory=list)
    muds: List[MudProperties] = Field(default_factory=list)
    program_stages: List[PumpProgramStage] = Field(default_factory=list)
    pressure_window: PressureWindow = Field(default_factory=PressureWindow)

    @property
    def active_mud(self) -> Optional[MudProperties]:
        return next((m for m in self.muds if m.is_active), None)

    @property
    def has_geometry(self) -> bool:
        return bool(self.drill_string) or bool(self.annulus)

    @property
    def max_depth(self) -> float:
        """Deepest bottom depth across string and annulus sections (0 when empty)."""
        bottoms = [s.bottom_depth for s in self.drill_string] + [a.bottom_depth for a in self.annulus]
        return max(bottoms, default=0.0)

    @property
    def string_bottom(self) -> float:
        return max((s.bottom_depth for s in self.drill_string), default=0.0)
