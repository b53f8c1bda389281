# wellcontrol/schemas/pump_schedule.py
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from enum import Enum

from wellcontrol.schemas.volumes import ResultStatus
from wellcontrol.schemas.well import FluidSegment, MudProperties, Placement


class PumpPhase(str, Enum):
    IDLE = "idle"
    STAGING = "staging"
    PUMPING = "pumping"
    RETURNS_TRACKING = "returns_tracking"
    COMPLETE = "complete"


class StageSource(str, Enum):
    FINAL_LAYERS = "final_layers"
    PROGRAM = "program"


class ControlDepthMode(str, Enum):
    BIT = "bit"
    CUSTOM = "custom"


class PumpScheduleInput(BaseModel):
    source: StageSource = StageSource.FINAL_LAYERS
    pump_rate: Optional[float] = Field(None, description="Default pump rate, m³/min")
    pump_output: Optional[float] = Field(None, ge=0, description="Pump output per stroke, m³/stk")
    bit_md: Optional[float] = Field(None, ge=0, description="Bit depth, defaults to deepest geometry, m")
    mpd_enabled: bool = False
    target_emd: float = Field(1300.0, description="Target equivalent mud density, kg/m³")
    control_depth_mode: ControlDepthMode = ControlDepthMode.BIT
    control_md: float = Field(0.0, ge=0, description="Custom control depth, m")
    friction_method: str = Field("power-law", description="Circulating friction correlation: power-law or bingham-plastic")
    theta_600: Optional[float] = Field(None, description="Fallback Fann 600 rpm reading")
    theta_300: Optional[float] = Field(None, description="Fallback Fann 300 rpm reading")


class PumpStage(BaseModel):
    name: str
    volume: float = Field(..., description="Total stage volume, m³")
    side: Placement = Placement.STRING
    density: float
    pump_rate: Optional[float] = None
    mud: Optional[MudProperties] = None


class FluidParcel(BaseModel):
    """A volume of one fluid in the string or annulus, tagged with the stage that pumped it (-1 for the initial fluid)."""
    volume: float
    name: str = ""
    density: float
    mud: Optional[MudProperties] = None
    stage_index: int = -1


class StackState(BaseModel):
    string: List[FluidSegment] = Field(default_factory=list)
    annulus: List[FluidSegment] = Field(default_factory=list)


class HydraulicsReadout(BaseModel):
    annulus_hydrostatic: float = Field(0.0, description="kPa")
    string_hydrostatic: float = Field(0.0, description="kPa")
    annulus_friction: float = Field(0.0, description="kPa")
    string_friction: float = Field(0.0, description="kPa")
    total_friction: float = Field(0.0, description="kPa")
    sbp: float = Field(0.0, description="Surface backpressure, kPa")
    bhp: float = Field(0.0, description="Bottomhole pressure at control depth, kPa")
    tcp: float = Field(0.0, description="Total circulating pressure, kPa")
    ecd: float = Field(0.0, description="Equivalent circulating density, kg/m³")
    control_md: float = 0.0


class TimelineEntry(BaseModel):
    stage_index: int
    stage_name: str
    phase: PumpPhase
    volume: float = Field(..., description="Volume pumped in this stage, m³")
    pump_rate: float
    start_time: float = Field(..., description="Minutes from start")
    end_time: float = Field(..., description="Minutes from start")
    strokes: Optional[float] = None
    cumulative_volume: float
    cumulative_strokes: Optional[float] = None
    returns: float = Field(..., description="Returns during this stage, m³")
    cumulative_returns: float
    returns_by_fluid: Dict[str, float] = Field(default_factory=dict)
    string_front_md: Optional[float] = None
    annulus_front_md: Optional[float] = None
    skipped: bool = False
    message: Optional[str] = None
    hydraulics: HydraulicsReadout = Field(default_factory=HydraulicsReadout)


class PumpScheduleState(BaseModel):
    status: ResultStatus = ResultStatus.OK
    phase: PumpPhase = PumpPhase.IDLE
    stage: int = Field(0, description="Index of the current (or last) stage")
    stages: List[PumpStage] = Field(default_factory=list)
    cumulative_volume: float = 0.0
    cumulative_strokes: Optional[float] = None
    cumulative_returns: float = 0.0
    returns_by_fluid: Dict[str, float] = Field(default_factory=dict)
    elapsed_time: float = Field(0.0, description="Minutes")
    skipped_stages: List[int] = Field(default_factory=list)
    timeline: List[TimelineEntry] = Field(default_factory=list)
    stacks: StackState = Field(default_factory=StackState)
    message: Optional[str] = None


class PumpSnapshot(BaseModel):
    stage_index: int
    progress: float = Field(..., description="Fraction of the stage volume pumped, 0..1")
    pumped_volume: float = Field(..., description="Volume of the current stage pumped so far, m³")
    stacks: StackState = Field(default_factory=StackState)
    returns_by_fluid: Dict[str, float] = Field(default_factory=dict)
    hydraulics: HydraulicsReadout = Field(default_factory=HydraulicsReadout)
