# wellcontrol/schemas/volumes.py
from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum


class ResultStatus(str, Enum):
    OK = "ok"
    NO_DATA = "no_data"


class VolumeSlice(BaseModel):
    top: float
    bottom: float
    area: float = Field(..., description="Net annular flow area, m²")

    @property
    def length(self) -> float:
        return self.bottom - self.top

    @property
    def volume(self) -> float:
        return self.area * self.length


class VolumeTotals(BaseModel):
    status: ResultStatus = ResultStatus.OK
    ds_capacity: float = Field(0.0, description="Drill-string inner capacity, m³")
    ds_displacement: float = Field(0.0, description="Drill-string steel displacement, m³")
    ds_wet: float = Field(0.0, description="Capacity + displacement, m³")
    annular_with_pipe: float = Field(0.0, description="Annulus volume accounting for pipe, m³")
    open_hole: float = Field(0.0, description="Annulus volume ignoring pipe, m³")
    slices: List[VolumeSlice] = Field(default_factory=list)


class GeometryIssueKind(str, Enum):
    OVERLAP = "overlap"
    GAP = "gap"
    INVERTED_DIAMETER = "inverted_diameter"
    NEGATIVE_VALUE = "negative_value"
    PIPE_EXCEEDS_HOLE = "pipe_exceeds_hole"
    LAYER_OVERLAP = "layer_overlap"


class GeometryIssue(BaseModel):
    kind: GeometryIssueKind
    collection: str
    top: float
    bottom: float
    message: str
    section_name: Optional[str] = None
