import logging
from typing import Dict, List, Optional

from wellcontrol.core.config import settings
from wellcontrol.schemas.pump_schedule import (
    ControlDepthMode,
    FluidParcel,
    HydraulicsReadout,
    PumpPhase,
    PumpScheduleInput,
    PumpScheduleState,
    PumpSnapshot,
    PumpStage,
    StageSource,
    TimelineEntry,
)
from wellcontrol.schemas.volumes import ResultStatus
from wellcontrol.schemas.well import Placement, Project
from wellcontrol.services.geometry.lookup import GeometryLookup
from .hydraulics import circulating_hydraulics
from .stacks import WellColumn, group_by_fluid

logger = logging.getLogger(__name__)

BASE_FLUID_NAME = "Base fluid"


def _stage_from_layers(project: Project, lookup: GeometryLookup) -> List[PumpStage]:
    active = project.active_mud
    stages = []
    annulus = sorted(
        (l for l in project.final_layers if l.placement == Placement.ANNULUS),
        key=lambda l: l.shallow_md
    )
    string = sorted(
        (l for l in project.final_layers if l.placement == Placement.STRING),
        key=lambda l: l.shallow_md,
        reverse=True
    )
    for layer in annulus:
        mud = layer.mud or active
        stages.append(PumpStage(
            name=layer.name or (mud.name if mud else BASE_FLUID_NAME),
            volume=lookup.volume_in_annulus(layer.shallow_md, layer.deep_md),
            side=Placement.ANNULUS,
            density=layer.density,
            mud=mud,
        ))
    for layer in string:
        mud = layer.mud or active
        stages.append(PumpStage(
            name=layer.name or (mud.name if mud else BASE_FLUID_NAME),
            volume=lookup.volume_in_string(layer.shallow_md, layer.deep_md),
            side=Placement.STRING,
            density=layer.density,
            mud=mud,
        ))
    return stages


def _stage_from_program(project: Project) -> List[PumpStage]:
    active = project.active_mud
    stages = []
    for s in sorted(project.program_stages, key=lambda s: s.order_index):
        mud = s.mud or active
        stages.append(PumpStage(
            name=s.name or (mud.name if mud else BASE_FLUID_NAME),
            volume=max(0.0, s.volume),
            side=Placement.STRING,
            density=mud.density if mud else settings.DEFAULT_MUD_DENSITY,
            pump_rate=s.pump_rate,
            mud=mud,
        ))
    return stages


def build_stages(project: Project, source: StageSource, lookup: GeometryLookup) -> List[PumpStage]:
    """
    Stage list for a schedule.

    FINAL_LAYERS: annulus layers shallow→deep sized by annulus volume, then
    string layers deep→shallow sized by string capacity. PROGRAM: the
    project's program stages by order_index.
    """
    if source == StageSource.FINAL_LAYERS:
        return _stage_from_layers(project, lookup)
    elif source == StageSource.PROGRAM:
        return _stage_from_program(project)
    raise ValueError(f"Unknown stage source: {source}")


class PumpScheduleSimulator:
    """
    Stage-by-stage displacement simulation.

    Phases run IDLE → STAGING → PUMPING → RETURNS_TRACKING → COMPLETE, with
    PUMPING and RETURNS_TRACKING repeating once per stage. Each call to
    `step()` makes one transition; COMPLETE is terminal and further steps do
    nothing. A stage whose pump rate is zero or negative is skipped without
    moving any fluid and recorded in `skipped_stages`.

    Every stage is pumped down the string. The string column is displaced
    downward, fluid leaving the bit enters the bottom of the annulus and the
    annulus overflow at surface is the stage's returns.
    """

    def __init__(self, project: Project, schedule_input: Optional[PumpScheduleInput] = None):
        self.project = project
        self.input = schedule_input or PumpScheduleInput()

        self.bit_md = self.input.bit_md if self.input.bit_md is not None else project.max_depth
        if project.drill_string:
            self.exit_md = min(self.bit_md, project.string_bottom)
        else:
            self.exit_md = self.bit_md
        if self.input.control_depth_mode == ControlDepthMode.CUSTOM:
            self.control_md = max(0.0, min(self.input.control_md, self.bit_md))
        else:
            self.control_md = self.bit_md

        self.lookup = GeometryLookup.from_project(project, string_bottom=self.exit_md)

        self.phase = PumpPhase.IDLE
        self.status = ResultStatus.OK
        self.message: Optional[str] = None
        self.stages: List[PumpStage] = []
        self.stage_index = 0
        self.column: Optional[WellColumn] = None

        self.cumulative_volume = 0.0
        self.cumulative_strokes = 0.0
        self.cumulative_returns = 0.0
        self.returns_by_fluid: Dict[str, float] = {}
        self.elapsed_time = 0.0
        self.skipped_stages: List[int] = []
        self.timeline: List[TimelineEntry] = []
        self._pending = None

    # --------------------------- Helpers --------------------------- #
    def _initial_parcel(self) -> FluidParcel:
        active = self.project.active_mud
        return FluidParcel(
            volume=0.0,
            name=active.name if active else BASE_FLUID_NAME,
            density=active.density if active else settings.DEFAULT_MUD_DENSITY,
            mud=active,
        )

    def _new_column(self) -> WellColumn:
        return WellColumn(self.lookup, self.exit_md, self.bit_md, self._initial_parcel())

    def stage_rate(self, stage: PumpStage) -> float:
        if stage.pump_rate is not None:
            return stage.pump_rate
        if self.input.pump_rate is not None:
            return self.input.pump_rate
        return settings.DEFAULT_PUMP_RATE

    def _strokes(self, volume: float) -> Optional[float]:
        output = self.input.pump_output
        return volume / output if output else None

    @staticmethod
    def _stage_parcel(stage: PumpStage, index: int, volume: float) -> FluidParcel:
        return FluidParcel(
            volume=volume,
            name=stage.name,
            density=stage.density,
            mud=stage.mud,
            stage_index=index,
        )

    def _hydraulics(self, column: WellColumn, pump_rate: float) -> HydraulicsReadout:
        return circulating_hydraulics(
            column.stacks(),
            self.lookup,
            pump_rate,
            self.control_md,
            self.exit_md,
            mpd_enabled=self.input.mpd_enabled,
            target_emd=self.input.target_emd,
            method=self.input.friction_method,
            theta_600=self.input.theta_600,
            theta_300=self.input.theta_300,
        )

    def _advance(self) -> None:
        if self.stage_index + 1 < len(self.stages):
            self.stage_index += 1
            self.phase = PumpPhase.PUMPING
        else:
            self.phase = PumpPhase.COMPLETE
            logger.info(
                f"Pump schedule complete: {len(self.stages)} stages, "
                f"{self.cumulative_volume:.2f} m³ pumped, {self.elapsed_time:.1f} min"
            )

    # --------------------------- Transitions --------------------------- #
    def step(self) -> PumpPhase:
        """Make one phase transition and return the new phase."""
        if self.phase == PumpPhase.IDLE:
            self._stage()
        elif self.phase == PumpPhase.STAGING:
            self._start()
        elif self.phase == PumpPhase.PUMPING:
            self._pump()
        elif self.phase == PumpPhase.RETURNS_TRACKING:
            self._track_returns()
        return self.phase

    def _stage(self) -> None:
        self.stages = build_stages(self.project, self.input.source, self.lookup)
        self.column = self._new_column()
        self.phase = PumpPhase.STAGING
        logger.debug(f"Staged {len(self.stages)} stages from {self.input.source.value}")

    def _start(self) -> None:
        if not self.project.has_geometry or not self.stages:
            self.status = ResultStatus.NO_DATA
            self.message = "No geometry defined" if not self.project.has_geometry else "No stages to pump"
            self.phase = PumpPhase.COMPLETE
            return
        self.stage_index = 0
        self.phase = PumpPhase.PUMPING

    def _pump(self) -> None:
        index = self.stage_index
        stage = self.stages[index]
        rate = self.stage_rate(stage)

        if rate <= 0:
            message = f"Stage '{stage.name}' skipped: pump rate {rate} m³/min"
            logger.warning(message)
            self.skipped_stages.append(index)
            self.timeline.append(TimelineEntry(
                stage_index=index,
                stage_name=stage.name,
                phase=PumpPhase.PUMPING,
                volume=0.0,
                pump_rate=rate,
                start_time=self.elapsed_time,
                end_time=self.elapsed_time,
                cumulative_volume=self.cumulative_volume,
                cumulative_strokes=self.cumulative_strokes if self.input.pump_output else None,
                returns=0.0,
                cumulative_returns=self.cumulative_returns,
                skipped=True,
                message=message,
            ))
            self._advance()
            return

        volume = max(0.0, stage.volume)
        returned = self.column.pump(self._stage_parcel(stage, index, volume))
        self._pending = (rate, volume, returned)
        self.phase = PumpPhase.RETURNS_TRACKING

    def _track_returns(self) -> None:
        index = self.stage_index
        stage = self.stages[index]
        rate, volume, returned = self._pending
        self._pending = None

        start = self.elapsed_time
        self.elapsed_time += volume / rate
        strokes = self._strokes(volume)
        if strokes is not None:
            self.cumulative_strokes += strokes
        self.cumulative_volume += volume

        stage_returns = sum(p.volume for p in returned)
        self.cumulative_returns += stage_returns
        group_by_fluid(returned, self.returns_by_fluid)

        string_front, annulus_front = self.column.fronts(index)
        hydraulics = self._hydraulics(self.column, rate)

        self.timeline.append(TimelineEntry(
            stage_index=index,
            stage_name=stage.name,
            phase=PumpPhase.RETURNS_TRACKING,
            volume=volume,
            pump_rate=rate,
            start_time=start,
            end_time=self.elapsed_time,
            strokes=strokes,
            cumulative_volume=self.cumulative_volume,
            cumulative_strokes=self.cumulative_strokes if strokes is not None else None,
            returns=stage_returns,
            cumulative_returns=self.cumulative_returns,
            returns_by_fluid=group_by_fluid(returned),
            string_front_md=string_front,
            annulus_front_md=annulus_front,
            hydraulics=hydraulics,
        ))
        logger.debug(
            f"Stage {index} '{stage.name}': {volume:.2f} m³ in {volume / rate:.1f} min, "
            f"returns {stage_returns:.2f} m³, BHP {hydraulics.bhp:.1f} kPa"
        )
        self._advance()

    def run(self) -> PumpScheduleState:
        """Step until COMPLETE; bounded by two transitions per stage."""
        while self.phase != PumpPhase.COMPLETE:
            self.step()
        return self.state

    # --------------------------- Views --------------------------- #
    @property
    def state(self) -> PumpScheduleState:
        return PumpScheduleState(
            status=self.status,
            phase=self.phase,
            stage=self.stage_index,
            stages=list(self.stages),
            cumulative_volume=self.cumulative_volume,
            cumulative_strokes=self.cumulative_strokes if self.input.pump_output else None,
            cumulative_returns=self.cumulative_returns,
            returns_by_fluid=dict(self.returns_by_fluid),
            elapsed_time=self.elapsed_time,
            skipped_stages=list(self.skipped_stages),
            timeline=list(self.timeline),
            stacks=self.column.stacks() if self.column is not None else self._new_column().stacks(),
            message=self.message,
        )

    def snapshot(self, stage_index: int, progress: float) -> PumpSnapshot:
        """
        Fluid stacks and hydraulics part-way through a stage.

        Stages before `stage_index` are pumped in full (skipped ones move
        nothing), then `progress` (0..1) of the current stage. Computed from
        the initial column every time; the simulator's own state is untouched.
        """
        stages = self.stages or build_stages(self.project, self.input.source, self.lookup)
        progress = max(0.0, min(progress, 1.0))
        column = self._new_column()
        returns: Dict[str, float] = {}

        if not stages:
            return PumpSnapshot(
                stage_index=0,
                progress=progress,
                pumped_volume=0.0,
                stacks=column.stacks(),
                hydraulics=self._hydraulics(column, 0.0),
            )

        index = max(0, min(stage_index, len(stages) - 1))
        for i, stage in enumerate(stages[:index]):
            if self.stage_rate(stage) > 0:
                group_by_fluid(column.pump(self._stage_parcel(stage, i, max(0.0, stage.volume))), returns)

        current = stages[index]
        rate = self.stage_rate(current)
        pumped = max(0.0, current.volume) * progress if rate > 0 else 0.0
        group_by_fluid(column.pump(self._stage_parcel(current, index, pumped)), returns)

        return PumpSnapshot(
            stage_index=index,
            progress=progress,
            pumped_volume=pumped,
            stacks=column.stacks(),
            returns_by_fluid=returns,
            hydraulics=self._hydraulics(column, max(rate, 0.0)),
        )


def simulate_pump_schedule(project: Project, schedule_input: Optional[PumpScheduleInput] = None) -> PumpScheduleState:
    """Run a full schedule and return the final state."""
    return PumpScheduleSimulator(project, schedule_input).run()
