# wellcontrol/services/engine.py
from typing import List, Optional

from wellcontrol.schemas.pump_schedule import PumpScheduleInput, PumpScheduleState, PumpSnapshot
from wellcontrol.schemas.swab import SwabEstimate, SwabInput, TripSweepPoint
from wellcontrol.schemas.volumes import GeometryIssue, VolumeTotals
from wellcontrol.schemas.well import (
    AnnulusSection,
    DrillStringSection,
    FinalFluidLayer,
    MudProperties,
    Placement,
    PressureWindow,
    PressureWindowPoint,
    Project,
    PumpProgramStage,
)

from .geometry.validation import validate_geometry
from .geometry.volumes import compute_volume_totals
from .hydraulics.swab import estimate_swab, trip_sweep
from .pump_schedule.simulator import PumpScheduleSimulator, simulate_pump_schedule


def calculate_volumes(project: Project) -> VolumeTotals:
    """
    Main entry point for the volume summary.
    """
    return compute_volume_totals(project)


def check_geometry(project: Project) -> List[GeometryIssue]:
    return validate_geometry(project)


def calculate_swab(project: Project, swab_input: SwabInput) -> SwabEstimate:
    """
    Main entry point for the swab/surge estimate at a single pipe position.
    """
    return estimate_swab(project, swab_input)


def calculate_trip(
    project: Project,
    swab_input: SwabInput,
    start_md: float,
    end_md: float,
    sweep_step: Optional[float] = None
) -> List[TripSweepPoint]:
    return trip_sweep(project, swab_input, start_md, end_md, sweep_step)


def calculate_pump_schedule(project: Project, schedule_input: Optional[PumpScheduleInput] = None) -> PumpScheduleState:
    """
    Main entry point for the pump schedule; runs every stage to completion.
    """
    return simulate_pump_schedule(project, schedule_input)


def pump_snapshot(
    project: Project,
    stage_index: int,
    progress: float,
    schedule_input: Optional[PumpScheduleInput] = None
) -> PumpSnapshot:
    return PumpScheduleSimulator(project, schedule_input).snapshot(stage_index, progress)


def get_example_project() -> Project:
    """
    Return an example project: 5" drill pipe in a surface hole and an
    intermediate section, with active mud, a spacer and kill mud.

    The annulus deliberately leaves 600-700 m undefined, which the geometry
    check reports as a gap.
    """
    active = MudProperties(name="Active Mud", density=1200.0, dial_600=52.0, dial_300=32.0, is_active=True)
    spacer = MudProperties(name="Spacer", density=1300.0, pv=0.025, yp=8.0)
    kill = MudProperties(name="Kill Mud", density=1400.0, dial_600=70.0, dial_300=45.0)

    return Project(
        name="Example Well",
        annulus=[
            AnnulusSection(name="Surface Hole", top_depth=0.0, length=600.0, inner_diameter=0.340, outer_diameter=0.244),
            AnnulusSection(name="Intermediate", top_depth=700.0, length=300.0, inner_diameter=0.244, outer_diameter=0.1778),
        ],
        drill_string=[
            DrillStringSection(name="Drill Pipe", top_depth=0.0, length=1000.0, outer_diameter=0.127, inner_diameter=0.0953),
        ],
        muds=[active, spacer, kill],
        final_layers=[
            FinalFluidLayer(name="Spacer", placement=Placement.ANNULUS, top_md=0.0, bottom_md=300.0, density=1300.0, mud=spacer),
            FinalFluidLayer(name="Active Mud", placement=Placement.ANNULUS, top_md=300.0, bottom_md=1000.0, density=1200.0, mud=active),
            FinalFluidLayer(name="Kill Mud", placement=Placement.STRING, top_md=0.0, bottom_md=1000.0, density=1400.0, mud=kill),
        ],
        program_stages=[
            PumpProgramStage(name="Spacer", volume=5.0, pump_rate=0.8, mud=spacer, order_index=0),
            PumpProgramStage(name="Kill Mud", volume=20.0, pump_rate=1.0, mud=kill, order_index=1),
            PumpProgramStage(name="Chase", volume=3.0, mud=active, order_index=2),
        ],
        pressure_window=PressureWindow(
            name="Offset Well",
            pore_safety_kpa=500.0,
            frac_safety_kpa=500.0,
            points=[
                PressureWindowPoint(depth=500.0, pore_kpa=5500.0, frac_kpa=9000.0),
                PressureWindowPoint(depth=1000.0, pore_kpa=11000.0, frac_kpa=17000.0),
            ],
        ),
    )
