"""
Tests for the pump schedule simulator: stage building, phase transitions,
displacement and returns, snapshots and circulating hydraulics.
"""

import math

import pytest

from wellcontrol.core.config import settings
from wellcontrol.schemas.pump_schedule import (
    ControlDepthMode,
    PumpPhase,
    PumpScheduleInput,
    StageSource,
)
from wellcontrol.schemas.volumes import ResultStatus
from wellcontrol.schemas.well import (
    AnnulusSection,
    DrillStringSection,
    FinalFluidLayer,
    MudProperties,
    Placement,
    Project,
    PumpProgramStage,
)
from wellcontrol.services.engine import get_example_project
from wellcontrol.services.pump_schedule import PumpScheduleSimulator, simulate_pump_schedule
from wellcontrol.services.pump_schedule.pump_schedule_service import pump_schedule_service

HOLE_ID = 0.2159
PIPE_OD = 0.127
PIPE_ID = 0.0953
STRING_AREA = math.pi / 4.0 * PIPE_ID ** 2
ANNULUS_AREA = math.pi / 4.0 * (HOLE_ID ** 2 - PIPE_OD ** 2)


def create_test_project():
    """Pipe to 1000 m in 8-1/2" hole; a spacer, a zero-rate stage and kill mud."""
    active = MudProperties(name="Active", density=1200.0, dial_600=52.0, dial_300=32.0, is_active=True)
    spacer = MudProperties(name="Spacer", density=1300.0, pv=0.025, yp=8.0)
    kill = MudProperties(name="Kill", density=1500.0, dial_600=80.0, dial_300=50.0)
    return Project(
        name="Pump Test Well",
        annulus=[AnnulusSection(name="Hole", top_depth=0.0, length=1000.0, inner_diameter=HOLE_ID)],
        drill_string=[DrillStringSection(name="DP", top_depth=0.0, length=1000.0, outer_diameter=PIPE_OD, inner_diameter=PIPE_ID)],
        muds=[active, spacer, kill],
        program_stages=[
            PumpProgramStage(name="Kill", volume=10.0, pump_rate=1.0, mud=kill, order_index=2),
            PumpProgramStage(name="Spacer", volume=2.0, pump_rate=0.5, mud=spacer, order_index=0),
            PumpProgramStage(name="Hold", volume=1.0, pump_rate=0.0, mud=spacer, order_index=1),
        ],
    )


def create_test_input(**overrides):
    values = {"source": StageSource.PROGRAM, "pump_output": 0.02}
    values.update(overrides)
    return PumpScheduleInput(**values)


def test_program_stages_follow_order_index():
    state = simulate_pump_schedule(create_test_project(), create_test_input())

    assert [s.name for s in state.stages] == ["Spacer", "Hold", "Kill"]
    assert [s.density for s in state.stages] == [1300.0, 1300.0, 1500.0]
    assert all(s.side == Placement.STRING for s in state.stages)


def test_phase_transitions():
    simulator = PumpScheduleSimulator(create_test_project(), create_test_input())
    assert simulator.phase == PumpPhase.IDLE

    phases = [simulator.step() for _ in range(8)]

    assert phases == [
        PumpPhase.STAGING,
        PumpPhase.PUMPING,
        PumpPhase.RETURNS_TRACKING,
        PumpPhase.PUMPING,          # advance to the zero-rate stage
        PumpPhase.PUMPING,          # zero-rate stage skipped
        PumpPhase.RETURNS_TRACKING,
        PumpPhase.COMPLETE,
        PumpPhase.COMPLETE,
    ]


def test_complete_is_terminal():
    simulator = PumpScheduleSimulator(create_test_project(), create_test_input())
    final = simulator.run()

    simulator.step()
    simulator.step()
    assert simulator.state == final


def test_zero_rate_stage_is_skipped():
    state = simulate_pump_schedule(create_test_project(), create_test_input())

    assert state.status == ResultStatus.OK
    assert state.skipped_stages == [1]
    assert len(state.timeline) == 3
    skipped = state.timeline[1]
    assert skipped.skipped
    assert skipped.phase == PumpPhase.PUMPING
    assert skipped.volume == 0.0
    assert skipped.start_time == skipped.end_time
    assert not state.timeline[0].skipped
    assert state.timeline[2].phase == PumpPhase.RETURNS_TRACKING


def test_volumes_time_and_strokes():
    state = simulate_pump_schedule(create_test_project(), create_test_input())

    assert state.cumulative_volume == pytest.approx(12.0)
    assert state.elapsed_time == pytest.approx(2.0 / 0.5 + 10.0 / 1.0)
    assert state.timeline[0].strokes == pytest.approx(100.0)
    assert state.cumulative_strokes == pytest.approx(600.0)
    assert state.timeline[2].start_time == pytest.approx(4.0)


def test_returns_match_pumped_volume():
    state = simulate_pump_schedule(create_test_project(), create_test_input())

    assert state.cumulative_returns == pytest.approx(state.cumulative_volume)
    # the well is much larger than 12 m³, only the initial mud comes back
    assert state.returns_by_fluid == pytest.approx({"Active": 12.0})
    assert state.timeline[0].returns == pytest.approx(2.0)


def test_fluid_fronts():
    state = simulate_pump_schedule(create_test_project(), create_test_input())
    kill = state.timeline[2]

    string_capacity = STRING_AREA * 1000.0
    assert kill.string_front_md == pytest.approx(1000.0)
    assert kill.annulus_front_md == pytest.approx(1000.0 - (10.0 - string_capacity) / ANNULUS_AREA, abs=1e-2)


def test_final_stacks():
    state = simulate_pump_schedule(create_test_project(), create_test_input())

    assert [s.name for s in state.stacks.string] == ["Kill"]
    assert [s.name for s in state.stacks.annulus] == ["Active", "Spacer", "Kill"]
    assert state.stacks.annulus[-1].bottom == pytest.approx(1000.0)
    assert state.stacks.annulus[0].top == pytest.approx(0.0, abs=1e-3)


def test_final_layers_source():
    active = MudProperties(name="Active", density=1200.0, is_active=True)
    project = create_test_project().model_copy(update={
        "muds": [active],
        "final_layers": [
            FinalFluidLayer(name="Kill", placement=Placement.STRING, top_md=0.0, bottom_md=1000.0, density=1400.0),
            FinalFluidLayer(name="Active", placement=Placement.ANNULUS, top_md=500.0, bottom_md=1000.0, density=1200.0),
            FinalFluidLayer(name="Spacer", placement=Placement.ANNULUS, top_md=0.0, bottom_md=500.0, density=1300.0),
        ],
    })
    state = simulate_pump_schedule(project, PumpScheduleInput())

    assert [s.name for s in state.stages] == ["Spacer", "Active", "Kill"]
    assert [s.side for s in state.stages] == [Placement.ANNULUS, Placement.ANNULUS, Placement.STRING]
    assert state.stages[0].volume == pytest.approx(ANNULUS_AREA * 500.0)
    assert state.stages[2].volume == pytest.approx(STRING_AREA * 1000.0)
    assert state.stages[1].mud == active
    assert state.elapsed_time == pytest.approx(state.cumulative_volume / settings.DEFAULT_PUMP_RATE)
    assert state.cumulative_returns == pytest.approx(state.cumulative_volume)


def test_negative_default_rate_skips_everything():
    project = create_test_project().model_copy(update={
        "final_layers": [FinalFluidLayer(name="Kill", placement=Placement.STRING, top_md=0.0, bottom_md=1000.0, density=1400.0)],
    })
    state = simulate_pump_schedule(project, PumpScheduleInput(pump_rate=-1.0))

    assert state.phase == PumpPhase.COMPLETE
    assert state.skipped_stages == [0]
    assert state.cumulative_volume == 0.0


def test_no_stages_is_no_data():
    project = create_test_project().model_copy(update={"program_stages": []})
    state = simulate_pump_schedule(project, create_test_input())

    assert state.status == ResultStatus.NO_DATA
    assert state.phase == PumpPhase.COMPLETE
    assert state.timeline == []


def test_no_geometry_is_no_data():
    project = create_test_project().model_copy(update={"annulus": [], "drill_string": []})
    state = simulate_pump_schedule(project, create_test_input())

    assert state.status == ResultStatus.NO_DATA
    assert state.message == "No geometry defined"


def test_simulation_is_repeatable():
    project = create_test_project()
    assert simulate_pump_schedule(project, create_test_input()) == simulate_pump_schedule(project, create_test_input())


def test_snapshot_part_way_through_first_stage():
    simulator = PumpScheduleSimulator(create_test_project(), create_test_input())
    snapshot = simulator.snapshot(0, 0.5)

    assert snapshot.pumped_volume == pytest.approx(1.0)
    top = snapshot.stacks.string[0]
    assert top.name == "Spacer"
    assert top.top == 0.0
    assert top.bottom == pytest.approx(1.0 / STRING_AREA, abs=1e-3)
    assert snapshot.returns_by_fluid == pytest.approx({"Active": 1.0})
    # snapshots leave the simulator untouched
    assert simulator.phase == PumpPhase.IDLE


def test_snapshot_of_skipped_stage_moves_nothing():
    snapshot = PumpScheduleSimulator(create_test_project(), create_test_input()).snapshot(1, 0.7)
    assert snapshot.pumped_volume == 0.0


def test_snapshot_at_end_matches_run():
    project = create_test_project()
    state = simulate_pump_schedule(project, create_test_input())
    snapshot = PumpScheduleSimulator(project, create_test_input()).snapshot(2, 1.0)

    assert snapshot.stacks == state.stacks
    assert snapshot.progress == 1.0


def test_snapshot_clamps_progress():
    snapshot = PumpScheduleSimulator(create_test_project(), create_test_input()).snapshot(0, 3.0)
    assert snapshot.progress == 1.0
    assert snapshot.pumped_volume == pytest.approx(2.0)


def test_hydraulics_without_mpd():
    state = simulate_pump_schedule(create_test_project(), create_test_input())
    readout = state.timeline[2].hydraulics

    assert readout.sbp == 0.0
    assert readout.annulus_friction > 0
    assert readout.string_friction > 0
    assert readout.annulus_hydrostatic > 1200.0 * settings.GRAVITY
    assert readout.bhp == pytest.approx(readout.annulus_hydrostatic + readout.annulus_friction)
    assert readout.tcp == pytest.approx(readout.total_friction)
    assert readout.total_friction == pytest.approx(readout.annulus_friction + readout.string_friction)
    assert readout.ecd == pytest.approx(readout.bhp * 1000.0 / (settings.GRAVITY * 1000.0))


def test_mpd_holds_target_density():
    state = simulate_pump_schedule(create_test_project(), create_test_input(mpd_enabled=True, target_emd=1600.0))
    readout = state.timeline[2].hydraulics

    assert readout.sbp > 0
    assert readout.ecd == pytest.approx(1600.0)
    assert readout.tcp == pytest.approx(readout.total_friction + readout.sbp)


def test_mpd_backpressure_never_negative():
    state = simulate_pump_schedule(create_test_project(), create_test_input(mpd_enabled=True, target_emd=500.0))
    assert all(entry.hydraulics.sbp == 0.0 for entry in state.timeline)


def test_custom_control_depth():
    data = create_test_input(control_depth_mode=ControlDepthMode.CUSTOM, control_md=500.0)
    state = simulate_pump_schedule(create_test_project(), data)
    readout = state.timeline[0].hydraulics

    assert readout.control_md == 500.0
    assert readout.annulus_hydrostatic == pytest.approx(1200.0 * settings.GRAVITY * 500.0 / 1000.0)


def test_friction_methods_differ():
    power_law = simulate_pump_schedule(create_test_project(), create_test_input())
    bingham = simulate_pump_schedule(create_test_project(), create_test_input(friction_method="bingham-plastic"))

    assert bingham.timeline[2].hydraulics.annulus_friction > 0
    assert bingham.timeline[2].hydraulics.annulus_friction != pytest.approx(power_law.timeline[2].hydraulics.annulus_friction)


def test_service_runs_example_project():
    project = pump_schedule_service.get_example_project()
    state = pump_schedule_service.simulate(project, PumpScheduleInput(source=StageSource.PROGRAM))

    assert state.status == ResultStatus.OK
    assert [s.name for s in state.stages] == ["Spacer", "Kill Mud", "Chase"]
    assert state.cumulative_volume == pytest.approx(28.0)
    assert state.elapsed_time == pytest.approx(5.0 / 0.8 + 20.0 / 1.0 + 3.0 / settings.DEFAULT_PUMP_RATE)


def test_service_snapshot():
    snapshot = pump_schedule_service.snapshot(get_example_project(), 1, 0.25, PumpScheduleInput(source=StageSource.PROGRAM))
    assert snapshot.stage_index == 1
    assert snapshot.pumped_volume == pytest.approx(5.0)
