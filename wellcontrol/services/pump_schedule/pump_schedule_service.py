import logging
from typing import Optional

from wellcontrol.schemas.pump_schedule import PumpScheduleInput, PumpScheduleState, PumpSnapshot
from wellcontrol.schemas.volumes import ResultStatus
from wellcontrol.schemas.well import Project
from wellcontrol.services.engine import (
    calculate_pump_schedule as engine_calculate_pump_schedule,
    get_example_project as engine_get_example_project,
    pump_snapshot as engine_pump_snapshot,
)
from wellcontrol.utils.error_handling import handle_engine_error

# Configure logging
logger = logging.getLogger(__name__)

class PumpScheduleService:
    """
    Service for pump schedule simulations.
    """

    def simulate(self, project: Project, data: Optional[PumpScheduleInput] = None) -> PumpScheduleState:
        """
        Run the pump schedule through every stage.

        Args:
            project: Project snapshot
            data: Schedule parameters (stage source, rates, MPD settings)

        Returns:
            Final schedule state with the stage timeline

        Raises:
            EngineError: If simulation fails
        """
        data = data or PumpScheduleInput()
        logger.info(f"Simulating pump schedule for '{project.name}' from {data.source.value}")
        try:
            state = engine_calculate_pump_schedule(project, data)
        except Exception as e:
            raise handle_engine_error(e) from e

        if state.status == ResultStatus.NO_DATA:
            logger.info(f"Pump schedule unavailable: {state.message}")
        else:
            logger.info(
                f"Pump schedule completed: {len(state.stages)} stages, {state.cumulative_volume:.2f} m³, "
                f"{state.elapsed_time:.1f} min, {len(state.skipped_stages)} skipped"
            )
        return state

    def snapshot(
        self,
        project: Project,
        stage_index: int,
        progress: float,
        data: Optional[PumpScheduleInput] = None
    ) -> PumpSnapshot:
        """
        Fluid stacks and hydraulics part-way through one stage.

        Raises:
            EngineError: If calculation fails
        """
        logger.info(f"Pump schedule snapshot at stage {stage_index}, progress {progress:.2f}")
        try:
            return engine_pump_snapshot(project, stage_index, progress, data)
        except Exception as e:
            raise handle_engine_error(e) from e

    def get_example_project(self) -> Project:
        """
        Get an example project to run the engine against.
        """
        return engine_get_example_project()

# Create a singleton instance
pump_schedule_service = PumpScheduleService()
