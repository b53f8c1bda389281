import logging
from typing import List, Optional

from wellcontrol.schemas.swab import ResolvedRheology, SwabEstimate, SwabInput, TripSweepPoint
from wellcontrol.schemas.volumes import ResultStatus
from wellcontrol.schemas.well import MudProperties, Project
from wellcontrol.services.engine import (
    calculate_swab as engine_calculate_swab,
    calculate_trip as engine_calculate_trip,
)
from wellcontrol.services.hydraulics.rheology import resolve_rheology
from wellcontrol.utils.error_handling import handle_engine_error

# Configure logging
logger = logging.getLogger(__name__)

class SwabService:
    """
    Service for swab and surge estimates.
    This service encapsulates the swab/surge engine behind logging and error handling.
    """

    def estimate(self, project: Project, data: SwabInput) -> SwabEstimate:
        """
        Estimate swab (or surge) pressure and the recommended SABP.

        Args:
            project: Project snapshot with geometry, fluids and pressure window
            data: Pipe movement parameters

        Returns:
            Swab estimate with its depth profile

        Raises:
            EngineError: If calculation fails
        """
        logger.info(
            f"Estimating {data.domain.value} at bit {data.bit_md:.1f} m, "
            f"hoist speed {data.hoist_speed:.1f} m/min, step {data.step:.1f} m"
        )
        try:
            result = engine_calculate_swab(project, data)
        except Exception as e:
            raise handle_engine_error(e) from e

        if result.status == ResultStatus.NO_DATA:
            logger.info(f"Swab estimate unavailable: {result.message}")
            return result

        logger.info(
            f"Swab estimate completed: total={result.total_swab:.2f} kPa, "
            f"SABP={result.recommended_sabp:.2f} kPa, non-laminar={result.non_laminar_flag}"
        )
        if result.underbalance_risk:
            logger.warning(f"Underbalance risk at {data.bit_md:.1f} m while tripping")
        if result.fracture_risk:
            logger.warning(f"Fracture risk at {data.bit_md:.1f} m while tripping")
        return result

    def trip_sweep(
        self,
        project: Project,
        data: SwabInput,
        start_md: float,
        end_md: float,
        sweep_step: Optional[float] = None
    ) -> List[TripSweepPoint]:
        """
        Swab/surge totals at successive bit depths of a trip.

        Raises:
            EngineError: If calculation fails
        """
        logger.info(f"Trip sweep from {start_md:.1f} m to {end_md:.1f} m ({data.domain.value})")
        try:
            points = engine_calculate_trip(project, data, start_md, end_md, sweep_step)
        except Exception as e:
            raise handle_engine_error(e) from e
        logger.info(f"Trip sweep completed: {len(points)} positions")
        return points

    def resolve_rheology(
        self,
        mud: Optional[MudProperties],
        theta_600: Optional[float] = None,
        theta_300: Optional[float] = None
    ) -> ResolvedRheology:
        rheology = resolve_rheology(mud, theta_600, theta_300)
        logger.info(f"Rheology from {rheology.source.value}: PV={rheology.pv:.4f} Pa·s, YP={rheology.yp:.2f} Pa")
        return rheology

# Create a singleton instance
swab_service = SwabService()
