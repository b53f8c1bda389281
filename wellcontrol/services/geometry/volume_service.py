import logging
from typing import List

from wellcontrol.schemas.volumes import GeometryIssue, ResultStatus, VolumeTotals
from wellcontrol.schemas.well import AnnulusSection, Project
from wellcontrol.services.engine import (
    calculate_volumes as engine_calculate_volumes,
    check_geometry as engine_check_geometry,
)
from wellcontrol.services.geometry.slices import effective_annular_volume
from wellcontrol.utils.error_handling import handle_engine_error

# Configure logging
logger = logging.getLogger(__name__)

class VolumeService:
    """
    Service for the volume summary.
    Wraps the geometry engine with logging and consistent error handling.
    """

    def calculate_volumes(self, project: Project) -> VolumeTotals:
        """
        Calculate drill-string, annulus and open-hole volumes.

        Args:
            project: Project snapshot

        Returns:
            Volume totals and depth breakdown slices

        Raises:
            EngineError: If calculation fails
        """
        logger.info(
            f"Calculating volumes for '{project.name}': "
            f"{len(project.drill_string)} string / {len(project.annulus)} annulus sections"
        )
        try:
            result = engine_calculate_volumes(project)
        except Exception as e:
            raise handle_engine_error(e) from e

        if result.status == ResultStatus.NO_DATA:
            logger.info("No geometry defined, returning empty volume summary")
        else:
            logger.info(
                f"Volumes: capacity={result.ds_capacity:.2f} m³, annulus={result.annular_with_pipe:.2f} m³, "
                f"open hole={result.open_hole:.2f} m³, slices={len(result.slices)}"
            )
        return result

    def validate_geometry(self, project: Project) -> List[GeometryIssue]:
        """
        Report overlaps, gaps and inconsistent diameters without changing any result.
        """
        logger.info(f"Validating geometry for '{project.name}'")
        issues = engine_check_geometry(project)
        logger.info(f"Geometry validation found {len(issues)} issue(s)")
        return issues

    def section_volume(self, project: Project, section: AnnulusSection) -> float:
        """Annular volume of one annulus section with the project's string inside it, m³."""
        return effective_annular_volume(section, project.drill_string)

# Create a singleton instance
volume_service = VolumeService()
