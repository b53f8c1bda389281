import math
from typing import Sequence

from wellcontrol.schemas.volumes import ResultStatus, VolumeTotals
from wellcontrol.schemas.well import AnnulusSection, DrillStringSection, Project
from wellcontrol.utils.conversions import clamp_non_negative
from .slices import build_annular_slices


def drill_string_capacity(drill_string: Sequence[DrillStringSection]) -> float:
    """Σ π·ID²/4 · length over string sections, m³."""
    total = 0.0
    for s in drill_string:
        d_in = clamp_non_negative(s.inner_diameter)
        total += math.pi * d_in ** 2 / 4.0 * clamp_non_negative(s.length)
    return total


def drill_string_displacement(drill_string: Sequence[DrillStringSection]) -> float:
    """Σ π·(OD² − ID²)/4 · length over string sections (steel volume), m³."""
    total = 0.0
    for s in drill_string:
        d_out = clamp_non_negative(s.outer_diameter)
        d_in = clamp_non_negative(s.inner_diameter)
        total += math.pi * max(d_out ** 2 - d_in ** 2, 0.0) / 4.0 * clamp_non_negative(s.length)
    return total


def open_hole_volume(annulus: Sequence[AnnulusSection]) -> float:
    """Σ π·ID²/4 · length over annulus sections, ignoring any pipe, m³."""
    total = 0.0
    for a in annulus:
        d_in = clamp_non_negative(a.inner_diameter)
        total += math.pi * d_in ** 2 / 4.0 * clamp_non_negative(a.length)
    return total


def compute_volume_totals(project: Project) -> VolumeTotals:
    """
    Volume summary of the project's geometry.

    Args:
        project: Project snapshot with drill-string and annulus sections

    Returns:
        VolumeTotals; status is NO_DATA when the project has no geometry at all
    """
    if not project.has_geometry:
        return VolumeTotals(status=ResultStatus.NO_DATA)

    capacity = drill_string_capacity(project.drill_string)
    displacement = drill_string_displacement(project.drill_string)
    slices = build_annular_slices(project.drill_string, project.annulus)

    return VolumeTotals(
        ds_capacity=capacity,
        ds_displacement=displacement,
        ds_wet=capacity + displacement,
        annular_with_pipe=sum(s.volume for s in slices),
        open_hole=open_hole_volume(project.annulus),
        slices=slices,
    )
