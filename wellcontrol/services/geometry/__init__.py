# wellcontrol/services/geometry/__init__.py

"""
Wellbore geometry: boundary decomposition, annular slices, volume totals,
point/interval lookups and validation.
"""

from .boundaries import candidate_intervals, decompose_boundaries
from .lookup import GeometryLookup, hydraulic_diameter
from .slices import build_annular_slices, effective_annular_volume, find_containing_section
from .validation import validate_geometry
from .volumes import (
    compute_volume_totals,
    drill_string_capacity,
    drill_string_displacement,
    open_hole_volume,
)
