# wellcontrol/services/hydraulics/__init__.py

"""
Drilling-fluid hydraulics: rheology resolution, friction correlations,
fluid layer columns, pressure window evaluation and the swab/surge estimator.
"""

from .layers import density_at, domain_range, layer_at, merge_adjacent, resolve_layers
from .pressure_window import (
    density_window_at,
    frac_at,
    hydrostatic_kpa,
    max_density_at,
    min_density_at,
    pore_at,
    required_sbp,
    required_uniform_density,
    window_at,
)
from .rheology import resolve_rheology, summarize_rheology_sources
from .swab import SwabProfile, burkhardt_clinging_constant, estimate_swab, trip_sweep
