import logging
import math
from typing import Dict, Iterator, List, Optional

import numpy as np

from wellcontrol.core.config import settings
from wellcontrol.schemas.swab import (
    FlowRegimeEnum,
    PipeEndType,
    SwabEstimate,
    SwabInput,
    SwabPoint,
    SwabSurgeDomain,
    TripSweepPoint,
)
from wellcontrol.schemas.volumes import ResultStatus
from wellcontrol.schemas.well import FluidSegment, Placement, Project
from wellcontrol.services.geometry.lookup import GeometryLookup, hydraulic_diameter
from wellcontrol.utils.conversions import (
    annular_area,
    circle_area,
    clamp_non_negative,
    m_per_min_to_m_per_s,
    pa_to_kpa,
)
from .correlations import BinghamPlastic
from .layers import domain_range, layer_at, resolve_layers
from .pressure_window import frac_at, hydrostatic_kpa, pore_at
from .rheology import resolve_rheology, summarize_rheology_sources

logger = logging.getLogger(__name__)

BURKHARDT_BASE = 0.45


def burkhardt_clinging_constant(pipe_od: float, hole_id: float) -> float:
    """Kc = 0.45 + (Dp/Dh)²·0.45; 0.45 when the pipe does not fit the hole."""
    if hole_id <= pipe_od or pipe_od <= 0:
        return BURKHARDT_BASE
    ratio = pipe_od / hole_id
    return BURKHARDT_BASE + ratio * ratio * BURKHARDT_BASE


def displaced_area(pipe_od: float, pipe_id: float, pipe_end: PipeEndType) -> float:
    """Cross-section pushed through the fluid per metre of pipe travel, m²."""
    if pipe_end == PipeEndType.CLOSED:
        return circle_area(pipe_od)
    elif pipe_end == PipeEndType.OPEN:
        return annular_area(pipe_od, pipe_id)
    raise ValueError(f"Unknown pipe end type: {pipe_end}")


class SwabProfile:
    """
    Depth-indexed cumulative swab (or surge) pressure for one pipe position.

    The profile is lazy and restartable: every iteration walks the domain
    from its shallow end to its deep end again in increments of `step`
    (the last one clipped) and yields one SwabPoint per increment. Nothing
    is cached between iterations. The number of increments is capped at
    settings.SWAB_MAX_INCREMENTS; a finer step is widened to fit.
    """

    def __init__(self, project: Project, swab_input: SwabInput):
        self.project = project
        self.input = swab_input
        self.lo, self.hi = domain_range(swab_input.domain, swab_input.bit_md, swab_input.lower_limit_md)

        span = self.hi - self.lo
        self.step = swab_input.step
        self.count = max(1, int(math.ceil(span / self.step))) if span > 0 else 0
        if self.count > settings.SWAB_MAX_INCREMENTS:
            self.count = settings.SWAB_MAX_INCREMENTS
            self.step = span / self.count
            logger.warning(
                f"Profile step {swab_input.step} m gives too many increments over {span:.1f} m, "
                f"using {self.step:.4f} m"
            )

    def __iter__(self) -> Iterator[SwabPoint]:
        return self._walk()

    def _clinging(self, pipe_od: float, hole_id: float) -> float:
        if self.input.clinging_constant is not None:
            return self.input.clinging_constant
        if self.input.auto_clinging:
            return burkhardt_clinging_constant(pipe_od, hole_id)
        return 0.0

    def _walk(self) -> Iterator[SwabPoint]:
        data = self.input
        lookup = GeometryLookup.from_project(self.project, string_bottom=data.bit_md)
        segments = resolve_layers(self.project.final_layers, Placement.ANNULUS, self.lo, self.hi)
        active = self.project.active_mud
        base_density = active.density if active else settings.DEFAULT_MUD_DENSITY
        correlations: Dict[int, BinghamPlastic] = {}

        pipe_md = min(data.bit_md, self.project.string_bottom)
        a_disp = displaced_area(lookup.pipe_od(pipe_md), lookup.pipe_id(pipe_md), data.pipe_end)
        v_pipe = abs(m_per_min_to_m_per_s(data.hoist_speed))
        ecc = max(data.eccentricity_factor, 1.0)

        cumulative = 0.0
        for i in range(self.count):
            top = self.lo + i * self.step
            bottom = self.hi if i == self.count - 1 else min(self.lo + (i + 1) * self.step, self.hi)
            if bottom <= top:
                continue
            dz = bottom - top
            mid = 0.5 * (top + bottom)

            hole_id = lookup.hole_id(mid)
            pipe_od = lookup.pipe_od(mid)

            seg = layer_at(segments, mid)
            key = id(seg)
            if key not in correlations:
                mud = seg.mud if seg is not None else active
                rheology = resolve_rheology(mud, data.theta_600, data.theta_300)
                correlations[key] = BinghamPlastic.from_rheology(rheology)
            density = seg.density if seg is not None else base_density

            if hole_id <= 0.0:
                # no annulus section covers this depth
                d_h = 0.0
                v_a = 0.0
            else:
                # a pipe that fills the hole keeps a minimum clearance
                hole_id = max(hole_id, pipe_od + settings.MIN_ANNULAR_CLEARANCE)
                d_h = hydraulic_diameter(hole_id, pipe_od)
                a_ann = annular_area(hole_id, pipe_od)
                v_a = v_pipe * (a_disp / a_ann) * ecc * (1.0 + self._clinging(pipe_od, hole_id))

            friction = correlations[key].evaluate(density, v_a, d_h)
            cumulative += pa_to_kpa(friction.dpdz * dz)

            yield SwabPoint(
                depth=bottom,
                cumulative_pressure=cumulative,
                hydraulic_diameter=d_h,
                annular_velocity=v_a,
                reynolds_number=friction.reynolds_number,
                friction_factor=friction.friction_factor,
                dpdz=pa_to_kpa(friction.dpdz),
                density=density,
                flow_regime=friction.flow_regime,
            )


def _annulus_column(project: Project, bit_md: float) -> List[FluidSegment]:
    return resolve_layers(project.final_layers, Placement.ANNULUS, 0.0, bit_md)


def estimate_swab(project: Project, swab_input: SwabInput) -> SwabEstimate:
    """
    Swab (or surge) estimate for the pipe at `swab_input.bit_md`.

    Args:
        project: Project snapshot with geometry, fluid layers, muds and window
        swab_input: Pipe movement and rheology fallback parameters

    Returns:
        SwabEstimate; status NO_DATA when the project has no geometry, or has
        neither annulus fluid layers nor an active mud
    """
    domain = swab_input.domain
    if not project.has_geometry:
        return SwabEstimate(status=ResultStatus.NO_DATA, domain=domain, message="No geometry defined")

    has_annulus_layers = any(l.placement == Placement.ANNULUS for l in project.final_layers)
    active = project.active_mud
    if not has_annulus_layers and active is None:
        return SwabEstimate(status=ResultStatus.NO_DATA, domain=domain, message="No annulus fluid layers or active mud")

    profile = list(SwabProfile(project, swab_input))
    total = profile[-1].cumulative_pressure if profile else 0.0
    non_laminar = any(p.flow_regime == FlowRegimeEnum.TURBULENT for p in profile)

    lo, hi = domain_range(domain, swab_input.bit_md, swab_input.lower_limit_md)
    badge = summarize_rheology_sources(
        resolve_layers(project.final_layers, Placement.ANNULUS, lo, hi),
        swab_input.theta_600,
        swab_input.theta_300,
    )

    bit_md = swab_input.bit_md
    window = project.pressure_window
    default_density = active.density if active else settings.DEFAULT_MUD_DENSITY
    hydrostatic = hydrostatic_kpa(_annulus_column(project, bit_md), bit_md, default_density)
    pore = pore_at(window, bit_md)
    frac = frac_at(window, bit_md)
    safety = settings.SABP_SAFETY_FACTOR if swab_input.sabp_safety_factor is None else swab_input.sabp_safety_factor

    underbalance_risk = False
    fracture_risk = False
    if domain == SwabSurgeDomain.SWAB_ABOVE_BIT:
        if pore is None:
            sabp = total * safety
        else:
            sabp = clamp_non_negative(pore + window.pore_safety_kpa - (hydrostatic - total * safety))
            underbalance_risk = hydrostatic - total < pore + window.pore_safety_kpa
    else:
        # backpressure cannot offset surge
        sabp = 0.0
        if frac is not None:
            fracture_risk = hydrostatic + total > frac - window.frac_safety_kpa

    ecd_change = total * 1000.0 / (settings.GRAVITY * bit_md) if bit_md > 0 else 0.0

    logger.debug(
        f"Swab estimate at {bit_md:.1f} m ({domain.value}): total={total:.2f} kPa, "
        f"SABP={sabp:.2f} kPa, points={len(profile)}"
    )

    return SwabEstimate(
        domain=domain,
        total_swab=total,
        recommended_sabp=sabp,
        non_laminar_flag=non_laminar,
        profile=profile,
        hydrostatic_at_bit=hydrostatic,
        pore_at_bit=pore,
        frac_at_bit=frac,
        underbalance_risk=underbalance_risk,
        fracture_risk=fracture_risk,
        ecd_change=ecd_change,
        rheology=badge,
    )


def trip_sweep(
    project: Project,
    swab_input: SwabInput,
    start_md: float,
    end_md: float,
    sweep_step: Optional[float] = None
) -> List[TripSweepPoint]:
    """
    Swab/surge totals with the bit at successive depths of a trip.

    Pulling out (end shallower than start) or running in, both endpoints
    included. `sweep_step` defaults to the profile step.
    """
    sweep_step = swab_input.step if sweep_step is None else sweep_step
    if sweep_step <= 0:
        raise ValueError("sweep_step must be positive")

    span = abs(end_md - start_md)
    count = int(math.floor(span / sweep_step)) + 1
    if count > settings.SWAB_MAX_INCREMENTS:
        count = max(settings.SWAB_MAX_INCREMENTS, 2)
        sweep_step = span / (count - 1)
        logger.warning(f"Sweep step too fine for {span:.1f} m, using {sweep_step:.4f} m")
    direction = 1.0 if end_md >= start_md else -1.0
    depths = start_md + direction * sweep_step * np.arange(count)
    if not math.isclose(float(depths[-1]), end_md):
        depths = np.append(depths, end_md)

    points = []
    for bit_md in depths:
        estimate = estimate_swab(project, swab_input.model_copy(update={"bit_md": float(bit_md)}))
        points.append(TripSweepPoint(
            bit_md=float(bit_md),
            total_pressure=estimate.total_swab,
            ecd_change=estimate.ecd_change,
            recommended_sabp=estimate.recommended_sabp,
            non_laminar_flag=estimate.non_laminar_flag,
        ))
    return points
