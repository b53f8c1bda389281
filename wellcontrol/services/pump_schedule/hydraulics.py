import logging
from typing import Optional, Sequence

from wellcontrol.core.config import settings
from wellcontrol.schemas.pump_schedule import HydraulicsReadout, StackState
from wellcontrol.schemas.well import FluidSegment
from wellcontrol.services.geometry.lookup import GeometryLookup, Piece
from wellcontrol.services.hydraulics.correlations import correlation_for
from wellcontrol.services.hydraulics.rheology import resolve_rheology
from wellcontrol.utils.conversions import clamp_non_negative, m3_per_min_to_m3_per_s, pa_to_kpa

logger = logging.getLogger(__name__)


def _column_pressures(
    segments: Sequence[FluidSegment],
    pieces: Sequence[Piece],
    diameter_at,
    flow_rate: float,
    control_md: float,
    flow_limit_md: float,
    method: str,
    theta_600: Optional[float],
    theta_300: Optional[float]
):
    """(hydrostatic, friction) in Pa for one side of the well down to control_md."""
    g = settings.GRAVITY
    hydrostatic = 0.0
    friction = 0.0
    for seg in segments:
        top = clamp_non_negative(min(seg.top, control_md))
        bottom = clamp_non_negative(min(seg.bottom, control_md))
        if bottom <= top:
            continue
        hydrostatic += seg.density * g * (bottom - top)

        if flow_rate <= 0:
            continue
        correlation = correlation_for(resolve_rheology(seg.mud, theta_600, theta_300), method)
        flow_bottom = min(bottom, flow_limit_md)
        for p_top, p_bottom, area in pieces:
            length = min(p_bottom, flow_bottom) - max(p_top, top)
            if length <= 0 or area <= settings.EPSILON:
                continue
            mid = 0.5 * (max(p_top, top) + min(p_bottom, flow_bottom))
            velocity = flow_rate / area
            result = correlation.evaluate(seg.density, velocity, diameter_at(mid))
            friction += result.dpdz * length
    return hydrostatic, friction


def circulating_hydraulics(
    stacks: StackState,
    lookup: GeometryLookup,
    pump_rate: float,
    control_md: float,
    exit_md: float,
    mpd_enabled: bool = False,
    target_emd: float = 1300.0,
    method: str = "power-law",
    theta_600: Optional[float] = None,
    theta_300: Optional[float] = None
) -> HydraulicsReadout:
    """
    Pressures at the control depth while circulating at `pump_rate`.

    Hydrostatic integrates density over each fluid segment above the control
    depth; friction runs the rheology correlation over each geometry piece
    the segment crosses, with V = Q/A. Annulus flow only exists above
    `exit_md`, where fluid leaves the string.

    With MPD enabled, the surface backpressure brings the annulus pressure at
    control depth up to `target_emd` (never negative). String friction is
    upstream of the bit, so it enters the circulating pressure but not the
    bottomhole pressure.

    Args:
        stacks: Current fluid columns
        lookup: Geometry lookup cut at the string bottom
        pump_rate: Flow rate, m³/min
        control_md: Depth where BHP and ECD are reported, m
        exit_md: Depth where fluid leaves the string, m
        mpd_enabled: Apply surface backpressure to hold target_emd
        target_emd: Target equivalent mud density at control depth, kg/m³
        method: Friction correlation ("power-law" or "bingham-plastic")

    Returns:
        HydraulicsReadout in kPa and kg/m³
    """
    g = settings.GRAVITY
    q = m3_per_min_to_m3_per_s(clamp_non_negative(pump_rate))

    ann_hyd, ann_fric = _column_pressures(
        stacks.annulus,
        lookup.annulus_pieces,
        lambda md: lookup.hole_id(md) - lookup.pipe_od(md),
        q, control_md, exit_md, method, theta_600, theta_300
    )
    str_hyd, str_fric = _column_pressures(
        stacks.string,
        lookup.string_pieces,
        lookup.pipe_id,
        q, control_md, exit_md, method, theta_600, theta_300
    )

    sbp = 0.0
    if mpd_enabled:
        target_bhp = clamp_non_negative(target_emd) * g * control_md
        sbp = pa_to_kpa(clamp_non_negative(target_bhp - (ann_hyd + ann_fric)))

    bhp = pa_to_kpa(ann_hyd + ann_fric) + sbp
    total_friction = pa_to_kpa(ann_fric + str_fric)
    ecd = bhp * 1000.0 / (g * control_md) if control_md > 0 else 0.0

    logger.debug(f"Circulating at {pump_rate:.3f} m³/min: BHP={bhp:.1f} kPa, ECD={ecd:.1f} kg/m³, SBP={sbp:.1f} kPa")

    return HydraulicsReadout(
        annulus_hydrostatic=pa_to_kpa(ann_hyd),
        string_hydrostatic=pa_to_kpa(str_hyd),
        annulus_friction=pa_to_kpa(ann_fric),
        string_friction=pa_to_kpa(str_fric),
        total_friction=total_friction,
        sbp=sbp,
        bhp=bhp,
        tcp=total_friction + sbp,
        ecd=ecd,
        control_md=control_md,
    )
