import logging
import math
from typing import Optional, Sequence, Union

from wellcontrol.core.config import settings
from wellcontrol.schemas.swab import RheologyBadge, RheologySource, ResolvedRheology
from wellcontrol.schemas.well import FinalFluidLayer, FluidSegment, MudProperties
from wellcontrol.utils.conversions import (
    FANN_300_SHEAR_RATE,
    FANN_600_SHEAR_RATE,
    LBF_100FT2_TO_PA,
    cp_to_pa_s,
    dial_to_pa,
    lbf_per_100ft2_to_pa,
)

logger = logging.getLogger(__name__)


def _power_law(theta_600: float, theta_300: float):
    if theta_600 <= 0 or theta_300 <= 0:
        return None, None
    tau_600 = dial_to_pa(theta_600)
    tau_300 = dial_to_pa(theta_300)
    n = math.log(tau_600 / tau_300) / math.log(FANN_600_SHEAR_RATE / FANN_300_SHEAR_RATE)
    k = tau_600 / FANN_600_SHEAR_RATE ** n
    return n, k


def _from_dials(source: RheologySource, theta_600: float, theta_300: float) -> ResolvedRheology:
    pv_cp = max(0.0, theta_600 - theta_300)
    yp_lbf = theta_300 - pv_cp
    n, k = _power_law(theta_600, theta_300)
    return ResolvedRheology(
        source=source,
        pv=cp_to_pa_s(pv_cp),
        yp=lbf_per_100ft2_to_pa(yp_lbf),
        theta_600=theta_600,
        theta_300=theta_300,
        n=n,
        k=k,
    )


def resolve_rheology(
    mud: Optional[MudProperties] = None,
    theta_600: Optional[float] = None,
    theta_300: Optional[float] = None
) -> ResolvedRheology:
    """
    Resolve Bingham PV/YP for a fluid from the best available source.

    Order of preference:
        1. lab PV and YP on the linked mud
        2. 600/300 dial readings on the linked mud
        3. caller-supplied fallback 600/300 readings
        4. configured default readings

    PV (cP) = θ600 − θ300 and YP (lbf/100ft²) = θ300 − PV, converted to SI.
    Power-law n and K are derived from whichever readings apply. Never raises.

    Args:
        mud: Mud linked to the fluid layer, if any
        theta_600: Fallback Fann 600 rpm reading
        theta_300: Fallback Fann 300 rpm reading

    Returns:
        ResolvedRheology with PV in Pa·s and YP in Pa
    """
    if mud is not None and mud.has_lab_rheology:
        # equivalent dial readings so n and K are still available
        pv_cp = mud.pv * 1000.0
        yp_lbf = mud.yp / LBF_100FT2_TO_PA
        t300 = pv_cp + yp_lbf
        t600 = 2.0 * pv_cp + yp_lbf
        n, k = _power_law(t600, t300)
        return ResolvedRheology(
            source=RheologySource.MUD_CHECK,
            pv=max(mud.pv, 0.0),
            yp=mud.yp,
            theta_600=t600,
            theta_300=t300,
            n=n,
            k=k,
        )

    if mud is not None and mud.has_dial_readings:
        pv, yp = mud.bingham_from_dials()
        n, k = mud.power_law_from_dials() or (None, None)
        return ResolvedRheology(
            source=RheologySource.MUD_DIALS,
            pv=pv,
            yp=yp,
            theta_600=mud.dial_600,
            theta_300=mud.dial_300,
            n=n,
            k=k,
        )

    if theta_600 is not None and theta_300 is not None:
        return _from_dials(RheologySource.FALLBACK_DIALS, theta_600, theta_300)

    logger.debug("No rheology data, using configured default dial readings")
    return _from_dials(RheologySource.DEFAULTS, settings.DEFAULT_THETA_600, settings.DEFAULT_THETA_300)


def summarize_rheology_sources(
    layers: Sequence[Union[FinalFluidLayer, FluidSegment]],
    theta_600: Optional[float] = None,
    theta_300: Optional[float] = None
) -> RheologyBadge:
    """Count mud-linked layers and describe where the rheology comes from."""
    total = len(layers)
    linked = sum(1 for l in layers if l.mud is not None)
    has_fallback = (theta_600 or 0) > 0 and (theta_300 or 0) > 0
    used_fallback = linked < total and has_fallback

    if total == 0:
        text = "No layers"
    elif linked == total:
        text = "Rheology: mud checks (all)"
    elif linked == 0:
        text = "Rheology: fallback θ600/θ300" if used_fallback else "Rheology: missing"
    else:
        text = "Rheology: mud checks + fallback" if used_fallback else "Rheology: mud checks (partial)"

    return RheologyBadge(
        total_layer_count=total,
        mud_linked_count=linked,
        used_fallback=used_fallback,
        text=text,
    )
