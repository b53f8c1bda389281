from typing import List, Optional, Sequence, Tuple

import numpy as np

from wellcontrol.schemas.swab import SwabSurgeDomain
from wellcontrol.schemas.well import FinalFluidLayer, FluidSegment, Placement

MERGE_TOLERANCE = 1e-9


def domain_range(domain: SwabSurgeDomain, bit_md: float, lower_limit_md: Optional[float] = None) -> Tuple[float, float]:
    """[lo, hi] MD range evaluated for a swab (above bit) or surge (below bit) domain."""
    if domain == SwabSurgeDomain.SWAB_ABOVE_BIT:
        return 0.0, max(bit_md, 0.0)
    elif domain == SwabSurgeDomain.SURGE_BELOW_BIT:
        limit = bit_md if lower_limit_md is None else lower_limit_md
        return min(bit_md, limit), max(bit_md, limit)
    raise ValueError(f"Unknown domain: {domain}")


def _winning_layer(layers: Sequence[FinalFluidLayer], top: float, bottom: float) -> Optional[FinalFluidLayer]:
    # later layers in input order take precedence where layers overlap
    for layer in reversed(layers):
        if layer.shallow_md <= top and layer.deep_md >= bottom:
            return layer
    return None


def _same_fluid(a: FluidSegment, b: FluidSegment) -> bool:
    same_mud = (a.mud is None and b.mud is None) or (
        a.mud is not None and b.mud is not None and a.mud.id == b.mud.id
    )
    return abs(a.density - b.density) < MERGE_TOLERANCE and same_mud


def merge_adjacent(segments: Sequence[FluidSegment]) -> List[FluidSegment]:
    """Join touching segments (ordered shallow→deep) of the same density and mud."""
    merged: List[FluidSegment] = []
    for seg in segments:
        if merged and _same_fluid(merged[-1], seg) and abs(seg.top - merged[-1].bottom) < MERGE_TOLERANCE:
            merged[-1] = merged[-1].model_copy(update={"bottom": seg.bottom})
        else:
            merged.append(seg)
    return merged


def resolve_layers(
    layers: Sequence[FinalFluidLayer],
    placement: Placement,
    lo: float = 0.0,
    hi: Optional[float] = None,
    merge: bool = True
) -> List[FluidSegment]:
    """
    Turn the project's final fluid layers on one side of the well into a
    non-overlapping column clipped to [lo, hi], ordered shallow→deep.

    Where layers overlap, the later layer in input order wins. Depths not
    covered by any layer are left out.

    Args:
        layers: All final fluid layers of the project
        placement: Side of the well to resolve
        lo: Shallowest MD kept
        hi: Deepest MD kept (None for no limit)
        merge: Merge adjacent segments with identical density and mud

    Returns:
        List of FluidSegment
    """
    side = [l for l in layers if l.placement == placement]
    if not side:
        return []
    upper = float("inf") if hi is None else hi

    depths = [lo]
    for layer in side:
        depths.extend([layer.shallow_md, layer.deep_md])
    if hi is not None:
        depths.append(hi)
    breakpoints = [float(d) for d in np.unique(np.asarray(depths, dtype=float)) if lo <= d <= upper]

    segments = []
    for top, bottom in zip(breakpoints, breakpoints[1:]):
        if bottom - top <= MERGE_TOLERANCE:
            continue
        layer = _winning_layer(side, top, bottom)
        if layer is None:
            continue
        segments.append(FluidSegment(
            top=top,
            bottom=bottom,
            name=layer.name or (layer.mud.name if layer.mud else ""),
            density=layer.density,
            mud=layer.mud,
        ))
    return merge_adjacent(segments) if merge else segments


def layer_at(segments: Sequence[FluidSegment], md: float) -> Optional[FluidSegment]:
    """Segment containing `md` (first match), or None."""
    for seg in segments:
        if seg.top <= md <= seg.bottom:
            return seg
    return None


def density_at(segments: Sequence[FluidSegment], md: float, default: float) -> float:
    seg = layer_at(segments, md)
    return seg.density if seg is not None else default
