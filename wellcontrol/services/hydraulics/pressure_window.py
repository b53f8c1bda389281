from typing import Optional, Sequence, Tuple

import numpy as np

from wellcontrol.core.config import settings
from wellcontrol.schemas.well import FluidSegment, PressureWindow
from wellcontrol.utils.conversions import clamp_non_negative


def _interpolate(window: PressureWindow, depth: float, attr: str) -> Optional[float]:
    pts = sorted(
        (p for p in window.points if getattr(p, attr) is not None),
        key=lambda p: p.depth
    )
    if not pts:
        return None
    xs = np.array([p.depth for p in pts], dtype=float)
    ys = np.array([getattr(p, attr) for p in pts], dtype=float)
    # np.interp holds the end values outside the table
    return float(np.interp(depth, xs, ys))


def pore_at(window: PressureWindow, depth: float) -> Optional[float]:
    """Pore pressure at depth, kPa, linearly interpolated; None without pore data."""
    return _interpolate(window, depth, "pore_kpa")


def frac_at(window: PressureWindow, depth: float) -> Optional[float]:
    """Fracture pressure at depth, kPa, linearly interpolated; None without frac data."""
    return _interpolate(window, depth, "frac_kpa")


def window_at(window: PressureWindow, depth: float, apply_safety: bool = True) -> Optional[Tuple[float, float]]:
    """
    Allowed (min, max) pressure at depth, kPa.

    With `apply_safety` the pore side is raised by `pore_safety_kpa` and the
    frac side lowered by `frac_safety_kpa`. None when either side is missing
    or the margins close the window.
    """
    pore = pore_at(window, depth)
    frac = frac_at(window, depth)
    if pore is None or frac is None:
        return None
    lo = pore + window.pore_safety_kpa if apply_safety else pore
    hi = frac - window.frac_safety_kpa if apply_safety else frac
    return (lo, hi) if lo <= hi else None


def min_density_at(window: PressureWindow, depth: float, apply_safety: bool = True) -> Optional[float]:
    """Lowest mud density that keeps the well overbalanced at depth, kg/m³."""
    pore = pore_at(window, depth)
    if depth <= 0 or pore is None:
        return None
    if apply_safety:
        pore += window.pore_safety_kpa
    return pore * 1000.0 / (settings.GRAVITY * depth)


def max_density_at(window: PressureWindow, depth: float, apply_safety: bool = True) -> Optional[float]:
    """Highest mud density before breaking down the formation at depth, kg/m³."""
    frac = frac_at(window, depth)
    if depth <= 0 or frac is None:
        return None
    if apply_safety:
        frac -= window.frac_safety_kpa
    return frac * 1000.0 / (settings.GRAVITY * depth)


def density_window_at(window: PressureWindow, depth: float, apply_safety: bool = True) -> Optional[Tuple[float, float]]:
    lo = min_density_at(window, depth, apply_safety)
    hi = max_density_at(window, depth, apply_safety)
    if lo is None or hi is None or lo > hi:
        return None
    return lo, hi


def hydrostatic_kpa(segments: Sequence[FluidSegment], md: float, default_density: Optional[float] = None) -> float:
    """
    Hydrostatic pressure at `md` of a column of fluid segments, kPa.

    Depth not covered by any segment is filled with `default_density`
    (settings.DEFAULT_MUD_DENSITY when not given). MD is used as vertical
    depth.
    """
    default_density = settings.DEFAULT_MUD_DENSITY if default_density is None else default_density
    depth = clamp_non_negative(md)
    covered = 0.0
    total = 0.0
    for seg in segments:
        length = min(seg.bottom, depth) - max(seg.top, 0.0)
        if length > 0:
            total += seg.density * settings.GRAVITY * length
            covered += length
    total += default_density * settings.GRAVITY * clamp_non_negative(depth - covered)
    return total / 1000.0


def required_sbp(target_bhp: float, hydrostatic: float, friction: float = 0.0) -> float:
    """Surface backpressure needed to reach `target_bhp`, kPa (never negative)."""
    return clamp_non_negative(target_bhp - (hydrostatic + friction))


def required_uniform_density(target_bhp: float, md: float) -> Optional[float]:
    """Single-fluid density that alone gives `target_bhp` at `md`, kg/m³."""
    if md <= 0:
        return None
    return target_bhp * 1000.0 / (settings.GRAVITY * md)
