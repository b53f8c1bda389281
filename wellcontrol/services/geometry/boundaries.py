import numpy as np
from typing import Iterable, Iterator, List, Tuple

from wellcontrol.schemas.well import AnnulusSection, DrillStringSection


def decompose_boundaries(
    drill_string: Iterable[DrillStringSection],
    annulus: Iterable[AnnulusSection]
) -> List[float]:
    """
    Merge every section top and bottom from both collections into a sorted
    set of distinct depth breakpoints.

    Values are compared exactly; no tolerance is applied, so 600.0 and
    600.0000001 are two boundaries.

    Args:
        drill_string: Drill-string sections
        annulus: Annulus sections

    Returns:
        Strictly increasing list of depths, m
    """
    depths = []
    for section in annulus:
        depths.append(section.top_depth)
        depths.append(section.bottom_depth)
    for section in drill_string:
        depths.append(section.top_depth)
        depths.append(section.bottom_depth)
    if not depths:
        return []
    return [float(d) for d in np.unique(np.asarray(depths, dtype=float))]


def candidate_intervals(boundaries: List[float]) -> Iterator[Tuple[float, float]]:
    """Yield the N-1 (top, bottom) pairs between consecutive boundaries."""
    for i in range(len(boundaries) - 1):
        yield boundaries[i], boundaries[i + 1]
