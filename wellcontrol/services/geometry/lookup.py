from typing import Callable, List, Optional, Sequence, Tuple

from wellcontrol.core.config import settings
from wellcontrol.schemas.well import AnnulusSection, DrillStringSection, Project
from wellcontrol.utils.conversions import annular_area, circle_area, clamp_non_negative
from .boundaries import candidate_intervals, decompose_boundaries
from .slices import build_annular_slices, find_containing_section

# (top, bottom, area) with a constant flow area over [top, bottom]
Piece = Tuple[float, float, float]


class GeometryLookup:
    """
    Point and interval queries against a project's string and annulus sections.

    This class provides the geometry used by the swab/surge estimator and the
    pump schedule simulator: hole ID, pipe OD/ID at a measured depth, interval
    volumes inside the string and in the annulus, and the inverse
    volume-to-depth mapping used to place fluid fronts.

    `string_bottom` cuts the pipe off below a given depth (pipe pulled or not
    yet run). Sections are sorted by top depth once; the first section that
    contains a depth wins.
    """

    def __init__(
        self,
        drill_string: Sequence[DrillStringSection],
        annulus: Sequence[AnnulusSection],
        string_bottom: Optional[float] = None
    ):
        self.annulus = sorted(annulus, key=lambda s: s.top_depth)
        self.drill_string = sorted(drill_string, key=lambda s: s.top_depth)
        self.string_bottom = (
            max((s.bottom_depth for s in self.drill_string), default=0.0)
            if string_bottom is None else string_bottom
        )

        present = self._string_within_cutoff()
        self.string_pieces = self._build_string_pieces(present)
        self.annulus_pieces: List[Piece] = [
            (s.top, s.bottom, s.area) for s in build_annular_slices(present, self.annulus)
        ]

    @classmethod
    def from_project(cls, project: Project, string_bottom: Optional[float] = None) -> "GeometryLookup":
        return cls(project.drill_string, project.annulus, string_bottom)

    # --------------------------- Point queries --------------------------- #
    def hole_id(self, md: float) -> float:
        """Hole/casing ID at MD (m); 0 if no annulus section covers the depth."""
        for section in self.annulus:
            if section.top_depth <= md <= section.bottom_depth:
                return clamp_non_negative(section.inner_diameter)
        return 0.0

    def pipe_od(self, md: float) -> float:
        """Pipe OD at MD (m); 0 below the string bottom or outside any section."""
        section = self._string_at(md)
        return clamp_non_negative(section.outer_diameter) if section else 0.0

    def pipe_id(self, md: float) -> float:
        """Pipe ID at MD (m); 0 below the string bottom or outside any section."""
        section = self._string_at(md)
        return clamp_non_negative(section.inner_diameter) if section else 0.0

    def annulus_area(self, md: float) -> float:
        return annular_area(self.hole_id(md), self.pipe_od(md))

    # --------------------------- Interval volumes --------------------------- #
    def volume_in_string(self, top: float, bottom: float) -> float:
        """Fluid capacity inside the string between two MDs, m³."""
        return self._integrate(self.string_pieces, top, bottom)

    def volume_in_annulus(self, top: float, bottom: float) -> float:
        """Annular volume (hole minus pipe) between two MDs, m³."""
        return self._integrate(self.annulus_pieces, top, bottom)

    @property
    def string_capacity(self) -> float:
        return sum((b - t) * a for t, b, a in self.string_pieces)

    def annulus_capacity(self, bottom: float) -> float:
        return self.volume_in_annulus(0.0, bottom)

    # --------------------------- Volume → depth --------------------------- #
    def length_for_string_volume(self, start_md: float, volume: float) -> float:
        """
        Length L below `start_md` such that the string holds `volume` m³ over
        [start_md, start_md + L]. Capped at the string bottom.
        """
        max_length = clamp_non_negative(self.string_bottom - start_md)
        return self._solve_length(
            lambda length: self.volume_in_string(start_md, start_md + length),
            volume,
            max_length,
        )

    def length_for_annulus_volume(self, bottom_md: float, volume: float) -> float:
        """
        Length L above `bottom_md` such that the annulus holds `volume` m³ over
        [bottom_md − L, bottom_md]. Capped at surface.
        """
        max_length = clamp_non_negative(bottom_md)
        return self._solve_length(
            lambda length: self.volume_in_annulus(bottom_md - length, bottom_md),
            volume,
            max_length,
        )

    def depth_for_string_volume(self, volume: float, start_md: float = 0.0) -> float:
        """MD reached by a column of `volume` m³ filled down the string from `start_md`."""
        return start_md + self.length_for_string_volume(start_md, volume)

    def depth_for_annulus_volume_from(self, start_md: float, volume: float) -> float:
        """MD of the top of a column of `volume` m³ stacked upward in the annulus from `start_md`."""
        return start_md - self.length_for_annulus_volume(start_md, volume)

    # --------------------------- Helpers --------------------------- #
    def _string_at(self, md: float) -> Optional[DrillStringSection]:
        if md > self.string_bottom:
            return None
        for section in self.drill_string:
            if section.top_depth <= md <= section.bottom_depth:
                return section
        return None

    def _string_within_cutoff(self) -> List[DrillStringSection]:
        present = []
        for s in self.drill_string:
            if s.top_depth >= self.string_bottom:
                continue
            if s.bottom_depth > self.string_bottom:
                s = s.model_copy(update={"length": self.string_bottom - s.top_depth})
            present.append(s)
        return present

    @staticmethod
    def _build_string_pieces(drill_string: Sequence[DrillStringSection]) -> List[Piece]:
        pieces = []
        boundaries = decompose_boundaries(drill_string, [])
        for top, bottom in candidate_intervals(boundaries):
            section = find_containing_section(drill_string, top, bottom)
            if section is None:
                continue
            pieces.append((top, bottom, circle_area(section.inner_diameter)))
        return pieces

    @staticmethod
    def _solve_length(
        volume_of: Callable[[float], float],
        target: float,
        max_length: float,
        tolerance: Optional[float] = None,
        max_iter: Optional[int] = None
    ) -> float:
        """Bisection on the monotone volume(length) curve over [0, max_length]."""
        tolerance = settings.VOLUME_SOLVER_TOLERANCE if tolerance is None else tolerance
        max_iter = settings.VOLUME_SOLVER_MAX_ITER if max_iter is None else max_iter

        if target <= 0 or max_length <= 0:
            return 0.0
        if volume_of(max_length) <= target:
            return max_length

        lo, hi = 0.0, max_length
        iterations = 0
        while (hi - lo) > tolerance and iterations < max_iter:
            iterations += 1
            mid = 0.5 * (lo + hi)
            if volume_of(mid) < target:
                lo = mid
            else:
                hi = mid
        return 0.5 * (lo + hi)

    @staticmethod
    def _integrate(pieces: Sequence[Piece], top: float, bottom: float) -> float:
        lo, hi = min(top, bottom), max(top, bottom)
        total = 0.0
        for p_top, p_bottom, area in pieces:
            overlap = min(p_bottom, hi) - max(p_top, lo)
            if overlap > 0:
                total += area * overlap
        return total


def hydraulic_diameter(hole_id: float, pipe_od: float) -> float:
    """Equivalent annular diameter D_h = ID − OD, floored at settings.MIN_ANNULAR_CLEARANCE."""
    return max(hole_id - pipe_od, settings.MIN_ANNULAR_CLEARANCE)

