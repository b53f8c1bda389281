from typing import List, Optional, Sequence, TypeVar

from wellcontrol.schemas.volumes import VolumeSlice
from wellcontrol.schemas.well import AnnulusSection, DrillStringSection
from wellcontrol.utils.conversions import annular_area
from .boundaries import candidate_intervals, decompose_boundaries

SectionT = TypeVar("SectionT", AnnulusSection, DrillStringSection)


def find_containing_section(sections: Sequence[SectionT], top: float, bottom: float) -> Optional[SectionT]:
    """
    First section (in input order) whose [top_depth, bottom_depth] contains [top, bottom].

    Well-formed geometry never has two candidates; when it does, input order breaks the tie.
    """
    for section in sections:
        if section.top_depth <= top and section.bottom_depth >= bottom:
            return section
    return None


def build_annular_slices(
    drill_string: Sequence[DrillStringSection],
    annulus: Sequence[AnnulusSection]
) -> List[VolumeSlice]:
    """
    Decompose the wellbore into non-overlapping slices and compute the net
    annular area of each.

    Slices with no containing annulus section (gaps, open hole beyond the
    defined annulus) are left out. Slices with no containing string section
    are treated as open annulus (pipe OD = 0).
    """
    boundaries = decompose_boundaries(drill_string, annulus)
    slices = []
    for top, bottom in candidate_intervals(boundaries):
        if bottom <= top:
            continue
        annulus_section = find_containing_section(annulus, top, bottom)
        if annulus_section is None:
            continue
        string_section = find_containing_section(drill_string, top, bottom)
        pipe_od = string_section.outer_diameter if string_section else 0.0
        slices.append(VolumeSlice(
            top=top,
            bottom=bottom,
            area=annular_area(annulus_section.inner_diameter, pipe_od)
        ))
    return slices


def effective_annular_volume(section: AnnulusSection, drill_string: Sequence[DrillStringSection]) -> float:
    """
    Annular volume of a single annulus section, subtracting any overlapping
    drill-string ODs.
    """
    overlapping = [
        d for d in drill_string
        if d.bottom_depth > section.top_depth and d.top_depth < section.bottom_depth
    ]
    clipped = [
        DrillStringSection(
            name=d.name,
            top_depth=max(d.top_depth, section.top_depth),
            length=min(d.bottom_depth, section.bottom_depth) - max(d.top_depth, section.top_depth),
            outer_diameter=d.outer_diameter,
            inner_diameter=d.inner_diameter,
        )
        for d in overlapping
    ]
    return sum(s.volume for s in build_annular_slices(clipped, [section]))
