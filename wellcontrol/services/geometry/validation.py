import logging
from typing import List, Sequence, Union

from wellcontrol.schemas.volumes import GeometryIssue, GeometryIssueKind
from wellcontrol.schemas.well import AnnulusSection, DrillStringSection, FinalFluidLayer, Placement, Project

logger = logging.getLogger(__name__)

Section = Union[AnnulusSection, DrillStringSection]


def _check_sections(sections: Sequence[Section], collection: str) -> List[GeometryIssue]:
    issues = []
    for s in sections:
        if s.length < 0 or s.top_depth < 0 or s.inner_diameter < 0 or s.outer_diameter < 0:
            issues.append(GeometryIssue(
                kind=GeometryIssueKind.NEGATIVE_VALUE,
                collection=collection,
                top=s.top_depth,
                bottom=s.bottom_depth,
                section_name=s.name,
                message=f"{collection} section '{s.name}' has a negative depth, length or diameter"
            ))
        if collection == "drill_string" and s.inner_diameter > s.outer_diameter:
            issues.append(GeometryIssue(
                kind=GeometryIssueKind.INVERTED_DIAMETER,
                collection=collection,
                top=s.top_depth,
                bottom=s.bottom_depth,
                section_name=s.name,
                message=f"Pipe '{s.name}' has ID {s.inner_diameter} greater than OD {s.outer_diameter}"
            ))

    ordered = sorted(sections, key=lambda s: s.top_depth)
    for prev, cur in zip(ordered, ordered[1:]):
        if cur.top_depth < prev.bottom_depth:
            issues.append(GeometryIssue(
                kind=GeometryIssueKind.OVERLAP,
                collection=collection,
                top=cur.top_depth,
                bottom=min(prev.bottom_depth, cur.bottom_depth),
                section_name=cur.name,
                message=f"{collection} sections '{prev.name}' and '{cur.name}' overlap"
            ))
        elif cur.top_depth > prev.bottom_depth:
            issues.append(GeometryIssue(
                kind=GeometryIssueKind.GAP,
                collection=collection,
                top=prev.bottom_depth,
                bottom=cur.top_depth,
                section_name=cur.name,
                message=f"{collection} has no section between {prev.bottom_depth} m and {cur.top_depth} m"
            ))
    return issues


def _check_pipe_fits(project: Project) -> List[GeometryIssue]:
    issues = []
    for pipe in project.drill_string:
        for hole in project.annulus:
            top = max(pipe.top_depth, hole.top_depth)
            bottom = min(pipe.bottom_depth, hole.bottom_depth)
            if bottom > top and pipe.outer_diameter >= hole.inner_diameter:
                issues.append(GeometryIssue(
                    kind=GeometryIssueKind.PIPE_EXCEEDS_HOLE,
                    collection="drill_string",
                    top=top,
                    bottom=bottom,
                    section_name=pipe.name,
                    message=f"Pipe '{pipe.name}' OD {pipe.outer_diameter} does not fit inside '{hole.name}' ID {hole.inner_diameter}"
                ))
    return issues


def _check_layers(layers: Sequence[FinalFluidLayer]) -> List[GeometryIssue]:
    issues = []
    for placement in Placement:
        side = sorted((l for l in layers if l.placement == placement), key=lambda l: l.shallow_md)
        for prev, cur in zip(side, side[1:]):
            if cur.shallow_md < prev.deep_md:
                issues.append(GeometryIssue(
                    kind=GeometryIssueKind.LAYER_OVERLAP,
                    collection=f"final_layers.{placement.value}",
                    top=cur.shallow_md,
                    bottom=min(prev.deep_md, cur.deep_md),
                    section_name=cur.name,
                    message=f"Fluid layers '{prev.name}' and '{cur.name}' overlap; the later layer wins"
                ))
    return issues


def validate_geometry(project: Project) -> List[GeometryIssue]:
    """
    Report structural problems in the project's geometry and fluid layers.

    Nothing is rejected: calculations still clamp and use first-match
    containment. Each issue is logged as a warning.

    Args:
        project: Project snapshot

    Returns:
        List of GeometryIssue, empty for well-formed input
    """
    issues = []
    issues.extend(_check_sections(project.drill_string, "drill_string"))
    issues.extend(_check_sections(project.annulus, "annulus"))
    issues.extend(_check_pipe_fits(project))
    issues.extend(_check_layers(project.final_layers))

    for issue in issues:
        logger.warning(f"Geometry issue ({issue.kind.value}): {issue.message}")
    return issues
