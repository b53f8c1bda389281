"""
Tests for geometry validation and fluid layer resolution.
"""

from wellcontrol.schemas.swab import SwabSurgeDomain
from wellcontrol.schemas.volumes import GeometryIssueKind
from wellcontrol.schemas.well import (
    AnnulusSection,
    DrillStringSection,
    FinalFluidLayer,
    FluidSegment,
    MudProperties,
    Placement,
    Project,
)
from wellcontrol.services.engine import get_example_project
from wellcontrol.services.geometry import validate_geometry
from wellcontrol.services.geometry.volume_service import volume_service
from wellcontrol.services.hydraulics import density_at, domain_range, layer_at, merge_adjacent, resolve_layers


def create_test_layers():
    mud = MudProperties(name="Active", density=1200.0, is_active=True)
    return [
        FinalFluidLayer(name="Active", placement=Placement.ANNULUS, top_md=0.0, bottom_md=1000.0, density=1200.0, mud=mud),
        FinalFluidLayer(name="Pill", placement=Placement.ANNULUS, top_md=400.0, bottom_md=600.0, density=1500.0),
        FinalFluidLayer(name="Kill", placement=Placement.STRING, top_md=0.0, bottom_md=1000.0, density=1400.0),
    ]


def kinds(issues):
    return [issue.kind for issue in issues]


def test_example_project_reports_annulus_gap():
    issues = validate_geometry(get_example_project())

    gaps = [i for i in issues if i.kind == GeometryIssueKind.GAP]
    assert len(gaps) == 1
    assert gaps[0].collection == "annulus"
    assert gaps[0].top == 600.0
    assert gaps[0].bottom == 700.0


def test_well_formed_geometry_has_no_issues():
    project = Project(
        annulus=[AnnulusSection(name="Hole", top_depth=0.0, length=1000.0, inner_diameter=0.2159)],
        drill_string=[DrillStringSection(name="DP", top_depth=0.0, length=1000.0, outer_diameter=0.127, inner_diameter=0.0953)],
    )
    assert validate_geometry(project) == []


def test_overlap_inverted_and_oversized_pipe():
    project = Project(
        annulus=[AnnulusSection(name="Hole", top_depth=0.0, length=1000.0, inner_diameter=0.1)],
        drill_string=[
            DrillStringSection(name="DP", top_depth=0.0, length=600.0, outer_diameter=0.127, inner_diameter=0.0953),
            DrillStringSection(name="HWDP", top_depth=500.0, length=500.0, outer_diameter=0.08, inner_diameter=0.09),
        ],
    )
    found = kinds(validate_geometry(project))

    assert GeometryIssueKind.OVERLAP in found
    assert GeometryIssueKind.INVERTED_DIAMETER in found
    assert GeometryIssueKind.PIPE_EXCEEDS_HOLE in found


def test_negative_values_are_reported():
    project = Project(annulus=[AnnulusSection(name="Bad", top_depth=0.0, length=-10.0, inner_diameter=0.2)])
    assert GeometryIssueKind.NEGATIVE_VALUE in kinds(validate_geometry(project))


def test_layer_overlap_is_reported():
    project = Project(final_layers=create_test_layers())
    issues = [i for i in validate_geometry(project) if i.kind == GeometryIssueKind.LAYER_OVERLAP]

    assert len(issues) == 1
    assert issues[0].top == 400.0
    assert issues[0].bottom == 600.0


def test_service_validation_matches_engine():
    project = get_example_project()
    assert kinds(volume_service.validate_geometry(project)) == kinds(validate_geometry(project))


def test_later_layer_wins_on_overlap():
    segments = resolve_layers(create_test_layers(), Placement.ANNULUS)

    assert [(s.top, s.bottom, s.density) for s in segments] == [
        (0.0, 400.0, 1200.0),
        (400.0, 600.0, 1500.0),
        (600.0, 1000.0, 1200.0),
    ]
    assert density_at(segments, 500.0, default=1000.0) == 1500.0
    assert density_at(segments, 1200.0, default=1000.0) == 1000.0


def test_layers_clipped_to_range():
    segments = resolve_layers(create_test_layers(), Placement.STRING, 200.0, 700.0)

    assert len(segments) == 1
    assert segments[0].top == 200.0
    assert segments[0].bottom == 700.0
    assert layer_at(segments, 100.0) is None


def test_inverted_layer_depths_are_normalised():
    layers = [FinalFluidLayer(name="Upside", placement=Placement.ANNULUS, top_md=500.0, bottom_md=100.0, density=1100.0)]
    segments = resolve_layers(layers, Placement.ANNULUS)
    assert (segments[0].top, segments[0].bottom) == (100.0, 500.0)


def test_merge_adjacent_segments():
    mud = MudProperties(name="Active", density=1200.0)
    segments = [
        FluidSegment(top=0.0, bottom=100.0, density=1200.0, mud=mud),
        FluidSegment(top=100.0, bottom=250.0, density=1200.0, mud=mud),
        FluidSegment(top=250.0, bottom=300.0, density=1200.0),
        FluidSegment(top=300.0, bottom=400.0, density=1300.0),
    ]
    merged = merge_adjacent(segments)

    assert [(s.top, s.bottom) for s in merged] == [(0.0, 250.0), (250.0, 300.0), (300.0, 400.0)]


def test_domain_range():
    assert domain_range(SwabSurgeDomain.SWAB_ABOVE_BIT, 800.0) == (0.0, 800.0)
    assert domain_range(SwabSurgeDomain.SURGE_BELOW_BIT, 800.0, 1200.0) == (800.0, 1200.0)
    assert domain_range(SwabSurgeDomain.SURGE_BELOW_BIT, 800.0) == (800.0, 800.0)
