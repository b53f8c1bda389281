"""
Tests for the volume summary: boundary decomposition, annular slices,
volume totals and geometry lookups.
"""

import math

import pytest

from wellcontrol.core.config import settings
from wellcontrol.schemas.volumes import ResultStatus
from wellcontrol.schemas.well import AnnulusSection, DrillStringSection, Project
from wellcontrol.services.engine import get_example_project
from wellcontrol.services.geometry import (
    GeometryLookup,
    build_annular_slices,
    compute_volume_totals,
    decompose_boundaries,
    effective_annular_volume,
    hydraulic_diameter,
)
from wellcontrol.services.geometry.volume_service import volume_service


def area(d_out, d_in=0.0):
    return math.pi / 4.0 * (d_out ** 2 - d_in ** 2)


def create_test_project():
    """5" drill pipe inside a uniform 8-1/2" hole, 1000 m."""
    return Project(
        name="Test Well",
        annulus=[AnnulusSection(name="Hole", top_depth=0.0, length=1000.0, inner_diameter=0.2159)],
        drill_string=[DrillStringSection(name="DP", top_depth=0.0, length=1000.0, outer_diameter=0.127, inner_diameter=0.0953)],
    )


def test_single_concentric_section():
    project = Project(
        annulus=[AnnulusSection(top_depth=0.0, length=500.0, inner_diameter=0.220)],
        drill_string=[DrillStringSection(top_depth=0.0, length=500.0, outer_diameter=0.127, inner_diameter=0.1)],
    )
    slices = build_annular_slices(project.drill_string, project.annulus)

    assert len(slices) == 1
    assert slices[0].area == pytest.approx(area(0.220, 0.127))
    assert slices[0].area == pytest.approx(0.02533, abs=1e-4)
    assert slices[0].volume == pytest.approx(area(0.220, 0.127) * 500.0)
    assert slices[0].volume == pytest.approx(12.66, abs=0.02)


def test_open_hole_two_sections():
    project = Project(annulus=[
        AnnulusSection(name="Surface", top_depth=0.0, length=600.0, inner_diameter=0.340),
        AnnulusSection(name="Intermediate", top_depth=600.0, length=900.0, inner_diameter=0.244),
    ])
    totals = compute_volume_totals(project)

    expected = area(0.340) * 600.0 + area(0.244) * 900.0
    assert totals.status == ResultStatus.OK
    assert totals.open_hole == pytest.approx(expected)
    assert totals.open_hole == pytest.approx(96.6, abs=0.1)
    # no pipe: the annulus is the open hole
    assert totals.annular_with_pipe == pytest.approx(totals.open_hole)
    assert totals.ds_capacity == 0.0


def test_drill_string_totals():
    totals = compute_volume_totals(create_test_project())

    assert totals.ds_capacity == pytest.approx(area(0.0953) * 1000.0)
    assert totals.ds_displacement == pytest.approx(area(0.127, 0.0953) * 1000.0)
    assert totals.ds_wet == pytest.approx(area(0.127) * 1000.0)
    assert totals.annular_with_pipe == pytest.approx(area(0.2159, 0.127) * 1000.0)


def test_annular_volume_never_exceeds_open_hole():
    totals = compute_volume_totals(get_example_project())
    assert totals.annular_with_pipe <= totals.open_hole


def test_gap_is_excluded_from_slices():
    project = get_example_project()
    totals = compute_volume_totals(project)

    assert all(not (s.top >= 600.0 and s.bottom <= 700.0) for s in totals.slices)
    expected = area(0.340, 0.127) * 600.0 + area(0.244, 0.127) * 300.0
    assert totals.annular_with_pipe == pytest.approx(expected)


def test_zero_length_section_contributes_nothing():
    base = create_test_project()
    with_empty = base.model_copy(update={
        "annulus": base.annulus + [AnnulusSection(name="Empty", top_depth=400.0, length=0.0, inner_diameter=0.5)],
        "drill_string": base.drill_string + [
            DrillStringSection(name="Empty", top_depth=1000.0, length=0.0, outer_diameter=0.2, inner_diameter=0.1)
        ],
    })

    a = compute_volume_totals(base)
    b = compute_volume_totals(with_empty)
    assert b.open_hole == pytest.approx(a.open_hole)
    assert b.ds_capacity == pytest.approx(a.ds_capacity)
    assert b.annular_with_pipe == pytest.approx(a.annular_with_pipe)
    assert all(s.bottom > s.top for s in b.slices)


def test_negative_values_are_clamped():
    project = Project(
        annulus=[AnnulusSection(top_depth=0.0, length=100.0, inner_diameter=-0.2)],
        drill_string=[DrillStringSection(top_depth=0.0, length=-50.0, outer_diameter=0.127, inner_diameter=0.1)],
    )
    totals = compute_volume_totals(project)

    assert totals.open_hole == 0.0
    assert totals.ds_capacity == 0.0
    assert totals.annular_with_pipe == 0.0


def test_no_geometry_is_no_data():
    totals = compute_volume_totals(Project())
    assert totals.status == ResultStatus.NO_DATA
    assert totals.open_hole == 0.0
    assert totals.slices == []


def test_decomposer_is_idempotent():
    project = get_example_project()
    first = decompose_boundaries(project.drill_string, project.annulus)
    second = decompose_boundaries(project.drill_string, project.annulus)

    assert first == second
    assert first == [0.0, 600.0, 700.0, 1000.0]


def test_decomposer_uses_exact_values():
    annulus = [
        AnnulusSection(top_depth=0.0, length=600.0, inner_diameter=0.3),
        AnnulusSection(top_depth=600.0000001, length=100.0, inner_diameter=0.3),
    ]
    assert len(decompose_boundaries([], annulus)) == 4


def test_effective_annular_volume():
    project = create_test_project()
    section = project.annulus[0]
    assert effective_annular_volume(section, project.drill_string) == pytest.approx(area(0.2159, 0.127) * 1000.0)


def test_lookup_point_queries():
    project = get_example_project()
    lookup = GeometryLookup.from_project(project, string_bottom=800.0)

    assert lookup.hole_id(100.0) == pytest.approx(0.340)
    assert lookup.hole_id(650.0) == 0.0
    assert lookup.hole_id(900.0) == pytest.approx(0.244)
    assert lookup.pipe_od(500.0) == pytest.approx(0.127)
    assert lookup.pipe_od(900.0) == 0.0
    assert lookup.pipe_id(900.0) == 0.0


def test_lookup_interval_volumes_and_inversion():
    lookup = GeometryLookup.from_project(create_test_project())
    per_metre = area(0.0953)

    assert lookup.volume_in_string(100.0, 300.0) == pytest.approx(per_metre * 200.0)
    assert lookup.string_capacity == pytest.approx(per_metre * 1000.0)
    assert lookup.length_for_string_volume(0.0, per_metre * 250.0) == pytest.approx(250.0, abs=1e-3)
    # more than the string holds stops at the string bottom
    assert lookup.depth_for_string_volume(100.0) == pytest.approx(1000.0)

    ann_per_metre = area(0.2159, 0.127)
    assert lookup.volume_in_annulus(0.0, 1000.0) == pytest.approx(ann_per_metre * 1000.0)
    assert lookup.depth_for_annulus_volume_from(1000.0, ann_per_metre * 120.0) == pytest.approx(880.0, abs=1e-3)


def test_volume_service():
    totals = volume_service.calculate_volumes(create_test_project())
    assert totals.status == ResultStatus.OK
    assert totals.ds_capacity > 0


def test_section_volume_and_point_area():
    project = create_test_project()
    lookup = GeometryLookup.from_project(project)

    assert volume_service.section_volume(project, project.annulus[0]) == pytest.approx(area(0.2159, 0.127) * 1000.0)
    assert lookup.annulus_area(500.0) == pytest.approx(area(0.2159, 0.127))


def test_hydraulic_diameter_is_floored():
    assert hydraulic_diameter(0.2159, 0.127) == pytest.approx(0.0889)
    assert hydraulic_diameter(0.127, 0.127) == settings.MIN_ANNULAR_CLEARANCE
    assert hydraulic_diameter(0.1, 0.127) == settings.MIN_ANNULAR_CLEARANCE
