import math

import pytest

from geolocus.geometry import (
    DegenerateIntersection,
    Locus,
    UnderdeterminedIntersection,
    intersect,
    intersect_pair,
)

H = math.sqrt(18.75)


def _flat(points):
    return [coord for point in points for coord in point]


def test_circle_circle_returns_both_points_in_fixed_order():
    a = Locus.circle((0.0, 0.0), 5.0)
    b = Locus.circle((5.0, 0.0), 5.0)

    points = intersect_pair(a, b)

    assert len(points) == 2
    assert points[0] == pytest.approx((2.5, H))
    assert points[1] == pytest.approx((2.5, -H))


def test_tangent_circles_meet_once():
    points = intersect_pair(Locus.circle((0.0, 0.0), 1.0), Locus.circle((2.0, 0.0), 1.0))

    assert len(points) == 1
    assert points[0] == pytest.approx((1.0, 0.0))


def test_concentric_circles_of_different_radius_are_empty():
    assert intersect_pair(Locus.circle((0.0, 0.0), 5.0), Locus.circle((0.0, 0.0), 3.0)) == ()


def test_identical_circles_are_degenerate():
    with pytest.raises(DegenerateIntersection):
        intersect_pair(Locus.circle((1.0, 1.0), 2.0, source=0), Locus.circle((1.0, 1.0), 2.0, source=1))


def test_crossing_lines_meet_once():
    a = Locus.line((0.0, 0.0), (1.0, 0.0))
    b = Locus.line((1.0, -1.0), (0.0, 1.0))

    assert _flat(intersect_pair(a, b)) == pytest.approx(_flat([(1.0, 0.0)]))


def test_parallel_lines_do_not_meet():
    a = Locus.line((0.0, 0.0), (1.0, 0.0))
    b = Locus.line((0.0, 1.0), (2.0, 0.0))

    assert intersect_pair(a, b) == ()


def test_collinear_lines_are_degenerate():
    a = Locus.line((0.0, 0.0), (1.0, 0.0))
    b = Locus.line((3.0, 0.0), (-1.0, 0.0))

    with pytest.raises(DegenerateIntersection):
        intersect_pair(a, b)


def test_opposite_rays_touching_at_anchor_meet_once():
    a = Locus.ray((0.0, 0.0), (1.0, 0.0))
    b = Locus.ray((0.0, 0.0), (-1.0, 0.0))

    assert _flat(intersect_pair(a, b)) == pytest.approx(_flat([(0.0, 0.0)]))


def test_line_circle_crossing():
    points = intersect_pair(Locus.line((0.0, 0.0), (1.0, 0.0)), Locus.circle((0.0, 0.0), 1.0))

    assert _flat(points) == pytest.approx(_flat([(1.0, 0.0), (-1.0, 0.0)]))


def test_ray_keeps_only_forward_circle_point():
    points = intersect_pair(Locus.ray((0.0, 0.0), (1.0, 0.0)), Locus.circle((0.0, 0.0), 2.0))

    assert _flat(points) == pytest.approx(_flat([(2.0, 0.0)]))


def test_finite_locus_is_filtered_by_curves():
    loci = [
        Locus.point_set([(1.0, 0.0), (3.0, 0.0)]),
        Locus.circle((0.0, 0.0), 1.0),
    ]

    assert _flat(intersect(loci)) == pytest.approx(_flat([(1.0, 0.0)]))


def test_regions_filter_curve_intersections():
    loci = [
        Locus.circle((0.0, 0.0), 5.0),
        Locus.circle((5.0, 0.0), 5.0),
        Locus.halfplane((0.0, -1.0), 0.0),
    ]

    assert _flat(intersect(loci)) == pytest.approx(_flat([(2.5, -H)]))


def test_degenerate_pair_is_skipped_when_another_pair_is_finite():
    loci = [
        Locus.circle((0.0, 0.0), 5.0),
        Locus.circle((0.0, 0.0), 5.0),
        Locus.line((0.0, 0.0), (1.0, 0.0)),
    ]

    assert _flat(intersect(loci)) == pytest.approx(_flat([(5.0, 0.0), (-5.0, 0.0)]))


def test_single_curve_does_not_reduce_to_points():
    with pytest.raises(UnderdeterminedIntersection):
        intersect([Locus.circle((0.0, 0.0), 1.0), Locus.disc((0.0, 0.0), 3.0)])


def test_halfplane_membership():
    upper = Locus.halfplane((0.0, 2.0), -2.0)  # y >= 1

    assert upper.contains((5.0, 1.0))
    assert upper.contains((0.0, 3.0))
    assert not upper.contains((0.0, 0.5))


def test_circle_samples_start_on_positive_x_axis():
    circle = Locus.circle((1.0, 2.0), 3.0)

    assert _flat(circle.sample()) == pytest.approx(_flat([(4.0, 2.0)]))
    assert _flat(circle.sample(4)) == pytest.approx(_flat([(4.0, 2.0), (1.0, 5.0), (-2.0, 2.0), (1.0, -1.0)]))


def test_line_samples_alternate_around_anchor():
    line = Locus.line((0.0, 0.0), (2.0, 0.0))

    assert _flat(line.sample(3)) == pytest.approx(_flat([(0.0, 0.0), (1.0, 0.0), (-1.0, 0.0)]))


@pytest.mark.parametrize(
    'locus, dimension',
    [
        (Locus.point_set([(0.0, 0.0)]), 0),
        (Locus.ray((0.0, 0.0), (0.0, 1.0)), 1),
        (Locus.circle((0.0, 0.0), 1.0), 1),
        (Locus.disc((0.0, 0.0), 1.0), 2),
        (Locus.plane(), 2),
    ],
)
def test_locus_dimensions(locus, dimension):
    assert locus.dimension == dimension
