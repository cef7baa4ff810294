import math

import pytest

from geolocus.geometry import GeometryProvider, LocusUnavailable
from geolocus.solver.model import Constraint


def c(kind, points, value=None, cid=0):
    return Constraint(cid=cid, kind=kind, points=tuple(points), value=value)


@pytest.fixture
def provider():
    return GeometryProvider()


def test_distance_locus_is_circle_around_other_point(provider):
    locus = provider.possibility_space(c('distance', 'AB', 3.0, cid=7), 'B', {'A': (1.0, 2.0)})

    assert locus.kind == 'circle'
    assert locus.anchor == (1.0, 2.0)
    assert locus.radius == pytest.approx(3.0)
    assert locus.source == 7


def test_orientation_locus_points_backwards_for_start(provider):
    locus = provider.possibility_space(c('orientation', 'AB', 0.0), 'A', {'B': (2.0, 0.0)})

    assert locus.kind == 'ray'
    assert locus.anchor == (2.0, 0.0)
    assert locus.direction == pytest.approx((-1.0, 0.0))


def test_angle_locus_for_arm_is_rotated_ray(provider):
    locus = provider.possibility_space(
        c('angle', 'AVC', math.pi / 2), 'C', {'A': (1.0, 0.0), 'V': (0.0, 0.0)}
    )

    assert locus.kind == 'ray'
    assert locus.direction == pytest.approx((0.0, 1.0), abs=1e-12)


def test_angle_locus_for_vertex_is_inscribed_circle(provider):
    locus = provider.possibility_space(
        c('angle', 'AVC', math.pi / 2), 'V', {'A': (-1.0, 0.0), 'C': (1.0, 0.0)}
    )

    assert locus.kind == 'circle'
    assert locus.anchor == pytest.approx((0.0, 0.0), abs=1e-12)
    assert locus.radius == pytest.approx(1.0)


def test_incident_locus_is_line_through_references(provider):
    locus = provider.possibility_space(c('incident', 'PAB'), 'P', {'A': (0.0, 0.0), 'B': (2.0, 2.0)})

    assert locus.kind == 'line'
    assert locus.contains((5.0, 5.0))


def test_incident_with_coincident_references_is_unavailable(provider):
    with pytest.raises(LocusUnavailable):
        provider.possibility_space(c('incident', 'PAB'), 'P', {'A': (1.0, 1.0), 'B': (1.0, 1.0)})


def test_perpendicular_locus_passes_through_partner(provider):
    positions = {'A': (3.0, 4.0), 'C': (0.0, 0.0), 'D': (0.0, 1.0)}
    locus = provider.possibility_space(c('perpendicular', 'ABCD'), 'B', positions)

    assert locus.kind == 'line'
    assert locus.contains((3.0, 4.0))
    assert locus.contains((-2.0, 4.0))


def test_midpoint_locus_reflects_the_endpoint(provider):
    locus = provider.possibility_space(c('midpoint', 'MAB'), 'A', {'M': (1.0, 1.0), 'B': (2.0, 2.0)})

    assert locus.kind == 'points'
    assert locus.points == ((0.0, 0.0),)


def test_side_locus_is_left_halfplane(provider):
    locus = provider.possibility_space(c('side', 'PAB'), 'P', {'A': (0.0, 0.0), 'B': (1.0, 0.0)})

    assert locus.dimension == 2
    assert locus.contains((0.5, 3.0))
    assert not locus.contains((0.5, -3.0))


def test_line_distance_reference_slots_only_filter(provider):
    constraint = c('line-distance', 'PAB', 2.0)

    assert provider.dimension(constraint, 'P') == 1
    assert provider.dimension(constraint, 'A') is None
    with pytest.raises(LocusUnavailable):
        provider.possibility_space(constraint, 'A', {'P': (0.0, 2.0), 'B': (1.0, 0.0)})


def test_line_distance_locus_is_offset_line(provider):
    locus = provider.possibility_space(c('line-distance', 'PAB', 2.0), 'P', {'A': (0.0, 0.0), 'B': (1.0, 0.0)})

    assert locus.contains((7.0, 2.0))
    assert not locus.contains((7.0, -2.0))


@pytest.mark.parametrize(
    'kind, points, value, positions, expected',
    [
        ('distance', 'AB', 5.0, {'A': (0.0, 0.0), 'B': (3.0, 4.0)}, 0.0),
        ('distance', 'AB', 4.0, {'A': (0.0, 0.0), 'B': (3.0, 4.0)}, 1.0),
        ('within', 'PC', 2.0, {'P': (3.0, 0.0), 'C': (0.0, 0.0)}, 1.0),
        ('within', 'PC', 2.0, {'P': (1.0, 0.0), 'C': (0.0, 0.0)}, 0.0),
        ('angle', 'AVC', math.pi / 2, {'A': (1.0, 0.0), 'V': (0.0, 0.0), 'C': (0.0, 1.0)}, 0.0),
        ('side', 'PAB', None, {'P': (0.0, -2.0), 'A': (0.0, 0.0), 'B': (1.0, 0.0)}, 2.0),
        ('coincident', 'AB', None, {'A': (0.0, 0.0), 'B': (0.0, 0.5)}, 0.5),
    ],
)
def test_residuals(provider, kind, points, value, positions, expected):
    assert provider.residual(c(kind, points, value), positions) == pytest.approx(expected, abs=1e-12)


def test_reversed_distance_is_coincident(provider):
    a = c('distance', 'AB', 5.0, cid=0)
    b = c('distance', 'BA', 5.0, cid=1)
    other = c('distance', 'AB', 3.0, cid=2)

    assert provider.coincident(a, b, 'B')
    assert not provider.coincident(a, other, 'B')


def test_angle_with_swapped_arms_and_negated_value_is_coincident(provider):
    a = c('angle', 'AVC', 0.5, cid=0)
    b = c('angle', 'CVA', -0.5, cid=1)

    assert provider.coincident(a, b, 'C')


def test_unknown_kind_is_rejected(provider):
    with pytest.raises(KeyError):
        provider.kind('tangent')
