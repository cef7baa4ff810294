import pytest

from geolocus.solver import ConstraintGraph, SketchError


def triangle():
    graph = ConstraintGraph()
    graph.add_point('A', (0, 0))
    graph.add_point('B')
    graph.add_point('C')
    graph.add_constraint('distance', ['A', 'B'], 5)
    graph.add_constraint('distance', ['A', 'C'], 5)
    graph.add_constraint('distance', ['B', 'C'], 5)
    return graph


def test_points_keep_insertion_order_and_origin_positions():
    graph = triangle()

    assert graph.point_order == ['A', 'B', 'C']
    assert graph.origins == ['A']
    assert graph.unknowns == ['B', 'C']
    assert graph.origin_positions() == {'A': (0.0, 0.0)}
    assert graph.points['A'].dof == 0
    assert graph.points['B'].dof == 2


def test_constraint_ids_follow_insertion_order():
    graph = triangle()

    assert [constraint.cid for constraint in graph.constraints] == [0, 1, 2]
    assert graph.points_of(2) == ('B', 'C')
    assert [constraint.cid for constraint in graph.constraints_of('B')] == [0, 2]


def test_target_of_needs_exactly_one_unknown_point():
    graph = triangle()

    assert graph.target_of(0, {'A'}) == 'B'
    assert graph.target_of(2, {'A'}) is None
    assert graph.target_of(0, {'A', 'B'}) is None


def test_evaluable_against_growing_known_set():
    graph = triangle()

    assert [(constraint.cid, target) for constraint, target in graph.evaluable({'A'})] == [(0, 'B'), (1, 'C')]
    assert [(constraint.cid, target) for constraint, target in graph.evaluable({'A', 'B'})] == [(1, 'C'), (2, 'C')]


def test_evaluable_for_ignores_the_point_itself_in_known():
    graph = triangle()

    assert [constraint.cid for constraint in graph.evaluable_for('C', {'A', 'B', 'C'})] == [1, 2]
    assert [constraint.cid for constraint in graph.evaluable_for('C', {'A'})] == [1]


def test_neighbors_and_closed_constraints():
    graph = triangle()

    assert graph.neighbors('B') == ['A', 'C']
    assert [constraint.cid for constraint in graph.closed_constraints({'A', 'B'})] == [0]


def test_duplicate_point_is_rejected():
    graph = triangle()

    with pytest.raises(SketchError, match='already defined'):
        graph.add_point('B')


@pytest.mark.parametrize(
    'kind, points, value, message',
    [
        ('tangent', ['A', 'B'], None, 'unknown constraint kind'),
        ('distance', ['A', 'B', 'C'], 1.0, 'expects 2 points'),
        ('distance', ['A', 'A'], 1.0, 'repeats a point'),
        ('distance', ['A', 'Z'], 1.0, 'unknown point Z'),
        ('distance', ['A', 'B'], None, 'requires a value'),
    ],
)
def test_invalid_constraints_are_rejected(kind, points, value, message):
    graph = triangle()

    with pytest.raises(SketchError, match=message):
        graph.add_constraint(kind, points, value)


def test_perpendicular_at_shared_vertex_points_to_angle():
    graph = triangle()

    with pytest.raises(SketchError, match='angle A-V-C = 90'):
        graph.add_constraint('perpendicular', ['A', 'B', 'B', 'C'])
