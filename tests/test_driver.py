import math

import pytest

from geolocus import parse_program
from geolocus.solver import (
    CancellationToken,
    ConstraintGraph,
    SolveOptions,
    solve_graph,
    solve_sketch,
)


def build(origins, points, constraints):
    graph = ConstraintGraph()
    for name, position in origins.items():
        graph.add_point(name, position)
    for name in points:
        graph.add_point(name)
    for kind, refs, value in constraints:
        graph.add_constraint(kind, list(refs), value)
    return graph


def triangle():
    return build(
        {'A': (0.0, 0.0)},
        ['B', 'C'],
        [('distance', 'AB', 5.0), ('distance', 'AC', 5.0), ('distance', 'BC', 5.0)],
    )


def test_triangle_is_solved():
    report = solve_graph(triangle())

    assert report.status == 'solved'
    assert report.success
    assert report.plans_tried == 1
    assert report.positions['C'] == pytest.approx((2.5, 5 * math.sqrt(3) / 2))


def test_triangle_result_is_one_of_the_two_mirror_images_consistently():
    first = solve_graph(triangle()).positions['C']
    second = solve_graph(triangle()).positions['C']

    assert first == second
    assert abs(first[1]) == pytest.approx(5 * math.sqrt(3) / 2)


def test_under_constrained_reports_ordering_failed():
    report = solve_graph(build({'A': (0.0, 0.0)}, ['B'], [('distance', 'AB', 5.0)]))

    assert report.status == 'ordering-failed'
    assert report.plans_tried == 0
    assert report.assignment is None


def test_inconsistent_reports_not_found():
    graph = build({'A': (0.0, 0.0)}, ['B'], [('distance', 'AB', 5.0), ('distance', 'AB', 3.0)])

    report = solve_graph(graph)

    assert report.status == 'not-found'
    assert report.plans_tried == 1
    assert not report.budget_exhausted


def test_cancelled_token_reports_cancelled():
    token = CancellationToken()
    token.cancel()

    report = solve_graph(triangle(), cancellation=token)

    assert report.status == 'cancelled'
    assert report.assignment is None


def test_step_budget_reports_not_found_within_budget():
    report = solve_graph(triangle(), SolveOptions(max_steps=1))

    assert report.status == 'not-found'
    assert report.budget_exhausted
    assert any('budget' in warning for warning in report.warnings)


def test_later_plan_is_tried_when_first_fails():
    h = math.sqrt(18.75)
    # B may only sit near X, which the sample on +x of the (A, B) order misses
    graph = build(
        {'A': (0.0, 0.0), 'X': (-2.5, -h)},
        ['B', 'C', 'D'],
        [
            ('distance', 'AB', 5.0),
            ('distance', 'AC', 5.0),
            ('distance', 'BC', 5.0),
            ('angle', 'BAC', math.radians(60)),
            ('distance', 'CD', 5.0),
            ('distance', 'AD', 5.0),
            ('within', 'BX', 1.0),
        ],
    )

    report = solve_graph(graph)

    assert report.status == 'solved'
    assert report.plans_tried == 2
    assert report.assignment.plan.orbiter == 'D'
    assert report.positions['D'] == pytest.approx((5.0, 0.0))
    assert report.positions['B'] == pytest.approx((-2.5, -h))


def test_plan_budget_limits_attempts():
    graph = build(
        {'A': (0.0, 0.0), 'X': (-2.5, -math.sqrt(18.75))},
        ['B', 'C', 'D'],
        [
            ('distance', 'AB', 5.0),
            ('distance', 'AC', 5.0),
            ('distance', 'BC', 5.0),
            ('angle', 'BAC', math.radians(60)),
            ('distance', 'CD', 5.0),
            ('distance', 'AD', 5.0),
            ('within', 'BX', 1.0),
        ],
    )

    report = solve_graph(graph, SolveOptions(max_plans=1))

    assert report.status == 'not-found'
    assert report.plans_tried == 1
    assert report.budget_exhausted
    assert 'plan budget exhausted (max_plans=1)' in report.warnings


def test_refine_keeps_solution_valid():
    report = solve_graph(triangle(), SolveOptions(refine=True))

    assert report.status == 'solved'
    assert report.assignment.max_residual < 1e-9


def test_solve_sketch_applies_solver_statement():
    program = parse_program(
        '\n'.join(
            [
                'sketch "Kite"',
                'origin A = (0, 0)',
                'origin X = (0, 5)',
                'points B, C',
                'distance A-B = 5',
                'distance A-C = 5',
                'distance B-C = 5',
                'within B : X = 1',
                'solver [orbiter_samples=4]',
            ]
        )
    )

    assert solve_sketch(program).status == 'solved'
    assert solve_sketch(program, SolveOptions()).positions['B'] == pytest.approx((0.0, 5.0), abs=1e-9)


def spiral_with_loose_end(count):
    # every order stalls on Z, so the planner walks all (root, orbiter) pairs
    graph = build({'O': (0.0, 0.0)}, ['Q0', 'Z'], [])
    graph.add_constraint('distance', ['O', 'Q0'], 1.0)
    for i in range(1, count + 1):
        graph.add_point(f'Q{i}')
        graph.add_constraint('distance', [f'Q{i - 1}', f'Q{i}'], 1.0)
        graph.add_constraint('distance', ['O', f'Q{i}'], math.sqrt(i + 1))
    graph.add_constraint('distance', ['O', 'Z'], 2.0)
    return graph


def test_cancelled_token_stops_planning():
    token = CancellationToken()
    token.cancel()

    report = solve_graph(
        spiral_with_loose_end(120), SolveOptions(timeout=0.01, max_steps=5), cancellation=token
    )

    assert report.status == 'cancelled'
    assert report.plans_tried == 0


def test_step_budget_bounds_planning():
    report = solve_graph(spiral_with_loose_end(120), SolveOptions(max_steps=5))

    assert report.status == 'not-found'
    assert report.plans_tried == 0
    assert report.budget_exhausted
    assert 'search budget exhausted (steps)' in report.warnings


def test_unbounded_planning_of_loose_end_is_ordering_failed():
    report = solve_graph(spiral_with_loose_end(6))

    assert report.status == 'ordering-failed'
    assert not report.budget_exhausted


def test_rigid_figure_between_two_origins_is_missed_by_orbiter_samples():
    # B lies on a circle around A, but where it sits is fixed by D's far end
    graph = build(
        {'A': (0.0, 0.0), 'D': (10.0, 0.0)},
        ['B', 'C'],
        [
            ('distance', 'AB', 5.0),
            ('distance', 'DC', 5.0),
            ('distance', 'BC', 4.0),
            ('orientation', 'BC', 0.0),
        ],
    )

    report = solve_graph(graph, SolveOptions(orbiter_samples=8))

    assert report.status == 'not-found'
    assert report.plans_tried == 1
    assert not report.budget_exhausted
