import math

import pytest

from geolocus import parse_program
from geolocus.solver import SketchError, SolveOptions, options_from_program, translate


def test_translate_builds_graph_in_statement_order():
    prog = parse_program(
        'origin A\n'
        'origin B = (4, 0)\n'
        'points C, D\n'
        'distance A-C = 3\n'
        'distance B-C = 5 [label=hyp]\n'
        'midpoint D : A-B\n'
    )

    graph = translate(prog)

    assert graph.point_order == ['A', 'B', 'C', 'D']
    assert graph.origins == ['A', 'B']
    assert graph.origin_positions() == {'A': (0.0, 0.0), 'B': (4.0, 0.0)}
    assert [c.kind for c in graph.constraints] == ['distance', 'distance', 'midpoint']
    assert graph.constraint(1).label == 'hyp'
    assert graph.constraint(2).points == ('D', 'A', 'B')
    assert graph.constraint(2).value is None


@pytest.mark.parametrize(
    'line, expected',
    [
        ('angle B-A-C = 90', math.pi / 2),
        ('angle B-A-C = 90 [unit=deg]', math.pi / 2),
        ('angle B-A-C = 0.25 [unit=rad]', 0.25),
        ('orientation A-B = -45', -math.pi / 4),
    ],
)
def test_angle_values_become_radians(line, expected):
    graph = translate(parse_program('origin A\npoints B, C\n' + line))
    assert graph.constraint(0).value == pytest.approx(expected)


def test_distance_value_is_not_converted():
    graph = translate(parse_program('origin A\npoints B\ndistance A-B = 90'))
    assert graph.constraint(0).value == 90.0


def test_translate_errors_carry_statement():
    prog = parse_program('origin A\npoints B\ndistance A-C = 1')

    with pytest.raises(SketchError) as exc:
        translate(prog)

    assert 'unknown point C' in str(exc.value)
    assert exc.value.stmt is prog.stmts[2]


def test_options_from_program_overlays_base():
    prog = parse_program('origin A\nsolver [max_plans=2]\nsolver [lookahead=true]')

    options = options_from_program(prog, SolveOptions(max_plans=9, refine=True))

    assert options.max_plans == 2
    assert options.lookahead is True
    assert options.refine is True


def test_options_from_program_rejects_unknown_key():
    with pytest.raises(SketchError, match='unknown solver option'):
        options_from_program(parse_program('solver [warp=1]'))
