from copy import deepcopy
from typing import Dict, List, Set

from .ast import Program, Span, Stmt
from .geometry import KINDS
from .solver import SketchError, translate
from .solver.translator import ANGLE_KINDS, ANGLE_UNITS, SOLVER_OPTION_NAMES

_CONSTRAINT_OPTS = {'unit', 'label'}
_INT_SOLVER_OPTS = {'max_plans', 'max_steps', 'orbiter_samples'}
_BOOL_SOLVER_OPTS = {'lookahead', 'refine'}


class ValidationError(Exception):
    pass


def _fail(sp: Span, message: str) -> ValidationError:
    return ValidationError(f'[line {sp.line}, col {sp.col}] {message}')


def _declare(name: str, sp: Span, declared: Set[str]) -> None:
    if name in declared:
        raise _fail(sp, f'point {name} declared twice')
    declared.add(name)


def _check_constraint(s: Stmt, declared: Set[str]) -> None:
    kind_name = s.data['kind']
    points: List[str] = s.data['points']
    kind = KINDS.get(kind_name)
    if kind is None:
        raise _fail(s.span, f'unknown constraint kind "{kind_name}"')
    if len(points) != kind.arity:
        raise _fail(s.span, f'{kind_name} expects {kind.arity} points, got {len(points)}')
    if len(set(points)) != len(points):
        raise _fail(s.span, f'{kind_name} points must be distinct: {kind.description}')
    for name in points:
        if name not in declared:
            raise _fail(s.span, f'point {name} is used before it is declared')
    if kind.needs_value and s.data.get('value') is None:
        raise _fail(s.span, f'{kind_name} requires "= value"')
    if not kind.needs_value and s.data.get('value') is not None:
        raise _fail(s.span, f'{kind_name} does not take a value')
    for key, val in s.opts.items():
        if key not in _CONSTRAINT_OPTS:
            raise _fail(s.span, f'unknown option "{key}" for {kind_name}')
        if key == 'unit':
            if kind_name not in ANGLE_KINDS:
                raise _fail(s.span, f'{kind_name} does not take a unit')
            if val not in ANGLE_UNITS:
                raise _fail(s.span, 'unit must be deg|rad')
    if kind_name in ('distance', 'within') and s.data['value'] < 0:
        raise _fail(s.span, f'{kind_name} must be non-negative')


def _check_solver(s: Stmt) -> None:
    for key, val in s.opts.items():
        if key not in SOLVER_OPTION_NAMES:
            raise _fail(s.span, f'unknown solver option "{key}"')
        if key in _BOOL_SOLVER_OPTS:
            if not isinstance(val, bool):
                raise _fail(s.span, f'solver option "{key}" must be boolean')
        elif key in _INT_SOLVER_OPTS:
            if isinstance(val, bool) or not isinstance(val, int) or val < 0:
                raise _fail(s.span, f'solver option "{key}" must be a non-negative integer')
        elif isinstance(val, bool) or not isinstance(val, (int, float)) or val < 0:
            raise _fail(s.span, f'solver option "{key}" must be a non-negative number')
    if s.opts.get('orbiter_samples') == 0:
        raise _fail(s.span, 'solver option "orbiter_samples" must be at least 1')


def validate(prog: Program) -> None:
    declared: Set[str] = set()
    titles: Dict[str, Span] = {}
    for s in prog.stmts:
        k = s.kind
        if k == 'sketch':
            if titles:
                raise _fail(s.span, 'only one sketch title is allowed')
            titles[s.data['title']] = s.span
        elif k == 'origin':
            _declare(s.data['point'], s.span, declared)
            if s.opts:
                raise _fail(s.span, f'origin does not support option "{next(iter(s.opts))}"')
        elif k == 'points':
            for name in s.data['ids']:
                _declare(name, s.span, declared)
        elif k == 'constraint':
            _check_constraint(s, declared)
        elif k == 'solver':
            _check_solver(s)

    try:
        translate(deepcopy(prog))
    except SketchError as exc:
        if exc.stmt is not None:
            span = exc.stmt.span
            raise ValidationError(f'[line {span.line}, col {span.col}] {exc}') from exc
        raise ValidationError(str(exc)) from exc
