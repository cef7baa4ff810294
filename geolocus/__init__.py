from .parser import parse_program
from .validate import validate, ValidationError
from .printer import print_program, format_stmt
from .ast import Program, Stmt, Span
from .geometry import GeometryProvider, Locus, register_kind
from .solver import (
    translate,
    plan_orders,
    solve,
    solve_graph,
    solve_sketch,
    SolveOptions,
    SolveReport,
    Assignment,
    Failure,
    ConstraintGraph,
    OrderPlan,
    CancellationToken,
    Budget,
    GeometryConfig,
    get_geometry_config,
    set_geometry_config,
    normalize_point_coords,
)

__all__ = [
    'parse_program',
    'validate',
    'ValidationError',
    'print_program',
    'format_stmt',
    'Program',
    'Stmt',
    'Span',
    'GeometryProvider',
    'Locus',
    'register_kind',
    'translate',
    'plan_orders',
    'solve',
    'solve_graph',
    'solve_sketch',
    'SolveOptions',
    'SolveReport',
    'Assignment',
    'Failure',
    'ConstraintGraph',
    'OrderPlan',
    'CancellationToken',
    'Budget',
    'GeometryConfig',
    'get_geometry_config',
    'set_geometry_config',
    'normalize_point_coords',
]
