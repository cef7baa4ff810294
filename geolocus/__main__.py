import argparse
import logging
import sys
from typing import Optional, Sequence

from geolocus import (
    parse_program,
    print_program,
    validate,
    normalize_point_coords,
)
from geolocus.solver import SolveOptions, options_from_program, solve_graph, translate

logger = logging.getLogger(__name__)

_EXIT_CODES = {"solved": 0, "not-found": 1, "ordering-failed": 2, "cancelled": 3}


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Solve geolocus sketches")
    parser.add_argument("path", help="Path to the sketch source file")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--max-plans",
        type=int,
        help="Maximum number of orders to try (default: sketch or solver default)",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        help="Search step budget across all orders",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Wall-clock budget in seconds",
    )
    parser.add_argument(
        "--samples",
        type=int,
        help="Number of positions to try for the orbiter point",
    )
    parser.add_argument(
        "--lookahead",
        action="store_true",
        help="Prefer candidates that leave the next point placeable",
    )
    parser.add_argument(
        "--refine",
        action="store_true",
        help="Polish the result with least squares",
    )
    parser.add_argument(
        "--show-plan",
        action="store_true",
        help="Print the order that produced the result",
    )
    parser.add_argument(
        "--normalize",
        action="store_true",
        help="Also print coordinates scaled into [0, 100]",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    with open(args.path) as fin:
        text = fin.read()

    logger.info("Parsing sketch from %s", args.path)
    program = parse_program(text)
    validate(program)
    logger.info("Validation succeeded")
    logger.debug("Sketch:\n%s", print_program(program))

    options = options_from_program(program, SolveOptions())
    if args.max_plans is not None:
        options.max_plans = args.max_plans
    if args.max_steps is not None:
        options.max_steps = args.max_steps
    if args.timeout is not None:
        options.timeout = args.timeout
    if args.samples is not None:
        options.orbiter_samples = args.samples
    if args.lookahead:
        options.lookahead = True
    if args.refine:
        options.refine = True

    graph = translate(program)
    report = solve_graph(graph, options)

    if program.title:
        print(f"Sketch: {program.title}")
    print(f"Status: {report.status}")
    print(f"Plans tried: {report.plans_tried}")
    print(f"Steps: {report.steps}")

    assignment = report.assignment
    if assignment is not None:
        if args.show_plan and assignment.plan is not None:
            print("Plan:")
            for entry in assignment.plan.entries:
                cids = ", ".join(f"#{cid}" for cid in entry.constraints)
                print(f"  {entry.point} ({entry.role}){': ' + cids if cids else ''}")
        print(f"Max residual: {assignment.max_residual:.3e}")
        print("Coordinates:")
        for name, (x, y) in assignment.positions.items():
            print(f"  {name}: ({x:.6f}, {y:.6f})")
        if args.normalize:
            print("Normed points:")
            for name, (x, y) in normalize_point_coords(assignment.positions).items():
                print(f"  {name}: ({x:.6f}, {y:.6f})")

    if report.warnings:
        print("Warnings:")
        for warning in report.warnings:
            print(f"  - {warning}")

    return _EXIT_CODES[report.status]


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
