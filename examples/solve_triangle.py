"""Example pipeline: parse a sketch and place its points constructively."""

from geolocus import parse_program, validate
from geolocus.solver import SolveOptions, solve_sketch

TEXT = """
sketch "Right triangle"
origin A
points B, C
distance A-B = 4
distance A-C = 3
distance B-C = 5
angle B-A-C = 90
"""


def main() -> None:
    program = parse_program(TEXT)
    validate(program)
    report = solve_sketch(program, SolveOptions(refine=True))
    print("Status:", report.status)
    print("Plans tried:", report.plans_tried)
    if report.assignment is not None:
        print("Max residual:", report.assignment.max_residual)
    for name, (x, y) in report.positions.items():
        print(f"{name}: ({x:.6f}, {y:.6f})")


if __name__ == "__main__":
    main()
