"""Example: bound a search with a step budget or an external token."""

import math

from geolocus.solver import CancellationToken, ConstraintGraph, SolveOptions, solve_graph


def build_spiral(count: int) -> ConstraintGraph:
    """Spiral of Theodorus: unit steps, each hypotenuse one root longer."""

    graph = ConstraintGraph()
    graph.add_point("O", (0.0, 0.0))
    graph.add_point("Q0")
    graph.add_constraint("distance", ["O", "Q0"], 1.0)
    for i in range(1, count + 1):
        prev, tip = f"Q{i - 1}", f"Q{i}"
        graph.add_point(tip)
        graph.add_constraint("distance", [prev, tip], 1.0)
        graph.add_constraint("distance", ["O", tip], math.sqrt(i + 1))
    return graph


def main() -> None:
    graph = build_spiral(12)

    report = solve_graph(graph)
    print("Unbounded:", report.status, "after", report.steps, "steps")

    report = solve_graph(graph, SolveOptions(max_steps=5))
    print("Five steps:", report.status, "budget exhausted =", report.budget_exhausted)

    token = CancellationToken()
    token.cancel()
    report = solve_graph(graph, cancellation=token)
    print("Cancelled token:", report.status)


if __name__ == "__main__":
    main()
