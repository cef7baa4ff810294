from typing import Dict, Iterable, List, Optional

from .ast import Program, Stmt


def _num(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _chain(ids: Iterable[str]) -> str:
    return "-".join(ids)


def _format_opts(opts: Dict[str, object]) -> str:
    if not opts:
        return ""
    parts = []
    for key in sorted(opts.keys()):
        value = opts[key]
        if isinstance(value, bool):
            rendered = "true" if value else "false"
        elif isinstance(value, (int, float)):
            rendered = _num(value)
        else:
            text = str(value)
            rendered = text if text.isidentifier() else f'"{text}"'
        parts.append(f"{key}={rendered}")
    return " [" + ", ".join(parts) + "]"


def _constraint_line(stmt: Stmt) -> str:
    points: List[str] = list(stmt.data["points"])
    split: Optional[int] = stmt.data.get("split")
    if split:
        body = f"{_chain(points[:split])} : {_chain(points[split:])}"
    else:
        body = _chain(points)
    line = f"{stmt.data['kind']} {body}"
    if stmt.data.get("value") is not None:
        line += f" = {_num(stmt.data['value'])}"
    return line


def print_program(prog: Program) -> str:
    lines = []
    for stmt in prog.stmts:
        line: str
        if stmt.kind == "sketch":
            line = f"sketch \"{stmt.data['title']}\""
        elif stmt.kind == "origin":
            x, y = stmt.data["at"]
            line = f"origin {stmt.data['point']} = ({_num(x)}, {_num(y)})"
        elif stmt.kind == "points":
            line = "points " + ", ".join(stmt.data["ids"])
        elif stmt.kind == "constraint":
            line = _constraint_line(stmt)
        elif stmt.kind == "solver":
            if not stmt.opts:
                raise ValueError("solver statement requires at least one option")
            lines.append("solver" + _format_opts(stmt.opts))
            continue
        else:
            raise ValueError(f"unknown statement kind {stmt.kind!r}")

        line += _format_opts(stmt.opts)
        lines.append(line)

    return "\n".join(lines) + "\n"


def format_stmt(stmt: Stmt) -> str:
    """Return a single-line representation of ``stmt``."""

    return print_program(Program(stmts=[stmt])).strip()
