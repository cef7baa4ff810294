from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Span:
    line: int
    col: int


@dataclass
class Stmt:
    kind: str  # 'sketch' | 'origin' | 'points' | 'constraint' | 'solver'
    span: Span
    data: Dict[str, Any] = field(default_factory=dict)
    opts: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Program:
    stmts: List[Stmt] = field(default_factory=list)

    @property
    def title(self) -> Optional[str]:
        for stmt in self.stmts:
            if stmt.kind == 'sketch':
                return stmt.data.get('title')
        return None

    @property
    def constraint_stmts(self) -> List[Stmt]:
        return [stmt for stmt in self.stmts if stmt.kind == 'constraint']

    def solver_opts(self) -> Dict[str, Any]:
        """Merged options of every ``solver`` statement, later ones winning."""
        merged: Dict[str, Any] = {}
        for stmt in self.stmts:
            if stmt.kind == 'solver':
                merged.update(stmt.opts)
        return merged
