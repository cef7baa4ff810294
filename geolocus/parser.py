import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from .ast import Program, Span, Stmt
from .lexer import Token, tokenize_line

_ERROR_LOC_RE = re.compile(r"\[line (\d+), col (\d+)\]")


def _at(tok: Token) -> str:
    return f'[line {tok[2]}, col {tok[3]}]'


class TokenStream:
    """Tokens of one statement line with a read position."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    @property
    def current(self) -> Optional[Token]:
        return self.lookahead(0)

    def lookahead(self, offset: int) -> Optional[Token]:
        idx = self.pos + offset
        return self.tokens[idx] if idx < len(self.tokens) else None

    def accept(self, kind: str) -> Optional[Token]:
        tok = self.current
        if tok is not None and tok[0] == kind:
            self.pos += 1
            return tok
        return None

    def require(self, kind: str) -> Token:
        tok = self.accept(kind)
        if tok is not None:
            return tok
        tok = self.current
        if tok is not None:
            raise SyntaxError(f'{_at(tok)} expected {kind}, got {tok[0]}')
        last = self.tokens[-1]
        end = last[3] + len(last[1])
        raise SyntaxError(f'[line {last[2]}, col {end}] unexpected end of line: expected {kind}')


def _keyword(stream: TokenStream) -> Tuple[str, Token]:
    """Read a possibly dashed keyword such as ``line-distance``."""
    head = stream.require('ID')
    parts = [head[1].lower()]
    while True:
        dash, word = stream.lookahead(0), stream.lookahead(1)
        if dash is None or word is None or dash[0] != 'DASH' or word[0] != 'ID' or not word[1].islower():
            return '-'.join(parts), head
        parts.append(word[1])
        stream.pos += 2


def _point(stream: TokenStream) -> Tuple[str, Span]:
    tok = stream.require('ID')
    return tok[1].upper(), Span(tok[2], tok[3])


def _chain(stream: TokenStream) -> Tuple[List[str], Span]:
    """``A`` or ``A-B`` or ``A-B-C``..."""
    first, span = _point(stream)
    names = [first]
    while stream.accept('DASH'):
        names.append(_point(stream)[0])
    return names, span


def _number(stream: TokenStream) -> float:
    sign = -1.0 if stream.accept('DASH') else 1.0
    return sign * float(stream.require('NUMBER')[1])


def _coords(stream: TokenStream) -> Tuple[float, float]:
    stream.require('LPAREN')
    x = _number(stream)
    stream.require('COMMA')
    y = _number(stream)
    stream.require('RPAREN')
    return x, y


def _option_value(stream: TokenStream) -> Any:
    tok = stream.current
    if tok is None:
        last = stream.tokens[-1]
        raise SyntaxError(f'{_at(last)} missing option value')
    if tok[0] == 'STRING':
        stream.pos += 1
        return tok[1]
    if tok[0] in ('NUMBER', 'DASH'):
        value = _number(stream)
        digits = stream.tokens[stream.pos - 1][1]
        if not any(ch in digits for ch in '.eE'):
            return int(value)
        return value
    if tok[0] == 'ID':
        stream.pos += 1
        return {'true': True, 'false': False}.get(tok[1].lower(), tok[1])
    raise SyntaxError(f'{_at(tok)} invalid option value token {tok[0]}')


def _options(stream: TokenStream) -> Dict[str, Any]:
    """``[key=value, ...]`` if present, else an empty dict."""
    opts: Dict[str, Any] = {}
    if not stream.accept('LBRACK') or stream.accept('RBRACK'):
        return opts
    while True:
        key = stream.require('ID')
        if key[1] in opts:
            raise SyntaxError(f"{_at(key)} duplicate option '{key[1]}'")
        stream.require('EQUAL')
        opts[key[1]] = _option_value(stream)
        if stream.accept('RBRACK'):
            return opts
        if stream.accept('COMMA'):
            continue
        tok = stream.current
        if tok is None:
            raise SyntaxError(f'{_at(key)} unterminated options block')
        raise SyntaxError(
            f"{_at(tok)} unexpected value '{tok[1]}' after option '{key[1]}'. "
            "Did you forget to separate options with a comma or close the options block?"
        )


def _sketch(stream: TokenStream, head: Token) -> Stmt:
    title = stream.require('STRING')
    return Stmt('sketch', Span(title[2], title[3]), {'title': title[1]})


def _origin(stream: TokenStream, head: Token) -> Stmt:
    name, span = _point(stream)
    at = _coords(stream) if stream.accept('EQUAL') else (0.0, 0.0)
    return Stmt('origin', span, {'point': name, 'at': at}, _options(stream))


def _points(stream: TokenStream, head: Token) -> Stmt:
    first, span = _point(stream)
    ids = [first]
    while stream.accept('COMMA'):
        ids.append(_point(stream)[0])
    return Stmt('points', span, {'ids': ids})


def _solver(stream: TokenStream, head: Token) -> Stmt:
    tok = stream.current
    if tok is None or tok[0] != 'LBRACK':
        raise SyntaxError(f"{_at(tok or head)} solver expects an options block '[...]'")
    return Stmt('solver', Span(head[2], head[3]), {}, _options(stream))


def _constraint(stream: TokenStream, kind: str) -> Stmt:
    subject, span = _chain(stream)
    reference = _chain(stream)[0] if stream.accept('COLON') else []
    value = _number(stream) if stream.accept('EQUAL') else None
    data = {
        'kind': kind,
        'points': subject + reference,
        'split': len(subject) if reference else None,
        'value': value,
    }
    return Stmt('constraint', span, data, _options(stream))


_STATEMENTS: Dict[str, Callable[[TokenStream, Token], Stmt]] = {
    'sketch': _sketch,
    'origin': _origin,
    'points': _points,
    'solver': _solver,
}


def parse_stmt(tokens: List[Token]) -> Optional[Stmt]:
    if not tokens:
        return None
    if tokens[0][0] != 'ID':
        raise SyntaxError(f'{_at(tokens[0])} expected statement keyword')
    stream = TokenStream(tokens)
    keyword, head = _keyword(stream)
    handler = _STATEMENTS.get(keyword)
    stmt = handler(stream, head) if handler else _constraint(stream, keyword)
    extra = stream.current
    if extra is not None:
        raise SyntaxError(f'{_at(extra)} unexpected token {extra[1]!r}')
    return stmt


def _with_caret(err: SyntaxError, line_text: str) -> SyntaxError:
    message = str(err)
    match = _ERROR_LOC_RE.search(message)
    if match is None or '\n' in message or not line_text.strip():
        return err
    col = max(int(match.group(2)), 1)
    return SyntaxError(f"{message}\n    {line_text.rstrip()}\n    {' ' * (col - 1)}^")


def parse_program(text: str) -> Program:
    """Parse sketch source into a :class:`Program`.

    Syntax errors carry a ``[line N, col M]`` prefix, followed by the offending
    line and a caret under the column.
    """
    prog = Program()
    for line_no, raw in enumerate(text.splitlines(), start=1):
        try:
            stmt = parse_stmt(tokenize_line(raw, line_no))
        except SyntaxError as err:
            raise _with_caret(err, raw) from None
        if stmt is not None:
            prog.stmts.append(stmt)
    return prog
