import re
from typing import List, Tuple

Token = Tuple[str, str, int, int]  # (type, value, line, col)

SYMBOLS = {
    '[': 'LBRACK',
    ']': 'RBRACK',
    '(': 'LPAREN',
    ')': 'RPAREN',
    ',': 'COMMA',
    '-': 'DASH',
    '=': 'EQUAL',
    ':': 'COLON',
}

# order matters: numbers before identifiers so "1e3" stays one token
_TOKEN_RE = re.compile(
    r'''
    (?P<WS>[ \t\r]+)
  | (?P<COMMENT>\#.*)
  | (?P<STRING>"(?:[^"\\]|\\.)*")
  | (?P<NUMBER>(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<ID>[A-Za-z][A-Za-z0-9_]*)
  | (?P<SYMBOL>[\[\](),\-=:])
    ''',
    re.VERBOSE,
)


def tokenize_line(s: str, line_no: int) -> List[Token]:
    """Split one sketch line into tokens; ``#`` starts a comment."""

    tokens: List[Token] = []
    pos = 0
    while pos < len(s):
        col = pos + 1
        m = _TOKEN_RE.match(s, pos)
        if m is None:
            if s[pos] == '"':
                raise SyntaxError(f'[line {line_no}, col {col}] unterminated string literal')
            raise SyntaxError(f'[line {line_no}, col {col}] unexpected character: {s[pos]!r}')
        kind = m.lastgroup
        text = m.group(0)
        pos = m.end()
        if kind == 'COMMENT':
            break
        if kind == 'WS':
            continue
        if kind == 'STRING':
            text = bytes(text[1:-1], 'utf-8').decode('unicode_escape')
        elif kind == 'SYMBOL':
            kind = SYMBOLS[text]
        tokens.append((kind, text, line_no, col))
    return tokens

