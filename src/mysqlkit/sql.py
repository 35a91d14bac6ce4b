"""
SQL parameter preparation for PyMySQL.

PyMySQL uses ``%s`` placeholders and runs every statement through Python
%-formatting when parameters are bound. This module lets callers write
``?`` placeholders and keeps literal ``%`` characters intact.

Main entry point:
- `prepare_query(sql, args)` - Normalize placeholders and arguments
"""
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class TokenType(Enum):
    """Token types identified during SQL parsing."""
    SQL_TEXT = auto()
    STRING_LITERAL = auto()
    POSITIONAL_PH = auto()      # %s or ?
    NAMED_PH = auto()           # %(name)s


@dataclass(slots=True)
class Token:
    """Token from SQL parsing."""
    type: TokenType
    text: str


# Backtick identifiers are kept whole so a ? inside one is not a placeholder
_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^'\\]|\\.|'')*'|"(?:[^"\\]|\\.|"")*"|`(?:[^`]|``)*`)
    |(?P<named>%\([^)]+\)s)
    |(?P<percent_s>%s)
    |(?P<qmark>\?)
""", re.VERBOSE | re.DOTALL)

_HAS_PLACEHOLDER = re.compile(r'%s|\?|%\([^)]+\)s')

# Bare percent signs in SQL text outside literals
_UNESCAPED_PERCENT = re.compile(r'(?<!%)%(?![%s(])')


def tokenize_sql(sql: str) -> list[Token]:
    """Split SQL into literal, placeholder and plain-text tokens."""
    tokens = []
    last_end = 0

    for match in _TOKENIZE.finditer(sql):
        start, end = match.span()
        if start > last_end:
            tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:start]))

        if match.group('string'):
            ttype = TokenType.STRING_LITERAL
        elif match.group('named'):
            ttype = TokenType.NAMED_PH
        else:
            ttype = TokenType.POSITIONAL_PH

        tokens.append(Token(ttype, match.group(0)))
        last_end = end

    if last_end < len(sql):
        tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:]))

    return tokens


def prepare_query(sql: str, args: tuple | list | dict | Any) -> tuple[str, tuple | dict]:
    """Normalize SQL and parameters for PyMySQL.

    Every ``%`` inside a quoted literal is doubled, since PyMySQL
    %-formats the whole statement once parameters are bound.

    Parameters
        sql: SQL query string using ``?``, ``%s`` or ``%(name)s`` placeholders
        args: Query parameters (tuple, list, dict, or scalar)

    Returns
        Tuple of (processed_sql, processed_args)
    """
    if not sql or not args:
        return sql, ()

    if not _HAS_PLACEHOLDER.search(sql):
        return sql, ()

    tokens = tokenize_sql(sql)
    if not any(t.type in {TokenType.POSITIONAL_PH, TokenType.NAMED_PH} for t in tokens):
        return sql, ()

    if isinstance(args, list):
        args = tuple(args)
    elif not isinstance(args, tuple | dict):
        args = (args,)

    # A single tuple/list argument holds the parameters themselves
    if isinstance(args, tuple) and len(args) == 1 and isinstance(args[0], list | tuple):
        args = tuple(args[0])

    result = []
    for token in tokens:
        if token.type == TokenType.POSITIONAL_PH:
            result.append('%s')
        elif token.type == TokenType.NAMED_PH:
            result.append(token.text)
        elif token.type == TokenType.STRING_LITERAL:
            result.append(token.text.replace('%', '%%'))
        else:
            result.append(_UNESCAPED_PERCENT.sub('%%', token.text))
    return ''.join(result), args
