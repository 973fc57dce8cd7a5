"""Discovery of ``require`` calls in Lua source."""

from dataclasses import dataclass

from ..config import LuaVersion
from .lexer import EOF
from .lexer import NAME
from .lexer import OP
from .lexer import STRING
from .lexer import Token
from .lexer import tokenize

REQUIRE = "require"

# Tokens after which a `require` name is not a call of the global require
_FIELD_ACCESS = (".", ":")
_DECLARATIONS = ("local", "function")


@dataclass(frozen=True)
class RequireCall:
    """A call of the global ``require`` found in source.

    Attributes:
        name: Module name when the argument is a single string literal, else None
        expression: Argument source text exactly as written, e.g. ``("foo.bar")``
        line: Line of the ``require`` token
        column: Column of the ``require`` token
    """

    name: str | None
    expression: str
    line: int
    column: int

    @property
    def is_literal(self) -> bool:
        return self.name is not None


def _matching_close(tokens: list[Token], open_index: int) -> int:
    """Index of the token closing the bracket at open_index."""
    pairs = {"(": ")", "{": "}", "[": "]"}
    stack = [pairs[tokens[open_index].value]]

    for index in range(open_index + 1, len(tokens)):
        token = tokens[index]
        if token.kind == EOF:
            break
        if token.kind != OP:
            continue
        if token.value in pairs:
            stack.append(pairs[token.value])
        elif token.value == stack[-1]:
            stack.pop()
            if not stack:
                return index

    return len(tokens) - 1


def _is_global_require(tokens: list[Token], index: int) -> bool:
    token = tokens[index]
    if token.kind != NAME or token.value != REQUIRE:
        return False
    if index == 0:
        return True
    previous = tokens[index - 1]
    if any(previous.is_op(symbol) for symbol in _FIELD_ACCESS):
        return False
    return not any(previous.is_keyword(word) for word in _DECLARATIONS)


def find_requires(
    source: str,
    lua_version: LuaVersion = LuaVersion.LUAJIT,
    chunk_name: str = "?",
) -> list[RequireCall]:
    """Find every call of the global ``require`` in a chunk.

    Recognised forms:
        require "name"          -- string call sugar
        require("name")         -- parenthesised single literal
        require(expr), require{...}  -- non-literal, name is None

    A bare ``require`` that is not called (``local r = require``) and
    method or field calls (``obj.require("x")``) are not reported.

    Raises:
        LuaSyntaxError: Source cannot be tokenized for the dialect
    """
    tokens = tokenize(source, lua_version, chunk_name)
    calls: list[RequireCall] = []

    for index, token in enumerate(tokens):
        if not _is_global_require(tokens, index):
            continue

        argument = tokens[index + 1]

        if argument.kind == STRING:
            expression = source[argument.start : argument.end]
            calls.append(RequireCall(argument.value, expression, token.line, token.column))
            continue

        if argument.is_op("(") or argument.is_op("{"):
            close = _matching_close(tokens, index + 1)
            expression = source[argument.start : tokens[close].end]
            inner = tokens[index + 2 : close] if argument.is_op("(") else []
            name = inner[0].value if len(inner) == 1 and inner[0].kind == STRING else None
            calls.append(RequireCall(name, expression, token.line, token.column))

    return calls
