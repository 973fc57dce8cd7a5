"""Lua tokenizer.

Produces just enough of a token stream to find ``require`` calls reliably:
comments are dropped, string literals are decoded, and everything else is
classified as a name, keyword, number or operator. The accepted syntax follows
the configured dialect, so code using 5.3 operators fails under LuaJIT the
same way the real parser would reject it.
"""

import re
from dataclasses import dataclass

from ..config import LuaVersion
from ..errors import LuaSyntaxError

NAME = "name"
KEYWORD = "keyword"
STRING = "string"
NUMBER = "number"
OP = "op"
EOF = "eof"

_KEYWORDS_51 = frozenset(
    {
        "and", "break", "do", "else", "elseif", "end", "false", "for", "function", "if", "in",
        "local", "nil", "not", "or", "repeat", "return", "then", "true", "until", "while",
    }
)  # fmt: skip

_OPERATORS_51 = (
    "...", "..", "==", "~=", "<=", ">=",
    "+", "-", "*", "/", "%", "^", "#", "<", ">", "=",
    "(", ")", "{", "}", "[", "]", ";", ":", ",", ".",
)  # fmt: skip

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "\n": "\n",
}

_WHITESPACE = " \t\r\n\f\v"
_DIGITS = "0123456789"

_DEC_NUMBER = r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
_HEX_INT = r"0[xX][0-9a-fA-F]+"
_HEX_FLOAT = r"0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?\d+)?"
_LUAJIT_SUFFIX = r"(?:[uU]?[lL][lL]|[iI])?"

_ASCII_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
# LuaJIT treats every byte >= 0x80 as an identifier character
_LUAJIT_NAME = re.compile(r"[A-Za-z_\u0080-\U0010ffff][A-Za-z0-9_\u0080-\U0010ffff]*")


@dataclass(frozen=True)
class Token:
    """A lexical token.

    Attributes:
        kind: One of name, keyword, string, number, op, eof
        value: Decoded contents for strings, source text otherwise
        start: Offset of the first character in the source
        end: Offset just past the last character
        line: 1-based line of the first character
        column: 1-based column of the first character
    """

    kind: str
    value: str
    start: int
    end: int
    line: int
    column: int

    def is_op(self, symbol: str) -> bool:
        return self.kind == OP and self.value == symbol

    def is_keyword(self, word: str) -> bool:
        return self.kind == KEYWORD and self.value == word


@dataclass(frozen=True)
class Dialect:
    """Syntax switches derived from a LuaVersion."""

    keywords: frozenset[str]
    operators: tuple[str, ...]
    number: re.Pattern
    name: re.Pattern
    hex_escapes: bool
    skip_escapes: bool
    unicode_escapes: bool
    strict_escapes: bool

    @classmethod
    def for_version(cls, version: LuaVersion) -> "Dialect":
        keywords = set(_KEYWORDS_51)
        operators = list(_OPERATORS_51)
        number_forms = [_HEX_INT, _DEC_NUMBER]
        suffix = ""

        if version is not LuaVersion.LUA51:
            keywords.add("goto")
            operators.append("::")
            number_forms = [_HEX_FLOAT, _DEC_NUMBER]
        if version is LuaVersion.LUA53:
            operators.extend(["//", "<<", ">>", "&", "|", "~"])
        if version is LuaVersion.LUAJIT:
            suffix = _LUAJIT_SUFFIX

        number = re.compile(f"(?:{'|'.join(number_forms)}){suffix}")

        return cls(
            keywords=frozenset(keywords),
            # Longest operators first so '...' beats '..' beats '.'
            operators=tuple(sorted(operators, key=len, reverse=True)),
            number=number,
            name=_LUAJIT_NAME if version is LuaVersion.LUAJIT else _ASCII_NAME,
            hex_escapes=version is not LuaVersion.LUA51,
            skip_escapes=version is not LuaVersion.LUA51,
            unicode_escapes=version in (LuaVersion.LUA53, LuaVersion.LUAJIT),
            strict_escapes=version is not LuaVersion.LUA51,
        )


class Lexer:
    """Single-use tokenizer over one chunk of Lua source."""

    def __init__(self, source: str, lua_version: LuaVersion = LuaVersion.LUAJIT, chunk_name: str = "?"):
        self.source = source
        self.dialect = Dialect.for_version(lua_version)
        self.chunk_name = chunk_name
        self.pos = 0
        self.line = 1
        self.line_start = 0

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        self._skip_shebang()

        while True:
            self._skip_whitespace_and_comments()
            if self.pos >= len(self.source):
                tokens.append(self._token(EOF, "", self.pos, self.line, self._column(self.pos)))
                return tokens
            tokens.append(self._next_token())

    # -- scanning helpers --------------------------------------------------

    def _column(self, pos: int) -> int:
        return pos - self.line_start + 1

    def _error(self, detail: str, pos: int | None = None) -> LuaSyntaxError:
        pos = self.pos if pos is None else pos
        return LuaSyntaxError(self.chunk_name, self.line, self._column(pos), detail)

    def _token(self, kind: str, value: str, start: int, line: int, column: int) -> Token:
        return Token(kind=kind, value=value, start=start, end=self.pos, line=line, column=column)

    def _advance_to(self, pos: int) -> None:
        """Move to pos, keeping line bookkeeping for any newlines crossed."""
        newlines = self.source.count("\n", self.pos, pos)
        if newlines:
            self.line += newlines
            self.line_start = self.source.rfind("\n", self.pos, pos) + 1
        self.pos = pos

    def _peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.source[index] if index < len(self.source) else ""

    def _skip_shebang(self) -> None:
        if self.source.startswith("#"):
            end = self.source.find("\n")
            self._advance_to(len(self.source) if end == -1 else end)

    def _skip_whitespace_and_comments(self) -> None:
        source = self.source
        while self.pos < len(source):
            char = source[self.pos]
            if char in _WHITESPACE:
                self._advance_to(self.pos + 1)
            elif source.startswith("--", self.pos):
                self._skip_comment()
            else:
                return

    def _skip_comment(self) -> None:
        self._advance_to(self.pos + 2)
        if self._peek() == "[":
            level = self._long_bracket_level(self.pos)
            if level >= 0:
                self._read_long_bracket(level, "comment")
                return
        end = self.source.find("\n", self.pos)
        self._advance_to(len(self.source) if end == -1 else end)

    def _long_bracket_level(self, pos: int) -> int:
        """Level of a long bracket opening at pos, -1 if there is none."""
        cursor = pos + 1
        while cursor < len(self.source) and self.source[cursor] == "=":
            cursor += 1
        if cursor < len(self.source) and self.source[cursor] == "[":
            return cursor - pos - 1
        return -1

    def _read_long_bracket(self, level: int, what: str) -> str:
        start_line, start_column = self.line, self._column(self.pos)
        content_start = self.pos + level + 2

        # A newline directly after the opening bracket is not part of the content
        if self.source.startswith("\r\n", content_start) or self.source.startswith("\n\r", content_start):
            content_start += 2
        elif content_start < len(self.source) and self.source[content_start] in "\r\n":
            content_start += 1

        closing = "]" + "=" * level + "]"
        end = self.source.find(closing, content_start)
        if end == -1:
            raise LuaSyntaxError(self.chunk_name, start_line, start_column, f"unfinished long {what}")

        self._advance_to(end + len(closing))
        return self.source[content_start:end]

    # -- tokens -------------------------------------------------------------

    def _next_token(self) -> Token:
        start, line, column = self.pos, self.line, self._column(self.pos)
        char = self.source[start]

        if char in "\"'":
            return self._token(STRING, self._read_string(char), start, line, column)

        if char == "[":
            level = self._long_bracket_level(start)
            if level >= 0:
                return self._token(STRING, self._read_long_bracket(level, "string"), start, line, column)
            if self._peek(1) == "=":
                raise self._error("invalid long string delimiter near '[='")

        if char in _DIGITS or (char == "." and self._peek(1) != "" and self._peek(1) in _DIGITS):
            return self._read_number(start, line, column)

        match = self.dialect.name.match(self.source, start)
        if match:
            self._advance_to(match.end())
            word = match.group()
            kind = KEYWORD if word in self.dialect.keywords else NAME
            return self._token(kind, word, start, line, column)

        for operator in self.dialect.operators:
            if self.source.startswith(operator, start):
                self._advance_to(start + len(operator))
                return self._token(OP, operator, start, line, column)

        raise self._error(f"unexpected symbol near '{char}'")

    def _read_number(self, start: int, line: int, column: int) -> Token:
        match = self.dialect.number.match(self.source, start)
        end = match.end() if match else start + 1
        # Trailing identifier characters make the whole literal malformed ("1LL" in 5.1)
        tail = end
        while tail < len(self.source) and (self.source[tail].isalnum() or self.source[tail] in "_."):
            tail += 1
        if match is None or tail != end:
            raise self._error(f"malformed number near '{self.source[start:tail]}'", start)
        self._advance_to(end)
        return self._token(NUMBER, self.source[start:end], start, line, column)

    def _read_string(self, quote: str) -> str:
        source = self.source
        parts: list[str] = []
        self._advance_to(self.pos + 1)

        while True:
            if self.pos >= len(source):
                raise self._error("unfinished string near <eof>")
            char = source[self.pos]
            if char == quote:
                self._advance_to(self.pos + 1)
                return "".join(parts)
            if char in "\r\n":
                raise self._error("unfinished string")
            if char == "\\":
                parts.append(self._read_escape())
                continue
            parts.append(char)
            self._advance_to(self.pos + 1)

    def _read_escape(self) -> str:
        source = self.source
        escape_start = self.pos
        self._advance_to(self.pos + 1)
        char = self._peek()

        if not char:
            raise self._error("unfinished string near <eof>")

        if char == "\r":
            # \<CR><LF> is a single escaped line break
            self._advance_to(self.pos + (2 if self._peek(1) == "\n" else 1))
            return "\n"

        if char in _SIMPLE_ESCAPES:
            self._advance_to(self.pos + 1)
            return _SIMPLE_ESCAPES[char]

        if char in _DIGITS:
            digits = re.match(r"[0-9]{1,3}", source[self.pos : self.pos + 3]).group()
            if int(digits) > 255:
                raise self._error(f"decimal escape too large near '\\{digits}'", escape_start)
            self._advance_to(self.pos + len(digits))
            return chr(int(digits))

        if char == "x" and self.dialect.hex_escapes:
            digits = source[self.pos + 1 : self.pos + 3]
            if not re.fullmatch(r"[0-9a-fA-F]{2}", digits):
                raise self._error("hexadecimal digit expected", escape_start)
            self._advance_to(self.pos + 3)
            return chr(int(digits, 16))

        if char == "z" and self.dialect.skip_escapes:
            cursor = self.pos + 1
            while cursor < len(source) and source[cursor] in _WHITESPACE:
                cursor += 1
            self._advance_to(cursor)
            return ""

        if char == "u" and self.dialect.unicode_escapes:
            match = re.match(r"u\{([0-9a-fA-F]+)\}", source[self.pos :])
            if not match or int(match.group(1), 16) > 0x7FFFFFFF:
                raise self._error("invalid unicode escape", escape_start)
            self._advance_to(self.pos + match.end())
            code = int(match.group(1), 16)
            return chr(code) if code <= 0x10FFFF else "\ufffd"

        if self.dialect.strict_escapes:
            raise self._error(f"invalid escape sequence '\\{char}'", escape_start)

        self._advance_to(self.pos + 1)
        return char


def tokenize(source: str, lua_version: LuaVersion = LuaVersion.LUAJIT, chunk_name: str = "?") -> list[Token]:
    """Tokenize a chunk of Lua source.

    Args:
        source: Lua source text
        lua_version: Dialect whose syntax is accepted
        chunk_name: Name used in error messages (usually the file path)

    Returns:
        Tokens in source order, terminated by an eof token

    Raises:
        LuaSyntaxError: Source contains syntax the dialect does not accept
    """
    return Lexer(source, lua_version, chunk_name).tokenize()
