"""
Lexical analyzer for the minibasic scripting dialect.

This module turns raw program text into a flat list of tokens:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Immutable (kind, lexeme) pair with its source location.
    LexError: Raised when no lexical rule matches the remaining input.
    Lexer: Applies the ordered rule table to a CharacterStream.

Rule priority:
    The rules below are tried top to bottom against the unconsumed remainder of
    the source and the first one that matches wins:

        1. ``REM`` line comment (case-insensitive), skipped
        2. identifier or keyword, keywords lowercased
        3. ``<>``, ``><``, ``<=``, ``>=``, ``:=``
        4. single-character symbols ``+ - * / = < > ( ) : ; ,``
        5. real literal ``digits.digits``
        6. integer literal
        7. double-quoted string, no escapes
        8. whitespace, skipped

    Anything else raises LexError.

Example:
    >>> [tok.pair() for tok in tokenize("x := 5")]
    [('id', 'x'), ('assign', ':='), ('integer', '5')]

Exports:
    - CharacterStream
    - Token
    - LexError
    - Lexer
    - tokenize
"""

import re
from collections.abc import Callable
from typing import Any

from minibasic.minibasic_constants import (
    ID,
    INTEGER,
    KEYWORD,
    KEYWORDS,
    MULTI_CHAR_TOKENS,
    REAL,
    SINGLE_CHAR_TOKENS,
    STRING,
)

ERROR_CONTEXT_LENGTH = 10


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def skip(self, count: int) -> str:
        """Consumes ``count`` characters and returns them as one string."""
        return "".join(self.next() for _ in range(count))

    def peek(self, offset: int = 0) -> str:
        """Returns the character ``offset`` places ahead, or an empty string if out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def remaining(self) -> str:
        """Returns the unconsumed suffix of the source."""
        return self.source[self.position :]

    def end_of_file(self) -> bool:
        """Returns True once every character has been consumed."""
        return self.position >= len(self.source)


class Token:
    """An immutable lexical token.

    Attributes:
        kind (str): One of ``TOKEN_KINDS`` (e.g. 'keyword', 'id', 'integer').
        lexeme (str): The matched text; lowercased for keywords, unquoted for strings.
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
    """

    __slots__ = ("kind", "lexeme", "line", "col")

    def __init__(self, kind: str, lexeme: str, line: int = 0, col: int = 0):
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "lexeme", lexeme)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable; cannot set {name!r}")

    def pair(self) -> tuple[str, str]:
        """Returns the position-free ``(kind, lexeme)`` view of the token."""
        return (self.kind, self.lexeme)

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.lexeme})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.kind == other.kind
            and self.lexeme == other.lexeme
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.lexeme, self.line, self.col))


class LexError(Exception):
    """Raised when no lexical rule matches at the current input position.

    Attributes:
        context (str): Up to the first 10 characters of the unmatched remainder.
        line (int): Line where the unmatched input starts.
        col (int): Column where the unmatched input starts.
    """

    def __init__(self, context: str, line: int = 0, col: int = 0):
        self.context = context
        self.line = line
        self.col = col
        super().__init__(
            f"Unrecognized input {context!r} at line {line}, col {col}"
        )


Rule = tuple[re.Pattern[str], Callable[..., Token | None]]


class Lexer:
    """Lexical analyzer for minibasic.

    The Lexer walks a CharacterStream and applies ``RULES`` in order at each
    position. A rule's handler returns a Token, or None for input that is
    consumed silently (comments and whitespace).

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def skip(self, text: str, line: int, col: int) -> None:
        """Drops comments and whitespace."""
        return None

    def identifier(self, text: str, line: int, col: int) -> Token:
        """Keywords are matched case-insensitively and stored lowercased.

        Other names keep their original spelling.
        """
        lowered = text.lower()
        if lowered in KEYWORDS:
            return Token(KEYWORD, lowered, line, col)
        return Token(ID, text, line, col)

    def multi_char(self, text: str, line: int, col: int) -> Token:
        """Two-character operators and the assignment symbol."""
        return Token(MULTI_CHAR_TOKENS[text], text, line, col)

    def single_char(self, text: str, line: int, col: int) -> Token:
        """Arithmetic, comparison and punctuation symbols."""
        return Token(SINGLE_CHAR_TOKENS[text], text, line, col)

    def real(self, text: str, line: int, col: int) -> Token:
        """Numeric literals keep their source text."""
        return Token(REAL, text, line, col)

    def integer(self, text: str, line: int, col: int) -> Token:
        return Token(INTEGER, text, line, col)

    def string(self, text: str, line: int, col: int) -> Token:
        """Strips the surrounding quotes; the contents are kept verbatim."""
        return Token(STRING, text[1:-1], line, col)

    RULES: list[Rule] = [
        (re.compile(r"rem[^\n]*", re.IGNORECASE), skip),
        (re.compile(r"[A-Za-z][A-Za-z0-9]*"), identifier),
        (re.compile(r"<>|><|<=|>=|:="), multi_char),
        (re.compile(r"[-+*/=<>():;,]"), single_char),
        (re.compile(r"[0-9]+\.[0-9]+"), real),
        (re.compile(r"[0-9]+"), integer),
        (re.compile(r'"[^"]*"'), string),
        (re.compile(r"[ \t\r\n\f\v]+"), skip),
    ]

    def next_token(self) -> Token | None:
        """Consumes input up to and including the next token.

        Returns:
            Token | None: The next token, or None once the source is exhausted.

        Raises:
            LexError: If no rule matches at the current position.
        """
        stream = self.stream
        while not stream.end_of_file():
            line, col = stream.line, stream.column
            for pattern, handler in self.RULES:
                match = pattern.match(stream.source, stream.position)
                if match is None:
                    continue
                text = stream.skip(len(match.group()))
                token = handler(self, text, line, col)
                if token is not None:
                    return token
                break
            else:
                raise LexError(
                    stream.remaining()[:ERROR_CONTEXT_LENGTH], line, col
                )
        return None

    def tokens(self) -> list[Token]:
        """Drains the stream into a list of tokens."""
        result: list[Token] = []
        while True:
            tok = self.next_token()
            if tok is None:
                return result
            result.append(tok)


def tokenize(source: str) -> list[Token]:
    """Tokenizes a complete program.

    Empty or blank input yields an empty list; the first unrecognized character
    run aborts with LexError and no partial result.
    """
    return Lexer(CharacterStream(source)).tokens()


__all__ = ["CharacterStream", "LexError", "Lexer", "Token", "tokenize"]
