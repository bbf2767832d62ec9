"""
Error taxonomy for the FCN front end.

Every failure raised by the lexer or parser is a `ParseError`, which subclasses the
built-in `SyntaxError` so callers that only care about "the source is bad" can
catch either. All errors carry a `SourcePosition` pointing at the offending input.

Classes:
    SourcePosition: 1-based line/column plus 0-based character offset.
    ParseError: Base class; never raised directly by the parser.
    LexicalError: Malformed token (unknown character, bad string literal).
    UnexpectedToken: Grammar mismatch; carries the expected token types and the token found.
    UnterminatedGroup: End of input before a closing delimiter.
    NumericOverflow: Literal outside its representable range.
    TrailingInput: Input left over after a complete parse.
    NestingTooDeep: Expression nesting beyond the parser's configured limit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from fcn.fcn_constants import token_display

if TYPE_CHECKING:
    from fcn.fcn_lexer import Token


class SourcePosition(NamedTuple):
    line: int
    col: int
    offset: int = 0

    def __str__(self) -> str:
        return f"line {self.line}, col {self.col}"


def describe(token_type: str) -> str:
    return token_display.get(token_type, token_type)


def describe_token(tok: Token) -> str:
    if tok.type in ("IDENT", "INT", "FLOAT"):
        return f"{describe(tok.type)} {tok.value!r}"
    if tok.type == "STRING":
        return f'string literal "{tok.value}"'
    return describe(tok.type)


class ParseError(SyntaxError):
    """Base class for all FCN front-end errors.

    Attributes:
        message (str): Description without the position suffix.
        position (SourcePosition): Where the error was detected.
    """

    def __init__(self, message: str, position: SourcePosition) -> None:
        super().__init__(f"{message} at {position}")
        self.message = message
        self.position = position


class LexicalError(ParseError):
    pass


class UnexpectedToken(ParseError):
    def __init__(self, expected: tuple[str, ...], found: Token) -> None:
        self.expected = expected
        self.found = found
        names = ", ".join(describe(t) for t in expected)
        if len(expected) > 1:
            names = f"one of {names}"
        super().__init__(
            f"Expected {names}, got {describe_token(found)}", found.position
        )


class UnterminatedGroup(ParseError):
    def __init__(self, opener: Token, closer: str, position: SourcePosition) -> None:
        self.opener = opener
        self.closer = closer
        super().__init__(
            f"Unclosed {describe(opener.type)} opened at {opener.position}, "
            f"expected {describe(closer)} before end of input",
            position,
        )


class NumericOverflow(ParseError):
    def __init__(self, literal: str, kind: str, position: SourcePosition) -> None:
        self.literal = literal
        super().__init__(f"{kind} literal {literal} is out of range", position)


class TrailingInput(ParseError):
    def __init__(self, found: Token) -> None:
        self.found = found
        super().__init__(
            f"Unexpected {describe_token(found)} after end of parsed input",
            found.position,
        )


class NestingTooDeep(ParseError):
    def __init__(self, limit: int, position: SourcePosition) -> None:
        self.limit = limit
        super().__init__(f"Expression nesting exceeds limit of {limit}", position)


__all__ = [
    "LexicalError",
    "NestingTooDeep",
    "NumericOverflow",
    "ParseError",
    "SourcePosition",
    "TrailingInput",
    "UnexpectedToken",
    "UnterminatedGroup",
]
