"""
Lexical analyzer for the FCN language.

This module converts raw source text into a token stream:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: A single token with type, value, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Functions:
    tokenize(source): Lex a whole string into a list ending with an EOF token.

Features:
    - Skips whitespace and single-line comments (`#`) before every token
    - Recognizes:
        * Identifiers (ASCII letters, digits, `_`; first character not a digit)
        * Reserved words `fcn`, `ret`, `return` (never lexed as identifiers)
        * Integer literals (signed 64-bit range) and float literals (binary32)
        * Double-quoted strings without escape sequences
        * Punctuation `( ) { } , ; = + - * /`

Raises:
    LexicalError: Unknown character, unterminated string, or backslash inside a string.
    NumericOverflow: Literal outside its representable range.

Example:
    >>> [tok.type for tok in tokenize("ret 1;")]
    ['RET', 'INT', 'SEMI', 'EOF']
"""

from __future__ import annotations

import math
import struct
from typing import Any

from fcn.fcn_constants import (
    COMMENT_CHAR,
    INT64_MAX,
    token_hashmap,
)
from fcn.fcn_errors import LexicalError, NumericOverflow, SourcePosition


def is_ident_start(ch: str) -> bool:
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def is_ident_char(ch: str) -> bool:
    return is_ident_start(ch) or is_digit(ch)


def is_digit(ch: str) -> bool:
    return ch != "" and ch in "0123456789"


def int_value(lexeme: str) -> int:
    """Value of a decimal literal; int() refuses very long digit strings."""
    return int(lexeme.lstrip("0") or "0")


def to_float32(value: float) -> float:
    """Rounds a Python float to the nearest IEEE-754 binary32 value.

    Raises:
        OverflowError: If the value does not fit binary32.
    """
    if math.isinf(value):
        raise OverflowError(value)
    result: float = struct.unpack("<f", struct.pack("<f", value))[0]
    return result


class CharacterStream:
    """
    Reads characters from a string source with line and column tracking.

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
            LexicalError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise LexicalError("Unexpected end of input", self.mark())
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character `offset` places ahead, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def mark(self) -> SourcePosition:
        return SourcePosition(self.line, self.column, self.position)

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token.

    Attributes:
        type (str): The canonical token type (e.g. 'IDENT', 'INT', 'EOF').
        value (str): The lexeme. For strings, the text between the quotes.
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
        offset (int): The 0-based character offset where the token starts.
    """

    def __init__(
        self, type_: str, value: str, line: int = 0, col: int = 0, offset: int = 0
    ):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col
        self.offset = offset

    @property
    def position(self) -> SourcePosition:
        return SourcePosition(self.line, self.col, self.offset)

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


class Lexer:
    """Lexical analyzer for the FCN language.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek().isspace():
                self.advance()
            elif self.peek() == COMMENT_CHAR:
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def read_word(self, start: SourcePosition) -> Token:
        word = ""
        while is_ident_char(self.peek()):
            word += self.advance()
        return Token(token_hashmap.get(word, "IDENT"), word, *start)

    def read_number(self, start: SourcePosition) -> Token:
        digits = ""
        while is_digit(self.peek()):
            digits += self.advance()

        if self.peek() == "." and is_digit(self.peek(1)):
            digits += self.advance()
            while is_digit(self.peek()):
                digits += self.advance()
            try:
                to_float32(float(digits))
            except OverflowError:
                raise NumericOverflow(digits, "Float", start) from None
            return Token("FLOAT", digits, *start)

        if len(digits.lstrip("0")) > len(str(INT64_MAX)) or int_value(digits) > INT64_MAX:
            raise NumericOverflow(digits, "Integer", start)
        return Token("INT", digits, *start)

    def read_string(self, start: SourcePosition) -> Token:
        self.advance()  # opening quote
        val = ""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch == '"':
                self.advance()
                return Token("STRING", val, *start)
            if ch == "\\":
                raise LexicalError(
                    "Escape sequences are not supported in string literals",
                    self.stream.mark(),
                )
            val += self.advance()
        raise LexicalError("Unterminated string literal", start)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Raises:
            LexicalError: If a malformed token is encountered.
            NumericOverflow: If a numeric literal is out of range.
        """
        self.skip_whitespace()
        start = self.stream.mark()

        if self.stream.end_of_file():
            return Token("EOF", "", *start)

        ch = self.peek()

        if is_ident_start(ch):
            return self.read_word(start)

        if is_digit(ch):
            return self.read_number(start)

        if ch == '"':
            return self.read_string(start)

        if ch in token_hashmap:
            self.advance()
            return Token(token_hashmap[ch], ch, *start)

        raise LexicalError(f"Unexpected character {ch!r}", start)


def tokenize(source: str) -> list[Token]:
    """Lexes `source` completely. The last token is always EOF."""
    lexer = Lexer(CharacterStream(source))
    tokens = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == "EOF":
            return tokens


__all__ = ["CharacterStream", "Lexer", "Token", "token_hashmap", "tokenize"]
