"""
FCN Language Parser

Parses FCN source tokens into a `Program` syntax tree.

This module implements a recursive-descent parser over the token list produced
by `fcn.fcn_lexer`. Expressions are parsed by precedence climbing; statements,
blocks and function definitions are layered on top.

Grammar
-------
    program      ::= func_def* EOF
    func_def     ::= "fcn" IDENT IDENT "(" (IDENT ("," IDENT)*)? ")" block
    block        ::= "{" stmt* "}"
    stmt         ::= decl | return_stmt | expr ";"
    decl         ::= IDENT IDENT "=" expr ";"
    return_stmt  ::= ("ret" | "return") expr ";"
    expr         ::= sum
    sum          ::= product (("+" | "-") product)*
    product      ::= unary (("*" | "/") unary)*
    unary        ::= "-"* atom
    atom         ::= INT | FLOAT | STRING | "(" expr ")" | call | IDENT
    call         ::= IDENT "(" (expr ("," expr)*)? ")"

Parser Behavior
---------------
- Fail-fast: the first error propagates to the caller; no partial tree is returned.
- Declarations are recognized by two-token lookahead (IDENT IDENT); no backtracking.
- Every statement, including the last one in a block, ends with `;`.
- `max_depth` (see `MAX_NESTING_DEPTH`) bounds both nested expression entries and
  the height of every expression tree, so consumers may walk trees recursively.

Entry Points
------------
- `parse(source)`: Parse a full program.
- `parse_expression(source)`: Parse a string holding exactly one expression.
- `parse_statement(source)`: Parse a string holding exactly one statement.
- `Parser`: Token-level interface; `Parser.remaining()` exposes unconsumed tokens.

Raises
------
ParseError
    One of `LexicalError`, `UnexpectedToken`, `UnterminatedGroup`,
    `NumericOverflow`, `TrailingInput`, `NestingTooDeep`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from fcn.fcn_ast import (
    Add,
    ASTNode,
    BinaryOp,
    Call,
    Declaration,
    Divide,
    FloatLiteral,
    FunctionDefinition,
    IntLiteral,
    Multiply,
    Negate,
    Program,
    Return,
    StrLiteral,
    Subtract,
    TypeName,
    Variable,
)
from fcn.fcn_constants import MAX_NESTING_DEPTH
from fcn.fcn_errors import (
    NestingTooDeep,
    TrailingInput,
    UnexpectedToken,
    UnterminatedGroup,
)
from fcn.fcn_lexer import Token, int_value, to_float32, tokenize

logger = logging.getLogger(__name__)

ATOM_START = ("INT", "FLOAT", "STRING", "LPAREN", "IDENT")
EXPR_START = ATOM_START + ("SUB",)
STMT_START = ("RET",) + EXPR_START

NodeT = TypeVar("NodeT", bound=ASTNode)

additive_ops: dict[str, type[BinaryOp]] = {"PLUS": Add, "SUB": Subtract}
multiplicative_ops: dict[str, type[BinaryOp]] = {"MULT": Multiply, "DIV": Divide}


class Parser:
    """
    FCN Parser Class

    Transforms a list of lexical tokens into FCN syntax tree nodes.

    Attributes
    ----------
    tokens : list[Token]
        The input token stream. An EOF token is appended if missing.
    position : int
        Current index into the token stream.
    depth : int
        Current expression nesting depth.
    max_depth : int
        Nesting depth at which `NestingTooDeep` is raised.

    Methods
    -------
    parse() -> Program
        Parse function definitions until EOF.
    parse_function() -> FunctionDefinition
        Parse `fcn <type> <name>(<params>) <block>`.
    parse_block() -> list[ASTNode]
        Parse a `{}`-enclosed list of statements.
    parse_statement() -> ASTNode
        Parse a declaration, return, or expression statement.
    parse_expression() -> ASTNode
        Parse one expression by precedence climbing.
    """

    def __init__(self, tokens: list[Token], max_depth: int = MAX_NESTING_DEPTH) -> None:
        if not tokens or tokens[-1].type != "EOF":
            last = tokens[-1] if tokens else Token("EOF", "", 1, 1)
            tokens = list(tokens) + [
                Token("EOF", "", last.line, last.col, last.offset)
            ]
        self.tokens: list[Token] = tokens
        self.position: int = 0
        self.depth: int = 0
        self.max_depth: int = max_depth

    def current(self) -> Token:
        return self.tokens[min(self.position, len(self.tokens) - 1)]

    def peek(self, offset: int = 1) -> Token:
        index = min(self.position + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        tok = self.current()
        if tok.type != "EOF":
            self.position += 1
        return tok

    def check(self, *types: str) -> bool:
        return self.current().type in types

    def match(self, *types: str) -> Token:
        """Consumes the current token if its type is one of `types`.

        Raises:
            UnexpectedToken: If the current token has another type.
        """
        if self.check(*types):
            return self.advance()
        raise UnexpectedToken(types, self.current())

    @contextmanager
    def group(self, opener: Token, closer: str) -> Iterator[None]:
        """Reports end of input inside the group as an unclosed `opener`.

        Raises:
            UnterminatedGroup: If input ends before the group is closed.
        """
        try:
            yield
        except UnexpectedToken as e:
            if e.found.type != "EOF":
                raise
            raise UnterminatedGroup(opener, closer, e.found.position) from e

    def bounded(self, node: NodeT, tok: Token) -> NodeT:
        """Returns `node` unless its subtree is taller than `max_depth`.

        Raises:
            NestingTooDeep: Reported at `tok`, the token that grew the tree.
        """
        if node.height > self.max_depth:
            raise NestingTooDeep(self.max_depth, tok.position)
        return node

    def remaining(self) -> list[Token]:
        """Returns the unconsumed tokens, including the trailing EOF."""
        return self.tokens[self.position :]

    def expect_end(self) -> None:
        if not self.check("EOF"):
            raise TrailingInput(self.current())

    # Program structure

    def parse(self) -> Program:
        """Parse a full FCN program and return its `Program` node."""
        logger.debug("Parsing %d tokens", len(self.tokens))
        functions: list[FunctionDefinition] = []
        while not self.check("EOF"):
            if not self.check("FCN"):
                raise TrailingInput(self.current())
            functions.append(self.parse_function())
        logger.debug("Parsed %d function definitions", len(functions))
        return Program(functions, line=1, col=1)

    def parse_function(self) -> FunctionDefinition:
        """Parse an `fcn` definition including return type, parameters and body."""
        fcn_tok = self.match("FCN")
        type_tok = self.match("IDENT")
        name_tok = self.match("IDENT")
        params = self.parse_params()
        body = self.parse_block()
        logger.debug(
            "Function %r: %d params, %d statements",
            name_tok.value,
            len(params),
            len(body),
        )
        return FunctionDefinition(
            name=Variable(name_tok.value, name_tok.line, name_tok.col),
            return_type=TypeName(type_tok.value, type_tok.line, type_tok.col),
            params=params,
            body=body,
            line=fcn_tok.line,
            col=fcn_tok.col,
        )

    def parse_params(self) -> list[Variable]:
        open_tok = self.match("LPAREN")
        params: list[Variable] = []
        with self.group(open_tok, "RPAREN"):
            if not self.check("RPAREN"):
                while True:
                    tok = self.match("IDENT")
                    params.append(Variable(tok.value, tok.line, tok.col))
                    if not self.check("COMMA"):
                        break
                    self.advance()
            self.match("RPAREN")
        return params

    def parse_block(self) -> list[ASTNode]:
        """Parse a `{}`-enclosed block of `;`-terminated statements."""
        open_tok = self.match("LBRACE")
        stmts: list[ASTNode] = []
        with self.group(open_tok, "RBRACE"):
            while not self.check("RBRACE", "EOF"):
                stmts.append(self.parse_statement())
            self.match("RBRACE")
        return stmts

    # Statements

    def parse_statement(self) -> ASTNode:
        """Parse a single statement, including its terminating `;`."""
        if self.check("RET"):
            return self.parse_return()
        if self.check("IDENT") and self.peek().type == "IDENT":
            return self.parse_declaration()
        if not self.check(*EXPR_START):
            raise UnexpectedToken(STMT_START, self.current())
        expr = self.parse_expression()
        self.match("SEMI")
        return expr

    def parse_declaration(self) -> Declaration:
        type_tok = self.match("IDENT")
        name_tok = self.match("IDENT")
        self.match("ASSIGN")
        rhs = self.parse_expression()
        self.match("SEMI")
        return Declaration(
            name=Variable(name_tok.value, name_tok.line, name_tok.col),
            type_name=TypeName(type_tok.value, type_tok.line, type_tok.col),
            rhs=rhs,
            line=type_tok.line,
            col=type_tok.col,
        )

    def parse_return(self) -> Return:
        ret_tok = self.match("RET")
        value = self.parse_expression()
        self.match("SEMI")
        return Return(value, line=ret_tok.line, col=ret_tok.col)

    # Expressions

    def parse_expression(self) -> ASTNode:
        """Parse one expression starting at the current token.

        Raises:
            NestingTooDeep: If nested groups, call arguments or the resulting
                tree height exceed `max_depth`.
        """
        if self.depth >= self.max_depth:
            raise NestingTooDeep(self.max_depth, self.current().position)
        self.depth += 1
        try:
            return self.parse_binary(self.parse_product, additive_ops)
        finally:
            self.depth -= 1

    def parse_product(self) -> ASTNode:
        return self.parse_binary(self.parse_unary, multiplicative_ops)

    def parse_binary(
        self, operand: Callable[[], ASTNode], ops: dict[str, type[BinaryOp]]
    ) -> ASTNode:
        """Left-folds `operand (op operand)*` for one precedence level."""
        left: ASTNode = operand()
        while self.check(*ops):
            op_tok = self.advance()
            right = operand()
            left = self.bounded(
                ops[op_tok.type](left, right, line=left.line, col=left.col), op_tok
            )
        return left

    def parse_unary(self) -> ASTNode:
        minus_toks: list[Token] = []
        while self.check("SUB"):
            minus_toks.append(self.advance())
        node = self.parse_atom()
        for tok in reversed(minus_toks):
            node = self.bounded(Negate(node, line=tok.line, col=tok.col), tok)
        return node

    def parse_atom(self) -> ASTNode:
        tok = self.current()

        if tok.type == "INT":
            self.advance()
            return IntLiteral(int_value(tok.value), line=tok.line, col=tok.col)

        if tok.type == "FLOAT":
            self.advance()
            return FloatLiteral(to_float32(float(tok.value)), line=tok.line, col=tok.col)

        if tok.type == "STRING":
            self.advance()
            return StrLiteral(tok.value, line=tok.line, col=tok.col)

        if tok.type == "LPAREN":
            self.advance()
            with self.group(tok, "RPAREN"):
                inner = self.parse_expression()
                self.match("RPAREN")
            return inner

        if tok.type == "IDENT":
            self.advance()
            var = Variable(tok.value, line=tok.line, col=tok.col)
            if self.check("LPAREN"):
                return self.parse_call(var)
            return var

        raise UnexpectedToken(ATOM_START, tok)

    def parse_call(self, callee: Variable) -> Call:
        """Parse the parenthesised argument list following `callee`."""
        open_tok = self.match("LPAREN")
        args: list[ASTNode] = []
        with self.group(open_tok, "RPAREN"):
            if not self.check("RPAREN"):
                while True:
                    args.append(self.parse_expression())
                    if not self.check("COMMA"):
                        break
                    self.advance()
            self.match("RPAREN")
        call = Call(callee, args, line=callee.line, col=callee.col)
        return self.bounded(call, open_tok)


def parse(source: str, max_depth: int = MAX_NESTING_DEPTH) -> Program:
    """Lex and parse a complete FCN program.

    Raises:
        ParseError: On the first lexical or syntax error.
    """
    return Parser(tokenize(source), max_depth=max_depth).parse()


def parse_expression(source: str, max_depth: int = MAX_NESTING_DEPTH) -> ASTNode:
    """Parse `source` as exactly one expression."""
    parser = Parser(tokenize(source), max_depth=max_depth)
    expr = parser.parse_expression()
    parser.expect_end()
    return expr


def parse_statement(source: str, max_depth: int = MAX_NESTING_DEPTH) -> ASTNode:
    """Parse `source` as exactly one `;`-terminated statement."""
    parser = Parser(tokenize(source), max_depth=max_depth)
    stmt = parser.parse_statement()
    parser.expect_end()
    return stmt


__all__ = ["Parser", "parse", "parse_expression", "parse_statement"]
