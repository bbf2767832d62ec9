"""
Shared constants for the FCN lexer, parser and command-line wrapper.

token_hashmap maps every reserved word and punctuation lexeme to its canonical
token type. Lexemes that are not in this table are either identifiers, numeric
literals, string literals, or lexical errors.
"""

token_hashmap: dict[str, str] = {
    # Reserved words
    "fcn": "FCN",
    "ret": "RET",
    "return": "RET",
    # Punctuation
    "(": "LPAREN",
    ")": "RPAREN",
    "{": "LBRACE",
    "}": "RBRACE",
    ",": "COMMA",
    ";": "SEMI",
    "=": "ASSIGN",
    # Operators
    "+": "PLUS",
    "-": "SUB",
    "*": "MULT",
    "/": "DIV",
}

reserved_words: frozenset[str] = frozenset(
    k for k in token_hashmap if k.isidentifier()
)

# Human-readable names used in diagnostics
token_display: dict[str, str] = {
    "IDENT": "identifier",
    "INT": "integer literal",
    "FLOAT": "float literal",
    "STRING": "string literal",
    "FCN": "'fcn'",
    "RET": "'ret'",
    "LPAREN": "'('",
    "RPAREN": "')'",
    "LBRACE": "'{'",
    "RBRACE": "'}'",
    "COMMA": "','",
    "SEMI": "';'",
    "ASSIGN": "'='",
    "PLUS": "'+'",
    "SUB": "'-'",
    "MULT": "'*'",
    "DIV": "'/'",
    "EOF": "end of input",
}

COMMENT_CHAR = "#"

INT64_MAX = 2**63 - 1

MAX_NESTING_DEPTH = 100

AST_SUFFIX = ".ast"
