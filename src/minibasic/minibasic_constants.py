"""
Shared vocabulary for the minibasic tokenizer and parser.

Token kinds, reserved words and node kinds are closed sets: the lexer only ever
emits kinds from ``TOKEN_KINDS`` and ``ASTNode`` refuses kinds outside
``NODE_KINDS``.

Exports:
    - TOKEN_KINDS
    - KEYWORDS
    - END_KEYWORDS
    - MULTI_CHAR_TOKENS
    - SINGLE_CHAR_TOKENS
    - COMPARISON_OPERATORS
    - NODE_KINDS
"""

# Token kinds
KEYWORD = "keyword"
ID = "id"
ASSIGN = "assign"
OPERATOR = "operator"
PLUS = "plus"
MINUS = "minus"
TIMES = "times"
DIVIDE = "divide"
LPAREN = "lparen"
RPAREN = "rparen"
COLON = "colon"
SEMICOLON = "semicolon"
COMMA = "comma"
INTEGER = "integer"
REAL = "real"
STRING = "string"

TOKEN_KINDS: frozenset[str] = frozenset(
    {
        KEYWORD,
        ID,
        ASSIGN,
        OPERATOR,
        PLUS,
        MINUS,
        TIMES,
        DIVIDE,
        LPAREN,
        RPAREN,
        COLON,
        SEMICOLON,
        COMMA,
        INTEGER,
        REAL,
        STRING,
    }
)

KEYWORDS: frozenset[str] = frozenset(
    {
        "def",
        "enddef",
        "end",
        "if",
        "then",
        "endif",
        "while",
        "do",
        "endwhile",
        "print",
        "return",
        "not",
        "and",
        "or",
    }
)

# Keywords that close a statement sequence without belonging to it
END_KEYWORDS: frozenset[str] = frozenset({"endif", "enddef", "endwhile"})

# Keywords that open a block closed by one of END_KEYWORDS
BLOCK_OPENERS: dict[str, str] = {
    "def": "enddef",
    "if": "endif",
    "while": "endwhile",
}

MULTI_CHAR_TOKENS: dict[str, str] = {
    ":=": ASSIGN,
    "<>": OPERATOR,
    "><": OPERATOR,
    "<=": OPERATOR,
    ">=": OPERATOR,
}

SINGLE_CHAR_TOKENS: dict[str, str] = {
    "+": PLUS,
    "-": MINUS,
    "*": TIMES,
    "/": DIVIDE,
    "=": OPERATOR,
    "<": OPERATOR,
    ">": OPERATOR,
    "(": LPAREN,
    ")": RPAREN,
    ":": COLON,
    ";": SEMICOLON,
    ",": COMMA,
}

COMPARISON_OPERATORS: frozenset[str] = frozenset(
    {"=", "<>", "><", ">", ">=", "<", "<="}
)

# Leaf nodes reuse the token kind of the literal they wrap
STATEMENT_KINDS: frozenset[str] = frozenset(
    {"def", "end", "if", "while", "print", "return", "remark", "assign", "call"}
)

EXPRESSION_KINDS: frozenset[str] = frozenset(
    {
        "or",
        "and",
        "not",
        "compare",
        "add",
        "sub",
        "mult",
        "divide",
        "negate",
        "call",
        ID,
        INTEGER,
        REAL,
        STRING,
    }
)

NODE_KINDS: frozenset[str] = STATEMENT_KINDS | EXPRESSION_KINDS | {"program"}


__all__ = [
    "BLOCK_OPENERS",
    "COMPARISON_OPERATORS",
    "END_KEYWORDS",
    "EXPRESSION_KINDS",
    "KEYWORDS",
    "MULTI_CHAR_TOKENS",
    "NODE_KINDS",
    "SINGLE_CHAR_TOKENS",
    "STATEMENT_KINDS",
    "TOKEN_KINDS",
]
