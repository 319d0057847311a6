"""
minibasic Parser

Turns the token list produced by ``minibasic_lexer`` into a parse tree of
``ASTNode`` objects using a fixed recursive-descent grammar with one token of
lookahead and no backtracking.

Grammar
-------
::

    program     := statements
    statements  := statement ( ":"? statement )*       stops at ENDIF/ENDDEF/ENDWHILE
    statement   := DEF id params statements ENDDEF
                 | END
                 | IF expression THEN statements ENDIF
                 | WHILE expression DO statements ENDWHILE
                 | PRINT print_list
                 | RETURN expression
                 | id ":=" expression
                 | id "(" expr_list? ")"
    params      := "(" id_list? ")" | id_list
    expression  := and_expr ( OR expression )?
    and_expr    := not_expr ( AND and_expr )?
    not_expr    := NOT? compare
    compare     := add_expr ( ("=" | "<>" | "><" | ">" | ">=" | "<" | "<=") add_expr )?
    add_expr    := mult_expr ( ("+" | "-") mult_expr )*
    mult_expr   := negate ( ("*" | "/") negate )*
    negate      := "-" negate | value
    value       := "(" expression ")" | id "(" expr_list? ")" | id | integer | real | string
    id_list     := id ( "," id )*
    expr_list   := expression ( "," expression )*
    print_list  := ( expression ( ";" expression? )* )?

``or`` and ``and`` group to the right, ``+ -`` and ``* /`` group to the left.

Parser Behavior
---------------
- Fails fast: the first problem raises ``BasicSyntaxError`` (a ``SyntaxError``)
  and no partial tree is returned.
- ``Parser.position`` is the cursor; it only moves forward.

Entry Points
------------
- ``Parser.parse()``: parse a full program into a ``program`` node.
- ``Parser.parse_statement()`` / ``Parser.parse_expression()``: parse one construct.
- ``parse()``: module-level convenience accepting source text or tokens.
"""

from __future__ import annotations

from collections.abc import Iterable

from minibasic.minibasic_ast import ASTNode
from minibasic.minibasic_constants import (
    ASSIGN,
    COLON,
    COMMA,
    COMPARISON_OPERATORS,
    DIVIDE,
    END_KEYWORDS,
    ID,
    INTEGER,
    KEYWORD,
    LPAREN,
    MINUS,
    OPERATOR,
    PLUS,
    REAL,
    RPAREN,
    SEMICOLON,
    STRING,
    TIMES,
)
from minibasic.minibasic_lexer import Token, tokenize

LITERAL_KINDS = (INTEGER, REAL, STRING)

# Tokens that can begin an expression
EXPRESSION_STARTS = frozenset({ID, INTEGER, REAL, STRING, LPAREN, MINUS})


def describe(kind: str, lexeme: str | None = None) -> str:
    """Human-readable name for a token, e.g. ``keyword 'endif'``, used in error messages."""
    return f"{kind} '{lexeme}'" if lexeme is not None else kind


class BasicSyntaxError(SyntaxError):
    """Raised when the token sequence does not match the grammar.

    Attributes:
        expected (str | None): Description of what the parser required, if anything specific.
        found (Token | None): The offending token, or None at end of input.
    """

    def __init__(
        self, message: str, expected: str | None = None, found: Token | None = None
    ):
        super().__init__(message)
        self.expected = expected
        self.found = found


class Parser:
    """
    minibasic Parser Class

    Holds an immutable tuple of tokens and a forward-only position into it.
    Every ``parse_*`` method consumes exactly the tokens of the construct it
    recognises and returns the node (or node list) it built.

    Attributes
    ----------
    tokens : tuple[Token, ...]
        The token sequence being parsed.
    position : int
        Index of the current token.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self.tokens: tuple[Token, ...] = tuple(tokens)
        self.position: int = 0

    # Cursor

    def current(self) -> Token | None:
        """Returns the token under the cursor, or None at end of input."""
        return (
            self.tokens[self.position] if self.position < len(self.tokens) else None
        )

    def peek(self, offset: int = 1) -> Token | None:
        """Looks ``offset`` tokens past the cursor without consuming anything."""
        index = self.position + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def at_end(self) -> bool:
        """True once every token has been consumed."""
        return self.position >= len(self.tokens)

    def advance(self) -> Token:
        """Consumes and returns the current token.

        Raises:
            BasicSyntaxError: If the input is already exhausted.
        """
        tok = self.current()
        if tok is None:
            raise BasicSyntaxError("Unexpected end of input")
        self.position += 1
        return tok

    def check(self, kind: str, lexeme: str | None = None) -> bool:
        """Tests the current token against ``kind`` (and ``lexeme``) without consuming it."""
        tok = self.current()
        return (
            tok is not None
            and tok.kind == kind
            and (lexeme is None or tok.lexeme == lexeme)
        )

    def check_keyword(self, *words: str) -> bool:
        """True if the current token is one of the given keywords."""
        tok = self.current()
        return tok is not None and tok.kind == KEYWORD and tok.lexeme in words

    def accept(self, kind: str, lexeme: str | None = None) -> Token | None:
        """Consumes and returns the current token if it matches, else returns None."""
        if self.check(kind, lexeme):
            return self.advance()
        return None

    def expect(self, kind: str, lexeme: str | None = None) -> Token:
        """Consumes the current token, which must match ``kind`` (and ``lexeme``)."""
        tok = self.current()
        wanted = describe(kind, lexeme)
        if tok is None:
            raise BasicSyntaxError(
                f"Unexpected end of input, expected {wanted}", expected=wanted
            )
        if not self.check(kind, lexeme):
            raise BasicSyntaxError(
                f"Expected {wanted}, got {tok} at line {tok.line}, col {tok.col}",
                expected=wanted,
                found=tok,
            )
        return self.advance()

    # Program and statements

    def parse(self) -> ASTNode:
        """Parse a full program and return its ``program`` root node."""
        try:
            statements = self.parse_statements()
        except RecursionError as e:
            raise BasicSyntaxError(
                "Program nested too deeply to parse", found=self.current()
            ) from e
        tok = self.current()
        if tok is not None:
            raise BasicSyntaxError(
                f"Unexpected {tok} at line {tok.line}, col {tok.col} with no open block",
                found=tok,
            )
        return ASTNode("program", children=statements, line=1, col=1)

    def parse_statements(self) -> list[ASTNode]:
        """Parse statements until end of input or an unconsumed end-keyword."""
        statements: list[ASTNode] = []
        while not self.at_end() and not self.check_keyword(*END_KEYWORDS):
            statements.append(self.parse_statement())
            self.accept(COLON)
        return statements

    def parse_block(self, closer: str) -> list[ASTNode]:
        """Parse a statement sequence that must be terminated by the keyword ``closer``."""
        body = self.parse_statements()
        self.expect(KEYWORD, closer)
        return body

    def parse_statement(self) -> ASTNode:
        """Parse one statement, dispatching on its lead token."""
        tok = self.current()
        if tok is None:
            raise BasicSyntaxError(
                "Unexpected end of input, expected a statement", expected="statement"
            )

        if tok.kind == KEYWORD:
            if tok.lexeme == "def":
                return self.parse_def()
            if tok.lexeme == "end":
                self.advance()
                return ASTNode("end", line=tok.line, col=tok.col)
            if tok.lexeme == "if":
                return self.parse_if()
            if tok.lexeme == "while":
                return self.parse_while()
            if tok.lexeme == "print":
                return self.parse_print()
            if tok.lexeme == "return":
                self.advance()
                expr = self.parse_expression()
                return ASTNode("return", children=[expr], line=tok.line, col=tok.col)

        if tok.kind == ID:
            nxt = self.peek()
            if nxt is not None and nxt.kind == ASSIGN:
                return self.parse_assignment()
            if nxt is not None and nxt.kind == LPAREN:
                return self.parse_call()
            if nxt is None:
                raise BasicSyntaxError(
                    f"Unexpected end of input after {tok.lexeme!r}, expected ':=' or '('",
                    expected="assign or lparen",
                )
            raise BasicSyntaxError(
                f"Expected ':=' or '(' after {tok.lexeme!r}, got {nxt} at line {nxt.line}, col {nxt.col}",
                expected="assign or lparen",
                found=nxt,
            )

        raise BasicSyntaxError(
            f"Unknown statement starting with {tok} at line {tok.line}, col {tok.col}",
            found=tok,
        )

    def parse_def(self) -> ASTNode:
        """Parse ``DEF name params body ENDDEF``."""
        def_tok = self.expect(KEYWORD, "def")
        name_tok = self.expect(ID)

        if self.accept(LPAREN):
            params = [] if self.check(RPAREN) else self.parse_id_list()
            self.expect(RPAREN)
        else:
            params = self.parse_id_list()

        body = self.parse_block("enddef")
        return ASTNode(
            "def",
            value=name_tok.lexeme,
            children=body,
            params=params,
            line=def_tok.line,
            col=def_tok.col,
        )

    def parse_if(self) -> ASTNode:
        if_tok = self.expect(KEYWORD, "if")
        cond = self.parse_expression()
        self.expect(KEYWORD, "then")
        body = self.parse_block("endif")
        return ASTNode("if", value=cond, children=body, line=if_tok.line, col=if_tok.col)

    def parse_while(self) -> ASTNode:
        while_tok = self.expect(KEYWORD, "while")
        cond = self.parse_expression()
        self.expect(KEYWORD, "do")
        body = self.parse_block("endwhile")
        return ASTNode(
            "while", value=cond, children=body, line=while_tok.line, col=while_tok.col
        )

    def parse_print(self) -> ASTNode:
        print_tok = self.expect(KEYWORD, "print")
        exprs = self.parse_print_list()
        return ASTNode("print", children=exprs, line=print_tok.line, col=print_tok.col)

    def parse_assignment(self) -> ASTNode:
        name_tok = self.expect(ID)
        self.expect(ASSIGN)
        expr = self.parse_expression()
        return ASTNode(
            "assign",
            value=name_tok.lexeme,
            children=[expr],
            line=name_tok.line,
            col=name_tok.col,
        )

    def parse_call(self) -> ASTNode:
        """Parse ``name(args)``; an empty argument list is allowed."""
        name_tok = self.expect(ID)
        self.expect(LPAREN)
        args = [] if self.check(RPAREN) else self.parse_expression_list()
        self.expect(RPAREN)
        return ASTNode(
            "call",
            value=name_tok.lexeme,
            children=args,
            line=name_tok.line,
            col=name_tok.col,
        )

    # Expressions, lowest precedence first

    def parse_expression(self) -> ASTNode:
        left = self.parse_and()
        or_tok = self.accept(KEYWORD, "or")
        if or_tok is not None:
            right = self.parse_expression()
            return ASTNode("or", children=[left, right], line=or_tok.line, col=or_tok.col)
        return left

    def parse_and(self) -> ASTNode:
        left = self.parse_not()
        and_tok = self.accept(KEYWORD, "and")
        if and_tok is not None:
            right = self.parse_and()
            return ASTNode("and", children=[left, right], line=and_tok.line, col=and_tok.col)
        return left

    def parse_not(self) -> ASTNode:
        not_tok = self.accept(KEYWORD, "not")
        operand = self.parse_compare()
        if not_tok is None:
            return operand
        return ASTNode("not", children=[operand], line=not_tok.line, col=not_tok.col)

    def parse_compare(self) -> ASTNode:
        left = self.parse_add()
        tok = self.current()
        if tok is not None and tok.kind == OPERATOR and tok.lexeme in COMPARISON_OPERATORS:
            self.advance()
            right = self.parse_add()
            return ASTNode(
                "compare",
                value=tok.lexeme,
                children=[left, right],
                line=tok.line,
                col=tok.col,
            )
        return left

    def parse_add(self) -> ASTNode:
        node = self.parse_mult()
        while self.check(PLUS) or self.check(MINUS):
            op_tok = self.advance()
            right = self.parse_mult()
            kind = "add" if op_tok.kind == PLUS else "sub"
            node = ASTNode(
                kind,
                value=op_tok.lexeme,
                children=[node, right],
                line=op_tok.line,
                col=op_tok.col,
            )
        return node

    def parse_mult(self) -> ASTNode:
        node = self.parse_negate()
        while self.check(TIMES) or self.check(DIVIDE):
            op_tok = self.advance()
            right = self.parse_negate()
            kind = "mult" if op_tok.kind == TIMES else "divide"
            node = ASTNode(
                kind,
                value=op_tok.lexeme,
                children=[node, right],
                line=op_tok.line,
                col=op_tok.col,
            )
        return node

    def parse_negate(self) -> ASTNode:
        minus_tok = self.accept(MINUS)
        if minus_tok is None:
            return self.parse_value()
        operand = self.parse_negate()
        return ASTNode("negate", children=[operand], line=minus_tok.line, col=minus_tok.col)

    def parse_value(self) -> ASTNode:
        tok = self.current()
        if tok is None:
            raise BasicSyntaxError(
                "Unexpected end of input, expected a value", expected="value"
            )

        if tok.kind == LPAREN:
            self.advance()
            expr = self.parse_expression()
            self.expect(RPAREN)
            return expr

        if tok.kind == ID:
            nxt = self.peek()
            if nxt is not None and nxt.kind == LPAREN:
                return self.parse_call()
            self.advance()
            return ASTNode(ID, tok.lexeme, line=tok.line, col=tok.col)

        if tok.kind in LITERAL_KINDS:
            self.advance()
            return ASTNode(tok.kind, tok.lexeme, line=tok.line, col=tok.col)

        raise BasicSyntaxError(
            f"Expected a value, got {tok} at line {tok.line}, col {tok.col}",
            expected="value",
            found=tok,
        )

    # Lists

    def parse_id_list(self) -> list[str]:
        """One or more identifiers separated by commas."""
        names = [self.expect(ID).lexeme]
        while self.accept(COMMA):
            names.append(self.expect(ID).lexeme)
        return names

    def parse_expression_list(self) -> list[ASTNode]:
        """One or more expressions separated by commas."""
        exprs = [self.parse_expression()]
        while self.accept(COMMA):
            exprs.append(self.parse_expression())
        return exprs

    def starts_expression(self) -> bool:
        tok = self.current()
        if tok is None:
            return False
        return tok.kind in EXPRESSION_STARTS or (
            tok.kind == KEYWORD and tok.lexeme == "not"
        )

    def parse_print_list(self) -> list[ASTNode]:
        """Zero or more expressions separated by semicolons; a trailing ``;`` is allowed."""
        exprs: list[ASTNode] = []
        if not self.starts_expression():
            return exprs
        exprs.append(self.parse_expression())
        while self.accept(SEMICOLON):
            if not self.starts_expression():
                break
            exprs.append(self.parse_expression())
        return exprs


def parse(source: str | Iterable[Token]) -> ASTNode:
    """Parse program text or an already tokenized program into a ``program`` node."""
    tokens = tokenize(source) if isinstance(source, str) else source
    return Parser(tokens).parse()


__all__ = ["BasicSyntaxError", "Parser", "parse"]
