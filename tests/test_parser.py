from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from minibasic.minibasic_ast import ASTNode
from minibasic.minibasic_constants import KEYWORDS
from minibasic.minibasic_lexer import LexError, tokenize
from minibasic.minibasic_parser import BasicSyntaxError, Parser, parse


def normalize(node: Any) -> Any:
    """Drop source positions so trees can be compared by shape."""
    if isinstance(node, list):
        return [normalize(n) for n in node]
    if isinstance(node, dict):
        return {k: normalize(v) for k, v in node.items() if k not in ("line", "col")}
    return node


def n(kind: str, value: Any = None, *children: ASTNode, params: tuple[str, ...] = ()) -> ASTNode:
    return ASTNode(kind, value, children, params=params)


def num(text: str) -> ASTNode:
    return n("integer", text)


def ident(name: str) -> ASTNode:
    return n("id", name)


def shape(node: ASTNode) -> Any:
    return normalize(node.to_dict())


def statements(source: str) -> list[Any]:
    return [shape(s) for s in parse(source).children]


def expression(source: str) -> Any:
    parser = Parser(tokenize(source))
    node = parser.parse_expression()
    assert parser.at_end(), f"unconsumed tokens after {source!r}"
    return shape(node)


# Statements


def test_assignment_round_trip() -> None:
    assert statements("x := 5") == [shape(n("assign", "x", num("5")))]


def test_colon_separated_statements() -> None:
    assert statements("x := 1 : y := 2") == [
        shape(n("assign", "x", num("1"))),
        shape(n("assign", "y", num("2"))),
    ]


def test_colon_separator_is_optional() -> None:
    assert statements("x := 1 y := 2") == statements("x := 1 : y := 2")
    assert statements("x := 1\ny := 2") == statements("x := 1 : y := 2")


def test_trailing_colon_accepted() -> None:
    assert statements("x := 1 :") == [shape(n("assign", "x", num("1")))]


def test_leading_colon_is_unknown_statement() -> None:
    with pytest.raises(BasicSyntaxError, match="Unknown statement"):
        parse(": x := 1")


def test_if_round_trip() -> None:
    assert statements("IF x > 0 THEN y := 1 ENDIF") == [
        shape(
            n(
                "if",
                n("compare", ">", ident("x"), num("0")),
                n("assign", "y", num("1")),
            )
        )
    ]


def test_if_with_empty_body() -> None:
    assert statements("IF x THEN ENDIF") == [shape(n("if", ident("x")))]


def test_missing_endif_names_endif() -> None:
    with pytest.raises(SyntaxError) as exc:
        parse("IF x THEN")
    assert "endif" in str(exc.value)
    assert isinstance(exc.value, BasicSyntaxError)
    assert exc.value.expected == "keyword 'endif'"
    assert exc.value.found is None


def test_missing_then_reports_found_token() -> None:
    with pytest.raises(BasicSyntaxError) as exc:
        parse("IF x y := 1 ENDIF")
    assert exc.value.expected == "keyword 'then'"
    assert exc.value.found is not None
    assert exc.value.found.pair() == ("id", "y")
    assert "Expected keyword 'then', got Token(id, y) at line 1, col 6" in str(exc.value)


def test_mismatched_end_keyword() -> None:
    with pytest.raises(BasicSyntaxError, match="endwhile"):
        parse("WHILE x DO y := 1 ENDIF")


def test_while_loop() -> None:
    assert statements("WHILE i < 10 DO i := i + 1 ENDWHILE") == [
        shape(
            n(
                "while",
                n("compare", "<", ident("i"), num("10")),
                n("assign", "i", n("add", "+", ident("i"), num("1"))),
            )
        )
    ]


def test_missing_do() -> None:
    with pytest.raises(BasicSyntaxError, match="keyword 'do'"):
        parse("WHILE x i := 1 ENDWHILE")


def test_def_with_parenthesized_params() -> None:
    assert statements("DEF add(a, b) RETURN a + b ENDDEF") == [
        shape(
            n(
                "def",
                "add",
                n("return", None, n("add", "+", ident("a"), ident("b"))),
                params=("a", "b"),
            )
        )
    ]


def test_def_with_bare_params() -> None:
    assert statements("DEF f a, b RETURN a ENDDEF") == [
        shape(n("def", "f", n("return", None, ident("a")), params=("a", "b")))
    ]


def test_def_with_empty_parens() -> None:
    assert statements("DEF f() PRINT 1 ENDDEF") == [
        shape(n("def", "f", n("print", None, num("1"))))
    ]


def test_def_without_params_is_rejected() -> None:
    with pytest.raises(BasicSyntaxError, match="Expected id"):
        parse("DEF f PRINT 1 ENDDEF")


def test_def_param_list_rejects_trailing_comma() -> None:
    with pytest.raises(BasicSyntaxError, match="Expected id"):
        parse("DEF f(a,) RETURN a ENDDEF")


def test_def_missing_enddef() -> None:
    with pytest.raises(BasicSyntaxError, match="enddef"):
        parse("DEF f(a) RETURN a")


def test_end_statement() -> None:
    assert statements("x := 1 : END") == [
        shape(n("assign", "x", num("1"))),
        shape(n("end")),
    ]


def test_return_statement() -> None:
    assert statements("RETURN -1") == [shape(n("return", None, n("negate", None, num("1"))))]


def test_return_requires_expression() -> None:
    with pytest.raises(BasicSyntaxError, match="expected a value"):
        parse("RETURN")


def test_bare_print_is_empty() -> None:
    assert statements("PRINT") == [shape(n("print"))]


def test_print_list_separated_by_semicolons() -> None:
    assert statements('PRINT "total"; x; 1.5') == [
        shape(n("print", None, n("string", "total"), ident("x"), n("real", "1.5")))
    ]


def test_print_trailing_semicolon() -> None:
    assert statements("PRINT x;") == [shape(n("print", None, ident("x")))]


def test_print_followed_by_other_statement() -> None:
    assert statements("PRINT : x := 1") == [
        shape(n("print")),
        shape(n("assign", "x", num("1"))),
    ]


def test_bare_print_before_assignment_needs_colon() -> None:
    with pytest.raises(
        BasicSyntaxError, match=r"Unknown statement starting with Token\(assign, :=\)"
    ):
        parse("PRINT\nx := 1")
    assert statements("PRINT :\nx := 1") == [
        shape(n("print")),
        shape(n("assign", "x", num("1"))),
    ]


def test_empty_print_inside_block() -> None:
    assert statements("IF c THEN PRINT ENDIF") == [
        shape(n("if", ident("c"), n("print")))
    ]


def test_call_statement() -> None:
    assert statements("f(1, x + 1)") == [
        shape(n("call", "f", num("1"), n("add", "+", ident("x"), num("1"))))
    ]


def test_zero_argument_call_statement() -> None:
    assert statements("f()") == [shape(n("call", "f"))]


def test_call_missing_rparen() -> None:
    with pytest.raises(BasicSyntaxError, match="Unexpected end of input, expected rparen"):
        parse("f(1")


def test_call_rejects_trailing_comma() -> None:
    with pytest.raises(BasicSyntaxError, match="Expected a value"):
        parse("f(1,)")


def test_identifier_without_assign_or_call() -> None:
    with pytest.raises(BasicSyntaxError, match="Expected ':=' or '\\('"):
        parse("x + 1")


def test_identifier_at_end_of_input() -> None:
    with pytest.raises(BasicSyntaxError, match="Unexpected end of input"):
        parse("x")


@pytest.mark.parametrize("source", ["THEN", "5", '"s"', "ENDDEF x := 1", "- x"])  # type: ignore[misc]
def test_unclassifiable_statements(source: str) -> None:
    with pytest.raises(BasicSyntaxError):
        parse(source)


def test_stray_end_keyword_at_top_level() -> None:
    with pytest.raises(BasicSyntaxError, match="no open block"):
        parse("x := 1 ENDIF")


def test_parse_statements_leaves_end_keyword() -> None:
    parser = Parser(tokenize("x := 1 : y := 2 ENDWHILE z := 3"))
    body = parser.parse_statements()
    assert len(body) == 2
    current = parser.current()
    assert current is not None and current.pair() == ("keyword", "endwhile")


def test_nested_blocks() -> None:
    source = """
    DEF count(n)
      WHILE n > 0 DO
        IF n = 5 THEN PRINT "five" ENDIF
        n := n - 1
      ENDWHILE
    ENDDEF
    """
    assert statements(source) == [
        shape(
            n(
                "def",
                "count",
                n(
                    "while",
                    n("compare", ">", ident("n"), num("0")),
                    n(
                        "if",
                        n("compare", "=", ident("n"), num("5")),
                        n("print", None, n("string", "five")),
                    ),
                    n("assign", "n", n("sub", "-", ident("n"), num("1"))),
                ),
                params=("n",),
            )
        )
    ]


def test_sample_program(sample_program: str) -> None:
    program = parse(sample_program)
    assert program.kind == "program"
    assert [s.kind for s in program.children] == [
        "def",
        "assign",
        "assign",
        "while",
        "print",
        "end",
    ]
    fact = program.children[0]
    assert fact.params == ("n",)
    assert [s.kind for s in fact.children] == ["if", "return"]
    printed = program.children[4]
    assert [e.kind for e in printed.children] == ["string", "id", "call"]


def test_tree_is_an_ownership_tree(sample_program: str) -> None:
    nodes = list(parse(sample_program).walk())
    assert len({id(node) for node in nodes}) == len(nodes)


def test_statement_positions() -> None:
    program = parse("x := 1\n  PRINT x")
    assign, printed = program.children
    assert (assign.line, assign.col) == (1, 1)
    assert (printed.line, printed.col) == (2, 3)


def test_parse_accepts_tokens_or_text() -> None:
    assert parse(tokenize("x := 1")) == parse("x := 1")


def test_empty_program() -> None:
    assert parse("") == ASTNode("program", line=1, col=1)
    assert parse("REM nothing here\n") == ASTNode("program", line=1, col=1)


def test_lex_error_propagates_from_parse() -> None:
    with pytest.raises(LexError):
        parse("x := 1 @")


def test_deep_nesting_reports_syntax_error() -> None:
    depth = 5000
    source = "x := " + "(" * depth + "1" + ")" * depth
    with pytest.raises(BasicSyntaxError, match="nested too deeply") as exc:
        parse(source)
    assert isinstance(exc.value.__cause__, RecursionError)


# Expressions


def test_precedence_mult_over_add() -> None:
    assert expression("2 + 3 * 4") == shape(
        n("add", "+", num("2"), n("mult", "*", num("3"), num("4")))
    )


def test_parentheses_override_precedence() -> None:
    assert expression("(2 + 3) * 4") == shape(
        n("mult", "*", n("add", "+", num("2"), num("3")), num("4"))
    )


def test_additive_operators_fold_left() -> None:
    assert expression("1 - 2 - 3") == shape(
        n("sub", "-", n("sub", "-", num("1"), num("2")), num("3"))
    )
    assert expression("1 + 2 - 3") == shape(
        n("sub", "-", n("add", "+", num("1"), num("2")), num("3"))
    )


def test_multiplicative_operators_fold_left() -> None:
    assert expression("8 / 4 * 2") == shape(
        n("mult", "*", n("divide", "/", num("8"), num("4")), num("2"))
    )


def test_or_groups_right() -> None:
    assert expression("a or b or c") == shape(
        n("or", None, ident("a"), n("or", None, ident("b"), ident("c")))
    )


def test_and_groups_right() -> None:
    assert expression("a AND b AND c") == shape(
        n("and", None, ident("a"), n("and", None, ident("b"), ident("c")))
    )


def test_and_binds_tighter_than_or() -> None:
    assert expression("a or b and c") == shape(
        n("or", None, ident("a"), n("and", None, ident("b"), ident("c")))
    )
    assert expression("a and b or c") == shape(
        n("or", None, n("and", None, ident("a"), ident("b")), ident("c"))
    )


def test_not_applies_to_comparison() -> None:
    assert expression("NOT a = b") == shape(
        n("not", None, n("compare", "=", ident("a"), ident("b")))
    )


def test_not_binds_tighter_than_and() -> None:
    assert expression("not a and b") == shape(
        n("and", None, n("not", None, ident("a")), ident("b"))
    )


def test_double_not_is_rejected() -> None:
    with pytest.raises(BasicSyntaxError, match="Expected a value"):
        parse("x := not not y")


@pytest.mark.parametrize("op", ["=", "<>", "><", ">", ">=", "<", "<="])  # type: ignore[misc]
def test_every_comparison_operator(op: str) -> None:
    assert expression(f"a + 1 {op} b * 2") == shape(
        n(
            "compare",
            op,
            n("add", "+", ident("a"), num("1")),
            n("mult", "*", ident("b"), num("2")),
        )
    )


def test_chained_comparison_not_supported() -> None:
    with pytest.raises(BasicSyntaxError):
        parse("x := a < b < c")


def test_repeated_negation() -> None:
    assert expression("--x") == shape(n("negate", None, n("negate", None, ident("x"))))


def test_negation_binds_tighter_than_mult() -> None:
    assert expression("-2 * 3") == shape(
        n("mult", "*", n("negate", None, num("2")), num("3"))
    )


def test_value_call_with_arguments() -> None:
    assert expression("f(1, g(x)) + 1") == shape(
        n("add", "+", n("call", "f", num("1"), n("call", "g", ident("x"))), num("1"))
    )


def test_value_zero_argument_call() -> None:
    assert expression("rnd() * 6") == shape(n("mult", "*", n("call", "rnd"), num("6")))


def test_literal_leaves() -> None:
    assert expression("1.5") == shape(n("real", "1.5"))
    assert expression('"hi there"') == shape(n("string", "hi there"))
    assert expression("Foo") == shape(ident("Foo"))


def test_missing_value_at_end() -> None:
    with pytest.raises(BasicSyntaxError, match="Unexpected end of input, expected a value"):
        parse("x := 1 +")


def test_operator_in_value_position() -> None:
    with pytest.raises(BasicSyntaxError, match="Expected a value, got Token\\(times, \\*\\)"):
        parse("x := *")


def test_unclosed_parenthesis() -> None:
    with pytest.raises(BasicSyntaxError, match="expected rparen"):
        parse("x := (1 + 2")


def test_expression_stops_at_statement_boundary() -> None:
    parser = Parser(tokenize("a + b : c := 1"))
    parser.parse_expression()
    assert parser.position == 3


def test_expression_list_requires_one_expression() -> None:
    with pytest.raises(BasicSyntaxError):
        Parser(tokenize(")")).parse_expression_list()


def test_id_list() -> None:
    assert Parser(tokenize("a, B, c1")).parse_id_list() == ["a", "B", "c1"]


def test_print_list_on_exhausted_cursor() -> None:
    assert Parser([]).parse_print_list() == []


def test_cursor_helpers() -> None:
    parser = Parser(tokenize("x := 1"))
    assert parser.peek().pair() == ("assign", ":=")  # type: ignore[union-attr]
    assert parser.accept("keyword") is None
    assert parser.position == 0
    assert parser.expect("id").lexeme == "x"
    assert parser.peek(5) is None


def test_advance_past_end_raises() -> None:
    with pytest.raises(BasicSyntaxError, match="Unexpected end of input"):
        Parser([]).advance()


@given(
    var=st.from_regex(r"[a-zA-Z][a-zA-Z0-9]{0,10}", fullmatch=True).filter(
        lambda x: x.lower() not in KEYWORDS and not x.lower().startswith("rem")
    ),
    num_value=st.integers(min_value=0, max_value=999),
)  # type: ignore[misc]
def test_assignment_parses_correctly(var: str, num_value: int) -> None:
    assert statements(f"{var} := {num_value}") == [
        shape(n("assign", var, num(str(num_value))))
    ]


@given(st.lists(st.integers(min_value=0, max_value=99), min_size=1, max_size=20))  # type: ignore[misc]
def test_sum_chain_folds_left(values: list[int]) -> None:
    expected = num(str(values[0]))
    for v in values[1:]:
        expected = n("add", "+", expected, num(str(v)))
    assert expression(" + ".join(str(v) for v in values)) == shape(expected)


@given(st.lists(st.sampled_from(["a", "b", "c"]), min_size=1, max_size=15))  # type: ignore[misc]
def test_or_chain_nests_right(names: list[str]) -> None:
    expected = ident(names[-1])
    for name in reversed(names[:-1]):
        expected = n("or", None, ident(name), expected)
    assert expression(" or ".join(names)) == shape(expected)
