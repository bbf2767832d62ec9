import pytest
from hypothesis import given
from hypothesis import strategies as st
from hypothesis.strategies import composite

from fcn.fcn_ast import (
    Add,
    ASTNode,
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
from fcn.fcn_constants import MAX_NESTING_DEPTH, reserved_words
from fcn.fcn_errors import (
    LexicalError,
    NestingTooDeep,
    NumericOverflow,
    ParseError,
    TrailingInput,
    UnexpectedToken,
    UnterminatedGroup,
)
from fcn.fcn_lexer import tokenize
from fcn.fcn_dump import dump
from fcn.fcn_parser import Parser, parse, parse_expression, parse_statement

I = IntLiteral
V = Variable
T = TypeName


def func(
    name: str,
    ret: str = "int",
    params: tuple[str, ...] = (),
    body: tuple[ASTNode, ...] = (),
) -> FunctionDefinition:
    return FunctionDefinition(V(name), T(ret), [V(p) for p in params], body)


identifiers = st.from_regex(r"[a-zA-Z_][a-zA-Z0-9_]{0,10}", fullmatch=True).filter(
    lambda x: x not in reserved_words
)


# Expressions


@pytest.mark.parametrize(
    "source,expected",
    [
        ("1", I(1)),
        ("007", I(7)),
        ("x", V("x")),
        ('"hi there"', StrLiteral("hi there")),
        ("2.5", FloatLiteral(2.5)),
        ("1+2*3", Add(I(1), Multiply(I(2), I(3)))),
        ("1*2+3", Add(Multiply(I(1), I(2)), I(3))),
        ("1-2-3", Subtract(Subtract(I(1), I(2)), I(3))),
        ("8/4/2", Divide(Divide(I(8), I(4)), I(2))),
        ("(1+2)*3", Multiply(Add(I(1), I(2)), I(3))),
        ("1-(2-3)", Subtract(I(1), Subtract(I(2), I(3)))),
        ("--5", Negate(Negate(I(5)))),
        ("- - x", Negate(Negate(V("x")))),
        ("-a*b", Multiply(Negate(V("a")), V("b"))),
        ("a--b", Subtract(V("a"), Negate(V("b")))),
        ("-(a+b)", Negate(Add(V("a"), V("b")))),
        ("((x))", V("x")),
        ("f()", Call(V("f"), [])),
        ("f ( )", Call(V("f"), [])),
        ("f(1)", Call(V("f"), [I(1)])),
        ("f(a, b+1)", Call(V("f"), [V("a"), Add(V("b"), I(1))])),
        (
            "f(g(1), h(x*2))",
            Call(V("f"), [Call(V("g"), [I(1)]), Call(V("h"), [Multiply(V("x"), I(2))])]),
        ),
        ("-f(1)", Negate(Call(V("f"), [I(1)]))),
        ("f(1)*2", Multiply(Call(V("f"), [I(1)]), I(2))),
        ('f("a", 1.5)', Call(V("f"), [StrLiteral("a"), FloatLiteral(1.5)])),
        ("  1  +  2  ", Add(I(1), I(2))),
        ("1 # comment\n + 2", Add(I(1), I(2))),
    ],
)  # type: ignore[misc]
def test_expressions(source: str, expected: ASTNode) -> None:
    assert parse_expression(source) == expected


def test_expression_positions() -> None:
    expr = parse_expression("a + b * -c")
    assert isinstance(expr, Add)
    assert (expr.line, expr.col) == (1, 1)
    assert isinstance(expr.right, Multiply)
    assert (expr.right.line, expr.right.col) == (1, 5)
    assert isinstance(expr.right.right, Negate)
    assert (expr.right.right.line, expr.right.right.col) == (1, 9)


def test_float_is_rounded_to_single_precision() -> None:
    expr = parse_expression("0.1")
    assert isinstance(expr, FloatLiteral)
    assert expr.value != 0.1
    assert abs(expr.value - 0.1) < 1e-7


def test_parse_expression_leaves_remaining_tokens() -> None:
    parser = Parser(tokenize("1 + 2; ret"))
    assert parser.parse_expression() == Add(I(1), I(2))
    assert [t.type for t in parser.remaining()] == ["SEMI", "RET", "EOF"]


def test_parser_appends_missing_eof() -> None:
    tokens = tokenize("x")[:-1]
    parser = Parser(tokens)
    assert parser.parse_expression() == V("x")
    assert parser.current().type == "EOF"


def test_parser_accepts_empty_token_list() -> None:
    assert Parser([]).parse() == Program([])


@pytest.mark.parametrize(
    "source,error",
    [
        ("", UnexpectedToken),
        ("+", UnexpectedToken),
        ("1 +", UnexpectedToken),
        ("*2", UnexpectedToken),
        ("(1", UnterminatedGroup),
        ("((1)", UnterminatedGroup),
        ("f(1, 2", UnterminatedGroup),
        ("f(", UnterminatedGroup),
        ("f(1,", UnterminatedGroup),
        ("(1 +", UnterminatedGroup),
        ("(-", UnterminatedGroup),
        ("f(g(1,", UnterminatedGroup),
        ("f(1,)", UnexpectedToken),
        ("f(,1)", UnexpectedToken),
        ("(1 2)", UnexpectedToken),
        ("1 2", TrailingInput),
        ("f(1))", TrailingInput),
        ("ret", UnexpectedToken),
        ("fcn", UnexpectedToken),
        ("a = 1", TrailingInput),
        ("99999999999999999999", NumericOverflow),
        ('"unterminated', LexicalError),
    ],
)  # type: ignore[misc]
def test_expression_errors(source: str, error: type[ParseError]) -> None:
    with pytest.raises(error):
        parse_expression(source)


def test_unexpected_token_details() -> None:
    with pytest.raises(UnexpectedToken) as exc:
        parse_expression("1 + ;")
    err = exc.value
    assert err.found.type == "SEMI"
    assert "IDENT" in err.expected
    assert err.position.col == 5
    assert "got ';'" in str(err)
    assert "line 1, col 5" in str(err)


def test_unterminated_group_details() -> None:
    with pytest.raises(UnterminatedGroup) as exc:
        parse_expression("f(1,\n 2")
    err = exc.value
    assert err.opener.type == "LPAREN"
    assert err.opener.col == 2
    assert err.closer == "RPAREN"
    assert err.position.line == 2


def test_unterminated_group_reports_innermost_opener() -> None:
    with pytest.raises(UnterminatedGroup) as exc:
        parse_expression("f(g(1,")
    assert exc.value.opener.col == 4
    assert isinstance(exc.value.__cause__, UnexpectedToken)


def test_unterminated_block_reports_brace() -> None:
    with pytest.raises(UnterminatedGroup) as exc:
        parse("fcn int f() {\n  ret 1")
    assert exc.value.opener.type == "LBRACE"
    assert exc.value.closer == "RBRACE"
    assert exc.value.position.line == 2


def test_negative_int64_min_overflows() -> None:
    # The minus sign is a separate Negate node, so the literal itself overflows.
    with pytest.raises(NumericOverflow):
        parse_expression("-9223372036854775808")


def test_nesting_limit() -> None:
    src = "(" * 30 + "1" + ")" * 30
    assert parse_expression(src, max_depth=40) == I(1)
    with pytest.raises(NestingTooDeep) as exc:
        parse_expression(src, max_depth=20)
    assert exc.value.limit == 20


def test_nesting_limit_counts_call_arguments() -> None:
    src = "f(" * 10 + ")" * 10
    with pytest.raises(NestingTooDeep):
        parse_expression(src, max_depth=5)


def test_default_nesting_limit_prevents_recursion_error() -> None:
    src = "(" * 5000 + "1" + ")" * 5000
    with pytest.raises(NestingTooDeep):
        parse_expression(src)


def test_nesting_limit_counts_operator_chains() -> None:
    assert parse_expression("+".join(["1"] * 10), max_depth=10).height == 10
    with pytest.raises(NestingTooDeep) as exc:
        parse_expression("+".join(["1"] * 11), max_depth=10)
    # The tenth `+` would make the tree eleven levels tall.
    assert exc.value.position.col == 20


def test_nesting_limit_counts_prefix_minus() -> None:
    assert parse_expression("-" * 9 + "1", max_depth=10).height == 10
    with pytest.raises(NestingTooDeep) as exc:
        parse_expression("-" * 10 + "1", max_depth=10)
    assert exc.value.position.col == 1


def test_nesting_limit_counts_nested_calls() -> None:
    assert parse_expression("f(" * 4 + ")" * 4, max_depth=10).height == 5
    with pytest.raises(NestingTooDeep):
        parse_expression("f(-" * 5 + "1" + ")" * 5, max_depth=10)


def test_long_chain_in_program_is_rejected() -> None:
    src = "fcn int f() { ret " + "+".join(["1"] * 1500) + "; }"
    with pytest.raises(NestingTooDeep):
        parse(src)
    with pytest.raises(NestingTooDeep):
        parse("fcn int f() { ret " + "-" * 3000 + "1; }")


def test_chain_at_limit_can_be_dumped_and_compared() -> None:
    src = "fcn int f() { ret " + "+".join(["1"] * MAX_NESTING_DEPTH) + "; }"
    program = parse(src)
    assert program == parse(src)
    assert dump(program).count("Add(") == MAX_NESTING_DEPTH - 1
    assert program.to_dict()["kind"] == "program"


def test_depth_resets_after_error() -> None:
    parser = Parser(tokenize("(1"))
    with pytest.raises(UnterminatedGroup):
        parser.parse_expression()
    assert parser.depth == 0


# Statements


@pytest.mark.parametrize(
    "source,expected",
    [
        ("int x = 1;", Declaration(V("x"), T("int"), I(1))),
        ("str s = \"a\";", Declaration(V("s"), T("str"), StrLiteral("a"))),
        ("int y = f(x) + 1;", Declaration(V("y"), T("int"), Add(Call(V("f"), [V("x")]), I(1)))),
        ("ret 1;", Return(I(1))),
        ("return a * b;", Return(Multiply(V("a"), V("b")))),
        ("ret -x;", Return(Negate(V("x")))),
        ("f(1);", Call(V("f"), [I(1)])),
        ("x;", V("x")),
        ("1 + 2;", Add(I(1), I(2))),
        ("-x;", Negate(V("x"))),
        ("(a);", V("a")),
    ],
)  # type: ignore[misc]
def test_statements(source: str, expected: ASTNode) -> None:
    assert parse_statement(source) == expected


@pytest.mark.parametrize(
    "source,error",
    [
        ("int x = 1", UnexpectedToken),
        ("int x 1;", UnexpectedToken),
        ("int x = ;", UnexpectedToken),
        ("int ret = 1;", UnexpectedToken),
        ("ret int = 1;", UnexpectedToken),
        ("int 1 = 1;", UnexpectedToken),
        ("x = 1;", UnexpectedToken),
        ("ret 1", UnexpectedToken),
        ("ret;", UnexpectedToken),
        ("f(1)", UnexpectedToken),
        (";", UnexpectedToken),
        ("}", UnexpectedToken),
        ("ret 1;;", TrailingInput),
    ],
)  # type: ignore[misc]
def test_statement_errors(source: str, error: type[ParseError]) -> None:
    with pytest.raises(error):
        parse_statement(source)


def test_declaration_positions() -> None:
    stmt = parse_statement("  int x = 1;")
    assert isinstance(stmt, Declaration)
    assert (stmt.line, stmt.col) == (1, 3)
    assert stmt.type_name is not None
    assert (stmt.type_name.line, stmt.type_name.col) == (1, 3)
    assert (stmt.name.line, stmt.name.col) == (1, 7)


def test_declaration_requires_assign_after_two_identifiers() -> None:
    with pytest.raises(UnexpectedToken) as exc:
        parse_statement("int x;")
    assert exc.value.expected == ("ASSIGN",)


def test_return_keyword_as_identifier_rejected() -> None:
    with pytest.raises(UnexpectedToken):
        parse_statement("int return = 1;")


# Functions and programs


def test_empty_function() -> None:
    program = parse("fcn int f(){ }")
    assert program == Program([func("f")])
    assert program.functions[0].params == ()
    assert program.functions[0].body == ()


def test_function_with_params_and_body() -> None:
    source = """
    fcn int add(a, b) {
        int total = a + b;
        log(total);
        ret total;
    }
    """
    expected = func(
        "add",
        params=("a", "b"),
        body=(
            Declaration(V("total"), T("int"), Add(V("a"), V("b"))),
            Call(V("log"), [V("total")]),
            Return(V("total")),
        ),
    )
    assert parse(source) == Program([expected])


def test_function_order_is_textual_order() -> None:
    source = "fcn int b(){} fcn str a(){} fcn void c(){}"
    program = parse(source)
    assert [f.name.name for f in program.functions] == ["b", "a", "c"]
    assert program.functions[1].return_type == T("str")


def test_function_positions() -> None:
    program = parse("\n\nfcn int main() {\n  ret 0;\n}")
    main = program.functions[0]
    assert (main.line, main.col) == (3, 1)
    assert (main.name.line, main.name.col) == (3, 9)
    assert (main.body[0].line, main.body[0].col) == (4, 3)


def test_empty_program() -> None:
    assert parse("") == Program([])
    assert parse("  # only a comment\n") == Program([])


def test_comments_between_functions() -> None:
    program = parse("# first\nfcn int a(){}\n# second\nfcn int b(){ ret 1; # one\n }")
    assert program == Program([func("a"), func("b", body=(Return(I(1)),))])


@pytest.mark.parametrize(
    "source,error",
    [
        ("fcn int f( { }", UnexpectedToken),
        ("fcn int f() { ret 1 }", UnexpectedToken),
        ("fcn int f() { ret 1; ", UnterminatedGroup),
        ("fcn int f(a", UnterminatedGroup),
        ("fcn int f(a,", UnterminatedGroup),
        ("fcn int f(", UnterminatedGroup),
        ("fcn int f() { ret 1", UnterminatedGroup),
        ("fcn int f() { int x =", UnterminatedGroup),
        ("fcn int f(a,) {}", UnexpectedToken),
        ("fcn int f(a b) {}", UnexpectedToken),
        ("fcn int f(1) {}", UnexpectedToken),
        ("fcn f() {}", UnexpectedToken),
        ("fcn int f {}", UnexpectedToken),
        ("fcn int f()", UnexpectedToken),
        ("fcn int fcn() {}", UnexpectedToken),
        ("fcn int f() {} x", TrailingInput),
        ("int x = 1;", TrailingInput),
        ("fcn int f() {} }", TrailingInput),
        ("fcn int f() { fcn int g() {} }", UnexpectedToken),
        ("fcn int f() { ; }", UnexpectedToken),
        ("fcn int f() { int x = 1;; }", UnexpectedToken),
    ],
)  # type: ignore[misc]
def test_program_errors(source: str, error: type[ParseError]) -> None:
    with pytest.raises(error):
        parse(source)


def test_missing_param_paren_reports_found_token() -> None:
    with pytest.raises(UnexpectedToken) as exc:
        parse("fcn int f( { }")
    assert exc.value.found.type == "LBRACE"
    assert exc.value.position.col == 12


def test_trailing_input_position() -> None:
    with pytest.raises(TrailingInput) as exc:
        parse("fcn int f() {}\n  junk")
    assert exc.value.found.value == "junk"
    assert (exc.value.position.line, exc.value.position.col) == (2, 3)


def test_errors_are_syntax_errors() -> None:
    with pytest.raises(SyntaxError):
        parse("fcn")


# Property tests


@composite  # type: ignore[misc]
def expressions(draw: st.DrawFn, depth: int = 0) -> tuple[str, ASTNode]:
    if depth > 3:
        choice = draw(st.sampled_from(["int", "var"]))
    else:
        choice = draw(st.sampled_from(["int", "var", "add", "mul", "neg", "group", "call"]))

    if choice == "int":
        value = draw(st.integers(min_value=0, max_value=10**6))
        return str(value), I(value)
    if choice == "var":
        name = draw(identifiers)
        return name, V(name)
    if choice in ("add", "mul"):
        lsrc, lnode = draw(expressions(depth + 1))
        rsrc, rnode = draw(expressions(depth + 1))
        cls = Add if choice == "add" else Multiply
        op = "+" if choice == "add" else "*"
        # Parenthesise operands so the expected tree is unambiguous.
        return f"({lsrc}) {op} ({rsrc})", cls(lnode, rnode)
    if choice == "neg":
        src, node = draw(expressions(depth + 1))
        return f"-({src})", Negate(node)
    if choice == "group":
        src, node = draw(expressions(depth + 1))
        return f"({src})", node
    name = draw(identifiers)
    args = draw(st.lists(expressions(depth + 1), max_size=3))
    src = ", ".join(a for a, _ in args)
    return f"{name}({src})", Call(V(name), [n for _, n in args])


@given(expressions())  # type: ignore[misc]
def test_generated_expressions_parse(case: tuple[str, ASTNode]) -> None:
    source, expected = case
    assert parse_expression(source) == expected


@given(st.lists(identifiers, min_size=0, max_size=8))  # type: ignore[misc]
def test_generated_function_order(names: list[str]) -> None:
    source = "\n".join(f"fcn int {n}() {{ ret 0; }}" for n in names)
    program = parse(source)
    assert [f.name.name for f in program.functions] == names


@given(
    type_=identifiers,
    var=identifiers,
    num=st.integers(min_value=0, max_value=999),
)  # type: ignore[misc]
def test_declaration_parses_correctly(type_: str, var: str, num: int) -> None:
    stmt = parse_statement(f"{type_} {var} = {num};")
    assert stmt == Declaration(V(var), T(type_), I(num))


@given(st.lists(st.integers(min_value=0, max_value=100), min_size=2, max_size=6))  # type: ignore[misc]
def test_subtraction_is_left_associative(values: list[int]) -> None:
    expected: ASTNode = I(values[0])
    for v in values[1:]:
        expected = Subtract(expected, I(v))
    assert parse_expression(" - ".join(str(v) for v in values)) == expected


@given(st.text(max_size=60))  # type: ignore[misc]
def test_parser_only_raises_parse_errors(source: str) -> None:
    try:
        parse(source)
    except ParseError:
        pass


def test_long_zero_padded_literal() -> None:
    assert parse_expression("0" * 5000 + "42") == I(42)


def test_very_long_literal_overflows() -> None:
    with pytest.raises(NumericOverflow):
        parse_expression("9" * 5000)
