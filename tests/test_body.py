from akin.core.config.settings import Settings
from akin.core.errors import AkinSyntaxError, UndeclaredVariableError
from akin.core.lex.tokenize import tokenize
from akin.core.model import Block, StringTemplate, Token, VariableRef
from akin.core.parse.body import parse_body
from akin.core.parse.declarations import parse_declarations


def _parse(text, settings=None):
    tokens = tokenize(text, settings)
    table, start = parse_declarations(tokens, settings)
    return parse_body(tokens[start:], table, settings)


def _expect_error(text, cls):
    try:
        _parse(text)
        assert False, f"expected {cls.__name__}"
    except cls as e:
        return e


def test_body_builds_nested_blocks():
    body = _parse("a ( b [ c ] ) { }")
    assert isinstance(body.nodes[0], Token)
    paren = body.nodes[1]
    assert isinstance(paren, Block)
    assert paren.open.text == "(" and paren.close.text == ")"
    assert isinstance(paren.nodes[1], Block)
    assert paren.nodes[1].open.text == "["
    brace = body.nodes[2]
    assert isinstance(brace, Block) and brace.nodes == ()


def test_body_folds_references():
    body = _parse("let &x = [1]; a *x b")
    assert len(body.nodes) == 3
    ref = body.nodes[1]
    assert isinstance(ref, VariableRef)
    assert ref.name == "x"
    assert ref.joint is False


def test_body_reference_keeps_joint_flag():
    body = _parse("let &x = [1]; a~*x")
    ref = body.nodes[1]
    assert isinstance(ref, VariableRef) and ref.joint is True


def test_spaced_marker_is_not_a_reference():
    body = _parse("a * b")
    assert [n.text for n in body.nodes] == ["a", "*", "b"]


def test_undeclared_reference_fails_with_position():
    e = _expect_error("let &a = [1];\nfoo(*b);", UndeclaredVariableError)
    assert e.code == "E_UNDECLARED_VARIABLE"
    assert (e.span.line, e.span.column) == (2, 5)


def test_mismatched_delimiters():
    e = _expect_error("( ]", AkinSyntaxError)
    assert "mismatched" in e.message


def test_unclosed_and_stray_delimiters():
    e = _expect_error("{ a ( b )", AkinSyntaxError)
    assert "unclosed" in e.message
    e = _expect_error("a )", AkinSyntaxError)
    assert "unexpected closing" in e.message


def test_string_interpolation_builds_template():
    body = _parse('let &a = [1, 2]; print("*a and *other");')
    paren = body.nodes[1]
    node = paren.nodes[0]
    assert isinstance(node, StringTemplate)
    assert node.parts[0] == '"'
    assert isinstance(node.parts[1], VariableRef) and node.parts[1].name == "a"
    assert node.parts[2] == ' and *other"'


def test_string_interpolation_requires_whole_name():
    body = _parse('let &a = [1]; "*ab"')
    assert isinstance(body.nodes[0], Token)


def test_char_literals_are_not_interpolated():
    body = _parse("let &a = [1]; '*'")
    assert isinstance(body.nodes[0], Token)


def test_interpolation_can_be_disabled():
    body = _parse('let &a = [1]; "*a"', Settings(interpolate_strings=False))
    assert isinstance(body.nodes[0], Token)
