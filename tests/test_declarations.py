from akin.core.config.settings import Settings
from akin.core.errors import (
    AkinSyntaxError,
    DuplicateDeclarationError,
    TypeMismatchError,
    UndeclaredVariableError,
)
from akin.core.lex.tokenize import tokenize
from akin.core.parse.declarations import parse_declarations


def _decl(text, settings=None):
    table, _ = parse_declarations(tokenize(text, settings), settings)
    return table


def _values(table, name):
    return [[t.text for t in v] for v in table[name].values]


def _expect_error(text, cls, settings=None):
    try:
        _decl(text, settings)
        assert False, f"expected {cls.__name__}"
    except cls as e:
        return e


def test_value_list():
    table = _decl("let &op = [+, -, *, /];")
    assert _values(table, "op") == [["+"], ["-"], ["*"], ["/"]]


def test_declaration_prefix_stops_at_body():
    tokens = tokenize("let &a = [1]; let &b = NONE; let x = *a;")
    table, start = parse_declarations(tokens)
    assert list(table) == ["a", "b"]
    assert [t.text for t in tokens[start:]] == ["let", "x", "=", "*", "a", ";"]


def test_none_marker():
    table = _decl("let &a = NONE; let &b = [x, NONE, y];")
    assert _values(table, "a") == [[]]
    assert _values(table, "b") == [["x"], [], ["y"]]


def test_braced_items_are_unwrapped_and_groups_kept():
    table = _decl("let &v = [{u64: u64}, ['a', 'b'], {}, (1, 2),];")
    assert _values(table, "v") == [
        ["u64", ":", "u64"],
        ["[", "'a'", ",", "'b'", "]"],
        [],
        ["(", "1", ",", "2", ")"],
    ]


def test_range_equivalence():
    inclusive = _decl("let &n = 0..=3; let &m = [0, 1, 2, 3];")
    assert _values(inclusive, "n") == _values(inclusive, "m")

    exclusive = _decl("let &n = 0..3; let &m = [0, 1, 2];")
    assert _values(exclusive, "n") == _values(exclusive, "m")


def test_range_accepts_u64_max():
    table = _decl("let &n = 18446744073709551614..=18446744073709551615;")
    assert _values(table, "n") == [["18446744073709551614"], ["18446744073709551615"]]


def test_braced_declaration_expands_against_earlier_variables():
    table = _decl("let &v = [1, 2, 3]; let &arm = { *v => *v, };")
    assert len(table["arm"].values) == 1
    assert _values(table, "arm") == [["1", "=>", "1", ",", "2", "=>", "2", ",", "3", "=>", "3", ","]]


def test_braced_declaration_rejects_forward_reference():
    e = _expect_error("let &arm = { *later }; let &later = [1];", UndeclaredVariableError)
    assert e.code == "E_UNDECLARED_VARIABLE"
    assert "later" in e.message


def test_duplicate_declaration():
    e = _expect_error("let &a = [1, 2];\nlet &a = 0..=3;", DuplicateDeclarationError)
    assert e.code == "E_DUPLICATE_DECLARATION"
    assert e.span is not None
    assert (e.span.line, e.span.column) == (2, 6)


def test_descending_range_is_type_mismatch():
    e = _expect_error("let &n = 5..2;", TypeMismatchError)
    assert e.code == "E_TYPE_MISMATCH"
    assert "descending" in e.message


def test_empty_range_is_type_mismatch():
    _expect_error("let &n = 3..3;", TypeMismatchError)


def test_range_bounds_must_be_unsigned_64_bit():
    for text in [
        "let &n = a..3;",
        "let &n = -1..3;",
        "let &n = 1.5..3;",
        "let &n = 0..18446744073709551616;",
    ]:
        e = _expect_error(text, TypeMismatchError)
        assert e.code == "E_TYPE_MISMATCH"


def test_range_size_limit_comes_from_settings():
    _expect_error("let &n = 0..10;", TypeMismatchError, Settings(max_range_values=3))
    table = _decl("let &n = 0..3;", Settings(max_range_values=3))
    assert len(table["n"].values) == 3


def test_malformed_declarations_are_syntax_errors():
    for text in [
        "let &a = [];",
        "let &a = [1, 2]",
        "let &a [1];",
        "let &a = [1,, 2];",
        "let &a = [x y];",
        "let &a = foo;",
        "let &a = [1, 2;",
        "let &",
        "let &3 = [1];",
        "let &n = 0..;",
        "let &n = 0..=;",
        "let &n = 0..",
    ]:
        e = _expect_error(text, AkinSyntaxError)
        assert e.code == "E_SYNTAX", text


def test_multi_token_value_message():
    e = _expect_error("let &a = [x y];", AkinSyntaxError)
    assert "{...}" in e.message


def test_custom_declaration_syntax():
    settings = Settings(decl_keyword="def", decl_sigil="@", none_marker="EMPTY")
    table = _decl("def @a = [1, EMPTY];", settings)
    assert _values(table, "a") == [["1"], []]
