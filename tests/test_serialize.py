from akin.core.config.settings import Settings
from akin.core.lex.tokenize import tokenize
from akin.core.render.serialize import serialize


def test_serialize_separates_tokens_with_one_space():
    assert serialize(tokenize("a+b  (c)")) == "a + b ( c )"


def test_serialize_suppresses_separator_before_joint_tokens():
    assert serialize(tokenize("get_~x ~( y")) == "get_x( y"


def test_serialize_emits_strings_verbatim():
    assert serialize(tokenize('f("a  ~b", \'c\')')) == 'f ( "a  ~b" , \'c\' )'


def test_serialize_empty():
    assert serialize([]) == ""


def test_serialize_custom_separator():
    assert serialize(tokenize("a b c"), Settings(separator="\n")) == "a\nb\nc"
