import pickle

import pytest
from lispexpr import parser
from lispexpr.parser import parse, parse_dotted_list, read
from lispexpr.errors import (
    InternalParserError,
    MalformedDottedList,
    NumericOverflow,
    ParseError,
    TrailingInput,
    UnrecognizedLexeme,
    UnterminatedList,
    UnterminatedString,
)
from lispexpr.types import Atom, Number


# --- Unrecognized input ---

def test_empty_input():
    with pytest.raises(UnrecognizedLexeme, match="unexpected end of input") as exc:
        parse("")
    assert exc.value.position == 0
    assert exc.value.expected == "expression"


def test_unexpected_close_paren():
    with pytest.raises(UnrecognizedLexeme, match="unexpected '\\)' at offset 0"):
        parse(")")


def test_leading_whitespace_is_not_an_expression():
    with pytest.raises(UnrecognizedLexeme):
        parse(" a")


def test_non_ascii_letter():
    with pytest.raises(UnrecognizedLexeme) as exc:
        parse("(a é)")
    assert exc.value.position == 3


def test_dangling_quote():
    with pytest.raises(UnrecognizedLexeme) as exc:
        parse("'")
    assert exc.value.position == 1


def test_bad_item_inside_list():
    with pytest.raises(UnrecognizedLexeme, match="unexpected '\\]' at offset 5") as exc:
        parse("(a b ])")
    assert exc.value.expected == "')'"


def test_whitespace_before_close_paren():
    with pytest.raises(UnrecognizedLexeme) as exc:
        parse("(a )")
    assert exc.value.position == 2


def test_whitespace_after_open_paren():
    with pytest.raises(UnrecognizedLexeme):
        parse("( a)")


def test_trailing_input():
    with pytest.raises(TrailingInput, match="offset 2") as exc:
        read("a b")
    assert exc.value.position == 2


# --- Unterminated forms ---

def test_unterminated_string():
    with pytest.raises(UnterminatedString, match="unterminated string") as exc:
        parse('"abc')
    assert exc.value.position == 4


def test_unterminated_string_in_list():
    with pytest.raises(UnterminatedString):
        parse('(a "bc)')


def test_unterminated_list():
    with pytest.raises(UnterminatedList, match="unterminated"):
        parse("(a b")


def test_unterminated_nested_list():
    with pytest.raises(UnterminatedList, match="offset 0"):
        parse("(a (b c)")


@pytest.mark.parametrize("src", ["(a .", "(a . ", "(a . b", "(a . b  "])
def test_unterminated_dotted_list(src):
    with pytest.raises(UnterminatedList):
        parse(src)


# --- Dotted lists ---

@pytest.mark.parametrize("src", ["(a .)", "(a . )"])
def test_dot_without_tail(src):
    with pytest.raises(MalformedDottedList, match="missing expression after '.'"):
        parse(src)


@pytest.mark.parametrize("src", ["(. b)", "( . b)", "(.)"])
def test_dot_without_head(src):
    with pytest.raises(MalformedDottedList, match="must follow at least one expression"):
        parse(src)


@pytest.mark.parametrize("src", ["(a.b)", "(a. b)"])
def test_dot_needs_leading_whitespace(src):
    with pytest.raises(MalformedDottedList, match="preceded by whitespace"):
        parse(src)


def test_dot_needs_trailing_whitespace():
    with pytest.raises(MalformedDottedList, match="followed by whitespace"):
        parse("(a .b)")


@pytest.mark.parametrize("src", ["(a . b c)", "(a . b . c)"])
def test_dot_with_two_tails(src):
    with pytest.raises(MalformedDottedList, match="exactly one expression"):
        parse(src)


# --- Numbers ---

def test_number_overflow():
    with pytest.raises(NumericOverflow, match="64 bits") as exc:
        parse("18446744073709551616")
    assert exc.value.position == 0


def test_very_long_number_overflows():
    with pytest.raises(NumericOverflow):
        parse("9" * 5000)


def test_long_zero_padded_number_fits():
    assert parse("0" * 5000 + "42") == ("", Number(42))


def test_overflow_inside_list():
    with pytest.raises(NumericOverflow) as exc:
        parse("(1 99999999999999999999)")
    assert exc.value.position == 3


# --- Error shape ---

@pytest.mark.parametrize("src", ['"abc', "(a b", "(a .)", ")", "99999999999999999999"])
def test_parse_errors_are_syntax_errors(src):
    with pytest.raises(SyntaxError):
        parse(src)


def test_error_line_and_column():
    with pytest.raises(ParseError) as exc:
        parse('(a\n "b')
    assert exc.value.line == 2
    assert exc.value.column == 4
    assert exc.value.source == '(a\n "b'


def test_internal_error_is_not_a_parse_error():
    assert not issubclass(InternalParserError, ParseError)


def test_dotted_list_rejects_non_list_head(monkeypatch):
    monkeypatch.setattr(parser, "_list", lambda st, pos: (pos + 1, Atom("x")))
    with pytest.raises(InternalParserError, match="list rule returned Atom"):
        parse_dotted_list("a . b")


def test_bad_dotted_tail_reports_tail_position():
    with pytest.raises(UnrecognizedLexeme) as exc:
        parse("(a . 'é)")
    assert exc.value.position == 6


@pytest.mark.parametrize("src, position", [("(a )", 2), ("(a b  )", 4), ("(() )", 3)])
def test_padding_before_close_paren(src, position):
    with pytest.raises(UnrecognizedLexeme) as exc:
        parse(src)
    assert exc.value.position == position
    assert exc.value.expected == "')'"


@pytest.mark.parametrize("src", ["(a . b )", "(a . b]"])
def test_dotted_list_bad_close(src):
    with pytest.raises(UnrecognizedLexeme) as exc:
        parse(src)
    assert exc.value.position == 6
    assert exc.value.expected == "')'"


def test_unterminated_dotted_list_names_open_paren():
    with pytest.raises(UnterminatedList, match="closing offset 3"):
        parse("(x (a .")


def test_unterminated_dotted_list_without_parens():
    with pytest.raises(UnterminatedList, match="ends after '.' at offset 2"):
        parse_dotted_list("a .")


def test_parse_error_pickles():
    with pytest.raises(MalformedDottedList) as exc:
        parse("(a .b)")
    copy = pickle.loads(pickle.dumps(exc.value))
    assert type(copy) is MalformedDottedList
    assert (copy.position, copy.expected, copy.source) == (4, "whitespace", "(a .b)")
    assert str(copy) == str(exc.value)
