"""Recursive-descent parser for Lisp S-expressions.

Every rule takes a start offset and returns ``(end, value)`` or raises a
``ParseError``. Alternatives always restart from the original offset, and only
``UnrecognizedLexeme`` lets the next alternative run; any other error means a
rule committed to the input and is propagated as is.
"""

import string
from typing import Optional, Union

from .errors import (
    DepthExceeded,
    InternalParserError,
    MalformedDottedList,
    NumericOverflow,
    ParseError,
    TrailingInput,
    UnrecognizedLexeme,
    UnterminatedList,
    UnterminatedString,
)
from .types import Atom, Boolean, DottedList, Expression, List, Number, String

MAX_DEPTH = 100
MAX_NUMBER = 2**64 - 1

LETTERS = frozenset(string.ascii_letters)
DIGITS = frozenset(string.digits)
SYMBOLS = frozenset("!#$%&|*+-/:<=>?@^_~")
WHITESPACE = frozenset(" \t\r\n")

ATOM_START = LETTERS | SYMBOLS
ATOM_CHARS = ATOM_START | DIGITS
EXPRESSION_START = ATOM_START | DIGITS | frozenset("\"'(")


class _ParseState:
    __slots__ = ("src", "depth", "max_depth", "frontier", "lists")

    def __init__(self, src: str, max_depth: int):
        self.src = src
        self.depth = 0
        self.max_depth = max_depth
        # offset of the innermost expression entered
        self.frontier = 0
        # offset -> (end, List) or the ParseError the list rule raised there
        self.lists: dict[int, Union[tuple[int, List], ParseError]] = {}

    def error(self, cls, message: str, position: int, expected: str) -> ParseError:
        return cls(message, position, expected, self.src)

    def at(self, pos: int, ch: str) -> bool:
        return pos < len(self.src) and self.src[pos] == ch


def _skip(src: str, pos: int, chars: frozenset) -> int:
    while pos < len(src) and src[pos] in chars:
        pos += 1
    return pos


def _unrecognized(st: _ParseState, pos: int, expected: str) -> ParseError:
    found = "end of input" if pos >= len(st.src) else repr(st.src[pos])
    return st.error(
        UnrecognizedLexeme, f"unexpected {found} at offset {pos}, expected {expected}", pos, expected
    )


def _unterminated_list(st: _ParseState, opened: Optional[int], dot: Optional[int] = None) -> ParseError:
    if opened is None:
        message = f"unterminated list: input ends after '.' at offset {dot}"
    else:
        message = f"unterminated list: input ends before the ')' closing offset {opened}"
    return st.error(
        UnterminatedList,
        message,
        len(st.src),
        "')'",
    )


# --- Lexemes ---

def _atom(st: _ParseState, pos: int) -> tuple[int, Expression]:
    """Symbol, or a boolean when the text is exactly ``#t``/``#f``."""
    src = st.src
    if pos >= len(src) or src[pos] not in ATOM_START:
        raise _unrecognized(st, pos, "atom")
    end = _skip(src, pos + 1, ATOM_CHARS)
    text = src[pos:end]
    if text == "#t":
        return end, Boolean(True)
    if text == "#f":
        return end, Boolean(False)
    return end, Atom(text)


def _number(st: _ParseState, pos: int) -> tuple[int, Expression]:
    src = st.src
    end = _skip(src, pos, DIGITS)
    if end == pos:
        raise _unrecognized(st, pos, "number")
    digits = src[pos:end].lstrip("0") or "0"
    # Bound the length first: int() refuses very long digit strings.
    if len(digits) > len(str(MAX_NUMBER)) or int(digits) > MAX_NUMBER:
        raise st.error(
            NumericOverflow,
            f"number at offset {pos} does not fit in 64 bits",
            pos,
            "number",
        )
    return end, Number(int(digits))


def _string(st: _ParseState, pos: int) -> tuple[int, Expression]:
    """Double-quoted text. Backslashes are ordinary characters."""
    if not st.at(pos, '"'):
        raise _unrecognized(st, pos, "string")
    close = st.src.find('"', pos + 1)
    if close < 0:
        raise st.error(
            UnterminatedString,
            f"unterminated string: input ends before the '\"' closing offset {pos}",
            len(st.src),
            "'\"'",
        )
    return close + 1, String(st.src[pos + 1:close])


# --- Compound forms ---

def _quoted(st: _ParseState, pos: int) -> tuple[int, Expression]:
    """``'X`` is read as ``(quote X)``."""
    if not st.at(pos, "'"):
        raise _unrecognized(st, pos, "quote")
    end, inner = _expression(st, pos + 1)
    return end, List((Atom("quote"), inner))


def _list(st: _ParseState, pos: int) -> tuple[int, Expression]:
    """Whitespace-separated expressions, without the parentheses.

    Memoized per offset so the dotted and plain readings of one
    parenthesized form share a single parse of the items.
    """
    cached = st.lists.get(pos)
    if cached is None:
        try:
            cached = _list_items(st, pos)
        except ParseError as err:
            cached = err
        st.lists[pos] = cached
    if isinstance(cached, ParseError):
        raise cached
    return cached


def _list_items(st: _ParseState, pos: int) -> tuple[int, List]:
    try:
        end, item = _expression(st, pos)
    except UnrecognizedLexeme as err:
        if err.position != pos:
            raise
        return pos, List(())
    items = [item]
    while True:
        start = _skip(st.src, end, WHITESPACE)
        if start == end:
            break
        try:
            end, item = _expression(st, start)
        except UnrecognizedLexeme as err:
            # Nothing starts here: leave the separator unconsumed.
            if err.position != start:
                raise
            break
        items.append(item)
    return end, List(items)


def _dotted_list(st: _ParseState, pos: int, opened: Optional[int] = None) -> tuple[int, Expression]:
    """``a b . c`` without the parentheses; the dot needs whitespace on both sides.

    ``opened`` is the offset of the enclosing '(', when there is one.
    """
    src = st.src
    end, head = _list(st, pos)
    if not isinstance(head, List):
        raise InternalParserError(f"list rule returned {type(head).__name__} at offset {pos}", pos)

    dot = _skip(src, end, WHITESPACE)
    if not st.at(dot, "."):
        raise _unrecognized(st, dot, "'.'")
    if not head.items:
        raise st.error(
            MalformedDottedList,
            f"'.' at offset {dot} must follow at least one expression",
            dot,
            "expression",
        )
    if dot == end:
        raise st.error(
            MalformedDottedList, f"'.' at offset {dot} must be preceded by whitespace", dot, "whitespace"
        )

    after = dot + 1
    if after >= len(src):
        raise _unterminated_list(st, opened, dot)
    if src[after] == ")":
        raise st.error(
            MalformedDottedList, f"missing expression after '.' at offset {dot}", after, "expression"
        )
    if src[after] not in WHITESPACE:
        raise st.error(
            MalformedDottedList, f"'.' at offset {dot} must be followed by whitespace", after, "whitespace"
        )

    start = _skip(src, after, WHITESPACE)
    if start >= len(src):
        raise _unterminated_list(st, opened, dot)
    try:
        end, tail = _expression(st, start)
    except UnrecognizedLexeme as err:
        if err.position != start:
            raise
        raise st.error(
            MalformedDottedList, f"missing expression after '.' at offset {dot}", start, "expression"
        ) from err
    return end, DottedList(head.items, tail)


def _parenthesized(st: _ParseState, pos: int) -> tuple[int, Expression]:
    if not st.at(pos, "("):
        raise _unrecognized(st, pos, "list")
    dotted, missed = True, None
    try:
        end, value = _dotted_list(st, pos + 1, pos)
    except UnrecognizedLexeme as err:
        dotted, missed = False, err
        end, value = _list(st, pos + 1)

    src = st.src
    if st.at(end, ")"):
        return end + 1, value
    rest = _skip(src, end, WHITESPACE)
    if rest >= len(src):
        raise _unterminated_list(st, pos)
    if st.at(rest, ".") and not dotted:
        # The dotted reading got past the dot and failed in its tail.
        raise missed
    if dotted and rest > end and (src[rest] in EXPRESSION_START or src[rest] == "."):
        raise st.error(
            MalformedDottedList,
            f"expected ')' at offset {rest}: a dotted list ends with exactly one expression after '.'",
            rest,
            "')'",
        )
    raise _unrecognized(st, end if st.at(rest, ")") else rest, "')'")


# --- Expressions ---

_ALTERNATIVES = (_atom, _number, _string, _quoted, _parenthesized)


def _expression(st: _ParseState, pos: int) -> tuple[int, Expression]:
    st.depth += 1
    if st.depth > st.max_depth:
        st.depth -= 1
        raise st.error(
            DepthExceeded,
            f"expression at offset {pos} is nested more than {st.max_depth} levels deep",
            pos,
            "expression",
        )
    st.frontier = pos
    try:
        return _first_match(st, pos)
    finally:
        st.depth -= 1


def _first_match(st: _ParseState, pos: int) -> tuple[int, Expression]:
    furthest = None
    for rule in _ALTERNATIVES:
        try:
            return rule(st, pos)
        except UnrecognizedLexeme as err:
            if furthest is None or err.position > furthest.position:
                furthest = err
    if furthest.position > pos:
        raise furthest
    raise _unrecognized(st, pos, "expression")


def _run(rule, st: _ParseState, pos: int) -> tuple[int, Expression]:
    try:
        return rule(st, pos)
    except RecursionError:
        # max_depth was set above what the interpreter stack can hold.
        raise st.error(
            DepthExceeded,
            f"expression at offset {st.frontier} is nested too deeply for the interpreter stack",
            st.frontier,
            "expression",
        ) from None


def _entry(rule):
    def run(src: str, pos: int = 0, *, max_depth: int = MAX_DEPTH) -> tuple[int, Expression]:
        return _run(rule, _ParseState(src, max_depth), pos)

    run.__name__ = run.__qualname__ = "parse" + rule.__name__
    run.__doc__ = rule.__doc__
    return run


parse_atom = _entry(_atom)
parse_number = _entry(_number)
parse_string = _entry(_string)
parse_quoted = _entry(_quoted)
parse_list = _entry(_list)
parse_dotted_list = _entry(_dotted_list)
parse_parenthesized = _entry(_parenthesized)
parse_expression = _entry(_expression)


def parse(src: str, *, max_depth: int = MAX_DEPTH) -> tuple[str, Expression]:
    """Parse one expression from the start of src.

    Returns ``(leftover, expression)`` where leftover is the unconsumed rest
    of the input.
    """
    end, value = _run(_expression, _ParseState(src, max_depth), 0)
    return src[end:], value


def read(src: str, *, max_depth: int = MAX_DEPTH) -> Expression:
    """Parse src as exactly one expression, ignoring surrounding whitespace."""
    st = _ParseState(src, max_depth)
    end, value = _run(_expression, st, _skip(src, 0, WHITESPACE))
    rest = _skip(src, end, WHITESPACE)
    if rest < len(src):
        raise st.error(
            TrailingInput, f"unexpected input after the expression at offset {rest}", rest, "end of input"
        )
    return value
