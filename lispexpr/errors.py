"""Parse failures.

Every user-input failure is a ``ParseError`` carrying the character offset
where it was detected and the grammar category that was expected there.
``InternalParserError`` is kept outside that hierarchy: it signals a bug in
the grammar, not bad input.
"""

from typing import Optional


class ParseError(SyntaxError):
    def __init__(self, message: str, position: int, expected: str, source: str = ""):
        super().__init__(message)
        self.message = message
        self.position = position
        self.expected = expected
        self.source = source

    @property
    def line(self) -> int:
        return self.source.count("\n", 0, self.position) + 1

    @property
    def column(self) -> int:
        return self.position - (self.source.rfind("\n", 0, self.position) + 1) + 1

    def __str__(self) -> str:
        return self.message

    def __reduce__(self):
        return (type(self), (self.message, self.position, self.expected, self.source))


class UnrecognizedLexeme(ParseError):
    """No grammar alternative matches at the position."""


class UnterminatedString(ParseError):
    pass


class UnterminatedList(ParseError):
    pass


class MalformedDottedList(ParseError):
    pass


class NumericOverflow(ParseError):
    pass


class TrailingInput(ParseError):
    pass


class DepthExceeded(ParseError):
    pass


class InternalParserError(RuntimeError):
    """A rule produced a value of the wrong shape."""

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.position = position
