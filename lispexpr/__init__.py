from .parser import parse, read, MAX_DEPTH
from .types import Atom, Boolean, DottedList, Expression, List, Number, String, to_source
from .errors import (
    ParseError,
    UnrecognizedLexeme,
    UnterminatedString,
    UnterminatedList,
    MalformedDottedList,
    NumericOverflow,
    TrailingInput,
    DepthExceeded,
    InternalParserError,
)

__all__ = [
    "parse", "read", "MAX_DEPTH", "to_source",
    "Atom", "Boolean", "DottedList", "Expression", "List", "Number", "String",
    "ParseError", "UnrecognizedLexeme", "UnterminatedString", "UnterminatedList",
    "MalformedDottedList", "NumericOverflow", "TrailingInput", "DepthExceeded",
    "InternalParserError",
]
