"""CLI: python -m lispexpr [--source] [<expression> | -]"""

import sys

from .errors import ParseError
from .parser import parse
from .types import to_source

DEMO = "(a '(quoted (dotted special . list)) test)"


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    show_source = "--source" in args
    args = [a for a in args if a != "--source"]
    if len(args) > 1:
        print("Usage: python -m lispexpr [--source] [<expression> | -]", file=sys.stderr)
        return 1

    src = args[0] if args else DEMO
    if src == "-":
        src = sys.stdin.read().strip()

    try:
        leftover, expr = parse(src)
    except ParseError as err:
        print(f"error at line {err.line}, column {err.column}: {err}", file=sys.stderr)
        return 1

    print(f"Output is {(leftover, expr)!r}")
    if show_source:
        print(to_source(expr))
    return 0


if __name__ == "__main__":
    sys.exit(main())
