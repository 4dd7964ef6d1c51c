"""Text control protocol: command parsing and reply formatting.

One command per line, case-insensitive verb, whitespace-separated arguments.
Every reply is a single line, ``OK [payload]`` or ``ERROR <description>``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from logpeek.errors import InvalidArgumentError
from logpeek.marks import validate_region


class Verb(StrEnum):
    GOTO = "goto"
    LINES = "lines"
    TOP = "top"
    SIZE = "size"
    CURSOR = "cursor"
    MARK = "mark"
    UNMARK = "unmark"
    SEARCH = "search"
    SEARCH_NEXT = "search-next"
    SEARCH_PREV = "search-prev"
    SEARCH_CLEAR = "search-clear"


@dataclass(frozen=True, slots=True)
class Goto:
    line: int


@dataclass(frozen=True, slots=True)
class Lines:
    pass


@dataclass(frozen=True, slots=True)
class Top:
    pass


@dataclass(frozen=True, slots=True)
class Size:
    pass


@dataclass(frozen=True, slots=True)
class Cursor:
    """Query the cursor (``line`` is None) or set it."""

    line: int | None = None


@dataclass(frozen=True, slots=True)
class Mark:
    line: int
    color: str
    region: tuple[int, int] | None = None


@dataclass(frozen=True, slots=True)
class Unmark:
    line: int
    region: tuple[int, int] | None = None


@dataclass(frozen=True, slots=True)
class Search:
    pattern: str


@dataclass(frozen=True, slots=True)
class SearchNext:
    pass


@dataclass(frozen=True, slots=True)
class SearchPrev:
    pass


@dataclass(frozen=True, slots=True)
class SearchClear:
    pass


@dataclass(frozen=True, slots=True)
class ScrollTo:
    """Viewport moved by the render loop. Not part of the text protocol."""

    top: int


Command = Goto | Lines | Top | Size | Cursor | Mark | Unmark | Search | SearchNext | SearchPrev | SearchClear | ScrollTo


@dataclass(frozen=True, slots=True)
class Response:
    ok: bool
    message: str | None = None

    @classmethod
    def success(cls, payload: object = None) -> Response:
        return cls(ok=True, message=None if payload is None else str(payload))

    @classmethod
    def error(cls, message: str) -> Response:
        return cls(ok=False, message=message)

    def __str__(self) -> str:
        if self.ok:
            return "OK" if self.message is None else f"OK {self.message}"
        return f"ERROR {self.message}"


_USAGE: dict[Verb, str] = {
    Verb.GOTO: "goto <line_number>",
    Verb.LINES: "lines",
    Verb.TOP: "top",
    Verb.SIZE: "size",
    Verb.CURSOR: "cursor [<line_number>]",
    Verb.MARK: "mark <line_number> [<start>-<end>] <color>",
    Verb.UNMARK: "unmark <line_number> [<start>-<end>]",
    Verb.SEARCH: "search <regex_pattern>",
    Verb.SEARCH_NEXT: "search-next",
    Verb.SEARCH_PREV: "search-prev",
    Verb.SEARCH_CLEAR: "search-clear",
}

_NO_ARGS: dict[Verb, Command] = {
    Verb.LINES: Lines(),
    Verb.TOP: Top(),
    Verb.SIZE: Size(),
    Verb.SEARCH_NEXT: SearchNext(),
    Verb.SEARCH_PREV: SearchPrev(),
    Verb.SEARCH_CLEAR: SearchClear(),
}


def _usage(verb: Verb) -> InvalidArgumentError:
    return InvalidArgumentError(f"usage: {_USAGE[verb]}")


def _is_number(value: str) -> bool:
    return value.isascii() and value.isdigit()


def parse_line_number(value: str) -> int:
    if not _is_number(value):
        msg = f"invalid line number: {value}"
        raise InvalidArgumentError(msg)
    line = int(value)
    if line < 1:
        msg = "line number must be >= 1"
        raise InvalidArgumentError(msg)
    return line


def parse_range(value: str) -> tuple[int, int] | None:
    """Parse ``<start>-<end>``; None when ``value`` is not shaped like a numeric range."""
    start, sep, end = value.partition("-")
    if not sep or not _is_number(start) or not _is_number(end):
        return None
    return int(start), int(end)


def parse_command(text: str) -> Command:
    """Parse one protocol line into a command.

    Raises:
        InvalidArgumentError: for empty input, unknown verbs, wrong arity and bad numbers.
    """
    parts = text.split()
    if not parts:
        msg = "empty command"
        raise InvalidArgumentError(msg)

    name, args = parts[0].lower(), parts[1:]
    try:
        verb = Verb(name)
    except ValueError:
        msg = f"unknown command: {name}"
        raise InvalidArgumentError(msg) from None

    if verb in _NO_ARGS:
        if args:
            raise _usage(verb)
        return _NO_ARGS[verb]

    match verb:
        case Verb.GOTO:
            if len(args) != 1:
                raise _usage(verb)
            return Goto(parse_line_number(args[0]))
        case Verb.CURSOR:
            if len(args) > 1:
                raise _usage(verb)
            return Cursor(parse_line_number(args[0]) if args else None)
        case Verb.MARK:
            return _parse_mark(args)
        case Verb.UNMARK:
            return _parse_unmark(args)
        case Verb.SEARCH:
            if not args:
                raise _usage(verb)
            return Search(" ".join(args))
    raise _usage(verb)


def _parse_mark(args: list[str]) -> Mark:
    if len(args) < 2:  # noqa: PLR2004
        raise _usage(Verb.MARK)
    line = parse_line_number(args[0])
    region = parse_range(args[1])
    if region is None:
        # anything that is not a numeric range starts the colour
        return Mark(line=line, color=" ".join(args[1:]))
    if len(args) < 3:  # noqa: PLR2004
        raise _usage(Verb.MARK)
    validate_region(*region)
    return Mark(line=line, color=" ".join(args[2:]), region=region)


def _parse_unmark(args: list[str]) -> Unmark:
    if not args:
        raise _usage(Verb.UNMARK)
    line = parse_line_number(args[0])
    if len(args) == 1:
        return Unmark(line=line)
    # arguments after the range are ignored
    value = args[1]
    if "-" not in value:
        msg = f"invalid range format: {value}"
        raise InvalidArgumentError(msg)
    region = parse_range(value)
    if region is None:
        msg = f"invalid range: {value}"
        raise InvalidArgumentError(msg)
    if region[0] < 1 or region[1] < 1:
        msg = "column numbers must be >= 1"
        raise InvalidArgumentError(msg)
    return Unmark(line=line, region=region)
