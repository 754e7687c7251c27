"""
SVG path data parser.

Turns a path's `d` attribute into typed segments in two passes:

1. tokenize_path() splits the data into PathCommand records, one per
   command application, expanding implicit repetition (extra moveto pairs
   become lineto) and reading compact arc flags such as "a1 1 0 00 10 10".
2. parse_path() folds the command stream over a PathState carrying the
   current point, the subpath start and the previous control point.

Malformed data stops parsing at the first error; everything parsed before
it is kept, matching how SVG renderers treat path errors.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from functools import reduce
from typing import NamedTuple, Optional

from .geometry_models import (
    ArcSegment,
    CubicSegment,
    LineSegment,
    Point2D,
    QuadraticSegment,
)

logger = logging.getLogger(__name__)

_COMMAND_RE = re.compile(r"([MmZzLlHhVvCcSsQqTtAa])([^MmZzLlHhVvCcSsQqTtAa]*)")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_FLAG_RE = re.compile(r"[01]")
_SEPARATOR_RE = re.compile(r"[\s,]*")

# Argument layout per command: n = number, f = flag
_ARGUMENTS = {
    "M": "nn",
    "L": "nn",
    "H": "n",
    "V": "n",
    "C": "nnnnnn",
    "S": "nnnn",
    "Q": "nnnn",
    "T": "nn",
    "A": "nnnffnn",
    "Z": "",
}


class PathSyntaxError(ValueError):
    """Raised for malformed path data."""


class PathCommand(NamedTuple):
    """One command application with exactly its own arguments."""
    letter: str
    args: tuple[float, ...]

    @property
    def is_relative(self) -> bool:
        return self.letter.islower()

    @property
    def family(self) -> str:
        return self.letter.upper()


def _scan_arguments(letter: str, text: str) -> tuple[list[float], Optional[str]]:
    """Read every argument of one command letter; returns (values, error)."""
    layout = _ARGUMENTS[letter.upper()]
    values: list[float] = []
    pos = 0
    while True:
        pos = _SEPARATOR_RE.match(text, pos).end()
        if pos >= len(text):
            return values, None
        if not layout:
            return values, f"unexpected data after '{letter}': {text[pos:].strip()!r}"
        expected = layout[len(values) % len(layout)]
        pattern = _FLAG_RE if expected == "f" else _NUMBER_RE
        match = pattern.match(text, pos)
        if match is None:
            return values, f"invalid argument for '{letter}' near {text[pos:pos + 12]!r}"
        values.append(float(match.group()))
        pos = match.end()


def tokenize_path(d: str) -> list[PathCommand]:
    """Split path data into command applications."""
    commands: list[PathCommand] = []
    data = d.strip()
    if data and data[0] not in "Mm":
        logger.debug("Path data does not start with a moveto: %r", data[:20])

    for letter, text in _COMMAND_RE.findall(data):
        values, error = _scan_arguments(letter, text)
        arity = len(_ARGUMENTS[letter.upper()])

        if arity == 0:
            commands.append(PathCommand(letter, ()))
        else:
            usable = len(values) - len(values) % arity
            for index in range(0, usable, arity):
                current = letter
                if index > 0 and letter in "Mm":
                    current = "L" if letter == "M" else "l"
                commands.append(PathCommand(current, tuple(values[index:index + arity])))
            if usable != len(values) and error is None:
                error = f"incomplete argument group for '{letter}'"

        if error:
            logger.warning("Path data error, keeping %d commands: %s", len(commands), error)
            break
    return commands


@dataclass(frozen=True)
class PathState:
    """Fold state threaded through the command stream."""
    current: Point2D = field(default_factory=lambda: Point2D(x=0.0, y=0.0))
    subpath_start: Point2D = field(default_factory=lambda: Point2D(x=0.0, y=0.0))
    last_family: str = ""
    last_control: Optional[Point2D] = None
    segments: tuple = ()


def _resolve(state: PathState, cmd: PathCommand, x: float, y: float) -> Point2D:
    if cmd.is_relative:
        return Point2D(x=state.current.x + x, y=state.current.y + y)
    return Point2D(x=x, y=y)


def _reflect(state: PathState, families: str) -> Point2D:
    """Reflect the previous control point about the current point."""
    if state.last_family in families and state.last_control is not None:
        return Point2D(
            x=2 * state.current.x - state.last_control.x,
            y=2 * state.current.y - state.last_control.y,
        )
    return state.current


def _advance(state: PathState, cmd: PathCommand, segment, control: Optional[Point2D] = None) -> PathState:
    return replace(
        state,
        current=segment.end,
        last_family=cmd.family,
        last_control=control,
        segments=state.segments + (segment,),
    )


def _close(state: PathState) -> PathState:
    start = state.subpath_start
    segments = state.segments
    if state.current != start:
        segments = segments + (LineSegment(start=state.current, end=start, closing=True),)
    elif segments and state.last_family not in ("M", "Z"):
        segments = segments[:-1] + (segments[-1].model_copy(update={"closing": True}),)
    return replace(state, current=start, last_family="Z", last_control=None, segments=segments)


def _step(state: PathState, cmd: PathCommand) -> PathState:
    family = cmd.family
    a = cmd.args

    if family == "M":
        point = _resolve(state, cmd, a[0], a[1])
        return replace(state, current=point, subpath_start=point, last_family="M", last_control=None)

    if family == "Z":
        return _close(state)

    if family == "L":
        end = _resolve(state, cmd, a[0], a[1])
        return _advance(state, cmd, LineSegment(start=state.current, end=end))

    if family == "H":
        x = state.current.x + a[0] if cmd.is_relative else a[0]
        end = Point2D(x=x, y=state.current.y)
        return _advance(state, cmd, LineSegment(start=state.current, end=end))

    if family == "V":
        y = state.current.y + a[0] if cmd.is_relative else a[0]
        end = Point2D(x=state.current.x, y=y)
        return _advance(state, cmd, LineSegment(start=state.current, end=end))

    if family == "C":
        c1 = _resolve(state, cmd, a[0], a[1])
        c2 = _resolve(state, cmd, a[2], a[3])
        end = _resolve(state, cmd, a[4], a[5])
        seg = CubicSegment(start=state.current, control1=c1, control2=c2, end=end)
        return _advance(state, cmd, seg, control=c2)

    if family == "S":
        c1 = _reflect(state, "CS")
        c2 = _resolve(state, cmd, a[0], a[1])
        end = _resolve(state, cmd, a[2], a[3])
        seg = CubicSegment(start=state.current, control1=c1, control2=c2, end=end)
        return _advance(state, cmd, seg, control=c2)

    if family == "Q":
        control = _resolve(state, cmd, a[0], a[1])
        end = _resolve(state, cmd, a[2], a[3])
        seg = QuadraticSegment(start=state.current, control=control, end=end)
        return _advance(state, cmd, seg, control=control)

    if family == "T":
        control = _reflect(state, "QT")
        end = _resolve(state, cmd, a[0], a[1])
        seg = QuadraticSegment(start=state.current, control=control, end=end)
        return _advance(state, cmd, seg, control=control)

    if family == "A":
        end = _resolve(state, cmd, a[5], a[6])
        if end == state.current:
            # Zero-length arcs draw nothing
            return replace(state, last_family="A", last_control=None)
        seg = ArcSegment(
            start=state.current,
            end=end,
            rx=abs(a[0]),
            ry=abs(a[1]),
            rotation=a[2],
            large_arc=bool(a[3]),
            sweep=bool(a[4]),
        )
        return _advance(state, cmd, seg)

    raise PathSyntaxError(f"Unknown path command: {cmd.letter}")


def parse_path(d: str) -> list:
    """Parse path data into line, quadratic, cubic and arc segments."""
    final = reduce(_step, tokenize_path(d), PathState())
    return list(final.segments)
