"""Line-oriented command interpreter for the bite and contour store."""

from __future__ import annotations

import enum
import functools
import re
import sys
from dataclasses import dataclass
from io import StringIO
from itertools import zip_longest
from typing import Callable, Iterable, Optional, Sequence, TextIO

from bitemap.datastructures import Coord, Datastructures
from bitemap.generators import RandomData
from bitemap.perftest import PerftestError, parse_perftest_spec, run_perftest
from bitemap.results import (
    BiteResult,
    CoordListResult,
    HeightResult,
    IdListResult,
    NameResult,
    Result,
    format_result,
)
from bitemap.stopwatch import Stopwatch

PROMPT = "> "

_ID = "([a-zA-Z0-9-]+)"
_CONTOUR_ID = "([0-9]+)"
_NUM = "([0-9]+)"
_WS = "[[:space:]]+"
_COORD = (
    r"\([[:space:]]*([0-9]+)[[:space:]]*,[[:space:]]*([0-9]+)[[:space:]]*\)"
)
_ADD_BITE = r'([a-zA-Z0-9-]+)\s+"([^"]+)"\s+\(\s*([0-9]+)\s*,\s*([0-9]+)\s*\)'
_ADD_CONTOUR = (
    r'([-0-9]+)\s+"([a-zA-Z0-9_-]+)"\s+(-?[0-9]+)\s+'
    r"((?:\(\s*-?\s*[0-9]+\s*,\s*-?\s*[0-9]+\s*\)\s*)+)"
)
_FILENAME = r'"([-a-zA-Z0-9 ./:_]+)"'
_PERF_CMDS = (
    r"((?:[0-9]+\*)?[0-9a-zA-Z_]+(?:;(?:[0-9]+\*)?[0-9a-zA-Z_]+)*"
    r"(?:(?::(?:[0-9]+\*)?[0-9a-zA-Z_]+)(?:;(?:[0-9]+\*)?[0-9a-zA-Z_]+)*"
    r"(?::[0-9]+)?)?)"
)
_PERF_TIMEOUT = "([0-9]+(?::[0-9]+)?)"
_PERF_SIZES = "([0-9]+(?:(?::[0-9]+){1,2}|(?:;[0-9]+)+)?)"
_PERF_LOG = "(?:[[:space:]]+(log))?"
_PERF_INFO = (
    "[REPEAT*]cmd1[;[REPEAT*]cmd2...][:[REPEAT*]extracmd1[;[REPEAT*]"
    "extracmd2...]:extra_every_n_test_entry] timeout[:extra_timeout] "
    "range_start:range_end[:step]|n1[;n2...] [log] (parts in [] are optional)"
)


@functools.lru_cache(maxsize=None)
def _compile(pattern: str) -> "re.Pattern[str]":
    return re.compile(pattern.replace("[[:space:]]", r"\s"))


_COORDS_RE = _compile(_COORD + "[[:space:]]?")


class PromptStyle(enum.Enum):
    """How the command parser echoes the lines it reads."""

    NORMAL = "normal"
    NO_ECHO = "no_echo"
    NO_NESTING = "no_nesting"


class TestStatus(enum.Enum):
    """Outcome of ``testread`` comparisons run so far."""

    __test__ = False

    NOT_RUN = "not_run"
    NO_DIFFS = "no_diffs"
    DIFFS_FOUND = "diffs_found"


class _StopwatchMode(enum.Enum):
    OFF = "off"
    ON = "on"
    NEXT = "next"


Handler = Callable[[TextIO, Sequence[str]], Optional[Result]]


@dataclass(frozen=True)
class _Command:
    name: str
    info: str
    pattern: str
    handler: Optional[Handler]

    @property
    def regex(self) -> "re.Pattern[str]":
        return _compile(self.pattern + "[[:space:]]*")


def _to_int(text: str) -> int:
    if not re.fullmatch(r"[+-]?[0-9]+", text):
        raise ValueError(f"Cannot convert {text!r} to an integer")
    return int(text)


def _to_bite_id(text: str) -> int:
    match = re.match(r"[+-]?[0-9]+", text.lstrip())
    if match is None:
        raise ValueError(f"invalid bite id {text!r}")
    return int(match.group()) % 2**64


def _split_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _width(text: str) -> int:
    return len(text.encode("utf-8"))


def _pad(text: str, width: int) -> str:
    return text + " " * (width - _width(text))


class MainProgram:
    """Reads commands, applies them to a :class:`Datastructures` and reports."""

    def __init__(
        self,
        ds: Optional[Datastructures] = None,
        data: Optional[RandomData] = None,
        *,
        seed: Optional[int] = None,
    ) -> None:
        self.ds = ds if ds is not None else Datastructures()
        self.data = data if data is not None else RandomData(self.ds, seed)
        self.test_status = TestStatus.NOT_RUN
        self.stopwatch_mode = _StopwatchMode.OFF
        self.commands = self._command_table()
        self._by_name = {command.name: command for command in self.commands}
        names = "|".join(re.escape(command.name) for command in self.commands)
        self._line_re = _compile(f"[[:space:]]*({names})(?:[[:space:]]*$|{_WS}(.*))")

    def _command_table(self) -> list[_Command]:
        return [
            _Command("get_bite_count", "", "", self._cmd_get_bite_count),
            _Command("clear_all", "", "", self._cmd_clear_all),
            _Command("all_bites", "", "", self._cmd_all_bites),
            _Command("add_bite", 'BiteID "Emoji" (x,y)', _ADD_BITE, self._cmd_add_bite),
            _Command("get_bite_name", "BiteID", _ID, self._cmd_get_bite_name),
            _Command("get_bite_coord", "BiteID", _ID, self._cmd_get_bite_coord),
            _Command(
                "get_bites_alphabetically", "", "", self._cmd_get_bites_alphabetically
            ),
            _Command(
                "get_bites_distance_increasing",
                "",
                "",
                self._cmd_get_bites_distance_increasing,
            ),
            _Command(
                "find_bite_with_coord", "(x,y)", _COORD, self._cmd_find_bite_with_coord
            ),
            _Command(
                "change_bite_coord",
                "BiteID (x,y)",
                _ID + _WS + _COORD,
                self._cmd_change_bite_coord,
            ),
            _Command(
                "add_contour",
                'ContourID "Name" height (x,y) (x,y)...',
                _ADD_CONTOUR,
                self._cmd_add_contour,
            ),
            _Command("all_contours", "", "", self._cmd_all_contours),
            _Command(
                "get_contour_name", "ContourID", _CONTOUR_ID, self._cmd_get_contour_name
            ),
            _Command(
                "get_contour_height",
                "ContourID",
                _CONTOUR_ID,
                self._cmd_get_contour_height,
            ),
            _Command(
                "get_contour_coords",
                "ContourID",
                _CONTOUR_ID,
                self._cmd_get_contour_coords,
            ),
            _Command(
                "add_subcontour_to_contour",
                "SubcontourID ContourID",
                _CONTOUR_ID + _WS + _CONTOUR_ID,
                self._cmd_add_subcontour_to_contour,
            ),
            _Command(
                "add_bite_to_contour",
                "BiteID ContourID",
                _ID + _WS + _CONTOUR_ID,
                self._cmd_add_bite_to_contour,
            ),
            _Command(
                "get_bite_in_contours", "BiteID", _ID, self._cmd_get_bite_in_contours
            ),
            _Command(
                "all_subcontours_of_contour",
                "ContourID",
                _CONTOUR_ID,
                self._cmd_all_subcontours_of_contour,
            ),
            _Command(
                "get_bites_closest_to", "(x,y)", _COORD, self._cmd_get_bites_closest_to
            ),
            _Command("remove_bite", "BiteID", _ID, self._cmd_remove_bite),
            _Command(
                "get_closest_common_ancestor_of_contours",
                "ContourID1 ContourID2",
                _CONTOUR_ID + _WS + _CONTOUR_ID,
                self._cmd_get_closest_common_ancestor,
            ),
            _Command("quit", "", "", None),
            _Command("help", "", "", self._cmd_help),
            _Command(
                "random_add",
                "number_of_nodes_to_add  (minx,miny) (maxx,maxy) "
                "(coordinates optional)",
                _NUM + "(?:" + _WS + _COORD + _WS + _COORD + ")?",
                self._cmd_random_add,
            ),
            _Command(
                "read",
                '"in-filename" [silent]',
                _FILENAME + "(?:" + _WS + "(silent))?",
                self._cmd_read,
            ),
            _Command(
                "testread",
                '"in-filename" "out-filename"',
                _FILENAME + _WS + _FILENAME,
                self._cmd_testread,
            ),
            _Command(
                "perftest",
                _PERF_INFO,
                _PERF_CMDS + _WS + _PERF_TIMEOUT + _WS + _PERF_SIZES + _PERF_LOG,
                self._cmd_perftest,
            ),
            _Command(
                "stopwatch",
                "on|off|next (alternatives separated by |)",
                "(?:(on)|(off)|(next))",
                self._cmd_stopwatch,
            ),
            _Command(
                "random_seed", "new-random-seed-integer", _NUM, self._cmd_random_seed
            ),
            _Command("#", "comment text", ".*", self._cmd_comment),
        ]

    # Parsing

    def command_parse_line(self, line: str, output: TextIO) -> bool:
        """Run one command line; return ``False`` when the command was ``quit``."""
        if not line:
            return True
        match = self._line_re.fullmatch(line)
        if match is None:
            output.write("Unknown command!\n")
            return True
        name = match.group(1)
        params = match.group(2) or ""
        command = self._by_name[name]
        params_match = command.regex.fullmatch(params)
        if params_match is None:
            output.write(f"Invalid parameters for command '{name}'!\n")
            output.write(f"Given: {params}\n")
            output.write(f"Expected: {command.pattern}\n")
            return True
        if command.handler is None:
            return False

        use_stopwatch = self.stopwatch_mode is not _StopwatchMode.OFF
        if self.stopwatch_mode is _StopwatchMode.NEXT:
            self.stopwatch_mode = _StopwatchMode.OFF
        initial_status = self.test_status
        self.test_status = TestStatus.NOT_RUN

        stopwatch = Stopwatch()
        if use_stopwatch:
            stopwatch.start()
        result = command.handler(output, params_match.groups(default=""))
        if use_stopwatch:
            stopwatch.stop()

        output.write(format_result(result, self.ds))
        if use_stopwatch:
            output.write(f"Command '{name}': {stopwatch.elapsed():g} sec\n")

        if self.test_status is not TestStatus.NOT_RUN:
            found = self.test_status is TestStatus.DIFFS_FOUND
            output.write(
                "Testread-tests have been run, "
                + ("differences found!" if found else "no differences found.")
                + "\n"
            )
        if self.test_status is TestStatus.NOT_RUN or (
            self.test_status is TestStatus.NO_DIFFS
            and initial_status is TestStatus.DIFFS_FOUND
        ):
            self.test_status = initial_status
        return True

    def command_parser(
        self, lines: Iterable[str], output: TextIO, prompt_style: PromptStyle
    ) -> None:
        """Run commands line by line until the input ends or ``quit`` is read."""
        echo = prompt_style is not PromptStyle.NO_ECHO
        source = iter(lines)
        while True:
            output.write(PROMPT)
            output.flush()
            raw = next(source, None)
            if raw is None:
                if echo:
                    output.write("\n")
                return
            line = raw[:-1] if raw.endswith("\n") else raw
            if echo:
                output.write(line + "\n")
            if not self.command_parse_line(line, output):
                return

    # Bite commands

    def _cmd_get_bite_count(self, output: TextIO, args: Sequence[str]) -> None:
        output.write(f"Number of bites: {self.ds.get_bite_count()}\n")

    def _cmd_clear_all(self, output: TextIO, args: Sequence[str]) -> None:
        self.ds.clear_all()
        self.data.reset()
        output.write("Cleared all bites\n")

    def _cmd_all_bites(self, output: TextIO, args: Sequence[str]) -> Result:
        bites = self.ds.all_bites()
        if not bites:
            output.write("No bites!\n")
        return IdListResult(bites=sorted(bites))

    def _cmd_add_bite(self, output: TextIO, args: Sequence[str]) -> Optional[Result]:
        id_text, name, x_text, y_text = args
        bite_id = _to_bite_id(id_text)
        if len(name) > 1:
            output.write("Name too long!\n")
            return None
        coord = Coord(_to_int(x_text), _to_int(y_text))
        added = self.ds.add_bite(bite_id, name, coord)
        return IdListResult(bites=[bite_id if added else None])

    def _cmd_get_bite_name(self, output: TextIO, args: Sequence[str]) -> Result:
        bite_id = _to_bite_id(args[0])
        return NameResult(self.ds.get_bite_name(bite_id), bite_id=bite_id)

    def _cmd_get_bite_coord(self, output: TextIO, args: Sequence[str]) -> Result:
        bite_id = _to_bite_id(args[0])
        return CoordListResult([self.ds.get_bite_coord(bite_id)], bite_id=bite_id)

    def _cmd_get_bites_alphabetically(
        self, output: TextIO, args: Sequence[str]
    ) -> Result:
        return IdListResult(bites=self.ds.get_bites_alphabetically())

    def _cmd_get_bites_distance_increasing(
        self, output: TextIO, args: Sequence[str]
    ) -> Result:
        return IdListResult(bites=self.ds.get_bites_distance_increasing())

    def _cmd_find_bite_with_coord(self, output: TextIO, args: Sequence[str]) -> Result:
        coord = Coord(_to_int(args[0]), _to_int(args[1]))
        return BiteResult(self.ds.find_bite_with_coord(coord))

    def _cmd_change_bite_coord(self, output: TextIO, args: Sequence[str]) -> Result:
        bite_id = _to_bite_id(args[0])
        coord = Coord(_to_int(args[1]), _to_int(args[2]))
        changed = self.ds.change_bite_coord(bite_id, coord)
        return IdListResult(bites=[bite_id if changed else None])

    def _cmd_get_bites_closest_to(self, output: TextIO, args: Sequence[str]) -> Result:
        coord = Coord(_to_int(args[0]), _to_int(args[1]))
        bites = self.ds.get_bites_closest_to(coord)
        if not bites:
            output.write("No bites!\n")
        return IdListResult(bites=bites)

    def _cmd_remove_bite(self, output: TextIO, args: Sequence[str]) -> Optional[Result]:
        bite_id = _to_bite_id(args[0])
        name = self.ds.get_bite_name(bite_id)
        if self.ds.remove_bite(bite_id):
            output.write(f"{name} removed.\n")
            return None
        return IdListResult(bites=[None])

    # Contour commands

    def _cmd_add_contour(self, output: TextIO, args: Sequence[str]) -> Result:
        id_text, name, height_text, coords_text = args
        contour_id = _to_int(id_text)
        height = _to_int(height_text)
        coords = [
            Coord(int(m.group(1)), int(m.group(2)))
            for m in _COORDS_RE.finditer(coords_text)
        ]
        added = self.ds.add_contour(contour_id, name, height, coords)
        return IdListResult(contours=[contour_id if added else None])

    def _cmd_all_contours(self, output: TextIO, args: Sequence[str]) -> Result:
        contours = self.ds.all_contours()
        if not contours:
            output.write("No contours!\n")
        return IdListResult(contours=sorted(contours))

    def _cmd_get_contour_name(self, output: TextIO, args: Sequence[str]) -> Result:
        contour_id = _to_int(args[0])
        return NameResult(self.ds.get_contour_name(contour_id), contour_id=contour_id)

    def _cmd_get_contour_height(self, output: TextIO, args: Sequence[str]) -> Result:
        contour_id = _to_int(args[0])
        return HeightResult(
            self.ds.get_contour_height(contour_id), contour_id=contour_id
        )

    def _cmd_get_contour_coords(self, output: TextIO, args: Sequence[str]) -> Result:
        contour_id = _to_int(args[0])
        return CoordListResult(
            self.ds.get_contour_coords(contour_id), contour_id=contour_id
        )

    def _cmd_add_subcontour_to_contour(
        self, output: TextIO, args: Sequence[str]
    ) -> Optional[Result]:
        sub_id, parent_id = _to_int(args[0]), _to_int(args[1])
        if not self.ds.add_subcontour_to_contour(sub_id, parent_id):
            output.write("Adding a subcontour failed!\n")
            return None
        output.write(
            f"Added '{self.ds.get_contour_name(sub_id)}' as a subcontour of "
            f"'{self.ds.get_contour_name(parent_id)}'\n"
        )
        return IdListResult(contours=[sub_id, parent_id])

    def _cmd_add_bite_to_contour(
        self, output: TextIO, args: Sequence[str]
    ) -> Optional[Result]:
        bite_id, contour_id = _to_bite_id(args[0]), _to_int(args[1])
        if not self.ds.add_bite_to_contour(bite_id, contour_id):
            output.write("Adding a bite to contour failed!\n")
            return None
        output.write(
            f"Added '{self.ds.get_bite_name(bite_id)}' to contour "
            f"'{self.ds.get_contour_name(contour_id)}'\n"
        )
        return IdListResult(contours=[contour_id], bites=[bite_id])

    def _cmd_get_bite_in_contours(self, output: TextIO, args: Sequence[str]) -> Result:
        bite_id = _to_bite_id(args[0])
        contours = self.ds.get_bite_in_contours(bite_id)
        if contours is None:
            contours = [None]
        elif not contours:
            output.write("Bite does not belong to any contour.\n")
        return IdListResult(contours=contours, bites=[bite_id])

    def _cmd_all_subcontours_of_contour(
        self, output: TextIO, args: Sequence[str]
    ) -> Result:
        contour_id = _to_int(args[0])
        subcontours = self.ds.all_subcontours_of_contour(contour_id)
        if subcontours is None:
            return IdListResult(contours=[contour_id, None])
        if not subcontours:
            output.write("No contours!\n")
        return IdListResult(contours=[contour_id, *sorted(subcontours)])

    def _cmd_get_closest_common_ancestor(
        self, output: TextIO, args: Sequence[str]
    ) -> Result:
        ancestor = self.ds.get_closest_common_ancestor_of_contours(
            _to_int(args[0]), _to_int(args[1])
        )
        if ancestor is None:
            output.write("No common parent contour found.\n")
        return IdListResult(contours=[ancestor])

    # Program control

    def _cmd_help(self, output: TextIO, args: Sequence[str]) -> None:
        output.write("Commands:\n")
        for command in self.commands:
            output.write(f"  {command.name} {command.info}\n")

    def _cmd_comment(self, output: TextIO, args: Sequence[str]) -> None:
        return None

    def _cmd_random_seed(self, output: TextIO, args: Sequence[str]) -> None:
        seed = _to_int(args[0])
        self.data.reseed(seed)
        output.write(f"Random seed set to {seed}\n")

    def _cmd_random_add(self, output: TextIO, args: Sequence[str]) -> None:
        size_text, *bounds = args
        count = _to_int(size_text)
        if all(bounds):
            x1, y1, x2, y2 = (_to_int(b) for b in bounds)
        else:
            x1, y1, x2, y2 = 0, 0, count, count
        self.data.min_coord = Coord(x1, y1)
        self.data.max_coord = Coord(x2, y2)
        try:
            added = self.data.add_random_bites_and_contours(
                Stopwatch(), count, x1, y1, x2, y2
            )
        except ValueError as exc:
            print(f"Invalid argument: {exc}", file=sys.stderr)
            added = 0
        output.write(f"Added: {added} bites. Yay!\n")

    def _cmd_stopwatch(self, output: TextIO, args: Sequence[str]) -> None:
        on, off, _next = args
        if on:
            self.stopwatch_mode = _StopwatchMode.ON
            output.write("Stopwatch: on\n")
        elif off:
            self.stopwatch_mode = _StopwatchMode.OFF
            output.write("Stopwatch: off\n")
        else:
            self.stopwatch_mode = _StopwatchMode.NEXT
            output.write("Stopwatch: on for the next command\n")

    def _cmd_perftest(self, output: TextIO, args: Sequence[str]) -> None:
        commands, timeouts, sizes, log = args
        try:
            spec = parse_perftest_spec(commands, timeouts, sizes, bool(log))
        except PerftestError as exc:
            output.write(f"{exc}\n")
            return None
        run_perftest(self.ds, self.data, spec, output)
        return None

    def _cmd_read(self, output: TextIO, args: Sequence[str]) -> None:
        filename, silent = args
        try:
            with open(filename, encoding="utf-8", newline="") as handle:
                text = handle.read()
        except OSError:
            output.write(f"Cannot open file '{filename}'1!\n")
            return None
        output.write(f"** Commands from '{filename}'\n")
        target: TextIO = StringIO() if silent else output
        self.command_parser(_split_lines(text), target, PromptStyle.NORMAL)
        if silent:
            output.write("...(output discarded in silent mode)...\n")
        output.write(f"** End of commands from '{filename}'\n")
        return None

    def _cmd_testread(self, output: TextIO, args: Sequence[str]) -> None:
        in_name, out_name = args
        try:
            with open(in_name, encoding="utf-8", newline="") as handle:
                commands = handle.read()
        except OSError:
            output.write(f"Cannot open file '{in_name}'!!!\n")
            return None
        try:
            with open(out_name, encoding="utf-8", newline="") as handle:
                expected_text = handle.read()
        except OSError:
            expected_text = ""

        actual = StringIO()
        self.command_parser(_split_lines(commands), actual, PromptStyle.NO_NESTING)
        actual_lines = _split_lines(actual.getvalue())
        expected_lines = _split_lines(expected_text)

        heading_actual, heading_expected = "Actual output", "Expected output"
        actual_width = (
            max(map(_width, actual_lines)) if actual_lines else _width(heading_actual)
        )
        expected_width = (
            max(map(_width, expected_lines))
            if expected_lines
            else _width(heading_expected)
        )
        output.write(f"  {_pad(heading_actual, actual_width)} | {heading_expected}\n")
        output.write(f"--{'-' * actual_width}-|-{'-' * expected_width}\n")

        all_ok = True
        for got, wanted in zip_longest(actual_lines, expected_lines):
            if wanted is None:
                output.write(f"? {_pad(got, actual_width)} | \n")
                all_ok = False
            elif got is None:
                output.write(f"? {' ' * actual_width} | {wanted}\n")
                all_ok = False
            else:
                same = got == wanted
                marker = " " if same else "?"
                output.write(f"{marker} {_pad(got, actual_width)} | {wanted}\n")
                all_ok = all_ok and same

        if all_ok:
            output.write("**No differences in output.**\n")
            if self.test_status is TestStatus.NOT_RUN:
                self.test_status = TestStatus.NO_DIFFS
        else:
            output.write("**Differences found! (Lines beginning with '?')**\n")
            self.test_status = TestStatus.DIFFS_FOUND
        return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run commands from a file, or interactively from standard input."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print("Usage: bitemap [<command file>]", file=sys.stderr)
        return 1

    program = MainProgram()
    if args and args[0] != "--console":
        filename = args[0]
        try:
            handle = open(filename, encoding="utf-8", newline="")
        except OSError:
            print(f"Cannot open file '{filename}'!")
        else:
            with handle:
                program.command_parser(handle, sys.stdout, PromptStyle.NORMAL)
    else:
        program.command_parser(sys.stdin, sys.stdout, PromptStyle.NO_ECHO)

    print("Program ended normally.", file=sys.stderr)
    return 1 if program.test_status is TestStatus.DIFFS_FOUND else 0