"""Parsing and running of ``perftest`` command specifications."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, TextIO, Union

from bitemap.checks import PerfChecks
from bitemap.datastructures import Datastructures
from bitemap.generators import RandomData
from bitemap.stopwatch import Stopwatch

UINT_MAX = 2**32 - 1

BITE_TESTS = frozenset(
    {
        "get_bite_name",
        "get_bite_coord",
        "all_bites",
        "get_bites_alphabetically",
        "get_bites_distance_increasing",
        "get_bites_closest_to",
    }
)
CONTOUR_TESTS = frozenset(
    {
        "get_contour_coords",
        "get_contour_name",
        "all_subcontours_of_contour",
        "get_closest_common_ancestor_of_contours",
    }
)
BITE_CONTOUR_TESTS = frozenset(
    {"find_bite_with_coord", "change_bite_coord", "remove_bite"}
)

_DIVIDE_RE = re.compile(r"([0-9a-zA-Z_;*]+):?")
_COMMAND_RE = re.compile(r"(?:([0-9]+)\*)?([0-9a-zA-Z_]+);?")
_TIMEOUT_RE = re.compile(r"([0-9]+):?")
_SIZE_RE = re.compile(r"([0-9]+);?")
_RANGE_RE = re.compile(r"([0-9]+):?")
_IS_RANGE_RE = re.compile(r"([0-9]+(?::[0-9]+){1,2})")


class PerftestError(ValueError):
    """A perftest specification that cannot be run."""


@dataclass(frozen=True)
class PerftestSpec:
    """What to run, for how long, and for which sizes N."""

    commands: tuple[tuple[int, str], ...]
    timeout: int
    sizes: tuple[int, ...]
    extra_commands: tuple[tuple[int, str], ...] = ()
    extra_timeout: Optional[int] = None
    extra_every: int = 1


def _parse_commands(text: str) -> list[tuple[int, str]]:
    return [
        (int(m.group(1)) if m.group(1) else 1, m.group(2))
        for m in _COMMAND_RE.finditer(text)
    ]


def _parse_sizes(sizes: str, log: bool) -> list[int]:
    if not _IS_RANGE_RE.search(sizes):
        return [int(m.group(1)) for m in _SIZE_RE.finditer(sizes)]

    limits = [int(m.group(1)) for m in _RANGE_RE.finditer(sizes)]
    low, high = limits[0], limits[1]
    if low >= high:
        raise PerftestError("Lower bound of range must be less than upper bound")
    if not log:
        step = limits[2] if len(limits) == 3 else 1
        if step < 1:
            raise PerftestError("Step for linear range can not be < 1")
        return list(range(low, high + 1, step))

    base = limits[2] if len(limits) == 3 else 10
    if base < 2:
        raise PerftestError("Base for log range can not be < 2")
    if low == 0:
        raise PerftestError("Lower bound of log range must be positive")
    overflow_boundary = UINT_MAX // base
    result = []
    n = low
    while n <= high:
        result.append(n)
        if overflow_boundary < n:
            break
        n *= base
    return result


def parse_perftest_spec(
    commands: str, timeouts: str, sizes: str, log: Union[bool, str] = False
) -> PerftestSpec:
    """Build a spec from the command list, timeouts and size notation.

    ``commands`` is ``[R*]cmd[;...][:[R*]extra[;...]:every_n]``, ``timeouts``
    is ``t[:extra_t]`` and ``sizes`` is ``start:end[:step]`` or ``n1[;n2...]``.
    """
    parts = [m.group(1) for m in _DIVIDE_RE.finditer(commands)]
    if len(parts) > 3:
        raise PerftestError("too many ':' separated parts in command list")
    parts += [""] * (3 - len(parts))
    main_part, extra_part, every_part = parts

    test_cmds = _parse_commands(main_part)
    extra_cmds = _parse_commands(extra_part)
    if extra_part and not every_part:
        raise PerftestError("using extra commands requires every n parameter")
    try:
        extra_every = int(every_part) if every_part else 1
    except ValueError:
        raise PerftestError(f"invalid every n parameter {every_part!r}") from None
    if extra_every < 1:
        raise PerftestError(
            "extra commands can not be run every 0 normal command listing"
        )

    timeout_values = [int(m.group(1)) for m in _TIMEOUT_RE.finditer(timeouts)]
    if not timeout_values:
        raise PerftestError("a timeout is required")
    if extra_cmds and len(timeout_values) == 1:
        raise PerftestError("Using extra commands requires timeout for extra commands")

    return PerftestSpec(
        commands=tuple(test_cmds),
        timeout=timeout_values[0],
        sizes=tuple(_parse_sizes(sizes, bool(log))),
        extra_commands=tuple(extra_cmds),
        extra_timeout=timeout_values[1] if len(timeout_values) > 1 else None,
        extra_every=extra_every,
    )


def _populate(data: RandomData, stopwatch: Stopwatch, command: str, n: int) -> None:
    if command in BITE_TESTS:
        data.add_random_bites(stopwatch, n)
    elif command in CONTOUR_TESTS:
        try:
            data.add_grid_contours(stopwatch, 0, 0, n, n)
        except ValueError:
            pass
    elif command in BITE_CONTOUR_TESTS:
        data.add_random_bites_and_contours(stopwatch, n, 0, 0, n, n)


def run_perftest(
    ds: Datastructures, data: RandomData, spec: PerftestSpec, output: TextIO
) -> list[tuple[int, float, float, float]]:
    """Run the spec for each N, writing a timing table to ``output``.

    Returns ``(N, add seconds, command seconds, total seconds)`` for every N
    that completed without a timeout or failed check.
    """
    checks = PerfChecks(ds, data)
    testable = set(checks.available())

    output.write(
        f"Timeout for each N is {spec.timeout} sec (for ADD and test functions)"
    )
    if spec.extra_commands:
        output.write(f" + {spec.extra_timeout} sec (for extra functions)")
    output.write(". \n")
    output.write("For each N perform command(s):\n")

    test_funcs: list[tuple[int, str]] = []
    for repeat, name in spec.commands:
        if name in testable:
            output.write(f"{name} ")
            test_funcs.append((repeat, name))
        else:
            output.write(f"(cannot test {name}) ")

    extra_funcs: list[tuple[int, str]] = []
    if spec.extra_commands:
        output.write("\nwith extra functions\n")
        for repeat, name in spec.extra_commands:
            if name in testable:
                output.write(f"{name} ")
                extra_funcs.append((repeat, name))
            else:
                output.write(f"(cannot add extra function {name}) ")
        output.write(f"\nafter every {spec.extra_every} entries in test functions\n")
    output.write("\n\n")

    if not test_funcs:
        output.write("No commands to test!\n")
        return []

    output.write(
        f"{'N':>7} , {'add (sec)':>12} , {'cmds (sec)':>12} , {'total (sec)':>12}\n"
    )

    extra_timeout = spec.extra_timeout if spec.extra_timeout is not None else 0
    rows: list[tuple[int, float, float, float]] = []
    try:
        for n in spec.sizes:
            output.write(f"{n:>7} , ")
            ds.clear_all()
            data.reset()

            stopwatch = Stopwatch()
            extra_sw = Stopwatch()
            _populate(data, stopwatch, spec.commands[0][1], n)

            add_sec = stopwatch.elapsed()
            if add_sec >= spec.timeout:
                output.write("ADD Timeout!\n")
                break
            output.write(f"{add_sec:>12.6g} , ")

            message = _run_commands(
                checks, test_funcs, extra_funcs, spec, stopwatch, extra_sw, extra_timeout
            )
            if message is not None:
                output.write(message + "\n")
                break

            total_sec = stopwatch.elapsed()
            output.write(f"{total_sec - add_sec:>12.6g} , {total_sec:>12.6g}\n")
            rows.append((n, add_sec, total_sec - add_sec, total_sec))
    finally:
        ds.clear_all()
        data.reset()
    return rows


def _run_commands(
    checks: PerfChecks,
    test_funcs: list[tuple[int, str]],
    extra_funcs: list[tuple[int, str]],
    spec: PerftestSpec,
    stopwatch: Stopwatch,
    extra_sw: Stopwatch,
    extra_timeout: int,
) -> Optional[str]:
    """Run the test commands once; return a stop message, or None on success."""
    for done, (repeat, name) in enumerate(test_funcs, start=1):
        for _ in range(repeat):
            if not checks.run(name, stopwatch):
                return "Failed check!"
            if stopwatch.elapsed() >= spec.timeout:
                return "Timeout!"
        if done % spec.extra_every == 0 and done < len(test_funcs):
            for extra_repeat, extra_name in extra_funcs:
                for _ in range(extra_repeat):
                    if not checks.run(extra_name, extra_sw):
                        return "Extrafunc Failed check!"
                    if extra_sw.elapsed() >= extra_timeout:
                        return "Extrafunc Timeout!"
    return None