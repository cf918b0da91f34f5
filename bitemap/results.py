"""Command results and their text rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from bitemap.datastructures import Coord, Datastructures


@dataclass(frozen=True)
class IdListResult:
    """Lists of contour and bite ids; a lone ``None`` marks a failed lookup."""

    contours: tuple[Optional[int], ...] = ()
    bites: tuple[Optional[int], ...] = ()

    def __init__(
        self,
        contours: Iterable[Optional[int]] = (),
        bites: Iterable[Optional[int]] = (),
    ) -> None:
        object.__setattr__(self, "contours", tuple(contours))
        object.__setattr__(self, "bites", tuple(bites))


@dataclass(frozen=True)
class NameResult:
    """The name of a bite or contour; ``name`` is ``None`` when not found."""

    name: Optional[str]
    bite_id: Optional[int] = None
    contour_id: Optional[int] = None


@dataclass(frozen=True)
class HeightResult:
    """The height of a contour; ``height`` is ``None`` when not found."""

    height: Optional[int]
    bite_id: Optional[int] = None
    contour_id: Optional[int] = None


@dataclass(frozen=True)
class CoordListResult:
    """Coordinates of a bite or contour; ``coords`` is ``None`` when not found."""

    coords: Optional[tuple[Optional[Coord], ...]]
    bite_id: Optional[int] = None
    contour_id: Optional[int] = None

    def __init__(
        self,
        coords: Optional[Iterable[Optional[Iterable[int]]]],
        bite_id: Optional[int] = None,
        contour_id: Optional[int] = None,
    ) -> None:
        converted = (
            None
            if coords is None
            else tuple(None if c is None else Coord(*c) for c in coords)
        )
        object.__setattr__(self, "coords", converted)
        object.__setattr__(self, "bite_id", bite_id)
        object.__setattr__(self, "contour_id", contour_id)


@dataclass(frozen=True)
class BiteResult:
    """A single bite, or ``None`` when nothing was found."""

    bite_id: Optional[int]


Result = Union[IdListResult, NameResult, HeightResult, CoordListResult, BiteResult]


def format_coord(coord: Optional[Iterable[int]]) -> str:
    """Render a coordinate as ``(x,y)``."""
    if coord is None:
        return "(--NO_COORD--)"
    x, y = coord
    return f"({x},{y})"


def format_bite(ds: Datastructures, bite_id: Optional[int]) -> str:
    """Render a bite as ``name: pos=(x,y), id=N``."""
    if bite_id is None:
        return "--NO_BITE--"
    name = ds.get_bite_name(bite_id)
    coord = ds.get_bite_coord(bite_id)
    label = name if name else "*"
    return f"{label}: pos={format_coord(coord)}, id={bite_id}"


def format_contour(ds: Datastructures, contour_id: Optional[int]) -> str:
    """Render a contour as ``name: id=N``."""
    if contour_id is None:
        return "--NO_CONTOUR--"
    name = ds.get_contour_name(contour_id)
    label = name if name else "*"
    return f"{label}: id={contour_id}"


def _numbered(lines: Sequence[str]) -> list[str]:
    if len(lines) > 1:
        return [f"{num}. {line}" for num, line in enumerate(lines, start=1)]
    return [f"   {line}" for line in lines]


def _format_ids(result: IdListResult, ds: Datastructures) -> list[str]:
    out: list[str] = []
    if result.bites == (None,):
        out.append("Failed (NO_BITE returned)!")
    elif result.bites:
        out.append("Bite:" if len(result.bites) == 1 else "Bites:")
        out.extend(_numbered([format_bite(ds, b) for b in result.bites]))
    if result.contours == (None,):
        out.append("Failed (NO_CONTOUR returned)!")
    elif result.contours:
        out.append("Contour:" if len(result.contours) == 1 else "Contours:")
        out.extend(_numbered([format_contour(ds, c) for c in result.contours]))
    return out


def _subject(bite_id: Optional[int], contour_id: Optional[int]) -> tuple[str, str]:
    if bite_id is not None:
        return "bite", str(bite_id)
    return "contour", str(contour_id)


def format_result(result: Optional[Result], ds: Datastructures) -> str:
    """Render a command result as the lines shown to the user, each ending in a newline."""
    if result is None:
        lines: list[str] = []
    elif isinstance(result, IdListResult):
        lines = _format_ids(result, ds)
    elif isinstance(result, NameResult):
        if result.name is None:
            lines = ["Failed (NO_NAME returned)!"]
        else:
            kind, ident = _subject(result.bite_id, result.contour_id)
            lines = [f"Name of {kind} with id {ident} is {result.name}"]
    elif isinstance(result, HeightResult):
        if result.height is None:
            lines = ["Failed (NO_HEIGHT returned)!"]
        else:
            kind, ident = _subject(result.bite_id, result.contour_id)
            lines = [f"Height of {kind} with id {ident} is {result.height}"]
    elif isinstance(result, CoordListResult):
        if result.coords is None or result.coords == (None,):
            lines = ["Failed (NO_COORD returned)!"]
        else:
            lines = ["Coordinates:", *(format_coord(c) for c in result.coords)]
    elif isinstance(result, BiteResult):
        lines = [format_bite(ds, result.bite_id)]
    else:
        raise TypeError(f"unsupported result type: {type(result).__name__}")
    return "".join(line + "\n" for line in lines)