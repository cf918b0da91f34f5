"""In-memory store of bites placed on a grid and the contours that hold them."""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Iterable, NamedTuple, Optional


class Coord(NamedTuple):
    """A grid position."""

    x: int
    y: int


@dataclass
class _Bite:
    name: str
    coord: Coord
    owner: Optional[int] = None
    contours: set[int] = field(default_factory=set)


@dataclass
class _Contour:
    name: str
    height: int
    coords: list[Coord]
    subcontours: set[int] = field(default_factory=set)
    bites: set[int] = field(default_factory=set)
    parent: Optional[int] = None


class Datastructures:
    """Bites indexed by id and coordinate, and a forest of contours.

    Lookups of unknown ids return ``None``; operations that may be refused
    return ``False`` and leave the store unchanged.
    """

    def __init__(self) -> None:
        self._bites: dict[int, _Bite] = {}
        self._contours: dict[int, _Contour] = {}
        self._bite_at: dict[Coord, int] = {}

    # Bites

    def get_bite_count(self) -> int:
        return len(self._bites)

    def clear_all(self) -> None:
        self._bites.clear()
        self._contours.clear()
        self._bite_at.clear()

    def all_bites(self) -> list[int]:
        return list(self._bites)

    def add_bite(self, bite_id: int, name: str, xy: Iterable[int]) -> bool:
        coord = Coord(*xy)
        if bite_id in self._bites or coord in self._bite_at:
            return False
        self._bites[bite_id] = _Bite(name, coord)
        self._bite_at[coord] = bite_id
        return True

    def get_bite_name(self, bite_id: int) -> Optional[str]:
        bite = self._bites.get(bite_id)
        return None if bite is None else bite.name

    def get_bite_coord(self, bite_id: int) -> Optional[Coord]:
        bite = self._bites.get(bite_id)
        return None if bite is None else bite.coord

    def get_bites_alphabetically(self) -> list[int]:
        return sorted(self._bites, key=lambda bid: (self._bites[bid].name, bid))

    def get_bites_distance_increasing(self) -> list[int]:
        def key(bid: int) -> tuple[int, int, int]:
            x, y = self._bites[bid].coord
            return abs(x) + abs(y), y, bid

        return sorted(self._bites, key=key)

    def find_bite_with_coord(self, xy: Iterable[int]) -> Optional[int]:
        return self._bite_at.get(Coord(*xy))

    def change_bite_coord(self, bite_id: int, newcoord: Iterable[int]) -> bool:
        coord = Coord(*newcoord)
        bite = self._bites.get(bite_id)
        if bite is None or coord in self._bite_at:
            return False
        del self._bite_at[bite.coord]
        bite.coord = coord
        self._bite_at[coord] = bite_id
        return True

    def remove_bite(self, bite_id: int) -> bool:
        bite = self._bites.pop(bite_id, None)
        if bite is None:
            return False
        for contour_id in bite.contours:
            contour = self._contours.get(contour_id)
            if contour is not None:
                contour.bites.discard(bite_id)
        del self._bite_at[bite.coord]
        return True

    def get_bites_closest_to(self, xy: Iterable[int]) -> list[int]:
        """Return up to three bites nearest to ``xy`` by Manhattan distance."""
        origin = Coord(*xy)

        def key(bid: int) -> tuple[int, int, int]:
            x, y = self._bites[bid].coord
            return abs(x - origin.x) + abs(y - origin.y), y, bid

        return heapq.nsmallest(3, self._bites, key=key)

    # Contours

    def add_contour(
        self, contour_id: int, name: str, height: int, coords: Iterable[Iterable[int]]
    ) -> bool:
        if contour_id < 0 or contour_id in self._contours:
            return False
        self._contours[contour_id] = _Contour(
            name, height, [Coord(*c) for c in coords]
        )
        return True

    def all_contours(self) -> list[int]:
        return list(self._contours)

    def get_contour_name(self, contour_id: int) -> Optional[str]:
        contour = self._contours.get(contour_id)
        return None if contour is None else contour.name

    def get_contour_coords(self, contour_id: int) -> Optional[list[Coord]]:
        contour = self._contours.get(contour_id)
        return None if contour is None else list(contour.coords)

    def get_contour_height(self, contour_id: int) -> Optional[int]:
        contour = self._contours.get(contour_id)
        return None if contour is None else contour.height

    def _ancestors(self, contour_id: int) -> list[int]:
        chain = []
        parent = self._contours[contour_id].parent
        while parent is not None:
            chain.append(parent)
            parent = self._contours[parent].parent
        return chain

    def add_subcontour_to_contour(self, contour_id: int, parent_id: int) -> bool:
        if contour_id < 0 or parent_id < 0 or contour_id == parent_id:
            return False
        child = self._contours.get(contour_id)
        parent = self._contours.get(parent_id)
        if child is None or parent is None:
            return False
        if child.parent is not None or contour_id in parent.subcontours:
            return False
        if abs(child.height - parent.height) != 1 or abs(child.height) < abs(
            parent.height
        ):
            return False
        if contour_id in self._ancestors(parent_id):
            return False
        parent.subcontours.add(contour_id)
        child.parent = parent_id
        return True

    def add_bite_to_contour(self, bite_id: int, contour_id: int) -> bool:
        contour = self._contours.get(contour_id)
        bite = self._bites.get(bite_id)
        if contour is None or bite is None:
            return False
        if bite.coord not in contour.coords or bite_id in contour.bites:
            return False
        contour.bites.add(bite_id)
        bite.contours.add(contour_id)
        bite.owner = contour_id
        return True

    def get_bite_in_contours(self, bite_id: int) -> Optional[list[int]]:
        """Return the bite's contour followed by its ancestors, innermost first."""
        bite = self._bites.get(bite_id)
        if bite is None:
            return None
        if bite.owner is None:
            return []
        return [bite.owner, *self._ancestors(bite.owner)]

    def all_subcontours_of_contour(self, contour_id: int) -> Optional[list[int]]:
        """Return every descendant: deeper levels first, then direct children."""
        if contour_id not in self._contours:
            return None
        return self._descendants(contour_id)

    def _descendants(self, contour_id: int) -> list[int]:
        direct = sorted(self._contours[contour_id].subcontours)
        result: list[int] = []
        for sub_id in direct:
            result.extend(self._descendants(sub_id))
        result.extend(direct)
        return result

    def get_closest_common_ancestor_of_contours(
        self, id1: int, id2: int
    ) -> Optional[int]:
        if id1 not in self._contours or id2 not in self._contours:
            return None
        other = set(self._ancestors(id2))
        return next((c for c in self._ancestors(id1) if c in other), None)