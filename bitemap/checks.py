"""Self-checking operations used by performance tests.

Each check performs one timed operation on the store and then verifies the
result against what the :class:`RandomData` caches say should be there.
"""

from __future__ import annotations

from typing import Callable, Optional

from bitemap.datastructures import Coord, Datastructures
from bitemap.generators import RandomData
from bitemap.stopwatch import Stopwatch

RANDOM_ADD_BITES = 50
RANDOM_ADD_NAME = "🍌"


class PerfChecks:
    """Named checks, each returning ``True`` when the store behaved correctly."""

    def __init__(
        self,
        ds: Datastructures,
        data: RandomData,
        *,
        maze_width: Optional[int] = None,
        maze_height: Optional[int] = None,
    ) -> None:
        self.ds = ds
        self.data = data
        self.maze_width = data.max_coord.x if maze_width is None else maze_width
        self.maze_height = data.max_coord.y if maze_height is None else maze_height
        self._checks: dict[str, Callable[[Stopwatch], bool]] = {
            "get_bite_count": self._get_bite_count,
            "clear_all": self._clear_all,
            "all_bites": self._all_bites,
            "add_bite": self._add_bite,
            "get_bite_name": self._get_bite_name,
            "get_bite_coord": self._get_bite_coord,
            "get_bites_alphabetically": self._get_bites_alphabetically,
            "get_bites_distance_increasing": self._get_bites_distance_increasing,
            "find_bite_with_coord": self._find_bite_with_coord,
            "change_bite_coord": self._change_bite_coord,
            "add_contour": self._add_contour,
            "all_contours": self._all_contours,
            "get_contour_name": self._get_contour_name,
            "get_contour_height": self._get_contour_height,
            "get_contour_coords": self._get_contour_coords,
            "add_subcontour_to_contour": self._add_subcontour_to_contour,
            "add_bite_to_contour": self._add_bite_to_contour,
            "get_bite_in_contours": self._get_bite_in_contours,
            "all_subcontours_of_contour": self._all_subcontours_of_contour,
            "get_bites_closest_to": self._get_bites_closest_to,
            "remove_bite": self._remove_bite,
            "get_closest_common_ancestor_of_contours": self._get_closest_common_ancestor,
            "random_add": self._random_add,
        }

    def available(self) -> list[str]:
        """Names of the commands that have a check, in command order."""
        return list(self._checks)

    def run(self, name: str, stopwatch: Stopwatch) -> bool:
        """Run the named check, timing only the store operation."""
        try:
            check = self._checks[name]
        except KeyError:
            raise KeyError(f"no check for command {name!r}") from None
        return check(stopwatch)

    # Helpers

    def _ids_valid(self, ids: Optional[list], valid: set) -> bool:
        if ids is None:
            return False
        return len(set(ids)) == len(ids) and all(i in valid for i in ids)

    def _clear_caches(self) -> None:
        data = self.data
        data.valid_bite_ids.clear()
        data.bite_ids.clear()
        data.valid_contour_ids.clear()
        data.contour_ids.clear()
        data.valid_coords.clear()
        data.coords.clear()
        data.bite_names.clear()

    # Bite checks

    def _get_bite_count(self, stopwatch: Stopwatch) -> bool:
        with stopwatch:
            count = self.ds.get_bite_count()
        return count == self.data.bites_added

    def _clear_all(self, stopwatch: Stopwatch) -> bool:
        with stopwatch:
            self.ds.clear_all()
        self._clear_caches()
        return True

    def _all_bites(self, stopwatch: Stopwatch) -> bool:
        with stopwatch:
            result = self.ds.all_bites()
        if len(result) != self.data.bites_added:
            return False
        return self._ids_valid(result, self.data.valid_bite_ids)

    def _add_bite(self, stopwatch: Stopwatch) -> bool:
        data = self.data
        n = data.bites_added
        bite_id = data.n_to_bite_id(n)
        name = data.n_to_name(n)
        coord = data.n_to_coord(n)
        with stopwatch:
            added = self.ds.add_bite(bite_id, name, coord)
        data.bites_added += 1
        return added

    def _get_bite_name(self, stopwatch: Stopwatch) -> bool:
        if self.data.bites_added < 1:
            return True
        bite_id = self.data.random_valid_bite()
        with stopwatch:
            name = self.ds.get_bite_name(bite_id)
        return name is not None

    def _get_bite_coord(self, stopwatch: Stopwatch) -> bool:
        if self.data.bites_added < 1:
            return True
        bite_id = self.data.random_valid_bite()
        with stopwatch:
            coord = self.ds.get_bite_coord(bite_id)
        return coord is not None

    def _get_bites_alphabetically(self, stopwatch: Stopwatch) -> bool:
        with stopwatch:
            result = self.ds.get_bites_alphabetically()
        if len(result) != self.data.bites_added or len(set(result)) != len(result):
            return False
        known = set(self.data.bite_names)
        names = []
        for bite_id in result:
            name = self.ds.get_bite_name(bite_id)
            if name is None or name not in known:
                return False
            names.append(name)
        return names == sorted(names)

    def _get_bites_distance_increasing(self, stopwatch: Stopwatch) -> bool:
        with stopwatch:
            result = self.ds.get_bites_distance_increasing()
        if len(result) != self.data.bites_added or len(set(result)) != len(result):
            return False
        distances = []
        for bite_id in result:
            coord = self.ds.get_bite_coord(bite_id)
            if coord is None or self.data.valid_coords[coord] <= 0:
                return False
            distances.append(abs(coord.x) + abs(coord.y))
        return distances == sorted(distances)

    def _find_bite_with_coord(self, stopwatch: Stopwatch) -> bool:
        if self.data.bites_added < 1:
            return True
        coord = self.data.random_valid_coord()
        with stopwatch:
            result = self.ds.find_bite_with_coord(coord)
        return result is None or result in self.data.valid_bite_ids

    def _change_bite_coord(self, stopwatch: Stopwatch) -> bool:
        data = self.data
        if data.bites_added < 1:
            return True
        bite_id = data.random_valid_bite()
        old = self.ds.get_bite_coord(bite_id)
        if old is None:
            return False
        new = data.random_coord()
        with stopwatch:
            changed = self.ds.change_bite_coord(bite_id, new)
        if data.valid_coords[old] <= 0 or old not in data.coords:
            return False
        data.valid_coords[old] -= 1
        if data.valid_coords[old] <= 0:
            del data.valid_coords[old]
        data.valid_coords[new] += 1
        data.coords[data.coords.index(old)] = new
        return changed

    def _get_bites_closest_to(self, stopwatch: Stopwatch) -> bool:
        target = self.data.random_coord()
        with stopwatch:
            result = self.ds.get_bites_closest_to(target)
        if len(result) != min(3, self.data.bites_added):
            return False
        return self._ids_valid(result, self.data.valid_bite_ids)

    def _remove_bite(self, stopwatch: Stopwatch) -> bool:
        data = self.data
        if data.bites_added < 1:
            return True
        bite_id = data.random_valid_bite()
        if self.ds.get_bite_name(bite_id) is None:
            return False
        if self.ds.get_bite_coord(bite_id) is None:
            return False
        with stopwatch:
            self.ds.remove_bite(bite_id)
        data.valid_bite_ids.discard(bite_id)
        if bite_id in data.bite_ids:
            pos = data.bite_ids.index(bite_id)
            data.bite_ids[pos] = data.bite_ids[-1]
            data.bite_ids.pop()
        data.bites_added -= 1
        return True

    def _random_add(self, stopwatch: Stopwatch) -> bool:
        data = self.data
        cells = list(range(self.maze_width * self.maze_height))
        data.rng.shuffle(cells)
        for cell in cells[:RANDOM_ADD_BITES]:
            coord = Coord(cell % self.maze_width, cell // self.maze_width)
            bite_id = data.serial_bite_id
            data.serial_bite_id += 1
            with stopwatch:
                self.ds.add_bite(bite_id, RANDOM_ADD_NAME, coord)
        return True

    # Contour checks

    def _add_contour(self, stopwatch: Stopwatch) -> bool:
        data = self.data
        contour_id = data.n_to_contour_id(data.contours_added)
        height = data.random_contour_height()
        coords = [data.random_coord() for _ in range(3)]
        with stopwatch:
            added = self.ds.add_contour(contour_id, str(contour_id), height, coords)
        data.contours_added += 1
        return added

    def _all_contours(self, stopwatch: Stopwatch) -> bool:
        with stopwatch:
            result = self.ds.all_contours()
        if len(result) != self.data.contours_added:
            return False
        return self._ids_valid(result, self.data.valid_contour_ids)

    def _get_contour_name(self, stopwatch: Stopwatch) -> bool:
        if self.data.contours_added < 1:
            return True
        contour_id = self.data.random_valid_contour()
        with stopwatch:
            name = self.ds.get_contour_name(contour_id)
        return name is not None

    def _get_contour_height(self, stopwatch: Stopwatch) -> bool:
        if self.data.contours_added < 1:
            return False
        contour_id = self.data.random_valid_contour()
        with stopwatch:
            height = self.ds.get_contour_height(contour_id)
        return height is not None

    def _get_contour_coords(self, stopwatch: Stopwatch) -> bool:
        contour_id = self.data.random_valid_contour()
        with stopwatch:
            coords = self.ds.get_contour_coords(contour_id)
        if not coords:
            return False
        return all(c is not None for c in coords)

    def _add_subcontour_to_contour(self, stopwatch: Stopwatch) -> bool:
        data = self.data
        n = data.contours_added
        if not self._add_contour(Stopwatch()):
            return False
        contour_id = data.n_to_contour_id(n)
        parent_id = data.n_to_contour_id(n // 2)
        with stopwatch:
            added = self.ds.add_subcontour_to_contour(contour_id, parent_id)
        return added

    def _add_bite_to_contour(self, stopwatch: Stopwatch) -> bool:
        data = self.data
        dummy = Stopwatch()
        if data.contours_added < 1 and not self._add_contour(dummy):
            return False
        contour_id = data.random_valid_contour()
        n = data.bites_added
        if not self._add_bite(dummy):
            return False
        bite_id = data.n_to_bite_id(n)
        with stopwatch:
            added = self.ds.add_bite_to_contour(bite_id, contour_id)
        return added

    def _get_bite_in_contours(self, stopwatch: Stopwatch) -> bool:
        if self.data.bites_added < 1:
            return True
        bite_id = self.data.random_valid_bite()
        with stopwatch:
            result = self.ds.get_bite_in_contours(bite_id)
        return self._ids_valid(result, self.data.valid_contour_ids)

    def _all_subcontours_of_contour(self, stopwatch: Stopwatch) -> bool:
        data = self.data
        if data.contours_added < 1:
            return True
        contour_id = data.random_root_contour()
        with stopwatch:
            result = self.ds.all_subcontours_of_contour(contour_id)
        if result is None:
            return False
        added = data.contours_added
        if added > 1 and (len(result) + 1) * 2 ** (data.root_bias * added) < added:
            return False
        return self._ids_valid(result, data.valid_contour_ids)

    def _get_closest_common_ancestor(self, stopwatch: Stopwatch) -> bool:
        data = self.data
        if data.contours_added < 1:
            return True
        id1 = data.random_valid_contour()
        id2 = data.random_valid_contour()
        with stopwatch:
            result = self.ds.get_closest_common_ancestor_of_contours(id1, id2)
        return result is None or result in data.valid_contour_ids