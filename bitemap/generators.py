"""Random test data for filling a :class:`Datastructures` store."""

from __future__ import annotations

import math
import random
import sys
from collections import Counter
from typing import Iterable, Optional, Sequence

from bitemap.datastructures import Coord, Datastructures
from bitemap.stopwatch import Stopwatch

DEFAULT_MIN_COORD = Coord(0, 0)
DEFAULT_MAX_COORD = Coord(100, 100)
DEFAULT_MIN_HEIGHT = -9
DEFAULT_MAX_HEIGHT = 9
MAX_CONTOUR_HEIGHT = 5
ROOT_BIAS_MULTIPLIER = 0.05
MAX_BITE_ID = 2**63 - 1
MAX_CONTOUR_ID = 2**63 - 1
GRID_CONTOUR_NAME = "⛰️"

EMOJI_RANGES: tuple[tuple[int, int], ...] = (
    (0x1F600, 0x1F64F),  # Emoticons
    (0x2700, 0x27BF),  # Dingbats
    (0x1F680, 0x1F6FF),  # Transport and map symbols
    (0x1F300, 0x1F5FF),  # Miscellaneous symbols and pictographs
    (0x1F900, 0x1F9FF),  # Supplemental symbols and pictographs
)


class RandomData:
    """Generates random bites and contours and remembers which are valid.

    The caches (``bite_ids``, ``contour_ids``, ``coords`` and friends) record
    what has been handed out so that later lookups can pick known-good values.
    """

    def __init__(
        self,
        ds: Datastructures,
        seed: Optional[int] = None,
        *,
        min_coord: Iterable[int] = DEFAULT_MIN_COORD,
        max_coord: Iterable[int] = DEFAULT_MAX_COORD,
        min_height: int = DEFAULT_MIN_HEIGHT,
        max_height: int = DEFAULT_MAX_HEIGHT,
        max_levels: int = MAX_CONTOUR_HEIGHT,
        root_bias: float = ROOT_BIAS_MULTIPLIER,
    ) -> None:
        self.ds = ds
        self.rng = random.Random(seed)
        self.min_coord = Coord(*min_coord)
        self.max_coord = Coord(*max_coord)
        self.min_height = min_height
        self.max_height = max_height
        self.max_levels = max_levels
        self.root_bias = root_bias
        # Ids for bites placed into contours keep counting across resets.
        self.serial_bite_id = 1
        self.bites_added = 0
        self.contours_added = 0
        self.valid_bite_ids: set[int] = set()
        self.bite_ids: list[int] = []
        self.valid_contour_ids: set[int] = set()
        self.contour_ids: list[int] = []
        self.valid_coords: Counter[Coord] = Counter()
        self.coords: list[Coord] = []
        self.bite_names: list[str] = []

    # Random engine and caches

    def reseed(self, seed: int) -> None:
        """Seed the random engine and forget everything generated so far."""
        self.rng.seed(seed)
        self.reset()

    def reset(self) -> None:
        """Zero the counters and clear the caches of valid values."""
        self.bites_added = 0
        self.contours_added = 0
        self.valid_bite_ids.clear()
        self.bite_ids.clear()
        self.valid_contour_ids.clear()
        self.contour_ids.clear()
        self.valid_coords.clear()
        self.coords.clear()
        self.bite_names.clear()

    def _random(self, start: int, end: int) -> int:
        """Uniform integer in ``[start, end)``; ``start`` for an empty range."""
        if end <= start:
            return start
        return self.rng.randrange(start, end)

    # Single values

    def random_emoji(self) -> str:
        low, high = self.rng.choice(EMOJI_RANGES)
        return chr(self.rng.randint(low, high))

    def random_coord(self) -> Coord:
        return Coord(
            self._random(self.min_coord.x, self.max_coord.x),
            self._random(self.min_coord.y, self.max_coord.y),
        )

    def random_contour_height(self) -> int:
        return self._random(self.min_height, self.max_height)

    def _random_bite_id(self) -> int:
        return self.rng.randint(0, MAX_BITE_ID)

    def _random_contour_id(self) -> int:
        return self._random(0, MAX_CONTOUR_ID)

    # The n-th value handed out, created on first request

    def n_to_bite_id(self, n: int) -> int:
        if n < len(self.bite_ids):
            return self.bite_ids[n]
        bite_id = self._random_bite_id()
        while bite_id in self.valid_bite_ids:
            bite_id = self._random_bite_id()
        self.valid_bite_ids.add(bite_id)
        self.bite_ids.append(bite_id)
        return bite_id

    def n_to_contour_id(self, n: int) -> int:
        if n < len(self.contour_ids):
            return self.contour_ids[n]
        contour_id = self._random_contour_id()
        while contour_id in self.valid_contour_ids:
            contour_id = self._random_contour_id()
        self.valid_contour_ids.add(contour_id)
        self.contour_ids.append(contour_id)
        return contour_id

    def n_to_coord(self, n: int) -> Coord:
        if n < len(self.coords):
            return self.coords[n]
        coord = self.random_coord()
        while self.valid_coords[coord] > 0:
            coord = self.random_coord()
        self.valid_coords[coord] += 1
        self.coords.append(coord)
        return coord

    def n_to_name(self, n: int) -> str:
        if n < len(self.bite_names):
            return self.bite_names[n]
        name = self.random_emoji()
        self.bite_names.append(name)
        return name

    # Random picks among valid values

    def random_valid_bite(self) -> int:
        return self.n_to_bite_id(self._random(0, self.bites_added))

    def random_valid_contour(self) -> int:
        return self.n_to_contour_id(self._random(0, self.contours_added))

    def random_root_contour(self) -> int:
        """Pick a contour from the first, root-biased part of the id list."""
        if self.contours_added < 2:
            return self.n_to_contour_id(0)
        end = int(self.root_bias * self.contours_added)
        if end == 0:
            return self.n_to_contour_id(0)
        return self.n_to_contour_id(self._random(0, end))

    def random_valid_coord(self) -> Coord:
        if not self.coords:
            raise IndexError("no coordinates have been generated")
        return self.coords[self._random(0, len(self.coords))]

    # Bulk generation

    def _record_bite(self, bite_id: int, name: str, coord: Coord) -> None:
        self.bites_added += 1
        self.valid_bite_ids.add(bite_id)
        self.bite_ids.append(bite_id)
        self.valid_coords[coord] += 1
        self.coords.append(coord)
        self.bite_names.append(name)

    def add_random_bites(self, stopwatch: Stopwatch, n: int) -> int:
        """Add ``n`` bites, one per column ``x`` in ``0..n-1`` at a random ``y``."""
        if n == 0:
            return 0
        positions = [Coord(x, self._random(0, n)) for x in range(n)]
        for coord in positions:
            bite_id = self.bites_added
            name = self.random_emoji()
            stopwatch.start()
            added = self.ds.add_bite(bite_id, name, coord)
            stopwatch.stop()
            if added:
                self._record_bite(bite_id, name, coord)
        return n

    def add_grid_contours(
        self,
        stopwatch: Stopwatch,
        x1: int,
        y1: int,
        x2: int,
        y2: int,
        max_levels: Optional[int] = None,
    ) -> list[int]:
        """Lay single-cell contours on a grid over the area and chain them.

        Returns the ids ``1..N`` that the layout aims to fill.
        """
        levels = self.max_levels if max_levels is None else max_levels
        width = x2 - x1
        height = y2 - y1
        if width <= 0 or height <= 0:
            raise ValueError("contour area must have positive width and height")
        if levels < 3:
            raise ValueError("max_levels must be at least 3")
        target = int(((width + height) // 2) * 1.2)
        step = math.ceil(math.sqrt(target))
        z = 1
        contour_id = 1
        parent_id = contour_id

        stopwatch.start()
        for i in range(step + 2):
            for j in range(step + 2):
                coord = Coord((i * step) % width + x1, (j * step) % height + y1)
                added = self.ds.add_contour(
                    contour_id, GRID_CONTOUR_NAME, z % levels, [coord]
                )
                if added:
                    self.valid_contour_ids.add(contour_id)
                    self.contour_ids.append(contour_id)
                    self.contours_added += 1
                if contour_id >= target:
                    break
                if added:
                    parent = contour_id - 1 if z % levels > 2 else parent_id
                    self.ds.add_subcontour_to_contour(contour_id, parent)
                    contour_id += 1
                    z += 1
                    while z % levels < 2:
                        z += 1
            if contour_id >= target:
                break
        stopwatch.stop()

        return list(range(1, target + 1))

    def _distribute(self, count: int, buckets: int) -> list[int]:
        spread = [0] * buckets
        for _ in range(count):
            spread[self.rng.randrange(buckets)] += 1
        return spread

    def _add_bite_with_info(
        self,
        stopwatch: Stopwatch,
        bite_counter: int,
        nmb_of_bites: int,
        contour_id: int,
        coord: Coord,
    ) -> int:
        if bite_counter >= nmb_of_bites:
            return nmb_of_bites
        bite_id = self.serial_bite_id
        name = self.random_emoji()
        stopwatch.start()
        added = self.ds.add_bite(bite_id, name, coord)
        stopwatch.stop()
        if not added:
            return bite_counter
        stopwatch.start()
        self.ds.add_bite_to_contour(bite_counter, contour_id)
        self.serial_bite_id += 1
        stopwatch.stop()
        self._record_bite(bite_id, name, coord)
        return bite_counter + 1

    def add_random_bites_to_given_contours(
        self, stopwatch: Stopwatch, nmb_of_bites: int, contour_ids: Sequence[int]
    ) -> int:
        """Place up to ``nmb_of_bites`` bites on cells of the given contours."""
        if nmb_of_bites == 0 or not contour_ids:
            return 0
        bite_counter = 0
        attempts = 0
        while bite_counter < nmb_of_bites:
            attempts += 1
            if attempts >= 5:
                break
            spread = self._distribute(nmb_of_bites, len(contour_ids))
            for contour_id, wanted in zip(contour_ids, spread):
                if wanted == 0:
                    continue
                cells = self.ds.get_contour_coords(contour_id) or []
                chosen = self.rng.sample(cells, min(wanted, len(cells)))
                for coord in chosen:
                    bite_counter = self._add_bite_with_info(
                        stopwatch, bite_counter, nmb_of_bites, contour_id, coord
                    )
        return bite_counter

    def add_random_bites_and_contours(
        self,
        stopwatch: Stopwatch,
        nmb_of_bites: int,
        x1: int,
        y1: int,
        x2: int,
        y2: int,
    ) -> int:
        """Fill the area with contours, then place bites on them."""
        if nmb_of_bites < 0:
            raise ValueError(f"nmb_of_bites {nmb_of_bites} cannot be negative")
        if x2 - x1 < 0:
            raise ValueError(f"width {x2 - x1} cannot be negative")
        if y2 - y1 < 0:
            raise ValueError(f"height {y2 - y1} cannot be negative")
        try:
            contour_ids = self.add_grid_contours(stopwatch, x1, y1, x2, y2)
        except ValueError:
            print("Error", file=sys.stderr)
            contour_ids = []
        return self.add_random_bites_to_given_contours(
            stopwatch, nmb_of_bites, contour_ids
        )