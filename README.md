# bitemap

`bitemap` keeps a small map in memory. The map holds two kinds of objects:

- **Bites**: short names (usually a single emoji) placed on integer
  coordinates. No two bites can share a coordinate.
- **Contours**: named height levels made of lists of coordinates. A contour
  can be placed inside a parent contour whose height differs by exactly one
  and is closer to zero, which gives a tree of hills and valleys.

The package has these parts:

- `bitemap.datastructures`: the store itself (`Datastructures`, `Coord`);
- `bitemap.interpreter`: a line-based command interpreter (`MainProgram`,
  and the `bitemap` command);
- `bitemap.results`: the result objects commands return and their text form;
- `bitemap.generators`: `RandomData`, which fills the store with random bites
  and contours and remembers what it created;
- `bitemap.checks` and `bitemap.perftest`: self-checking operations and the
  `perftest` runner that times them for growing sizes;
- `bitemap.stopwatch`: an accumulating `Stopwatch`, usable as a context manager.

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Using the library

```python
from bitemap.datastructures import Coord, Datastructures

ds = Datastructures()
ds.add_bite(1, "🍌", Coord(2, 3))
ds.add_bite(2, "🍎", Coord(0, 1))

ds.add_contour(10, "hill", 1, [Coord(2, 3), Coord(0, 1)])
ds.add_contour(11, "peak", 2, [Coord(2, 3)])
ds.add_subcontour_to_contour(11, 10)
ds.add_bite_to_contour(1, 11)

ds.get_bites_distance_increasing()   # [2, 1]
ds.get_bite_in_contours(1)           # [11, 10]
ds.get_bites_closest_to(Coord(0, 0)) # up to three nearest bites
```

Lookups of an unknown bite or contour return `None` instead of raising.
Operations that can be refused (a duplicate id, an occupied coordinate, a
subcontour with the wrong height, a cycle) return `False` and leave the store
unchanged.

Orderings:

- `get_bites_alphabetically()` sorts by name, then id.
- `get_bites_distance_increasing()` sorts by Manhattan distance from the
  origin, then `y`, then id.
- `get_bites_closest_to(xy)` returns at most three bites, ordered the same way
  but measured from `xy`.
- `all_subcontours_of_contour(id)` lists deeper descendants before direct
  children.

## The command interpreter

Start it interactively, reading commands from standard input:

```
bitemap
```

Or run a command file:

```
bitemap commands.txt
```

Some of the available commands (`help` lists them all):

```
add_bite 1 "🍌" (2,3)
add_contour 10 "hill" 1 (2,3) (0,1)
add_subcontour_to_contour 11 10
add_bite_to_contour 1 11
get_bites_alphabetically
get_bite_in_contours 1
random_add 50
random_add 20 (0,0) (30,30)
random_seed 42
read "more-commands.txt" silent
testread "in.txt" "expected-out.txt"
perftest get_bite_name 10 10;100;1000
stopwatch on
# a comment
quit
```

`testread` runs a command file and prints its output next to the expected
output, marking each line that differs with `?`. If any `testread` in the
session found differences, the program exits with status 1.

`perftest` takes a list of commands (each optionally repeated, for example
`5*get_bite_name`), a timeout in seconds, and either a list of sizes
(`10;100;1000`) or a range (`10:1000:10`; with `log`, a geometric range whose
third number is the base). Extra commands may follow after a `:`, with a
second timeout and an "every n" count. For each size it clears the map, fills
it with random data, runs the commands and prints the setup, command and total
times in seconds. It stops at the first timeout or failed check.

From Python, the same interpreter can be driven directly:

```python
import io
from bitemap.interpreter import MainProgram, PromptStyle

out = io.StringIO()
MainProgram(seed=1).command_parser(['add_bite 1 "x" (1,1)', "get_bite_count"],
                                   out, PromptStyle.NORMAL)
print(out.getvalue())
```

## What it does not do

- There is no graphical map view; everything is text on standard output.
- Nothing is stored on disk: the map lives only as long as the process.
- `perftest` measures wall-clock time only; it does not count instructions.