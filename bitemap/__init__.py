"""Bites and nested height contours on an integer map, with a command interpreter and performance tester."""

__version__ = "0.1.0"
__all__ = [
    "checks",
    "datastructures",
    "generators",
    "interpreter",
    "perftest",
    "results",
    "stopwatch",
]