import pytest

from bitemap.datastructures import Coord, Datastructures
from bitemap.results import (
    BiteResult,
    CoordListResult,
    HeightResult,
    IdListResult,
    NameResult,
    format_bite,
    format_contour,
    format_coord,
    format_result,
)


@pytest.fixture
def ds():
    store = Datastructures()
    store.add_bite(7, "A", (3, 4))
    store.add_bite(8, "B", (5, 6))
    store.add_contour(1, "hill", 1, [(3, 4), (5, 6)])
    store.add_contour(2, "peak", 2, [(3, 4)])
    return store


def test_format_coord():
    assert format_coord(Coord(3, 4)) == "(3,4)"
    assert format_coord((-1, 0)) == "(-1,0)"
    assert format_coord(None) == "(--NO_COORD--)"


def test_format_bite(ds):
    assert format_bite(ds, 7) == "A: pos=(3,4), id=7"
    assert format_bite(ds, None) == "--NO_BITE--"


def test_format_bite_empty_name():
    store = Datastructures()
    store.add_bite(1, "", (0, 0))
    assert format_bite(store, 1).startswith("*: ")


def test_format_contour(ds):
    assert format_contour(ds, 1) == "hill: id=1"
    assert format_contour(ds, None) == "--NO_CONTOUR--"


def test_nothing_result_is_empty(ds):
    assert format_result(None, ds) == ""


def test_single_bite_id_list(ds):
    text = format_result(IdListResult(bites=[7]), ds)
    assert text == "Bite:\n   A: pos=(3,4), id=7\n"


def test_multiple_bites_are_numbered(ds):
    lines = format_result(IdListResult(bites=[7, 8]), ds).splitlines()
    assert lines[0] == "Bites:"
    assert lines[1] == "1. " + format_bite(ds, 7)
    assert lines[2] == "2. " + format_bite(ds, 8)


def test_failed_bite(ds):
    assert format_result(IdListResult(bites=[None]), ds) == "Failed (NO_BITE returned)!\n"


def test_contours_after_bites(ds):
    lines = format_result(IdListResult(contours=[2, 1], bites=[7]), ds).splitlines()
    assert lines[0] == "Bite:"
    assert lines[2] == "Contours:"
    assert lines[3] == "1. " + format_contour(ds, 2)
    assert lines[4] == "2. " + format_contour(ds, 1)


def test_failed_contour(ds):
    text = format_result(IdListResult(contours=[None]), ds)
    assert text == "Failed (NO_CONTOUR returned)!\n"


def test_name_results(ds):
    assert format_result(NameResult("A", bite_id=7), ds) == "Name of bite with id 7 is A\n"
    assert (
        format_result(NameResult("hill", contour_id=1), ds)
        == "Name of contour with id 1 is hill\n"
    )
    assert format_result(NameResult(None, bite_id=9), ds) == "Failed (NO_NAME returned)!\n"


def test_height_results(ds):
    assert (
        format_result(HeightResult(2, contour_id=2), ds)
        == "Height of contour with id 2 is 2\n"
    )
    assert (
        format_result(HeightResult(None, contour_id=5), ds)
        == "Failed (NO_HEIGHT returned)!\n"
    )


def test_coord_list(ds):
    result = CoordListResult(ds.get_contour_coords(1), contour_id=1)
    assert format_result(result, ds) == "Coordinates:\n(3,4)\n(5,6)\n"


def test_coord_list_failures(ds):
    assert format_result(CoordListResult(None), ds) == "Failed (NO_COORD returned)!\n"
    assert format_result(CoordListResult([None]), ds) == "Failed (NO_COORD returned)!\n"


def test_coord_list_converts_pairs():
    result = CoordListResult([(1, 2)], bite_id=3)
    assert result.coords == (Coord(1, 2),)


def test_bite_result(ds):
    assert format_result(BiteResult(8), ds) == format_bite(ds, 8) + "\n"
    assert format_result(BiteResult(None), ds) == "--NO_BITE--\n"


def test_unknown_result_type(ds):
    with pytest.raises(TypeError):
        format_result("nonsense", ds)