import pytest

from bitemap.datastructures import Coord, Datastructures


@pytest.fixture
def ds():
    return Datastructures()


@pytest.fixture
def tree():
    d = Datastructures()
    d.add_contour(1, "top", 1, [(0, 0), (1, 0)])
    d.add_contour(2, "mid", 2, [(2, 2), (3, 3)])
    d.add_contour(3, "side", 2, [(4, 4)])
    d.add_contour(4, "deep", 3, [(5, 5), (6, 6)])
    assert d.add_subcontour_to_contour(2, 1)
    assert d.add_subcontour_to_contour(3, 1)
    assert d.add_subcontour_to_contour(4, 2)
    return d


def test_add_and_get_bite(ds):
    assert ds.add_bite(7, "a", (3, 4))
    assert ds.get_bite_name(7) == "a"
    assert ds.get_bite_coord(7) == Coord(3, 4)
    assert ds.get_bite_count() == 1
    assert ds.all_bites() == [7]


def test_add_bite_duplicate_id_or_coord_rejected(ds):
    assert ds.add_bite(1, "a", (0, 0))
    assert not ds.add_bite(1, "b", (1, 1))
    assert not ds.add_bite(2, "c", (0, 0))
    assert ds.get_bite_count() == 1
    assert ds.get_bite_name(1) == "a"


def test_missing_bite_lookups_return_none(ds):
    assert ds.get_bite_name(99) is None
    assert ds.get_bite_coord(99) is None
    assert ds.find_bite_with_coord((1, 1)) is None
    assert ds.get_bite_in_contours(99) is None


def test_clear_all_empties_everything(ds):
    ds.add_bite(1, "a", (0, 0))
    ds.add_contour(1, "c", 1, [(0, 0)])
    ds.clear_all()
    assert ds.get_bite_count() == 0
    assert ds.all_contours() == []
    assert ds.find_bite_with_coord((0, 0)) is None
    assert ds.add_bite(2, "b", (0, 0))


def test_alphabetical_ties_broken_by_id(ds):
    ds.add_bite(5, "b", (0, 0))
    ds.add_bite(7, "a", (1, 0))
    ds.add_bite(3, "a", (2, 0))
    assert ds.get_bites_alphabetically() == [3, 7, 5]


def test_distance_increasing_orders_by_distance_then_y(ds):
    ds.add_bite(1, "a", (3, 0))
    ds.add_bite(2, "b", (0, 3))
    ds.add_bite(3, "c", (1, 1))
    ds.add_bite(4, "d", (-1, 0))
    assert ds.get_bites_distance_increasing() == [4, 3, 1, 2]


def test_find_bite_with_coord(ds):
    ds.add_bite(9, "x", (2, 5))
    assert ds.find_bite_with_coord(Coord(2, 5)) == 9


def test_change_bite_coord_moves_index(ds):
    ds.add_bite(1, "a", (0, 0))
    ds.add_bite(2, "b", (1, 1))
    assert ds.change_bite_coord(1, (5, 5))
    assert ds.get_bite_coord(1) == Coord(5, 5)
    assert ds.find_bite_with_coord((5, 5)) == 1
    assert ds.find_bite_with_coord((0, 0)) is None


def test_change_bite_coord_refused(ds):
    ds.add_bite(1, "a", (0, 0))
    ds.add_bite(2, "b", (1, 1))
    assert not ds.change_bite_coord(1, (1, 1))
    assert not ds.change_bite_coord(1, (0, 0))
    assert not ds.change_bite_coord(42, (9, 9))
    assert ds.get_bite_coord(1) == Coord(0, 0)


def test_contour_accessors(ds):
    assert ds.add_contour(4, "hill", 2, [(1, 2), (3, 4)])
    assert ds.get_contour_name(4) == "hill"
    assert ds.get_contour_height(4) == 2
    assert ds.get_contour_coords(4) == [Coord(1, 2), Coord(3, 4)]
    assert ds.all_contours() == [4]


def test_add_contour_refused(ds):
    assert ds.add_contour(1, "a", 1, [(0, 0)])
    assert not ds.add_contour(1, "b", 1, [(0, 0)])
    assert not ds.add_contour(-1, "c", 1, [(0, 0)])
    assert ds.all_contours() == [1]


def test_missing_contour_lookups(ds):
    assert ds.get_contour_name(3) is None
    assert ds.get_contour_height(-2) is None
    assert ds.get_contour_coords(3) is None
    assert ds.all_subcontours_of_contour(3) is None


@pytest.mark.parametrize(
    "parent_h, child_h, ok",
    [(1, 2, True), (-1, -2, True), (0, 1, True), (0, -1, True),
     (2, 1, False), (1, 3, False), (1, 1, False)],
)
def test_subcontour_height_rule(ds, parent_h, child_h, ok):
    ds.add_contour(1, "p", parent_h, [(0, 0)])
    ds.add_contour(2, "c", child_h, [(1, 1)])
    assert ds.add_subcontour_to_contour(2, 1) is ok


def test_subcontour_refusals(tree):
    assert not tree.add_subcontour_to_contour(2, 2)
    assert not tree.add_subcontour_to_contour(2, 3)  # already has a parent
    assert not tree.add_subcontour_to_contour(9, 1)
    assert not tree.add_subcontour_to_contour(2, -1)


def test_all_subcontours_deeper_first(tree):
    assert tree.all_subcontours_of_contour(1) == [4, 2, 3]
    assert tree.all_subcontours_of_contour(4) == []


def test_bite_in_contours_lists_chain(tree):
    tree.add_bite(10, "b", (5, 5))
    assert tree.add_bite_to_contour(10, 4)
    assert tree.get_bite_in_contours(10) == [4, 2, 1]


def test_bite_without_contour_has_empty_chain(tree):
    tree.add_bite(10, "b", (50, 50))
    assert tree.get_bite_in_contours(10) == []


def test_add_bite_to_contour_refusals(tree):
    tree.add_bite(10, "b", (5, 5))
    assert not tree.add_bite_to_contour(10, 1)  # coord not on contour
    assert not tree.add_bite_to_contour(11, 4)
    assert not tree.add_bite_to_contour(10, 99)
    assert tree.add_bite_to_contour(10, 4)
    assert not tree.add_bite_to_contour(10, 4)


def test_common_ancestor(tree):
    assert tree.get_closest_common_ancestor_of_contours(4, 3) == 1
    assert tree.get_closest_common_ancestor_of_contours(2, 4) == 1
    assert tree.get_closest_common_ancestor_of_contours(1, 4) is None
    assert tree.get_closest_common_ancestor_of_contours(4, 99) is None


def test_remove_bite(tree):
    tree.add_bite(10, "b", (5, 5))
    tree.add_bite_to_contour(10, 4)
    assert tree.remove_bite(10)
    assert not tree.remove_bite(10)
    assert tree.get_bite_name(10) is None
    assert tree.find_bite_with_coord((5, 5)) is None
    assert tree.add_bite(10, "c", (5, 5))
    assert tree.add_bite_to_contour(10, 4)


def test_closest_to_limits_to_three(ds):
    ds.add_bite(1, "a", (0, 0))
    ds.add_bite(2, "b", (1, 0))
    ds.add_bite(3, "c", (0, 1))
    ds.add_bite(4, "d", (5, 5))
    assert ds.get_bites_closest_to((0, 0)) == [1, 2, 3]


def test_closest_to_with_few_bites(ds):
    assert ds.get_bites_closest_to((0, 0)) == []
    ds.add_bite(8, "a", (9, 9))
    assert ds.get_bites_closest_to((0, 0)) == [8]