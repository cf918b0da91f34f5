import pytest

from bitemap.datastructures import Coord, Datastructures
from bitemap.generators import EMOJI_RANGES, GRID_CONTOUR_NAME, RandomData
from bitemap.stopwatch import Stopwatch


def make(seed=1, **kwargs):
    ds = Datastructures()
    return ds, RandomData(ds, seed, **kwargs)


def test_same_seed_gives_same_sequence():
    _, a = make(42)
    _, b = make(42)
    assert [a.random_emoji() for _ in range(20)] == [b.random_emoji() for _ in range(20)]


def test_reseed_repeats_sequence_and_clears_caches():
    _, data = make(3)
    data.reseed(7)
    first = [data.random_coord() for _ in range(5)]
    data.n_to_bite_id(0)
    data.reseed(7)
    assert data.bite_ids == []
    assert [data.random_coord() for _ in range(5)] == first


def test_random_emoji_in_ranges():
    _, data = make()
    for _ in range(200):
        emoji = data.random_emoji()
        assert len(emoji) == 1
        assert any(lo <= ord(emoji) <= hi for lo, hi in EMOJI_RANGES)


def test_random_coord_within_bounds():
    _, data = make(min_coord=(2, 3), max_coord=(6, 8))
    for _ in range(200):
        x, y = data.random_coord()
        assert 2 <= x < 6
        assert 3 <= y < 8


def test_random_coord_empty_range_returns_start():
    _, data = make(min_coord=(4, 4), max_coord=(4, 4))
    assert data.random_coord() == Coord(4, 4)


def test_random_contour_height_within_bounds():
    _, data = make(min_height=-2, max_height=3)
    heights = {data.random_contour_height() for _ in range(300)}
    assert heights <= set(range(-2, 3))


def test_n_to_bite_id_is_stable_and_unique():
    _, data = make()
    ids = [data.n_to_bite_id(n) for n in range(50)]
    assert len(set(ids)) == 50
    assert data.n_to_bite_id(10) == ids[10]
    assert data.valid_bite_ids == set(ids)


def test_n_to_contour_id_is_stable_and_non_negative():
    _, data = make()
    ids = [data.n_to_contour_id(n) for n in range(30)]
    assert len(set(ids)) == 30
    assert all(i >= 0 for i in ids)
    assert data.n_to_contour_id(0) == ids[0]


def test_n_to_coord_gives_distinct_coords():
    _, data = make(min_coord=(0, 0), max_coord=(5, 5))
    coords = [data.n_to_coord(n) for n in range(25)]
    assert len(set(coords)) == 25
    assert data.n_to_coord(3) == coords[3]


def test_n_to_name_reuses_existing():
    _, data = make()
    name = data.n_to_name(0)
    assert data.n_to_name(0) == name
    assert data.bite_names == [name]


def test_reset_clears_everything():
    _, data = make()
    data.add_random_bites(Stopwatch(), 5)
    data.reset()
    assert data.bites_added == 0
    assert data.bite_ids == []
    assert not data.valid_coords


def test_add_random_bites_fills_store():
    ds, data = make()
    sw = Stopwatch()
    assert data.add_random_bites(sw, 10) == 10
    assert ds.get_bite_count() == 10
    assert data.bites_added == 10
    assert sorted(ds.all_bites()) == list(range(10))
    assert sorted(ds.get_bite_coord(b).x for b in ds.all_bites()) == list(range(10))
    assert all(0 <= ds.get_bite_coord(b).y < 10 for b in ds.all_bites())
    assert sw.elapsed() >= 0


def test_add_random_bites_zero():
    ds, data = make()
    assert data.add_random_bites(Stopwatch(), 0) == 0
    assert ds.get_bite_count() == 0


def test_random_valid_bite_is_known():
    _, data = make()
    data.add_random_bites(Stopwatch(), 8)
    for _ in range(20):
        assert data.random_valid_bite() in data.valid_bite_ids


def test_random_valid_coord_on_empty_raises():
    _, data = make()
    with pytest.raises(IndexError):
        data.random_valid_coord()


def test_random_valid_coord_is_known():
    _, data = make()
    data.add_random_bites(Stopwatch(), 6)
    for _ in range(20):
        assert data.random_valid_coord() in data.coords


def test_random_root_contour_with_few_contours():
    _, data = make()
    assert data.random_root_contour() == data.n_to_contour_id(0)


def test_add_grid_contours_ids_match_store():
    ds, data = make()
    ids = data.add_grid_contours(Stopwatch(), 0, 0, 10, 10, 5)
    assert sorted(ds.all_contours()) == ids
    assert data.contours_added == len(ids)
    assert set(ids) == data.valid_contour_ids
    assert ds.get_contour_height(1) == 1
    for cid in ids:
        assert ds.get_contour_name(cid) == GRID_CONTOUR_NAME
        assert 0 <= ds.get_contour_height(cid) < 5
        (x, y), = ds.get_contour_coords(cid)
        assert 0 <= x < 10 and 0 <= y < 10


def test_add_grid_contours_rejects_empty_area():
    _, data = make()
    with pytest.raises(ValueError):
        data.add_grid_contours(Stopwatch(), 0, 0, 0, 10, 5)


def test_add_grid_contours_rejects_too_few_levels():
    _, data = make()
    with pytest.raises(ValueError):
        data.add_grid_contours(Stopwatch(), 0, 0, 10, 10, 2)


def test_bites_to_given_contours_empty_inputs():
    _, data = make()
    assert data.add_random_bites_to_given_contours(Stopwatch(), 0, [1, 2]) == 0
    assert data.add_random_bites_to_given_contours(Stopwatch(), 5, []) == 0


def test_bites_to_given_contours_lands_on_contour_cells():
    ds, data = make()
    ids = data.add_grid_contours(Stopwatch(), 0, 0, 30, 30, 5)
    added = data.add_random_bites_to_given_contours(Stopwatch(), 10, ids)
    assert 0 <= added <= 10
    assert ds.get_bite_count() == added == data.bites_added
    cells = {c for cid in ids for c in ds.get_contour_coords(cid)}
    assert all(ds.get_bite_coord(b) in cells for b in ds.all_bites())


def test_bites_and_contours_negative_arguments():
    _, data = make()
    with pytest.raises(ValueError):
        data.add_random_bites_and_contours(Stopwatch(), -1, 0, 0, 5, 5)
    with pytest.raises(ValueError):
        data.add_random_bites_and_contours(Stopwatch(), 3, 5, 0, 0, 5)
    with pytest.raises(ValueError):
        data.add_random_bites_and_contours(Stopwatch(), 3, 0, 5, 5, 0)


def test_bites_and_contours_zero_area_adds_nothing():
    ds, data = make()
    assert data.add_random_bites_and_contours(Stopwatch(), 5, 0, 0, 0, 0) == 0
    assert ds.get_bite_count() == 0


def test_bites_and_contours_fills_store():
    ds, data = make()
    added = data.add_random_bites_and_contours(Stopwatch(), 20, 0, 0, 40, 40)
    assert 0 <= added <= 20
    assert ds.get_bite_count() == added
    assert ds.all_contours()