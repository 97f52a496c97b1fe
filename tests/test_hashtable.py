import zlib

import pytest

from minzip.hashtable import HashTable, hash_size, round_up_power2


class Key:
    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"Key({self.name!r})"


def cmp(a, b):
    return (a.name > b.name) - (a.name < b.name)


def h(key):
    return zlib.crc32(key.name.encode())


def make_table(names, size=4):
    table = HashTable(size, None)
    keys = [Key(n) for n in names]
    for k in keys:
        assert table.lookup(h(k), k, cmp, True) is k
    return table, keys


@pytest.mark.parametrize("value", [1, 2, 3, 5, 7, 8, 9, 100, 1000, 65537])
def test_round_up_power2_invariant(value):
    result = round_up_power2(value)
    assert result & (result - 1) == 0
    assert value <= result < 2 * value


def test_round_up_power2_exact_powers_unchanged():
    assert [round_up_power2(2 ** n) for n in range(10)] == [2 ** n for n in range(10)]


def test_round_up_power2_zero_wraps():
    assert round_up_power2(0) == 0


@pytest.mark.parametrize("size", [0, 1, 5, 10, 100, 1234])
def test_hash_size_keeps_load_below_limit(size):
    capacity = hash_size(size)
    assert size * 8 <= capacity * 5 + 5
    assert capacity > size


def test_create_rejects_non_positive():
    with pytest.raises(ValueError):
        HashTable(0, None)


def test_initial_size_rounded_up():
    table = HashTable(5, None)
    assert table.table_size == round_up_power2(5)
    assert len(table) == 0


def test_lookup_finds_equal_item():
    table, keys = make_table(["alpha", "beta"])
    probe = Key("alpha")
    assert table.lookup(h(probe), probe, cmp) is keys[0]
    assert table.lookup(h(probe), probe, cmp, True) is keys[0]
    assert len(table) == 2


def test_lookup_missing_without_add():
    table, _ = make_table(["alpha"])
    missing = Key("gamma")
    assert table.lookup(h(missing), missing, cmp) is None
    assert len(table) == 1


def test_lookup_rejects_none():
    table = HashTable(4, None)
    with pytest.raises(ValueError):
        table.lookup(1, None, cmp, True)


def test_many_entries_resize_and_remain_findable():
    names = [f"entry-{i}" for i in range(200)]
    table, keys = make_table(names, size=1)
    assert len(table) == 200
    size = table.table_size
    assert size & (size - 1) == 0
    assert len(table) * 8 <= size * 5
    for k in keys:
        assert table.lookup(h(k), Key(k.name), cmp) is k
    assert {k.name for k in table} == set(names)


def test_collisions_same_hash():
    table = HashTable(8, None)
    a, b = Key("a"), Key("b")
    table.lookup(7, a, cmp, True)
    table.lookup(7, b, cmp, True)
    assert table.lookup(7, Key("a"), cmp) is a
    assert table.lookup(7, Key("b"), cmp) is b
    assert table.count_probes(7, Key("a"), cmp) == 0
    assert table.count_probes(7, Key("b"), cmp) >= 1


def test_count_probes_missing_returns_none():
    table, _ = make_table(["alpha"])
    missing = Key("zzz")
    assert table.count_probes(h(missing), missing, cmp) is None


def test_remove_is_by_identity():
    table, keys = make_table(["alpha", "beta"])
    assert table.remove(h(keys[0]), Key("alpha")) is False
    assert table.remove(h(keys[0]), keys[0]) is True
    assert len(table) == 1
    assert table.dead_entries == 1
    assert table.lookup(h(keys[0]), Key("alpha"), cmp) is None
    assert table.remove(h(keys[0]), keys[0]) is False


def test_probe_past_tombstone():
    table = HashTable(16, None)
    a, b = Key("a"), Key("b")
    table.lookup(3, a, cmp, True)
    table.lookup(3, b, cmp, True)
    assert table.remove(3, a)
    assert table.lookup(3, Key("b"), cmp) is b
    assert list(table) == [b]


def test_resize_clears_tombstones():
    table, keys = make_table([f"k{i}" for i in range(4)], size=8)
    for k in keys[:2]:
        assert table.remove(h(k), k)
    assert table.dead_entries == 2
    for i in range(20):
        k = Key(f"new{i}")
        table.lookup(h(k), k, cmp, True)
    assert table.dead_entries == 0
    assert len(table) == 22


def test_clear_calls_free_func_for_live_entries():
    freed = []
    table = HashTable(8, freed.append)
    keys = [Key(n) for n in ["a", "b", "c"]]
    for k in keys:
        table.lookup(h(k), k, cmp, True)
    table.remove(h(keys[1]), keys[1])
    table.clear()
    assert sorted(k.name for k in freed) == ["a", "c"]
    assert len(table) == 0
    assert list(table) == []
    assert table.dead_entries == 0


def test_foreach_early_exit_and_zero():
    table, keys = make_table(["a", "b", "c"])
    seen = []

    def visit(item):
        seen.append(item)
        return 0

    assert table.foreach(visit) == 0
    assert sorted(k.name for k in seen) == ["a", "b", "c"]

    calls = []

    def stop(item):
        calls.append(item)
        return 42

    assert table.foreach(stop) == 42
    assert len(calls) == 1


def test_iteration_matches_len():
    table, keys = make_table(["x", "y", "z"])
    assert len(list(table)) == len(table)
    assert set(table) == set(keys)


def test_mem_usage_grows_with_table():
    table = HashTable(2, None)
    before = table.mem_usage()
    for i in range(10):
        k = Key(str(i))
        table.lookup(h(k), k, cmp, True)
    assert table.mem_usage() > before


def test_probe_count_statistics():
    names = [f"n{i}" for i in range(30)]
    table, keys = make_table(names)
    stats = table.probe_count(h, cmp)
    per_entry = [table.count_probes(h(k), k, cmp) for k in keys]
    assert stats.entries == 30
    assert stats.table_size == table.table_size
    assert stats.total_probe == sum(per_entry)
    assert stats.min_probe == min(per_entry)
    assert stats.max_probe == max(per_entry)
    assert stats.average == pytest.approx(sum(per_entry) / 30)


def test_probe_count_empty_table():
    table = HashTable(4, None)
    stats = table.probe_count(h, cmp)
    assert stats.entries == 0
    assert stats.average == 0.0