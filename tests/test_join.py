"""Tests for the inner join engine and column reconciliation."""

from __future__ import annotations

import datetime as dt

from sheetjoin.join import JoinStats, inner_join, reconcile_row, vendor_only_columns
from sheetjoin.join_key import JoinKeyPair


def test_case_insensitive_key_and_unmatched_rows_dropped():
    main = [{"id": "1", "name": "Ann"}, {"id": "2", "name": "Bob"}]
    vendor = [{"ID": "1", "price": 10}, {"ID": "3", "price": 30}]

    result = inner_join(main, vendor)

    assert result.rows == [{"id": "1", "name": "Ann", "price": 10}]
    assert list(result.rows[0].keys()) == ["id", "name", "price"]
    assert result.key_pair == JoinKeyPair("id", "ID", "case_insensitive")
    assert result.columns == ["id", "name", "price"]
    assert result.stats.matched == 1
    assert result.stats.unmatched == 1


def test_whitespace_tolerant_match_keeps_main_value():
    main = [{"cust_id": " 7 ", "amt": 5}]
    vendor = [{"cust_id": "7", "region": "EU"}]

    result = inner_join(main, vendor)

    assert result.rows == [{"cust_id": " 7 ", "amt": 5, "region": "EU"}]
    assert result.key_pair.tier == "contains_id"


def test_no_key_gives_empty_result():
    result = inner_join([{"a": 1, "b": 2}], [{"x": 1, "y": 2}])
    assert result.empty
    assert result.key_pair is None
    assert result.stats.main_total == 1
    assert result.stats.matched == 0


def test_first_vendor_match_wins():
    main = [{"id": "1", "name": "Ann"}]
    vendor = [{"id": "1", "v": "first"}, {"id": "1", "v": "second"}]

    result = inner_join(main, vendor)

    assert result.rows == [{"id": "1", "name": "Ann", "v": "first"}]


def test_blank_keys_are_counted_and_skipped():
    main = [{"id": None, "n": "a"}, {"id": "   ", "n": "b"}, {"id": "1", "n": "c"}]
    vendor = [{"id": "1"}, {"id": "   "}]

    result = inner_join(main, vendor)

    assert [r["n"] for r in result.rows] == ["c"]
    assert result.stats.null_keys == 2
    assert result.stats.unmatched == 0
    assert all(str(r["id"]).strip() for r in result.rows)


def test_self_join_returns_every_row():
    rows = [{"id": i, "name": f"n{i}"} for i in range(1, 6)]
    result = inner_join(rows, rows)
    assert result.rows == rows
    assert result.stats.match_rate == 100.0


def test_main_values_are_never_overwritten():
    main = [{"id": 1, "price": 5}]
    vendor = [{"id": 1, "price": 99, "extra": "x"}]
    result = inner_join(main, vendor)
    assert result.rows == [{"id": 1, "price": 5, "extra": "x"}]
    assert result.common_columns == ["id", "price"]
    assert result.vendor_only_columns == ["extra"]


def test_main_column_order_comes_from_header_not_row_order():
    main = [{"name": "Ann", "id": 1}, {"id": 2}]
    vendor = [{"id": 1, "z": 1}, {"id": 2, "z": 2}]
    result = inner_join(main, vendor, main_columns=["id", "name"])
    for row in result.rows:
        assert list(row.keys()) == ["id", "name", "z"]
    assert result.rows[1] == {"id": 2, "name": None, "z": 2}


def test_numeric_keys_match_text_keys():
    main = [{"id": 1}, {"id": 2.0}]
    vendor = [{"id": "1.0", "p": "a"}, {"id": "2", "p": "b"}]
    result = inner_join(main, vendor)
    assert [r["p"] for r in result.rows] == ["a", "b"]


def test_explicit_key_pair_is_used_for_every_row():
    main = [{"id": "x", "code": "A"}, {"id": "y", "code": "B"}]
    vendor = [{"id": "y", "sku": "a", "w": 1}, {"id": "x", "sku": "b", "w": 2}]
    pair = JoinKeyPair("code", "sku", "manual")
    result = inner_join(main, vendor, key_pair=pair)
    assert result.key_pair is pair
    assert [r["w"] for r in result.rows] == [1, 2]


def test_empty_inputs():
    assert inner_join([], [{"id": 1}]).empty
    result = inner_join([{"id": 1}], [])
    assert result.empty
    assert result.stats == JoinStats(main_total=1, vendor_total=0)


def test_stats_as_dict():
    stats = JoinStats(main_total=4, vendor_total=3, matched=1, null_keys=1)
    assert stats.as_dict() == {
        "main_total": 4,
        "vendor_total": 3,
        "matched": 1,
        "null_keys": 1,
        "unmatched": 2,
        "match_rate": 25.0,
    }
    assert JoinStats().match_rate == 0.0


def test_reconcile_row():
    out = reconcile_row({"b": 2, "a": 1}, {"a": 9, "c": 3}, ["a", "b"], ["c", "a"])
    assert out == {"a": 1, "b": 2, "c": 3}
    assert list(out) == ["a", "b", "c"]


def test_vendor_only_columns_keep_vendor_order():
    assert vendor_only_columns(["id", "a"], ["z", "id", "b", "z"]) == ["z", "b"]


def test_time_keys_join():
    result = inner_join([{"id": dt.time(9, 30), "n": "a"}], [{"id": "09:30:00", "v": 1}])
    assert result.rows == [{"id": dt.time(9, 30), "n": "a", "v": 1}]
