"""Tests for join key resolution and remembered key profiles."""

from __future__ import annotations

import pytest

from sheetjoin.errors import UnknownColumnError
from sheetjoin.join_key import (
    JoinKeyPair,
    lookup_key_profile,
    manual_key_pair,
    remember_key_profile,
    resolve_join_key,
)


def test_exact_preferred_spelling():
    pair = resolve_join_key(["name", "id"], ["id", "x"])
    assert pair == JoinKeyPair("id", "id", "exact")


def test_preferred_list_order_decides():
    pair = resolve_join_key(["customer_id", "id"], ["customer_id", "id"])
    assert (pair.main, pair.vendor) == ("id", "id")


def test_case_insensitive_preferred_keeps_each_spelling():
    pair = resolve_join_key(["id", "name"], ["ID", "price"])
    assert pair == JoinKeyPair("id", "ID", "case_insensitive")


def test_case_insensitive_later_preferred_entry():
    pair = resolve_join_key(["CUSTOMERID", "total"], ["CustomerID", "region"])
    assert pair == JoinKeyPair("CUSTOMERID", "CustomerID", "case_insensitive")


def test_substring_id():
    pair = resolve_join_key(["amount", "cust_id"], ["region", "Vendor_ID"])
    assert pair == JoinKeyPair("cust_id", "Vendor_ID", "contains_id")


def test_substring_name():
    pair = resolve_join_key(["Full Name", "amt"], ["customer name", "x"])
    assert pair == JoinKeyPair("Full Name", "customer name", "contains_name")


def test_first_common_column_follows_main_order():
    pair = resolve_join_key(["a", "b", "c"], ["c", "b"])
    assert pair == JoinKeyPair("b", "b", "common")


def test_no_key_found():
    assert resolve_join_key(["a", "b"], ["x", "y"]) is None


def test_resolution_is_deterministic():
    main = ["order", "sku", "qty", "ref"]
    vendor = ["qty", "sku", "ref"]
    pairs = {resolve_join_key(main, vendor) for _ in range(20)}
    assert pairs == {JoinKeyPair("sku", "sku", "common")}


def test_custom_preferred_list():
    pair = resolve_join_key(["sku", "id"], ["sku", "id"], preferred=["sku"])
    assert pair == JoinKeyPair("sku", "sku", "exact")


def test_manual_key_pair_validates_columns():
    pair = manual_key_pair("a", "x", ["a", "b"], ["x"])
    assert pair == JoinKeyPair("a", "x", "manual")
    with pytest.raises(UnknownColumnError):
        manual_key_pair("zzz", "x", ["a"], ["x"])
    with pytest.raises(UnknownColumnError):
        manual_key_pair("a", "zzz", ["a"], ["x"])


def test_key_profile_roundtrip(user_data_dir):
    main = ["code", "title"]
    vendor = ["Code", "cost"]
    assert lookup_key_profile(main, vendor) is None

    remember_key_profile(main, vendor, JoinKeyPair("code", "Code", "manual"))
    assert (user_data_dir / "key_profiles.json").exists()
    assert lookup_key_profile(main, vendor) == JoinKeyPair("code", "Code", "profile")
    # другая структура - профиль не подходит
    assert lookup_key_profile(main + ["extra"], vendor) is None
