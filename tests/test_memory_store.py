from __future__ import annotations

import pytest

from campus_market.models import Role
from campus_market.services.datastore import MemoryDataStore
from campus_market.utils.contact import normalize_phone, tel_link, whatsapp_link


@pytest.fixture
def mem() -> MemoryDataStore:
    return MemoryDataStore()


def test_insert_assigns_id_and_timestamp(mem):
    row = mem.insert("things", {"name": "lamp"})
    assert row["id"]
    assert row["created_at"]
    assert mem.get("things", row["id"])["name"] == "lamp"


def test_insert_keeps_explicit_id(mem):
    mem.insert("profiles", {"id": "uid-1", "email": "a@b.c"})
    assert mem.get("profiles", "uid-1")["email"] == "a@b.c"


def test_rows_are_copies(mem):
    row = mem.insert("things", {"tags": ["a"]})
    row["tags"].append("b")
    assert mem.get("things", row["id"])["tags"] == ["a"]


def test_query_filters_orders_and_limits(mem):
    mem.insert("t", {"kind": "a", "n": 2, "created_at": "2024-01-02T00:00:00+00:00"})
    mem.insert("t", {"kind": "b", "n": 9, "created_at": "2024-01-03T00:00:00+00:00"})
    mem.insert("t", {"kind": "a", "n": 1, "created_at": "2024-01-01T00:00:00+00:00"})

    assert [r["n"] for r in mem.query("t", filters={"kind": "a"}, order_by="created_at")] == [1, 2]
    newest = mem.query("t", order_by="created_at", descending=True, limit=2)
    assert [r["n"] for r in newest] == [9, 2]


def test_query_accepts_enum_filters(mem):
    mem.insert("user_roles", {"role": "seller"})
    assert len(mem.query("user_roles", filters={"role": Role.SELLER})) == 1


def test_update_and_delete(mem):
    row = mem.insert("t", {"n": 1})
    updated = mem.update("t", row["id"], {"n": 2})
    assert updated["n"] == 2 and updated["updated_at"]
    assert mem.update("t", "missing", {"n": 3}) is None
    assert mem.delete("t", row["id"]) is True
    assert mem.delete("t", row["id"]) is False
    assert mem.get("t", row["id"]) is None


def test_increment_is_floored(mem):
    row = mem.insert("products", {"likes": 1})
    assert mem.increment("products", row["id"], "likes", -1) == 0
    assert mem.increment("products", row["id"], "likes", -1) == 0
    assert mem.increment("products", row["id"], "views", 1) == 1
    assert mem.increment("products", "nope", "views", 1) is None


def test_subscribe_receives_changes_until_closed(mem):
    events = []
    subscription = mem.subscribe("t", events.append)
    row = mem.insert("t", {"n": 1})
    mem.update("t", row["id"], {"n": 2})
    mem.delete("t", row["id"])
    mem.insert("other", {"n": 1})
    subscription.close()
    mem.insert("t", {"n": 3})

    assert [e.type for e in events] == ["INSERT", "UPDATE", "DELETE"]
    assert events[0].row["n"] == 1
    assert events[2].row is None
    subscription.close()


def test_phone_helpers():
    assert normalize_phone("0712 345 678") == "254712345678"
    assert normalize_phone("+254712345678") == "254712345678"
    assert normalize_phone("0712345678", country_code="256") == "256712345678"
    assert tel_link(" 0712 345 678 ") == "tel:0712345678"
    assert whatsapp_link("0712345678", "Hi there") == "https://wa.me/254712345678?text=Hi%20there"
    assert whatsapp_link("0712345678") == "https://wa.me/254712345678"
