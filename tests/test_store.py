from __future__ import annotations

from unittest.mock import MagicMock

from timeteller.store import FirestoreStore, MemoryStore


def test_memory_store_get_put_delete() -> None:
    store = MemoryStore({"a": 1})

    assert store.get("a") == 1
    assert store.get("missing") is None

    store.put("b", "token")
    assert store.get("b") == "token"

    store.delete("a")
    store.delete("never-set")
    assert store.get("a") is None


def test_firestore_store_wraps_values() -> None:
    firestore = MagicMock()
    document = firestore.collection.return_value.document
    doc = MagicMock(exists=True)
    doc.to_dict.return_value = {"value": 42}
    document.return_value.get.return_value = doc

    store = FirestoreStore(firestore, "webhooks")
    store.put("100", 42)

    firestore.collection.assert_called_with("webhooks")
    document.assert_called_with("100")
    document.return_value.set.assert_called_once_with({"value": 42})
    assert store.get("100") == 42


def test_firestore_store_missing_key() -> None:
    firestore = MagicMock()
    firestore.collection.return_value.document.return_value.get.return_value = MagicMock(
        exists=False
    )

    assert FirestoreStore(firestore, "webhooks").get("nope") is None
