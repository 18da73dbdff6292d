"""Small key-value stores for per-guild and per-channel state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def put(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """Process-local store. Contents are lost on restart."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FirestoreStore:
    """Store backed by one Firestore collection, one document per key."""

    def __init__(self, firestore: FirestoreClient, collection: str) -> None:
        self._firestore = firestore
        self._collection = collection

    def _doc(self, key: str):
        return self._firestore.collection(self._collection).document(key)

    def get(self, key: str) -> Any | None:
        doc = self._doc(key).get()
        if not doc.exists:
            return None
        return (doc.to_dict() or {}).get("value")

    def put(self, key: str, value: Any) -> None:
        self._doc(key).set({"value": value})

    def delete(self, key: str) -> None:
        self._doc(key).delete()
