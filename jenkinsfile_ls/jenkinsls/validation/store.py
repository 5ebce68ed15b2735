"""Versioned in-memory document store."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class DocumentSnapshot(BaseModel):
    """Text and editor version of one document, captured together."""

    model_config = ConfigDict(frozen=True)

    uri: str
    text: str
    version: int


class DocumentStore:
    """Maps document URI to its latest snapshot.

    Each entry is a single immutable DocumentSnapshot, so replacing or reading
    an entry is one dict operation and a reader never sees text from one
    version paired with another version number. All access happens on the
    event loop thread; none of these methods suspend.
    """

    def __init__(self) -> None:
        self._documents: dict[str, DocumentSnapshot] = {}

    def put(self, uri: str, text: str, version: int) -> DocumentSnapshot:
        snapshot = DocumentSnapshot(uri=uri, text=text, version=version)
        self._documents[uri] = snapshot
        return snapshot

    def get(self, uri: str) -> DocumentSnapshot | None:
        return self._documents.get(uri)

    def remove(self, uri: str) -> DocumentSnapshot | None:
        return self._documents.pop(uri, None)

    def __contains__(self, uri: object) -> bool:
        return uri in self._documents

    def __len__(self) -> int:
        return len(self._documents)
