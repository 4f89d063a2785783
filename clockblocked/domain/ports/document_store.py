"""DocumentStore port -- key/collection CRUD plus change subscriptions."""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, runtime_checkable

Document = Dict[str, Any]
ChangeCallback = Callable[[List[Document]], Awaitable[None]]


@runtime_checkable
class DocumentStore(Protocol):
    """A managed document store holding ``alarms`` and ``alarms_sent_out``.

    Every returned document includes its identifier under ``"id"``.
    """

    async def create(self, collection: str, fields: Document) -> str:
        """Insert a document and return its store-assigned ID."""
        ...

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        """Return the document, or None if it does not exist."""
        ...

    async def query(self, collection: str, filters: Document) -> List[Document]:
        """Return all documents whose fields equal every filter value."""
        ...

    async def update(self, collection: str, document_id: str, fields: Document) -> None:
        """Merge *fields* into an existing document."""
        ...

    async def delete(self, collection: str, document_id: str) -> None:
        """Delete a document. Deleting a missing document is not an error."""
        ...

    async def subscribe(
        self, collection: str, filters: Document, on_change: ChangeCallback
    ) -> Callable[[], None]:
        """Deliver the matching documents now and after every change.

        Returns a callable that removes the subscription.
        """
        ...
