"""SQLAlchemy implementation of DocumentStore.

Each collection maps to one ORM model. Documents cross the boundary as
plain dicts keyed by wire field names; this module translates them to and
from model attributes and never interprets the values.
"""

import enum
import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...core.database import get_db_session
from ...domain.documents import ALARMS_COLLECTION, ALARMS_SENT_OUT_COLLECTION
from ...domain.errors import DocumentNotFound, UnknownCollection
from ...domain.ports.document_store import ChangeCallback, Document
from ...models import Alarm, AlarmSentOut, Base
from ...models.alarm import new_document_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionMapping:
    """Wire field name -> ORM attribute name for one collection."""

    model: Type[Base]
    fields: Dict[str, str]

    def to_attributes(self, collection: str, document: Document) -> Dict[str, Any]:
        values = {}
        for name, value in document.items():
            if name == "id":
                continue
            if name not in self.fields:
                raise ValueError(f"Unknown field {name!r} for collection {collection}")
            if isinstance(value, enum.Enum):
                value = value.value
            values[self.fields[name]] = value
        return values

    def to_document(self, row: Base) -> Document:
        document: Document = {"id": row.id}
        for name, attribute in self.fields.items():
            document[name] = getattr(row, attribute)
        return document


COLLECTIONS: Dict[str, CollectionMapping] = {
    ALARMS_COLLECTION: CollectionMapping(
        model=Alarm,
        fields={
            "userId": "user_id",
            "hours": "hours",
            "minutes": "minutes",
            "selectedDays": "selected_days",
            "isEnabled": "is_enabled",
            "createdAt": "created_at",
        },
    ),
    ALARMS_SENT_OUT_COLLECTION: CollectionMapping(
        model=AlarmSentOut,
        fields={
            "userId": "user_id",
            "alarmId": "alarm_id",
            "sentAt": "sent_at",
            "challengeStatus": "challenge_status",
            "completedAt": "completed_at",
            "attemptsMade": "attempts_made",
        },
    ),
}


@dataclass
class _Subscription:
    collection: str
    filters: Document
    on_change: ChangeCallback
    active: bool = field(default=True)


class SqlAlchemyDocumentStore:
    """Concrete DocumentStore backed by SQLAlchemy async sessions.

    Change notifications are in-process: subscribers are re-queried after
    every write made through this store instance.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker] = None) -> None:
        self._session_factory = session_factory
        self._subscriptions: List[_Subscription] = []

    def _session(self) -> AbstractAsyncContextManager[AsyncSession]:
        if self._session_factory is not None:
            return self._session_factory()
        return get_db_session()

    @staticmethod
    def _mapping(collection: str) -> CollectionMapping:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise UnknownCollection(collection) from None

    async def create(self, collection: str, fields: Document) -> str:
        mapping = self._mapping(collection)
        document_id = new_document_id()
        row = mapping.model(id=document_id, **mapping.to_attributes(collection, fields))
        async with self._session() as session:
            session.add(row)
            await session.commit()
        logger.debug(f"Created {collection}/{document_id}")
        await self._notify(collection)
        return document_id

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        mapping = self._mapping(collection)
        async with self._session() as session:
            row = await session.get(mapping.model, document_id)
            return mapping.to_document(row) if row is not None else None

    async def query(self, collection: str, filters: Document) -> List[Document]:
        mapping = self._mapping(collection)
        conditions = [
            getattr(mapping.model, attribute) == value
            for attribute, value in mapping.to_attributes(collection, filters).items()
        ]
        async with self._session() as session:
            result = await session.execute(select(mapping.model).where(*conditions))
            return [mapping.to_document(row) for row in result.scalars().all()]

    async def update(self, collection: str, document_id: str, fields: Document) -> None:
        mapping = self._mapping(collection)
        values = mapping.to_attributes(collection, fields)
        async with self._session() as session:
            row = await session.get(mapping.model, document_id)
            if row is None:
                raise DocumentNotFound(collection, document_id)
            for attribute, value in values.items():
                setattr(row, attribute, value)
            await session.commit()
        logger.debug(f"Updated {collection}/{document_id}: {sorted(fields)}")
        await self._notify(collection)

    async def delete(self, collection: str, document_id: str) -> None:
        mapping = self._mapping(collection)
        async with self._session() as session:
            row = await session.get(mapping.model, document_id)
            if row is None:
                logger.debug(f"Delete of missing {collection}/{document_id} ignored")
                return
            await session.delete(row)
            await session.commit()
        logger.debug(f"Deleted {collection}/{document_id}")
        await self._notify(collection)

    async def subscribe(
        self, collection: str, filters: Document, on_change: ChangeCallback
    ) -> Callable[[], None]:
        self._mapping(collection)
        subscription = _Subscription(collection, dict(filters), on_change)
        self._subscriptions.append(subscription)
        await self._deliver(subscription)

        def unsubscribe() -> None:
            subscription.active = False
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    async def _notify(self, collection: str) -> None:
        for subscription in list(self._subscriptions):
            if subscription.collection == collection and subscription.active:
                await self._deliver(subscription)

    async def _deliver(self, subscription: _Subscription) -> None:
        try:
            documents = await self.query(subscription.collection, subscription.filters)
            await subscription.on_change(documents)
        except Exception:
            logger.exception(
                f"Subscription callback failed for {subscription.collection}"
            )
