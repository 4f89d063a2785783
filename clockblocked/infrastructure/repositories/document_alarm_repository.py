"""DocumentStore implementation of AlarmRepository."""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ...domain.documents import ALARMS_COLLECTION, AlarmDocument
from ...domain.errors import AlarmNotFound, DocumentNotFound
from ...domain.ports.document_store import Document, DocumentStore
from ...domain.repositories.alarm_repository import AlarmsCallback

logger = logging.getLogger(__name__)


def _wire_fields(fields: Dict[str, Any]) -> Document:
    """Translate Python attribute names to the stored field names."""
    wire: Document = {}
    for name, value in fields.items():
        info = AlarmDocument.model_fields.get(name)
        if info is None or name == "id":
            raise ValueError(f"Unknown alarm field: {name}")
        wire[info.alias or name] = value
    return wire


class DocumentAlarmRepository:
    """Concrete AlarmRepository over a DocumentStore."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def create(
        self,
        user_id: str,
        hours: int,
        minutes: int,
        selected_days: List[int],
        is_enabled: bool,
        created_at: datetime,
    ) -> AlarmDocument:
        fields = {
            "userId": user_id,
            "hours": hours,
            "minutes": minutes,
            "selectedDays": list(selected_days),
            "isEnabled": is_enabled,
            "createdAt": created_at,
        }
        alarm_id = await self._store.create(ALARMS_COLLECTION, fields)
        return AlarmDocument.decode({"id": alarm_id, **fields})

    async def get(self, alarm_id: str) -> Optional[AlarmDocument]:
        document = await self._store.get(ALARMS_COLLECTION, alarm_id)
        return AlarmDocument.decode(document) if document is not None else None

    async def list_for_user(self, user_id: str) -> List[AlarmDocument]:
        documents = await self._store.query(ALARMS_COLLECTION, {"userId": user_id})
        return self._newest_first(documents)

    async def update(self, alarm_id: str, **fields: Any) -> None:
        try:
            await self._store.update(ALARMS_COLLECTION, alarm_id, _wire_fields(fields))
        except DocumentNotFound as e:
            raise AlarmNotFound(alarm_id) from e

    async def delete(self, alarm_id: str) -> None:
        await self._store.delete(ALARMS_COLLECTION, alarm_id)

    async def subscribe_for_user(
        self, user_id: str, callback: AlarmsCallback
    ) -> Callable[[], None]:
        async def on_change(documents: List[Document]) -> None:
            await callback(self._newest_first(documents))

        return await self._store.subscribe(ALARMS_COLLECTION, {"userId": user_id}, on_change)

    @staticmethod
    def _newest_first(documents: List[Document]) -> List[AlarmDocument]:
        alarms = [AlarmDocument.decode(document) for document in documents]
        return sorted(alarms, key=lambda alarm: alarm.created_at, reverse=True)
