"""Tests for the SQLAlchemy-backed document store.

Uses an in-memory SQLite database to verify that the store implements the
DocumentStore protocol and translates wire field names to ORM columns.
"""

from datetime import datetime

import pytest

from clockblocked.domain.documents import ALARMS_COLLECTION, ALARMS_SENT_OUT_COLLECTION
from clockblocked.domain.errors import DocumentNotFound, UnknownCollection
from clockblocked.domain.ports import DocumentStore

CREATED = datetime(2025, 1, 6, 7, 0)


def _alarm_fields(user_id="u1", hours=8):
    return {
        "userId": user_id,
        "hours": hours,
        "minutes": 0,
        "selectedDays": [1, 3],
        "isEnabled": True,
        "createdAt": CREATED,
    }


class TestProtocol:
    def test_satisfies_document_store(self, store):
        assert isinstance(store, DocumentStore)


class TestCrud:
    async def test_create_and_get(self, store):
        alarm_id = await store.create(ALARMS_COLLECTION, _alarm_fields())

        document = await store.get(ALARMS_COLLECTION, alarm_id)

        assert document == {"id": alarm_id, **_alarm_fields()}

    async def test_ids_are_unique(self, store):
        first = await store.create(ALARMS_COLLECTION, _alarm_fields())
        second = await store.create(ALARMS_COLLECTION, _alarm_fields())
        assert first != second

    async def test_get_missing(self, store):
        assert await store.get(ALARMS_COLLECTION, "missing") is None

    async def test_query_by_equality(self, store):
        mine = await store.create(ALARMS_COLLECTION, _alarm_fields("u1"))
        await store.create(ALARMS_COLLECTION, _alarm_fields("u2"))

        documents = await store.query(ALARMS_COLLECTION, {"userId": "u1"})

        assert [d["id"] for d in documents] == [mine]

    async def test_query_several_filters(self, store):
        pending = await store.create(
            ALARMS_SENT_OUT_COLLECTION,
            {"userId": "u1", "alarmId": "a1", "sentAt": CREATED, "challengeStatus": "pending"},
        )
        await store.create(
            ALARMS_SENT_OUT_COLLECTION,
            {
                "userId": "u1",
                "alarmId": "a1",
                "sentAt": CREATED,
                "challengeStatus": "success",
                "completedAt": CREATED,
                "attemptsMade": 1,
            },
        )

        documents = await store.query(
            ALARMS_SENT_OUT_COLLECTION,
            {"userId": "u1", "alarmId": "a1", "challengeStatus": "pending"},
        )

        assert [d["id"] for d in documents] == [pending]
        assert documents[0]["completedAt"] is None

    async def test_update_merges_fields(self, store):
        alarm_id = await store.create(ALARMS_COLLECTION, _alarm_fields())

        await store.update(ALARMS_COLLECTION, alarm_id, {"isEnabled": False, "hours": 6})

        document = await store.get(ALARMS_COLLECTION, alarm_id)
        assert document["isEnabled"] is False
        assert document["hours"] == 6
        assert document["selectedDays"] == [1, 3]

    async def test_update_missing_raises(self, store):
        with pytest.raises(DocumentNotFound):
            await store.update(ALARMS_COLLECTION, "missing", {"hours": 6})

    async def test_delete(self, store):
        alarm_id = await store.create(ALARMS_COLLECTION, _alarm_fields())

        await store.delete(ALARMS_COLLECTION, alarm_id)

        assert await store.get(ALARMS_COLLECTION, alarm_id) is None

    async def test_delete_missing_is_tolerated(self, store):
        await store.delete(ALARMS_COLLECTION, "missing")


class TestValidation:
    async def test_unknown_collection(self, store):
        with pytest.raises(UnknownCollection):
            await store.get("users", "x")

    async def test_unknown_field(self, store):
        with pytest.raises(ValueError, match="snooze"):
            await store.create(ALARMS_COLLECTION, {**_alarm_fields(), "snooze": 5})


class TestSubscribe:
    async def test_snapshot_then_changes(self, store):
        snapshots = []

        async def on_change(documents):
            snapshots.append(sorted(d["hours"] for d in documents))

        unsubscribe = await store.subscribe(ALARMS_COLLECTION, {"userId": "u1"}, on_change)
        alarm_id = await store.create(ALARMS_COLLECTION, _alarm_fields(hours=8))
        await store.update(ALARMS_COLLECTION, alarm_id, {"hours": 9})
        await store.create(ALARMS_COLLECTION, _alarm_fields("u2", hours=5))
        await store.delete(ALARMS_COLLECTION, alarm_id)
        unsubscribe()
        await store.create(ALARMS_COLLECTION, _alarm_fields(hours=10))

        # The u2 write still notifies, with u1's unchanged view
        assert snapshots == [[], [8], [9], [9], []]

    async def test_other_collection_does_not_notify(self, store):
        snapshots = []

        async def on_change(documents):
            snapshots.append(documents)

        await store.subscribe(ALARMS_COLLECTION, {"userId": "u1"}, on_change)
        await store.create(
            ALARMS_SENT_OUT_COLLECTION,
            {"userId": "u1", "alarmId": "a1", "sentAt": CREATED, "challengeStatus": "pending"},
        )

        assert snapshots == [[]]

    async def test_failing_callback_does_not_break_writes(self, store):
        async def broken(documents):
            raise RuntimeError("subscriber bug")

        await store.subscribe(ALARMS_COLLECTION, {"userId": "u1"}, broken)

        alarm_id = await store.create(ALARMS_COLLECTION, _alarm_fields())

        assert await store.get(ALARMS_COLLECTION, alarm_id) is not None
