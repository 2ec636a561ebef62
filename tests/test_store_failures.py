"""Storage failures, write conflicts on edit, and startup connectivity."""

from __future__ import annotations

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, PyMongoError, ServerSelectionTimeoutError

import main
from app.core.errors import DuplicateRegistration, NotFound, StoreUnavailable
from app.services import registration_service, settings_service
from conftest import StubDatabase, make_candidate, raising

GENERIC_500 = {"message": "An unexpected server error occurred."}


def store_down():
    return raising(ServerSelectionTimeoutError("No servers found yet"))


def duplicate_key():
    return raising(DuplicateKeyError("E11000 duplicate key error collection: registrations", 11000))


async def _two_registrations(db):
    first = await registration_service.submit_registration(db, make_candidate())
    second = await registration_service.submit_registration(
        db, make_candidate(nim="222", binusianEmail="grace@binus.ac.id", fullName="Grace")
    )
    return first.id, second.id


class TestServiceStoreFailures:
    async def test_insert_failure_is_store_unavailable(self, mock_db):
        db = StubDatabase(mock_db, registrations={"insert_one": store_down()})

        with pytest.raises(StoreUnavailable):
            await registration_service.submit_registration(db, make_candidate())
        assert await mock_db.registrations.count_documents({}) == 0

    async def test_update_failure_leaves_record_untouched(self, mock_db):
        receipt = await registration_service.submit_registration(mock_db, make_candidate())
        db = StubDatabase(mock_db, registrations={"find_one_and_update": store_down()})

        with pytest.raises(StoreUnavailable):
            await registration_service.update_registration(db, receipt.id, {"major": "Law"})

        stored = await mock_db.registrations.find_one({"_id": ObjectId(receipt.id)})
        assert stored["major"] == "CS"

    async def test_delete_failure_keeps_record(self, mock_db):
        receipt = await registration_service.submit_registration(mock_db, make_candidate())
        db = StubDatabase(mock_db, registrations={"delete_one": store_down()})

        with pytest.raises(StoreUnavailable):
            await registration_service.delete_registration(db, receipt.id)
        assert await mock_db.registrations.count_documents({}) == 1

    async def test_list_failure_is_store_unavailable(self, mock_db):
        db = StubDatabase(mock_db, registrations={"find": store_down()})

        with pytest.raises(StoreUnavailable):
            await registration_service.list_registrations(db)

    async def test_settings_failure_is_store_unavailable(self, mock_db):
        db = StubDatabase(mock_db, settings={"find_one_and_update": store_down()})

        with pytest.raises(StoreUnavailable):
            await settings_service.get_status(db)
        with pytest.raises(StoreUnavailable):
            await registration_service.submit_registration(db, make_candidate())


class TestUpdateConflicts:
    async def test_update_to_another_records_nim_names_nim(self, mock_db):
        _, second_id = await _two_registrations(mock_db)
        db = StubDatabase(mock_db, registrations={"find_one_and_update": duplicate_key()})

        with pytest.raises(DuplicateRegistration) as excinfo:
            await registration_service.update_registration(db, second_id, {"nim": "111"})

        assert excinfo.value.field == "nim"

    async def test_own_nim_is_not_counted_as_the_conflict(self, mock_db):
        _, second_id = await _two_registrations(mock_db)
        db = StubDatabase(mock_db, registrations={"find_one_and_update": duplicate_key()})

        with pytest.raises(DuplicateRegistration) as excinfo:
            await registration_service.update_registration(
                db, second_id, {"nim": "222", "binusianEmail": "ada@binus.ac.id"}
            )

        assert excinfo.value.field == "binusianEmail"

    async def test_unknown_id_is_not_found_even_with_invalid_payload(self, mock_db):
        with pytest.raises(NotFound):
            await registration_service.update_registration(
                mock_db, str(ObjectId()), {"binusianEmail": "not-binusian@gmail.com"}
            )


class TestHttpStoreFailures:
    async def test_register_answers_generic_500(self, client, use_db, mock_db):
        use_db(StubDatabase(mock_db, registrations={"insert_one": store_down()}))

        r = await client.post("/api/register", json=make_candidate())

        assert r.status_code == 500
        assert r.json() == GENERIC_500
        assert await mock_db.registrations.count_documents({}) == 0

    async def test_status_answers_generic_500(self, client, use_db, mock_db):
        use_db(StubDatabase(mock_db, settings={"find_one_and_update": store_down()}))

        r = await client.get("/api/settings/status")

        assert r.status_code == 500
        assert r.json() == GENERIC_500

    async def test_admin_delete_answers_generic_500(self, client, use_db, mock_db, admin_headers):
        receipt = await registration_service.submit_registration(mock_db, make_candidate())
        use_db(StubDatabase(mock_db, registrations={"delete_one": store_down()}))

        r = await client.delete(f"/api/admin/registrations/{receipt.id}", headers=admin_headers)

        assert r.status_code == 500
        assert r.json() == GENERIC_500
        assert await mock_db.registrations.count_documents({}) == 1

    async def test_admin_put_onto_another_nim_is_409(self, client, use_db, mock_db, admin_headers):
        _, second_id = await _two_registrations(mock_db)
        use_db(StubDatabase(mock_db, registrations={"find_one_and_update": duplicate_key()}))

        r = await client.put(
            f"/api/admin/registrations/{second_id}", json={"nim": "111"}, headers=admin_headers
        )

        assert r.status_code == 409
        assert "NIM" in r.json()["message"]


class TestStartup:
    async def test_unreachable_database_aborts_startup(self, monkeypatch):
        index_calls = []

        async def _ping(database):
            raise ServerSelectionTimeoutError("connection refused")

        async def _ensure_indexes(database):
            index_calls.append(database)

        monkeypatch.setattr(main, "ping", _ping)
        monkeypatch.setattr(main, "ensure_indexes", _ensure_indexes)

        with pytest.raises(PyMongoError):
            async with main.lifespan(main.app):
                pass
        assert index_calls == []

    async def test_reachable_database_creates_indexes(self, monkeypatch):
        index_calls = []

        async def _ping(database):
            return None

        async def _ensure_indexes(database):
            index_calls.append(database)

        monkeypatch.setattr(main, "ping", _ping)
        monkeypatch.setattr(main, "ensure_indexes", _ensure_indexes)

        async with main.lifespan(main.app):
            assert len(index_calls) == 1
            assert index_calls[0] is main.db
