from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from mrtd_reader.exceptions import PersistenceError
from mrtd_reader.infrastructure import (
    DatabaseConfig,
    DatabaseManager,
    PassportRepository,
    PassportStore,
    SavedPassportRecord,
)
from mrtd_reader.models import AuthenticationStatus
from mrtd_reader.mrz import extract_record
from mrtd_reader.reconciler import RecordReconciler

FACE = b"\xff\xd8\xff\xe0stored-face\xff\xd9"
SCAN_TIME = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)


async def _database() -> DatabaseManager:
    database = DatabaseManager(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await database.create_all()
    return database


async def _store() -> PassportStore:
    return PassportStore(await _database())


def _record(data_line, name_line=None, photo=None, minutes=0):
    return RecordReconciler().reconcile(
        extract_record(data_line),
        name_line=name_line,
        authentication=AuthenticationStatus(bac_success=True, chip_auth_success=True),
        photo=photo,
        reading_errors=["DG11 not present"],
        created_at=SCAN_TIME + timedelta(minutes=minutes),
    )


def _database_locked():
    return OperationalError("INSERT INTO saved_passports", {}, Exception("database is locked"))


def test_database_config_from_dict():
    config = DatabaseConfig.from_dict({"url": "sqlite+aiosqlite:///:memory:", "echo": 1})

    assert config.url == "sqlite+aiosqlite:///:memory:"
    assert config.echo is True


@pytest.mark.asyncio
async def test_save_and_load_round_trip(data_line, name_line):
    store = await _store()
    record = _record(data_line, name_line, photo=FACE)

    passport_id = await store.save(record)
    loaded = await store.load(passport_id)

    assert passport_id == str(record.id)
    assert loaded == record
    assert loaded.photo == FACE
    assert await store.load_photo(passport_id) == FACE


@pytest.mark.asyncio
async def test_record_without_photo(data_line):
    store = await _store()
    record = _record(data_line)

    passport_id = await store.save(record)

    assert await store.load_photo(passport_id) is None
    assert (await store.load(passport_id)).photo is None


@pytest.mark.asyncio
async def test_load_unknown_passport():
    store = await _store()

    assert await store.load("00000000-0000-0000-0000-000000000000") is None


@pytest.mark.asyncio
async def test_list_saved_newest_first(data_line, name_line):
    store = await _store()
    older = _record(data_line, name_line)
    newer = _record(data_line, minutes=5)
    await store.save(older)
    await store.save(newer)

    saved = await store.list_saved()

    assert [entry.id for entry in saved] == [str(newer.id), str(older.id)]
    assert saved[1].full_name == "ANNA MARIA ERIKSSON"
    assert saved[1].document_number == "L898902C3"
    assert saved[1].expiry_date == "120415"
    assert saved[1].is_authenticated
    assert not saved[1].is_favorite


@pytest.mark.asyncio
async def test_set_favorite(data_line):
    store = await _store()
    passport_id = await store.save(_record(data_line))

    assert await store.set_favorite(passport_id)
    assert (await store.list_saved())[0].is_favorite
    assert not await store.set_favorite("missing")


@pytest.mark.asyncio
async def test_delete_removes_record_and_photo(data_line):
    store = await _store()
    passport_id = await store.save(_record(data_line, photo=FACE))

    assert await store.delete(passport_id)

    assert await store.load(passport_id) is None
    assert await store.load_photo(passport_id) is None
    assert not await store.delete(passport_id)


@pytest.mark.asyncio
async def test_clear_all(data_line):
    store = await _store()
    await store.save(_record(data_line, photo=FACE))
    await store.save(_record(data_line, minutes=1))

    assert await store.clear_all() == 2
    assert await store.list_saved() == []


@pytest.mark.asyncio
async def test_save_retries_once(monkeypatch, data_line):
    store = await _store()
    original_add = PassportRepository.add
    calls = []

    async def flaky_add(self, *args, **kwargs):
        calls.append(args[0])
        if len(calls) == 1:
            raise _database_locked()
        return await original_add(self, *args, **kwargs)

    monkeypatch.setattr(PassportRepository, "add", flaky_add)
    record = _record(data_line, photo=FACE)

    passport_id = await store.save(record)

    assert len(calls) == 2
    assert (await store.load(passport_id)) == record


@pytest.mark.asyncio
async def test_save_gives_up_after_retry(monkeypatch, data_line):
    store = await _store()
    calls = []

    async def failing_add(self, *args, **kwargs):
        calls.append(args[0])
        raise _database_locked()

    monkeypatch.setattr(PassportRepository, "add", failing_add)

    with pytest.raises(PersistenceError) as exc_info:
        await store.save(_record(data_line))

    assert len(calls) == 2
    assert isinstance(exc_info.value.__cause__, OperationalError)
    assert await store.list_saved() == []


@pytest.mark.asyncio
async def test_load_corrupted_record(data_line):
    database = await _database()
    store = PassportStore(database)
    passport_id = await store.save(_record(data_line))

    async with database.session_scope() as session:
        await session.execute(
            update(SavedPassportRecord)
            .where(SavedPassportRecord.id == passport_id)
            .values(record={"bad": 1})
        )

    with pytest.raises(PersistenceError) as exc_info:
        await store.load(passport_id)

    assert isinstance(exc_info.value.__cause__, ValidationError)
    assert (await store.list_saved())[0].id == passport_id
