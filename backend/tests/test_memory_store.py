import pytest

from certhub.database.base import DESCENDING, DuplicateRecordError
from certhub.database.memory import MemoryRecordStore, matches


def test_matches_supports_in_ne_and_or():
    document = {"username": "surgas", "companyId": "SURGAS", "role": "USER"}

    assert matches(document, {})
    assert matches(document, {"username": {"$in": ["chilco", "surgas"]}})
    assert not matches(document, {"username": {"$in": ["chilco"]}})
    assert matches(document, {"role": {"$ne": "ADMIN"}})
    assert matches(document, {"$or": [{"companyId": "CHILCO"}, {"companyId": "SURGAS", "role": "USER"}]})
    assert not matches(document, {"$or": [{"companyId": "CHILCO"}, {"role": "ADMIN"}]})


def test_matches_rejects_unknown_operator():
    with pytest.raises(ValueError):
        matches({"numCert": 1}, {"numCert": {"$gt": 0}})


@pytest.mark.asyncio
async def test_find_sorts_and_projects():
    store = MemoryRecordStore()
    await store.connect()
    await store.users.insert_many([
        {"username": "b", "password": "x", "companyId": "C1"},
        {"username": "a", "password": "y", "companyId": "C2"},
        {"username": "c", "password": "z", "companyId": "C1"},
    ])

    found = await store.users.find(
        {"companyId": "C1"},
        sort=[("username", DESCENDING)],
        projection={"_id": 0, "password": 0},
    )

    assert found == [{"username": "c", "companyId": "C1"}, {"username": "b", "companyId": "C1"}]


@pytest.mark.asyncio
async def test_unique_indexes_are_enforced():
    store = MemoryRecordStore()
    await store.connect()
    await store.certificates.insert_one({"companyId": "SURGAS", "numCert": 1, "serial": "A"})
    await store.certificates.insert_one({"companyId": "CHILCO", "numCert": 1, "serial": "A"})

    with pytest.raises(DuplicateRecordError):
        await store.certificates.insert_one({"companyId": "SURGAS", "numCert": 1, "serial": "B"})
    with pytest.raises(DuplicateRecordError):
        await store.certificates.update_one({"companyId": "CHILCO"}, {"companyId": "SURGAS"})
    assert await store.certificates.count() == 2


@pytest.mark.asyncio
async def test_update_one_sets_fields_and_upserts():
    store = MemoryRecordStore()
    await store.connect()

    matched = await store.config.update_one({"key": "driveFolders"}, {"value": {"report": "r"}}, upsert=True)
    assert matched == 0
    assert (await store.config.find_one({"key": "driveFolders"}))["value"] == {"report": "r"}

    matched = await store.config.update_one({"key": "driveFolders"}, {"value": {"report": "r2"}})
    assert matched == 1
    document = await store.config.find_one({"key": "driveFolders"})
    assert document["key"] == "driveFolders"
    assert document["value"] == {"report": "r2"}


@pytest.mark.asyncio
async def test_returned_documents_are_copies():
    store = MemoryRecordStore()
    await store.connect()
    await store.users.insert_one({"username": "a", "tags": ["x"]})

    document = await store.users.find_one({"username": "a"})
    document["tags"].append("y")

    assert (await store.users.find_one({"username": "a"}))["tags"] == ["x"]
