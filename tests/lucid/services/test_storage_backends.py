from __future__ import annotations

import asyncio

import pytest

from lucid.models import Skill
from lucid.services import FileStateStorage, JsonFileStorage, StorageError


def test_json_storage_round_trip(tmp_path) -> None:
    storage = JsonFileStorage(tmp_path / "data" / "skills.json", Skill)

    async def scenario():
        await storage.save("py", Skill(id="py", name="Python"))
        await storage.save("go", Skill(id="go", name="Go"))
        deleted = await storage.delete("go")
        missing = await storage.delete("go")
        return await storage.get_all(), deleted, missing

    items, deleted, missing = asyncio.run(scenario())

    assert [s.name for s in items] == ["Python"]
    assert deleted is True
    assert missing is False
    assert asyncio.run(JsonFileStorage(tmp_path / "data" / "skills.json", Skill).get("py")).name == "Python"


def test_json_storage_missing_file_is_empty(tmp_path) -> None:
    assert asyncio.run(JsonFileStorage(tmp_path / "none.json", Skill).get_all()) == []


def test_json_storage_rejects_corrupt_documents(tmp_path) -> None:
    path = tmp_path / "skills.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(StorageError):
        asyncio.run(JsonFileStorage(path, Skill).get_all())

    path.write_text('{"py": {"level": 3}}', encoding="utf-8")
    with pytest.raises(StorageError):
        asyncio.run(JsonFileStorage(path, Skill).get_all())


def test_file_state_storage(tmp_path) -> None:
    storage = FileStateStorage(tmp_path / "state")

    assert storage.get_item("app") is None
    storage.set_item("app", '{"state": {}}')
    assert storage.get_item("app") == '{"state": {}}'
    storage.remove_item("app")
    storage.remove_item("app")
    assert storage.get_item("app") is None
