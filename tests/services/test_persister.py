import pytest

from services.persister import JsonPersister


@pytest.mark.asyncio
async def test_missing_key_returns_default(tmp_path):
    persister = JsonPersister(tmp_path / "nested" / "storage")

    assert (tmp_path / "nested" / "storage").is_dir()
    assert await persister.load("nothing.json") is None
    assert await persister.load("nothing.json", default=[]) == []


@pytest.mark.asyncio
async def test_save_and_load(tmp_path):
    persister = JsonPersister(tmp_path)
    await persister.save("doc.json", {"users": [1, 2]})

    assert await persister.load("doc.json") == {"users": [1, 2]}
    assert persister.path_for("doc.json").read_text().startswith("{\n")


@pytest.mark.asyncio
async def test_empty_file_is_treated_as_missing(tmp_path):
    persister = JsonPersister(tmp_path)
    persister.path_for("doc.json").write_text("  \n")

    assert await persister.load("doc.json", default={}) == {}


@pytest.mark.asyncio
async def test_corrupt_file_raises(tmp_path):
    persister = JsonPersister(tmp_path)
    persister.path_for("doc.json").write_text("{not json")

    with pytest.raises(ValueError):
        await persister.load("doc.json")
