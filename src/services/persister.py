"""
JSON Persister

Async key/value persistence: each key is one JSON file under the storage
directory (e.g. .storage/webserver-api-keys.json).
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

import aiofiles

from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SYSTEM)


class JsonPersister:
    """
    Loads and saves JSON documents by key

    Example:
        persister = JsonPersister(".storage")
        users = await persister.load("webserver-api-keys.json", default=[])
        await persister.save("webserver-api-keys.json", users)
    """

    def __init__(self, storage_dir: Union[str, Path] = ".storage"):
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.storage_dir / key

    async def load(self, key: str, default: Optional[Any] = None) -> Any:
        """
        Load a document; `default` when the file does not exist yet

        Raises:
            ValueError: file exists but is not valid JSON
        """
        path = self.path_for(key)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            return default

        if not content.strip():
            return default

        try:
            return json.loads(content)
        except json.JSONDecodeError as ex:
            log.error(f"Corrupt storage file {path}", error=str(ex))
            raise ValueError(f"Storage file {path} is not valid JSON") from ex

    async def save(self, key: str, value: Any) -> None:
        """Write a document, indented for human readability"""
        path = self.path_for(key)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(value, indent=2))
        log.debug(f"Saved {key}", path=str(path))
