# services/json_file_storage.py
import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional

from services.errors import StorageError
from services.storage_interface import StorageInterface

logger = logging.getLogger(__name__)


class JsonFileStorage(StorageInterface):
    """1つのJSONファイルに全キーを保存するストレージ

    書き込みは一時ファイル経由でos.replaceするため、失敗しても既存ファイルは壊れない。
    """

    def __init__(self, path: str):
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"ストレージを読み込めません: {self._path} ({e})") from e
        if not isinstance(data, dict):
            raise StorageError(f"ストレージの形式が不正です: {self._path}")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        tmp_path = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"ストレージに書き込めません: {self._path} ({e})") from e

    def _update(self, changes: dict[str, Optional[str]]) -> None:
        """Noneはキー削除として扱う"""
        data = self._read_all()
        for key, value in changes.items():
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
        self._write_all(data)

    async def get_item(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._read_all)
        return data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        await self.multi_set([(key, value)])

    async def remove_item(self, key: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._update, {key: None})

    async def multi_get(self, keys: Iterable[str]) -> dict[str, Optional[str]]:
        data = await asyncio.to_thread(self._read_all)
        return {key: data.get(key) for key in keys}

    async def multi_set(self, pairs: Iterable[tuple[str, str]]) -> None:
        changes = dict(pairs)
        async with self._lock:
            await asyncio.to_thread(self._update, changes)
        logger.debug("saved keys=%s to %s", sorted(changes), self._path)
