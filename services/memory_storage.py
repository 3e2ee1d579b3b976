from typing import Iterable, Optional

from services.storage_interface import StorageInterface


class MemoryStorage(StorageInterface):
    """プロセス内のみのストレージ（テスト・お試し実行用）"""

    def __init__(self, initial: dict[str, str] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    async def multi_get(self, keys: Iterable[str]) -> dict[str, Optional[str]]:
        return {key: self._data.get(key) for key in keys}

    async def multi_set(self, pairs: Iterable[tuple[str, str]]) -> None:
        self._data.update(dict(pairs))

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)
