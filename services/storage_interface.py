from abc import ABC, abstractmethod
from typing import Iterable, Optional


class StorageInterface(ABC):
    """文字列値のキー・バリューストアの抽象インターフェース"""

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """キーの値を返す（存在しなければNone）"""
        ...

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        ...

    @abstractmethod
    async def multi_get(self, keys: Iterable[str]) -> dict[str, Optional[str]]:
        ...

    @abstractmethod
    async def multi_set(self, pairs: Iterable[tuple[str, str]]) -> None:
        """複数キーをまとめて書き込む（全件反映か、全件未反映のどちらか）"""
        ...
