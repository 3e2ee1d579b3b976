# services/persistence_gateway.py
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from services.errors import StorageError
from services.punch_ledger import Punch
from services.storage_interface import StorageInterface

logger = logging.getLogger(__name__)

USER_KEY = "user"
RECORDS_KEY = "usersRecords"
BANK_KEY = "usersTimeBank"
CLOSED_DAYS_KEY = "usersClosedDays"


def _to_records(raw: list) -> list[Punch]:
    return [Punch.from_dict(entry) for entry in raw]


def _to_closed_days(raw: dict) -> dict[str, int]:
    return {day: int(delta) for day, delta in raw.items()}


@dataclass(frozen=True)
class UserIdentity:
    name: str
    email: str

    def to_dict(self) -> dict:
        return {"name": self.name, "email": self.email}

    @classmethod
    def from_dict(cls, raw: dict) -> "UserIdentity":
        return cls(name=raw.get("name", ""), email=raw["email"])


class PersistenceGateway:
    """ユーザー・打刻台帳・タイムバンク・締め済み日の各ドキュメントを読み書きする

    各ドキュメントはメールアドレスをキーとするマッピングで、丸ごと読み書きする。
    論理操作ごとの読み込み→変更→保存は user_lock(email) の中で行うこと。
    """

    def __init__(self, storage: StorageInterface):
        self._storage = storage
        self._user_locks: dict[str, asyncio.Lock] = {}
        self._document_lock = asyncio.Lock()

    def user_lock(self, email: str) -> asyncio.Lock:
        """ユーザー単位の排他ロック"""
        lock = self._user_locks.get(email)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[email] = lock
        return lock

    @staticmethod
    def _decode(key: str, raw: Optional[str], default: Any) -> Any:
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"ドキュメント {key} を解析できません") from e

    @classmethod
    def _as_document(cls, key: str, raw: Optional[str]) -> dict:
        document = cls._decode(key, raw, {})
        if not isinstance(document, dict):
            raise StorageError(f"ドキュメント {key} の形式が不正です")
        return document

    async def _load_document(self, key: str) -> dict:
        return self._as_document(key, await self._storage.get_item(key))

    @staticmethod
    def _entry(key: str, document: dict, email: str, convert, default):
        """ドキュメント内のユーザー分を型変換する。壊れていればStorageError"""
        try:
            return convert(document.get(email, default))
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise StorageError(f"ドキュメント {key} の {email} の値が不正です") from e

    # --- ユーザー ---

    async def get_user(self) -> Optional[UserIdentity]:
        raw = await self._storage.get_item(USER_KEY)
        data = self._decode(USER_KEY, raw, None)
        if not isinstance(data, dict) or not data.get("email"):
            return None
        return UserIdentity.from_dict(data)

    async def set_user(self, user: UserIdentity) -> None:
        await self._storage.set_item(USER_KEY, json.dumps(user.to_dict(), ensure_ascii=False))

    async def clear_user(self) -> None:
        await self._storage.remove_item(USER_KEY)

    # --- ユーザー別データ ---

    async def get_records(self, email: str) -> list[Punch]:
        document = await self._load_document(RECORDS_KEY)
        return self._entry(RECORDS_KEY, document, email, _to_records, [])

    async def get_bank(self, email: str) -> int:
        document = await self._load_document(BANK_KEY)
        return self._entry(BANK_KEY, document, email, int, 0)

    async def get_closed_days(self, email: str) -> dict[str, int]:
        document = await self._load_document(CLOSED_DAYS_KEY)
        return self._entry(CLOSED_DAYS_KEY, document, email, _to_closed_days, {})

    async def get_user_data(self, email: str) -> tuple[list[Punch], int, dict[str, int]]:
        """台帳・残高・締め済み日を1回の読み込みでまとめて取得する"""
        raw = await self._storage.multi_get([RECORDS_KEY, BANK_KEY, CLOSED_DAYS_KEY])
        records = self._as_document(RECORDS_KEY, raw.get(RECORDS_KEY))
        bank = self._as_document(BANK_KEY, raw.get(BANK_KEY))
        closed_days = self._as_document(CLOSED_DAYS_KEY, raw.get(CLOSED_DAYS_KEY))
        return (
            self._entry(RECORDS_KEY, records, email, _to_records, []),
            self._entry(BANK_KEY, bank, email, int, 0),
            self._entry(CLOSED_DAYS_KEY, closed_days, email, _to_closed_days, {}),
        )

    async def save_user_data(
        self,
        email: str,
        records: Optional[Sequence[Punch]] = None,
        bank: Optional[int] = None,
        closed_days: Optional[dict[str, int]] = None,
    ) -> None:
        """指定された項目だけを1回の書き込みでまとめて保存する"""
        updates = {}
        if records is not None:
            updates[RECORDS_KEY] = [p.to_dict() for p in records]
        if bank is not None:
            updates[BANK_KEY] = int(bank)
        if closed_days is not None:
            updates[CLOSED_DAYS_KEY] = dict(closed_days)
        if not updates:
            return

        async with self._document_lock:
            pairs = []
            for key, value in updates.items():
                document = await self._load_document(key)
                document[email] = value
                pairs.append((key, json.dumps(document, ensure_ascii=False)))
            await self._storage.multi_set(pairs)

        logger.info("saved %s for %s", ", ".join(updates), email)
