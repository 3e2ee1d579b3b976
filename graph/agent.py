# graph/agent.py
import logging
from datetime import datetime
from typing import Optional

from graph.graph import build_graph
from graph.state import TimebankState
from services.errors import MissingField, StorageError
from services.persistence_gateway import PersistenceGateway, UserIdentity
from services.punch_ledger import PunchType, WorkLocation
from services.time_utils import _now, to_iso_date

logger = logging.getLogger(__name__)


class TimebankAgent:
    """UIからの操作（登録・打刻・修正・読み込み）を受け付ける窓口

    ユーザーは各操作に明示的に渡す。グローバルなセッション状態は持たない。
    """

    def __init__(self, gateway: PersistenceGateway, calendar, notifier, config: dict = None):
        self._gateway = gateway
        self._notifier = notifier
        self._graph = build_graph(
            gateway=gateway, calendar=calendar, notifier=notifier, config=config
        )

    async def register(self, name: str, email: str) -> UserIdentity:
        """ユーザーを登録（上書き）する。台帳とタイムバンクには触れない"""
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email:
            raise MissingField()
        user = UserIdentity(name=name, email=email)
        await self._gateway.set_user(user)
        logger.info("registered %s", email)
        return user

    async def logout(self) -> None:
        """ユーザー情報だけを消す。同じメールで再ログインすれば記録は引き継がれる"""
        await self._gateway.clear_user()

    async def current_user(self) -> Optional[UserIdentity]:
        return await self._gateway.get_user()

    async def load(
        self, user: Optional[UserIdentity] = None, *, now: Optional[datetime] = None
    ) -> TimebankState:
        """ユーザー・台帳・残高を読み込み、本日の集計を再計算する"""
        if user is None:
            try:
                user = await self._gateway.get_user()
            except StorageError as e:
                return self._storage_failure(self._initial_state("load", None, now), e)
        return await self._run(self._initial_state("load", user, now))

    async def punch(
        self,
        user: Optional[UserIdentity],
        location: str,
        explicit_time: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> TimebankState:
        """本日の次の打刻を記録する"""
        state = self._initial_state("punch", user, now)
        state["location"] = WorkLocation(location).value
        state["explicit_time"] = explicit_time
        return await self._run(state)

    async def adjust(
        self,
        user: Optional[UserIdentity],
        punch_type: Optional[str],
        location: str,
        time: Optional[str],
        *,
        now: Optional[datetime] = None,
    ) -> TimebankState:
        """本日の指定した打刻を修正（または次の枠を補完）する"""
        state = self._initial_state("adjust", user, now)
        state["punch_type"] = PunchType(punch_type).value if punch_type else None
        state["location"] = WorkLocation(location).value
        state["explicit_time"] = time
        return await self._run(state)

    def _initial_state(
        self, action: str, user: Optional[UserIdentity], now: Optional[datetime]
    ) -> TimebankState:
        now = now or _now()
        return {
            "action": action,
            "user": user,
            "now": now,
            "today": to_iso_date(now.date()),
            "location": None,
            "punch_type": None,
            "explicit_time": None,
            "is_holiday": False,
            "is_bridge": False,
            "holiday_reason": None,
            "records": [],
            "punch": None,
            "bank_minutes": 0,
            "summary": None,
            "folded": False,
            "action_taken": None,
            "error_kind": None,
            "error_message": None,
        }

    async def _run(self, state: TimebankState) -> TimebankState:
        try:
            return await self._graph.ainvoke(state)
        except StorageError as e:
            return self._storage_failure(state, e)

    def _storage_failure(self, state: TimebankState, e: StorageError) -> TimebankState:
        logger.error("storage failure during %s: %s", state["action"], e)
        self._notifier.send_error(str(e))
        return {
            **state,
            "action_taken": "error",
            "error_kind": e.kind,
            "error_message": str(e),
        }
