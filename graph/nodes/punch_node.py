# graph/nodes/punch_node.py
import logging
from datetime import date, time
from typing import Optional

from graph.state import TimebankState
from services import punch_ledger
from services.errors import InvalidTime, MissingSelection, TimebankError
from services.persistence_gateway import PersistenceGateway
from services.time_utils import parse_hm

logger = logging.getLogger(__name__)


def _parse_time(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    try:
        return parse_hm(value)
    except ValueError as e:
        raise InvalidTime() from e


def _error(e: TimebankError) -> dict:
    return {"action_taken": "error", "error_kind": e.kind, "error_message": str(e)}


async def punch_node(state: TimebankState, gateway: PersistenceGateway = None) -> dict:
    """本日の次の打刻を台帳に追加するノード"""
    email = state["user"].email

    async with gateway.user_lock(email):
        records = await gateway.get_records(email)
        try:
            records = punch_ledger.append(
                records,
                state["location"],
                state["now"],
                time_of_day=_parse_time(state["explicit_time"]),
            )
        except TimebankError as e:
            logger.info("punch rejected for %s: %s", email, e.kind)
            return {"records": records, **_error(e)}
        await gateway.save_user_data(email, records=records)

    punch = records[-1]
    logger.info("recorded %s at %s for %s", punch.type.value, punch.time_display, email)
    return {"records": records, "punch": punch, "action_taken": "punched"}


async def adjust_node(state: TimebankState, gateway: PersistenceGateway = None) -> dict:
    """本日の打刻を修正（または次の枠を補完）するノード"""
    email = state["user"].email
    today = date.fromisoformat(state["today"])

    async with gateway.user_lock(email):
        records = await gateway.get_records(email)
        try:
            if not state["punch_type"]:
                raise MissingSelection()
            time_of_day = _parse_time(state["explicit_time"])
            if time_of_day is None:
                raise InvalidTime("修正後の時刻を指定してください")
            records = punch_ledger.upsert_for_adjustment(
                records,
                today,
                state["punch_type"],
                state["location"],
                time_of_day,
                state["now"],
            )
        except TimebankError as e:
            logger.info("adjustment rejected for %s: %s", email, e.kind)
            return {"records": records, **_error(e)}
        await gateway.save_user_data(email, records=records)

    punch_type = punch_ledger.PunchType(state["punch_type"])
    punch = next(p for p in records if p.day == today and p.type == punch_type)
    logger.info("adjusted %s to %s for %s", punch.type.value, punch.time_display, email)
    return {"records": records, "punch": punch, "action_taken": "adjusted"}
