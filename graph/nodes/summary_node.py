# graph/nodes/summary_node.py
import logging
from dataclasses import replace
from datetime import date

from graph.state import TimebankState
from services.accounting import STANDARD_WORKDAY_MINUTES, fold_day, summarize_day
from services.persistence_gateway import PersistenceGateway

logger = logging.getLogger(__name__)


async def summary_node(
    state: TimebankState,
    gateway: PersistenceGateway = None,
    standard_minutes: int = STANDARD_WORKDAY_MINUTES,
) -> dict:
    """本日の集計を再計算し、4回打刻済みで未締めならタイムバンクへ繰り入れるノード"""
    email = state["user"].email
    today = date.fromisoformat(state["today"])

    async with gateway.user_lock(email):
        records, bank, closed_days = await gateway.get_user_data(email)

        summary = summarize_day(
            records,
            today,
            is_holiday=state["is_holiday"],
            is_bridge=state["is_bridge"],
            standard_minutes=standard_minutes,
        )
        bank, closed_days, folded = fold_day(summary, bank, closed_days)
        if folded:
            await gateway.save_user_data(email, bank=bank, closed_days=closed_days)
            logger.info(
                "closed %s for %s: delta=%d bank=%d",
                summary.date_key, email, summary.bank_delta_minutes, bank,
            )

    result = {
        "records": records,
        "bank_minutes": bank,
        "summary": replace(
            summary,
            closed=summary.date_key in closed_days,
            folded_delta_minutes=closed_days.get(summary.date_key),
        ),
        "folded": folded,
    }
    if state["action"] == "load":
        result["action_taken"] = "loaded"
    return result
