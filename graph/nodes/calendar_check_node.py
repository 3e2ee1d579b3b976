# graph/nodes/calendar_check_node.py
from datetime import date
from graph.state import TimebankState


def calendar_check_node(
    state: TimebankState,
    calendar=None,
) -> dict:
    """今日が祝日・ブリッジ日かをカレンダーで確認するノード"""
    today = date.fromisoformat(state["today"])
    day = calendar.classify(today)

    return {
        "is_holiday": day.is_holiday,
        "is_bridge": day.is_bridge,
        "holiday_reason": day.reason or None,
    }
