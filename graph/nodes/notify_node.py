from graph.state import TimebankState
from services.time_utils import format_minutes, format_signed


MESSAGES = {
    "punched": "✅ {label}を記録しました（{time}・{location}）",
    "adjusted": "✏️ {label}を{time}に修正しました（{location}）",
    "closed": "📒 本日の勤務を締めました（実働 {worked}／差分 {delta}／残高 {bank}）",
}


def notify_node(state: TimebankState, notifier=None) -> dict:
    """操作結果をユーザーに通知するノード"""
    action = state["action_taken"]

    if action == "error":
        # 業務エラーは致命的ではないのでお知らせとして扱う
        notifier.send(state["error_message"])
        return {}

    if action in ("punched", "adjusted"):
        punch = state["punch"]
        notifier.send(
            MESSAGES[action].format(
                label=punch.type.label,
                time=punch.time_display,
                location=punch.location.label,
            )
        )

    if state["folded"]:
        summary = state["summary"]
        notifier.send(
            MESSAGES["closed"].format(
                worked=format_minutes(summary.worked_minutes),
                delta=format_signed(summary.bank_delta_minutes),
                bank=format_signed(state["bank_minutes"]),
            )
        )

    return {}
