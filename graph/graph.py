# graph/graph.py
from langgraph.graph import StateGraph, END
from graph.state import TimebankState
from services.accounting import STANDARD_WORKDAY_MINUTES


def route_after_session_check(state: TimebankState) -> str:
    if state["user"] is None:
        return "end"
    return "calendar_check"


def route_after_calendar_check(state: TimebankState) -> str:
    action = state["action"]
    if action == "punch":
        return "record_punch"
    if action == "adjust":
        return "adjust_punch"
    return "summarize"


def route_after_record(state: TimebankState) -> str:
    if state["action_taken"] == "error":
        return "notify"
    return "summarize"


def build_graph(
    gateway=None,
    calendar=None,
    notifier=None,
    config=None,
):
    """LangGraphのグラフを構築して返す

    各ノード関数はサービス依存を持つため、functools.partialでラップして
    LangGraphが期待する (state) -> dict シグネチャに合わせる。
    """
    from functools import partial
    from graph.nodes.session_check_node import session_check_node
    from graph.nodes.calendar_check_node import calendar_check_node
    from graph.nodes.punch_node import punch_node, adjust_node
    from graph.nodes.summary_node import summary_node
    from graph.nodes.notify_node import notify_node

    if config is None:
        config = {"accounting": {"standard_workday_minutes": STANDARD_WORKDAY_MINUTES}}
    standard_minutes = int(config["accounting"]["standard_workday_minutes"])

    # ノード関数をLangGraph互換の (state) -> dict にラップ
    calendar_check_wrapped = partial(calendar_check_node, calendar=calendar)
    punch_wrapped = partial(punch_node, gateway=gateway)
    adjust_wrapped = partial(adjust_node, gateway=gateway)
    summary_wrapped = partial(
        summary_node, gateway=gateway, standard_minutes=standard_minutes
    )
    notify_wrapped = partial(notify_node, notifier=notifier)

    workflow = StateGraph(TimebankState)

    workflow.add_node("session_check", session_check_node)
    workflow.add_node("calendar_check", calendar_check_wrapped)
    workflow.add_node("record_punch", punch_wrapped)
    workflow.add_node("adjust_punch", adjust_wrapped)
    workflow.add_node("summarize", summary_wrapped)
    workflow.add_node("notify", notify_wrapped)

    workflow.set_entry_point("session_check")

    workflow.add_conditional_edges(
        "session_check",
        route_after_session_check,
        {"calendar_check": "calendar_check", "end": END},
    )
    workflow.add_conditional_edges(
        "calendar_check",
        route_after_calendar_check,
        {
            "record_punch": "record_punch",
            "adjust_punch": "adjust_punch",
            "summarize": "summarize",
        },
    )
    workflow.add_conditional_edges(
        "record_punch",
        route_after_record,
        {"notify": "notify", "summarize": "summarize"},
    )
    workflow.add_conditional_edges(
        "adjust_punch",
        route_after_record,
        {"notify": "notify", "summarize": "summarize"},
    )

    workflow.add_edge("summarize", "notify")
    workflow.add_edge("notify", END)

    return workflow.compile()
