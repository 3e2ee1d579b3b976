# graph/nodes/session_check_node.py
from graph.state import TimebankState
from services.errors import NoActiveUser


def session_check_node(state: TimebankState) -> dict:
    """操作対象のユーザーがいるかを確認するノード。いなければ何もせず終了させる"""
    if state["user"] is None:
        return {
            "action_taken": "skipped",
            "error_kind": NoActiveUser.kind,
            "error_message": str(NoActiveUser()),
        }
    return {"error_kind": None, "error_message": None}
