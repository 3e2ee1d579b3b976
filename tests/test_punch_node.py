import pytest
from datetime import datetime, time

from graph.nodes.punch_node import adjust_node, punch_node
from services.memory_storage import MemoryStorage
from services.persistence_gateway import PersistenceGateway, UserIdentity
from services.punch_ledger import PunchType, WorkLocation

USER = UserIdentity(name="Ana", email="a@x.com")


def _make_state(**overrides):
    base = {
        "action": "punch",
        "user": USER,
        "now": datetime(2025, 6, 10, 8, 0),
        "today": "2025-06-10",
        "location": "on_site",
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
    base.update(overrides)
    return base


@pytest.mark.asyncio
async def test_punch_records_next_type():
    """打刻が台帳に保存されること"""
    gateway = PersistenceGateway(MemoryStorage())

    result = await punch_node(_make_state(), gateway=gateway)

    assert result["action_taken"] == "punched"
    assert result["punch"].type == PunchType.CLOCK_IN
    assert result["punch"].time_display == "08:00"
    assert await gateway.get_records("a@x.com") == result["records"]


@pytest.mark.asyncio
async def test_punch_with_explicit_time():
    gateway = PersistenceGateway(MemoryStorage())
    result = await punch_node(
        _make_state(explicit_time="07:55", location="field"), gateway=gateway
    )
    assert result["punch"].time_of_day == time(7, 55)
    assert result["punch"].location == WorkLocation.FIELD


@pytest.mark.asyncio
async def test_punch_day_complete():
    """5回目はエラー状態を返し、保存内容は変わらないこと"""
    gateway = PersistenceGateway(MemoryStorage())
    for hour in (8, 12, 13, 17):
        await punch_node(_make_state(now=datetime(2025, 6, 10, hour, 0)), gateway=gateway)

    result = await punch_node(_make_state(now=datetime(2025, 6, 10, 18, 0)), gateway=gateway)

    assert result["action_taken"] == "error"
    assert result["error_kind"] == "day_complete"
    assert "4回" in result["error_message"]
    assert len(await gateway.get_records("a@x.com")) == 4


@pytest.mark.asyncio
async def test_punch_invalid_time():
    gateway = PersistenceGateway(MemoryStorage())
    result = await punch_node(_make_state(explicit_time="8h"), gateway=gateway)
    assert result["action_taken"] == "error"
    assert result["error_kind"] == "invalid_time"
    assert await gateway.get_records("a@x.com") == []


@pytest.mark.asyncio
async def test_adjust_existing_punch():
    """既存の打刻の時刻と場所を修正すること"""
    gateway = PersistenceGateway(MemoryStorage())
    await punch_node(_make_state(), gateway=gateway)

    result = await adjust_node(
        _make_state(
            action="adjust", punch_type="clock_in", location="field", explicit_time="07:45"
        ),
        gateway=gateway,
    )

    assert result["action_taken"] == "adjusted"
    assert result["punch"].time_display == "07:45"
    records = await gateway.get_records("a@x.com")
    assert len(records) == 1
    assert records[0].location == WorkLocation.FIELD


@pytest.mark.asyncio
async def test_adjust_missing_selection():
    """種別未選択は何も保存しないこと"""
    gateway = PersistenceGateway(MemoryStorage())
    result = await adjust_node(
        _make_state(action="adjust", punch_type=None, explicit_time="08:00"),
        gateway=gateway,
    )
    assert result["action_taken"] == "error"
    assert result["error_kind"] == "missing_selection"
    assert await gateway.get_records("a@x.com") == []


@pytest.mark.asyncio
async def test_adjust_requires_time():
    gateway = PersistenceGateway(MemoryStorage())
    result = await adjust_node(
        _make_state(action="adjust", punch_type="clock_in", explicit_time=None),
        gateway=gateway,
    )
    assert result["error_kind"] == "invalid_time"


@pytest.mark.asyncio
async def test_adjust_out_of_order():
    gateway = PersistenceGateway(MemoryStorage())
    result = await adjust_node(
        _make_state(action="adjust", punch_type="clock_out", explicit_time="17:00"),
        gateway=gateway,
    )
    assert result["action_taken"] == "error"
    assert result["error_kind"] == "slot_out_of_order"


@pytest.mark.asyncio
async def test_adjust_missing_selection_takes_precedence_over_time():
    """種別も時刻もない場合は種別未選択を優先して返すこと"""
    gateway = PersistenceGateway(MemoryStorage())
    result = await adjust_node(
        _make_state(action="adjust", punch_type=None, explicit_time=None),
        gateway=gateway,
    )
    assert result["error_kind"] == "missing_selection"
