from datetime import date, time

from services.accounting import (
    DailySummary,
    daily_delta,
    fold_day,
    summarize_day,
    worked_minutes,
)
from services.punch_ledger import Punch, PunchType, WorkLocation

DAY = date(2025, 6, 10)


def _punches(*times, day=DAY):
    """種別順に打刻を作る。Noneの枠は作らない"""
    order = [PunchType.CLOCK_IN, PunchType.LUNCH_OUT, PunchType.LUNCH_IN, PunchType.CLOCK_OUT]
    result = []
    for i, (punch_type, hm) in enumerate(zip(order, times)):
        if hm is None:
            continue
        h, m = map(int, hm.split(":"))
        result.append(Punch(i + 1, punch_type, WorkLocation.ON_SITE, time(h, m), day))
    return result


def test_worked_minutes_full_day():
    """4回打刻の実働は午前と午後の区間の合計"""
    assert worked_minutes(_punches("08:00", "12:00", "13:00", "17:00")) == 480
    assert worked_minutes(_punches("08:10", "12:05", "13:02", "18:33")) == 235 + 331


def test_worked_minutes_missing_endpoint_contributes_zero():
    """片端が欠けた区間は0分"""
    assert worked_minutes(_punches("08:00", "12:00", "13:00")) == 240
    assert worked_minutes(_punches("08:00", None, "13:00", "17:00")) == 240
    assert worked_minutes(_punches("08:00")) == 0
    assert worked_minutes([]) == 0


def test_worked_minutes_misordered_pair_clamped():
    """区間の時刻が逆転していてもその区間は0分"""
    assert worked_minutes(_punches("12:00", "08:00", "13:00", "17:00")) == 240


def test_worked_minutes_ignores_ledger_order():
    """台帳上の順序ではなく種別で区間を組むこと"""
    punches = _punches("08:00", "12:00", "13:00", "17:00")
    assert worked_minutes(list(reversed(punches))) == 480


def test_daily_delta_standard_day():
    assert daily_delta(480, holiday=False, bridge=False) == 0
    assert daily_delta(420, holiday=False, bridge=False) == -60
    assert daily_delta(500, holiday=False, bridge=False) == 20


def test_daily_delta_holiday_and_bridge_count_every_minute():
    """祝日・ブリッジは所定時間を差し引かない"""
    assert daily_delta(120, holiday=True, bridge=False) == 120
    assert daily_delta(120, holiday=False, bridge=True) == 120
    assert daily_delta(0, holiday=True, bridge=False) == 0


def test_daily_delta_custom_standard():
    assert daily_delta(360, holiday=False, bridge=False, standard_minutes=360) == 0


def test_summarize_day_filters_by_date():
    """他の日の打刻は集計に含めないこと"""
    ledger = _punches("08:00", "12:00", "13:00", "17:00", day=date(2025, 6, 9))
    ledger += _punches("09:00", "12:00")
    summary = summarize_day(ledger, DAY, is_holiday=False, is_bridge=False)
    assert summary.worked_minutes == 180
    assert summary.bank_delta_minutes == -300
    assert summary.punch_count == 2
    assert summary.is_complete is False
    assert summary.day_kind == "workday"


def test_summary_day_kind():
    base = dict(day=DAY, worked_minutes=0, bank_delta_minutes=0, punch_count=0)
    assert DailySummary(is_holiday=True, is_bridge=False, **base).day_kind == "holiday"
    assert DailySummary(is_holiday=False, is_bridge=True, **base).day_kind == "bridge"
    assert DailySummary(is_holiday=False, is_bridge=False, **base).date_key == "2025-06-10"


def test_fold_complete_day():
    """4回打刻済みの日は差分が残高に加算され、締め済みになること"""
    summary = summarize_day(
        _punches("08:00", "12:00", "13:00", "18:00"), DAY, is_holiday=False, is_bridge=False
    )
    bank, closed, folded = fold_day(summary, 30, {})
    assert folded is True
    assert bank == 90
    assert closed == {"2025-06-10": 60}


def test_fold_is_noop_for_closed_day():
    """締め済みの日は何度再計算しても一度しか加算されないこと"""
    summary = summarize_day(
        _punches("08:00", "12:00", "13:00", "18:00"), DAY, is_holiday=False, is_bridge=False
    )
    bank, closed, _ = fold_day(summary, 0, {})
    bank, closed, folded = fold_day(summary, bank, closed)
    assert folded is False
    assert bank == 60


def test_fold_requires_four_punches():
    """打刻が4回に満たない日は繰り入れないこと"""
    summary = summarize_day(_punches("09:00", "11:00"), DAY, is_holiday=True, is_bridge=False)
    assert summary.bank_delta_minutes == 120
    bank, closed, folded = fold_day(summary, 0, {})
    assert (bank, closed, folded) == (0, {}, False)


def test_summary_is_stale_after_change():
    """繰り入れ済みの差分と現在の差分が違えば食い違いとして扱うこと"""
    base = dict(day=DAY, worked_minutes=540, is_holiday=False, is_bridge=False, punch_count=4)
    assert not DailySummary(bank_delta_minutes=60, **base).is_stale
    assert not DailySummary(bank_delta_minutes=60, closed=True, folded_delta_minutes=60, **base).is_stale
    assert DailySummary(bank_delta_minutes=120, closed=True, folded_delta_minutes=60, **base).is_stale
