# tests/test_holiday_calendar.py
from datetime import date

from services.config_loader import DEFAULT_CONFIG
from services.holiday_calendar import HolidayCalendar


def _default_calendar():
    return HolidayCalendar.from_config(DEFAULT_CONFIG["calendar"])


def test_fixed_holiday():
    """設定した祝日が祝日判定されること"""
    calendar = _default_calendar()
    assert calendar.is_holiday(date(2025, 4, 21)) is True
    assert calendar.holiday_name(date(2025, 4, 21)) == "Tiradentes"


def test_workday_is_not_holiday():
    """祝日セットにない日は祝日でないこと"""
    calendar = _default_calendar()
    # 2025-06-10は火曜日
    assert calendar.is_holiday(date(2025, 6, 10)) is False
    assert calendar.holiday_name(date(2025, 6, 10)) == ""


def test_weekend_is_not_holiday_by_itself():
    """土日であっても祝日セットになければ祝日扱いしないこと"""
    calendar = _default_calendar()
    # 2025-06-14は土曜日
    assert calendar.is_holiday(date(2025, 6, 14)) is False


def test_friday_after_thursday_holiday_is_bridge():
    """木曜の祝日の翌金曜はブリッジ"""
    calendar = _default_calendar()
    # 2025-05-01(木) Dia do Trabalho
    assert calendar.is_bridge_day(date(2025, 5, 2)) is True


def test_monday_before_tuesday_holiday_is_bridge():
    """火曜の祝日の前の月曜はブリッジ"""
    calendar = HolidayCalendar(["2025-03-04"])
    assert calendar.is_bridge_day(date(2025, 3, 3)) is True


def test_wednesday_before_thursday_holiday_is_not_bridge():
    """水曜はどの祝日に隣接していてもブリッジにならないこと"""
    calendar = _default_calendar()
    assert calendar.is_bridge_day(date(2025, 4, 30)) is False


def test_only_friday_and_monday_can_be_bridge():
    """金曜の翌日や月曜の前日が祝日でもブリッジにならないこと"""
    # 2025-11-15(土)が祝日でも前日の金曜はブリッジではない
    calendar = _default_calendar()
    assert calendar.is_bridge_day(date(2025, 11, 14)) is False
    # 2025-11-02(日)が祝日でも翌月曜はブリッジではない
    assert calendar.is_bridge_day(date(2025, 11, 3)) is False


def test_classify():
    """区分と理由が返ること"""
    calendar = _default_calendar()

    holiday = calendar.classify(date(2025, 12, 25))
    assert holiday.is_holiday is True
    assert holiday.is_bridge is False
    assert holiday.reason == "Natal"

    bridge = calendar.classify(date(2025, 12, 26))
    assert bridge.is_holiday is False
    assert bridge.is_bridge is True
    assert "Natal" in bridge.reason

    workday = calendar.classify(date(2025, 6, 10))
    assert (workday.is_holiday, workday.is_bridge, workday.reason) == (False, False, "")


def test_cache_invalidated_when_set_replaced():
    """祝日を追加したらキャッシュが破棄されること"""
    calendar = HolidayCalendar()
    d = date(2025, 6, 10)
    assert calendar.classify(d).is_holiday is False
    calendar.add("2025-06-10", "臨時休業")
    assert calendar.classify(d).is_holiday is True


def test_holiday_entries_accept_dates_and_strings():
    """ISO文字列・date・{date, name}のいずれでも登録できること"""
    calendar = HolidayCalendar([
        "2025-01-01",
        date(2025, 2, 1),
        {"date": date(2025, 3, 1), "name": "創立記念日"},
    ])
    assert set(calendar.holidays) == {date(2025, 1, 1), date(2025, 2, 1), date(2025, 3, 1)}
    assert calendar.holiday_name(date(2025, 3, 1)) == "創立記念日"


def test_jpholiday_source():
    """jpholidayで指定年の祝日を取り込めること"""
    calendar = HolidayCalendar.from_config(
        {"source": "jpholiday", "years": [2026], "holidays": []}
    )
    # 2026-01-01は元日
    assert calendar.is_holiday(date(2026, 1, 1)) is True
    assert "元日" in calendar.holiday_name(date(2026, 1, 1))
