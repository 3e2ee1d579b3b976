# services/holiday_calendar.py
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

import jpholiday

from services.time_utils import parse_iso_date

FRIDAY = 4
MONDAY = 0


@dataclass(frozen=True)
class DayClassification:
    is_holiday: bool
    is_bridge: bool
    reason: str


class HolidayCalendar:
    """固定の祝日セットによる祝日・ブリッジ判定サービス

    祝日セットは設定データとして与える。年が変わったらセットを差し替える。
    """

    def __init__(self, holidays: Iterable = None):
        self._holidays: dict[date, str] = {}
        self._cache: dict[date, DayClassification] = {}
        for entry in holidays or []:
            self.add(entry)

    def add(self, entry, name: str = "") -> None:
        """祝日を追加する。entryは日付・ISO文字列・{date, name}のいずれか"""
        if isinstance(entry, dict):
            name = entry.get("name", name)
            entry = entry["date"]
        self._holidays[parse_iso_date(entry)] = name or "祝日"
        self._cache.clear()

    @property
    def holidays(self) -> dict[date, str]:
        return dict(self._holidays)

    def is_holiday(self, target_date: date) -> bool:
        return target_date in self._holidays

    def holiday_name(self, target_date: date) -> str:
        return self._holidays.get(target_date, "")

    def is_bridge_day(self, target_date: date) -> bool:
        """金曜で前日が祝日、または月曜で翌日が祝日の場合のみブリッジ扱い"""
        weekday = target_date.weekday()
        if weekday == FRIDAY and self.is_holiday(target_date - timedelta(days=1)):
            return True
        if weekday == MONDAY and self.is_holiday(target_date + timedelta(days=1)):
            return True
        return False

    def classify(self, target_date: Optional[date] = None) -> DayClassification:
        """指定日の区分（祝日/ブリッジ/平日）を判定する"""
        if target_date is None:
            target_date = date.today()

        if target_date in self._cache:
            return self._cache[target_date]

        if self.is_holiday(target_date):
            result = DayClassification(True, False, self.holiday_name(target_date))
        elif self.is_bridge_day(target_date):
            neighbour = target_date + timedelta(days=-1 if target_date.weekday() == FRIDAY else 1)
            result = DayClassification(False, True, f"ブリッジ（{self.holiday_name(neighbour)}）")
        else:
            result = DayClassification(False, False, "")

        self._cache[target_date] = result
        return result

    @classmethod
    def from_config(cls, cal_config: dict) -> "HolidayCalendar":
        """calendar設定から祝日セットを構築する"""
        calendar = cls(cal_config.get("holidays") or [])
        if cal_config.get("source") == "jpholiday":
            years = cal_config.get("years") or [date.today().year]
            for year in years:
                for holiday_date, holiday_name in jpholiday.year_holidays(int(year)):
                    calendar.add(holiday_date, holiday_name)
        return calendar
