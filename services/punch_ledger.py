# services/punch_ledger.py
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Optional, Sequence

from services.errors import DayComplete, MissingSelection, SlotOutOfOrder
from services.time_utils import (
    format_hm,
    parse_hm,
    parse_iso_date,
    to_iso_date,
    to_local_date,
    truncate_to_minute,
)


class PunchType(str, Enum):
    CLOCK_IN = "clock_in"
    LUNCH_OUT = "lunch_out"
    LUNCH_IN = "lunch_in"
    CLOCK_OUT = "clock_out"

    @property
    def label(self) -> str:
        return PUNCH_LABELS[self]


class WorkLocation(str, Enum):
    ON_SITE = "on_site"
    FIELD = "field"

    @property
    def label(self) -> str:
        return LOCATION_LABELS[self]


PUNCH_SEQUENCE = (
    PunchType.CLOCK_IN,
    PunchType.LUNCH_OUT,
    PunchType.LUNCH_IN,
    PunchType.CLOCK_OUT,
)
PUNCHES_PER_DAY = len(PUNCH_SEQUENCE)

PUNCH_LABELS = {
    PunchType.CLOCK_IN: "出勤",
    PunchType.LUNCH_OUT: "昼休憩開始",
    PunchType.LUNCH_IN: "昼休憩終了",
    PunchType.CLOCK_OUT: "退勤",
}
LOCATION_LABELS = {
    WorkLocation.ON_SITE: "出社",
    WorkLocation.FIELD: "外勤",
}


@dataclass(frozen=True)
class Punch:
    """1回分の打刻。日付は1つの値で持ち、表示用文字列は都度導出する"""

    id: int
    type: PunchType
    location: WorkLocation
    time_of_day: time
    day: date

    @property
    def time_display(self) -> str:
        return format_hm(self.time_of_day)

    @property
    def date_display(self) -> str:
        return to_local_date(self.day)

    @property
    def date_key(self) -> str:
        return to_iso_date(self.day)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "location": self.location.value,
            "timeDisplay": self.time_display,
            "dateDisplay": self.date_display,
            "dateKey": self.date_key,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "Punch":
        # dateDisplayは派生値なので読み捨てる
        return cls(
            id=int(raw["id"]),
            type=PunchType(raw["type"]),
            location=WorkLocation(raw["location"]),
            time_of_day=parse_hm(raw["timeDisplay"]),
            day=parse_iso_date(raw["dateKey"]),
        )


def list_for_day(ledger: Sequence[Punch], day: date) -> list[Punch]:
    """指定日の打刻を台帳順で返す"""
    return [p for p in ledger if p.day == day]


def next_expected_type(day_punches: Sequence[Punch]) -> Optional[PunchType]:
    if len(day_punches) >= PUNCHES_PER_DAY:
        return None
    return PUNCH_SEQUENCE[len(day_punches)]


def last_punch(ledger: Sequence[Punch]) -> Optional[Punch]:
    return ledger[-1] if ledger else None


def recent_punches(ledger: Sequence[Punch], limit: int = 8) -> list[Punch]:
    """直近limit件を新しい順で返す"""
    if limit <= 0:
        return []
    return list(reversed(ledger[-limit:]))


def _next_id(ledger: Sequence[Punch], now: datetime) -> int:
    candidate = int(now.timestamp() * 1000)
    highest = max((p.id for p in ledger), default=0)
    return max(candidate, highest + 1)


def append(
    ledger: Sequence[Punch],
    location: WorkLocation,
    now: datetime,
    time_of_day: Optional[time] = None,
) -> list[Punch]:
    """本日の次の打刻を追加した新しい台帳を返す"""
    day = now.date()
    next_type = next_expected_type(list_for_day(ledger, day))
    if next_type is None:
        raise DayComplete()

    punch = Punch(
        id=_next_id(ledger, now),
        type=next_type,
        location=WorkLocation(location),
        time_of_day=time_of_day or truncate_to_minute(now),
        day=day,
    )
    return [*ledger, punch]


def upsert_for_adjustment(
    ledger: Sequence[Punch],
    day: date,
    punch_type: Optional[PunchType],
    location: WorkLocation,
    time_of_day: time,
    now: datetime,
) -> list[Punch]:
    """打刻の修正。既存の枠は位置とIDを保ったまま上書きし、
    未記録の枠は次に期待される種別の場合に限り補完する。
    """
    if not punch_type:
        raise MissingSelection()
    punch_type = PunchType(punch_type)
    location = WorkLocation(location)
    time_of_day = time_of_day.replace(second=0, microsecond=0)

    for index, punch in enumerate(ledger):
        if punch.day == day and punch.type == punch_type:
            updated = replace(punch, location=location, time_of_day=time_of_day)
            return [*ledger[:index], updated, *ledger[index + 1:]]

    expected = next_expected_type(list_for_day(ledger, day))
    if expected is None:
        raise DayComplete()
    if punch_type != expected:
        raise SlotOutOfOrder(punch_type.label, expected.label)

    punch = Punch(
        id=_next_id(ledger, now),
        type=punch_type,
        location=location,
        time_of_day=time_of_day,
        day=day,
    )
    return [*ledger, punch]
