# services/accounting.py
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from services.punch_ledger import PUNCHES_PER_DAY, Punch, PunchType, list_for_day
from services.time_utils import combine, minutes_between, to_iso_date

STANDARD_WORKDAY_MINUTES = 8 * 60

# 実働として数える区間（開始, 終了）
WORK_INTERVALS = (
    (PunchType.CLOCK_IN, PunchType.LUNCH_OUT),
    (PunchType.LUNCH_IN, PunchType.CLOCK_OUT),
)

DAY_KIND_LABELS = {
    "holiday": "祝日",
    "bridge": "ブリッジ",
    "workday": "平日",
}


@dataclass(frozen=True)
class DailySummary:
    day: date
    worked_minutes: int
    bank_delta_minutes: int
    is_holiday: bool
    is_bridge: bool
    punch_count: int
    closed: bool = False
    # 締めた時点で繰り入れた差分（未締めならNone）
    folded_delta_minutes: Optional[int] = None

    @property
    def date_key(self) -> str:
        return to_iso_date(self.day)

    @property
    def is_complete(self) -> bool:
        return self.punch_count == PUNCHES_PER_DAY

    @property
    def is_stale(self) -> bool:
        """締め後の修正で現在の差分が繰り入れ済みの差分と食い違っているか"""
        return (
            self.folded_delta_minutes is not None
            and self.folded_delta_minutes != self.bank_delta_minutes
        )

    @property
    def day_kind(self) -> str:
        if self.is_holiday:
            return "holiday"
        if self.is_bridge:
            return "bridge"
        return "workday"


def worked_minutes(day_punches: Sequence[Punch]) -> int:
    """出勤→昼休憩開始 と 昼休憩終了→退勤 の合計分数

    区間の片端が欠けている場合、その区間は0分とする。
    """
    by_type: dict[PunchType, Punch] = {}
    for punch in day_punches:
        by_type[punch.type] = punch

    total = 0.0
    for start_type, end_type in WORK_INTERVALS:
        start = by_type.get(start_type)
        end = by_type.get(end_type)
        if start and end:
            total += minutes_between(
                combine(start.day, end.time_of_day),
                combine(start.day, start.time_of_day),
            )
    return int(round(total))


def daily_delta(
    worked: int,
    holiday: bool,
    bridge: bool,
    standard_minutes: int = STANDARD_WORKDAY_MINUTES,
) -> int:
    """祝日・ブリッジは全時間が加算、平日は所定労働時間との差分"""
    if holiday or bridge:
        return worked
    return worked - standard_minutes


def summarize_day(
    ledger: Sequence[Punch],
    day: date,
    is_holiday: bool,
    is_bridge: bool,
    standard_minutes: int = STANDARD_WORKDAY_MINUTES,
    closed: bool = False,
) -> DailySummary:
    day_punches = list_for_day(ledger, day)
    worked = worked_minutes(day_punches)
    return DailySummary(
        day=day,
        worked_minutes=worked,
        bank_delta_minutes=daily_delta(worked, is_holiday, is_bridge, standard_minutes),
        is_holiday=is_holiday,
        is_bridge=is_bridge,
        punch_count=len(day_punches),
        closed=closed,
    )


def fold_day(
    summary: DailySummary,
    bank_minutes: int,
    closed_days: dict[str, int],
) -> tuple[int, dict[str, int], bool]:
    """完了日の差分をタイムバンクへ一度だけ繰り入れる

    戻り値は (新残高, 新しい締め済み日, 今回繰り入れたか)。
    締め済みの日や打刻が4回に満たない日は何もしない。
    """
    if not summary.is_complete or summary.date_key in closed_days:
        return bank_minutes, closed_days, False

    closed = dict(closed_days)
    closed[summary.date_key] = summary.bank_delta_minutes
    return bank_minutes + summary.bank_delta_minutes, closed, True
