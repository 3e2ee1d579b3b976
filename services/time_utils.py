# services/time_utils.py
from datetime import date, datetime, time


def _now() -> datetime:
    """テスト時にモック可能な現在時刻取得"""
    return datetime.now()


def to_iso_date(day: date) -> str:
    """ソート可能なキー形式 YYYY-MM-DD"""
    return day.isoformat()


def to_local_date(day: date) -> str:
    """表示用 DD/MM/YYYY"""
    return day.strftime("%d/%m/%Y")


def parse_iso_date(value) -> date:
    """YYYY-MM-DD文字列（YAMLで読んだdateもそのまま）をdateに変換"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def parse_hm(time_str: str) -> time:
    """HH:MM形式の文字列をtimeオブジェクトに変換"""
    h, m = map(int, time_str.strip().split(":"))
    return time(h, m)


def format_hm(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def truncate_to_minute(value: datetime) -> time:
    return value.time().replace(second=0, microsecond=0)


def combine(day: date, time_of_day: time) -> datetime:
    """同日内の時刻同士を引き算するための日時を組み立てる"""
    return datetime.combine(day, time_of_day)


def minutes_between(later: datetime, earlier: datetime) -> float:
    """経過分数。順序が逆の場合は0に丸める"""
    return max(0.0, (later - earlier).total_seconds() / 60)


def format_minutes(minutes: int) -> str:
    """符号なし HH:MM"""
    h, m = divmod(abs(int(minutes)), 60)
    return f"{h:02d}:{m:02d}"


def format_signed(minutes: int) -> str:
    """符号付き ±HH:MM。0は +00:00"""
    sign = "-" if minutes < 0 else "+"
    return f"{sign}{format_minutes(minutes)}"
