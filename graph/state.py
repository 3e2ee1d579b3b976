from typing import TypedDict, Optional
from datetime import datetime

from services.accounting import DailySummary
from services.persistence_gateway import UserIdentity
from services.punch_ledger import Punch


class TimebankState(TypedDict):
    action: str                         # "punch" / "adjust" / "load"
    user: Optional[UserIdentity]        # 操作中のユーザー（セッション）
    now: datetime                       # 操作時点の日時
    today: str                          # YYYY-MM-DD
    location: Optional[str]             # "on_site" / "field"
    punch_type: Optional[str]           # 修正対象の打刻種別
    explicit_time: Optional[str]        # 明示指定の時刻 HH:MM
    is_holiday: bool                    # 祝日フラグ
    is_bridge: bool                     # ブリッジフラグ
    holiday_reason: Optional[str]       # 祝日名など
    records: list[Punch]                # ユーザーの打刻台帳
    punch: Optional[Punch]              # 今回記録・修正した打刻
    bank_minutes: int                   # タイムバンク残高（分）
    summary: Optional[DailySummary]     # 本日の集計
    folded: bool                        # 今回タイムバンクに繰り入れたか
    action_taken: Optional[str]         # "punched" / "adjusted" / "loaded" / "skipped" / "error"
    error_kind: Optional[str]           # エラー種別
    error_message: Optional[str]        # エラー詳細
