class TimebankError(Exception):
    """業務ルール違反の基底例外。kindはUIへ返す識別子"""

    kind = "error"
    message = "処理に失敗しました"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)


class DayComplete(TimebankError):
    """本日の4回の打刻がすでに揃っている"""

    kind = "day_complete"
    message = "本日の4回の打刻はすでに記録済みです"


class MissingSelection(TimebankError):
    """修正対象の打刻種別が選択されていない"""

    kind = "missing_selection"
    message = "修正する打刻を選択してください"


class SlotOutOfOrder(TimebankError):
    """未記録の打刻を順序を飛ばして補完しようとした"""

    kind = "slot_out_of_order"

    def __init__(self, requested: str, expected: str):
        self.requested = requested
        self.expected = expected
        super().__init__(f"次に記録できるのは「{expected}」です（指定: {requested}）")


class NoActiveUser(TimebankError):
    kind = "no_active_user"
    message = "ログイン中のユーザーがいません"


class MissingField(TimebankError):
    """登録時の必須項目が空"""

    kind = "missing_field"
    message = "名前とメールアドレスを入力してください"


class StorageError(TimebankError):
    """ストレージの読み書きに失敗した（永続状態は変更されない）"""

    kind = "storage"
    message = "データの保存に失敗しました。もう一度お試しください"


class InvalidTime(TimebankError):
    """時刻がHH:MM形式でない、または未指定"""

    kind = "invalid_time"
    message = "時刻はHH:MM形式で指定してください"
