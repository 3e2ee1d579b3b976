import logging
import sys

logger = logging.getLogger(__name__)

NOTICE_PREFIX = "[タイムバンク通知]"
ERROR_PREFIX = "[タイムバンクエラー]"
ERROR_TEMPLATE = "❌ 記録に失敗しました。時間をおいて再実行してください（エラー: {error}）"


class ConsoleNotifier:
    """コンソール出力による通知（Slack未設定時・フォールバック用）"""

    def send(self, message: str) -> bool:
        print(f"{NOTICE_PREFIX} {message}", file=sys.stdout)
        return True

    def send_error(self, error: str) -> bool:
        print(f"{ERROR_PREFIX} {error}", file=sys.stderr)
        return True


class SlackNotifier:
    """Slack APIによる通知サービス

    お知らせ（打刻・締め・業務エラー）はsend、保存失敗などのシステムエラーは
    send_errorで送る。トークンがなければコンソールへ出す。
    """

    def __init__(self, token: str, channel: str):
        self._channel = channel
        self._client = None
        self._fallback = ConsoleNotifier()

        if token:
            from slack_sdk import WebClient
            self._client = WebClient(token=token)

    def _post(self, text: str) -> bool:
        try:
            self._client.chat_postMessage(channel=self._channel, text=text)
            return True
        except Exception as e:
            logger.warning("Slack通知に失敗しました（%s）: %s", self._channel, e)
            return False

    def send(self, message: str) -> bool:
        if self._client is None:
            return self._fallback.send(message)
        return self._post(message)

    def send_error(self, error: str) -> bool:
        if self._client is None:
            return self._fallback.send_error(error)
        return self._post(ERROR_TEMPLATE.format(error=error))
