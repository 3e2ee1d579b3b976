"""タイムバンク管理エージェント - エントリーポイント"""
import argparse
import asyncio
import logging
import os
import sys
from datetime import date

from dotenv import load_dotenv

from graph.agent import TimebankAgent
from services.config_loader import load_config
from services.errors import TimebankError
from services.holiday_calendar import HolidayCalendar
from services.json_file_storage import JsonFileStorage
from services.memory_storage import MemoryStorage
from services.persistence_gateway import PersistenceGateway
from services.punch_ledger import PUNCH_SEQUENCE, WorkLocation, last_punch, recent_punches
from services.slack_client import SlackNotifier, ConsoleNotifier
from services.accounting import DAY_KIND_LABELS
from services.time_utils import format_signed

WEEKDAY_LABELS = ["月", "火", "水", "木", "金", "土", "日"]


def create_services(config: dict):
    """設定に基づいてサービスインスタンスを生成"""
    load_dotenv()

    # 保存先
    storage_config = config["storage"]
    if storage_config["backend"] == "memory":
        storage = MemoryStorage()
    else:
        storage = JsonFileStorage(
            os.getenv("TIMEBANK_STORAGE_PATH", storage_config["path"])
        )
    gateway = PersistenceGateway(storage)

    # 祝日カレンダー
    calendar = HolidayCalendar.from_config(config["calendar"])

    # Slack通知
    slack_config = config["slack"]
    slack_token = os.getenv("SLACK_BOT_TOKEN", "")
    slack_channel = os.getenv("SLACK_NOTIFY_CHANNEL", slack_config.get("notify_channel", ""))
    if slack_config["enabled"] and slack_token:
        notifier = SlackNotifier(token=slack_token, channel=slack_channel)
    else:
        notifier = ConsoleNotifier()

    return gateway, calendar, notifier


def render_dashboard(state: dict, recent_limit: int = 8) -> str:
    """読み込み結果を画面表示用の文字列にする"""
    user = state["user"]
    summary = state["summary"]
    records = state["records"]
    today = date.fromisoformat(state["today"])

    lines = [f"こんにちは {user.name} さん"]
    lines.append(
        " ".join(
            f"[{label}]" if i == today.weekday() else f" {label} "
            for i, label in enumerate(WEEKDAY_LABELS)
        )
    )

    last = last_punch(records)
    if last:
        lines.append(f"最終打刻: {last.time_display}（{last.type.label}）")
    else:
        lines.append("最終打刻: --:--（記録なし）")

    lines.append(f"タイムバンク: {format_signed(state['bank_minutes'])}")
    if summary:
        status = "締め済み" if summary.closed else f"{summary.punch_count}/{len(PUNCH_SEQUENCE)}"
        if summary.is_stale:
            # 締め後の修正は残高に反映されない
            status += f"・繰り入れ済み {format_signed(summary.folded_delta_minutes)}"
        lines.append(
            f"本日（{DAY_KIND_LABELS[summary.day_kind]}）: "
            f"{format_signed(summary.bank_delta_minutes)} [{status}]"
        )

    lines.append("直近の記録:")
    recent = recent_punches(records, recent_limit)
    if not recent:
        lines.append("  記録はまだありません")
    for p in recent:
        lines.append(
            f"  {p.type.label:<6} {p.date_display} • {p.date_key}  {p.location.label} {p.time_display}"
        )
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="timebank", description="個人用タイムバンク管理")
    parser.add_argument("--config", default=None, help="設定ファイル（既定: config.yaml）")
    sub = parser.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="ユーザー登録（上書き）")
    register.add_argument("name")
    register.add_argument("email")

    sub.add_parser("logout", help="ログアウト（記録は残る）")

    locations = [loc.value for loc in WorkLocation]
    punch = sub.add_parser("punch", help="次の打刻を記録")
    punch.add_argument("--location", choices=locations, default=WorkLocation.ON_SITE.value)
    punch.add_argument("--time", default=None, help="HH:MM（省略時は現在時刻）")

    adjust = sub.add_parser("adjust", help="本日の打刻を修正")
    adjust.add_argument("type", choices=[t.value for t in PUNCH_SEQUENCE])
    adjust.add_argument("--location", choices=locations, default=WorkLocation.ON_SITE.value)
    adjust.add_argument("--time", required=True, help="HH:MM")

    sub.add_parser("status", help="本日の集計とタイムバンクを表示")
    return parser


async def run_command(args, agent: TimebankAgent, recent_limit: int = 8) -> int:
    """1回分のコマンドを実行し、終了コードを返す"""
    if args.command == "register":
        try:
            user = await agent.register(args.name, args.email)
        except TimebankError as e:
            print(f"[タイムバンク] {e}")
            return 1
        print(f"[タイムバンク] {user.name}（{user.email}）でログインしました")
        return 0

    if args.command == "logout":
        await agent.logout()
        print("[タイムバンク] ログアウトしました")
        return 0

    user = await agent.current_user()
    if args.command == "punch":
        state = await agent.punch(user, args.location, args.time)
    elif args.command == "adjust":
        state = await agent.adjust(user, args.type, args.location, args.time)
    else:
        state = await agent.load(user)

    if state["action_taken"] == "skipped":
        print("[タイムバンク] 先に register でログインしてください")
        return 1
    if state["action_taken"] == "error":
        return 1

    print(render_dashboard(state, recent_limit))
    return 0


def main(argv=None) -> int:
    """メイン起動処理"""
    args = build_parser().parse_args(argv)
    config = load_config(args.config or "config.yaml")

    logging.basicConfig(
        level=config["logging"]["level"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    gateway, calendar, notifier = create_services(config)
    agent = TimebankAgent(gateway, calendar, notifier, config=config)

    try:
        return asyncio.run(
            run_command(args, agent, config["display"]["recent_limit"])
        )
    except TimebankError as e:
        print(f"[タイムバンク] 処理中にエラー: {e}")
        notifier.send_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
