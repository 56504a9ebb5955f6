"""Command-line timer for the Kaizen API.

Usage:
    kaizen-timer status [--watch]
    kaizen-timer start TASK_ID [-d TEXT]
    kaizen-timer stop
    kaizen-timer discard [--keep-remote]
    kaizen-timer adjust HH:MM
    kaizen-timer describe TEXT
    kaizen-timer add 2024-01-05 23:30 00:15 TASK_ID [-d TEXT]
    kaizen-timer logout

Reads KAIZEN_API_URL and KAIZEN_TOKEN from the environment.
"""
import argparse
import asyncio
import logging
import sys
from datetime import date, datetime, time
from typing import Optional

import httpx

from kaizen.client.api import KaizenAPI
from kaizen.client.cache import FileSessionCache
from kaizen.client.config import ClientSettings
from kaizen.client.timer import ReconcileOutcome, TimerManager
from kaizen.errors import UnauthorizedError
from kaizen.utils.timeutils import format_hhmmss, format_short, utc_now


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kaizen-timer", description="Kaizen time tracker")
    commands = parser.add_subparsers(dest="command", required=True)

    status = commands.add_parser("status", help="Show the running timer")
    status.add_argument("--watch", action="store_true", help="Keep printing elapsed time")

    start = commands.add_parser("start", help="Start a timer on a task")
    start.add_argument("task_id")
    start.add_argument("-d", "--description", default="")

    commands.add_parser("stop", help="Stop the running timer")

    discard = commands.add_parser("discard", help="Drop the running timer")
    discard.add_argument(
        "--keep-remote",
        action="store_true",
        help="Leave the server entry open and only forget it locally",
    )

    adjust = commands.add_parser("adjust", help="Move the start of the running timer")
    adjust.add_argument("start", type=time.fromisoformat, help="HH:MM today, local time")

    describe = commands.add_parser("describe", help="Set the running timer's description")
    describe.add_argument("text")

    add = commands.add_parser("add", help="Record a past entry")
    add.add_argument("day", type=date.fromisoformat)
    add.add_argument("start", type=time.fromisoformat)
    add.add_argument("end", type=time.fromisoformat)
    add.add_argument("task_id")
    add.add_argument("-d", "--description", default="")

    commands.add_parser("logout", help="Forget the cached timer")
    return parser


def _print_status(manager: TimerManager) -> None:
    session = manager.session
    if session is None:
        print("No timer running")
        return
    print(f"{session.project_name} / {session.task_name}")
    if session.description:
        print(f"  {session.description}")
    print(f"  {format_hhmmss(manager.elapsed_seconds())}")


async def _watch(manager: TimerManager) -> None:
    def show(elapsed: int) -> None:
        sys.stdout.write(f"\r{format_hhmmss(elapsed)}")
        sys.stdout.flush()

    await manager.run_ticker(show)


async def run(args: argparse.Namespace, settings: ClientSettings) -> int:
    """Execute one command. Returns the process exit code."""
    if not settings.token:
        print("KAIZEN_TOKEN is not set", file=sys.stderr)
        return 2

    api = KaizenAPI.connect(settings.api_url, settings.token, settings.request_timeout)
    try:
        user = await api.get_current_user()
        manager = TimerManager(
            api,
            FileSessionCache(settings.resolved_cache_dir),
            user_key=user.id,
            tick_interval=settings.tick_interval,
        )

        if args.command == "logout":
            manager.logout()
            print("Cached timer cleared")
            return 0

        outcome = await manager.load()
        if outcome is not ReconcileOutcome.UNCHANGED:
            print(f"Timer state {outcome.value} from server")

        if args.command == "status":
            _print_status(manager)
            if args.watch and manager.is_running:
                await _watch(manager)
        elif args.command == "start":
            await manager.start(args.task_id, description=args.description)
            _print_status(manager)
        elif args.command == "stop":
            entry = await manager.stop()
            if entry is None:
                print("No timer running")
            else:
                print(f"Stopped after {format_short(entry.duration)}")
        elif args.command == "discard":
            await manager.discard(keep_remote=args.keep_remote)
            print("Timer discarded")
        elif args.command == "adjust":
            local_start = datetime.combine(utc_now().astimezone().date(), args.start)
            await manager.adjust_start_time(local_start.astimezone())
            _print_status(manager)
        elif args.command == "describe":
            manager.set_description(args.text)
            await manager.save_description()
            _print_status(manager)
        elif args.command == "add":
            entry = await manager.create_past_entry(
                args.day, args.start, args.end, args.task_id, args.description
            )
            print(f"Recorded {format_short(entry.duration)} ending {entry.end_time:%Y-%m-%d %H:%M}")
        return 0
    except (ValueError, UnauthorizedError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except httpx.HTTPError as e:
        print(f"Could not reach {settings.api_url}: {e}", file=sys.stderr)
        return 1
    finally:
        await api.aclose()


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = ClientSettings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
