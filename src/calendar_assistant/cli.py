"""Command-line interface for Calendar Assistant.

This module provides the main entry point for the CLI application, including
a console chat transport for talking to the agent from a terminal.
"""

from __future__ import annotations

import argparse
import asyncio
import itertools
import json
import logging
import sys
from datetime import datetime
from typing import Hashable

import structlog

from calendar_assistant import __version__
from calendar_assistant.agent.calendar_agent import CalendarAgent
from calendar_assistant.agent.messages import format_events
from calendar_assistant.config import get_settings
from calendar_assistant.exceptions import CalendarAssistantError
from calendar_assistant.gcal.client import GoogleCalendarClient
from calendar_assistant.ollama.client import OllamaClient
from calendar_assistant.parsing.event_details import EventDetailExtractor
from calendar_assistant.parsing.time_range import TimeRangeResolver
from calendar_assistant.parsing.validation import validate_event_draft
from calendar_assistant.utils import get_zone

logger = structlog.get_logger()

EXIT_COMMANDS = {"/quit", "/exit"}


class ConsoleTransport:
    """Chat transport that prints to stdout.

    Confirmation prompts are answered by typing /confirm or /cancel.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.open_confirmations: set[Hashable] = set()

    async def send_message(self, user_id: str, text: str) -> Hashable:
        handle = next(self._ids)
        print(f"\n{text}\n")
        return handle

    async def send_confirmation(self, user_id: str, text: str) -> Hashable:
        handle = next(self._ids)
        self.open_confirmations.add(handle)
        print(f"\n{text}\n[/confirm]  [/cancel]\n")
        return handle

    async def close_confirmation(self, handle: Hashable) -> None:
        self.open_confirmations.discard(handle)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="calendar-assistant", description="Calendar Assistant")
    subparsers = parser.add_subparsers(dest="command", required=True)

    chat_parser = subparsers.add_parser("chat", help="Talk to the assistant from the terminal")
    chat_parser.add_argument(
        "--user-id",
        default="console",
        help="Chat identity to use (default: console)",
    )

    events_parser = subparsers.add_parser("events", help="List events for a time expression")
    events_parser.add_argument(
        "expression",
        nargs="?",
        default="today",
        help='Time expression, e.g. "tomorrow", "next week", "next Tuesday" (default: today)',
    )
    events_parser.add_argument("--limit", type=int, default=None, help="Max results")

    parse_parser = subparsers.add_parser(
        "parse",
        help="Show how a message would be parsed into an event (nothing is created)",
    )
    parse_parser.add_argument("text", help="Event description")

    return parser


async def _cmd_chat(args: argparse.Namespace) -> int:
    settings = get_settings()
    calendar = GoogleCalendarClient(settings)
    await calendar.authenticate()

    agent = CalendarAgent(ConsoleTransport(), calendar=calendar, settings=settings)
    print("Calendar Assistant. Type /help for help, /quit to leave.")

    try:
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            if line.strip().lower() in EXIT_COMMANDS:
                break
            await agent.handle_message(args.user_id, line)
    finally:
        agent.shutdown()
    return 0


async def _cmd_events(args: argparse.Namespace) -> int:
    settings = get_settings()
    limit: int = args.limit or settings.query_max_results

    calendar = GoogleCalendarClient(settings)
    await calendar.authenticate()

    resolver = TimeRangeResolver(OllamaClient(settings))
    time_range = await resolver.resolve(args.expression, settings.timezone)
    events = await calendar.list_events(time_range.start, time_range.end, limit)

    today = datetime.now(get_zone(settings.timezone)).date()
    print(format_events(events, time_range.description, limit=limit, today=today))
    return 0


async def _cmd_parse(args: argparse.Namespace) -> int:
    settings = get_settings()
    extractor = EventDetailExtractor(OllamaClient(settings))
    draft = await extractor.extract(args.text, settings.timezone)

    print(json.dumps(draft.model_dump(mode="json", by_alias=True), indent=2))
    today = datetime.now(get_zone(settings.timezone)).date()
    problems = validate_event_draft(draft, today=today)
    for problem in problems:
        print(f"problem: {problem}")
    return 1 if problems else 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Calendar Assistant CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()

    # Configure logging
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
    )

    logger.info("calendar_assistant_started", version=__version__, debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    commands = {
        "chat": _cmd_chat,
        "events": _cmd_events,
        "parse": _cmd_parse,
    }
    handler = commands.get(parsed.command)
    if handler is None:
        logger.error("unknown_command", command=parsed.command)
        return 2

    try:
        return asyncio.run(handler(parsed))
    except CalendarAssistantError as exc:
        logger.error("command_failed", command=parsed.command, error_type=type(exc).__name__, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
