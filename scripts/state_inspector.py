"""
State Inspector CLI

Debug tool for inspecting the bot's persisted reminder state.

Usage:
    # Show all stored reminders, soonest first
    python scripts/state_inspector.py show

    # Show one channel's reminders
    python scripts/state_inspector.py show --conversation 123456789

    # Export the raw state blob to JSON
    python scripts/state_inspector.py export --output reminders.json

    # Drop every stored reminder
    python scripts/state_inspector.py clear --yes
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

import asyncpg
import pytz

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders import PostgresStateStore, ReminderConfig, ReminderStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def truncate(text: str, max_len: int = 60) -> str:
    """Truncate text with ellipsis."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


async def load_store(state: PostgresStateStore, key: str) -> ReminderStore:
    """Read the state blob into a ReminderStore."""
    store = ReminderStore()
    data = await state.get(key)
    if data:
        store.restore(json.loads(data))
    return store


async def show_reminders(
    state: PostgresStateStore, key: str, timezone: str, conversation_id: str = None
):
    """Print stored reminders in delivery order."""
    store = await load_store(state, key)
    reminders = store.list_for(conversation_id) if conversation_id else list(store)

    if not reminders:
        logger.info("No reminders stored")
        return

    tz = pytz.timezone(timezone)
    logger.info(f"\n{'ID':<34} {'Channel':<20} {'Due':<22} Action")
    logger.info("-" * 100)
    for reminder in reminders:
        due = reminder.due_at.astimezone(tz).strftime("%Y-%m-%d %H:%M %Z")
        logger.info(
            f"{reminder.id or '-':<34} {reminder.conversation_id:<20} {due:<22} "
            f"{truncate(reminder.phrase)}"
        )
    logger.info(f"\n{len(reminders)} reminder(s)")


async def export_state(state: PostgresStateStore, key: str, output_file: str):
    """Write the state blob to a file as formatted JSON."""
    data = await state.get(key)
    payload = json.loads(data) if data else {"reminders": []}

    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)

    logger.info(f"Exported {len(payload.get('reminders', []))} reminder(s) to {output_file}")


async def clear_state(state: PostgresStateStore, key: str):
    """Reset the state blob to an empty reminder list."""
    await state.set(key, json.dumps(ReminderStore().snapshot()))
    logger.info(f"Cleared reminder state '{key}'")


async def main_async(args):
    """Async main function."""
    db_url = os.environ.get("DATABASE_URL")
    if not db_url:
        logger.error("DATABASE_URL environment variable required")
        sys.exit(1)

    config = ReminderConfig.from_env()
    key = args.key or config.state_key

    conn = await asyncpg.connect(db_url)
    state = PostgresStateStore(conn)

    try:
        if args.command == "show":
            await show_reminders(state, key, config.timezone, args.conversation)
        elif args.command == "export":
            await export_state(state, key, args.output)
        elif args.command == "clear":
            if not args.yes:
                logger.error("Refusing to clear state without --yes")
                sys.exit(1)
            await clear_state(state, key)
    finally:
        await conn.close()


def main():
    parser = argparse.ArgumentParser(
        description="State Inspector CLI - Inspect persisted reminders"
    )
    parser.add_argument("--key", help="State key (default: REMINDER_STATE_KEY)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Show command
    show_parser = subparsers.add_parser("show", help="Show stored reminders")
    show_parser.add_argument(
        "--conversation", "-c", help="Only reminders for this channel ID"
    )

    # Export command
    export_parser = subparsers.add_parser("export", help="Export state to JSON")
    export_parser.add_argument(
        "--output", "-o", required=True, help="Output file path"
    )

    # Clear command
    clear_parser = subparsers.add_parser("clear", help="Delete all stored reminders")
    clear_parser.add_argument(
        "--yes", action="store_true", help="Confirm deleting every reminder"
    )

    args = parser.parse_args()
    asyncio.run(main_async(args))


if __name__ == "__main__":
    main()
