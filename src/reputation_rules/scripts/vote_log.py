"""Inspect and repair the vote log from the command line.

Examples:
    reputation-rules-votes find --voter 1 --author 2 --topic 3 --post 4
    reputation-rules-votes list --voter 1 --type downvote
    reputation-rules-votes undo --voter 1 --author 2 --topic 3 --post 4
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from reputation_rules.core.settings import settings
from reputation_rules.db.session import create_store
from reputation_rules.db.store import KeyValueStore
from reputation_rules.schemas.vote import VoteLogRecord, VoteType
from reputation_rules.services.reputation import build_vote_log


def _format(record: VoteLogRecord) -> str:
    state = "undone" if record.undone else "active"
    return (
        f"{record.timestamp.isoformat()} {record.type.value:<8} "
        f"voter={record.voter_id} author={record.author_id} "
        f"topic={record.topic_id} post={record.post_id} amount={record.amount} {state}"
    )


def _add_record_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--voter", type=int, required=True)
    parser.add_argument("--author", type=int, required=True)
    parser.add_argument("--topic", type=int, required=True)
    parser.add_argument("--post", type=int, required=True)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect the vote log")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    _add_record_arguments(commands.add_parser("find", help="Show one vote record"))
    _add_record_arguments(commands.add_parser("undo", help="Undo a recorded vote"))

    list_parser = commands.add_parser("list", help="List a voter's active votes")
    list_parser.add_argument("--voter", type=int, required=True)
    list_parser.add_argument("--type", choices=[t.value for t in VoteType], default=None)
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, store: KeyValueStore) -> int:
    """Execute the parsed command against ``store`` and return an exit code."""
    vote_log = build_vote_log(settings, store)

    if args.command == "list":
        vote_type = VoteType(args.type) if args.type else None
        records = await vote_log.votes_by_voter(args.voter, vote_type)
        for record in records:
            print(_format(record))
        print(f"{len(records)} vote(s)")
        return 0

    record = await vote_log.lookup(args.voter, args.author, args.topic, args.post)
    if record is None:
        print("Vote not found")
        return 1

    if args.command == "undo":
        if record.undone:
            print("Vote already undone")
            return 1
        record = await vote_log.undo(record)
        if record is None:
            print("Vote not found")
            return 1

    print(_format(record))
    return 0


async def _main(args: argparse.Namespace) -> int:
    store = create_store(settings)
    try:
        return await run(args, store)
    finally:
        await store.close()


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
