"""Cron entry point for removing expired and revoked refresh tokens."""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from datetime import datetime, timezone

from ibadgram.config import load_config
from ibadgram.infrastructure.unit_of_work import SQLAlchemyUnitOfWork
from ibadgram.logging import configure_logging


@dataclass(slots=True)
class CleanupSummary:
    tokens_removed: int
    dry_run: bool


async def perform_cleanup(
    *, dry_run: bool, reference_time: datetime | None = None
) -> CleanupSummary:
    """Execute cleanup logic and return summary counters."""
    config = load_config()
    configure_logging(config.settings.log_level)
    now = reference_time or datetime.now(timezone.utc)

    try:
        async with SQLAlchemyUnitOfWork(config.session_factory) as uow:
            await uow.begin_transaction()
            if dry_run:
                expired = await uow.refresh_tokens.count_expired_tokens(now)
                await uow.rollback_transaction()
                return CleanupSummary(tokens_removed=expired, dry_run=True)

            removed = await uow.refresh_tokens.cleanup_expired_tokens(now)
            await uow.commit_transaction()
            return CleanupSummary(tokens_removed=removed, dry_run=False)
    finally:
        await config.engine.dispose()


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Cleanup expired refresh tokens.")
    parser.add_argument("--dry-run", action="store_true", help="Only report counts without deleting rows.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    try:
        summary = asyncio.run(perform_cleanup(dry_run=args.dry_run))
    except Exception as exc:
        print(f"cleanup failed: {exc}", file=sys.stderr)
        return 2

    if summary.dry_run:
        print(f"cleanup dry-run, tokens_expired={summary.tokens_removed}", file=sys.stdout)
    else:
        print(f"cleanup done, tokens_removed={summary.tokens_removed}", file=sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
