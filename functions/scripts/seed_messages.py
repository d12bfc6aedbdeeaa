"""
Seed the messages collection from one of the bundled sources.

    python scripts/seed_messages.py because_of_you
    python scripts/seed_messages.py examples --dry-run
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from firebase_admin import firestore, initialize_app

from grams.seeding import SEED_SOURCES, seed_messages
from shared.config import get_settings

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Seed thank-you gram messages")
    parser.add_argument("source", choices=sorted(SEED_SOURCES))
    parser.add_argument(
        "--data-dir",
        default=settings.seed_data_dir,
        help="Directory holding the seed CSV files",
    )
    parser.add_argument(
        "--collection",
        default=settings.messages_collection,
        help="Collection to write to",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.batch_write_limit,
        help="Writes per Firestore batch",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load and count the rows without writing",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    if args.batch_size <= 0:
        logger.error("--batch-size must be positive")
        return 2

    messages = SEED_SOURCES[args.source](args.data_dir)
    if args.dry_run:
        result = seed_messages(None, messages, dry_run=True)
    else:
        initialize_app()
        result = seed_messages(
            firestore.client(),
            messages,
            collection_name=args.collection,
            batch_limit=args.batch_size,
        )
    logger.info(
        "%s %d messages from %s",
        "Would seed" if args.dry_run else "Seeded",
        result.count,
        args.source,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
