"""
Backfill a valid tone on existing thank-you gram messages.

Same operation as the backfill_tone_field function, run from a workstation
with application-default credentials:

    python scripts/backfill_tone.py --dry-run
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

from grams.backfill import backfill_tone
from shared.config import get_settings

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Assign a random valid tone to messages without one"
    )
    parser.add_argument(
        "--collection",
        default=settings.messages_collection,
        help="Collection to scan",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.batch_write_limit,
        help="Updates per Firestore batch",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report how many messages would be updated without writing",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    if args.batch_size <= 0:
        logger.error("--batch-size must be positive")
        return 2

    initialize_app()
    result = backfill_tone(
        firestore.client(),
        collection_name=args.collection,
        batch_limit=args.batch_size,
        dry_run=args.dry_run,
    )
    logger.info(
        "%s %d of %d messages",
        "Would backfill" if args.dry_run else "Backfilled",
        result.backfilled,
        result.total_documents,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
