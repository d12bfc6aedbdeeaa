# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Fills in a valid tone on messages that are missing one."""

import random
from typing import Any

from firebase_functions import logger

from grams.batch_writes import commit_in_batches
from shared.constants import MAX_BATCH_WRITE_OPERATIONS
from shared.firebase_constants import MESSAGES_COLLECTION
from shared.types import LEGACY_SUNSHINE_TONE, VALID_TONES, BackfillResult


def has_valid_tone(tone: Any) -> bool:
    # The legacy label is normalized when read, so it is not rewritten here.
    return tone in VALID_TONES or tone == LEGACY_SUNSHINE_TONE


def pick_random_tone() -> str:
    return random.choice(VALID_TONES)


def backfill_tone(
    db,
    collection_name: str = MESSAGES_COLLECTION,
    batch_limit: int = MAX_BATCH_WRITE_OPERATIONS,
    dry_run: bool = False,
) -> BackfillResult:
    """
    Assigns a random canonical tone to every message without a valid one.

    Only the `tone` field is written. Updates are committed in sequential
    batches of at most `batch_limit`; a failing batch does not roll back the
    batches before it. No concurrency check is made between the scan and the
    update, so a tone written by someone else in between is overwritten.

    Args:
        db: A Firestore client.
        collection_name (str): The collection to scan.
        batch_limit (int): Maximum number of updates per batch.
        dry_run (bool): Count the documents that need a tone without writing.

    Returns:
        BackfillResult with the number of updated and scanned documents.
    """
    docs = list(db.collection(collection_name).stream())
    updates = [
        ("update", doc.reference, {"tone": pick_random_tone()})
        for doc in docs
        if not has_valid_tone((doc.to_dict() or {}).get("tone"))
    ]

    if dry_run:
        backfilled = len(updates)
    else:
        backfilled = commit_in_batches(db, updates, batch_limit=batch_limit)

    logger.info(
        f"Tone backfill on {collection_name}: {backfilled} of {len(docs)} documents"
        + (" (dry run)" if dry_run else "")
    )
    return BackfillResult(
        success=True, backfilled=backfilled, total_documents=len(docs)
    )
