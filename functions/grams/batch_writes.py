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
"""Sequential, size-bounded Firestore batch writes."""

from typing import Any, Iterable, Tuple

from firebase_functions import logger

from shared.constants import MAX_BATCH_WRITE_OPERATIONS

# (operation, document reference, data); operation is "set" or "update".
BatchWrite = Tuple[str, Any, dict]

_BATCH_OPERATIONS = ("set", "update")


def commit_in_batches(
    db,
    writes: Iterable[BatchWrite],
    batch_limit: int = MAX_BATCH_WRITE_OPERATIONS,
) -> int:
    """
    Queues writes into WriteBatch objects of at most `batch_limit` operations.

    Each batch is committed before the next one is opened. Batches are
    independent: if a commit raises, the batches committed before it stay
    applied and the error propagates to the caller.

    Args:
        db: A Firestore client.
        writes: Iterable of (operation, document reference, data).
        batch_limit (int): Maximum number of operations per batch.

    Returns:
        The number of operations committed.
    """
    if batch_limit <= 0:
        raise ValueError(f"batch_limit must be positive, got {batch_limit}")

    committed = 0
    batch = db.batch()
    pending = 0
    for operation, doc_ref, data in writes:
        if operation not in _BATCH_OPERATIONS:
            raise ValueError(f"Unsupported batch operation: {operation}")
        getattr(batch, operation)(doc_ref, data)
        pending += 1
        if pending >= batch_limit:
            batch.commit()
            committed += pending
            logger.info(f"Committed batch of {pending} writes ({committed} total)")
            batch = db.batch()
            pending = 0

    if pending:
        batch.commit()
        committed += pending
        logger.info(f"Committed batch of {pending} writes ({committed} total)")

    return committed
