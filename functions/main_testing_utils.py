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
"""In-memory stand-ins for the Firestore client used by the tests."""

import copy
import itertools
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from google.api_core import exceptions
from google.cloud.firestore_v1 import SERVER_TIMESTAMP, Query

_BASE_TIMESTAMP = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _copy_fields(data: dict) -> dict:
    # Sentinels are matched by identity, so they must not be deep-copied.
    return {
        key: value if value is SERVER_TIMESTAMP else copy.deepcopy(value)
        for key, value in data.items()
    }


class InMemoryDocumentSnapshot:
    def __init__(self, reference: "InMemoryDocumentReference", data: Optional[dict]):
        self.reference = reference
        self.id = reference.id
        self._data = copy.deepcopy(data)

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[dict]:
        return copy.deepcopy(self._data)

    def get(self, field_path: str):
        return (self._data or {}).get(field_path)


class InMemoryDocumentReference:
    def __init__(self, db: "InMemoryFirestore", collection_name: str, doc_id: str):
        self._db = db
        self.collection_name = collection_name
        self.id = doc_id

    def get(self) -> InMemoryDocumentSnapshot:
        return InMemoryDocumentSnapshot(
            self, self._db.collections.get(self.collection_name, {}).get(self.id)
        )

    def set(self, data: dict) -> None:
        self._db._apply_set(self, data)

    def update(self, data: dict) -> None:
        self._db._apply_update(self, data)


class InMemoryQuery:
    """Supports the subset of Query used here: order_by, limit, start_after."""

    def __init__(
        self,
        db: "InMemoryFirestore",
        collection_name: str,
        order_field: Optional[str] = None,
        direction: str = Query.ASCENDING,
        limit_count: Optional[int] = None,
        cursor: Optional[InMemoryDocumentSnapshot] = None,
    ):
        self._db = db
        self._collection_name = collection_name
        self._order_field = order_field
        self._direction = direction
        self._limit = limit_count
        self._cursor = cursor

    def _copy(self, **overrides) -> "InMemoryQuery":
        params = dict(
            order_field=self._order_field,
            direction=self._direction,
            limit_count=self._limit,
            cursor=self._cursor,
        )
        params.update(overrides)
        return InMemoryQuery(self._db, self._collection_name, **params)

    def order_by(self, field_path: str, direction: str = Query.ASCENDING):
        return self._copy(order_field=field_path, direction=direction)

    def limit(self, count: int):
        return self._copy(limit_count=count)

    def start_after(self, snapshot: InMemoryDocumentSnapshot):
        return self._copy(cursor=snapshot)

    def stream(self):
        self._db.reads += 1
        if self._db.fail_reads:
            raise exceptions.ServiceUnavailable("Simulated Firestore outage")

        docs = self._db.collections.get(self._collection_name, {})
        snapshots = [
            InMemoryDocumentSnapshot(
                InMemoryDocumentReference(self._db, self._collection_name, doc_id),
                data,
            )
            for doc_id, data in docs.items()
        ]

        if self._order_field:
            descending = self._direction == Query.DESCENDING
            # Documents missing the ordered field are not part of the result.
            snapshots = [s for s in snapshots if s.get(self._order_field) is not None]

            def sort_key(snapshot):
                return (snapshot.get(self._order_field), snapshot.id)

            snapshots.sort(key=sort_key, reverse=descending)
            if self._cursor is not None:
                cursor_key = (self._cursor.get(self._order_field), self._cursor.id)
                snapshots = [
                    s
                    for s in snapshots
                    if (sort_key(s) < cursor_key if descending else sort_key(s) > cursor_key)
                ]

        if self._limit is not None:
            snapshots = snapshots[: self._limit]
        return iter(snapshots)

    def get(self) -> List[InMemoryDocumentSnapshot]:
        return list(self.stream())


class InMemoryCollectionReference(InMemoryQuery):
    def __init__(self, db: "InMemoryFirestore", collection_name: str):
        super().__init__(db, collection_name)
        self.id = collection_name

    def document(self, document_id: Optional[str] = None) -> InMemoryDocumentReference:
        if document_id is None:
            document_id = uuid.uuid4().hex[:20]
        elif not document_id or "/" in document_id:
            # Same check the Firestore client makes while building the path.
            raise ValueError("A document must have an even number of path elements")
        return InMemoryDocumentReference(self._db, self.id, document_id)


class InMemoryWriteBatch:
    def __init__(self, db: "InMemoryFirestore"):
        self._db = db
        self._writes = []

    def __len__(self) -> int:
        return len(self._writes)

    def set(self, reference: InMemoryDocumentReference, data: dict) -> None:
        self._writes.append(("set", reference, _copy_fields(data)))

    def update(self, reference: InMemoryDocumentReference, data: dict) -> None:
        self._writes.append(("update", reference, _copy_fields(data)))

    def commit(self) -> None:
        self._db.commit_attempts += 1
        if self._db.fail_on_commit == self._db.commit_attempts:
            raise exceptions.DeadlineExceeded("Simulated batch commit failure")

        # A batch is atomic: check every update target before applying any.
        for operation, reference, _ in self._writes:
            if operation == "update" and not reference.get().exists:
                raise exceptions.NotFound(f"No document to update: {reference.id}")
        for operation, reference, data in self._writes:
            if operation == "set":
                self._db._apply_set(reference, data)
            else:
                self._db._apply_update(reference, data)
        self._db.committed_batch_sizes.append(len(self._writes))


class InMemoryFirestore:
    """
    Minimal Firestore double.

    `SERVER_TIMESTAMP` values are resolved to increasing timestamps. Commits
    are recorded in `committed_batch_sizes`; `fail_on_commit=n` makes the n-th
    commit raise, and `fail_reads` makes every query raise.
    """

    def __init__(self, fail_on_commit: Optional[int] = None, fail_reads: bool = False):
        self.collections: Dict[str, Dict[str, dict]] = {}
        self.committed_batch_sizes: List[int] = []
        self.commit_attempts = 0
        self.reads = 0
        self.fail_on_commit = fail_on_commit
        self.fail_reads = fail_reads
        self._clock = itertools.count(1)

    def collection(self, collection_name: str) -> InMemoryCollectionReference:
        return InMemoryCollectionReference(self, collection_name)

    def batch(self) -> InMemoryWriteBatch:
        return InMemoryWriteBatch(self)

    def next_timestamp(self) -> datetime:
        return _BASE_TIMESTAMP + timedelta(seconds=next(self._clock))

    def add_documents(self, collection_name: str, docs: List[dict]) -> List[str]:
        """Stores documents directly, bypassing batches. Returns their ids."""
        ids = []
        for data in docs:
            reference = self.collection(collection_name).document()
            self._apply_set(reference, data)
            ids.append(reference.id)
        return ids

    def documents(self, collection_name: str) -> Dict[str, dict]:
        return copy.deepcopy(self.collections.get(collection_name, {}))

    def _resolve(self, data: dict) -> dict:
        return {
            key: self.next_timestamp() if value is SERVER_TIMESTAMP else value
            for key, value in data.items()
        }

    def _apply_set(self, reference: InMemoryDocumentReference, data: dict) -> None:
        collection = self.collections.setdefault(reference.collection_name, {})
        collection[reference.id] = self._resolve(_copy_fields(data))

    def _apply_update(self, reference: InMemoryDocumentReference, data: dict) -> None:
        collection = self.collections.setdefault(reference.collection_name, {})
        if reference.id not in collection:
            raise exceptions.NotFound(f"No document to update: {reference.id}")
        collection[reference.id].update(self._resolve(_copy_fields(data)))


def create_timestamped_messages(
    db: InMemoryFirestore, count: int, collection_name: str = "messages"
) -> List[str]:
    """Adds `count` messages with increasing createdAt. Returns ids, oldest first."""
    return db.add_documents(
        collection_name,
        [
            {
                "message": f"Thank you #{i}",
                "location": "Austin, Texas",
                "tone": "Big Hug",
                "createdAt": db.next_timestamp(),
            }
            for i in range(count)
        ],
    )
