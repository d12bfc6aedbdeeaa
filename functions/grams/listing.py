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
"""Read paths for the messages collection: full listing and cursor pages."""

import math
import random
from datetime import datetime
from typing import Any, List

from google.cloud.firestore_v1 import Query

from shared.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from shared.firebase_constants import MESSAGES_COLLECTION
from shared.json_utils import format_timestamp
from shared.types import LEGACY_SUNSHINE_TONE, MessagePage, MessagePageRequest, Tone


def normalize_tone(data: dict) -> dict:
    """Rewrites the legacy sunshine label to the canonical one, in place."""
    if data.get("tone") == LEGACY_SUNSHINE_TONE:
        data["tone"] = Tone.SUNSHINE.value
    return data


def shuffle_messages(messages: List[Any]) -> List[Any]:
    """Shuffles in place (Fisher-Yates) so callers see a random display order."""
    random.shuffle(messages)
    return messages


def fetch_all_messages(db, collection_name: str = MESSAGES_COLLECTION) -> List[dict]:
    """
    Returns every document in the collection, tone-normalized and shuffled.

    Document ids are not included; the document data is passed through as is.
    """
    messages = [
        normalize_tone(doc.to_dict() or {})
        for doc in db.collection(collection_name).stream()
    ]
    return shuffle_messages(messages)


def resolve_page_limit(raw_limit: Any) -> int:
    """
    Turns a client supplied limit into the effective page size.

    Anything that is not a finite number, or is not positive, falls back to
    DEFAULT_PAGE_LIMIT. Fractions are truncated first. Values above
    MAX_PAGE_LIMIT are clamped.
    """
    if isinstance(raw_limit, bool) or not isinstance(raw_limit, (int, float)):
        return DEFAULT_PAGE_LIMIT
    if isinstance(raw_limit, float):
        if not math.isfinite(raw_limit):
            return DEFAULT_PAGE_LIMIT
        raw_limit = int(raw_limit)
    if raw_limit <= 0:
        return DEFAULT_PAGE_LIMIT
    return min(raw_limit, MAX_PAGE_LIMIT)


def reshape_message(doc_id: str, data: dict) -> dict:
    """
    Builds the row shape the infinite scroll grid expects.

    The raw document data comes first and the normalized fields override it,
    so `id`, `title`, `content` and `createdAt` always have the display form.
    """
    created_at = data.get("createdAt") or None
    if isinstance(created_at, datetime):
        created_at = format_timestamp(created_at)

    return {
        **data,
        "id": doc_id,
        "title": data.get("title") or "",
        "content": data.get("content") or data.get("text") or "",
        "createdAt": created_at,
    }


def _resolve_cursor(collection, last_doc_id: Any):
    """
    Returns the snapshot to continue after, or None when there is no usable
    cursor: no id, an id that is not a legal document id (e.g. "a/b"), a
    missing document, or a document without `createdAt`, which Firestore
    cannot position in the ordering.
    """
    if not last_doc_id:
        return None
    try:
        snapshot = collection.document(str(last_doc_id)).get()
    except ValueError:
        return None
    if not snapshot.exists or (snapshot.to_dict() or {}).get("createdAt") is None:
        return None
    return snapshot


def fetch_message_page(
    db,
    request: MessagePageRequest,
    collection_name: str = MESSAGES_COLLECTION,
) -> MessagePage:
    """
    Fetches one page of messages, newest first.

    `request.last_doc_id` is the id of the last document of the previous page.
    A cursor that cannot be used (see `_resolve_cursor`) is ignored and the
    first page is returned.

    `has_more` is true when the page is full. This is an approximation: a
    full final page still reports more, and the following call returns an
    empty page.
    """
    limit = resolve_page_limit(request.limit)
    collection = db.collection(collection_name)
    query = collection.order_by("createdAt", direction=Query.DESCENDING).limit(limit)

    cursor = _resolve_cursor(collection, request.last_doc_id)
    if cursor is not None:
        query = query.start_after(cursor)

    docs = list(query.stream())
    messages = [reshape_message(doc.id, doc.to_dict() or {}) for doc in docs]
    shuffle_messages(messages)

    return MessagePage(
        messages=messages,
        last_doc_id=docs[-1].id if docs else None,
        has_more=len(docs) == limit,
    )
