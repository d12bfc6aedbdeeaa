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
"""Loads bundled seed sources and appends them to the messages collection."""

import csv
import os
from dataclasses import asdict
from typing import Callable, Dict, Iterable, List, Optional

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from grams.batch_writes import commit_in_batches
from shared.constants import MAX_BATCH_WRITE_OPERATIONS
from shared.firebase_constants import MESSAGES_COLLECTION
from shared.types import SeedMessage, SeedResult, Tone

THANK_YOU_CSV = "thank_you_grams.csv"
GLOBAL_THANK_YOU_CSV = "global_thank_you_grams.csv"
BECAUSE_OF_YOU_CSV = "because_of_you_samples.csv"

UNKNOWN_LOCATION = "Unknown"
DEFAULT_TITLE = "Message"

EXAMPLE_TONE_MESSAGES = [
    SeedMessage(
        tone=Tone.BIG_HUG.value,
        message="Just a heartfelt thank you for being you. You're truly one of a kind.",
        location="Austin, Texas",
    ),
    SeedMessage(
        tone=Tone.BIG_HUG.value,
        message="Sending a warm embrace your way. Your kindness has meant more than you know.",
        location="Portland, Oregon",
    ),
    SeedMessage(
        tone=Tone.HIGH_FIVE.value,
        message="You absolutely crushed it this week! High five from the whole team.",
        location="Denver, Colorado",
    ),
    SeedMessage(
        tone=Tone.HIGH_FIVE.value,
        message="Boom! Another win. Thanks for bringing the energy every single day.",
        location="Seattle, Washington",
    ),
    SeedMessage(
        tone=Tone.COFFEE_BREAK.value,
        message="Quick note to say I appreciate your professionalism and hard work.",
        location="Boston, Massachusetts",
    ),
    SeedMessage(
        tone=Tone.COFFEE_BREAK.value,
        message="Thanks for the smooth handoff. You've made this project so much easier.",
        location="Chicago, Illinois",
    ),
    SeedMessage(
        tone=Tone.SUNSHINE.value,
        message="Sending a little sunshine your way! Hope something wonderful happens today.",
        location="Miami, Florida",
    ),
    SeedMessage(
        tone=Tone.SUNSHINE.value,
        message="You're a ray of light. Thanks for always bringing the good vibes.",
        location="San Diego, California",
    ),
]


def derive_location(
    city: Optional[str], state: Optional[str] = None, country: Optional[str] = None
) -> str:
    """
    Builds the display location: "City, State", else "City, Country", else
    the city alone, else "Unknown". A region without a city stands alone.
    """
    city = (city or "").strip()
    region = (state or "").strip() or (country or "").strip()
    if region:
        return f"{city}, {region}" if city else region
    return city or UNKNOWN_LOCATION


def read_csv_rows(path: str) -> List[Dict[str, str]]:
    """Reads a header-row CSV file, skipping blank lines."""
    with open(path, newline="", encoding="utf-8") as f:
        return [
            row
            for row in csv.DictReader(f)
            # Cells beyond the header land under the key None as a list.
            if any(isinstance(value, str) and value.strip() for value in row.values())
        ]


def load_thank_you_messages(data_dir: str) -> List[SeedMessage]:
    """Columns: Tone, Message, City, State, Date."""
    return [
        SeedMessage(
            tone=row.get("Tone"),
            message=row.get("Message"),
            city=row.get("City"),
            state=row.get("State"),
            date=row.get("Date"),
            location=derive_location(row.get("City"), state=row.get("State")),
        )
        for row in read_csv_rows(os.path.join(data_dir, THANK_YOU_CSV))
    ]


def load_global_thank_you_messages(data_dir: str) -> List[SeedMessage]:
    """Columns: Tone, Message, City, Country, Date."""
    return [
        SeedMessage(
            tone=row.get("Tone"),
            message=row.get("Message"),
            city=row.get("City"),
            country=row.get("Country"),
            date=row.get("Date"),
            location=derive_location(row.get("City"), country=row.get("Country")),
        )
        for row in read_csv_rows(os.path.join(data_dir, GLOBAL_THANK_YOU_CSV))
    ]


def load_because_of_you_messages(data_dir: str) -> List[SeedMessage]:
    """Columns: Tone, Message, City, State, Country, Date."""
    messages = []
    for row in read_csv_rows(os.path.join(data_dir, BECAUSE_OF_YOU_CSV)):
        city = row.get("City") or ""
        state = (row.get("State") or "").strip()
        country = (row.get("Country") or "").strip()
        messages.append(
            SeedMessage(
                tone=row.get("Tone"),
                message=row.get("Message"),
                city=city,
                state=state,
                country=country,
                date=row.get("Date"),
                location=derive_location(city, state=state, country=country),
            )
        )
    return messages


def load_example_tone_messages(data_dir: Optional[str] = None) -> List[SeedMessage]:
    del data_dir  # The examples are not file backed.
    return list(EXAMPLE_TONE_MESSAGES)


SEED_SOURCES: Dict[str, Callable[[str], List[SeedMessage]]] = {
    "thank_you": load_thank_you_messages,
    "global": load_global_thank_you_messages,
    "because_of_you": load_because_of_you_messages,
    "examples": load_example_tone_messages,
}


def build_message_document(message: SeedMessage) -> dict:
    """
    Converts a seed row into the stored document.

    Unset optional fields are left out. `createdAt` is assigned by the server
    so the paginated listing can order the new documents.
    """
    doc = {key: value for key, value in asdict(message).items() if value is not None}
    doc["createdAt"] = SERVER_TIMESTAMP
    doc["title"] = message.tone or DEFAULT_TITLE
    doc["content"] = message.message
    return doc


def seed_messages(
    db,
    messages: Iterable[SeedMessage],
    collection_name: str = MESSAGES_COLLECTION,
    batch_limit: int = MAX_BATCH_WRITE_OPERATIONS,
    dry_run: bool = False,
) -> SeedResult:
    """
    Appends every message as a new auto-id document.

    Nothing is deduplicated; seeding the same source twice stores it twice.
    """
    messages = list(messages)
    if dry_run:
        return SeedResult(success=True, count=len(messages))

    collection = db.collection(collection_name)
    writes = (
        ("set", collection.document(), build_message_document(message))
        for message in messages
    )
    count = commit_in_batches(db, writes, batch_limit=batch_limit)
    return SeedResult(success=True, count=count)
