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

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, List, Optional


class Tone(StrEnum):
    """Canonical tone labels of a thank-you gram (case-sensitive)."""

    BIG_HUG = "Big Hug"
    HIGH_FIVE = "High Five"
    COFFEE_BREAK = "Coffee Break"
    SUNSHINE = "Sunshine"


VALID_TONES = tuple(tone.value for tone in Tone)

# Older documents carry this label; readers present it as Tone.SUNSHINE.
LEGACY_SUNSHINE_TONE = "Ray of Sunshine"


@dataclass
class SeedMessage:
    """A row loaded from a seed source, before it is written to Firestore."""

    tone: Optional[str]
    message: Optional[str]
    location: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    date: Optional[str] = None


@dataclass
class MessagePageRequest:
    """Body of a paginated listing request.

    Both fields are left untyped: clients send arbitrary JSON and the
    listing code validates it.
    """

    last_doc_id: Any = None
    limit: Any = None


@dataclass
class MessagePage:
    messages: List[dict] = field(default_factory=list)
    last_doc_id: Optional[str] = None
    has_more: bool = False

    def as_dict(self) -> dict:
        # Document keys are passed through verbatim, so only the envelope
        # is camelCased here.
        return {
            "messages": self.messages,
            "lastDocId": self.last_doc_id,
            "hasMore": self.has_more,
        }


@dataclass
class SeedResult:
    success: bool
    count: int


@dataclass
class BackfillResult:
    success: bool
    backfilled: int
    total_documents: int
