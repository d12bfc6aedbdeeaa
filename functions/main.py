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

# Cloud functions for the Thank-you Grams social proof widgets.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
import json
from dataclasses import asdict
from functools import lru_cache
from typing import Callable, List, Optional

# Third-party library imports
from dacite import from_dict, Config
from firebase_admin import initialize_app, firestore
from firebase_functions import https_fn, logger, options

# Local application imports
from grams import backfill, listing, seeding
from shared.config import get_settings
from shared.json_utils import convert_keys, json_default
from shared.types import MessagePageRequest, SeedMessage

CORS_OPTIONS = options.CorsOptions(cors_origins="*", cors_methods=["get", "post"])

initialize_app()


@lru_cache(maxsize=1)
def get_db():
    """Returns the process-wide Firestore client."""
    return firestore.client()


def _json_response(
    payload: dict, status: int = 200, headers: Optional[dict] = None
) -> https_fn.Response:
    return https_fn.Response(
        json.dumps(payload, default=json_default),
        status=status,
        headers=headers,
        mimetype="application/json",
    )


def _method_not_allowed() -> https_fn.Response:
    return _json_response({"error": "Method not allowed"}, status=405)


def _server_error(message: str) -> https_fn.Response:
    return _json_response({"error": message}, status=500)


@https_fn.on_request(cors=CORS_OPTIONS, memory=options.MemoryOption.MB_256)
def get_social_proof_messages(req: https_fn.Request) -> https_fn.Response:
    """
    Returns every message in a random order, for the social proof widget.

    Legacy "Ray of Sunshine" tones are reported as "Sunshine". The response is
    cacheable by browsers and shared caches.
    """
    if req.method != "GET":
        return _method_not_allowed()

    try:
        settings = get_settings()
        messages = listing.fetch_all_messages(
            get_db(), collection_name=settings.messages_collection
        )
    except Exception as e:
        logger.error(f"Error fetching messages: {e}")
        return _server_error("Failed to fetch messages")

    return _json_response(
        {"messages": messages},
        headers={"Cache-Control": settings.cache_control_header},
    )


@https_fn.on_request(cors=CORS_OPTIONS, memory=options.MemoryOption.MB_256)
def get_messages(req: https_fn.Request) -> https_fn.Response:
    """
    Paginated messages for infinite scroll grids.

    Request (POST JSON body):
        {"lastDocId": "<optional document id>", "limit": 20}

    Response:
        {"messages": [{id, title, content, createdAt, ...}],
         "lastDocId": "<id of the last doc in this page or null>",
         "hasMore": true|false}
    """
    if req.method != "POST":
        return _method_not_allowed()

    body = req.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}
    page_request = from_dict(
        data_class=MessagePageRequest,
        data=convert_keys(body, "camel_to_snake"),
        config=Config(check_types=False),
    )

    try:
        settings = get_settings()
        page = listing.fetch_message_page(
            get_db(), page_request, collection_name=settings.messages_collection
        )
    except Exception as e:
        logger.error(f"Error fetching paginated messages: {e}")
        return _server_error("Failed to fetch messages")

    return _json_response(page.as_dict())


def _seed_from_source(
    req: https_fn.Request,
    load_messages: Callable[[str], List[SeedMessage]],
    description: str,
) -> https_fn.Response:
    if req.method != "POST":
        return _method_not_allowed()

    try:
        settings = get_settings()
        result = seeding.seed_messages(
            get_db(),
            load_messages(settings.seed_data_dir),
            collection_name=settings.messages_collection,
            batch_limit=settings.batch_write_limit,
        )
    except Exception as e:
        logger.error(f"Error seeding {description}: {e}")
        return _server_error(f"Failed to seed {description}")

    logger.info(f"Seeded {result.count} {description}")
    return _json_response(convert_keys(asdict(result), "snake_to_camel"))


@https_fn.on_request(cors=CORS_OPTIONS, memory=options.MemoryOption.MB_256)
def seed_thank_you_messages(req: https_fn.Request) -> https_fn.Response:
    """Seeds the messages collection from thank_you_grams.csv."""
    return _seed_from_source(req, seeding.load_thank_you_messages, "messages")


@https_fn.on_request(cors=CORS_OPTIONS, memory=options.MemoryOption.MB_256)
def seed_global_thank_you_messages(req: https_fn.Request) -> https_fn.Response:
    """Seeds the messages collection with global thank-you grams."""
    return _seed_from_source(
        req, seeding.load_global_thank_you_messages, "global messages"
    )


@https_fn.on_request(cors=CORS_OPTIONS, memory=options.MemoryOption.MB_256)
def seed_because_of_you_messages(req: https_fn.Request) -> https_fn.Response:
    """Seeds the messages collection with "because of you" samples."""
    return _seed_from_source(
        req, seeding.load_because_of_you_messages, "because-of-you messages"
    )


@https_fn.on_request(cors=CORS_OPTIONS, memory=options.MemoryOption.MB_256)
def seed_example_tone_messages(req: https_fn.Request) -> https_fn.Response:
    """Seeds 8 example messages, 2 per tone."""
    return _seed_from_source(
        req, seeding.load_example_tone_messages, "example messages"
    )


@https_fn.on_request(
    cors=CORS_OPTIONS, timeout_sec=540, memory=options.MemoryOption.MB_512
)
def backfill_tone_field(req: https_fn.Request) -> https_fn.Response:
    """
    Backfills a random valid tone on messages without one.

    Call once via POST to fix documents that don't have a tone set.
    """
    if req.method != "POST":
        return _method_not_allowed()

    try:
        settings = get_settings()
        result = backfill.backfill_tone(
            get_db(),
            collection_name=settings.messages_collection,
            batch_limit=settings.batch_write_limit,
        )
    except Exception as e:
        logger.error(f"Error backfilling tone: {e}")
        return _server_error("Failed to backfill tone field")

    return _json_response(convert_keys(asdict(result), "snake_to_camel"))
