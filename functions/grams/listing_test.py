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

import math
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from grams import listing
from main_testing_utils import InMemoryFirestore, create_timestamped_messages
from shared.types import MessagePageRequest


class ResolvePageLimitTest(unittest.TestCase):

    def test_resolve_page_limit(self):
        cases = [
            (None, 20),
            ("10", 20),
            (True, 20),
            ([5], 20),
            (0, 20),
            (-3, 20),
            (1, 1),
            (10, 10),
            (50, 50),
            (51, 50),
            (100, 50),
            (12.7, 12),
            (0.5, 20),
            (math.nan, 20),
            (math.inf, 20),
        ]
        for raw_limit, expected in cases:
            with self.subTest(raw_limit=raw_limit):
                self.assertEqual(listing.resolve_page_limit(raw_limit), expected)


class ReshapeMessageTest(unittest.TestCase):

    def test_defaults_title_and_content(self):
        row = listing.reshape_message("doc1", {"message": "hi"})

        self.assertEqual(
            row,
            {"message": "hi", "id": "doc1", "title": "", "content": "", "createdAt": None},
        )

    def test_content_falls_back_to_text(self):
        row = listing.reshape_message("doc1", {"text": "legacy"})
        self.assertEqual(row["content"], "legacy")

        row = listing.reshape_message("doc1", {"text": "legacy", "content": "new"})
        self.assertEqual(row["content"], "new")

    def test_normalized_fields_override_raw_data(self):
        row = listing.reshape_message(
            "doc1", {"id": "stale", "title": "Big Hug", "createdAt": ""}
        )

        self.assertEqual(row["id"], "doc1")
        self.assertEqual(row["title"], "Big Hug")
        self.assertIsNone(row["createdAt"])

    def test_created_at_is_iso_8601(self):
        eastern = timezone(timedelta(hours=-5))
        created_at = datetime(2024, 5, 1, 7, 30, 15, 123456, tzinfo=eastern)

        row = listing.reshape_message("doc1", {"createdAt": created_at})

        self.assertEqual(row["createdAt"], "2024-05-01T12:30:15.123Z")

    def test_non_timestamp_created_at_passes_through(self):
        row = listing.reshape_message("doc1", {"createdAt": "2024-05-01"})
        self.assertEqual(row["createdAt"], "2024-05-01")


class FetchAllMessagesTest(unittest.TestCase):

    def test_fetch_all_messages(self):
        db = InMemoryFirestore()
        db.add_documents(
            "messages",
            [{"tone": "Ray of Sunshine", "message": str(i)} for i in range(3)]
            + [{"message": "no tone"}],
        )

        messages = listing.fetch_all_messages(db)

        self.assertEqual(len(messages), 4)
        self.assertNotIn("Ray of Sunshine", [m.get("tone") for m in messages])
        self.assertEqual(
            sorted(m["message"] for m in messages if m.get("tone") == "Sunshine"),
            ["0", "1", "2"],
        )

    @patch("grams.listing.random.shuffle")
    def test_fetch_all_messages_shuffles(self, mock_shuffle):
        db = InMemoryFirestore()
        db.add_documents("messages", [{"message": "a"}, {"message": "b"}])

        messages = listing.fetch_all_messages(db)

        mock_shuffle.assert_called_once_with(messages)

    def test_reads_configured_collection(self):
        db = InMemoryFirestore()
        db.add_documents("staging_messages", [{"message": "a"}])

        self.assertEqual(listing.fetch_all_messages(db), [])
        self.assertEqual(
            listing.fetch_all_messages(db, collection_name="staging_messages"),
            [{"message": "a"}],
        )


class FetchMessagePageTest(unittest.TestCase):

    def setUp(self):
        self.db = InMemoryFirestore()

    def test_orders_newest_first(self):
        ids = create_timestamped_messages(self.db, 10)

        with patch("grams.listing.random.shuffle"):
            page = listing.fetch_message_page(self.db, MessagePageRequest(limit=4))

        self.assertEqual([m["id"] for m in page.messages], ids[::-1][:4])
        self.assertEqual(page.last_doc_id, ids[-4])
        self.assertTrue(page.has_more)

    def test_continues_after_cursor(self):
        ids = create_timestamped_messages(self.db, 10)

        page = listing.fetch_message_page(
            self.db, MessagePageRequest(last_doc_id=ids[-4], limit=4)
        )

        self.assertEqual({m["id"] for m in page.messages}, set(ids[2:6]))
        self.assertEqual(page.last_doc_id, ids[2])

    def test_unknown_cursor_is_ignored(self):
        ids = create_timestamped_messages(self.db, 10)

        page = listing.fetch_message_page(
            self.db, MessagePageRequest(last_doc_id="does-not-exist", limit=3)
        )

        self.assertEqual({m["id"] for m in page.messages}, set(ids[-3:]))

    def test_malformed_cursor_is_ignored(self):
        ids = create_timestamped_messages(self.db, 10)

        page = listing.fetch_message_page(
            self.db, MessagePageRequest(last_doc_id="a/b", limit=3)
        )

        self.assertEqual({m["id"] for m in page.messages}, set(ids[-3:]))

    def test_cursor_without_created_at_is_ignored(self):
        ids = create_timestamped_messages(self.db, 10)
        [undated_id] = self.db.add_documents("messages", [{"message": "undated"}])

        page = listing.fetch_message_page(
            self.db, MessagePageRequest(last_doc_id=undated_id, limit=3)
        )

        self.assertEqual({m["id"] for m in page.messages}, set(ids[-3:]))

    def test_numeric_cursor_is_stringified(self):
        self.db.collections["messages"] = {
            "42": {"message": "a", "createdAt": self.db.next_timestamp()},
            "43": {"message": "b", "createdAt": self.db.next_timestamp()},
        }

        page = listing.fetch_message_page(
            self.db, MessagePageRequest(last_doc_id=43, limit=5)
        )

        self.assertEqual([m["id"] for m in page.messages], ["42"])
        self.assertFalse(page.has_more)

    def test_documents_without_created_at_are_not_listed(self):
        create_timestamped_messages(self.db, 2)
        self.db.add_documents("messages", [{"message": "external writer"}])

        page = listing.fetch_message_page(self.db, MessagePageRequest())

        self.assertEqual(len(page.messages), 2)

    def test_empty_collection(self):
        page = listing.fetch_message_page(self.db, MessagePageRequest(limit=5))

        self.assertEqual(page.as_dict(), {"messages": [], "lastDocId": None, "hasMore": False})


if __name__ == "__main__":
    unittest.main()
