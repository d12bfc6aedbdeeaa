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

import json
import unittest
from datetime import datetime, timedelta, timezone

from shared.json_utils import convert_keys, format_timestamp, json_default


class ConvertKeysTest(unittest.TestCase):

    def test_converts_nested_keys(self):
        self.assertEqual(
            convert_keys(
                {"total_documents": 3, "nested": [{"last_doc_id": None}]},
                "snake_to_camel",
            ),
            {"totalDocuments": 3, "nested": [{"lastDocId": None}]},
        )
        self.assertEqual(
            convert_keys({"lastDocId": "abc", "limit": 5}, "camel_to_snake"),
            {"last_doc_id": "abc", "limit": 5},
        )

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            convert_keys({}, "kebab")


class FormatTimestampTest(unittest.TestCase):

    def test_format_timestamp(self):
        self.assertEqual(
            format_timestamp(datetime(2024, 1, 2, 3, 4, 5)), "2024-01-02T03:04:05.000Z"
        )
        self.assertEqual(
            format_timestamp(
                datetime(2024, 1, 2, 3, 4, 5, 999999, tzinfo=timezone(timedelta(hours=2)))
            ),
            "2024-01-02T01:04:05.999Z",
        )

    def test_json_default(self):
        payload = {"createdAt": datetime(2024, 1, 2, tzinfo=timezone.utc), "ref": object}

        decoded = json.loads(json.dumps(payload, default=json_default))

        self.assertEqual(decoded["createdAt"], "2024-01-02T00:00:00.000Z")
        self.assertEqual(decoded["ref"], str(object))


if __name__ == "__main__":
    unittest.main()
