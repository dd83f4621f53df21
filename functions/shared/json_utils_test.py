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

import unittest
from datetime import datetime, timezone

from shared.json_utils import camel_to_snake, convert_keys, snake_to_camel


class JsonUtilsTest(unittest.TestCase):
    def test_key_helpers(self):
        self.assertEqual(snake_to_camel("storage_path"), "storagePath")
        self.assertEqual(snake_to_camel("place_id"), "placeId")
        self.assertEqual(snake_to_camel("name"), "name")
        self.assertEqual(camel_to_snake("storagePath"), "storage_path")
        self.assertEqual(camel_to_snake("createdAt"), "created_at")

    def test_convert_keys_recurses_into_lists(self):
        created = datetime(2026, 1, 1, tzinfo=timezone.utc)
        doc = {
            "place_id": "p1",
            "created_at": created,
            "tags": ["street_food", "late_night"],
            "images": [{"url": "u", "storage_path": "/a/1.png"}],
        }

        converted = convert_keys(doc, "snake_to_camel")

        self.assertEqual(
            converted,
            {
                "placeId": "p1",
                "createdAt": created,
                "tags": ["street_food", "late_night"],
                "images": [{"url": "u", "storagePath": "/a/1.png"}],
            },
        )
        self.assertEqual(convert_keys(converted, "camel_to_snake"), doc)

    def test_unknown_direction(self):
        with self.assertRaises(ValueError):
            convert_keys({}, "kebab")


if __name__ == "__main__":
    unittest.main()
