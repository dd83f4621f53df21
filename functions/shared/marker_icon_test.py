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

from shared.marker_icon import (
    ICON_COLOR_MAP,
    MY_LOCATION_MARKER_OPTIONS,
    build_marker,
    icon_color,
)
from shared.types import LatLng, Spot


def _spot(icon):
    return Spot(
        place_id="p1",
        name="Corner cafe",
        lat=48.85,
        lng=2.35,
        category="food",
        icon=icon,
        tags=[],
        notes="",
        images=[],
    )


class MarkerIconTest(unittest.TestCase):
    def test_icon_color(self):
        self.assertEqual(icon_color("park"), ICON_COLOR_MAP["park"])
        self.assertEqual(icon_color("unknown"), "")

    def test_build_marker(self):
        spot = _spot("park")
        marker = build_marker(spot)

        self.assertEqual(marker.marker_id, "p1")
        self.assertEqual(marker.position, LatLng(48.85, 2.35))
        self.assertIs(marker.spot, spot)
        icon = marker.options.icon
        self.assertEqual(icon.fill_color, ICON_COLOR_MAP["park"])
        self.assertEqual(icon.anchor, (12, 17))
        self.assertEqual(icon.stroke_color, "white")
        self.assertEqual(icon.scale, 2)

    def test_unmapped_icon_still_builds(self):
        marker = build_marker(_spot(""))
        self.assertEqual(marker.options.icon.fill_color, "")

    def test_my_location_marker(self):
        self.assertEqual(MY_LOCATION_MARKER_OPTIONS.icon.fill_color, "#07f")
        self.assertFalse(MY_LOCATION_MARKER_OPTIONS.draggable)


if __name__ == "__main__":
    unittest.main()
