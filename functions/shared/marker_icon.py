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

import logging

from shared.types import Marker, MarkerIcon, MarkerOptions, Spot

logger = logging.getLogger(__name__)

# Fill color per spot icon identifier.
ICON_COLOR_MAP = {
    "restaurant": "#f57c00",
    "local_cafe": "#795548",
    "local_bar": "#ab47bc",
    "bakery_dining": "#ffb300",
    "hotel": "#3949ab",
    "park": "#43a047",
    "hiking": "#2e7d32",
    "beach_access": "#039be5",
    "museum": "#8d6e63",
    "shopping_bag": "#e91e63",
    "local_parking": "#546e7a",
    "place": "#e53935",
}

# Material "place" pin, 24x24 viewbox.
SPOT_MARKER_PATH = (
    "M12,11.5A2.5,2.5 0 0,1 9.5,9A2.5,2.5 0 0,1 12,6.5A2.5,2.5 0 0,1 14.5,9"
    "A2.5,2.5 0 0,1 12,11.5M12,2A7,7 0 0,0 5,9C5,14.25 12,22 12,22"
    "C12,22 19,14.25 19,9A7,7 0 0,0 12,2Z"
)

MY_LOCATION_MARKER_PATH = (
    "M12 7a5 5 0 1 0 0 10 5 5 0 0 0 0-10zm0-5a10 10 0 1 0 0 20 10 10 0 0 0 "
    "0-20zm0 18a8 8 0 1 1 0-16 8 8 0 0 1 0 16z"
)

MY_LOCATION_MARKER_OPTIONS = MarkerOptions(
    draggable=False,
    icon=MarkerIcon(
        path=MY_LOCATION_MARKER_PATH,
        anchor=(12, 12),
        fill_opacity=1,
        fill_color="#07f",
        stroke_weight=0,
        stroke_color="",
    ),
)


def icon_color(icon: str) -> str:
    """Returns the fill color for `icon`, or "" when the icon is unmapped."""
    color = ICON_COLOR_MAP.get(icon)
    if color is None:
        logger.debug("No marker color for icon %r", icon)
        return ""
    return color


def spot_marker_options(spot: Spot) -> MarkerOptions:
    return MarkerOptions(
        draggable=False,
        icon=MarkerIcon(
            path=SPOT_MARKER_PATH,
            anchor=(12, 17),
            fill_opacity=1,
            fill_color=icon_color(spot.icon),
            stroke_weight=2,
            stroke_color="white",
            scale=2,
            label_origin=(12, 15),
        ),
    )


def build_marker(spot: Spot) -> Marker:
    return Marker(position=spot.position, options=spot_marker_options(spot), spot=spot)
