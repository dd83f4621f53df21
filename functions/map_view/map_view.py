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

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

from backend.context import AppContext
from shared import constants
from shared.marker_icon import MY_LOCATION_MARKER_OPTIONS
from shared.subscriptions import Subscription
from shared.types import DocumentChange, LatLng, Marker, User
from spots.repository import SpotRepository

logger = logging.getLogger(__name__)


class MapWidget(Protocol):
    """The map renderer. Provided by the UI toolkit, not implemented here."""

    def pan_to(self, position: LatLng) -> None:
        ...

    def set_markers(self, markers: List[Marker]) -> None:
        ...


class LocationSource(Protocol):
    """Continuous location feed (e.g. a geolocation watch)."""

    def watch_position(self, callback: Callable[[LatLng], None]) -> Subscription:
        ...


class MapView:
    """
    Headless controller for the spot map.

    Keeps the widget's markers in sync with the signed-in user's spots,
    follows the user's location and forwards clicks to the repository.
    `close()` releases every subscription taken by `start()`.
    """

    my_location_marker_options = MY_LOCATION_MARKER_OPTIONS

    def __init__(
        self,
        context: AppContext,
        repository: SpotRepository,
        widget: MapWidget,
        location_source: Optional[LocationSource] = None,
    ):
        self._context = context
        self.repository = repository
        self.widget = widget
        self.location_source = location_source

        self.my_location: Optional[LatLng] = None
        self._subscriptions: List[Subscription] = []
        self._spots_query: Optional[Subscription] = None
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._subscriptions.append(
            self.repository.pan_requests.subscribe(self.widget.pan_to)
        )
        if self.location_source is not None:
            self._subscriptions.append(
                self.location_source.watch_position(self._on_position)
            )
        else:
            logger.info("No location source; not following the user's location")
        # Subscribed last: the first callback fires immediately.
        self._subscriptions.append(
            self._context.session.on_auth_state_changed(self._on_auth_state_changed)
        )

    def close(self) -> None:
        self._unsubscribe_spots_query()
        while self._subscriptions:
            self._subscriptions.pop().unsubscribe()
        self._started = False

    def __enter__(self) -> MapView:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def markers(self) -> List[Marker]:
        return self.repository.markers

    def refresh(self) -> None:
        self.widget.set_markers(self.repository.fetch_spots())

    def center_to_user_location(self) -> None:
        if self.my_location is not None:
            self.widget.pan_to(self.my_location)

    def on_marker_click(self, marker: Marker) -> None:
        self.repository.open_spot_info(marker)

    def click_map(self) -> None:
        self.repository.select_spot(None)

    def _on_auth_state_changed(self, user: Optional[User]) -> None:
        self._unsubscribe_spots_query()
        if user is not None:
            logger.info("Watching spots of user %s", user.uid)
            self._spots_query = self._context.documents.watch(
                constants.spots_collection_path(user.uid), self._on_spot_changes
            )
        self.refresh()

    def _on_spot_changes(self, changes: List[DocumentChange]) -> None:
        for change in changes:
            logger.info("Spot %s %s", change.document_id, change.type)
        self.refresh()

    def _on_position(self, position: LatLng) -> None:
        if self.my_location is None:
            # Only pan to the user's location on the first fix.
            self.widget.pan_to(position)
        self.my_location = position

    def _unsubscribe_spots_query(self) -> None:
        if self._spots_query is not None:
            self._spots_query.unsubscribe()
            self._spots_query = None
