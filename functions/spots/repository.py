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

import concurrent.futures
import logging
import random
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, TypeVar

from dacite import Config, from_dict
from google.cloud.firestore_v1 import ArrayRemove, ArrayUnion

from backend.context import AppContext
from backend.errors import (
    BlobNotFoundError,
    InvalidArgumentError,
    SpotNotFoundError,
    UnimplementedError,
)
from shared import constants
from shared.json_utils import convert_keys
from shared.marker_icon import build_marker
from shared.subscriptions import Signal
from shared.types import (
    Checkpoint,
    CreateSpotParams,
    LatLng,
    Marker,
    Spot,
    SpotImage,
    TagIndex,
)
from spots.images import generate_image_id, to_png

logger = logging.getLogger(__name__)

T = TypeVar("T")


def spot_from_document(data: dict) -> Spot:
    return from_dict(
        data_class=Spot,
        data=convert_keys(data, "camel_to_snake"),
        config=Config(check_types=False),
    )


def spot_to_document(spot: Spot) -> dict:
    return convert_keys(asdict(spot), "snake_to_camel")


def _check_document_id(value: str, what: str) -> None:
    if not value or "/" in value or value in (".", ".."):
        raise InvalidArgumentError(f"Invalid {what}: {value!r}")


def _settle_all(
    tasks: Sequence[Callable[[], T]], max_workers: int, description: str
) -> List[T]:
    """
    Runs `tasks` concurrently and waits until every one of them has finished.
    Returns the results in order, or raises the first failure (in task order)
    once all tasks have settled.
    """
    if not tasks:
        return []
    with concurrent.futures.ThreadPoolExecutor(
        max_workers=min(max_workers, len(tasks))
    ) as executor:
        futures = [executor.submit(task) for task in tasks]
        concurrent.futures.wait(futures)

    errors = [e for e in (f.exception() for f in futures) if e is not None]
    for error in errors:
        logger.error("%s failed", description, exc_info=error)
    if errors:
        raise errors[0]
    return [f.result() for f in futures]


class SpotRepository:
    """
    Reads and writes the signed-in user's spots.

    Spot documents, the tag index and images live in independently failing
    stores. Create and delete order their side effects so that a failure
    leaves either nothing committed or evidence of what was left behind
    (the create checkpoint).
    """

    def __init__(self, context: AppContext, rng: Optional[random.Random] = None):
        self._context = context
        self._rng = rng or random.Random()

        self.spots: List[Spot] = []
        self.markers: List[Marker] = []
        self.selected_spot: Optional[Spot] = None

        self.spot_selected: Signal[Optional[Spot]] = Signal("spot_selected")
        self.pan_requests: Signal[LatLng] = Signal("pan_requests")

    @property
    def current_user(self):
        return self._context.session.current_user

    def close(self) -> None:
        self.spot_selected.clear()
        self.pan_requests.clear()

    def fetch_spots(self) -> List[Marker]:
        """
        Replaces the cached spots and markers with the current user's spots.
        Without a signed-in user both caches are emptied.
        """
        user = self.current_user
        if user is None:
            self.spots, self.markers = [], []
            return self.markers

        spots: List[Spot] = []
        markers: List[Marker] = []
        documents = self._context.documents.list(
            constants.spots_collection_path(user.uid)
        )
        for _, data in documents:
            spot = spot_from_document(data)
            spots.append(spot)
            markers.append(build_marker(spot))

        self.spots, self.markers = spots, markers
        return markers

    def create_spot(self, params: CreateSpotParams) -> Spot:
        """
        Creates (or overwrites, with merge semantics) a spot with its images
        and tag index entries.

        Order of side effects:
          1. checkpoint document at checkpoints/<uid>/createSpot/<id>
          2. concurrent uploads of the new images
          3. one batch: spot upsert, tag index unions, checkpoint delete

        If anything fails before the batch commits, the checkpoint stays and
        already uploaded images are left in storage.

        Raises:
            UnimplementedError: If `params.edit` is set.
            UnauthenticatedError: If no user is signed in.
            InvalidArgumentError: If the place id or a tag is not a valid
                document id. Image payloads Pillow cannot decode are not
                rejected; they are uploaded unconverted.
        """
        if params.edit:
            raise UnimplementedError("Unimplemented.")
        user = self._context.session.require_user("createSpot")
        settings = self._context.settings

        _check_document_id(params.place_id, "place id")
        for tag in params.tags:
            _check_document_id(tag, "tag")

        # Resolve ids, paths and payloads before anything is written.
        image_ids: set = set()
        slots: List[Optional[SpotImage]] = []
        uploads = []
        for index, image in enumerate(params.images):
            if image.file is None:
                slots.append(image.stored_image)
                continue
            data = to_png(image.file) if settings.normalize_images else image.file
            image_id = generate_image_id(image_ids, self._rng)
            storage_path = constants.spot_image_storage_path(
                user.uid, params.place_id, image_id
            )
            slots.append(None)
            uploads.append((index, storage_path, data))

        timestamp = datetime.now(timezone.utc)
        checkpoints_path = constants.create_spot_checkpoints_path(user.uid)
        checkpoint = Checkpoint(place_id=params.place_id, timestamp=timestamp)
        checkpoint_id = self._context.documents.add(
            checkpoints_path, convert_keys(asdict(checkpoint), "snake_to_camel")
        )
        logger.info(
            "Checkpoint %s written for spot %s (%d uploads)",
            checkpoint_id,
            params.place_id,
            len(uploads),
        )

        uploaded = _settle_all(
            [
                (lambda path=path, data=data: self._upload_image(path, data))
                for _, path, data in uploads
            ],
            settings.max_parallel_transfers,
            f"Image upload for spot {params.place_id}",
        )
        for (index, _, _), image in zip(uploads, uploaded):
            slots[index] = image

        spot = Spot(
            place_id=params.place_id,
            name=params.name,
            lat=params.lat,
            lng=params.lng,
            category=params.category,
            icon=params.icon,
            tags=list(params.tags),
            notes=params.notes,
            images=slots,
            created_at=timestamp,
            updated_at=timestamp,
        )

        batch = self._context.documents.batch()
        batch.set(
            constants.spot_path(user.uid, params.place_id),
            spot_to_document(spot),
            merge=True,
        )
        for tag in params.tags:
            batch.set(
                constants.tag_path(user.uid, tag),
                {constants.TAG_SPOTS_FIELD: ArrayUnion([params.place_id])},
                merge=True,
            )
        # The checkpoint goes away only together with the spot.
        batch.delete(f"{checkpoints_path}/{checkpoint_id}")
        batch.commit()

        logger.info("Created spot %s for user %s", params.place_id, user.uid)
        return spot

    def delete_spot(self, place_id: str) -> None:
        """
        Deletes a spot, its images and its tag index entries.

        Images are deleted first; images that are already gone count as
        deleted. The spot document and tag index updates are then committed
        in one batch. A crash between the two steps leaves the document
        pointing at deleted images.

        Raises:
            UnauthenticatedError: If no user is signed in.
            SpotNotFoundError: If the spot does not exist.
        """
        user = self._context.session.require_user("deleteSpot")
        spot_path = constants.spot_path(user.uid, place_id)

        data = self._context.documents.get(spot_path)
        if data is None:
            raise SpotNotFoundError(place_id)
        spot = spot_from_document(data)

        _settle_all(
            [
                (lambda path=image.storage_path: self.delete_image(path))
                for image in spot.images
            ],
            self._context.settings.max_parallel_transfers,
            f"Image delete for spot {place_id}",
        )

        batch = self._context.documents.batch()
        batch.delete(spot_path)
        for tag in spot.tags:
            batch.set(
                constants.tag_path(user.uid, tag),
                {constants.TAG_SPOTS_FIELD: ArrayRemove([place_id])},
                merge=True,
            )
        batch.commit()

        if self.selected_spot is not None and self.selected_spot.place_id == place_id:
            self.select_spot(None)
        logger.info("Deleted spot %s for user %s", place_id, user.uid)

    def delete_image(self, storage_path: str) -> None:
        """Deletes an image blob. An already deleted blob is not an error."""
        try:
            self._context.blobs.delete(storage_path)
        except BlobNotFoundError:
            logger.warning("Image %s already deleted", storage_path)

    def get_tag_index(self, tag: str) -> TagIndex:
        user = self._context.session.require_user("getTagIndex")
        _check_document_id(tag, "tag")
        data = self._context.documents.get(constants.tag_path(user.uid, tag)) or {}
        return TagIndex(tag=tag, spots=list(data.get(constants.TAG_SPOTS_FIELD, [])))

    def select_spot(self, spot: Optional[Spot]) -> None:
        self.selected_spot = spot
        self.spot_selected.emit(spot)

    def open_spot_info(self, marker: Marker) -> None:
        self.select_spot(marker.spot)

    def request_pan_to(self, position: LatLng) -> None:
        self.pan_requests.emit(position)

    def _upload_image(self, storage_path: str, data: bytes) -> SpotImage:
        blobs = self._context.blobs
        blobs.upload_bytes(
            storage_path, data, content_type=self._context.settings.image_content_type
        )
        return SpotImage(url=blobs.download_url(storage_path), storage_path=storage_path)
