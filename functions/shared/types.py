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
from datetime import datetime
from enum import StrEnum
from typing import Any, List, Optional, Tuple


@dataclass(frozen=True)
class User:
    """The signed-in user, as reported by the auth session."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float


@dataclass
class SpotImage:
    """A stored spot image. `storage_path` is the durable identity."""

    url: str
    storage_path: str


@dataclass
class SpotImageInput:
    """
    An image passed to create_spot: either new bytes to upload, or an image
    that is already in storage and is kept as is.
    """

    file: Optional[bytes] = None
    stored_image: Optional[SpotImage] = None

    def __post_init__(self):
        if self.file is None and self.stored_image is None:
            raise ValueError("SpotImageInput needs either a file or a stored_image.")


@dataclass
class Spot:
    """Schema for a spot document at users/<uid>/spots/<placeId>."""

    place_id: str
    name: str
    lat: float
    lng: float
    category: str
    icon: str
    tags: List[str]
    notes: str
    images: List[SpotImage]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def position(self) -> LatLng:
        return LatLng(lat=self.lat, lng=self.lng)


@dataclass
class CreateSpotParams:
    edit: bool
    place_id: str
    name: str
    lat: float
    lng: float
    category: str
    icon: str
    tags: List[str]
    notes: str
    images: List[SpotImageInput] = field(default_factory=list)


@dataclass
class TagIndex:
    """Reverse index document at users/<uid>/tags/<tag>."""

    tag: str
    spots: List[str] = field(default_factory=list)


@dataclass
class Checkpoint:
    """
    Schema for checkpoints/<uid>/createSpot/<checkpointId>, written before
    images are uploaded and removed in the batch that commits the spot.
    """

    place_id: str
    timestamp: Any  # datetime, converted to a Firestore timestamp when written


@dataclass(frozen=True)
class MarkerIcon:
    path: str
    anchor: Tuple[float, float]
    fill_opacity: float
    fill_color: str
    stroke_weight: float
    stroke_color: str
    scale: float = 1
    label_origin: Optional[Tuple[float, float]] = None


@dataclass(frozen=True)
class MarkerOptions:
    draggable: bool
    icon: MarkerIcon


@dataclass(frozen=True)
class Marker:
    """Rendering-ready projection of a spot. Rebuilt on every fetch."""

    position: LatLng
    options: MarkerOptions
    spot: Spot

    @property
    def marker_id(self) -> str:
        return self.spot.place_id


class ChangeType(StrEnum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class DocumentChange:
    """One live query event for a single document."""

    type: ChangeType
    document_id: str
    data: Optional[dict] = None
