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

# Document store collections.
USERS_COLLECTION = "users"
SPOTS_COLLECTION = "spots"
TAGS_COLLECTION = "tags"
CHECKPOINTS_COLLECTION = "checkpoints"
CREATE_SPOT_CHECKPOINTS_COLLECTION = "createSpot"

# Field holding the place ids in a tag index document.
TAG_SPOTS_FIELD = "spots"

# Image ids are random integers in [0, IMAGE_ID_UPPER_BOUND).
IMAGE_ID_UPPER_BOUND = 10_000_000
IMAGE_ID_MAX_ATTEMPTS = 100
IMAGE_FILE_EXTENSION = "png"


def user_path(uid: str) -> str:
    return f"{USERS_COLLECTION}/{uid}"


def spots_collection_path(uid: str) -> str:
    return f"{user_path(uid)}/{SPOTS_COLLECTION}"


def spot_path(uid: str, place_id: str) -> str:
    return f"{spots_collection_path(uid)}/{place_id}"


def tag_path(uid: str, tag: str) -> str:
    return f"{user_path(uid)}/{TAGS_COLLECTION}/{tag}"


def create_spot_checkpoints_path(uid: str) -> str:
    return f"{CHECKPOINTS_COLLECTION}/{uid}/{CREATE_SPOT_CHECKPOINTS_COLLECTION}"


def spot_image_storage_path(uid: str, place_id: str, image_id: str) -> str:
    """Blob path for a spot image: /users/<uid>/spots/<placeId>/<imageId>.png"""
    return f"/{spots_collection_path(uid)}/{place_id}/{image_id}.{IMAGE_FILE_EXTENSION}"
