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

import io
import logging
import random
from typing import Optional, Set

from PIL import Image, UnidentifiedImageError

from backend.errors import ImageIdExhaustedError
from shared.constants import IMAGE_ID_MAX_ATTEMPTS, IMAGE_ID_UPPER_BOUND

logger = logging.getLogger(__name__)


def generate_image_id(
    taken: Set[str],
    rng: Optional[random.Random] = None,
    max_attempts: int = IMAGE_ID_MAX_ATTEMPTS,
) -> str:
    """
    Returns a random numeric image id not in `taken`, and adds it to `taken`.

    Uniqueness is only checked against `taken` (the images of one create
    call), not against what is already in storage.

    Raises:
        ImageIdExhaustedError: If every attempt collided.
    """
    rng = rng or random
    for _ in range(max_attempts):
        image_id = str(rng.randrange(IMAGE_ID_UPPER_BOUND))
        if image_id not in taken:
            taken.add(image_id)
            return image_id
    raise ImageIdExhaustedError(
        f"Could not find an unused image id after {max_attempts} attempts"
    )


def to_png(data: bytes) -> bytes:
    """
    Returns `data` as PNG bytes. PNG input is returned unchanged; other
    formats Pillow can read are re-encoded. Payloads Pillow cannot decode
    (HEIC without a plugin, for example) are returned as-is so the upload
    still goes through.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.format == "PNG":
                return data
            source_format = img.format
            if img.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                img = img.convert("RGBA")
            buffer = io.BytesIO()
            img.save(buffer, format="PNG")
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("Uploading image without PNG conversion: %s", e)
        return data

    logger.debug("Converted %s image to PNG", source_format)
    return buffer.getvalue()
