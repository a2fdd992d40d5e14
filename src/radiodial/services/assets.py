"""Normalize uploaded station images and commit them to the blob tier."""

from __future__ import annotations

import io
import logging

import anyio.to_thread
from PIL import Image

from radiodial.exceptions import ImageProcessingError
from radiodial.persistence.blob import BlobClient

logger = logging.getLogger(__name__)

MAX_DIMENSION = 800
OUTPUT_FORMAT = "WEBP"
OUTPUT_QUALITY = 85
OUTPUT_CONTENT_TYPE = "image/webp"


def asset_key(station_id: str) -> str:
    return f"stations/{station_id}"


def normalize_image(raw: bytes) -> bytes:
    """
    Re-encode ``raw`` as WebP (quality 85) fitted inside 800x800.

    Aspect ratio is preserved and images are only ever shrunk.

    Raises:
        ImageProcessingError: If the bytes cannot be decoded or re-encoded.
    """
    # UnidentifiedImageError and truncated-file errors are both OSError
    try:
        with Image.open(io.BytesIO(raw)) as source:
            source.load()
            has_alpha = source.mode in ("RGBA", "LA") or "transparency" in source.info
            image = source.convert("RGBA" if has_alpha else "RGB")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageProcessingError(f"Cannot decode image: {e}") from e

    # thumbnail() keeps the aspect ratio and never enlarges
    image.thumbnail((MAX_DIMENSION, MAX_DIMENSION), Image.Resampling.LANCZOS)

    out = io.BytesIO()
    try:
        image.save(out, format=OUTPUT_FORMAT, quality=OUTPUT_QUALITY)
    except (OSError, ValueError, KeyError) as e:
        raise ImageProcessingError(f"Cannot encode image: {e}") from e
    return out.getvalue()


class AssetPipeline:
    """Turns an uploaded image into the station's single derived asset."""

    def __init__(self, blob: BlobClient) -> None:
        self._blob = blob

    async def commit(self, station_id: str, raw: bytes) -> str:
        """Normalize ``raw`` and store it at ``stations/{id}``; return its public URL.

        Nothing is written unless normalization succeeds. The put replaces any
        earlier image for the same station.
        """
        data = await anyio.to_thread.run_sync(normalize_image, raw)
        url = await self._blob.put(
            asset_key(station_id), data, content_type=OUTPUT_CONTENT_TYPE
        )
        logger.info("Image for %s uploaded to %s", station_id, url)
        return url
