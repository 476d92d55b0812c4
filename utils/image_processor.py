"""
Image processing utilities for Link Traffic Analyzer.

Normalizes provider screenshots before they are embedded in PDF reports.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


@dataclass
class PreparedImage:
    buffer: io.BytesIO
    width: int
    height: int


def prepare_screenshot(
    screenshot_bytes: bytes, max_dimension: int = 1600, quality: int = 85
) -> Optional[PreparedImage]:
    """
    Downscale and re-encode a screenshot as JPEG for PDF embedding.

    Full-page desktop screenshots can be several MB of PNG; a JPEG at report
    resolution keeps exported PDFs small.

    Args:
        screenshot_bytes: Original screenshot bytes (any Pillow-readable format)
        max_dimension: Maximum width/height in pixels
        quality: JPEG quality

    Returns:
        PreparedImage, or None if the bytes are not a readable image
    """
    if not screenshot_bytes:
        return None

    try:
        image = Image.open(io.BytesIO(screenshot_bytes))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not decode screenshot: {str(e)}")
        return None

    width, height = image.size
    if width > max_dimension or height > max_dimension:
        # Calculate new dimensions maintaining aspect ratio
        if width > height:
            new_width = max_dimension
            new_height = max(1, int(height * (max_dimension / width)))
        else:
            new_height = max_dimension
            new_width = max(1, int(width * (max_dimension / height)))
        image = image.resize((new_width, new_height), Image.Resampling.LANCZOS)

    # Convert RGBA to RGB if necessary (JPEG doesn't support transparency)
    if image.mode == "RGBA":
        rgb_image = Image.new("RGB", image.size, (255, 255, 255))
        rgb_image.paste(image, mask=image.split()[3])
        image = rgb_image
    elif image.mode != "RGB":
        image = image.convert("RGB")

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality, optimize=True)
    buffer.seek(0)

    return PreparedImage(buffer=buffer, width=image.width, height=image.height)
