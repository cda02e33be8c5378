"""
Module: extractor.utils.images

Purpose:
    Cropping and JPEG encoding for rendered pages.

Key Functions:
    - crop_region(): Cut a CropBox out of a rendered page
    - encode_jpeg(): Encode an image as standalone JPEG bytes
    - decode_image(): Load JPEG/PNG bytes back into an RGB image

Dependencies:
    - PIL: Image manipulation
    - core.models: CropBox

Used By:
    - extractor.page_processor: Question and answer crops
    - extractor.detection.ocr: OCR preprocessing round-trip
"""

from __future__ import annotations

import io

from PIL import Image

from qudrat_toolkit.core.models import CropBox

# Stored crops; visually lossless for printed text at scale 2.
CROP_JPEG_QUALITY = 80


def crop_region(page_image: Image.Image, box: CropBox) -> Image.Image:
    """
    Crop a calibrated region from a rendered page.

    Parts of the box that fall outside the page come back black rather
    than raising, so one document with a slightly smaller page size
    still produces crops.

    Args:
        page_image: Page rendered at the calibration scale
        box: Region to cut out

    Returns:
        New image of exactly the box's integer size
    """
    return page_image.crop(box.as_pil_box())


def encode_jpeg(image: Image.Image, quality: int = CROP_JPEG_QUALITY) -> bytes:
    """
    Encode an image as JPEG.

    Args:
        image: Image in any mode; alpha and palettes are flattened to RGB.
        quality: Pillow JPEG quality, 1-100.

    Returns:
        JPEG bytes.
    """
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    buf = io.BytesIO()
    image.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def decode_image(data: bytes) -> Image.Image:
    """Decode encoded image bytes into an RGB image."""
    with Image.open(io.BytesIO(data)) as img:
        return img.convert("RGB")
