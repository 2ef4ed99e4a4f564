"""
Image decoding and preparation.

Decoding is delegated to OpenCV. The photo is cropped to a centered square
before binarization, since the boundary scan requires a square mask.
"""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from .errors import DecodeFailure

logger = logging.getLogger(__name__)


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (JPG/PNG) into a BGR image.

    Raises:
        DecodeFailure: If the bytes are empty or not a decodable image
    """
    if not data:
        raise DecodeFailure("No image data to decode")

    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise DecodeFailure(f"Could not decode {len(data)} bytes of image data")

    return image


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Load a BGR image from disk.

    Raises:
        DecodeFailure: If the file cannot be read or decoded
    """
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise DecodeFailure(f"Could not load image: {path}")
    return image


def crop_to_square(image: np.ndarray) -> np.ndarray:
    """
    Crop the centered square of an image.

    The side is the shorter image dimension. The offset on the longer axis is
    floor((long - short) / 2), so a portrait camera frame loses equal bands at
    top and bottom (one extra row at the bottom when the difference is odd).

    Args:
        image: HxW or HxWxC image

    Returns:
        Contiguous copy of the square region
    """
    height, width = image.shape[:2]
    side = min(height, width)
    y0 = (height - side) // 2
    x0 = (width - side) // 2

    if (height, width) != (side, side):
        logger.debug(f"Cropping {width}x{height} to {side}x{side} at offset ({x0}, {y0})")

    return image[y0:y0 + side, x0:x0 + side].copy()
