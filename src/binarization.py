"""
Image binarization utilities.

This module handles:
- Brightness thresholding of a color image into a foreground mask
- Conversion of a mask back to a displayable black/white image
"""

import logging
import numpy as np

from .scan_constants import (
    MIN_THRESHOLD,
    MAX_THRESHOLD,
    BACKGROUND_VALUE,
    FOREGROUND_VALUE,
)

logger = logging.getLogger(__name__)


def _validate_threshold(threshold: int) -> int:
    if isinstance(threshold, (bool, np.bool_)) or not isinstance(threshold, (int, np.integer)):
        raise ValueError(f"Threshold must be an integer, got {threshold!r}")
    if not MIN_THRESHOLD <= threshold <= MAX_THRESHOLD:
        raise ValueError(
            f"Threshold {threshold} outside [{MIN_THRESHOLD}, {MAX_THRESHOLD}]"
        )
    return int(threshold)


def binarize(image: np.ndarray, threshold: int) -> np.ndarray:
    """
    Classify every pixel as foreground or background.

    Brightness is the unweighted channel mean (R+G+B)/3. A pixel is
    background when its brightness is strictly greater than the threshold,
    otherwise it is foreground. The comparison is done on integer channel
    sums (R+G+B > 3*threshold), which is exact for the true-division mean.

    Args:
        image: HxWx3 uint8 color image (BGR or RGB, order does not matter)
        threshold: Brightness threshold in [0, 255]

    Returns:
        Fresh HxW boolean mask, True for foreground pixels
    """
    threshold = _validate_threshold(threshold)

    if image is None or image.ndim != 3 or image.shape[2] < 3:
        shape = None if image is None else image.shape
        raise ValueError(f"Expected an HxWx3 color image, got shape {shape}")

    channel_sum = image[:, :, :3].astype(np.int32).sum(axis=2)
    mask = channel_sum <= 3 * threshold

    logger.debug(f"Binarized {image.shape[1]}x{image.shape[0]} image at threshold {threshold}: "
                 f"{int(np.count_nonzero(mask))} foreground pixels")
    return mask


def mask_to_image(mask: np.ndarray) -> np.ndarray:
    """
    Render a mask as a 3-channel black/white image.

    Background is white, foreground is black, ready for cv2.imencode.
    """
    if mask.ndim != 2:
        raise ValueError(f"Expected a 2D mask, got shape {mask.shape}")

    image = np.full((*mask.shape, 3), BACKGROUND_VALUE, dtype=np.uint8)
    image[mask.astype(bool)] = FOREGROUND_VALUE
    return image


def foreground_count(mask: np.ndarray) -> int:
    """Number of foreground pixels in a mask."""
    return int(np.count_nonzero(mask))
