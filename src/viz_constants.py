"""
Shared visualization constants for circle score overlays.

This module provides centralized configuration for fonts, colors, sizes, and
layout used when drawing the scan onto the binarized image.

Used by:
- visualization.py - Sweep line, endpoint, diameter and score overlay

Example usage:
    from src.viz_constants import Color, FontScale, FontThickness, FONT_FACE

    cv2.putText(img, "Score", (20, 40), FONT_FACE,
                FontScale.TITLE, Color.TEXT_PRIMARY,
                FontThickness.TITLE, cv2.LINE_AA)
"""

import cv2

# ============================================================================
# FONT SETTINGS
# ============================================================================

FONT_FACE = cv2.FONT_HERSHEY_SIMPLEX


class FontScale:
    """
    Font scale constants at the reference image height.

    Scaled with get_scaled_font_size() for larger or smaller images.
    """
    TITLE = 1.2          # Circle score line
    BODY = 0.8           # Per-diameter lines


class FontThickness:
    """Font stroke widths at the reference image height."""
    TITLE = 3
    BODY = 2


# ============================================================================
# COLORS (BGR format for OpenCV)
# ============================================================================

class Color:
    """
    Standard colors, BGR order as required by OpenCV.

    Usage:
        cv2.circle(img, center, radius, Color.ENDPOINT, -1)
    """
    WHITE = (255, 255, 255)
    BLACK = (0, 0, 0)
    RED = (0, 0, 255)
    GREEN = (0, 255, 0)
    BLUE = (255, 0, 0)
    CYAN = (255, 255, 0)
    MAGENTA = (255, 0, 255)
    ORANGE = (0, 128, 255)

    # Scan elements
    SWEEP_LINE = RED        # Active sweep line
    ENDPOINT = BLUE         # Recorded boundary endpoints

    # Diameter lines
    VERTICAL = GREEN
    HORIZONTAL = CYAN
    DIAGONAL_1 = MAGENTA
    DIAGONAL_2 = ORANGE

    # Text colors
    TEXT_PRIMARY = BLACK
    TEXT_OUTLINE = WHITE
    TEXT_ERROR = RED


# ============================================================================
# DRAWING SIZES
# ============================================================================

class Size:
    """Drawing sizes in pixels at the reference image height."""
    ENDPOINT_RADIUS = 4
    LINE_THICK = 2
    LINE_THIN = 1


# ============================================================================
# LAYOUT CONSTANTS
# ============================================================================

class Layout:
    """Text block positions in pixels from the top-left corner."""
    TEXT_X = 10
    TEXT_Y_START = 30
    LINE_HEIGHT = 26

    # Reference image height for scaling fonts and strokes
    REFERENCE_HEIGHT = 500


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def get_scaled_font_size(base_scale: float, image_height: int,
                         reference_height: int = Layout.REFERENCE_HEIGHT,
                         min_scale: float = 0.4) -> float:
    """
    Scale font size based on image height for consistent appearance.

    Example:
        # For a 1000px tall image, double the font size
        scale = get_scaled_font_size(FontScale.TITLE, 1000)
        # scale = 1.2 * 2 = 2.4
    """
    scaled = base_scale * image_height / reference_height
    return max(scaled, min_scale)


def create_outlined_text(image, text, position, font_scale,
                         color=Color.TEXT_PRIMARY, outline_color=Color.TEXT_OUTLINE,
                         thickness=FontThickness.BODY, outline_thickness=None):
    """Draw text over a thicker halo so it stays readable on black and white."""
    if outline_thickness is None:
        outline_thickness = thickness + 3

    cv2.putText(image, text, position, FONT_FACE,
                font_scale, outline_color, outline_thickness, cv2.LINE_AA)
    cv2.putText(image, text, position, FONT_FACE,
                font_scale, color, thickness, cv2.LINE_AA)


__all__ = [
    'FONT_FACE',
    'FontScale',
    'FontThickness',
    'Color',
    'Size',
    'Layout',
    'get_scaled_font_size',
    'create_outlined_text',
]
