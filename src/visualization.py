"""
Scan overlay visualization.

This module handles:
- Active sweep line drawing
- Endpoint and diameter overlay
- Score and per-diameter annotation
"""

import cv2
import numpy as np
from typing import Dict, Any, Mapping, Optional, Tuple

from .binarization import mask_to_image
from .boundary_scan import SweepLine, line_pixels
from .scan_state import ScanSession
from .scoring import DiameterAxis, DiameterMeasurement, ScoreResult
from .viz_constants import (
    Color,
    FontScale,
    FontThickness,
    Size,
    Layout,
    get_scaled_font_size,
    create_outlined_text,
)

AXIS_COLORS = {
    DiameterAxis.VERTICAL: Color.VERTICAL,
    DiameterAxis.HORIZONTAL: Color.HORIZONTAL,
    DiameterAxis.DIAGONAL_1: Color.DIAGONAL_1,
    DiameterAxis.DIAGONAL_2: Color.DIAGONAL_2,
}

AXIS_LABELS = {
    DiameterAxis.VERTICAL: "Vertical",
    DiameterAxis.HORIZONTAL: "Horizontal",
    DiameterAxis.DIAGONAL_1: "Diagonal1",
    DiameterAxis.DIAGONAL_2: "Diagonal2",
}


def get_scaled_params(image_height: int) -> Dict[str, Any]:
    """
    Calculate drawing parameters scaled to image height.

    Args:
        image_height: Height of the image in pixels

    Returns:
        Dictionary of font scales, stroke widths and text layout values
    """
    factor = max(image_height / Layout.REFERENCE_HEIGHT, 0.5)

    return {
        "title_scale": get_scaled_font_size(FontScale.TITLE, image_height),
        "body_scale": get_scaled_font_size(FontScale.BODY, image_height),
        "title_thickness": max(1, int(round(FontThickness.TITLE * factor))),
        "text_thickness": max(1, int(round(FontThickness.BODY * factor))),
        "line_thickness": max(1, int(round(Size.LINE_THICK * factor))),
        "endpoint_radius": max(2, int(round(Size.ENDPOINT_RADIUS * factor))),
        "x": int(Layout.TEXT_X * factor),
        "y_start": int(Layout.TEXT_Y_START * factor),
        "line_height": int(Layout.LINE_HEIGHT * factor),
    }


def _to_pixel(point: Tuple[float, float]) -> Tuple[int, int]:
    return int(round(point[0])), int(round(point[1]))


def draw_sweep_line(image: np.ndarray, line: Optional[SweepLine]) -> np.ndarray:
    """Draw the part of a sweep line that lies inside the image."""
    if line is None:
        return image

    xs, ys = line_pixels(image.shape, line)
    if xs.size == 0:
        return image

    params = get_scaled_params(image.shape[0])
    start = (int(xs[0]), int(ys[0]))
    end = (int(xs[-1]), int(ys[-1]))
    cv2.line(image, start, end, Color.SWEEP_LINE, params["line_thickness"])
    return image


def draw_diameters(
    image: np.ndarray,
    endpoints: Mapping[Any, Tuple[float, float]],
    diameters: Mapping[DiameterAxis, DiameterMeasurement],
) -> np.ndarray:
    """Draw every recorded endpoint and every closed diameter."""
    params = get_scaled_params(image.shape[0])

    for axis, diameter in diameters.items():
        cv2.line(image, _to_pixel(diameter.p1), _to_pixel(diameter.p2),
                 AXIS_COLORS[axis], params["line_thickness"])

    for point in endpoints.values():
        center = _to_pixel(point)
        cv2.circle(image, center, params["endpoint_radius"], Color.ENDPOINT, -1)
        cv2.circle(image, center, params["endpoint_radius"], Color.WHITE, Size.LINE_THIN)

    return image


def add_score_text(
    image: np.ndarray,
    diameters: Mapping[DiameterAxis, DiameterMeasurement],
    score: Optional[ScoreResult] = None,
    fail_reason: Optional[str] = None,
) -> np.ndarray:
    """Write the diameter table and the circle score in the top-left corner."""
    params = get_scaled_params(image.shape[0])
    x = params["x"]
    y = params["y_start"]

    if score is not None:
        create_outlined_text(image, f"Circle Score: {score.circle_score:.1f}", (x, y),
                             params["title_scale"], thickness=params["title_thickness"])
    elif fail_reason is not None:
        create_outlined_text(image, f"Failed: {fail_reason}", (x, y),
                             params["title_scale"], color=Color.TEXT_ERROR,
                             thickness=params["title_thickness"])
    y += int(params["line_height"] * 1.4)

    for axis in DiameterAxis:
        diameter = diameters.get(axis)
        length = f"{diameter.length:.0f}" if diameter is not None else "..."
        text = f"{AXIS_LABELS[axis]}: {length}"
        if score is not None:
            text += f"  dev {score.deviations[axis]:.1f}"
        create_outlined_text(image, text, (x, y), params["body_scale"],
                             color=AXIS_COLORS[axis], outline_color=Color.BLACK,
                             thickness=params["text_thickness"])
        y += params["line_height"]

    if score is not None:
        create_outlined_text(image, f"Avg: {score.average_diameter:.1f}  dev {score.average_deviation:.1f}",
                             (x, y), params["body_scale"], thickness=params["text_thickness"])

    return image


def create_score_visualization(
    mask: np.ndarray,
    session: ScanSession,
    sweep_line: Optional[SweepLine] = None,
    fail_reason: Optional[str] = None,
) -> np.ndarray:
    """
    Render the scan state over the black/white mask image.

    Args:
        mask: Boolean mask that was scanned
        session: Scan session snapshot to draw
        sweep_line: Active sweep line, drawn while the scan is in progress
        fail_reason: Shown in place of the score when the scan failed

    Returns:
        Annotated BGR image
    """
    vis = mask_to_image(mask)

    if not session.completed:
        vis = draw_sweep_line(vis, sweep_line)

    vis = draw_diameters(vis, session.endpoints, session.diameters)
    vis = add_score_text(vis, session.diameters, session.score, fail_reason=fail_reason)
    return vis
