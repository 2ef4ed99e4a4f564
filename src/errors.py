"""
Error types for the circle scoring pipeline.

All errors are local and recoverable: callers may re-threshold the image
and run the pipeline again from binarization.
"""

from typing import Any, Optional


class CircleScanError(Exception):
    """Base class for circle scoring failures."""

    fail_reason = "scan_failed"


class DecodeFailure(CircleScanError):
    """The image codec returned no image."""

    fail_reason = "image_decode_failed"


class PhaseStall(CircleScanError):
    """
    A sweep phase reached progress 1.0 without finding the boundary.

    Raised when the sweep line never intersected any foreground pixel, e.g.
    the mask is empty or the square crop excluded the drawn shape.
    """

    fail_reason = "phase_stall"

    def __init__(self, phase: Any, line: Optional[Any] = None):
        self.phase = phase
        self.line = line
        name = getattr(phase, "value", phase)
        super().__init__(f"Scan phase '{name}' finished without finding the boundary")


class IncompleteScore(CircleScanError):
    """Score requested before all four diameters were measured."""

    fail_reason = "incomplete_score"
