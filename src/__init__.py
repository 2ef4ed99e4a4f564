"""
Circle scoring modules.
"""

from .binarization import binarize, mask_to_image, foreground_count
from .boundary_scan import LineKind, SweepLine, BoundaryHit, scan_line
from .errors import CircleScanError, DecodeFailure, PhaseStall, IncompleteScore
from .image_prep import decode_image, load_image, crop_to_square
from .pipeline import ImageSession
from .scan_state import ScanPhase, ScanSession, ScanStateMachine, progress_ticks, run_scan
from .scoring import DiameterAxis, DiameterMeasurement, ScoreResult, compute_score, measure_diameter

__all__ = [
    "binarize",
    "mask_to_image",
    "foreground_count",
    "LineKind",
    "SweepLine",
    "BoundaryHit",
    "scan_line",
    "CircleScanError",
    "DecodeFailure",
    "PhaseStall",
    "IncompleteScore",
    "decode_image",
    "load_image",
    "crop_to_square",
    "ImageSession",
    "ScanPhase",
    "ScanSession",
    "ScanStateMachine",
    "progress_ticks",
    "run_scan",
    "DiameterAxis",
    "DiameterMeasurement",
    "ScoreResult",
    "compute_score",
    "measure_diameter",
]
