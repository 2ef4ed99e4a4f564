"""
Scan session for one prepared image.

An ImageSession owns the mask and the state machine derived from a square
image at a given threshold. Changing the threshold throws both away and
starts a fresh scan from the first phase.
"""

import logging
from functools import partial
from typing import Optional

import numpy as np

from .binarization import binarize, foreground_count
from .errors import DecodeFailure
from .scan_constants import DEFAULT_THRESHOLD, DEFAULT_PROGRESS_STEPS
from .scan_state import ScanSession, ScanStateMachine, progress_ticks, run_scan
from .scoring import ScoreResult

logger = logging.getLogger(__name__)


class ImageSession:
    """
    One image under analysis with a live threshold.

    Usage:
        session = ImageSession(square_image, threshold=128)
        result = session.scan()
        session.rethreshold(100)  # discards the previous scan
    """

    def __init__(self, image: Optional[np.ndarray], threshold: int = DEFAULT_THRESHOLD):
        if image is None:
            raise DecodeFailure("No decoded image to analyze")

        self._image = image
        self._threshold = None
        self._mask = None
        self._machine = None
        self.rethreshold(threshold)

    @property
    def image(self) -> np.ndarray:
        return self._image

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def mask(self) -> np.ndarray:
        return self._mask

    @property
    def machine(self) -> ScanStateMachine:
        return self._machine

    @property
    def session(self) -> ScanSession:
        return self._machine.session

    @property
    def score(self) -> Optional[ScoreResult]:
        return self._machine.score

    def rethreshold(self, threshold: int) -> None:
        """
        Binarize again at a new threshold and reset the scan.

        The previous mask and scan state are discarded only after the new
        ones were built, so a rejected threshold leaves the session intact.
        """
        mask = binarize(self._image, threshold)
        machine = ScanStateMachine(mask)

        self._threshold = int(threshold)
        self._mask = mask
        self._machine = machine
        logger.debug(f"Threshold set to {threshold}: {foreground_count(mask)} foreground pixels, scan reset")

    def scan(self, steps: int = DEFAULT_PROGRESS_STEPS) -> ScanSession:
        """
        Drive the scan to completion with evenly spaced progress ticks.

        Raises:
            PhaseStall: If a phase never finds the boundary
        """
        return run_scan(self._machine, partial(progress_ticks, steps))
