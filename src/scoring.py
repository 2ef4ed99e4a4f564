"""
Circle score computation.

This module handles:
- Diameter measurement between two boundary endpoints
- Aggregation of the four diameters into a circle score

Score policy constants are imported from scoring_constants.py.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Tuple, Any

from .errors import IncompleteScore
from .scoring_constants import SCORE_BASELINE, DEVIATION_PENALTY, DIAMETER_COUNT

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class DiameterAxis(str, Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    DIAGONAL_1 = "diagonal1"
    DIAGONAL_2 = "diagonal2"


@dataclass(frozen=True)
class DiameterMeasurement:
    """Two boundary endpoints and the distance between them."""
    axis: DiameterAxis
    p1: Point
    p2: Point
    length: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "p1": [float(self.p1[0]), float(self.p1[1])],
            "p2": [float(self.p2[0]), float(self.p2[1])],
            "length_px": float(self.length),
        }


@dataclass(frozen=True)
class ScoreResult:
    """Aggregate score of four diameters. Deviations are a read-only mapping."""
    average_diameter: float
    deviations: Mapping[DiameterAxis, float] = field(default_factory=lambda: MappingProxyType({}))
    average_deviation: float = 0.0
    circle_score: float = SCORE_BASELINE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average_diameter_px": float(self.average_diameter),
            "deviations_px": {axis.value: float(dev) for axis, dev in self.deviations.items()},
            "average_deviation_px": float(self.average_deviation),
            "circle_score": float(self.circle_score),
        }


def measure_diameter(axis: DiameterAxis, p1: Point, p2: Point) -> DiameterMeasurement:
    """Build a diameter measurement from its two endpoints."""
    length = math.hypot(p2[0] - p1[0], p2[1] - p1[1])
    return DiameterMeasurement(axis=axis, p1=(float(p1[0]), float(p1[1])),
                               p2=(float(p2[0]), float(p2[1])), length=length)


def compute_score(diameters: Mapping[DiameterAxis, DiameterMeasurement]) -> ScoreResult:
    """
    Compute the circle score from the four measured diameters.

    Uses constants:
    - SCORE_BASELINE: Score of a perfect circle (100)
    - DEVIATION_PENALTY: Points lost per pixel of average deviation (0.6)

    The score is not clamped; a very irregular shape can score below zero.

    Args:
        diameters: Measurements keyed by axis, all four axes required

    Returns:
        ScoreResult with average diameter, per-axis deviation, average
        deviation and circle score

    Raises:
        IncompleteScore: If any axis has not been measured
    """
    missing = [axis.value for axis in DiameterAxis if axis not in diameters]
    if missing:
        raise IncompleteScore(f"Cannot score circle, missing diameters: {', '.join(missing)}")

    lengths = {axis: diameters[axis].length for axis in DiameterAxis}
    average_diameter = sum(lengths.values()) / DIAMETER_COUNT

    deviations = {axis: abs(average_diameter - length) for axis, length in lengths.items()}
    average_deviation = sum(deviations.values()) / DIAMETER_COUNT

    circle_score = SCORE_BASELINE - average_deviation * DEVIATION_PENALTY

    logger.debug(f"Average diameter {average_diameter:.2f}px, "
                 f"average deviation {average_deviation:.2f}px, score {circle_score:.1f}")

    return ScoreResult(
        average_diameter=average_diameter,
        deviations=MappingProxyType(deviations),
        average_deviation=average_deviation,
        circle_score=circle_score,
    )
