"""
Eight-phase boundary scan state machine.

The scan sweeps a line across the mask in eight directions. Each phase maps
an externally supplied progress value in [0, 1] to a concrete sweep line,
scans it, and on the first hit records the midpoint of the hit as that
phase's endpoint before handing over to the next phase. Opposite phases
pair up into four diameters:

    TOP_DOWN      + BOTTOM_UP      -> vertical
    LEFT_TO_RIGHT + RIGHT_TO_LEFT  -> horizontal
    DIAG_TLBR     + DIAG_BRTL      -> diagonal 1 (x + y = k lines)
    DIAG_TRBL     + DIAG_BLTR      -> diagonal 2 (x - y = k lines)

The machine performs no scheduling. Progress comes from a driver such as
run_scan(), a UI animation clock, or a test.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Iterator, Mapping, Optional, Tuple

import numpy as np

from .boundary_scan import LineKind, SweepLine, scan_line
from .errors import PhaseStall
from .scan_constants import DEFAULT_PROGRESS_STEPS, MIN_PROGRESS_STEPS, PROGRESS_END
from .scoring import (
    DiameterAxis,
    DiameterMeasurement,
    ScoreResult,
    compute_score,
    measure_diameter,
)

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class ScanPhase(str, Enum):
    TOP_DOWN = "top_down"
    BOTTOM_UP = "bottom_up"
    LEFT_TO_RIGHT = "left_to_right"
    RIGHT_TO_LEFT = "right_to_left"
    DIAG_TLBR = "diag_tlbr"  # Top-left to bottom-right
    DIAG_BRTL = "diag_brtl"  # Bottom-right to top-left
    DIAG_TRBL = "diag_trbl"  # Top-right to bottom-left
    DIAG_BLTR = "diag_bltr"  # Bottom-left to top-right
    COMPLETED = "completed"


# =============================================================================
# Sweep Line Resolvers
# =============================================================================

def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _top_down(width: int, height: int, progress: float) -> SweepLine:
    return SweepLine(LineKind.ROW, _clamp(math.floor(height * progress), 0, height - 1))


def _bottom_up(width: int, height: int, progress: float) -> SweepLine:
    return SweepLine(LineKind.ROW, _clamp(math.floor(height * (1.0 - progress)), 0, height - 1))


def _left_to_right(width: int, height: int, progress: float) -> SweepLine:
    return SweepLine(LineKind.COLUMN, _clamp(math.floor(width * progress), 0, width - 1))


def _right_to_left(width: int, height: int, progress: float) -> SweepLine:
    return SweepLine(LineKind.COLUMN, _clamp(math.floor(width * (1.0 - progress)), 0, width - 1))


def _diag_tlbr(width: int, height: int, progress: float) -> SweepLine:
    k_max = width + height - 2
    return SweepLine(LineKind.DIAG_SUM, math.floor(progress * k_max))


def _diag_brtl(width: int, height: int, progress: float) -> SweepLine:
    k_max = width + height - 2
    return SweepLine(LineKind.DIAG_SUM, math.floor((1.0 - progress) * k_max), reverse=True)


def _diag_trbl(width: int, height: int, progress: float) -> SweepLine:
    k_min = -(height - 1)
    k_max = width - 1
    return SweepLine(LineKind.DIAG_DIFF, k_min + math.floor(progress * (k_max - k_min)))


def _diag_bltr(width: int, height: int, progress: float) -> SweepLine:
    k_min = -(height - 1)
    k_max = width - 1
    return SweepLine(LineKind.DIAG_DIFF, k_max - math.floor(progress * (k_max - k_min)), reverse=True)


# =============================================================================
# Phase Table
# =============================================================================

@dataclass(frozen=True)
class PhaseSpec:
    """
    Static description of one scan phase.

    Attributes:
        resolve: Maps (width, height, progress) to the sweep line to scan
        axis: Diameter this phase contributes an endpoint to
        slot: "p1" or "p2", position of the endpoint within the diameter
        successor: Phase entered after this one succeeds
    """
    resolve: Callable[[int, int, float], SweepLine]
    axis: DiameterAxis
    slot: str
    successor: ScanPhase


PHASE_TABLE: Mapping[ScanPhase, PhaseSpec] = MappingProxyType({
    ScanPhase.TOP_DOWN: PhaseSpec(_top_down, DiameterAxis.VERTICAL, "p1", ScanPhase.BOTTOM_UP),
    ScanPhase.BOTTOM_UP: PhaseSpec(_bottom_up, DiameterAxis.VERTICAL, "p2", ScanPhase.LEFT_TO_RIGHT),
    ScanPhase.LEFT_TO_RIGHT: PhaseSpec(_left_to_right, DiameterAxis.HORIZONTAL, "p1", ScanPhase.RIGHT_TO_LEFT),
    ScanPhase.RIGHT_TO_LEFT: PhaseSpec(_right_to_left, DiameterAxis.HORIZONTAL, "p2", ScanPhase.DIAG_TLBR),
    ScanPhase.DIAG_TLBR: PhaseSpec(_diag_tlbr, DiameterAxis.DIAGONAL_1, "p1", ScanPhase.DIAG_BRTL),
    ScanPhase.DIAG_BRTL: PhaseSpec(_diag_brtl, DiameterAxis.DIAGONAL_1, "p2", ScanPhase.DIAG_TRBL),
    ScanPhase.DIAG_TRBL: PhaseSpec(_diag_trbl, DiameterAxis.DIAGONAL_2, "p1", ScanPhase.DIAG_BLTR),
    ScanPhase.DIAG_BLTR: PhaseSpec(_diag_bltr, DiameterAxis.DIAGONAL_2, "p2", ScanPhase.COMPLETED),
})

# Phases supplying (p1, p2) of each diameter
AXIS_PHASES: Dict[DiameterAxis, Tuple[ScanPhase, ScanPhase]] = {
    axis: tuple(
        next(phase for phase, spec in PHASE_TABLE.items() if spec.axis is axis and spec.slot == slot)
        for slot in ("p1", "p2")
    )
    for axis in DiameterAxis
}


def resolve_sweep_line(phase: ScanPhase, width: int, height: int, progress: float) -> SweepLine:
    """Map a phase and progress value to the sweep line scanned at that moment."""
    spec = PHASE_TABLE.get(phase)
    if spec is None:
        raise ValueError(f"Phase {phase.value} has no sweep line")
    return spec.resolve(width, height, progress)


# =============================================================================
# Scan Session
# =============================================================================

def _frozen(mapping: Optional[dict] = None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class ScanSession:
    """
    Immutable snapshot of scan progress.

    A new session replaces the old one whenever the scan state changes, so a
    session held by a caller never changes underneath it.
    """
    phase: ScanPhase = ScanPhase.TOP_DOWN
    endpoints: Mapping[ScanPhase, Point] = field(default_factory=_frozen)
    diameters: Mapping[DiameterAxis, DiameterMeasurement] = field(default_factory=_frozen)
    last_progress: Optional[float] = None
    stalled: bool = False
    score: Optional[ScoreResult] = None

    @property
    def completed(self) -> bool:
        return self.phase is ScanPhase.COMPLETED


class ScanStateMachine:
    """
    Sequences the eight sweep phases over a square mask.

    Usage:
        machine = ScanStateMachine(mask)
        for progress in progress_ticks():
            machine.advance(progress)
    """

    def __init__(self, mask: np.ndarray):
        mask = np.asarray(mask, dtype=bool)
        if mask.ndim != 2 or mask.size == 0:
            raise ValueError(f"Expected a non-empty 2D mask, got shape {mask.shape}")
        if mask.shape[0] != mask.shape[1]:
            raise ValueError(f"Mask must be square, got {mask.shape[1]}x{mask.shape[0]}")

        self._mask = mask.copy()
        self._mask.flags.writeable = False
        self._session = ScanSession()

    @property
    def session(self) -> ScanSession:
        return self._session

    @property
    def phase(self) -> ScanPhase:
        return self._session.phase

    @property
    def completed(self) -> bool:
        return self._session.completed

    @property
    def stalled(self) -> bool:
        return self._session.stalled

    @property
    def endpoints(self) -> Mapping[ScanPhase, Point]:
        return self._session.endpoints

    @property
    def diameters(self) -> Mapping[DiameterAxis, DiameterMeasurement]:
        return self._session.diameters

    @property
    def score(self) -> Optional[ScoreResult]:
        return self._session.score

    @property
    def mask(self) -> np.ndarray:
        return self._mask

    def current_sweep_line(self, progress: float) -> Optional[SweepLine]:
        """Sweep line of the active phase at a progress value, None once completed."""
        if self.completed:
            return None
        height, width = self._mask.shape
        return resolve_sweep_line(self.phase, width, height, progress)

    def advance(self, progress: float) -> ScanSession:
        """
        Scan the sweep line for the active phase at the given progress.

        Progress must not decrease within a phase. Re-delivering the last
        progress value is a no-op.

        Args:
            progress: Position of the sweep within the active phase, in [0, 1]

        Returns:
            The current session after this step

        Raises:
            ValueError: If progress is outside [0, 1] or went backwards
            PhaseStall: If progress reached 1.0 without finding the boundary
        """
        session = self._session
        if session.completed:
            return session

        if session.stalled:
            raise PhaseStall(session.phase, self.current_sweep_line(PROGRESS_END))

        progress = float(progress)
        if not 0.0 <= progress <= PROGRESS_END:
            raise ValueError(f"Progress must be in [0, 1], got {progress}")

        if session.last_progress is not None:
            if progress < session.last_progress:
                raise ValueError(
                    f"Progress went backwards in phase {session.phase.value}: "
                    f"{progress} < {session.last_progress}"
                )
            if progress == session.last_progress:
                return session

        line = self.current_sweep_line(progress)
        hit = scan_line(self._mask, line)

        if hit is None:
            stalled = progress >= PROGRESS_END
            self._session = replace(session, last_progress=progress, stalled=stalled)
            if stalled:
                logger.warning(f"Phase {session.phase.value} reached the end of its sweep "
                               f"without finding the boundary")
                raise PhaseStall(session.phase, line)
            return self._session

        self._session = self._record_endpoint(session, hit.midpoint)
        logger.debug(f"Phase {session.phase.value} hit {line.kind.value} {line.index} "
                     f"at progress {progress:.3f}, endpoint ({hit.midpoint[0]:.1f}, {hit.midpoint[1]:.1f})")
        return self._session

    def _record_endpoint(self, session: ScanSession, endpoint: Point) -> ScanSession:
        spec = PHASE_TABLE[session.phase]

        endpoints = dict(session.endpoints)
        endpoints[session.phase] = endpoint

        diameters = dict(session.diameters)
        p1_phase, p2_phase = AXIS_PHASES[spec.axis]
        if p1_phase in endpoints and p2_phase in endpoints:
            diameters[spec.axis] = measure_diameter(spec.axis, endpoints[p1_phase], endpoints[p2_phase])
            logger.debug(f"Diameter {spec.axis.value}: {diameters[spec.axis].length:.2f}px")

        score = None
        if spec.successor is ScanPhase.COMPLETED:
            score = compute_score(diameters)

        return ScanSession(
            phase=spec.successor,
            endpoints=_frozen(endpoints),
            diameters=_frozen(diameters),
            last_progress=None,
            stalled=False,
            score=score,
        )


# =============================================================================
# Progress Driver
# =============================================================================

def progress_ticks(steps: int = DEFAULT_PROGRESS_STEPS) -> Iterator[float]:
    """
    Evenly spaced progress values from 0.0 to exactly 1.0.

    Stands in for the animation clock that drives each phase.
    """
    if steps < MIN_PROGRESS_STEPS:
        raise ValueError(f"Need at least {MIN_PROGRESS_STEPS} progress steps, got {steps}")
    for value in np.linspace(0.0, PROGRESS_END, steps):
        yield float(value)


def run_scan(
    machine: ScanStateMachine,
    ticks: Callable[[], Iterable[float]] = progress_ticks,
) -> ScanSession:
    """
    Drive a machine through every phase until it completes.

    Each phase gets a fresh tick stream from `ticks`. A stream that ends
    before 1.0 is closed out with a final tick at 1.0, so every phase either
    finds the boundary or stalls.

    Raises:
        PhaseStall: If any phase never finds the boundary
    """
    while not machine.completed:
        phase = machine.phase
        for progress in ticks():
            machine.advance(progress)
            if machine.phase is not phase:
                break
        else:
            machine.advance(PROGRESS_END)

    return machine.session
