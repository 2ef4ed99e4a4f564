"""Tests for the eight-phase scan state machine and its progress driver."""

from __future__ import annotations

import math
from functools import partial

import numpy as np
import pytest

from src.binarization import binarize
from src.boundary_scan import LineKind, SweepLine
from src.errors import PhaseStall
from src.scan_state import (
    AXIS_PHASES,
    PHASE_TABLE,
    ScanPhase,
    ScanSession,
    ScanStateMachine,
    progress_ticks,
    resolve_sweep_line,
    run_scan,
)
from src.scoring import DiameterAxis
from src.scoring_constants import DEVIATION_PENALTY, SCORE_BASELINE

FINE_TICKS = partial(progress_ticks, 1000)

SCAN_ORDER = [
    ScanPhase.TOP_DOWN,
    ScanPhase.BOTTOM_UP,
    ScanPhase.LEFT_TO_RIGHT,
    ScanPhase.RIGHT_TO_LEFT,
    ScanPhase.DIAG_TLBR,
    ScanPhase.DIAG_BRTL,
    ScanPhase.DIAG_TRBL,
    ScanPhase.DIAG_BLTR,
    ScanPhase.COMPLETED,
]


class TestPhaseTable:
    def test_successors_follow_fixed_order(self):
        for phase, successor in zip(SCAN_ORDER, SCAN_ORDER[1:]):
            assert PHASE_TABLE[phase].successor is successor
        assert ScanPhase.COMPLETED not in PHASE_TABLE

    def test_each_axis_paired_by_two_phases(self):
        assert AXIS_PHASES == {
            DiameterAxis.VERTICAL: (ScanPhase.TOP_DOWN, ScanPhase.BOTTOM_UP),
            DiameterAxis.HORIZONTAL: (ScanPhase.LEFT_TO_RIGHT, ScanPhase.RIGHT_TO_LEFT),
            DiameterAxis.DIAGONAL_1: (ScanPhase.DIAG_TLBR, ScanPhase.DIAG_BRTL),
            DiameterAxis.DIAGONAL_2: (ScanPhase.DIAG_TRBL, ScanPhase.DIAG_BLTR),
        }


class TestResolveSweepLine:
    @pytest.mark.parametrize("phase, progress, expected", [
        (ScanPhase.TOP_DOWN, 0.0, SweepLine(LineKind.ROW, 0)),
        (ScanPhase.TOP_DOWN, 0.5, SweepLine(LineKind.ROW, 50)),
        (ScanPhase.TOP_DOWN, 1.0, SweepLine(LineKind.ROW, 100)),
        (ScanPhase.BOTTOM_UP, 0.0, SweepLine(LineKind.ROW, 100)),
        (ScanPhase.BOTTOM_UP, 1.0, SweepLine(LineKind.ROW, 0)),
        (ScanPhase.LEFT_TO_RIGHT, 0.0, SweepLine(LineKind.COLUMN, 0)),
        (ScanPhase.LEFT_TO_RIGHT, 1.0, SweepLine(LineKind.COLUMN, 100)),
        (ScanPhase.RIGHT_TO_LEFT, 0.0, SweepLine(LineKind.COLUMN, 100)),
        (ScanPhase.RIGHT_TO_LEFT, 1.0, SweepLine(LineKind.COLUMN, 0)),
        (ScanPhase.DIAG_TLBR, 0.0, SweepLine(LineKind.DIAG_SUM, 0)),
        (ScanPhase.DIAG_TLBR, 1.0, SweepLine(LineKind.DIAG_SUM, 200)),
        (ScanPhase.DIAG_BRTL, 0.0, SweepLine(LineKind.DIAG_SUM, 200, reverse=True)),
        (ScanPhase.DIAG_BRTL, 1.0, SweepLine(LineKind.DIAG_SUM, 0, reverse=True)),
        (ScanPhase.DIAG_TRBL, 0.0, SweepLine(LineKind.DIAG_DIFF, -100)),
        (ScanPhase.DIAG_TRBL, 0.5, SweepLine(LineKind.DIAG_DIFF, 0)),
        (ScanPhase.DIAG_TRBL, 1.0, SweepLine(LineKind.DIAG_DIFF, 100)),
        (ScanPhase.DIAG_BLTR, 0.0, SweepLine(LineKind.DIAG_DIFF, 100, reverse=True)),
        (ScanPhase.DIAG_BLTR, 1.0, SweepLine(LineKind.DIAG_DIFF, -100, reverse=True)),
    ])
    def test_progress_maps_to_line(self, phase, progress, expected):
        assert resolve_sweep_line(phase, 101, 101, progress) == expected

    def test_completed_has_no_line(self):
        with pytest.raises(ValueError):
            resolve_sweep_line(ScanPhase.COMPLETED, 10, 10, 0.5)


class TestScanStateMachine:
    def test_rejects_non_square_mask(self):
        with pytest.raises(ValueError, match="square"):
            ScanStateMachine(np.ones((10, 12), dtype=bool))

    def test_rejects_empty_mask(self):
        with pytest.raises(ValueError):
            ScanStateMachine(np.ones((0, 0), dtype=bool))

    def test_starts_at_top_down_with_no_state(self, disk_image):
        machine = ScanStateMachine(binarize(disk_image, 128))
        session = machine.session
        assert isinstance(session, ScanSession)
        assert machine.phase is ScanPhase.TOP_DOWN
        assert len(session.endpoints) == 0
        assert len(session.diameters) == 0
        assert session.last_progress is None
        assert not session.stalled
        assert machine.score is None

    def test_owns_a_private_copy_of_the_mask(self, disk_image):
        mask = binarize(disk_image, 128)
        expected = mask.copy()
        machine = ScanStateMachine(mask)
        assert not machine.mask.flags.writeable

        mask[:] = False  # caller keeps ownership of its array
        assert np.array_equal(machine.mask, expected)

        session = run_scan(machine, FINE_TICKS)
        assert session.completed
        assert session.score.circle_score > 99.0

    def test_phases_visited_in_order(self, disk_image):
        machine = ScanStateMachine(binarize(disk_image, 128))
        visited = [machine.phase]
        for _ in range(8):
            phase = machine.phase
            for progress in FINE_TICKS():
                machine.advance(progress)
                if machine.phase is not phase:
                    break
            visited.append(machine.phase)
        assert visited == SCAN_ORDER

    def test_perfect_disk_scores_near_100(self, disk_image):
        machine = ScanStateMachine(binarize(disk_image, 128))
        session = run_scan(machine, FINE_TICKS)

        assert session.completed
        assert len(session.endpoints) == 8
        for axis in DiameterAxis:
            assert abs(session.diameters[axis].length - 100) <= 2
        assert session.diameters[DiameterAxis.VERTICAL].length == pytest.approx(100.0)
        assert session.diameters[DiameterAxis.HORIZONTAL].length == pytest.approx(100.0)
        assert session.score.average_deviation < 1.0
        assert session.score.circle_score > 99.0

    def test_disk_endpoints(self, disk_image):
        session = run_scan(ScanStateMachine(binarize(disk_image, 128)), FINE_TICKS)
        assert session.endpoints[ScanPhase.TOP_DOWN] == (50.0, 0.0)
        assert session.endpoints[ScanPhase.BOTTOM_UP] == (50.0, 100.0)
        assert session.endpoints[ScanPhase.LEFT_TO_RIGHT] == (0.0, 50.0)
        assert session.endpoints[ScanPhase.RIGHT_TO_LEFT] == (100.0, 50.0)
        assert session.endpoints[ScanPhase.DIAG_TLBR] == (15.0, 15.0)
        assert session.endpoints[ScanPhase.DIAG_BRTL] == (85.0, 85.0)
        assert session.endpoints[ScanPhase.DIAG_TRBL] == (15.0, 85.0)
        assert session.endpoints[ScanPhase.DIAG_BLTR] == (85.0, 15.0)

    def test_diameters_pair_phase_endpoints(self, disk_image):
        session = run_scan(ScanStateMachine(binarize(disk_image, 128)), FINE_TICKS)
        for axis, (p1_phase, p2_phase) in AXIS_PHASES.items():
            diameter = session.diameters[axis]
            assert diameter.p1 == session.endpoints[p1_phase]
            assert diameter.p2 == session.endpoints[p2_phase]
            p1, p2 = diameter.p1, diameter.p2
            assert diameter.length == pytest.approx(math.hypot(p2[0] - p1[0], p2[1] - p1[1]))

    def test_ellipse_diameters(self, ellipse_image):
        session = run_scan(ScanStateMachine(binarize(ellipse_image, 128)), partial(progress_ticks, 2000))
        vertical = session.diameters[DiameterAxis.VERTICAL].length
        horizontal = session.diameters[DiameterAxis.HORIZONTAL].length
        diagonal1 = session.diameters[DiameterAxis.DIAGONAL_1].length
        diagonal2 = session.diameters[DiameterAxis.DIAGONAL_2].length

        assert vertical == pytest.approx(80.0)
        assert horizontal == pytest.approx(120.0)
        assert diagonal1 == pytest.approx(diagonal2, abs=1e-6)
        assert 100 < diagonal1 < 115

        lengths = [vertical, horizontal, diagonal1, diagonal2]
        average = sum(lengths) / 4
        average_deviation = sum(abs(average - length) for length in lengths) / 4
        assert session.score.average_diameter == pytest.approx(average)
        assert session.score.average_deviation == pytest.approx(average_deviation)
        assert session.score.circle_score == pytest.approx(SCORE_BASELINE - DEVIATION_PENALTY * average_deviation)
        assert session.score.circle_score == pytest.approx(92.6, abs=0.5)

    def test_ellipse_scores_below_disk(self, disk_image, ellipse_image):
        disk = run_scan(ScanStateMachine(binarize(disk_image, 128)), FINE_TICKS)
        ellipse = run_scan(ScanStateMachine(binarize(ellipse_image, 128)), FINE_TICKS)
        assert ellipse.score.circle_score < disk.score.circle_score

    def test_diameter_closes_only_when_both_phases_recorded(self, disk_image):
        machine = ScanStateMachine(binarize(disk_image, 128))
        machine.advance(0.0)
        assert machine.phase is ScanPhase.BOTTOM_UP
        assert ScanPhase.TOP_DOWN in machine.endpoints
        assert machine.diameters == {}
        machine.advance(0.0)
        assert set(machine.diameters) == {DiameterAxis.VERTICAL}

    def test_not_found_keeps_phase(self):
        mask = np.zeros((20, 20), dtype=bool)
        mask[10, 10] = True
        machine = ScanStateMachine(mask)
        machine.advance(0.2)
        assert machine.phase is ScanPhase.TOP_DOWN
        assert machine.session.last_progress == 0.2
        machine.advance(0.5)
        assert machine.phase is ScanPhase.BOTTOM_UP
        assert machine.endpoints[ScanPhase.TOP_DOWN] == (10.0, 10.0)
        assert machine.session.last_progress is None

    def test_redelivered_progress_is_noop(self):
        mask = np.zeros((20, 20), dtype=bool)
        mask[10, 10] = True
        machine = ScanStateMachine(mask)
        before = machine.advance(0.3)
        assert machine.advance(0.3) is before

    def test_progress_going_backwards_raises(self):
        machine = ScanStateMachine(np.zeros((10, 10), dtype=bool))
        machine.advance(0.6)
        with pytest.raises(ValueError, match="backwards"):
            machine.advance(0.4)

    @pytest.mark.parametrize("progress", [-0.1, 1.5, float("nan")])
    def test_progress_out_of_range_raises(self, progress):
        machine = ScanStateMachine(np.zeros((10, 10), dtype=bool))
        with pytest.raises(ValueError):
            machine.advance(progress)

    def test_sessions_are_snapshots(self, disk_image):
        machine = ScanStateMachine(binarize(disk_image, 128))
        start = machine.session
        machine.advance(0.0)
        assert start.phase is ScanPhase.TOP_DOWN
        assert len(start.endpoints) == 0
        assert machine.session is not start
        with pytest.raises(TypeError):
            machine.session.endpoints[ScanPhase.BOTTOM_UP] = (0.0, 0.0)

    def test_completed_score_is_read_only(self, disk_image):
        session = run_scan(ScanStateMachine(binarize(disk_image, 128)), FINE_TICKS)
        with pytest.raises(TypeError):
            session.score.deviations[DiameterAxis.VERTICAL] = 999.0
        assert session.score.deviations[DiameterAxis.VERTICAL] < 1.0

    def test_completed_advance_is_noop(self, disk_image):
        machine = ScanStateMachine(binarize(disk_image, 128))
        final = run_scan(machine, FINE_TICKS)
        assert machine.advance(0.7) is final
        assert machine.current_sweep_line(0.7) is None


class TestPhaseStall:
    def test_blank_mask_stalls_at_top_down(self, white_image):
        machine = ScanStateMachine(binarize(white_image, 0))
        for progress in (0.0, 0.25, 0.5, 0.99):
            machine.advance(progress)
        assert not machine.stalled

        with pytest.raises(PhaseStall) as excinfo:
            machine.advance(1.0)
        assert excinfo.value.phase is ScanPhase.TOP_DOWN
        assert excinfo.value.line == SweepLine(LineKind.ROW, 63)
        assert machine.stalled
        assert machine.phase is ScanPhase.TOP_DOWN
        assert machine.score is None

    def test_stalled_machine_keeps_raising(self, white_image):
        machine = ScanStateMachine(binarize(white_image, 0))
        with pytest.raises(PhaseStall):
            machine.advance(1.0)
        with pytest.raises(PhaseStall):
            machine.advance(1.0)

    def test_run_scan_reports_stall(self, white_image):
        machine = ScanStateMachine(binarize(white_image, 0))
        with pytest.raises(PhaseStall) as excinfo:
            run_scan(machine, partial(progress_ticks, 50))
        assert excinfo.value.fail_reason == "phase_stall"

    def test_short_tick_stream_is_closed_at_end(self, white_image):
        machine = ScanStateMachine(binarize(white_image, 0))
        with pytest.raises(PhaseStall):
            run_scan(machine, lambda: [0.0, 0.5])
        assert machine.session.last_progress == 1.0

    def test_stall_in_later_phase_keeps_earlier_endpoints(self):
        # A single pixel in the top-right corner is missed by the
        # first diagonal sweep once ticks skip over its line.
        mask = np.zeros((10, 10), dtype=bool)
        mask[0, 9] = True
        machine = ScanStateMachine(mask)
        with pytest.raises(PhaseStall) as excinfo:
            run_scan(machine, lambda: [0.0, 0.3, 0.6, 1.0])
        assert excinfo.value.phase is ScanPhase.DIAG_TLBR
        assert set(machine.diameters) == {DiameterAxis.VERTICAL, DiameterAxis.HORIZONTAL}


class TestProgressTicks:
    def test_spans_zero_to_one(self):
        ticks = list(progress_ticks(5))
        assert ticks == [0.0, 0.25, 0.5, 0.75, 1.0]

    def test_rejects_too_few_steps(self):
        with pytest.raises(ValueError):
            list(progress_ticks(1))
