#!/usr/bin/env python3
"""
Hand-Drawn Circle Score Tool

Measures how circular a hand-drawn black-on-white shape is from a single
photo. The photo is cropped to a centered square, binarized at a brightness
threshold, and swept in eight directions to measure four diameters. The
spread of those diameters gives the circle score.

Usage:
    python measure_circle.py --input drawing.jpg --output result.json [--debug overlay.png]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Dict, Any

import cv2
import numpy as np

from src.binarization import foreground_count, mask_to_image
from src.debug_observer import DebugObserver
from src.errors import CircleScanError, DecodeFailure, PhaseStall
from src.image_prep import crop_to_square, load_image
from src.pipeline import ImageSession
from src.scan_constants import DEFAULT_THRESHOLD, DEFAULT_PROGRESS_STEPS, PROGRESS_END
from src.scan_state import ScanSession
from src.scoring import DiameterAxis
from src.visualization import create_score_visualization


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Score how circular a hand-drawn circle is from a photo.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python measure_circle.py --input drawing.jpg --output result.json
    python measure_circle.py --input drawing.jpg --output result.json --threshold 100
    python measure_circle.py --input drawing.jpg --output result.json --debug overlay.png
        """,
    )

    # Required arguments
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Path to input image (JPG/PNG)",
    )
    parser.add_argument(
        "--output",
        type=str,
        required=True,
        help="Path to output JSON file",
    )

    # Optional arguments
    parser.add_argument(
        "--threshold",
        type=int,
        default=DEFAULT_THRESHOLD,
        help=f"Brightness threshold 0-255; brighter pixels are background (default: {DEFAULT_THRESHOLD})",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=DEFAULT_PROGRESS_STEPS,
        help=f"Progress ticks per sweep phase (default: {DEFAULT_PROGRESS_STEPS})",
    )
    parser.add_argument(
        "--no-crop",
        action="store_true",
        help="Do not crop to a centered square (input must already be square)",
    )
    parser.add_argument(
        "--debug",
        type=str,
        default=None,
        help="Path to save the scan overlay (PNG); intermediate stages go next to it",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def validate_input(input_path: str) -> Optional[str]:
    """
    Validate input file exists and is a supported image format.

    Args:
        input_path: Path to input image

    Returns:
        Error message if validation fails, None if valid
    """
    path = Path(input_path)

    if not path.exists():
        return f"Input file not found: {input_path}"

    if not path.is_file():
        return f"Input path is not a file: {input_path}"

    suffix = path.suffix.lower()
    if suffix not in [".jpg", ".jpeg", ".png"]:
        return f"Unsupported image format: {suffix}. Use JPG or PNG."

    return None


def create_output(
    session: Optional[ScanSession] = None,
    threshold: Optional[int] = None,
    image_size_px: Optional[int] = None,
    foreground_px: Optional[int] = None,
    stalled_phase: Optional[str] = None,
    fail_reason: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create output dictionary.

    Args:
        session: Scan session snapshot (complete or partial)
        threshold: Brightness threshold used for binarization
        image_size_px: Side of the square image that was scanned
        foreground_px: Number of foreground pixels in the mask
        stalled_phase: Phase that never found the boundary, if any
        fail_reason: Reason for failure if applicable

    Returns:
        JSON-serializable result dictionary
    """
    score = session.score if session is not None else None
    diameters = session.diameters if session is not None else {}

    output = {
        "circle_score": round(float(score.circle_score), 2) if score is not None else None,
        "average_diameter_px": round(float(score.average_diameter), 2) if score is not None else None,
        "average_deviation_px": round(float(score.average_deviation), 2) if score is not None else None,
        "diameters": {},
        "threshold": threshold,
        "image_size_px": image_size_px,
        "foreground_px": foreground_px,
        "quality_flags": {
            "image_decoded": fail_reason != DecodeFailure.fail_reason,
            "scan_completed": score is not None,
        },
        "stalled_phase": stalled_phase,
        "fail_reason": fail_reason,
    }

    for axis in DiameterAxis:
        diameter = diameters.get(axis)
        if diameter is None:
            continue
        entry = diameter.to_dict()
        entry["length_px"] = round(entry["length_px"], 2)
        if score is not None:
            entry["deviation_px"] = round(float(score.deviations[axis]), 2)
        output["diameters"][axis.value] = entry

    return output


def save_output(output: Dict[str, Any], output_path: str) -> None:
    """Save output dictionary to JSON file."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(output, f, indent=2)


def score_circle(
    image: Optional[np.ndarray],
    threshold: int = DEFAULT_THRESHOLD,
    steps: int = DEFAULT_PROGRESS_STEPS,
    crop: bool = True,
    overlay_path: Optional[str] = None,
    debug_dir: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Main scoring pipeline.

    Args:
        image: Decoded BGR image, None if decoding failed
        threshold: Brightness threshold in [0, 255]
        steps: Progress ticks per sweep phase
        crop: Crop to a centered square before binarizing
        overlay_path: Path to save the final scan overlay (PNG)
        debug_dir: Directory for intermediate stage images

    Returns:
        Output dictionary with score results
    """
    if image is None:
        print("No image to score")
        return create_output(threshold=threshold, fail_reason=DecodeFailure.fail_reason)

    observer = DebugObserver(debug_dir) if debug_dir is not None else None

    # Phase 1: Square crop
    if crop:
        image = crop_to_square(image)
        if observer is not None:
            observer.save_stage("cropped", image)
    print(f"Scanning {image.shape[1]}x{image.shape[0]} image")

    # Phase 2: Binarization
    session = ImageSession(image, threshold=threshold)
    foreground_px = foreground_count(session.mask)
    print(f"Binarized at threshold {threshold}: {foreground_px} foreground pixels "
          f"({foreground_px / session.mask.size * 100:.1f}%)")
    if observer is not None:
        observer.save_stage("mask", mask_to_image(session.mask))

    # Phase 3: Eight-direction boundary scan
    stalled_phase = None
    fail_reason = None
    try:
        session.scan(steps=steps)
    except PhaseStall as e:
        stalled_phase = e.phase.value
        fail_reason = e.fail_reason
        print(f"Scan stalled: {e}")

    scan = session.session
    for axis, diameter in scan.diameters.items():
        print(f"  {axis.value}: {diameter.length:.1f}px "
              f"({diameter.p1[0]:.1f}, {diameter.p1[1]:.1f}) -> ({diameter.p2[0]:.1f}, {diameter.p2[1]:.1f})")

    if scan.score is not None:
        print(f"Average diameter: {scan.score.average_diameter:.1f}px, "
              f"average deviation: {scan.score.average_deviation:.1f}px")
        print(f"Circle score: {scan.score.circle_score:.1f}")

    # Phase 4: Overlay
    if overlay_path is not None or observer is not None:
        sweep_line = session.machine.current_sweep_line(PROGRESS_END)
        overlay = create_score_visualization(session.mask, scan, sweep_line=sweep_line,
                                             fail_reason=fail_reason)
        if observer is not None:
            observer.save_stage("overlay", overlay)
        if overlay_path is not None:
            Path(overlay_path).parent.mkdir(parents=True, exist_ok=True)
            cv2.imwrite(overlay_path, overlay)
            print(f"Overlay saved to: {overlay_path}")

    return create_output(
        session=scan,
        threshold=threshold,
        image_size_px=int(image.shape[0]),
        foreground_px=foreground_px,
        stalled_phase=stalled_phase,
        fail_reason=fail_reason,
    )


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Validate input
    error = validate_input(args.input)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    # Load image
    try:
        image = load_image(args.input)
    except DecodeFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        save_output(create_output(threshold=args.threshold, fail_reason=e.fail_reason), args.output)
        return 1

    print(f"Loaded image: {args.input} ({image.shape[1]}x{image.shape[0]})")

    debug_dir = None
    if args.debug is not None:
        debug_dir = str(Path(args.debug).parent / "scan_debug")

    # Run scoring pipeline
    try:
        result = score_circle(
            image=image,
            threshold=args.threshold,
            steps=args.steps,
            crop=not args.no_crop,
            overlay_path=args.debug,
            debug_dir=debug_dir,
        )
    except (ValueError, CircleScanError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Save output
    save_output(result, args.output)
    print(f"Results saved to: {args.output}")

    # Report result
    if result["fail_reason"]:
        print(f"Scoring failed: {result['fail_reason']}")
        return 1
    else:
        print(f"Circle score: {result['circle_score']}")
        return 0


if __name__ == "__main__":
    sys.exit(main())
