#!/usr/bin/env python3
"""Simple web demo for circle scoring.

Upload a photo of a drawn circle, run the scan, and return JSON + overlay.
"""

from __future__ import annotations

import json
import sys
import uuid
from pathlib import Path
from typing import Dict, Any

from flask import Flask, jsonify, request, send_from_directory

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

from measure_circle import score_circle
from src.errors import DecodeFailure
from src.image_prep import decode_image
from src.scan_constants import DEFAULT_THRESHOLD, DEFAULT_PROGRESS_STEPS, MIN_PROGRESS_STEPS

APP_ROOT = Path(__file__).resolve().parent
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png"}
MAX_DEMO_STEPS = 2000

app = Flask(__name__)
app.config["RESULTS_DIR"] = APP_ROOT / "results"


def _allowed_file(filename: str) -> bool:
    return Path(filename).suffix.lower() in ALLOWED_EXTENSIONS


def _save_json(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _form_int(name: str, default: int, low: int, high: int) -> int:
    raw = request.form.get(name)
    if raw is None or raw == "":
        return default
    value = int(raw)
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}")
    return value


@app.route("/results/<path:filename>")
def serve_result(filename: str):
    return send_from_directory(app.config["RESULTS_DIR"], filename)


@app.route("/api/score", methods=["POST"])
def api_score():
    if "image" not in request.files:
        return jsonify({"success": False, "error": "Missing image file"}), 400

    file = request.files["image"]
    if file.filename == "":
        return jsonify({"success": False, "error": "Empty filename"}), 400

    if not _allowed_file(file.filename):
        return jsonify({"success": False, "error": "Unsupported file type"}), 400

    try:
        threshold = _form_int("threshold", DEFAULT_THRESHOLD, 0, 255)
        steps = _form_int("steps", DEFAULT_PROGRESS_STEPS, MIN_PROGRESS_STEPS, MAX_DEMO_STEPS)
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    try:
        image = decode_image(file.read())
    except DecodeFailure as e:
        return jsonify({"success": False, "error": str(e), "fail_reason": e.fail_reason}), 400

    return _run_scoring(image=image, threshold=threshold, steps=steps)


def _run_scoring(image, threshold: int, steps: int):
    run_id = uuid.uuid4().hex[:12]
    results_dir = Path(app.config["RESULTS_DIR"])

    result_png_name = f"{run_id}__overlay.png"
    result = score_circle(
        image=image,
        threshold=threshold,
        steps=steps,
        overlay_path=str(results_dir / result_png_name),
    )

    result_json_name = f"{run_id}__result.json"
    _save_json(results_dir / result_json_name, result)

    payload = {
        "success": result.get("fail_reason") is None,
        "result": result,
        "result_image_url": f"/results/{result_png_name}",
        "result_json_url": f"/results/{result_json_name}",
    }

    return jsonify(payload)


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000, debug=True)
