"""
Debug observer for the circle scoring pipeline.

Captures intermediate processing stages (cropped input, mask, overlay)
without core functions handling file I/O directly.
"""

import cv2
import numpy as np
from typing import Optional
from pathlib import Path


class DebugObserver:
    """
    Observer for capturing and saving intermediate processing stages.

    Stages are written as numbered PNG files in the order they are saved.
    """

    def __init__(self, debug_dir: str):
        """
        Initialize debug observer.

        Args:
            debug_dir: Directory where debug images will be saved
        """
        self.debug_dir = Path(debug_dir)
        self.debug_dir.mkdir(parents=True, exist_ok=True)
        self._stage_counter = {}
        self._order = 0

    def save_stage(self, name: str, image: Optional[np.ndarray]) -> Optional[Path]:
        """
        Save an intermediate processing stage image.

        Args:
            name: Stage name (used in the filename)
            image: Image to save

        Returns:
            Path of the written file, or None if the image was empty
        """
        if image is None or image.size == 0:
            return None

        self._order += 1
        if name in self._stage_counter:
            self._stage_counter[name] += 1
            filename = f"{self._order:02d}_{name}_{self._stage_counter[name]}.png"
        else:
            self._stage_counter[name] = 0
            filename = f"{self._order:02d}_{name}.png"

        return self._save_with_compression(image, filename)

    def _save_with_compression(self, image: np.ndarray, filename: str) -> Path:
        output_path = self.debug_dir / filename

        if image.dtype == bool:
            image = np.where(image, 0, 255).astype(np.uint8)

        # Downsample if too large (max 1920px dimension)
        h, w = image.shape[:2]
        max_dim = 1920
        if max(h, w) > max_dim:
            scale = max_dim / max(h, w)
            image = cv2.resize(image, (int(w * scale), int(h * scale)), interpolation=cv2.INTER_AREA)

        cv2.imwrite(str(output_path), image, [cv2.IMWRITE_PNG_COMPRESSION, 6])
        return output_path
