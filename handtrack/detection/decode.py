"""Mapping of normalized boxes to frame pixels and result assembly."""

from typing import List, Sequence

import numpy as np

from .base import Detection


def decode_box(box: Sequence[float], width: int, height: int) -> List[float]:
    """Convert a normalized [minY, minX, maxY, maxX] box to [x, y, w, h] pixels.

    No flip compensation is applied; when the input was mirrored the box
    stays in mirrored coordinates.
    """
    min_y, min_x, max_y, max_x = (float(v) for v in box)
    x = min_x * width
    y = min_y * height
    return [x, y, max_x * width - x, max_y * height - y]


def build_detections(
    width: int,
    height: int,
    boxes: np.ndarray,
    max_scores: np.ndarray,
    indexes: np.ndarray,
    classes: np.ndarray,
) -> List[Detection]:
    """Assemble Detection objects for the selected indexes, in order.

    Args:
        width: Frame width in pixels.
        height: Frame height in pixels.
        boxes: Normalized boxes reshapeable to (N, 4).
        max_scores: Best score per box.
        indexes: Indices selected by non-max suppression.
        classes: Best class per box.

    Returns:
        List of Detection objects (empty when nothing was selected).
    """
    boxes = np.asarray(boxes).reshape(-1, 4)
    return [
        Detection(
            bbox=decode_box(boxes[index], width, height),
            class_id=int(classes[index]),
            score=float(max_scores[index]),
        )
        for index in indexes
    ]
