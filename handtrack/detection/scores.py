"""Reduction of per-class scores to one class and score per box."""

from typing import Tuple

import numpy as np


def calculate_max_scores(
    scores: np.ndarray, num_boxes: int, num_classes: int
) -> Tuple[np.ndarray, np.ndarray]:
    """Find the best class and its score for every candidate box.

    Classes are compared with strict greater-than, so ties keep the lowest
    class index. The running maximum starts at the lowest finite float, which
    lets rows of negative scores classify normally. NaN never wins, and a row
    with nothing above the lowest float keeps class -1.

    Args:
        scores: Flat or [1, N, C] score buffer with ``num_boxes * num_classes`` values.
        num_boxes: Number of candidate boxes N.
        num_classes: Number of classes C.

    Returns:
        Tuple of (max_scores [N] float, classes [N] int).
    """
    matrix = np.asarray(scores, dtype=np.float64).reshape(num_boxes, num_classes)
    lowest = np.finfo(np.float64).min

    if num_classes == 0:
        return np.full(num_boxes, lowest), np.full(num_boxes, -1, dtype=np.int64)

    comparable = np.where(np.isnan(matrix), -np.inf, matrix)
    # argmax returns the first index of the maximum
    classes = np.argmax(comparable, axis=1).astype(np.int64)
    max_scores = comparable[np.arange(num_boxes), classes]

    unclassified = ~(max_scores > lowest)
    classes[unclassified] = -1
    max_scores[unclassified] = lowest
    return max_scores, classes
