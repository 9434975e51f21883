"""Base detection protocols and data structures."""

from dataclasses import dataclass
from typing import List, Protocol, Tuple

import numpy as np
import torch


@dataclass
class Detection:
    """Standardized detection result.

    Attributes:
        bbox: Bounding box as [x, y, width, height] in pixel coordinates.
        class_id: Class integer ID.
        score: Confidence score (0.0 to 1.0).
    """

    bbox: List[float]
    class_id: int
    score: float

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        """Return the box as (x1, y1, x2, y2)."""
        x, y, w, h = self.bbox
        return (x, y, x + w, y + h)


class Detector(Protocol):
    """Protocol for object detectors."""

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """Detect objects in a frame.

        Args:
            frame: Input frame (RGB).

        Returns:
            List of Detection objects.
        """
        ...


class InferenceEngine(Protocol):
    """Protocol for the opaque forward pass of a detector."""

    def infer(self, tensor: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
        """Run the detector.

        Args:
            tensor: Batched input of shape [1, H, W, 3].

        Returns:
            Tuple of (scores [1, N, C], boxes [1, N, 1, 4]).
        """
        ...
