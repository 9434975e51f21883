"""Drawing of detections onto frames."""

from typing import Sequence

import cv2
import numpy as np

from .detection.base import Detection

BOX_COLOR = (0, 99, 255)  # RGB #0063FF
LABEL_BACKGROUND = (255, 255, 255)
LABEL_ALPHA = 0.6
LABEL_HEIGHT = 17
FONT = cv2.FONT_HERSHEY_SIMPLEX


def render_predictions(
    frame: np.ndarray,
    predictions: Sequence[Detection],
    fps: int,
    flip_horizontal: bool,
    label: str = "hand",
) -> np.ndarray:
    """Draw detections and the frame rate on a copy of ``frame``.

    Detections computed from a mirrored input are in mirrored coordinates,
    so the frame is mirrored too when ``flip_horizontal`` is set.

    Args:
        frame: RGB frame (H, W, 3).
        predictions: Detections to draw.
        fps: Frame rate shown in the corner.
        flip_horizontal: Whether the detector mirrored its input.
        label: Text shown after each score.

    Returns:
        Annotated RGB frame.
    """
    canvas = np.ascontiguousarray(frame[:, ::-1] if flip_horizontal else frame).copy()

    corners = [tuple(int(round(v)) for v in p.as_xyxy()) for p in predictions]

    # Translucent label strips above each box
    overlay = canvas.copy()
    for x1, y1, x2, _ in corners:
        cv2.rectangle(overlay, (x1, y1 - LABEL_HEIGHT), (x2, y1), LABEL_BACKGROUND, -1)
    canvas = cv2.addWeighted(overlay, LABEL_ALPHA, canvas, 1 - LABEL_ALPHA, 0)

    for prediction, (x1, y1, x2, y2) in zip(predictions, corners):
        cv2.rectangle(canvas, (x1, y1), (x2, y2), BOX_COLOR, 1)
        cx, cy = (x1 + x2) // 2, (y1 + y2) // 2
        cv2.rectangle(canvas, (cx, cy), (cx + 5, cy + 5), BOX_COLOR, -1)
        cv2.putText(
            canvas,
            f"{prediction.score:.3f} | {label}",
            (x1 + 5, y1 - 5 if y1 > 10 else 10),
            FONT,
            0.35,
            BOX_COLOR,
            1,
            cv2.LINE_AA,
        )

    cv2.putText(canvas, f"[FPS]: {fps}", (10, 20), FONT, 0.45, BOX_COLOR, 2, cv2.LINE_AA)
    return canvas
