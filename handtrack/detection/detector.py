"""Hand detector: preprocessing, inference and postprocessing per frame."""

import logging
from typing import List, Optional, Union

import numpy as np

from ..config import DEFAULT_MODEL_DIR, ModelParameters
from ..core.fps import FrameRateTracker
from ..core.io import Frame
from ..core.preprocess import preprocess_frame
from ..errors import HandtrackError, InferenceFailure
from .base import Detection, Detector, InferenceEngine
from .decode import build_detections
from .engine import TorchInferenceEngine, check_raw_outputs
from .nms import non_max_suppression
from .scores import calculate_max_scores

logger = logging.getLogger(__name__)


class HandDetector(Detector):
    """Hand detector on top of an InferenceEngine.

    Run one ``detect`` call at a time. Parameters are replaced between
    cycles with ``set_model_parameters``; a cycle reads them once at start.

    Attributes:
        engine: Engine running the forward pass.
        nms_device: Device non-max suppression runs on.
    """

    def __init__(
        self,
        engine: InferenceEngine,
        params: Optional[ModelParameters] = None,
        nms_device: str = "cpu",
    ):
        """Initialize HandDetector.

        Args:
            engine: Loaded inference engine.
            params: Model parameters (defaults if omitted).
            nms_device: Device for non-max suppression.
        """
        self.engine = engine
        self.nms_device = nms_device
        self._params = params or ModelParameters()
        self._fps = FrameRateTracker()

    @classmethod
    def load(
        cls,
        params: Optional[ModelParameters] = None,
        model_dir: str = DEFAULT_MODEL_DIR,
        device: str = "cpu",
        nms_device: str = "cpu",
    ) -> "HandDetector":
        """Load the TorchScript engine for ``params.model_type`` and wrap it.

        Raises:
            InferenceFailure: If the model cannot be loaded or warmed up.
        """
        params = params or ModelParameters()
        engine = TorchInferenceEngine.from_model_type(
            model_dir, params.model_type, device=device
        ).load()
        return cls(engine, params=params, nms_device=nms_device)

    def detect(self, frame: Union[Frame, np.ndarray]) -> List[Detection]:
        """Detect hands in a frame.

        Args:
            frame: Frame or RGB numpy array (H, W, 3).

        Returns:
            Detections in descending score order; empty if none survive.

        Raises:
            InvalidDimension: If the frame is too small to resize.
            InferenceFailure: If the engine fails or returns malformed outputs.
        """
        if not isinstance(frame, Frame):
            frame = Frame.from_numpy(frame)
        params = self._params

        with self._fps.measure():
            batched = preprocess_frame(frame, params)
            try:
                scores_t, boxes_t = check_raw_outputs(self.engine.infer(batched))
            except HandtrackError:
                raise
            except Exception as e:
                raise InferenceFailure(f"Inference engine failed: {e}") from e
            finally:
                del batched
            try:
                num_boxes, num_classes = scores_t.shape[1], scores_t.shape[2]
                scores = scores_t.detach().cpu().numpy().reshape(-1)
                boxes = boxes_t.detach().cpu().numpy().reshape(-1, 4)
            finally:
                del scores_t, boxes_t

            max_scores, classes = calculate_max_scores(scores, num_boxes, num_classes)
            indexes = non_max_suppression(
                boxes,
                max_scores,
                params.max_num_boxes,
                params.iou_threshold,
                params.score_threshold,
                device=self.nms_device,
            )
            detections = build_detections(
                frame.width, frame.height, boxes, max_scores, indexes, classes
            )

        if detections:
            logger.debug(
                "Detected %d hand(s): %s",
                len(detections),
                ", ".join(f"{d.score:.2f}" for d in detections),
            )
        return detections

    def get_fps(self) -> int:
        """Frames per second of the last completed cycle."""
        return self._fps.fps

    def get_model_parameters(self) -> ModelParameters:
        """Current model parameters."""
        return self._params

    def set_model_parameters(self, **changes) -> ModelParameters:
        """Replace parameters with a validated patch of the current ones.

        Raises:
            MalformedModelParameters: If a field is unknown or out of range.
        """
        self._params = self._params.patch(**changes)
        return self._params

    def dispose(self) -> None:
        """Release the engine's model."""
        dispose = getattr(self.engine, "dispose", None)
        if dispose is not None:
            dispose()


def load(
    model_dir: str = DEFAULT_MODEL_DIR,
    device: str = "cpu",
    nms_device: str = "cpu",
    **params,
) -> HandDetector:
    """Load a HandDetector with default parameters overridden by ``params``."""
    return HandDetector.load(
        ModelParameters().patch(**params),
        model_dir=model_dir,
        device=device,
        nms_device=nms_device,
    )
