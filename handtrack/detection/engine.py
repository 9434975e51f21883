"""TorchScript inference engine adapter."""

import logging
import os
from typing import Optional, Tuple

import torch

from ..errors import InferenceFailure
from .base import InferenceEngine

logger = logging.getLogger(__name__)

MODEL_FILENAME = "model.pt"
WEIGHTS_FILENAME = "weights.pt"
WARMUP_SHAPE = (1, 300, 300, 3)


def check_raw_outputs(outputs) -> Tuple[torch.Tensor, torch.Tensor]:
    """Validate a (scores [1, N, C], boxes [1, N, 1, 4]) engine result.

    Raises:
        InferenceFailure: If the result is not a pair of tensors with those ranks
            and matching N.
    """
    if not isinstance(outputs, (tuple, list)) or len(outputs) < 2:
        raise InferenceFailure("Detector must return (scores, boxes)")
    scores, boxes = outputs[0], outputs[1]
    if not (torch.is_tensor(scores) and torch.is_tensor(boxes)):
        raise InferenceFailure("Detector outputs must be tensors")
    if scores.ndim != 3 or boxes.ndim != 4 or boxes.shape[-1] != 4:
        raise InferenceFailure(
            f"Unexpected output shapes: scores {tuple(scores.shape)}, boxes {tuple(boxes.shape)}"
        )
    if scores.shape[1] != boxes.shape[1]:
        raise InferenceFailure(
            f"Scores cover {scores.shape[1]} boxes but boxes has {boxes.shape[1]}"
        )
    return scores, boxes


def model_paths(model_dir: str, model_type: str) -> Tuple[str, str]:
    """Return (model_path, weights_path) for a model type under ``model_dir``."""
    base = os.path.join(model_dir, model_type)
    return os.path.join(base, MODEL_FILENAME), os.path.join(base, WEIGHTS_FILENAME)


class TorchInferenceEngine(InferenceEngine):
    """Runs a TorchScript detector that returns (scores, boxes).

    The module takes a [1, H, W, 3] float tensor and returns a scores tensor
    of shape [1, N, C] and a boxes tensor of shape [1, N, 1, 4].
    """

    def __init__(
        self,
        model_path: str,
        weights_path: Optional[str] = None,
        device: str = "cpu",
    ):
        """Initialize the engine. Call ``load`` before ``infer``.

        Args:
            model_path: Path to the TorchScript module.
            weights_path: Optional state dict applied after loading.
            device: Device to run the model on ('cuda' or 'cpu').
        """
        self.model_path = model_path
        self.weights_path = weights_path
        self.device = torch.device(device)
        self.model = None

    @classmethod
    def from_model_type(
        cls, model_dir: str, model_type: str, device: str = "cpu"
    ) -> "TorchInferenceEngine":
        """Create an engine following the ``<model_dir>/<model_type>/`` layout."""
        model_path, weights_path = model_paths(model_dir, model_type)
        return cls(model_path, weights_path, device=device)

    def load(self) -> "TorchInferenceEngine":
        """Load the module and warm it up once.

        Returns:
            The engine itself, ready for inference.

        Raises:
            InferenceFailure: If loading or the warm-up call fails.
        """
        logger.info("Loading detector from %s", self.model_path)
        try:
            model = torch.jit.load(self.model_path, map_location=self.device)
            if self.weights_path and os.path.exists(self.weights_path):
                state_dict = torch.load(self.weights_path, map_location=self.device)
                model.load_state_dict(state_dict)
            model.eval()
        except Exception as e:
            raise InferenceFailure(f"Error loading detector {self.model_path}: {e}") from e

        self.model = model
        self._warm_up()
        logger.info("Detector loaded on %s", self.device)
        return self

    def _warm_up(self) -> None:
        """Run a zero-filled input through the model to avoid a slow first call."""
        scores, boxes = self.infer(torch.zeros(WARMUP_SHAPE))
        del scores, boxes

    def infer(self, tensor: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
        """Run the detector on a batched input.

        Raises:
            InferenceFailure: If the engine is not loaded, the forward pass
                fails, or the outputs are malformed.
        """
        if self.model is None:
            raise InferenceFailure("Inference engine is not loaded")
        try:
            with torch.no_grad():
                outputs = self.model(tensor.to(self.device))
        except Exception as e:
            raise InferenceFailure(f"Error during inference: {e}") from e

        return check_raw_outputs(outputs)

    def dispose(self) -> None:
        """Release the loaded model."""
        self.model = None
