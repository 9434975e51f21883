"""Detection module for hand detection."""

from .base import Detection, Detector, InferenceEngine
from .decode import build_detections, decode_box
from .nms import box_iou, non_max_suppression
from .scores import calculate_max_scores

# Lazy imports for model-loading code
def __getattr__(name):
    if name in ("HandDetector", "load"):
        from . import detector
        return getattr(detector, name)
    if name in ("TorchInferenceEngine", "model_paths"):
        from . import engine
        return getattr(engine, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "Detection",
    "Detector",
    "InferenceEngine",
    "HandDetector",
    "TorchInferenceEngine",
    "box_iou",
    "build_detections",
    "calculate_max_scores",
    "decode_box",
    "load",
    "model_paths",
    "non_max_suppression",
]
