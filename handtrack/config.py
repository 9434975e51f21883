"""Configuration dataclasses for handtrack."""

from dataclasses import dataclass, field, fields, replace
from typing import Optional, Union

from .errors import MalformedModelParameters


DEFAULT_MODEL_TYPE = "ssdlitemobilenetv2"
DEFAULT_MODEL_DIR = "models"


@dataclass(frozen=True)
class ModelParameters:
    """Parameters read by every stage of a detection cycle.

    Instances are immutable. Use ``patch`` to derive an updated copy; every
    new value is validated eagerly so out-of-range thresholds never reach
    non-max suppression.

    Attributes:
        flip_horizontal: Mirror the frame before inference.
        output_stride: Resize alignment constraint of the detector.
        image_scale_factor: Downscale applied before inference, in (0, 1].
        max_num_boxes: Maximum number of boxes kept by NMS.
        iou_threshold: NMS overlap cutoff, in [0, 1].
        score_threshold: Minimum confidence retained, in [0, 1].
        model_type: Name of the detector/weights to load.
    """

    flip_horizontal: bool = True
    output_stride: int = 16
    image_scale_factor: float = 0.7
    max_num_boxes: int = 20
    iou_threshold: float = 0.5
    score_threshold: float = 0.99
    model_type: str = DEFAULT_MODEL_TYPE

    def __post_init__(self):
        if not isinstance(self.flip_horizontal, bool):
            raise MalformedModelParameters(
                f"flip_horizontal must be a bool, got {self.flip_horizontal!r}"
            )
        if not _is_int(self.output_stride) or self.output_stride < 1:
            raise MalformedModelParameters(
                f"output_stride must be a positive integer, got {self.output_stride!r}"
            )
        if not _is_number(self.image_scale_factor) or not 0.0 < self.image_scale_factor <= 1.0:
            raise MalformedModelParameters(
                f"image_scale_factor must be in (0, 1], got {self.image_scale_factor!r}"
            )
        if not _is_int(self.max_num_boxes) or self.max_num_boxes < 1:
            raise MalformedModelParameters(
                f"max_num_boxes must be a positive integer, got {self.max_num_boxes!r}"
            )
        for name in ("iou_threshold", "score_threshold"):
            value = getattr(self, name)
            if not _is_number(value) or not 0.0 <= value <= 1.0:
                raise MalformedModelParameters(f"{name} must be in [0, 1], got {value!r}")
        if not isinstance(self.model_type, str) or not self.model_type:
            raise MalformedModelParameters(
                f"model_type must be a non-empty string, got {self.model_type!r}"
            )

    def patch(self, **changes) -> "ModelParameters":
        """Return a new ModelParameters with ``changes`` applied.

        Raises:
            MalformedModelParameters: If a field is unknown or out of range.
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise MalformedModelParameters(f"Unknown model parameter(s): {', '.join(unknown)}")
        return replace(self, **changes)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class RunConfig:
    """Configuration for the headless detection runner."""

    source: Union[int, str]
    output_path: Optional[str] = None
    model_dir: str = DEFAULT_MODEL_DIR
    device: str = "cpu"
    nms_device: str = "cpu"
    max_frames: Optional[int] = None
    width: int = 640
    log_level: str = "INFO"
    log_path: Optional[str] = None
    params: ModelParameters = field(default_factory=ModelParameters)

    @classmethod
    def from_args(
        cls,
        source: Union[int, str],
        output_path: Optional[str] = None,
        model_dir: str = DEFAULT_MODEL_DIR,
        device: str = "cpu",
        nms_device: str = "cpu",
        max_frames: Optional[int] = None,
        width: int = 640,
        log_level: str = "INFO",
        log_path: Optional[str] = None,
        # Model parameters
        flip_horizontal: bool = True,
        output_stride: int = 16,
        image_scale_factor: float = 0.7,
        max_num_boxes: int = 20,
        iou_threshold: float = 0.5,
        score_threshold: float = 0.99,
        model_type: str = DEFAULT_MODEL_TYPE,
    ) -> "RunConfig":
        """Create RunConfig from CLI arguments."""
        return cls(
            source=source,
            output_path=output_path,
            model_dir=model_dir,
            device=device,
            nms_device=nms_device,
            max_frames=max_frames,
            width=width,
            log_level=log_level,
            log_path=log_path,
            params=ModelParameters(
                flip_horizontal=flip_horizontal,
                output_stride=output_stride,
                image_scale_factor=image_scale_factor,
                max_num_boxes=max_num_boxes,
                iou_threshold=iou_threshold,
                score_threshold=score_threshold,
                model_type=model_type,
            ),
        )
