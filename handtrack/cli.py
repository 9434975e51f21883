"""Command-line interface for handtrack."""

import argparse
from pathlib import Path
from typing import Union

from . import __version__
from .config import DEFAULT_MODEL_DIR, DEFAULT_MODEL_TYPE, ModelParameters, RunConfig
from .errors import MalformedModelParameters

EPILOG = """\
Examples:
  handtrack 0 -o webcam.mp4
  handtrack clip.mp4 -o tracked.mp4 --score-threshold 0.6
  handtrack hand.jpg -o tracked.mp4 --no-flip --model-dir ./models

Models are loaded from <model-dir>/<model-type>/model.pt, with optional
weights in <model-dir>/<model-type>/weights.pt.
"""

_DEFAULTS = ModelParameters()


def parse_source(value: str) -> Union[int, str]:
    """Interpret a numeric source as a camera index, anything else as a path."""
    return int(value) if value.isdigit() else value


def parse_args(args=None) -> RunConfig:
    """Parse command-line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv).

    Returns:
        RunConfig with parsed options.
    """
    parser = argparse.ArgumentParser(
        prog="handtrack",
        description="Detect hands in camera streams, videos and images.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "source",
        type=str,
        help="Camera index (e.g. 0) or input image/video file",
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Write annotated frames to this video file",
    )

    parser.add_argument(
        "--frames",
        type=int,
        default=None,
        help="Stop after this many frames (default: until the stream ends)",
    )

    parser.add_argument(
        "--width",
        type=int,
        default=640,
        help="Requested camera capture width; height is 3/4 of it (default: 640)",
    )

    parser.add_argument(
        "--model-dir",
        type=str,
        default=DEFAULT_MODEL_DIR,
        help=f"Directory holding model folders (default: {DEFAULT_MODEL_DIR})",
    )

    parser.add_argument(
        "--model-type",
        type=str,
        default=DEFAULT_MODEL_TYPE,
        help=f"Detector to load (default: {DEFAULT_MODEL_TYPE})",
    )

    parser.add_argument(
        "--device",
        type=str,
        default="cpu",
        help="Torch device for inference, e.g. cpu or cuda (default: cpu)",
    )

    parser.add_argument(
        "--nms-device",
        type=str,
        default="cpu",
        help="Torch device for non-max suppression (default: cpu)",
    )

    # Model parameters
    parser.add_argument(
        "--no-flip",
        action="store_true",
        help="Do not mirror frames before detection",
    )

    parser.add_argument(
        "--output-stride",
        type=int,
        default=_DEFAULTS.output_stride,
        help=f"Detector output stride for resize alignment (default: {_DEFAULTS.output_stride})",
    )

    parser.add_argument(
        "--image-scale-factor",
        type=float,
        default=_DEFAULTS.image_scale_factor,
        help=f"Downscale before inference, 0.0-1.0 (default: {_DEFAULTS.image_scale_factor})",
    )

    parser.add_argument(
        "--max-boxes",
        type=int,
        default=_DEFAULTS.max_num_boxes,
        help=f"Maximum detections per frame (default: {_DEFAULTS.max_num_boxes})",
    )

    parser.add_argument(
        "--iou-threshold",
        type=float,
        default=_DEFAULTS.iou_threshold,
        help=f"NMS overlap cutoff, 0.0-1.0 (default: {_DEFAULTS.iou_threshold})",
    )

    parser.add_argument(
        "--score-threshold",
        type=float,
        default=_DEFAULTS.score_threshold,
        help=f"Minimum detection confidence, 0.0-1.0 (default: {_DEFAULTS.score_threshold})",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write logs to this file",
    )

    parsed = parser.parse_args(args)

    source = parse_source(parsed.source)
    if isinstance(source, str) and not Path(source).exists():
        parser.error(f"Input file not found: {source}")
    if parsed.frames is not None and parsed.frames < 1:
        parser.error("--frames must be at least 1")

    try:
        return RunConfig.from_args(
            source=source,
            output_path=parsed.output,
            model_dir=parsed.model_dir,
            device=parsed.device,
            nms_device=parsed.nms_device,
            max_frames=parsed.frames,
            width=parsed.width,
            log_level=parsed.log_level,
            log_path=parsed.log_file,
            flip_horizontal=not parsed.no_flip,
            output_stride=parsed.output_stride,
            image_scale_factor=parsed.image_scale_factor,
            max_num_boxes=parsed.max_boxes,
            iou_threshold=parsed.iou_threshold,
            score_threshold=parsed.score_threshold,
            model_type=parsed.model_type,
        )
    except MalformedModelParameters as e:
        parser.error(str(e))
