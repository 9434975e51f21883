"""Headless detection runner."""

import logging
import sys
from typing import Optional

from tqdm import tqdm

from ..config import RunConfig
from ..core.io import Frame, VideoWriter, start_video, stop_video
from ..detection.detector import HandDetector
from ..errors import HandtrackError, InferenceFailure
from ..logging_setup import setup_logging
from ..render import render_predictions

logger = logging.getLogger(__name__)


def check_gpu_availability() -> bool:
    """Check if CUDA GPU is available.

    Returns:
        True if CUDA is available, False otherwise.
    """
    try:
        import torch
        return torch.cuda.is_available()
    except ImportError:
        return False


def validate_devices(config: RunConfig) -> list[str]:
    """Check that requested CUDA devices are available.

    Args:
        config: Run configuration.

    Returns:
        List of error messages for unavailable devices.
    """
    errors = []
    gpu_available = check_gpu_availability()
    if config.device.startswith("cuda") and not gpu_available:
        errors.append(f"Inference device {config.device} requires a CUDA-capable GPU (--device)")
    if config.nms_device.startswith("cuda") and not gpu_available:
        errors.append(f"NMS device {config.nms_device} requires a CUDA-capable GPU (--nms-device)")
    return errors


def create_detector(config: RunConfig) -> HandDetector:
    """Load the detector for the configured model type."""
    print(f"Loading {config.params.model_type} detector from {config.model_dir}...")
    return HandDetector.load(
        config.params,
        model_dir=config.model_dir,
        device=config.device,
        nms_device=config.nms_device,
    )


def run_detection_loop(
    detector: HandDetector,
    session,
    writer: Optional[VideoWriter] = None,
    max_frames: Optional[int] = None,
) -> dict:
    """Run detection cycles one at a time until the stream or frame budget ends.

    A cycle that fails is logged and skipped; the next frame is processed
    normally.

    Args:
        detector: Loaded detector.
        session: Open VideoSession.
        writer: Optional writer for annotated frames.
        max_frames: Stop after this many frames.

    Returns:
        Counters: frames, detections, failures, last fps.
    """
    stats = {"frames": 0, "detections": 0, "failures": 0, "fps": 0}
    total = max_frames
    if total is None and not session.is_camera and session.frame_count > 0:
        total = session.frame_count
    progress = tqdm(total=total, desc="Detecting")

    try:
        while max_frames is None or stats["frames"] < max_frames:
            frame = session.get_frame()
            if frame is None:
                break
            stats["frames"] += 1
            progress.update(1)

            try:
                predictions = detector.detect(frame)
            except HandtrackError as e:
                stats["failures"] += 1
                logger.warning("Skipping frame %d: %s", stats["frames"], e)
                continue

            stats["detections"] += len(predictions)
            stats["fps"] = detector.get_fps()
            progress.set_postfix(fps=stats["fps"], hands=len(predictions))

            if writer is not None:
                params = detector.get_model_parameters()
                annotated = render_predictions(
                    frame.pixels, predictions, stats["fps"], params.flip_horizontal
                )
                writer.write_frame(Frame.from_numpy(annotated))
    except KeyboardInterrupt:
        print("Interrupted; no further frames will be processed.")
    finally:
        progress.close()

    return stats


def run_headless(config: RunConfig) -> dict:
    """Run detection over a camera or media file.

    Args:
        config: Run configuration.

    Returns:
        Counters from the detection loop.

    Raises:
        SystemExit: If a CUDA device is requested but unavailable, or the
            model cannot be loaded.
    """
    setup_logging(config.log_level, config.log_path)

    device_errors = validate_devices(config)
    if device_errors:
        print("GPU devices requested but unavailable:", file=sys.stderr)
        for error in device_errors:
            print(f"  - {error}", file=sys.stderr)
        print("\nRun with --device cpu --nms-device cpu instead.", file=sys.stderr)
        sys.exit(1)

    try:
        detector = create_detector(config)
    except InferenceFailure as e:
        print(f"Cannot load detector: {e}", file=sys.stderr)
        sys.exit(1)

    session = None
    writer = None
    try:
        session = start_video(config.source, width=config.width)
        if config.output_path:
            width, height = session.frame_size
            writer = VideoWriter(config.output_path, width, height, session.fps)
        stats = run_detection_loop(detector, session, writer, config.max_frames)
    finally:
        if writer is not None:
            writer.close()
        stop_video(session)
        detector.dispose()

    print(
        f"Processed {stats['frames']} frame(s): {stats['detections']} detection(s), "
        f"{stats['failures']} failed cycle(s), last fps {stats['fps']}"
    )
    if config.output_path:
        print(f"Output saved to: {config.output_path}")
    return stats