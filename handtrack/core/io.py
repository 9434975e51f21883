"""Frame sources, capture sessions and video output."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

import cv2
import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = {".mp4", ".avi", ".mov", ".mkv"}
DEFAULT_FPS = 15.0


@dataclass(frozen=True)
class Frame:
    """A captured frame.

    Attributes:
        pixels: RGB pixel buffer of shape (height, width, 3).
        width: Frame width in pixels.
        height: Frame height in pixels.
    """

    pixels: np.ndarray
    width: int
    height: int

    @classmethod
    def from_numpy(cls, pixels: np.ndarray) -> "Frame":
        """Create a Frame from an (H, W, 3) array."""
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError(f"Expected an (H, W, 3) array, got shape {pixels.shape}")
        height, width = pixels.shape[:2]
        return cls(pixels=pixels, width=width, height=height)


def is_video_file(filename: str) -> bool:
    """Check if filename has a video extension.

    Args:
        filename: Path to file.

    Returns:
        True if file has a video extension.
    """
    return Path(filename).suffix.lower() in VIDEO_EXTENSIONS


class VideoSession:
    """An open capture stream: a camera, a video file or a single image.

    Sessions are created by ``start_video`` and closed by ``stop_video`` (or
    by leaving a ``with`` block). Nothing about the stream is stored outside
    the session object.
    """

    def __init__(
        self,
        source: Union[int, str],
        width: int = 640,
        height: Optional[int] = None,
    ):
        """Open the stream.

        Args:
            source: Camera index, video path or image path.
            width: Requested capture width for cameras.
            height: Requested capture height for cameras (default: 3/4 width).
        """
        self.source = source
        self.width = width
        self.height = height or int(width * 3 / 4)
        self.is_camera = isinstance(source, int)
        self.is_video = self.is_camera or is_video_file(str(source))
        self._cap = None
        self._image = None
        self._fps = DEFAULT_FPS
        self._frame_count = 1
        self._frame_size = (self.width, self.height)

        if self.is_video:
            self._cap = cv2.VideoCapture(source)
            if not self._cap.isOpened():
                raise IOError(f"Cannot open video source: {source}")
            if self.is_camera:
                self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
                self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
            self._fps = self._cap.get(cv2.CAP_PROP_FPS) or self._fps
            self._frame_count = int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT))
            self._frame_size = (
                int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
                int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            )
        else:
            self._image = np.array(Image.open(source).convert("RGB"))
            self._frame_size = (self._image.shape[1], self._image.shape[0])
        logger.debug("Opened video session for %s", source)

    @property
    def fps(self) -> float:
        """Get frames per second."""
        return self._fps

    @property
    def frame_count(self) -> int:
        """Get total frame count (1 for images, 0 or less if unknown)."""
        return self._frame_count

    @property
    def frame_size(self) -> Tuple[int, int]:
        """Get (width, height) of the frames this session produces."""
        return self._frame_size

    @property
    def is_open(self) -> bool:
        """True while the stream can still produce frames."""
        if self._cap is not None:
            return self._cap.isOpened()
        return self._image is not None

    def read_frame(self) -> Tuple[bool, Optional[np.ndarray]]:
        """Read the next frame.

        Returns:
            Tuple of (success, frame). Frame is RGB numpy array.
        """
        if self._cap is not None:
            ret, frame = self._cap.read()
            if ret:
                frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            return ret, frame
        if self._image is not None:
            img = self._image
            self._image = None  # Only return once
            return True, img
        return False, None

    def get_frame(self) -> Optional[Frame]:
        """Read the next frame as a Frame, or None at end of stream."""
        ret, pixels = self.read_frame()
        if not ret:
            return None
        return Frame.from_numpy(pixels)

    def __iter__(self) -> Iterator[Frame]:
        """Iterate over frames."""
        while True:
            frame = self.get_frame()
            if frame is None:
                break
            yield frame

    def close(self) -> bool:
        """Release the stream.

        Returns:
            True if an open stream was released.
        """
        was_open = self.is_open
        if self._cap is not None:
            self._cap.release()
        self._image = None
        return was_open

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def start_video(
    source: Union[int, str] = 0,
    width: int = 640,
    height: Optional[int] = None,
) -> VideoSession:
    """Open a capture session for a camera index or a media file."""
    return VideoSession(source, width=width, height=height)


def stop_video(session: Optional[VideoSession]) -> bool:
    """Stop a capture session.

    Returns:
        True if a running stream was stopped, False otherwise.
    """
    if session is None:
        return False
    return session.close()


class VideoWriter:
    """Encode annotated frames into an mp4 file.

    Frames whose size differs from the writer's are resized to fit, since
    OpenCV silently drops frames of the wrong size.
    """

    def __init__(self, path: str, width: int, height: int, fps: float = DEFAULT_FPS):
        self.path = path
        self.frame_size = (width, height)
        self.fps = fps if fps and fps > 0 else DEFAULT_FPS
        self.frames_written = 0

        fourcc = cv2.VideoWriter_fourcc(*"mp4v")
        self._writer = cv2.VideoWriter(path, fourcc, self.fps, self.frame_size)
        if not self._writer.isOpened():
            raise IOError(f"Cannot create video writer: {path}")
        logger.info("Writing %dx%d video at %.1f fps to %s", width, height, self.fps, path)

    def write_frame(self, frame: Union[Frame, np.ndarray]) -> None:
        """Append a Frame (or RGB array) to the video."""
        pixels = frame.pixels if isinstance(frame, Frame) else frame
        if (pixels.shape[1], pixels.shape[0]) != self.frame_size:
            pixels = cv2.resize(pixels, self.frame_size, interpolation=cv2.INTER_LINEAR)
        self._writer.write(cv2.cvtColor(np.ascontiguousarray(pixels), cv2.COLOR_RGB2BGR))
        self.frames_written += 1

    def close(self) -> None:
        """Finish the file."""
        self._writer.release()
        logger.info("Wrote %d frame(s) to %s", self.frames_written, self.path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
