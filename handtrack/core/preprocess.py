"""Frame preparation for the detector."""

from typing import Tuple, Union

import numpy as np
import torch
from torchvision.transforms import InterpolationMode
from torchvision.transforms import functional as TF

from ..config import ModelParameters
from ..errors import InvalidDimension
from .io import Frame


def valid_resolution(
    dimension: int, image_scale_factor: float, output_stride: int
) -> int:
    """Scale a dimension and align it to the detector's output stride.

    The result is congruent to 1 modulo ``output_stride`` and never larger
    than ``dimension * image_scale_factor``.

    Args:
        dimension: Input height or width in pixels.
        image_scale_factor: Downscale factor in (0, 1].
        output_stride: Detector output stride.

    Returns:
        The aligned dimension.

    Raises:
        InvalidDimension: If the aligned dimension would not be positive.
    """
    scaled = dimension * image_scale_factor
    if scaled < 1:
        raise InvalidDimension(
            f"Dimension {dimension} scaled by {image_scale_factor} is below one pixel"
        )
    even_resolution = scaled - 1
    resolution = int(round(even_resolution - (even_resolution % output_stride) + 1))
    if resolution < 1:
        raise InvalidDimension(
            f"Dimension {dimension} resolves to non-positive size {resolution}"
        )
    return resolution


def resized_shape(height: int, width: int, params: ModelParameters) -> Tuple[int, int]:
    """Return the (height, width) the detector input is resized to."""
    return (
        valid_resolution(height, params.image_scale_factor, params.output_stride),
        valid_resolution(width, params.image_scale_factor, params.output_stride),
    )


def preprocess_frame(
    frame: Union[Frame, np.ndarray], params: ModelParameters
) -> torch.Tensor:
    """Mirror, resize and batch a frame for inference.

    Args:
        frame: Frame or RGB numpy array (H, W, 3).
        params: Model parameters for this cycle.

    Returns:
        Float32 tensor of shape [1, H', W', 3].
    """
    if not isinstance(frame, Frame):
        frame = Frame.from_numpy(frame)

    resized_height, resized_width = resized_shape(frame.height, frame.width, params)

    with torch.no_grad():
        # HWC -> CHW for torchvision
        image = torch.from_numpy(np.ascontiguousarray(frame.pixels)).permute(2, 0, 1).float()
        if params.flip_horizontal:
            image = TF.hflip(image)
        image = TF.resize(
            image,
            [resized_height, resized_width],
            interpolation=InterpolationMode.BILINEAR,
            antialias=False,
        )
        return image.permute(1, 2, 0).unsqueeze(0).contiguous()
