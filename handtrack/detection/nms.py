"""Greedy non-max suppression."""

import logging
from typing import Union

import numpy as np
import torch

logger = logging.getLogger(__name__)


def box_iou(boxes_a: torch.Tensor, boxes_b: torch.Tensor) -> torch.Tensor:
    """Pairwise intersection-over-union of [minY, minX, maxY, maxX] boxes.

    Corner order inside a box is normalized first. Pairs whose union is
    empty have an IoU of 0.

    Args:
        boxes_a: Tensor of shape (N, 4).
        boxes_b: Tensor of shape (M, 4).

    Returns:
        Tensor of shape (N, M).
    """
    ymin_a = torch.minimum(boxes_a[:, 0], boxes_a[:, 2])
    xmin_a = torch.minimum(boxes_a[:, 1], boxes_a[:, 3])
    ymax_a = torch.maximum(boxes_a[:, 0], boxes_a[:, 2])
    xmax_a = torch.maximum(boxes_a[:, 1], boxes_a[:, 3])
    ymin_b = torch.minimum(boxes_b[:, 0], boxes_b[:, 2])
    xmin_b = torch.minimum(boxes_b[:, 1], boxes_b[:, 3])
    ymax_b = torch.maximum(boxes_b[:, 0], boxes_b[:, 2])
    xmax_b = torch.maximum(boxes_b[:, 1], boxes_b[:, 3])

    area_a = (ymax_a - ymin_a) * (xmax_a - xmin_a)
    area_b = (ymax_b - ymin_b) * (xmax_b - xmin_b)

    inter_h = (torch.minimum(ymax_a[:, None], ymax_b[None, :])
               - torch.maximum(ymin_a[:, None], ymin_b[None, :])).clamp(min=0)
    inter_w = (torch.minimum(xmax_a[:, None], xmax_b[None, :])
               - torch.maximum(xmin_a[:, None], xmin_b[None, :])).clamp(min=0)
    intersection = inter_h * inter_w
    union = area_a[:, None] + area_b[None, :] - intersection

    iou = torch.zeros_like(intersection)
    positive = union > 0
    iou[positive] = intersection[positive] / union[positive]
    return iou


def non_max_suppression(
    boxes: np.ndarray,
    scores: np.ndarray,
    max_num_boxes: int,
    iou_threshold: float,
    score_threshold: float,
    device: Union[str, torch.device] = "cpu",
) -> np.ndarray:
    """Select boxes greedily by score, dropping heavy overlaps.

    Candidates are visited by descending score, ties by ascending index.
    A candidate is skipped when its score is below ``score_threshold`` and
    accepted when its IoU with every accepted box is at most
    ``iou_threshold``. Selection stops after ``max_num_boxes`` boxes.

    The work runs on ``device`` only; no process-wide backend setting is
    read or changed, so results do not depend on where the model ran.

    Args:
        boxes: Array of N boxes, any shape reshapeable to (N, 4), as
            normalized [minY, minX, maxY, maxX].
        scores: Array of N scores.
        max_num_boxes: Maximum number of indices to return.
        iou_threshold: Overlap cutoff in [0, 1].
        score_threshold: Minimum score retained.
        device: Torch device to compute on.

    Returns:
        int64 array of accepted indices in descending score order.
    """
    with torch.no_grad():
        score_t = torch.as_tensor(np.asarray(scores, dtype=np.float32), device=device).reshape(-1)
        box_t = torch.as_tensor(np.asarray(boxes, dtype=np.float32), device=device).reshape(-1, 4)
        if box_t.shape[0] != score_t.shape[0]:
            raise ValueError(
                f"Got {box_t.shape[0]} boxes but {score_t.shape[0]} scores"
            )

        _, order = torch.sort(score_t, descending=True, stable=True)
        order = order[score_t[order] >= score_threshold]
        if max_num_boxes <= 0 or order.numel() == 0:
            return np.empty(0, dtype=np.int64)

        candidates = box_t[order]
        overlaps = box_iou(candidates, candidates).cpu().numpy()
        order_np = order.cpu().numpy()

    selected = []
    for position in range(len(order_np)):
        if all(overlaps[position, kept] <= iou_threshold for kept in selected):
            selected.append(position)
            if len(selected) >= max_num_boxes:
                break

    logger.debug("NMS kept %d of %d candidates", len(selected), len(order_np))
    return order_np[selected].astype(np.int64)
