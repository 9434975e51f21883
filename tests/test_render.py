import numpy as np

from handtrack.detection.base import Detection
from handtrack.render import BOX_COLOR, render_predictions


def test_render_returns_annotated_copy():
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    predictions = [Detection(bbox=[10.0, 30.0, 20.0, 20.0], class_id=0, score=0.97)]

    output = render_predictions(frame, predictions, fps=30, flip_horizontal=False)

    assert output.shape == frame.shape
    assert output.dtype == np.uint8
    assert not frame.any()
    assert tuple(output[40, 10]) == BOX_COLOR


def test_render_mirrors_frame_when_flipping():
    frame = np.zeros((60, 80, 3), dtype=np.uint8)
    frame[50, 0] = 200

    output = render_predictions(frame, [], fps=0, flip_horizontal=True)

    assert tuple(output[50, 79]) == (200, 200, 200)
    assert tuple(output[50, 0]) == (0, 0, 0)


def test_render_without_flip_keeps_orientation():
    frame = np.zeros((60, 80, 3), dtype=np.uint8)
    frame[50, 0] = 200

    output = render_predictions(frame, [], fps=0, flip_horizontal=False)

    assert tuple(output[50, 0]) == (200, 200, 200)


def test_render_draws_box_to_far_corner():
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    prediction = Detection(bbox=[10.4, 30.0, 20.4, 20.0], class_id=0, score=0.97)
    x1, y1, x2, y2 = (int(round(v)) for v in prediction.as_xyxy())

    output = render_predictions(frame, [prediction], fps=30, flip_horizontal=False)

    assert (x1, y1, x2, y2) == (10, 30, 31, 50)
    assert tuple(output[40, x2]) == BOX_COLOR
    assert tuple(output[y2, 20]) == BOX_COLOR
