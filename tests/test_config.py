import pytest

from handtrack.config import ModelParameters, RunConfig
from handtrack.errors import MalformedModelParameters


def test_defaults():
    params = ModelParameters()
    assert params.flip_horizontal is True
    assert params.output_stride == 16
    assert params.image_scale_factor == 0.7
    assert params.max_num_boxes == 20
    assert params.iou_threshold == 0.5
    assert params.score_threshold == 0.99
    assert params.model_type == "ssdlitemobilenetv2"


def test_patch_returns_new_value():
    params = ModelParameters()
    patched = params.patch(score_threshold=0.6, flip_horizontal=False)

    assert patched is not params
    assert patched.score_threshold == 0.6
    assert patched.flip_horizontal is False
    assert patched.max_num_boxes == params.max_num_boxes
    assert params.score_threshold == 0.99


def test_parameters_are_immutable():
    params = ModelParameters()
    with pytest.raises(AttributeError):
        params.iou_threshold = 0.1


@pytest.mark.parametrize(
    "changes",
    [
        {"iou_threshold": 1.5},
        {"iou_threshold": -0.1},
        {"score_threshold": 2.0},
        {"image_scale_factor": 0.0},
        {"image_scale_factor": 1.2},
        {"output_stride": 0},
        {"max_num_boxes": 0},
        {"max_num_boxes": 2.5},
        {"flip_horizontal": "yes"},
        {"model_type": ""},
    ],
)
def test_patch_rejects_out_of_range(changes):
    with pytest.raises(MalformedModelParameters):
        ModelParameters().patch(**changes)


def test_patch_rejects_unknown_field():
    with pytest.raises(MalformedModelParameters, match="Unknown"):
        ModelParameters().patch(scoreThreshold=0.5)


def test_constructor_validates():
    with pytest.raises(MalformedModelParameters):
        ModelParameters(score_threshold=1.01)


def test_malformed_parameters_is_value_error():
    with pytest.raises(ValueError):
        ModelParameters(iou_threshold=3)


def test_run_config_from_args():
    config = RunConfig.from_args(
        source=0,
        output_path="out.mp4",
        flip_horizontal=False,
        score_threshold=0.6,
        max_num_boxes=5,
    )

    assert config.source == 0
    assert config.output_path == "out.mp4"
    assert config.params.flip_horizontal is False
    assert config.params.score_threshold == 0.6
    assert config.params.max_num_boxes == 5
    assert config.device == "cpu"
    assert config.nms_device == "cpu"
