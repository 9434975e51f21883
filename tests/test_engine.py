import os
import unittest
from unittest.mock import MagicMock, patch

import torch

from handtrack.detection.engine import TorchInferenceEngine, check_raw_outputs, model_paths
from handtrack.errors import InferenceFailure


def _raw_outputs(num_boxes=10, num_classes=3):
    return torch.zeros((1, num_boxes, num_classes)), torch.zeros((1, num_boxes, 1, 4))


class TestTorchInferenceEngine(unittest.TestCase):
    def test_model_paths(self):
        model_path, weights_path = model_paths("models", "ssdlitemobilenetv2")
        self.assertEqual(model_path, os.path.join("models", "ssdlitemobilenetv2", "model.pt"))
        self.assertEqual(weights_path, os.path.join("models", "ssdlitemobilenetv2", "weights.pt"))

    def test_defaults_to_cpu(self):
        self.assertEqual(TorchInferenceEngine("model.pt").device, torch.device("cpu"))
        engine = TorchInferenceEngine.from_model_type("models", "ssdlitemobilenetv2")
        self.assertEqual(engine.device, torch.device("cpu"))

    def test_check_raw_outputs_accepts_list(self):
        scores, boxes = check_raw_outputs([torch.zeros((1, 5, 3)), torch.zeros((1, 5, 1, 4))])
        self.assertEqual(tuple(scores.shape), (1, 5, 3))
        self.assertEqual(tuple(boxes.shape), (1, 5, 1, 4))

    @patch("handtrack.detection.engine.torch.jit.load")
    def test_load_warms_up_once(self, mock_jit_load):
        mock_model = MagicMock()
        mock_model.return_value = _raw_outputs()
        mock_jit_load.return_value = mock_model

        engine = TorchInferenceEngine("model.pt", device="cpu")
        handle = engine.load()

        self.assertIs(handle, engine)
        mock_jit_load.assert_called_once_with("model.pt", map_location=torch.device("cpu"))
        mock_model.eval.assert_called_once()
        mock_model.assert_called_once()
        warmup_input = mock_model.call_args[0][0]
        self.assertEqual(tuple(warmup_input.shape), (1, 300, 300, 3))
        self.assertEqual(float(warmup_input.abs().sum()), 0.0)

    @patch("handtrack.detection.engine.torch.load")
    @patch("handtrack.detection.engine.torch.jit.load")
    def test_load_applies_weights_file(self, mock_jit_load, mock_torch_load):
        mock_model = MagicMock()
        mock_model.return_value = _raw_outputs()
        mock_jit_load.return_value = mock_model
        state_dict = {"w": torch.zeros(1)}
        mock_torch_load.return_value = state_dict

        with patch("handtrack.detection.engine.os.path.exists", return_value=True):
            TorchInferenceEngine("model.pt", "weights.pt", device="cpu").load()

        mock_torch_load.assert_called_once_with("weights.pt", map_location=torch.device("cpu"))
        mock_model.load_state_dict.assert_called_once_with(state_dict)

    @patch("handtrack.detection.engine.torch.jit.load")
    def test_load_failure_raises_inference_failure(self, mock_jit_load):
        mock_jit_load.side_effect = RuntimeError("missing file")

        with self.assertRaises(InferenceFailure):
            TorchInferenceEngine("missing.pt", device="cpu").load()

    def test_infer_before_load(self):
        with self.assertRaises(InferenceFailure):
            TorchInferenceEngine("model.pt", device="cpu").infer(torch.zeros((1, 33, 33, 3)))

    @patch("handtrack.detection.engine.torch.jit.load")
    def test_infer_returns_scores_and_boxes(self, mock_jit_load):
        mock_model = MagicMock()
        mock_model.return_value = _raw_outputs(num_boxes=7, num_classes=2)
        mock_jit_load.return_value = mock_model
        engine = TorchInferenceEngine("model.pt", device="cpu").load()

        scores, boxes = engine.infer(torch.zeros((1, 33, 33, 3)))

        self.assertEqual(tuple(scores.shape), (1, 7, 2))
        self.assertEqual(tuple(boxes.shape), (1, 7, 1, 4))

    @patch("handtrack.detection.engine.torch.jit.load")
    def test_forward_error_raises_inference_failure(self, mock_jit_load):
        mock_model = MagicMock()
        mock_model.side_effect = [_raw_outputs(), RuntimeError("out of memory")]
        mock_jit_load.return_value = mock_model
        engine = TorchInferenceEngine("model.pt", device="cpu").load()

        with self.assertRaises(InferenceFailure):
            engine.infer(torch.zeros((1, 33, 33, 3)))

    @patch("handtrack.detection.engine.torch.jit.load")
    def test_malformed_outputs_raise_inference_failure(self, mock_jit_load):
        mock_model = MagicMock()
        mock_model.side_effect = [
            _raw_outputs(),
            (torch.zeros((1, 5, 3)), torch.zeros((1, 4, 1, 4))),
            (torch.zeros((5, 3)), torch.zeros((1, 5, 1, 4))),
            torch.zeros((1, 5, 3)),
        ]
        mock_jit_load.return_value = mock_model
        engine = TorchInferenceEngine("model.pt", device="cpu").load()

        for _ in range(3):
            with self.assertRaises(InferenceFailure):
                engine.infer(torch.zeros((1, 33, 33, 3)))

    @patch("handtrack.detection.engine.torch.jit.load")
    def test_dispose(self, mock_jit_load):
        mock_model = MagicMock()
        mock_model.return_value = _raw_outputs()
        mock_jit_load.return_value = mock_model
        engine = TorchInferenceEngine("model.pt", device="cpu").load()

        engine.dispose()

        with self.assertRaises(InferenceFailure):
            engine.infer(torch.zeros((1, 33, 33, 3)))


if __name__ == "__main__":
    unittest.main()
