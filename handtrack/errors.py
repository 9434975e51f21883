"""Exceptions raised by the detection pipeline."""


class HandtrackError(Exception):
    """Base class for handtrack errors."""


class InvalidDimension(HandtrackError, ValueError):
    """Raised when a frame dimension resizes to a non-positive resolution."""


class InferenceFailure(HandtrackError, RuntimeError):
    """Raised when the inference engine fails or returns malformed outputs."""


class MalformedModelParameters(HandtrackError, ValueError):
    """Raised when a model parameter is outside its valid range."""
