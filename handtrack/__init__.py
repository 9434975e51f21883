"""Real-time hand detection postprocessing."""

__version__ = "0.1.0"
