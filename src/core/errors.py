"""
Exceptions raised by the classification core.
"""


class ClassifierError(Exception):
    """Base class for errors the UI reports to the user."""


class LabelLoadError(ClassifierError):
    """Label side-car file is missing or malformed."""


class ModelLoadError(ClassifierError):
    """ONNX model file is missing or cannot be loaded by the runtime."""


class ClassificationError(ClassifierError):
    """Inference could not produce a label."""


class ConfigurationError(ClassifierError, ValueError):
    """Settings hold an unusable preprocessing option."""
