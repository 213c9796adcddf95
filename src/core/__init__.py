"""
Core package for the ONNX Image Classifier Desktop App.
"""

from .errors import (
    ClassifierError, LabelLoadError, ModelLoadError, ClassificationError, ConfigurationError,
)
from .labels import LabelSet
from .image_handler import ImageHandler, fit_to_width
from .classifier import ClassificationEngine, Prediction, build_engine
from .session import ClassifierSession
from .settings import load_settings, build_image_handler

__all__ = [
    'ClassifierError', 'LabelLoadError', 'ModelLoadError', 'ClassificationError',
    'ConfigurationError',
    'LabelSet', 'ImageHandler', 'fit_to_width', 'ClassificationEngine',
    'Prediction', 'build_engine', 'ClassifierSession', 'load_settings',
    'build_image_handler',
]
