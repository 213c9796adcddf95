"""
UI package for the ONNX Image Classifier Desktop App.
"""

from .image_view import ImagePreview
from .prediction_panel import PredictionPanel

__all__ = ['ImagePreview', 'PredictionPanel']
