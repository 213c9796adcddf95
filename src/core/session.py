"""
Selection state shared by the window and the classifier.
"""

import logging
from typing import Any, Dict, Optional

from PIL import Image

from .classifier import ClassificationEngine, Prediction
from .errors import ClassificationError
from .image_handler import ImageHandler


class ClassifierSession:
    """Tracks the selected image, its prediction and the loaded model."""

    def __init__(self, image_handler: ImageHandler,
                 engine: Optional[ClassificationEngine] = None):
        self.image_handler = image_handler
        self.engine = engine
        self.logger = logging.getLogger(__name__)

        self.selected_path: Optional[str] = None
        self.image: Optional[Image.Image] = None
        self.image_info: Optional[Dict[str, Any]] = None
        self.prediction: Optional[Prediction] = None

        # Bumped whenever the image or the model changes
        self.generation = 0

    @property
    def has_selection(self) -> bool:
        return self.image is not None

    @property
    def model_ready(self) -> bool:
        return self.engine is not None and self.engine.is_loaded

    def select_image(self, file_path: Optional[str]) -> bool:
        """
        Make file_path the current image.

        Returns False and leaves the previous selection untouched when
        the dialog was cancelled or the file cannot be decoded.
        """
        if not file_path:
            return False

        image = self.image_handler.load_image(file_path)
        if image is None:
            self.logger.info(f"Keeping previous selection; could not load {file_path}")
            return False

        self.selected_path = file_path
        self.image = image
        self.image_info = self.image_handler.get_image_info(file_path)
        self.prediction = None
        self.generation += 1
        self.logger.info(f"Selected {file_path} ({image.width}x{image.height})")
        return True

    def classify_selected(self) -> Prediction:
        """Classify the current image without storing the result."""
        if self.image is None:
            raise ClassificationError("No image selected")
        if not self.model_ready:
            raise ClassificationError("No model is loaded")
        return self.engine.classify_image(self.image, image_path=self.selected_path)

    def is_current(self, file_path: Optional[str], generation: Optional[int] = None) -> bool:
        """True while file_path is selected and, if given, the generation is unchanged."""
        if file_path != self.selected_path:
            return False
        return generation is None or generation == self.generation

    def apply_prediction(self, file_path: Optional[str], prediction: Prediction,
                         generation: Optional[int] = None) -> bool:
        """
        Store a prediction if it still belongs to the selected image.

        Pass the generation read when the request started so results from
        a replaced image or model are dropped.
        """
        if not self.is_current(file_path, generation):
            self.logger.debug(f"Dropping stale prediction for {file_path}")
            return False
        self.prediction = prediction
        return True

    def set_engine(self, engine: ClassificationEngine) -> None:
        self.engine = engine
        self.prediction = None
        self.generation += 1

    def clear_engine(self) -> None:
        self.engine = None
        self.prediction = None
        self.generation += 1
