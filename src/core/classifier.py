"""
ONNX classification engine: runs a pre-trained network on preprocessed
images and maps the arg-max output to a label.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import onnxruntime as ort
from PIL import Image

from .errors import ClassificationError, ModelLoadError
from .image_handler import ImageHandler
from .labels import LabelSet

DEFAULT_PROVIDERS = ['CPUExecutionProvider']


@dataclass
class Prediction:
    """Result of classifying one image."""
    label: str
    index: int
    score: float
    top_k: List[Tuple[str, float]] = field(default_factory=list)
    elapsed_ms: float = 0.0
    image_path: Optional[str] = None
    probabilities: bool = True

    def summary(self) -> str:
        if self.probabilities:
            return f"{self.label} ({self.score:.1%})"
        return f"{self.label} (score {self.score:.3f})"


def softmax(values: np.ndarray) -> np.ndarray:
    """Numerically stable softmax over a flat vector."""
    shifted = values - np.max(values)
    exp = np.exp(shifted)
    return exp / np.sum(exp)


def _static_length(shape: Sequence[Any]) -> Optional[int]:
    """Product of a declared output shape, or None when any dim is symbolic."""
    length = 1
    for dim in shape or []:
        if not isinstance(dim, int) or dim <= 0:
            return None
        length *= dim
    return length


class ClassificationEngine:
    """Wraps an onnxruntime session plus the label list for one model."""

    def __init__(self, model_path: str, labels: LabelSet,
                 image_handler: Optional[ImageHandler] = None,
                 providers: Optional[List[str]] = None,
                 top_k: int = 5, apply_softmax: bool = True):
        self.model_path = Path(model_path)
        self.labels = labels
        self.image_handler = image_handler or ImageHandler()
        self.providers = list(providers or DEFAULT_PROVIDERS)
        self.top_k = max(1, int(top_k))
        self.apply_softmax = apply_softmax
        self.logger = logging.getLogger(__name__)

        self.session: Optional[ort.InferenceSession] = None
        self.input_name: Optional[str] = None
        self.output_length: Optional[int] = None

    @property
    def is_loaded(self) -> bool:
        return self.session is not None

    def load(self) -> "ClassificationEngine":
        """Create the inference session and read the model's input name."""
        if not self.model_path.is_file():
            raise ModelLoadError(f"Model file not found: {self.model_path}")

        available = ort.get_available_providers()
        providers = [p for p in self.providers if p in available]
        if not providers:
            self.logger.warning(
                f"None of {self.providers} available, falling back to {available}")
            providers = available

        try:
            session = ort.InferenceSession(str(self.model_path), providers=providers)
        except Exception as e:
            raise ModelLoadError(
                f"Could not load model {self.model_path}: {e}") from e

        inputs = session.get_inputs()
        if not inputs:
            raise ModelLoadError(f"Model {self.model_path} declares no inputs")

        self.session = session
        self.input_name = inputs[0].name

        outputs = session.get_outputs()
        self.output_length = _static_length(outputs[0].shape) if outputs else None
        if self.output_length is not None and self.output_length != len(self.labels):
            self.logger.warning(
                f"Model output has {self.output_length} values but "
                f"{len(self.labels)} labels are loaded")

        self.logger.info(
            f"Loaded model {self.model_path.name} "
            f"(input '{self.input_name}', providers {session.get_providers()})")
        return self

    def classify_tensor(self, tensor: np.ndarray, image_path: Optional[str] = None) -> Prediction:
        """Run a single synchronous inference call and pick the arg-max label."""
        if self.session is None:
            raise ClassificationError("No model is loaded")

        start = time.perf_counter()
        try:
            outputs = self.session.run(None, {self.input_name: tensor})
        except Exception as e:
            raise ClassificationError(f"Inference failed: {e}") from e
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        if not outputs:
            raise ClassificationError("Model returned no outputs")

        values = np.asarray(outputs[0], dtype=np.float32).reshape(-1)
        if values.size == 0:
            raise ClassificationError("Model returned an empty output")

        index = int(np.argmax(values))
        if index >= len(self.labels):
            raise ClassificationError(
                f"Predicted index {index} has no label "
                f"({len(self.labels)} labels loaded)")

        scores = softmax(values) if self.apply_softmax else values

        # Stable sort keeps the lowest index first on ties, matching argmax
        order = np.argsort(-scores, kind='stable')
        top_k = [
            (self.labels.lookup(int(i)), float(scores[i]))
            for i in order[:self.top_k] if int(i) < len(self.labels)
        ]

        prediction = Prediction(
            label=self.labels.lookup(index),
            index=index,
            score=float(scores[index]),
            top_k=top_k,
            elapsed_ms=elapsed_ms,
            image_path=image_path,
            probabilities=self.apply_softmax,
        )
        self.logger.info(
            f"Predicted {prediction.summary()} in {elapsed_ms:.1f} ms"
            + (f" for {image_path}" if image_path else ""))
        return prediction

    def classify_image(self, image: Image.Image, image_path: Optional[str] = None) -> Prediction:
        """Preprocess a decoded image and classify it."""
        tensor = self.image_handler.to_tensor(image)
        return self.classify_tensor(tensor, image_path=image_path)

    def classify_file(self, image_path: str) -> Prediction:
        """Decode, preprocess and classify an image file."""
        image = self.image_handler.load_image(image_path)
        if image is None:
            raise ClassificationError(f"Could not decode image: {image_path}")
        return self.classify_image(image, image_path=image_path)


def build_engine(settings: Dict[str, Any],
                 image_handler: Optional[ImageHandler] = None) -> ClassificationEngine:
    """Load labels and the ONNX model described by the settings."""
    labels = LabelSet.load(settings['labels_path'])
    engine = ClassificationEngine(
        settings['model_path'],
        labels,
        image_handler=image_handler,
        providers=settings.get('execution_providers'),
        top_k=settings.get('top_k', 5),
        apply_softmax=settings.get('apply_softmax', True),
    )
    return engine.load()
