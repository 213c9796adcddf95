"""
Image handling utilities for loading images, building previews and
converting images into model input tensors.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple, Any

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

DEFAULT_FORMATS = ('.png', '.jpg', '.jpeg', '.bmp', '.gif', '.webp', '.tiff')

# "catmull-rom" is Pillow's bicubic kernel (a = -0.5)
RESAMPLE_FILTERS = {
    'nearest': Image.Resampling.NEAREST,
    'catmull-rom': Image.Resampling.BICUBIC,
    'bicubic': Image.Resampling.BICUBIC,
    'bilinear': Image.Resampling.BILINEAR,
    'lanczos': Image.Resampling.LANCZOS,
}


def fit_to_width(size: Tuple[int, int], available_width: int,
                 max_height: Optional[int] = None) -> Tuple[int, int]:
    """Scale (width, height) to fill available_width, keeping aspect ratio."""
    width, height = size
    if width <= 0 or height <= 0 or available_width <= 0:
        return (1, 1)

    scale = available_width / width
    if max_height and height * scale > max_height:
        scale = max_height / height

    return (max(1, round(width * scale)), max(1, round(height * scale)))


class ImageHandler:
    """Handles image loading, previews and tensor preprocessing."""

    def __init__(self, input_size: int = 224, resample: str = 'catmull-rom',
                 mean: Optional[Sequence[float]] = None,
                 std: Optional[Sequence[float]] = None,
                 supported_formats: Optional[Iterable[str]] = None):
        self.logger = logging.getLogger(__name__)
        self.input_size = int(input_size)
        if self.input_size <= 0:
            raise ValueError(f"input_size must be positive, got {input_size}")

        resample_key = (resample or '').lower()
        if resample_key not in RESAMPLE_FILTERS:
            raise ValueError(
                f"Unknown resample filter {resample!r}; "
                f"choose one of {', '.join(sorted(RESAMPLE_FILTERS))}")
        self.resample = resample_key

        if (mean is None) != (std is None):
            raise ValueError("mean and std must be given together")
        self.mean = self._channel_vector(mean, 'mean')
        self.std = self._channel_vector(std, 'std')
        if self.std is not None and np.any(self.std == 0):
            raise ValueError("std values must be non-zero")

        formats = supported_formats or DEFAULT_FORMATS
        self.supported_formats = {fmt.lower() for fmt in formats}

    @staticmethod
    def _channel_vector(values: Optional[Sequence[float]], name: str) -> Optional[np.ndarray]:
        if values is None:
            return None
        vector = np.asarray(values, dtype=np.float32)
        if vector.shape != (3,):
            raise ValueError(f"{name} needs exactly 3 values, got {list(values)}")
        return vector.reshape(3, 1, 1)

    def is_supported_image(self, file_path: str) -> bool:
        """Check if the file is a supported image format."""
        return Path(file_path).suffix.lower() in self.supported_formats

    def dialog_filetypes(self):
        """File type filters for the open dialog."""
        # Tk matches patterns case-sensitively on X11
        patterns = " ".join(
            f"*{fmt} *{fmt.upper()}" for fmt in sorted(self.supported_formats))
        return [("Image files", patterns), ("All files", "*.*")]

    def load_image(self, file_path: str) -> Optional[Image.Image]:
        """Decode an image as RGB, or return None when it cannot be used."""
        try:
            if not self.is_supported_image(file_path):
                self.logger.warning(f"Unsupported image format: {file_path}")
                return None

            with Image.open(file_path) as image:
                image = ImageOps.exif_transpose(image)
                # Drops alpha and expands palette/grayscale modes
                rgb = image.convert('RGB')
            rgb.load()
            return rgb
        except (OSError, UnidentifiedImageError, ValueError) as e:
            self.logger.error(f"Error loading image {file_path}: {e}")
            return None

    def get_image_info(self, file_path: str) -> Optional[Dict[str, Any]]:
        """Extract basic image information."""
        try:
            path_obj = Path(file_path)

            if not path_obj.exists() or not self.is_supported_image(file_path):
                return None

            stat = path_obj.stat()

            with Image.open(file_path) as image:
                width, height = image.size
                format_name = image.format or 'Unknown'

            return {
                'file_path': str(path_obj.absolute()),
                'filename': path_obj.name,
                'file_size': stat.st_size,
                'width': width,
                'height': height,
                'format': format_name,
            }
        except (OSError, UnidentifiedImageError) as e:
            self.logger.error(f"Error getting image info for {file_path}: {e}")
            return None

    def create_preview(self, image: Image.Image, available_width: int,
                       max_height: Optional[int] = None) -> Image.Image:
        """Return a copy of the image scaled to the available width."""
        target = fit_to_width(image.size, available_width, max_height)
        if target == image.size:
            return image.copy()
        return image.resize(target, Image.Resampling.LANCZOS)

    def to_tensor(self, image: Image.Image) -> np.ndarray:
        """
        Convert an image into a float32 [1, 3, H, W] tensor.

        Samples are divided by 255.0; mean/std normalization follows
        when configured.
        """
        if image.mode != 'RGB':
            image = image.convert('RGB')

        size = (self.input_size, self.input_size)
        if image.size != size:
            image = image.resize(size, RESAMPLE_FILTERS[self.resample])

        # HWC uint8 -> CHW float
        array = np.asarray(image, dtype=np.float32) / 255.0
        array = np.transpose(array, (2, 0, 1))

        if self.mean is not None:
            array = (array - self.mean) / self.std

        return np.ascontiguousarray(array[np.newaxis, ...], dtype=np.float32)
