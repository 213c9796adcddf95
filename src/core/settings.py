"""
Settings loading for the classifier app.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigurationError
from .image_handler import DEFAULT_FORMATS, ImageHandler

SRC_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = SRC_DIR / 'config' / 'settings.json'

# Resolved against SRC_DIR when relative
PATH_KEYS = ('model_path', 'labels_path', 'log_file')

DEFAULT_SETTINGS: Dict[str, Any] = {
    'app_title': 'Cat vs Dog Classifier',
    'model_path': 'models/cat_dog.onnx',
    'labels_path': 'config/cat_dog_labels.json',
    'execution_providers': ['CPUExecutionProvider'],
    'top_k': 5,
    'apply_softmax': True,
    'auto_classify': True,
    'preprocessing': {
        'input_size': 224,
        'resample': 'catmull-rom',
        'mean': None,
        'std': None,
    },
    'supported_formats': list(DEFAULT_FORMATS),
    'ui_theme': 'dark',
    'window_size': '900x760',
    'preview_max_height': 480,
    'log_file': 'image_classifier.log',
    'log_level': 'INFO',
}


def _resolve_paths(settings: Dict[str, Any], base_dir: Path) -> None:
    for key in PATH_KEYS:
        value = settings.get(key)
        if value and not Path(value).is_absolute():
            settings[key] = str(base_dir / value)


def load_settings(config_path: Optional[str] = None,
                  overrides: Optional[Dict[str, Any]] = None,
                  base_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings.json merged over the defaults.

    A missing or unreadable file falls back to the defaults. Values in
    overrides that are not None win over both.
    """
    logger = logging.getLogger(__name__)
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    base_dir = base_dir or SRC_DIR

    merged = copy.deepcopy(DEFAULT_SETTINGS)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            config = json.load(f)
        if not isinstance(config, dict):
            raise ValueError("top level must be a JSON object")

        preprocessing = config.get('preprocessing') or {}
        if not isinstance(preprocessing, dict):
            raise ValueError("preprocessing must be a JSON object")

        merged.update(config)
        merged['preprocessing'] = {**DEFAULT_SETTINGS['preprocessing'], **preprocessing}
    except FileNotFoundError:
        logger.warning(f"Settings file {path} not found, using defaults")
    except (OSError, ValueError) as e:
        logger.warning(f"Error loading settings from {path}: {e}; using defaults")
        merged = copy.deepcopy(DEFAULT_SETTINGS)

    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    _resolve_paths(merged, base_dir)
    return merged


def build_image_handler(settings: Dict[str, Any]) -> ImageHandler:
    """
    Create the ImageHandler described by the preprocessing settings.

    Unusable options raise ConfigurationError.
    """
    pre = settings.get('preprocessing') or {}
    if not isinstance(pre, dict):
        raise ConfigurationError("preprocessing settings must be an object")
    try:
        return ImageHandler(
            input_size=pre.get('input_size', 224),
            resample=pre.get('resample', 'catmull-rom'),
            mean=pre.get('mean'),
            std=pre.get('std'),
            supported_formats=settings.get('supported_formats'),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid preprocessing settings: {e}") from e
