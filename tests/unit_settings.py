import json
import sys
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parent.parent
SRC_ROOT = REPO_ROOT / "src"
sys.path.insert(0, str(SRC_ROOT))

from core.errors import ClassifierError, ConfigurationError  # noqa: E402
from core.labels import LabelSet  # noqa: E402
from core.settings import (  # noqa: E402
    DEFAULT_SETTINGS, build_image_handler, load_settings,
)


def test_missing_file_uses_defaults(tmp_path):
    settings = load_settings(str(tmp_path / "missing.json"), base_dir=tmp_path)

    assert settings["top_k"] == DEFAULT_SETTINGS["top_k"]
    assert settings["preprocessing"]["input_size"] == 224
    assert settings["model_path"] == str(tmp_path / "models" / "cat_dog.onnx")


def test_invalid_file_uses_defaults(tmp_path):
    config_path = tmp_path / "settings.json"
    config_path.write_text("{ not json", encoding="utf-8")

    settings = load_settings(str(config_path), base_dir=tmp_path)

    assert settings["app_title"] == DEFAULT_SETTINGS["app_title"]


@pytest.mark.parametrize("preprocessing", [[1, 2], "bicubic", 224])
def test_non_object_preprocessing_uses_defaults(tmp_path, preprocessing):
    config_path = tmp_path / "settings.json"
    config_path.write_text(
        json.dumps({"top_k": 9, "preprocessing": preprocessing}), encoding="utf-8")

    settings = load_settings(str(config_path), base_dir=tmp_path)

    assert settings["preprocessing"] == DEFAULT_SETTINGS["preprocessing"]
    assert settings["top_k"] == DEFAULT_SETTINGS["top_k"]


def test_merges_preprocessing_and_resolves_paths(tmp_path):
    config_path = tmp_path / "settings.json"
    absolute_labels = tmp_path / "elsewhere" / "labels.json"
    config_path.write_text(json.dumps({
        "model_path": "models/resnet50.onnx",
        "labels_path": str(absolute_labels),
        "preprocessing": {"resample": "nearest"},
        "top_k": 3,
    }), encoding="utf-8")

    settings = load_settings(str(config_path), base_dir=tmp_path)

    assert settings["model_path"] == str(tmp_path / "models" / "resnet50.onnx")
    assert settings["labels_path"] == str(absolute_labels)
    assert settings["preprocessing"]["resample"] == "nearest"
    assert settings["preprocessing"]["input_size"] == 224
    assert settings["top_k"] == 3
    # Defaults are never mutated by a merge
    assert DEFAULT_SETTINGS["preprocessing"]["resample"] == "catmull-rom"


def test_overrides_skip_none(tmp_path):
    settings = load_settings(
        str(tmp_path / "missing.json"),
        overrides={"top_k": 7, "model_path": None},
        base_dir=tmp_path,
    )

    assert settings["top_k"] == 7
    assert settings["model_path"].endswith("cat_dog.onnx")


def test_build_image_handler():
    handler = build_image_handler({
        "preprocessing": {"input_size": 64, "resample": "nearest",
                          "mean": [0.485, 0.456, 0.406], "std": [0.229, 0.224, 0.225]},
        "supported_formats": [".png"],
    })

    assert handler.input_size == 64
    assert handler.resample == "nearest"
    assert handler.mean is not None
    assert handler.is_supported_image("x.png")
    assert not handler.is_supported_image("x.jpg")


def test_shipped_settings_and_labels_load():
    settings = load_settings()

    assert settings["preprocessing"]["input_size"] == 224
    labels = LabelSet.load(settings["labels_path"])
    assert list(labels) == ["cat", "dog"]

    handler = build_image_handler(settings)
    assert handler.resample == "catmull-rom"


def test_unknown_resample_in_settings_is_rejected():
    with pytest.raises(ConfigurationError, match="cubic-ish"):
        build_image_handler({"preprocessing": {"resample": "cubic-ish"}})


def test_unusable_preprocessing_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        build_image_handler({"preprocessing": [1]})
    with pytest.raises(ConfigurationError, match="input_size"):
        build_image_handler({"preprocessing": {"input_size": 0}})
    assert issubclass(ConfigurationError, ClassifierError)
