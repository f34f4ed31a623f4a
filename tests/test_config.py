from pathlib import Path

import pytest

from frame_recognition.config import (
    RecognitionConfig,
    load_config,
    recognition_config_from_file,
)
from frame_recognition.core.contracts import ConfigurationError


def test_defaults():
    config = RecognitionConfig(height=1920, width=1080)
    assert config.recognition_count == 20
    assert config.score_threshold == 0.25
    assert config.check_count == 50
    assert config.tracking_threshold == 0.03


@pytest.mark.parametrize(
    "overrides",
    [
        {"height": 0},
        {"width": -1},
        {"recognition_count": 0},
        {"score_threshold": 1.5},
        {"check_count": -1},
        {"tracking_threshold": 0},
    ],
)
def test_invalid_values_rejected(overrides):
    settings = {"height": 100, "width": 100, **overrides}
    with pytest.raises(ConfigurationError):
        RecognitionConfig(**settings)


def test_from_dict_rejects_unknown_and_missing_keys():
    with pytest.raises(ConfigurationError, match="colour"):
        RecognitionConfig.from_dict({"height": 1, "width": 1, "colour": "red"})
    with pytest.raises(ConfigurationError, match="width"):
        RecognitionConfig.from_dict({"height": 1})


def test_load_yaml(tmp_path: Path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "recognition:\n  height: 640\n  width: 480\n  check_count: 0\n",
        encoding="utf-8",
    )

    config = recognition_config_from_file(path)
    assert config.height == 640
    assert config.width == 480
    assert config.check_count == 0
    assert config.recognition_count == 20


def test_overrides_win_over_file(tmp_path: Path):
    path = tmp_path / "settings.yaml"
    path.write_text("recognition:\n  height: 640\n  width: 480\n", encoding="utf-8")

    config = recognition_config_from_file(path, height=100, width=None)
    assert config.height == 100
    assert config.width == 480


def test_empty_file_is_empty_config(tmp_path: Path):
    path = tmp_path / "settings.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == {}


def test_missing_file_rejected(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "nope.yaml")


def test_bad_yaml_rejected(tmp_path: Path):
    path = tmp_path / "settings.yaml"
    path.write_text("recognition: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_non_mapping_root_rejected(tmp_path: Path):
    path = tmp_path / "settings.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)
