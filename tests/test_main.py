import json
from pathlib import Path

import main


def _config(tmp_path: Path) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(
        "recognition:\n  height: 100\n  width: 100\n  recognition_count: 2\n",
        encoding="utf-8",
    )
    return path


def _recording(tmp_path: Path, frames: int) -> Path:
    path = tmp_path / "rec.jsonl"
    frame = {"boxes": [0.25, 0.25, 0.5, 0.5], "labels": {"0": 3}, "scores": [0.5]}
    path.write_text("\n".join(json.dumps(frame) for _ in range(frames)) + "\n", encoding="utf-8")
    return path


def test_replay_prints_confident_object(tmp_path: Path, capsys):
    code = main.main([str(_recording(tmp_path, 3)), "--config", str(_config(tmp_path))])

    assert code == 0
    out = capsys.readouterr().out
    assert "track 1 label=3" in out
    assert "seen=3" in out


def test_replay_without_confident_object(tmp_path: Path, capsys):
    code = main.main([str(_recording(tmp_path, 1)), "--config", str(_config(tmp_path))])

    assert code == 0
    assert capsys.readouterr().out.strip() == "none"


def test_invalid_frame_size_exits_with_error(tmp_path: Path):
    code = main.main([
        str(_recording(tmp_path, 1)),
        "--config", str(_config(tmp_path)),
        "--width", "0",
    ])
    assert code == 1


def test_missing_recording_exits_with_error(tmp_path: Path):
    code = main.main([str(tmp_path / "missing.jsonl"), "--config", str(_config(tmp_path))])
    assert code == 1


def test_missing_config_exits_with_error(tmp_path: Path):
    code = main.main([str(_recording(tmp_path, 1)), "--config", str(tmp_path / "nope.yaml")])
    assert code == 1
