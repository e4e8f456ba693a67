import json
import subprocess
import sys

import numpy as np
import pytest
from PIL import Image

from imgseg.experiment.cli import _build_parser, main, resolve_config

RUN_YAML = """
segments: [2, 4]
selection:
  method: tournament
  size: 2
  replacement: true
"""


@pytest.fixture
def image_path(tmp_path):
    rgb = np.random.default_rng(0).integers(0, 256, size=(5, 6, 3), dtype=np.uint8)
    path = tmp_path / "sample.png"
    Image.fromarray(rgb).save(path)
    return path


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text(RUN_YAML, encoding="utf-8")
    return path


def test_overrides_win_over_config_file(config_path):
    args = _build_parser().parse_args(
        ["--image", "x.png", "--config", str(config_path), "--pop-size", "6", "--workers", "2"]
    )
    cfg = resolve_config(args)
    assert cfg.pop_size == 6
    assert cfg.segments == (2, 4)
    assert cfg.eval_backend == "thread"
    assert cfg.n_workers == 2


def test_parser_rejects_unknown_mode():
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["--image", "x.png", "--mode", "random"])


@pytest.mark.smoke
@pytest.mark.parametrize("mode", ["nsga2", "weighted"])
def test_main_writes_results(tmp_path, image_path, config_path, mode):
    out = tmp_path / "out"
    code = main(
        [
            "--image", str(image_path),
            "--config", str(config_path),
            "--pop-size", "6",
            "--generations", "1",
            "--seed", "0",
            "--mode", mode,
            "--output", str(out),
        ]
    )
    assert code == 0
    assert (out / "FUN.csv").exists()
    assert (out / "SEGMENTS_0.csv").exists()
    assert (out / "type_1" / "0.png").exists()
    resolved = json.loads((out / "resolved_config.json").read_text(encoding="utf-8"))
    assert resolved["pop_size"] == 6
    assert resolved["mode"] == mode


@pytest.mark.smoke
def test_main_without_borders_on_thread_pool(tmp_path, image_path, config_path):
    out = tmp_path / "out"
    code = main(
        [
            "--image", str(image_path),
            "--config", str(config_path),
            "--pop-size", "4",
            "--generations", "1",
            "--workers", "2",
            "--no-borders",
            "--output", str(out),
        ]
    )
    assert code == 0
    assert (out / "FUN.csv").exists()
    assert not (out / "type_1").exists()


def test_main_reports_failures(tmp_path, config_path):
    assert main(["--image", str(tmp_path / "missing.png"), "--config", str(config_path)]) == 1
    assert main(["--image", str(tmp_path / "missing.png"), "--config", str(tmp_path / "none.yaml")]) == 1


def test_module_help():
    proc = subprocess.run(
        [sys.executable, "-m", "imgseg.experiment.cli", "--help"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        timeout=30,
    )
    assert proc.returncode == 0
    assert b"--image" in proc.stdout


@pytest.mark.parametrize(
    "text",
    [
        "segments:\n  lower: 3\n",
        "pop_size: ten\n",
        "weights:\n  edges: 1\n",
        "pop_size: [1, 2\n",
    ],
)
def test_main_reports_bad_config(tmp_path, image_path, text):
    path = tmp_path / "bad.yaml"
    path.write_text(text, encoding="utf-8")
    assert main(["--image", str(image_path), "--config", str(path), "--output", str(tmp_path / "out")]) == 1
    assert not (tmp_path / "out").exists()


def test_small_weighted_run_without_config(image_path):
    args = _build_parser().parse_args(["--image", str(image_path), "--pop-size", "5", "--mode", "weighted"])
    cfg = resolve_config(args)
    assert (cfg.pop_size, cfg.mode) == (5, "weighted")
