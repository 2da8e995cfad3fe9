import numpy as np
import pytest

from eyescenecal.pose import pose_matrix
from eyescenecal.results import save_result
from eyescenecal.storage import read_opencv_yaml

MATRIX = pose_matrix([0.2, -0.1, 0.4], [3.0, -1.5, 12.0])


def _parse(text):
    return [[float(v) for v in line.split("\t") if v] for line in text.splitlines()]


def test_written_file_names(tmp_path):
    paths = save_result(tmp_path, MATRIX)
    assert [p.name for p in paths] == [
        "cvM44VirtualEyeCam2SceneCam.txt",
        "cvM44VirtualEyeCam2SceneCam.yaml",
        "cvM44SceneCam2VirtualEyeCam.txt",
        "cvM44SceneCam2VirtualEyeCam.yaml",
    ]
    assert all(p.exists() for p in paths)


def test_yaml_round_trip(tmp_path):
    save_result(tmp_path, MATRIX)
    stored = read_opencv_yaml(tmp_path / "cvM44VirtualEyeCam2SceneCam.yaml", "cvM44VirtualEyeCam2SceneCam")
    assert np.array_equal(stored, MATRIX)


def test_inverse_yaml(tmp_path):
    save_result(tmp_path, MATRIX)
    inverse = read_opencv_yaml(
        tmp_path / "cvM44SceneCam2VirtualEyeCam.yaml", "cvM44SceneCam2VirtualEyeCam"
    )
    assert np.allclose(inverse @ MATRIX, np.eye(4))


def test_text_files(tmp_path):
    save_result(tmp_path, MATRIX)
    forward = _parse((tmp_path / "cvM44VirtualEyeCam2SceneCam.txt").read_text())
    backward = _parse((tmp_path / "cvM44SceneCam2VirtualEyeCam.txt").read_text())
    assert np.allclose(forward, MATRIX)
    assert np.allclose(np.array(backward) @ MATRIX, np.eye(4))
    assert len(forward) == 4 and all(len(row) == 4 for row in forward)


def test_bad_shape(tmp_path):
    with pytest.raises(ValueError):
        save_result(tmp_path, np.eye(3))


def test_singular_matrix(tmp_path):
    with pytest.raises(ValueError):
        save_result(tmp_path, np.zeros((4, 4)))
    assert list(tmp_path.iterdir()) == []