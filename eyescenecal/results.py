"""Saving the eye-to-scene calibration result and its inverse."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from eyescenecal.storage import PathLike, write_matrix_text, write_opencv_yaml

EYE_TO_SCENE = "cvM44VirtualEyeCam2SceneCam"
SCENE_TO_EYE = "cvM44SceneCam2VirtualEyeCam"


def save_result(directory: PathLike, matrix) -> list[Path]:
    """Write the eye-to-scene transform and its inverse as text and YAML files.

    Returns the paths written: eye-to-scene text and YAML, then scene-to-eye
    text and YAML.
    """
    transform = np.asarray(matrix, dtype=np.float64)
    if transform.shape != (4, 4):
        raise ValueError(f"result must be a 4x4 matrix, found {transform.shape}")
    try:
        inverse = np.linalg.inv(transform)
    except np.linalg.LinAlgError as exc:
        raise ValueError("result matrix is singular") from exc

    folder = Path(directory)
    written = []
    for name, values in ((EYE_TO_SCENE, transform), (SCENE_TO_EYE, inverse)):
        text_path = folder / f"{name}.txt"
        yaml_path = folder / f"{name}.yaml"
        write_matrix_text(text_path, values)
        write_opencv_yaml(yaml_path, name, values)
        written.extend([text_path, yaml_path])
    return written