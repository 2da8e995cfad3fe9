"""Command line for computing the eye-to-scene camera calibration."""

from __future__ import annotations

import argparse
import json
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

from eyescenecal.calibration import CalibrationError, calibrate
from eyescenecal.results import SCENE_TO_EYE, save_result
from eyescenecal.rig import SCALE_FACTOR, format_number, rig_matrix
from eyescenecal.storage import PathLike, StorageError, load_camera_matrix, load_distortion


def load_centers(path: PathLike) -> list[list[tuple[float, float]]]:
    """Read circle centres from a JSON file: a list of images, each a list of [x, y]."""
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ValueError(f"{path} must hold a list of images")
    images = []
    for number, image in enumerate(data):
        if not isinstance(image, list):
            raise ValueError(f"image {number} in {path} must be a list of points")
        points = []
        for point in image:
            if not isinstance(point, (list, tuple)) or len(point) != 2:
                raise ValueError(f"image {number} in {path} holds a point that is not [x, y]")
            try:
                points.append((float(point[0]), float(point[1])))
            except (TypeError, ValueError) as exc:
                raise ValueError(f"image {number} in {path} holds a non-numeric point") from exc
        images.append(points)
    return images


def run_simulator(simulator: PathLike, result_file: PathLike) -> int:
    """Start the 3D viewer on a saved result file and return its exit status."""
    completed = subprocess.run([str(simulator), str(result_file)], check=False)
    return completed.returncode


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eyescenecal",
        description="Compute the transform from the virtual eye camera to the scene camera.",
    )
    parser.add_argument("--eye-camera", required=True, help="cam.yaml of the eye camera")
    parser.add_argument("--eye-distortion", required=True, help="dst.yaml of the eye camera")
    parser.add_argument("--scene-camera", required=True, help="cam.yaml of the scene camera")
    parser.add_argument("--scene-distortion", required=True, help="dst.yaml of the scene camera")
    parser.add_argument("--eye-centers", required=True, help="JSON circle centres of eye images")
    parser.add_argument("--scene-centers", required=True, help="JSON circle centres of scene images")
    parser.add_argument("--output", required=True, help="directory to save the result in")
    parser.add_argument("--simulator", help="viewer program to show the result in 3D")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the calibration from parameter and centre files; return the exit status."""
    args = _parser().parse_args(argv)
    try:
        eye_camera = load_camera_matrix(args.eye_camera)
        eye_dist = load_distortion(args.eye_distortion)
        scene_camera = load_camera_matrix(args.scene_camera)
        scene_dist = load_distortion(args.scene_distortion)
        eye_centers = load_centers(args.eye_centers)
        scene_centers = load_centers(args.scene_centers)
        if not eye_centers:
            raise CalibrationError("no image pairs of virtual eye cam and scene cam")
        result = calibrate(
            eye_camera,
            eye_dist,
            scene_camera,
            scene_dist,
            rig_matrix(),
            SCALE_FACTOR,
            eye_centers,
            scene_centers,
        )
        output = Path(args.output)
        output.mkdir(parents=True, exist_ok=True)
        save_result(output, result)
    except (StorageError, CalibrationError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for row in result:
        print("\t".join(format_number(value) for value in row))

    if args.simulator:
        status = run_simulator(args.simulator, output / f"{SCENE_TO_EYE}.yaml")
        if status != 0:
            print(f"error: simulator exited with status {status}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())