# eyescenecal

Calibrates the rigid transform between a (virtual) eye camera and a scene
camera on a head-mounted gaze-tracking rig.

The rig holds two asymmetric circle-grid boards (4 circles per row, 11 rows):
a small board seen by the eye camera and a big board seen by the scene camera.
The pose of the small board relative to the big board is fixed, as is the
ratio of their grid spacings. From pairs of circle centres, one eye view and
one scene view per pair, the package estimates the pose of each board in its
camera, chains the transforms through the rig, and averages the results into a
single 4x4 matrix mapping eye-camera coordinates to scene-camera coordinates.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command line

The package installs one command:

```
eyescenecal --help
```

All of these options are required:

- `--eye-camera`, `--scene-camera`: YAML files holding each camera's 3x3
  matrix under the name `intrinsic`.
- `--eye-distortion`, `--scene-distortion`: YAML files holding each camera's
  5x1 distortion vector under the name `distortion`.
- `--eye-centers`, `--scene-centers`: JSON files with the circle centres of
  the image pairs, a list of images, each a list of `[x, y]` points, in the
  same order in both files.
- `--output`: directory to write the result into (created if missing).

Optionally, `--simulator PROGRAM` starts `PROGRAM` with the path of the saved
`cvM44SceneCam2VirtualEyeCam.yaml` as its argument once the result is written.

The command uses the built-in rig transform and scaling factor, prints the
resulting 4x4 matrix, one tab-separated row per line, and returns 0. Unreadable
files, bad data or a failed calibration are reported on standard error with
exit status 1, as is a simulator that exits with a non-zero status.

## Library use

### Camera parameter files

`eyescenecal.storage` reads and writes plain-text tables and OpenCV-style YAML
matrix files:

```python
from eyescenecal.storage import load_camera_matrix, load_distortion

eye_k = load_camera_matrix("eye/cam.yaml")   # 3x3, under "intrinsic"
eye_d = load_distortion("eye/dst.yaml")      # 5x1, under "distortion"
```

`read_opencv_yaml(path, name)` and `write_opencv_yaml(path, name, matrix)`
handle any named matrix; `write_matrix_text(path, matrix)` writes rows of
values in scientific notation, tab separated. Problems are raised as
`StorageError`.

`eyescenecal.camera_params.save_camera_parameters(directory, camera_matrix,
dist_coeffs, rvecs, tvecs)` writes one camera's calibration as `cam.txt`,
`cam.yaml`, `dst.txt`, `dst.yaml`, `rvecs.txt`, `tvecs.txt` and `rmats.txt`.
`numbered_file_names(directory, stem, count)` gives the paths `stem.0.bmp`,
`stem.1.bmp`, and so on.

### The rig

`eyescenecal.rig.rig_matrix()` returns the fixed small-board-to-big-board
transform, `SCALE_FACTOR` the ratio of the two grid spacings, and
`rig_description(scale)` a text note on the rig and its board pattern.

### Calibrating

```python
from eyescenecal.calibration import calibrate
from eyescenecal.rig import SCALE_FACTOR, rig_matrix
from eyescenecal.results import save_result

result = calibrate(
    eye_k, eye_d,
    scene_k, scene_d,
    rig_matrix(), SCALE_FACTOR,
    eye_centers, scene_centers,
)
save_result("calibration-output", result)
```

Pairs whose pose cannot be found are skipped with a logged warning; if none
remain, or the inputs are unusable, `CalibrationError` is raised. The scaling
factor must lie strictly between 0 and 1. `average_transform(rotations,
translations)` is the averaging step on its own, and `big_board_points()` and
`small_board_points(scale)` give the boards' circle centres.

`save_result(directory, matrix)` writes the eye-to-scene transform and its
inverse, each as `.txt` and `.yaml` (`cvM44VirtualEyeCam2SceneCam` and
`cvM44SceneCam2VirtualEyeCam`).

Pose estimation lives in `eyescenecal.pose`: `rodrigues`, `project_points`,
`solve_pnp` and `pose_matrix`, built on numpy and scipy, raising `PoseError`.

### Keeping and pairing captures

`eyescenecal.capture_list.CaptureList` holds `Capture` records (circle
centres, whether the grid was found, an optional image) with `append`,
`remove`, `remove_bad`, `centers` and `all_found`.
`board_object_points(width, height)` gives the object points of an asymmetric
circle grid.

`eyescenecal.pairing.pair_image_files(eye_files, scene_files)` sorts and
matches `eye.<n>.bmp` files to `scene.<n>.bmp` files, raising `PairingError`
when they do not pair up; `pair_file_names(directory, count)` gives the paths
to save pairs under.

## What the package does not do

It does not open cameras, show images or provide a graphical interface, and
it does not detect circle grids in images: circle centres must come from
elsewhere, as JSON for the command line or as point lists for the library. It
has no helper that decides when to capture a frame automatically, and no
single-camera intrinsic calibration; `save_camera_parameters` only stores the
results of one.