[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eyescenecal"
version = "0.1.0"
description = "Eye-camera to scene-camera calibration for head-mounted gaze trackers"
requires-python = ">=3.10"
keywords = [
    "calibration",
    "camera",
    "eye tracking",
    "pose estimation",
    "circle grid",
    "computer vision",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
eyescenecal = "eyescenecal.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["eyescenecal"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
