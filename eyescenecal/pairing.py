"""Matching eye and scene image files into numbered pairs."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from eyescenecal.storage import PathLike

EYE_STEM = "eye"
SCENE_STEM = "scene"


class PairingError(Exception):
    """Eye and scene image files cannot be matched into pairs."""


def _index_of(name: str) -> str:
    """The second-to-last dot-separated section of a file name: "3" in "eye.3.bmp"."""
    sections = name.split(".")
    return sections[-2] if len(sections) >= 2 else ""


def pair_image_files(
    eye_files: Iterable[PathLike], scene_files: Iterable[PathLike]
) -> list[tuple[Path, Path]]:
    """Sort both file lists and pair them up, checking that their numbers match.

    Files are expected to be named eye.<n>.bmp and scene.<n>.bmp; after sorting,
    the n of each eye file must equal the n of the scene file at the same place.
    """
    eyes = sorted(str(name) for name in eye_files)
    scenes = sorted(str(name) for name in scene_files)
    if len(eyes) != len(scenes):
        raise PairingError(
            f"# of eye image files ({len(eyes)}) not equal to "
            f"# of scene image files ({len(scenes)})"
        )
    for eye, scene in zip(eyes, scenes):
        eye_index = _index_of(eye)
        if eye_index != _index_of(scene):
            raise PairingError(
                "problem in making pairs of eye image file and scene image file: "
                f"eye.{eye_index}.bmp was read but scene.{eye_index}.bmp not found"
            )
    return [(Path(eye), Path(scene)) for eye, scene in zip(eyes, scenes)]


def pair_file_names(directory: PathLike, count: int) -> list[tuple[Path, Path]]:
    """Paths (directory/eye.<n>.bmp, directory/scene.<n>.bmp) for n from 0 to count-1."""
    if count < 0:
        raise ValueError("count must not be negative")
    folder = Path(directory)
    return [
        (folder / f"{EYE_STEM}.{index}.bmp", folder / f"{SCENE_STEM}.{index}.bmp")
        for index in range(count)
    ]