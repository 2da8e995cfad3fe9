"""Camera pose from known object points: Rodrigues vectors, projection and PnP."""

from __future__ import annotations

import numpy as np
from scipy.optimize import least_squares
from scipy.spatial.transform import Rotation

_DIST_LENGTHS = (0, 4, 5, 8)
_UNDISTORT_ITERATIONS = 20


class PoseError(Exception):
    """A pose could not be computed from the given data."""


def _points(points, dims: int, what: str) -> np.ndarray:
    try:
        array = np.asarray(points, dtype=np.float64).reshape(-1, dims)
    except ValueError as exc:
        raise PoseError(f"{what} must be a sequence of {dims}-component points") from exc
    return array


def _vector3(value, what: str) -> np.ndarray:
    array = np.asarray(value, dtype=np.float64).ravel()
    if array.size != 3:
        raise PoseError(f"{what} must have three components")
    return array


def _camera(camera_matrix) -> np.ndarray:
    matrix = np.asarray(camera_matrix, dtype=np.float64)
    if matrix.shape != (3, 3):
        raise PoseError("camera matrix must be 3x3")
    return matrix


def _distortion(dist_coeffs) -> np.ndarray:
    if dist_coeffs is None:
        return np.zeros(8)
    coeffs = np.asarray(dist_coeffs, dtype=np.float64).ravel()
    if coeffs.size not in _DIST_LENGTHS:
        raise PoseError("distortion must hold 0, 4, 5 or 8 coefficients")
    return np.concatenate([coeffs, np.zeros(8 - coeffs.size)])


def _distort(x: np.ndarray, y: np.ndarray, k: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    k1, k2, p1, p2, k3, k4, k5, k6 = k
    r2 = x * x + y * y
    r4 = r2 * r2
    r6 = r4 * r2
    radial = (1 + k1 * r2 + k2 * r4 + k3 * r6) / (1 + k4 * r2 + k5 * r4 + k6 * r6)
    xd = x * radial + 2 * p1 * x * y + p2 * (r2 + 2 * x * x)
    yd = y * radial + p1 * (r2 + 2 * y * y) + 2 * p2 * x * y
    return xd, yd


def _undistort(xd: np.ndarray, yd: np.ndarray, k: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    k1, k2, p1, p2, k3, k4, k5, k6 = k
    x, y = xd.copy(), yd.copy()
    for _ in range(_UNDISTORT_ITERATIONS):
        r2 = x * x + y * y
        r4 = r2 * r2
        r6 = r4 * r2
        icdist = (1 + k4 * r2 + k5 * r4 + k6 * r6) / (1 + k1 * r2 + k2 * r4 + k3 * r6)
        dx = 2 * p1 * x * y + p2 * (r2 + 2 * x * x)
        dy = p1 * (r2 + 2 * y * y) + 2 * p2 * x * y
        x = (xd - dx) * icdist
        y = (yd - dy) * icdist
    return x, y


def rodrigues(rvec) -> np.ndarray:
    """Rotation vector to 3x3 matrix, or 3x3 matrix to a 3x1 rotation vector."""
    array = np.asarray(rvec, dtype=np.float64)
    if array.size == 3:
        return Rotation.from_rotvec(array.ravel()).as_matrix()
    if array.shape == (3, 3):
        return Rotation.from_matrix(array).as_rotvec().reshape(3, 1)
    raise PoseError("expected a rotation vector of three components or a 3x3 matrix")


def pose_matrix(rvec, tvec) -> np.ndarray:
    """4x4 homogeneous transform with the rotation of rvec and the translation tvec."""
    matrix = np.eye(4)
    matrix[:3, :3] = rodrigues(_vector3(rvec, "rotation vector"))
    matrix[:3, 3] = _vector3(tvec, "translation vector")
    return matrix


def project_points(object_points, rvec, tvec, camera_matrix, dist_coeffs) -> np.ndarray:
    """Image coordinates, shape (n, 2), of object points seen from the given pose."""
    points = _points(object_points, 3, "object points")
    rotation = rodrigues(_vector3(rvec, "rotation vector"))
    translation = _vector3(tvec, "translation vector")
    k = _distortion(dist_coeffs)
    camera = _camera(camera_matrix)

    in_camera = points @ rotation.T + translation
    z = in_camera[:, 2]
    xd, yd = _distort(in_camera[:, 0] / z, in_camera[:, 1] / z, k)
    pixels = np.column_stack([xd, yd, np.ones_like(xd)]) @ camera.T
    return pixels[:, :2]


def _normalize_2d(points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    center = points.mean(axis=0)
    spread = np.sqrt(((points - center) ** 2).sum(axis=1)).mean()
    scale = np.sqrt(2) / spread if spread > 0 else 1.0
    transform = np.array(
        [[scale, 0, -scale * center[0]], [0, scale, -scale * center[1]], [0, 0, 1]]
    )
    homogeneous = np.column_stack([points, np.ones(len(points))]) @ transform.T
    return homogeneous[:, :2], transform


def _homography(source: np.ndarray, target: np.ndarray) -> np.ndarray:
    src, src_t = _normalize_2d(source)
    dst, dst_t = _normalize_2d(target)
    rows = []
    for (sx, sy), (u, v) in zip(src, dst):
        rows.append([-sx, -sy, -1, 0, 0, 0, u * sx, u * sy, u])
        rows.append([0, 0, 0, -sx, -sy, -1, v * sx, v * sy, v])
    _, _, vt = np.linalg.svd(np.array(rows))
    normalized = vt[-1].reshape(3, 3)
    return np.linalg.inv(dst_t) @ normalized @ src_t


def _nearest_rotation(matrix: np.ndarray) -> np.ndarray:
    u, _, vt = np.linalg.svd(matrix)
    rotation = u @ vt
    if np.linalg.det(rotation) < 0:
        u[:, -1] *= -1
        rotation = u @ vt
    return rotation


def _planar_start(points: np.ndarray, normalized: np.ndarray, center, basis):
    plane = ((points - center) @ basis.T)[:, :2]
    h = _homography(plane, normalized)
    h1, h2, h3 = h[:, 0], h[:, 1], h[:, 2]
    scale = 2.0 / (np.linalg.norm(h1) + np.linalg.norm(h2))
    r1, r2, t = h1 * scale, h2 * scale, h3 * scale
    if t[2] < 0:
        r1, r2, t = -r1, -r2, -t
    rotation = _nearest_rotation(np.column_stack([r1, r2, np.cross(r1, r2)]))
    full = rotation @ basis
    return full, t - full @ center


def _general_start(points: np.ndarray, normalized: np.ndarray):
    if len(points) < 6:
        raise PoseError("at least six points are needed for a non-planar object")
    center = points.mean(axis=0)
    spread = np.sqrt(((points - center) ** 2).sum(axis=1)).mean()
    q = (points - center) / spread
    rows = []
    for (x, y, z), (u, v) in zip(q, normalized):
        rows.append([x, y, z, 1, 0, 0, 0, 0, -u * x, -u * y, -u * z, -u])
        rows.append([0, 0, 0, 0, x, y, z, 1, -v * x, -v * y, -v * z, -v])
    _, _, vt = np.linalg.svd(np.array(rows))
    projection = vt[-1].reshape(3, 4)
    if np.linalg.det(projection[:, :3]) < 0:
        projection = -projection
    u, s, w = np.linalg.svd(projection[:, :3])
    rotation = _nearest_rotation(u @ w)
    factor = s.mean() / spread
    rotation_full = rotation
    translation = projection[:, 3] / factor - rotation_full @ center
    return rotation_full, translation


def solve_pnp(object_points, image_points, camera_matrix, dist_coeffs):
    """Pose (rvec, tvec), each 3x1, that maps object points onto their image points."""
    points = _points(object_points, 3, "object points")
    pixels = _points(image_points, 2, "image points")
    if len(points) != len(pixels):
        raise PoseError("object and image point counts differ")
    if len(points) < 4:
        raise PoseError("at least four points are needed")
    camera = _camera(camera_matrix)
    k = _distortion(dist_coeffs)
    if not (np.isfinite(points).all() and np.isfinite(pixels).all()):
        raise PoseError("points must be finite")

    try:
        inverse = np.linalg.inv(camera)
    except np.linalg.LinAlgError as exc:
        raise PoseError("camera matrix is singular") from exc
    rays = np.column_stack([pixels, np.ones(len(pixels))]) @ inverse.T
    x, y = _undistort(rays[:, 0] / rays[:, 2], rays[:, 1] / rays[:, 2], k)
    normalized = np.column_stack([x, y])

    center = points.mean(axis=0)
    _, spread, basis = np.linalg.svd(points - center)
    if spread[0] == 0 or spread[1] <= 1e-9 * spread[0]:
        raise PoseError("object points are degenerate (coincident or collinear)")
    if np.linalg.det(basis) < 0:
        basis[2] *= -1

    if spread[2] <= 1e-6 * spread[0]:
        rotation, translation = _planar_start(points, normalized, center, basis)
    else:
        rotation, translation = _general_start(points, normalized)

    start = np.concatenate([rodrigues(rotation).ravel(), translation])

    def residuals(params: np.ndarray) -> np.ndarray:
        projected = project_points(points, params[:3], params[3:], camera, k)
        return (projected - pixels).ravel()

    result = least_squares(residuals, start, method="lm")
    params = result.x
    if not np.isfinite(params).all():
        raise PoseError("pose estimation diverged")
    depths = points @ rodrigues(params[:3]).T + params[3:]
    if (depths[:, 2] <= 0).any():
        raise PoseError("no pose places every point in front of the camera")
    return params[:3].reshape(3, 1), params[3:].reshape(3, 1)