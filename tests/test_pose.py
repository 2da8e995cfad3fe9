import numpy as np
import pytest

from eyescenecal.pose import (
    PoseError,
    pose_matrix,
    project_points,
    rodrigues,
    solve_pnp,
)

CAMERA = np.array([[600.0, 0.0, 320.0], [0.0, 610.0, 240.0], [0.0, 0.0, 1.0]])


def board_points():
    return np.array(
        [[10.0 - i, float(2 * j + i % 2), 0.0] for i in range(11) for j in range(4)]
    )


def test_zero_rotation_vector_is_identity():
    assert np.allclose(rodrigues([0.0, 0.0, 0.0]), np.eye(3))


def test_quarter_turn_about_z():
    expected = np.array([[0.0, -1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
    assert np.allclose(rodrigues([0.0, 0.0, np.pi / 2]), expected)


def test_rodrigues_round_trip():
    rvec = np.array([[0.2], [-0.4], [0.1]])
    matrix = rodrigues(rvec)
    assert np.allclose(matrix @ matrix.T, np.eye(3))
    assert np.isclose(np.linalg.det(matrix), 1.0)
    back = rodrigues(matrix)
    assert back.shape == (3, 1)
    assert np.allclose(back, rvec)


def test_rodrigues_rejects_bad_shape():
    with pytest.raises(PoseError):
        rodrigues([1.0, 2.0])


def test_pose_matrix_layout():
    rvec = [0.1, 0.2, 0.3]
    tvec = [4.0, 5.0, 6.0]
    matrix = pose_matrix(rvec, tvec)
    assert np.allclose(matrix[:3, :3], rodrigues(rvec))
    assert np.allclose(matrix[:3, 3], tvec)
    assert np.allclose(matrix[3], [0.0, 0.0, 0.0, 1.0])


def test_point_on_axis_projects_to_principal_point():
    pixels = project_points([[0.0, 0.0, 1.0]], [0, 0, 0], [0, 0, 0], CAMERA, None)
    assert np.allclose(pixels, [[CAMERA[0, 2], CAMERA[1, 2]]])


def test_projection_shape_and_distortion_effect():
    points = board_points()
    rvec, tvec = [0.1, -0.2, 0.05], [-3.0, -8.0, 40.0]
    plain = project_points(points, rvec, tvec, CAMERA, np.zeros(5))
    distorted = project_points(points, rvec, tvec, CAMERA, [0.2, 0, 0, 0, 0])
    assert plain.shape == (len(points), 2)
    assert not np.allclose(plain, distorted)


@pytest.mark.parametrize(
    "dist",
    [None, np.zeros(5), np.array([0.1, -0.05, 0.001, 0.002, 0.01])],
)
def test_solve_pnp_recovers_planar_pose(dist):
    points = board_points()
    rvec = np.array([[0.15], [-0.3], [0.2]])
    tvec = np.array([[-2.0], [-6.0], [35.0]])
    pixels = project_points(points, rvec, tvec, CAMERA, dist)
    found_r, found_t = solve_pnp(points, pixels, CAMERA, dist)
    assert found_r.shape == (3, 1) and found_t.shape == (3, 1)
    assert np.allclose(rodrigues(found_r), rodrigues(rvec), atol=1e-6)
    assert np.allclose(found_t, tvec, atol=1e-5)


def test_solve_pnp_recovers_non_planar_pose():
    rng = np.random.default_rng(3)
    points = rng.uniform(-5.0, 5.0, size=(12, 3))
    rvec = np.array([0.3, 0.1, -0.25])
    tvec = np.array([1.0, -0.5, 30.0])
    pixels = project_points(points, rvec, tvec, CAMERA, None)
    found_r, found_t = solve_pnp(points, pixels, CAMERA, None)
    assert np.allclose(rodrigues(found_r), rodrigues(rvec), atol=1e-6)
    assert np.allclose(found_t.ravel(), tvec, atol=1e-5)


def test_solve_pnp_reprojects_exactly():
    points = board_points()
    rvec, tvec = [0.05, 0.1, -0.1], [0.0, -5.0, 50.0]
    pixels = project_points(points, rvec, tvec, CAMERA, None)
    found_r, found_t = solve_pnp(points, pixels, CAMERA, None)
    again = project_points(points, found_r, found_t, CAMERA, None)
    assert np.allclose(again, pixels, atol=1e-6)


def test_solve_pnp_rejects_count_mismatch():
    points = board_points()
    with pytest.raises(PoseError):
        solve_pnp(points, np.zeros((len(points) - 1, 2)), CAMERA, None)


def test_solve_pnp_rejects_too_few_points():
    with pytest.raises(PoseError):
        solve_pnp(board_points()[:3], np.zeros((3, 2)), CAMERA, None)


def test_solve_pnp_rejects_collinear_points():
    points = np.array([[float(i), 0.0, 0.0] for i in range(6)])
    with pytest.raises(PoseError):
        solve_pnp(points, np.zeros((6, 2)), CAMERA, None)


def test_solve_pnp_rejects_bad_distortion_length():
    points = board_points()
    with pytest.raises(PoseError):
        solve_pnp(points, np.zeros((len(points), 2)), CAMERA, [0.1, 0.2, 0.3])