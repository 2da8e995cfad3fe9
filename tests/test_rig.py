import numpy as np

from eyescenecal.rig import SCALE_FACTOR, format_number, rig_description, rig_matrix


def test_rig_matrix_values_from_rig():
    matrix = rig_matrix()
    assert matrix.shape == (4, 4)
    assert np.allclose(np.diag(matrix), [-1.0, 1.0, -1.0, 1.0])
    assert np.allclose(matrix[:3, 3], [5.68817114093960, 6.68590604026846, -43.20469798657718])
    assert np.allclose(matrix[3], [0.0, 0.0, 0.0, 1.0])


def test_rig_rotation_is_proper():
    rotation = rig_matrix()[:3, :3]
    assert np.allclose(rotation @ rotation.T, np.eye(3))
    assert np.isclose(np.linalg.det(rotation), 1.0)


def test_rig_matrix_is_fresh_copy():
    first = rig_matrix()
    first[0, 3] = 0.0
    assert rig_matrix()[0, 3] == 5.68817114093960


def test_rig_matrix_invertible():
    matrix = rig_matrix()
    assert np.allclose(np.linalg.inv(matrix) @ matrix, np.eye(4))


def test_format_scale_factor():
    assert format_number(SCALE_FACTOR) == "0.137626"


def test_format_negative_translation():
    assert format_number(-43.20469798657718) == "-43.2047"


def test_format_whole_number_has_no_point():
    assert format_number(2.0) == "2"


def test_description_names_scale():
    text = rig_description(SCALE_FACTOR)
    assert text.startswith("RIG PARAMETERS ARE HARD CODED NUMBERS")
    assert "sf = d_small / d_big = " + format_number(SCALE_FACTOR) in text
    assert "unit length is d_big = 47.68 mm" in text


def test_description_depends_only_on_scale_text():
    first = rig_description(0.5)
    second = rig_description(0.25)
    assert "d_big = 0.5\n" in first
    assert first.replace("d_big = 0.5\n", "d_big = 0.25\n") == second


def test_description_pattern_rows_alternate():
    text = rig_description(SCALE_FACTOR)
    start = text.index("pattern:")
    end = text.index("(0,0,0)")
    rows = [row for row in text[start:end].splitlines() if "o" in row and row != "pattern:"]
    assert all(row.startswith("\to") for row in rows[1::2])
    assert all(row.startswith("o") for row in rows[::2])
    assert len(rows) % 2 == 1