"""Tests for the border extension policies."""

import numpy as np
import pytest

from diffusion_filters import (
    ImageKind,
    PaddingType,
    PixelBuffer,
    UnsupportedPadding,
    InvalidDimensions,
    extend,
    random_buffer,
    refresh_dummies,
)

SOURCE = np.array([[1.0, 2.0], [3.0, 4.0]])


def test_constant_padding_table():
    padded = extend(SOURCE, 2, 2, PaddingType.CONSTANT, 0.0)
    assert padded.shape == (6, 6)
    np.testing.assert_array_equal(padded[0], [0, 0, 0, 0, 0, 0])
    np.testing.assert_array_equal(padded[2], [0, 0, 1, 2, 0, 0])
    np.testing.assert_array_equal(padded[3], [0, 0, 3, 4, 0, 0])
    np.testing.assert_array_equal(padded[5], [0, 0, 0, 0, 0, 0])


def test_repeat_padding_tiles_whole_canvas():
    padded = extend(SOURCE, 2, 2, PaddingType.REPEAT)
    expected = np.array([
        [1, 2, 1, 2, 1, 2],
        [3, 4, 3, 4, 3, 4],
        [1, 2, 1, 2, 1, 2],
        [3, 4, 3, 4, 3, 4],
        [1, 2, 1, 2, 1, 2],
        [3, 4, 3, 4, 3, 4],
    ])
    np.testing.assert_array_equal(padded, expected)


def test_mirror_padding_table():
    padded = extend(SOURCE, 2, 2, PaddingType.MIRROR)
    expected = np.array([
        [4, 3, 3, 4, 4, 3],
        [2, 1, 1, 2, 2, 1],
        [2, 1, 1, 2, 2, 1],
        [4, 3, 3, 4, 4, 3],
        [4, 3, 3, 4, 4, 3],
        [2, 1, 1, 2, 2, 1],
    ])
    np.testing.assert_array_equal(padded, expected)


def test_extend_padding_table():
    padded = extend(SOURCE, 2, 2, PaddingType.EXTEND)
    expected = np.array([
        [1, 1, 1, 2, 2, 2],
        [1, 1, 1, 2, 2, 2],
        [1, 1, 1, 2, 2, 2],
        [3, 3, 3, 4, 4, 4],
        [3, 3, 3, 4, 4, 4],
        [3, 3, 3, 4, 4, 4],
    ])
    np.testing.assert_array_equal(padded, expected)


def test_asymmetric_margins():
    padded = extend(SOURCE, 1, 0, PaddingType.EXTEND)
    np.testing.assert_array_equal(padded, [[1, 1, 2, 2], [3, 3, 4, 4]])


def test_policy_names_are_case_insensitive():
    np.testing.assert_array_equal(
        extend(SOURCE, 1, 1, "mirror"),
        extend(SOURCE, 1, 1, PaddingType.MIRROR),
    )


def test_unsupported_policy():
    with pytest.raises(UnsupportedPadding):
        extend(SOURCE, 1, 1, "wrap-around")


def test_negative_margin():
    with pytest.raises(InvalidDimensions):
        extend(SOURCE, -1, 1, PaddingType.CONSTANT)


def test_constant_value_broadcast_to_rgb():
    buf = PixelBuffer(2, 2, ImageKind.RGB)
    buf.pad(1, 1, PaddingType.CONSTANT, 7.0)
    np.testing.assert_array_equal(buf.get(0, 0), [7.0, 7.0, 7.0])
    np.testing.assert_array_equal(buf.get(1, 1), [0.0, 0.0, 0.0])


@pytest.mark.parametrize("policy", list(PaddingType))
@pytest.mark.parametrize("kind", [ImageKind.GRAYSCALE, ImageKind.RGB])
def test_pad_trim_round_trip(policy, kind, rng):
    original = random_buffer(7, 4, kind, rng)
    buf = original.clone()
    buf.pad(3, 3, policy, 12.0)
    assert (buf.width, buf.height) == (13, 10)
    buf.trim(3)
    assert buf.kind is kind
    np.testing.assert_array_equal(buf.matrix, original.matrix)


def test_refresh_dummies_copies_adjacent_interior():
    field = np.arange(16, dtype=float).reshape(4, 4)
    refresh_dummies(field)
    np.testing.assert_array_equal(field[0, 1:-1], field[1, 1:-1])
    np.testing.assert_array_equal(field[-1, 1:-1], field[-2, 1:-1])
    np.testing.assert_array_equal(field[:, 0], field[:, 1])
    np.testing.assert_array_equal(field[:, -1], field[:, -2])
    # interior untouched
    np.testing.assert_array_equal(field[1:-1, 1:-1], [[5, 6], [9, 10]])
    assert field[0, 0] == 5
