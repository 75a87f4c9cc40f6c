"""End-to-end runs of the batch command line."""

from pathlib import Path

import cv2
import numpy as np
import pytest

from diffusion_filters import InvalidDimensions
from diffusion_filters.io_utils import discover_images, load_mask, make_output_path
from diffusion_filters.pipeline import build_arg_parser, main, run_pipeline_on_path


@pytest.fixture
def image_dir(tmp_path, rng):
    root = tmp_path / "input"
    (root / "sub").mkdir(parents=True)
    for path in (root / "a.png", root / "sub" / "b.png"):
        pixels = rng.integers(0, 256, size=(6, 8, 3), dtype=np.uint8)
        assert cv2.imwrite(str(path), pixels)
    (root / "notes.txt").write_text("not an image")
    return root


def test_discover_images_is_recursive(image_dir):
    found = discover_images(image_dir)
    assert [p.name for p in found] == ["a.png", "b.png"]


def test_make_output_path(tmp_path):
    inp = tmp_path / "in" / "sub" / "x.PNG"
    out = make_output_path(inp, tmp_path / "in", tmp_path / "out", True, "catte")
    assert out == tmp_path / "out" / "sub" / "x_catte.png"
    flat = make_output_path(inp, tmp_path / "in", tmp_path / "out", False, "catte")
    assert flat == tmp_path / "out" / "x_catte.png"


def test_homogeneous_run_writes_grey_images(image_dir, tmp_path):
    out_dir = tmp_path / "out"
    code = main(["-i", str(image_dir), "-o", str(out_dir), "--keep-structure", "-n", "5"])
    assert code == 0
    result = cv2.imread(str(out_dir / "sub" / "b_homogeneous.png"), cv2.IMREAD_UNCHANGED)
    assert result.shape == (6, 8, 3)
    # broadcast grayscale: all channels equal
    np.testing.assert_array_equal(result[:, :, 0], result[:, :, 1])
    np.testing.assert_array_equal(result[:, :, 0], result[:, :, 2])


def test_existing_outputs_are_skipped(image_dir, tmp_path, capsys):
    out_dir = tmp_path / "out"
    run_pipeline_on_path(str(image_dir), str(out_dir), algorithm="catte", keep_structure=False, iterations=2)
    target = out_dir / "a_catte.png"
    before = target.stat().st_mtime_ns
    fail = run_pipeline_on_path(str(image_dir), str(out_dir), algorithm="catte", keep_structure=False, iterations=2)
    assert fail == []
    assert target.stat().st_mtime_ns == before
    assert "skipping" in capsys.readouterr().out


def test_inpainting_run(tmp_path):
    image = np.full((10, 10, 3), 200, dtype=np.uint8)
    image[4:6, 4:6] = 0
    mask = np.zeros((10, 10), dtype=np.uint8)
    mask[4:6, 4:6] = 255
    cv2.imwrite(str(tmp_path / "photo.png"), image)
    cv2.imwrite(str(tmp_path / "mask.png"), mask)

    out_dir = tmp_path / "out"
    code = main([
        "-i", str(tmp_path / "photo.png"), "-o", str(out_dir), "-a", "inpainting",
        "--mask", str(tmp_path / "mask.png"), "-n", "300", "--seed", "4",
    ])
    assert code == 0
    result = cv2.imread(str(out_dir / "photo_inpainting.png"), cv2.IMREAD_GRAYSCALE)
    assert np.all(np.abs(result.astype(int) - 200) <= 1)


def test_inpainting_requires_mask(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["-i", str(tmp_path), "-o", str(tmp_path / "out"), "-a", "inpainting"])
    assert exc.value.code == 2


def test_mismatched_mask_is_reported_as_failure(tmp_path):
    cv2.imwrite(str(tmp_path / "photo.png"), np.zeros((4, 4, 3), dtype=np.uint8))
    mask_path = tmp_path / "mask.bmp"
    cv2.imwrite(str(mask_path), np.zeros((5, 5), dtype=np.uint8))
    fail = run_pipeline_on_path(
        str(tmp_path / "photo.png"), str(tmp_path / "out"), algorithm="inpainting", mask_path=str(mask_path)
    )
    assert len(fail) == 1
    assert "mask" in fail[0][1].lower()


def test_strict_mode_failure_sets_exit_code(image_dir, tmp_path):
    code = main(["-i", str(image_dir), "-o", str(tmp_path / "out"), "--tau", "0.4", "--strict"])
    assert code == 1


def test_load_mask_semantics(tmp_path):
    painted = np.zeros((3, 4), dtype=np.uint8)
    painted[1, 2] = 255
    path = tmp_path / "m.png"
    cv2.imwrite(str(path), painted)
    mask = load_mask(str(path), shape=(4, 3))
    assert mask.get(2, 1)[0] == 0.0
    assert mask.get(0, 0)[0] == 1.0
    with pytest.raises(InvalidDimensions):
        load_mask(str(path), shape=(3, 3))


def test_arg_parser_defaults():
    args = build_arg_parser().parse_args([])
    assert args.algorithm == "homogeneous"
    assert args.iterations == 10
    assert args.tau is None
    assert (args.lam, args.sigma) == (5.0, 1.0)
    assert args.padding == "constant"
    assert Path(args.output) == Path("data") / "filtered"
