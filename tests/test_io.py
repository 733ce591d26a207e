import cv2
import numpy as np
import pytest

from subject_blur.pipeline.io import (
    ImageLoadError, discover_images, load_image, resolve_inputs, save_image,
)


def test_load_promotes_gray_and_bgr_to_bgra(tmp_path):
    gray = tmp_path / "g.png"
    cv2.imwrite(str(gray), np.full((5, 7), 42, np.uint8))
    img = load_image(gray)
    assert img.shape == (5, 7, 4)
    assert img.dtype == np.uint8
    assert np.all(img[..., :3] == 42) and np.all(img[..., 3] == 255)

    bgr = tmp_path / "c.png"
    cv2.imwrite(str(bgr), np.dstack([np.full((3, 3), v, np.uint8) for v in (1, 2, 3)]))
    img = load_image(bgr)
    assert img[0, 0].tolist() == [1, 2, 3, 255]


def test_load_keeps_alpha(tmp_path):
    p = tmp_path / "a.png"
    src = np.zeros((4, 4, 4), np.uint8)
    src[..., 3] = 77
    cv2.imwrite(str(p), src)
    assert np.all(load_image(p)[..., 3] == 77)


def test_load_missing_or_corrupt_raises(tmp_path):
    with pytest.raises(ImageLoadError):
        load_image(tmp_path / "missing.jpg")
    bad = tmp_path / "bad.jpg"
    bad.write_bytes(b"not an image")
    with pytest.raises(ImageLoadError):
        load_image(bad)


def test_save_jpeg_drops_alpha_and_creates_dirs(tmp_path):
    out = save_image(tmp_path / "deep" / "x.jpg", np.full((6, 6, 4), 128, np.uint8))
    back = cv2.imread(str(out), cv2.IMREAD_UNCHANGED)
    assert back.shape == (6, 6, 3)


def test_discover_images_sorted_filtered_limited(tmp_path):
    for name in ("b.jpg", "a.PNG", "c.webp", "notes.txt"):
        (tmp_path / name).write_bytes(b"")
    (tmp_path / "sub.jpg").mkdir()
    names = [p.name for p in discover_images(tmp_path)]
    assert names == ["a.PNG", "b.jpg", "c.webp"]
    assert [p.name for p in discover_images(tmp_path, limit=2)] == ["a.PNG", "b.jpg"]


def test_resolve_inputs(tmp_path):
    f = tmp_path / "one.jpg"
    f.write_bytes(b"")
    assert resolve_inputs(f) == [f]
    assert resolve_inputs(tmp_path) == [f]
    assert resolve_inputs(tmp_path / "missing") == []


def _jpeg_with_orientation(path, orientation):
    from PIL import Image
    # stored 40 wide x 20 high, left half red
    img = Image.new("RGB", (40, 20), (0, 0, 255))
    img.paste((255, 0, 0), (0, 0, 20, 20))
    exif = Image.Exif()
    exif[0x0112] = orientation
    img.save(path, exif=exif, quality=95)
    return path


def test_load_applies_exif_rotation(tmp_path):
    img = load_image(_jpeg_with_orientation(tmp_path / "phone.jpg", 6))
    assert img.shape == (40, 20, 4)
    # rotated 90° clockwise: the stored left half is now on top (BGR: red -> channel 2)
    assert img[5, 10, 2] > 200 and img[5, 10, 0] < 60
    assert img[35, 10, 0] > 200 and img[35, 10, 2] < 60


def test_load_upright_exif_is_untouched(tmp_path):
    img = load_image(_jpeg_with_orientation(tmp_path / "upright.jpg", 1))
    assert img.shape == (20, 40, 4)
    assert img[10, 5, 2] > 200


@pytest.mark.parametrize("orientation,expected", [(3, (20, 40)), (8, (40, 20)), (5, (40, 20))])
def test_load_other_orientations(tmp_path, orientation, expected):
    img = load_image(_jpeg_with_orientation(tmp_path / f"o{orientation}.jpg", orientation))
    assert img.shape[:2] == expected
