import numpy as np

from subject_blur.masking.base import PersonSegmentation
from subject_blur.masking.selection import mask_centroid, select_center_person


def _person(h, w, y0, y1, x0, x1):
    data = np.zeros((h, w), np.uint8)
    data[y0:y1, x0:x1] = 1
    return PersonSegmentation(data=data)


def test_centroid_of_block():
    seg = _person(10, 10, 2, 4, 6, 8)  # rows 2,3 cols 6,7
    assert mask_centroid(seg) == (6.5, 2.5)


def test_centroid_of_empty_mask_is_none():
    assert mask_centroid(PersonSegmentation(data=np.zeros((5, 5), np.uint8))) is None


def test_centroid_ignores_non_person_labels():
    data = np.full((4, 4), 2, np.uint8)
    data[1, 1] = 1
    assert mask_centroid(PersonSegmentation(data=data)) == (1.0, 1.0)


def test_selects_person_nearest_center():
    left = _person(40, 60, 10, 30, 0, 8)
    center = _person(40, 60, 12, 28, 24, 36)
    right = _person(40, 60, 10, 30, 50, 60)
    assert select_center_person([left, center, right], 60, 40) is center


def test_skips_empty_masks():
    empty = PersonSegmentation(data=np.zeros((40, 60), np.uint8))
    edge = _person(40, 60, 0, 5, 0, 5)
    assert select_center_person([empty, edge], 60, 40) is edge


def test_no_persons_or_all_empty_gives_none():
    assert select_center_person([], 60, 40) is None
    empty = PersonSegmentation(data=np.zeros((40, 60), np.uint8))
    assert select_center_person([empty, empty], 60, 40) is None


def test_centroids_scaled_from_internal_resolution():
    # Half-resolution mask centred at (15, 10) -> image (30, 20), the exact centre
    low_res_center = _person(20, 30, 8, 12, 13, 17)
    # Full-resolution mask near the centre but not on it
    full_res_off = _person(40, 60, 16, 24, 34, 42)
    picked = select_center_person([full_res_off, low_res_center], 60, 40)
    assert picked is low_res_center


def test_tie_keeps_first():
    a = _person(40, 60, 10, 20, 10, 20)
    b = _person(40, 60, 10, 20, 10, 20)
    assert select_center_person([a, b], 60, 40) is a
