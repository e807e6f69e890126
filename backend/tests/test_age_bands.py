import pytest

from wonderlens.services.age_bands import age_band_for, community_age_window


@pytest.mark.parametrize(
    "age, band",
    [(6, "6-7"), (7, "6-7"), (8, "8-9"), (9, "8-9"), (10, "10")],
)
def test_age_band_for_supported_ages(age, band):
    assert age_band_for(age) == band


@pytest.mark.parametrize("age", [None, -1, 0, 5, 11, 12, 100])
def test_age_band_for_unsupported_ages(age):
    assert age_band_for(age) is None


def test_community_age_window_clamps_low_end():
    assert community_age_window(6) == (6, 8)
    assert community_age_window(7) == (6, 9)


def test_community_age_window_middle_and_high():
    assert community_age_window(8) == (6, 10)
    assert community_age_window(10) == (8, 12)
    assert community_age_window(11) == (9, 12)
