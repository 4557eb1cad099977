import pytest

from forecaster.evaluate import (
    confidence_score,
    display_confidence,
    mean_absolute_error,
    r2_score,
)


def test_mae_over_all_components():
    assert mean_absolute_error([[1, 2], [3, 4]], [[2, 2], [3, 2]]) == pytest.approx(0.75)


def test_r2_perfect_fit():
    assert r2_score([1, 2, 3], [1, 2, 3]) == pytest.approx(1.0)


def test_r2_can_be_negative():
    assert r2_score([3, 2, 1], [1, 2, 3]) < 0


def test_r2_identical_targets_is_zero():
    # same spend every month: ss_tot == 0
    assert r2_score([400.0, 410.0], [400.0, 400.0]) == 0.0
    assert r2_score([400.0, 400.0], [400.0, 400.0]) == 0.0


def test_confidence_blends_volume_and_fit():
    # 2 examples -> volume 10; r2 0.5 -> fit 50; 10*0.3 + 50*0.7 = 38
    assert confidence_score(2, 0.5) == 38
    assert confidence_score(40, 1.0) == 100
    assert confidence_score(20, -3.0) == 30


@pytest.mark.parametrize("score, expected", [(0, 50), (38, 50), (70, 70), (100, 95)])
def test_display_confidence_is_clamped(score, expected):
    assert display_confidence(score) == expected
