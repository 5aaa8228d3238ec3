# eigen/test_selection.py
"""Tests for eigen._selection."""

import pytest
import numpy as np

import adaptprom


MU = np.array([3.0, np.inf, 1e-20, -0.5 + 0.5j, np.nan])


def test_smallest():
    select = adaptprom.eigen.get_selection("smallest")
    assert isinstance(select, adaptprom.eigen.SmallestSelection)
    assert select(MU, 0) == 2
    assert select(np.array([np.inf, np.nan]), 0) == -1


def test_second_smallest():
    select = adaptprom.eigen.get_selection("second-smallest")
    assert select(MU, 0) == 3
    assert select(np.array([np.inf, 2.0]), 0) == 1


def test_nonzero_smallest():
    select = adaptprom.eigen.get_selection("nonzero-smallest")
    assert select(MU, 0) == 3
    select = adaptprom.eigen.NonzeroSmallestSelection(rtol=1e-30)
    assert select(MU, 0) == 2


def test_closest():
    select = adaptprom.eigen.get_selection("closest", target=2.0)
    # lam - mu closest to 2 for lam = 5: mu = 3.
    assert select(MU, 5.0) == 0
    assert str(select) == "ClosestSelection(target=(2+0j))"


def test_get_selection():
    """Test eigen._selection.get_selection()."""

    def custom(mu, lam):
        return 0

    assert adaptprom.eigen.get_selection(custom) is custom

    with pytest.raises(ValueError) as ex:
        adaptprom.eigen.get_selection("largest")
    assert ex.value.args[0] == (
        "invalid selection 'largest' (options: smallest, second-smallest, "
        "nonzero-smallest, closest)"
    )

    with pytest.raises(TypeError) as ex:
        adaptprom.eigen.get_selection(3)
    assert ex.value.args[0] == "selection must be a string or callable"
