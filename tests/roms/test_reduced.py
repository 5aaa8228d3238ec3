# roms/test_reduced.py
"""Tests for roms._reduced."""

import pytest
import numpy as np

import adaptprom


def test_assemble_reduced_system(r=4):
    """Test roms._reduced.assemble_reduced_system()."""
    subject = adaptprom.roms.assemble_reduced_system
    rng = np.random.default_rng(0)
    Kr, Mr, Cr = (rng.standard_normal((r, r)) for _ in range(3))
    Ar2 = 1j * rng.standard_normal((r, r))
    omega = 2.5

    Ar = subject(omega, Kr, Mr)
    assert np.iscomplexobj(Ar)
    assert np.allclose(Ar, Kr - omega**2 * Mr)

    Ar = subject(omega, Kr, Mr, Cr, Ar2)
    assert np.allclose(Ar, Kr + 1j * omega * Cr - omega**2 * Mr + Ar2)
    # The inputs are not modified.
    assert not np.iscomplexobj(Kr)

    with pytest.raises(adaptprom.errors.DimensionalityError) as ex:
        subject(omega, Kr, Mr[:-1])
    assert ex.value.args[0] == \
        f"Mr.shape = {(r - 1, r)} != {(r, r)} = Kr.shape"


def test_diagonal_scenario():
    """Kr = diag(1, 2, 3, 4), Mr = I, RHS1r = 1 solved at omega = 0."""
    Kr = np.diag([1.0, 2.0, 3.0, 4.0])
    Mr = np.eye(4)
    RHS1r = np.ones(4)
    Ar = adaptprom.roms.assemble_reduced_system(0.0, Kr, Mr)
    for solver in adaptprom.roms.REDUCED_SOLVERS:
        y = adaptprom.roms.solve_reduced_system(Ar, RHS1r, solver)
        assert np.allclose(y, [1, 1 / 2, 1 / 3, 1 / 4], atol=1e-10, rtol=0)


def test_solve_reduced_system(r=6):
    """Test roms._reduced.solve_reduced_system()."""
    subject = adaptprom.roms.solve_reduced_system
    rng = np.random.default_rng(1)
    A = rng.standard_normal((r, r)) + 1j * rng.standard_normal((r, r))
    A = A + A.T  # complex symmetric
    b = rng.standard_normal(r) + 1j * rng.standard_normal(r)

    for solver in ("lu", "ldlt"):
        y = subject(A, b, solver=solver)
        assert np.allclose(A @ y, b)

    with pytest.raises(ValueError) as ex:
        subject(A, b, solver="qr")
    assert ex.value.args[0] == \
        "invalid reduced solver 'qr' (options: lu, ldlt)"

    with pytest.raises(adaptprom.errors.DimensionalityError) as ex:
        subject(A, b[1:])
    assert ex.value.args[0].startswith("reduced system not aligned")


def test_expand(n=20, r=5):
    """Test roms._reduced.expand()."""
    rng = np.random.default_rng(2)
    V = rng.standard_normal((n, r))
    y = rng.standard_normal(r) + 1j * rng.standard_normal(r)
    u = adaptprom.roms.expand(V, y)
    assert np.iscomplexobj(u)
    assert np.allclose(u, V @ y)
    assert np.allclose(adaptprom.roms.expand(V, y.real), V @ y.real)

    with pytest.raises(adaptprom.errors.DimensionalityError) as ex:
        adaptprom.roms.expand(V, y[:-1])
    assert ex.value.args[0] == \
        f"basis has {r} columns, coefficients have {r - 1} entries"
