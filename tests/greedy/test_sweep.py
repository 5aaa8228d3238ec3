# greedy/test_sweep.py
"""Tests for greedy._sweep."""

import pytest
import numpy as np
import matplotlib.pyplot as plt

import adaptprom
from adaptprom.greedy._sweep import num_candidates


def test_num_candidates():
    assert num_candidates(0.5, 6.5, 0.01) == 601
    assert num_candidates(1.0, 2.0, 0.5) == 3
    assert num_candidates(2.0, 1.0, -0.5) == 3
    assert num_candidates(1.0, 1.0, 0.1) == 1
    # Partial final step is rounded to the nearest point.
    assert num_candidates(0.0, 1.04, 0.1) == 11


class TestSweepResult:
    """Test greedy._sweep.SweepResult."""

    Result = adaptprom.greedy.SweepResult

    def test_properties(self):
        result = self.Result([1.0, 2.0, 1.5], [(1.5, 0.1)], False)
        assert result.num_samples == 3
        assert np.allclose(result.max_errors, [0.1])
        assert not result.converged
        assert str(result) == (
            "SweepResult\n  Samples: 3\n  Converged: False\n"
            "  Last error: 1.000000e-01"
        )
        assert repr(result).startswith("<SweepResult object at ")

        result = self.Result([1.0], [], True)
        assert result.max_errors.shape == (0,)
        assert "Last error" not in str(result)

    def test_plot(self):
        result = self.Result([1, 2, 3, 4], [(3, 1e-1), (4, 1e-4)], True)
        ax = result.plot(tol=1e-3)
        assert isinstance(ax, plt.Axes)
        assert len(ax.lines) == 2

        _, ax2 = plt.subplots(1, 1)
        assert result.plot(ax=ax2) is ax2
        assert len(ax2.lines) == 1
        plt.close("all")


class TestAdaptiveSweep:
    """Test greedy._sweep.AdaptiveSweep."""

    Sweep = adaptprom.greedy.AdaptiveSweep

    def test_init(self):
        sweep = self.Sweep()
        assert sweep.tol == 1e-3
        assert sweep.max_samples == 20
        assert sweep.convergence_memory == 2
        assert str(sweep).startswith("AdaptiveSweep\n  Tolerance: ")

        for kwargs, message in [
            (dict(tol=0), "tol must be positive"),
            (dict(max_samples=1), "max_samples must be at least 2"),
            (dict(convergence_memory=0),
             "convergence_memory must be positive"),
        ]:
            with pytest.raises(ValueError) as ex:
                self.Sweep(**kwargs)
            assert ex.value.args[0] == message

    def test_run(self, resonant_fom):
        """Sweep until the PROM reproduces the full-order solution."""
        prom = adaptprom.PROM(resonant_fom, max_size=20)
        sweep = self.Sweep(tol=1e-6, max_samples=20)

        with pytest.raises(ValueError) as ex:
            sweep.run(prom, 0.5, 6.5, -0.01)
        assert ex.value.args[0] == \
            "delta must be nonzero and point from start to stop"
        with pytest.raises(ValueError):
            sweep.run(prom, 0.5, 6.5, 0)
        assert prom.sample_parameters == []

        result = sweep.run(prom, 0.5, 6.5, 0.01)
        assert result.converged
        assert result.samples[:2] == [0.5, 6.5]
        assert result.samples == prom.sample_parameters
        assert result.num_samples < 20
        assert result.max_errors[-1] < 1e-6
        assert prom.dimension <= 12

        for omega in (0.77, 2.5, 5.31):
            u = prom.solve_hdm(omega)
            err = np.linalg.norm(u - prom.solve_prom(omega))
            assert err / np.linalg.norm(u) < 1e-6

    def test_run_max_samples(self, resonant_fom):
        """Without convergence the sweep stops at max_samples."""
        prom = adaptprom.PROM(resonant_fom, max_size=3)
        sweep = self.Sweep(tol=1e-14, max_samples=10)
        result = sweep.run(prom, 0.5, 6.5, 0.01)
        assert not result.converged
        assert result.num_samples == 3
        assert len(result.errors) == 1

    def test_run_exhausted(self, resonant_fom):
        """Running out of candidates stops the sweep with a warning."""
        prom = adaptprom.PROM(resonant_fom, max_size=5)
        sweep = self.Sweep(tol=1e-12, max_samples=5)
        with pytest.warns(adaptprom.errors.PROMWarning) as wn:
            result = sweep.run(prom, 1.0, 2.0, 0.5)
        messages = [w.message.args[0] for w in wn]
        assert any(m.startswith("adaptive sweep stopped: ") for m in messages)
        assert not result.converged
        assert result.samples == [1.0, 2.0, 1.5]
        assert len(result.errors) == 1
        assert result.errors[0][0] == 1.5
