# eigen/_selection.py
"""Policies for choosing which auxiliary eigenvalue an iteration follows."""

__all__ = [
    "SelectionTemplate",
    "SmallestSelection",
    "SecondSmallestSelection",
    "NonzeroSmallestSelection",
    "ClosestSelection",
    "get_selection",
    "SELECTIONS",
]

import abc
import numpy as np


class SelectionTemplate(abc.ABC):
    r"""Template for eigenvalue selection policies.

    In the method of successive linear problems each step solves a linear
    eigenvalue problem :math:`\T(\lambda)\x = \mu\T'(\lambda)\x` and then
    updates :math:`\lambda \leftarrow \lambda - \mu_i` for one chosen index
    :math:`i`. A selection policy picks that index. Non-finite
    :math:`\mu` (from a singular :math:`\T'`) are never selected.
    """

    def __call__(self, mu, lam) -> int:
        """Select an index.

        Parameters
        ----------
        mu : (n,) complex ndarray
            Auxiliary eigenvalues, possibly with non-finite entries.
        lam : complex
            Current eigenvalue estimate.

        Returns
        -------
        int
            Index into ``mu``, or ``-1`` if no entry is finite.
        """
        mu = np.asarray(mu)
        finite = np.flatnonzero(np.isfinite(mu))
        if finite.size == 0:
            return -1
        return int(finite[self._select(mu[finite], lam)])

    @abc.abstractmethod
    def _select(self, mu, lam) -> int:
        """Select an index among the finite values ``mu``."""
        raise NotImplementedError  # pragma: no cover

    def __str__(self):
        return self.__class__.__name__

    def __repr__(self):
        return f"<{str(self)}>"


class SmallestSelection(SelectionTemplate):
    """Follow the auxiliary eigenvalue of smallest modulus (a Newton-like
    step toward the nearest eigenvalue).
    """

    def _select(self, mu, lam):
        return int(np.argmin(np.abs(mu)))


class SecondSmallestSelection(SelectionTemplate):
    """Follow the auxiliary eigenvalue of second-smallest modulus, which
    avoids locking onto a spurious zero eigenvalue of the linearization.
    Falls back to the smallest if there is only one candidate.
    """

    def _select(self, mu, lam):
        order = np.argsort(np.abs(mu), kind="stable")
        return int(order[1] if order.size > 1 else order[0])


class NonzeroSmallestSelection(SelectionTemplate):
    """Follow the auxiliary eigenvalue of smallest modulus among those that
    are not negligible relative to the largest one.

    Parameters
    ----------
    rtol : float or None
        Values with modulus below ``rtol * max|mu|`` are ignored.
        Defaults to machine epsilon.
    """

    def __init__(self, rtol=None):
        self.rtol = np.finfo(float).eps if rtol is None else float(rtol)

    def _select(self, mu, lam):
        modulus = np.abs(mu)
        keep = modulus >= self.rtol * modulus.max()
        if not np.any(keep):
            return int(np.argmin(modulus))
        candidates = np.flatnonzero(keep)
        return int(candidates[np.argmin(modulus[candidates])])


class ClosestSelection(SelectionTemplate):
    r"""Follow the auxiliary eigenvalue whose update
    :math:`\lambda - \mu` lands closest to a target.

    Parameters
    ----------
    target : complex
        Target eigenvalue location.
    """

    def __init__(self, target):
        self.target = complex(target)

    def _select(self, mu, lam):
        return int(np.argmin(np.abs(lam - mu - self.target)))

    def __str__(self):
        return f"{self.__class__.__name__}(target={self.target})"


SELECTIONS = {
    "smallest": SmallestSelection,
    "second-smallest": SecondSmallestSelection,
    "nonzero-smallest": NonzeroSmallestSelection,
    "closest": ClosestSelection,
}


def get_selection(selection="smallest", **kwargs) -> SelectionTemplate:
    """Interpret ``selection`` as a selection policy.

    Parameters
    ----------
    selection : str or SelectionTemplate or callable
        Name of a policy (``"smallest"``, ``"second-smallest"``,
        ``"nonzero-smallest"``, ``"closest"``), or a policy object.
    kwargs : dict
        Arguments for the policy constructor, e.g., ``target`` for
        ``"closest"``.
    """
    if isinstance(selection, str):
        if selection not in SELECTIONS:
            raise ValueError(
                f"invalid selection '{selection}' "
                f"(options: {', '.join(SELECTIONS)})"
            )
        return SELECTIONS[selection](**kwargs)
    if callable(selection):
        return selection
    raise TypeError("selection must be a string or callable")
