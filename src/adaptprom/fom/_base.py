# fom/_base.py
"""Template for the full-order (space) operator collaborator."""

__all__ = [
    "SpaceOperatorTemplate",
]

import abc

from .. import parallel


class SpaceOperatorTemplate(abc.ABC):
    r"""Template for the full-order model of a frequency-domain problem

    .. math::
       (\K + i\omega\C - \omega^2\M + \A_2(\omega))\u = i\omega\b_1
       + \b_2(\omega).

    The reduced-order model only calls the methods below; operator
    assembly, boundary conditions, and linear solvers stay with the
    implementation. Operators are returned as
    :class:`adaptprom.operators.ComplexOperator` objects acting on the
    locally owned entries of partitioned vectors.

    Parameters
    ----------
    comm : CommunicatorTemplate, mpi4py.MPI.Comm, or None
        Communicator shared by all workers. ``None`` means serial.
    """

    def __init__(self, comm=None):
        self.__comm = parallel.as_communicator(comm)

    @property
    def comm(self):
        """Communicator shared by all workers."""
        return self.__comm

    @property
    @abc.abstractmethod
    def size(self) -> int:
        """Local number of degrees of freedom."""
        raise NotImplementedError  # pragma: no cover

    # Parameter-independent terms ---------------------------------------------
    @abc.abstractmethod
    def stiffness_matrix(self):
        r"""Stiffness operator :math:`\K` (required)."""
        raise NotImplementedError  # pragma: no cover

    def damping_matrix(self):
        r"""Damping operator :math:`\C`, or ``None`` if there is none."""
        return None

    @abc.abstractmethod
    def mass_matrix(self):
        r"""Mass operator :math:`\M` (required)."""
        raise NotImplementedError  # pragma: no cover

    def excitation_vector1(self):
        r"""Excitation :math:`\b_1` multiplying :math:`i\omega`, or
        ``None``.
        """
        return None

    # Parameter-dependent terms -----------------------------------------------
    def extra_system_matrix(self, omega: float):
        r"""Parameter-dependent operator :math:`\A_2(\omega)`, or ``None``
        if it vanishes.
        """
        return None

    def excitation_vector2(self, omega: float):
        r"""Parameter-dependent excitation :math:`\b_2(\omega)`, or
        ``None`` if it vanishes.
        """
        return None

    # Solver ------------------------------------------------------------------
    @abc.abstractmethod
    def solve(self, A, b):
        r"""Solve the full-order system :math:`\A\u = \b`.

        Parameters
        ----------
        A : ComplexOperator
            Assembled full-order system operator.
        b : (n,) complex ndarray
            Local slice of the right-hand side.

        Returns
        -------
        u : (n,) complex ndarray
            Local slice of the solution.
        """
        raise NotImplementedError  # pragma: no cover

    def __str__(self):
        return f"{self.__class__.__name__} (local size {self.size:d})"

    def __repr__(self):
        return f"<{str(self)}>"
