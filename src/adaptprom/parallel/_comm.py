# parallel/_comm.py
"""Communicators providing a blocking global sum-reduction."""

__all__ = [
    "CommunicatorTemplate",
    "SerialCommunicator",
    "MPICommunicator",
    "as_communicator",
]

import abc
import numpy as np


class CommunicatorTemplate(abc.ABC):
    """Template for collective communication over a fixed set of workers.

    Every worker calls :meth:`allreduce_sum` with buffers of the same shape,
    in the same order; the call blocks until all workers have contributed.
    """

    @property
    @abc.abstractmethod
    def rank(self) -> int:
        """Index of this worker."""
        raise NotImplementedError  # pragma: no cover

    @property
    @abc.abstractmethod
    def size(self) -> int:
        """Number of workers."""
        raise NotImplementedError  # pragma: no cover

    @property
    def is_root(self) -> bool:
        """``True`` on the worker with rank 0."""
        return self.rank == 0

    @abc.abstractmethod
    def allreduce_sum(self, values):
        """Sum ``values`` over all workers.

        Parameters
        ----------
        values : float, complex, or ndarray
            Local contribution.

        Returns
        -------
        total : float, complex, or ndarray
            Global sum, identical on every worker. Has the same type and
            shape as ``values``.
        """
        raise NotImplementedError  # pragma: no cover

    def __str__(self):
        return f"{self.__class__.__name__} (rank {self.rank} of {self.size})"

    def __repr__(self):
        return f"<{str(self)}>"


class SerialCommunicator(CommunicatorTemplate):
    """Communicator for a single worker: reductions are the identity."""

    @property
    def rank(self) -> int:
        return 0

    @property
    def size(self) -> int:
        return 1

    def allreduce_sum(self, values):
        """Return ``values`` (a single worker owns the whole vector)."""
        return values


class MPICommunicator(CommunicatorTemplate):
    """Communicator backed by :mod:`mpi4py`.

    Parameters
    ----------
    comm : mpi4py.MPI.Comm or None
        MPI communicator. If ``None`` (default), use ``MPI.COMM_WORLD``.
    """

    def __init__(self, comm=None):
        """Store the MPI communicator."""
        from mpi4py import MPI

        self.__MPI = MPI
        self.__comm = MPI.COMM_WORLD if comm is None else comm

    @property
    def comm(self):
        """Underlying ``mpi4py`` communicator."""
        return self.__comm

    @property
    def rank(self) -> int:
        return self.__comm.Get_rank()

    @property
    def size(self) -> int:
        return self.__comm.Get_size()

    def allreduce_sum(self, values):
        """Blocking in-place ``Allreduce`` with ``MPI.SUM``.

        Scalars are sent as one-element buffers; arrays are copied to a
        contiguous buffer first so caller-owned (possibly strided) views are
        never modified.
        """
        scalar = np.ndim(values) == 0
        buffer = np.array(values, copy=True, order="C", ndmin=1)
        self.__comm.Allreduce(self.__MPI.IN_PLACE, buffer, op=self.__MPI.SUM)
        if scalar:
            return buffer[0].item()
        return buffer


def as_communicator(comm=None) -> CommunicatorTemplate:
    """Interpret ``comm`` as a communicator.

    Parameters
    ----------
    comm : CommunicatorTemplate, mpi4py.MPI.Comm, or None
        ``None`` gives a :class:`SerialCommunicator`; a raw ``mpi4py``
        communicator is wrapped in an :class:`MPICommunicator`.
    """
    if comm is None:
        return SerialCommunicator()
    if isinstance(comm, CommunicatorTemplate):
        return comm
    if hasattr(comm, "Allreduce"):
        return MPICommunicator(comm)
    raise TypeError("comm must be a CommunicatorTemplate or an MPI.Comm")
