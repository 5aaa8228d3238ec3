# parallel/__init__.py
r"""Collective communication and distributed inner products.

.. currentmodule:: adaptprom.parallel

Full-order vectors are partitioned across workers: each worker stores a
disjoint slice of every vector and of every basis vector. Reduced
quantities (inner products, projected matrices) are replicated, so every
local partial result is finished with a global sum-reduction before it is
used.

**Classes**

.. autosummary::
    :toctree: _autosummaries

    SerialCommunicator
    MPICommunicator

**Functions**

.. autosummary::
    :toctree: _autosummaries

    local_dot
    dot
    dots
    norm
"""

from ._comm import *
from ._inner import *
