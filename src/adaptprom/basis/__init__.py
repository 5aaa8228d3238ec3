# basis/__init__.py
r"""Orthonormal bases built incrementally from full-order solutions.

.. currentmodule:: adaptprom.basis

The reduction basis :math:`\V\in\RR^{n\times k}` and the snapshot basis
:math:`\Q\in\CC^{n\times s}` grow by one vector at a time. Each candidate is
orthogonalized against the current basis with a stabilized Gram-Schmidt
variant (MGS, CGS, or CGS2), normalized, and appended; numerically
dependent candidates are rejected.

**Classes**

.. autosummary::
    :toctree: _autosummaries

    IncrementalBasis

**Functions**

.. autosummary::
    :toctree: _autosummaries

    orthogonalize
    orthogonalize_mgs
    orthogonalize_cgs
    orthonormality_error
"""

from ._gram_schmidt import *
from ._incremental import *
