# fom/__init__.py
r"""Full-order model interface.

.. currentmodule:: adaptprom.fom

The reduced-order model treats the full-order model as a collaborator that
supplies the parameter-independent operators :math:`\K, \C, \M`, the
excitation :math:`\b_1`, the parameter-dependent terms
:math:`\A_2(\omega), \b_2(\omega)`, and a linear solver.

**Classes**

.. autosummary::
    :toctree: _autosummaries

    SpaceOperatorTemplate
    SparseSpaceOperator
"""

from ._base import *
from ._sparse import *
