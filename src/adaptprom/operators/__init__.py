# operators/__init__.py
r"""Full-order operators and their Galerkin projections.

.. currentmodule:: adaptprom.operators

**Classes**

.. autosummary::
    :toctree: _autosummaries

    ComplexOperator
    Projector
"""

from ._complex import *
from ._projection import *
