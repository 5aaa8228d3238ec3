# eigen/__init__.py
"""Nonlinear eigenvalue solvers for reduced-order models.

.. currentmodule:: adaptprom.eigen

.. autosummary::
   :toctree: _autosummaries
   :nosignatures:

   solve_nep
   mslp
   rii
   Deflation
   NEPResult
   get_selection
   SmallestSelection
   SecondSmallestSelection
   NonzeroSmallestSelection
   ClosestSelection
"""

from ._selection import *
from ._nep import *
