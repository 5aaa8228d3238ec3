# roms/__init__.py
"""Parametric reduced-order models.

.. currentmodule:: adaptprom.roms

**Classes**

.. autosummary::
   :toctree: _autosummaries
   :nosignatures:

   PROM

**Functions**

.. autosummary::
   :toctree: _autosummaries
   :nosignatures:

   assemble_reduced_system
   solve_reduced_system
   expand
"""

from ._reduced import *
from ._prom import *
