# greedy/__init__.py
"""Greedy (adaptive) sampling of parametric reduced-order models.

.. currentmodule:: adaptprom.greedy

.. autosummary::
   :toctree: _autosummaries
   :nosignatures:

   AdaptiveSweep
   SweepResult
"""

from ._sweep import *
